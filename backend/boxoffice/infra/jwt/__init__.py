"""JWT adapters."""

from .token_provider import JWTTokenProvider

__all__ = ["JWTTokenProvider"]
