from boxoffice.models.account import Account, AccountRole
from boxoffice.models.refresh_token import RefreshToken

__all__ = [
    "Account",
    "AccountRole",
    "RefreshToken",
]
