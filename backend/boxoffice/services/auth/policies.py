"""Role-based access rules for API endpoints."""

from __future__ import annotations

from dataclasses import dataclass

from boxoffice.models.account import AccountRole


@dataclass(frozen=True, slots=True)
class AccessRule:
    """
    Access requirement of one endpoint.

    :param public: No token needed at all.
    :param roles: Allowed roles; ``None`` means any authenticated account.
    """

    public: bool = False
    roles: frozenset[AccountRole] | None = None


PUBLIC = AccessRule(public=True)
AUTHENTICATED = AccessRule()


def roles(*allowed: AccountRole) -> AccessRule:
    """Build a rule restricted to ``allowed`` roles."""
    if not allowed:
        raise ValueError("roles() needs at least one role; use AUTHENTICATED instead.")
    return AccessRule(roles=frozenset(allowed))


def is_permitted(role_claim: str | None, rule: AccessRule) -> bool:
    """
    Decide whether a verified ``role`` claim satisfies ``rule``.

    Unknown or missing role claims never match a role-restricted rule.
    """
    if rule.public or rule.roles is None:
        return True
    if role_claim is None:
        return False
    try:
        role = AccountRole(role_claim)
    except ValueError:
        return False
    return role in rule.roles
