"""Blueprint-level access guard driven by declared :class:`AccessRule` objects."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from flask import Blueprint, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from boxoffice.core.errors import Forbidden
from boxoffice.services.auth.policies import AUTHENTICATED, AccessRule, is_permitted

log = logging.getLogger(__name__)


def install_access_guard(bp: Blueprint, rules: Mapping[str, AccessRule]) -> None:
    """
    Check every request routed to ``bp`` against its endpoint's rule.

    :param bp: Blueprint to guard.
    :param rules: View function name -> rule. Views without an entry require
        an authenticated caller.

    Public views and CORS preflights skip token verification. Otherwise an invalid or missing
    access token yields 401 (via the JWT callbacks) and a role outside the
    rule yields 403.
    """

    @bp.before_request
    def _enforce_access_rule():
        if request.method == "OPTIONS":
            return None
        endpoint = (request.endpoint or "").rpartition(".")[2]
        rule = rules.get(endpoint, AUTHENTICATED)
        if rule.public:
            return None
        verify_jwt_in_request()
        role = get_jwt().get("role")
        if not is_permitted(role, rule):
            log.warning("access.denied", extra={"endpoint": request.endpoint, "reason": role})
            raise Forbidden("Insufficient role")
        return None
