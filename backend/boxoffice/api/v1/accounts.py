"""Administrative account endpoints."""

from __future__ import annotations

from flask import Blueprint

from boxoffice.api.access import install_access_guard
from boxoffice.api.deps import json_response, session_manager, timing
from boxoffice.models.account import AccountRole
from boxoffice.schemas import AccountSummarySchema
from boxoffice.services.auth.policies import roles

bp = Blueprint("accounts", __name__, url_prefix="/accounts")

install_access_guard(bp, {"get_account": roles(AccountRole.ADMIN)})

summary_schema = AccountSummarySchema()


@bp.get("/<string:account_id>")
@timing
def get_account(account_id: str):
    """Fetch any account by id (admins only)."""

    summary = session_manager().get_account(account_id)
    return json_response({"data": summary_schema.dump(summary)})
