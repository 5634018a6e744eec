"""User endpoints."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint

from subtrack.api.deps import build_auth_service, json_response, require_local, timing
from subtrack.auth.middleware import require_auth
from subtrack.schemas import UserSchema

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()


@bp.get("/<uuid:user_id>")
@require_local
@require_auth
@timing
def get_user(user_id: UUID):
    """Return a user; callers may only read their own record."""

    service = build_auth_service(authenticated=True)
    user = service.get_user(user_id)
    return json_response({"data": user_schema.dump(user)})
