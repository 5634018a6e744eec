"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from subtrack.api.deps import (
    build_auth_service,
    build_external_auth_service,
    json_body,
    json_response,
    require_external,
    require_local,
    timing,
)
from subtrack.auth.context import get_identity
from subtrack.auth.middleware import require_auth
from subtrack.auth.providers import EXTERNAL_MODE, get_provider
from subtrack.schemas import (
    AccessTokenSchema,
    ExternalSessionSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenStatusSchema,
    RegisterSchema,
    TokenExchangeSchema,
    UserSchema,
    WhoAmISchema,
)
from subtrack.services.auth.dto import LoginIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
exchange_schema = TokenExchangeSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
access_token_schema = AccessTokenSchema()
refresh_status_schema = RefreshTokenStatusSchema()
external_session_schema = ExternalSessionSchema()
whoami_schema = WhoAmISchema()


@bp.post("/register")
@require_local
@timing
def register():
    """Register a new user and return the created representation."""

    payload = register_schema.load(json_body())
    service = build_auth_service()
    user = service.register(RegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials against the configured trust mode."""

    payload = login_schema.load(json_body())
    dto = LoginIn(**payload)

    if get_provider().mode == EXTERNAL_MODE:
        session = build_external_auth_service().login(dto)
        return json_response({"data": external_session_schema.dump(session)})

    result = build_auth_service().login(dto)
    return json_response({"data": login_response_schema.dump(result)}, status=201)


@bp.post("/refresh")
@require_local
@require_auth
@timing
def refresh():
    """Mint a new access token while the caller's refresh token is active."""

    service = build_auth_service(authenticated=True)
    out = service.refresh(get_identity().user_id)
    return json_response({"data": access_token_schema.dump(out)})


@bp.post("/revoke")
@require_local
@require_auth
@timing
def revoke():
    """Revoke the caller's refresh token."""

    service = build_auth_service(authenticated=True)
    record = service.revoke(get_identity().user_id)
    return json_response({"data": refresh_status_schema.dump(record)})


@bp.post("/token")
@require_external
@timing
def exchange_token():
    """Exchange a provider refresh token for a new provider session."""

    payload = exchange_schema.load(json_body())
    session = build_external_auth_service().exchange_refresh_token(payload["refresh_token"])
    return json_response({"data": external_session_schema.dump(session)})


@bp.get("/whoami")
@require_auth
@timing
def whoami():
    """Return the identity resolved from the bearer token."""

    return json_response({"data": whoami_schema.dump(get_identity())})
