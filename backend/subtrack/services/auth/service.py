# subtrack/services/auth/service.py
from __future__ import annotations

import logging
from uuid import UUID

from subtrack.auth.password import PasswordVerifier
from subtrack.auth.tokens import TokenIssuer
from subtrack.services._shared.base import BaseService, ServiceContext
from subtrack.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from subtrack.services._shared.ports.auth_store import AuthStore, RefreshTokenRecord, UserRecord
from subtrack.services.auth.dto import (
    AccessTokenOut,
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    RegisterIn,
)
from subtrack.services.auth.refresh_tokens import RefreshTokenStore

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Local authentication lifecycle: register, login, refresh, revoke.

    Access tokens are short-lived HS256 JWTs minted by :class:`TokenIssuer`;
    refresh state is one opaque record per user kept by
    :class:`RefreshTokenStore`. A refresh call never rotates that record.
    """

    def __init__(
        self,
        *,
        store: AuthStore,
        verifier: PasswordVerifier,
        issuer: TokenIssuer,
        token_cfg: AuthTokenConfig | None = None,
        refresh_tokens: RefreshTokenStore | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param store: Persistence capability for users and refresh tokens.
        :param verifier: Password hashing and entropy policy.
        :param issuer: Access-token signer.
        :param token_cfg: Lifetimes and login rotation policy.
        :param refresh_tokens: Refresh lifecycle (defaults to one over ``store``).
        :param ctx: Request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.store = store
        self.verifier = verifier
        self.issuer = issuer
        self.cfg = token_cfg or AuthTokenConfig()
        self.refresh_tokens = refresh_tokens or RefreshTokenStore(store)

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserRecord:
        """
        Create a user after the uniqueness check and the entropy gate.

        :raises ConflictError: If the email is already registered.
        :raises WeakPasswordError: If the password is below the entropy threshold.
        :raises InputTooLongError: If the password exceeds the bcrypt input bound.
        """
        email = dto.email.strip().lower()
        if self.store.get_user_by_email(email) is not None:
            raise ConflictError("User", "email already registered")

        self.verifier.check_strength(dto.password)
        password_hash = self.verifier.create_hash(dto.password)
        user = self.store.create_user(email=email, password_hash=password_hash)
        log.info("auth.registered user_id=%s", user.id)
        return user

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials, mint an access token and attach the refresh token.

        A user without a refresh record gets a new one. An existing record is
        returned as-is, even when revoked or expired, unless
        ``rotate_inactive_on_login`` is enabled.

        :raises AuthenticationError: Unknown email or wrong password.
        """
        user = self.store.get_user_by_email(dto.email)
        if user is None or not self.verifier.is_valid(dto.password, user.password_hash):
            log.warning("auth.login_failed")
            raise AuthenticationError()

        access = self.issuer.mint(user.id, self.cfg.access_expires)
        refresh = self._refresh_for_login(user.id)
        log.info("auth.login user_id=%s", user.id)
        return LoginOut(user=user, access_token=access, refresh=refresh)

    def _refresh_for_login(self, user_id: UUID) -> RefreshTokenRecord:
        current = self.store.get_refresh_token(user_id)
        if current is None:
            return self.refresh_tokens.create_for_user(user_id, self.cfg.refresh_expires)
        if self.cfg.rotate_inactive_on_login and not current.usable(self.refresh_tokens.now()):
            return self.refresh_tokens.rotate(user_id, self.cfg.refresh_expires)
        return current

    # ------------------------------------------------------------------ #
    # Refresh / revoke
    # ------------------------------------------------------------------ #

    def refresh(self, user_id: UUID) -> AccessTokenOut:
        """
        Mint a new access token for the subject of a validated access token.

        :raises ForbiddenError: No refresh record, or it is revoked or expired.
        """
        record = self.store.get_refresh_token(user_id)
        if record is None or not RefreshTokenStore.is_usable(record, self.refresh_tokens.now()):
            log.warning("auth.refresh_denied user_id=%s", user_id)
            raise ForbiddenError("Refresh token is no longer valid. Please sign in.")
        return AccessTokenOut(access_token=self.issuer.mint(user_id, self.cfg.access_expires))

    def revoke(self, user_id: UUID) -> RefreshTokenRecord:
        """
        Revoke the caller's refresh token.

        :raises NotFoundError: If the caller has never logged in.
        """
        return self.refresh_tokens.revoke(user_id)

    # ------------------------------------------------------------------ #
    # Users
    # ------------------------------------------------------------------ #

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return ``user_id`` if the current actor owns it."""
        self.ensure_owner(self.ctx.actor_id, user_id)
        user = self.store.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        return user
