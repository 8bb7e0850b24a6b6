# authsvc/services/auth/service.py
from __future__ import annotations

import logging

from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authsvc.models.user import EMAIL_UNIQUE_CONSTRAINT, User
from authsvc.repositories.user import UserRepository
from authsvc.services._shared.base import BaseService, Clock, ServiceContext
from authsvc.services._shared.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    OperationFailedError,
    RegistrationFailedError,
    UserInactiveError,
    violates,
)
from authsvc.services._shared.ports import (
    AccessClaims,
    DeviceInfo,
    PasswordHasher,
    RefreshTokenStore,
    TokenSigner,
    generate_refresh_secret,
    hash_refresh_token,
)
from authsvc.services.auth.dto import (
    AuthTokenConfig,
    LogoutAllOut,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    SignInIn,
    SignUpIn,
    SignUpOut,
    TokenPairOut,
)

log = logging.getLogger(__name__)

SIGN_UP_MESSAGE = "User created successfully"
LOGOUT_MESSAGE = "Logged out successfully"
SIGN_IN_FAILED_MESSAGE = "Sign-in failed"
REFRESH_FAILED_MESSAGE = "Token refresh failed"
LOGOUT_FAILED_MESSAGE = "Logout failed"
LOGOUT_ALL_FAILED_MESSAGE = "Logout from all devices failed"

# Hashed once per service to equalize sign-in timing for unknown emails
DUMMY_PASSWORD = "authsvc-timing-equalizer"

# SQLite reports the column instead of the constraint name
_EMAIL_UNIQUE_MARKERS = (EMAIL_UNIQUE_CONSTRAINT, "users.email")


class CredentialService(BaseService):
    """
    Credential lifecycle service (sign-up / sign-in / refresh / logout).

    Passwords go through a pluggable :class:`PasswordHasher`, access tokens
    through a :class:`TokenSigner`, and refresh tokens through a
    :class:`RefreshTokenStore` that only ever sees SHA-256 hashes.

    Refresh tokens rotate on every use: the presented token is consumed by a
    single atomic store operation before a successor is issued, so a secret
    can be redeemed at most once.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher,
        token_signer: TokenSigner,
        refresh_store: RefreshTokenStore,
        token_cfg: AuthTokenConfig,
        ctx: ServiceContext | None = None,
        clock: Clock | None = None,
        dummy_hash: str | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param password_hasher: One-way hasher for stored credentials.
        :param token_signer: Adapter creating/verifying access tokens.
        :param refresh_store: Persistent store of refresh-token hashes.
        :param token_cfg: Access/refresh lifetimes.
        :param ctx: Request-scoped context (request id, actor).
        :param clock: Callable returning the current UTC time.
        :param dummy_hash: Precomputed hash compared against when the email is
            unknown; computed lazily when omitted.
        """
        super().__init__(ctx=ctx, clock=clock)
        self.hasher = password_hasher
        self.signer = token_signer
        self.refresh_store = refresh_store
        self.cfg = token_cfg
        self._dummy_hash = dummy_hash

    # ------------------------------------------------------------------ #
    # Sign-up
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn) -> SignUpOut:
        """
        Register a new active user. No tokens are issued.

        :param dto: Registration input.
        :returns: Confirmation message and the new user id.
        :raises DuplicateEmailError: If the email is already registered.
        :raises InvalidInputError: If the email, name or password is rejected.
        :raises RegistrationFailedError: On any other persistence failure.
        """
        try:
            password_hash = self.hasher.hash(dto.password)
            user = User(email=dto.email, name=dto.name, password_hash=password_hash)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_email(user.email):
                    raise DuplicateEmailError()
                repo.add(user)
                user_id = user.id
        except IntegrityError as exc:
            if violates(exc, *_EMAIL_UNIQUE_MARKERS):
                raise DuplicateEmailError() from exc
            log.error("sign_up failed", extra=self.log_extra(operation="sign_up"), exc_info=True)
            raise RegistrationFailedError() from exc
        except SQLAlchemyError as exc:
            log.error("sign_up failed", extra=self.log_extra(operation="sign_up"), exc_info=True)
            raise RegistrationFailedError() from exc

        log.info("user registered", extra=self.log_extra(operation="sign_up", user_id=user_id))
        return SignUpOut(message=SIGN_UP_MESSAGE, user_id=str(user_id))

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn, device: DeviceInfo | None = None) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email, inactive account and wrong password all raise the same
        :class:`InvalidCredentialsError`.

        :param dto: Sign-in input.
        :param device: Client metadata recorded on the refresh token.
        :returns: Access token and the plaintext refresh secret.
        :raises OperationFailedError: If the database or the token store fails.
        """
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_by_email(dto.email)
                if user is None:
                    self.hasher.compare(dto.password, self.dummy_hash())
                    raise InvalidCredentialsError()
                if not self.hasher.compare(dto.password, user.password_hash) or not user.is_active:
                    raise InvalidCredentialsError()

                repo.touch_last_login(user.id, self.now())
                user_id = user.id
                claims = self._claims_for(user)

            pair = self._generate_tokens(user_id, claims, device)
        except (SQLAlchemyError, RedisError) as exc:
            log.error("sign_in failed", extra=self.log_extra(operation="sign_in"), exc_info=True)
            raise OperationFailedError(SIGN_IN_FAILED_MESSAGE) from exc

        log.info("user signed in", extra=self.log_extra(operation="sign_in", user_id=user_id))
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn, device: DeviceInfo | None = None) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The presented token is revoked before any successor exists. If a
        later step fails the caller has no usable refresh token left and must
        sign in again.

        :raises InvalidRefreshTokenError: If the secret is empty, unknown,
            expired, revoked, or was consumed concurrently.
        :raises UserInactiveError: If the owning user is gone or inactive.
        :raises OperationFailedError: If the database or the token store fails.
        """
        if not dto.refresh_token:
            raise InvalidRefreshTokenError()

        try:
            consumed = self.refresh_store.consume(
                hash_refresh_token(dto.refresh_token), now=self.now()
            )
            if consumed is None:
                log.warning("refresh rejected", extra=self.log_extra(operation="refresh"))
                raise InvalidRefreshTokenError()

            with self.ro_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get(consumed.user_id)
                if user is None or not user.is_active:
                    raise UserInactiveError()
                user_id = user.id
                claims = self._claims_for(user)

            pair = self._generate_tokens(user_id, claims, device)
        except (SQLAlchemyError, RedisError) as exc:
            log.error("refresh failed", extra=self.log_extra(operation="refresh"), exc_info=True)
            raise OperationFailedError(REFRESH_FAILED_MESSAGE) from exc

        log.info("refresh token rotated", extra=self.log_extra(operation="refresh", user_id=user_id))
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> LogoutOut:
        """
        Revoke the presented refresh token.

        Unknown, already revoked or empty secrets count as logged out.

        :raises OperationFailedError: If the store fails.
        """
        if dto.refresh_token:
            try:
                revoked = self.refresh_store.revoke_by_hash(hash_refresh_token(dto.refresh_token))
            except (SQLAlchemyError, RedisError) as exc:
                log.error("logout failed", extra=self.log_extra(operation="logout"), exc_info=True)
                raise OperationFailedError(LOGOUT_FAILED_MESSAGE) from exc
            log.info("logout", extra=self.log_extra(operation="logout", count=int(revoked)))
        return LogoutOut(message=LOGOUT_MESSAGE, clear_cookie=True)

    def logout_all(self, user_id: int | str) -> LogoutAllOut:
        """
        Revoke every active refresh token of ``user_id``.

        :param user_id: Authenticated user id (``sub`` claim).
        :returns: Confirmation message and the number of revoked tokens.
        :raises OperationFailedError: If the store fails.
        """
        uid = self._coerce_user_id(user_id)
        try:
            count = self.refresh_store.revoke_all_for_user(uid)
        except (SQLAlchemyError, RedisError) as exc:
            log.error(
                "logout_all failed",
                extra=self.log_extra(operation="logout_all", user_id=uid),
                exc_info=True,
            )
            raise OperationFailedError(LOGOUT_ALL_FAILED_MESSAGE) from exc

        log.info(
            "logged out from all devices",
            extra=self.log_extra(operation="logout_all", user_id=uid, count=count),
        )
        return LogoutAllOut(message=f"Logged out from {count} devices", revoked_count=count)

    # ------------------------------------------------------------------ #
    # Token generation
    # ------------------------------------------------------------------ #

    def _generate_tokens(
        self, user_id: int, claims: AccessClaims, device: DeviceInfo | None
    ) -> TokenPairOut:
        """
        Sign an access token and persist a new refresh-token hash.

        :returns: Pair carrying the plaintext refresh secret (shown once).
        """
        access = self.signer.sign(claims, self.cfg.access_expires)
        secret = generate_refresh_secret()
        self.refresh_store.issue(
            user_id=user_id,
            token_hash=hash_refresh_token(secret),
            expires_at=self.now() + self.cfg.refresh_expires,
            device=device or DeviceInfo(),
        )
        return TokenPairOut(
            access_token=access,
            refresh_token=secret,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(DUMMY_PASSWORD)
        return self._dummy_hash

    @staticmethod
    def _claims_for(user: User) -> AccessClaims:
        return AccessClaims(subject=str(user.id), email=user.email, name=user.name)

    @staticmethod
    def _coerce_user_id(subject: int | str) -> int:
        """Ensure the token subject can be treated as an integer user id."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise InvalidTokenError()
