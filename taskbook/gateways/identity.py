import logging
from datetime import datetime
from typing import Callable, Optional

from ..errors import (
    AlreadyExists,
    InvalidCredentials,
    PartialFailure,
    TaskbookError,
    Unauthenticated,
    UpstreamUnavailable,
    ValidationError,
    WeakCredential,
)
from ..providers.documents import DocumentStore, DocumentStoreError
from ..providers.identity import AuthStateListener, IdentityProvider, IdentityProviderError
from ..schemas.user import LoginResult, Principal, UserRecord
from ..validation import normalize_email, require_fields, validate_password

logger = logging.getLogger(__name__)

PROFILES = "users"

_REGISTER_ERRORS = {
    "auth/email-already-in-use": AlreadyExists,
    "auth/weak-password": WeakCredential,
    "auth/invalid-email": lambda: ValidationError("Invalid email address."),
}

_LOGIN_FAILURE_CODES = {
    "auth/user-not-found",
    "auth/wrong-password",
    "auth/invalid-credential",
    "auth/invalid-email",
}


def _map_register_error(exc: IdentityProviderError) -> TaskbookError:
    factory = _REGISTER_ERRORS.get(exc.code)
    if factory is None:
        logger.error("Identity provider failed during registration: %s", exc.code)
        return UpstreamUnavailable("Registration failed. Please try again.")
    return factory()


class IdentityGateway:
    """Registration, login, logout and session lookup over an identity provider."""

    def __init__(self, provider: IdentityProvider, store: DocumentStore):
        self.provider = provider
        self.store = store

    def register(self, name: str, email: str, password: str) -> UserRecord:
        require_fields(name=name, email=email, password=password)
        validate_password(password)
        email = normalize_email(email)
        name = name.strip()

        try:
            user_id = self.provider.create_account(email, password)
        except IdentityProviderError as exc:
            raise _map_register_error(exc) from exc

        try:
            self._write_profile(user_id, name, email)
        except DocumentStoreError as exc:
            logger.error("Account %s created but profile write failed: %s", user_id, exc.code)
            raise PartialFailure(
                "Account created but the profile could not be saved. "
                "Sign in and save your profile again.",
                user_id=user_id,
            ) from exc

        logger.info("Registered user %s", user_id)
        return UserRecord(user_id=user_id, name=name, email=email)

    def login(self, email: str, password: str) -> LoginResult:
        require_fields(email=email, password=password)

        try:
            credential = self.provider.authenticate(normalize_email(email), password)
        except IdentityProviderError as exc:
            if exc.code in _LOGIN_FAILURE_CODES:
                logger.info("Login rejected (%s)", exc.code)
                raise InvalidCredentials() from exc
            logger.error("Identity provider failed during login: %s", exc.code)
            raise UpstreamUnavailable("Login failed. Please try again.") from exc

        identity = credential.identity
        try:
            profile = self.store.get(PROFILES, identity.account_id)
        except DocumentStoreError as exc:
            logger.error("Profile lookup for %s failed: %s", identity.account_id, exc.code)
            raise UpstreamUnavailable("Login failed. Please try again.") from exc

        name = profile.get("name", "") if profile else ""
        return LoginResult(
            access_token=credential.access_token,
            user=UserRecord(user_id=identity.account_id, name=name or "", email=identity.email),
        )

    def logout(self, token: Optional[str]) -> None:
        """Sign out; provider failures are logged, never raised."""
        try:
            self.provider.sign_out(token)
        except Exception:
            logger.warning("Sign out failed; treating session as ended", exc_info=True)

    def current_user(self, token: Optional[str]) -> Optional[Principal]:
        try:
            identity = self.provider.current_identity(token)
        except IdentityProviderError as exc:
            logger.error("Session lookup failed: %s", exc.code)
            raise UpstreamUnavailable() from exc

        if identity is None:
            return None
        return Principal(user_id=identity.account_id, email=identity.email, session_id=identity.session_id)

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """Call ``listener`` on every sign-in, sign-out and session expiry."""
        return self.provider.on_auth_state_changed(listener)

    def save_profile(self, principal: Optional[Principal], name: str) -> UserRecord:
        if principal is None:
            raise Unauthenticated()
        require_fields(name=name)
        name = name.strip()

        try:
            existing = self.store.get(PROFILES, principal.user_id)
            created_at = existing["created_at"] if existing else None
            self._write_profile(principal.user_id, name, principal.email, created_at)
        except DocumentStoreError as exc:
            logger.error("Profile write for %s failed: %s", principal.user_id, exc.code)
            raise UpstreamUnavailable("Failed to save profile. Please try again.") from exc
        return UserRecord(user_id=principal.user_id, name=name, email=principal.email)

    def _write_profile(
        self, user_id: str, name: str, email: str, created_at: Optional[datetime] = None
    ) -> None:
        self.store.set(
            PROFILES,
            user_id,
            {"name": name, "email": email, "created_at": created_at or datetime.utcnow()},
        )
