"""Identity provider collaborator.

:class:`IdentityProvider` is the narrow capability the identity gateway
depends on. :class:`LocalIdentityProvider` implements it with bcrypt password
hashes, server-side sessions and HS256 JWT bearer tokens.
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, PROVIDER_MIN_PASSWORD_LENGTH, SECRET_KEY
from ..database import SessionLocal, get_session
from ..models import Account, AuthSession

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
SESSION_EXPIRED = "session_expired"


class IdentityProviderError(Exception):
    """Provider-specific failure identified by an ``auth/...`` code."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        super().__init__(message or code)


@dataclass(frozen=True)
class Identity:
    account_id: str
    email: str
    session_id: Optional[str] = None


@dataclass(frozen=True)
class Credential:
    identity: Identity
    access_token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthStateChange:
    event: str
    user_id: Optional[str]


AuthStateListener = Callable[[AuthStateChange], None]


class IdentityProvider(ABC):
    @abstractmethod
    def create_account(self, email: str, password: str) -> str:
        """Create an account and return its identifier."""

    @abstractmethod
    def authenticate(self, email: str, password: str) -> Credential:
        """Start a session for valid credentials."""

    @abstractmethod
    def sign_out(self, token: Optional[str]) -> None:
        """End the session the token belongs to."""

    @abstractmethod
    def current_identity(self, token: Optional[str]) -> Optional[Identity]:
        """Resolve a bearer token to a live identity."""

    @abstractmethod
    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    password_bytes = password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


class LocalIdentityProvider(IdentityProvider):
    def __init__(
        self,
        session_factory=None,
        secret_key: str = SECRET_KEY,
        token_ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        min_password_length: int = PROVIDER_MIN_PASSWORD_LENGTH,
    ):
        self.session_factory = session_factory or SessionLocal
        self.secret_key = secret_key
        self.token_ttl = token_ttl
        self.min_password_length = min_password_length
        self._listeners: List[AuthStateListener] = []
        self._listeners_lock = threading.Lock()

    # -- subscriptions -------------------------------------------------

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, user_id: Optional[str]) -> None:
        change = AuthStateChange(event=event, user_id=user_id)
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("Auth state listener failed on %s", event)

    # -- tokens --------------------------------------------------------

    def _create_access_token(self, account_id: str, session_id: str, expire: datetime) -> str:
        to_encode = {"sub": account_id, "sid": session_id, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=ALGORITHM)

    def _decode_token(self, token: str) -> Optional[dict]:
        # Expiry is tracked on the session row so it can be reported once.
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError:
            return None
        if not payload.get("sub") or not payload.get("sid"):
            return None
        return payload

    # -- operations ----------------------------------------------------

    def create_account(self, email: str, password: str) -> str:
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise IdentityProviderError("auth/invalid-email")
        if len(password) < self.min_password_length:
            raise IdentityProviderError("auth/weak-password")

        try:
            with get_session(self.session_factory) as session:
                if session.query(Account).filter(Account.email == email).first():
                    raise IdentityProviderError("auth/email-already-in-use")
                account = Account(email=email, hashed_password=get_password_hash(password))
                session.add(account)
                session.commit()
                session.refresh(account)
                return account.id
        except IntegrityError as exc:
            raise IdentityProviderError("auth/email-already-in-use") from exc
        except SQLAlchemyError as exc:
            raise IdentityProviderError("auth/network-request-failed", str(exc)) from exc

    def authenticate(self, email: str, password: str) -> Credential:
        if "@" not in email:
            raise IdentityProviderError("auth/invalid-email")

        try:
            with get_session(self.session_factory) as session:
                account = session.query(Account).filter(Account.email == email).first()
                if account is None:
                    raise IdentityProviderError("auth/user-not-found")
                if not verify_password(password, account.hashed_password):
                    raise IdentityProviderError("auth/wrong-password")

                expire = datetime.utcnow() + self.token_ttl
                auth_session = AuthSession(account_id=account.id, expires_at=expire)
                session.add(auth_session)
                session.commit()
                session.refresh(auth_session)
                identity = Identity(account.id, account.email, auth_session.id)
        except SQLAlchemyError as exc:
            raise IdentityProviderError("auth/network-request-failed", str(exc)) from exc

        token = self._create_access_token(identity.account_id, identity.session_id, expire)
        self._emit(SIGNED_IN, identity.account_id)
        return Credential(identity=identity, access_token=token, expires_at=expire)

    def sign_out(self, token: Optional[str]) -> None:
        payload = self._decode_token(token) if token else None
        if payload is None:
            return

        try:
            with get_session(self.session_factory) as session:
                auth_session = session.get(AuthSession, payload["sid"])
                if auth_session is None or auth_session.revoked_at is not None:
                    return
                auth_session.revoked_at = datetime.utcnow()
                session.commit()
        except SQLAlchemyError as exc:
            raise IdentityProviderError("auth/network-request-failed", str(exc)) from exc

        self._emit(SIGNED_OUT, payload["sub"])

    def current_identity(self, token: Optional[str]) -> Optional[Identity]:
        payload = self._decode_token(token) if token else None
        if payload is None:
            return None

        expired = False
        try:
            with get_session(self.session_factory) as session:
                auth_session = session.get(AuthSession, payload["sid"])
                if (
                    auth_session is None
                    or auth_session.revoked_at is not None
                    or auth_session.account_id != payload["sub"]
                ):
                    return None

                if auth_session.expires_at <= datetime.utcnow():
                    auth_session.revoked_at = datetime.utcnow()
                    session.commit()
                    expired = True
                    identity = None
                else:
                    account = session.get(Account, auth_session.account_id)
                    if account is None:
                        return None
                    identity = Identity(account.id, account.email, auth_session.id)
        except SQLAlchemyError as exc:
            raise IdentityProviderError("auth/network-request-failed", str(exc)) from exc

        if expired:
            self._emit(SESSION_EXPIRED, payload["sub"])
        return identity
