from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, List, Optional
import inspect
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from socialdata.config import settings
from socialdata.db.collections import ACCOUNTS
from socialdata.db.query import Query
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.exceptions import ProviderAuthError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
email_adapter = TypeAdapter(EmailStr)

MIN_PASSWORD_LENGTH = 6

class AuthUser(BaseModel):
    """Identity as reported by the provider"""
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None

IdentityListener = Callable[[Optional[AuthUser]], Any]


class IdentityProvider(ABC):
    """Contract for the external identity provider"""

    def __init__(self):
        self._listeners: List[IdentityListener] = []
        self._current_user: Optional[AuthUser] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    @abstractmethod
    async def create_account(self, email: str, password: str) -> AuthUser:
        """Register an account and sign it in"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password"""

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign the current user out"""

    @abstractmethod
    async def update_display_name(self, name: str) -> AuthUser:
        """Change the current user's display name"""

    def add_identity_listener(self, listener: IdentityListener) -> Callable[[], None]:
        """Register for identity changes; returns an idempotent unsubscribe"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_current_user(self, user: Optional[AuthUser]):
        self._current_user = user
        for listener in list(self._listeners):
            result = listener(user)
            if inspect.isawaitable(result):
                await result


class LocalIdentityProvider(IdentityProvider):
    """Identity provider keeping accounts in the document store"""

    def __init__(self, store: DocumentStore):
        super().__init__()
        self.store = store

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return pwd_context.hash(password)

    def create_id_token(self, uid: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed ID token"""
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.ID_TOKEN_EXPIRE_MINUTES)
        )
        to_encode = {"sub": uid, "email": email, "exp": expire, "type": "id"}
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.ALGORITHM)

    def verify_id_token(self, token: str) -> Optional[str]:
        """Verify an ID token, returning the uid it was issued to"""
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None

        if payload.get("type") != "id":
            return None

        return payload.get("sub")

    async def create_account(self, email: str, password: str) -> AuthUser:
        """Register an account and sign it in"""
        try:
            email = email_adapter.validate_python(email).lower()
        except PydanticValidationError:
            raise ProviderAuthError("The email address is badly formatted.", "auth/invalid-email")

        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ProviderAuthError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters", "auth/weak-password"
            )

        if await self._find_account(email) is not None:
            raise ProviderAuthError(
                "The email address is already in use by another account.", "auth/email-already-in-use"
            )

        uid = await self.store.add(ACCOUNTS, {
            "email": email,
            "passwordHash": self.get_password_hash(password),
            "createdAt": SERVER_TIMESTAMP,
        })

        logger.info(f"Created account {uid}")

        user = AuthUser(uid=uid, email=email, id_token=self.create_id_token(uid, email))
        await self._set_current_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password"""
        account = await self._find_account((email or "").lower())

        if account is None or not self.verify_password(password, account.get("passwordHash", "")):
            raise ProviderAuthError("Invalid email or password.", "auth/invalid-credential")

        user = AuthUser(
            uid=account.id,
            email=account.get("email"),
            display_name=account.get("displayName"),
            id_token=self.create_id_token(account.id, account.get("email")),
        )

        logger.info(f"Signed in account {account.id}")

        await self._set_current_user(user)
        return user

    async def sign_out(self) -> None:
        """Sign the current user out"""
        if self._current_user is not None:
            logger.info(f"Signed out account {self._current_user.uid}")
        await self._set_current_user(None)

    async def update_display_name(self, name: str) -> AuthUser:
        """Change the current user's display name"""
        if self._current_user is None:
            raise ProviderAuthError("No user is currently signed in.", "auth/no-current-user")

        await self.store.update(ACCOUNTS, self._current_user.uid, {"displayName": name})

        user = self._current_user.model_copy(update={"display_name": name})
        await self._set_current_user(user)
        return user

    async def _find_account(self, email: str):
        snapshots = await self.store.find(Query(ACCOUNTS).where("email", email).limit(1))
        return snapshots[0] if snapshots else None


class AuthSession:
    """Current-user state for one running client.

    Created at application start, kept current from the provider's identity
    events, and closed at exit. Data-access calls receive ``user_id`` and
    ``display_name`` from here as plain arguments.
    """

    def __init__(self, provider: IdentityProvider):
        self.provider = provider
        self.user: Optional[AuthUser] = None
        self.loading = True
        self.error: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.uid if self.user else None

    @property
    def display_name(self) -> str:
        return (self.user.display_name if self.user else None) or "Anonymous"

    async def start(self):
        """Begin tracking the provider's identity changes"""
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.add_identity_listener(self._on_identity_changed)
        self.user = self.provider.current_user
        self.loading = False

    async def close(self):
        """Stop tracking identity changes"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.user = None

    async def __aenter__(self) -> "AuthSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _on_identity_changed(self, user: Optional[AuthUser]):
        self.user = user
        self.loading = False

    async def login(self, email: str, password: str) -> None:
        await self._run(lambda: self.provider.sign_in(email, password))

    async def signup(self, email: str, password: str, display_name: str) -> None:
        async def create_and_name():
            await self.provider.create_account(email, password)
            await self.provider.update_display_name(display_name)

        await self._run(create_and_name)

    async def logout(self) -> None:
        await self._run(self.provider.sign_out)

    async def update_user_name(self, new_name: str) -> None:
        async def rename():
            if self.user is not None:
                await self.provider.update_display_name(new_name)

        await self._run(rename)

    async def _run(self, operation: Callable[[], Awaitable[Any]]):
        self.error = None
        self.loading = True
        try:
            return await operation()
        except Exception as e:
            self.error = str(e)
            logger.error(f"Auth operation failed: {e}")
            raise
        finally:
            self.loading = False
