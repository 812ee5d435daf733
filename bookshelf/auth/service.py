"""Authentication service - business logic for auth operations."""

from typing import List, Optional

from loguru import logger

from bookshelf.books.validation import validate_email, validate_required
from bookshelf.errors import (
    DuplicateEmail,
    DuplicateUsername,
    FieldError,
    InvalidCredentials,
    UserNotFound,
    ValidationError,
)
from bookshelf.storage import CredentialStore, UserRecord

from .jwt_handler import JWTHandler
from .password import hash_password, verify_password
from .schemas import PASSWORD_MIN_LENGTH, AuthResult, Session, UserResponse


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Registers users, checks logins, and mints/verifies session tokens."""

    def __init__(self, store: CredentialStore, jwt_handler: Optional[JWTHandler] = None):
        """
        Initialize the auth service.

        Args:
            store: CredentialStore holding the users
            jwt_handler: JWTHandler instance (optional, creates default if not provided)
        """
        self.store = store
        self.jwt = jwt_handler or JWTHandler()

    def _issue_session(self, user: UserRecord) -> Session:
        token, expires_at = self.jwt.create_access_token(user.id)
        return Session(
            access_token=token,
            expires_in=self.jwt.get_token_expiry_seconds(),
            expires_at=expires_at,
            user=UserResponse.model_validate(user),
        )

    @staticmethod
    def _check_registration(username: str, email: str, password: str) -> None:
        errors: List[FieldError] = []
        if not validate_required(username):
            errors.append(FieldError("username", "Username is required"))
        if not validate_required(email):
            errors.append(FieldError("email", "Email is required"))
        elif not validate_email(email.strip()):
            errors.append(FieldError("email", "Email is not a valid address"))
        if not password:
            errors.append(FieldError("password", "Password is required"))
        elif len(password) < PASSWORD_MIN_LENGTH:
            errors.append(
                FieldError("password", f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
            )
        if errors:
            raise ValidationError(errors)

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        """
        Register a new user and sign them in.

        Returns:
            AuthResult with the public user view and a fresh session

        Raises:
            ValidationError: If any input is missing or the password is too short
            DuplicateEmail: If the email is taken (case-insensitive)
            DuplicateUsername: If the username is taken
        """
        self._check_registration(username, email, password)
        username = username.strip()
        email = normalize_email(email)

        if await self.store.get_user_by_email(email):
            raise DuplicateEmail()
        if await self.store.get_user_by_username(username):
            raise DuplicateUsername()

        user = await self.store.create_user(username, email, hash_password(password))
        logger.info(f"User registered: user_id={user.id}")

        session = self._issue_session(user)
        return AuthResult(user=session.user, session=session)

    async def login(self, email: str, password: str) -> Session:
        """
        Authenticate a user with email and password.

        Raises:
            InvalidCredentials: Same error whether the email is unknown or the
                password is wrong
        """
        user = await self.store.get_user_by_email(normalize_email(email or ""))

        if not user or not verify_password(password or "", user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentials()

        logger.info(f"User logged in: user_id={user.id}")
        return self._issue_session(user)

    async def verify(self, token: str) -> str:
        """
        Resolve a session token to the id of an existing user.

        Raises:
            InvalidToken: If the token is malformed, expired or foreign
            UserNotFound: If the token's user no longer exists
        """
        user_id = self.jwt.validate_access_token(token)
        if not await self.store.get_user_by_id(user_id):
            logger.info(f"Token subject no longer exists: user_id={user_id}")
            raise UserNotFound()
        return user_id

    async def get_current_user(self, user_id: str) -> UserResponse:
        """
        Get a user's public profile.

        Raises:
            UserNotFound: If the user does not exist
        """
        user = await self.store.get_user_by_id(user_id)
        if not user:
            raise UserNotFound()
        return UserResponse.model_validate(user)
