"""Session token creation and validation."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from loguru import logger

from bookshelf.config import config
from bookshelf.errors import InvalidToken

ACCESS_TOKEN_TYPE = "access"


class JWTHandler:
    """Mints and checks signed, time-limited access tokens."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or config.JWT_SECRET_KEY
        self.algorithm = algorithm or config.JWT_ALGORITHM
        self.access_token_expire_minutes = access_token_expire_minutes or config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

        if not self.secret_key:
            logger.warning("JWT_SECRET_KEY not configured - authentication will not work")

    def create_access_token(self, user_id: str) -> tuple[str, datetime]:
        """
        Create an access token bound to one user.

        Args:
            user_id: The user's unique identifier

        Returns:
            Tuple of (encoded JWT, expiration datetime)
        """
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(minutes=self.access_token_expire_minutes)
        payload = {
            "sub": user_id,
            "type": ACCESS_TOKEN_TYPE,
            "exp": expires_at,
            "iat": now,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def decode_token(self, token: str) -> dict:
        """
        Decode and validate a JWT.

        Raises:
            InvalidToken: If the token is expired, tampered, malformed or
                signed with a different key
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Token has expired")
            raise InvalidToken("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.info(f"Invalid token: {type(e).__name__}")
            raise InvalidToken()

    def validate_access_token(self, token: str) -> str:
        """
        Validate an access token and return the user id it is bound to.

        Raises:
            InvalidToken: If the token is invalid or not an access token
        """
        payload = self.decode_token(token)
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidToken("Wrong token type")
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id

    def get_token_expiry_seconds(self) -> int:
        """Get the access token lifetime in seconds."""
        return self.access_token_expire_minutes * 60
