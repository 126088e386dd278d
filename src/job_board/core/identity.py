"""Identity provider boundary: bearer tokens in, principals out."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from sqlalchemy.orm import Session

from job_board.core.models import Principal
from job_board.db.tables import User
from job_board.utils.logging import get_logger

logger = get_logger(__name__)


class TokenIdentityProvider:
    """
    Issues and verifies signed JWT bearer tokens.

    A token carries the user id as ``sub`` and always expires. Resolving a
    token loads the user so the principal carries the stored role, never a
    role claimed by the token.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_hours: int = 24):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._key = secret_key
        self.algorithm = algorithm
        self.expiration = timedelta(hours=expiration_hours)
        self.logger = logger.bind(component="identity_provider")

    def issue_token(self, user_id: str, expires_in: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else self.expiration),
        }
        return jwt.encode(claims, self._key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[str]:
        """Return the user id carried by a valid, unexpired token, else None."""
        try:
            claims = jwt.decode(
                token,
                self._key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            self.logger.info("Expired bearer token")
            return None
        except jwt.PyJWTError as e:
            self.logger.warning("Rejected bearer token", reason=type(e).__name__)
            return None

        subject = claims.get("sub")
        return subject if isinstance(subject, str) and subject else None

    def resolve(self, session: Session, token: Optional[str]) -> Optional[Principal]:
        """Map a bearer token to a principal, or None when it is not valid."""
        if not token:
            return None

        user_id = self.verify_token(token)
        if user_id is None:
            return None

        user = session.get(User, user_id)
        if user is None:
            self.logger.warning("Token for unknown user", user_id=user_id)
            return None

        return Principal(user_id=user.id, email=user.email, role=user.role)
