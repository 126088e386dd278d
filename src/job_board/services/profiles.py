"""User accounts and self-service profile edits."""

from typing import Any, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from job_board.core.errors import Conflict, NotFound, Unauthorized
from job_board.core.models import (
    Principal,
    ProfileUpdatePayload,
    UserCreatePayload,
    UserRead,
    parse_payload,
)
from job_board.db.tables import User
from job_board.utils.logging import get_logger

logger = get_logger(__name__)


class ProfileService:
    """Accounts are created once; afterwards only name, phone and location change."""

    def __init__(self, session: Session):
        self.session = session
        self.logger = logger.bind(component="profile_service")

    def create_user(self, payload: Union[UserCreatePayload, Mapping[str, Any]]) -> UserRead:
        data: UserCreatePayload = parse_payload(UserCreatePayload, payload)
        user = User(
            email=data.email.lower(),
            name=data.name,
            role=data.role,
            phone=data.phone,
            location=data.location,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise Conflict("A user with this email already exists") from e

        self.logger.info("User created", user_id=user.id, role=user.role.value)
        return UserRead.model_validate(user)

    def find_by_email(self, email: str) -> Optional[UserRead]:
        user = self.session.scalar(select(User).where(User.email == email.lower()))
        return UserRead.model_validate(user) if user else None

    def _load(self, principal: Optional[Principal]) -> User:
        if principal is None:
            raise Unauthorized()
        user = self.session.get(User, principal.user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def get(self, principal: Optional[Principal]) -> UserRead:
        return UserRead.model_validate(self._load(principal))

    def update(
        self,
        principal: Optional[Principal],
        payload: Union[ProfileUpdatePayload, Mapping[str, Any]],
    ) -> UserRead:
        """Apply the fields present in ``payload``; absent fields are left alone."""
        user = self._load(principal)
        data: ProfileUpdatePayload = parse_payload(ProfileUpdatePayload, payload)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)
        for key, value in changes.items():
            setattr(user, key, value)
        self.session.commit()

        self.logger.info("Profile updated", user_id=user.id, fields=sorted(changes))
        return UserRead.model_validate(user)
