"""Read access to user records."""

from typing import Optional

from ..models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):

    model_class = User
    id_column = "user_id"

    def get_by_email(self, email: str) -> Optional[User]:
        return self._base_query().filter(User.email == email).first()

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
