"""
User persistence used by the session manager. No business rules here.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.user import User
from utils.exceptions import ConflictError


class CredentialStore:
    def __init__(self, storage):
        self._storage = storage

    def create_user(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self._storage.new(user)
        try:
            self._storage.save()
        except IntegrityError as exc:
            # lost a race against a concurrent registration for the same email
            raise ConflictError("Email already exists") from exc
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        session = self._storage.get_session()
        return session.query(User).filter(User.email == email).first()

    def find_user_by_id(self, user_id: str) -> Optional[User]:
        return self._storage.get(User, user_id)
