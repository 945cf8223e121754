#!/usr/bin/env python3
"""
Shared SQLAlchemy base for the Task Tracker API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- to_dict() that formats timestamps and removes SA internals

Timestamps get a Python-side default (UTC) so values are available right after
commit, and a server-side default for rows inserted outside the ORM.
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

TIME_FMT = "%Y-%m-%dT%H:%M:%S.%f"

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    Sessions and commits are handled by the stores, not by the models.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if caller passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"

    def to_dict(self) -> dict:
        """
        Return a dictionary of column values suitable for logs and debugging.
        Sensitive columns listed in __private_fields__ are left out.
        """
        private = getattr(self, "__private_fields__", ())
        d = {k: v for k, v in self.__dict__.items() if k != "_sa_instance_state" and k not in private}
        if isinstance(d.get("created_at"), datetime):
            d["created_at"] = d["created_at"].strftime(TIME_FMT)
        if isinstance(d.get("updated_at"), datetime):
            d["updated_at"] = d["updated_at"].strftime(TIME_FMT)
        d["__class__"] = self.__class__.__name__
        return d
