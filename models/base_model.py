#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the login token tables.

- UUID primary key (String(36)) assigned on construction, so a row has its id
  before it is ever flushed (the in-memory store relies on this)
- created_at / updated_at audit timestamps filled by the database
- to_dict() for log lines and debugging; never used for output of secrets

Notes:
- Rows in this package are written once and deleted, never updated in place,
  so updated_at normally equals created_at.
- For SQLite, func.now() maps to CURRENT_TIMESTAMP.
"""

from __future__ import annotations

from datetime import datetime
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


class BaseModel:
    """
    Base mixin for all persistent models.

    - id, created_at, updated_at
    - keyword construction that ignores a stray "__class__" key
    - to_dict() with __class__ and timestamp formatting
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Columns that must never leave the process through to_dict()
    _sensitive_fields = ()

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        created_at/updated_at are left to the database unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if caller passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        """Human-friendly representation including id and fields."""
        return f"[{self.__class__.__name__}] ({self.id}) {self.to_dict()}"

    def to_dict(self) -> dict:
        """
        Return a dictionary of the loaded fields:
        - Adds __class__
        - Formats datetime values to TIME_FMT
        - Removes SQLAlchemy internal state and the model's sensitive columns
        """
        d = {
            k: v
            for k, v in self.__dict__.items()
            if k != "_sa_instance_state" and k not in self._sensitive_fields
        }
        for key, value in d.items():
            if isinstance(value, datetime):
                d[key] = value.strftime(TIME_FMT)
        d["__class__"] = self.__class__.__name__
        return d
