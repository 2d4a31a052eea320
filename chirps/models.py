"""
chirps/models.py -- Domain dataclass for chirps.

Pure data container. Length limits and the profanity filter live in
chirps/filter.py; persistence lives in chirps/store.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class Chirp:
    """A short public message owned by one user.

    id is None before the record is written to the database.
    """

    body: str
    user_id: UUID
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
