from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class PersistedState(SQLModel, table=True):
    __tablename__ = "persisted_state"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(index=True)
    key: str = Field(index=True)
    version: int = Field(default=1)

    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    saved_at: datetime = Field(default_factory=datetime.utcnow)
