from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from extensions import db

# SQLite only autoincrements INTEGER primary keys
BIGINT_ID = db.BigInteger().with_variant(db.Integer(), "sqlite")


class LifestyleType(str, enum.Enum):
    """Closed set of trackable lifestyle activities."""

    STEPS = "STEPS"
    WATER = "WATER"  # milliliters
    SLEEP = "SLEEP"  # minutes
    JOGGING = "JOGGING"  # minutes
    RUNNING = "RUNNING"  # minutes
    MEDITATION = "MEDITATION"  # minutes

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]


class LifestyleEntry(db.Model):
    __tablename__ = "lifestyle_entries"

    id: Mapped[int] = mapped_column(BIGINT_ID, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BIGINT_ID, nullable=False, index=True)
    type: Mapped[str] = mapped_column(db.String(50), nullable=False)
    value: Mapped[float] = mapped_column(db.Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(db.DateTime, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"<LifestyleEntry {self.id} user={self.user_id} {self.type}={self.value}>"


__all__ = ["LifestyleType", "LifestyleEntry"]
