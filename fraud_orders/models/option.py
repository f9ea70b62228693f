"""
Option model - key/value store for operator-editable settings.
Holds the six blacklists (newline-joined), the match-by-name flag,
the rejection message and the two logging switches.
"""
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column
from fraud_orders.database import Base


class Option(Base):
    __tablename__ = "wmfo_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(191), nullable=False)

    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_wmfo_options_name", "name", unique=True),
    )

    def __repr__(self) -> str:
        return f"<Option {self.name}>"
