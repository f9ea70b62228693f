"""
Blocked attempt log - one row per checkout rejected by a blacklist match.
Append-only: rows are never updated or deleted by the application.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column
from fraud_orders.database import Base


class BlockedAttempt(Base):
    __tablename__ = "wmfo_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Customer snapshot
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    ip: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    billing_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Block type label, e.g. "IP Address", "Billing/Shipping Address"
    blacklisted_reason: Mapped[str] = mapped_column(String(100), nullable=False)

    # Site-local time the attempt was blocked
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_wmfo_logs_timestamp", "timestamp"),
        Index("ix_wmfo_logs_reason", "blacklisted_reason"),
    )

    def __repr__(self) -> str:
        return f"<BlockedAttempt {self.id} reason={self.blacklisted_reason}>"
