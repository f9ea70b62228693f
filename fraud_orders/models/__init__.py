"""
Database models - import all models here so create_all and Alembic can discover them.
"""
from fraud_orders.models.option import Option
from fraud_orders.models.blocked_attempt import BlockedAttempt

__all__ = [
    "Option",
    "BlockedAttempt",
]
