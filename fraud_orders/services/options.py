"""
Options store - string settings read and written by key.

The blacklists are stored one entry per line under their own key, exactly
as operators edit them. Two backends: in-memory (tests, scripts) and the
wmfo_options table.
"""
import abc
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fraud_orders.models.option import Option

logger = logging.getLogger(__name__)

# Blacklist keys
BLACK_LIST_NAMES = "wmfo_black_list_names"
BLACK_LIST_IPS = "wmfo_black_list_ips"
BLACK_LIST_EMAILS = "wmfo_black_list_emails"
BLACK_LIST_EMAIL_DOMAINS = "wmfo_black_list_email_domains"
BLACK_LIST_PHONES = "wmfo_black_list_phones"
BLACK_LIST_ADDRESSES = "wmfo_black_list_addresses"

BLACKLIST_KEYS = (
    BLACK_LIST_NAMES,
    BLACK_LIST_IPS,
    BLACK_LIST_EMAILS,
    BLACK_LIST_EMAIL_DOMAINS,
    BLACK_LIST_PHONES,
    BLACK_LIST_ADDRESSES,
)

# Flags and text
ALLOW_BLACKLIST_BY_NAME = "wmfo_allow_blacklist_by_name"
BLACK_LIST_MESSAGE = "wmfo_black_list_message"
ENABLE_DEBUG_LOG = "wmfo_enable_debug_log"
ENABLE_DB_LOG = "wmfo_enable_db_log"
ALLOWED_FRAUD_ATTEMPTS = "wmfo_black_list_allowed_fraud_attempts"


class OptionStore(abc.ABC):
    """Get/set string options by key."""

    @abc.abstractmethod
    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        ...

    @abc.abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    async def get_flag(self, key: str, default: bool) -> bool:
        """Read a "yes"/"no" option."""
        value = await self.get(key, "yes" if default else "no")
        return (value or "").strip().lower() == "yes"


class MemoryOptionStore(OptionStore):
    """Dict-backed store. One instance per request or test."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class DatabaseOptionStore(OptionStore):
    """
    Options persisted in the wmfo_options table.
    Writes are flushed, not committed; the session owner commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _row(self, key: str) -> Optional[Option]:
        result = await self.db.execute(select(Option).where(Option.name == key))
        return result.scalar_one_or_none()

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = await self._row(key)
        if row is None:
            return default
        return row.value

    async def set(self, key: str, value: str) -> None:
        row = await self._row(key)
        if row is None:
            self.db.add(Option(name=key, value=value))
        else:
            row.value = value
        await self.db.flush()
        logger.debug("Option updated: %s", key, extra={"list_key": key})
