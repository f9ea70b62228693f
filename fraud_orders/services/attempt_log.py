"""
Blocked attempt logging - every rejected checkout is recorded for operator review.

Two independent sinks, each switched by its own option:
- debug log file (wmfo_enable_debug_log, default "no"): best effort, never
  allowed to break a block
- wmfo_logs table (wmfo_enable_db_log, default "yes"): errors propagate,
  including a missing database session
"""
import logging
import logging.handlers
import os
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fraud_orders.config import Settings, get_settings
from fraud_orders.models.blocked_attempt import BlockedAttempt
from fraud_orders.schemas.customer import BlockedAttemptEntry, CustomerRecord
from fraud_orders.services import options as opt
from fraud_orders.utils.logging import mask_value

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotating handlers, one per debug log path and rotation settings
_file_handlers: dict[tuple[str, int, int], logging.Handler] = {}


def current_time() -> datetime:
    """Site-local wall clock time, second precision."""
    return datetime.now().replace(microsecond=0)


def _get_file_logger(path: str, settings: Settings) -> logging.Logger:
    file_logger = logging.getLogger(f"fraud_orders.debug_log.{path}")
    key = (path, settings.debug_log_max_bytes, settings.debug_log_backup_count)
    if key not in _file_handlers:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        for old_key in [k for k in _file_handlers if k[0] == path]:
            old_handler = _file_handlers.pop(old_key)
            file_logger.removeHandler(old_handler)
            old_handler.close()
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=settings.debug_log_max_bytes,
            backupCount=settings.debug_log_backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        file_logger.addHandler(handler)
        file_logger.setLevel(logging.INFO)
        file_logger.propagate = False
        _file_handlers[key] = handler
    return file_logger


def close_debug_logs() -> None:
    """Close every open debug log file. Call on shutdown."""
    for (path, _, _), handler in list(_file_handlers.items()):
        logging.getLogger(f"fraud_orders.debug_log.{path}").removeHandler(handler)
        handler.close()
    _file_handlers.clear()


class DebugLog:
    """
    Buffered writer for the debug log file.
    write() collects lines, save() appends them as one block.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.path = os.path.join(self.settings.log_dir, self.settings.debug_log_filename)
        self._lines: list[str] = []

    def write(self, value: Any = "") -> None:
        if isinstance(value, dict):
            self._lines.append(self._format_mapping(value))
        else:
            self._lines.append(str(value))

    @staticmethod
    def _format_mapping(value: dict) -> str:
        lines = ["{"]
        for key, item in value.items():
            if isinstance(item, (list, tuple)):
                item = ",".join(str(part) for part in item)
            lines.append(f"    {key} => {item}")
        lines.append("}")
        return "\n".join(lines)

    def save(self) -> None:
        if not self._lines:
            return
        block = "\n".join(self._lines)
        self._lines = []
        _get_file_logger(self.path, self.settings).info(block)


class AttemptLogger:
    """Writes blocked attempts to whichever sinks are enabled."""

    def __init__(
        self,
        store: opt.OptionStore,
        db: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.db = db
        self.settings = settings or get_settings()

    async def record(
        self,
        customer: CustomerRecord,
        reason: str,
        timestamp: Optional[datetime] = None,
    ) -> Optional[BlockedAttempt]:
        entry = BlockedAttemptEntry.from_customer(
            customer, reason=str(reason), timestamp=timestamp or current_time()
        )
        return await self.record_blocked_attempt(entry, customer)

    async def record_blocked_attempt(
        self,
        entry: BlockedAttemptEntry,
        customer: Optional[CustomerRecord] = None,
    ) -> Optional[BlockedAttempt]:
        """Record one blocked attempt. Returns the table row when one was written."""
        logger.info(
            "Blocked checkout: email=%s ip=%s",
            mask_value(entry.email), mask_value(entry.ip),
            extra={"reason": entry.blacklisted_reason},
        )

        if await self.store.get_flag(opt.ENABLE_DEBUG_LOG, False):
            self._write_file(entry, customer)

        if await self.store.get_flag(opt.ENABLE_DB_LOG, True):
            return await self._write_table(entry)
        return None

    def _write_file(self, entry: BlockedAttemptEntry, customer: Optional[CustomerRecord]) -> None:
        try:
            debug_log = DebugLog(self.settings)
            debug_log.write("----------start------------")
            debug_log.write("Customer Details ==>")
            if customer is not None:
                debug_log.write(customer.model_dump())
            else:
                debug_log.write(entry.model_dump(exclude={"blacklisted_reason", "timestamp"}))
            debug_log.write(f"Block type ==> {entry.blacklisted_reason}")
            debug_log.write(f"Timestamp ==> {entry.timestamp.strftime(TIMESTAMP_FORMAT)}")
            debug_log.write("----------end------------")
            debug_log.write()
            debug_log.write()
            debug_log.save()
        except OSError as e:
            logger.warning("Debug log write failed: %s", str(e))

    async def _write_table(self, entry: BlockedAttemptEntry) -> Optional[BlockedAttempt]:
        if self.db is None:
            raise RuntimeError("Table logging is enabled but no database session was given")
        row = BlockedAttempt(**entry.model_dump())
        self.db.add(row)
        await self.db.flush()
        return row


async def list_blocked_attempts(
    db: AsyncSession,
    limit: int = 20,
    offset: int = 0,
) -> list[BlockedAttempt]:
    """Newest first, for the admin log view."""
    result = await db.execute(
        select(BlockedAttempt)
        .order_by(BlockedAttempt.timestamp.desc(), BlockedAttempt.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def count_blocked_attempts(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(BlockedAttempt))
    return result.scalar() or 0
