"""
Manage blacklists from the command line.

Bulk add/remove entries, check a customer, or show recent blocked attempts.

Usage:
    python scripts/manage_blacklist.py add ips 1.2.3.4 5.6.7.8
    python scripts/manage_blacklist.py remove email_domains spam.com
    python scripts/manage_blacklist.py check --email foo@spam.com --ip 1.2.3.4
    python scripts/manage_blacklist.py logs --limit 50
"""
import argparse
import asyncio
import logging

from fraud_orders.config import get_settings
from fraud_orders.database import async_session_factory, create_tables
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services import options as opt
from fraud_orders.services.attempt_log import close_debug_logs, count_blocked_attempts, list_blocked_attempts
from fraud_orders.services.blacklist import BlacklistAction, apply_list_update
from fraud_orders.services.blacklist_handler import BlacklistHandler
from fraud_orders.utils.logging import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

LIST_KEYS = {
    "names": opt.BLACK_LIST_NAMES,
    "ips": opt.BLACK_LIST_IPS,
    "emails": opt.BLACK_LIST_EMAILS,
    "email_domains": opt.BLACK_LIST_EMAIL_DOMAINS,
    "phones": opt.BLACK_LIST_PHONES,
    "addresses": opt.BLACK_LIST_ADDRESSES,
}


async def update(list_name: str, entries: list[str], action: BlacklistAction):
    key = LIST_KEYS[list_name]
    async with async_session_factory() as session:
        store = opt.DatabaseOptionStore(session)
        # One entry per call so every entry lands, not just the last one
        for entry in entries:
            current = await store.get(key, "")
            await apply_list_update(store, key, current, entry, action)
        await session.commit()
        value = await store.get(key, "")
    logger.info("%s now has %d entries", list_name, len([e for e in value.split("\n") if e.strip()]))


async def check(args):
    customer = CustomerRecord(
        full_name=args.name or "",
        ip_address=args.ip or "",
        billing_email=args.email or "",
        billing_phone=args.phone or "",
        billing_address=args.address.split(",") if args.address else [],
    )
    async with async_session_factory() as session:
        handler = BlacklistHandler(opt.DatabaseOptionStore(session), db=session)
        result = await handler.check(customer)
    if result:
        logger.info("BLACKLISTED: %s", result.reason.value)
    else:
        logger.info("Not blacklisted")


async def show_logs(limit: int):
    async with async_session_factory() as session:
        total = await count_blocked_attempts(session)
        rows = await list_blocked_attempts(session, limit=limit)
    logger.info("%d blocked attempts (showing %d)", total, len(rows))
    for row in rows:
        logger.info(
            "%s  %-26s %s <%s> ip=%s",
            row.timestamp, row.blacklisted_reason, row.full_name, row.email, row.ip,
        )


async def main():
    parser = argparse.ArgumentParser(description="Manage fraud order blacklists")
    sub = parser.add_subparsers(dest="command", required=True)

    for command in ("add", "remove"):
        p = sub.add_parser(command)
        p.add_argument("list_name", choices=sorted(LIST_KEYS))
        p.add_argument("entries", nargs="+")

    p = sub.add_parser("check")
    p.add_argument("--name")
    p.add_argument("--ip")
    p.add_argument("--email")
    p.add_argument("--phone")
    p.add_argument("--address", help="Comma-separated address parts")

    p = sub.add_parser("logs")
    p.add_argument("--limit", type=int, default=20)

    args = parser.parse_args()
    configure_structured_logging(get_settings().log_level)
    set_correlation_id(generate_correlation_id())
    await create_tables()

    try:
        if args.command in ("add", "remove"):
            await update(args.list_name, args.entries, BlacklistAction(args.command))
        elif args.command == "check":
            await check(args)
        else:
            await show_logs(args.limit)
    finally:
        close_debug_logs()


if __name__ == "__main__":
    asyncio.run(main())
