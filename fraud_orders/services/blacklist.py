"""
Blacklist store and matcher - THE GATE every checkout passes through.

Lists are persisted as newline-joined strings, one entry per line. Matching
checks the customer in a fixed priority order and stops at the first hit:

1. Full name (only when "match by name" is enabled; names collide easily)
2. IP address
3. Billing email
4. Email domain (text after the first "@")
5. Billing phone
6. Billing or shipping address (subset match after normalization)
"""
import enum
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from fraud_orders.countries import build_country_lookup
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services import options as opt

logger = logging.getLogger(__name__)

EOL = "\n"


class BlacklistAction(str, enum.Enum):
    ADD = "add"
    REMOVE = "remove"


class BlacklistContext(str, enum.Enum):
    """Where a block happens; decides how it is shown to the customer."""
    FRONT = "front"
    ADMIN = "admin"
    ORDER_PAY = "order-pay"
    ORDER_PAY_EWAY = "order-pay-eway"


class BlockReason(str, enum.Enum):
    """Label stored with every blocked attempt."""
    FULL_NAME = "Full Name"
    IP_ADDRESS = "IP Address"
    BILLING_EMAIL = "Billing Email"
    EMAIL_DOMAIN = "Email Domain"
    BILLING_PHONE = "Billing Phone"
    ADDRESS = "Billing/Shipping Address"
    MAX_FRAUD_ATTEMPTS = "Max Fraud Attempts exceeded"


class MatchResult:
    """Result of a blacklist check."""

    def __init__(self, matched: bool, reason: Optional[BlockReason] = None):
        self.matched = matched
        self.reason = reason

    def __bool__(self) -> bool:
        return self.matched

    def __repr__(self) -> str:
        if not self.matched:
            return "<MatchResult CLEAR>"
        return f"<MatchResult BLACKLISTED: {self.reason.value}>"


NOT_BLACKLISTED = MatchResult(False)


def split_entries(value: Optional[str]) -> list[str]:
    """Split a stored list into trimmed, non-empty entries."""
    if not value:
        return []
    return [entry.strip() for entry in value.split(EOL) if entry.strip()]


@dataclass
class BlacklistSet:
    """The six stored lists, raw as persisted."""
    names: str = ""
    ips: str = ""
    emails: str = ""
    email_domains: str = ""
    phones: str = ""
    addresses: str = ""
    allow_blacklist_by_name: bool = False

    def entries(self, list_name: str) -> list[str]:
        return split_entries(getattr(self, list_name))


async def load_blacklists(store: opt.OptionStore) -> BlacklistSet:
    """Read the six lists and the match-by-name flag from the options store."""
    return BlacklistSet(
        names=await store.get(opt.BLACK_LIST_NAMES, "") or "",
        ips=await store.get(opt.BLACK_LIST_IPS, "") or "",
        emails=await store.get(opt.BLACK_LIST_EMAILS, "") or "",
        email_domains=await store.get(opt.BLACK_LIST_EMAIL_DOMAINS, "") or "",
        phones=await store.get(opt.BLACK_LIST_PHONES, "") or "",
        addresses=await store.get(opt.BLACK_LIST_ADDRESSES, "") or "",
        allow_blacklist_by_name=await store.get_flag(opt.ALLOW_BLACKLIST_BY_NAME, False),
    )


def update_list(
    current_value: Optional[str],
    entries: Optional[str],
    action: BlacklistAction = BlacklistAction.ADD,
) -> Optional[str]:
    """
    Apply an add/remove of one or more newline-separated entries to a stored list.

    Returns the new value to persist, or None when there is nothing to apply.

    Adding keeps the historical behaviour: each new entry is checked against the
    list as it was before this call, and only the last entry of the block decides
    the result. A block of several new entries therefore appends only the last
    one unless the stored list was empty, in which case the whole block is stored.

    Entries are trimmed and blank lines dropped before comparing, so the stored
    list never holds the same entry twice.
    """
    if entries is None:
        return None
    current_value = current_value or ""
    new_entries = split_entries(entries)
    if not new_entries:
        return current_value

    existing = split_entries(current_value)
    new_value = EOL.join(existing)
    if action == BlacklistAction.ADD:
        if not existing:
            new_value = EOL.join(dict.fromkeys(new_entries))
        else:
            for entry in new_entries:
                new_value = EOL.join(existing) if entry in existing else EOL.join(existing + [entry])
    elif action == BlacklistAction.REMOVE:
        to_remove = set(new_entries)
        new_value = EOL.join(entry for entry in existing if entry not in to_remove)

    return new_value.strip()


async def apply_list_update(
    store: opt.OptionStore,
    key: str,
    current_value: Optional[str],
    entries: Optional[str],
    action: BlacklistAction,
) -> Optional[str]:
    """update_list, then persist the result under key. No locking: last write wins."""
    new_value = update_list(current_value, entries, action)
    if new_value is not None and new_value != (current_value or ""):
        await store.set(key, new_value)
        logger.info(
            "Blacklist updated: key=%s action=%s",
            key, action.value, extra={"list_key": key, "action": action.value},
        )
    return new_value


def normalize_address_part(part: str, countries: Mapping[str, str]) -> str:
    """Trim + lowercase, then fold a country name to its code."""
    part = part.strip().lower()
    return countries.get(part, part)


def normalize_address(parts: list[str], countries: Mapping[str, str]) -> set[str]:
    """Normalized parts, with comma-separated parts split the way stored entries are."""
    return {
        normalize_address_part(piece, countries)
        for part in parts
        for piece in part.split(",")
    }


def address_matches(
    blacklisted_address: str,
    candidate_parts: set[str],
    countries: Mapping[str, str],
) -> bool:
    """
    True when every non-empty part of the blacklisted address appears
    among the candidate's normalized parts.
    """
    wanted = {
        normalize_address_part(part, countries)
        for part in blacklisted_address.split(",")
    }
    wanted.discard("")
    if not wanted or not candidate_parts:
        return False
    return wanted <= candidate_parts


def _in_list(value: str, entries: list[str]) -> bool:
    return bool(value) and value.strip() in entries


def is_blacklisted(
    customer: CustomerRecord,
    blacklists: BlacklistSet,
    countries: Optional[Mapping[str, str]] = None,
) -> MatchResult:
    """
    Check the customer against the lists, first hit wins.
    `countries` is a lowercase name -> lowercase code mapping (see build_country_lookup).
    """
    if blacklists.allow_blacklist_by_name and _in_list(customer.full_name, blacklists.entries("names")):
        return MatchResult(True, BlockReason.FULL_NAME)

    if _in_list(customer.ip_address, blacklists.entries("ips")):
        return MatchResult(True, BlockReason.IP_ADDRESS)

    if _in_list(customer.billing_email, blacklists.entries("emails")):
        return MatchResult(True, BlockReason.BILLING_EMAIL)

    domain = customer.email_domain.strip().lower()
    if domain and domain in {d.lower() for d in blacklists.entries("email_domains")}:
        return MatchResult(True, BlockReason.EMAIL_DOMAIN)

    if _in_list(customer.billing_phone, blacklists.entries("phones")):
        return MatchResult(True, BlockReason.BILLING_PHONE)

    if countries is None:
        countries = build_country_lookup()

    billing_parts = normalize_address(customer.billing_address, countries)
    shipping_parts = normalize_address(customer.shipping_address, countries)
    billing_parts.discard("")
    shipping_parts.discard("")

    for blacklisted_address in blacklists.entries("addresses"):
        if (
            address_matches(blacklisted_address, billing_parts, countries)
            or address_matches(blacklisted_address, shipping_parts, countries)
        ):
            return MatchResult(True, BlockReason.ADDRESS)

    return NOT_BLACKLISTED
