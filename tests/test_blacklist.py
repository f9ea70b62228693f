"""
Blacklist store and matcher tests.
Priority order and address subset matching decide who gets blocked.
"""
import pytest

from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services import options as opt
from fraud_orders.services.blacklist import (
    BlacklistAction,
    BlacklistSet,
    BlockReason,
    address_matches,
    apply_list_update,
    is_blacklisted,
    load_blacklists,
    normalize_address,
    split_entries,
    update_list,
)
from fraud_orders.countries import build_country_lookup
from fraud_orders.services.options import MemoryOptionStore

COUNTRIES = build_country_lookup()


def make_customer(**overrides) -> CustomerRecord:
    data = {
        "full_name": "Jane Doe",
        "ip_address": "198.51.100.1",
        "billing_phone": "5550001",
        "billing_email": "jane@shop.test",
        "billing_address": ["9 Elm Rd", "", "Leeds", "", "LS1 1AA", "GB"],
        "shipping_address": ["9 Elm Rd", "", "Leeds", "", "LS1 1AA", "GB"],
    }
    data.update(overrides)
    return CustomerRecord(**data)


# === UPDATE LIST TESTS ===

class TestUpdateListAdd:
    def test_add_to_empty_list_stores_block_verbatim(self):
        assert update_list("", "a\nb", BlacklistAction.ADD) == "a\nb"

    def test_add_to_missing_list(self):
        assert update_list(None, "1.2.3.4", BlacklistAction.ADD) == "1.2.3.4"

    def test_add_appends_new_entry(self):
        assert update_list("a\nb", "c", BlacklistAction.ADD) == "a\nb\nc"

    def test_add_twice_no_duplicate(self):
        once = update_list("a", "b", BlacklistAction.ADD)
        twice = update_list(once, "b", BlacklistAction.ADD)
        assert twice == "a\nb"
        assert twice.split("\n").count("b") == 1

    def test_add_existing_entry_unchanged(self):
        assert update_list("a\nb", "a", BlacklistAction.ADD) == "a\nb"

    def test_add_is_case_sensitive(self):
        assert update_list("Spam@x.com", "spam@x.com", BlacklistAction.ADD) == "Spam@x.com\nspam@x.com"

    def test_add_block_only_last_entry_counts(self):
        """Each entry is compared to the original list; the last one decides."""
        assert update_list("x", "a\nb", BlacklistAction.ADD) == "x\nb"

    def test_add_block_last_entry_present_keeps_original(self):
        assert update_list("x\nb", "a\nb", BlacklistAction.ADD) == "x\nb"

    def test_trailing_line_ending_stripped(self):
        assert update_list("", "a\r\n", BlacklistAction.ADD) == "a"

    def test_empty_block_returns_previous_value(self):
        assert update_list("a\nb", "", BlacklistAction.ADD) == "a\nb"

    def test_no_entries_returns_none(self):
        assert update_list("a", None, BlacklistAction.ADD) is None

    def test_result_trimmed(self):
        assert update_list("  a", "b  ", BlacklistAction.ADD) == "a\nb"

    def test_padded_entry_added_twice_stored_once(self):
        once = update_list("a", "b ", BlacklistAction.ADD)
        twice = update_list(once, "b ", BlacklistAction.ADD)
        assert once == "a\nb"
        assert twice == "a\nb"

    def test_padded_entry_matches_padded_stored_line(self):
        assert update_list("a\n b \nc", "b", BlacklistAction.ADD) == "a\nb\nc"

    def test_blank_lines_in_block_skipped(self):
        assert update_list("", "a\n\n  \nb", BlacklistAction.ADD) == "a\nb"

    def test_whitespace_only_block_is_no_change(self):
        assert update_list("a", "  \n ", BlacklistAction.ADD) == "a"


class TestUpdateListRemove:
    def test_remove_entry(self):
        assert update_list("a\nb\nc", "b", BlacklistAction.REMOVE) == "a\nc"

    def test_remove_absent_entry_unchanged(self):
        assert update_list("a\nb", "z", BlacklistAction.REMOVE) == "a\nb"

    def test_remove_several_entries(self):
        assert update_list("a\nb\nc", "a\nc", BlacklistAction.REMOVE) == "b"

    def test_remove_last_entry_leaves_empty(self):
        assert update_list("a", "a", BlacklistAction.REMOVE) == ""

    def test_remove_padded_entry(self):
        assert update_list("a\nb\nc", " b ", BlacklistAction.REMOVE) == "a\nc"

    def test_add_then_remove_round_trip(self):
        original = "10.0.0.1\n10.0.0.2"
        added = update_list(original, "10.0.0.3", BlacklistAction.ADD)
        assert update_list(added, "10.0.0.3", BlacklistAction.REMOVE) == original


class TestApplyListUpdate:
    async def test_persists_new_value(self):
        store = MemoryOptionStore({opt.BLACK_LIST_IPS: "1.1.1.1"})
        await apply_list_update(store, opt.BLACK_LIST_IPS, "1.1.1.1", "2.2.2.2", BlacklistAction.ADD)
        assert await store.get(opt.BLACK_LIST_IPS) == "1.1.1.1\n2.2.2.2"

    async def test_no_entries_does_not_write(self):
        store = MemoryOptionStore()
        result = await apply_list_update(store, opt.BLACK_LIST_IPS, "", None, BlacklistAction.ADD)
        assert result is None
        assert await store.get(opt.BLACK_LIST_IPS) is None


# === MATCHER TESTS ===

class TestSplitEntries:
    def test_trims_and_drops_blank_lines(self):
        assert split_entries(" a \n\n b\n") == ["a", "b"]

    def test_empty(self):
        assert split_entries("") == []
        assert split_entries(None) == []


class TestIsBlacklisted:
    def test_empty_lists_never_match(self):
        result = is_blacklisted(make_customer(), BlacklistSet(), COUNTRIES)
        assert result.matched is False
        assert result.reason is None

    def test_empty_values_do_not_match_empty_lists(self):
        customer = CustomerRecord()
        assert not is_blacklisted(customer, BlacklistSet(ips="\n"), COUNTRIES)

    def test_ip_match(self):
        customer = make_customer(ip_address="1.2.3.4")
        result = is_blacklisted(customer, BlacklistSet(ips="1.2.3.4"), COUNTRIES)
        assert result.matched is True
        assert result.reason == BlockReason.IP_ADDRESS

    def test_ip_list_entries_trimmed(self):
        customer = make_customer(ip_address="1.2.3.4")
        assert is_blacklisted(customer, BlacklistSet(ips="5.5.5.5\n 1.2.3.4 "), COUNTRIES)

    def test_ip_checked_before_email(self):
        customer = make_customer(ip_address="1.2.3.4", billing_email="bad@x.com")
        lists = BlacklistSet(ips="1.2.3.4", emails="bad@x.com")
        assert is_blacklisted(customer, lists, COUNTRIES).reason == BlockReason.IP_ADDRESS

    def test_email_match(self):
        customer = make_customer(billing_email="bad@x.com")
        result = is_blacklisted(customer, BlacklistSet(emails="bad@x.com"), COUNTRIES)
        assert result.reason == BlockReason.BILLING_EMAIL

    def test_email_checked_before_domain(self):
        customer = make_customer(billing_email="bad@spam.com")
        lists = BlacklistSet(emails="bad@spam.com", email_domains="spam.com")
        assert is_blacklisted(customer, lists, COUNTRIES).reason == BlockReason.BILLING_EMAIL

    def test_domain_match(self):
        customer = make_customer(billing_email="foo@spam.com")
        result = is_blacklisted(customer, BlacklistSet(email_domains="spam.com"), COUNTRIES)
        assert result.reason == BlockReason.EMAIL_DOMAIN

    def test_domain_suffix_does_not_match(self):
        customer = make_customer(billing_email="foo@notspam.com")
        assert not is_blacklisted(customer, BlacklistSet(email_domains="spam.com"), COUNTRIES)

    def test_domain_case_insensitive(self):
        customer = make_customer(billing_email="foo@SPAM.com")
        assert is_blacklisted(customer, BlacklistSet(email_domains="Spam.Com"), COUNTRIES)

    def test_email_without_at_has_no_domain(self):
        customer = make_customer(billing_email="nodomain")
        assert not is_blacklisted(customer, BlacklistSet(email_domains="nodomain"), COUNTRIES)

    def test_phone_match(self):
        customer = make_customer(billing_phone="5551234")
        result = is_blacklisted(customer, BlacklistSet(phones="5551234"), COUNTRIES)
        assert result.reason == BlockReason.BILLING_PHONE

    def test_name_ignored_when_flag_off(self):
        customer = make_customer(full_name="Jane Doe")
        assert not is_blacklisted(customer, BlacklistSet(names="Jane Doe"), COUNTRIES)

    def test_name_matched_when_flag_on(self):
        customer = make_customer(full_name="Jane Doe", ip_address="1.2.3.4")
        lists = BlacklistSet(names="Jane Doe", ips="1.2.3.4", allow_blacklist_by_name=True)
        assert is_blacklisted(customer, lists, COUNTRIES).reason == BlockReason.FULL_NAME

    def test_country_only_address_matches(self):
        customer = make_customer(billing_address=["1 Main St", "", "Austin", "TX", "78701", "US"])
        result = is_blacklisted(customer, BlacklistSet(addresses=",,,,US"), COUNTRIES)
        assert result.reason == BlockReason.ADDRESS

    def test_country_name_folded_to_code(self):
        customer = make_customer(billing_address=["1 Main St", "", "Austin", "TX", "78701", "US"])
        assert is_blacklisted(customer, BlacklistSet(addresses=",,,,United States (US)"), COUNTRIES)

    def test_address_case_and_whitespace_ignored(self):
        customer = make_customer(billing_address=["1 Main St", "", "Austin", "TX", "78701", "US"])
        assert is_blacklisted(customer, BlacklistSet(addresses=" 1 MAIN ST , austin "), COUNTRIES)

    def test_address_part_missing_no_match(self):
        customer = make_customer(billing_address=["2 Main St", "", "Austin", "TX", "78701", "US"])
        assert not is_blacklisted(customer, BlacklistSet(addresses="1 Main St,Austin"), COUNTRIES)

    def test_shipping_address_checked(self):
        customer = make_customer(shipping_address=["5 Dock Rd", "", "Oslo", "", "0150", "NO"])
        result = is_blacklisted(customer, BlacklistSet(addresses="5 Dock Rd,Oslo,Norway"), COUNTRIES)
        assert result.reason == BlockReason.ADDRESS

    def test_blank_address_entry_ignored(self):
        assert not is_blacklisted(make_customer(), BlacklistSet(addresses=",,,,"), COUNTRIES)

    def test_default_country_table_used(self):
        customer = make_customer(billing_address=["", "", "", "", "", "DE"])
        assert is_blacklisted(customer, BlacklistSet(addresses="Germany"))

    def test_result_is_falsy_when_clear(self):
        assert bool(is_blacklisted(make_customer(), BlacklistSet(), COUNTRIES)) is False


class TestAddressHelpers:
    def test_normalize_address(self):
        parts = normalize_address(["  1 Main St ", "United Kingdom (UK)"], COUNTRIES)
        assert parts == {"1 main st", "gb"}

    def test_subset_match(self):
        assert address_matches("Austin,TX", {"1 main st", "austin", "tx", "us"}, COUNTRIES) is True

    def test_empty_candidate(self):
        assert address_matches("Austin", set(), COUNTRIES) is False

    def test_comma_inside_part_split(self):
        parts = normalize_address(["Apt 5, Bldg 2", "", "Austin"], COUNTRIES)
        assert parts == {"apt 5", "bldg 2", "", "austin"}

    def test_street_with_comma_matches_its_stored_entry(self):
        customer = make_customer(billing_address=["Apt 5, Bldg 2", "", "Austin", "TX", "78701", "US"])
        stored = customer.flat_billing_address()
        assert is_blacklisted(customer, BlacklistSet(addresses=stored), COUNTRIES).reason == BlockReason.ADDRESS


class TestBlacklistSet:
    def test_entries_follow_field_changes(self):
        lists = BlacklistSet(ips="1.1.1.1")
        assert lists.entries("ips") == ["1.1.1.1"]
        lists.ips = "1.1.1.1\n2.2.2.2"
        assert lists.entries("ips") == ["1.1.1.1", "2.2.2.2"]


class TestLoadBlacklists:
    async def test_reads_all_lists_and_flag(self):
        store = MemoryOptionStore({
            opt.BLACK_LIST_IPS: "1.2.3.4",
            opt.BLACK_LIST_EMAIL_DOMAINS: "spam.com",
            opt.ALLOW_BLACKLIST_BY_NAME: "yes",
        })
        lists = await load_blacklists(store)
        assert lists.entries("ips") == ["1.2.3.4"]
        assert lists.entries("email_domains") == ["spam.com"]
        assert lists.entries("phones") == []
        assert lists.allow_blacklist_by_name is True

    async def test_name_flag_defaults_off(self):
        lists = await load_blacklists(MemoryOptionStore())
        assert lists.allow_blacklist_by_name is False
