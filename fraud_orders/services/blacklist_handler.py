"""
Blacklist handler - blacklists a customer and deals with the order.

Build one handler per request: it carries that request's options store,
database session, notice queue and query parameters, so no state is shared
between requests.

process_blacklist_action() is the single integration point:
1. Add/remove the customer's name, IP, phone, email and address(es)
2. Log the attempt when the customer is at the storefront
3. Cancel or annotate the order
4. Tell the customer (exception, notice, or redirect depending on context)
"""
import logging
from typing import Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fraud_orders.config import Settings, get_settings
from fraud_orders.countries import build_country_lookup
from fraud_orders.exceptions import CheckoutBlockedError, PaymentRedirect
from fraud_orders.integrations.store_base import (
    NOTICE_ERROR,
    ORDER_STATUS_CANCELLED,
    ORDER_TYPE_SHOP_ORDER,
    NoticeBase,
    NoticeQueue,
    OrderBase,
)
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services import options as opt
from fraud_orders.services.attempt_log import AttemptLogger
from fraud_orders.services.blacklist import (
    EOL,
    BlacklistAction,
    BlacklistContext,
    BlockReason,
    MatchResult,
    apply_list_update,
    is_blacklisted,
    load_blacklists,
)

logger = logging.getLogger(__name__)

PAY_PAGE_CONTEXTS = (BlacklistContext.ORDER_PAY, BlacklistContext.ORDER_PAY_EWAY)


class BlacklistHandler:

    def __init__(
        self,
        store: opt.OptionStore,
        db: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        countries: Optional[Mapping[str, str]] = None,
        notices: Optional[NoticeBase] = None,
        request_params: Optional[Mapping[str, str]] = None,
        attempt_logger: Optional[AttemptLogger] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.countries = build_country_lookup(countries) if countries is not None else build_country_lookup()
        self.notices = notices if notices is not None else NoticeQueue()
        self.request_params = request_params or {}
        self.attempt_logger = attempt_logger or AttemptLogger(store, db=db, settings=self.settings)

    async def get_message(self) -> str:
        """The rejection message shown to blocked customers."""
        message = await self.store.get(opt.BLACK_LIST_MESSAGE)
        return message or self.settings.default_blacklist_message

    async def check(self, customer: CustomerRecord) -> MatchResult:
        """Match the customer against the currently stored lists."""
        blacklists = await load_blacklists(self.store)
        return is_blacklisted(customer, blacklists, self.countries)

    async def update_blacklists(self, customer: CustomerRecord, action: BlacklistAction) -> None:
        """Add or remove the customer's details in the name, IP, phone, email and address lists."""
        current = await load_blacklists(self.store)

        await apply_list_update(self.store, opt.BLACK_LIST_NAMES, current.names, customer.full_name, action)
        await apply_list_update(self.store, opt.BLACK_LIST_IPS, current.ips, customer.ip_address, action)
        await apply_list_update(self.store, opt.BLACK_LIST_PHONES, current.phones, customer.billing_phone, action)
        await apply_list_update(self.store, opt.BLACK_LIST_EMAILS, current.emails, customer.billing_email, action)

        # Billing and shipping stored once when identical
        addresses: list[str] = []
        for address in (customer.flat_billing_address(), customer.flat_shipping_address()):
            if address.strip(",") and address not in addresses:
                addresses.append(address)
        await apply_list_update(
            self.store, opt.BLACK_LIST_ADDRESSES, current.addresses, EOL.join(addresses), action
        )

    async def process_blacklist_action(
        self,
        customer: Optional[CustomerRecord],
        order: Optional[OrderBase] = None,
        action: BlacklistAction = BlacklistAction.ADD,
        context: BlacklistContext = BlacklistContext.FRONT,
        reason: BlockReason = BlockReason.MAX_FRAUD_ATTEMPTS,
    ) -> bool:
        """
        Blacklist (or un-blacklist) a customer and handle their order.

        In the FRONT context this ends with CheckoutBlockedError when an order is
        given; ORDER_PAY_EWAY ends with PaymentRedirect or CheckoutBlockedError.
        Returns False only when there is no customer to act on.
        """
        if customer is None or customer.is_empty():
            return False

        await self.update_blacklists(customer, action)

        if context == BlacklistContext.FRONT:
            await self.attempt_logger.record(customer, reason.value)

        if order is None:
            return True

        message = await self.get_message()
        self.cancel_order(order, action)

        if context == BlacklistContext.FRONT:
            raise CheckoutBlockedError(message)

        if context in PAY_PAGE_CONTEXTS:
            if not self.notices.has_notice(message, NOTICE_ERROR):
                self.notices.add_notice(message, NOTICE_ERROR)

        if context == BlacklistContext.ORDER_PAY_EWAY:
            if self.settings.payment_callback_param in self.request_params:
                raise PaymentRedirect(order.get_checkout_payment_url())
            raise CheckoutBlockedError()

        return True

    def cancel_order(self, order: OrderBase, action: BlacklistAction = BlacklistAction.ADD) -> bool:
        """
        Annotate the order; when blacklisting, also cancel it unless it is
        already cancelled or is not a top-level order.
        """
        if action == BlacklistAction.REMOVE:
            order.add_note(self.settings.remove_blacklisted_order_note)
            return True

        note = self.settings.blacklisted_order_note
        if not order.has_status(ORDER_STATUS_CANCELLED) and order.get_type() == ORDER_TYPE_SHOP_ORDER:
            order.update_status(ORDER_STATUS_CANCELLED, note)
            logger.info("Order cancelled after blacklisting", extra={"action": action.value})
        order.add_note(note)
        return True

    async def show_blocked_message(self) -> None:
        """Queue the rejection message once."""
        message = await self.get_message()
        if not self.notices.has_notice(message, NOTICE_ERROR):
            self.notices.add_notice(message, NOTICE_ERROR)
