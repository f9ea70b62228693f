"""
Fraud attempt tracking at the storefront.

validate_checkout() rejects blacklisted customers before an order is placed.
record_failed_payment() counts failed payments in the customer's session and,
once the allowed number is exceeded, blacklists the customer and cancels the order.
"""
import logging
from typing import MutableMapping, Optional

from fraud_orders.exceptions import CheckoutBlockedError
from fraud_orders.integrations.store_base import OrderBase
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services import options as opt
from fraud_orders.services.blacklist import BlacklistAction, BlacklistContext, BlockReason
from fraud_orders.services.blacklist_handler import BlacklistHandler

logger = logging.getLogger(__name__)

SESSION_KEY = "wmfo_fraud_attempts"


class FraudAttemptTracker:

    def __init__(self, handler: BlacklistHandler, session: MutableMapping[str, object]):
        self.handler = handler
        self.session = session

    @property
    def attempts(self) -> int:
        try:
            return int(self.session.get(SESSION_KEY, 0))
        except (TypeError, ValueError):
            return 0

    async def allowed_attempts(self) -> int:
        default = self.handler.settings.default_allowed_fraud_attempts
        value = await self.handler.store.get(opt.ALLOWED_FRAUD_ATTEMPTS, str(default))
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid %s option %r, using %d", opt.ALLOWED_FRAUD_ATTEMPTS, value, default)
            return default

    async def validate_checkout(self, customer: CustomerRecord) -> None:
        """Raise CheckoutBlockedError when the customer is blacklisted."""
        result = await self.handler.check(customer)
        if not result:
            return
        await self.handler.attempt_logger.record(customer, result.reason.value)
        raise CheckoutBlockedError(await self.handler.get_message())

    async def record_failed_payment(
        self,
        customer: CustomerRecord,
        order: Optional[OrderBase] = None,
    ) -> int:
        """
        Count one failed payment. Past the allowed number the customer is
        blacklisted; with an order this raises CheckoutBlockedError.
        """
        attempts = self.attempts + 1
        self.session[SESSION_KEY] = attempts

        if attempts > await self.allowed_attempts():
            logger.warning(
                "Fraud attempts exceeded (%d), blacklisting customer", attempts,
                extra={"reason": BlockReason.MAX_FRAUD_ATTEMPTS.value},
            )
            self.reset()
            await self.handler.process_blacklist_action(
                customer,
                order,
                action=BlacklistAction.ADD,
                context=BlacklistContext.FRONT,
                reason=BlockReason.MAX_FRAUD_ATTEMPTS,
            )
        return attempts

    def reset(self) -> None:
        self.session.pop(SESSION_KEY, None)
