"""
Abstract store interfaces - the shop platform implements these.
Calls are synchronous and in-process; errors raised here are not caught
by the blacklist handler.
"""
from abc import ABC, abstractmethod

ORDER_STATUS_CANCELLED = "cancelled"
ORDER_TYPE_SHOP_ORDER = "shop_order"

NOTICE_ERROR = "error"


class OrderBase(ABC):
    """An order that can change status and carry notes."""

    @abstractmethod
    def has_status(self, status: str) -> bool:
        ...

    @abstractmethod
    def update_status(self, status: str, note: str = "") -> None:
        """Transition the order, recording `note` as the reason."""
        ...

    @abstractmethod
    def add_note(self, text: str) -> None:
        ...

    @abstractmethod
    def get_type(self) -> str:
        """"shop_order" for top-level orders; refunds and sub-orders report their own type."""
        ...

    @abstractmethod
    def get_checkout_payment_url(self) -> str:
        ...


class NoticeBase(ABC):
    """Messages shown to the customer on the next page render."""

    @abstractmethod
    def has_notice(self, text: str, kind: str = NOTICE_ERROR) -> bool:
        ...

    @abstractmethod
    def add_notice(self, text: str, kind: str = NOTICE_ERROR) -> None:
        ...


class NoticeQueue(NoticeBase):
    """In-memory notice queue for one request."""

    def __init__(self):
        self.notices: list[tuple[str, str]] = []

    def has_notice(self, text: str, kind: str = NOTICE_ERROR) -> bool:
        return (text, kind) in self.notices

    def add_notice(self, text: str, kind: str = NOTICE_ERROR) -> None:
        self.notices.append((text, kind))
