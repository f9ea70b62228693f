"""
Customer snapshot checked against the blacklists, and the log entry
recorded when a checkout is blocked.
"""
from datetime import datetime
from pydantic import BaseModel, Field


class CustomerRecord(BaseModel):
    """
    Customer details of one checkout or order.
    Addresses are ordered parts: street, street 2, city, state, postcode, country.
    """
    full_name: str = ""
    ip_address: str = ""
    billing_phone: str = ""
    billing_email: str = ""
    billing_address: list[str] = Field(default_factory=list)
    shipping_address: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any((
            self.full_name,
            self.ip_address,
            self.billing_phone,
            self.billing_email,
            any(self.billing_address),
            any(self.shipping_address),
        ))

    @property
    def email_domain(self) -> str:
        """Text after the first '@' of the billing email."""
        _, _, domain = self.billing_email.partition("@")
        return domain

    def flat_billing_address(self) -> str:
        return ",".join(self.billing_address)

    def flat_shipping_address(self) -> str:
        return ",".join(self.shipping_address)


class BlockedAttemptEntry(BaseModel):
    """One blocked checkout, as written to the debug log and the log table."""
    full_name: str = ""
    phone: str = ""
    ip: str = ""
    email: str = ""
    billing_address: str = ""
    shipping_address: str = ""
    blacklisted_reason: str
    timestamp: datetime

    @classmethod
    def from_customer(
        cls, customer: CustomerRecord, reason: str, timestamp: datetime
    ) -> "BlockedAttemptEntry":
        return cls(
            full_name=customer.full_name,
            phone=customer.billing_phone,
            ip=customer.ip_address,
            email=customer.billing_email,
            billing_address=customer.flat_billing_address(),
            shipping_address=customer.flat_shipping_address(),
            blacklisted_reason=reason,
            timestamp=timestamp,
        )
