"""
Build a CustomerRecord from checkout form fields.
"""
from typing import Mapping, Optional

from fraud_orders.schemas.customer import CustomerRecord

ADDRESS_FIELDS = ("address_1", "address_2", "city", "state", "postcode", "country")


def _field(data: Mapping[str, object], key: str) -> str:
    value = data.get(key)
    return str(value).strip() if value is not None else ""


def _address(data: Mapping[str, object], prefix: str) -> list[str]:
    return [_field(data, f"{prefix}_{name}") for name in ADDRESS_FIELDS]


def customer_from_checkout(
    data: Mapping[str, object],
    ip_address: Optional[str] = None,
) -> CustomerRecord:
    """
    Map billing_* / shipping_* fields to a CustomerRecord.
    Without any shipping field the billing address doubles as shipping address,
    as it does when "ship to a different address" is unticked.
    """
    first_name = _field(data, "billing_first_name")
    last_name = _field(data, "billing_last_name")

    billing_address = _address(data, "billing")
    shipping_address = _address(data, "shipping")
    if not any(shipping_address):
        shipping_address = list(billing_address)

    return CustomerRecord(
        full_name=" ".join(part for part in (first_name, last_name) if part),
        ip_address=(ip_address or _field(data, "customer_ip_address")).strip(),
        billing_phone=_field(data, "billing_phone"),
        billing_email=_field(data, "billing_email"),
        billing_address=billing_address,
        shipping_address=shipping_address,
    )
