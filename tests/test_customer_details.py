"""
Customer details builder tests.
"""
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services.customer_details import customer_from_checkout

CHECKOUT = {
    "billing_first_name": "John",
    "billing_last_name": "Smith ",
    "billing_email": "john@example.com",
    "billing_phone": "+15125559876",
    "billing_address_1": "1 Main St",
    "billing_city": "Austin",
    "billing_state": "TX",
    "billing_postcode": "78701",
    "billing_country": "US",
}


class TestCustomerFromCheckout:
    def test_billing_fields(self):
        customer = customer_from_checkout(CHECKOUT, ip_address="203.0.113.7")
        assert customer.full_name == "John Smith"
        assert customer.ip_address == "203.0.113.7"
        assert customer.billing_email == "john@example.com"
        assert customer.billing_address == ["1 Main St", "", "Austin", "TX", "78701", "US"]

    def test_billing_reused_without_shipping(self):
        customer = customer_from_checkout(CHECKOUT)
        assert customer.shipping_address == customer.billing_address

    def test_separate_shipping(self):
        data = dict(CHECKOUT, shipping_address_1="5 Dock Rd", shipping_city="Oslo", shipping_country="NO")
        customer = customer_from_checkout(data)
        assert customer.shipping_address == ["5 Dock Rd", "", "Oslo", "", "", "NO"]

    def test_ip_from_data(self):
        customer = customer_from_checkout(dict(CHECKOUT, customer_ip_address="198.51.100.4"))
        assert customer.ip_address == "198.51.100.4"


class TestCustomerRecord:
    def test_empty(self):
        assert CustomerRecord().is_empty() is True
        assert CustomerRecord(billing_address=["", ""]).is_empty() is True

    def test_not_empty(self):
        assert CustomerRecord(ip_address="1.2.3.4").is_empty() is False

    def test_email_domain_after_first_at(self):
        assert CustomerRecord(billing_email="a@b@c.com").email_domain == "b@c.com"

    def test_flat_addresses(self):
        customer = CustomerRecord(billing_address=["1 Main St", "", "US"])
        assert customer.flat_billing_address() == "1 Main St,,US"
        assert customer.flat_shipping_address() == ""
