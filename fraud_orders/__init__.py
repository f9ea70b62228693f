"""
fraud-orders - checkout blacklist gate for e-commerce stores.

Blocks checkouts from customers whose name, IP, email, email domain, phone
or address is on an operator-maintained blacklist, and logs every block.
"""
__version__ = "2.2.0"
