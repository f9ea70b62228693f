"""
Exceptions raised to the checkout pipeline.
"""


class CheckoutBlockedError(Exception):
    """
    Terminal failure that rejects a checkout.
    The message is shown to the customer; it may be empty, in which case the
    pipeline falls back to its own default text.
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class PaymentRedirect(Exception):
    """Processing must stop and the customer be redirected to `url`."""

    def __init__(self, url: str):
        super().__init__(url)
        self.url = url
