class PricingError(Exception):
    """Base error for the pricing package"""


class InvalidConfigurationError(PricingError):
    """Configuration rejected at load time (negative rate, unknown policy, fx rate <= 0)"""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class InvalidInputError(PricingError):
    """Product or order input that cannot be priced"""


class FxRatesError(PricingError):
    pass
