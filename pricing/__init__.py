from .interface import (
    IShippingRateStrategy,
    PricingConfiguration,
    ProductInput,
    PricingBreakdown,
    ProfitSnapshot,
    ProfitResult,
)
from .factory import ShippingRateStrategyFactory
from .configuration import load_configuration
from .calculator import compute_breakdown, describe_breakdown
from .reconciler import calculator_fee_base, reconcile_profit, snapshot_from_breakdown
from .exceptions import PricingError, InvalidConfigurationError, InvalidInputError

__all__ = [
    "IShippingRateStrategy",
    "PricingConfiguration",
    "ProductInput",
    "PricingBreakdown",
    "ProfitSnapshot",
    "ProfitResult",
    "ShippingRateStrategyFactory",
    "load_configuration",
    "compute_breakdown",
    "describe_breakdown",
    "reconcile_profit",
    "snapshot_from_breakdown",
    "calculator_fee_base",
    "PricingError",
    "InvalidConfigurationError",
    "InvalidInputError",
]
