from .flat import FlatPerKgShippingStrategy
from .tiered import TieredByWeightShippingStrategy

__all__ = [
    "FlatPerKgShippingStrategy",
    "TieredByWeightShippingStrategy",
]
