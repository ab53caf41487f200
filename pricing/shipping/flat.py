from pricing.interface import PricingConfiguration
from .base import BaseShippingStrategy


class FlatPerKgShippingStrategy(BaseShippingStrategy):
    """
    Tarifa única por kg cobrável, definida na configuração.

    Características:
    - Estratégia canônica para pedidos novos
    - Tarifa ajustável pela tela de configurações (international_rate_per_kg)
    """

    def __init__(self):
        super().__init__(name="flat-per-kg")

    def get_rate_per_kg(self, chargeable_kg: float, config: PricingConfiguration) -> float:
        return config.international_rate_per_kg

    def describe(self, config: PricingConfiguration) -> str:
        return f"Frete: {config.international_rate_per_kg:.2f}/kg (tarifa única)"
