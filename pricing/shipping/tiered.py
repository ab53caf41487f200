from pricing.interface import PricingConfiguration
from .base import BaseShippingStrategy


class TieredByWeightShippingStrategy(BaseShippingStrategy):
    """
    Tarifa por kg escalonada por faixa de peso.

    Características:
    - Vale a tarifa da maior faixa cujo min_kg <= peso cobrável
    - Padrão: 55/kg abaixo de 3 kg, 42/kg de 3 a 5 kg, 32/kg a partir de 5 kg
    - Pedidos mais pesados pagam menos por kg
    """

    def __init__(self):
        super().__init__(name="tiered-by-weight")

    def get_rate_per_kg(self, chargeable_kg: float, config: PricingConfiguration) -> float:
        # weight_tiers já vem ordenado por min_kg
        rate = config.weight_tiers[0].rate_per_kg
        for tier in config.weight_tiers:
            if chargeable_kg >= tier.min_kg:
                rate = tier.rate_per_kg
        return rate

    def describe(self, config: PricingConfiguration) -> str:
        bands = " | ".join(
            f">= {tier.min_kg:g} kg: {tier.rate_per_kg:.2f}/kg" for tier in config.weight_tiers
        )
        return f"Frete escalonado: {bands}"
