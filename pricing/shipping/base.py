from pricing.interface import IShippingRateStrategy, PricingConfiguration


class BaseShippingStrategy(IShippingRateStrategy):
    """
    Classe base com lógica comum para as estratégias de frete.
    Evita duplicação de código entre implementações.
    """

    def describe(self, config: PricingConfiguration) -> str:
        """Descrição curta da tarifa, usada nas notas do breakdown"""
        return f"Frete: {self.name}"
