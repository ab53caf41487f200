import logging
from typing import Dict, Union

from pricing.interface import IShippingRateStrategy, ShippingRateStrategyName
from pricing.shipping import (
    FlatPerKgShippingStrategy,
    TieredByWeightShippingStrategy,
)

logger = logging.getLogger(__name__)


class ShippingRateStrategyFactory:
    """
    Factory para instanciar estratégias de tarifa de frete internacional.

    Usa mapeamento centralizado nome -> classe para garantir
    consistência e facilitar manutenção.
    """

    # Mapeamento canônico: nome -> Strategy class
    _STRATEGIES: Dict[str, type] = {
        ShippingRateStrategyName.FLAT_PER_KG.value: FlatPerKgShippingStrategy,
        ShippingRateStrategyName.TIERED_BY_WEIGHT.value: TieredByWeightShippingStrategy,
    }

    @staticmethod
    def _normalize(name: Union[str, ShippingRateStrategyName]) -> str:
        if isinstance(name, ShippingRateStrategyName):
            return name.value
        return name.lower().strip()

    @classmethod
    def get(cls, name: Union[str, ShippingRateStrategyName]) -> IShippingRateStrategy:
        """
        Retorna a estratégia de frete para o nome especificado.

        Args:
            name: Nome da estratégia (case-insensitive)

        Returns:
            Instância de IShippingRateStrategy

        Raises:
            ValueError: Se a estratégia não for suportada
        """
        key = cls._normalize(name)

        strategy_class = cls._STRATEGIES.get(key)

        if not strategy_class:
            supported = ", ".join(cls._STRATEGIES.keys())
            raise ValueError(
                f"Estratégia de frete '{name}' não suportada. "
                f"Estratégias disponíveis: {supported}"
            )

        logger.debug(f"Estratégia de frete selecionada: {key}")
        return strategy_class()

    @classmethod
    def get_supported_strategies(cls) -> list:
        """Retorna lista de estratégias suportadas"""
        return list(cls._STRATEGIES.keys())

    @classmethod
    def is_supported(cls, name: str) -> bool:
        """Verifica se uma estratégia é suportada"""
        return cls._normalize(name) in cls._STRATEGIES
