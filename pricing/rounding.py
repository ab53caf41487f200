import math
from typing import Callable, Dict, Union

from pricing.interface import RoundingPolicy


def round_half_up(value: float) -> float:
    """Arredonda para o inteiro mais próximo; .5 sempre sobe (não usa banker's rounding)"""
    return float(math.floor(value + 0.5))


def round_to_step(value: float, step: float) -> float:
    return round_half_up(value / step) * step


def ceil_to_step(value: float, step: float) -> float:
    return float(math.ceil(value / step)) * step


def round_psychological(value: float) -> float:
    """
    Preço "psicológico" terminando em 9.

    - até 200: dezena inferior + 9.90 (ex: 183 -> 189.90)
    - até 400: dezena inferior + 9 (ex: 352 -> 359)
    - acima: dezena inferior + 9 se o último dígito for >= 5, senão a dezena inferior
    """
    tens = math.floor(value / 10) * 10
    if value <= 200:
        return tens + 9.90
    if value <= 400:
        return float(tens + 9)
    last_digit = int(round_half_up(value)) % 10
    if last_digit >= 5:
        return float(tens + 9)
    return float(tens)


_ROUNDERS: Dict[RoundingPolicy, Callable[[float], float]] = {
    RoundingPolicy.NEAREST_10: lambda value: round_to_step(value, 10),
    RoundingPolicy.NEAREST_5: lambda value: round_to_step(value, 5),
    RoundingPolicy.CEIL_10: lambda value: ceil_to_step(value, 10),
    RoundingPolicy.NONE: lambda value: value,
    RoundingPolicy.INTEGER: round_half_up,
    RoundingPolicy.PSYCHOLOGICAL: round_psychological,
}


def apply_rounding(value: float, policy: Union[RoundingPolicy, str]) -> float:
    """
    Aplica a política de arredondamento ao preço final.

    Args:
        value: Preço antes do arredondamento
        policy: Política configurada

    Returns:
        Preço arredondado. Política desconhecida cai no padrão (inteiro mais próximo).
    """
    try:
        policy = RoundingPolicy(policy)
    except ValueError:
        return round_half_up(value)
    return _ROUNDERS[policy](value)
