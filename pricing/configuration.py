import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from pricing.exceptions import InvalidConfigurationError
from pricing.interface import PricingConfiguration

logger = logging.getLogger(__name__)


def _format_errors(exc: ValidationError) -> list:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
        for err in exc.errors()
    ]


def load_configuration(data: Optional[Dict[str, Any]] = None, **overrides: Any) -> PricingConfiguration:
    """
    Carrega e valida uma configuração de preços (ex: vinda das configurações salvas).

    Campos ausentes usam os defaults; valores não finitos voltam ao default.
    A validação acontece aqui, nunca durante o cálculo.

    Args:
        data: Dict com os campos da configuração
        overrides: Campos que sobrescrevem data

    Returns:
        PricingConfiguration validada

    Raises:
        InvalidConfigurationError: Percentual fora de [0, 1], valor negativo,
            política desconhecida ou câmbio <= 0
    """
    payload = dict(data or {})
    payload.update(overrides)

    try:
        return PricingConfiguration.model_validate(payload)
    except ValidationError as e:
        errors = _format_errors(e)
        logger.warning(f"Configuração de preços rejeitada: {errors}")
        raise InvalidConfigurationError(
            f"Configuração inválida: {'; '.join(errors)}", errors=errors
        ) from e
