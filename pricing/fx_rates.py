"""
Módulo responsável por buscar as cotações de câmbio atuais (moeda estrangeira -> moeda local)
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from pricing.exceptions import FxRatesError

REQUIRED_CURRENCIES = ("usd", "eur", "gbp")

# Cache
_rates_cache: Dict[str, Any] = {
    "url": None,
    "data": None,
    "last_fetched": None
}
CACHE_TTL = timedelta(hours=12)

logger = logging.getLogger(__name__)


def _parse_rates(payload: Any) -> Dict[str, float]:
    """Valida o JSON {"usd": 3.7, "eur": 4.0, "gbp": 4.5} e devolve códigos em maiúsculas"""
    if not isinstance(payload, dict):
        raise FxRatesError("Formato de cotações inválido: esperado objeto JSON")

    rates = {}
    for code, value in payload.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FxRatesError(f"Cotação de {code} não é numérica: {value!r}")
        if not math.isfinite(value) or value <= 0:
            raise FxRatesError(f"Cotação de {code} deve ser positiva: {value}")
        rates[str(code).upper()] = float(value)

    missing = [code for code in REQUIRED_CURRENCIES if code.upper() not in rates]
    if missing:
        raise FxRatesError(f"Cotações ausentes: {', '.join(missing)}")

    return rates


async def fetch_fx_rates(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, float]:
    """
    Busca e valida as cotações atuais.

    Args:
        url: Endpoint que devolve {"usd": ..., "eur": ..., "gbp": ...}
        transport: Transporte httpx opcional (testes)

    Raises:
        FxRatesError: Falha de comunicação ou formato inválido
    """
    async with httpx.AsyncClient(transport=transport) as client:
        try:
            resp = await client.get(url, timeout=15.0)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Erro ao buscar cotações: {e}")
            raise FxRatesError(f"Falha de comunicação: {e}")

    return _parse_rates(payload)


async def get_fx_rates(
        url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ttl: timedelta = CACHE_TTL,
) -> Dict[str, float]:
    """
    Retorna as cotações, usando o cache enquanto estiver dentro do TTL.
    """
    now = datetime.now()
    if _rates_cache["data"] is None or _rates_cache["url"] != url or \
       _rates_cache["last_fetched"] is None or (now - _rates_cache["last_fetched"]) > ttl:
        logger.info(f"Buscando cotações atualizadas em {url}...")
        data = await fetch_fx_rates(url, transport=transport)
        _rates_cache["url"] = url
        _rates_cache["data"] = data
        _rates_cache["last_fetched"] = now

    return dict(_rates_cache["data"])


def clear_cache() -> None:
    _rates_cache["url"] = None
    _rates_cache["data"] = None
    _rates_cache["last_fetched"] = None
