# config.py
from typing import Any, Dict

from pydantic_settings import BaseSettings, SettingsConfigDict

from pricing.configuration import load_configuration
from pricing.interface import PricingConfiguration


class Settings(BaseSettings):
    dev_mode: bool = False

    app_slug: str = "landed-pricing"
    log_level: str = "INFO"

    local_currency: str = "ILS"
    fx_usd: float = 3.7
    fx_eur: float = 4.0
    fx_gbp: float = 4.5

    default_item_weight_kg: float = 0.35

    fx_rates_url: str = ""
    fx_rates_ttl_hours: int = 12

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    def pricing_configuration(self, **overrides: Any) -> PricingConfiguration:
        """Configuração de preços padrão (câmbio do ambiente) com campos sobrescritos"""
        data: Dict[str, Any] = {
            "local_currency": self.local_currency,
            "fx_rates": {"USD": self.fx_usd, "EUR": self.fx_eur, "GBP": self.fx_gbp},
        }
        data.update(overrides)
        return load_configuration(data)


settings = Settings()
