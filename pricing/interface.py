import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

BREAKDOWN_SCHEMA_VERSION = 1


class ProfitMode(str, Enum):
    TARGET_MARGIN = "target_margin"
    COMMISSION = "commission"


class RoundingPolicy(str, Enum):
    NEAREST_10 = "nearest10"
    NEAREST_5 = "nearest5"
    CEIL_10 = "ceil10"
    NONE = "none"
    INTEGER = "integer"  # arredondamento padrão: inteiro mais próximo
    PSYCHOLOGICAL = "psychological"


class ShippingRateStrategyName(str, Enum):
    FLAT_PER_KG = "flat-per-kg"
    TIERED_BY_WEIGHT = "tiered-by-weight"


class ProcessorFeeBase(str, Enum):
    GROSS = "gross"
    FINAL = "final"
    NET = "net"


class WeightTier(BaseModel):
    """Faixa de frete: vale a partir de min_kg (inclusive)"""
    model_config = ConfigDict(frozen=True)

    min_kg: float = Field(ge=0)
    rate_per_kg: float = Field(ge=0)


DEFAULT_WEIGHT_TIERS = [
    WeightTier(min_kg=0, rate_per_kg=55),
    WeightTier(min_kg=3, rate_per_kg=42),
    WeightTier(min_kg=5, rate_per_kg=32),
]

_NUMERIC_FIELDS = (
    "fx_fee_pct",
    "brand_commission_pct",
    "international_rate_per_kg",
    "outer_pack_kg",
    "volumetric_divisor",
    "customs_threshold_usd",
    "customs_pct",
    "vat_pct",
    "fixed_fees_local",
    "buffer_pct",
    "domestic_ship_local",
    "free_shipping_threshold_local",
    "target_margin_pct",
    "commission_pct_of_base",
    "min_profit_floor_local",
    "processor_pct",
    "processor_fixed_local",
)


class PricingConfiguration(BaseModel):
    """
    Parâmetros ajustáveis do modelo de custo (landed cost).

    Percentuais são frações em [0, 1]. Valores numéricos não finitos
    (NaN, inf, "", None) voltam ao default do campo; valores negativos,
    políticas desconhecidas e câmbios <= 0 são rejeitados na carga.
    """
    model_config = ConfigDict(frozen=True)

    local_currency: str = "ILS"
    fx_rates: Dict[str, float] = Field(default_factory=lambda: {"USD": 3.7, "EUR": 4.0, "GBP": 4.5})
    fx_fee_pct: float = Field(0.027, ge=0, le=1)
    brand_commission_pct: float = Field(0.0, ge=0, le=1)

    shipping_rate_strategy: ShippingRateStrategyName = ShippingRateStrategyName.FLAT_PER_KG
    international_rate_per_kg: float = Field(70.0, ge=0)
    weight_tiers: List[WeightTier] = Field(default_factory=lambda: list(DEFAULT_WEIGHT_TIERS))
    outer_pack_kg: float = Field(0.3, ge=0)
    volumetric_divisor: float = Field(5000.0, gt=0)

    customs_threshold_usd: float = Field(75.0, ge=0)
    customs_pct: float = Field(0.12, ge=0, le=1)
    duties_base_includes_shipping: bool = True

    vat_pct: float = Field(0.18, ge=0, le=1)
    import_vat_recoverable: bool = False

    fixed_fees_local: float = Field(50.0, ge=0)
    buffer_pct: float = Field(0.05, ge=0, le=1)

    domestic_ship_local: float = Field(30.0, ge=0)
    free_shipping_threshold_local: float = Field(399.0, ge=0)

    profit_mode: ProfitMode = ProfitMode.TARGET_MARGIN
    target_margin_pct: float = Field(0.10, ge=0, le=1)
    commission_pct_of_base: float = Field(0.10, ge=0, le=1)
    min_profit_floor_local: float = Field(40.0, ge=0)

    processor_pct: float = Field(0.025, ge=0, le=1)
    processor_fixed_local: float = Field(1.2, ge=0)
    processor_fee_applies_to_gross: bool = False

    rounding_policy: RoundingPolicy = RoundingPolicy.NEAREST_10

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _finite_or_default(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if isinstance(value, bool):
            return float(value)
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        return number if math.isfinite(number) else default

    @field_validator("local_currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("fx_rates", mode="before")
    @classmethod
    def _upper_fx_codes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(code).strip().upper(): rate for code, rate in value.items()}
        return value

    @field_validator("fx_rates")
    @classmethod
    def _check_fx_rates(cls, value: Dict[str, float]) -> Dict[str, float]:
        for code, rate in value.items():
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f"Câmbio de {code} deve ser um número positivo, recebido {rate}")
        if "USD" not in value:
            raise ValueError("fx_rates deve incluir USD (âncora do valor declarado na alfândega)")
        return value

    @field_validator("weight_tiers")
    @classmethod
    def _sort_tiers(cls, value: List[WeightTier]) -> List[WeightTier]:
        if not value:
            raise ValueError("weight_tiers deve ter ao menos uma faixa")
        return sorted(value, key=lambda tier: tier.min_kg)

    def supported_currencies(self) -> List[str]:
        """Moedas precificáveis: as do câmbio mais a moeda local"""
        codes = list(self.fx_rates.keys())
        if self.local_currency not in codes:
            codes.append(self.local_currency)
        return codes


class Dimensions(BaseModel):
    """Dimensões da embalagem em centímetros"""
    model_config = ConfigDict(frozen=True)

    length: float = 0.0
    width: float = 0.0
    height: float = 0.0


class ProductInput(BaseModel):
    """Item (ou agregado de pedido) a ser precificado"""
    model_config = ConfigDict(frozen=True)

    currency: str
    product_price: float
    weight_kg: float = 0.0
    dimensions_cm: Optional[Dimensions] = None

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class PricingBreakdown(BaseModel):
    """
    Snapshot persistido de um cálculo de preço.

    Carrega todos os valores intermediários e as premissas em vigor no
    momento do cálculo, para que a reconciliação de lucro possa ser feita
    depois a partir do snapshot sozinho.
    """
    model_config = ConfigDict(frozen=True)

    schema_version: int = BREAKDOWN_SCHEMA_VERSION

    currency: str
    local_currency: str
    fx_rate: float

    base_local: float
    fx_cost: float
    brand_fee: float
    real_weight_kg: float
    volumetric_kg: float
    chargeable_kg: float
    intl_rate_per_kg: Optional[float] = None
    intl_ship: float
    declared_usd: float
    duty_base: float
    customs_local: float
    import_vat_local: float
    fixed_fees_local: float
    buffer_local: float
    cost_ex_vat: float
    required_profit: float
    required_before_fees: float
    price_ex_vat: float
    price_gross: float
    domestic_charge: float
    final_pre_round: float
    final_price_local: float
    processor_fees: float
    net_profit: float
    profit_pct_of_final: float

    # premissas usadas no cálculo
    vat_pct: float
    processor_pct: float
    processor_fixed_local: float
    processor_fee_applies_to_gross: bool
    domestic_ship_local: float
    rounding_policy: RoundingPolicy
    shipping_rate_strategy: ShippingRateStrategyName = ShippingRateStrategyName.FLAT_PER_KG

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "PricingBreakdown":
        """
        Reconstrói um breakdown persistido.

        Raises:
            ValueError: Se o snapshot for de uma versão de schema desconhecida
        """
        version = data.get("schema_version", BREAKDOWN_SCHEMA_VERSION)
        if version != BREAKDOWN_SCHEMA_VERSION:
            raise ValueError(
                f"schema_version {version} de breakdown não suportada. "
                f"Suportada: {BREAKDOWN_SCHEMA_VERSION}"
            )
        return cls.model_validate(data)


class BreakdownReport(BaseModel):
    """Breakdown em linhas (label/valor) para exibição"""
    steps: List[Dict[str, Any]]
    notes: Optional[List[str]] = None


class ProfitSnapshot(BaseModel):
    """Entrada da reconciliação de lucro, achatada a partir de um breakdown"""
    model_config = ConfigDict(frozen=True)

    vat_pct: float = Field(ge=0, le=1)
    domestic_vat_applies: bool = True
    domestic_charge_to_customer: float = Field(0.0, ge=0)
    domestic_cost_includes_vat: bool = True
    domestic_ship_cost_local: float = Field(0.0, ge=0)
    price_ex_vat: float = Field(ge=0)
    processor_fee_on: ProcessorFeeBase = ProcessorFeeBase.NET
    price_gross: float = Field(ge=0)
    final_price_local: float = Field(ge=0)
    processor_pct: float = Field(ge=0, le=1)
    processor_fixed_local: float = Field(0.0, ge=0)
    cost_ex_vat: float = Field(ge=0)
    # reembolsos e ajustes podem ter sinal
    refunds_and_adjustments_ex_vat: float = 0.0


class ProfitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    net_profit: float
    margin_pct: float
    revenue_ex_vat: float
    processor_fees: float
    total_costs_ex_vat: float


class IShippingRateStrategy(ABC):
    """
    Interface para estratégias de tarifa de frete internacional.

    A estratégia recebe o peso cobrável (já arredondado para 0.5 kg) e a
    configuração, e devolve a tarifa por kg aplicada.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def get_rate_per_kg(self, chargeable_kg: float, config: PricingConfiguration) -> float:
        """
        Tarifa por kg para o peso cobrável informado.

        Args:
            chargeable_kg: Peso cobrável em kg
            config: Configuração de preços

        Returns:
            Tarifa na moeda local por kg (não negativa)
        """
        pass

    def get_shipping_cost(self, chargeable_kg: float, config: PricingConfiguration) -> float:
        """Custo de frete internacional = tarifa x peso cobrável"""
        return self.ensure_non_negative(self.get_rate_per_kg(chargeable_kg, config) * chargeable_kg)

    def ensure_non_negative(self, value: float) -> float:
        return max(0.0, value)
