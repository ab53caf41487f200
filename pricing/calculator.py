"""
Cálculo de landed cost: preço em moeda estrangeira + peso -> preço final ao
consumidor em moeda local, com breakdown auditável de custos, taxas e lucro.

Funções puras: sem I/O e sem estado compartilhado, podem ser chamadas em
paralelo para vários itens de pedido.
"""
import logging
import math
from typing import Any, Optional, Tuple

from pricing.exceptions import InvalidInputError
from pricing.factory import ShippingRateStrategyFactory
from pricing.interface import (
    BreakdownReport,
    PricingBreakdown,
    PricingConfiguration,
    ProductInput,
    ProfitMode,
)
from pricing.rounding import apply_rounding

logger = logging.getLogger(__name__)

# Piso do denominador na inversão da taxa do processador (processor_pct -> 1)
MIN_DENOMINATOR = 1e-9


def clamp_num(value: Any, default: float = 0.0) -> float:
    """Converte para float; valores não numéricos ou não finitos viram o default"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def clamp_non_negative(value: Any) -> float:
    return max(0.0, clamp_num(value))


def ceil_to_half_kg(kg: float) -> float:
    """Arredonda para cima no próximo múltiplo de 0.5 kg; zero, negativo ou não finito -> 0"""
    if not math.isfinite(kg) or kg <= 0:
        return 0.0
    # round() remove ruído de ponto flutuante (0.7 + 0.3 = 0.9999999999999999)
    return math.ceil(round(kg * 2, 9)) / 2


class LandedCostCalculator:
    """
    Calculadora de preço final a partir do custo de importação.

    Recebe uma PricingConfiguration já validada (ver load_configuration);
    só rejeita o ProductInput, nunca a configuração.
    """

    def __init__(self, config: PricingConfiguration):
        self.config = config
        self.shipping = ShippingRateStrategyFactory.get(config.shipping_rate_strategy)

    def resolve_fx_rate(self, currency: str) -> float:
        """
        Câmbio da moeda do produto para a moeda local.

        Raises:
            InvalidInputError: Se a moeda não tiver câmbio configurado
        """
        if currency == self.config.local_currency:
            return 1.0

        rate = self.config.fx_rates.get(currency)

        if rate is None:
            supported = ", ".join(self.config.supported_currencies())
            raise InvalidInputError(
                f"Moeda '{currency}' não suportada. "
                f"Moedas disponíveis: {supported}"
            )

        return rate

    def validate_product(self, product: ProductInput) -> None:
        """
        Valida o item antes de qualquer cálculo.

        Raises:
            InvalidInputError: Com todas as violações encontradas
        """
        errors = []

        if not math.isfinite(product.product_price) or product.product_price < 0:
            errors.append(f"product_price deve ser um número >= 0, recebido {product.product_price}")

        if not math.isfinite(product.weight_kg) or product.weight_kg < 0:
            errors.append(f"weight_kg deve ser um número >= 0, recebido {product.weight_kg}")

        if product.dimensions_cm is not None:
            for side in ("length", "width", "height"):
                value = getattr(product.dimensions_cm, side)
                if not math.isfinite(value) or value < 0:
                    errors.append(f"dimensions_cm.{side} deve ser um número >= 0, recebido {value}")

        if errors:
            raise InvalidInputError("; ".join(errors))

        self.resolve_fx_rate(product.currency)

    def chargeable_weight(self, product: ProductInput) -> Tuple[float, float, float]:
        """
        Peso cobrável pela transportadora.

        Returns:
            (peso real com embalagem, peso volumétrico, peso cobrável)
        """
        real_weight = clamp_non_negative(product.weight_kg + self.config.outer_pack_kg)

        volumetric_kg = 0.0
        dims = product.dimensions_cm
        if dims is not None and dims.length and dims.width and dims.height:
            volumetric_kg = (dims.length * dims.width * dims.height) / self.config.volumetric_divisor

        chargeable_kg = ceil_to_half_kg(max(real_weight, volumetric_kg))
        return real_weight, volumetric_kg, chargeable_kg

    def required_profit(self, cost_ex_vat: float, base_local: float) -> float:
        if self.config.profit_mode == ProfitMode.COMMISSION:
            return base_local * self.config.commission_pct_of_base
        return cost_ex_vat * self.config.target_margin_pct

    def invert_processor_fee(self, required_before_fees: float) -> float:
        """
        Preço sem IVA tal que, descontada a taxa do processador, sobre o valor exigido.

        Se a taxa incide sobre o bruto (com IVA), a inversão considera o IVA.
        """
        c = self.config
        if not c.processor_fee_applies_to_gross:
            return (required_before_fees + c.processor_fixed_local) / max(1 - c.processor_pct, MIN_DENOMINATOR)

        vat_factor = 1 + c.vat_pct
        return (required_before_fees * vat_factor + c.processor_fixed_local) / max(
            vat_factor * (1 - c.processor_pct), MIN_DENOMINATOR
        )

    def compute_breakdown(self, product: ProductInput) -> PricingBreakdown:
        """
        Calcula o breakdown completo e o preço final ao consumidor.

        A ordem dos passos importa: cada valor alimenta o seguinte.

        Args:
            product: Item ou agregado de pedido

        Returns:
            PricingBreakdown com todos os intermediários

        Raises:
            InvalidInputError: Preço/peso negativos ou moeda sem câmbio
        """
        self.validate_product(product)
        c = self.config

        # 1-3) Conversão de moeda, spread de câmbio e comissão da marca
        fx_rate = self.resolve_fx_rate(product.currency)
        base_local = product.product_price * fx_rate
        fx_cost = base_local * c.fx_fee_pct
        brand_fee = base_local * c.brand_commission_pct

        # 4-5) Peso cobrável e frete internacional
        real_weight_kg, volumetric_kg, chargeable_kg = self.chargeable_weight(product)
        intl_rate_per_kg = self.shipping.get_rate_per_kg(chargeable_kg, c)
        intl_ship = self.shipping.get_shipping_cost(chargeable_kg, c)

        # 6) Alfândega: tudo ou nada acima do limite (de minimis), sem alíquota marginal
        declared_usd = product.product_price * (fx_rate / c.fx_rates["USD"])
        duty_base = base_local + (intl_ship if c.duties_base_includes_shipping else 0.0)
        customs_local = duty_base * c.customs_pct if declared_usd > c.customs_threshold_usd else 0.0

        # 7-8) IVA de importação não recuperável e buffer de volatilidade
        import_vat_local = 0.0 if c.import_vat_recoverable else (base_local + c.fixed_fees_local) * c.vat_pct
        buffer_local = (base_local + intl_ship) * c.buffer_pct

        # 9) Custo total sem IVA
        cost_ex_vat = (
            base_local + fx_cost + brand_fee + intl_ship + c.fixed_fees_local
            + customs_local + import_vat_local + buffer_local
        )

        # 10) Lucro exigido; o piso absoluto prevalece
        required_profit = self.required_profit(cost_ex_vat, base_local)
        required_before_fees = max(cost_ex_vat + required_profit, cost_ex_vat + c.min_profit_floor_local)

        # 11-12) Inversão da taxa do processador e preço bruto
        price_ex_vat = self.invert_processor_fee(required_before_fees)
        price_gross = price_ex_vat * (1 + c.vat_pct)

        # 13-15) Frete doméstico (grátis a partir do limite, inclusive) e arredondamento
        domestic_charge = 0.0 if price_gross >= c.free_shipping_threshold_local else c.domestic_ship_local
        final_pre_round = price_gross + domestic_charge
        final_price_local = apply_rounding(final_pre_round, c.rounding_policy)

        # 16) Taxa e lucro efetivos, recalculados sobre os preços reais
        fee_base = price_gross if c.processor_fee_applies_to_gross else price_ex_vat
        processor_fees = fee_base * c.processor_pct + c.processor_fixed_local
        net_profit = price_ex_vat - processor_fees - cost_ex_vat
        profit_pct_of_final = net_profit / final_price_local if final_price_local > 0 else 0.0

        logger.debug(
            f"Breakdown {product.currency} {product.product_price:.2f} / {product.weight_kg:.2f} kg -> "
            f"{final_price_local:.2f} {c.local_currency} (lucro {net_profit:.2f})"
        )

        return PricingBreakdown(
            currency=product.currency,
            local_currency=c.local_currency,
            fx_rate=fx_rate,
            base_local=base_local,
            fx_cost=fx_cost,
            brand_fee=brand_fee,
            real_weight_kg=real_weight_kg,
            volumetric_kg=volumetric_kg,
            chargeable_kg=chargeable_kg,
            intl_rate_per_kg=intl_rate_per_kg,
            intl_ship=intl_ship,
            declared_usd=declared_usd,
            duty_base=duty_base,
            customs_local=customs_local,
            import_vat_local=import_vat_local,
            fixed_fees_local=c.fixed_fees_local,
            buffer_local=buffer_local,
            cost_ex_vat=cost_ex_vat,
            required_profit=required_profit,
            required_before_fees=required_before_fees,
            price_ex_vat=price_ex_vat,
            price_gross=price_gross,
            domestic_charge=domestic_charge,
            final_pre_round=final_pre_round,
            final_price_local=final_price_local,
            processor_fees=processor_fees,
            net_profit=net_profit,
            profit_pct_of_final=profit_pct_of_final,
            vat_pct=c.vat_pct,
            processor_pct=c.processor_pct,
            processor_fixed_local=c.processor_fixed_local,
            processor_fee_applies_to_gross=c.processor_fee_applies_to_gross,
            domestic_ship_local=c.domestic_ship_local,
            rounding_policy=c.rounding_policy,
            shipping_rate_strategy=c.shipping_rate_strategy,
        )

    def _describe_shipping(self, breakdown: PricingBreakdown) -> str:
        # a estratégia vem do snapshot, não da configuração atual
        strategy = ShippingRateStrategyFactory.get(breakdown.shipping_rate_strategy)
        note = strategy.describe(self.config)
        if breakdown.intl_rate_per_kg is not None:
            note += f" | aplicado {breakdown.intl_rate_per_kg:.2f}/kg"
        return note

    def describe(self, breakdown: PricingBreakdown) -> BreakdownReport:
        """
        Retorna o breakdown em linhas para exibição (drawer do pedido, preview).
        """
        cur = breakdown.local_currency

        steps = [
            {"label": f"Preço do produto ({breakdown.currency} x {breakdown.fx_rate:.4f})", "value": breakdown.base_local},
            {"label": "Spread de câmbio", "value": breakdown.fx_cost},
            {"label": "Comissão da marca", "value": breakdown.brand_fee},
            {"label": f"Frete internacional ({breakdown.chargeable_kg:g} kg cobráveis)", "value": breakdown.intl_ship},
            {"label": f"Alfândega (declarado USD {breakdown.declared_usd:.2f})", "value": breakdown.customs_local},
            {"label": "IVA de importação", "value": breakdown.import_vat_local},
            {"label": "Taxas fixas", "value": breakdown.fixed_fees_local},
            {"label": "Buffer", "value": breakdown.buffer_local},
            {"label": "Custo total (sem IVA)", "value": breakdown.cost_ex_vat},
            {"label": "Lucro exigido", "value": breakdown.required_before_fees - breakdown.cost_ex_vat},
            {"label": "Preço sem IVA", "value": breakdown.price_ex_vat},
            {"label": f"Preço com IVA ({breakdown.vat_pct * 100:.0f}%)", "value": breakdown.price_gross},
            {"label": "Frete doméstico", "value": breakdown.domestic_charge},
            {"label": f"PREÇO FINAL ({breakdown.rounding_policy.value})", "value": breakdown.final_price_local},
            {"label": "Taxa do processador", "value": breakdown.processor_fees},
            {"label": "Lucro líquido", "value": breakdown.net_profit},
        ]

        notes = [
            f"Moeda: {breakdown.currency} -> {cur}",
            self._describe_shipping(breakdown),
            f"Peso real {breakdown.real_weight_kg:.2f} kg | volumétrico {breakdown.volumetric_kg:.2f} kg",
            f"Lucro sobre o preço final: {breakdown.profit_pct_of_final * 100:.1f}%",
        ]
        if breakdown.domestic_charge == 0 and breakdown.domestic_ship_local > 0:
            notes.append("Frete doméstico grátis (limite atingido)")

        return BreakdownReport(steps=steps, notes=notes)


def compute_breakdown(config: PricingConfiguration, product: ProductInput) -> PricingBreakdown:
    """Calcula o breakdown de landed cost para um item (ver LandedCostCalculator)"""
    return LandedCostCalculator(config).compute_breakdown(product)


def describe_breakdown(breakdown: PricingBreakdown, config: Optional[PricingConfiguration] = None) -> BreakdownReport:
    if config is None:
        config = PricingConfiguration(shipping_rate_strategy=breakdown.shipping_rate_strategy)
    return LandedCostCalculator(config).describe(breakdown)
