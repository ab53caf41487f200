"""
Reconciliação de lucro líquido a partir de um snapshot de preço persistido.

Independente da calculadora: lê apenas o snapshot achatado, para que o lucro
de pedidos antigos possa ser recalculado com premissas contábeis corrigidas
(tratamento de IVA do frete doméstico, base da taxa do processador).
"""
from typing import Any, Dict, Union

from pricing.interface import (
    PricingBreakdown,
    ProcessorFeeBase,
    ProfitResult,
    ProfitSnapshot,
)


def reconcile_profit(snapshot: Union[ProfitSnapshot, Dict[str, Any]]) -> ProfitResult:
    """
    Recalcula lucro líquido e margem de um snapshot.

    Args:
        snapshot: ProfitSnapshot (ou dict com os mesmos campos)

    Returns:
        ProfitResult com lucro, margem sobre a receita sem IVA, receita,
        taxas do processador e custos totais sem IVA
    """
    if not isinstance(snapshot, ProfitSnapshot):
        snapshot = ProfitSnapshot.model_validate(snapshot)

    vat_factor = 1 + snapshot.vat_pct

    domestic_income_ex = (
        snapshot.domestic_charge_to_customer / vat_factor
        if snapshot.domestic_vat_applies
        else snapshot.domestic_charge_to_customer
    )
    domestic_cost_ex = (
        snapshot.domestic_ship_cost_local / vat_factor
        if snapshot.domestic_cost_includes_vat
        else snapshot.domestic_ship_cost_local
    )

    revenue_ex = snapshot.price_ex_vat + domestic_income_ex

    if snapshot.processor_fee_on == ProcessorFeeBase.GROSS:
        fee_base = snapshot.price_gross
    elif snapshot.processor_fee_on == ProcessorFeeBase.FINAL:
        fee_base = snapshot.final_price_local
    else:
        fee_base = snapshot.price_ex_vat + domestic_income_ex
    processor_fees = fee_base * snapshot.processor_pct + snapshot.processor_fixed_local

    total_costs_ex = snapshot.cost_ex_vat + domestic_cost_ex + snapshot.refunds_and_adjustments_ex_vat

    net_profit = revenue_ex - processor_fees - total_costs_ex
    margin_pct = net_profit / revenue_ex if revenue_ex > 0 else 0.0

    return ProfitResult(
        net_profit=net_profit,
        margin_pct=margin_pct,
        revenue_ex_vat=revenue_ex,
        processor_fees=processor_fees,
        total_costs_ex_vat=total_costs_ex,
    )


def calculator_fee_base(breakdown: PricingBreakdown) -> ProcessorFeeBase:
    """Base da taxa do processador usada pela calculadora no momento do preço (gross ou net)"""
    return ProcessorFeeBase.GROSS if breakdown.processor_fee_applies_to_gross else ProcessorFeeBase.NET


def snapshot_from_breakdown(breakdown: PricingBreakdown, **overrides: Any) -> ProfitSnapshot:
    """
    Monta o snapshot de reconciliação a partir de um breakdown salvo.

    Defaults (premissas das telas de pedidos): IVA incide sobre o frete cobrado,
    custo doméstico inclui IVA e é igual ao valor cobrado do cliente, sem
    reembolsos, e a taxa do processador incide sobre o preço final cobrado.
    Qualquer campo pode ser sobrescrito para recalcular com outras premissas;
    processor_fee_on=calculator_fee_base(breakdown) reproduz o lucro da calculadora.
    """
    fields = {
        "vat_pct": breakdown.vat_pct,
        "domestic_vat_applies": True,
        "domestic_charge_to_customer": breakdown.domestic_charge,
        "domestic_cost_includes_vat": True,
        "domestic_ship_cost_local": breakdown.domestic_charge,
        "price_ex_vat": breakdown.price_ex_vat,
        "processor_fee_on": ProcessorFeeBase.FINAL,
        "price_gross": breakdown.price_gross,
        "final_price_local": breakdown.final_price_local,
        "processor_pct": breakdown.processor_pct,
        "processor_fixed_local": breakdown.processor_fixed_local,
        "cost_ex_vat": breakdown.cost_ex_vat,
        "refunds_and_adjustments_ex_vat": 0.0,
    }
    fields.update(overrides)
    return ProfitSnapshot.model_validate(fields)
