"""
Relatório de lucro por pedido e por período, recalculado a partir dos
snapshots salvos via reconcile_profit.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from pricing.interface import ProfitResult, ProfitSnapshot
from pricing.reconciler import reconcile_profit

UNDATED_PERIOD = "undated"


class ReportPeriod(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


_PERIOD_FORMATS = {
    ReportPeriod.DAY: "%Y-%m-%d",
    ReportPeriod.MONTH: "%Y-%m",
    ReportPeriod.YEAR: "%Y",
}


class ReportEntry(BaseModel):
    order_id: str
    placed_at: Optional[datetime] = None
    snapshot: ProfitSnapshot


class OrderProfit(BaseModel):
    order_id: str
    period: str
    result: ProfitResult


class PeriodProfit(BaseModel):
    period: str
    orders: int = 0
    revenue_ex_vat: float = 0.0
    processor_fees: float = 0.0
    total_costs_ex_vat: float = 0.0
    net_profit: float = 0.0
    margin_pct: float = 0.0


class ProfitReport(BaseModel):
    period: ReportPeriod
    orders: List[OrderProfit] = Field(default_factory=list)
    periods: List[PeriodProfit] = Field(default_factory=list)
    totals: PeriodProfit


def period_key(placed_at: Optional[datetime], period: ReportPeriod) -> str:
    if placed_at is None:
        return UNDATED_PERIOD
    return placed_at.strftime(_PERIOD_FORMATS[period])


def _add(bucket: PeriodProfit, result: ProfitResult) -> None:
    bucket.orders += 1
    bucket.revenue_ex_vat += result.revenue_ex_vat
    bucket.processor_fees += result.processor_fees
    bucket.total_costs_ex_vat += result.total_costs_ex_vat
    bucket.net_profit += result.net_profit


def _close(bucket: PeriodProfit) -> PeriodProfit:
    bucket.margin_pct = bucket.net_profit / bucket.revenue_ex_vat if bucket.revenue_ex_vat > 0 else 0.0
    return bucket


def build_profit_report(entries: Iterable[ReportEntry], period: ReportPeriod = ReportPeriod.MONTH) -> ProfitReport:
    """
    Monta o relatório de lucro.

    Args:
        entries: Pedidos com seus snapshots (já com as premissas desejadas)
        period: Agrupamento (dia, mês ou ano)

    Returns:
        ProfitReport com linhas por pedido, totais por período (ordem
        cronológica, "undated" por último) e total geral
    """
    period = ReportPeriod(period)
    rows: List[OrderProfit] = []
    buckets: Dict[str, PeriodProfit] = {}
    totals = PeriodProfit(period="total")

    for entry in entries:
        result = reconcile_profit(entry.snapshot)
        key = period_key(entry.placed_at, period)

        rows.append(OrderProfit(order_id=entry.order_id, period=key, result=result))
        _add(buckets.setdefault(key, PeriodProfit(period=key)), result)
        _add(totals, result)

    ordered = sorted(buckets, key=lambda k: (k == UNDATED_PERIOD, k))

    return ProfitReport(
        period=period,
        orders=rows,
        periods=[_close(buckets[key]) for key in ordered],
        totals=_close(totals),
    )
