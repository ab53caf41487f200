# -*- coding: utf-8 -*-
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import settings
# Importar pricing module
from pricing import (
    InvalidConfigurationError,
    InvalidInputError,
    PricingConfiguration,
    ProductInput,
    ProfitResult,
    ProfitSnapshot,
    ShippingRateStrategyFactory,
    describe_breakdown,
    compute_breakdown,
    reconcile_profit,
    snapshot_from_breakdown,
)
from pricing.exceptions import FxRatesError
from pricing.fx_rates import get_fx_rates
from pricing.interface import ProcessorFeeBase, ProfitMode, RoundingPolicy
from pricing.orders import Order, price_order
from pricing.reporting import ProfitReport, ReportEntry, ReportPeriod, build_profit_report

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Landed Pricing API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_config(overrides: Optional[Dict[str, Any]]) -> PricingConfiguration:
    """Configuração padrão do ambiente com os campos enviados no request por cima"""
    try:
        return settings.pricing_configuration(**(overrides or {}))
    except InvalidConfigurationError as e:
        logger.warning(f"Configuração rejeitada: {e}")
        raise HTTPException(
            status_code=422,
            detail={"message": str(e), "errors": e.errors}
        )


# -----------------------------------------------------------------------------
# Pricing
# -----------------------------------------------------------------------------

class BreakdownRequest(BaseModel):
    """Request do preview: configuração (parcial, opcional) + item de exemplo"""
    config: Optional[Dict[str, Any]] = Field(None, description="Campos de PricingConfiguration a sobrescrever")
    product: ProductInput


class BreakdownResponse(BaseModel):
    breakdown: Dict[str, Any]
    steps: List[Dict[str, Any]]
    notes: Optional[List[str]] = None


@app.post("/pricing/breakdown", response_model=BreakdownResponse)
async def pricing_breakdown(request: BreakdownRequest):
    """
    Calcula o breakdown de landed cost (preview das configurações, sem persistência).

    Raises:
        422: Configuração inválida, moeda não suportada ou preço/peso negativos
    """
    config = _resolve_config(request.config)

    try:
        breakdown = compute_breakdown(config, request.product)
    except InvalidInputError as e:
        logger.warning(f"Item rejeitado: {e}")
        raise HTTPException(
            status_code=422,
            detail={
                "message": str(e),
                "supported_currencies": config.supported_currencies()
            }
        )

    report = describe_breakdown(breakdown, config)

    return BreakdownResponse(
        breakdown=breakdown.model_dump(mode="json"),
        steps=report.steps,
        notes=report.notes,
    )


@app.get("/pricing/policies")
async def pricing_policies():
    """
    Lista as opções de configuração e a configuração padrão em vigor.
    """
    config = settings.pricing_configuration()

    return {
        "supported_currencies": config.supported_currencies(),
        "rounding_policies": [policy.value for policy in RoundingPolicy],
        "shipping_rate_strategies": ShippingRateStrategyFactory.get_supported_strategies(),
        "profit_modes": [mode.value for mode in ProfitMode],
        "processor_fee_bases": [base.value for base in ProcessorFeeBase],
        "defaults": config.model_dump(mode="json"),
    }


# -----------------------------------------------------------------------------
# Orders
# -----------------------------------------------------------------------------

class OrderPriceRequest(BaseModel):
    config: Optional[Dict[str, Any]] = None
    order: Order


class OrderPriceResponse(BaseModel):
    order_id: str
    breakdown: Dict[str, Any]
    profit: ProfitResult


@app.post("/orders/price", response_model=OrderPriceResponse)
async def orders_price(request: OrderPriceRequest):
    """
    Precifica o pedido agregado; o breakdown devolvido é o snapshot a salvar no pedido.
    """
    config = _resolve_config(request.config)

    try:
        breakdown = price_order(config, request.order, settings.default_item_weight_kg)
    except InvalidInputError as e:
        logger.warning(f"Pedido {request.order.order_id} rejeitado: {e}")
        raise HTTPException(status_code=422, detail={"message": str(e)})

    snapshot = snapshot_from_breakdown(
        breakdown,
        refunds_and_adjustments_ex_vat=request.order.refunds_and_adjustments_ex_vat,
    )

    return OrderPriceResponse(
        order_id=request.order.order_id,
        breakdown=breakdown.model_dump(mode="json"),
        profit=reconcile_profit(snapshot),
    )


# -----------------------------------------------------------------------------
# Profit
# -----------------------------------------------------------------------------

@app.post("/profit/reconcile", response_model=ProfitResult)
async def profit_reconcile(snapshot: ProfitSnapshot):
    """Recalcula lucro e margem de um snapshot salvo"""
    return reconcile_profit(snapshot)


class ProfitReportRequest(BaseModel):
    entries: List[ReportEntry] = Field(default_factory=list)
    period: ReportPeriod = ReportPeriod.MONTH


@app.post("/profit/report", response_model=ProfitReport)
async def profit_report(request: ProfitReportRequest):
    """Lucro por pedido e por período"""
    return build_profit_report(request.entries, request.period)


# -----------------------------------------------------------------------------
# FX
# -----------------------------------------------------------------------------

@app.get("/fx/rates")
async def fx_rates():
    """
    Cotações atuais (com cache), para preencher fx_rates na tela de câmbio.

    Raises:
        503: Endpoint de cotações não configurado
        502: Falha ao buscar ou validar as cotações
    """
    if not settings.fx_rates_url:
        raise HTTPException(
            status_code=503,
            detail={"message": "fx_rates_url não configurada"}
        )

    try:
        rates = await get_fx_rates(settings.fx_rates_url, ttl=timedelta(hours=settings.fx_rates_ttl_hours))
    except FxRatesError as e:
        raise HTTPException(status_code=502, detail={"message": str(e)})

    return {"local_currency": settings.local_currency, "rates": rates}
