"""
Precificação de pedidos: agrega os itens do pedido em um único ProductInput
(preço somado, peso somado) e calcula o breakdown que é salvo junto ao pedido.
"""
import math
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from pricing.calculator import compute_breakdown
from pricing.exceptions import InvalidInputError
from pricing.interface import PricingBreakdown, PricingConfiguration, ProductInput

DEFAULT_ITEM_WEIGHT_KG = 0.35

# Loja de origem -> moeda cobrada
SITE_CURRENCIES: Dict[str, str] = {
    "us": "USD",
    "eu": "EUR",
    "uk": "GBP",
}


class OrderLine(BaseModel):
    """Item do pedido, no preço e moeda da loja de origem"""
    original_price: float = Field(ge=0, allow_inf_nan=False)
    quantity: int = Field(1, ge=1)
    weight_kg: Optional[float] = Field(None, ge=0, allow_inf_nan=False)


class Order(BaseModel):
    order_id: str
    site: str = "us"
    items: List[OrderLine] = Field(default_factory=list)
    placed_at: Optional[datetime] = None
    refunds_and_adjustments_ex_vat: float = 0.0


def currency_for_site(site: str) -> str:
    """
    Moeda da loja de origem.

    Raises:
        InvalidInputError: Se a loja não for conhecida
    """
    currency = SITE_CURRENCIES.get((site or "").lower().strip())
    if currency is None:
        supported = ", ".join(SITE_CURRENCIES.keys())
        raise InvalidInputError(f"Loja '{site}' não suportada. Lojas disponíveis: {supported}")
    return currency


def aggregate_order_input(order: Order, default_item_weight_kg: float = DEFAULT_ITEM_WEIGHT_KG) -> ProductInput:
    """
    Agrega os itens do pedido em um único ProductInput.

    Itens sem peso informado usam default_item_weight_kg.

    Cada item é validado isoladamente antes da soma, para que um valor
    negativo não seja compensado pelos demais itens.

    Raises:
        InvalidInputError: Pedido sem itens, item com preço/peso inválido ou loja desconhecida
    """
    if not order.items:
        raise InvalidInputError(f"Pedido {order.order_id} não tem itens")

    errors = []
    for index, item in enumerate(order.items):
        weight = item.weight_kg if item.weight_kg is not None else default_item_weight_kg
        if not math.isfinite(item.original_price) or item.original_price < 0:
            errors.append(f"item {index}: preço inválido ({item.original_price})")
        if not math.isfinite(weight) or weight < 0:
            errors.append(f"item {index}: peso inválido ({weight})")
    if errors:
        raise InvalidInputError(f"Pedido {order.order_id} inválido: {'; '.join(errors)}")

    total_price = sum(item.original_price * item.quantity for item in order.items)
    total_weight = sum(
        (item.weight_kg if item.weight_kg is not None else default_item_weight_kg) * item.quantity
        for item in order.items
    )

    return ProductInput(
        currency=currency_for_site(order.site),
        product_price=total_price,
        weight_kg=total_weight,
    )


def price_order(
        config: PricingConfiguration,
        order: Order,
        default_item_weight_kg: float = DEFAULT_ITEM_WEIGHT_KG,
) -> PricingBreakdown:
    """Calcula o breakdown do pedido agregado (salvo como snapshot do pedido)"""
    return compute_breakdown(config, aggregate_order_input(order, default_item_weight_kg))
