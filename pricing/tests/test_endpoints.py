"""
Testes de integração para endpoints de pricing.

Para executar:
    pytest pricing/tests/test_endpoints.py -v
"""
import pytest
from fastapi.testclient import TestClient
from app import app

client = TestClient(app)

EXAMPLE_PRODUCT = {"currency": "EUR", "product_price": 50, "weight_kg": 0.4}


def test_pricing_breakdown_success():
    """Testa endpoint POST /pricing/breakdown com dados válidos"""
    response = client.post("/pricing/breakdown", json={"product": EXAMPLE_PRODUCT})

    assert response.status_code == 200
    data = response.json()

    assert "breakdown" in data
    assert "steps" in data
    assert "notes" in data
    assert data["breakdown"]["base_local"] == pytest.approx(200.0)
    assert data["breakdown"]["final_price_local"] % 10 == 0
    assert data["breakdown"]["schema_version"] == 1


def test_pricing_breakdown_with_config_override():
    """Testa se a configuração enviada sobrescreve os defaults (preview ao vivo)"""
    response = client.post(
        "/pricing/breakdown",
        json={"config": {"rounding_policy": "none", "fx_fee_pct": 0.0}, "product": EXAMPLE_PRODUCT}
    )

    assert response.status_code == 200
    breakdown = response.json()["breakdown"]
    assert breakdown["fx_cost"] == 0.0
    assert breakdown["final_price_local"] == pytest.approx(breakdown["final_pre_round"])


def test_pricing_breakdown_unsupported_currency():
    """Testa endpoint com moeda não suportada"""
    response = client.post(
        "/pricing/breakdown",
        json={"product": {"currency": "JPY", "product_price": 1000, "weight_kg": 0.4}}
    )

    assert response.status_code == 422
    data = response.json()
    assert "supported_currencies" in data["detail"]


def test_pricing_breakdown_negative_price():
    """Testa endpoint com preço negativo"""
    response = client.post(
        "/pricing/breakdown",
        json={"product": {"currency": "USD", "product_price": -10, "weight_kg": 0.4}}
    )

    assert response.status_code == 422


def test_pricing_breakdown_invalid_config():
    """Testa endpoint com configuração inválida"""
    response = client.post(
        "/pricing/breakdown",
        json={"config": {"vat_pct": -0.1}, "product": EXAMPLE_PRODUCT}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"]


def test_pricing_policies():
    """Testa endpoint GET /pricing/policies"""
    response = client.get("/pricing/policies")

    assert response.status_code == 200
    data = response.json()

    assert "EUR" in data["supported_currencies"]
    assert "nearest10" in data["rounding_policies"]
    assert data["shipping_rate_strategies"] == ["flat-per-kg", "tiered-by-weight"]
    assert data["defaults"]["vat_pct"] == 0.18


def test_orders_price():
    """Testa endpoint POST /orders/price"""
    response = client.post(
        "/orders/price",
        json={
            "order": {
                "order_id": "BM-2001",
                "site": "uk",
                "items": [{"original_price": 25, "quantity": 2, "weight_kg": 0.3}],
            }
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert data["order_id"] == "BM-2001"
    assert data["breakdown"]["currency"] == "GBP"
    breakdown = data["breakdown"]
    # taxa do processador sobre o preço final, como no relatório de lucro
    expected_fees = breakdown["final_price_local"] * breakdown["processor_pct"] + breakdown["processor_fixed_local"]
    assert data["profit"]["processor_fees"] == pytest.approx(expected_fees)
    assert data["profit"]["net_profit"] == pytest.approx(
        breakdown["net_profit"] + breakdown["processor_fees"] - expected_fees
    )


def test_orders_price_empty_order():
    """Testa endpoint com pedido sem itens"""
    response = client.post("/orders/price", json={"order": {"order_id": "BM-2002", "items": []}})

    assert response.status_code == 422


def test_orders_price_negative_line():
    """Testa endpoint com item de preço negativo compensado por outro item"""
    response = client.post(
        "/orders/price",
        json={
            "order": {
                "order_id": "BM-2003",
                "items": [{"original_price": 100}, {"original_price": -90}],
            }
        }
    )

    assert response.status_code == 422


def test_profit_reconcile():
    """Testa endpoint POST /profit/reconcile"""
    response = client.post(
        "/profit/reconcile",
        json={
            "vat_pct": 0.18,
            "price_ex_vat": 400.0,
            "price_gross": 472.0,
            "final_price_local": 470.0,
            "processor_fee_on": "final",
            "processor_pct": 0.02,
            "processor_fixed_local": 1.0,
            "cost_ex_vat": 300.0,
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert data["processor_fees"] == pytest.approx(10.4)
    assert data["net_profit"] == pytest.approx(89.6)


def test_profit_report():
    """Testa endpoint POST /profit/report"""
    snapshot = {
        "vat_pct": 0.18,
        "price_ex_vat": 400.0,
        "price_gross": 472.0,
        "final_price_local": 470.0,
        "processor_pct": 0.02,
        "cost_ex_vat": 300.0,
    }
    response = client.post(
        "/profit/report",
        json={
            "period": "month",
            "entries": [
                {"order_id": "A", "placed_at": "2026-01-05T10:00:00", "snapshot": snapshot},
                {"order_id": "B", "placed_at": "2026-02-05T10:00:00", "snapshot": snapshot},
            ],
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert [p["period"] for p in data["periods"]] == ["2026-01", "2026-02"]
    assert data["totals"]["orders"] == 2


def test_fx_rates_not_configured(monkeypatch):
    """Testa endpoint GET /fx/rates sem URL configurada"""
    import app as app_module
    monkeypatch.setattr(app_module.settings, "fx_rates_url", "")

    response = client.get("/fx/rates")

    assert response.status_code == 503
