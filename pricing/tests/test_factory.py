import pytest
from pricing import PricingConfiguration, ShippingRateStrategyFactory
from pricing.interface import IShippingRateStrategy, ShippingRateStrategyName


def test_factory_returns_correct_strategy_for_flat_per_kg():
    """Testa se Factory retorna a estratégia de tarifa única"""
    strategy = ShippingRateStrategyFactory.get("flat-per-kg")
    assert strategy is not None
    assert isinstance(strategy, IShippingRateStrategy)
    assert strategy.name == "flat-per-kg"


def test_factory_returns_correct_strategy_for_all_names():
    """Testa se Factory retorna estratégias para todos os nomes suportados"""
    for name in ["flat-per-kg", "tiered-by-weight"]:
        strategy = ShippingRateStrategyFactory.get(name)
        assert isinstance(strategy, IShippingRateStrategy)
        assert strategy.name == name


def test_factory_accepts_enum():
    """Testa se Factory aceita o enum da configuração"""
    strategy = ShippingRateStrategyFactory.get(ShippingRateStrategyName.TIERED_BY_WEIGHT)
    assert strategy.name == "tiered-by-weight"


def test_factory_raises_error_for_unsupported_strategy():
    """Testa se Factory levanta erro para estratégia não suportada"""
    with pytest.raises(ValueError) as exc_info:
        ShippingRateStrategyFactory.get("por_volume")

    assert "não suportada" in str(exc_info.value)


def test_factory_is_case_insensitive():
    """Testa se Factory é case-insensitive"""
    s1 = ShippingRateStrategyFactory.get("FLAT-PER-KG")
    s2 = ShippingRateStrategyFactory.get(" Flat-Per-Kg ")

    assert s1.name == s2.name == "flat-per-kg"


def test_factory_get_supported_strategies():
    """Testa se get_supported_strategies retorna lista correta"""
    names = ShippingRateStrategyFactory.get_supported_strategies()

    assert isinstance(names, list)
    assert len(names) == 2
    assert "flat-per-kg" in names
    assert "tiered-by-weight" in names


def test_factory_is_supported():
    """Testa método is_supported"""
    assert ShippingRateStrategyFactory.is_supported("flat-per-kg") is True
    assert ShippingRateStrategyFactory.is_supported("TIERED-BY-WEIGHT") is True
    assert ShippingRateStrategyFactory.is_supported("por_volume") is False


def test_flat_strategy_uses_configured_rate():
    """Testa se a tarifa única vem da configuração"""
    config = PricingConfiguration(international_rate_per_kg=80)
    strategy = ShippingRateStrategyFactory.get("flat-per-kg")

    assert strategy.get_rate_per_kg(2.5, config) == 80
    assert strategy.get_shipping_cost(2.5, config) == pytest.approx(200.0)


def test_tiered_strategy_band_edges():
    """Testa se o início de cada faixa já usa a tarifa da faixa"""
    config = PricingConfiguration()
    strategy = ShippingRateStrategyFactory.get("tiered-by-weight")

    assert strategy.get_rate_per_kg(0.5, config) == 55
    assert strategy.get_rate_per_kg(2.5, config) == 55
    assert strategy.get_rate_per_kg(3.0, config) == 42
    assert strategy.get_rate_per_kg(4.5, config) == 42
    assert strategy.get_rate_per_kg(5.0, config) == 32
    assert "escalonado" in strategy.describe(config)


def test_tiered_strategy_with_custom_tiers():
    """Testa faixas customizadas (fora de ordem na configuração)"""
    config = PricingConfiguration(weight_tiers=[
        {"min_kg": 2, "rate_per_kg": 40},
        {"min_kg": 0, "rate_per_kg": 60},
    ])
    strategy = ShippingRateStrategyFactory.get("tiered-by-weight")

    assert strategy.get_rate_per_kg(1.0, config) == 60
    assert strategy.get_rate_per_kg(2.0, config) == 40
