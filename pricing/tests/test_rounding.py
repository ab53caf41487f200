import pytest
from pricing.interface import RoundingPolicy
from pricing.rounding import apply_rounding, round_half_up, round_psychological


def test_nearest10_rounds_half_up():
    """Testa nearest10 com empate subindo"""
    assert apply_rounding(1234.5, RoundingPolicy.NEAREST_10) == 1230
    assert apply_rounding(1235, RoundingPolicy.NEAREST_10) == 1240
    assert apply_rounding(4.99, "nearest10") == 0


def test_nearest5():
    """Testa nearest5"""
    assert apply_rounding(12.4, "nearest5") == 10
    assert apply_rounding(12.5, "nearest5") == 15
    assert apply_rounding(17.6, "nearest5") == 20


def test_ceil10_always_rounds_up():
    """Testa ceil10"""
    assert apply_rounding(1201, "ceil10") == 1210
    assert apply_rounding(1200, "ceil10") == 1200
    assert apply_rounding(0.1, "ceil10") == 10


def test_none_keeps_value():
    """Testa se none devolve o valor intacto"""
    assert apply_rounding(12.345, "none") == 12.345


def test_integer_rounding_is_half_up():
    """Testa se o arredondamento padrão sobe no .5 (sem banker's rounding)"""
    assert apply_rounding(12.5, "integer") == 13
    assert apply_rounding(13.5, "integer") == 14
    assert round_half_up(2.5) == 3


def test_unknown_policy_falls_back_to_integer():
    """Testa se política desconhecida cai no inteiro mais próximo"""
    assert apply_rounding(12.6, "nearest7") == 13


def test_psychological_rounding_bands():
    """Testa as três faixas do arredondamento psicológico"""
    assert round_psychological(183) == pytest.approx(189.90)
    assert round_psychological(352) == 359
    assert round_psychological(455) == 459
    assert round_psychological(452) == 450
    assert apply_rounding(183, "psychological") == pytest.approx(189.90)
