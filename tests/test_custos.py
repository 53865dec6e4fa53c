from math import isclose

import pytest

from padaria.domain.custos import parse_frequencia, valor_mensal
from padaria.domain.models import Frequencia


def test_semanal_e_anual():
    assert valor_mensal(100, "semanal") == 400
    assert isclose(valor_mensal(1200, "anual"), 100)


def test_demais_frequencias():
    assert valor_mensal(250, Frequencia.MENSAL) == 250
    assert isclose(valor_mensal(300, "trimestral"), 100)
    assert isclose(valor_mensal(600, "semestral"), 100)
    assert valor_mensal(80, "por-producao") == 80


def test_parse_frequencia_aceita_variacoes():
    assert parse_frequencia("Semanal") == Frequencia.SEMANAL
    assert parse_frequencia("Por Produção") == Frequencia.POR_PRODUCAO
    assert parse_frequencia("por_producao") == Frequencia.POR_PRODUCAO
    assert parse_frequencia(None) == Frequencia.MENSAL
    assert parse_frequencia("  ") == Frequencia.MENSAL


def test_parse_frequencia_desconhecida():
    with pytest.raises(ValueError):
        parse_frequencia("diária")


def test_valor_nulo_vale_zero():
    assert valor_mensal(None, "mensal") == 0.0
