from datetime import date

import pytest

from padaria.domain.models import Cliente, Sabor, StatusCliente
from padaria.domain.planejamento import (
    delta_efetivo,
    delta_fora_tolerancia,
    distribuir_sabores,
    formas_necessarias,
    giro_semanal_pdv,
    novo_qp,
    plano_producao,
    previsao_giro_mensal,
    previsao_giro_semanal,
    validar_percentuais_sabores,
)

SABORES = [
    Sabor(1, "Tradicional", 50.0),
    Sabor(2, "Calabresa", 30.0),
    Sabor(3, "Ervas", 20.0),
    Sabor(4, "Descontinuado", 10.0, ativo=False),
]


def test_distribuicao_pelo_maior_resto_fecha_o_total():
    dist = distribuir_sabores(SABORES, 101)
    assert sum(dist.values()) == 101
    assert 4 not in dist
    # 50.5 / 30.3 / 20.2: a unidade que sobra vai para o Tradicional
    assert dist == {1: 51, 2: 30, 3: 20}


def test_distribuicao_sem_unidades():
    assert distribuir_sabores(SABORES, 0) == {1: 0, 2: 0, 3: 0}


def test_validar_percentuais():
    assert validar_percentuais_sabores(SABORES)
    assert not validar_percentuais_sabores([Sabor(1, "Único", 90.0)])


def test_delta_e_tolerancia():
    assert delta_efetivo(date(2025, 3, 17), date(2025, 3, 10)) == 7
    assert not delta_fora_tolerancia(8, 7)
    assert delta_fora_tolerancia(10, 7)
    assert delta_fora_tolerancia(5, 7)


def test_giro_pdv_e_novo_qp():
    assert giro_semanal_pdv(60, 14) == 30.0
    assert giro_semanal_pdv(60, 0) == 0.0
    assert novo_qp(30.0, 14) == 60
    assert novo_qp(10.0, 3) == 4  # 4.29


def test_formas():
    assert formas_necessarias(0) == 0
    assert formas_necessarias(40) == 1
    assert formas_necessarias(41) == 2
    assert formas_necessarias(41, capacidade_forma=50) == 1
    with pytest.raises(ValueError):
        formas_necessarias(10, capacidade_forma=0)


def test_previsao_giro():
    clientes = [
        Cliente("a", "A", quantidade_padrao=70, periodicidade_padrao=7),
        Cliente("b", "B", quantidade_padrao=30, periodicidade_padrao=14),
        Cliente("c", "C", status=StatusCliente.INATIVO, quantidade_padrao=100, periodicidade_padrao=7),
        Cliente("d", "D", quantidade_padrao=100, periodicidade_padrao=0),
    ]
    semanal = previsao_giro_semanal(clientes)
    assert semanal == 85.0
    assert previsao_giro_mensal(semanal) == 340.0


def test_plano_producao():
    linhas = plano_producao(SABORES, 100, capacidade_forma=40)
    assert [l["sabor"] for l in linhas] == ["Tradicional", "Calabresa", "Ervas"]
    assert [l["unidades"] for l in linhas] == [50, 30, 20]
    assert [l["formas"] for l in linhas] == [2, 1, 1]
