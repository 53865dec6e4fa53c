from datetime import date, timedelta
from math import isclose

from padaria.domain.giro import GiroSemanal, OrigemGiro, inicio_semana
from padaria.domain.models import (
    CategoriaProduto,
    Cliente,
    Entrega,
    GiroPersonalizadoCategoria,
    GrupoCategoria,
    ItemEntrega,
    PrecoCategoriaCliente,
    ProdutoFinal,
    StatusCliente,
)
from padaria.domain.precificacao import (
    calcular_faturamento_detalhado,
    categorias_inexistentes,
    entregas_sem_itens,
    faturamento_semanal_total,
    participacao_categorias,
    preco_aplicado,
)

REF = date(2025, 3, 12)
TERCA_PASSADA = inicio_semana(REF) - timedelta(days=6)

CATEGORIAS = [
    CategoriaProduto(1, "Pão de queijo 1kg", GrupoCategoria.REVENDA_PADRAO, preco_padrao=20.0),
    CategoriaProduto(2, "Pão de queijo food service", GrupoCategoria.FOOD_SERVICE, preco_padrao=30.0),
]
PRODUTOS = [ProdutoFinal("P1", "Tradicional 1kg", 1), ProdutoFinal("P2", "FS 3kg", 2)]


def _giro(cliente_id, valor):
    return GiroSemanal(cliente_id, valor, 1, OrigemGiro.HISTORICO_PARCIAL, 0, 0)


def test_preco_personalizado_tem_precedencia():
    precos = {("A", 1): PrecoCategoriaCliente("A", 1, 18.5)}
    assert preco_aplicado("A", CATEGORIAS[0], precos).preco_unitario == 18.5
    assert preco_aplicado("A", CATEGORIAS[0], precos).fonte == "personalizado"
    assert preco_aplicado("B", CATEGORIAS[0], precos).preco_unitario == 20.0


def test_preco_zero_usa_padrao():
    precos = {("A", 1): PrecoCategoriaCliente("A", 1, 0.0)}
    p = preco_aplicado("A", CATEGORIAS[0], precos)
    assert p.fonte == "padrao"
    assert p.preco_unitario == 20.0


def test_participacao_por_itens_entregues():
    entregas = [
        Entrega("A", TERCA_PASSADA, 40, (ItemEntrega("P1", 30), ItemEntrega("P2", 10))),
        Entrega("A", TERCA_PASSADA, 5),  # sem itens: ignorada
    ]
    part = participacao_categorias(entregas, {p.id: p for p in PRODUTOS}, REF)
    assert isclose(part[1], 0.75)
    assert isclose(part[2], 0.25)


def test_faturamento_reparte_giro_pelas_categorias():
    cli = Cliente("A", "Mercado A", categorias_habilitadas=(1, 2))
    entregas = [Entrega("A", TERCA_PASSADA, 40, (ItemEntrega("P1", 30), ItemEntrega("P2", 10)))]
    linhas = calcular_faturamento_detalhado(
        [cli], CATEGORIAS, [], {"A": _giro("A", 40)}, REF, entregas=entregas, produtos=PRODUTOS
    )
    por_cat = {l.categoria_id: l for l in linhas}
    assert isclose(por_cat[1].giro_semanal, 30.0)
    assert isclose(por_cat[2].giro_semanal, 10.0)
    assert isclose(faturamento_semanal_total(linhas), 30 * 20.0 + 10 * 30.0)
    assert por_cat[2].grupo == GrupoCategoria.FOOD_SERVICE


def test_sem_itens_divide_igualmente_e_respeita_giro_por_categoria():
    cli = Cliente("A", "Mercado A", categorias_habilitadas=(1, 2))
    linhas = calcular_faturamento_detalhado(
        [cli], CATEGORIAS, [], {"A": _giro("A", 20)}, REF,
        giros_categoria=[GiroPersonalizadoCategoria("A", 2, 7)],
    )
    por_cat = {l.categoria_id: l.giro_semanal for l in linhas}
    assert por_cat == {1: 10.0, 2: 7.0}


def test_somente_clientes_ativos_e_categorias_existentes():
    clientes = [
        Cliente("A", "Ativo", categorias_habilitadas=(1, 99)),
        Cliente("B", "Standby", status=StatusCliente.STANDBY, categorias_habilitadas=(1,)),
    ]
    giros = {"A": _giro("A", 10), "B": _giro("B", 10)}
    linhas = calcular_faturamento_detalhado(clientes, CATEGORIAS, [], giros, REF)
    assert [(l.cliente_id, l.categoria_id) for l in linhas] == [("A", 1)]
    assert isclose(linhas[0].faturamento_semanal, 200.0)


def test_entregas_sem_itens_so_na_janela():
    entregas = [
        Entrega("A", TERCA_PASSADA, 40, (ItemEntrega("P1", 40),)),
        Entrega("A", TERCA_PASSADA, 5),
        Entrega("A", REF, 7),  # semana corrente
        Entrega("A", TERCA_PASSADA, 3, tipo="retorno"),
    ]
    assert entregas_sem_itens(entregas, REF) == [Entrega("A", TERCA_PASSADA, 5)]


def test_categorias_inexistentes_de_clientes_ativos():
    clientes = [
        Cliente("A", "Mercado A", categorias_habilitadas=(1, 7)),
        Cliente("Z", "Fechado", status=StatusCliente.INATIVO, categorias_habilitadas=(9,)),
    ]
    assert categorias_inexistentes(clientes, CATEGORIAS) == [("A", 7)]
