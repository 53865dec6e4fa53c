from datetime import date

import pandas as pd

from padaria.infra.repositories import (
    ClienteRepo,
    CustoFixoRepo,
    CustoVariavelRepo,
    EntregaRepo,
    GiroPersonalizadoRepo,
    PrecoCategoriaRepo,
    ProdutoRepo,
)
from padaria.usecases.calcular_dre import run_faturamento
from padaria.usecases.importar_dados import (
    run_importar_clientes,
    run_importar_custos,
    run_importar_entregas,
    run_importar_giros_categoria,
    run_importar_precos,
    run_importar_produtos,
)

REFERENCIA = date(2025, 3, 12)


def _xlsx(tmp_path, nome, dados):
    path = tmp_path / nome
    pd.DataFrame(dados).to_excel(path, index=False)
    return str(path)


def test_importar_clientes_entregas_e_custos(tmp_path):
    db = str(tmp_path / "import.sqlite")

    clientes = _xlsx(tmp_path, "clientes.xlsx", {
        "Código": ["A", "B"],
        "Nome": ["Mercado A", "Loja B"],
        "Status": ["Ativo", "Fechado"],
        "QP": [40, 10],
    })
    res = run_importar_clientes(clientes, db_path=db)
    assert res["linhas_lidas"] == 2
    assert res["linhas_gravadas"] == 1
    assert [c["id"] for c in ClienteRepo(db).get_all()] == ["A"]

    entregas = _xlsx(tmp_path, "entregas.xlsx", {
        "Cliente": ["A", "A", "Z"],
        "Data": ["2025-03-04", "2025-03-04", "2025-03-04"],
        "Produto": ["P1", "P2", "P1"],
        "Quantidade": [30, 10, 5],
    })
    res = run_importar_entregas(entregas, db_path=db)
    assert res["linhas_gravadas"] == 1
    assert res["ignoradas"] == 1
    gravadas = EntregaRepo(db).get_all()
    assert len(gravadas) == 1
    assert gravadas[0]["quantidade"] == 40
    assert gravadas[0]["itens"] == [
        {"produto_id": "P1", "quantidade": 30},
        {"produto_id": "P2", "quantidade": 10},
    ]

    custos = _xlsx(tmp_path, "custos.xlsx", {
        "Descrição": ["Aluguel", "Energia", "Comissão"],
        "Valor": [1500, 300, None],
        "Frequência": ["mensal", "quinzenal", None],
        "Percentual": [None, None, 3],
    })
    res = run_importar_custos(custos, db_path=db)
    assert res["fixos"] == 1
    assert res["variaveis"] == 1
    assert res["ignoradas"] == 1
    assert CustoFixoRepo(db).get_all()[0]["nome"] == "Aluguel"
    assert CustoVariavelRepo(db).get_all()[0]["percentual_faturamento"] == 3.0


def test_importar_produtos_ignora_categoria_nao_cadastrada(db_path, tmp_path):
    produtos = _xlsx(tmp_path, "produtos.xlsx", {
        "Código": ["P3", "P4", "P5"],
        "Nome": ["Calabresa 1kg", "Misterioso", "Avulso"],
        "Categoria": [1, 9, None],
        "Custo Unitário": ["4,50", "1", None],
    })
    res = run_importar_produtos(produtos, db_path=db_path)
    assert res["linhas_lidas"] == 3
    assert res["linhas_gravadas"] == 2
    por_id = {p["id"]: p for p in ProdutoRepo(db_path).get_all()}
    assert por_id["P3"]["categoria_id"] == 1
    assert por_id["P3"]["custo_unitario"] == 4.5
    assert por_id["P5"]["categoria_id"] is None
    assert "P4" not in por_id


def test_importar_precos_altera_faturamento(db_path, tmp_path):
    precos = _xlsx(tmp_path, "precos.xlsx", {
        "Cliente": ["A", "Z", "A"],
        "Categoria": [1, 1, 9],
        "Preço Unitário": ["12,00", "50", "50"],
    })
    res = run_importar_precos(precos, db_path=db_path)
    assert res["linhas_gravadas"] == 1
    assert res["ignoradas"] == 2
    assert {"cliente_id": "A", "categoria_id": 1, "preco_unitario": 12.0} in PrecoCategoriaRepo(db_path).get_all()

    linha_a = next(l for l in run_faturamento(db_path, REFERENCIA) if l["cliente_id"] == "A")
    assert linha_a["fonte_preco"] == "personalizado"
    assert linha_a["faturamento_semanal"] == 40 * 12.0


def test_importar_giros_categoria_sobrepoe_giro_do_cliente(db_path, tmp_path):
    giros = _xlsx(tmp_path, "giros.xlsx", {
        "Cliente": ["A", "A", "Z"],
        "Categoria": [1, 2, 1],
        "Giro Semanal": [55, -3, 10],
    })
    res = run_importar_giros_categoria(giros, db_path=db_path)
    assert res["linhas_lidas"] == 2  # giro negativo descartado na leitura
    assert res["linhas_gravadas"] == 1
    assert GiroPersonalizadoRepo(db_path).get_all() == [
        {"cliente_id": "A", "categoria_id": 1, "giro_semanal": 55}
    ]

    linha_a = next(l for l in run_faturamento(db_path, REFERENCIA) if l["cliente_id"] == "A")
    assert linha_a["giro_semanal"] == 55
