from datetime import date, timedelta

import pytest

from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import (
    CategoriaRepo,
    ClienteRepo,
    CustoFixoRepo,
    CustoVariavelRepo,
    EntregaRepo,
    PrecoCategoriaRepo,
    ProdutoRepo,
    SaborRepo,
)

# quarta-feira; semana corrente começa em 2025-03-10
REFERENCIA = date(2025, 3, 12)


def _seed(db_path: str) -> None:
    apply_migrations(db_path)
    CategoriaRepo(db_path).upsert([
        {"id": 1, "nome": "Pão de queijo 1kg", "grupo": "revenda padrão", "preco_padrao": 10.0},
        {"id": 2, "nome": "Food service 3kg", "grupo": "food service", "preco_padrao": 25.0},
    ])
    ProdutoRepo(db_path).upsert([
        {"id": "P1", "nome": "Tradicional 1kg", "categoria_id": 1},
        {"id": "P2", "nome": "Tradicional 3kg", "categoria_id": 2},
    ])
    ClienteRepo(db_path).upsert([
        {"id": "A", "nome": "Mercado A", "status_cliente": "Ativo", "quantidade_padrao": 50,
         "periodicidade_padrao": 7, "categorias_habilitadas": [1],
         "tipo_logistica": "Distribuição", "emite_nota_fiscal": 1},
        {"id": "B", "nome": "Café B", "status_cliente": "Ativo", "quantidade_padrao": 20,
         "periodicidade_padrao": 7, "categorias_habilitadas": [2], "tipo_logistica": "Própria"},
        {"id": "C", "nome": "Hotel C", "status_cliente": "Inativo", "quantidade_padrao": 100,
         "periodicidade_padrao": 7, "categorias_habilitadas": [1]},
    ])
    PrecoCategoriaRepo(db_path).upsert([{"cliente_id": "B", "categoria_id": 2, "preco_unitario": 30.0}])

    segunda = REFERENCIA - timedelta(days=REFERENCIA.weekday())
    EntregaRepo(db_path).insert_many([
        {"cliente_id": "A", "data": segunda - timedelta(weeks=i) + timedelta(days=1),
         "quantidade": 40, "itens": [{"produto_id": "P1", "quantidade": 40}]}
        for i in range(1, 13)
    ])
    CustoFixoRepo(db_path).insert_many([{"nome": "Aluguel", "valor": 1200.0, "frequencia": "mensal"}])
    CustoVariavelRepo(db_path).insert_many([
        {"nome": "Comissão", "percentual_faturamento": 5.0},
        {"nome": "Contabilidade", "valor": 600.0, "frequencia": "trimestral"},
    ])
    SaborRepo(db_path).upsert([
        {"id": 1, "nome": "Tradicional", "percentual_padrao": 60.0},
        {"id": 2, "nome": "Calabresa", "percentual_padrao": 40.0},
    ])


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "padaria_test.sqlite")
    _seed(path)
    return path
