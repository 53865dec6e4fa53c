import sqlite3
from datetime import date

import pytest

import padaria.infra.fonte_dados as fonte_mod
from padaria.domain.models import GrupoCategoria, StatusCliente
from padaria.infra.fonte_dados import FonteDados, SnapshotPadaria


class _RepoFixo:
    def __init__(self, rows):
        self.rows = rows

    def get_all(self):
        return list(self.rows)


class _RepoQuebrado:
    def get_all(self):
        raise sqlite3.OperationalError("no such table: clientes")


def _fonte(**overrides):
    repos = {
        nome: _RepoFixo([])
        for nome in (
            "clientes", "categorias", "produtos", "precos", "giros_categoria",
            "entregas", "custos_fixos", "custos_variaveis", "sabores",
        )
    }
    repos.update(overrides)
    return FonteDados(**repos)


@pytest.fixture
def avisos(monkeypatch):
    registrados = []
    monkeypatch.setattr(
        fonte_mod, "log_registro_ignorado",
        lambda origem, motivo, registro=None: registrados.append((origem, motivo)),
    )
    monkeypatch.setattr(
        fonte_mod, "log_system_event",
        lambda event, details=None, level="info": registrados.append((event, level)),
    )
    return registrados


def test_erro_de_banco_vira_tupla_vazia(avisos):
    fonte = _fonte(
        clientes=_RepoQuebrado(),
        categorias=_RepoFixo([{"id": 1, "nome": "Revenda", "grupo": "revenda padrão", "preco_padrao": 20}]),
    )
    snap = fonte.carregar()
    assert snap.clientes == ()
    assert snap.categorias[0].grupo == GrupoCategoria.REVENDA_PADRAO
    assert ("falha_leitura_tabela", "warning") in avisos


def test_linhas_malformadas_sao_puladas(avisos):
    entregas = [
        {"cliente_id": "A", "data": "2025-03-04", "quantidade": 10, "itens": [{"produto_id": "P1", "quantidade": 10}]},
        {"cliente_id": "A", "data": None, "quantidade": 5, "itens": []},
        {"cliente_id": "A", "data": "2025-03-05", "quantidade": -3, "itens": []},
        {"cliente_id": "A", "data": "2025-03-06", "quantidade": 4, "itens": "{quebrado"},
    ]
    snap = _fonte(entregas=_RepoFixo(entregas)).carregar(["entregas"])
    assert len(snap.entregas) == 1
    assert snap.entregas[0].data == date(2025, 3, 4)
    assert snap.entregas[0].itens[0].produto_id == "P1"
    assert sum(1 for a in avisos if a[0] == "entregas") == 3


def test_status_desconhecido_e_pulado(avisos):
    clientes = [
        {"id": "1", "nome": "Mercado", "status_cliente": "Ativo", "categorias_habilitadas": [1, 2]},
        {"id": "2", "nome": "Estranho", "status_cliente": "Fechado"},
    ]
    snap = _fonte(clientes=_RepoFixo(clientes)).carregar(["clientes"])
    assert [c.id for c in snap.clientes] == ["1"]
    assert snap.clientes[0].status == StatusCliente.ATIVO
    assert snap.clientes[0].categorias_habilitadas == (1, 2)


def test_quantidade_derivada_dos_itens():
    entregas = [{"cliente_id": "A", "data": "2025-03-04", "quantidade": None,
                 "itens": [{"produto_id": "P1", "quantidade": 3}, {"produto_id": "P2", "quantidade": 4}]}]
    snap = _fonte(entregas=_RepoFixo(entregas)).carregar(["entregas"])
    assert snap.entregas[0].quantidade == 7


def test_snapshot_imutavel_e_contagens():
    snap = _fonte(sabores=_RepoFixo([{"id": 1, "nome": "Tradicional", "percentual_padrao": 100, "ativo": 1}])).carregar()
    assert isinstance(snap, SnapshotPadaria)
    assert snap.contagens()["sabores"] == 1
    with pytest.raises(Exception):
        snap.sabores = ()
