# padaria/infra/fonte_dados.py
"""
Fonte de dados: carrega snapshots imutáveis a partir dos repositórios.

`FonteDados` recebe os repositórios por injeção (qualquer objeto com
``get_all()``) e devolve um `SnapshotPadaria` com tuplas de dataclasses
congeladas. Regras de degradação:

- erro de banco ao ler uma tabela → aviso no log e tupla vazia para
  aquela tabela; as demais continuam sendo lidas;
- linha malformada → registro pulado com aviso.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from padaria.domain.custos import parse_frequencia
from padaria.domain.models import (
    CategoriaProduto,
    Cliente,
    CustoFixo,
    CustoVariavel,
    Entrega,
    GiroPersonalizadoCategoria,
    GrupoCategoria,
    ItemEntrega,
    PrecoCategoriaCliente,
    ProdutoFinal,
    Sabor,
    StatusCliente,
)
from padaria.infra.logger import (
    log_database_operation,
    log_registro_ignorado,
    log_system_event,
)
from padaria.infra.repositories import (
    CategoriaRepo,
    ClienteRepo,
    CustoFixoRepo,
    CustoVariavelRepo,
    EntregaRepo,
    GiroPersonalizadoRepo,
    PrecoCategoriaRepo,
    ProdutoRepo,
    SaborRepo,
)


T = TypeVar("T")


# -------------------------
# Conversões linha -> dataclass
# -------------------------

def _bool(val: Any, default: bool = False) -> bool:
    if val is None:
        return default
    return bool(int(val)) if not isinstance(val, bool) else val


def _data(val: Any) -> date:
    if isinstance(val, date):
        return val
    if not val:
        raise ValueError("data ausente")
    return date.fromisoformat(str(val)[:10])


def cliente_from_row(r: Dict[str, Any]) -> Cliente:
    giro = r.get("giro_semanal_personalizado")
    return Cliente(
        id=str(r["id"]),
        nome=str(r.get("nome") or r["id"]),
        status=StatusCliente(r.get("status_cliente") or StatusCliente.ATIVO.value),
        quantidade_padrao=int(r.get("quantidade_padrao") or 0),
        periodicidade_padrao=int(r.get("periodicidade_padrao") or 0),
        giro_semanal_personalizado=int(giro) if giro is not None else None,
        categorias_habilitadas=tuple(int(c) for c in (r.get("categorias_habilitadas") or ())),
        tipo_logistica=r.get("tipo_logistica"),
        emite_nota_fiscal=_bool(r.get("emite_nota_fiscal")),
        contabilizar_giro_medio=_bool(r.get("contabilizar_giro_medio"), default=True),
    )


def categoria_from_row(r: Dict[str, Any]) -> CategoriaProduto:
    return CategoriaProduto(
        id=int(r["id"]),
        nome=str(r["nome"]),
        grupo=GrupoCategoria(r.get("grupo") or GrupoCategoria.OUTROS.value),
        preco_padrao=float(r.get("preco_padrao") or 0.0),
    )


def produto_from_row(r: Dict[str, Any]) -> ProdutoFinal:
    cat = r.get("categoria_id")
    return ProdutoFinal(
        id=str(r["id"]),
        nome=str(r.get("nome") or r["id"]),
        categoria_id=int(cat) if cat is not None else None,
        custo_unitario=float(r.get("custo_unitario") or 0.0),
    )


def preco_from_row(r: Dict[str, Any]) -> PrecoCategoriaCliente:
    return PrecoCategoriaCliente(
        cliente_id=str(r["cliente_id"]),
        categoria_id=int(r["categoria_id"]),
        preco_unitario=float(r["preco_unitario"]),
    )


def giro_categoria_from_row(r: Dict[str, Any]) -> GiroPersonalizadoCategoria:
    return GiroPersonalizadoCategoria(
        cliente_id=str(r["cliente_id"]),
        categoria_id=int(r["categoria_id"]),
        giro_semanal=int(r["giro_semanal"]),
    )


def entrega_from_row(r: Dict[str, Any]) -> Entrega:
    itens_raw = r.get("itens") or []
    if not isinstance(itens_raw, list):
        raise ValueError("itens devem ser uma lista")
    itens = tuple(
        ItemEntrega(produto_id=str(i["produto_id"]), quantidade=int(i.get("quantidade") or 0))
        for i in itens_raw
    )
    quantidade = r.get("quantidade")
    if quantidade is None:
        quantidade = sum(i.quantidade for i in itens)
    quantidade = int(quantidade)
    if quantidade < 0:
        raise ValueError("quantidade negativa")
    return Entrega(
        cliente_id=str(r["cliente_id"]),
        data=_data(r.get("data")),
        quantidade=quantidade,
        itens=itens,
        tipo=str(r.get("tipo") or "entrega"),
    )


def custo_fixo_from_row(r: Dict[str, Any]) -> CustoFixo:
    return CustoFixo(
        nome=str(r["nome"]),
        valor=float(r.get("valor") or 0.0),
        frequencia=parse_frequencia(r.get("frequencia")),
        subcategoria=r.get("subcategoria"),
    )


def custo_variavel_from_row(r: Dict[str, Any]) -> CustoVariavel:
    return CustoVariavel(
        nome=str(r["nome"]),
        valor=float(r.get("valor") or 0.0),
        frequencia=parse_frequencia(r.get("frequencia")),
        percentual_faturamento=float(r.get("percentual_faturamento") or 0.0),
        subcategoria=r.get("subcategoria"),
    )


def sabor_from_row(r: Dict[str, Any]) -> Sabor:
    return Sabor(
        id=int(r["id"]),
        nome=str(r["nome"]),
        percentual_padrao=float(r.get("percentual_padrao") or 0.0),
        ativo=_bool(r.get("ativo"), default=True),
    )


# -------------------------
# Snapshot
# -------------------------

@dataclass(frozen=True)
class SnapshotPadaria:
    clientes: Tuple[Cliente, ...] = ()
    categorias: Tuple[CategoriaProduto, ...] = ()
    produtos: Tuple[ProdutoFinal, ...] = ()
    precos: Tuple[PrecoCategoriaCliente, ...] = ()
    giros_categoria: Tuple[GiroPersonalizadoCategoria, ...] = ()
    entregas: Tuple[Entrega, ...] = ()
    custos_fixos: Tuple[CustoFixo, ...] = ()
    custos_variaveis: Tuple[CustoVariavel, ...] = ()
    sabores: Tuple[Sabor, ...] = ()

    def contagens(self) -> Dict[str, int]:
        return {nome: len(getattr(self, nome)) for nome in self.__dataclass_fields__}


class FonteDados:
    """Serviço de leitura com repositórios injetados."""

    def __init__(
        self,
        clientes: Any,
        categorias: Any,
        produtos: Any,
        precos: Any,
        giros_categoria: Any,
        entregas: Any,
        custos_fixos: Any,
        custos_variaveis: Any,
        sabores: Any,
    ):
        self._repos = {
            "clientes": (clientes, cliente_from_row),
            "categorias": (categorias, categoria_from_row),
            "produtos": (produtos, produto_from_row),
            "precos": (precos, preco_from_row),
            "giros_categoria": (giros_categoria, giro_categoria_from_row),
            "entregas": (entregas, entrega_from_row),
            "custos_fixos": (custos_fixos, custo_fixo_from_row),
            "custos_variaveis": (custos_variaveis, custo_variavel_from_row),
            "sabores": (sabores, sabor_from_row),
        }

    @classmethod
    def from_db(cls, db_path: str) -> "FonteDados":
        return cls(
            clientes=ClienteRepo(db_path),
            categorias=CategoriaRepo(db_path),
            produtos=ProdutoRepo(db_path),
            precos=PrecoCategoriaRepo(db_path),
            giros_categoria=GiroPersonalizadoRepo(db_path),
            entregas=EntregaRepo(db_path),
            custos_fixos=CustoFixoRepo(db_path),
            custos_variaveis=CustoVariavelRepo(db_path),
            sabores=SaborRepo(db_path),
        )

    @staticmethod
    def _buscar(nome: str, repo: Any) -> List[Dict[str, Any]]:
        try:
            rows = repo.get_all()
        except sqlite3.Error as e:
            log_system_event(
                "falha_leitura_tabela", {"tabela": nome, "erro": str(e)}, level="warning"
            )
            return []
        log_database_operation(nome, "SELECT_ALL", len(rows))
        return rows

    @staticmethod
    def _converter(nome: str, rows: List[Dict[str, Any]], conv: Callable[[Dict[str, Any]], T]) -> Tuple[T, ...]:
        out: List[T] = []
        for r in rows:
            try:
                out.append(conv(r))
            except (KeyError, TypeError, ValueError) as e:
                log_registro_ignorado(nome, str(e), r)
        return tuple(out)

    def carregar_tabela(self, nome: str) -> Tuple[Any, ...]:
        repo, conv = self._repos[nome]
        return self._converter(nome, self._buscar(nome, repo), conv)

    def carregar(self, tabelas: Optional[List[str]] = None) -> SnapshotPadaria:
        """Carrega as tabelas pedidas (todas por padrão) num snapshot imutável."""
        nomes = tabelas or list(self._repos)
        dados = {nome: self.carregar_tabela(nome) for nome in nomes}
        snapshot = SnapshotPadaria(**dados)
        log_system_event("snapshot_carregado", snapshot.contagens())
        return snapshot
