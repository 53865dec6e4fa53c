"""
Precificação: faturamento semanal detalhado por cliente e categoria.

Produz a entrada da DRE (uma linha por cliente ativo x categoria habilitada).

Regras:
- Preço unitário: preço personalizado do cliente para a categoria (se > 0);
  caso contrário, o preço padrão da categoria.
- Giro da categoria: giro personalizado por categoria, se houver; senão o
  giro resolvido do cliente repartido pela participação de cada categoria
  nos itens entregues dentro da janela de histórico; sem itens no histórico,
  o giro é dividido igualmente entre as categorias habilitadas.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from padaria.config import DEFAULTS
from padaria.domain.giro import GiroSemanal, inicio_semana
from padaria.domain.models import (
    CategoriaProduto,
    Cliente,
    Entrega,
    GiroPersonalizadoCategoria,
    GrupoCategoria,
    PrecoCategoriaCliente,
    ProdutoFinal,
    StatusCliente,
)


@dataclass(frozen=True)
class PrecoAplicado:
    categoria_id: int
    preco_unitario: float
    fonte: str                      # 'personalizado' | 'padrao'


@dataclass(frozen=True)
class FaturamentoDetalhado:
    cliente_id: str
    cliente_nome: str
    categoria_id: int
    categoria_nome: str
    grupo: GrupoCategoria
    giro_semanal: float
    preco_unitario: float
    fonte_preco: str
    faturamento_semanal: float


def preco_aplicado(
    cliente_id: str,
    categoria: CategoriaProduto,
    precos: Mapping[Tuple[str, int], PrecoCategoriaCliente],
) -> PrecoAplicado:
    p = precos.get((cliente_id, categoria.id))
    if p is not None and p.preco_unitario > 0:
        return PrecoAplicado(categoria.id, float(p.preco_unitario), "personalizado")
    return PrecoAplicado(categoria.id, float(categoria.preco_padrao or 0.0), "padrao")


def participacao_categorias(
    entregas: Iterable[Entrega],
    produtos: Mapping[str, ProdutoFinal],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> Dict[int, float]:
    """Participação (0..1) de cada categoria nos itens entregues na janela.

    Entregas sem itens são puladas (ver ``entregas_sem_itens``); itens de
    produtos sem categoria não entram no total.
    """
    fim = inicio_semana(referencia)
    inicio = fim - timedelta(weeks=janela_semanas)
    por_categoria: Dict[int, float] = defaultdict(float)
    for e in entregas:
        if e.tipo != "entrega" or not (inicio <= e.data < fim):
            continue
        if not e.itens:
            continue
        for item in e.itens:
            produto = produtos.get(item.produto_id)
            if produto is None or produto.categoria_id is None:
                continue
            por_categoria[produto.categoria_id] += float(item.quantidade)
    total = sum(por_categoria.values())
    if total <= 0:
        return {}
    return {cat: qtd / total for cat, qtd in por_categoria.items()}


def entregas_sem_itens(
    entregas: Iterable[Entrega],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> List[Entrega]:
    """Entregas da janela sem itens; não entram na participação por categoria."""
    fim = inicio_semana(referencia)
    inicio = fim - timedelta(weeks=janela_semanas)
    return [
        e for e in entregas
        if e.tipo == "entrega" and inicio <= e.data < fim and not e.itens
    ]


def categorias_inexistentes(
    clientes: Iterable[Cliente], categorias: Iterable[CategoriaProduto]
) -> List[Tuple[str, int]]:
    """Pares ``(cliente_id, categoria_id)`` habilitados sem categoria cadastrada."""
    ids = {c.id for c in categorias}
    return [
        (cliente.id, cat_id)
        for cliente in clientes
        if cliente.status == StatusCliente.ATIVO
        for cat_id in cliente.categorias_habilitadas
        if cat_id not in ids
    ]


def _giros_por_categoria(
    cliente: Cliente,
    giro: Optional[GiroSemanal],
    categorias_cliente: List[CategoriaProduto],
    personalizados: Mapping[Tuple[str, int], GiroPersonalizadoCategoria],
    participacao: Dict[int, float],
) -> Dict[int, float]:
    giro_total = float(giro.giro_semanal) if giro is not None else 0.0
    ids = [c.id for c in categorias_cliente]
    habilitadas = {i: participacao.get(i, 0.0) for i in ids}
    soma = sum(habilitadas.values())

    out: Dict[int, float] = {}
    for cat_id in ids:
        override = personalizados.get((cliente.id, cat_id))
        if override is not None:
            out[cat_id] = float(max(0, override.giro_semanal))
        elif soma > 0:
            out[cat_id] = giro_total * habilitadas[cat_id] / soma
        else:
            out[cat_id] = giro_total / len(ids)
    return out


def calcular_faturamento_detalhado(
    clientes: Iterable[Cliente],
    categorias: Iterable[CategoriaProduto],
    precos: Iterable[PrecoCategoriaCliente],
    giros: Mapping[str, GiroSemanal],
    referencia: date,
    giros_categoria: Iterable[GiroPersonalizadoCategoria] = (),
    entregas: Iterable[Entrega] = (),
    produtos: Iterable[ProdutoFinal] = (),
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> List[FaturamentoDetalhado]:
    """Faturamento semanal por cliente ativo e categoria habilitada."""
    cat_by_id = {c.id: c for c in categorias}
    preco_by = {(p.cliente_id, p.categoria_id): p for p in precos}
    giro_cat_by = {(g.cliente_id, g.categoria_id): g for g in giros_categoria}
    prod_by_id = {p.id: p for p in produtos}

    entregas_por_cliente: Dict[str, List[Entrega]] = defaultdict(list)
    for e in entregas:
        entregas_por_cliente[e.cliente_id].append(e)

    linhas: List[FaturamentoDetalhado] = []
    for cliente in clientes:
        if cliente.status != StatusCliente.ATIVO:
            continue
        categorias_cliente = []
        for cat_id in cliente.categorias_habilitadas:
            categoria = cat_by_id.get(cat_id)
            if categoria is None:
                continue
            categorias_cliente.append(categoria)
        if not categorias_cliente:
            continue

        participacao = participacao_categorias(
            entregas_por_cliente.get(cliente.id, ()), prod_by_id, referencia, janela_semanas
        )
        giros_cat = _giros_por_categoria(
            cliente, giros.get(cliente.id), categorias_cliente, giro_cat_by, participacao
        )

        for categoria in categorias_cliente:
            preco = preco_aplicado(cliente.id, categoria, preco_by)
            giro_cat = giros_cat[categoria.id]
            linhas.append(
                FaturamentoDetalhado(
                    cliente_id=cliente.id,
                    cliente_nome=cliente.nome,
                    categoria_id=categoria.id,
                    categoria_nome=categoria.nome,
                    grupo=categoria.grupo,
                    giro_semanal=giro_cat,
                    preco_unitario=preco.preco_unitario,
                    fonte_preco=preco.fonte,
                    faturamento_semanal=giro_cat * preco.preco_unitario,
                )
            )
    return linhas


def faturamento_semanal_total(linhas: Iterable[FaturamentoDetalhado]) -> float:
    return sum(l.faturamento_semanal for l in linhas)
