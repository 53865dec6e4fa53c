"""
Planejamento de produção e reposição.

Funções puras usadas para:
- distribuir um lote de unidades entre os sabores ativos;
- medir o intervalo efetivo entre entregas e recalcular a quantidade padrão;
- estimar o número de formas necessárias para produzir um volume.
"""

from __future__ import annotations

from datetime import date
from math import ceil, floor
from typing import Dict, Iterable, List

from padaria.config import DEFAULTS
from padaria.domain.models import Cliente, Sabor, StatusCliente


TOLERANCIA_PERIODICIDADE = 0.25


def distribuir_sabores(sabores: Iterable[Sabor], total_unidades: int) -> Dict[int, int]:
    """Distribui ``total_unidades`` entre os sabores ativos.

    Cada sabor recebe o piso da sua fração (``percentual_padrao``); o resto
    vai, uma unidade por vez, para os sabores com maior parte fracionária
    (método do maior resto).

    Returns:
        ``{id_sabor: quantidade}`` na ordem de atribuição do resto.
    """
    ativos = [s for s in sabores if s.ativo]
    if not ativos or total_unidades <= 0:
        return {s.id: 0 for s in ativos}

    fracoes = []
    for s in ativos:
        qtd_frac = s.percentual_padrao / 100 * total_unidades
        base = int(floor(qtd_frac))
        fracoes.append((s.id, base, qtd_frac - base))

    resto = total_unidades - sum(base for _, base, _ in fracoes)
    fracoes.sort(key=lambda f: f[2], reverse=True)
    return {
        sid: base + (1 if i < resto else 0)
        for i, (sid, base, _) in enumerate(fracoes)
    }


def validar_percentuais_sabores(sabores: Iterable[Sabor]) -> bool:
    """A soma dos percentuais dos sabores ativos deve ser 100."""
    soma = sum(s.percentual_padrao for s in sabores if s.ativo)
    return abs(soma - 100) < 0.001


def delta_efetivo(data_atual: date, data_anterior: date) -> int:
    """Dias entre duas entregas."""
    return (data_atual - data_anterior).days


def delta_fora_tolerancia(delta: int, periodicidade_padrao: int) -> bool:
    tolerancia = periodicidade_padrao * TOLERANCIA_PERIODICIDADE
    return delta < periodicidade_padrao - tolerancia or delta > periodicidade_padrao + tolerancia


def giro_semanal_pdv(total_entregue: float, delta: int) -> float:
    """Giro semanal de um PDV a partir da última entrega e do intervalo."""
    if delta <= 0:
        return 0.0
    return total_entregue * (7 / delta)


def novo_qp(giro_semanal: float, periodicidade_padrao: int) -> int:
    """Nova quantidade padrão para manter o giro na periodicidade atual."""
    return int(floor(giro_semanal * (periodicidade_padrao / 7) + 0.5))


def formas_necessarias(unidades: int, capacidade_forma: int = DEFAULTS.capacidade_forma) -> int:
    if capacidade_forma <= 0:
        raise ValueError("capacidade_forma deve ser positiva")
    if unidades <= 0:
        return 0
    return int(ceil(unidades / capacidade_forma))


def previsao_giro_semanal(clientes: Iterable[Cliente]) -> float:
    """Soma do giro projetado (sem arredondamento) dos clientes ativos."""
    total = 0.0
    for c in clientes:
        if c.status != StatusCliente.ATIVO or c.periodicidade_padrao <= 0:
            continue
        if c.periodicidade_padrao == 7:
            total += c.quantidade_padrao
        else:
            total += c.quantidade_padrao * (7 / c.periodicidade_padrao)
    return total


def previsao_giro_mensal(giro_semanal: float, semanas_por_mes: float = DEFAULTS.semanas_por_mes) -> float:
    return giro_semanal * semanas_por_mes


def plano_producao(
    sabores: Iterable[Sabor],
    total_unidades: int,
    capacidade_forma: int = DEFAULTS.capacidade_forma,
) -> List[Dict[str, object]]:
    """Linhas do plano de produção por sabor (unidades e formas)."""
    sabores = list(sabores)
    nomes = {s.id: s.nome for s in sabores}
    distribuicao = distribuir_sabores(sabores, total_unidades)
    return [
        {
            "sabor_id": sid,
            "sabor": nomes.get(sid),
            "unidades": qtd,
            "formas": formas_necessarias(qtd, capacidade_forma),
        }
        for sid, qtd in sorted(distribuicao.items())
    ]
