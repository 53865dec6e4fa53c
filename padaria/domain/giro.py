"""
Cálculo do giro semanal (unidades entregues por semana) de cada cliente.

A resolução segue uma precedência explícita, registrada no campo
``origem`` do resultado:

1. ``personalizado``: valor definido pelo administrador, devolvido sem
   alteração, independentemente do histórico.
2. ``historico_completo`` / ``historico_parcial``: soma das entregas nas
   últimas 12 semanas completas anteriores à semana de referência, dividida
   pelo tamanho do histórico do cliente dentro dessa janela. Quem já
   recebia antes do início da janela tem histórico completo (divisor 12);
   clientes novos dividem pelas semanas desde a primeira entrega.
3. ``projetado``: ``quantidade_padrao / periodicidade_padrao * 7`` quando
   não há entregas na janela.

Todas as funções são puras: dependem apenas de suas entradas.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from math import floor
from typing import Dict, Iterable, List, Optional, Tuple

from padaria.config import DEFAULTS
from padaria.domain.models import Cliente, Entrega


class OrigemGiro(str, Enum):
    PERSONALIZADO = "personalizado"
    HISTORICO_COMPLETO = "historico_completo"
    HISTORICO_PARCIAL = "historico_parcial"
    PROJETADO = "projetado"


@dataclass(frozen=True)
class GiroSemanal:
    cliente_id: str
    giro_semanal: int
    numero_semanas: int
    origem: OrigemGiro
    giro_projetado: int
    giro_meta: int


def arredondar(valor: float) -> int:
    """Arredonda meio para cima (2.5 -> 3), como nas planilhas da operação."""
    return int(floor(float(valor) + 0.5))


def inicio_semana(d: date) -> date:
    """Segunda-feira da semana de ``d``."""
    return d - timedelta(days=d.weekday())


def semana_iso(d: date) -> Tuple[int, int]:
    ano, semana, _ = d.isocalendar()
    return ano, semana


def chave_semana(d: date) -> str:
    """Chave ``YYYY-WW`` usada nos gráficos semanais."""
    ano, semana = semana_iso(d)
    return f"{ano}-{semana:02d}"


def ultimas_semanas(referencia: date, quantidade: int = DEFAULTS.janela_semanas) -> List[Dict[str, object]]:
    """Lista as ``quantidade`` semanas terminando na semana de ``referencia``.

    Ordem cronológica; cada item traz ``inicio``, ``ano``, ``semana``,
    ``chave`` e ``display``.
    """
    base = inicio_semana(referencia)
    out: List[Dict[str, object]] = []
    for i in range(quantidade - 1, -1, -1):
        inicio = base - timedelta(weeks=i)
        ano, semana = semana_iso(inicio)
        out.append(
            {
                "inicio": inicio,
                "ano": ano,
                "semana": semana,
                "chave": chave_semana(inicio),
                "display": f"Sem {semana:02d}",
            }
        )
    return out


def giro_projetado(quantidade_padrao: Optional[float], periodicidade_dias: Optional[float]) -> int:
    """Giro semanal projetado a partir da quantidade e periodicidade padrão."""
    qtd = float(quantidade_padrao or 0)
    per = float(periodicidade_dias or 0)
    if qtd <= 0 or per <= 0:
        return 0
    return arredondar(qtd / per * 7)


def giro_meta(projetado: int, fator: float = DEFAULTS.fator_meta_giro) -> int:
    """Meta de giro: 10% acima do projetado."""
    return arredondar(projetado * fator)


def quantidades_por_semana(
    entregas: Iterable[Entrega],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> Dict[date, int]:
    """Soma as entregas por semana (segunda-feira) com dados dentro da janela.

    A janela cobre as ``janela_semanas`` semanas completas anteriores à
    semana que contém ``referencia``; a semana corrente fica de fora.
    Apenas registros do tipo ``entrega`` são considerados.
    """
    fim = inicio_semana(referencia)
    inicio = fim - timedelta(weeks=janela_semanas)
    semanas: Dict[date, int] = defaultdict(int)
    for e in entregas:
        if e.tipo != "entrega":
            continue
        if not (inicio <= e.data < fim):
            continue
        semanas[inicio_semana(e.data)] += int(e.quantidade)
    return dict(sorted(semanas.items()))


def media_historica(
    entregas: Iterable[Entrega],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> Tuple[int, int]:
    """Retorna ``(giro_medio, numero_semanas_de_historico)``.

    O divisor conta as semanas desde a segunda-feira da primeira entrega do
    cliente até o fim da janela, limitado a ``janela_semanas``. Semanas sem
    entrega no meio do histórico entram no divisor (clientes quinzenais).
    ``(0, 0)`` quando não há entregas na janela.
    """
    entregas = [e for e in entregas if e.tipo == "entrega"]
    semanas = quantidades_por_semana(entregas, referencia, janela_semanas)
    if not semanas:
        return 0, 0
    fim = inicio_semana(referencia)
    primeira = min(e.data for e in entregas if e.data < fim)
    numero = (fim - inicio_semana(primeira)).days // 7
    numero = max(1, min(janela_semanas, numero))
    return arredondar(sum(semanas.values()) / numero), numero


def resolver_giro(
    cliente: Cliente,
    entregas: Iterable[Entrega],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> GiroSemanal:
    """Resolve o giro semanal do cliente pela ordem de precedência."""
    projetado = giro_projetado(cliente.quantidade_padrao, cliente.periodicidade_padrao)
    meta = giro_meta(projetado)

    if cliente.giro_semanal_personalizado is not None:
        return GiroSemanal(
            cliente_id=cliente.id,
            giro_semanal=max(0, int(cliente.giro_semanal_personalizado)),
            numero_semanas=0,
            origem=OrigemGiro.PERSONALIZADO,
            giro_projetado=projetado,
            giro_meta=meta,
        )

    media, numero = media_historica(entregas, referencia, janela_semanas)
    if numero > 0:
        origem = (
            OrigemGiro.HISTORICO_COMPLETO
            if numero >= janela_semanas
            else OrigemGiro.HISTORICO_PARCIAL
        )
        return GiroSemanal(cliente.id, media, numero, origem, projetado, meta)

    return GiroSemanal(cliente.id, projetado, 0, OrigemGiro.PROJETADO, projetado, meta)


def agrupar_por_cliente(entregas: Iterable[Entrega]) -> Dict[str, List[Entrega]]:
    out: Dict[str, List[Entrega]] = defaultdict(list)
    for e in entregas:
        out[e.cliente_id].append(e)
    return dict(out)


def calcular_giros(
    clientes: Iterable[Cliente],
    entregas: Iterable[Entrega],
    referencia: date,
    janela_semanas: int = DEFAULTS.janela_semanas,
) -> Dict[str, GiroSemanal]:
    """Resolve o giro de cada cliente; chave = id do cliente."""
    por_cliente = agrupar_por_cliente(entregas)
    return {
        c.id: resolver_giro(c, por_cliente.get(c.id, ()), referencia, janela_semanas)
        for c in clientes
    }


def resumo_origens(giros: Iterable[GiroSemanal]) -> Dict[str, int]:
    """Quantidade de clientes por origem do giro."""
    resumo = {o.value: 0 for o in OrigemGiro}
    for g in giros:
        resumo[g.origem.value] += 1
    return resumo
