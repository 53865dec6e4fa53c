"""
DRE (Demonstração de Resultado do Exercício) mensal estimada.

Parte do faturamento semanal detalhado por cliente e categoria (ver
``padaria.domain.precificacao``) e aplica as regras de custo:

- receita mensal = receita semanal x ``semanas_por_mes``;
- insumos: percentual fixo por grupo de categoria (31% revenda padrão,
  42% demais grupos);
- logística: percentual da receita do cliente conforme o tipo de logística;
- aquisição de clientes: percentual da receita total;
- impostos: alíquota sobre a fração da receita dos clientes que emitem NF;
- custos variáveis com percentual sobre o faturamento entram como custo
  variável; os demais, junto com os fixos, são normalizados para o mês.

EBITDA soma de volta uma depreciação estimada (percentual dos custos fixos).
O ponto de equilíbrio é ``(fixos + administrativos) / margem de contribuição``,
com a margem expressa como fração da receita.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from padaria.domain.custos import valor_mensal
from padaria.domain.models import (
    Cliente,
    CustoFixo,
    CustoVariavel,
    GrupoCategoria,
    ParametrosDRE,
    StatusCliente,
)
from padaria.domain.precificacao import FaturamentoDetalhado


@dataclass(frozen=True)
class CustoMensal:
    nome: str
    valor: float


@dataclass(frozen=True)
class FaturamentoGrupo:
    grupo: GrupoCategoria
    faturamento: float
    custo_insumos: float
    margem: float


@dataclass(frozen=True)
class DetalhesDRE:
    clientes_ativos: int
    clientes_com_nf: int
    clientes_sem_nf: int
    percentual_impostos: float
    faturamento_por_grupo: Tuple[FaturamentoGrupo, ...] = ()


@dataclass(frozen=True)
class ResultadoDRE:
    # Receitas
    total_receita: float
    receita_por_grupo: Dict[GrupoCategoria, float]

    # Custos variáveis
    custos_insumos: float
    custos_logisticos: float
    custos_aquisicao_clientes: float
    custos_impostos: float
    custos_variaveis_percentuais: float
    total_custos_variaveis: float

    # Custos fixos e administrativos
    total_custos_fixos: float
    custos_fixos_detalhados: Tuple[CustoMensal, ...]
    total_custos_administrativos: float
    custos_administrativos_detalhados: Tuple[CustoMensal, ...]

    # Resultados
    lucro_bruto: float
    margem_bruta: float
    lucro_operacional: float
    margem_operacional: float
    depreciacao_estimada: float
    ebitda: float
    margem_ebitda: float
    ponto_equilibrio: float

    detalhes: DetalhesDRE = field(default_factory=lambda: DetalhesDRE(0, 0, 0, 0.0))

    def receita(self, grupo: GrupoCategoria) -> float:
        return self.receita_por_grupo.get(grupo, 0.0)

    def linhas(self) -> List[Dict[str, object]]:
        """Linhas da DRE na ordem de apresentação (conta, valor, % receita)."""
        def pct(v: float) -> float:
            return (v / self.total_receita * 100) if self.total_receita > 0 else 0.0

        rows: List[Tuple[str, float]] = [("Receita total", self.total_receita)]
        rows += [(f"  Receita {g.value}", self.receita(g)) for g in GrupoCategoria]
        rows += [
            ("(-) Insumos", -self.custos_insumos),
            ("(-) Logística", -self.custos_logisticos),
            ("(-) Aquisição de clientes", -self.custos_aquisicao_clientes),
            ("(-) Impostos", -self.custos_impostos),
            ("(-) Custos variáveis (% faturamento)", -self.custos_variaveis_percentuais),
            ("= Lucro bruto", self.lucro_bruto),
            ("(-) Custos fixos", -self.total_custos_fixos),
            ("(-) Custos administrativos", -self.total_custos_administrativos),
            ("= Resultado operacional", self.lucro_operacional),
            ("EBITDA", self.ebitda),
            ("Ponto de equilíbrio", self.ponto_equilibrio),
        ]
        return [{"conta": c, "valor": v, "percentual": pct(v)} for c, v in rows]


def filtrar_clientes_ativos(clientes: Iterable[Cliente]) -> List[Cliente]:
    """Clientes ativos que contam na média de giro."""
    return [
        c for c in clientes
        if c.status == StatusCliente.ATIVO and c.contabilizar_giro_medio
    ]


def _custos_mensais(custos: Sequence) -> Tuple[CustoMensal, ...]:
    return tuple(CustoMensal(c.nome, valor_mensal(c.valor, c.frequencia)) for c in custos)


def calcular_dre(
    clientes: Iterable[Cliente],
    custos_fixos: Iterable[CustoFixo],
    custos_variaveis: Iterable[CustoVariavel],
    faturamento_detalhado: Optional[Iterable[FaturamentoDetalhado]],
    parametros: Optional[ParametrosDRE] = None,
) -> ResultadoDRE:
    """Calcula a DRE mensal a partir do faturamento semanal detalhado.

    Raises:
        ValueError: se o faturamento detalhado não for informado.
    """
    if faturamento_detalhado is None:
        raise ValueError("faturamento_detalhado é obrigatório para calcular a DRE")
    p = parametros or ParametrosDRE()

    ativos = filtrar_clientes_ativos(clientes)
    ativos_by_id = {c.id: c for c in ativos}

    # 1-2) receita mensal por grupo e por cliente
    receita_por_grupo: Dict[GrupoCategoria, float] = defaultdict(float)
    receita_por_cliente: Dict[str, float] = defaultdict(float)
    for linha in faturamento_detalhado:
        if linha.cliente_id not in ativos_by_id:
            continue
        mensal = float(linha.faturamento_semanal) * p.semanas_por_mes
        receita_por_grupo[linha.grupo] += mensal
        receita_por_cliente[linha.cliente_id] += mensal

    total_receita = sum(receita_por_grupo.values())

    # 3) insumos por grupo
    faturamento_por_grupo: List[FaturamentoGrupo] = []
    custos_insumos = 0.0
    for grupo in GrupoCategoria:
        receita = receita_por_grupo.get(grupo, 0.0)
        insumos = receita * p.percentual_insumos(grupo) / 100
        custos_insumos += insumos
        if receita > 0:
            faturamento_por_grupo.append(FaturamentoGrupo(grupo, receita, insumos, receita - insumos))

    # 4) logística por cliente
    custos_logisticos = sum(
        receita * p.percentual_logistica(ativos_by_id[cid].tipo_logistica) / 100
        for cid, receita in receita_por_cliente.items()
    )

    # 5) aquisição e impostos
    custos_aquisicao = total_receita * p.percentual_aquisicao / 100
    clientes_com_nf = sum(1 for c in ativos if c.emite_nota_fiscal)
    fracao_nf = clientes_com_nf / len(ativos) if ativos else 0.0
    custos_impostos = total_receita * fracao_nf * p.aliquota_impostos / 100

    # 6) custos variáveis percentuais x administrativos; fixos
    custos_variaveis = list(custos_variaveis)
    percentuais = [c for c in custos_variaveis if (c.percentual_faturamento or 0) > 0]
    administrativos = [c for c in custos_variaveis if (c.percentual_faturamento or 0) <= 0]
    custos_percentuais = sum(total_receita * c.percentual_faturamento / 100 for c in percentuais)

    fixos_detalhados = _custos_mensais(list(custos_fixos))
    admin_detalhados = _custos_mensais(administrativos)
    total_fixos = sum(c.valor for c in fixos_detalhados)
    total_admin = sum(c.valor for c in admin_detalhados)

    total_variaveis = (
        custos_insumos + custos_logisticos + custos_aquisicao + custos_impostos + custos_percentuais
    )

    # 7) resultados
    lucro_bruto = total_receita - total_variaveis
    lucro_operacional = lucro_bruto - total_fixos - total_admin
    depreciacao = total_fixos * p.percentual_depreciacao / 100
    ebitda = lucro_operacional + depreciacao

    def margem(v: float) -> float:
        return (v / total_receita * 100) if total_receita > 0 else 0.0

    if lucro_bruto > 0 and total_receita > 0:
        ponto_equilibrio = (total_fixos + total_admin) / (lucro_bruto / total_receita)
    else:
        ponto_equilibrio = 0.0

    return ResultadoDRE(
        total_receita=total_receita,
        receita_por_grupo=dict(receita_por_grupo),
        custos_insumos=custos_insumos,
        custos_logisticos=custos_logisticos,
        custos_aquisicao_clientes=custos_aquisicao,
        custos_impostos=custos_impostos,
        custos_variaveis_percentuais=custos_percentuais,
        total_custos_variaveis=total_variaveis,
        total_custos_fixos=total_fixos,
        custos_fixos_detalhados=fixos_detalhados,
        total_custos_administrativos=total_admin,
        custos_administrativos_detalhados=admin_detalhados,
        lucro_bruto=lucro_bruto,
        margem_bruta=margem(lucro_bruto),
        lucro_operacional=lucro_operacional,
        margem_operacional=margem(lucro_operacional),
        depreciacao_estimada=depreciacao,
        ebitda=ebitda,
        margem_ebitda=margem(ebitda),
        ponto_equilibrio=ponto_equilibrio,
        detalhes=DetalhesDRE(
            clientes_ativos=len(ativos),
            clientes_com_nf=clientes_com_nf,
            clientes_sem_nf=len(ativos) - clientes_com_nf,
            percentual_impostos=fracao_nf * 100,
            faturamento_por_grupo=tuple(faturamento_por_grupo),
        ),
    )
