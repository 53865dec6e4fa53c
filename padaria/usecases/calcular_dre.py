# padaria/usecases/calcular_dre.py
"""
Caso de uso: DRE mensal estimada a partir dos dados cadastrados.

Fluxo:
1) Aplica migrações e cria views.
2) Lê parâmetros da DRE (com fallback para DEFAULTS).
3) Carrega o snapshot completo.
4) Resolve os giros, gera o faturamento semanal detalhado e calcula a DRE.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from padaria.config import DB_PATH, DEFAULTS
from padaria.domain.dre import ResultadoDRE, calcular_dre
from padaria.domain.giro import calcular_giros
from padaria.domain.models import ParametrosDRE
from padaria.domain.precificacao import (
    FaturamentoDetalhado,
    calcular_faturamento_detalhado,
    categorias_inexistentes,
    entregas_sem_itens,
)
from padaria.infra.fonte_dados import FonteDados, SnapshotPadaria
from padaria.infra.logger import log_calculo, log_registro_ignorado, log_transaction
from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import ParamsRepo
from padaria.infra.views import create_views


def carregar_parametros(params_repo: ParamsRepo) -> ParametrosDRE:
    """Parâmetros da DRE, com fallback para DEFAULTS."""
    logistica = dict(DEFAULTS.percentual_logistico)
    logistica["Distribuição"] = params_repo.get_float(
        "percentual_logistico_distribuicao", logistica["Distribuição"]
    )
    logistica["Própria"] = params_repo.get_float("percentual_logistico_propria", logistica["Própria"])
    return ParametrosDRE(
        semanas_por_mes=params_repo.get_float("semanas_por_mes", DEFAULTS.semanas_por_mes),
        percentual_insumos_revenda=params_repo.get_float(
            "percentual_insumos_revenda", DEFAULTS.percentual_insumos_revenda
        ),
        percentual_insumos_outros=params_repo.get_float(
            "percentual_insumos_outros", DEFAULTS.percentual_insumos_outros
        ),
        percentual_logistico=logistica,
        percentual_logistico_padrao=params_repo.get_float(
            "percentual_logistico_padrao", DEFAULTS.percentual_logistico_padrao
        ),
        percentual_aquisicao=params_repo.get_float("percentual_aquisicao", DEFAULTS.percentual_aquisicao),
        aliquota_impostos=params_repo.get_float("aliquota_impostos", DEFAULTS.aliquota_impostos),
        percentual_depreciacao=params_repo.get_float(
            "percentual_depreciacao", DEFAULTS.percentual_depreciacao
        ),
    )


def _faturamento(snap: SnapshotPadaria, referencia: date, janela: int) -> List[FaturamentoDetalhado]:
    for e in entregas_sem_itens(snap.entregas, referencia, janela):
        log_registro_ignorado(
            "precificacao", "entrega_sem_itens",
            {"cliente_id": e.cliente_id, "data": e.data.isoformat()},
        )
    for cliente_id, categoria_id in categorias_inexistentes(snap.clientes, snap.categorias):
        log_registro_ignorado(
            "precificacao", "categoria_inexistente",
            {"cliente_id": cliente_id, "categoria_id": categoria_id},
        )
    giros = calcular_giros(snap.clientes, snap.entregas, referencia, janela)
    return calcular_faturamento_detalhado(
        snap.clientes,
        snap.categorias,
        snap.precos,
        giros,
        referencia,
        giros_categoria=snap.giros_categoria,
        entregas=snap.entregas,
        produtos=snap.produtos,
        janela_semanas=janela,
    )


def _preparar(db_path: str) -> Tuple[ParamsRepo, SnapshotPadaria, int]:
    apply_migrations(db_path)
    create_views(db_path)
    params_repo = ParamsRepo(db_path)
    janela = int(params_repo.get_float("janela_semanas", DEFAULTS.janela_semanas))
    return params_repo, FonteDados.from_db(db_path).carregar(), janela


def run_faturamento(db_path: str = DB_PATH, referencia: Optional[date] = None) -> List[Dict[str, Any]]:
    """Faturamento semanal detalhado (cliente x categoria)."""
    referencia = referencia or date.today()
    try:
        _, snap, janela = _preparar(db_path)
        linhas = _faturamento(snap, referencia, janela)
        out = []
        for l in linhas:
            row = asdict(l)
            row["grupo"] = l.grupo.value
            out.append(row)
        total = sum(l.faturamento_semanal for l in linhas)
        log_calculo("faturamento", "calculado", linhas=len(out), total_semanal=total)
        log_transaction("faturamento", {"db_path": db_path}, result={"linhas": len(out)})
        return out
    except Exception as e:
        log_transaction("faturamento", {"db_path": db_path}, error=str(e))
        raise


def run_dre(db_path: str = DB_PATH, referencia: Optional[date] = None) -> ResultadoDRE:
    """Calcula a DRE mensal a partir dos dados do banco."""
    referencia = referencia or date.today()
    try:
        params_repo, snap, janela = _preparar(db_path)
        parametros = carregar_parametros(params_repo)
        detalhado = _faturamento(snap, referencia, janela)
        resultado = calcular_dre(
            snap.clientes, snap.custos_fixos, snap.custos_variaveis, detalhado, parametros
        )
        log_calculo(
            "dre", "calculada",
            receita=resultado.total_receita,
            lucro_operacional=resultado.lucro_operacional,
            ponto_equilibrio=resultado.ponto_equilibrio,
        )
        log_transaction("dre", {"db_path": db_path}, result={"receita": resultado.total_receita})
        return resultado
    except Exception as e:
        log_transaction("dre", {"db_path": db_path}, error=str(e))
        raise
