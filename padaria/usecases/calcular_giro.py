# padaria/usecases/calcular_giro.py
"""
Caso de uso: giro semanal por cliente.

Fluxo:
1) Aplica migrações e cria views.
2) Lê parâmetros (janela de semanas).
3) Carrega snapshot de clientes e entregas.
4) Resolve o giro de cada cliente (personalizado → histórico → projetado).
5) Ordena pelo maior giro.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from padaria.config import DB_PATH, DEFAULTS
from padaria.domain.giro import calcular_giros, resumo_origens, ultimas_semanas
from padaria.infra.fonte_dados import FonteDados
from padaria.infra.logger import log_calculo, log_transaction
from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import ClienteRepo, EntregaRepo, ParamsRepo
from padaria.infra.views import create_views


def _janela(params_repo: ParamsRepo) -> int:
    return int(params_repo.get_float("janela_semanas", DEFAULTS.janela_semanas))


def run_giro(db_path: str = DB_PATH, referencia: Optional[date] = None) -> List[Dict[str, Any]]:
    referencia = referencia or date.today()
    try:
        apply_migrations(db_path)
        create_views(db_path)
        janela = _janela(ParamsRepo(db_path))

        snap = FonteDados.from_db(db_path).carregar(["clientes", "entregas"])
        giros = calcular_giros(snap.clientes, snap.entregas, referencia, janela)
        nomes = {c.id: c.nome for c in snap.clientes}
        status = {c.id: c.status.value for c in snap.clientes}

        resultados: List[Dict[str, Any]] = [
            {
                "cliente_id": g.cliente_id,
                "nome": nomes.get(g.cliente_id),
                "status": status.get(g.cliente_id),
                "giro_semanal": g.giro_semanal,
                "numero_semanas": g.numero_semanas,
                "origem": g.origem.value,
                "giro_projetado": g.giro_projetado,
                "giro_meta": g.giro_meta,
            }
            for g in giros.values()
        ]
        resultados.sort(key=lambda r: (-r["giro_semanal"], r["nome"] or ""))

        resumo = resumo_origens(giros.values())
        log_calculo("giro", "calculado", referencia=referencia.isoformat(), janela=janela, **resumo)
        log_transaction("giro", {"db_path": db_path}, result=resumo)
        return resultados
    except Exception as e:
        log_transaction("giro", {"db_path": db_path}, error=str(e))
        raise


def run_resumo_giro(db_path: str = DB_PATH, referencia: Optional[date] = None) -> Dict[str, Any]:
    """Totais do giro: soma semanal e clientes por origem."""
    linhas = run_giro(db_path, referencia)
    resumo: Dict[str, Any] = {"clientes": len(linhas)}
    for r in linhas:
        resumo[r["origem"]] = resumo.get(r["origem"], 0) + 1
    resumo["giro_total_ativos"] = sum(r["giro_semanal"] for r in linhas if r["status"] == "Ativo")
    return resumo


def run_definir_giro_personalizado(cliente_id: str, giro: Optional[int], db_path: str = DB_PATH) -> Dict[str, Any]:
    """Define (ou remove, com ``None``) o giro personalizado de um cliente."""
    if giro is not None and giro < 0:
        raise ValueError("giro personalizado não pode ser negativo")
    apply_migrations(db_path)
    ClienteRepo(db_path).set_giro_personalizado(cliente_id, giro)
    rec = {"cliente_id": cliente_id, "giro_semanal_personalizado": giro}
    log_transaction("definir_giro_personalizado", rec, result="success")
    return rec


def run_historico_semanal(
    cliente_id: str,
    db_path: str = DB_PATH,
    referencia: Optional[date] = None,
    semanas: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Unidades entregues por semana nas últimas ``semanas`` (inclui a corrente).

    Semanas sem entrega aparecem com zero.
    """
    referencia = referencia or date.today()
    apply_migrations(db_path)
    create_views(db_path)
    semanas = semanas or _janela(ParamsRepo(db_path))
    consolidado = {
        r["semana"]: r for r in EntregaRepo(db_path).giro_semanal_consolidado(cliente_id)
    }
    out = []
    for s in ultimas_semanas(referencia, semanas):
        r = consolidado.get(s["inicio"].isoformat())
        out.append(
            {
                "semana": s["chave"],
                "inicio": s["inicio"].isoformat(),
                "quantidade": int(r["giro_semanal"]) if r else 0,
                "entregas": int(r["entregas"]) if r else 0,
            }
        )
    log_calculo("giro", "historico_semanal", cliente_id=cliente_id, semanas=len(out))
    return out
