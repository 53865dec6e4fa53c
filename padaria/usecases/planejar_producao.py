# padaria/usecases/planejar_producao.py
"""
Caso de uso: plano semanal de produção.

O volume semanal é a soma do giro dos clientes ativos; esse total é
distribuído entre os sabores ativos pelo mix padrão e convertido em formas.
A revisão de quantidade padrão compara o intervalo real entre as duas
últimas entregas com a periodicidade cadastrada.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional

from padaria.config import DB_PATH, DEFAULTS
from padaria.domain.giro import agrupar_por_cliente, calcular_giros
from padaria.domain.models import StatusCliente
from padaria.domain.planejamento import (
    delta_efetivo,
    delta_fora_tolerancia,
    formas_necessarias,
    giro_semanal_pdv,
    novo_qp,
    plano_producao,
    previsao_giro_mensal,
    previsao_giro_semanal,
    validar_percentuais_sabores,
)
from padaria.infra.fonte_dados import FonteDados
from padaria.infra.logger import log_calculo, log_system_event, log_transaction
from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import ParamsRepo


def run_planejamento(
    db_path: str = DB_PATH,
    referencia: Optional[date] = None,
    capacidade_forma: Optional[int] = None,
) -> Dict[str, Any]:
    referencia = referencia or date.today()
    try:
        apply_migrations(db_path)
        params_repo = ParamsRepo(db_path)
        janela = int(params_repo.get_float("janela_semanas", DEFAULTS.janela_semanas))
        semanas_por_mes = params_repo.get_float("semanas_por_mes", DEFAULTS.semanas_por_mes)
        if capacidade_forma is None:
            capacidade_forma = int(params_repo.get_float("capacidade_forma", DEFAULTS.capacidade_forma))

        snap = FonteDados.from_db(db_path).carregar(["clientes", "entregas", "sabores"])
        giros = calcular_giros(snap.clientes, snap.entregas, referencia, janela)
        ativos = {c.id for c in snap.clientes if c.status == StatusCliente.ATIVO}
        total_semanal = sum(g.giro_semanal for cid, g in giros.items() if cid in ativos)

        mix_valido = validar_percentuais_sabores(snap.sabores)
        if not mix_valido:
            log_system_event(
                "mix_sabores_invalido",
                {"soma": sum(s.percentual_padrao for s in snap.sabores if s.ativo)},
                level="warning",
            )

        linhas = plano_producao(snap.sabores, total_semanal, capacidade_forma)
        out = {
            "referencia": referencia.isoformat(),
            "unidades_semana": total_semanal,
            "unidades_mes": previsao_giro_mensal(total_semanal, semanas_por_mes),
            "unidades_projetadas": previsao_giro_semanal(snap.clientes),
            "formas_semana": formas_necessarias(total_semanal, capacidade_forma),
            "capacidade_forma": capacidade_forma,
            "mix_valido": mix_valido,
            "sabores": linhas,
        }
        log_calculo(
            "planejamento", "calculado",
            unidades_semana=total_semanal, formas=out["formas_semana"], sabores=len(linhas),
        )
        log_transaction("planejamento", {"db_path": db_path}, result={"unidades": total_semanal})
        return out
    except Exception as e:
        log_transaction("planejamento", {"db_path": db_path}, error=str(e))
        raise


def run_revisar_qp(db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Sugere nova quantidade padrão para clientes com intervalo fora da tolerância.

    Usa as duas últimas entregas de cada cliente ativo: se o intervalo entre
    elas sai da faixa de ±25% da periodicidade padrão, o giro do PDV é
    estimado pela última entrega e a quantidade padrão é recalculada.
    Entregas do mesmo dia são somadas antes de comparar as datas.
    """
    try:
        apply_migrations(db_path)
        snap = FonteDados.from_db(db_path).carregar(["clientes", "entregas"])
        por_cliente = agrupar_por_cliente(e for e in snap.entregas if e.tipo == "entrega")
        sugestoes: List[Dict[str, Any]] = []
        for c in snap.clientes:
            if c.status != StatusCliente.ATIVO or c.periodicidade_padrao <= 0:
                continue
            # entregas do mesmo dia contam como uma só
            por_dia: Dict[date, int] = defaultdict(int)
            for e in por_cliente.get(c.id, []):
                por_dia[e.data] += e.quantidade
            if len(por_dia) < 2:
                continue
            data_anterior, data_ultima = sorted(por_dia)[-2:]
            delta = delta_efetivo(data_ultima, data_anterior)
            if not delta_fora_tolerancia(delta, c.periodicidade_padrao):
                continue
            giro = giro_semanal_pdv(por_dia[data_ultima], delta)
            sugestoes.append(
                {
                    "cliente_id": c.id,
                    "nome": c.nome,
                    "periodicidade_padrao": c.periodicidade_padrao,
                    "delta_efetivo": delta,
                    "giro_pdv": giro,
                    "qp_atual": c.quantidade_padrao,
                    "qp_sugerido": novo_qp(giro, c.periodicidade_padrao),
                }
            )
        log_calculo("planejamento", "revisao_qp", sugestoes=len(sugestoes))
        log_transaction("revisar_qp", {"db_path": db_path}, result={"sugestoes": len(sugestoes)})
        return sugestoes
    except Exception as e:
        log_transaction("revisar_qp", {"db_path": db_path}, error=str(e))
        raise
