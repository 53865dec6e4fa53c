"""
Normalização de custos para valores mensais.

A tabela de conversão usa a mesma simplificação de 4 semanas por mês
adotada na conversão de receitas da DRE.
"""

from __future__ import annotations

from typing import Dict, Union

from padaria.domain.models import Frequencia


FATORES_MENSAIS: Dict[Frequencia, float] = {
    Frequencia.SEMANAL: 4.0,
    Frequencia.MENSAL: 1.0,
    Frequencia.TRIMESTRAL: 1.0 / 3.0,
    Frequencia.SEMESTRAL: 1.0 / 6.0,
    Frequencia.ANUAL: 1.0 / 12.0,
    # Custos por produção entram como lançados no mês
    Frequencia.POR_PRODUCAO: 1.0,
}


def parse_frequencia(valor: Union[str, Frequencia, None]) -> Frequencia:
    """Converte texto livre em ``Frequencia``.

    Aceita variações de caixa, espaços e ``por producao``/``por_producao``.
    ``None`` ou vazio equivale a mensal.

    Raises:
        ValueError: quando o texto não corresponde a nenhuma frequência.
    """
    if isinstance(valor, Frequencia):
        return valor
    if valor is None:
        return Frequencia.MENSAL
    s = str(valor).strip().lower().replace("_", "-").replace(" ", "-")
    s = s.replace("ç", "c").replace("ã", "a")
    if not s:
        return Frequencia.MENSAL
    try:
        return Frequencia(s)
    except ValueError:
        raise ValueError(f"frequência desconhecida: {valor!r}") from None


def valor_mensal(valor: float, frequencia: Union[str, Frequencia, None]) -> float:
    """Valor mensal equivalente de um custo lançado na ``frequencia`` dada."""
    return float(valor or 0.0) * FATORES_MENSAIS[parse_frequencia(frequencia)]
