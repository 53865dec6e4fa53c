# padaria/config.py
"""
Configurações globais e valores padrão do sistema de gestão da padaria.
"""

import os
from dataclasses import dataclass, field
from typing import Dict


# Caminho padrão do banco de dados SQLite
DB_PATH = os.path.join(os.getcwd(), "padaria.db")


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    # Giro
    janela_semanas: int = 12          # semanas de histórico consideradas no giro
    fator_meta_giro: float = 1.10     # meta = giro projetado + 10%

    # DRE
    semanas_por_mes: float = 4.0      # conversão semanal -> mensal (ver DESIGN.md)
    percentual_insumos_revenda: float = 31.0
    percentual_insumos_outros: float = 42.0
    percentual_logistico: Dict[str, float] = field(default_factory=lambda: {
        "Distribuição": 8.0,
        "Própria": 3.0,
    })
    percentual_logistico_padrao: float = 5.0
    percentual_aquisicao: float = 8.0
    aliquota_impostos: float = 15.0
    percentual_depreciacao: float = 10.0

    # Produção
    capacidade_forma: int = 40        # unidades por forma


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()


# Parâmetros sobrescrevíveis por banco (tabela `params`) e seus padrões
PARAMETROS: Dict[str, float] = {
    "janela_semanas": DEFAULTS.janela_semanas,
    "semanas_por_mes": DEFAULTS.semanas_por_mes,
    "percentual_insumos_revenda": DEFAULTS.percentual_insumos_revenda,
    "percentual_insumos_outros": DEFAULTS.percentual_insumos_outros,
    "percentual_logistico_distribuicao": DEFAULTS.percentual_logistico["Distribuição"],
    "percentual_logistico_propria": DEFAULTS.percentual_logistico["Própria"],
    "percentual_logistico_padrao": DEFAULTS.percentual_logistico_padrao,
    "percentual_aquisicao": DEFAULTS.percentual_aquisicao,
    "aliquota_impostos": DEFAULTS.aliquota_impostos,
    "percentual_depreciacao": DEFAULTS.percentual_depreciacao,
    "capacidade_forma": DEFAULTS.capacidade_forma,
}
