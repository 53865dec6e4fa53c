# padaria/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Todas as dataclasses são congeladas (frozen); os cálculos recebem
  snapshots imutáveis e nunca alteram os registros de entrada.
- Os repositórios continuam trabalhando com dicionários; a conversão
  dict -> dataclass acontece em `padaria.infra.fonte_dados`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from padaria.config import DEFAULTS


class StatusCliente(str, Enum):
    ATIVO = "Ativo"
    EM_ANALISE = "Em análise"
    STANDBY = "Standby"
    INATIVO = "Inativo"
    A_ATIVAR = "A ativar"


class GrupoCategoria(str, Enum):
    """Grupo de receita de uma categoria de produto (definido no cadastro)."""
    REVENDA_PADRAO = "revenda padrão"
    FOOD_SERVICE = "food service"
    INSTITUCIONAL = "institucional"
    PERSONALIZADOS = "personalizados"
    OUTROS = "outros"


class Frequencia(str, Enum):
    SEMANAL = "semanal"
    MENSAL = "mensal"
    TRIMESTRAL = "trimestral"
    SEMESTRAL = "semestral"
    ANUAL = "anual"
    POR_PRODUCAO = "por-producao"


@dataclass(frozen=True)
class ItemEntrega:
    produto_id: str
    quantidade: int


@dataclass(frozen=True)
class Entrega:
    """Registro histórico de entrega (nunca é alterado depois de confirmado)."""
    cliente_id: str
    data: date
    quantidade: int
    itens: Tuple[ItemEntrega, ...] = ()
    tipo: str = "entrega"                  # 'entrega' | 'retorno'


@dataclass(frozen=True)
class Cliente:
    """Cadastro de cliente (PDV)."""
    id: str
    nome: str
    status: StatusCliente = StatusCliente.ATIVO
    quantidade_padrao: int = 0
    periodicidade_padrao: int = 7          # dias
    giro_semanal_personalizado: Optional[int] = None
    categorias_habilitadas: Tuple[int, ...] = ()
    tipo_logistica: Optional[str] = None   # 'Distribuição' | 'Própria' | ...
    emite_nota_fiscal: bool = False
    contabilizar_giro_medio: bool = True


@dataclass(frozen=True)
class CategoriaProduto:
    id: int
    nome: str
    grupo: GrupoCategoria = GrupoCategoria.OUTROS
    preco_padrao: float = 0.0


@dataclass(frozen=True)
class ProdutoFinal:
    id: str
    nome: str
    categoria_id: Optional[int] = None
    custo_unitario: float = 0.0


@dataclass(frozen=True)
class PrecoCategoriaCliente:
    """Preço personalizado de um cliente para uma categoria."""
    cliente_id: str
    categoria_id: int
    preco_unitario: float


@dataclass(frozen=True)
class GiroPersonalizadoCategoria:
    cliente_id: str
    categoria_id: int
    giro_semanal: int


@dataclass(frozen=True)
class CustoFixo:
    nome: str
    valor: float
    frequencia: Frequencia = Frequencia.MENSAL
    subcategoria: Optional[str] = None


@dataclass(frozen=True)
class CustoVariavel:
    """Custo variável/administrativo.

    Com ``percentual_faturamento > 0`` o custo é proporcional à receita;
    caso contrário, ``valor`` é normalizado para o mês pela frequência.
    """
    nome: str
    valor: float = 0.0
    frequencia: Frequencia = Frequencia.MENSAL
    percentual_faturamento: float = 0.0
    subcategoria: Optional[str] = None


@dataclass(frozen=True)
class Sabor:
    id: int
    nome: str
    percentual_padrao: float
    ativo: bool = True


@dataclass(frozen=True)
class ParametrosDRE:
    """Percentuais usados pela DRE (todos em %, exceto semanas_por_mes)."""
    semanas_por_mes: float = DEFAULTS.semanas_por_mes
    percentual_insumos_revenda: float = DEFAULTS.percentual_insumos_revenda
    percentual_insumos_outros: float = DEFAULTS.percentual_insumos_outros
    percentual_logistico: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULTS.percentual_logistico)
    )
    percentual_logistico_padrao: float = DEFAULTS.percentual_logistico_padrao
    percentual_aquisicao: float = DEFAULTS.percentual_aquisicao
    aliquota_impostos: float = DEFAULTS.aliquota_impostos
    percentual_depreciacao: float = DEFAULTS.percentual_depreciacao

    def percentual_insumos(self, grupo: GrupoCategoria) -> float:
        if grupo == GrupoCategoria.REVENDA_PADRAO:
            return self.percentual_insumos_revenda
        return self.percentual_insumos_outros

    def percentual_logistica(self, tipo_logistica: Optional[str]) -> float:
        if tipo_logistica is None:
            return self.percentual_logistico_padrao
        return self.percentual_logistico.get(tipo_logistica, self.percentual_logistico_padrao)
