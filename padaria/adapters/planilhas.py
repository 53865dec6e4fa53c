"""
Loaders para planilhas (XLSX) de CLIENTES, ENTREGAS, CUSTOS, CATEGORIAS,
SABORES, PRODUTOS, PREÇOS por cliente e GIROS por categoria.

Essas funções:
- leem planilhas XLSX usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pela camada infra.

Observações:
- Datas são normalizadas para ISO (YYYY-MM-DD) quando possível.
- Campos booleanos são mapeados para 0/1.
- Na planilha de entregas cada linha é um item; linhas do mesmo cliente,
  data e tipo formam uma única entrega.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from padaria.domain.models import GrupoCategoria
from padaria.infra.logger import log_registro_ignorado


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um valor da linha do pandas tratando NA como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


def _to_bool01(val: Any) -> Optional[int]:
    """Converte valores variados em 0/1 (ou None)."""
    if val is None:
        return None
    s = str(val).strip().lower()
    if s in {"1", "true", "t", "sim", "s", "y", "yes"}:
        return 1
    if s in {"0", "false", "f", "nao", "não", "n", "no"}:
        return 0
    try:
        i = int(float(s))
        if i in (0, 1):
            return i
    except ValueError:
        pass
    return None


def _to_float(val: Any) -> Optional[float]:
    """Aceita '1.234,56', '1234.56', 'R$ 10,00' e '8%'."""
    if val is None:
        return None
    s = str(val).strip().replace("R$", "").replace("%", "").strip()
    if not s:
        return None
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        return float(s)
    except ValueError:
        return None


def _to_int(val: Any) -> Optional[int]:
    f = _to_float(val)
    return int(round(f)) if f is not None else None


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None
    # ISO primeiro, para o dayfirst não inverter dia e mês
    for fmt in ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    d = pd.to_datetime(s, dayfirst=True, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


def _to_id_list(val: Any) -> List[int]:
    """'1;2', '1, 2' ou '1 2' -> [1, 2]."""
    if val is None:
        return []
    out = []
    for parte in re.split(r"[;,\s]+", str(val)):
        n = _to_int(parte)
        if n is not None:
            out.append(n)
    return out


ALIASES = {
    # clientes
    "id": "id",
    "codigo": "id",
    "cod": "id",
    "cliente id": "cliente_id",
    "codigo cliente": "cliente_id",
    "cliente": "cliente_id",
    "nome": "nome",
    "razao social": "nome",
    "nome fantasia": "nome",
    "status": "status_cliente",
    "status cliente": "status_cliente",
    "quantidade padrao": "quantidade_padrao",
    "qtd padrao": "quantidade_padrao",
    "qp": "quantidade_padrao",
    "periodicidade": "periodicidade_padrao",
    "periodicidade padrao": "periodicidade_padrao",
    "periodicidade dias": "periodicidade_padrao",
    "giro personalizado": "giro_semanal_personalizado",
    "giro semanal personalizado": "giro_semanal_personalizado",
    "categorias": "categorias_habilitadas",
    "categorias habilitadas": "categorias_habilitadas",
    "logistica": "tipo_logistica",
    "tipo logistica": "tipo_logistica",
    "emite nf": "emite_nota_fiscal",
    "emite nota fiscal": "emite_nota_fiscal",
    "nf": "emite_nota_fiscal",
    "contabilizar giro": "contabilizar_giro_medio",
    "contabilizar giro medio": "contabilizar_giro_medio",

    # entregas
    "data": "data",
    "data entrega": "data",
    "data da entrega": "data",
    "produto": "produto_id",
    "produto id": "produto_id",
    "codigo produto": "produto_id",
    "quantidade": "quantidade",
    "qtde": "quantidade",
    "qtd": "quantidade",
    "tipo": "tipo",

    # custos
    "custo": "nome",
    "descricao": "nome",
    "valor": "valor",
    "frequencia": "frequencia",
    "percentual": "percentual_faturamento",
    "percentual faturamento": "percentual_faturamento",
    "subcategoria": "subcategoria",
    "classe": "classe",
    "tipo custo": "classe",

    # categorias e sabores
    "grupo": "grupo",
    "grupo receita": "grupo",
    "preco": "preco_padrao",
    "preco padrao": "preco_padrao",
    "percentual padrao": "percentual_padrao",
    "mix": "percentual_padrao",
    "ativo": "ativo",

    # produtos, preços e giros por categoria
    "categoria": "categoria_id",
    "categoria id": "categoria_id",
    "codigo categoria": "categoria_id",
    "custo unitario": "custo_unitario",
    "preco unitario": "preco_unitario",
    "preco cliente": "preco_unitario",
    "giro": "giro_semanal",
    "giro semanal": "giro_semanal",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = ALIASES.get(key, key.replace(" ", "_"))
    return df.rename(columns=new_cols)


def _read(path: str) -> pd.DataFrame:
    df = pd.read_excel(path, dtype="string")
    return _normalize_columns(df)


# ---------------------------
# loaders públicos (XLSX)
# ---------------------------

def load_clientes_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de CLIENTES e retorna registros compatíveis com `clientes`.

    Linhas sem ``id`` são ignoradas com aviso.
    """
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        cid = _safe_get(row, "id") or _safe_get(row, "cliente_id")
        if not cid:
            log_registro_ignorado(path, "cliente_sem_id", {"linha": int(idx) + 2})
            continue
        contabilizar = _to_bool01(_safe_get(row, "contabilizar_giro_medio"))
        out.append(
            {
                "id": cid,
                "nome": _safe_get(row, "nome") or cid,
                "status_cliente": _safe_get(row, "status_cliente") or "Ativo",
                "quantidade_padrao": _to_int(_safe_get(row, "quantidade_padrao")) or 0,
                "periodicidade_padrao": _to_int(_safe_get(row, "periodicidade_padrao")) or 7,
                "giro_semanal_personalizado": _to_int(_safe_get(row, "giro_semanal_personalizado")),
                "categorias_habilitadas": _to_id_list(_safe_get(row, "categorias_habilitadas")),
                "tipo_logistica": _safe_get(row, "tipo_logistica"),
                "emite_nota_fiscal": _to_bool01(_safe_get(row, "emite_nota_fiscal")) or 0,
                "contabilizar_giro_medio": 1 if contabilizar is None else contabilizar,
            }
        )
    return out


def load_entregas_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de ENTREGAS (uma linha por item) e agrupa em entregas.

    Campos de saída:
      - cliente_id: str
      - data: ISO date
      - tipo: 'entrega' | 'retorno'
      - quantidade: soma dos itens
      - itens: [{"produto_id", "quantidade"}] (vazio sem coluna de produto)
    """
    df = _read(path)
    grupos: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
    for idx, row in df.iterrows():
        cliente_id = _safe_get(row, "cliente_id") or _safe_get(row, "id")
        data = _to_date_iso(_safe_get(row, "data"))
        quantidade = _to_int(_safe_get(row, "quantidade"))
        if not cliente_id or not data or quantidade is None:
            log_registro_ignorado(path, "linha_entrega_incompleta", {"linha": int(idx) + 2})
            continue
        tipo = (_safe_get(row, "tipo") or "entrega").lower()
        chave = (cliente_id, data, tipo)
        entrega = grupos.setdefault(
            chave,
            {"cliente_id": cliente_id, "data": data, "tipo": tipo, "quantidade": 0, "itens": []},
        )
        entrega["quantidade"] += quantidade
        produto_id = _safe_get(row, "produto_id")
        if produto_id:
            entrega["itens"].append({"produto_id": produto_id, "quantidade": quantidade})
    return list(grupos.values())


def load_custos_from_xlsx(path: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Lê XLSX de CUSTOS e separa ``(fixos, variaveis)`` pela coluna ``classe``.

    ``classe`` aceita 'fixo' ou 'variavel'/'administrativo'; sem a coluna,
    linhas com percentual sobre faturamento são variáveis e as demais fixas.
    """
    df = _read(path)
    fixos: List[Dict[str, Any]] = []
    variaveis: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        nome = _safe_get(row, "nome")
        if not nome:
            log_registro_ignorado(path, "custo_sem_nome", {"linha": int(idx) + 2})
            continue
        rec = {
            "nome": nome,
            "subcategoria": _safe_get(row, "subcategoria"),
            "valor": _to_float(_safe_get(row, "valor")) or 0.0,
            "frequencia": (_safe_get(row, "frequencia") or "mensal").lower(),
        }
        percentual = _to_float(_safe_get(row, "percentual_faturamento")) or 0.0
        classe = _slug(_safe_get(row, "classe") or "")
        if classe.startswith("fix") or (not classe and percentual <= 0):
            fixos.append(rec)
        else:
            rec["percentual_faturamento"] = percentual
            variaveis.append(rec)
    return fixos, variaveis


def load_categorias_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de CATEGORIAS. O ``grupo`` de receita é obrigatório.

    Linhas com grupo desconhecido são ignoradas com aviso; o grupo nunca é
    deduzido do nome da categoria.
    """
    grupos_validos = {_slug(g.value): g.value for g in GrupoCategoria}
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        cid = _to_int(_safe_get(row, "id"))
        nome = _safe_get(row, "nome")
        grupo = grupos_validos.get(_slug(_safe_get(row, "grupo") or ""))
        if cid is None or not nome or grupo is None:
            log_registro_ignorado(path, "categoria_invalida", {"linha": int(idx) + 2})
            continue
        out.append(
            {
                "id": cid,
                "nome": nome,
                "grupo": grupo,
                "preco_padrao": _to_float(_safe_get(row, "preco_padrao")) or 0.0,
            }
        )
    return out


def load_sabores_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de SABORES (id, nome, percentual padrão, ativo)."""
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        sid = _to_int(_safe_get(row, "id"))
        nome = _safe_get(row, "nome")
        if sid is None or not nome:
            log_registro_ignorado(path, "sabor_invalido", {"linha": int(idx) + 2})
            continue
        ativo = _to_bool01(_safe_get(row, "ativo"))
        out.append(
            {
                "id": sid,
                "nome": nome,
                "percentual_padrao": _to_float(_safe_get(row, "percentual_padrao")) or 0.0,
                "ativo": 1 if ativo is None else ativo,
            }
        )
    return out


def load_produtos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de PRODUTOS finais (id, nome, categoria, custo unitário)."""
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        pid = _safe_get(row, "id") or _safe_get(row, "produto_id")
        if not pid:
            log_registro_ignorado(path, "produto_sem_id", {"linha": int(idx) + 2})
            continue
        out.append(
            {
                "id": pid,
                "nome": _safe_get(row, "nome") or pid,
                "categoria_id": _to_int(_safe_get(row, "categoria_id")),
                "custo_unitario": _to_float(_safe_get(row, "custo_unitario")) or 0.0,
            }
        )
    return out


def load_precos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de PREÇOS personalizados (cliente, categoria, preço unitário).

    Aceita a coluna ``preco`` como sinônimo de ``preco unitario``. Linhas sem
    cliente, categoria ou preço numérico são ignoradas com aviso.
    """
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        cliente_id = _safe_get(row, "cliente_id")
        categoria_id = _to_int(_safe_get(row, "categoria_id"))
        preco = _to_float(_safe_get(row, "preco_unitario") or _safe_get(row, "preco_padrao"))
        if not cliente_id or categoria_id is None or preco is None:
            log_registro_ignorado(path, "preco_invalido", {"linha": int(idx) + 2})
            continue
        out.append({"cliente_id": cliente_id, "categoria_id": categoria_id, "preco_unitario": preco})
    return out


def load_giros_categoria_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de GIROS semanais personalizados por cliente e categoria."""
    df = _read(path)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        cliente_id = _safe_get(row, "cliente_id")
        categoria_id = _to_int(_safe_get(row, "categoria_id"))
        giro = _to_int(_safe_get(row, "giro_semanal"))
        if not cliente_id or categoria_id is None or giro is None or giro < 0:
            log_registro_ignorado(path, "giro_categoria_invalido", {"linha": int(idx) + 2})
            continue
        out.append({"cliente_id": cliente_id, "categoria_id": categoria_id, "giro_semanal": giro})
    return out
