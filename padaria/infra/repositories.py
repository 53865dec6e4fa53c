# padaria/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ParamsRepo
- ClienteRepo
- CategoriaRepo
- ProdutoRepo
- PrecoCategoriaRepo
- GiroPersonalizadoRepo
- EntregaRepo
- CustoFixoRepo
- CustoVariavelRepo
- SaborRepo

Os repositórios aceitam e devolvem dicionários; colunas JSON
(`categorias_habilitadas`, `itens`) são serializadas aqui.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import connect, fetch_dicts


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _plain(value: Any) -> Any:
    """Enums viram o seu valor textual antes de ir para o SQLite."""
    if isinstance(value, Enum):
        return value.value
    return value


def _to_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _from_json(value: Optional[str], default: Any) -> Any:
    if value is None or value == "":
        return default
    return json.loads(value)


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_float(self, key: str, default: float) -> float:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return float(v)
        except ValueError:
            return default

    def get_all(self) -> Dict[str, str]:
        with connect(self.db_path) as c:
            return {r["chave"]: r["valor"] for r in fetch_dicts(c, "SELECT chave, valor FROM params")}


# -------------------------
# Clientes
# -------------------------

class ClienteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                payload = {
                    "id": str(r["id"]),
                    "nome": r.get("nome"),
                    "status_cliente": _plain(r.get("status_cliente", r.get("status"))) or "Ativo",
                    "quantidade_padrao": r.get("quantidade_padrao") or 0,
                    "periodicidade_padrao": r.get("periodicidade_padrao") or 7,
                    "giro_semanal_personalizado": r.get("giro_semanal_personalizado"),
                    "categorias_habilitadas": _to_json(list(r.get("categorias_habilitadas") or [])),
                    "tipo_logistica": r.get("tipo_logistica"),
                    "emite_nota_fiscal": int(bool(r.get("emite_nota_fiscal"))),
                    "contabilizar_giro_medio": int(bool(r.get("contabilizar_giro_medio", True))),
                }
                c.execute(
                    """
                    INSERT INTO clientes
                        (id, nome, status_cliente, quantidade_padrao, periodicidade_padrao,
                         giro_semanal_personalizado, categorias_habilitadas, tipo_logistica,
                         emite_nota_fiscal, contabilizar_giro_medio)
                    VALUES
                        (:id, :nome, :status_cliente, :quantidade_padrao, :periodicidade_padrao,
                         :giro_semanal_personalizado, :categorias_habilitadas, :tipo_logistica,
                         :emite_nota_fiscal, :contabilizar_giro_medio)
                    ON CONFLICT(id) DO UPDATE SET
                        nome=excluded.nome,
                        status_cliente=excluded.status_cliente,
                        quantidade_padrao=excluded.quantidade_padrao,
                        periodicidade_padrao=excluded.periodicidade_padrao,
                        giro_semanal_personalizado=excluded.giro_semanal_personalizado,
                        categorias_habilitadas=excluded.categorias_habilitadas,
                        tipo_logistica=excluded.tipo_logistica,
                        emite_nota_fiscal=excluded.emite_nota_fiscal,
                        contabilizar_giro_medio=excluded.contabilizar_giro_medio
                    """,
                    payload,
                )
        return len(rows)

    def set_giro_personalizado(self, cliente_id: str, giro: Optional[int]) -> None:
        with connect(self.db_path) as c:
            c.execute(
                "UPDATE clientes SET giro_semanal_personalizado = ? WHERE id = ?",
                (giro, cliente_id),
            )

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            rows = fetch_dicts(
                c,
                """SELECT id, nome, status_cliente, quantidade_padrao, periodicidade_padrao,
                          giro_semanal_personalizado, categorias_habilitadas, tipo_logistica,
                          emite_nota_fiscal, contabilizar_giro_medio
                   FROM clientes
                   ORDER BY nome""",
            )
        for r in rows:
            r["categorias_habilitadas"] = _from_json(r["categorias_habilitadas"], [])
        return rows


# -------------------------
# Categorias e produtos
# -------------------------

class CategoriaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                c.execute(
                    """
                    INSERT INTO categorias_produto (id, nome, grupo, preco_padrao)
                    VALUES (:id, :nome, :grupo, :preco_padrao)
                    ON CONFLICT(id) DO UPDATE SET
                        nome=excluded.nome,
                        grupo=excluded.grupo,
                        preco_padrao=excluded.preco_padrao
                    """,
                    {
                        "id": int(r["id"]),
                        "nome": r.get("nome"),
                        "grupo": _plain(r.get("grupo")) or "outros",
                        "preco_padrao": r.get("preco_padrao") or 0.0,
                    },
                )
        return len(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c, "SELECT id, nome, grupo, preco_padrao FROM categorias_produto ORDER BY id"
            )


class ProdutoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO produtos_finais (id, nome, categoria_id, custo_unitario)
                VALUES (:id, :nome, :categoria_id, :custo_unitario)
                ON CONFLICT(id) DO UPDATE SET
                    nome=excluded.nome,
                    categoria_id=excluded.categoria_id,
                    custo_unitario=excluded.custo_unitario
                """,
                [
                    {
                        "id": str(r["id"]),
                        "nome": r.get("nome"),
                        "categoria_id": r.get("categoria_id"),
                        "custo_unitario": r.get("custo_unitario") or 0.0,
                    }
                    for r in rows
                ],
            )
        return len(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c, "SELECT id, nome, categoria_id, custo_unitario FROM produtos_finais"
            )


# -------------------------
# Preços e giros personalizados (cliente x categoria)
# -------------------------

class PrecoCategoriaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO precos_categoria_cliente (cliente_id, categoria_id, preco_unitario)
                VALUES (:cliente_id, :categoria_id, :preco_unitario)
                ON CONFLICT(cliente_id, categoria_id) DO UPDATE SET
                    preco_unitario=excluded.preco_unitario
                """,
                rows,
            )
        return len(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c, "SELECT cliente_id, categoria_id, preco_unitario FROM precos_categoria_cliente"
            )


class GiroPersonalizadoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO giros_semanais_personalizados (cliente_id, categoria_id, giro_semanal)
                VALUES (:cliente_id, :categoria_id, :giro_semanal)
                ON CONFLICT(cliente_id, categoria_id) DO UPDATE SET
                    giro_semanal=excluded.giro_semanal
                """,
                rows,
            )
        return len(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c, "SELECT cliente_id, categoria_id, giro_semanal FROM giros_semanais_personalizados"
            )


# -------------------------
# Histórico de entregas
# -------------------------

class EntregaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @staticmethod
    def _payload(r: Dict[str, Any]) -> Dict[str, Any]:
        data = r.get("data")
        return {
            "cliente_id": str(r["cliente_id"]),
            "data": data.isoformat() if hasattr(data, "isoformat") else data,
            "tipo": r.get("tipo") or "entrega",
            "quantidade": r.get("quantidade"),
            "itens": _to_json(r.get("itens")),
        }

    def insert_many(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [self._payload(_as_dict(r)) for r in rows]
        if not rows:
            return 0
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO historico_entregas (cliente_id, data, tipo, quantidade, itens)
                VALUES (:cliente_id, :data, :tipo, :quantidade, :itens)
                """,
                rows,
            )
        return len(rows)

    def get_all(self, desde: Optional[str] = None) -> List[Dict[str, Any]]:
        sql = "SELECT cliente_id, data, tipo, quantidade, itens FROM historico_entregas"
        params: Tuple[Any, ...] = ()
        if desde:
            sql += " WHERE date(data) >= date(?)"
            params = (desde,)
        sql += " ORDER BY data"
        with connect(self.db_path) as c:
            rows = fetch_dicts(c, sql, params)
        for r in rows:
            # JSON inválido fica como texto; a fonte de dados descarta o registro
            try:
                r["itens"] = _from_json(r["itens"], [])
            except ValueError:
                pass
        return rows

    def giro_semanal_consolidado(self, cliente_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Lê a view semanal (requer `create_views`)."""
        sql = "SELECT cliente_id, semana, giro_semanal, entregas FROM vw_giro_semanal_consolidado"
        params: Tuple[Any, ...] = ()
        if cliente_id:
            sql += " WHERE cliente_id = ?"
            params = (cliente_id,)
        sql += " ORDER BY cliente_id, semana DESC"
        with connect(self.db_path) as c:
            return fetch_dicts(c, sql, params)


# -------------------------
# Custos
# -------------------------

class CustoFixoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert_many(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        payload = [
            {
                "nome": r.get("nome"),
                "subcategoria": r.get("subcategoria"),
                "valor": r.get("valor") or 0.0,
                "frequencia": _plain(r.get("frequencia")) or "mensal",
            }
            for r in rows
        ]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO custos_fixos (nome, subcategoria, valor, frequencia)
                VALUES (:nome, :subcategoria, :valor, :frequencia)
                """,
                payload,
            )
        return len(payload)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c, "SELECT id, nome, subcategoria, valor, frequencia FROM custos_fixos ORDER BY id"
            )


class CustoVariavelRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert_many(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        payload = [
            {
                "nome": r.get("nome"),
                "subcategoria": r.get("subcategoria"),
                "valor": r.get("valor") or 0.0,
                "frequencia": _plain(r.get("frequencia")) or "mensal",
                "percentual_faturamento": r.get("percentual_faturamento") or 0.0,
            }
            for r in rows
        ]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO custos_variaveis
                    (nome, subcategoria, valor, frequencia, percentual_faturamento)
                VALUES
                    (:nome, :subcategoria, :valor, :frequencia, :percentual_faturamento)
                """,
                payload,
            )
        return len(payload)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(
                c,
                """SELECT id, nome, subcategoria, valor, frequencia, percentual_faturamento
                   FROM custos_variaveis ORDER BY id""",
            )


# -------------------------
# Sabores
# -------------------------

class SaborRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO sabores (id, nome, percentual_padrao, ativo)
                VALUES (:id, :nome, :percentual_padrao, :ativo)
                ON CONFLICT(id) DO UPDATE SET
                    nome=excluded.nome,
                    percentual_padrao=excluded.percentual_padrao,
                    ativo=excluded.ativo
                """,
                [
                    {
                        "id": int(r["id"]),
                        "nome": r.get("nome"),
                        "percentual_padrao": r.get("percentual_padrao") or 0.0,
                        "ativo": int(bool(r.get("ativo", True))),
                    }
                    for r in rows
                ],
            )
        return len(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            return fetch_dicts(c, "SELECT id, nome, percentual_padrao, ativo FROM sabores ORDER BY id")
