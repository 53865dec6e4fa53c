# padaria/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (clientes, categorias, produtos, preços, entregas, custos, sabores)
V2: grupo explícito de receita em categorias_produto
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Parâmetros K/V
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Cadastro de clientes (PDVs)
    """
    CREATE TABLE IF NOT EXISTS clientes (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        status_cliente TEXT DEFAULT 'Ativo',
        quantidade_padrao INTEGER DEFAULT 0,
        periodicidade_padrao INTEGER DEFAULT 7,
        giro_semanal_personalizado INTEGER,
        categorias_habilitadas TEXT, -- JSON: [1, 2, ...]
        tipo_logistica TEXT,
        emite_nota_fiscal INTEGER DEFAULT 0,
        contabilizar_giro_medio INTEGER DEFAULT 1
    );
    """,
    # Categorias de produto
    """
    CREATE TABLE IF NOT EXISTS categorias_produto (
        id INTEGER PRIMARY KEY,
        nome TEXT NOT NULL,
        preco_padrao REAL DEFAULT 0
    );
    """,
    # Produtos finais
    """
    CREATE TABLE IF NOT EXISTS produtos_finais (
        id TEXT PRIMARY KEY,
        nome TEXT,
        categoria_id INTEGER,
        custo_unitario REAL DEFAULT 0,
        FOREIGN KEY (categoria_id) REFERENCES categorias_produto(id)
    );
    """,
    # Preços personalizados cliente x categoria
    """
    CREATE TABLE IF NOT EXISTS precos_categoria_cliente (
        cliente_id TEXT,
        categoria_id INTEGER,
        preco_unitario REAL,
        PRIMARY KEY (cliente_id, categoria_id),
        FOREIGN KEY (cliente_id) REFERENCES clientes(id) ON DELETE CASCADE,
        FOREIGN KEY (categoria_id) REFERENCES categorias_produto(id)
    );
    """,
    # Giro semanal personalizado cliente x categoria
    """
    CREATE TABLE IF NOT EXISTS giros_semanais_personalizados (
        cliente_id TEXT,
        categoria_id INTEGER,
        giro_semanal INTEGER,
        PRIMARY KEY (cliente_id, categoria_id),
        FOREIGN KEY (cliente_id) REFERENCES clientes(id) ON DELETE CASCADE
    );
    """,
    # Histórico de entregas (imutável)
    """
    CREATE TABLE IF NOT EXISTS historico_entregas (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        cliente_id TEXT,
        data TEXT,
        tipo TEXT DEFAULT 'entrega', -- 'entrega' | 'retorno'
        quantidade INTEGER,
        itens TEXT, -- JSON: [{"produto_id": ..., "quantidade": ...}]
        FOREIGN KEY (cliente_id) REFERENCES clientes(id)
    );
    """,
    # Custos fixos
    """
    CREATE TABLE IF NOT EXISTS custos_fixos (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        subcategoria TEXT,
        valor REAL,
        frequencia TEXT DEFAULT 'mensal'
    );
    """,
    # Custos variáveis / administrativos
    """
    CREATE TABLE IF NOT EXISTS custos_variaveis (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        subcategoria TEXT,
        valor REAL DEFAULT 0,
        frequencia TEXT DEFAULT 'mensal',
        percentual_faturamento REAL DEFAULT 0
    );
    """,
    # Sabores (mix padrão de produção)
    """
    CREATE TABLE IF NOT EXISTS sabores (
        id INTEGER PRIMARY KEY,
        nome TEXT NOT NULL,
        percentual_padrao REAL DEFAULT 0,
        ativo INTEGER DEFAULT 1
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    # grupo de receita definido no cadastro (substitui inferência pelo nome)
    _ensure_column(conn, "categorias_produto", "grupo", "grupo TEXT DEFAULT 'outros'")


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
