# padaria/infra/views.py
"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_giro_semanal_consolidado: unidades entregues por cliente e semana
  (semana iniciando na segunda-feira).

Obs.:
- As views assumem que as migrações V1→V2 já foram aplicadas.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        c.executescript(
            """
            ---------------------------
            -- Giro semanal consolidado
            -- strftime('%w') = 0 para domingo; recua até a segunda-feira.
            ---------------------------
            DROP VIEW IF EXISTS vw_giro_semanal_consolidado;
            CREATE VIEW vw_giro_semanal_consolidado AS
            SELECT
                cliente_id,
                date(data, '-' || ((CAST(strftime('%w', data) AS INTEGER) + 6) % 7) || ' days') AS semana,
                SUM(quantidade) AS giro_semanal,
                COUNT(*)        AS entregas
            FROM historico_entregas
            WHERE COALESCE(tipo, 'entrega') = 'entrega'
            GROUP BY cliente_id, semana;
            """
        )

        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_entregas_cliente ON historico_entregas(cliente_id);
            CREATE INDEX IF NOT EXISTS idx_entregas_data    ON historico_entregas(data);
            CREATE INDEX IF NOT EXISTS idx_produtos_cat     ON produtos_finais(categoria_id);
            """
        )
