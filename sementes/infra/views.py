# sementes/infra/views.py
"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_localizacao_detalhe: localização + câmara + produto ocupante.
- vw_ocupacao_camara:     totais de localizações e capacidade por câmara.
- vw_produtos_ativos:     produtos fora dos estados finais, com o código
                          da localização principal.

Obs.:
- As views assumem que as migrações V1→V2 já foram aplicadas.
- Um conjunto de índices úteis também é criado, caso não existam.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        c.executescript(
            """
            DROP VIEW IF EXISTS vw_localizacao_detalhe;
            CREATE VIEW vw_localizacao_detalhe AS
            SELECT
                l.id,
                l.camara_id,
                cm.nome AS camara,
                l.codigo,
                l.quadra, l.lado, l.fila, l.andar,
                l.nivel_acesso,
                l.capacidade_max_g,
                l.peso_atual_g,
                l.ocupada,
                l.produto_id,
                p.nome AS produto,
                p.lote
            FROM localizacao l
            JOIN camara cm ON cm.id = l.camara_id
            LEFT JOIN produto p ON p.id = l.produto_id;

            DROP VIEW IF EXISTS vw_ocupacao_camara;
            CREATE VIEW vw_ocupacao_camara AS
            SELECT
                cm.id AS camara_id,
                cm.nome AS camara,
                COUNT(l.id)                          AS total_localizacoes,
                COALESCE(SUM(l.ocupada), 0)          AS ocupadas,
                COUNT(l.id) - COALESCE(SUM(l.ocupada), 0) AS livres,
                COALESCE(SUM(l.capacidade_max_g), 0) AS capacidade_total_g,
                COALESCE(SUM(l.peso_atual_g), 0)     AS peso_total_g
            FROM camara cm
            LEFT JOIN localizacao l ON l.camara_id = cm.id
            GROUP BY cm.id, cm.nome;

            DROP VIEW IF EXISTS vw_produtos_ativos;
            CREATE VIEW vw_produtos_ativos AS
            SELECT
                p.*,
                l.codigo AS localizacao_codigo
            FROM produto p
            LEFT JOIN localizacao l ON l.id = p.localizacao_id
            WHERE p.status NOT IN ('RETIRADO', 'REMOVIDO');
            """
        )

        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_localizacao_livre   ON localizacao(camara_id, ocupada);
            CREATE INDEX IF NOT EXISTS idx_localizacao_produto ON localizacao(produto_id);
            CREATE INDEX IF NOT EXISTS idx_alocacao_produto    ON alocacao(produto_id);
            CREATE INDEX IF NOT EXISTS idx_produto_status      ON produto(status);
            CREATE INDEX IF NOT EXISTS idx_mov_produto         ON movimentacao(produto_id, timestamp);
            CREATE INDEX IF NOT EXISTS idx_mov_origem          ON movimentacao(origem_id);
            CREATE INDEX IF NOT EXISTS idx_mov_destino         ON movimentacao(destino_id);
            CREATE INDEX IF NOT EXISTS idx_mov_timestamp       ON movimentacao(timestamp);
            CREATE INDEX IF NOT EXISTS idx_retirada_status     ON solicitacao_retirada(status);
            """
        )
