# sementes/config.py
"""
Configurações globais e valores padrão do sistema de armazenagem de sementes.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("SEMENTES_DB", os.path.join(os.getcwd(), "sementes.db"))


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    capacidade_padrao_kg: float = 1000.0   # capacidade de cada localização gerada
    capacidade_max_kg: float = 50000.0     # teto aceito para uma localização
    max_localizacoes: int = 100000         # teto por câmara
    max_quadras: int = 100
    max_lados: int = 20                    # A..T
    max_lados_numerico: int = 100          # quando o lado não usa letras
    max_filas: int = 100
    max_andares: int = 20
    usar_letras_lado: bool = True
    tentativas_localizacao: int = 5        # candidatos na busca automática
    quantidade_max: int = 1000000          # unidades por lote
    limiar_capacidade_pct: int = 80
    busy_timeout_s: float = 30.0
    peso_unitario_min_kg: float = 0.001
    peso_unitario_max_kg: float = 1000.0


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "sim", "yes", "on"}


# Flags de logging/saída (lidas por sementes.infra.logger)
LOG_ENABLED = _env_flag("SEMENTES_LOG")
OUTPUT_ENABLED = _env_flag("SEMENTES_OUTPUT")
LOGS_DIR = os.environ.get("SEMENTES_LOGS_DIR")
