# sementes/infra/logger.py
"""
Sistema de logging das operações de armazenagem.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: transações de negócio, movimentações físicas de
estoque, fluxo de retiradas e operações no banco de dados.

Os loggers escrevem apenas em arquivo (um por assunto) e ficam desligados
por padrão; habilite com ``SEMENTES_LOG=1`` ou ajustando ``ENABLE_LOGGING``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from sementes import config


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = config.LOG_ENABLED
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = config.OUTPUT_ENABLED


def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # delay: o arquivo só é criado na primeira mensagem
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


# Diretório de logs: SEMENTES_LOGS_DIR ou <pacote>/logs
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(config.LOGS_DIR) if config.LOGS_DIR else BASE_DIR / "logs"

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "movimentacoes": LOGS_DIR / "movimentacoes.log",
    "retiradas": LOGS_DIR / "retiradas.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

transaction_logger = setup_logger('sementes.transactions', str(LOG_FILES["transactions"]))
movimentacao_logger = setup_logger('sementes.movimentacoes', str(LOG_FILES["movimentacoes"]))
retirada_logger = setup_logger('sementes.retiradas', str(LOG_FILES["retiradas"]))
database_logger = setup_logger('sementes.database', str(LOG_FILES["database"]))
system_logger = setup_logger('sementes.system', str(LOG_FILES["system"]))


def _enabled() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma transação de negócio (sucesso ou falha).

    Args:
        operation: Nome da operação (localizar, mover, saida_parcial...)
        data: Parâmetros da chamada
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not _enabled():
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")


def log_movimentacao(tipo: str, produto_id: int, quantidade: int, ator_id: str, **kwargs) -> None:
    """
    Log de uma movimentação física gravada no livro.

    Args:
        tipo: entry | exit | transfer | partial-transfer | stock-add
        produto_id: Produto movimentado
        quantidade: Unidades movimentadas
        ator_id: Quem executou
        **kwargs: origem, destino, peso etc.
    """
    if not _enabled():
        return
    log_data = {
        "tipo": tipo,
        "produto_id": produto_id,
        "quantidade": quantidade,
        "ator_id": ator_id,
        **kwargs,
    }
    movimentacao_logger.info(f"MOVIMENTACAO_{tipo.upper().replace('-', '_')}: {log_data}")


def log_retirada(action: str, solicitacao_id: Optional[int], produto_id: int, ator_id: str, **kwargs) -> None:
    """Log do fluxo de retirada (solicitar, confirmar, cancelar)."""
    if not _enabled():
        return
    log_data = {
        "action": action,
        "solicitacao_id": solicitacao_id,
        "produto_id": produto_id,
        "ator_id": ator_id,
        **kwargs,
    }
    retirada_logger.info(f"RETIRADA_{action.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, MIGRATE)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not _enabled():
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs,
    }
    database_logger.info(f"DB_{operation}: {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not _enabled():
        return
    log_data = {
        "event": event,
        "details": details or {},
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """Log para operações de arquivo (importação de planilhas)."""
    if not _enabled():
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs,
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém as últimas linhas de um log.

    Args:
        log_type: transactions, movimentacoes, retiradas, database ou system
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string (``None`` com o logging desligado)
    """
    if not _enabled():
        return None

    for handler in logging.getLogger(f"sementes.{log_type}").handlers:
        handler.flush()

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
    except OSError as e:
        return f"Erro ao ler log {log_type}: {e}"
    return ''.join(all_lines[-lines:])

