# padaria/infra/logger.py
"""
Sistema de logging da gestão da padaria.

Cada área tem o seu logger e arquivo em ``padaria/logs``:
- transactions: casos de uso (sucesso/falha)
- calculos: giro, faturamento e DRE
- database: acesso ao SQLite
- system: eventos gerais, importações e avisos de dados malformados

O logging fica desligado por padrão; defina ``PADARIA_LOGGING=1`` para
habilitar a gravação dos arquivos.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = os.getenv("PADARIA_LOGGING", "0") == "1"
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = os.getenv("PADARIA_OUTPUT", "0") == "1"


def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Diretório base para logs (na pasta do pacote)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.getenv("PADARIA_LOGS_DIR", str(BASE_DIR / "logs")))

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "calculos": LOGS_DIR / "calculos.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}


def setup_logger(name: str, log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger com saída em arquivo.

    O arquivo só é criado quando o logging está habilitado; caso contrário
    o logger recebe um ``NullHandler``.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    if not ENABLE_LOGGING:
        logger.addHandler(logging.NullHandler())
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)
    return logger


transaction_logger = setup_logger('padaria.transactions', LOG_FILES["transactions"])
calculo_logger = setup_logger('padaria.calculos', LOG_FILES["calculos"])
database_logger = setup_logger('padaria.database', LOG_FILES["database"])
system_logger = setup_logger('padaria.system', LOG_FILES["system"])


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra a execução de um caso de uso.

    Args:
        operation: Nome da operação (giro, dre, importar_entregas...)
        data: Parâmetros da operação
        result: Resumo do resultado (opcional)
        error: Mensagem de erro (opcional)
    """
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")


def log_calculo(modulo: str, evento: str, **kwargs) -> None:
    """Log dos cálculos (giro, faturamento, dre)."""
    log_data = {"modulo": modulo, "evento": evento, **kwargs}
    calculo_logger.info(f"CALCULO_{modulo.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log de operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação (INSERT, UPSERT, SELECT, ...)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
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
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_registro_ignorado(origem: str, motivo: str, registro: Any = None) -> None:
    """Aviso para registros malformados que foram pulados."""
    log_system_event(
        "registro_ignorado",
        {"origem": origem, "motivo": motivo, "registro": registro},
        level="warning",
    )


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (importação de planilhas).

    Args:
        operation: Tipo de operação (import)
        file_path: Caminho do arquivo
        rows_processed: Número de linhas processadas
        **kwargs: Dados adicionais
    """
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> str:
    """
    Obtém as últimas linhas de um arquivo de log.

    Args:
        log_type: Tipo de log (transactions, calculos, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    with open(log_file, 'r', encoding='utf-8') as f:
        all_lines = f.readlines()
    return ''.join(all_lines[-lines:])
