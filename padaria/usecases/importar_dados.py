# padaria/usecases/importar_dados.py
"""
UC: importar cadastros e histórico a partir de planilhas XLSX.

- clientes    -> upsert em `clientes`
- categorias  -> upsert em `categorias_produto`
- sabores     -> upsert em `sabores`
- entregas    -> insert em `historico_entregas` (somente clientes cadastrados)
- custos      -> insert em `custos_fixos` / `custos_variaveis`
- produtos    -> upsert em `produtos_finais`
- precos      -> upsert em `precos_categoria_cliente` (cliente e categoria cadastrados)
- giros       -> upsert em `giros_semanais_personalizados` (idem)
"""

from __future__ import annotations

from typing import Any, Dict, List

from padaria.adapters.planilhas import (
    load_categorias_from_xlsx,
    load_clientes_from_xlsx,
    load_custos_from_xlsx,
    load_entregas_from_xlsx,
    load_giros_categoria_from_xlsx,
    load_precos_from_xlsx,
    load_produtos_from_xlsx,
    load_sabores_from_xlsx,
)
from padaria.config import DB_PATH
from padaria.domain.custos import parse_frequencia
from padaria.domain.models import StatusCliente
from padaria.infra.logger import (
    log_database_operation,
    log_file_operation,
    log_registro_ignorado,
    log_system_event,
    log_transaction,
    print_system,
)
from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import (
    CategoriaRepo,
    ClienteRepo,
    CustoFixoRepo,
    CustoVariavelRepo,
    EntregaRepo,
    GiroPersonalizadoRepo,
    PrecoCategoriaRepo,
    ProdutoRepo,
    SaborRepo,
)


_STATUS_VALIDOS = {s.value for s in StatusCliente}


def _resultado(path: str, lidos: int, gravados: int, **extra) -> Dict[str, Any]:
    return {"arquivo": path, "linhas_lidas": lidos, "linhas_gravadas": gravados,
            "ignoradas": lidos - gravados, **extra}


def run_importar_clientes(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa clientes; status fora da lista conhecida é ignorado com aviso."""
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_clientes_from_xlsx(path)
        validos = []
        for r in rows:
            if r["status_cliente"] not in _STATUS_VALIDOS:
                log_registro_ignorado(path, "status_desconhecido", r)
                continue
            validos.append(r)
        ClienteRepo(db_path).upsert(validos)
        log_database_operation("clientes", "UPSERT", len(validos), file_path=path)
        log_file_operation("import", path, rows_processed=len(rows))
        result = _resultado(path, len(rows), len(validos))
        log_transaction("importar_clientes", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_clientes", {"file": path}, error=str(e))
        log_system_event("importar_clientes_error", {"file_path": path, "error": str(e)}, level="error")
        raise


def run_importar_categorias(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_categorias_from_xlsx(path)
        CategoriaRepo(db_path).upsert(rows)
        log_database_operation("categorias_produto", "UPSERT", len(rows), file_path=path)
        result = _resultado(path, len(rows), len(rows))
        log_transaction("importar_categorias", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_categorias", {"file": path}, error=str(e))
        raise


def run_importar_sabores(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_sabores_from_xlsx(path)
        SaborRepo(db_path).upsert(rows)
        log_database_operation("sabores", "UPSERT", len(rows), file_path=path)
        result = _resultado(path, len(rows), len(rows))
        log_transaction("importar_sabores", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_sabores", {"file": path}, error=str(e))
        raise


def run_importar_entregas(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa o histórico de entregas.

    Entregas de clientes não cadastrados são ignoradas com aviso (a tabela
    tem chave estrangeira para `clientes`).
    """
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_entregas_from_xlsx(path)
        cadastrados = {str(c["id"]) for c in ClienteRepo(db_path).get_all()}
        if not cadastrados:
            log_system_event("empty_database_warning", level="warning")
            print_system("Nenhum cliente cadastrado. Importe os clientes antes das entregas.")
        validas: List[Dict[str, Any]] = []
        for r in rows:
            if r["cliente_id"] not in cadastrados:
                log_registro_ignorado(path, "cliente_nao_cadastrado", r)
                continue
            validas.append(r)
        EntregaRepo(db_path).insert_many(validas)
        log_database_operation("historico_entregas", "INSERT_MANY", len(validas), file_path=path)
        log_file_operation("import", path, rows_processed=len(rows))
        result = _resultado(path, len(rows), len(validas))
        log_transaction("importar_entregas", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_entregas", {"file": path}, error=str(e))
        log_system_event("importar_entregas_error", {"file_path": path, "error": str(e)}, level="error")
        raise


def run_importar_custos(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa custos fixos e variáveis; frequência desconhecida é ignorada."""
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        fixos, variaveis = load_custos_from_xlsx(path)

        def _validos(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            out = []
            for r in rows:
                try:
                    r["frequencia"] = parse_frequencia(r["frequencia"]).value
                except ValueError as e:
                    log_registro_ignorado(path, str(e), r)
                    continue
                out.append(r)
            return out

        fixos_ok = _validos(fixos)
        variaveis_ok = _validos(variaveis)
        CustoFixoRepo(db_path).insert_many(fixos_ok)
        CustoVariavelRepo(db_path).insert_many(variaveis_ok)
        log_database_operation("custos_fixos", "INSERT_MANY", len(fixos_ok), file_path=path)
        log_database_operation("custos_variaveis", "INSERT_MANY", len(variaveis_ok), file_path=path)
        result = _resultado(
            path, len(fixos) + len(variaveis), len(fixos_ok) + len(variaveis_ok),
            fixos=len(fixos_ok), variaveis=len(variaveis_ok),
        )
        log_transaction("importar_custos", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_custos", {"file": path}, error=str(e))
        raise


def run_importar_produtos(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa produtos finais; categoria não cadastrada é ignorada com aviso."""
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_produtos_from_xlsx(path)
        categorias = {int(c["id"]) for c in CategoriaRepo(db_path).get_all()}
        validos = []
        for r in rows:
            if r["categoria_id"] is not None and r["categoria_id"] not in categorias:
                log_registro_ignorado(path, "categoria_nao_cadastrada", r)
                continue
            validos.append(r)
        ProdutoRepo(db_path).upsert(validos)
        log_database_operation("produtos_finais", "UPSERT", len(validos), file_path=path)
        result = _resultado(path, len(rows), len(validos))
        log_transaction("importar_produtos", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_produtos", {"file": path}, error=str(e))
        raise


def _filtrar_cliente_categoria(path: str, db_path: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    clientes = {str(c["id"]) for c in ClienteRepo(db_path).get_all()}
    categorias = {int(c["id"]) for c in CategoriaRepo(db_path).get_all()}
    validos = []
    for r in rows:
        if r["cliente_id"] not in clientes:
            log_registro_ignorado(path, "cliente_nao_cadastrado", r)
        elif r["categoria_id"] not in categorias:
            log_registro_ignorado(path, "categoria_nao_cadastrada", r)
        else:
            validos.append(r)
    return validos


def run_importar_precos(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa preços personalizados por cliente e categoria."""
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_precos_from_xlsx(path)
        validos = _filtrar_cliente_categoria(path, db_path, rows)
        PrecoCategoriaRepo(db_path).upsert(validos)
        log_database_operation("precos_categoria_cliente", "UPSERT", len(validos), file_path=path)
        result = _resultado(path, len(rows), len(validos))
        log_transaction("importar_precos", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_precos", {"file": path}, error=str(e))
        raise


def run_importar_giros_categoria(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Importa giros semanais personalizados por cliente e categoria."""
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_giros_categoria_from_xlsx(path)
        validos = _filtrar_cliente_categoria(path, db_path, rows)
        GiroPersonalizadoRepo(db_path).upsert(validos)
        log_database_operation("giros_semanais_personalizados", "UPSERT", len(validos), file_path=path)
        result = _resultado(path, len(rows), len(validos))
        log_transaction("importar_giros_categoria", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_giros_categoria", {"file": path}, error=str(e))
        raise
