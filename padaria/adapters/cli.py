# padaria/adapters/cli.py
"""
CLI do sistema de gestão da padaria (Typer).

Comandos principais:
- migrate                      -> aplica migrações e cria views
- params set/get/show          -> gerencia parâmetros (DRE, giro, produção)
- giro                         -> giro semanal por cliente
- giro-definir <id> <giro>     -> define/remove giro personalizado
- giro-historico <id>          -> unidades por semana de um cliente
- faturamento                  -> faturamento semanal detalhado
- dre                          -> DRE mensal estimada
- producao                     -> plano semanal de produção por sabor
- revisar-qp                   -> sugestões de nova quantidade padrão
- importar <tipo> <xlsx>       -> clientes | entregas | custos | categorias | sabores
                                  | produtos | precos | giros-categoria
- logs                         -> últimas linhas de um log
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from padaria.config import DB_PATH, PARAMETROS
from padaria.infra.logger import get_log_summary
from padaria.infra.migrations import apply_migrations
from padaria.infra.repositories import ParamsRepo
from padaria.infra.views import create_views
from padaria.usecases.calcular_dre import run_dre, run_faturamento
from padaria.usecases.calcular_giro import (
    run_definir_giro_personalizado,
    run_giro,
    run_historico_semanal,
)
from padaria.usecases.importar_dados import (
    run_importar_categorias,
    run_importar_clientes,
    run_importar_custos,
    run_importar_entregas,
    run_importar_giros_categoria,
    run_importar_precos,
    run_importar_produtos,
    run_importar_sabores,
)
from padaria.usecases.planejar_producao import run_planejamento, run_revisar_qp


app = typer.Typer(help="Gestão da Padaria (CLI)")
console = Console()


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _fmt(val: Any) -> str:
    """Números no formato brasileiro (1.234,56)."""
    if isinstance(val, bool):
        return "sim" if val else "não"
    if isinstance(val, int):
        return f"{val:,}".replace(",", ".")
    if isinstance(val, float):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    if val is None:
        return "-"
    return str(val)


def _display_table(data: Dict[str, Any] | List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe os dados em tabelas formatadas usando Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    if isinstance(data, list) and isinstance(data[0], dict):
        table = Table(title=title, box=box.ROUNDED)
        columns = list(data[0].keys())
        for column in columns:
            numerico = isinstance(data[0].get(column), (int, float)) and not isinstance(data[0].get(column), bool)
            table.add_column(column, justify="right" if numerico else "left")
        for row in data:
            table.add_row(*[_fmt(row.get(col)) for col in columns])
        console.print(table)
        return

    if isinstance(data, dict):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Campo")
        table.add_column("Valor", justify="right")
        for chave, valor in data.items():
            if isinstance(valor, (list, dict)):
                continue
            table.add_row(chave, _fmt(valor))
        console.print(table)
        return

    _print_json(data)


def _parse_referencia(valor: Optional[str]) -> Optional[date]:
    if valor is None:
        return None
    try:
        return date.fromisoformat(valor)
    except ValueError:
        raise typer.BadParameter("use o formato YYYY-MM-DD")


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Aplica migrações e recria as views auxiliares."""
    apply_migrations(db_path)
    create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


params_app = typer.Typer(help="Gerenciar parâmetros (percentuais da DRE, janela do giro, formas).")
app.add_typer(params_app, name="params")


@params_app.command("set")
def cmd_params_set(
    chave: str = typer.Argument(..., help="Nome do parâmetro (ver `params show`)"),
    valor: float = typer.Argument(..., help="Novo valor numérico"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Define um parâmetro conhecido."""
    if chave not in PARAMETROS:
        typer.echo(f"Parâmetro desconhecido: {chave}. Opções: {', '.join(PARAMETROS)}")
        raise typer.Exit(code=1)
    apply_migrations(db_path)
    ParamsRepo(db_path).set_many([(chave, str(valor))])
    typer.echo(">> Parâmetro atualizado.")


@params_app.command("get")
def cmd_params_get(
    chave: str = typer.Argument(..., help="Ex.: semanas_por_mes | aliquota_impostos"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Mostra um parâmetro específico."""
    apply_migrations(db_path)
    val = ParamsRepo(db_path).get(chave)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Exibe os parâmetros efetivos (com fallback para defaults)."""
    apply_migrations(db_path)
    atuais = ParamsRepo(db_path).get_all()
    table = Table(title="Parâmetros do Sistema", box=box.ROUNDED)
    table.add_column("Parâmetro")
    table.add_column("Valor Atual", justify="right")
    table.add_column("Valor Padrão", justify="right")
    for chave, padrao in PARAMETROS.items():
        table.add_row(chave, atuais.get(chave, str(padrao)), str(padrao))
    console.print(table)
    console.print(f"[dim]Banco de dados: {db_path}[/dim]")


# -----------------------
# giro e faturamento
# -----------------------

@app.command("giro")
def cmd_giro(
    referencia: Optional[str] = typer.Option(None, help="Data de referência (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Giro semanal por cliente (personalizado, histórico ou projetado)."""
    linhas = run_giro(db_path=db_path, referencia=_parse_referencia(referencia))
    if as_json:
        _print_json(linhas)
        return
    _display_table(linhas, title="Giro Semanal por Cliente")


@app.command("giro-definir")
def cmd_giro_definir(
    cliente_id: str = typer.Argument(..., help="ID do cliente"),
    giro: Optional[int] = typer.Argument(None, help="Giro semanal; omita para remover"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Define (ou remove) o giro semanal personalizado de um cliente."""
    try:
        rec = run_definir_giro_personalizado(cliente_id, giro, db_path=db_path)
    except ValueError as e:
        typer.echo(f"Erro: {e}")
        raise typer.Exit(code=1)
    _display_table(rec, title="Giro Personalizado")


@app.command("giro-historico")
def cmd_giro_historico(
    cliente_id: str = typer.Argument(..., help="ID do cliente"),
    referencia: Optional[str] = typer.Option(None, help="Data de referência (YYYY-MM-DD)"),
    semanas: Optional[int] = typer.Option(None, help="Quantidade de semanas (padrão: janela do giro)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Unidades entregues por semana para um cliente."""
    linhas = run_historico_semanal(
        cliente_id, db_path=db_path, referencia=_parse_referencia(referencia), semanas=semanas
    )
    _display_table(linhas, title=f"Histórico Semanal: {cliente_id}")


@app.command("faturamento")
def cmd_faturamento(
    referencia: Optional[str] = typer.Option(None, help="Data de referência (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Faturamento semanal detalhado por cliente e categoria."""
    linhas = run_faturamento(db_path=db_path, referencia=_parse_referencia(referencia))
    if as_json:
        _print_json(linhas)
        return
    resumo = [
        {k: r[k] for k in ("cliente_nome", "categoria_nome", "grupo", "giro_semanal",
                           "preco_unitario", "fonte_preco", "faturamento_semanal")}
        for r in linhas
    ]
    _display_table(resumo, title="Faturamento Semanal Detalhado")
    total = sum(r["faturamento_semanal"] for r in linhas)
    console.print(f"[bold]Total semanal:[/bold] R$ {_fmt(total)}")


@app.command("dre")
def cmd_dre(
    referencia: Optional[str] = typer.Option(None, help="Data de referência (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """DRE mensal estimada."""
    res = run_dre(db_path=db_path, referencia=_parse_referencia(referencia))
    if as_json:
        _print_json(res.linhas())
        return

    table = Table(title="DRE Mensal Estimada", box=box.ROUNDED)
    table.add_column("Conta")
    table.add_column("Valor (R$)", justify="right")
    table.add_column("% Receita", justify="right")
    for linha in res.linhas():
        valor = linha["valor"]
        estilo = "bold red" if valor < 0 and linha["conta"].startswith("=") else ""
        valor_fmt = f"[{estilo}]{_fmt(valor)}[/]" if estilo else _fmt(valor)
        table.add_row(linha["conta"], valor_fmt, _fmt(linha["percentual"]))
    console.print(table)

    d = res.detalhes
    console.print(
        f"[dim]Clientes ativos: {d.clientes_ativos} | com NF: {d.clientes_com_nf} | "
        f"sem NF: {d.clientes_sem_nf} | impostos sobre {_fmt(d.percentual_impostos)}% da receita[/dim]"
    )


@app.command("producao")
def cmd_producao(
    referencia: Optional[str] = typer.Option(None, help="Data de referência (YYYY-MM-DD)"),
    capacidade_forma: Optional[int] = typer.Option(None, help="Unidades por forma"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Plano semanal de produção por sabor."""
    plano = run_planejamento(
        db_path=db_path, referencia=_parse_referencia(referencia), capacidade_forma=capacidade_forma
    )
    _display_table(plano, title="Plano de Produção")
    _display_table(plano["sabores"], title="Produção por Sabor")
    if not plano["mix_valido"]:
        console.print("[bold yellow]Atenção: percentuais dos sabores ativos não somam 100%.[/]")


@app.command("revisar-qp")
def cmd_revisar_qp(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Sugere nova quantidade padrão quando o intervalo real foge da periodicidade."""
    _display_table(run_revisar_qp(db_path=db_path), title="Revisão de Quantidade Padrão")


# -----------------------
# importação
# -----------------------

importar_app = typer.Typer(help="Importar planilhas XLSX.")
app.add_typer(importar_app, name="importar")


@importar_app.command("clientes")
def cmd_importar_clientes(
    path: str = typer.Argument(..., help="Caminho do XLSX de CLIENTES"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_clientes(path, db_path=db_path), title="Importação de Clientes")


@importar_app.command("entregas")
def cmd_importar_entregas(
    path: str = typer.Argument(..., help="Caminho do XLSX de ENTREGAS (uma linha por item)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_entregas(path, db_path=db_path), title="Importação de Entregas")


@importar_app.command("custos")
def cmd_importar_custos(
    path: str = typer.Argument(..., help="Caminho do XLSX de CUSTOS"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_custos(path, db_path=db_path), title="Importação de Custos")


@importar_app.command("categorias")
def cmd_importar_categorias(
    path: str = typer.Argument(..., help="Caminho do XLSX de CATEGORIAS"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_categorias(path, db_path=db_path), title="Importação de Categorias")


@importar_app.command("sabores")
def cmd_importar_sabores(
    path: str = typer.Argument(..., help="Caminho do XLSX de SABORES"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_sabores(path, db_path=db_path), title="Importação de Sabores")


@importar_app.command("produtos")
def cmd_importar_produtos(
    path: str = typer.Argument(..., help="Caminho do XLSX de PRODUTOS"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_produtos(path, db_path=db_path), title="Importação de Produtos")


@importar_app.command("precos")
def cmd_importar_precos(
    path: str = typer.Argument(..., help="Caminho do XLSX de PREÇOS por cliente e categoria"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_precos(path, db_path=db_path), title="Importação de Preços")


@importar_app.command("giros-categoria")
def cmd_importar_giros_categoria(
    path: str = typer.Argument(..., help="Caminho do XLSX de GIROS por cliente e categoria"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    _display_table(run_importar_giros_categoria(path, db_path=db_path), title="Importação de Giros por Categoria")


@app.command("logs")
def cmd_logs(
    tipo: str = typer.Argument("transactions", help="transactions | calculos | database | system"),
    linhas: int = typer.Option(50, help="Quantidade de linhas"),
):
    """Mostra as últimas linhas de um arquivo de log."""
    typer.echo(get_log_summary(tipo, linhas))


def main():
    app()


if __name__ == "__main__":
    main()
