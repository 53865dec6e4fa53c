import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from padaria.adapters.cli import app

runner = CliRunner()


def test_cli_migrate_and_params(tmp_path: Path):
    db_path = str(tmp_path / "padaria_cli.sqlite")
    result = runner.invoke(app, ["migrate", "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["params", "set", "semanas_por_mes", "4.33", "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["params", "get", "semanas_por_mes", "--db", db_path])
    assert result.exit_code == 0
    assert result.stdout.strip() == "4.33"

    result = runner.invoke(app, ["params", "show", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "aliquota_impostos" in result.output


def test_cli_params_set_desconhecido(tmp_path: Path):
    db_path = str(tmp_path / "padaria_cli.sqlite")
    result = runner.invoke(app, ["params", "set", "nivel_servico", "0.9", "--db", db_path])
    assert result.exit_code == 1
    assert "desconhecido" in result.output


def test_cli_giro_json(db_path):
    result = runner.invoke(app, ["giro", "--json", "--referencia", "2025-03-12", "--db", db_path])
    assert result.exit_code == 0, result.output
    linhas = json.loads(result.stdout)
    assert {l["cliente_id"]: l["origem"] for l in linhas}["A"] == "historico_completo"


def test_cli_referencia_invalida(db_path):
    result = runner.invoke(app, ["giro", "--referencia", "12/03/2025", "--db", db_path])
    assert result.exit_code != 0


def test_cli_dre_e_producao(db_path):
    result = runner.invoke(app, ["dre", "--referencia", "2025-03-12", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Receita total" in result.output

    result = runner.invoke(app, ["dre", "--json", "--referencia", "2025-03-12", "--db", db_path])
    linhas = json.loads(result.stdout)
    assert linhas[0]["conta"] == "Receita total"
    assert linhas[0]["valor"] == 4000.0

    result = runner.invoke(app, ["producao", "--referencia", "2025-03-12", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Tradicional" in result.output


def test_cli_faturamento_e_historico(db_path):
    result = runner.invoke(app, ["faturamento", "--json", "--referencia", "2025-03-12", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert len(json.loads(result.stdout)) == 2

    result = runner.invoke(app, ["giro-historico", "A", "--semanas", "4", "--referencia", "2025-03-12", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "2025-03-10" in result.output


def test_cli_giro_definir(db_path):
    result = runner.invoke(app, ["giro-definir", "B", "33", "--db", db_path])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["giro", "--json", "--referencia", "2025-03-12", "--db", db_path])
    por_id = {l["cliente_id"]: l for l in json.loads(result.stdout)}
    assert por_id["B"]["giro_semanal"] == 33


def test_cli_revisar_qp_sem_sugestoes(db_path):
    result = runner.invoke(app, ["revisar-qp", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Nenhum dado encontrado" in result.output


def test_cli_importar_sabores(tmp_path: Path):
    db_path = str(tmp_path / "padaria_cli.sqlite")
    xlsx = tmp_path / "sabores.xlsx"
    pd.DataFrame({"ID": [1], "Nome": ["Tradicional"], "Percentual Padrão": [100]}).to_excel(xlsx, index=False)
    result = runner.invoke(app, ["importar", "sabores", str(xlsx), "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "linhas_gravadas" in result.output


def test_cli_importar_precos_e_giros_categoria(db_path, tmp_path: Path):
    precos = tmp_path / "precos.xlsx"
    pd.DataFrame({"Cliente": ["A"], "Categoria": [1], "Preço": ["11,50"]}).to_excel(precos, index=False)
    result = runner.invoke(app, ["importar", "precos", str(precos), "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "linhas_gravadas" in result.output

    giros = tmp_path / "giros.xlsx"
    pd.DataFrame({"Cliente": ["A"], "Categoria": [1], "Giro": [60]}).to_excel(giros, index=False)
    result = runner.invoke(app, ["importar", "giros-categoria", str(giros), "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["faturamento", "--json", "--referencia", "2025-03-12", "--db", db_path])
    linha_a = next(l for l in json.loads(result.stdout) if l["cliente_id"] == "A")
    assert linha_a["preco_unitario"] == 11.5
    assert linha_a["giro_semanal"] == 60


def test_cli_importar_produtos(db_path, tmp_path: Path):
    xlsx = tmp_path / "produtos.xlsx"
    pd.DataFrame({"Código": ["P9"], "Nome": ["Queijo 500g"], "Categoria": [1]}).to_excel(xlsx, index=False)
    result = runner.invoke(app, ["importar", "produtos", str(xlsx), "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "linhas_gravadas" in result.output
