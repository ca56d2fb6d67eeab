import pytest

import main
from utils import app_config


STATEMENT = (
    "Compte courant carte n° 1234;;;\r\n"
    "Date;Libellé;Débit;Crédit;\r\n"
    "03/01/2024;CB BOULANGERIE;4,20;;\r\n"
    "05/01/2024;VIR SALAIRE;;2000,00;\r\n"
)


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config" / "config.json")
    monkeypatch.setattr(main, "configure_logging", lambda level: None)
    monkeypatch.setattr("getpass.getpass", lambda prompt="": "pw1")


@pytest.fixture()
def run(tmp_path):
    def _run(*args):
        return main.main(["--db-folder", str(tmp_path / "data"), *args])
    return _run


@pytest.fixture()
def statement(tmp_path):
    path = tmp_path / "releve.csv"
    path.write_bytes(STATEMENT.encode("cp1252"))
    return path


def test_import_then_list(run, statement, capsys):
    assert run("import", "--user", "alice", str(statement)) == 0
    assert "Imported 2 new of 2" in capsys.readouterr().out

    assert run("import", "--user", "alice", str(statement)) == 0
    assert "Imported 0 new of 2" in capsys.readouterr().out

    assert run("list", "--user", "alice") == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert "VIR SALAIRE" in lines[0]
    assert "05/01/2024" in lines[0]
    assert "CB BOULANGERIE" in lines[1]


def test_accounts_and_totals(run, statement, capsys):
    run("import", "--user", "alice", str(statement))
    capsys.readouterr()

    assert run("accounts", "--user", "alice") == 0
    assert capsys.readouterr().out.splitlines() == ["Compte courant"]

    assert run("totals", "--user", "alice", "--after", "04/01/2024") == 0
    out = capsys.readouterr().out
    assert "Credit:      2000.00€" in out
    assert "Debit:       0.00€" in out


def test_describe_and_filtered_list(run, statement, capsys):
    run("import", "--user", "alice", str(statement))
    run("describe", "--user", "alice", "1", "Bakery")
    capsys.readouterr()

    assert run("list", "--user", "alice", "--debits") == 0
    out = capsys.readouterr().out
    assert "Bakery" in out
    assert "VIR SALAIRE" not in out

    assert run("describe", "--user", "alice", "999", "Nothing") == 1


def test_wrong_password(run, monkeypatch, capsys):
    assert run("accounts", "--user", "alice") == 0
    monkeypatch.setattr("getpass.getpass", lambda prompt="": "other")

    assert run("accounts", "--user", "alice") == 1
    assert "Wrong username or password." in capsys.readouterr().err


def test_username_too_long(run, capsys):
    assert run("accounts", "--user", "x" * 30) == 2
    assert "at most 25" in capsys.readouterr().err


def test_chart_is_written(run, statement, tmp_path):
    run("import", "--user", "alice", str(statement))
    output = tmp_path / "chart.png"

    assert run("chart", "--user", "alice", str(output)) == 0
    assert output.stat().st_size > 0


def test_clear_with_confirmation(run, statement, capsys):
    run("import", "--user", "alice", str(statement))

    assert run("clear", "--user", "alice", "--yes") == 0
    assert "Deleted 2 transactions." in capsys.readouterr().out


def test_health(run, capsys):
    assert run("health") == 1

    run("accounts", "--user", "alice")
    capsys.readouterr()
    assert run("health") == 0
    assert "'ok': True" in capsys.readouterr().out


def test_config_command(tmp_path, capsys):
    folder = str(tmp_path / "elsewhere")

    assert main.main(["config", "--set-db-folder", folder]) == 0

    out = capsys.readouterr().out
    assert f"db_folder: {folder}" in out
    assert "log_level: WARNING" in out
    assert app_config.get_db_folder() == folder


def test_bad_date_is_a_usage_error(run):
    with pytest.raises(SystemExit):
        run("list", "--user", "alice", "--after", "yesterday")


def test_config_rejects_unknown_options():
    with pytest.raises(SystemExit):
        main.main(["config", "--set-language", "fr"])
