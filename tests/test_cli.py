from click.testing import CliRunner

from src.cli import SAMPLE_CONTACTS, cli
from src.errors import StoreInitError


def _db_env(tmp_path):
    return {"DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'contacts.db'}", "LOG_LEVEL": "WARNING"}


def test_init_db_creates_empty_table(tmp_path):
    result = CliRunner().invoke(cli, ["init-db"], env=_db_env(tmp_path))

    assert result.exit_code == 0, result.output
    assert "(0 contacts)" in result.output


def test_init_db_seed_and_reset(tmp_path):
    runner = CliRunner()
    env = _db_env(tmp_path)

    seeded = runner.invoke(cli, ["init-db", "--seed"], env=env)
    reseeded = runner.invoke(cli, ["init-db", "--reset", "--seed"], env=env)

    assert seeded.exit_code == 0, seeded.output
    assert f"({len(SAMPLE_CONTACTS)} contacts)" in seeded.output
    assert f"({len(SAMPLE_CONTACTS)} contacts)" in reseeded.output


def test_init_db_reports_unusable_database(tmp_path):
    env = {"DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'x.db'}"}

    result = CliRunner().invoke(cli, ["init-db"], env=env)

    assert result.exit_code == 1
    assert "Error" in result.output


def test_serve_exits_non_zero_when_store_fails(monkeypatch):
    def failing_serve(settings):
        raise StoreInitError(RuntimeError("unable to open database file"))

    monkeypatch.setattr("src.server.serve", failing_serve)

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 1
    assert "Failed to initialize database" in result.output
