"""CLI smoke tests — no server needed."""

from click.testing import CliRunner

from vidtube.cli.main import main


def test_help_lists_commands():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "init-db", "health", "login", "whoami", "videos"):
        assert command in result.output


def test_whoami_requires_token(monkeypatch):
    monkeypatch.delenv("VIDTUBE_TOKEN", raising=False)
    result = CliRunner().invoke(main, ["whoami"])
    assert result.exit_code == 1
    assert "--token required" in result.output
