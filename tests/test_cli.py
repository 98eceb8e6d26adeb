"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from hoststat.apps import main
from hoststat.storage.store import open_store

from conftest import FakeMetricsSource

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("URL", "TOKEN", "FREQ_MINUTES", "DB_PATH", "VERIFY_TLS", "REQUEST_TIMEOUT_SECONDS"):
        monkeypatch.delenv(f"HOSTSTAT_{key}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def captured(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "run_agent", lambda settings, max_cycles=None: calls.append((settings, max_cycles)))
    return calls


def test_run_requires_url_and_token(tmp_path):
    result = runner.invoke(main.app, ["run", "-url", "https://collector.example"])
    assert result.exit_code == 1
    assert "required" in result.output
    # nothing was created before failing
    assert not (tmp_path / "server_monitor.db").exists()


def test_run_accepts_single_dash_flags(captured):
    result = runner.invoke(main.app, ["run", "-url", "https://c.example/in", "-token", "abc", "-freq", "1"])

    assert result.exit_code == 0, result.output
    (settings, max_cycles), = captured
    assert settings.reporting.url == "https://c.example/in"
    assert settings.reporting.token == "abc"
    assert settings.interval_seconds == 60.0
    assert settings.reporting.verify_tls is False
    assert max_cycles is None


def test_run_defaults_freq_to_five_minutes(captured):
    runner.invoke(main.app, ["run", "--url", "https://c.example", "--token", "abc"])
    (settings, _), = captured
    assert settings.freq_minutes == 5


def test_run_optional_flags(captured):
    result = runner.invoke(
        main.app,
        ["run", "--url", "https://c", "--token", "t", "--verify-tls", "--timeout", "3", "--cycles", "2", "--db", "x.db"],
    )
    assert result.exit_code == 0, result.output
    (settings, max_cycles), = captured
    assert settings.reporting.verify_tls is True
    assert settings.reporting.timeout_seconds == 3.0
    assert settings.store.db_path == "x.db"
    assert max_cycles == 2


def test_run_rejects_zero_freq(captured):
    result = runner.invoke(main.app, ["run", "--url", "https://c", "--token", "t", "--freq", "0"])
    assert result.exit_code == 1
    assert captured == []


def test_run_rejects_zero_cycles(captured):
    result = runner.invoke(main.app, ["run", "--url", "https://c", "--token", "t", "--cycles", "0"])
    assert result.exit_code == 2
    assert captured == []


@pytest.mark.parametrize("url", ["http://[::1/x", "ftp://c.example"])
def test_run_rejects_malformed_url(tmp_path, url):
    result = runner.invoke(main.app, ["run", "--url", url, "--token", "t"])
    assert result.exit_code == 1
    assert "URL" in result.output
    assert not (tmp_path / "server_monitor.db").exists()


def test_run_rejects_non_ascii_token(tmp_path):
    result = runner.invoke(main.app, ["run", "--url", "https://c.example", "--token", "t\u00f6k\u00e9n"])
    assert result.exit_code == 1
    assert "ASCII" in result.output
    assert not (tmp_path / "server_monitor.db").exists()


def test_run_unopenable_store_exits(tmp_path):
    result = runner.invoke(main.app, ["run", "--url", "https://c", "--token", "t", "--db", str(tmp_path)])
    assert result.exit_code == 1


def test_run_uses_environment(monkeypatch, captured):
    monkeypatch.setenv("HOSTSTAT_URL", "https://env.example")
    monkeypatch.setenv("HOSTSTAT_TOKEN", "envtoken")
    result = runner.invoke(main.app, ["run"])
    assert result.exit_code == 0, result.output
    assert captured[0][0].reporting.url == "https://env.example"


def test_config_show_masks_token(monkeypatch):
    monkeypatch.setenv("HOSTSTAT_TOKEN", "supersecret")
    result = runner.invoke(main.app, ["config-show"])
    assert result.exit_code == 0
    assert "supersecret" not in result.output
    assert "su****et" in result.output


def test_history_lists_rows(tmp_path, snapshot):
    db = str(tmp_path / "h.db")
    with open_store(db) as store:
        store.append(snapshot)
        store.append(snapshot)

    result = runner.invoke(main.app, ["history", "--db", db, "--limit", "1"])
    assert result.exit_code == 0, result.output
    assert "1 of 2" in result.output


def test_snapshot_prints_json_without_storing(monkeypatch, tmp_path):
    monkeypatch.setattr(main, "SystemMetricsSource", FakeMetricsSource)

    result = runner.invoke(main.app, ["snapshot"])

    assert result.exit_code == 0, result.output
    assert '"gpuUsage"' in result.output
    assert '"totalCores": 4' in result.output
    assert not (tmp_path / "server_monitor.db").exists()
