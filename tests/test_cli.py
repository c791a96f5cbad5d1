"""Tests for the command line interface."""

from typer.testing import CliRunner

from thorchain_dashboard.cli.main import app
from thorchain_dashboard.clients import ThorNodeClient

runner = CliRunner()


def test_providers_json():
    """The providers command lists every configured provider."""
    result = runner.invoke(app, ["providers", "--format", "json"])

    assert result.exit_code == 0
    assert "thornode-archive.ninerealms.com" in result.output
    assert "midgard.thorchain.info" in result.output


def test_providers_table():
    result = runner.invoke(app, ["providers"])

    assert result.exit_code == 0
    assert "Configured Providers" in result.output


def test_network_reports_exhaustion(monkeypatch, upstream):
    """A failed fetch prints the aggregated error and exits non-zero."""
    upstream.status("thornode.thorchain.liquify.com", 500)
    upstream.status("thornode.ninerealms.com", 502)
    build = ThorNodeClient.from_config
    monkeypatch.setattr(ThorNodeClient, "from_config", lambda: build(http_client=upstream.client()))

    result = runner.invoke(app, ["network"])

    assert result.exit_code == 1
    assert "All providers failed" in result.output


def test_network_json(monkeypatch, upstream):
    upstream.json("thornode.thorchain.liquify.com", {"rune_price_in_tor": "512000000"})
    build = ThorNodeClient.from_config
    monkeypatch.setattr(ThorNodeClient, "from_config", lambda: build(http_client=upstream.client()))

    result = runner.invoke(app, ["network", "--format", "json"])

    assert result.exit_code == 0
    assert '"rune_price": "5.12"' in result.output
