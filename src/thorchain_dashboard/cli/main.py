"""CLI for the THORChain dashboard data layer."""

import json
import logging
import time
from decimal import Decimal
from enum import StrEnum

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.traceback import install

from thorchain_dashboard.api.errors import FetchError, PricingError
from thorchain_dashboard.clients import ThorNodeClient
from thorchain_dashboard.data import get_providers, get_supported_apis
from thorchain_dashboard.pricing import CoinGeckoPricing
from thorchain_dashboard.stores import PollState, RunePricePoller

# Install rich traceback handler
install(show_locals=False)

app = typer.Typer(
    name="thorchain-dashboard",
    help="Inspect THORChain network data through the failover fetch layer",
    add_completion=False,
)

console = Console()


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=debug)],
        force=True,
    )


def _print_json(data) -> None:
    def decimal_default(obj):
        if isinstance(obj, Decimal):
            return str(obj)
        raise TypeError

    console.print(json.dumps(data, indent=2, default=decimal_default))


@app.command()
def providers(
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
) -> None:
    """List configured upstream providers."""
    rows = [(api, provider) for api in get_supported_apis() for provider in get_providers(api)]

    if format == OutputFormat.JSON:
        _print_json([{"api": api, **provider.model_dump()} for api, provider in rows])
        return

    table = Table(title="Configured Providers", show_header=True, header_style="bold magenta")
    table.add_column("API", style="cyan")
    table.add_column("Provider", style="green")
    table.add_column("Priority", justify="right")
    table.add_column("Base URL", style="blue")
    table.add_column("Height Queries", style="yellow")

    for api, provider in rows:
        table.add_row(
            api,
            provider.name,
            str(provider.priority),
            provider.base_url,
            "✓" if provider.supports_height_query else "-",
        )

    console.print(table)


@app.command()
def network(
    height: int | None = typer.Option(None, "--height", help="Block height for a historical read"),
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show network data and the RUNE price."""
    _configure_logging(debug)

    with ThorNodeClient.from_config() as thornode:
        try:
            info = thornode.get_network(height=height)
        except FetchError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)
        health = thornode.health()

    if format == OutputFormat.JSON:
        _print_json({**info.model_dump(mode="json"), "rune_price": info.rune_price})
        return

    table = Table(show_header=False, box=None)
    table.add_column("Label", style="bold")
    table.add_column("Value", style="bold green")
    table.add_row("RUNE Price:", f"${info.rune_price:,.4f}")
    if info.bond_reward_rune is not None:
        table.add_row("Bond Rewards:", info.bond_reward_rune)
    for name, state in health.items():
        table.add_row(f"  {name} failures", str(state.consecutive_failures))
    console.print(table)


@app.command()
def pools(
    height: int | None = typer.Option(None, "--height", help="Block height for a historical read"),
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """List liquidity pools."""
    _configure_logging(debug)

    with ThorNodeClient.from_config() as thornode:
        try:
            pool_list = thornode.get_pools(height=height, prefer_secondary=height is None)
        except FetchError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    if format == OutputFormat.JSON:
        _print_json([pool.model_dump(mode="json") for pool in pool_list])
        return

    if not pool_list:
        console.print("\n[yellow]No pools found[/yellow]")
        return

    table = Table(title="THORChain Pools", show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan")
    table.add_column("Status", style="yellow")
    table.add_column("RUNE Depth", justify="right")
    table.add_column("Asset Depth", justify="right")
    table.add_column("USD Price", style="bold green", justify="right")

    for pool in sorted(pool_list, key=lambda p: p.rune_depth, reverse=True):
        table.add_row(
            pool.asset,
            pool.status,
            f"{pool.rune_depth:,.2f}",
            f"{pool.asset_depth:,.4f}",
            f"${pool.usd_price:,.2f}",
        )

    console.print(table)


@app.command()
def mimir(
    keys: list[str] = typer.Argument(..., help="Mimir keys (e.g. CHURNINTERVAL)"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show Mimir values."""
    _configure_logging(debug)

    with ThorNodeClient.from_config() as thornode:
        try:
            values = thornode.get_mimir_values(keys)
        except FetchError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in values.items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def price(
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
) -> None:
    """Show the RUNE price in fiat currencies (CoinGecko)."""
    with CoinGeckoPricing.from_config() as pricing:
        try:
            rates = pricing.get_exchange_rates()
        except PricingError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    if format == OutputFormat.JSON:
        _print_json(rates.rates)
        return

    table = Table(title="RUNE Exchange Rates", show_header=True, header_style="bold magenta")
    table.add_column("Currency", style="cyan")
    table.add_column("Price", style="bold green", justify="right")
    for currency, value in rates.rates.items():
        table.add_row(currency, f"{value:,.4f}")
    console.print(table)


@app.command()
def watch_price(
    duration: float = typer.Option(30.0, "--duration", "-t", help="Seconds to watch"),
    interval: float | None = typer.Option(None, "--interval", "-i", help="Polling interval in seconds"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Poll the RUNE price and print every update."""
    _configure_logging(debug)

    with ThorNodeClient.from_config() as thornode:
        poller = RunePricePoller(thornode, interval=interval)

        def show(state: PollState) -> None:
            if state.error:
                console.print(f"[yellow]stale[/yellow] {poller.formatted} [dim]({state.error})[/dim]")
            else:
                change = poller.change()
                console.print(f"{poller.formatted} [dim]{change.direction.value} {change.percentage:+.3f}%[/dim]")

        remove_listener = poller.add_listener(show)
        with poller.subscribe():
            try:
                time.sleep(duration)
            except KeyboardInterrupt:
                pass
        remove_listener()


if __name__ == "__main__":
    app()
