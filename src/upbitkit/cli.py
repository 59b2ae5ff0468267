"""Typer-based CLI for the Upbit adapter."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .exchanges.errors import ExchangeError

if TYPE_CHECKING:
    from .exchanges.upbit import UpbitClient

T = TypeVar("T")

app = typer.Typer(help="Upbit signed request CLI")
console = Console()
logger = logging.getLogger(__name__)


# Import with local functions so tests can patch them
def _load_settings(config_path: Optional[Path] = None):
    from .config import load_settings
    return load_settings(config_path)


def _create_client(settings) -> "UpbitClient":
    from .exchanges.factory import create_client_from_settings
    return create_client_from_settings(settings)


def _configure_logging(log_dir: Path | None = None) -> None:
    from .logging import configure_logging
    configure_logging(log_dir)


def main(argv: list[str] | None = None) -> int:
    """Console script entry point."""
    if argv is None:
        argv = sys.argv[1:]
    _configure_logging(None)
    try:
        app(argv)
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


def _run(config: Optional[Path], call: Callable[["UpbitClient"], Awaitable[T]]) -> T:
    """Build a client, run one call, always close the client.

    Adapter errors are printed and turned into exit code 1.
    """

    async def _go() -> T:
        client = _create_client(_load_settings(config))
        try:
            return await call(client)
        finally:
            await client.close()

    try:
        return asyncio.run(_go())
    except (ExchangeError, ValueError) as e:
        logger.debug("command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def orderbook(
    symbol: str = typer.Argument(..., help="Pair as BASE/QUOTE, e.g. BTC/KRW"),
    depth: int = typer.Option(10, help="Levels to show per side"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the order book for a symbol."""
    book = _run(config, lambda client: client.fetch_order_book(symbol))

    table = Table(title=f"{book.symbol} @ {book.timestamp}")
    table.add_column("Bid size", justify="right")
    table.add_column("Bid", justify="right", style="green")
    table.add_column("Ask", justify="right", style="red")
    table.add_column("Ask size", justify="right")

    rows = max(len(book.bids), len(book.asks))
    for i in range(min(rows, depth)):
        bid = book.bids[i] if i < len(book.bids) else ["", ""]
        ask = book.asks[i] if i < len(book.asks) else ["", ""]
        table.add_row(str(bid[1]), str(bid[0]), str(ask[0]), str(ask[1]))

    console.print(table)


@app.command()
def balance(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show free balance per currency."""
    balances = _run(config, lambda client: client.fetch_balance())

    if not balances:
        console.print("[yellow]No balances[/yellow]")
        return

    table = Table(title="Balances")
    table.add_column("Currency", style="cyan")
    table.add_column("Free", justify="right")
    for currency, amount in sorted(balances.items()):
        table.add_row(currency, f"{amount:.8f}")
    console.print(table)


@app.command()
def trades(
    symbol: str = typer.Argument(..., help="Pair as BASE/QUOTE"),
    state: Optional[str] = typer.Option(None, help="done, cancel or wait (default: done + cancel)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show own trades, newest first."""
    result = _run(config, lambda client: client.fetch_my_trades(symbol, state))

    if not result:
        console.print("[yellow]No trades[/yellow]")
        return

    table = Table(title=f"Trades {symbol}")
    table.add_column("ID", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("Side")
    table.add_column("Price", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Fee", justify="right")
    table.add_column("Cost", justify="right")
    for trade in result:
        side_color = "green" if trade.side == "buy" else "red"
        table.add_row(
            trade.id,
            str(trade.timestamp),
            f"[{side_color}]{trade.side}[/{side_color}]",
            f"{trade.price:g}",
            f"{trade.amount:g}",
            f"{trade.fee:g}",
            f"{trade.cost:.8f}",
        )
    console.print(table)


@app.command()
def order(
    symbol: str = typer.Argument(..., help="Pair as BASE/QUOTE"),
    side: str = typer.Argument(..., help="buy or sell"),
    amount: float = typer.Argument(..., help="Base currency amount"),
    price: float = typer.Argument(..., help="Limit price in quote currency"),
    order_type: str = typer.Option("limit", "--type", help="Order type (only limit is supported)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Place a limit order."""
    handle = _run(config, lambda client: client.create_order(symbol, order_type, side, amount, price))

    console.print(Panel.fit(
        f"[green]✓ Order placed[/green]\n"
        f"Order ID: {handle.id}\n"
        f"Symbol: {symbol}\n"
        f"Side: {side}\n"
        f"Amount: {amount}\n"
        f"Price: {price}",
        title="Order",
    ))


@app.command()
def cancel(
    order_id: str = typer.Argument(..., help="Vendor order uuid"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Cancel an order."""
    ack: dict[str, Any] = _run(config, lambda client: client.cancel_order(order_id))

    console.print(Panel.fit(
        f"[green]✓ Cancel requested[/green]\n"
        f"Order ID: {ack.get('uuid', order_id)}\n"
        f"State: {ack.get('state', 'unknown')}",
        title="Cancel",
    ))


if __name__ == "__main__":
    sys.exit(main())
