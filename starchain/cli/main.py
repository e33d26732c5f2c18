# starchain/cli/main.py
"""
CLI for inspecting, verifying and exporting the star chain.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from starchain.chain.blockchain import Blockchain
from starchain.config import get_settings
from starchain.core.errors import StarchainError
from starchain.registry.service import block_output

app = typer.Typer(
    name="starchain",
    help="Inspect, verify and export the star registry chain",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

T = TypeVar("T")


def get_db_path(db_flag: Optional[Path] = None) -> Path:
    """Resolve DB path in this order:
    1. --db flag
    2. STARCHAIN_DB_PATH environment variable
    3. Default: ~/.starchain/chain.db
    """
    if db_flag:
        return db_flag.resolve()
    return get_settings().db_path


def with_chain(db: Optional[Path], fn: Callable[[Blockchain], T]) -> T:
    """Open the chain, run ``fn`` on it, close it. Exits if the database is missing or broken."""
    db_path = get_db_path(db)

    if not db_path.exists():
        console.print(f"[red]Database file not found: {db_path}[/]")
        console.print("[yellow]To get started:[/]")
        console.print("  • Run the registry service first (creates/populates DB)")
        console.print("  • Set env var: export STARCHAIN_DB_PATH=/path/to/chain.db")
        console.print("  • Or use --db: starchain verify --db /custom/path.db")
        raise typer.Exit(1)

    async def run() -> T:
        async with Blockchain(db_path) as chain:
            return fn(chain)

    try:
        return asyncio.run(run())
    except StarchainError as e:
        console.print(f"[red]Failed to open database: {str(e)}[/]")
        console.print("[yellow]The file may be corrupted or not a valid block store.[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log chain activity to stderr"),
):
    """Manage the star registry chain."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s:%(name)s:%(message)s")


@app.command()
def height(
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
):
    """Print the height of the newest block."""
    console.print(str(with_chain(db, lambda chain: chain.get_block_height())))


@app.command()
def block(
    block_height: int = typer.Argument(..., help="Height of the block to show"),
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
):
    """Show a single block as JSON (story decoded)."""
    found = with_chain(db, lambda chain: chain.get_block(block_height))

    if found is None:
        console.print(f"[yellow]No block at height {block_height}[/]")
        raise typer.Exit(1)
    console.print_json(json.dumps(block_output(found)))


@app.command()
def blocks(
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of recent blocks to show"),
):
    """List the most recent blocks."""
    recent = with_chain(db, lambda chain: list(chain.blocks(max(0, chain.length - limit))))

    table = Table(title="Recent Blocks")
    table.add_column("Height")
    table.add_column("Time")
    table.add_column("Address")
    table.add_column("Hash")

    for b in recent:
        address = b.body.get("address", "—") if isinstance(b.body, dict) else "genesis"
        table.add_row(str(b.height), str(b.timestamp), address, b.hash[:16] + "…")

    console.print(table)


@app.command()
def verify(
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
):
    """Verify the integrity of the chain (block hashes + hash links)."""
    result, total = with_chain(db, lambda chain: (chain.validate_chain(), chain.length))

    if result.is_valid:
        console.print(f"[green]✓ Chain of {total} blocks is valid[/]")
        return

    console.print(f"✗ {result}", style="red", markup=False)
    raise typer.Exit(1)


@app.command()
def stars(
    address: str = typer.Argument(..., help="Wallet address that registered the stars"),
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
):
    """List the stars registered by an address."""
    found = with_chain(db, lambda chain: chain.find_by_address(address))

    if not found:
        console.print(f"[yellow]No stars found for address '{address}'[/]")
        return

    table = Table(title=f"Stars of {address}")
    table.add_column("Height")
    table.add_column("RA")
    table.add_column("Dec")
    table.add_column("Story")
    for b in found:
        star = block_output(b)["body"]["star"]
        table.add_row(str(b.height), str(star["ra"]), str(star["dec"]), star.get("storyDecoded", ""))
    console.print(table)


@app.command()
def export(
    db: Optional[Path] = typer.Option(None, "--db", help="Path to SQLite database"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: chain.jsonl)"),
):
    """Export the chain as JSONL (one block record per line)."""
    records = with_chain(db, lambda chain: [b.to_record() for b in chain.blocks()])

    out_path = output or Path("chain.jsonl")
    with open(out_path, "w", encoding="utf-8") as f:
        for record in records:
            json.dump(record, f, separators=(",", ":"))
            f.write("\n")

    console.print(f"[green]Exported {len(records)} blocks to {out_path}[/]")


if __name__ == "__main__":
    app()
