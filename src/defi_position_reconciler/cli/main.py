"""CLI for the DeFi position reconciler."""

import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.traceback import install

# Import all normalizers to trigger auto-registration
from defi_position_reconciler import normalizers  # noqa: F401
from defi_position_reconciler.config import get_settings
from defi_position_reconciler.core import ChainIdentityMapper, ProtocolAliasResolver, ReconciliationAssembler
from defi_position_reconciler.core.models import ComparisonDataset
from defi_position_reconciler.data import load_address_list
from defi_position_reconciler.exceptions import ReconcilerError
from defi_position_reconciler.storage import load_comparison_file, write_comparison_file

# Install rich traceback handler
install(show_locals=True)

app = typer.Typer(
    name="defi-position-reconciler",
    help="Reconcile DeFi positions reported by DeBank and Zerion into one comparison dataset",
    add_completion=False,
)

console = Console()

logger = logging.getLogger(__name__)


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=debug)],
        force=True,
    )


@app.command()
def generate(
    debank_dir: Path | None = typer.Option(None, "--debank-dir", help="DeBank payload directory"),
    zerion_dir: Path | None = typer.Option(None, "--zerion-dir", help="Zerion payload directory"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Comparison dataset to write"),
    addresses: Path | None = typer.Option(None, "--addresses", "-a", help="YAML allow-list of addresses"),
    chains_file: Path | None = typer.Option(None, "--chains-file", help="Chain table YAML"),
    aliases_file: Path | None = typer.Option(None, "--aliases-file", help="Protocol alias table YAML"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Normalize both providers' payloads and write the comparison dataset.

    Examples:

        # Use directories from RECONCILER_* settings (defaults: data/, data_zerion/)
        defi-position-reconciler generate

        # Restrict to an address list and write elsewhere
        defi-position-reconciler generate --addresses addresses.yaml -o out/comparison.json
    """
    _configure_logging(debug)
    settings = get_settings()

    roots = {
        "debank": debank_dir or settings.debank_data_dir,
        "zerion": zerion_dir or settings.zerion_data_dir,
    }
    output_file = output or settings.output_file
    addresses_file = addresses or settings.addresses_file

    try:
        chains = ChainIdentityMapper.from_config(chains_file or settings.chains_file)
        aliases = ProtocolAliasResolver.from_config(aliases_file or settings.aliases_file)
        allow_list = load_address_list(addresses_file) if addresses_file else None

        assembler = ReconciliationAssembler.from_directories(roots, chains, aliases, allow_list)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Reconciling positions...", total=None)
            dataset = assembler.run()
            progress.update(task, description=f"✓ Reconciled {len(dataset.addresses)} addresses")

        write_comparison_file(dataset, output_file)

    except ReconcilerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if debug:
            raise
        raise typer.Exit(1)

    _output_summary(dataset)
    console.print(f"[green]Generated comparison data at {output_file}[/green]")


@app.command()
def show(
    address: str = typer.Argument(..., help="Wallet address to display"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Comparison dataset to read"),
    chain: str | None = typer.Option(None, "--chain", "-c", help="Only show this chain"),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        help="Output format",
    ),
) -> None:
    """
    Show one address from a comparison dataset, providers side by side.

    Examples:

        defi-position-reconciler show 0xABC... --chain ethereum
    """
    path = file or get_settings().output_file
    try:
        data = load_comparison_file(path)
    except FileNotFoundError:
        console.print(f"[bold red]Error:[/bold red] comparison dataset {path} not found")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] invalid comparison dataset {path}: {e}")
        raise typer.Exit(1)

    if not isinstance(data, dict):
        console.print(f"[bold red]Error:[/bold red] invalid comparison dataset {path}: expected an address object")
        raise typer.Exit(1)

    record = next((value for key, value in data.items() if key.lower() == address.lower()), None)
    if record is None:
        console.print(f"[yellow]Address {address} not found in {path}[/yellow]")
        raise typer.Exit(1)

    if chain:
        record = {chain: record[chain]} if chain in record else {}

    if format == OutputFormat.JSON:
        console.print(json.dumps(record, indent=2), markup=False, highlight=False, soft_wrap=True)
        return

    if not record:
        console.print("\n[yellow]No chain data found[/yellow]")
        return

    for chain_key, providers in record.items():
        _output_chain_table(chain_key, providers)


@app.command()
def list_chains(
    chains_file: Path | None = typer.Option(None, "--chains-file", help="Chain table YAML"),
) -> None:
    """List all tracked chains and their provider identifiers."""
    try:
        chains = ChainIdentityMapper.from_config(chains_file or get_settings().chains_file)
    except ReconcilerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Tracked Chains", show_header=True, header_style="bold magenta")
    table.add_column("Chain", style="cyan")
    table.add_column("Chain ID", style="white", justify="right")
    table.add_column("DeBank", style="green")
    table.add_column("Zerion", style="yellow")

    for key in chains.canonical_keys():
        table.add_row(key, str(chains.chain_id(key)), chains.debank_slug(key), chains.zerion_slug(key))

    console.print(table)


@app.command()
def list_aliases(
    chain: str | None = typer.Option(None, "--chain", "-c", help="Only show aliases for this chain"),
    aliases_file: Path | None = typer.Option(None, "--aliases-file", help="Protocol alias table YAML"),
) -> None:
    """List protocol aliases (Zerion name -> DeBank name) per chain."""
    try:
        aliases = ProtocolAliasResolver.from_config(aliases_file or get_settings().aliases_file)
    except ReconcilerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Protocol Aliases", show_header=True, header_style="bold magenta")
    table.add_column("Chain", style="cyan")
    table.add_column("Zerion", style="yellow")
    table.add_column("DeBank", style="green")

    for chain_key in aliases.chains():
        if chain and chain_key != chain:
            continue
        for zerion_name, debank_name in aliases.aliases_for(chain_key).items():
            table.add_row(chain_key, zerion_name, debank_name)

    console.print(table)


def _output_summary(dataset: ComparisonDataset) -> None:
    """Output per-address provider totals as a rich table."""
    if not dataset.addresses:
        console.print("\n[yellow]No addresses found[/yellow]")
        return

    table = Table(title="Comparison Summary", show_header=True, header_style="bold magenta")
    table.add_column("Address", style="cyan")
    table.add_column("Chains", style="blue", justify="right")
    table.add_column("DeBank", style="green", justify="right")
    table.add_column("Zerion", style="yellow", justify="right")

    for address in dataset.addresses:
        records = [r for r in dataset.records if r.address == address]
        totals = {"debank": 0.0, "zerion": 0.0}
        for record in records:
            for provider, snapshot in record.snapshots.items():
                totals[provider] = totals.get(provider, 0.0) + snapshot.total_value

        table.add_row(
            f"{address[:10]}...{address[-8:]}" if len(address) > 20 else address,
            str(len(records)),
            f"${totals['debank']:,.2f}",
            f"${totals['zerion']:,.2f}",
        )

    console.print("\n")
    console.print(table)


def _output_chain_table(chain: str, providers: dict[str, Any]) -> None:
    """Output one chain's protocols with both providers' values."""
    debank = providers.get("debank", {}).get("protocols", {})
    zerion = providers.get("zerion", {}).get("protocols", {})

    table = Table(title=chain, show_header=True, header_style="bold magenta")
    table.add_column("Protocol", style="cyan")
    table.add_column("DeBank", style="green", justify="right")
    table.add_column("Zerion", style="yellow", justify="right")
    table.add_column("Delta", style="bold", justify="right")

    for name in sorted(set(debank) | set(zerion)):
        debank_value = debank.get(name, {}).get("value")
        zerion_value = zerion.get(name, {}).get("value")
        delta = (zerion_value or 0.0) - (debank_value or 0.0)
        table.add_row(
            name,
            f"${debank_value:,.2f}" if debank_value is not None else "-",
            f"${zerion_value:,.2f}" if zerion_value is not None else "-",
            f"${delta:,.2f}",
        )

    table.add_row(
        "[bold]Total[/bold]",
        f"${providers.get('debank', {}).get('totalValue', 0):,.2f}",
        f"${providers.get('zerion', {}).get('totalValue', 0):,.2f}",
        "",
    )

    console.print("\n")
    console.print(table)


if __name__ == "__main__":
    app()
