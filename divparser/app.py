#!/usr/bin/env python3
"""
CLI interface for the dividend statement parser.
"""
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.runner import StatementParser
from .core.detectors import DEFAULT_TEMPLATE
from .core.errors import StatementError
from .core.loader import PDFLoader
from .core.interpreter import reconstruct_text
from .core.dispenser import Dispenser
from .core.normalize import load_holders

app = typer.Typer(help="Dividend statement parser")
console = Console()


@app.command()
def parse(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    holders_file: Optional[Path] = typer.Option(None, "--holders", "-H", help="File of known account holder names, one per line"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON file path"),
    template: str = typer.Option(DEFAULT_TEMPLATE, "--template", "-t", help="Template ID to use"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Parse a dividend statement PDF into structured JSON."""

    if not pdf_path.exists():
        console.print(f"[red]Error: PDF file not found: {pdf_path}[/red]")
        raise typer.Exit(1)

    if holders_file and not holders_file.exists():
        console.print(f"[red]Error: Holders file not found: {holders_file}[/red]")
        raise typer.Exit(1)

    holders = load_holders(holders_file) if holders_file else []

    try:
        parser = StatementParser(template, verbose=verbose)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            progress.add_task("Extracting statement...", total=None)
            result = parser.parse(pdf_path, holders)
    except StatementError as e:
        console.print(f"[red]Error processing {pdf_path}: {e}[/red]")
        if verbose and e.context:
            console.print(e.context, markup=False)
        raise typer.Exit(1)

    if output:
        output.write_text(result.model_dump_json(indent=2))
        console.print(f"[green]✓ Parsed successfully! Output written to: {output}[/green]")
    else:
        console.print_json(result.model_dump_json(indent=2))


@app.command()
def fragments(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Only show this page (1-indexed)")
):
    """Show the sentences reconstructed from a PDF's content streams."""
    loader = PDFLoader(pdf_path)
    try:
        if page is None:
            pages = loader.load()
        else:
            selected = loader.get_page(page)
            if selected is None:
                console.print(f"[red]Error: No page {page} in {pdf_path}[/red]")
                raise typer.Exit(1)
            pages = [selected]
        text = reconstruct_text(pages)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Error reading PDF: {e}[/red]")
        raise typer.Exit(1)
    finally:
        loader.close()

    table = Table(title=f"{pdf_path.name}: {len(text)} fragments")
    table.add_column("#", justify="right")
    table.add_column("Position", justify="right")
    table.add_column("Sentence")

    dispenser = Dispenser(text)
    number = 0
    while dispenser.next_sentence():
        number += 1
        position = dispenser.position()
        table.add_row(str(number), str(position), repr(dispenser.dump_sentence()))

    console.print(table)


@app.command()
def validate(
    json_path: Path = typer.Argument(..., help="Path to JSON file to validate")
):
    """Validate a JSON file against the schema."""
    from .models.schema import Statement

    try:
        data = Statement.model_validate_json(json_path.read_text())
        console.print("[green]✓ JSON is valid[/green]")
        console.print(f"Entity: {data.entity}")
        console.print(f"ASX Code: {data.asx_code}")
        console.print(f"Payment Date: {data.payment_date}")
        console.print(f"Total Payment: {data.total_payment.amount}")
    except Exception as e:
        console.print(f"[red]Validation failed: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
