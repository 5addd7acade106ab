"""
Scripture Study - Main CLI Application

Command-line interface for the study engine.
"""
import asyncio
import json
import logging
from typing import Optional, Union
from enum import Enum

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import get_config
from observability import setup_observability
from study.books import books as list_books
from study.commentary import format_commentary
from study.models import ParseError, StudyMaterial
from study.orchestrator import StudyOrchestrator

# Initialize app
app = typer.Typer(
    name="scripture-study",
    help="Scripture Study - reference resolution and study aggregation",
    add_completion=False
)

console = Console()


class OutputFormat(str, Enum):
    """Output format options."""
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging")
):
    """Configure logging and tracing before any command runs."""
    setup_observability(get_config().observability)
    if verbose:
        root = logging.getLogger()
        root.setLevel(logging.DEBUG)
        for handler in root.handlers:
            handler.setLevel(logging.DEBUG)


@app.command()
def study(
    reference: str = typer.Argument(..., help='Reference, e.g. "John 3:16" or "Genesis 1:1-3"'),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--output", "-o", help="Output format"),
):
    """Gather verses, commentary and study aids for a reference."""
    result = asyncio.run(_study(reference))

    if isinstance(result, ParseError):
        if output == OutputFormat.JSON:
            console.print_json(json.dumps(result.to_dict()))
        else:
            console.print(f"[red]Error: {escape(result.error)}[/red]")
        raise typer.Exit(1)

    if output == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
    elif output == OutputFormat.MARKDOWN:
        console.print(Markdown(render_markdown(result)))
    else:
        _display_table_result(result)


@app.command()
def books():
    """List the 66 supported books."""
    table = Table(title="Books")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Key")
    table.add_column("Code", style="green")
    table.add_column("Testament")

    for key, info in list_books():
        table.add_row(
            str(info.canonical_ordinal),
            info.display_name,
            key,
            info.provider_code,
            info.testament,
        )

    console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Server host"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Server port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload")
):
    """Start the study API server."""
    settings = get_config().api
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold]Starting server at {host}:{port}[/bold]")

    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload or settings.reload
    )


# Helper functions
async def _study(reference: str) -> Union[StudyMaterial, ParseError]:
    """Run one study through a short-lived orchestrator."""
    async with StudyOrchestrator.create() as orchestrator:
        return await orchestrator.study(reference)


def render_markdown(material: StudyMaterial) -> str:
    """Whole study as a Markdown document."""
    parts = [f"# {material.parsed.canonical}"]

    if material.verses:
        parts.append("## Verses")
        for code, verse in material.verses.items():
            parts.append(f"**{verse.version_label}** ({code.upper()})\n\n{verse.text}")
    else:
        parts.append("## Verses\n\n_No translation could be retrieved._")

    parts.append("## Commentary")
    parts.append(format_commentary(material.commentary))

    if material.cross_references:
        parts.append("## Cross References")
        parts.append("\n".join(f"- {ref}" for ref in material.cross_references))

    parts.append("## Study Questions")
    parts.append("\n".join(
        f"{i}. {question}" for i, question in enumerate(material.study_questions, start=1)
    ))

    parts.append("## Further Study")
    parts.append("\n".join(
        f"- [{link.name}]({link.url}): {link.description}" for link in material.external_links
    ))

    return "\n\n".join(parts)


def _display_table_result(material: StudyMaterial):
    """Display result as rich tables."""
    console.print(Panel.fit(
        f"[bold blue]{material.parsed.canonical}[/bold blue]",
        border_style="blue"
    ))

    verses = Table(title="Verses")
    verses.add_column("Version", style="cyan")
    verses.add_column("Text")
    verses.add_column("Source", style="green")
    for verse in material.verses.values():
        verses.add_row(escape(verse.version_label), escape(verse.text), escape(verse.source))
    console.print(verses)

    console.print(Markdown(format_commentary(material.commentary)))

    if material.cross_references:
        console.print("[bold]Cross references:[/bold] " + escape(", ".join(material.cross_references)))

    console.print("[bold]Study questions:[/bold]")
    for i, question in enumerate(material.study_questions, start=1):
        console.print(f"  {i}. {escape(question)}")

    links = Table(title="Further Study")
    links.add_column("Site", style="cyan")
    links.add_column("URL")
    for link in material.external_links:
        links.add_row(escape(link.name), escape(link.url))
    console.print(links)

    sources = Table(title="Sources")
    sources.add_column("Source", style="cyan")
    sources.add_column("Status")
    colors = {"success": "green", "empty": "yellow", "failed": "red"}
    for name, status in material.sources.items():
        sources.add_row(escape(name), f"[{colors.get(status, 'white')}]{status}[/]")
    console.print(sources)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
