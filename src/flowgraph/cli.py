from pathlib import Path
import logging
import typer
import yaml
from pydantic import TypeAdapter
from rich import print as rprint
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typing import List, Optional

from .errors import FlowGraphError
from .loader import dump, load_document_file, load_file, load_template, save_document
from .session import EditSession, PointerEvent
from .settings import load_settings
from .validator import validate_document_from_file
from .visualize import ascii_plan

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="flowgraph CLI — workflow graphs and edit sessions")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _fail(e: Exception):
    rprint(f"[bold red]Error:[/] {e}")
    raise typer.Exit(code=1)


@app.command()
def init(template: str = typer.Option("feel", help="Template to use: feel"),
         name: str = typer.Option("workflow", help="Output filename (without .yaml)"),
         outdir: Path = typer.Option(Path("workflows"), help="Where to place the YAML"),
    ):
    """Write a bundled workflow template."""
    try:
        doc = load_template(template)
    except ValueError as e:
        _fail(e)
    outdir.mkdir(exist_ok=True, parents=True)
    outfile = outdir / f"{name}.yaml"
    save_document(doc, outfile)
    rprint(Panel.fit(f"Saved template [bold]{template}[/] to [cyan]{outfile}[/]"))


@app.command()
def validate(file: Path):
    """Validate a workflow document (types, ids, edge endpoints, handles, cycles)."""
    ok, messages = validate_document_from_file(file)
    table = Table(title="Validation Report", show_lines=True)
    table.add_column("Status", justify="center", style="bold")
    table.add_column("Message")
    for m in messages:
        status, _, text = m.partition(": ")
        table.add_row(status, text)
    rprint(table)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def explain(file: Path):
    """Print an ASCII plan of the workflow graph."""
    try:
        graph = load_file(file)
    except FlowGraphError as e:
        _fail(e)
    print(ascii_plan(graph))


@app.command()
def export(file: Path,
           out: Path = typer.Option(..., help="Destination (.json for JSON, YAML otherwise)")):
    """Load a workflow and write it back out, normalised."""
    try:
        graph = load_file(file)
    except FlowGraphError as e:
        _fail(e)
    save_document(dump(graph), out)
    rprint(Panel.fit(f"Exported [bold]{len(graph.nodes)}[/] nodes and "
                     f"[bold]{len(graph.edges)}[/] edges to [cyan]{out}[/]"))


@app.command()
def replay(file: Path,
           gestures: Path,
           out: Optional[Path] = typer.Option(None, help="Write the edited workflow here."),
           config: Optional[Path] = typer.Option(None, help="Editor settings YAML.")):
    """Feed a YAML list of pointer events into an edit session."""
    try:
        settings = load_settings(config)
        raw = yaml.safe_load(gestures.read_text(encoding="utf-8")) or []
        events = TypeAdapter(List[PointerEvent]).validate_python(raw)
        session = EditSession.from_document(load_document_file(file), settings)
    except (ValueError, FlowGraphError) as e:
        _fail(e)

    notifications = []
    session.store.subscribe(notifications.append)
    for i, event in enumerate(events, 1):
        try:
            state = session.handle(event)
        except FlowGraphError as e:
            rprint(f"[yellow]event {i}:[/] {e}")
            continue
        logger.debug("event %d %s -> %s", i, event.kind.value, state.value)
    session.cancel()

    graph = session.store.snapshot()
    nodes = Table(title="Nodes")
    for col in ("id", "type", "x", "y", "label"):
        nodes.add_column(col)
    for n in graph.nodes.values():
        nodes.add_row(n.id, n.type, f"{n.position.x:g}", f"{n.position.y:g}", n.label)
    edges = Table(title="Edges")
    for col in ("id", "source", "target", "type", "label"):
        edges.add_column(col)
    for e in graph.edges.values():
        edges.add_row(e.id, f"{e.source}{'.' + e.source_handle if e.source_handle else ''}",
                      f"{e.target}{'.' + e.target_handle if e.target_handle else ''}",
                      e.type, e.data.label or "")
    rprint(nodes)
    rprint(edges)
    rprint(Panel.fit(f"{len(events)} events, [bold]{len(notifications)}[/] graph changes"))
    if out is not None:
        save_document(dump(graph), out)


if __name__ == "__main__":
    app()
