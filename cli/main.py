"""ChainMuse CLI: entry-point for node creation and ledger inspection.

Usage:
    python cli/main.py --help

Command groups:
    create-root / create-child   → generate, pin and mint a node
    graph / events / stats       → read the ledger's event stream
    content                      → read a stored content record
    health / models / serve      → service plumbing
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from chainmuse.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from chainmuse.config import Settings
from chainmuse.errors import ChainMuseError, NodeCreationError
from chainmuse.services import Services, build_services
from cli.rendering import render_events, render_forest, render_stats

T = TypeVar("T")

app = typer.Typer(
    name="chainmuse",
    help="ChainMuse backend CLI.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _services() -> Services:
    """Build the service bundle for one command.  Patched in tests."""
    return build_services(Settings())


def _run(tag: str, work: Callable[[Services], Awaitable[T]]) -> T:
    """Run *work* against a fresh service bundle, closing it afterwards.

    Pipeline failures are reported with their stage and kind, then exit 1.
    """
    services = _services()

    async def _go() -> T:
        try:
            return await work(services)
        finally:
            await services.aclose()

    try:
        return asyncio.run(_go())
    except NodeCreationError as exc:
        typer.echo(f"[{tag}] ✗ {exc.kind} at stage {exc.stage!r}: {exc.cause}", err=True)
        if exc.orphaned_content_ref:
            typer.echo(f"[{tag}]   orphaned content: {exc.orphaned_content_ref}", err=True)
        raise typer.Exit(1)
    except ChainMuseError as exc:
        typer.echo(f"[{tag}] ✗ {exc.kind}: {exc}", err=True)
        raise typer.Exit(1)


def _echo_result(tag: str, result: Any, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    typer.echo(f"[{tag}] Node     : {result.node_id}")
    typer.echo(f"[{tag}] Digest   : {result.tx_digest}")
    typer.echo(f"[{tag}] Content  : {result.content_ref}")
    typer.echo(f"[{tag}] Creator  : {result.creator}")
    if result.parent_id:
        typer.echo(f"[{tag}] Parent   : {result.parent_id}")
    if result.explorer_url:
        typer.echo(f"[{tag}] Explorer : {result.explorer_url}")
    typer.echo("")
    typer.echo(result.text)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

@app.command("create-root")
def create_root(
    prompt: str = typer.Option(..., help="Story prompt."),
    title: str = typer.Option(..., help="Node title."),
    model: Optional[str] = typer.Option(None, help="Generation model id."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Generate, pin and mint a new root story node."""
    if not as_json:
        typer.echo(f"[create-root] Creating {title!r} …")
    result = _run(
        "create-root",
        lambda s: s.orchestrator.create_root(prompt, title, model),
    )
    _echo_result("create-root", result, as_json)


@app.command("create-child")
def create_child(
    prompt: str = typer.Option(..., help="Continuation prompt."),
    title: str = typer.Option(..., help="Node title."),
    parent_id: str = typer.Option(..., help="Object id of the parent node."),
    parent_ref: str = typer.Option(..., help="Content reference of the parent node."),
    model: Optional[str] = typer.Option(None, help="Generation model id."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Branch a new child node from an existing node."""
    if not as_json:
        typer.echo(f"[create-child] Creating {title!r} under {parent_id} …")
    result = _run(
        "create-child",
        lambda s: s.orchestrator.create_child(prompt, title, parent_id, parent_ref, model),
    )
    _echo_result("create-child", result, as_json)


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------

@app.command("graph")
def graph(
    limit: Optional[int] = typer.Option(None, help="Maximum events to scan."),
) -> None:
    """Render the narrative forest rebuilt from creation events."""
    snapshot = _run("graph", lambda s: s.get_graph(limit))
    typer.echo(render_forest(snapshot.nodes))
    typer.echo("")
    typer.echo(render_stats(snapshot.stats))


@app.command("events")
def events(
    limit: int = typer.Option(50, help="Maximum events to show."),
) -> None:
    """List creation events, most recent first."""
    result = _run("events", lambda s: s.query.list_events(limit))
    typer.echo(render_events(result))


@app.command("stats")
def stats(
    limit: Optional[int] = typer.Option(None, help="Maximum events to scan."),
) -> None:
    """Count roots and branches over the scanned events."""
    result = _run(
        "stats",
        lambda s: s.query.compute_stats(
            s.settings.stats_event_limit if limit is None else limit
        ),
    )
    typer.echo(render_stats(result))


@app.command("content")
def content(
    ref: str = typer.Argument(..., help="Content reference (CID)."),
) -> None:
    """Print the narrative text stored at a content reference."""
    text = _run("content", lambda s: s.get_content(ref))
    typer.echo(text)


# ---------------------------------------------------------------------------
# Plumbing
# ---------------------------------------------------------------------------

@app.command("health")
def health() -> None:
    """Show which adapter variant is active for each external system."""
    services = _services()
    try:
        typer.echo(json.dumps(services.health(), indent=2))
    finally:
        asyncio.run(services.aclose())


@app.command("models")
def models() -> None:
    """List available generation models."""
    result = _run("models", lambda s: s.generator.list_models())
    for model_id in result:
        typer.echo(f"  {model_id}")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(4000, help="Bind port."),
    reload: bool = typer.Option(False, help="Enable auto-reload."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("chainmuse.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
