"""CLI interface for agent-governor.

Requires the 'cli' extra: pip install agent-governor[cli]
"""

from __future__ import annotations

import sys
from pathlib import Path

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError:
    print(
        "CLI dependencies not installed. Install with: pip install agent-governor[cli]",
        file=sys.stderr,
    )
    sys.exit(1)

from pydantic import TypeAdapter, ValidationError

from agent_governor import __version__
from agent_governor.context.trimmer import ContextWindowTrimmer
from agent_governor.context.usage import DISPLAY_FALLBACK_CONTEXT, context_usage_percent
from agent_governor.exceptions import ConfigurationError
from agent_governor.models.budget import ModelBudget
from agent_governor.models.messages import Message, TextPart
from agent_governor.tokens.estimator import TokenEstimator

app = typer.Typer(
    name="agent-governor",
    help="Runtime governor for LLM agents: token budgets, stopping conditions, resilience.",
    add_completion=False,
)
console = Console()

_history_adapter = TypeAdapter(list[Message])


def _make_estimator() -> TokenEstimator:
    return TokenEstimator()


def _load_history(path: Path) -> list[Message]:
    try:
        return _history_adapter.validate_json(path.read_bytes())
    except OSError as e:
        console.print(f"[red]Error: cannot read {path}: {e.strerror or e}[/red]")
        raise typer.Exit(code=1) from e
    except ValidationError as e:
        console.print(f"[red]Error: invalid message history in {path}[/red]")
        console.print(f"[dim]{e.error_count()} validation error(s)[/dim]")
        raise typer.Exit(code=1) from e


def _preview(message: Message, width: int = 48) -> str:
    if isinstance(message.content, str):
        text = message.content
    else:
        text = " ".join(
            p.text if isinstance(p, TextPart) else f"[{getattr(p, 'type', 'part')}]"
            for p in message.content
        )
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
) -> None:
    if version:
        console.print(f"agent-governor {__version__}")
        raise typer.Exit()


@app.command()
def info() -> None:
    """Show information about the agent-governor installation."""
    table = Table(title="agent-governor info")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])

    for dep_name in ["pydantic", "tiktoken", "anthropic"]:
        try:
            mod = __import__(dep_name)
            ver = getattr(mod, "__version__", "installed")
            table.add_row(dep_name, str(ver))
        except ImportError:
            table.add_row(dep_name, "[red]not installed[/red]")

    console.print(table)


@app.command()
def estimate(
    history_path: Path = typer.Argument(..., help="JSON file holding a list of messages"),  # noqa: B008
    context: int | None = typer.Option(
        None, "--context", "-c", help="Model context capacity in tokens"
    ),
) -> None:
    """Estimate the token cost of each message in a history file."""
    history = _load_history(history_path)
    estimator = _make_estimator()

    table = Table(title=f"Token estimate: {history_path.name}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Role", style="cyan")
    table.add_column("Tokens", justify="right", style="green")
    table.add_column("Preview")

    total = 0
    for i, message in enumerate(history):
        tokens = estimator.estimate(message)
        total += tokens
        table.add_row(str(i), message.role, str(tokens), _preview(message))
    console.print(table)

    capacity = context if context is not None else DISPLAY_FALLBACK_CONTEXT
    percent = context_usage_percent(total, {"context": context})
    console.print(f"Total: {total} tokens ({percent}% of {capacity})")


@app.command()
def trim(
    history_path: Path = typer.Argument(..., help="JSON file holding a list of messages"),  # noqa: B008
    context: int = typer.Option(..., "--context", "-c", help="Model context capacity in tokens"),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Write the trimmed history to this file"
    ),
) -> None:
    """Trim a history file to 80% of the model's context capacity."""
    history = _load_history(history_path)
    try:
        budget = ModelBudget.from_descriptor({"context": context})
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    estimator = _make_estimator()
    before = estimator.estimate_history(history)
    trimmed = ContextWindowTrimmer(estimator=estimator).trim(history, budget)
    after = estimator.estimate_history(trimmed)

    console.print(f"Safe limit: {budget.safe_limit:g} tokens")
    console.print(f"Kept: {len(trimmed)}  Evicted: {len(history) - len(trimmed)}")
    console.print(f"Tokens: {before} -> {after} (freed {before - after})")
    if after > budget.safe_limit:
        console.print("[yellow]Warning: history is still over budget[/yellow]")

    if output is not None:
        output.write_bytes(_history_adapter.dump_json(list(trimmed), indent=2))
        console.print(f"[dim]Wrote {output}[/dim]")


if __name__ == "__main__":
    app()
