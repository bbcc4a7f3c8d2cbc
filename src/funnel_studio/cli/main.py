"""Main CLI entry point for funnelops command."""

import json
import logging
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from ..models import Funnel
from ..editor.canvas import editor_elements, public_elements
from ..editor.design import resolve_design
from ..editor.dynamic_content import ElementKind
from ..editor.session import EditingSession
from ..core.step_registry import effective_intent, validate_funnel_structure

console = Console()


def load_funnel(path: str) -> Funnel:
    """Read a funnel document from a JSON file."""
    with open(path, 'r') as f:
        return Funnel.from_dict(json.load(f))


def save_funnel(funnel: Funnel, path: str):
    with open(path, 'w') as f:
        json.dump(funnel.to_dict(), f, indent=2, default=str)


def resolve_step(funnel: Funnel, step_ref: str):
    """Find a step by id or by 1-based position."""
    step = funnel.get_step(step_ref)
    if step is None and step_ref.isdigit():
        steps = funnel.ordered_steps()
        index = int(step_ref) - 1
        if 0 <= index < len(steps):
            step = steps[index]
    if step is None:
        raise click.BadParameter(f"No step {step_ref!r} in funnel {funnel.id}")
    return step


@click.group()
@click.version_option(version="0.1.0", prog_name="funnelops")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Funnel Studio - inspect and edit funnel documents.

    \b
    Quick Start:
      funnelops show funnel.json                     # List steps
      funnelops order funnel.json 1                  # Element order of step 1
      funnelops design funnel.json 1                 # Resolved design of step 1
      funnelops validate funnel.json                 # Structure warnings
      funnelops add-element funnel.json 1 -k text    # Append a text block
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True))
def show(path: str):
    """List the steps of a funnel."""
    funnel = load_funnel(path)

    table = Table(title=f"{funnel.name} ({funnel.id})")
    table.add_column("#", style="dim")
    table.add_column("Step ID", style="cyan")
    table.add_column("Type")
    table.add_column("Intent")
    table.add_column("Elements", justify="right")
    table.add_column("Blocks", justify="right")

    for i, step in enumerate(funnel.ordered_steps(), 1):
        table.add_row(
            str(i),
            step.id,
            step.step_type.value,
            effective_intent(step).value,
            str(len(editor_elements(step, funnel.settings))),
            str(len(step.content_blocks)),
        )

    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("step_ref")
@click.option("--public", is_flag=True, help="Only elements a visitor would see")
def order(path: str, step_ref: str, public: bool):
    """Show the element order of a step."""
    funnel = load_funnel(path)
    step = resolve_step(funnel, step_ref)
    elements = public_elements(step, funnel.settings) if public else editor_elements(step, funnel.settings)

    table = Table(title=f"Elements of {step.id}")
    table.add_column("#", style="dim")
    table.add_column("Element ID", style="cyan")
    table.add_column("Label")
    table.add_column("Dynamic")

    for i, element in enumerate(elements, 1):
        table.add_row(str(i), element.id, element.label, "yes" if element.is_dynamic else "")

    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("step_ref")
def design(path: str, step_ref: str):
    """Show the resolved design of a step and where each value comes from."""
    funnel = load_funnel(path)
    step = resolve_step(funnel, step_ref)
    resolved = resolve_design(step.design, funnel.settings)

    table = Table(title=f"Design of {step.id}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for name, source in resolved.sources.items():
        value = getattr(resolved, name)
        table.add_row(name, "" if value is None else str(value), source)

    console.print(table)
    console.print(f"[bold]Background:[/bold] {resolved.background_css}")
    console.print(f"[bold]Button:[/bold] {resolved.button_background_css}")


@cli.command()
@click.argument("path", type=click.Path(exists=True))
def validate(path: str):
    """Check the funnel structure for common mistakes."""
    funnel = load_funnel(path)
    warnings = validate_funnel_structure(funnel.ordered_steps())

    if not warnings:
        console.print("[green]✓ Funnel structure looks good[/green]")
        return

    console.print(Panel.fit(
        "\n".join(f"[yellow]• {w}[/yellow]" for w in warnings),
        title=f"{len(warnings)} warning(s)"
    ))


@cli.command("add-element")
@click.argument("path", type=click.Path(exists=True))
@click.argument("step_ref")
@click.option("--kind", "-k", type=click.Choice([k.value for k in ElementKind]), required=True,
              help="Element type")
@click.option("--text", help="Initial text for text-bearing elements")
def add_element(path: str, step_ref: str, kind: str, text: str):
    """Append a dynamic element to a step and save the file."""
    funnel = load_funnel(path)
    step = resolve_step(funnel, step_ref)
    session = EditingSession(funnel)

    element_kind = ElementKind(kind)
    element_id = session.add_element(step.id, element_kind)
    if text is not None:
        session.update_element_content(step.id, element_id, {"text": text})

    save_funnel(funnel, path)
    console.print(f"[green]Added {element_kind.label}[/green] [cyan]{element_id}[/cyan] to {step.id}")
