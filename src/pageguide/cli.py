"""PageGuide command line.

Headless access to the schema index, the intent classifier and the guidance
planner, mostly for inspecting how a request would be understood:

    pageguide schemas
    pageguide classify "set alignment to center" --component et_pb_text
    pageguide plan "where is the background color" --component et_pb_text --json
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pageguide.config import PageGuideConfig, SchemaConfig, get_config, load_config
from pageguide.guidance.planner import build_plan
from pageguide.intent.classifier import IntentClassifier
from pageguide.intent.types import Intent
from pageguide.logging import configure_logging
from pageguide.schema.index import SchemaIndex
from pageguide.schema.loader import SchemaLoader

console = Console()


def _schema_options(f):
    f = click.option("--third-party", "third_party", type=click.Path(file_okay=False),
                     help="Third-party schema directory")(f)
    f = click.option("--core", type=click.Path(file_okay=False),
                     help="Core schema directory (default: bundled schemas)")(f)
    return f


def _build_index(cfg: PageGuideConfig, core: str | None, third_party: str | None) -> SchemaIndex:
    schemas = SchemaConfig(
        core_path=core or cfg.schemas.core_path,
        third_party_path=third_party or cfg.schemas.third_party_path,
    )
    loader = SchemaLoader.from_config(schemas)
    return SchemaIndex.from_schemas(loader.get_all_schemas())


def _classifier(ctx: click.Context, core: str | None, third_party: str | None) -> IntentClassifier:
    cfg: PageGuideConfig = ctx.obj["config"]
    return IntentClassifier(_build_index(cfg, core, third_party), cfg.classifier)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Config file path (default: .pageguide/config.yaml)")
@click.pass_context
def main(ctx: click.Context, debug: bool, config_path: str | None) -> None:
    """PageGuide - find and change page builder settings in plain language."""
    cfg = load_config(config_path) if config_path else get_config()
    configure_logging(debug=debug or cfg.debug)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@main.command()
@_schema_options
@click.pass_context
def schemas(ctx: click.Context, core: str | None, third_party: str | None) -> None:
    """List indexed component types."""
    index = _build_index(ctx.obj["config"], core, third_party)
    if not len(index):
        console.print("[yellow]No schemas found.[/yellow]")
        return

    table = Table(title="Component Schemas")
    table.add_column("Type", style="cyan")
    table.add_column("Label")
    table.add_column("Aliases", style="dim")
    table.add_column("Fields", justify="right")
    for entry in index:
        table.add_row(
            entry.component_type,
            entry.label,
            ", ".join(entry.aliases) or "-",
            str(len(entry.fields)),
        )
    console.print(table)


@main.command()
@click.argument("text")
@click.option("--component", "-c", help="Selected component type")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_schema_options
@click.pass_context
def classify(
    ctx: click.Context,
    text: str,
    component: str | None,
    as_json: bool,
    core: str | None,
    third_party: str | None,
) -> None:
    """Classify a request into an intent."""
    intent = _classifier(ctx, core, third_party).classify(text, component)
    if as_json:
        click.echo(json.dumps(intent.to_dict(), indent=2))
        return
    _print_intent(intent)


@main.command()
@click.argument("text")
@click.option("--component", "-c", help="Selected component type")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_schema_options
@click.pass_context
def plan(
    ctx: click.Context,
    text: str,
    component: str | None,
    as_json: bool,
    core: str | None,
    third_party: str | None,
) -> None:
    """Show the guidance steps for a request."""
    intent = _classifier(ctx, core, third_party).classify(text, component)
    guidance = build_plan(intent)
    if as_json:
        click.echo(json.dumps(guidance.to_dict(), indent=2))
        return

    style = "green" if guidance.success else "red"
    console.print(Panel(guidance.message, title="Guidance", border_style=style))
    if not guidance.steps:
        return

    table = Table(show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Details")
    for i, step in enumerate(guidance.steps, 1):
        details = {k: v for k, v in step.to_dict().items() if k != "action"}
        table.add_row(str(i), step.kind, _format_details(details))
    console.print(table)


@main.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the active configuration."""
    cfg: PageGuideConfig = ctx.obj["config"]

    console.print(Panel("[bold]PageGuide Configuration[/bold]", border_style="cyan"))

    console.print("\n[cyan]Classifier[/cyan]")
    console.print(f"  Match threshold: {cfg.classifier.match_threshold}")
    console.print(f"  High confidence threshold: {cfg.classifier.high_confidence_threshold}")
    console.print(
        f"  Weights: label={cfg.classifier.label_weight} "
        f"field={cfg.classifier.field_name_weight} "
        f"option={cfg.classifier.option_weight} "
        f"section={cfg.classifier.section_weight}"
    )

    console.print("\n[cyan]Guidance[/cyan]")
    console.print(f"  Step delay: {cfg.guidance.step_delay_ms}ms")
    console.print(f"  Field highlight: {cfg.guidance.field_highlight_ms}ms")
    console.print(f"  Open settings event: {cfg.guidance.open_settings_event}")

    console.print("\n[cyan]Dispatch[/cyan]")
    console.print(f"  Complex field types: {', '.join(cfg.dispatch.complex_field_types)}")
    console.print(f"  Validate changesets: {cfg.dispatch.validate_changesets}")
    console.print(f"  Snapshot before apply: {cfg.dispatch.snapshot_before_apply}")

    console.print("\n[dim]Config sources:[/dim]")
    for path in (Path(".pageguide/config.yaml"), Path.home() / ".pageguide" / "config.yaml"):
        if path.exists():
            console.print(f"  [green]✓[/green] {path}")
        else:
            console.print(f"  [dim]○[/dim] {path} (not found)")


def _print_intent(intent: Intent) -> None:
    console.print(f"[bold]Action:[/bold] {intent.action.value}")
    console.print(f"[bold]Component:[/bold] {intent.component_type or '-'}")
    console.print(f"[bold]Confidence:[/bold] {intent.confidence.value}")
    if intent.value:
        console.print(f"[bold]Value:[/bold] {intent.value}")
    if intent.breakpoint:
        console.print(f"[bold]Breakpoint:[/bold] {intent.breakpoint.value}")

    if not intent.fields:
        console.print("[dim]No matching fields.[/dim]")
        return

    table = Table(title="Matched Fields")
    table.add_column("Field", style="cyan")
    table.add_column("Label")
    table.add_column("Location", style="dim")
    table.add_column("Score", justify="right")
    for f in intent.fields:
        table.add_row(f.field_name, f.label, f"{f.tab} > {f.section_label}", str(f.score))
    console.print(table)


def _format_details(details: dict) -> str:
    parts = []
    for key, value in details.items():
        if isinstance(value, dict):
            value = " / ".join(str(v) for v in value.values())
        if value not in (None, ""):
            parts.append(f"{key}={value}")
    return ", ".join(parts)


if __name__ == "__main__":
    main()
