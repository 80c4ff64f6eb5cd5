"""
Digital Tools CLI - list, inspect and invoke tools from the shell.
"""

import asyncio
import json
import logging
import sys
from typing import Optional, Tuple

import click
import pydantic
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Config, get_config
from .tools import (
    InvocationRequest,
    ToolExecutor,
    ToolRegistry,
    ToolResult,
    UnknownToolError,
    register_builtin_tools,
)

console = Console()


def setup_logging(verbose: bool = False, level: str = "INFO"):
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler()]
    )


def run_async(coro):
    """Run a coroutine to completion from synchronous click code."""
    return asyncio.run(coro)


def _load_registry(config: Config) -> ToolRegistry:
    registry = ToolRegistry()
    if config.register_builtin:
        register_builtin_tools(registry)
    return registry


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.pass_context
def main(ctx, verbose):
    """🧰 Digital Tools - tools for humans and agents"""
    config = get_config()
    setup_logging(verbose, config.log_level)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['registry'] = _load_registry(config)


@main.command('list')
@click.option('--category', '-c', help='Only tools in this category')
@click.option('--audience', '-a', type=click.Choice(['human', 'ai']), help='Only tools this caller may use')
@click.option('--search', '-s', help='Search id, name, description and tags')
@click.pass_context
def list_tools(ctx, category: Optional[str], audience: Optional[str], search: Optional[str]):
    """List registered tools."""
    registry: ToolRegistry = ctx.obj['registry']
    tools = registry.query(category=category, audience=audience, search=search)

    if not tools:
        console.print("[yellow]No tools found.[/yellow]")
        return

    table = Table(title=f"Tools ({len(tools)})", header_style="bold cyan")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Audience")
    table.add_column("Flags", style="yellow")

    for t in tools:
        flags = []
        if t.requires_confirmation:
            flags.append("confirm")
        if t.idempotent:
            flags.append("idempotent")
        if t.permissions:
            flags.append("perms")
        category_label = f"{t.category}/{t.subcategory}" if t.subcategory else t.category
        table.add_row(t.id, t.name, category_label, t.audience.value, " ".join(flags))

    console.print(table)


@main.command()
@click.argument('tool_id')
@click.pass_context
def show(ctx, tool_id: str):
    """Show one tool's definition."""
    registry: ToolRegistry = ctx.obj['registry']

    try:
        t = registry.get(tool_id)
    except UnknownToolError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"\n[bold]{t.name}[/bold] [dim]({t.id})[/dim]")
    if t.description:
        console.print(f"  {escape(t.description)}")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Category", t.category)
    table.add_row("Subcategory", t.subcategory or "-")
    table.add_row("Audience", t.audience.value)
    table.add_row("Permissions", ", ".join(str(p) for p in t.permissions) or "-")
    table.add_row("Confirmation", "required" if t.requires_confirmation else "no")
    table.add_row("Idempotent", "yes" if t.idempotent else "no")
    table.add_row("Tags", ", ".join(t.tags) or "-")
    console.print(table)

    if t.parameters:
        params = Table(title="Parameters", header_style="bold")
        params.add_column("Name", style="cyan")
        params.add_column("Type")
        params.add_column("Required")
        params.add_column("Default", style="dim")
        params.add_column("Description")
        for p in t.parameters:
            params.add_row(
                p.name,
                escape(f"{p.type}[{p.items}]") if p.items else p.type,
                "yes" if p.required else "no",
                "" if p.default is None else json.dumps(p.default),
                p.description,
            )
        console.print(params)
    console.print()


@main.command()
@click.argument('tool_id', required=False)
@click.pass_context
def schema(ctx, tool_id: Optional[str]):
    """Print MCP tool descriptors as JSON."""
    registry: ToolRegistry = ctx.obj['registry']

    try:
        data = registry.to_mcp(tool_id) if tool_id else registry.list_mcp()
    except UnknownToolError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    click.echo(json.dumps(data, indent=2))


def _print_result(result: ToolResult, as_json: bool):
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    if result.success:
        console.print(f"[green]✓ {result.tool_id}[/green] [dim]({result.duration_ms:.1f}ms)[/dim]")
        console.print_json(json.dumps(result.result, default=str))
    else:
        console.print(f"[red]✗ {result.error_code}: {escape(result.error or '')}[/red]")


@main.command()
@click.argument('tool_id', required=False)
@click.option('--args', '-a', 'args_json', default='{}', help='Arguments as a JSON object')
@click.option('--request', '-r', 'request_file', type=click.Path(exists=True, dir_okay=False),
              help='Read the whole invocation request from a JSON file')
@click.option('--as', 'caller', type=click.Choice(['human', 'ai']), help='Caller class')
@click.option('--grant', '-g', multiple=True, help='Granted permission resource:action[:scope]')
@click.option('--retries', default=0, type=int, help='Retries for idempotent tools')
@click.option('--yes', '-y', is_flag=True, help='Confirm without prompting')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw result as JSON')
@click.pass_context
def invoke(
    ctx,
    tool_id: Optional[str],
    args_json: str,
    request_file: Optional[str],
    caller: Optional[str],
    grant: Tuple[str, ...],
    retries: int,
    yes: bool,
    as_json: bool,
):
    """Invoke a tool."""
    config: Config = ctx.obj['config']
    registry: ToolRegistry = ctx.obj['registry']

    if request_file and (tool_id or args_json != '{}' or caller or grant):
        raise click.UsageError("--request cannot be combined with TOOL_ID, --args, --as or --grant")

    try:
        if request_file:
            with open(request_file, 'r') as f:
                request = InvocationRequest.model_validate_json(f.read())
        else:
            if not tool_id:
                raise click.UsageError("Pass a TOOL_ID or --request")
            try:
                args = json.loads(args_json)
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args")
            if not isinstance(args, dict):
                raise click.BadParameter("must be a JSON object", param_hint="--args")
            request = InvocationRequest(
                tool=tool_id,
                args=args,
                caller=caller or config.default_caller,
                permissions=list(grant),
            )
    except pydantic.ValidationError as e:
        console.print(f"[red]✗ Invalid request: {escape(str(e))}[/red]")
        sys.exit(1)

    executor = ToolExecutor(registry, config=config)
    result = run_async(executor.submit(request, retries=retries))

    if result.needs_confirmation:
        if yes or click.confirm(f"Run {request.tool} with these arguments?"):
            request = request.model_copy(update={"confirmation_token": result.confirmation_token})
            result = run_async(executor.submit(request, retries=retries))
        else:
            console.print("[yellow]Cancelled.[/yellow]")

    _print_result(result, as_json)

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
