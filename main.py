"""function-fleet CLI entrypoint."""
from pathlib import Path
from typing import Optional

import typer
import yaml
from pulumi import automation as auto
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from composer.config.loader import ConfigLoader
from composer.config.schema import DeploymentConfig, OutputStyle
from composer.config.writer import StackConfigWriter
from composer.errors import CompositionError
from composer.operations.smoke import DEFAULT_TIMEOUT, probe_endpoints
from composer.operations.stack import StackRunner
from composer.resources.naming import unit_name

app = typer.Typer(help="function-fleet - Deploy N Azure Function endpoints with Pulumi")
console = Console()


def _fail(message: str, code: int = 1) -> None:
    console.print(f"[bold red]{escape(message)}[/]")
    raise typer.Exit(code=code)


def _engine_output(line: str) -> None:
    console.print(line, end="", markup=False, highlight=False)


def _print_config(config: DeploymentConfig) -> None:
    table = Table(title="Deployment Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Location", config.location)
    table.add_row("Function count", str(config.function_count))
    table.add_row("Function name", config.function_name)
    table.add_row("Runtime", f"{config.runtime_version.net_framework_version} ({config.runtime_version.linux_fx_version})")
    table.add_row("Publish path", config.publish_path)
    table.add_row("Build", "skipped" if config.build.skip else f"{config.build.command} (in {config.build.directory})")
    table.add_row("Output style", config.output_style.value)
    foundation = config.foundation
    table.add_row("Foundation", foundation.stack_path if foundation else "[yellow]self-contained[/]")
    console.print(table)

    if config.function_count:
        units = ", ".join(unit_name(config.unit_prefix, i) for i in range(config.function_count))
        console.print(f"Units: {units}")


@app.command("init")
def init(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    location: str = typer.Option(..., "--location", "-l", help="Azure region, e.g. westeurope"),
    function_count: int = typer.Option(1, "--function-count", "-n", help="Number of function endpoint units"),
    runtime_version: str = typer.Option("v8", "--runtime-version", help="Runtime version tag (v8, v9)"),
    output_style: OutputStyle = typer.Option(OutputStyle.AGGREGATE, "--output-style", help="Export one URL list or one key per unit"),
    foundation: Optional[str] = typer.Option(None, "--foundation", help="Foundation stack as org/project/stack"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing stack configuration file")
):
    """Write a Pulumi.<stack>.yaml configuration file."""
    raw = {
        "location": location,
        "function-count": function_count,
        "runtime-version": runtime_version,
        "output-style": output_style.value,
    }
    if foundation:
        parts = foundation.split("/")
        if len(parts) != 3 or not all(parts):
            _fail(f"Error: --foundation must be org/project/stack, got '{foundation}'")
        raw.update(zip(("foundationOrgName", "foundationProjectName", "foundationStackName"), parts))

    try:
        config = ConfigLoader.validate(raw)
        path = StackConfigWriter(project_dir).write(stack, config, force=force)
    except FileExistsError as e:
        console.print(f"[bold yellow]WARNING: {e}[/]")
        console.print("[yellow]Use --force to overwrite the existing file.[/]")
        raise typer.Exit(code=1)
    except CompositionError as e:
        _fail(f"Error: {e}")

    console.print(f"[green]Stack configuration written to {path}[/]")
    _print_config(config)


@app.command("check")
def check(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
):
    """Validate a stack configuration file without running the engine."""
    stack_file = Path(project_dir) / f"Pulumi.{stack}.yaml"
    try:
        config = ConfigLoader.from_stack_file(str(stack_file))
    except FileNotFoundError:
        _fail(f"Error: Stack configuration not found: {stack_file}")
    except yaml.YAMLError as e:
        _fail(f"Error: Invalid YAML in {stack_file}: {e}")
    except CompositionError as e:
        _fail(f"Error: {e}")

    console.print(f"[green]{stack_file} is valid[/]")
    _print_config(config)


@app.command("preview")
def preview(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Show what an update would change."""
    console.print(f"[bold blue]Previewing stack {stack}...[/]")
    runner = StackRunner(stack, project_dir, debug=debug)
    try:
        result = runner.preview(on_output=_engine_output)
    except auto.CommandError as e:
        _fail(f"Preview failed: {e}")

    if debug:
        console.print(f"[blue]Debug: Change summary: {result.change_summary}[/]")
    console.print("\n[green]Preview completed. No resources were modified.[/]")


@app.command("up")
def up(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
    function_count: Optional[int] = typer.Option(None, "--function-count", "-n", help="Set function-count before deploying"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Deploy the stack and print the function URLs."""
    console.print(f"[bold blue]Deploying stack {stack}...[/]")
    runner = StackRunner(stack, project_dir, debug=debug)
    try:
        if function_count is not None:
            runner.set_function_count(function_count)
            console.print(f"[yellow]function-count set to {function_count}[/]")
        runner.up(on_output=_engine_output)
        urls = runner.api_urls()
    except CompositionError as e:
        _fail(f"Error: {e}")
    except auto.CommandError as e:
        _fail(f"Deployment failed: {e}")

    console.print("\n[green]Deployment completed successfully![/]")
    _print_urls(urls)


@app.command("destroy")
def destroy(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Delete every resource managed by the stack."""
    console.print("[bold red]WARNING: This will delete all resources managed by the stack![/]")

    if not force:
        confirmed = typer.confirm(f"Are you sure you want to destroy stack '{stack}'?")
        if not confirmed:
            console.print("Destroy cancelled")
            return

    runner = StackRunner(stack, project_dir, debug=debug)
    try:
        runner.destroy(on_output=_engine_output)
    except auto.CommandError as e:
        _fail(f"Destroy failed: {e}")

    console.print(f"[green]Stack {stack} destroyed successfully[/]")


@app.command("outputs")
def outputs(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
):
    """Print the function URLs exported by the stack."""
    try:
        urls = StackRunner(stack, project_dir).api_urls()
    except auto.CommandError as e:
        _fail(f"Error: {e}")
    _print_urls(urls)


@app.command("smoke-test")
def smoke_test(
    stack: str = typer.Option("dev", "--stack", "-s", help="Stack name"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Directory containing Pulumi.yaml"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", "-t", help="Per-request timeout in seconds"),
):
    """GET every exported function URL and report the responses."""
    try:
        urls = StackRunner(stack, project_dir).api_urls()
    except auto.CommandError as e:
        _fail(f"Error: {e}")

    if not urls:
        _fail("No function URLs exported by the stack. Run 'up' first.")

    results = probe_endpoints(urls, timeout=timeout)

    table = Table(title="Endpoint Smoke Test")
    table.add_column("URL", style="cyan")
    table.add_column("Status")
    table.add_column("Response")
    for result in results:
        if result.ok:
            status = f"[green]✓ {result.status_code}[/]"
        elif result.error:
            status = "[red]❌ ERROR[/]"
        else:
            status = f"[red]❌ {result.status_code}[/]"
        table.add_row(result.url, status, result.error or result.body)
    console.print(table)

    failed = [r for r in results if not r.ok]
    if failed:
        _fail(f"{len(failed)} of {len(results)} endpoint(s) failed", code=2)
    console.print(f"[green]All {len(results)} endpoint(s) responded[/]")


def _print_urls(urls) -> None:
    if not urls:
        console.print("[yellow]The stack exports no function URLs.[/]")
        return
    table = Table(title="Function Endpoints")
    table.add_column("#", justify="right")
    table.add_column("API URL", style="cyan")
    for i, url in enumerate(urls, start=1):
        table.add_row(str(i), url)
    console.print(table)


if __name__ == "__main__":
    app()
