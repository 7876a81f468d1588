"""
Click-based CLI for the grant wizard.
"""

import asyncio
import sys
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from . import __version__
from .config import ConnectionConfig
from .console import ConsoleNotifier
from .models import PrivilegeGrantRow
from .preview import print_sql_statements_preview, split_sql_statements
from .privileges import privilege_from_code
from .services.contracts import GrantService
from .services.http import HttpGrantService
from .services.local import LocalGrantService
from .workflow import GrantWorkflow, PreviewStatus

console = Console()
err_console = Console(stderr=True)


class WorkflowAbort(Exception):
    """Raised to stop a CLI run after the reason has been reported"""


def parse_grant_spec(spec: str, revoke: bool = False) -> PrivilegeGrantRow:
    """Parse `ROLE=PRIV[,PRIV...]`; a trailing `*` marks WITH GRANT OPTION"""
    grantee, sep, privilege_list = spec.partition("=")
    if not sep or not grantee.strip():
        raise click.BadParameter(f"Expected ROLE=PRIV[,PRIV...], got '{spec}'")

    privileges: list[str] = []
    with_grant: list[str] = []
    for token in privilege_list.split(","):
        token = token.strip()
        if not token:
            continue
        optioned = token.endswith("*")
        privilege = privilege_from_code(token.rstrip("*"))
        if privilege not in privileges:
            privileges.append(privilege)
        if optioned and privilege not in with_grant:
            with_grant.append(privilege)
    return PrivilegeGrantRow(
        grantee=grantee.strip(), privileges=privileges, with_grant_option=with_grant, revoke=revoke
    )


def source_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options selecting the grant service and the browser node"""
    options = [
        click.option(
            "--server-url",
            envvar="GRANTWIZARD_SERVER_URL",
            help="Grant service base URL",
        ),
        click.option(
            "--catalog-file",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            envvar="GRANTWIZARD_CATALOG_FILE",
            help="Local JSON catalog export (instead of --server-url)",
        ),
        click.option("--server-id", "-s", envvar="GRANTWIZARD_SERVER_ID", help="Server ID"),
        click.option("--database-id", "-d", envvar="GRANTWIZARD_DATABASE_ID", help="Database ID"),
        click.option("--node-id", default="", envvar="GRANTWIZARD_NODE_ID", help="Browser node ID"),
        click.option(
            "--node-type",
            default="database",
            envvar="GRANTWIZARD_NODE_TYPE",
            help="Browser node type (default: database)",
        ),
        click.option(
            "--timeout",
            type=float,
            default=30.0,
            envvar="GRANTWIZARD_TIMEOUT",
            help="Request timeout in seconds",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_service(
    server_url: Optional[str],
    catalog_file: Optional[Path],
    server_id: Optional[str],
    database_id: Optional[str],
    node_id: str,
    node_type: str,
    timeout: float,
    output: Optional[Path] = None,
) -> tuple[ConnectionConfig, GrantService]:
    if bool(server_url) == bool(catalog_file):
        raise click.UsageError("Pass exactly one of --server-url or --catalog-file")

    if catalog_file:
        config = ConnectionConfig(
            server_id=server_id or "local",
            database_id=database_id or "local",
            node_id=node_id,
            node_type=node_type,
            timeout_seconds=timeout,
        )
        return config, LocalGrantService(catalog_file, output_path=output)

    if not server_id or not database_id:
        raise click.UsageError("--server-id and --database-id are required with --server-url")
    config = ConnectionConfig(
        base_url=server_url,
        server_id=server_id,
        database_id=database_id,
        node_id=node_id,
        node_type=node_type,
        timeout_seconds=timeout,
    )
    return config, HttpGrantService()


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except WorkflowAbort:
            sys.exit(1)

    return wrapper


async def _open_workflow(config: ConnectionConfig, service: GrantService) -> GrantWorkflow:
    workflow = GrantWorkflow(service, config, ConsoleNotifier(err_console))
    result = await workflow.start()
    if not result.success:
        raise WorkflowAbort(result.message)
    return workflow


def _select(workflow: GrantWorkflow, ids: tuple[str, ...]) -> None:
    unknown = workflow.select_ids(ids)
    for object_id in unknown:
        err_console.print(f"[yellow]⚠️  Unknown object id: {object_id}[/yellow]")


@click.group()
@click.version_option(version=__version__, prog_name="grantwizard")
def cli() -> None:
    """Grant Wizard CLI for database object privileges"""
    pass


@cli.command()
@source_options
@handle_errors
def objects(
    server_url: Optional[str],
    catalog_file: Optional[Path],
    server_id: Optional[str],
    database_id: Optional[str],
    node_id: str,
    node_type: str,
    timeout: float,
) -> None:
    """List objects privileges can be granted on"""
    config, service = build_service(
        server_url, catalog_file, server_id, database_id, node_id, node_type, timeout
    )
    workflow = asyncio.run(_open_workflow(config, service))

    table = Table(title="Database Objects")
    table.add_column("Object Type")
    table.add_column("Schema")
    table.add_column("Name")
    table.add_column("ID", style="dim")
    for obj in workflow.available_objects:
        table.add_row(
            obj.object_type.value if obj.object_type else "?",
            obj.schema_name,
            obj.display_name,
            obj.id,
        )
    console.print(table)


@cli.command()
@source_options
@click.option("--select", "select_ids", multiple=True, required=True, help="Object ID to select")
@handle_errors
def privileges(
    server_url: Optional[str],
    catalog_file: Optional[Path],
    server_id: Optional[str],
    database_id: Optional[str],
    node_id: str,
    node_type: str,
    timeout: float,
    select_ids: tuple[str, ...],
) -> None:
    """Show the privileges available for a selection"""
    config, service = build_service(
        server_url, catalog_file, server_id, database_id, node_id, node_type, timeout
    )
    workflow = asyncio.run(_open_workflow(config, service))
    _select(workflow, select_ids)

    if not workflow.effective_privileges:
        console.print("[yellow]No privileges can be granted on the selected objects[/yellow]")
        return
    console.print(f"[bold]Privileges for {len(workflow.selection)} object(s):[/bold]")
    for privilege in workflow.effective_privileges:
        console.print(f"  • {privilege}")


@cli.command()
@source_options
@click.option("--select", "select_ids", multiple=True, required=True, help="Object ID to select")
@click.option(
    "--grant",
    "grant_specs",
    multiple=True,
    required=True,
    help="ROLE=PRIV[,PRIV...]; suffix a privilege with * for WITH GRANT OPTION",
)
@click.option("--revoke", is_flag=True, help="Revoke the privileges instead of granting them")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Script file written on apply (--catalog-file only)",
)
@click.option("--dry-run", is_flag=True, help="Show the statements without applying them")
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation")
@handle_errors
def grant(
    server_url: Optional[str],
    catalog_file: Optional[Path],
    server_id: Optional[str],
    database_id: Optional[str],
    node_id: str,
    node_type: str,
    timeout: float,
    select_ids: tuple[str, ...],
    grant_specs: tuple[str, ...],
    revoke: bool,
    output: Optional[Path],
    dry_run: bool,
    yes: bool,
) -> None:
    """Grant (or revoke) privileges on the selected objects"""
    config, service = build_service(
        server_url, catalog_file, server_id, database_id, node_id, node_type, timeout, output
    )
    rows = [parse_grant_spec(spec, revoke=revoke) for spec in grant_specs]
    applied = asyncio.run(_run_grant(config, service, select_ids, rows, dry_run, yes))
    if applied and output:
        console.print(f"[green]✓[/green] Script written to {output}")


def _abort(workflow: GrantWorkflow, message: str) -> None:
    err_console.print(f"[red]✗ {message}[/red]")
    workflow.cancel()
    raise WorkflowAbort(message)


async def _run_grant(
    config: ConnectionConfig,
    service: GrantService,
    select_ids: tuple[str, ...],
    rows: list[PrivilegeGrantRow],
    dry_run: bool,
    yes: bool,
) -> bool:
    """Drive the workflow to apply; returns True once the grants were applied"""
    workflow = await _open_workflow(config, service)
    _select(workflow, select_ids)

    guard = await workflow.next_step()
    if not guard.allowed:
        _abort(workflow, guard.message)

    workflow.set_rows(rows)
    stale = workflow.edits.stale_privileges()
    if stale:
        index, missing = next(iter(stale.items()))
        _abort(
            workflow,
            f"{', '.join(missing)} cannot be granted on the selected objects "
            f"(grantee '{rows[index].grantee}')",
        )

    guard = await workflow.next_step()
    if not guard.allowed:
        _abort(workflow, guard.message)

    if workflow.preview.status != PreviewStatus.READY:
        raise WorkflowAbort(workflow.preview.error or "Preview unavailable")

    statements = split_sql_statements(workflow.preview.text)
    if not statements:
        _abort(workflow, "No statements were generated for the selected objects")
    if dry_run:
        print_sql_statements_preview(statements)
        console.print("[yellow]Dry run: nothing applied[/yellow]")
        workflow.cancel()
        return False

    print_sql_statements_preview(statements, action_prompt=f"Execute {len(statements)} statements?")
    if not yes and not Confirm.ask("Apply these privileges?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        workflow.cancel()
        return False

    result = await workflow.finish()
    if not result.success:
        raise WorkflowAbort(result.message)
    return True


if __name__ == "__main__":
    cli()
