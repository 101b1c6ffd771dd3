"""Servers command group."""

import click

from payctl.core.async_utils import run_sync
from payctl.core.context import pass_context, PayctlContext
from payctl.core.exceptions import PayaraError


@click.group()
@pass_context
def servers(ctx: PayctlContext) -> None:
    """Configured Payara Server instances.

    \b
    Examples:
        payctl servers list
        payctl servers check remote
        payctl servers apps local
    """
    pass


@servers.command("list")
@pass_context
def list_servers(ctx: PayctlContext) -> None:
    """List configured servers."""
    data = [server.to_dict() for server in ctx.controller.get_servers()]
    ctx.output.print_data(
        data,
        headers=["name", "mode", "type", "admin_url", "deploy_option"],
        title="Payara Servers",
    )


@servers.command("check")
@click.argument("name", required=False)
@pass_context
def check(ctx: PayctlContext, name: str | None) -> None:
    """Check that a server's admin endpoint answers."""
    server = ctx.controller.get_server(name)

    async def run() -> bool:
        try:
            return await server.connect(ctx.config.deploy.connect_timeout)
        finally:
            await ctx.controller.close()

    if run_sync(run()):
        ctx.output.print_success(f"{server.name} is reachable at {server.config.admin_url}")
    else:
        ctx.output.print_error(f"{server.name} is not reachable at {server.config.admin_url}")
        raise click.Abort()


@servers.command("apps")
@click.argument("name", required=False)
@pass_context
def apps(ctx: PayctlContext, name: str | None) -> None:
    """List applications deployed on a server."""
    server = ctx.controller.get_server(name)

    async def run() -> list[str]:
        try:
            return await server.reload_applications()
        finally:
            await ctx.controller.close()

    try:
        names = run_sync(run())
    except PayaraError as e:
        ctx.output.print_error(f"Failed to list applications: {e}")
        raise click.Abort()

    ctx.output.print_data(
        [{"application": n, "url": f"{server.config.http_url}/{n}"} for n in names],
        title=f"Applications on {server.name}",
    )
