"""Deploy command group."""

from pathlib import Path

import click

from payctl.core.async_utils import run_sync
from payctl.core.context import pass_context, PayctlContext
from payctl.core.exceptions import BuildError, PayctlError, ValidationError
from payctl.server.instance import ServerInstance


@click.group()
@pass_context
def deploy(ctx: PayctlContext) -> None:
    """Build and deploy applications to Payara Server.

    \b
    Examples:
        payctl deploy project . --server local
        payctl deploy project ./shop --server docker --debug
        payctl deploy artifact target/shop.war --server remote
    """
    pass


def _deploy_options(func):
    func = click.option("-s", "--server", "server_name", metavar="NAME", help="Server instance from config")(func)
    func = click.option("--debug", is_flag=True, help="Attach a debugger after deploying")(func)
    func = click.option("--background", is_flag=True, help="Deploy quietly, without opening the application")(func)
    func = click.option("--metadata-changed", is_flag=True, help="Deployment descriptors changed (hot reload)")(func)
    func = click.option(
        "--source-changed",
        "sources_changed",
        multiple=True,
        metavar="FILE",
        help="Changed source file (hot reload, repeatable)",
    )(func)
    return func


def _wait_for_debugger(ctx: PayctlContext) -> None:
    session = ctx.debug_sessions.active
    if session is None or not session.running():
        return
    ctx.output.print_info(f"Debugger running (pid {session.pid}), exit it to finish")
    ctx.debug_sessions.wait()


async def _connect_if_remote(ctx: PayctlContext, server: ServerInstance) -> None:
    if server.is_remote and ctx.config.deploy.verify_connection:
        await server.connect(ctx.config.deploy.connect_timeout)


@deploy.command("project")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@_deploy_options
@pass_context
def project(
    ctx: PayctlContext,
    path: Path,
    server_name: str | None,
    debug: bool,
    background: bool,
    metadata_changed: bool,
    sources_changed: tuple[str, ...],
) -> None:
    """Build the project at PATH and deploy it.

    \b
    Examples:
        payctl deploy project . --server local
        payctl deploy project . --server dev --metadata-changed --source-changed src/main/java/A.java
    """
    root = path.resolve()
    server = ctx.controller.get_server(server_name)
    support = ctx.deployment_support([root])

    async def run() -> None:
        try:
            await _connect_if_remote(ctx, server)
            await support.build_and_deploy(
                root,
                server,
                debug,
                auto_deploy=background,
                metadata_changed=metadata_changed,
                sources_changed=list(sources_changed),
            )
            await support.drain()
            await ctx.status_bar.drain()
        finally:
            await ctx.controller.close()

    try:
        run_sync(run())
        _wait_for_debugger(ctx)
    except BuildError as e:
        ctx.output.print_error(f"Build failed: {e}")
        raise click.Abort()
    finally:
        ctx.debug_sessions.close()


@deploy.command("artifact")
@click.argument("artifact", type=click.Path(exists=True, path_type=Path))
@_deploy_options
@pass_context
def artifact(
    ctx: PayctlContext,
    artifact: Path,
    server_name: str | None,
    debug: bool,
    background: bool,
    metadata_changed: bool,
    sources_changed: tuple[str, ...],
) -> None:
    """Deploy an already built ARTIFACT without building.

    \b
    Examples:
        payctl deploy artifact target/shop.war --server remote
        payctl deploy artifact target/shop --server local --debug
    """
    app_path = artifact.resolve()
    server = ctx.controller.get_server(server_name)
    support = ctx.deployment_support()

    async def run() -> None:
        try:
            await _connect_if_remote(ctx, server)
            if not support.check_connectable(server):
                return
            await support.deploy_application(
                app_path,
                server,
                debug,
                auto_deploy=background,
                metadata_changed=metadata_changed,
                sources_changed=list(sources_changed),
            )
            await support.drain()
            await ctx.status_bar.drain()
        finally:
            await ctx.controller.close()

    try:
        run_sync(run())
        _wait_for_debugger(ctx)
    except ValidationError as e:
        ctx.output.print_error(str(e))
        raise click.Abort()
    except PayctlError as e:
        ctx.output.print_error(f"Deployment failed: {e}")
        raise click.Abort()
    finally:
        ctx.debug_sessions.close()
