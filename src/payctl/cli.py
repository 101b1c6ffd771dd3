"""Command line entry point for payctl."""

import sys

import click
from rich.console import Console

from payctl import __version__
from payctl.config import load_config
from payctl.core.context import PayctlContext
from payctl.core.exceptions import ConfigError, PayctlError
from payctl.core.output import OutputFormat

FORMAT_NAMES = ", ".join(f.value for f in OutputFormat)


def _output_format(ctx: click.Context, param: click.Parameter, value: str | None) -> OutputFormat | None:
    if value is None:
        return None
    try:
        return OutputFormat(value.lower())
    except ValueError:
        raise click.BadParameter(f"Invalid format '{value}'. Choose from: {FORMAT_NAMES}")


def _exit_with(message: str, code: int) -> None:
    Console(stderr=True).print(message)
    sys.exit(code)


@click.group(context_settings={"help_option_names": ["-h", "--help"], "max_content_width": 120})
@click.option("-o", "--output", "output_format", metavar="FORMAT", callback=_output_format,
              help=f"Output format: {FORMAT_NAMES}")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option("-q", "--quiet", is_flag=True, help="Only print results and errors")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-c", "--config", "config_file", type=click.Path(exists=True, dir_okay=False), metavar="FILE",
              envvar="PAYCTL_CONFIG", help="Config file merged over user and project config")
@click.version_option(__version__, "--version", prog_name="payctl", message="%(prog)s version %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """payctl - build and deploy applications to Payara Server.

    Deploys to local servers, remote servers over HTTP upload, and remote
    servers that see the build output through a Docker mount or WSL.

    \b
    Examples:
        payctl deploy project . --server local
        payctl deploy artifact target/app.war --server remote
        payctl servers list

    \b
    Configuration:
        ~/.payctl/config.yaml    User configuration
        ./payctl.yaml            Project configuration
        PAYCTL_*                 Environment variables
    """
    try:
        config = load_config(config_file)
    except ConfigError as e:
        _exit_with(f"[red]Configuration error:[/red] {e}", 1)

    ctx.obj = PayctlContext(
        config=config,
        output_format=output_format,
        verbose=verbose,
        quiet=quiet,
        color=not no_color,
    )


@cli.command()
@click.pass_obj
def config(payctl_ctx: PayctlContext) -> None:
    """Show the effective configuration."""
    settings = payctl_ctx.config
    payctl_ctx.output.print_data(
        {
            "output_format": payctl_ctx.output_format.value,
            "verbose": payctl_ctx.verbose,
            "servers": ", ".join(sorted(settings.servers)) or "-",
            "status_delay": settings.deploy.status_delay,
            "open_browser": settings.deploy.open_browser,
            "debug_port": settings.debug.port,
            "debug_attach_command": settings.debug.get_attach_command() or "-",
            "maven_goals": " ".join(settings.build.maven_goals),
            "gradle_tasks": " ".join(settings.build.gradle_tasks),
        },
        title="Current Configuration",
    )


def register_commands() -> None:
    from payctl.commands.deploy import deploy
    from payctl.commands.servers import servers

    cli.add_command(deploy)
    cli.add_command(servers)


register_commands()


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except PayctlError as e:
        _exit_with(f"[red]Error:[/red] {e}", 1)
    except KeyboardInterrupt:
        _exit_with("\n[yellow]Interrupted[/yellow]", 130)


if __name__ == "__main__":
    main()
