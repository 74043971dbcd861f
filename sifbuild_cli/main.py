"""
sifbuild CLI - Main entry point
"""

import click
from pathlib import Path
from rich.markup import escape

from sifbuild_cli import __version__
from sifbuild_cli.utils.config import (
    CONFIG_FILENAME, SYSTEM_CONFIG_PATH, create_default_config, load_cli_config, load_policy
)
from sifbuild_cli.utils.errors import CLIError, handle_cli_error
from sifbuild_cli.utils.logging_utils import setup_logging
from sifbuild_cli.utils.output import (
    ConsoleReporter, console, print_error, print_info, print_result_table, print_success
)
from sifbuild_core.config import BuildPolicy
from sifbuild_core.exceptions import ConfigurationError, SifBuildError
from sifbuild_core.orchestrator import BuildOrchestrator

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

NO_ARGS_KEY = "sifbuild.no_args"


def disabled_kind_notes(policy: BuildPolicy) -> list:
    """Help-text notes for container kinds switched off by the administrator"""
    notes = []
    if not policy.sif_allowed:
        notes.append("Note: creating SIF images is disabled")
    if not policy.sandbox_allowed:
        notes.append("Note: creating sandbox containers is disabled")
    return notes


class BuildCommand(click.Command):
    """
    click.Command that exits 1 on usage errors, records whether any
    arguments were given, and lists disabled container kinds in its help.
    """

    def parse_args(self, ctx, args):
        ctx.meta[NO_ARGS_KEY] = not args
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise

    def format_epilog(self, ctx, formatter):
        super().format_epilog(ctx, formatter)
        try:
            notes = disabled_kind_notes(load_policy())
        except ConfigurationError as exc:
            notes = [f"Note: {exc}"]
        if notes:
            formatter.write_paragraph()
            for note in notes:
                formatter.write_text(note)


@click.command(cls=BuildCommand, context_settings=CONTEXT_SETTINGS)
@click.option(
    '-a', '--def-file', 'def_file',
    metavar='DEF_FILE',
    help='Build from an Apptainer definition file (myfile.def)'
)
@click.option(
    '-b', '--docker-project', 'docker_project',
    metavar='NAME',
    help='Build from the Dockerfile in the current directory. NAME is the image '
         'to create, e.g. myproject/repository-name (as in docker build -t NAME .)'
)
@click.option(
    '-c', '--docker-image', 'docker_image',
    metavar='IMAGE',
    help='Build from a local Docker/OCI image (myimage:mytag)'
)
@click.option(
    '-n', '--name', 'tool_name',
    metavar='TOOL_NAME',
    help='Container name prefix, combined with the version (mytool -> mytool-1.0.0 '
         'or mytool-1.0.0.sif). Created in the current directory'
)
@click.option(
    '-v', '--version', 'version',
    metavar='VERSION',
    help="Tool version added to the container name, e.g. '1.28'"
)
@click.option(
    '-t', '--type', 'container_type',
    metavar='[sandbox|sif]',
    help='Type of container to build: sandbox (directory) or sif (single file)'
)
@click.option(
    '-d', '--dry-run',
    is_flag=True,
    help='Display the build commands without running them'
)
@click.option(
    '--config', 'config_file',
    type=click.Path(exists=True, dir_okay=False),
    envvar='SIFBUILD_CONFIG',
    help=f"Tool configuration file (default: ~/{CONFIG_FILENAME} then ./{CONFIG_FILENAME}). "
         f"Policy switches are only read from {SYSTEM_CONFIG_PATH}"
)
@click.option(
    '--init-config',
    is_flag=True,
    help=f'Write the default configuration to ./{CONFIG_FILENAME} and exit'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Verbose logging'
)
@click.version_option(__version__, '--app-version', prog_name="sifbuild")
@click.pass_context
def cli(
    ctx,
    def_file: str,
    docker_project: str,
    docker_image: str,
    tool_name: str,
    version: str,
    container_type: str,
    dry_run: bool,
    config_file: str,
    init_config: bool,
    verbose: bool
):
    """
    Create a Singularity/Apptainer container.

    \b
    You can make a sif file or a sandbox directory. The source is exactly
    one of a def file (-a), a Dockerfile (-b) or a Docker image (-c).

    \b
    Examples:
      sifbuild -t sandbox -a mytool.def -n mytool -v 1.28
      sifbuild -t sandbox -b myproject/mytool -n mytool -v 2.0
      sifbuild -t sif -c mytool:latest -n mytool -v 2.0 -d
    """
    if ctx.meta.get(NO_ARGS_KEY):
        click.echo(ctx.get_help())
        ctx.exit(0)

    setup_logging(verbose)

    if init_config:
        _write_default_config()
        return

    factory = (ctx.obj or {}).get("orchestrator_factory", BuildOrchestrator)

    try:
        config = load_cli_config(config_file)
        orchestrator = factory(config.to_orchestrator_config(), reporter=ConsoleReporter())

        request = orchestrator.request_from_options(
            def_file=def_file,
            docker_project=docker_project,
            docker_image=docker_image,
            tool_name=tool_name,
            version=version,
            container_type=container_type,
            dry_run=dry_run,
        )
        result = orchestrator.execute(request)

        if request.dry_run:
            console.print()
            print_success("Dry run complete, nothing was built")
            return

        if not result.success:
            console.print()
            print_result_table(result)
            print_error("ERROR: build failed")
            result.raise_for_status()

        console.print()
        print_success("Build completed successfully!")
        print_info(escape(f"New Apptainer/Singularity image: {result.output_path}"))

    except SifBuildError as exc:
        handle_cli_error(exc, verbose=verbose)


def _write_default_config():
    """Create ./.sifbuild.yaml, refusing to overwrite"""
    if Path(CONFIG_FILENAME).exists():
        handle_cli_error(CLIError(f"{CONFIG_FILENAME} already exists"))
    create_default_config(CONFIG_FILENAME)
    print_success(f"Wrote default configuration to {CONFIG_FILENAME}")


def main():
    """Main entry point with error handling"""
    try:
        # Run CLI
        cli(obj={})

    except Exception as exc:
        handle_cli_error(exc, verbose=False)


if __name__ == "__main__":
    main()
