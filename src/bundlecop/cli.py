"""Command-line interface for bundlecop."""

import sys
import traceback

import click
from colorama import Fore, Style, init

from bundlecop.api import ApiError
from bundlecop.collector import FileResolveError, read_files_from_directories
from bundlecop.config import (
    PROJECT_CONFIG_FILE,
    get_config,
    load_project_config,
    update_config,
)
from bundlecop.models import SubmissionOptions
from bundlecop.repo import get_repo_info
from bundlecop.submission import ValidationError, submit_reading
from bundlecop.utils.console import (
    _get_console, _print_files, _rich_echo, _rich_error, _rich_info, _rich_muted,
    _rich_panel, _rich_success,
)
from bundlecop.version import get_version

init(autoreset=True)

TITLE = f"{Fore.CYAN}{Style.BRIGHT}"
ERROR = f"{Fore.RED}{Style.BRIGHT}"
RESET = Style.RESET_ALL

# Errors we expect, and report without a traceback
EXPECTED_ERRORS = (FileResolveError, ValidationError, ApiError)


def print_version(ctx, param, value):
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return

    console = _get_console()
    if console:
        console.print(f"[bold cyan]bundlecop[/bold cyan] version {get_version()}")
    else:
        click.echo(f"{TITLE}bundlecop{RESET} version {get_version()}")
    ctx.exit()


def _fail(ctx, error: Exception):
    """Report an error and exit with status 1."""
    if ctx.obj.get('verbose') and not isinstance(error, EXPECTED_ERRORS):
        click.echo(traceback.format_exc(), err=True)
    _rich_error(f"ERROR: {error}", symbol="error")
    sys.exit(1)


@click.group(help="bundlecop: track the sizes of your build artifacts across commits")
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True, help="Show version and exit.")
@click.option('--api-url', help="URL of the bundlecop API")
@click.option('--verbose', '-v', is_flag=True, help="Show more details")
@click.pass_context
def cli(ctx, api_url, verbose):
    """Main entry point for the bundlecop CLI."""
    ctx.ensure_object(dict)
    ctx.obj['api_url'] = api_url
    ctx.obj['verbose'] = verbose


@cli.command(help="Submit the sizes for all files in the given directories, files or globs")
@click.argument('files_dirs_globs', nargs=-1, required=True, metavar="FILES_DIRS_GLOBS...")
@click.option('--project-key', help="Project key, authenticates you for a project on bundlecop")
@click.option('--bundleset', help="ID of the bundleset the reading should be submitted for")
@click.option('--commit', help="Arbitrary commit id or hash that you want to associate with the reading")
@click.option('--branch', help="Arbitrary branch name. If given, and no parent commit is specified, "
                               "the most recent reading from this branch will be the parent")
@click.option('--parent-commits', multiple=True,
              help="Commit id of a parent reading, which new values will be compared to. "
                   "Can be given more than once")
@click.option('--include', help="Glob pattern (e.g. '*.{js,css}') or extension list of files to include if a directory is specified")
@click.option('--exclude', help="Glob pattern (e.g. '*.{js,css}') or extension list of files to exclude if a directory is specified")
@click.option('--only-if-env', help="Do not submit if the given environment variable is not set")
@click.option('--dry-run', is_flag=True, help="Show what would be submitted without submitting")
@click.pass_context
def submit(ctx, files_dirs_globs, project_key, bundleset, commit, branch, parent_commits,
           include, exclude, only_if_env, dry_run):
    """Measure the given files and submit a reading."""
    verbose = ctx.obj.get('verbose')
    try:
        project_config = load_project_config()
        user_config = get_config()

        include = include or project_config.get('include') or user_config.get('include')
        exclude = exclude or project_config.get('exclude') or user_config.get('exclude')

        files = read_files_from_directories(files_dirs_globs, include, exclude)
        if verbose or dry_run:
            _print_files(files, title=f"{len(files)} files")

        options = SubmissionOptions(
            project_key=project_key,
            api_url=ctx.obj.get('api_url'),
            bundle_set=bundleset,
            commit=commit,
            branch=branch,
            parent_commits=list(parent_commits) or None,
            only_if_env=only_if_env,
        )
        submit_reading(files, options, project_config=project_config,
                       user_config=user_config, dry_run=dry_run)

    except Exception as e:
        _fail(ctx, e)


@cli.command(name="get-repo-info", hidden=True)
@click.pass_context
def get_repo_info_command(ctx):
    """Show what we can read from the git repository."""
    try:
        info = get_repo_info()
        if info is None:
            _rich_info("Not in a git repository, or the repository has no commits.")
            return

        lines = [
            f"System: {info.system}",
            f"Path: {info.path}",
            f"Commit: {info.commit_id}",
            f"Parents: {', '.join(info.parent_commit_ids or []) or 'none'}",
            f"Branch: {info.branch or 'detached'}",
            f"Tag: {info.tag or 'none'}",
            f"Message: {info.commit_message or ''}",
        ]
        _rich_panel("\n".join(lines), title="Repository")
    except Exception as e:
        _fail(ctx, e)


@cli.command(help="Configure bundlecop")
@click.option('--show', is_flag=True, help="Show current configuration")
@click.option('--set', 'set_values', nargs=2, multiple=True, metavar="KEY VALUE",
              help="Set a value in the user configuration")
@click.pass_context
def config(ctx, show, set_values):
    """Show or change bundlecop settings."""
    try:
        if set_values:
            update_config(dict(set_values))
            for key, value in set_values:
                _rich_success(f"Set {key} = {value}", symbol="success")

        if show:
            user_config = get_config()
            project_config = load_project_config()

            _rich_info("User configuration:")
            if user_config:
                for key, value in sorted(user_config.items()):
                    _rich_echo(f"  {key}: {value}")
            else:
                _rich_muted("  (empty)")

            _rich_info(f"Project configuration ({PROJECT_CONFIG_FILE}):")
            if project_config:
                for key, value in sorted(project_config.items()):
                    _rich_echo(f"  {key}: {value}")
            else:
                _rich_muted("  (not found)")

            _rich_muted(f"bundlecop version {get_version()}")

        if not set_values and not show:
            _rich_info("Use --show to display configuration, or --set KEY VALUE to change it")

    except Exception as e:
        _fail(ctx, e)


def main():
    """Main entry point for the CLI."""
    try:
        cli(obj={})
    except Exception as e:
        click.echo(f"{ERROR}Error: {e}{RESET}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
