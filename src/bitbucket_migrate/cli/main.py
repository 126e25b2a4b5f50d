"""Main CLI entry point for Bitbucket Migration Tool."""

import sys
import asyncio
from typing import Optional
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config.config import Config
from ..utils.logging import setup_logging
from ..utils.shutdown import MigrationInterrupted, install_shutdown_handlers
from ..migration.engine import MigrationEngine, MigrationSummary

console = Console()

DEFAULT_CONFIG_PATHS = ['config.yaml', 'config.yml', '.bitbucket-migrate.yaml']


@click.group()
@click.version_option(version=__version__, prog_name='bitbucket-migrate')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Bitbucket Migration Tool - Move Bitbucket repositories to GitHub."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Setup basic logging first (will be enhanced later with config)
    setup_logging('DEBUG' if verbose else 'INFO')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
@click.pass_context
def init(ctx: click.Context, output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]Bitbucket Migration Tool[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            f'[yellow]Please edit {output} with your Bitbucket and GitHub details[/yellow]'
        )

    except OSError as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
@click.option(
    '--dry-run',
    is_flag=True,
    help='List what would be migrated without making changes',
)
@click.pass_context
def migrate(ctx: click.Context, dry_run: bool) -> None:
    """Migrate every repository of the Bitbucket workspace."""
    console.print(
        Panel.fit(
            '[bold blue]Bitbucket Migration Tool[/bold blue]\n'
            'Starting migration process...',
            border_style='blue',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        dry_run = dry_run or config.migration.dry_run
        if dry_run:
            console.print(
                '[yellow]Running in dry-run mode - no changes will be made[/yellow]'
            )

        summary = asyncio.run(_run_migration(config, dry_run))
        _display_migration_summary(summary)

    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configuration and connectivity."""
    console.print(
        Panel.fit(
            '[bold cyan]Bitbucket Migration Tool[/bold cyan]\n'
            'Validating configuration...',
            border_style='cyan',
        )
    )

    try:
        config = _load_config(ctx)

        engine = MigrationEngine(config)
        try:
            engine.test_connectivity()
        finally:
            engine.close()

        console.print('[green]✓[/green] Connectivity validation passed')
        console.print('[green]✓[/green] Configuration validation completed')

    except Exception as e:
        console.print(f'[red]✗[/red] Validation failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective migration configuration."""
    console.print(
        Panel.fit(
            '[bold magenta]Bitbucket Migration Tool[/bold magenta]\n'
            'Migration Configuration',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        table = Table(title='Migration Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        destination = config.destination
        migration = config.migration

        table.add_row('Bitbucket Workspace', config.source.workspace)
        table.add_row('Bitbucket User', config.source.username)
        table.add_row('GitHub Workspace', destination.workspace)
        table.add_row('GitHub User', destination.username)
        table.add_row('Organization', '✓' if destination.is_organization else '✗')
        table.add_row('Team', destination.team)
        table.add_row('Max Repositories', str(migration.max_repositories))
        table.add_row(
            'Excluded Repositories',
            ', '.join(migration.excluded_repositories) or '-',
        )
        table.add_row('Delay (seconds)', str(migration.delay_seconds))
        table.add_row('Archive After (days)', str(migration.archive_after_days))
        table.add_row('Working Directory', config.git.repositories_dir)

        console.print(table)

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        return Config.from_file(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return Config.from_file(path)

    return Config.from_env()


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    # Use config logging settings, but allow verbose flag to override level
    log_level = 'DEBUG' if verbose else config.logging.level

    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


async def _run_migration(config: Config, dry_run: bool = False) -> MigrationSummary:
    """Run the migration as a single task that termination signals cancel."""
    engine = MigrationEngine(config)
    task = asyncio.ensure_future(engine.dry_run() if dry_run else engine.migrate())
    install_shutdown_handlers(task)

    operation = 'Dry run' if dry_run else 'Migration'
    with console.status(f'[blue]{operation} in progress...'):
        try:
            summary = await task
        except asyncio.CancelledError:
            raise MigrationInterrupted(f'{operation} interrupted by signal')

    console.print(f'[green]✓[/green] {operation} completed successfully')
    return summary


def _display_migration_summary(summary: MigrationSummary) -> None:
    """Display migration summary results."""
    if summary.dry_run:
        table = Table(title='Dry Run')
        table.add_column('Repository', style='cyan')
        table.add_column('Private', style='blue')
        table.add_column('Updated (days ago)', style='blue')
        table.add_column('Archive', style='yellow')
        table.add_column('Endpoint', style='green')

        for planned in summary.planned:
            table.add_row(
                planned.slug,
                '✓' if planned.private else '✗',
                str(planned.updated_days_ago),
                '✓' if planned.archive else '✗',
                planned.endpoint,
            )
    else:
        table = Table(title='Migration Summary')
        table.add_column('Repository', style='cyan')
        table.add_column('GitHub URL', style='green')
        table.add_column('Archived', style='yellow')

        for migrated in summary.migrated:
            table.add_row(
                migrated.slug, migrated.url, '✓' if migrated.archived else '✗'
            )

    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Migration Duration:[/blue] {duration}')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Migration interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
