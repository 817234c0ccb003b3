"""``flask backup`` / ``flask load-backup`` commands."""

import click
from app.services.backup import BackupService
from app.services.context import ServiceContext


def register_commands(app):
    @app.cli.command('backup')
    def backup_command():
        """Write users, restaurants and waiters to the backup folder."""
        paths = BackupService.create_backup(ServiceContext.from_app())
        for name, path in paths.items():
            click.echo(f'- {name}: {path}')
        click.echo('Backup created successfully!')
    
    @app.cli.command('load-backup')
    def load_backup_command():
        """Restore the backup files into an empty database."""
        result = BackupService.restore_backup(ServiceContext.from_app())
        if not result.restored:
            click.echo('Data already exists in the database. Skipping loading backup data.')
            return
        for name, count in result.counts.items():
            click.echo(f'- {name}: {count}')
        click.echo('Backup data loaded successfully.')
