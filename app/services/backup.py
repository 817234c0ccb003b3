"""JSON snapshot of users, restaurants and waiters, and restore into an empty store."""

import json
import os
from datetime import datetime
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from app.models import User, Restaurant, Waiter, RestaurantRating, WaiterRating
from app.utils.error_handler import UpstreamIOError, ValidationError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

# Collection name -> backup file name
BACKUP_FILES = {
    'users': 'users.json',
    'restaurants': 'restaurants.json',
    'waiters': 'waiters.json',
}

STATUS_RESTORED = 'restored'
STATUS_ALREADY_POPULATED = 'already_populated'


class RestoreResult:
    def __init__(self, status, counts=None):
        self.status = status
        self.counts = counts or {}

    @property
    def restored(self):
        return self.status == STATUS_RESTORED

    def __repr__(self):
        return f'<RestoreResult {self.status} {self.counts}>'


def _parse_datetime(value):
    if not value:
        return None
    return datetime.fromisoformat(value)


def _build_ratings(records, model):
    return [
        model(
            rater_id=record['rating_by'],
            rating=int(record['rating']),
            date_time=_parse_datetime(record.get('date_time')) or datetime.utcnow(),
        )
        for record in records or []
    ]


def _build_user(record):
    return User(
        id=record['id'],
        username=record['username'],
        password_hash=record['password'],
        role=record.get('role', 'normal'),
    )


def _build_restaurant(record):
    restaurant = Restaurant(id=record['id'], name=record['name'], qr_code=record.get('qr_code'))
    restaurant.ratings = _build_ratings(record.get('ratings'), RestaurantRating)
    return restaurant


def _build_waiter(record):
    waiter = Waiter(
        id=record['id'],
        restaurant_id=record['restaurant_id'],
        name=record['name'],
        picture=record['picture'],
    )
    waiter.ratings = _build_ratings(record.get('ratings'), WaiterRating)
    return waiter


class BackupService:
    """Backup and restore of the three entity collections."""

    MODELS = {
        'users': User,
        'restaurants': Restaurant,
        'waiters': Waiter,
    }

    BUILDERS = {
        'users': _build_user,
        'restaurants': _build_restaurant,
        'waiters': _build_waiter,
    }

    # Insert order follows the foreign keys
    RESTORE_ORDER = ('users', 'restaurants', 'waiters')

    @staticmethod
    def counts(ctx):
        return {
            name: ctx.session.query(func.count(model.id)).scalar()
            for name, model in BackupService.MODELS.items()
        }

    @staticmethod
    def create_backup(ctx):
        """Write every collection to its JSON file; returns {collection: path}."""
        try:
            os.makedirs(ctx.backup_folder, exist_ok=True)
        except OSError as e:
            raise UpstreamIOError(f'Could not create backup folder: {e}') from e

        paths = {}
        for name, model in BackupService.MODELS.items():
            records = [item.to_dict() for item in ctx.session.query(model).order_by(model.id).all()]
            path = os.path.join(ctx.backup_folder, BACKUP_FILES[name])
            try:
                with open(path, 'w', encoding='utf-8') as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
            except OSError as e:
                logger.error(f"Error writing backup file {path}: {e}")
                raise UpstreamIOError(f'Could not write {path}: {e}') from e
            paths[name] = path
            logger.info(f"Backed up {len(records)} {name} to {path}")

        return paths

    @staticmethod
    def _read_backup(ctx, name):
        path = os.path.join(ctx.backup_folder, BACKUP_FILES[name])
        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f'Malformed backup file {path}: {e}') from e
        except OSError as e:
            raise UpstreamIOError(f'Could not read backup file {path}: {e}') from e

        if not isinstance(data, list):
            raise ValidationError(f'Backup file {path} must contain a JSON array.')
        return data

    @staticmethod
    def restore_backup(ctx):
        """Load the backup files into an empty store in a single transaction."""
        counts = BackupService.counts(ctx)
        if any(counts.values()):
            logger.warning(f"Skipping backup restore, store already populated: {counts}")
            return RestoreResult(STATUS_ALREADY_POPULATED, counts)

        # Parse everything before touching the store
        entities = {}
        for name in BackupService.RESTORE_ORDER:
            records = BackupService._read_backup(ctx, name)
            try:
                entities[name] = [BackupService.BUILDERS[name](record) for record in records]
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f'Invalid record in {BACKUP_FILES[name]}: {e}') from e

        try:
            for name in BackupService.RESTORE_ORDER:
                ctx.session.add_all(entities[name])
                ctx.session.flush()
            BackupService._reset_sequences(ctx)
            ctx.session.commit()
        except SQLAlchemyError as e:
            ctx.session.rollback()
            logger.error(f"Backup restore failed, nothing was inserted: {e}")
            raise UpstreamIOError(f'Could not restore backup: {e}') from e

        restored = {name: len(items) for name, items in entities.items()}
        logger.info(f"Backup restored: {restored}")
        return RestoreResult(STATUS_RESTORED, restored)

    @staticmethod
    def _reset_sequences(ctx):
        """Move PostgreSQL id sequences past the restored ids."""
        if ctx.session.get_bind().dialect.name != 'postgresql':
            return
        for model in (User, Restaurant, Waiter, RestaurantRating, WaiterRating):
            table = model.__tablename__
            ctx.session.execute(text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
            ))
