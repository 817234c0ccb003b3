"""Restaurant and waiter lifecycle: creation, QR codes, photos and cascading deletes."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.models import Restaurant, Waiter
from app.utils.error_handler import (DuplicateNameError, NotFoundError,
                                     UpstreamIOError, ValidationError)
from app.utils.logging_config import get_logger
from app.utils.qr_generator import QRGenerator
from app.utils.storage import PhotoStorage

logger = get_logger(__name__)


class WaiterOutcome:
    """Result of removing one waiter during a cascade."""

    def __init__(self, waiter_id, picture, photo_released=False, error=None):
        self.waiter_id = waiter_id
        self.picture = picture
        self.photo_released = photo_released
        self.error = error

    @property
    def ok(self):
        return self.error is None


class CascadeResult:
    def __init__(self, restaurant_id, outcomes=None):
        self.restaurant_id = restaurant_id
        self.outcomes = outcomes or []

    @property
    def failures(self):
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self):
        return not self.failures


def _photo_storage(ctx):
    return PhotoStorage(ctx.upload_folder, ctx.allowed_photo_extensions)


class RestaurantService:
    """Admin operations on restaurants and their waiters."""

    @staticmethod
    def list_restaurants(ctx):
        return ctx.session.query(Restaurant).order_by(Restaurant.name).all()

    @staticmethod
    def get_restaurant(ctx, restaurant_id):
        restaurant = ctx.session.get(Restaurant, restaurant_id) if restaurant_id is not None else None
        if restaurant is None:
            raise NotFoundError('Restaurant not found')
        return restaurant

    @staticmethod
    def get_waiter(ctx, waiter_id):
        waiter = ctx.session.get(Waiter, waiter_id)
        if waiter is None:
            raise NotFoundError('Waiter not found')
        return waiter

    @staticmethod
    def list_waiters(ctx):
        return ctx.session.query(Waiter).order_by(Waiter.restaurant_id, Waiter.id).all()

    @staticmethod
    def waiters_for(ctx, restaurant_id):
        return ctx.session.query(Waiter).filter_by(restaurant_id=restaurant_id).order_by(Waiter.id).all()

    @staticmethod
    def create_restaurant(ctx, name):
        """Create a uniquely named restaurant and its QR code."""
        name = (name or '').strip()
        if not name:
            raise ValidationError('Restaurant name is required.')

        if ctx.session.query(Restaurant).filter_by(name=name).first():
            raise DuplicateNameError('Restaurant name already exists.')

        restaurant = Restaurant(name=name)
        generator = QRGenerator(ctx.qr_folder)
        try:
            ctx.session.add(restaurant)
            ctx.session.flush()  # assigns restaurant.id

            restaurant.qr_code = generator.generate_restaurant_qr(restaurant.id, ctx.public_base_url)
            ctx.session.commit()
        except Exception as e:
            restaurant_id = restaurant.id
            ctx.session.rollback()
            if restaurant_id is not None:
                # May be a partial image when the QR library failed mid-write
                try:
                    generator.remove(QRGenerator.filename_for(restaurant_id))
                except UpstreamIOError as cleanup_error:
                    logger.error(f"Error removing QR code of unsaved restaurant {restaurant_id}: {cleanup_error}")
            if isinstance(e, IntegrityError):
                raise DuplicateNameError('Restaurant name already exists.') from e
            if isinstance(e, SQLAlchemyError):
                raise UpstreamIOError(f'Could not save restaurant: {e}') from e
            raise

        logger.info(f"Created restaurant {restaurant.id} ({name}) with QR {restaurant.qr_code}")
        return restaurant

    @staticmethod
    def create_waiter(ctx, restaurant_id, name, picture):
        """Create a waiter for an existing restaurant from an uploaded picture."""
        name = (name or '').strip()
        if not name:
            raise ValidationError('Waiter name is required.')

        restaurant = RestaurantService.get_restaurant(ctx, restaurant_id)

        storage = _photo_storage(ctx)
        filename = storage.save(picture)

        waiter = Waiter(restaurant_id=restaurant.id, name=name, picture=filename)
        try:
            ctx.session.add(waiter)
            ctx.session.commit()
        except SQLAlchemyError as e:
            ctx.session.rollback()
            storage.delete(filename)
            raise UpstreamIOError(f'Could not save waiter: {e}') from e

        logger.info(f"Created waiter {waiter.id} ({name}) for restaurant {restaurant.id}")
        return waiter

    @staticmethod
    def delete_waiter(ctx, waiter_id):
        """Release the waiter's photo, then delete the record."""
        waiter = RestaurantService.get_waiter(ctx, waiter_id)

        # Raises UpstreamIOError (record kept) unless the photo is simply absent
        _photo_storage(ctx).delete(waiter.picture)

        ctx.session.delete(waiter)
        ctx.session.commit()
        logger.info(f"Deleted waiter {waiter_id}")

    @staticmethod
    def delete_restaurant(ctx, restaurant_id):
        """Delete a restaurant, every waiter referencing it and their photos.

        Photo failures are recorded per waiter and do not stop the cascade.
        """
        restaurant = RestaurantService.get_restaurant(ctx, restaurant_id)
        storage = _photo_storage(ctx)
        result = CascadeResult(restaurant.id)

        waiters = RestaurantService.waiters_for(ctx, restaurant.id)
        for waiter in waiters:
            outcome = WaiterOutcome(waiter.id, waiter.picture)
            try:
                outcome.photo_released = storage.delete(waiter.picture)
            except UpstreamIOError as e:
                logger.error(f"Error deleting picture of waiter {waiter.id}: {e}")
                outcome.error = str(e)
            result.outcomes.append(outcome)

        try:
            QRGenerator(ctx.qr_folder).remove(restaurant.qr_code)
        except UpstreamIOError as e:
            logger.error(f"Error deleting QR code of restaurant {restaurant.id}: {e}")

        try:
            for waiter in waiters:
                ctx.session.delete(waiter)
            ctx.session.flush()
            ctx.session.delete(restaurant)
            ctx.session.commit()
        except SQLAlchemyError as e:
            ctx.session.rollback()
            logger.error(f"Error deleting restaurant {restaurant_id}: {e}")
            raise UpstreamIOError(f'Could not delete restaurant: {e}') from e

        logger.info(f"Deleted restaurant {restaurant_id} and {len(waiters)} waiter(s)")
        return result
