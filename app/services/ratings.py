"""Rating aggregation and the one-rating-per-rater rules."""

import math
import re
from datetime import datetime
from enum import Enum
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.models import Restaurant, Waiter, RestaurantRating, WaiterRating
from app.utils.error_handler import (AuthenticationError, DuplicateRatingError,
                                     NotFoundError, UpstreamIOError, ValidationError)
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

NO_RATINGS = 'No ratings yet'
RATING_UNIT = '/ 100'
MIN_SCORE = 0
MAX_SCORE = 100


class RatingPolicy(Enum):
    """What happens when a rater rates the same target twice."""
    REJECT = 'reject'  # restaurants
    OVERWRITE = 'overwrite'  # waiters


def average_score(ratings):
    """Average of the scores rounded half up, or None for no ratings."""
    scores = [r.rating for r in ratings]
    if not scores:
        return None
    return int(math.floor(sum(scores) / len(scores) + 0.5))


def format_average(ratings):
    """Average with its unit label, e.g. ``"80 / 100"``."""
    average = average_score(ratings)
    if average is None:
        return NO_RATINGS
    return f'{average} {RATING_UNIT}'


def find_rating(ratings, rater_id):
    return next((r for r in ratings if r.rater_id == rater_id), None)


def parse_score(value):
    """Coerce a submitted score to an int in [MIN_SCORE, MAX_SCORE]."""
    if isinstance(value, bool):
        raise ValidationError('Rating must be a whole number.')
    if isinstance(value, str):
        value = value.strip()
        if not re.fullmatch(r'-?\d+', value, re.ASCII):
            raise ValidationError('Rating must be a whole number.')
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError('Rating must be a whole number.')
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise ValidationError(f'Rating must be between {MIN_SCORE} and {MAX_SCORE}.')
    return value


def upsert_rating(ratings, rater_id, score, policy, now=None, factory=None):
    """Apply ``policy`` for a new ``score`` from ``rater_id`` to ``ratings``.

    ``ratings`` is any mutable sequence of records with ``rater_id``,
    ``rating`` and ``date_time`` attributes (an ORM relationship list works).
    ``factory`` builds a new record from those three keyword arguments.
    Returns the record that now holds the rater's score.
    """
    now = now or datetime.utcnow()
    existing = find_rating(ratings, rater_id)

    if existing is not None:
        if policy is RatingPolicy.REJECT:
            raise DuplicateRatingError('You have already rated this restaurant.')
        existing.rating = score
        existing.date_time = now
        return existing

    record = factory(rater_id=rater_id, rating=score, date_time=now)
    ratings.append(record)
    return record


class RatingService:
    """Persisted rating operations for restaurants and waiters."""

    @staticmethod
    def _rater_id(ctx):
        rater_id = ctx.identity_id
        if rater_id is None:
            raise AuthenticationError('You must be logged in to rate.')
        return rater_id

    @staticmethod
    def rate_restaurant(ctx, restaurant_id, score):
        """Add the caller's rating of a restaurant; a second rating is rejected."""
        rater_id = RatingService._rater_id(ctx)
        score = parse_score(score)

        restaurant = ctx.session.get(Restaurant, restaurant_id)
        if restaurant is None:
            raise NotFoundError('Restaurant not found')

        record = upsert_rating(restaurant.ratings, rater_id, score,
                               RatingPolicy.REJECT, factory=RestaurantRating)
        try:
            ctx.session.commit()
        except IntegrityError:
            # A concurrent request from the same rater got there first
            ctx.session.rollback()
            raise DuplicateRatingError('You have already rated this restaurant.')

        logger.info(f"User {rater_id} rated restaurant {restaurant_id}: {score}")
        return record

    @staticmethod
    def rate_waiter(ctx, waiter_id, score):
        """Add or replace the caller's rating of a waiter."""
        rater_id = RatingService._rater_id(ctx)
        score = parse_score(score)

        waiter = ctx.session.get(Waiter, waiter_id)
        if waiter is None:
            raise NotFoundError('Waiter not found')

        record = upsert_rating(waiter.ratings, rater_id, score,
                               RatingPolicy.OVERWRITE, factory=WaiterRating)
        try:
            ctx.session.commit()
        except IntegrityError:
            # Lost an insert race; the other request's record is now the one to update
            ctx.session.rollback()
            waiter = ctx.session.get(Waiter, waiter_id)
            if waiter is None:
                raise NotFoundError('Waiter not found')
            record = upsert_rating(waiter.ratings, rater_id, score,
                                   RatingPolicy.OVERWRITE, factory=WaiterRating)
            try:
                ctx.session.commit()
            except SQLAlchemyError as e:
                ctx.session.rollback()
                raise UpstreamIOError(f'Could not save rating: {e}') from e

        logger.info(f"User {rater_id} rated waiter {waiter_id}: {score}")
        return record
