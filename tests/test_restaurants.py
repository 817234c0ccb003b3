"""Restaurant and waiter lifecycle: QR codes, photos and cascading deletes."""

import os

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app import db
from app.models import Restaurant, Waiter, WaiterRating
from app.services.ratings import RatingService
from app.services.restaurants import RestaurantService
from app.utils.error_handler import (DuplicateNameError, NotFoundError,
                                     UpstreamIOError, ValidationError)
from app.utils.storage import PhotoStorage


def photo_path(ctx, waiter):
    return os.path.join(ctx.upload_folder, waiter.picture)


def qr_files(ctx):
    if not os.path.isdir(ctx.qr_folder):
        return []
    return [name for name in os.listdir(ctx.qr_folder) if name.startswith("qr_")]


class TestCreateRestaurant:

    def test_generates_qr_from_id(self, ctx):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")

        assert restaurant.id is not None
        assert restaurant.qr_code == f"qr_{restaurant.id}.png"
        assert os.path.isfile(os.path.join(ctx.qr_folder, restaurant.qr_code))

    def test_each_restaurant_gets_its_own_qr(self, ctx):
        first = RestaurantService.create_restaurant(ctx, "Bistro A")
        second = RestaurantService.create_restaurant(ctx, "Bistro B")
        assert first.qr_code != second.qr_code

    def test_duplicate_name(self, ctx):
        RestaurantService.create_restaurant(ctx, "Bistro A")
        with pytest.raises(DuplicateNameError):
            RestaurantService.create_restaurant(ctx, "Bistro A")
        assert Restaurant.query.count() == 1

    def test_name_required(self, ctx):
        with pytest.raises(ValidationError):
            RestaurantService.create_restaurant(ctx, "   ")

    def test_commit_conflict_leaves_no_qr_file(self, ctx, monkeypatch):
        def conflicting_commit(self):
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: restaurants.name"))
        monkeypatch.setattr(Session, "commit", conflicting_commit)

        with pytest.raises(DuplicateNameError):
            RestaurantService.create_restaurant(ctx, "Bistro A")

        monkeypatch.undo()
        assert Restaurant.query.count() == 0
        assert qr_files(ctx) == []

    def test_qr_library_failure_rolls_back(self, ctx, monkeypatch):
        class BrokenImage:
            def save(self, path):
                with open(path, "wb") as f:
                    f.write(b"\x89PNG")
                raise ValueError("encoder error")
        monkeypatch.setattr("app.utils.qr_generator.qrcode.make", lambda content: BrokenImage())

        with pytest.raises(ValueError):
            RestaurantService.create_restaurant(ctx, "Bistro A")

        assert Restaurant.query.count() == 0
        assert qr_files(ctx) == []
        monkeypatch.undo()
        assert RestaurantService.create_restaurant(ctx, "Bistro A").qr_code is not None


class TestCreateWaiter:

    def test_stores_picture_and_starts_unrated(self, ctx, picture):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        waiter = RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())

        assert waiter.restaurant_id == restaurant.id
        assert waiter.ratings == []
        assert waiter.picture.endswith(".gif")
        assert os.path.isfile(photo_path(ctx, waiter))

    def test_unknown_restaurant(self, ctx, picture):
        with pytest.raises(NotFoundError):
            RestaurantService.create_waiter(ctx, 42, "Sam", picture())
        assert not os.path.exists(ctx.upload_folder) or os.listdir(ctx.upload_folder) == []

    def test_picture_required(self, ctx):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        with pytest.raises(ValidationError):
            RestaurantService.create_waiter(ctx, restaurant.id, "Sam", None)

    def test_rejects_disallowed_file_type(self, ctx, picture):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        with pytest.raises(ValidationError, match="not allowed"):
            RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture("script.exe"))


class TestDeleteWaiter:

    def test_releases_picture_then_record(self, ctx, picture):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        waiter = RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())
        path = photo_path(ctx, waiter)

        RestaurantService.delete_waiter(ctx, waiter.id)

        assert not os.path.exists(path)
        assert Waiter.query.count() == 0

    def test_missing_picture_is_not_an_error(self, ctx, picture):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        waiter = RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())
        os.remove(photo_path(ctx, waiter))

        RestaurantService.delete_waiter(ctx, waiter.id)
        assert Waiter.query.count() == 0

    def test_io_error_keeps_record(self, ctx, picture, monkeypatch):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        waiter = RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())

        def broken_delete(self, filename):
            raise UpstreamIOError("disk on fire")
        monkeypatch.setattr(PhotoStorage, "delete", broken_delete)

        with pytest.raises(UpstreamIOError):
            RestaurantService.delete_waiter(ctx, waiter.id)
        assert Waiter.query.count() == 1

    def test_unknown_waiter(self, ctx):
        with pytest.raises(NotFoundError):
            RestaurantService.delete_waiter(ctx, 1)


class TestDeleteRestaurant:

    def test_cascades_to_waiters_and_pictures(self, ctx, ctx_for, make_user, picture):
        user = make_user()
        doomed = RestaurantService.create_restaurant(ctx, "Bistro A")
        kept = RestaurantService.create_restaurant(ctx, "Bistro B")
        waiters = [RestaurantService.create_waiter(ctx, doomed.id, name, picture())
                   for name in ("Sam", "Alex")]
        survivor = RestaurantService.create_waiter(ctx, kept.id, "Kim", picture())
        RatingService.rate_waiter(ctx_for(user), waiters[0].id, 50)
        RatingService.rate_restaurant(ctx_for(user), doomed.id, 50)
        paths = [photo_path(ctx, w) for w in waiters]
        qr_path = os.path.join(ctx.qr_folder, doomed.qr_code)
        doomed_id = doomed.id

        result = RestaurantService.delete_restaurant(ctx, doomed_id)

        assert result.ok
        assert len(result.outcomes) == 2
        assert all(outcome.photo_released for outcome in result.outcomes)
        assert not any(os.path.exists(p) for p in paths)
        assert not os.path.exists(qr_path)
        assert db.session.get(Restaurant, doomed_id) is None
        assert Waiter.query.filter_by(restaurant_id=doomed_id).count() == 0
        assert WaiterRating.query.count() == 0
        assert [w.id for w in Waiter.query.all()] == [survivor.id]
        assert os.path.exists(photo_path(ctx, survivor))

    def test_picture_failure_does_not_stop_the_cascade(self, ctx, picture, monkeypatch):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        first = RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())
        RestaurantService.create_waiter(ctx, restaurant.id, "Alex", picture())
        first_id, first_picture = first.id, first.picture
        real_delete = PhotoStorage.delete

        def flaky_delete(self, filename):
            if filename == first_picture:
                raise UpstreamIOError("permission denied")
            return real_delete(self, filename)
        monkeypatch.setattr(PhotoStorage, "delete", flaky_delete)

        result = RestaurantService.delete_restaurant(ctx, restaurant.id)

        assert not result.ok
        assert [o.waiter_id for o in result.failures] == [first_id]
        assert Waiter.query.count() == 0
        assert Restaurant.query.count() == 0

    def test_unknown_restaurant(self, ctx):
        with pytest.raises(NotFoundError):
            RestaurantService.delete_restaurant(ctx, 5)

    def test_failed_commit_keeps_the_rows(self, ctx, picture, monkeypatch):
        restaurant = RestaurantService.create_restaurant(ctx, "Bistro A")
        RestaurantService.create_waiter(ctx, restaurant.id, "Sam", picture())
        restaurant_id = restaurant.id

        def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
        monkeypatch.setattr(Session, "commit", failing_commit)

        with pytest.raises(UpstreamIOError):
            RestaurantService.delete_restaurant(ctx, restaurant_id)

        monkeypatch.undo()
        db.session.expire_all()
        assert db.session.get(Restaurant, restaurant_id) is not None
        assert Waiter.query.filter_by(restaurant_id=restaurant_id).count() == 1
