from types import SimpleNamespace

import pytest

from app.utils.security import AccessDecision, check_access, hash_password, verify_password


def identity(role="normal", authenticated=True):
    return SimpleNamespace(id=1, role=role, is_authenticated=authenticated)


class TestAccessGate:

    def test_no_identity_goes_to_login(self):
        assert check_access(None, "admin") is AccessDecision.REDIRECT_TO_LOGIN

    def test_anonymous_identity_goes_to_login(self):
        assert check_access(identity(authenticated=False), "admin") is AccessDecision.REDIRECT_TO_LOGIN

    def test_wrong_role_goes_home(self):
        assert check_access(identity("normal"), "admin") is AccessDecision.REDIRECT_TO_HOME

    def test_admin_is_allowed(self):
        assert check_access(identity("admin"), "admin") is AccessDecision.ALLOWED

    @pytest.mark.parametrize("role", ["normal", "admin"])
    def test_any_logged_in_user_without_required_role(self, role):
        assert check_access(identity(role)) is AccessDecision.ALLOWED

    def test_role_collection(self):
        assert check_access(identity("normal"), ("normal", "admin")) is AccessDecision.ALLOWED


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("", hashed)
