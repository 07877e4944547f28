from __future__ import annotations

import pytest

from anvilon.services import auth_service
from anvilon.supabase import AuthError, AuthSession, AuthUser, SignUpResult


@pytest.fixture
def signed_in(fake_sb):
    fake_sb.auth.session = AuthSession(access_token="jwt", refresh_token="r", user=AuthUser(id="u1", email="a@b.cd"))
    return fake_sb


def test_is_valid_email():
    assert auth_service.is_valid_email("reader@example.com")
    assert not auth_service.is_valid_email("reader@example")
    assert not auth_service.is_valid_email("no spaces@example.com")


def test_login_with_email(signed_in):
    session = auth_service.login(" a@b.cd ", " secret ", client=signed_in)
    assert session.access_token == "jwt"
    assert signed_in.auth.calls == [("sign_in", "a@b.cd", "secret")]


def test_login_resolves_username(signed_in):
    signed_in.tables["user_login"] = [{"user_id": "u1", "username": "arwen", "email": "a@b.cd"}]
    auth_service.login("arwen", "pw", client=signed_in)
    assert signed_in.auth.calls[0][1] == "a@b.cd"


def test_login_unknown_username(signed_in):
    with pytest.raises(AuthError) as excinfo:
        auth_service.login("ghost", "pw", client=signed_in)
    assert excinfo.value.code == "user_not_found"
    assert signed_in.auth.calls == []


def test_login_lookup_error_maps_to_user_not_found(signed_in):
    signed_in.fail("user_login")
    with pytest.raises(AuthError) as excinfo:
        auth_service.login("arwen", "pw", client=signed_in)
    assert excinfo.value.code == "user_not_found"


def test_login_requires_fields(fake_sb):
    with pytest.raises(AuthError) as excinfo:
        auth_service.login("a@b.cd", "   ", client=fake_sb)
    assert excinfo.value.code == "required"


def test_register_creates_login_row(fake_sb):
    fake_sb.auth.signed_up = SignUpResult(user=AuthUser(id="u2", email="new@example.com"), access_token="new-jwt")
    user = auth_service.register(" New@Example.com ", " elrond ", "pw", client=fake_sb)
    assert user.id == "u2"
    assert fake_sb.auth.calls == [("sign_up", "new@example.com", "pw")]
    assert fake_sb.tokens == ["new-jwt"]
    assert fake_sb.tables["user_login"] == [{"user_id": "u2", "username": "elrond", "email": "new@example.com"}]


def test_register_validates_email(fake_sb):
    with pytest.raises(AuthError) as excinfo:
        auth_service.register("bad", "elrond", "pw", client=fake_sb)
    assert excinfo.value.code == "invalid_email"


def test_register_profile_failure(fake_sb):
    fake_sb.auth.signed_up = SignUpResult(user=AuthUser(id="u2", email="new@example.com"))
    fake_sb.fail("user_login")
    with pytest.raises(AuthError) as excinfo:
        auth_service.register("new@example.com", "elrond", "pw", client=fake_sb)
    assert excinfo.value.code == "profile_failed"


def test_display_name_fallbacks():
    user = AuthUser(id="u1", email="galadriel@example.com", user_metadata={"username": "lady"})
    assert auth_service.account_display_name(user, {"username": "queen"}, "ru") == "queen"
    assert auth_service.account_display_name(user, None, "ru") == "lady"
    assert auth_service.account_display_name(AuthUser(id="u1", email="galadriel@example.com"), None, "ru") == "galadriel"
    assert auth_service.account_display_name(None, None, "ru") == "Игрок"
    assert auth_service.account_display_name(None, None, "en") == "Player"


def test_load_account(fake_sb):
    assert auth_service.load_account(None, "ru", client=fake_sb) is None

    fake_sb.auth.user = AuthUser(id="u1", email="a@b.cd")
    fake_sb.tables["user_login"] = [{"user_id": "u1", "username": "arwen", "email": "a@b.cd"}]
    account = auth_service.load_account("jwt", "ru", client=fake_sb)
    assert account["display_name"] == "arwen"
    assert fake_sb.tokens == ["jwt"]


def test_load_account_survives_profile_errors(fake_sb):
    fake_sb.auth.user = AuthUser(id="u1", email="arwen@b.cd")
    fake_sb.fail("user_login")
    account = auth_service.load_account("jwt", "ru", client=fake_sb)
    assert account["login_row"] is None
    assert account["display_name"] == "arwen"
