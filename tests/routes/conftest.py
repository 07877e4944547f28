from __future__ import annotations

import pytest

from anvilon import supabase as supabase_module
from anvilon.startup import create_app
from anvilon.utils.identity import SESSION_EMAIL_KEY, SESSION_TOKEN_KEY, SESSION_USER_ID_KEY


@pytest.fixture
def app(fake_sb, monkeypatch):
    monkeypatch.setattr(supabase_module, "_client", fake_sb)
    return create_app({"TESTING": True, "WTF_CSRF_ENABLED": False, "SECRET_KEY": "route-tests"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sign_in(client):
    def _sign_in(email="reader@example.com", user_id="u1", token="jwt"):
        with client.session_transaction() as sess:
            sess[SESSION_USER_ID_KEY] = user_id
            sess[SESSION_EMAIL_KEY] = email
            sess[SESSION_TOKEN_KEY] = token

    return _sign_in


@pytest.fixture
def sign_in_admin(sign_in, monkeypatch):
    def _sign_in_admin(email="admin@example.com"):
        monkeypatch.setenv("ANVILON_ADMIN_EMAILS", f"other@example.com, {email.upper()}")
        sign_in(email=email)

    return _sign_in_admin
