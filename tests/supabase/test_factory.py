from __future__ import annotations

import pytest

from anvilon import config as app_config
from anvilon.supabase import MockSupabaseClient, SupabaseClient, get_client, get_server_client


def test_unconfigured_env_uses_mock():
    cl = get_client()
    assert isinstance(cl, MockSupabaseClient)
    assert cl is get_client()
    assert cl.table("races").select().execute().data == []
    assert cl.table("races").select().maybe_single().execute().data is None
    assert cl.storage_public_url("art", "x.png") == ""


def test_configured_env_uses_rest_client(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://proj.example.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "k")
    cl = get_client()
    assert isinstance(cl, SupabaseClient)
    assert cl.for_user(None) is cl
    assert cl.for_user("jwt").access_token == "jwt"


def test_mock_flag_wins(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://proj.example.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "k")
    monkeypatch.setenv("USE_MOCK_SUPABASE", "true")
    assert get_client().is_mock


def test_server_client_refuses_silent_mock():
    with pytest.raises(app_config.ConfigError):
        get_server_client()


def test_mock_delete_still_needs_filter():
    with pytest.raises(ValueError):
        MockSupabaseClient().table("spells").delete().execute()
