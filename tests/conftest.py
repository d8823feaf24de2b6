import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "CONTACT_ENDPOINT_URL",
        "MEDIA_SIGNED_URL_TTL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
