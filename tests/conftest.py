"""Root pytest configuration and shared fixtures.

Test Structure:
    tests/
    ├── unit/              # Fast, isolated tests (services, handler)
    │   └── services/
    └── integration/       # SQLite-backed store and FastAPI router tests

Settings are built explicitly in fixtures so tests never depend on the
developer's environment or .env files.
"""

import pytest
from pydantic import SecretStr

from dbauth import AuthFields, DbAuthOptions, SessionCookieCodec, make_signup_handler
from dbauth.persistence import InMemoryCredentialStore
from dbauth.services import PasswordHasher
from dbauth_config import clear_settings_cache
from dbauth_config.settings import Settings

# Fixed secrets so results do not depend on .env
TEST_SESSION_SECRET = "nREjs1HPS7cFia6tQHK70EWGtfhOgbqJQKsHQz3S"
TEST_WEBHOOK_SECRET = "MY_VOICE_IS_MY_PASSPORT_VERIFY_ME"
TEST_PASSWORD = "password"
TEST_SALT = "2ef27f4073c603ba8b7807c6de6d6a89"


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Make sure no cached settings leak between test runs."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Test settings with fixed secrets and site host."""
    return Settings(
        session_secret=SecretStr(TEST_SESSION_SECRET),
        webhook_secret=SecretStr(TEST_WEBHOOK_SECRET),
        self_host="http://site.test",
        login_expires_seconds=60 * 60,
        auth_route_prefix="/.redwood/functions/auth",
    )


@pytest.fixture
def codec(settings: Settings) -> SessionCookieCodec:
    """Cookie codec using the same secret as the handler under test."""
    return SessionCookieCodec(
        secret=settings.session_secret.get_secret_value(),
        site_host=settings.site_host,
    )


@pytest.fixture
def encrypt_to_cookie(codec: SessionCookieCodec):
    """Build a ``Cookie`` header holding an encrypted session."""

    def _encrypt(payload, csrf_token: str = "token") -> str:
        return f"session={codec.encrypt_value(payload, csrf_token)}"

    return _encrypt


@pytest.fixture
def store() -> InMemoryCredentialStore:
    """Empty in-memory user store with unique emails."""
    return InMemoryCredentialStore(unique_fields=("email",))


@pytest.fixture
def options(store: InMemoryCredentialStore) -> DbAuthOptions:
    """Handler options backed by the in-memory store."""
    fields = AuthFields(
        id="id",
        username="email",
        hashed_password="hashedPassword",
        salt="salt",
    )
    return DbAuthOptions(
        db={"user": store},
        signup_handler=make_signup_handler(store, fields),
        auth_model_accessor="user",
        auth_fields=fields,
    )


@pytest.fixture
async def db_user(store: InMemoryCredentialStore) -> dict:
    """A stored user whose password is ``password``."""
    hashed, salt = PasswordHasher().hash(TEST_PASSWORD, TEST_SALT)
    return await store.create(
        {
            "email": "rob@redwoodjs.com",
            "hashedPassword": hashed,
            "salt": salt,
            "name": "Rob",
        },
    )
