import pytest

from qrwallet.core.config import DatabaseSettings, SecuritySettings, Settings, TokenSettings
from qrwallet.core.container import ApplicationContainer
from qrwallet.infrastructure.database.session import init_db

TOKEN_SECRET = "test-token-secret-0001"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"),
        security=SecuritySettings(secret_key="test-jwt-secret"),
        tokens=TokenSettings(keys={"k1": TOKEN_SECRET}, active_key_id="k1"),
    )


@pytest.fixture
async def container(settings):
    container = ApplicationContainer(settings=settings)
    await init_db(container.engine)
    yield container
    await container.dispose()


@pytest.fixture
def coordinator(container):
    return container.transfer_coordinator()
