from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tests import helpers


@pytest.fixture
def bot():
    bot = helpers.MockBot()
    bot.user = helpers.MockUser(id=1016777453457356800, name="Banhammer", bot=True)
    return bot


@pytest.fixture
def ctx():
    return helpers.MockContext()


@pytest.fixture
def text_channel():
    return helpers.MockTextChannel()


@pytest.fixture
def user():
    return helpers.MockUser()


@pytest.fixture
def member():
    return helpers.MockMember()


@pytest.fixture
def guild():
    # Create and return a mocked instance of the Guild class
    guild = helpers.MockGuild(id=1012768827624452100, name="Main Server")
    guild.ban = AsyncMock()
    guild.unban = AsyncMock()
    return guild


@pytest.fixture
def id_():
    return 297552404041814548  # Randomly generated id.


@pytest.fixture
def issued_at():
    return datetime(2024, 3, 1, 12, 0, 0)


class ScalarsResult:
    def __init__(self, values):
        self.values = list(values)

    def first(self):
        return self.values[0] if self.values else None

    def all(self):
        return self.values


@pytest.fixture
def session(mocker):
    """A session maker whose sessions are a single shared `AsyncSession` mock."""
    class AsyncContextManager:
        async def __aenter__(self):
            return mock_session

        async def __aexit__(self, exc_type, exc, tb):
            pass

    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.add = MagicMock()
    mock_session.scalars.return_value = ScalarsResult([])

    async_sessionmaker_mock = mocker.MagicMock(spec=async_sessionmaker)
    async_sessionmaker_mock.return_value = AsyncContextManager()
    async_sessionmaker_mock.session = mock_session
    return async_sessionmaker_mock
