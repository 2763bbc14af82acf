"""Tests for the main application."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from rangequiz.app import QuizBot


@pytest.fixture
def mock_app() -> AsyncMock:
    """Create a mock telegram application."""
    mock_app = AsyncMock()
    mock_app.initialize = AsyncMock()
    mock_app.start = AsyncMock()
    mock_app.updater = AsyncMock()
    mock_app.updater.start_polling = AsyncMock()
    mock_app.updater.running = True
    mock_app.running = True
    mock_app.stop = AsyncMock()
    mock_app.shutdown = AsyncMock()
    mock_app.add_handler = MagicMock()
    return mock_app


@pytest.fixture
def bot(mock_app: AsyncMock):
    """Create a bot instance with mocked dependencies."""
    mock_builder = MagicMock()
    mock_builder.token.return_value.build.return_value = mock_app

    with patch("rangequiz.app.Application.builder", return_value=mock_builder), \
            patch("rangequiz.app.init_db"):
        yield QuizBot()


@pytest.mark.asyncio
async def test_start(bot: QuizBot, mock_app: AsyncMock) -> None:
    """Test starting the bot."""
    await bot.start()

    assert bot.running
    assert bot.application is mock_app
    assert mock_app.add_handler.call_count == 2
    mock_app.updater.start_polling.assert_awaited_once()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop(bot: QuizBot, mock_app: AsyncMock) -> None:
    """Test stopping the bot."""
    await bot.start()
    await bot.stop()

    assert not bot.running
    assert bot.application is None
    mock_app.updater.stop.assert_awaited_once()
    mock_app.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_when_already_running(bot: QuizBot, mock_app: AsyncMock) -> None:
    """Test starting the bot when it's already running."""
    await bot.start()
    await bot.start()

    mock_app.initialize.assert_awaited_once()
    await bot.stop()


@pytest.mark.asyncio
async def test_stop_when_not_running(bot: QuizBot) -> None:
    """Test stopping the bot when it's not running."""
    await bot.stop()

    assert not bot.running


@pytest.mark.asyncio
async def test_start_failure_cleans_up(bot: QuizBot, mock_app: AsyncMock) -> None:
    """Test that a failed start shuts the application down and re-raises."""
    mock_app.updater.start_polling.side_effect = Exception("Test error")

    with pytest.raises(Exception) as exc_info:
        await bot.start()

    assert str(exc_info.value) == "Test error"
    assert not bot.running
    assert bot.application is None
    mock_app.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_error_while_stopping(bot: QuizBot, mock_app: AsyncMock) -> None:
    """Test that stop errors propagate but the state is reset."""
    await bot.start()
    mock_app.shutdown.side_effect = Exception("Test error")

    with pytest.raises(Exception):
        await bot.stop()

    assert not bot.running
    assert bot.application is None
