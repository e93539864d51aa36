import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from services.network import is_online


@pytest.mark.asyncio
async def test_online():
    writer = MagicMock()
    writer.wait_closed = AsyncMock()
    with patch(
        "services.network.asyncio.open_connection",
        AsyncMock(return_value=(MagicMock(), writer)),
    ) as open_connection:
        assert await is_online("https://manage.ozo-cloud.jp/ozo/") is True

    open_connection.assert_awaited_once_with("manage.ozo-cloud.jp", 443)
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_offline_on_os_error():
    with patch(
        "services.network.asyncio.open_connection",
        AsyncMock(side_effect=OSError("Name or service not known")),
    ):
        assert await is_online("https://manage.ozo-cloud.jp/ozo/") is False


@pytest.mark.asyncio
async def test_offline_on_timeout():
    async def hang(host, port):
        await asyncio.sleep(10)

    with patch("services.network.asyncio.open_connection", hang):
        assert await is_online("http://example.invalid:8080/", timeout=0.01) is False


@pytest.mark.asyncio
async def test_url_without_host():
    assert await is_online("not a url") is False
