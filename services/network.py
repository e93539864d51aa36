import asyncio
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


async def is_online(url: str, timeout: float = 5.0) -> bool:
    """ポータルのホストへTCP接続できるかを確認する"""
    parsed = urlparse(url)
    host = parsed.hostname
    if not host:
        return False
    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (asyncio.TimeoutError, OSError) as e:
        logger.warning("ネットワーク接続チェック失敗 (%s): %s", host, e)
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True
