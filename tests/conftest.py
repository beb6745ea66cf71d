from typing import AsyncGenerator

import pytest
from _pytest.fixtures import SubRequest

from aiopotion.transport.base import Transport


@pytest.fixture(params=["httpx", "aiohttp"])
async def transport(request: SubRequest) -> AsyncGenerator[Transport, None]:
    if request.param == "httpx":
        try:
            import httpx

            from aiopotion.transport.httpx import HTTPX
        except ImportError:
            raise pytest.skip("httpx not installed")
        async with httpx.AsyncClient() as client:
            yield HTTPX(client)
    elif request.param == "aiohttp":
        try:
            import aiohttp

            from aiopotion.transport.aiohttp import AIOHTTP
        except ImportError:
            raise pytest.skip("aiohttp not installed")
        async with aiohttp.ClientSession() as session:
            yield AIOHTTP(session)
