"""Shared fixtures: an in-process stand-in for the land-registry portal."""
import asyncio
import itertools
from typing import Any, Dict, List, Optional

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from cf_scraper import CadastralClient, PortalConfig

SESSION_COOKIE = "PHPSESSID"


class StubPortal:
    """Serves the three portal endpoints and records every request it sees."""

    def __init__(self):
        self.token = "abc123"
        self.rotate_tokens = False
        self.homepage_status = 200
        self.homepage_html: Optional[str] = None
        self.homepage_delay = 0.0
        self.cities_payload: Any = {"cities": [{"name": "Alba Iulia", "value": "42"}]}
        self.uats_body: Optional[str] = None
        self.search_status = 200
        self.search_delay = 0.0
        self.search_body: Optional[str] = None
        self.search_payload: Any = {"status": "ok", "results": [{"cf": "100002", "owner": "***"}]}
        self.requests: List[Dict[str, Any]] = []
        self.base_url = ""
        self._visitors = itertools.count(1)
        self._tokens = itertools.count(1)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.homepage)
        app.router.add_get("/ajax/uats/{county}/{token}", self.uats)
        app.router.add_post("/ajax/searchCF/{token}", self.search)
        return app

    async def _record(self, request: web.Request) -> Dict[str, Any]:
        entry = {
            "method": request.method,
            "path": request.path,
            "headers": request.headers.copy(),
            "cookie": request.cookies.get(SESSION_COOKIE),
            "body": await request.text(),
        }
        self.requests.append(entry)
        return entry

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [r["path"] for r in self.requests if method is None or r["method"] == method]

    def homepage_hits(self) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["path"] == "/"]

    async def homepage(self, request: web.Request) -> web.Response:
        entry = await self._record(request)
        if self.homepage_delay:
            await asyncio.sleep(self.homepage_delay)
        if self.homepage_status != 200:
            return web.Response(status=self.homepage_status, text="Internal Server Error")

        if self.rotate_tokens:
            self.token = f"tok{next(self._tokens)}"
        html = self.homepage_html
        if html is None:
            html = (
                "<html><body><form id='orders'>"
                f"<input type='hidden' id='orders-stoken' name='stoken' value='{self.token}'>"
                "</form></body></html>"
            )
        response = web.Response(text=html, content_type="text/html")
        if entry["cookie"] is None:
            response.set_cookie(SESSION_COOKIE, f"visitor-{next(self._visitors)}")
        return response

    async def uats(self, request: web.Request) -> web.Response:
        await self._record(request)
        if self.uats_body is not None:
            return web.Response(text=self.uats_body, content_type="text/html")
        return web.json_response(self.cities_payload)

    async def search(self, request: web.Request) -> web.Response:
        await self._record(request)
        if self.search_delay:
            await asyncio.sleep(self.search_delay)
        if self.search_body is not None:
            return web.Response(status=self.search_status, text=self.search_body)
        return web.json_response(self.search_payload, status=self.search_status)


@pytest_asyncio.fixture
async def portal():
    stub = StubPortal()
    server = TestServer(stub.make_app())
    await server.start_server()
    stub.base_url = f"http://{server.host}:{server.port}"
    yield stub
    await server.close()


@pytest_asyncio.fixture
async def client(portal):
    config = PortalConfig(base_url=portal.base_url, timeout=5, requests_per_second=100)
    client = CadastralClient(config)
    yield client
    await client.close()
