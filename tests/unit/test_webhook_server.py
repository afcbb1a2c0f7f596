"""Unit tests for the admission webhook HTTPS server lifecycle."""

import socket

import pytest
from aiohttp import web

from monitoring_operator.webhooks import WebhookServer


def free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestWebhookServer:
    @pytest.mark.asyncio
    async def test_context_manager_starts_and_stops(self):
        server = WebhookServer(web.Application(), host="127.0.0.1", port=free_port())

        async with server:
            assert server.serving is True

        assert server.serving is False
        assert server.runner is None

    @pytest.mark.asyncio
    async def test_port_in_use_fails_start(self):
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            sock.listen()
            port = sock.getsockname()[1]

            server = WebhookServer(web.Application(), host="127.0.0.1", port=port)
            with pytest.raises(OSError):
                await server.start()

        assert server.serving is False
        assert server.runner is None
