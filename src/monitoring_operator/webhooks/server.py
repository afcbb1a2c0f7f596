"""
HTTPS server hosting the admission webhooks.
"""

import logging
import ssl

from aiohttp.web import Application, AppRunner, TCPSite

logger = logging.getLogger(__name__)


class WebhookServer:
    """TLS server for an admission application."""

    def __init__(
        self,
        app: Application,
        host: str = "0.0.0.0",
        port: int = 10250,
        ssl_context: ssl.SSLContext | None = None,
    ):
        self.app = app
        self.host = host
        self.port = port
        self.ssl_context = ssl_context
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None

    @property
    def serving(self) -> bool:
        """Whether the server is accepting connections."""
        return self.site is not None

    async def start(self) -> None:
        """Start accepting admission requests."""
        self.runner = AppRunner(self.app)
        await self.runner.setup()
        try:
            self.site = TCPSite(
                self.runner, self.host, self.port, ssl_context=self.ssl_context
            )
            await self.site.start()
        except OSError:
            self.site = None
            await self.runner.cleanup()
            self.runner = None
            raise

        scheme = "https" if self.ssl_context else "http"
        logger.info(f"Admission webhook server listening on {scheme}://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the server and release its sockets."""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("Admission webhook server stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
