"""
Health check HTTP endpoint for the clock runner.

Runs a lightweight HTTP server that returns the clock status as JSON.
Used by container health checks and monitoring tools.
"""

import logging
import time

from aiohttp import web

from realmclock.core.clock import ClockView

logger = logging.getLogger(__name__)


class HealthServer:
    """Simple HTTP health check server."""

    def __init__(self, clock: ClockView, host: str = "0.0.0.0", port: int = 8766):
        self._clock = clock
        self._host = host
        self._port = port
        self._app = web.Application()
        self._runner = None
        self._start_time = time.time()

        # Mutable state set by the runner
        self.catalogue = ""
        self.ticks = 0
        self.events_fired = 0
        self.transports: list[str] = []

        self._app.router.add_get("/health", self._handle_health)

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self):
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()
        logger.info(f"Health server on http://{self._host}:{self._port}/health")

    async def stop(self):
        if self._runner:
            await self._runner.cleanup()

    async def _handle_health(self, request):
        uptime = int(time.time() - self._start_time)
        state = self._clock.get_state()
        data = {
            "status": "destroyed" if self._clock.is_destroyed else "running",
            "time": self._clock.get_formatted_time(),
            "elapsed_minutes": state.elapsed_minutes,
            "epoch": state.epoch,
            "rate": self._clock.rate,
            "paused": self._clock.is_paused,
            "catalogue": self.catalogue,
            "events_registered": self._clock.event_count,
            "events_fired": self.events_fired,
            "ticks": self.ticks,
            "uptime_seconds": uptime,
            "transports": self.transports,
        }
        return web.json_response(data)
