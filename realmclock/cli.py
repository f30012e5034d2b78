"""
Main entry point for the realm clock.

Loads a time-event catalogue, initializes the clock and transports, and
runs the paced loop. Each tick: advance the clock by the real time
elapsed, push the new calendar through the transport adapters, and
forward any notices the fired time events queued.
"""

import asyncio
import logging
import signal

import click

from realmclock import config
from realmclock.core.calendar import ClockState
from realmclock.core.clock import RealmClock
from realmclock.events.context import WorldContext
from realmclock.events.loader import DEFAULT_CATALOGUE, load_catalogue
from realmclock.transport.console_adapter import ConsoleAdapter
from realmclock.transport.registry import TransportRegistry
from realmclock.transport.websocket_adapter import WebSocketAdapter
from realmclock.health_server import HealthServer

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


async def clock_loop(
    clock: RealmClock,
    registry: TransportRegistry,
    tick_interval_s: float,
    stop_event: asyncio.Event,
    health: HealthServer | None = None,
    max_ticks: int | None = None,
) -> int:
    """Core update loop. Runs until stopped and returns the number of ticks run."""
    pending: list[ClockState] = []
    subscription = clock.subscribe(pending.append)
    tick_count = 0

    try:
        while not stop_event.is_set():
            clock.tick()

            # Only the latest state matters to clients
            if pending:
                state = pending[-1]
                pending.clear()
                await registry.push_state(state.to_dict())

            context = clock.context
            if isinstance(context, WorldContext):
                for notice in context.drain_notices():
                    await registry.push_event(notice)

            tick_count += 1
            if health is not None:
                health.ticks = tick_count
                health.events_fired = clock.scheduler.get_fired_count()

            # Periodic status (every 600 ticks)
            if tick_count % 600 == 0:
                logger.info(
                    f"Tick {tick_count} | {clock.get_formatted_time()} | "
                    f"Rate: {clock.rate:g} min/s | "
                    f"Events fired: {clock.scheduler.get_fired_count()}"
                )

            if max_ticks is not None and tick_count >= max_ticks:
                break

            await asyncio.sleep(tick_interval_s)
    finally:
        clock.unsubscribe(subscription)

    return tick_count


def build_clock(start_minutes: float | None, rate: float, events_path: str | None) -> RealmClock:
    """Create the clock with a fresh world context and the event catalogue registered."""
    context = WorldContext()
    if start_minutes is None:
        clock = RealmClock.at_prophecy(rate=rate, context=context)
    else:
        clock = RealmClock(start_minutes, rate=rate, context=context)

    for event in load_catalogue(events_path or DEFAULT_CATALOGUE):
        clock.register(event)
    return clock


async def run(
    rate: float, tick_rate: float, events: str | None, start_minutes: float | None,
    transport: str, host: str, port: int, health_port: int,
) -> None:
    """Run the clock."""
    print(f"\nRealm Clock v{VERSION}")
    print("=" * 40)

    transport_names = [t.strip() for t in transport.split(",") if t.strip()]

    clock = build_clock(start_minutes, rate, events)
    print(f"Loaded {clock.event_count} time events from {events or DEFAULT_CATALOGUE}")

    registry = TransportRegistry()
    if "console" in transport_names:
        registry.register(ConsoleAdapter(min_interval=config.CONSOLE_MIN_INTERVAL))
    if "ws" in transport_names:
        registry.register(WebSocketAdapter(clock=clock, host=host, port=port))
        print(f"WebSocket server on ws://{host}:{port}")

    await registry.connect_all()

    health = HealthServer(clock, host=host, port=health_port)
    health.catalogue = str(events or DEFAULT_CATALOGUE)
    health.transports = registry.transport_names
    await health.start()

    clock.init()
    print(f"\nClock starting at {clock.get_formatted_time()} (rate: {rate:g} min/s)")
    print("Press Ctrl+C to stop\n")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await clock_loop(
            clock=clock,
            registry=registry,
            tick_interval_s=1.0 / tick_rate,
            stop_event=stop,
            health=health,
        )
    finally:
        print("\nShutting down...")
        state = clock.get_state()
        print(f"Clock ran to {clock.get_formatted_time()} ({state.elapsed_minutes:.1f} minutes)")
        print(f"Events fired: {clock.scheduler.get_fired_count()}")
        clock.destroy()
        await registry.disconnect_all()
        await health.stop()
        print("Clock stopped")


@click.command()
@click.option("--rate", default=config.CLOCK_RATE, type=float, help="Game minutes per real second (0 pauses)")
@click.option("--tick-rate", default=config.TICK_RATE, type=float, help="Ticks per real second")
@click.option("--events", "-e", default=config.EVENTS_FILE, help="Path to time-event catalogue YAML")
@click.option(
    "--start-minutes", default=config.START_MINUTES, type=float,
    help="Start at this many elapsed minutes instead of the prophecy instant",
)
@click.option("--transport", default="ws,console", help="Comma-separated transports (ws,console)")
@click.option("--host", default=config.WS_HOST, help="Bind address for WebSocket and health servers")
@click.option("--port", default=config.WS_PORT, type=int, help="WebSocket server port")
@click.option("--health-port", default=config.HEALTH_PORT, type=int, help="Health endpoint port")
@click.option("--debug", is_flag=True, help="Verbose logging")
def main(
    rate: float, tick_rate: float, events: str | None, start_minutes: float | None,
    transport: str, host: str, port: int, health_port: int, debug: bool,
) -> None:
    """Realm Clock: fantasy calendar clock and time-event scheduler."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if rate < 0:
        raise click.BadParameter("rate must be non-negative", param_hint="--rate")
    if tick_rate <= 0:
        raise click.BadParameter("tick rate must be positive", param_hint="--tick-rate")
    asyncio.run(run(rate, tick_rate, events, start_minutes, transport, host, port, health_port))


if __name__ == "__main__":
    main()
