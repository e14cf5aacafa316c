"""LOOP DEFENSE — tower-defense simulation service.

Main FastAPI application.  The simulation ticks inside an asyncio task on
the same event loop that serves requests, so intent handlers and frames
never interleave.
"""

import asyncio
import queue
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from loopdefense import __version__
from loopdefense.comms.event_bus import EventBus
from loopdefense.simulation.engine import SimulationEngine
from loopdefense_api.config import Settings, settings
from loopdefense_api.routers import game_router, ws_router
from loopdefense_api.routers.ws import forward_events, manager


def configure_logging(cfg: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if cfg.debug else cfg.log_level.upper())


def create_engine(cfg: Settings) -> SimulationEngine:
    """Build a SimulationEngine from settings."""
    game_config = cfg.game_config()
    engine = SimulationEngine(EventBus(), config=game_config, seed=cfg.rng_seed)
    logger.info(
        f"Simulation engine created (stages={game_config.stage_max}, "
        f"prep={game_config.prep_time}s, fight={game_config.fight_time}s)"
    )
    return engine


async def run_tick_loop(engine: SimulationEngine, cfg: Settings,
                        events: queue.Queue | None = None) -> None:
    """Tick the engine at ``tick_hz`` and broadcast snapshots at ``broadcast_hz``.

    Messages on *events* (an EventBus subscription) are forwarded to
    WebSocket clients after every frame.  A frame that raises is logged
    and skipped; the loop keeps running.
    """
    frame = 1.0 / cfg.tick_hz
    broadcast_every = max(1, round(cfg.tick_hz / cfg.broadcast_hz))
    last = time.perf_counter()
    frames = 0
    while True:
        await asyncio.sleep(frame)
        now = time.perf_counter()
        try:
            engine.tick(now - last)
        except Exception:
            logger.exception("Simulation frame failed")
        last = now
        if events is not None:
            await forward_events(events)
        frames += 1
        if frames % broadcast_every == 0:
            await manager.broadcast({"type": "snapshot", **engine.snapshot()})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    cfg: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info(f"  {cfg.app_name} v{__version__} - INITIALIZING")
    logger.info("=" * 60)

    engine = create_engine(cfg)
    app.state.engine = engine
    events = engine.event_bus.subscribe()
    tick_task = asyncio.create_task(run_tick_loop(engine, cfg, events), name="sim-tick")
    logger.info(f"Simulation tick loop started ({cfg.tick_hz:g} Hz)")

    yield

    logger.info("Stopping simulation tick loop...")
    tick_task.cancel()
    try:
        await tick_task
    except asyncio.CancelledError:
        pass
    engine.event_bus.unsubscribe(events)
    app.state.engine = None
    logger.info("Shutdown complete")


def create_app(cfg: Settings | None = None) -> FastAPI:
    cfg = cfg or settings
    configure_logging(cfg)
    app = FastAPI(
        title=cfg.app_name,
        version=__version__,
        debug=cfg.debug,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.engine = None
    app.include_router(game_router)
    app.include_router(ws_router)

    @app.get("/health")
    async def health():
        engine = app.state.engine
        return {
            "status": "ok",
            "engine": engine is not None,
            "ticks": engine.tick_count if engine is not None else 0,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "loopdefense_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
