import asyncio
import logging

import uvicorn

from snackit.api import create_app
from snackit.runtime.config import Settings
from snackit.version import __version__

log = logging.getLogger("snackit.runtime")


async def run_api(settings: Settings, stop_event: asyncio.Event):
    host, port = settings.api_host, settings.api_port
    log.info(f"API server starting on {host}:{port} (version {__version__}, repo {settings.owner}/{settings.repo}@{settings.branch})")
    if not settings.secret:
        log.warning("SECRET is not set; every webhook call will be rejected")
    if not settings.github_token:
        log.warning("GITHUB_TOKEN is not set; publishing will fail upstream")
    config = uvicorn.Config(create_app(settings), host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    task = asyncio.create_task(server.serve())
    stop_task = asyncio.create_task(stop_event.wait())
    # uvicorn may also stop on its own signal handling
    await asyncio.wait([task, stop_task], return_when=asyncio.FIRST_COMPLETED)
    stop_task.cancel()
    if server.should_exit is False:
        server.should_exit = True
    await task
    log.info("API server stopped")
