"""Link receiver — FastAPI app the host forwards incoming links to.

The host registers itself as the handler for its link scheme and forwards
each link here as ``GET /<path>?<query>``. The request is always answered
with 200 once handled; the outcome is reported to the user through the host
shell, not through the HTTP status.

Startup sequence:
1. Load settings
2. Open the host bridge
3. Run the startup auto-connection once
4. Begin accepting links
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import APIRouter, FastAPI, Request

from ibmi_sandbox.bootstrap import BootstrapResolver
from ibmi_sandbox.bridge import HttpHostBridge
from ibmi_sandbox.config import SandboxSettings, load_settings
from ibmi_sandbox.git import GitSourceControl
from ibmi_sandbox.host import HostBridgeError, HostCommands
from ibmi_sandbox.link_handler import LinkHandler

logger = logging.getLogger(__name__)

router = APIRouter()

# Set during app startup (see create_app)
_link_handler: LinkHandler | None = None


def configure(link_handler: LinkHandler | None) -> None:
    """Wire the link endpoint to a LinkHandler."""
    global _link_handler
    _link_handler = link_handler


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "configured": _link_handler is not None}


@router.get("/{path:path}")
async def handle_link(path: str, request: Request) -> dict:
    """Forward a link to the LinkHandler."""
    if _link_handler is None:
        logger.error("Link handler not configured, dropping link /%s", path)
        return {"attempted": False}

    try:
        attempted = await _link_handler.handle(f"/{path}", request.url.query)
    except HostBridgeError as e:
        logger.error("Link /%s abandoned, host bridge failed: %s", path, e)
        return {"attempted": False}
    return {"attempted": attempted}


def create_app(
    repo_root: Path | None = None,
    settings: SandboxSettings | None = None,
    *,
    run_startup: bool = True,
) -> FastAPI:
    """Build the receiver app around an HTTP host bridge."""
    settings = settings or load_settings()
    workspace = repo_root or Path(os.environ.get("IBMI_SANDBOX_WORKSPACE", "") or Path.cwd())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bridge = HttpHostBridge(settings.bridge)
        await bridge.start()
        commands = HostCommands(bridge, settings.commands)
        configure(LinkHandler(bridge, commands, settings))

        if run_startup:
            startup = BootstrapResolver(
                bridge,
                commands,
                bridge,
                source_control=GitSourceControl([workspace]),
                settings=settings,
            )
            try:
                await startup.run()
            except HostBridgeError as e:
                logger.error("Startup auto-connect aborted: %s", e)

        logger.info("Link receiver ready (bridge=%s)", settings.bridge.url)
        try:
            yield
        finally:
            await bridge.close()

    app = FastAPI(title="ibmi-sandbox", lifespan=lifespan)
    app.include_router(router)
    return app
