"""ibmi-sandbox CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from urllib.parse import urlsplit

from ibmi_sandbox.bootstrap import BootstrapResolver
from ibmi_sandbox.bridge import HttpHostBridge
from ibmi_sandbox.config import SandboxSettings, load_settings
from ibmi_sandbox.git import GitSourceControl
from ibmi_sandbox.host import HostBridgeError, HostCommands
from ibmi_sandbox.link_handler import LinkHandler

logger = logging.getLogger(__name__)


async def _run_startup(settings: SandboxSettings, repo_root: Path) -> None:
    async with HttpHostBridge(settings.bridge) as bridge:
        commands = HostCommands(bridge, settings.commands)
        startup = BootstrapResolver(
            bridge,
            commands,
            bridge,
            source_control=GitSourceControl([repo_root]),
            settings=settings,
        )
        await startup.run()


async def _run_link(settings: SandboxSettings, uri: str) -> None:
    parts = urlsplit(uri)
    async with HttpHostBridge(settings.bridge) as bridge:
        commands = HostCommands(bridge, settings.commands)
        await LinkHandler(bridge, commands, settings).handle(parts.path, parts.query)


def main():
    parser = argparse.ArgumentParser(
        prog="ibmi-sandbox",
        description="Auto-connect to the IBM i sandbox from links, environment and branch names",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: $IBMI_SANDBOX_CONFIG or .ibmi-sandbox/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ibmi-sandbox startup
    startup_parser = subparsers.add_parser(
        "startup", help="Connect using SANDBOX_* variables and the current branch"
    )
    startup_parser.add_argument(
        "--repo-root",
        type=Path,
        default=Path.cwd(),
        help="Repository whose branch is used in sandbox mode (default: current directory)",
    )

    # ibmi-sandbox link
    link_parser = subparsers.add_parser("link", help="Handle a connect link")
    link_parser.add_argument("uri", help="Full link, e.g. vscode://ext/connect?server=...&user=...")

    # ibmi-sandbox serve
    serve_parser = subparsers.add_parser("serve", help="Start the link receiver")
    serve_parser.add_argument(
        "--repo-root",
        type=Path,
        default=Path.cwd(),
        help="Repository whose branch is used in sandbox mode (default: current directory)",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=7358,
        help="Port to bind to (default: 7358)",
    )
    serve_parser.add_argument(
        "--no-startup",
        action="store_true",
        help="Do not run the startup auto-connect when the receiver starts",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "serve":
        import uvicorn

        from ibmi_sandbox.server import create_app

        app = create_app(
            repo_root=args.repo_root, settings=settings, run_startup=not args.no_startup
        )
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
        return

    try:
        if args.command == "startup":
            asyncio.run(_run_startup(settings, args.repo_root))
        elif args.command == "link":
            asyncio.run(_run_link(settings, args.uri))
    except HostBridgeError as e:
        print(f"Error: host bridge unavailable: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
