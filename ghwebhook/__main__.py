"""Entry point: python -m ghwebhook."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ghwebhook.config import WebhookConfig, load_config
from ghwebhook.errors import ConfigurationError
from ghwebhook.events import PingEvent
from ghwebhook.logging_config import setup_logging
from ghwebhook.webhook import HandlerTable, Webhook, WebhookServer

logger = logging.getLogger(__name__)

_console = Console()


def _log_ping(event: PingEvent) -> None:
    hook_id = event.hook_id if event.hook_id is not None else "?"
    logger.info("Ping from hook %s: %s", hook_id, event.zen or "")


def _print_banner(config: WebhookConfig, handlers: HandlerTable) -> None:
    text = Text()
    text.append("Listening  ", style="bold")
    text.append(f"http://{config.host}:{config.port}/\n")
    text.append("Secret     ", style="bold")
    text.append("configured\n" if config.secret else "none (signatures not checked)\n")
    text.append("Restrict   ", style="bold")
    if config.restrict_addr:
        extra = ", ".join(config.trust_addrs) or "-"
        text.append(f"GitHub hook ranges + {extra}\n")
    else:
        text.append("off\n")
    text.append("Handlers   ", style="bold")
    text.append(", ".join(handlers.registered()) or "-")
    _console.print(Panel(text, title="[bold]ghwebhook[/bold]", border_style="cyan"))


async def _serve(config: WebhookConfig) -> None:
    handlers = HandlerTable(ping=_log_ping)
    server = WebhookServer(Webhook(config, handlers))
    _print_banner(config, handlers)
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ghwebhook", description="Serve a GitHub webhook endpoint."
    )
    parser.add_argument(
        "--config", type=Path, default=Path("ghwebhook.json"), help="JSON config file"
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="write rotating logs here")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        _console.print(f"[bold red]Error:[/bold red] {exc}")
        return 2
    setup_logging(config.log_level, verbose=args.verbose, log_dir=args.log_dir)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_serve(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
