"""Helpers shared by the command-line tools."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any

from nexhealth.config import NEXHEALTH_LOG_LEVEL, NexHealthConfig
from nexhealth.nexhealth_client import NexHealthError

BANNER_RULE = "═" * 39


def configure_logging(level: str = NEXHEALTH_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )


def print_banner(title: str, config: NexHealthConfig) -> None:
    print(BANNER_RULE)
    print(title.center(len(BANNER_RULE)).rstrip())
    print(BANNER_RULE)
    print(f"Subdomain: {config.subdomain}")
    print(f"Location:  {config.location_id}")
    print(BANNER_RULE)


def run_command(command: Coroutine[Any, Any, Any]) -> int:
    """Run a command coroutine and turn NexHealth failures into exit code 1."""
    try:
        asyncio.run(command)
    except NexHealthError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1
    return 0
