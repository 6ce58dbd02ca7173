from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import BaseModel, ConfigDict

from remote_config.config import YamlConfigLoader
from remote_config.config.models import AppConfig, ConfigLoadRequest
from remote_config.errors import ConfigServiceError
from remote_config.handle import ConfigHandle
from remote_config.logging import init_logging

logger = logging.getLogger(__name__)


class RawDocument(BaseModel):
    """Schemaless document: keeps whatever top-level keys the service returns."""

    model_config = ConfigDict(frozen=True, extra="allow")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remote-config", description="Remote configuration client")
    parser.add_argument(
        "--config",
        default="data/config/config.yaml",
        help="Path to the client settings file (default: data/config/config.yaml)",
    )
    parser.add_argument(
        "--no-dotenv",
        action="store_true",
        help="Disable loading .env (env overrides still apply)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    # Command: fetch
    fetch_parser = subparsers.add_parser("fetch", help="Load the configured document once and print it")
    fetch_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation of the printed document (default: 2)",
    )

    return parser


async def _load_settings(args: argparse.Namespace) -> AppConfig:
    loader = YamlConfigLoader()
    request = ConfigLoadRequest(
        yaml_path=args.config,
        dotenv_path=None if args.no_dotenv else ".env",
    )
    return await loader.load(request)


async def _fetch(args: argparse.Namespace) -> int:
    settings = await _load_settings(args)
    init_logging(settings.logging)

    handle = ConfigHandle.from_settings(RawDocument, settings.client)
    try:
        await handle.load()
    except ConfigServiceError as exc:
        print(exc, file=sys.stderr)
        return 1

    document = await handle.snapshot()
    print(document.model_dump_json(indent=args.indent))
    return 0


async def _main_async(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "fetch":
        return await _fetch(args)
    return 2


def main(argv: list[str] | None = None) -> int:
    try:
        return asyncio.run(_main_async(argv))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
