"""Command-line entrypoint: configure, wire the service and serve MCP over stdio."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from notebook_mcp import __version__
from notebook_mcp.config import Settings, load_settings, storage_directory
from notebook_mcp.logging_setup import setup_logging
from notebook_mcp.repositories.notebook_repo import NotebookRepo
from notebook_mcp.server import build_server
from notebook_mcp.services.notebook_service import NotebookService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notebook-mcp",
        description=(
            "A Model Context Protocol server for managing notebooks with pages of text "
            "and persistent file storage. It speaks MCP on stdin/stdout."
        ),
        epilog=(
            "Configuration: NOTEBOOK_STORAGE_DIRECTORY and LOG_LEVEL are read from the "
            "environment or from .env in NOTEBOOK_MCP_HOME (default: working directory)."
        ),
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=None,
        help="Directory for notebook files (overrides NOTEBOOK_STORAGE_DIRECTORY).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level for stderr output (overrides LOG_LEVEL).",
    )
    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    updates = {}
    if args.storage_dir is not None:
        updates["NOTEBOOK_STORAGE_DIRECTORY"] = str(args.storage_dir.expanduser().resolve())
    if args.log_level:
        updates["LOG_LEVEL"] = args.log_level
    return settings.model_copy(update=updates) if updates else settings


def build_service(settings: Settings) -> NotebookService:
    return NotebookService(NotebookRepo(storage_directory(settings)))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)
    setup_logging(settings.LOG_LEVEL)

    service = build_service(settings)
    server = build_server(service, name=settings.SERVER_NAME)
    logger.info(
        "Notebook MCP server %s started",
        __version__,
        extra={"event": "server.start", "notebook": str(service.repo.root)},
    )
    server.run()
    return 0
