"""Command-line entry point: download a Notion database as markdown documents."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .client import NotionClient
from .config import (
    ConfigurationError,
    MissingTokenError,
    NotionConfig,
    Settings,
    parse_option_value,
)
from .upstream import DocDetail

# Custom logging format
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%m/%d/%y %H:%M:%S"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    """Configure unified logging format for all loggers."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers = [handler]

    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-publish",
        description="Download pages of a Notion database as markdown documents",
    )
    parser.add_argument("--database-id", help="Database ID (default: NOTION_DATABASE_ID)")
    parser.add_argument("--token", help="Integration token (default: NOTION_TOKEN)")
    parser.add_argument(
        "--sorts",
        help="Sort preset name, true/false, or a JSON list of sort rules",
    )
    parser.add_argument("--filter", help="true/false or a JSON filter object")
    parser.add_argument("--ids", nargs="*", default=None, help="Only download these page IDs")
    parser.add_argument("--output", "-o", help="Write the JSON documents to this file (default: stdout)")
    parser.add_argument("--log-level", help="Log level (default: NOTION_LOG_LEVEL or INFO)")
    return parser


def build_config(args: argparse.Namespace, settings: Settings) -> NotionConfig:
    """Merge command-line options over settings from the environment."""
    sorts = args.sorts if args.sorts is not None else settings.sorts
    filter = args.filter if args.filter is not None else settings.filter
    return NotionConfig.from_options(
        database_id=args.database_id or settings.database_id,
        token=args.token or settings.token,
        sorts=parse_option_value(sorts),
        filter=parse_option_value(filter),
    )


async def run(config: NotionConfig, ids: Optional[List[str]] = None) -> List[DocDetail]:
    """Fetch the catalog and download the selected pages."""
    async with NotionClient(config) as client:
        catalog = await client.get_page_list()
        return await client.get_page_detail_list(catalog, ids)


def write_documents(docs: List[DocDetail], output: Optional[str]) -> None:
    payload = json.dumps([doc.to_dict() for doc in docs], ensure_ascii=False, indent=2)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(payload + "\n")
        logger.info(f"Wrote {len(docs)} documents to {output}")
    else:
        sys.stdout.write(payload + "\n")


def main(argv: Optional[List[str]] = None) -> None:
    """Run the downloader."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
        configure_logging(args.log_level or settings.log_level)
        config = build_config(args, settings)
        if not config.database_id:
            raise ConfigurationError("Missing database ID: pass --database-id or set NOTION_DATABASE_ID")
    except (ValidationError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        docs = asyncio.run(run(config, args.ids))
    except MissingTokenError as e:
        logger.error(f"Missing parameter: {e}")
        sys.exit(1)

    write_documents(docs, args.output)


if __name__ == "__main__":
    main()
