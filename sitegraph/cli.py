"""CLI entrypoint: crawl one root URL and print its link graph."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any

from .config import CrawlConfig, load_config
from .constants import JSON_INDENT, SUPPORTED_CONFIG_SUFFIXES
from .engine import CrawlResult, crawl
from .errors import InvalidInputError
from .storage import result_to_json, save_result
from .url import root_url


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sitegraph",
        description="Crawl a single host and print each page's same-host links.",
    )

    parser.add_argument("root_url", help="Root URL of the form scheme://host.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML crawl config.",
    )
    parser.add_argument("--concurrency", type=int, default=None)
    parser.add_argument("--timeout_seconds", type=float, default=None)
    parser.add_argument("--retries", type=int, default=None)
    parser.add_argument("--retry_backoff_seconds", type=float, default=None)
    parser.add_argument("--rate_limit_seconds", type=float, default=None)
    parser.add_argument("--user_agent", type=str, default=None)

    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Also write the result to a .json/.yaml file.",
    )
    parser.add_argument(
        "--include_failures",
        action="store_true",
        help="Print failed pages and crawl stats alongside the link map.",
    )
    parser.add_argument(
        "--log_file",
        type=Path,
        default=None,
        help="Mirror logs into this file.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    payload: dict[str, Any] = {}
    if args.config is not None:
        payload = load_config(args.config).to_dict()

    if args.concurrency is not None:
        payload["max_concurrency"] = args.concurrency
    if args.timeout_seconds is not None:
        payload["timeout_seconds"] = args.timeout_seconds
    if args.retries is not None:
        payload["retries"] = args.retries
    if args.retry_backoff_seconds is not None:
        payload["retry_backoff_seconds"] = args.retry_backoff_seconds
    if args.rate_limit_seconds is not None:
        payload["rate_limit_seconds"] = args.rate_limit_seconds
    if args.user_agent is not None:
        payload["user_agent"] = args.user_agent

    return CrawlConfig.from_dict(payload)


def setup_logging(verbose: bool, log_file: Path | None = None) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    # stdout carries the result.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_result(result: CrawlResult, *, include_failures: bool) -> None:
    if include_failures:
        payload: Any = result_to_json(result, include_failures=True)
    else:
        payload = result.pages
    print(json.dumps(payload, indent=JSON_INDENT, sort_keys=True))

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        root = root_url(args.root_url)
        config = build_config(args)
    except InvalidInputError as exc:
        logging.error("Invalid root URL: %s", exc)
        return 2
    except Exception as exc:
        logging.error("Failed to build config: %s", exc)
        return 2

    if args.output is not None and args.output.suffix.lower() not in SUPPORTED_CONFIG_SUFFIXES:
        logging.error(
            "Unsupported output suffix '%s'. Supported: %s",
            args.output.suffix,
            SUPPORTED_CONFIG_SUFFIXES,
        )
        return 2

    try:
        result = crawl(root, config)
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    except Exception:
        logging.exception("Crawl failed")
        return 1

    print_result(result, include_failures=args.include_failures)

    if args.output is not None:
        try:
            path = save_result(result, args.output, include_failures=True)
            logging.info("Wrote result to %s", path)
        except (OSError, ValueError) as exc:
            logging.error("Failed to write result to %s: %s", args.output, exc)
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
