"""Command line entry point.

Binds arguments and environment to the provider operations and reports
results as `name=value` outputs. The module only holds CLI and I/O logic;
caching decisions live in the providers.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from blobcache_lib.config.config import DEFAULT_CONFIG_FILE, default_config_yaml, load_config
from blobcache_lib.logging_config import configure_logging
from blobcache_lib.providers.factory import create_cache_provider
from blobcache_lib.providers.interfaces import SAVE_SKIPPED, CacheProviderProtocol

logger = logging.getLogger(__name__)


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="blobcache", description="Save and restore build caches")
    p.add_argument("--config", help=f"YAML config file (default: {DEFAULT_CONFIG_FILE} if present)")
    p.add_argument("--log-level", help="Override the configured log level")
    p.add_argument("--print-template", action="store_true", help="Print the default YAML config to stdout and exit")
    sub = p.add_subparsers(dest="command")

    r = sub.add_parser("restore", help="Restore paths from the best matching cache entry")
    r.add_argument("--path", action="append", required=True, help="Path to restore (repeatable, newline separated)")
    r.add_argument("--key", required=True, help="Primary cache key")
    r.add_argument("--restore-key", action="append", default=[], help="Fallback key prefix, most specific first")
    r.add_argument("--lookup-only", action="store_true", help="Only check for a match, do not download")
    r.add_argument("--fail-on-cache-miss", action="store_true", help="Exit 1 when no cache entry matches")

    s = sub.add_parser("save", help="Save paths under a cache key")
    s.add_argument("--path", action="append", required=True, help="Path to save (repeatable, newline separated)")
    s.add_argument("--key", required=True, help="Cache key")
    s.add_argument("--upload-chunk-size", type=int, help="Chunk size in bytes for fallback cache service uploads (remote uploads use the configured upload_chunk_size)")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = get_parser()
    if argv is not None:
        argv = list(argv)
    return parser.parse_args(argv)


def split_lines(values: Iterable[str]) -> List[str]:
    """Flatten repeated and newline-separated values, dropping blanks."""
    out = []
    for value in values:
        out.extend(line.strip() for line in value.splitlines() if line.strip())
    return out


def write_outputs(outputs: Dict[str, str]) -> None:
    for name, value in outputs.items():
        sys.stdout.write(f"{name}={value}\n")
    output_file = os.environ.get("GITHUB_OUTPUT")
    if output_file:
        with open(output_file, "a", encoding="utf-8") as f:
            for name, value in outputs.items():
                f.write(f"{name}={value}\n")


def run_restore(provider: Optional[CacheProviderProtocol], args: argparse.Namespace) -> int:
    paths = split_lines(args.path)
    restore_keys = split_lines(args.restore_key)
    matched: Optional[str] = None
    if provider is not None and provider.is_available():
        matched = provider.restore_cache(paths, args.key, restore_keys, lookup_only=args.lookup_only)
    else:
        logger.warning("Cache service is not available, skipping restore")

    write_outputs({
        "cache-hit": "true" if matched == args.key else "false",
        "cache-primary-key": args.key,
        "cache-matched-key": matched or "",
    })
    if matched is None and args.fail_on_cache_miss:
        logger.error("Failed to restore cache entry. Exiting as fail-on-cache-miss is set. Input key: %s", args.key)
        return 1
    return 0


def run_save(provider: Optional[CacheProviderProtocol], args: argparse.Namespace) -> int:
    cache_id = SAVE_SKIPPED
    if provider is not None and provider.is_available():
        cache_id = provider.save_cache(split_lines(args.path), args.key, upload_chunk_size=args.upload_chunk_size)
    else:
        logger.warning("Cache service is not available, skipping save")
    write_outputs({"cache-id": str(cache_id)})
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    if args.print_template:
        sys.stdout.write(default_config_yaml())
        return 0
    if args.command is None:
        get_parser().print_help()
        return 2

    configure_logging(args.log_level, Path(args.config) if args.config else None)
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    if not args.log_level:
        configure_logging(config.log_level)

    provider: Optional[CacheProviderProtocol] = None
    try:
        provider = create_cache_provider(config)
    except Exception as e:
        logger.warning("Failed to set up cache provider: %s", e)

    if args.command == "restore":
        return run_restore(provider, args)
    return run_save(provider, args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
