from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from seo_dedupe.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from seo_dedupe.logging.init import log_summary, setup_logging
from seo_dedupe.models.config_models import RunConfig
from seo_dedupe.services.llm_client import OpenAIChatClient, TextGenerator
from seo_dedupe.services.pipeline import ProcessingError, run_pipeline
from seo_dedupe.services.summary import render_summary_line
from seo_dedupe.tabular.reader import TableIOError, read_table

"""CLI entrypoint.

Flow:
- Load .env (overrides process env), then the YAML run config
- Read the catalog export, detect duplicates, write the annotated table
- Generate variations for the duplicates and write them
- Print one SUMMARY line

Exit codes: 0 on success (per-field fallbacks included), 1 on any fatal error.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; with override=True its values win over the inherited environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Find duplicated catalog text and rewrite it with an LLM")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Run config YAML")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--quiet", action="store_true", help="Only print warnings, errors and the summary")
    p.add_argument("--dry-run", action="store_true", help="Detect duplicates only; no model calls")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first rows then exit")
    return p.parse_args(argv)


def create_text_generator(cfg: RunConfig) -> TextGenerator:
    return OpenAIChatClient(cfg.llm)


def _inspect_data(cfg: RunConfig) -> int:
    try:
        table = read_table(Path(cfg.input_path))
    except TableIOError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {cfg.input_path} rows={len(table.rows)}")
    print(f"  columns={table.columns}")
    for row in table.rows[:3]:
        print("    sample_row=", row)
    return EXIT_SUCCESS


async def _run(cfg: RunConfig, dry_run: bool):
    client = None if dry_run else create_text_generator(cfg)
    try:
        return await run_pipeline(cfg, client, dry_run=dry_run)
    finally:
        close = getattr(client, "close", None)
        if close is not None:
            await close()


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストの cli_main([]) 対策)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger = setup_logging(verbose=cfg.verbose and not args.quiet, debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing {cfg.input_path} (model={cfg.model}, batch_size={cfg.batch_size})")
    try:
        result = asyncio.run(_run(cfg, args.dry_run))
    except TableIOError as e:
        logger.error(f"io: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"unexpected: {type(e).__name__}: {e}")
        return EXIT_FATAL

    log_summary(render_summary_line(result))
    return EXIT_SUCCESS
