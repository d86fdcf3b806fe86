from __future__ import annotations

import argparse
import os
import sys
import zipfile
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from shipment_recon.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from shipment_recon.excel.reader import MissingColumnsError, SheetHeaderError, SheetNotFoundError, read_workbook
from shipment_recon.logging.init import enable_debug, log_summary, setup_logging
from shipment_recon.services.keys import InputShapeError
from shipment_recon.services.orchestrator import ReconciliationError, run
from shipment_recon.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (override mode), resolve the config path (--config > RECON_CONFIG > default)
- Load & validate config
- Run the reconciliation and print the SUMMARY line

Exit codes: 0 = clean run, 2 = report written but item errors were collected,
1 = fatal (config, missing input, malformed workbook, fail-fast abort).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_ITEM_ERRORS = 2

CONFIG_ENV_VAR = "RECON_CONFIG"

_READ_ERRORS = (
    SheetNotFoundError,
    SheetHeaderError,
    MissingColumnsError,
    InputShapeError,
    OSError,
    ValueError,
    zipfile.BadZipFile,
)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; a failure is reported and ignored."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Shipment key reconciliation & per-customer report")
    p.add_argument("--config", type=Path, help=f"Config YAML (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--input", type=Path, help="Workbook with primary and reference sheets")
    p.add_argument("--output", type=Path, help="Report workbook to write")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--fail-fast", action="store_true", help="Abort on the first item error")
    p.add_argument("--inspect-data", action="store_true", help="Print resolved header & first rows then exit")
    return p.parse_args(argv)


def _resolve_config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _inspect_data(cfg, input_path: Path) -> int:
    try:
        table, reference_values = read_workbook(input_path, cfg.primary, cfg.reference)
    except _READ_ERRORS as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {input_path.name}")
    print(f"  PRIMARY: {cfg.primary.sheet_name} cols={list(table.columns)} key_index={table.key_column_index}")
    # datetime values are not JSON friendly; isoformat for display
    for row in table.rows[:3]:
        print("    row=", [v.isoformat() if hasattr(v, "isoformat") else v for v in row])
    print(f"  REFERENCE: {cfg.reference.sheet_name} cells={len(reference_values)}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an empty list from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        enable_debug(logger)

    config_path = _resolve_config_path(args)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.fail_fast and not cfg.fail_fast:
        cfg = replace(cfg, fail_fast=True)

    input_path = args.input or (Path(cfg.input_path) if cfg.input_path else None)
    if input_path is None:
        logger.error("no input workbook given (use --input or input_path in config)")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, input_path)

    logger.info(f"config={config_path} input={input_path}")
    try:
        result = run(cfg, input_path, args.output)
    except ReconciliationError as e:
        logger.error(f"reconciliation: {e}")
        return EXIT_FATAL

    logger.info(f"report={result.output_path} sheets={result.written_sheets}")

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.has_errors:
        return EXIT_ITEM_ERRORS
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
