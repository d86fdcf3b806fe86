from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from shipment_recon.models.config_models import (
    DEFAULT_PRIMARY_FIELDS,
    DEFAULT_SECONDARY_FIELDS,
    DEFAULT_TARGET_SCHEMA,
    PrimarySheetConfig,
    ReconConfig,
    ReconSettings,
    ReferenceSheetConfig,
    ReportConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML config (default config/recon.yml)
- Validate it against recon_schema.json (shipped next to this module)
- Apply defaults for everything the schema marks optional
- Build the frozen ReconConfig used by the rest of the tool
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

DEFAULT_CONFIG_PATH = Path("config/recon.yml")
SCHEMA_PATH = Path(__file__).parent / "recon_schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> ReconConfig:
    """Validate a parsed config mapping and build ReconConfig."""
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    _validate_config_schema(data)

    p_raw = data["primary"]
    primary_defaults = PrimarySheetConfig()
    primary = PrimarySheetConfig(
        sheet_name=p_raw["sheet"],
        skip_rows=p_raw.get("skip_rows", primary_defaults.skip_rows),
        key_column=p_raw.get("key_column", primary_defaults.key_column),
        drop_columns=tuple(p_raw.get("drop_columns", primary_defaults.drop_columns)),
    )

    r_raw = data["reference"]
    reference = ReferenceSheetConfig(
        sheet_name=r_raw["sheet"],
        skip_rows=r_raw.get("skip_rows", ReferenceSheetConfig().skip_rows),
    )

    cc_raw = data.get("customer_code", {})
    start = cc_raw.get("start", 0)
    end = cc_raw.get("end", 3)
    if end <= start:  # not expressible in JSON schema
        raise ConfigError(f"customer_code.end ({end}) must be greater than start ({start})")

    rep_raw = data["report"]
    source_columns = rep_raw.get("source_columns")
    settings = ReconSettings(
        customer_start=start,
        customer_end=end,
        target_schema=tuple(rep_raw.get("target_schema", DEFAULT_TARGET_SCHEMA)),
        primary_fields=frozenset(rep_raw.get("primary_fields", DEFAULT_PRIMARY_FIELDS)),
        source_columns=tuple(source_columns) if source_columns else None,
    )
    report_defaults = ReportConfig()
    report = ReportConfig(
        summary_sheet=rep_raw.get("summary_sheet", report_defaults.summary_sheet),
        columns_sheet=rep_raw.get("columns_sheet", report_defaults.columns_sheet),
        secondary_fields=frozenset(rep_raw.get("secondary_fields", DEFAULT_SECONDARY_FIELDS)),
    )
    if report.summary_sheet.casefold() == report.columns_sheet.casefold():
        raise ConfigError("report.summary_sheet and report.columns_sheet must differ")

    return ReconConfig(
        input_path=data.get("input_path"),
        output_path=data.get("output_path", ReconConfig().output_path),
        primary=primary,
        reference=reference,
        settings=settings,
        report=report,
        fail_fast=data.get("fail_fast", False),
    )


def load_config(path: Path) -> ReconConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return config_from_dict(data)
