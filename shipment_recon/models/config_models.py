from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the shipment reconciliation tool.

This module holds the typed configuration consumed by the reader, the
reconciliation engine and the report writer. The YAML loader in
shipment_recon/config/loader.py builds these objects after schema validation.
"""

__all__ = [
    "DEFAULT_DROP_COLUMNS",
    "DEFAULT_TARGET_SCHEMA",
    "DEFAULT_PRIMARY_FIELDS",
    "DEFAULT_SECONDARY_FIELDS",
    "PrimarySheetConfig",
    "ReferenceSheetConfig",
    "ReportConfig",
    "ReconSettings",
    "ReconConfig",
]


# Columns removed from the origin document before the header is resolved
DEFAULT_DROP_COLUMNS: tuple[str, ...] = (
    "Ship Mode",
    "Destination Service Type",
    "Est Discharge Date",
    "Item No",
    "Seal No",
    "Cartons",
    "Units",
    "Volume",
    "Weight",
    "Ci Last Modified",
    "Pl Last Modified",
    "Certificate Required",
    "Commercial Invoice No",
    "FCR No",
    "F&W",
)

DEFAULT_TARGET_SCHEMA: tuple[str, ...] = (
    "Shipment ID",
    "Booking ID",
    "Shipment ID - Booking ID",
    "Shipper",
    "Vessel Name",
    "Voyage No",
    "Est Depart Date",
    "Place of Origin",
    "Discharge Location",
    "House BL No",
    "Master BL No",
    "Container No",
    "Container Size and Type",
    "Freight Type",
    "Agent",
    "Export or Import",
    "Date Range",
    "Purchase Order ID",
    "Sea or Air",
    "Consignee",
    "Port of Loading",
    "Port of Discharge",
    "Customer",
)

# Filled by this tool (green headers)
DEFAULT_PRIMARY_FIELDS: frozenset[str] = frozenset({
    "Shipment ID",
    "Vessel Name",
    "Voyage No",
    "Est Depart Date",
    "Place of Origin",
    "Discharge Location",
    "Master BL No",
    "Container No",
    "Freight Type",
    "Date Range",
})

# Completed manually downstream (red headers)
DEFAULT_SECONDARY_FIELDS: frozenset[str] = frozenset({
    "Booking ID",
    "Shipment ID - Booking ID",
    "Shipper",
    "Place of Origin",
    "House BL No",
    "Container Size and Type",
    "Export or Import",
    "Purchase Order ID",
    "Sea or Air",
    "Consignee",
    "Port of Loading",
    "Port of Discharge",
    "Customer",
})


@dataclass(frozen=True)
class PrimarySheetConfig:
    """Where and how to read the primary (origin) dataset."""
    sheet_name: str = "Origin Document"
    skip_rows: int = 4  # title rows above the header
    key_column: str = "Shipment ID"
    drop_columns: tuple[str, ...] = DEFAULT_DROP_COLUMNS


@dataclass(frozen=True)
class ReferenceSheetConfig:
    """Where to read the reference (control) key range."""
    sheet_name: str = "kontrol"
    skip_rows: int = 1


@dataclass(frozen=True)
class ReconSettings:
    """Parameters of the in-memory reconciliation engine.

    source_columns=None means the primary table's own header is used as the
    field order when records are mapped onto the report schema.
    """
    customer_start: int = 0
    customer_end: int = 3
    target_schema: tuple[str, ...] = DEFAULT_TARGET_SCHEMA
    primary_fields: frozenset[str] = DEFAULT_PRIMARY_FIELDS
    source_columns: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ReportConfig:
    """Output workbook layout handed to the report writer."""
    summary_sheet: str = "Summary"
    columns_sheet: str = "Columns"
    secondary_fields: frozenset[str] = DEFAULT_SECONDARY_FIELDS
    found_header: str = "ShipKeys Found"
    not_found_header: str = "ShipKeys NOT Found"


@dataclass(frozen=True)
class ReconConfig:
    """Root configuration object for one reconciliation run."""
    input_path: str | None = None
    output_path: str = "reconciliation_report.xlsx"
    primary: PrimarySheetConfig = field(default_factory=PrimarySheetConfig)
    reference: ReferenceSheetConfig = field(default_factory=ReferenceSheetConfig)
    settings: ReconSettings = field(default_factory=ReconSettings)
    report: ReportConfig = field(default_factory=ReportConfig)
    fail_fast: bool = False  # strict mode: first per-item error aborts the run
