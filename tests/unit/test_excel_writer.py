from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from shipment_recon.excel.writer import (
    DuplicateWorksheetNameError,
    SheetNameRegistry,
    WorksheetNameError,
    columns_frame,
    summary_frame,
    write_report,
)
from shipment_recon.logging.error_log import ErrorLogBuffer
from shipment_recon.models.config_models import ReconSettings, ReportConfig
from shipment_recon.models.reconciliation import PrimaryTable
from shipment_recon.services.engine import reconcile

SETTINGS = ReconSettings(
    target_schema=("Shipment ID", "Booking ID", "Vessel Name"),
    primary_fields=frozenset({"Shipment ID", "Vessel Name"}),
)


def _result(rows):
    table = PrimaryTable.from_rows(["Shipment ID", "Vessel Name"], rows)
    return reconcile(table, ["MAT400"], SETTINGS)


def test_registry_rejects_case_insensitive_duplicates():
    reg = SheetNameRegistry(reserved=["Summary"])
    assert reg.claim("ABC") == "ABC"
    with pytest.raises(DuplicateWorksheetNameError):
        reg.claim("abc")
    with pytest.raises(DuplicateWorksheetNameError):
        reg.claim("SUMMARY")


@pytest.mark.parametrize("name", ["", "   ", "A/B", "A[1]", "x" * 32, "'quoted'"])
def test_registry_rejects_invalid_names(name):
    with pytest.raises(WorksheetNameError):
        SheetNameRegistry().claim(name)


def test_summary_frame_pads_shorter_column():
    df = summary_frame(["A"], ["B", "C", "D"], "ShipKeys Found", "ShipKeys NOT Found")
    assert list(df.columns) == ["ShipKeys Found", "ShipKeys NOT Found"]
    assert df["ShipKeys Found"].isna().tolist() == [False, True, True]
    assert df["ShipKeys Found"][0] == "A"
    assert df["ShipKeys NOT Found"].tolist() == ["B", "C", "D"]


def test_columns_frame_roles():
    df = columns_frame(["Shipment ID", "Booking ID", "Notes"], {"Shipment ID"}, {"Booking ID", "Shipment ID"})
    assert df["Role"].tolist() == ["primary", "secondary", "manual"]


def test_write_report_sheets(temp_workdir: Path):
    result = _result([("ABC100", "Anna"), ("XYZ300", "Ever"), ("MAT400", "One")])
    out = temp_workdir / "out" / "report.xlsx"
    written = write_report(out, result, ReportConfig())
    assert written == ["ABC", "XYZ"]

    sheets = pd.read_excel(out, sheet_name=None)
    assert list(sheets) == ["Summary", "ABC", "XYZ", "Columns"]
    abc = sheets["ABC"]
    assert list(abc.columns) == ["Shipment ID", "Booking ID", "Vessel Name"]
    assert abc.loc[0, "Shipment ID"] == "ABC100"
    assert abc.loc[0, "Vessel Name"] == "Anna"
    assert pd.isna(abc.loc[0, "Booking ID"])
    summary = sheets["Summary"]
    assert summary["ShipKeys Found"].dropna().tolist() == ["MAT400"]
    assert summary["ShipKeys NOT Found"].tolist() == ["ABC100", "XYZ300"]


def test_write_report_skips_colliding_customer(temp_workdir: Path):
    result = _result([("ABC100", "Anna"), ("SUM100", "Sum")])
    errors = ErrorLogBuffer()
    out = temp_workdir / "out" / "report.xlsx"
    written = write_report(out, result, ReportConfig(summary_sheet="SUM"), errors=errors)
    assert written == ["ABC"]
    assert [r.error_type for r in errors.records] == ["DUPLICATE_WORKSHEET_NAME"]
    assert errors.records[0].source == "sink"
    assert "SUM" in pd.read_excel(out, sheet_name=None)


def test_write_report_strict_raises(temp_workdir: Path):
    result = _result([("SUM100", "Sum")])
    with pytest.raises(DuplicateWorksheetNameError):
        write_report(temp_workdir / "r.xlsx", result, ReportConfig(summary_sheet="sum"))


def test_write_report_strict_leaves_no_file(temp_workdir: Path):
    result = _result([("ABC100", "Anna"), ("SUM100", "Sum")])
    out = temp_workdir / "out" / "report.xlsx"
    with pytest.raises(DuplicateWorksheetNameError):
        write_report(out, result, ReportConfig(summary_sheet="sum"))
    assert not out.exists()
    assert list(out.parent.iterdir()) == []


def test_write_report_strict_keeps_previous_report(temp_workdir: Path):
    out = temp_workdir / "out" / "report.xlsx"
    write_report(out, _result([("ABC100", "Anna")]), ReportConfig())
    before = out.read_bytes()
    with pytest.raises(DuplicateWorksheetNameError):
        write_report(out, _result([("SUM100", "Sum")]), ReportConfig(summary_sheet="sum"))
    assert out.read_bytes() == before


def test_write_report_progress_switch(temp_workdir: Path):
    result = _result([("ABC100", "Anna")])
    with patch('shipment_recon.services.progress.is_tty_enabled', return_value=True), \
         patch('shipment_recon.services.progress.tqdm') as mock_tqdm:
        write_report(temp_workdir / "quiet.xlsx", result, ReportConfig(), progress=False)
        mock_tqdm.assert_not_called()
        write_report(temp_workdir / "loud.xlsx", result, ReportConfig())
        mock_tqdm.assert_called_once()
