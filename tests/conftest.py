# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

PRIMARY_SHEET = "Origin Document"
REFERENCE_SHEET = "kontrol"

PRIMARY_ROWS: list[list[object]] = [
    ["Shipment Report"],
    ["Generated by TMS"],
    ["Period: 2024-01"],
    ["Confidential"],
    ["Shipment ID", "Ship Mode", "Vessel Name", "Voyage No", "Discharge Location",
     "Master BL No", "Container No", "Freight Type"],
    ["ABC100", "SEA", "MSC Anna", "V01", "Hamburg", "MBL1", "CONT1", "FCL"],
    ["ABC100", "SEA", "MSC Duplicate", "V99", "Bremen", "MBL9", "CONT9", "LCL"],
    ["ABD200", "SEA", "Maersk Bella", "V02", "Rotterdam", "MBL2", "CONT2", "LCL"],
    ["XYZ300", "AIR", "Ever Clever", "V03", "Antwerp", "MBL3", "CONT3", "FCL"],
    ["MAT400", "SEA", "One Delta", "V04", "Gdansk", "MBL4", "CONT4", "FCL"],
]

REFERENCE_ROWS: list[list[object]] = [
    ["Shipment IDs", "Notes"],
    ["MAT400", None],
    [None, "ZZZ999"],
]


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("RECON_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """input_path: ./data/shipments.xlsx
output_path: ./out/report.xlsx
primary:
  sheet: Origin Document
  skip_rows: 4
  key_column: Shipment ID
  drop_columns: [Ship Mode]
reference:
  sheet: kontrol
  skip_rows: 1
customer_code:
  start: 0
  end: 3
report:
  summary_sheet: Summary
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "recon.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def shipments_workbook(temp_workdir: Path) -> Path:
    return make_workbook(
        temp_workdir / "data" / "shipments.xlsx",
        {PRIMARY_SHEET: PRIMARY_ROWS, REFERENCE_SHEET: REFERENCE_ROWS},
    )


@pytest.fixture()
def workbook_factory():
    return make_workbook
