from __future__ import annotations

from pathlib import Path

from shipment_recon.cli import main as cli_main
from shipment_recon.cli.__main__ import EXIT_FATAL, EXIT_ITEM_ERRORS, EXIT_SUCCESS
from shipment_recon.logging.init import reset_logging

"""Exit code contract: 0 clean, 2 item errors collected, 1 fatal."""


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_ITEM_ERRORS) == (0, 1, 2)


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # no config/recon.yml
    reset_logging()
    code = cli_main([])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_all_success(write_config, shipments_workbook, capsys):
    reset_logging()
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS
    assert "errors=0" in out


def test_exit_code_item_errors(write_config, workbook_factory, temp_workdir: Path, capsys):
    reset_logging()
    workbook_factory(
        temp_workdir / "data" / "shipments.xlsx",
        {
            "Origin Document": [["t"], ["t"], ["t"], ["t"], ["Shipment ID"], ["ABC1"], ["Z"]],
            "kontrol": [["ids"], ["nothing"]],
        },
    )
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == EXIT_ITEM_ERRORS
    assert "errors=1" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_exit_code_malformed_workbook(write_config, temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "data" / "shipments.xlsx").write_bytes(b"not a workbook")
    code = cli_main([])
    assert code == EXIT_FATAL
    assert "ERROR reconciliation:" in capsys.readouterr().out
