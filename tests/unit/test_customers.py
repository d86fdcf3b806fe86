from __future__ import annotations

import pytest

from shipment_recon.logging.error_log import ErrorLogBuffer
from shipment_recon.services.customers import KeyTooShortError, extract_customer, extract_customers


def test_extract_customers_three_groups():
    codes = extract_customers(["ABC100", "ABD200", "XYZ300"], 0, 3)
    assert set(codes) == {"ABC", "ABD", "XYZ"}
    assert len(codes) == 3


def test_extract_customers_dedupes_first_seen_order():
    assert extract_customers(["XYZ1", "ABC1", "XYZ2", "ABC3"]) == ["XYZ", "ABC"]


def test_short_key_raises_instead_of_truncating():
    with pytest.raises(KeyTooShortError) as e:
        extract_customer("AB", 0, 3)
    assert e.value.key == "AB"
    assert e.value.required == 3


def test_extract_customer_exact_length_ok():
    assert extract_customer("ABC", 0, 3) == "ABC"


def test_extract_customer_custom_offsets():
    assert extract_customer("00-ACME-77", 3, 7) == "ACME"


def test_extract_customer_is_pure():
    results = {extract_customer("ABC100", 0, 3) for _ in range(10)}
    assert results == {"ABC"}


@pytest.mark.parametrize("start, end", [(-1, 3), (3, 3), (4, 2)])
def test_invalid_offsets(start, end):
    with pytest.raises(ValueError):
        extract_customer("ABCDEFG", start, end)


def test_extract_customers_strict_propagates():
    with pytest.raises(KeyTooShortError):
        extract_customers(["ABC100", "AB"])


def test_extract_customers_collect_mode(temp_workdir):
    errors = ErrorLogBuffer()
    codes = extract_customers(["ABC100", "AB", "XYZ300"], errors=errors)
    assert codes == ["ABC", "XYZ"]
    assert len(errors) == 1
    rec = errors.records[0]
    assert rec.error_type == "KEY_TOO_SHORT"
    assert rec.source == "customer"
    assert rec.row == 1
