from datetime import datetime, timezone
from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from dotbinder.coercion import LeafCoercer, coerce
from dotbinder.config import CoercionSettings


@pytest.fixture
def coercer():
    return LeafCoercer(CoercionSettings())


def test_hungarian_int_is_converted():
    result = coerce("iCount", "42")
    assert result == 42
    assert isinstance(result, int)


def test_plain_name_keeps_raw_string():
    assert coerce("count", "42") == "42"


@pytest.mark.parametrize("segment, raw", [
    ("iCount", "abc"),
    ("iCount", "2147483648"),       # does not fit in 32 bits
    ("lTotal", "9223372036854775808"),
    ("dRatio", "three"),
    ("fRatio", "1e50"),             # overflows a single precision float
    ("rPrice", "NaN"),
    ("rPrice", "ten"),
    ("xHuge", "12.5"),
    ("bActive", "maybe"),
    ("tBirth", "yesterday"),
    ("cWhen", "31/31/2024"),
])
def test_failed_conversion_falls_back_to_raw(coercer, segment, raw):
    assert coercer.coerce(segment, raw) == raw


@pytest.mark.parametrize("segment, raw, expected", [
    ("iCount", "-2147483648", -2147483648),
    ("lTotal", "2147483648", 2147483648),
    ("xHuge", "123456789012345678901234567890", 123456789012345678901234567890),
    ("dRatio", "3.5", 3.5),
    ("rPrice", "10.25", Decimal("10.25")),
    ("bActive", "yes", True),
    ("bActive", "TRUE", True),
    ("bActive", "off", False),
    ("bActive", "0", False),
])
def test_conversions(coercer, segment, raw, expected):
    result = coercer.coerce(segment, raw)
    assert result == expected
    assert type(result) is type(expected)


def test_single_precision_float(coercer):
    result = coercer.coerce("fRatio", "0.1")
    assert isinstance(result, float)
    assert result != 0.1
    assert abs(result - 0.1) < 1e-7


def test_instant_is_naive(coercer):
    assert coercer.coerce("tBirth", "2024-01-05") == datetime(2024, 1, 5)
    assert coercer.coerce("tBirth", "05/01/2024") == datetime(2024, 1, 5)
    # offsets are normalised to UTC and dropped
    assert coercer.coerce("tBirth", "2024-01-05T10:00:00+02:00") == datetime(2024, 1, 5, 8, 0)


def test_calendar_is_timezone_aware(coercer):
    result = coercer.coerce("cWhen", "2024-01-05T10:00:00")
    assert result == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert result.tzinfo is not None


def test_configured_date_formats():
    coercer = LeafCoercer(CoercionSettings(date_formats=["%Y%m%d"]))
    assert coercer.coerce("tBirth", "20240105") == datetime(2024, 1, 5)
    assert coercer.coerce("tBirth", "05/01/2024") == "05/01/2024"


@pytest.mark.parametrize("segment, code", [
    ("iAge", "i"),
    ("cWhen", "c"),
    ("i", None),
    ("iphone", None),
    ("i1", None),
    ("iÉtat", None),
    ("zName", None),
    ("", None),
])
def test_code_for(coercer, segment, code):
    assert coercer.code_for(segment) == code


@pytest.mark.parametrize("segment, key", [
    ("iAge", "age"),
    ("dTotalPrice", "totalPrice"),
    ("name", "name"),
    ("iphone", "iphone"),
])
def test_key_for_strips_prefix(coercer, segment, key):
    assert coercer.key_for(segment) == key


def test_key_is_stripped_even_when_conversion_fails(coercer):
    assert coercer.key_for("iCount") == "count"
    assert coercer.coerce("iCount", "abc") == "abc"


def test_strip_prefix_disabled():
    coercer = LeafCoercer(CoercionSettings(strip_prefix=False))
    assert coercer.key_for("iAge") == "iAge"
    assert coercer.coerce("iAge", "7") == 7


def test_coercion_disabled():
    coercer = LeafCoercer(CoercionSettings(enabled=False))
    assert coercer.coerce("iAge", "7") == "7"
    assert coercer.key_for("iAge") == "iAge"


def test_caster_table_is_swappable():
    coercer = LeafCoercer(casters={"u": lambda v, cfg: v.upper()})
    assert coercer.coerce("uName", "bob") == "BOB"
    assert coercer.coerce("iAge", "3") == "3"
    assert coercer.key_for("iAge") == "iAge"


def test_fallback_is_counted(coercer):
    before = REGISTRY.get_sample_value("binder_coercion_fallbacks_total") or 0.0
    coercer.coerce("iCount", "abc")
    after = REGISTRY.get_sample_value("binder_coercion_fallbacks_total")
    assert after == before + 1
