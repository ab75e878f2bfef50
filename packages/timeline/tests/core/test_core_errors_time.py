from __future__ import annotations

import pytest
from run_timeline.core import errors, time


def test_error_info_from_python_error_payload() -> None:
    info = errors.error_info_from_payload(
        {
            "message": "  boom  ",
            "className": "ValueError",
            "stack": ["  File a.py, line 1\n", "  File b.py, line 2\n"],
            "cause": {"message": "root cause", "class_name": "KeyError"},
        }
    )
    assert info is not None
    assert info.message == "boom"
    assert info.class_name == "ValueError"
    assert len(info.stack) == 2
    assert info.cause is not None and info.cause.class_name == "KeyError"


@pytest.mark.parametrize(
    "payload",
    [None, "boom", 42, ["boom"], {"className": "X"}, {"message": ""}, {"message": 3}],
)
def test_error_info_rejects_unusable_payloads(payload: object) -> None:
    assert errors.error_info_from_payload(payload) is None


def test_unknown_error_marker() -> None:
    assert errors.UNKNOWN_ERROR.is_unknown
    assert not errors.ErrorInfo(message="boom").is_unknown


def test_parse_timestamp_ms() -> None:
    assert time.parse_timestamp_ms(1700000000000) == 1700000000000.0
    assert time.parse_timestamp_ms("1700000000000") == 1700000000000.0
    assert time.parse_timestamp_ms("1970-01-01T00:00:01Z") == 1000.0
    assert time.parse_timestamp_ms("1970-01-01T00:00:01") == 1000.0
    assert time.parse_timestamp_ms("not a time") is None
    assert time.parse_timestamp_ms(float("nan")) is None
    assert time.parse_timestamp_ms(True) is None
    assert time.parse_timestamp_ms(None) is None


def test_time_helpers_format() -> None:
    assert time.ms_to_iso(1000.0) == "1970-01-01T00:00:01.000Z"
    assert time.ms_to_iso(None) is None
    assert time.format_duration_ms(250) == "250 ms"
    assert time.format_duration_ms(1500) == "1.50 s"
    assert time.format_duration_ms(None) == "-"
