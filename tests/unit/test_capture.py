"""Tests for the capture normalizer."""

import time
from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from capturelog.core.capture import normalize
from capturelog.core.models import LogLevel, LogRecord

pytestmark = [pytest.mark.core, pytest.mark.tier(0)]


@dataclass
class FakeError:
    """Error-like object carrying a message and a captured stack."""

    message: str
    stack: str | None = None


class Unprintable:
    def __str__(self) -> str:
        raise RuntimeError("no str")


class Unrepresentable:
    def __str__(self) -> str:
        raise RuntimeError("no str")

    def __repr__(self) -> str:
        raise RuntimeError("no repr")


class TestNormalizeErrors:
    """Error-like primary values."""

    @pytest.mark.tra("Core.Capture.ErrorLike")
    def test_error_like_value_keeps_message_and_stack(self) -> None:
        record = normalize(LogLevel.ERROR, FakeError("boom", "at foo()"))
        assert record.level == LogLevel.ERROR
        assert record.message == "boom"
        assert record.stack_trace == "at foo()"

    def test_error_like_value_without_stack(self) -> None:
        record = normalize(LogLevel.ERROR, FakeError("boom"))
        assert record.message == "boom"
        assert record.stack_trace is None

    def test_raised_exception_keeps_traceback(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError as exc:
            record = normalize(LogLevel.ERROR, exc)
        assert record.message == "bad value"
        assert record.stack_trace is not None
        assert "Traceback" in record.stack_trace
        assert "ValueError: bad value" in record.stack_trace

    def test_unraised_exception_has_no_stack(self) -> None:
        record = normalize(LogLevel.ERROR, KeyError("missing"))
        assert record.message == "'missing'"
        assert record.stack_trace is None


class TestNormalizePlainValues:
    """Non-error primary values."""

    @pytest.mark.tra("Core.Capture.PlainWithAuxiliary")
    def test_string_with_auxiliary_value(self) -> None:
        record = normalize(LogLevel.WARN, "hello", {"user": "admin"})
        assert record.level == LogLevel.WARN
        assert record.message == "hello"
        assert record.metadata == [{"user": "admin"}]
        assert record.stack_trace is None

    def test_no_auxiliary_values_means_no_metadata(self) -> None:
        record = normalize(LogLevel.INFO, "hello")
        assert record.metadata is None

    def test_auxiliary_values_keep_their_order(self) -> None:
        record = normalize(LogLevel.INFO, "values", 1, "two", [3])
        assert record.metadata == [1, "two", [3]]

    def test_context_mapping_becomes_dict_metadata(self) -> None:
        record = normalize(LogLevel.INFO, "ctx", context={"a": 1})
        assert record.metadata == {"a": 1}

    def test_auxiliary_values_survive_alongside_context(self) -> None:
        record = normalize(LogLevel.INFO, "ctx", 1, 2, context={"a": 1})
        assert record.metadata == {"a": 1, "args": [1, 2]}

    def test_none_becomes_empty_message(self) -> None:
        assert normalize(LogLevel.INFO, None).message == ""

    def test_number_is_stringified(self) -> None:
        assert normalize(LogLevel.INFO, 0).message == "0"

    def test_failing_str_falls_back_to_repr(self) -> None:
        record = normalize(LogLevel.INFO, Unprintable())
        assert record.message.startswith("<")
        assert "Unprintable" in record.message

    def test_failing_str_and_repr_fall_back_to_type_name(self) -> None:
        record = normalize(LogLevel.INFO, Unrepresentable())
        assert record.message == "<unprintable Unrepresentable>"

    def test_draft_has_no_id(self) -> None:
        assert normalize(LogLevel.INFO, "x").id is None


class TestNormalizeLevelAndTime:
    """Level coercion and timestamping."""

    @pytest.mark.parametrize(
        ("given_level", "expected"),
        [
            ("INFO", LogLevel.INFO),
            ("warn", LogLevel.WARN),
            ("warning", LogLevel.WARN),
            ("ERROR", LogLevel.ERROR),
            ("bogus", LogLevel.INFO),
        ],
    )
    def test_level_names_are_coerced(
        self, given_level: str, expected: LogLevel
    ) -> None:
        assert normalize(given_level, "x").level == expected

    def test_timestamp_is_milliseconds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(time, "time", lambda: 1702300000.123)
        assert normalize(LogLevel.INFO, "x").timestamp == 1702300000123

    @given(
        primary=st.one_of(
            st.none(),
            st.integers(),
            st.floats(allow_nan=True),
            st.text(),
            st.binary(),
            st.lists(st.integers()),
            st.dictionaries(st.text(), st.integers()),
        ),
        auxiliary=st.lists(st.integers() | st.text(), max_size=3),
    )
    def test_never_raises(self, primary: object, auxiliary: list[object]) -> None:
        """Any input yields a well-formed record."""
        record = normalize(LogLevel.INFO, primary, *auxiliary)
        assert isinstance(record, LogRecord)
        assert isinstance(record.message, str)
        assert record.metadata == (auxiliary or None)
