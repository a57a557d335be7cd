"""Tests for time unit conversion and timing-intent classification."""

import math

import pytest
from pydantic import ValidationError

from cliptiming.exceptions import InvalidTimingValueError
from cliptiming.schemas.clip import ClipConfig
from cliptiming.schemas.timing import AliasRef, ResolvedTiming, TimingIntent, TimingKind
from cliptiming.utils.timing import (
    classify_timing_value,
    intent_value_to_document,
    parse_alias_reference,
    parse_timing_intent,
    to_ms,
    to_sec,
)


class TestConversions:
    """Seconds <-> milliseconds conversions are total."""

    def test_to_ms_rounds_to_millisecond(self):
        assert to_ms(1.5) == 1500
        assert to_ms(0.0004) == 0
        assert to_ms(2.0006) == 2001

    def test_to_ms_non_finite_is_zero(self):
        assert to_ms(math.nan) == 0
        assert to_ms(math.inf) == 0
        assert to_ms(-math.inf) == 0

    def test_to_sec(self):
        assert to_sec(1500) == 1.5
        assert to_sec(0) == 0.0
        assert to_sec(math.nan) == 0.0

    def test_round_trip_at_ms_granularity(self):
        for ms in (0, 1, 999, 3000, 123456):
            assert to_ms(to_sec(ms)) == ms


class TestClassification:
    """Every accepted value classifies as exactly one of four kinds."""

    @pytest.mark.parametrize(
        "value,field,expected",
        [
            (0, "start", TimingKind.LITERAL),
            (2.5, "length", TimingKind.LITERAL),
            ("auto", "start", TimingKind.AUTO),
            ("auto", "length", TimingKind.AUTO),
            ("end", "length", TimingKind.END),
            ("alias://hero", "start", TimingKind.ALIAS),
            (AliasRef(name="hero", field="length"), "length", TimingKind.ALIAS),
        ],
    )
    def test_classify(self, value, field, expected):
        assert classify_timing_value(value, field) is expected

    @pytest.mark.parametrize(
        "value,field",
        [
            ("end", "start"),
            (-1, "start"),
            (math.nan, "length"),
            (True, "length"),
            (None, "length"),
            ("alias://has space", "start"),
            ("later", "length"),
        ],
    )
    def test_invalid_values_raise(self, value, field):
        with pytest.raises(InvalidTimingValueError):
            classify_timing_value(value, field)

    def test_parse_alias_reference(self):
        assert parse_alias_reference("alias://intro_1") == "intro_1"
        assert parse_alias_reference("alias://") is None
        assert parse_alias_reference(3) is None


class TestTimingIntent:
    """Parsing document values into TimingIntent."""

    def test_parse_literal_and_alias(self):
        intent = parse_timing_intent(2, "alias://hero")

        assert intent.start == 2.0
        assert intent.length == AliasRef(name="hero", field="length")
        assert intent.has_alias
        assert not intent.is_smart

    def test_parse_smart(self):
        intent = parse_timing_intent("auto", "end")

        assert intent.is_smart
        assert not intent.has_alias

    def test_document_form_round_trips(self):
        intent = parse_timing_intent("alias://hero", "auto")

        assert intent_value_to_document(intent.start) == "alias://hero"
        assert intent_value_to_document(intent.length) == "auto"

    def test_intent_is_immutable(self):
        intent = TimingIntent(start=1.0, length=2.0)

        with pytest.raises(ValidationError):
            intent.start = 3.0

    def test_resolved_end(self):
        assert ResolvedTiming(start=1000, length=500).end == 1500


class TestClipConfigValidation:
    """Document-level validation of timing fields."""

    def test_end_start_rejected(self):
        with pytest.raises(ValidationError):
            ClipConfig(asset={"type": "text", "text": "x"}, start="end", length=1)

    def test_negative_length_rejected(self):
        with pytest.raises(ValidationError):
            ClipConfig(asset={"type": "text", "text": "x"}, start=0, length=-2)

    def test_unknown_fields_preserved(self):
        config = ClipConfig(
            asset={"type": "video", "src": "a.mp4", "volume": 0.5},
            start=0,
            length="auto",
            fit="crop",
        )

        dumped = config.model_dump(mode="json", exclude_none=True)
        assert dumped["fit"] == "crop"
        assert dumped["asset"]["volume"] == 0.5
