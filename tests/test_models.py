import json

import pytest
from pydantic import ValidationError

from pdf_toolkit.models import RedactionRule, parse_redaction_rules

VALID = {"page": 1, "x": 0.1, "y": 0.2, "width": 0.6, "height": 0.1}


def with_(**changes):
    return {**VALID, **changes}


class TestRedactionRule:

    def test_valid_rule(self):
        rule = RedactionRule.model_validate(VALID)
        assert rule.page == 1
        assert rule.width == 0.6

    def test_integer_coordinates_are_numbers(self):
        rule = RedactionRule.model_validate(with_(x=0, y=0, width=1, height=1))
        assert rule.x == 0.0
        assert rule.height == 1.0

    @pytest.mark.parametrize("changes", [
        {"page": 0},
        {"page": -2},
        {"x": -0.01},
        {"x": 1.01},
        {"y": 2},
        {"width": 0},
        {"width": 1.5},
        {"height": 0},
        {"height": -0.1},
    ])
    def test_out_of_range(self, changes):
        with pytest.raises(ValidationError):
            RedactionRule.model_validate(with_(**changes))

    @pytest.mark.parametrize("changes", [
        {"x": "0.1"},
        {"page": "1"},
        {"width": True},
        {"page": True},
        {"x": None},
        {"y": float("nan")},
        {"height": float("inf")},
    ])
    def test_non_numbers_rejected(self, changes):
        with pytest.raises(ValidationError):
            RedactionRule.model_validate(with_(**changes))

    def test_missing_field(self):
        data = dict(VALID)
        del data["height"]
        with pytest.raises(ValidationError):
            RedactionRule.model_validate(data)


class TestParseRedactionRules:

    def test_all_valid(self):
        rules = parse_redaction_rules(json.dumps([VALID, with_(page=2)]))
        assert [r.page for r in rules] == [1, 2]

    def test_invalid_entries_dropped_silently(self):
        raw = json.dumps([VALID, with_(width=0), "junk", 3, None, with_(page=3)])
        rules = parse_redaction_rules(raw)
        assert [r.page for r in rules] == [1, 3]

    def test_nan_literal_dropped(self):
        raw = '[{"page": 1, "x": NaN, "y": 0, "width": 0.5, "height": 0.5}]'
        assert parse_redaction_rules(raw) == []

    @pytest.mark.parametrize("raw", [None, "", "[]", "not json", "{}", '{"page": 1}', "42"])
    def test_no_rules(self, raw):
        assert parse_redaction_rules(raw) == []

    def test_out_of_range_page_is_still_a_valid_rule(self):
        # skipping pages beyond the document happens later, against the real page count
        rules = parse_redaction_rules(json.dumps([with_(page=99)]))
        assert len(rules) == 1
