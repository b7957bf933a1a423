import pytest

from app.errors import CompileError
from app.rules import DERIVED_FIELD, SOURCE_FIELD
from app.sanitize import compile_matcher, sanitize


def cleaned(records, terms):
    return [row[DERIVED_FIELD] for row in sanitize(records, terms, SOURCE_FIELD, DERIVED_FIELD)]


def test_korean_scenario_keeps_inner_spacing():
    records = [{SOURCE_FIELD: "테스트 상품 샘플입니다"}]
    assert cleaned(records, {"테스트", "샘플"}) == ["상품 입니다"]


def test_removal_is_case_insensitive():
    records = [{SOURCE_FIELD: "xABCx"}, {SOURCE_FIELD: "aBc-abc"}, {SOURCE_FIELD: "AbC"}]
    assert cleaned(records, {"abc"}) == ["xx", "-", ""]


def test_matches_inside_words():
    assert cleaned([{SOURCE_FIELD: "superfreeshipping"}], {"free"}) == ["supershipping"]


def test_inner_double_spaces_are_not_collapsed():
    assert cleaned([{SOURCE_FIELD: "  red  BAD  shoe  "}], {"bad"}) == ["red    shoe"]


@pytest.mark.parametrize("term", [".", "*", "+", "(", ")", "[", "]", "$", "^", "|", "\\", "{", "}", "?"])
def test_metacharacters_are_literal(term):
    value = f"x{term}y"
    assert cleaned([{SOURCE_FIELD: value}], {term}) == ["xy"]


def test_dot_term_does_not_match_any_character():
    records = [{SOURCE_FIELD: "axb a.b"}]
    assert cleaned(records, {"a.b"}) == ["axb"]


def test_empty_term_set_copies_trimmed_source():
    records = [{SOURCE_FIELD: "  keep me  "}, {SOURCE_FIELD: ""}, {"other": "x"}]
    assert cleaned(records, set()) == ["keep me", "", ""]


def test_empty_matcher_matches_nothing():
    matcher = compile_matcher(frozenset())
    assert matcher.search("anything at all") is None
    assert matcher.search("") is None


def test_missing_source_field_yields_empty_string():
    out = sanitize([{"code": "1"}, {SOURCE_FIELD: None}], {"a"}, SOURCE_FIELD, DERIVED_FIELD)
    assert out[0] == {"code": "1", DERIVED_FIELD: ""}
    assert out[1][DERIVED_FIELD] == ""


def test_order_and_other_fields_preserved():
    records = [
        {"code": str(i), SOURCE_FIELD: f"item {i} SALE", "note": f"n{i}"}
        for i in range(20)
    ]
    out = sanitize(records, {"sale"}, SOURCE_FIELD, DERIVED_FIELD)

    assert len(out) == len(records)
    for before, after in zip(records, out):
        assert set(after) == set(before) | {DERIVED_FIELD}
        for name, value in before.items():
            assert after[name] == value
        assert after[DERIVED_FIELD] == before[SOURCE_FIELD][: -len(" SALE")]


def test_input_records_are_not_mutated():
    record = {SOURCE_FIELD: "bad thing", DERIVED_FIELD: "stale"}
    out = sanitize([record], {"bad"}, SOURCE_FIELD, DERIVED_FIELD)

    assert record == {SOURCE_FIELD: "bad thing", DERIVED_FIELD: "stale"}
    assert out[0] is not record
    assert out[0][DERIVED_FIELD] == "thing"


def test_resanitizing_output_is_idempotent_for_disjoint_terms():
    terms = {"foo", "bar", "금지"}
    records = [{SOURCE_FIELD: v} for v in ["a foo b BAR c", "금지어 상품", "plain", " fooxbar "]]
    first = sanitize(records, terms, SOURCE_FIELD, DERIVED_FIELD)
    second = sanitize(first, terms, DERIVED_FIELD, DERIVED_FIELD)
    assert [r[DERIVED_FIELD] for r in second] == [r[DERIVED_FIELD] for r in first]


def test_terms_are_removed_simultaneously():
    # Iterative removal of "b" first would join "a" + "c" into a new "ac" match.
    assert cleaned([{SOURCE_FIELD: "abc"}], {"b", "ac"}) == ["ac"]


def test_longest_overlapping_term_wins():
    assert cleaned([{SOURCE_FIELD: "sample set"}], {"sam", "sample"}) == ["set"]


def test_accepts_precompiled_matcher():
    matcher = compile_matcher({"x"})
    assert cleaned([{SOURCE_FIELD: "axb"}], matcher) == ["ab"]


def test_compile_error_is_distinct(monkeypatch):
    import re

    def broken(*args, **kwargs):
        raise re.error("boom")

    monkeypatch.setattr("app.sanitize.re.compile", broken)
    with pytest.raises(CompileError):
        compile_matcher({"a"})
