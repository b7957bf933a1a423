from app.codec import Table, decode_table
from app.terms import build_term_set


def test_uses_first_column_whatever_its_name():
    table = decode_table("anything,second\nfoo,ignored\nbar,also ignored\n".encode("utf-8"))
    assert build_term_set(table) == {"foo", "bar"}


def test_dedup_after_trimming():
    table = Table(fields=("금지어",), records=({"금지어": "foo"}, {"금지어": " foo "}))
    assert build_term_set(table) == {"foo"}
    assert len(build_term_set(table)) == 1


def test_blank_and_missing_values_are_skipped():
    table = Table(
        fields=("w", "other"),
        records=({"w": "   "}, {"other": "x"}, {"w": ""}, {"w": " 샘플"}),
    )
    assert build_term_set(table) == {"샘플"}


def test_empty_table_gives_empty_set():
    assert build_term_set(Table()) == frozenset()
    assert build_term_set(decode_table(b"")) == frozenset()
    assert build_term_set(decode_table("금지어\n".encode("utf-8"))) == frozenset()


def test_leading_blank_line_does_not_hide_terms():
    table = decode_table("\n금지어\n테스트\n샘플\n".encode("utf-8"), "f.csv")
    assert build_term_set(table) == {"테스트", "샘플"}
