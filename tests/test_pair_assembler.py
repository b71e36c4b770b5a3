"""Tests for ryakusyou.pair_assembler."""
import pytest

from ryakusyou.law_types import (
    Clause,
    ClauseLocator,
    DependencyToken,
    Ryakusyou,
    SentenceUnit,
)
from ryakusyou.pair_assembler import (
    assemble_pair,
    find_pairs,
    find_ryakusyou,
    is_paren_balanced,
)
from ryakusyou.paren_segmenter import segment


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", True),
        ("甲（乙）丙", True),
        ("甲（乙（丙）", False),
        ("甲）乙（", True),
        ("甲）", False),
    ],
)
def test_is_paren_balanced(text: str, expected: bool) -> None:
    assert is_paren_balanced(text) is expected


class TestAssemblePair:
    def test_alias_quote_takes_span_as_formal_term(self) -> None:
        pair = assemble_pair("以下「基本方針」という。", "建築物の耐震改修の促進に関する基本方針")
        assert pair == Ryakusyou(alias="基本方針", formal_term="建築物の耐震改修の促進に関する基本方針")

    def test_formal_term_takes_span_as_alias(self) -> None:
        pair = assemble_pair("第二条第一項に規定する事業者をいう。", "特定事業者")
        assert pair == Ryakusyou(alias="特定事業者", formal_term="第二条第一項に規定する事業者")

    def test_non_definitional_clause(self) -> None:
        assert assemble_pair("第三条", "甲") is None

    def test_unbalanced_span_rejected(self) -> None:
        assert assemble_pair("以下「法」という。", "甲（乙") is None
        assert assemble_pair("甲をいう。", "乙）") is None

    def test_balanced_span_with_parens_accepted(self) -> None:
        pair = assemble_pair("以下「法」という。", "甲（乙）")
        assert pair == Ryakusyou(alias="法", formal_term="甲（乙）")


# 特定事業者（第二条第一項に規定する事業者をいう。）は、届け出る。
TOKUTEI_RAW = "特定事業者（第二条第一項に規定する事業者をいう。）は、届け出る。"
TOKUTEI_TOKENS = {
    0: DependencyToken(start=0, end=7, head_start=7, head_end=12, text="特定事業者は、"),
    7: DependencyToken(start=7, end=12, text="届け出る。"),
}


def _unit(raw: str, unit_id: int = 1) -> SentenceUnit:
    (result,) = segment(raw)
    return SentenceUnit(
        unit_id=unit_id,
        law_number="平成七年法律第百二十三号",
        clause_locator=ClauseLocator(article="第五条", paragraph="1"),
        raw_text=result.raw_text,
        remove_paren_text=result.remove_paren_text,
        clauses=result.clauses,
    )


class TestFindRyakusyou:
    def test_formal_term_sentence(self) -> None:
        unit = _unit(TOKUTEI_RAW)
        assert unit.remove_paren_text == "特定事業者は、届け出る。"
        info = find_ryakusyou(TOKUTEI_TOKENS, unit)
        assert info.law_number == "平成七年法律第百二十三号"
        assert info.clause_locator == ClauseLocator(article="第五条", paragraph="1")
        assert info.pairs == (
            Ryakusyou(alias="特定事業者", formal_term="第二条第一項に規定する事業者"),
        )

    def test_missing_anchor_skips_clause_only(self) -> None:
        pairs = find_pairs(
            TOKUTEI_TOKENS,
            "特定事業者は、届け出る。",
            [
                Clause(offset=0, raw="以下「甲」という。"),
                Clause(offset=5, raw="第二条第一項に規定する事業者をいう。"),
            ],
        )
        assert pairs == [Ryakusyou(alias="特定事業者", formal_term="第二条第一項に規定する事業者")]

    def test_duplicates_are_kept(self) -> None:
        clause = Clause(offset=5, raw="以下「甲」という。")
        pairs = find_pairs(TOKUTEI_TOKENS, "特定事業者は、届け出る。", [clause, clause])
        assert pairs == [Ryakusyou(alias="甲", formal_term="特定事業者")] * 2

    def test_empty_token_map_yields_no_pairs(self) -> None:
        info = find_ryakusyou({}, _unit(TOKUTEI_RAW))
        assert info.pairs == ()

    def test_serialization(self) -> None:
        info = find_ryakusyou(TOKUTEI_TOKENS, _unit(TOKUTEI_RAW))
        assert info.to_dict() == {
            "law_number": "平成七年法律第百二十三号",
            "clause_locator": {
                "article": "第五条",
                "paragraph": "1",
                "item": None,
                "sub_item": None,
                "suppl_provision_title": None,
            },
            "pairs": [{"alias": "特定事業者", "formal_term": "第二条第一項に規定する事業者"}],
        }
