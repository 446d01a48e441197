from __future__ import annotations

import pytest

from usagehunter.models import CATEGORY_ORDER, MatchContext, MatchRange, SearchMatch, UsageCategory


class TestUsageCategory:
    def test_fourteen_categories(self):
        assert len(UsageCategory) == 14

    def test_order_follows_priority(self):
        assert CATEGORY_ORDER[0] is UsageCategory.IMPORT
        assert CATEGORY_ORDER[-1] is UsageCategory.OTHER
        assert [c.priority for c in CATEGORY_ORDER] == list(range(1, 15))

    def test_info(self):
        assert UsageCategory.COMPONENT_USAGE.info.label == "Component Usage"

    @pytest.mark.parametrize("raw", ["function-call", "FUNCTION_CALL", "function call", " Function-Call "])
    def test_parse(self, raw):
        assert UsageCategory.parse(raw) is UsageCategory.FUNCTION_CALL

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown category"):
            UsageCategory.parse("lambda")


class TestSearchMatch:
    def test_to_dict(self):
        match = SearchMatch(
            search_term="x",
            file="/p/a.py",
            relative_path="a.py",
            line=2,
            column=4,
            line_text="    x = 1  ",
            category=UsageCategory.VARIABLE_DECLARATION,
            context=MatchContext(is_in_comment=False, is_in_string=False, imported_items=[]),
            range=MatchRange(2, 4, 2, 5),
            language_id="python",
        )
        assert match.to_dict() == {
            "file": "a.py",
            "line": 3,
            "column": 5,
            "lineText": "x = 1",
            "category": "variable-declaration",
        }
        assert match.to_dict(include_context=True)["context"]["imported_items"] == []
