from __future__ import annotations

from usagehunter.config import SearchConfiguration
from usagehunter.input_sources import make_item
from usagehunter.models import UsageCategory
from usagehunter.scanner import Scanner
from usagehunter.selector import SearchMatcher


def make_scanner(logger, term="fetchUser", **config):
    return Scanner(SearchMatcher(term), SearchConfiguration(**config), logger)


class TestSearchText:
    def test_categories_per_line(self, logger):
        scanner = make_scanner(logger)
        text = "import { fetchUser } from './api';\nconst u = fetchUser(1);\n// fetchUser docs\n"
        found = scanner.search_text(text, "typescript", file="a.ts")
        assert [m.category for m in found] == [
            UsageCategory.IMPORT,
            UsageCategory.FUNCTION_DEFINITION,
            UsageCategory.COMMENT,
        ]
        assert [m.line for m in found] == [0, 1, 2]
        assert found[0].context.imported_items == ["fetchUser"]
        assert found[0].relative_path == "a.ts"

    def test_several_matches_on_one_line(self, logger):
        scanner = make_scanner(logger, term="x")
        found = scanner.search_text("x.y = x;", "javascript")
        assert [m.column for m in found] == [0, 6]
        assert found[0].category == UsageCategory.PROPERTY_ACCESS

    def test_comment_filter(self, logger):
        scanner = make_scanner(logger, include_comments=False)
        stats = {"lines": 0, "matches": 0, "filtered": 0, "skipped": 0, "failed": 0}
        found = scanner.search_text("// fetchUser\nfetchUser;\n", "javascript", stats=stats)
        assert len(found) == 1
        assert found[0].line == 1
        assert stats["filtered"] == 1
        assert stats["matches"] == 1
        assert stats["lines"] == 3

    def test_strings_dropped_by_default(self, logger):
        scanner = make_scanner(logger)
        assert scanner.search_text("log('fetchUser')", "javascript") == []

    def test_strings_kept_on_request(self, logger):
        scanner = make_scanner(logger, include_string_literals=True)
        found = scanner.search_text("log('fetchUser')", "javascript")
        assert [m.category for m in found] == [UsageCategory.STRING_LITERAL]

    def test_case_insensitive_match_uses_matched_text(self, logger):
        scanner = make_scanner(logger, term="FETCHUSER")
        found = scanner.search_text("fetchuser(1)", "javascript")
        assert found[0].range.end_column == 9
        assert found[0].category == UsageCategory.FUNCTION_DEFINITION
        assert found[0].search_term == "FETCHUSER"

    def test_crlf_lines(self, logger):
        scanner = make_scanner(logger)
        found = scanner.search_text("a\r\nfetchUser = 1\r\n", "javascript")
        assert found[0].line == 1
        assert found[0].line_text == "fetchUser = 1"
        assert found[0].category == UsageCategory.VARIABLE_DECLARATION


class TestScanItem:
    def test_workspace_file(self, logger, workspace):
        scanner = make_scanner(logger)
        scan = scanner.scan_item(make_item(workspace / "src" / "client.ts", root=workspace))
        assert [m.category for m in scan.matches] == [UsageCategory.EXPORT, UsageCategory.COMMENT]
        assert scan.stats["filtered"] == 1
        assert scan.item.relative_path == "src/client.ts"
        assert scan.matches[0].language_id == "typescript"

    def test_too_large_skipped(self, logger, log_buffer, workspace):
        scanner = make_scanner(logger, max_file_bytes=10)
        scan = scanner.scan_item(make_item(workspace / "src" / "api.ts", root=workspace))
        assert scan.matches == []
        assert scan.stats["skipped"] == 1
        assert "Skipping too-large file" in log_buffer.getvalue()

    def test_binary_skipped(self, logger, log_buffer, tmp_path):
        path = tmp_path / "blob.ts"
        path.write_bytes(b"fetchUser\x00\x01\x02")
        scan = make_scanner(logger).scan_item(make_item(path, root=tmp_path))
        assert scan.matches == []
        assert scan.stats["skipped"] == 1
        assert "Skipping binary file" in log_buffer.getvalue()

    def test_unreadable_counts_as_failed(self, logger, tmp_path):
        path = tmp_path / "gone.ts"
        path.write_text("fetchUser", encoding="utf-8")
        item = make_item(path, root=tmp_path)
        path.unlink()
        scan = make_scanner(logger).scan_item(item)
        assert scan.stats["failed"] == 1
        assert logger.warnings == 1
