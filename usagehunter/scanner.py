from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .classifier import categorize_match
from .config import SearchConfiguration
from .console import RichLogger
from .context import get_match_context
from .input_sources import InputItem, is_likely_binary, split_lines
from .models import MatchRange, SearchMatch
from .selector import SearchMatcher
from .text_utils import format_file_size


@dataclass
class FileScan:
    item: InputItem
    matches: List[SearchMatch] = field(default_factory=list)
    stats: Dict[str, int] = field(
        default_factory=lambda: {"lines": 0, "matches": 0, "filtered": 0, "skipped": 0, "failed": 0}
    )


class Scanner:
    def __init__(
        self,
        matcher: SearchMatcher,
        config: SearchConfiguration,
        logger: RichLogger,
    ):
        self.matcher = matcher
        self.config = config
        self.logger = logger
        self.max_file_bytes = max(1, config.max_file_bytes)

    @property
    def search_term(self) -> str:
        return self.matcher.term

    def analyze_match(
        self,
        line_text: str,
        column_index: int,
        matched_text: str,
        all_lines: Sequence[str],
        line_number: int,
        language_id: str,
        file: str,
        relative_path: str,
    ) -> Optional[SearchMatch]:
        context = get_match_context(line_text, column_index, all_lines, line_number)

        if not self.config.include_comments and context.is_in_comment:
            return None
        if not self.config.include_string_literals and context.is_in_string:
            return None

        category = categorize_match(
            line_text,
            column_index,
            matched_text,
            context,
            all_lines,
            line_number,
            language_id,
        )
        return SearchMatch(
            search_term=self.search_term,
            file=file,
            relative_path=relative_path,
            line=line_number,
            column=column_index,
            line_text=line_text,
            category=category,
            context=context,
            range=MatchRange(line_number, column_index, line_number, column_index + len(matched_text)),
            language_id=language_id,
        )

    def search_text(
        self,
        text: str,
        language_id: str,
        file: str = "<text>",
        relative_path: Optional[str] = None,
        stats: Optional[Dict[str, int]] = None,
    ) -> List[SearchMatch]:
        """Search one document already held in memory."""
        rel = relative_path or file
        lines = split_lines(text)
        found: List[SearchMatch] = []
        for line_number, line in enumerate(lines):
            for term_match in self.matcher.iter_matches(line):
                record = self.analyze_match(
                    line,
                    term_match.index,
                    term_match.text,
                    lines,
                    line_number,
                    language_id,
                    file,
                    rel,
                )
                if record is None:
                    if stats is not None:
                        stats["filtered"] += 1
                    continue
                found.append(record)
        if stats is not None:
            stats["lines"] += len(lines)
            stats["matches"] += len(found)
        return found

    def scan_item(self, item: InputItem) -> FileScan:
        scan = FileScan(item=item)

        if item.size_bytes > self.max_file_bytes:
            self.logger.warn(
                f"Skipping too-large file ({format_file_size(item.size_bytes)}): {item.relative_path}"
            )
            scan.stats["skipped"] += 1
            return scan

        try:
            if is_likely_binary(item.sample()):
                self.logger.debug(f"Skipping binary file: {item.relative_path}")
                scan.stats["skipped"] += 1
                return scan
            text = item.read_text()
        except OSError as e:
            self.logger.warn(f"Failed to search file {item.relative_path}: {e}")
            scan.stats["failed"] += 1
            return scan

        scan.matches = self.search_text(
            text,
            item.language_id,
            file=str(item.file_path),
            relative_path=item.relative_path,
            stats=scan.stats,
        )
        if scan.matches:
            self.logger.debug(f"{item.relative_path}: {len(scan.matches)} matches")
        return scan
