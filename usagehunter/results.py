from __future__ import annotations

import datetime as dt
import json
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .console import RichLogger
from .models import CATEGORY_ORDER, SearchMatch, UsageCategory
from .text_utils import sanitize_file_name

SORT_MODES = ("file", "line", "relevance")
EXPORT_FORMATS = {".json": "json", ".md": "markdown", ".markdown": "markdown", ".txt": "markdown"}


def empty_categories() -> Dict[UsageCategory, List[SearchMatch]]:
    return {category: [] for category in CATEGORY_ORDER}


@dataclass
class CategorizedResults:
    search_term: str
    total_matches: int = 0
    categories: Dict[UsageCategory, List[SearchMatch]] = field(default_factory=empty_categories)
    searched_files: int = 0
    search_time_ms: int = 0

    def non_empty(self) -> Dict[UsageCategory, List[SearchMatch]]:
        return {c: m for c, m in self.categories.items() if m}


class ResultStore:
    """Accumulates matches per category, capped per category."""

    def __init__(self, search_term: str, max_results_per_category: int):
        self._lock = threading.Lock()
        self.search_term = search_term
        self.max_results_per_category = max(1, max_results_per_category)
        self.categories = empty_categories()
        self.total_matches = 0
        self.searched_files = 0
        self.dropped = 0

    def add_file(self, matches: Iterable[SearchMatch]) -> int:
        """Merge one file's matches; returns how many were kept."""
        added = 0
        with self._lock:
            self.searched_files += 1
            for match in matches:
                bucket = self.categories[match.category]
                if len(bucket) >= self.max_results_per_category:
                    self.dropped += 1
                    continue
                bucket.append(match)
                added += 1
            self.total_matches += added
        return added

    def build(self, search_time_ms: int) -> CategorizedResults:
        with self._lock:
            return CategorizedResults(
                search_term=self.search_term,
                total_matches=self.total_matches,
                categories={c: list(m) for c, m in self.categories.items()},
                searched_files=self.searched_files,
                search_time_ms=search_time_ms,
            )


def get_search_stats(results: CategorizedResults) -> Dict[str, int]:
    return {category.value: len(matches) for category, matches in results.non_empty().items()}


def filter_results_by_category(
    results: CategorizedResults, categories: Iterable[UsageCategory]
) -> CategorizedResults:
    wanted = set(categories)
    filtered = {c: list(m) for c, m in results.categories.items() if c in wanted and m}
    return replace(
        results,
        categories=filtered,
        total_matches=sum(len(m) for m in filtered.values()),
    )


def _file_line_key(match: SearchMatch):
    return (match.relative_path.lower(), match.relative_path, match.line, match.column)


def sort_results(results: CategorizedResults, sort_by: str = "file") -> CategorizedResults:
    if sort_by not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {sort_by}")
    sorted_categories: Dict[UsageCategory, List[SearchMatch]] = {}
    for category, matches in results.categories.items():
        if sort_by == "line":
            ordered = sorted(matches, key=lambda m: m.line)
        else:
            # relevance currently orders like file
            ordered = sorted(matches, key=_file_line_key)
        sorted_categories[category] = ordered
    return replace(results, categories=sorted_categories)


def category_heading(category: UsageCategory) -> str:
    return category.value.upper().replace("-", " ")


def to_json(results: CategorizedResults, generated_at: Optional[str] = None, include_context: bool = False) -> Dict[str, object]:
    return {
        "searchTerm": results.search_term,
        "totalMatches": results.total_matches,
        "searchedFiles": results.searched_files,
        "searchTime": results.search_time_ms,
        "timestamp": generated_at or dt.datetime.now().isoformat(timespec="seconds"),
        "categories": [
            {
                "category": category.value,
                "count": len(matches),
                "matches": [m.to_dict(include_context=include_context) for m in matches],
            }
            for category, matches in results.categories.items()
        ],
    }


def to_markdown(results: CategorizedResults, generated_at: Optional[str] = None) -> str:
    stamp = generated_at or dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    lines = [
        f'# Search Results for "{results.search_term}"',
        "",
        f"**Total Matches:** {results.total_matches}",
        f"**Files Searched:** {results.searched_files}",
        f"**Search Time:** {results.search_time_ms}ms",
        f"**Generated:** {stamp}",
        "",
    ]
    for category, matches in results.non_empty().items():
        lines.append(f"## {category_heading(category)} ({len(matches)})")
        lines.append("")
        for match in matches:
            lines.append(f"- **{match.relative_path}:{match.line + 1}** - {match.line_text.strip()}")
        lines.append("")
    return "\n".join(lines)


def default_export_path(directory: Path, search_term: str, fmt: str = "md") -> Path:
    stamp = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    return directory / f"search-results-{sanitize_file_name(search_term)}-{stamp}.{fmt}"


class ResultWriter:
    def __init__(self, logger: RichLogger, include_context: bool = False):
        self.logger = logger
        self.include_context = include_context

    def write(self, results: CategorizedResults, path: Path) -> Path:
        fmt = EXPORT_FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise ValueError(f"Unsupported export format '{path.suffix}' (use .md, .json or .txt)")
        path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "json":
            payload = to_json(results, include_context=self.include_context)
            content = json.dumps(payload, indent=2, ensure_ascii=False)
        else:
            content = to_markdown(results)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(content)
        tmp_path.replace(path)
        self.logger.done(f"Search results exported to {path}")
        return path
