from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class TermMatch:
    index: int
    text: str


class SearchMatcher:
    """Compiled search term.

    Literal terms are escaped. A regex that fails to compile falls back to a
    literal search of the same text.
    """

    def __init__(self, term: str, use_regex: bool = False, case_sensitive: bool = False):
        if not term:
            raise ValueError("Search term cannot be empty")
        self.term = term
        self.use_regex = use_regex
        self.case_sensitive = case_sensitive
        self.fell_back_to_literal = False

        flags = 0 if case_sensitive else re.IGNORECASE
        pattern = term if use_regex else re.escape(term)
        try:
            self._rx = re.compile(pattern, flags)
        except re.error:
            self.fell_back_to_literal = True
            self._rx = re.compile(re.escape(term), flags)

    @property
    def pattern(self) -> str:
        return self._rx.pattern

    def iter_matches(self, line: str) -> Iterator[TermMatch]:
        # finditer steps past zero-width matches on its own
        for m in self._rx.finditer(line):
            yield TermMatch(index=m.start(), text=m.group(0))

    def matches(self, text: str) -> bool:
        return self._rx.search(text) is not None
