"""Per-match context: comment/string detection and enclosing constructs.

Everything here is a line-oriented heuristic. Comments are detected without
tokenizing the line, so a ``//`` inside an earlier string literal still
counts as a comment, and only one ``/* ... */`` span per line is considered.
String detection is a quote parity count, not a quote-matching state machine.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .models import MatchContext
from .patterns import (
    ARROW_DECL_RX,
    CLASS_DECL_RX,
    DEFAULT_IMPORT_RX,
    FUNCTION_DECL_RX,
    IMPORT_RXS,
    METHOD_DECL_RX,
    METHOD_KEYWORD_BLACKLIST,
    NAMED_IMPORT_RX,
    NAMESPACE_IMPORT_RX,
    any_match,
)

SURROUNDING_RADIUS = 2
QUOTE_CHARS = ("'", '"', "`")


def _clamp_column(line: str, column: int) -> int:
    return max(0, min(column, len(line)))


def is_import_statement(trimmed_line: str) -> bool:
    return any_match(IMPORT_RXS, trimmed_line)


def is_in_comment(line: str, column: int) -> bool:
    column = _clamp_column(line, column)

    line_comment = line.find("//")
    if line_comment != -1 and line_comment <= column:
        return True

    if "/*" in line[:column] and "*/" in line[column:]:
        return True

    # Python and shell comments
    if line.strip().startswith("#"):
        return True

    return False


def is_in_string(line: str, column: int) -> bool:
    before = line[: _clamp_column(line, column)]
    counts = dict.fromkeys(QUOTE_CHARS, 0)
    for i, ch in enumerate(before):
        if ch not in counts:
            continue
        if i > 0 and before[i - 1] == "\\":
            continue
        counts[ch] += 1
    return any(n % 2 == 1 for n in counts.values())


def _scan_start(all_lines: Sequence[str], line_number: int) -> int:
    return min(line_number, len(all_lines) - 1)


def get_function_context(all_lines: Sequence[str], line_number: int) -> Optional[str]:
    for i in range(_scan_start(all_lines, line_number), -1, -1):
        line = all_lines[i].strip()

        m = FUNCTION_DECL_RX.match(line)
        if m:
            return m.group(2)

        m = ARROW_DECL_RX.match(line)
        if m:
            return m.group(2)

        m = METHOD_DECL_RX.match(line)
        if m and not any(keyword in line for keyword in METHOD_KEYWORD_BLACKLIST):
            return m.group(1)

    return None


def get_class_context(all_lines: Sequence[str], line_number: int) -> Optional[str]:
    for i in range(_scan_start(all_lines, line_number), -1, -1):
        m = CLASS_DECL_RX.match(all_lines[i].strip())
        if m:
            return m.group(3)
    return None


def extract_imported_items(line: str) -> List[str]:
    """Identifiers bound by a JS/TS import line.

    Named braces win over default and namespace forms.
    """
    m = NAMED_IMPORT_RX.search(line)
    if m:
        return [item.strip() for item in m.group(1).split(",")]

    m = DEFAULT_IMPORT_RX.search(line)
    if m:
        return [m.group(1)]

    m = NAMESPACE_IMPORT_RX.search(line)
    if m:
        return [m.group(1)]

    return []


def get_surrounding_lines(
    all_lines: Sequence[str], line_number: int, radius: int = SURROUNDING_RADIUS
) -> List[str]:
    start = max(0, line_number - radius)
    end = min(len(all_lines), line_number + radius + 1)
    return list(all_lines[start:end])


def get_match_context(
    line_text: str,
    column_index: int,
    all_lines: Sequence[str],
    line_number: int,
) -> MatchContext:
    context = MatchContext(
        is_in_comment=is_in_comment(line_text, column_index),
        is_in_string=is_in_string(line_text, column_index),
        function_name=get_function_context(all_lines, line_number),
        class_name=get_class_context(all_lines, line_number),
        surrounding_lines=get_surrounding_lines(all_lines, line_number),
    )
    if is_import_statement(line_text.strip()):
        context.imported_items = extract_imported_items(line_text)
    return context
