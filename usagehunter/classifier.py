"""Usage categorization of a single search match.

``categorize_match`` walks ``CLASSIFICATION_CHAIN`` in order and returns the
category of the first predicate that holds. The order is the behaviour:
the ``(`` check inside the function-definition test makes the later
function-call test unreachable for most lines, and both stay where they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from .context import is_import_statement
from .languages import (
    COMPONENT_LANGUAGES,
    TYPESCRIPT_LANGUAGES,
    declaration_patterns,
    function_patterns,
)
from .models import MatchContext, UsageCategory
from .patterns import (
    BARE_DECLARATION_PREFIX_RX,
    CLASS_RXS,
    EXPORT_RXS,
    INTERFACE_RXS,
    TYPE_RXS,
    any_match,
    component_tag_rxs,
)


@dataclass(frozen=True)
class MatchShape:
    """The slices of a line every predicate looks at."""

    line: str
    trimmed: str
    before: str
    after: str
    search_term: str
    context: MatchContext
    language_id: str

    @classmethod
    def build(
        cls,
        line_text: str,
        column_index: int,
        search_term: str,
        context: MatchContext,
        language_id: str,
    ) -> "MatchShape":
        column = max(0, column_index)
        return cls(
            line=line_text,
            trimmed=line_text.strip(),
            before=line_text[:column].strip(),
            after=line_text[column + len(search_term):].strip(),
            search_term=search_term,
            context=context,
            language_id=language_id,
        )


def in_comment(shape: MatchShape) -> bool:
    return shape.context.is_in_comment


def in_string(shape: MatchShape) -> bool:
    return shape.context.is_in_string


def is_import(shape: MatchShape) -> bool:
    return is_import_statement(shape.trimmed)


def is_export(shape: MatchShape) -> bool:
    return any_match(EXPORT_RXS, shape.trimmed)


def is_function_definition(shape: MatchShape) -> bool:
    # A term followed by "(" reads as a signature before any language rule.
    if shape.after.startswith("("):
        return True
    return any_match(function_patterns(shape.language_id), shape.trimmed)


def is_variable_declaration(shape: MatchShape) -> bool:
    if shape.after.startswith("=") or shape.after.startswith(":"):
        return True
    return any_match(declaration_patterns(shape.language_id), shape.trimmed)


def is_function_call(shape: MatchShape) -> bool:
    return shape.after.lstrip().startswith("(")


def is_component_usage(shape: MatchShape) -> bool:
    if shape.language_id not in COMPONENT_LANGUAGES:
        return False
    return any(rx.search(shape.trimmed) for rx in component_tag_rxs(shape.search_term))


def is_type_definition(shape: MatchShape) -> bool:
    if shape.language_id not in TYPESCRIPT_LANGUAGES:
        return False
    return any_match(TYPE_RXS, shape.trimmed)


def is_interface_definition(shape: MatchShape) -> bool:
    if shape.language_id not in TYPESCRIPT_LANGUAGES:
        return False
    return any_match(INTERFACE_RXS, shape.trimmed)


def is_class_definition(shape: MatchShape) -> bool:
    return any_match(CLASS_RXS, shape.trimmed)


def is_property_access(shape: MatchShape) -> bool:
    if shape.before.endswith(".") or shape.after.startswith("."):
        return True
    return shape.before.endswith("[") and shape.after.startswith("]")


def is_variable_usage(shape: MatchShape) -> bool:
    not_declaration = BARE_DECLARATION_PREFIX_RX.match(shape.before) is None
    not_call = not shape.after.lstrip().startswith("(")
    not_property = not shape.before.endswith(".") and not shape.before.endswith("[")
    return not_declaration and not_call and not_property


Predicate = Callable[[MatchShape], bool]

CLASSIFICATION_CHAIN: Tuple[Tuple[Predicate, UsageCategory], ...] = (
    (in_comment, UsageCategory.COMMENT),
    (in_string, UsageCategory.STRING_LITERAL),
    (is_import, UsageCategory.IMPORT),
    (is_export, UsageCategory.EXPORT),
    (is_function_definition, UsageCategory.FUNCTION_DEFINITION),
    (is_variable_declaration, UsageCategory.VARIABLE_DECLARATION),
    (is_function_call, UsageCategory.FUNCTION_CALL),
    (is_component_usage, UsageCategory.COMPONENT_USAGE),
    (is_type_definition, UsageCategory.TYPE_DEFINITION),
    (is_interface_definition, UsageCategory.INTERFACE_DEFINITION),
    (is_class_definition, UsageCategory.CLASS_DEFINITION),
    (is_property_access, UsageCategory.PROPERTY_ACCESS),
    (is_variable_usage, UsageCategory.VARIABLE_USAGE),
)


def categorize_match(
    line_text: str,
    column_index: int,
    search_term: str,
    context: MatchContext,
    all_lines: Sequence[str],
    line_number: int,
    language_id: str,
) -> UsageCategory:
    # all_lines and line_number are accepted for callers that pass a full
    # match position; no current rule looks past the matched line.
    shape = MatchShape.build(line_text, column_index, search_term, context, language_id)
    for predicate, category in CLASSIFICATION_CHAIN:
        if predicate(shape):
            return category
    return UsageCategory.OTHER
