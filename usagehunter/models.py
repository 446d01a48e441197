from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class UsageCategory(str, Enum):
    IMPORT = "import"
    EXPORT = "export"
    FUNCTION_DEFINITION = "function-definition"
    FUNCTION_CALL = "function-call"
    VARIABLE_DECLARATION = "variable-declaration"
    VARIABLE_USAGE = "variable-usage"
    COMPONENT_USAGE = "component-usage"
    TYPE_DEFINITION = "type-definition"
    INTERFACE_DEFINITION = "interface-definition"
    CLASS_DEFINITION = "class-definition"
    PROPERTY_ACCESS = "property-access"
    COMMENT = "comment"
    STRING_LITERAL = "string-literal"
    OTHER = "other"

    @property
    def info(self) -> "CategoryInfo":
        return CATEGORY_INFO[self]

    @property
    def priority(self) -> int:
        return CATEGORY_INFO[self].priority

    @classmethod
    def parse(cls, value: str) -> "UsageCategory":
        key = value.strip().lower().replace("_", "-").replace(" ", "-")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown category: {value}") from None


@dataclass(frozen=True)
class CategoryInfo:
    label: str
    description: str
    icon: str
    priority: int  # lower sorts first


CATEGORY_INFO: Dict[UsageCategory, CategoryInfo] = {
    UsageCategory.IMPORT: CategoryInfo("Imports", "Import statements", "arrow-down", 1),
    UsageCategory.EXPORT: CategoryInfo("Exports", "Export statements", "arrow-up", 2),
    UsageCategory.FUNCTION_DEFINITION: CategoryInfo(
        "Function Definitions", "Function declarations and definitions", "symbol-function", 3
    ),
    UsageCategory.FUNCTION_CALL: CategoryInfo("Function Calls", "Function invocations", "play", 4),
    UsageCategory.VARIABLE_DECLARATION: CategoryInfo(
        "Variable Declarations", "Variable declarations and assignments", "symbol-variable", 5
    ),
    UsageCategory.VARIABLE_USAGE: CategoryInfo(
        "Variable Usage", "Variable references and usage", "symbol-field", 6
    ),
    UsageCategory.COMPONENT_USAGE: CategoryInfo(
        "Component Usage", "React/Vue component usage", "symbol-class", 7
    ),
    UsageCategory.TYPE_DEFINITION: CategoryInfo(
        "Type Definitions", "Type aliases and definitions", "symbol-interface", 8
    ),
    UsageCategory.INTERFACE_DEFINITION: CategoryInfo(
        "Interface Definitions", "Interface declarations", "symbol-interface", 9
    ),
    UsageCategory.CLASS_DEFINITION: CategoryInfo("Class Definitions", "Class declarations", "symbol-class", 10),
    UsageCategory.PROPERTY_ACCESS: CategoryInfo("Property Access", "Object property access", "symbol-property", 11),
    UsageCategory.COMMENT: CategoryInfo("Comments", "Matches in comments", "comment", 12),
    UsageCategory.STRING_LITERAL: CategoryInfo("String Literals", "Matches in string literals", "quote", 13),
    UsageCategory.OTHER: CategoryInfo("Other", "Other matches", "circle-filled", 14),
}

CATEGORY_ORDER: tuple[UsageCategory, ...] = tuple(sorted(UsageCategory, key=lambda c: CATEGORY_INFO[c].priority))


@dataclass
class MatchContext:
    is_in_comment: bool
    is_in_string: bool
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    surrounding_lines: List[str] = field(default_factory=list)
    imported_items: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "is_in_comment": self.is_in_comment,
            "is_in_string": self.is_in_string,
            "function_name": self.function_name,
            "class_name": self.class_name,
            "surrounding_lines": list(self.surrounding_lines),
        }
        if self.imported_items is not None:
            payload["imported_items"] = list(self.imported_items)
        return payload


@dataclass(frozen=True)
class MatchRange:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class SearchMatch:
    search_term: str
    file: str
    relative_path: str
    line: int
    column: int
    line_text: str
    category: UsageCategory
    context: MatchContext
    range: MatchRange
    language_id: str = "plaintext"

    def to_dict(self, include_context: bool = False) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "file": self.relative_path,
            "line": self.line + 1,
            "column": self.column + 1,
            "lineText": self.line_text.strip(),
            "category": self.category.value,
        }
        if include_context:
            payload["language"] = self.language_id
            payload["context"] = self.context.to_dict()
        return payload
