from __future__ import annotations

import re
from functools import lru_cache

IMPORT_RXS = (
    re.compile(r"^import\s+.*from\s+"),
    re.compile(r"^import\s+.*=\s+require"),
    re.compile(r"^const\s+.*=\s+require"),
    re.compile(r"^from\s+.*import"),
    re.compile(r"^#include\s+"),
    re.compile(r"^using\s+"),
)

EXPORT_RXS = (
    re.compile(r"^export\s+(default\s+)?"),
    re.compile(r"^export\s*\{"),
    re.compile(r"^module\.exports\s*="),
)

JS_FUNCTION_RXS = (
    re.compile(r"^function\s+"),
    re.compile(r"^const\s+.*=\s*\(.*\)\s*=>"),
    re.compile(r"^const\s+.*=\s*function"),
    re.compile(r"^.*:\s*\(.*\)\s*=>"),
    re.compile(r"^async\s+function\s+"),
)
PY_FUNCTION_RXS = (
    re.compile(r"^def\s+"),
    re.compile(r"^async\s+def\s+"),
)
JVM_FUNCTION_RXS = (
    re.compile(r"^\s*(public|private|protected|static).*\s+\w+\s*\("),
)

JS_DECLARATION_RXS = (
    re.compile(r"^(const|let|var)\s+"),
    re.compile(r"^.*:\s*[A-Za-z]"),
)
PY_DECLARATION_RXS = (
    re.compile(r"^\s*\w+\s*="),
)

TYPE_RXS = (
    re.compile(r"^type\s+"),
    re.compile(r"^export\s+type\s+"),
)
INTERFACE_RXS = (
    re.compile(r"^interface\s+"),
    re.compile(r"^export\s+interface\s+"),
)
CLASS_RXS = (
    re.compile(r"^class\s+"),
    re.compile(r"^export\s+class\s+"),
    re.compile(r"^abstract\s+class\s+"),
    re.compile(r"^public\s+class\s+"),
    re.compile(r"^private\s+class\s+"),
)

BARE_DECLARATION_PREFIX_RX = re.compile(r"^(const|let|var|function)\s*$")

# Enclosing construct lookup, tried in this order on each trimmed line.
FUNCTION_DECL_RX = re.compile(r"^(async\s+)?function\s+(\w+)\s*\(")
ARROW_DECL_RX = re.compile(r"^(const|let|var)\s+(\w+)\s*=\s*.*=>")
METHOD_DECL_RX = re.compile(r"^(\w+)\s*\(")
METHOD_KEYWORD_BLACKLIST = ("if", "for", "while")
CLASS_DECL_RX = re.compile(r"^(export\s+)?(abstract\s+)?class\s+(\w+)")

NAMED_IMPORT_RX = re.compile(r"import\s*\{\s*([^}]+)\s*\}")
DEFAULT_IMPORT_RX = re.compile(r"import\s+(\w+)\s+from")
NAMESPACE_IMPORT_RX = re.compile(r"import\s+\*\s+as\s+(\w+)\s+from")


@lru_cache(maxsize=256)
def component_tag_rxs(term: str) -> tuple[re.Pattern, re.Pattern]:
    escaped = re.escape(term)
    return (
        re.compile(rf"<{escaped}[\s/>]"),
        re.compile(rf"</{escaped}>"),
    )


def any_match(patterns, text: str) -> bool:
    return any(rx.match(text) is not None for rx in patterns)
