from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, Tuple

from .patterns import (
    JS_DECLARATION_RXS,
    JS_FUNCTION_RXS,
    JVM_FUNCTION_RXS,
    PY_DECLARATION_RXS,
    PY_FUNCTION_RXS,
)

DEFAULT_LANGUAGE_ID = "plaintext"


class LanguageFamily(str, Enum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JVM = "jvm"


LANGUAGE_FAMILIES: Dict[str, LanguageFamily] = {
    "python": LanguageFamily.PYTHON,
    "java": LanguageFamily.JVM,
    "csharp": LanguageFamily.JVM,
}

FUNCTION_PATTERNS: Dict[LanguageFamily, Tuple] = {
    LanguageFamily.JAVASCRIPT: JS_FUNCTION_RXS,
    LanguageFamily.PYTHON: PY_FUNCTION_RXS,
    LanguageFamily.JVM: JVM_FUNCTION_RXS,
}

# Java and C# share the JS declaration shapes.
DECLARATION_PATTERNS: Dict[LanguageFamily, Tuple] = {
    LanguageFamily.JAVASCRIPT: JS_DECLARATION_RXS,
    LanguageFamily.PYTHON: PY_DECLARATION_RXS,
    LanguageFamily.JVM: JS_DECLARATION_RXS,
}

COMPONENT_LANGUAGES = frozenset({"typescriptreact", "javascriptreact", "vue"})
TYPESCRIPT_LANGUAGES = frozenset({"typescript", "typescriptreact"})

EXTENSION_LANGUAGES: Dict[str, str] = {
    "js": "javascript",
    "jsx": "javascriptreact",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "vue": "vue",
    "py": "python",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "cs": "csharp",
    "php": "php",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "less": "less",
    "json": "json",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
    "md": "markdown",
    "markdown": "markdown",
    "txt": "plaintext",
    "sh": "shellscript",
    "bash": "shellscript",
    "zsh": "shellscript",
    "fish": "shellscript",
    "ps1": "powershell",
    "sql": "sql",
    "r": "r",
    "scala": "scala",
    "kt": "kotlin",
    "swift": "swift",
    "dart": "dart",
    "lua": "lua",
    "perl": "perl",
    "pl": "perl",
    "dockerfile": "dockerfile",
}

BINARY_EXTENSIONS = frozenset(
    {
        "exe", "dll", "so", "dylib", "bin", "jpg", "jpeg", "png", "gif",
        "bmp", "ico", "svg", "webp", "pdf", "zip", "tar", "gz", "rar",
        "7z", "mp3", "mp4", "avi", "mov", "wmv", "flv", "wav", "ogg",
    }
)


def language_family(language_id: str) -> LanguageFamily:
    return LANGUAGE_FAMILIES.get(language_id, LanguageFamily.JAVASCRIPT)


def function_patterns(language_id: str) -> Tuple:
    return FUNCTION_PATTERNS[language_family(language_id)]


def declaration_patterns(language_id: str) -> Tuple:
    return DECLARATION_PATTERNS[language_family(language_id)]


def file_extension(path: str | Path) -> str:
    p = Path(path)
    suffix = p.suffix.lower().lstrip(".")
    if suffix:
        return suffix
    # .env, .gitignore, Dockerfile
    return p.name.lstrip(".").lower()


def language_id_for_path(path: str | Path) -> str:
    return EXTENSION_LANGUAGES.get(file_extension(path), DEFAULT_LANGUAGE_ID)


def is_binary_file(path: str | Path) -> bool:
    return file_extension(path) in BINARY_EXTENSIONS
