from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional

CONFIG_ENV_VAR = "USAGEHUNTER_CONFIG"
CONFIG_FILE_NAME = "usagehunter.json"
CONFIG_SECTION = "usagehunter"

DEFAULT_INCLUDE_PATTERNS = ["**/*.{js,ts,jsx,tsx,vue,py,java,c,cpp,cs,php,rb,go,rs}"]
DEFAULT_EXCLUDE_PATTERNS = ["**/node_modules/**", "**/dist/**", "**/build/**", "**/*.min.js"]
DEFAULT_MAX_RESULTS_PER_CATEGORY = 100
DEFAULT_MAX_FILE_BYTES = 1024 * 1024


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SearchConfiguration:
    include_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS))
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_comments: bool = True
    include_string_literals: bool = False
    case_sensitive: bool = False
    use_regex: bool = False
    max_results_per_category: int = DEFAULT_MAX_RESULTS_PER_CATEGORY
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES

    def to_dict(self) -> Dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ProjectPreset:
    include: List[str]
    exclude: List[str]


PROJECT_PRESETS: Dict[str, ProjectPreset] = {
    "javascript": ProjectPreset(
        include=["**/*.{js,jsx,ts,tsx,json}"],
        exclude=["**/node_modules/**", "**/dist/**", "**/build/**", "**/*.min.js"],
    ),
    "python": ProjectPreset(
        include=["**/*.{py,pyx,pyi}"],
        exclude=["**/__pycache__/**", "**/venv/**", "**/env/**", "**/*.pyc"],
    ),
    "java": ProjectPreset(
        include=["**/*.{java,kt,scala}"],
        exclude=["**/target/**", "**/build/**", "**/*.class"],
    ),
    "csharp": ProjectPreset(
        include=["**/*.{cs,vb,fs}"],
        exclude=["**/bin/**", "**/obj/**", "**/packages/**"],
    ),
    "web": ProjectPreset(
        include=["**/*.{html,css,scss,sass,less,js,ts,jsx,tsx,vue}"],
        exclude=["**/node_modules/**", "**/dist/**", "**/*.min.{js,css}"],
    ),
}
FALLBACK_PRESET = ProjectPreset(
    include=["**/*"],
    exclude=["**/node_modules/**", "**/dist/**", "**/build/**", "**/target/**"],
)

PROJECT_MARKERS = (
    ("package.json", "javascript"),
    ("pom.xml", "java"),
    ("*.csproj", "csharp"),
    ("requirements.txt", "python"),
    ("Cargo.toml", "rust"),
    ("go.mod", "go"),
)
EXTENSION_PROJECT_TYPES = {
    ".js": "javascript",
    ".ts": "javascript",
    ".jsx": "javascript",
    ".tsx": "javascript",
    ".py": "python",
    ".java": "java",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".c": "cpp",
    ".go": "go",
    ".rs": "rust",
}
DETECT_SAMPLE_FILES = 20

_CAMEL_KEYS = {
    "includePatterns": "include_patterns",
    "excludePatterns": "exclude_patterns",
    "includeComments": "include_comments",
    "includeStringLiterals": "include_string_literals",
    "caseSensitive": "case_sensitive",
    "useRegex": "use_regex",
    "maxResultsPerCategory": "max_results_per_category",
    "maxFileBytes": "max_file_bytes",
}
_LIST_FIELDS = {"include_patterns", "exclude_patterns"}
_BOOL_FIELDS = {"include_comments", "include_string_literals", "case_sensitive", "use_regex"}
_INT_FIELDS = {"max_results_per_category", "max_file_bytes"}


def detect_project_type(root: Path) -> str:
    if not root.is_dir():
        return "unknown"
    for marker, project_type in PROJECT_MARKERS:
        if any(root.glob(marker)):
            return project_type

    counts: Counter[str] = Counter()
    seen = 0
    for p in root.rglob("*"):
        if "node_modules" in p.parts:
            continue
        project_type = EXTENSION_PROJECT_TYPES.get(p.suffix.lower())
        if project_type is None or not p.is_file():
            continue
        counts[project_type] += 1
        seen += 1
        if seen >= DETECT_SAMPLE_FILES:
            break
    if not counts:
        return "unknown"
    return counts.most_common(1)[0][0]


def preset_for(project_type: str) -> ProjectPreset:
    return PROJECT_PRESETS.get(project_type, FALLBACK_PRESET)


def _coerce(name: str, value: object) -> object:
    if name in _LIST_FIELDS:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{name}' must be a list of glob strings")
        return list(value)
    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{name}' must be true or false")
        return value
    if name in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"'{name}' must be a positive integer")
        return value
    raise ConfigError(f"Unknown setting: {name}")


def settings_from_mapping(data: Mapping[str, object]) -> Dict[str, object]:
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{CONFIG_SECTION}' section must be an object")
    settings: Dict[str, object] = {}
    for key, value in section.items():
        name = _CAMEL_KEYS.get(key, key)
        settings[name] = _coerce(name, value)
    return settings


def load_settings_file(path: Path) -> Dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    return settings_from_mapping(data)


def resolve_config_path(explicit: Optional[str], root: Optional[Path]) -> Optional[Path]:
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path
    env_value = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_value:
        path = Path(env_value).expanduser()
        if not path.is_file():
            raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path
    if root is not None and root.is_dir():
        candidate = root / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def build_configuration(
    root: Optional[Path] = None,
    config_path: Optional[str] = None,
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, object]] = None,
) -> SearchConfiguration:
    """Defaults, then preset, then settings file, then explicit overrides."""
    config = SearchConfiguration()

    if preset:
        project_type = detect_project_type(root) if preset == "auto" and root is not None else preset
        chosen = preset_for(project_type)
        config = replace(config, include_patterns=list(chosen.include), exclude_patterns=list(chosen.exclude))

    path = resolve_config_path(config_path, root)
    if path is not None:
        config = replace(config, **load_settings_file(path))

    if overrides:
        cleaned = {k: _coerce(k, v) for k, v in overrides.items() if v is not None}
        config = replace(config, **cleaned)

    return config
