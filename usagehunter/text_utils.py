from __future__ import annotations

import re

_UNSAFE_FILE_CHARS_RX = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def trim_snippet(text: str, max_len: int = 160) -> str:
    value = text.strip()
    if len(value) <= max_len:
        return value
    return value[: max_len - 3] + "..."


def sanitize_file_name(name: str) -> str:
    value = _UNSAFE_FILE_CHARS_RX.sub("_", name)
    value = re.sub(r"\s+", "_", value)
    value = re.sub(r"_{2,}", "_", value)
    return value.strip()


def format_file_size(size_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{int(size)} {units[unit]}"
    return f"{size:.1f} {units[unit]}"
