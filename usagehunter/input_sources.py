from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .console import RichLogger
from .languages import is_binary_file, language_id_for_path

BINARY_SAMPLE_BYTES = 4096


def detect_text_encoding(sample: bytes) -> str:
    if sample.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    if sample.startswith(b"\xff\xfe") or sample.startswith(b"\xfe\xff"):
        return "utf-16"
    return "utf-8"


def is_likely_binary(sample: bytes) -> bool:
    if sample.startswith((b"\xff\xfe", b"\xfe\xff")):
        return False
    if b"\x00" in sample:
        return True
    if not sample:
        return False
    non_printable = 0
    for b in sample[:2048]:
        if b in (9, 10, 12, 13):
            continue
        if b >= 32:
            # printable ASCII and UTF-8 continuation bytes
            continue
        non_printable += 1
    return (non_printable / max(1, min(len(sample), 2048))) > 0.25


def split_lines(text: str) -> List[str]:
    return [line.rstrip("\r") for line in text.split("\n")]


def expand_braces(pattern: str) -> List[str]:
    m = re.search(r"\{([^{}]*)\}", pattern)
    if not m:
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end():]
    expanded: List[str] = []
    for option in m.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def _glob_to_regex(pattern: str) -> str:
    out = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == len(pattern):
            out.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return "".join(out)


@lru_cache(maxsize=128)
def compile_glob(pattern: str) -> re.Pattern:
    alternatives = [_glob_to_regex(p) for p in expand_braces(pattern)]
    return re.compile("^(?:" + "|".join(alternatives) + ")$", re.IGNORECASE)


def matches_glob(path: str, pattern: str) -> bool:
    return compile_glob(pattern).match(path) is not None


def should_include_file(relative_path: str, include: Sequence[str], exclude: Sequence[str]) -> bool:
    rel = relative_path.replace("\\", "/")
    name = rel.rsplit("/", 1)[-1]
    for pattern in exclude:
        if matches_glob(rel, pattern) or matches_glob(name, pattern):
            return False
    for pattern in include:
        if matches_glob(rel, pattern) or matches_glob(name, pattern):
            return True
    return False


@dataclass(frozen=True)
class InputItem:
    display_name: str
    size_bytes: int
    file_path: Path
    relative_path: str
    language_id: str

    def read_text(self) -> str:
        data = self.file_path.read_bytes()
        enc = detect_text_encoding(data[:BINARY_SAMPLE_BYTES])
        return data.decode(enc, errors="replace")

    def sample(self, size: int = BINARY_SAMPLE_BYTES) -> bytes:
        with open(self.file_path, "rb") as f:
            return f.read(size)


def make_item(path: Path, root: Optional[Path] = None, language_id: Optional[str] = None) -> InputItem:
    st = path.stat()
    rel_path = path.name
    if root is not None:
        try:
            rel_path = path.relative_to(root).as_posix()
        except ValueError:
            rel_path = path.name
    return InputItem(
        display_name=str(path),
        size_bytes=st.st_size,
        file_path=path,
        relative_path=rel_path,
        language_id=language_id or language_id_for_path(path),
    )


def iter_input_items(
    input_path: Path,
    include: Sequence[str],
    exclude: Sequence[str],
    logger: RichLogger,
    follow_symlinks: bool = False,
) -> Iterator[InputItem]:
    """Yield searchable files under ``input_path`` in sorted path order.

    A plain file path is yielded as-is, without glob filtering.
    """
    if not input_path.exists():
        raise FileNotFoundError(str(input_path))

    if input_path.is_file():
        yield make_item(input_path, root=input_path.parent)
        return

    for p in sorted(input_path.rglob("*")):
        try:
            if p.is_dir():
                continue
            if (not follow_symlinks) and p.is_symlink():
                continue
            rel_path = p.relative_to(input_path).as_posix()
            if is_binary_file(p):
                continue
            if not should_include_file(rel_path, include, exclude):
                continue
            yield make_item(p, root=input_path)
        except OSError as e:
            logger.warn(f"Skipping unreadable path: {p} ({e})")


def iter_workspace_items(
    paths: Iterable[Path],
    include: Sequence[str],
    exclude: Sequence[str],
    logger: RichLogger,
) -> Iterator[InputItem]:
    seen: set[Path] = set()
    for path in paths:
        for item in iter_input_items(path, include, exclude, logger):
            key = item.file_path.resolve()
            if key in seen:
                continue
            seen.add(key)
            yield item
