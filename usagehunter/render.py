from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .models import SearchMatch
from .results import CategorizedResults
from .text_utils import trim_snippet


def summary_table(results: CategorizedResults) -> Table:
    table = Table(title=f'Usage of "{results.search_term}"', header_style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Matches", justify="right")
    table.add_column("Files", justify="right")
    for category, matches in results.non_empty().items():
        files = {m.relative_path for m in matches}
        table.add_row(category.info.label, str(len(matches)), str(len(files)))
    table.caption = (
        f"{results.total_matches} matches in {results.searched_files} files ({results.search_time_ms}ms)"
    )
    return table


def _group_by_file(matches: List[SearchMatch]) -> Dict[str, List[SearchMatch]]:
    grouped: Dict[str, List[SearchMatch]] = OrderedDict()
    for match in matches:
        grouped.setdefault(match.relative_path, []).append(match)
    return grouped


def match_label(match: SearchMatch) -> Text:
    label = Text()
    label.append(f"{match.line + 1}:{match.column + 1}", style="dim")
    label.append("  ")
    label.append(trim_snippet(match.line_text))
    scope = match.context.class_name
    if match.context.function_name:
        scope = f"{scope}.{match.context.function_name}" if scope else match.context.function_name
    if scope:
        label.append(f"  ({scope})", style="italic magenta")
    if match.context.imported_items:
        label.append(f"  [{', '.join(match.context.imported_items)}]", style="green")
    return label


def results_tree(results: CategorizedResults) -> Tree:
    root = Tree(Text(f"{results.search_term}  ({results.total_matches} matches)", style="bold"))
    for category, matches in results.non_empty().items():
        info = category.info
        branch = root.add(Text.assemble((info.label, "bold cyan"), f"  {len(matches)}"))
        for path, file_matches in _group_by_file(matches).items():
            file_branch = branch.add(Text.assemble((path, "blue"), f"  {len(file_matches)}"))
            for match in file_matches:
                file_branch.add(match_label(match))
    return root
