from __future__ import annotations

import argparse
import json
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .classifier import categorize_match
from .config import PROJECT_PRESETS, ConfigError, build_configuration
from .console import RichLogger
from .context import get_match_context
from .input_sources import InputItem, iter_workspace_items, make_item, split_lines
from .models import UsageCategory
from .render import results_tree, summary_table
from .results import (
    SORT_MODES,
    CategorizedResults,
    ResultStore,
    ResultWriter,
    default_export_path,
    filter_results_by_category,
    get_search_stats,
    sort_results,
)
from .scanner import FileScan, Scanner
from .selector import SearchMatcher
from .state import LastSearch, clear_last_search, load_last_search, save_last_search


def default_thread_count() -> int:
    return min(32, (os.cpu_count() or 4) + 4)


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="usagehunter",
        description="Search code for a term and group every match by how it is used.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search a workspace or files for a term.")
    search.add_argument("term", help="Text (or regex with --regex) to search for.")
    search.add_argument("paths", nargs="*", default=["."], help="Directories or files (default: current directory).")
    search.add_argument("--include", action="append", help="Glob of files to search (repeatable).")
    search.add_argument("--exclude", action="append", help="Glob of files to skip (repeatable).")
    search.add_argument(
        "--preset",
        choices=sorted(PROJECT_PRESETS) + ["auto"],
        help="Use include/exclude globs for a project type ('auto' detects it).",
    )
    search.add_argument("--case-sensitive", action="store_true", default=None, help="Match case exactly.")
    search.add_argument("--regex", action="store_true", default=None, help="Treat the term as a regular expression.")
    search.add_argument(
        "--no-comments",
        dest="include_comments",
        action="store_false",
        default=None,
        help="Drop matches inside comments.",
    )
    search.add_argument(
        "--strings",
        dest="include_string_literals",
        action="store_true",
        default=None,
        help="Keep matches inside string literals.",
    )
    search.add_argument("--max-per-category", type=int, help="Cap on matches kept per category.")
    _add_view_arguments(search)
    search.add_argument("--export", help="Write results to a .md, .json or .txt file (or into a directory).")
    search.add_argument("--language", help="Language id to use for every searched file (e.g. typescript).")
    search.add_argument(
        "--threads",
        type=int,
        default=default_thread_count(),
        help="Worker threads for scanning (default: auto).",
    )
    search.add_argument("--config", help="JSON settings file (default: usagehunter.json in the first path).")
    search.add_argument("-v", "--verbose", action="store_true", help="Verbose debug logs")
    search.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")

    classify = sub.add_parser("classify", help="Categorize one position in a file.")
    classify.add_argument("file", help="File containing the match.")
    classify.add_argument("line", type=int, help="1-based line number.")
    classify.add_argument("column", type=int, help="1-based column of the match start.")
    classify.add_argument("term", help="Matched text.")
    classify.add_argument("--language", help="Language id (default: from the file extension).")
    classify.add_argument("--json", action="store_true", help="Print JSON instead of a table.")

    refresh = sub.add_parser("refresh", help="Re-run the last search.")
    _add_view_arguments(refresh)
    refresh.add_argument("--threads", type=int, default=default_thread_count(), help="Worker threads for scanning.")
    refresh.add_argument("-v", "--verbose", action="store_true", help="Verbose debug logs")
    refresh.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")

    export = sub.add_parser("export", help="Re-run the last search and export it.")
    export.add_argument("output", help="Target .md, .json or .txt file (or a directory).")
    export.add_argument("--context", action="store_true", help="Include match context in JSON exports.")
    export.add_argument("--threads", type=int, default=default_thread_count(), help="Worker threads for scanning.")
    export.add_argument("-v", "--verbose", action="store_true", help="Verbose debug logs")
    export.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")

    sub.add_parser("clear", help="Forget the last search.")

    return ap


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--category",
        action="append",
        help="Only show these categories (repeatable, e.g. function-call).",
    )
    parser.add_argument("--sort", choices=SORT_MODES, default=None, help="Order of matches within a category.")
    parser.add_argument("--no-tree", action="store_true", help="Print only the summary table.")
    parser.add_argument("--stats", action="store_true", help="Print per-category counts as JSON.")


def _parse_categories(values: Optional[Sequence[str]]) -> List[UsageCategory]:
    categories: List[UsageCategory] = []
    for raw in values or []:
        for part in raw.split(","):
            if part.strip():
                categories.append(UsageCategory.parse(part))
    return categories


def _scan_items(
    items: List[InputItem],
    scanner: Scanner,
    threads: int,
    console: Console,
    logger: RichLogger,
) -> Tuple[List[FileScan], int]:
    """Scan on a thread pool; results come back in ``items`` order."""
    failures = 0
    if not items:
        return [], failures

    results: Dict[int, FileScan] = {}
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]Searching files"),
        BarColumn(bar_width=None),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    with progress:
        task_id = progress.add_task("scan", total=len(items))
        executor = ThreadPoolExecutor(max_workers=max(1, threads))
        try:
            future_map = {executor.submit(scanner.scan_item, item): idx for idx, item in enumerate(items)}
            for future in as_completed(future_map):
                idx = future_map[future]
                try:
                    results[idx] = future.result()
                except Exception as exc:
                    logger.warn(f"Failed to search file {items[idx].relative_path}: {exc}")
                    failures += 1
                    results[idx] = FileScan(item=items[idx])
                progress.advance(task_id)
        except KeyboardInterrupt:
            logger.warn("Search cancelled; showing partial results.")
            executor.shutdown(wait=True, cancel_futures=True)
        else:
            executor.shutdown(wait=True)

    ordered = [results[idx] for idx in sorted(results)]
    failures += sum(scan.stats.get("failed", 0) for scan in ordered)
    return ordered, failures


def execute_search(
    search: LastSearch,
    threads: int,
    logger: RichLogger,
) -> Tuple[CategorizedResults, int]:
    """Run ``search`` and return its sorted, filtered results and the failure count."""
    config = search.config
    matcher = SearchMatcher(search.term, use_regex=config.use_regex, case_sensitive=config.case_sensitive)
    if matcher.fell_back_to_literal:
        logger.warn(f"Invalid regex '{search.term}', searching for it literally.")

    started = time.perf_counter()
    items: List[InputItem] = []
    for item in iter_workspace_items(
        [Path(p) for p in search.paths],
        config.include_patterns,
        config.exclude_patterns,
        logger,
    ):
        if search.language:
            item = replace(item, language_id=search.language)
        items.append(item)
    logger.debug(f"Pattern: {matcher.pattern}")
    logger.info(f"Searching {len(items)} files for '{search.term}'")

    scanner = Scanner(matcher, config, logger)
    scans, failures = _scan_items(items, scanner, threads, logger.console, logger)

    store = ResultStore(search.term, config.max_results_per_category)
    for scan in scans:
        store.add_file(scan.matches)
    if store.dropped:
        logger.info(f"{store.dropped} matches over the per-category cap were dropped")
    if logger.warnings:
        logger.info(f"Search finished with {logger.warnings} warnings")

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    results = store.build(elapsed_ms)
    results = sort_results(results, search.sort)
    if search.categories:
        results = filter_results_by_category(results, [UsageCategory.parse(c) for c in search.categories])
    return results, failures


def _show_results(results: CategorizedResults, console: Console, args) -> None:
    if args.stats:
        console.print_json(json.dumps(get_search_stats(results)))
        return
    show_tree = not args.no_tree
    if show_tree and results.total_matches:
        console.print(results_tree(results))
    console.print(summary_table(results))


def _resolve_export_path(value: str, term: str) -> Path:
    path = Path(value).expanduser()
    if path.is_dir():
        return default_export_path(path, term)
    return path


def _export(results: CategorizedResults, value: str, logger: RichLogger, include_context: bool = False) -> bool:
    try:
        ResultWriter(logger, include_context=include_context).write(results, _resolve_export_path(value, results.search_term))
    except (OSError, ValueError) as exc:
        logger.error(f"Failed to export results: {exc}")
        return False
    return True


def _config_overrides(args) -> Dict[str, object]:
    return {
        "include_patterns": args.include,
        "exclude_patterns": args.exclude,
        "case_sensitive": args.case_sensitive,
        "use_regex": args.regex,
        "include_comments": args.include_comments,
        "include_string_literals": args.include_string_literals,
        "max_results_per_category": args.max_per_category,
    }


def run_search(args) -> int:
    console = Console()
    logger = RichLogger(console=Console(stderr=True), verbose=args.verbose, quiet=args.quiet)

    if not args.term:
        logger.error("Search term cannot be empty")
        return 2

    paths = [Path(p).expanduser() for p in args.paths]
    missing = [p for p in paths if not p.exists()]
    if missing:
        logger.error("Path not found: " + ", ".join(str(p) for p in missing))
        return 2

    root = next((p for p in paths if p.is_dir()), None)
    try:
        config = build_configuration(root, args.config, args.preset, _config_overrides(args))
        categories = [c.value for c in _parse_categories(args.category)]
    except (ConfigError, ValueError) as exc:
        logger.error(str(exc))
        return 2

    search = LastSearch(
        term=args.term,
        paths=[str(p.resolve()) for p in paths],
        config=config,
        categories=categories,
        sort=args.sort or "file",
        language=args.language,
    )
    results, failures = execute_search(search, args.threads, logger)
    _show_results(results, console, args)

    try:
        save_last_search(search)
    except OSError as exc:
        logger.warn(f"Could not save search state: {exc}")

    if args.export and not _export(results, args.export, logger):
        return 1
    return 1 if failures else 0


def _load_saved(logger: RichLogger) -> Optional[LastSearch]:
    search = load_last_search()
    if search is None:
        logger.error("No previous search to re-run. Run 'usagehunter search' first.")
    return search


def run_refresh(args) -> int:
    console = Console()
    logger = RichLogger(console=Console(stderr=True), verbose=args.verbose, quiet=args.quiet)
    search = _load_saved(logger)
    if search is None:
        return 2
    try:
        categories = [c.value for c in _parse_categories(args.category)] or search.categories
    except ValueError as exc:
        logger.error(str(exc))
        return 2
    search = replace(search, categories=categories, sort=args.sort or search.sort)
    logger.info(f"Refreshing search {search.key}")
    try:
        results, failures = execute_search(search, args.threads, logger)
    except FileNotFoundError as exc:
        logger.error(f"Path from the last search no longer exists: {exc}")
        return 2
    _show_results(results, console, args)
    return 1 if failures else 0


def run_export(args) -> int:
    console = Console(stderr=True)
    logger = RichLogger(console=console, verbose=args.verbose, quiet=args.quiet)
    search = _load_saved(logger)
    if search is None:
        return 2
    try:
        results, failures = execute_search(search, args.threads, logger)
    except FileNotFoundError as exc:
        logger.error(f"Path from the last search no longer exists: {exc}")
        return 2
    if not _export(results, args.output, logger, include_context=args.context):
        return 1
    return 1 if failures else 0


def run_clear(args) -> int:
    logger = RichLogger(console=Console(stderr=True))
    if clear_last_search():
        logger.done("Cleared the last search.")
    else:
        logger.info("No saved search to clear.")
    return 0


def run_classify(args) -> int:
    console = Console()
    logger = RichLogger(console=Console(stderr=True))
    path = Path(args.file).expanduser()
    try:
        item = make_item(path, root=path.parent, language_id=args.language)
        lines = split_lines(item.read_text())
    except OSError as exc:
        logger.error(f"Failed to read {path}: {exc}")
        return 2

    line_number = args.line - 1
    column = args.column - 1
    if not 0 <= line_number < len(lines):
        logger.error(f"Line {args.line} is outside {path} ({len(lines)} lines)")
        return 2
    line_text = lines[line_number]

    context = get_match_context(line_text, column, lines, line_number)
    category = categorize_match(line_text, column, args.term, context, lines, line_number, item.language_id)

    if args.json:
        payload = {"category": category.value, "language": item.language_id, "context": context.to_dict()}
        console.print_json(json.dumps(payload))
        return 0

    table = Table(title=f"{path.name}:{args.line}:{args.column}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Category", f"{category.info.label} ({category.value})")
    table.add_row("Language", item.language_id)
    table.add_row("Function", context.function_name or "-")
    table.add_row("Class", context.class_name or "-")
    table.add_row("In comment", str(context.is_in_comment))
    table.add_row("In string", str(context.is_in_string))
    if context.imported_items is not None:
        table.add_row("Imports", ", ".join(context.imported_items) or "-")
    table.add_row("Context", "\n".join(context.surrounding_lines))
    console.print(table)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    if args.command == "search":
        return run_search(args)
    if args.command == "classify":
        return run_classify(args)
    if args.command == "refresh":
        return run_refresh(args)
    if args.command == "export":
        return run_export(args)
    if args.command == "clear":
        return run_clear(args)
    return 2
