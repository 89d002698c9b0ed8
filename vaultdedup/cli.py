"""
Command-Line Front End
======================

Scans a folder of already-decrypted vault exports, runs the duplicate
analysis and prints the report together with a cleanup plan for the chosen
keep strategy. Nothing is ever deleted; the plan lists the ids (relative
paths) a deletion step could remove.

Usage:
------
    vault-dedup ~/vault-export --recursive --strategy largest
    vault-dedup ~/vault-export --json > report.json
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from vaultdedup import __version__
from vaultdedup.core import config
from vaultdedup.core.dedup import (
    Aggregator,
    DedupError,
    FileRecord,
    FileType,
    KeepStrategy,
    MalformedRecordError,
    RetentionPolicy,
    analysis_to_dict,
    collect_deletions,
    format_file_size,
    format_similarity_score,
    plan_to_dicts,
    summarize_analysis,
)
from vaultdedup.utils.config_manager import load_settings
from vaultdedup.utils.logger import setup_logging, shutdown_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE_ERROR = 2


def classify_file(path: Path) -> FileType:
    suffix = path.suffix.lower()
    for type_name, extensions in config.FILE_TYPE_EXTENSIONS.items():
        if suffix in extensions:
            return FileType(type_name)
    return FileType.OTHER


def load_records(root: Path, recursive: bool = False) -> List[FileRecord]:
    """
    Read every regular file under `root` into a FileRecord.

    Ids are paths relative to `root` (POSIX separators) in sorted order, so
    repeated runs over the same folder feed the engine the same input.
    """
    pattern = "**/*" if recursive else "*"
    paths = sorted(
        (p for p in root.glob(pattern) if p.is_file() and not p.is_symlink()),
        key=lambda p: p.relative_to(root).as_posix(),
    )

    records = []
    for path in paths:
        stat = path.stat()
        added = getattr(stat, "st_birthtime", stat.st_mtime)
        records.append(FileRecord(
            id=path.relative_to(root).as_posix(),
            name=path.name,
            type=classify_file(path),
            size_bytes=stat.st_size,
            content=path.read_bytes(),
            date_added=datetime.fromtimestamp(added, tz=timezone.utc),
            date_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        ))

    logger.info(f"Loaded {len(records)} files from {root}")
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-dedup",
        description="Find exact, visually similar and confusingly named duplicate files.",
    )
    parser.add_argument("path", type=Path, help="Folder containing decrypted vault files")
    parser.add_argument("-r", "--recursive", action="store_true", help="Scan subfolders too")
    parser.add_argument(
        "-s", "--strategy",
        choices=[s.value for s in KeepStrategy],
        help="Which copy to keep in each group (default from settings)",
    )
    parser.add_argument("--perceptual-threshold", type=float, help="Image similarity threshold (0-1)")
    parser.add_argument("--name-threshold", type=float, help="Name similarity threshold (0-1)")
    parser.add_argument("--clustering", choices=config.CLUSTERING_MODES, help="Image grouping mode")
    parser.add_argument("-w", "--workers", type=int, help="Worker threads for hashing")
    parser.add_argument("-c", "--config", type=Path, help="Settings file (JSON)")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--log-dir", type=Path, help="Directory for the log file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _print_text_report(analysis, decisions, deletions, records_by_id, out):
    print(summarize_analysis(analysis), file=out)

    decisions_by_group = {d.group_id: d for d in decisions}
    for group in analysis.groups:
        print("", file=out)
        print(
            f"[{group.category.display_name}] {group.id} - {len(group.members)} files, "
            f"similarity {format_similarity_score(group.similarity_score)}, "
            f"reclaimable {format_file_size(group.potential_savings_bytes)}",
            file=out,
        )
        decision = decisions_by_group.get(group.id)
        for file_id in group.members:
            if decision is None or decision.keep_file_id is None:
                marker = " "
            elif file_id == decision.keep_file_id:
                marker = "K"
            else:
                marker = "D"
            size = format_file_size(records_by_id[file_id].size_bytes)
            print(f"  {marker} {file_id} ({size})", file=out)

    if analysis.skipped_file_ids:
        print("", file=out)
        print(f"Images that could not be decoded: {', '.join(analysis.skipped_file_ids)}", file=out)

    print("", file=out)
    print(f"{len(deletions)} files recommended for deletion", file=out)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        log_dir=args.log_dir,
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    try:
        return run(args)
    finally:
        shutdown_logging()


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line. Logging must already be configured."""
    try:
        settings = load_settings(args.config) if args.config else load_settings()
        if args.perceptual_threshold is not None:
            settings.perceptual_threshold = args.perceptual_threshold
        if args.name_threshold is not None:
            settings.name_threshold = args.name_threshold
        if args.clustering is not None:
            settings.clustering = args.clustering
        if args.workers is not None:
            settings.max_workers = args.workers
        if args.strategy is not None:
            settings.default_strategy = args.strategy
        settings.validate()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    root = args.path.expanduser()
    if not root.is_dir():
        print(f"error: {root} is not a directory", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        records = load_records(root, recursive=args.recursive)
        analysis = Aggregator(settings).analyze(records)
        policy = RetentionPolicy(records)
        decisions = policy.generate_cleanup_plan(analysis.groups, settings.default_strategy)
    except MalformedRecordError as e:
        logger.error(f"Rejected input: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except (DedupError, OSError) as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    deletions = collect_deletions(decisions)

    if args.json:
        report = analysis_to_dict(analysis)
        report["strategy"] = settings.default_strategy
        report["decisions"] = plan_to_dicts(decisions)
        report["deleteFileIds"] = deletions
        json.dump(report, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        records_by_id = {r.id: r for r in records}
        _print_text_report(analysis, decisions, deletions, records_by_id, sys.stdout)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
