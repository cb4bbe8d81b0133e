#!/usr/bin/env python3
"""
Nodeset Import Command Line

Imports OPC UA nodeset files from disk as one batch and prints what
happened to each file.

Usage:
    # Import a model together with its dependencies
    python scripts/import_nodesets.py DI.NodeSet2.xml Boiler.NodeSet2.xml

    # Rename conflicting namespaces instead of warning
    python scripts/import_nodesets.py --strategy rename a.xml b.xml

    # Keep the recent-files history between runs
    python scripts/import_nodesets.py --history *.xml

Exit status is 1 when the batch was aborted (size, format, missing
dependency or parse failure), 0 otherwise.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add src to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from nodeset_toolkit import __version__
from nodeset_toolkit.importer import (
    Accepted,
    BatchResult,
    ConflictStrategy,
    FileStore,
    ImportConfig,
    ImportSession,
    MemoryStore,
    RawFile,
    Skipped,
    import_batch,
)

logger = logging.getLogger(__name__)


def format_outcomes(result: BatchResult) -> List[str]:
    """One line per outcome, in batch order."""
    lines = []
    for outcome in result.outcomes:
        if isinstance(outcome, Accepted):
            md = outcome.metadata
            uris = ", ".join(md.namespace_uris) or "-"
            suffix = f"  [{outcome.conflict.message}]" if outcome.conflict else ""
            lines.append(f"ACCEPTED  {md.name}: {md.node_count} nodes ({uris}){suffix}")
        elif isinstance(outcome, Skipped):
            lines.append(f"SKIPPED   {outcome.file_name}: {outcome.error.code.value} {outcome.error.message}")
        else:
            lines.append(f"ABORTED   {outcome.error.code.value} {outcome.error.message}")
    return lines


def result_to_dict(result: BatchResult) -> dict:
    return {
        "accepted": [a.metadata.to_dict() for a in result.accepted],
        "errors": [e.to_dict() for e in result.errors],
        "aborted": result.aborted is not None,
        "timings": result.timings.to_dict(),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Import OPC UA nodeset files as one batch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Strategies:
  reject             - Skip files whose namespaces are already loaded
  rename             - Suffix conflicting namespace URIs with "#<id>"
  merge              - Accept unchanged (same as warn_and_continue)
  warn_and_continue  - Accept unchanged with a warning (default)
        """,
    )
    parser.add_argument("files", nargs="+", type=Path, help="Nodeset XML files, in import order")
    parser.add_argument(
        "--strategy",
        default=ConflictStrategy.WARN_AND_CONTINUE.value.lower(),
        choices=[s.value.lower() for s in ConflictStrategy],
        help="Namespace conflict strategy (default: warn_and_continue)",
    )
    parser.add_argument("--max-size-mb", type=float, default=None, help="Per-file size limit in MiB")
    parser.add_argument(
        "--history",
        action="store_true",
        help="Persist the recent-files history in the application data directory",
    )
    parser.add_argument("--store-dir", type=Path, default=None, help="Directory for --history (overrides default)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    config = ImportConfig.from_dict({"namespaceConflictStrategy": args.strategy})
    if args.max_size_mb is not None:
        config = config.with_user_max_mb(args.max_size_mb)

    if args.history or args.store_dir:
        if args.store_dir is not None:
            store_dir = args.store_dir
        else:
            from nodeset_toolkit.gui.utils.paths import get_store_dir
            store_dir = get_store_dir()
        store = FileStore(store_dir)
    else:
        store = MemoryStore()

    missing = [p for p in args.files if not p.is_file()]
    if missing:
        for path in missing:
            logger.error(f"File not found: {path}")
        return 2

    # One-shot run: the delayed upload-state reset has no observer
    session = ImportSession(config, store=store, scheduler=lambda delay, callback: None)
    result = import_batch([RawFile.from_path(p) for p in args.files], session)

    if args.json:
        print(json.dumps(result_to_dict(result), indent=2))
    else:
        for line in format_outcomes(result):
            print(line)

    return 1 if result.aborted is not None else 0


if __name__ == "__main__":
    sys.exit(main())
