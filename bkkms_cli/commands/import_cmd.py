"""Implementation of the ``bkkms bookmarks import`` command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

from tqdm import tqdm

from ..core import EventKind, ImportOptions, get_context, start_import


def cmd_import(args):
    """Upload an exported bookmarks HTML file and follow the server's progress."""

    path = Path(args.file)
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    ctx = get_context()
    options = ImportOptions.from_path(
        path,
        generate_tags=args.generate_tags,
        create_archive=args.archive,
    )

    errors: List[Tuple[str, str]] = []
    imported = 0
    final_message = ""

    job = start_import(ctx.transport, options)
    try:
        with tqdm(total=None, unit="bm", desc="Importing") as bar:
            for event in job.events():
                if event.total and bar.total != event.total:
                    bar.total = event.total
                if event.current > bar.n:
                    bar.update(event.current - bar.n)
                if event.kind is EventKind.SUCCESS:
                    imported += 1
                elif event.kind is EventKind.ERROR:
                    errors.append((event.url or "-", event.message))
                elif event.kind is EventKind.COMPLETE:
                    final_message = event.message
                if event.message and event.kind is not EventKind.COMPLETE:
                    bar.set_postfix_str(event.message[:60], refresh=True)
    except KeyboardInterrupt:
        job.cancel()
        print("\nImport cancelled by user", file=sys.stderr)
        return 1

    stream = job.stream
    if final_message:
        print(final_message)
    elif not stream.completed:
        print("Warning: the server closed the stream before reporting completion", file=sys.stderr)
    print(f"Imported {imported}/{stream.total or imported + len(errors)} bookmarks from {path.name}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for url, err in errors[:10]:
            print(f"  {url}: {err}")
        if len(errors) > 10:
            print(f"  ... and {len(errors)-10} more")
    return 0
