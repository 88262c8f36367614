#!/usr/bin/env python
"""CLI for listing the texts of a corpus.

Streams the corpus through map_corpus, so arbitrarily large corpora are
listed in constant memory. One row per text: name, kind, token count and
the first few words.

Example usage:
    python corpus_list.py --format treebank --root /data/ptb/wsj
    python corpus_list.py --format reuters --root rcv1.zip --limit 100 --output-format jsonl
    python corpus_list.py --format nps-chat --root nps_chat/ -o posts.tsv
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from tqdm import tqdm

from nlpcorpora import StopTraversal, map_corpus, registered_formats
from nlpcorpora.core.errors import CorpusError

if TYPE_CHECKING:
    from typing import TextIO

    from nlpcorpora import Text


def positive_int(value: str) -> int:
    """Argparse type for counts of at least one."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="List the texts of a corpus.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --format brown --root ~/nlp_data/brown
  %(prog)s --format reuters --root rcv1.zip --skip-malformed --limit 50
        """,
    )

    # Corpus parameters
    parser.add_argument(
        "--format", "-f",
        dest="corpus_format",
        required=True,
        choices=registered_formats(),
        help="Corpus format tag",
    )
    parser.add_argument(
        "--root", "-r",
        type=Path,
        default=None,
        help="Corpus path (default: the format's configured location)",
    )
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Skip malformed nested archives (reuters only)",
    )

    # Output parameters
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--output-format",
        choices=["tsv", "jsonl"],
        default="tsv",
        help="Output format (default: tsv)",
    )
    parser.add_argument(
        "--limit", "-n",
        type=positive_int,
        help="Maximum number of texts",
    )
    parser.add_argument(
        "--preview",
        type=int,
        default=8,
        help="Number of leading words to show (default: 8)",
    )

    # Verbosity
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress messages",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log each entry read",
    )

    return parser.parse_args(argv)


def text_row(text: Text, preview: int) -> dict:
    """Summarize a text as an output row."""
    return {
        "name": text.name,
        "kind": text.kind or "",
        "tokens": len(text.tokens),
        "preview": " ".join(text.words[:preview]),
    }


def write_row(row: dict, output: TextIO, fmt: str, header: bool) -> None:
    """Write one row in the specified format."""
    if fmt == "jsonl":
        output.write(json.dumps(row, ensure_ascii=False) + "\n")
        return
    if header:
        output.write("\t".join(row.keys()) + "\n")
    values = [str(v).replace("\t", " ").replace("\n", " ") for v in row.values()]
    output.write("\t".join(values) + "\n")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    start_time = time.time()

    options = {}
    if args.skip_malformed:
        options["skip_malformed"] = True

    output = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    pbar = tqdm(desc="Reading", unit=" texts", disable=args.quiet, file=sys.stderr)
    written = 0

    def emit(text: Text) -> None:
        nonlocal written
        write_row(text_row(text, args.preview), output, args.output_format, header=written == 0)
        written += 1
        pbar.update(1)
        if args.limit is not None and written >= args.limit:
            raise StopTraversal

    try:
        map_corpus(args.corpus_format, args.root, emit, **options)
    except (CorpusError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        pbar.close()
        if output is not sys.stdout:
            output.close()

    if not args.quiet:
        elapsed = time.time() - start_time
        print(f"Listed {written} texts in {elapsed:.2f}s", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
