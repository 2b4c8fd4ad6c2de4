"""コマンドラインツール.

- key: タグ名の正規化キーを表示
- parse: タグ文字列を分解して JSON Lines で表示
- cloud: occurrence 列を持つ CSV/Parquet に weight 列を追加
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

import polars as pl
from loguru import logger

from taggable_tags.core.cloud import DEFAULT_MAX_WEIGHT, DEFAULT_MIN_WEIGHT, calculate_weights_frame
from taggable_tags.core.normalize import multibyte_key
from taggable_tags.core.parser import DEFAULT_SEPARATOR, parse_tags


def _read_table(path: Path) -> pl.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() == ".parquet":
        return pl.read_parquet(path)
    return pl.read_csv(path)


def _write_table(df: pl.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".parquet":
        df.write_parquet(path)
    else:
        df.write_csv(path)
    logger.info(f"Wrote {df.height} rows to {path}")


def _cmd_key(args: argparse.Namespace) -> int:
    for name in args.names:
        print(multibyte_key(name))
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    for entry in parse_tags(args.string, args.separator):
        print(json.dumps(asdict(entry), ensure_ascii=False))
    return 0


def _cmd_cloud(args: argparse.Namespace) -> int:
    df = _read_table(args.input)
    weighted = calculate_weights_frame(df, args.min_size, args.max_size, column=args.column)
    if args.output is None:
        sys.stdout.write(weighted.write_csv())
    else:
        _write_table(weighted, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taggable-tags", description="Tag string and tag cloud utilities")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for stderr output (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_key = sub.add_parser("key", help="Print normalized keys for tag names")
    p_key.add_argument("names", nargs="+", help="Tag names")
    p_key.set_defaults(func=_cmd_key)

    p_parse = sub.add_parser("parse", help="Parse a tag string into JSON lines")
    p_parse.add_argument("string", help='Tag string, e.g. "foo, bar, cake:special"')
    p_parse.add_argument(
        "--separator",
        default=DEFAULT_SEPARATOR,
        help="Tag separator (default: ',')",
    )
    p_parse.set_defaults(func=_cmd_parse)

    p_cloud = sub.add_parser("cloud", help="Add a weight column to a CSV/Parquet table of tag occurrences")
    p_cloud.add_argument("input", type=Path, help="Input CSV or Parquet file")
    p_cloud.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output CSV or Parquet file (default: CSV to stdout)",
    )
    p_cloud.add_argument("--min-size", type=int, default=DEFAULT_MIN_WEIGHT, help="Weight of the lightest tag")
    p_cloud.add_argument("--max-size", type=int, default=DEFAULT_MAX_WEIGHT, help="Weight of the heaviest tag")
    p_cloud.add_argument("--column", default="occurrence", help="Occurrence column name")
    p_cloud.set_defaults(func=_cmd_cloud)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI エントリポイント."""
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
