"""タグクラウド用の weight / size 計算.

使用回数（occurrence）を [min_size, max_size] の整数へ線形に写像します。

    weight = ceil(min_size + (occurrence - min_occ) * (max_size - min_size) / spread)

spread = max_occ - min_occ（0 の場合は 1）。浮動小数の誤差で ceil が1ずれないよう、
整数演算（切り上げ除算）で計算します。
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import polars as pl
from loguru import logger

from .exceptions import EmptyCollectionError, ValidationError
from .models import CloudEntry

DEFAULT_MIN_WEIGHT = 10
DEFAULT_MAX_WEIGHT = 20


@dataclass(frozen=True)
class CloudOptions:
    """タグクラウド表示オプション.

    Attributes:
        shuffle: 表示順をシャッフルするか（weight には影響しない）
        min_weight / max_weight: occurrence → weight の範囲
        min_size / max_size: weight → 表示サイズの範囲
        url: タグリンクの既定パラメータ
        named: タグキーを渡すパラメータ名
    """

    shuffle: bool = True
    min_weight: int = DEFAULT_MIN_WEIGHT
    max_weight: int = DEFAULT_MAX_WEIGHT
    min_size: int = 80
    max_size: int = 160
    url: Mapping[str, str] = field(default_factory=lambda: {"controller": "search"})
    named: str = "by"


def _check_range(min_size: int, max_size: int) -> None:
    if min_size > max_size:
        raise ValidationError(f"min_size must be <= max_size (got {min_size} > {max_size})")


def _scale(value: int, low: int, spread: int, min_size: int, max_size: int) -> int:
    # ceil(a / b) == -(-a // b)（a >= 0, b > 0）
    numerator = (value - low) * (max_size - min_size)
    return min_size + -(-numerator // spread)


def _bounds(values: Sequence[int]) -> tuple[int, int]:
    low = min(values)
    spread = max(values) - low
    return low, (spread or 1)


def calculate_weights(
    entries: Iterable[Mapping[str, object]],
    min_size: int = DEFAULT_MIN_WEIGHT,
    max_size: int = DEFAULT_MAX_WEIGHT,
) -> list[dict[str, object]]:
    """occurrence から weight を計算する.

    Args:
        entries: occurrence キーを持つ dict の列
        min_size: 最も少ないタグの weight
        max_size: 最も多いタグの weight

    Returns:
        入力をコピーし weight を追加した dict のリスト（入力順）

    Raises:
        EmptyCollectionError: entries が空の場合
        ValidationError: min_size > max_size の場合

    Examples:
        >>> [e["weight"] for e in calculate_weights([{"occurrence": 1}, {"occurrence": 10}])]
        [10, 20]
    """
    _check_range(min_size, max_size)
    rows = [dict(entry) for entry in entries]
    if not rows:
        raise EmptyCollectionError()

    occurrences = [int(row["occurrence"]) for row in rows]
    low, spread = _bounds(occurrences)
    for row, occurrence in zip(rows, occurrences, strict=True):
        row["weight"] = _scale(occurrence, low, spread, min_size, max_size)
    return rows


def calculate_weights_frame(
    df: pl.DataFrame,
    min_size: int = DEFAULT_MIN_WEIGHT,
    max_size: int = DEFAULT_MAX_WEIGHT,
    column: str = "occurrence",
) -> pl.DataFrame:
    """calculate_weights() の DataFrame 版.

    Args:
        df: occurrence 列を含む DataFrame
        min_size: 最小 weight
        max_size: 最大 weight
        column: occurrence 列名

    Returns:
        weight 列（Int64）を追加した DataFrame

    Raises:
        ValueError: column が存在しない場合
        EmptyCollectionError: df が空の場合
    """
    if column not in df.columns:
        raise ValueError(f"calculate_weights_frame() requires '{column}' column in df.")
    _check_range(min_size, max_size)
    if df.height == 0:
        raise EmptyCollectionError()

    values = df.get_column(column).cast(pl.Int64)
    low = int(values.min())
    spread = (int(values.max()) - low) or 1
    numerator = (pl.col(column).cast(pl.Int64) - low) * (max_size - min_size)
    # 切り上げ除算: (n + d - 1) // d
    return df.with_columns(
        (min_size + (numerator + spread - 1) // spread).cast(pl.Int64).alias("weight")
    )


def _get(tag: object, name: str, default: object = None) -> object:
    if isinstance(tag, Mapping):
        return tag.get(name, default)
    return getattr(tag, name, default)


def build_cloud(
    tags: Sequence[object],
    options: CloudOptions | None = None,
    rng: random.Random | None = None,
) -> list[CloudEntry]:
    """タグクラウド表示用のエントリを作る.

    occurrence → weight（min_weight..max_weight）→ size（min_size..max_size）の順に
    線形写像します。tags は id / name / key / occurrence を持つ dict かオブジェクト。

    Args:
        tags: タグの列
        options: 表示オプション
        rng: シャッフルに使う乱数生成器（テスト用に注入可能）

    Returns:
        CloudEntry のリスト（空入力なら空リスト）
    """
    options = options or CloudOptions()
    if not tags:
        return []
    _check_range(options.min_size, options.max_size)

    weighted = calculate_weights(
        ({"occurrence": int(_get(tag, "occurrence", 0) or 0)} for tag in tags),
        options.min_weight,
        options.max_weight,
    )
    weights = [int(row["weight"]) for row in weighted]
    low, spread = _bounds(weights)

    entries = [
        CloudEntry(
            tag_id=_get(tag, "id"),
            name=str(_get(tag, "name", "")),
            key=str(_get(tag, "key", "")),
            occurrence=int(row["occurrence"]),
            weight=weight,
            size=_scale(weight, low, spread, options.min_size, options.max_size),
        )
        for tag, row, weight in zip(tags, weighted, weights, strict=True)
    ]

    if options.shuffle:
        (rng or random.Random()).shuffle(entries)

    logger.debug(f"Built tag cloud with {len(entries)} entries")
    return entries


def tag_url_params(entry: CloudEntry, options: CloudOptions | None = None) -> dict[str, str]:
    """タグリンク用のパラメータを生成する（named パラメータにタグキーを入れる）."""
    options = options or CloudOptions()
    return {**options.url, options.named: entry.key}
