"""タグ付け設定.

TaggableConfig は save_tags() などに渡すオプションをまとめた設定です。
YAML ファイルから読み込むこともできます。

YAML形式:
    separator: ","
    field: tag
    partition: en
    mode: replace          # replace | append
    cache_occurrence: true
    scoped_occurrence: true
    tagged_counter: false
    automatic_tagging: true
    delete_tags_on_empty_field: false
    unset_in_after_find: false
    min_size: 10
    max_size: 20
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml
from loguru import logger

from taggable_tags.core.models import ReconcileMode


@dataclass(frozen=True)
class TaggableConfig:
    """タグ付け設定.

    Attributes:
        separator: タグ文字列の区切り文字（1文字）
        field: タグ文字列を保持するレコードのフィールド名
        partition: 関連付けの partition（言語など）の既定値
        mode: 関連付けの同期モード
        cache_occurrence: 関連付け変更後に使用回数キャッシュを更新するか
        scoped_occurrence: subject_type 別の使用回数列がスキーマにあるか
        tagged_counter: APPEND 時に times_tagged を +1 するか
        automatic_tagging: after_save() で自動的にタグを保存するか
        delete_tags_on_empty_field: フィールドが空なら関連付けを削除するか
        unset_in_after_find: after_find() でタグ配列を取り除くか
        min_size / max_size: weight の範囲
    """

    separator: str = ","
    field: str = "tag"
    partition: str | None = None
    mode: ReconcileMode = ReconcileMode.REPLACE
    cache_occurrence: bool = True
    scoped_occurrence: bool = True
    tagged_counter: bool = False
    automatic_tagging: bool = True
    delete_tags_on_empty_field: bool = False
    unset_in_after_find: bool = False
    min_size: int = 10
    max_size: int = 20

    def __post_init__(self) -> None:
        if isinstance(self.mode, str):
            try:
                object.__setattr__(self, "mode", ReconcileMode(self.mode.lower()))
            except ValueError as e:
                valid = [m.value for m in ReconcileMode]
                raise ValueError(f"Invalid mode '{self.mode}'. Valid modes: {valid}") from e

        if not isinstance(self.separator, str) or len(self.separator) != 1:
            raise ValueError(f"separator must be a single character, got {self.separator!r}")

        if self.min_size > self.max_size:
            raise ValueError(f"min_size must be <= max_size (got {self.min_size} > {self.max_size})")


def load_config(config_path: Path | str) -> TaggableConfig:
    """YAMLファイルから設定を読み込む.

    Args:
        config_path: 設定YAMLファイルのパス

    Returns:
        設定オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: YAML形式が不正、未知のキー、または値が不正な場合
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in config file: {config_path}"
        raise ValueError(msg) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping, got {type(data)}"
        raise ValueError(msg)

    known = {f.name for f in fields(TaggableConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown config key(s) in {config_path}: {', '.join(unknown)}"
        raise ValueError(msg)

    logger.info(f"Loaded taggable config from {config_path}")
    return TaggableConfig(**data)
