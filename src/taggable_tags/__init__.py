"""taggable-tags: 任意のレコードに自由記述タグを付けるためのコアライブラリ.

タグ文字列のパース・正規化、既存タグとの突き合わせ、関連付けの同期、
使用回数キャッシュ、タグクラウドの weight 計算を提供する。
永続化は TagRepository を実装した外部に委譲する。
"""

from taggable_tags.config import TaggableConfig, load_config
from taggable_tags.core import (
    Association,
    CloudEntry,
    CloudOptions,
    EmptyCollectionError,
    ExistingTag,
    NotFoundError,
    OccurrenceCount,
    ReconcileMode,
    TagEntry,
    TaggableError,
    TagRepository,
    ValidationError,
    build_cloud,
    cache_occurrence,
    calculate_weights,
    calculate_weights_frame,
    delete_tagged,
    multibyte_key,
    parse_tags,
    register_tags,
    save_tags,
    tag_array_to_string,
    tag_url_params,
)
from taggable_tags.taggable import Taggable

__version__ = "0.1.0"

__all__ = [
    # core
    "multibyte_key",
    "parse_tags",
    "tag_array_to_string",
    "save_tags",
    "register_tags",
    "delete_tagged",
    "cache_occurrence",
    "calculate_weights",
    "calculate_weights_frame",
    "build_cloud",
    "tag_url_params",
    "CloudOptions",
    # models
    "TagEntry",
    "ExistingTag",
    "Association",
    "OccurrenceCount",
    "CloudEntry",
    "ReconcileMode",
    "TagRepository",
    # errors
    "TaggableError",
    "ValidationError",
    "NotFoundError",
    "EmptyCollectionError",
    # config / facade
    "TaggableConfig",
    "load_config",
    "Taggable",
]
