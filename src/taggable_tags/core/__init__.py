"""タグ付けのコア処理群.

- 正規化（タグ名 → key）
- パース / 文字列化（タグ文字列 ⇔ TagEntry）
- 保存と関連付けの同期、使用回数キャッシュ
- タグクラウドの weight 計算
"""

from .cloud import CloudOptions, build_cloud, calculate_weights, calculate_weights_frame, tag_url_params
from .exceptions import EmptyCollectionError, NotFoundError, TaggableError, ValidationError
from .models import Association, CloudEntry, ExistingTag, OccurrenceCount, ReconcileMode, TagEntry
from .normalize import multibyte_key
from .occurrence import cache_occurrence
from .parser import parse_tags, parse_tags_grouped, tag_array_to_string
from .reconcile import delete_tagged, register_tags, save_tags
from .repository import TagRepository

__all__ = [
    "multibyte_key",
    "parse_tags",
    "parse_tags_grouped",
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
    "TagRepository",
    "TagEntry",
    "ExistingTag",
    "Association",
    "OccurrenceCount",
    "CloudEntry",
    "ReconcileMode",
    "TaggableError",
    "ValidationError",
    "NotFoundError",
    "EmptyCollectionError",
]
