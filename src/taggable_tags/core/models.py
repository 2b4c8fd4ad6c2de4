"""タグ付けで扱うレコード型.

永続化層とのやり取りはすべてここで定義する素のデータ（frozen dataclass）で行います。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TagId = int | str


class ReconcileMode(Enum):
    """関連付けの同期モード.

    - REPLACE: 入力に無いタグの関連付けを削除し、入力と一致させる
    - APPEND: 削除は行わず、未関連のタグだけを追加する
    """

    REPLACE = "replace"
    APPEND = "append"


@dataclass(frozen=True)
class TagEntry:
    """パース結果の1タグ.

    タグの一意性は name ではなく (key, identifier) の組で決まります。
    """

    name: str
    identifier: str | None
    key: str

    @property
    def pair(self) -> tuple[str, str | None]:
        return (self.key, self.identifier)


@dataclass(frozen=True)
class ExistingTag:
    """永続化済みのタグ."""

    id: TagId
    key: str
    identifier: str | None
    name: str

    @property
    def pair(self) -> tuple[str, str | None]:
        return (self.key, self.identifier)


@dataclass(frozen=True)
class Association:
    """タグと対象レコード（subject）の関連付け."""

    tag_id: TagId
    subject_type: str
    subject_id: TagId
    partition: str | None


@dataclass(frozen=True)
class OccurrenceCount:
    """タグの使用回数キャッシュ.

    scoped_count は subject_type を限定した件数、total_count は全 subject_type の件数。
    scoped 列を持たないスキーマでは scoped_count は None。
    """

    tag_id: TagId
    scoped_count: int | None
    total_count: int


@dataclass(frozen=True)
class CloudEntry:
    """タグクラウド表示用のエントリ."""

    tag_id: TagId
    name: str
    key: str
    occurrence: int
    weight: int
    size: int
