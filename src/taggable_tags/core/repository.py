"""タグ永続化層とのインターフェース（基底クラス）.

タグ付けコアは永続化を行いません。タグ行・関連付け行・使用回数キャッシュの読み書きは、
このクラスを継承した外部実装（ORM / SQL / API クライアントなど）に委譲します。

前提:
    - create_tag は (key, identifier) の一意制約下で同時実行されても安全であること
    - partition=None は「全 partition」を意味する（find/delete のみ）
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from .models import Association, ExistingTag, TagEntry, TagId


class TagRepository(ABC):
    """タグ永続化層の基底クラス.

    全ての永続化実装はこのクラスを継承し、抽象メソッドを実装します。
    """

    @abstractmethod
    def find_tags(self, pairs: Sequence[tuple[str, str | None]]) -> list[ExistingTag]:
        """(key, identifier) の組に一致する既存タグを取得する."""
        ...

    @abstractmethod
    def create_tag(self, entry: TagEntry) -> TagId | None:
        """タグを新規作成し、その ID を返す."""
        ...

    @abstractmethod
    def find_associations(
        self,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
        tag_ids: Iterable[TagId] | None = None,
    ) -> list[Association]:
        """対象レコードの関連付けを取得する.

        Args:
            subject_type: 対象レコードの種類（モデル名など）
            subject_id: 対象レコードの ID
            partition: partition（言語など）。None なら全 partition
            tag_ids: 指定した場合、この tag_id に限定する
        """
        ...

    @abstractmethod
    def create_association(
        self,
        tag_id: TagId,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
    ) -> None:
        """関連付けを1件作成する."""
        ...

    @abstractmethod
    def delete_associations(
        self,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
        except_tag_ids: Iterable[TagId] | None = None,
    ) -> None:
        """対象レコードの関連付けを削除する（except_tag_ids は残す）."""
        ...

    @abstractmethod
    def count_associations(self, tag_id: TagId, subject_type: str | None = None) -> int:
        """タグの関連付け件数を数える（subject_type 指定時はその種類に限定）."""
        ...

    @abstractmethod
    def persist_occurrence(
        self,
        tag_id: TagId,
        scoped_count: int | None,
        total_count: int,
    ) -> None:
        """使用回数キャッシュを保存する（scoped_count が None なら scoped 列は更新しない）."""
        ...

    def increment_tagged_counter(
        self,
        tag_ids: Iterable[TagId],
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
    ) -> None:
        """既に関連付け済みのタグについて、タグ付け回数（times_tagged）を +1 する.

        tagged_counter を有効にした場合のみ呼ばれます。
        """
        raise NotImplementedError(f"{type(self).__name__} does not support tagged counters")
