"""Taggable（対象レコード種別ごとのタグ付け窓口）.

永続化層が保存/読み込みのタイミングで明示的に呼び出すためのファサードです。
設定（区切り文字・partition・モードなど）を保持し、コア関数へ引き渡します。

使用例:
    >>> taggable = Taggable(repository, "Article", TaggableConfig(partition="en"))
    >>> taggable.after_save(1, {"tag": "foo, bar"})
    >>> rows = taggable.after_find([{"id": 1, "tags": [{"name": "foo"}]}])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from loguru import logger

from taggable_tags.config import TaggableConfig
from taggable_tags.core.cloud import calculate_weights
from taggable_tags.core.models import OccurrenceCount, ReconcileMode, TagEntry, TagId
from taggable_tags.core.occurrence import cache_occurrence
from taggable_tags.core.parser import parse_tags, tag_array_to_string
from taggable_tags.core.reconcile import delete_tagged, register_tags, save_tags
from taggable_tags.core.repository import TagRepository


class Taggable:
    """対象レコード種別（subject_type）に紐づくタグ付け操作."""

    def __init__(
        self,
        repository: TagRepository,
        subject_type: str,
        config: TaggableConfig | None = None,
    ) -> None:
        self.repository = repository
        self.subject_type = subject_type
        self.config = config or TaggableConfig()

    def _partition(self, partition: str | None) -> str | None:
        return self.config.partition if partition is None else partition

    def parse(self, string: str | None) -> list[TagEntry]:
        return parse_tags(string, self.config.separator)

    def to_string(self, tags: Iterable[object] | None) -> str:
        return tag_array_to_string(tags, self.config.separator)

    def save_tags(
        self,
        string: str | None,
        subject_id: TagId | None,
        *,
        partition: str | None = None,
        mode: ReconcileMode | None = None,
    ) -> set[TagId]:
        """タグ文字列を保存し、subject_id の関連付けを同期する."""
        return save_tags(
            string,
            self.repository,
            subject_type=self.subject_type,
            subject_id=subject_id,
            partition=self._partition(partition),
            mode=mode or self.config.mode,
            separator=self.config.separator,
            cache_occurrence=self.config.cache_occurrence,
            scoped_occurrence=self.config.scoped_occurrence,
            tagged_counter=self.config.tagged_counter,
        )

    def register_tags(self, string: str | None) -> list[TagId]:
        return register_tags(string, self.repository, separator=self.config.separator)

    def delete_tagged(self, subject_id: TagId, *, partition: str | None = None) -> set[TagId]:
        """subject_id の関連付けを削除する（partition 未指定かつ既定値も無ければ全 partition）."""
        return delete_tagged(
            self.repository,
            subject_type=self.subject_type,
            subject_id=subject_id,
            partition=self._partition(partition),
            cache_occurrence=self.config.cache_occurrence,
            scoped_occurrence=self.config.scoped_occurrence,
        )

    def cache_occurrence(self, tag_ids: TagId | Iterable[TagId]) -> list[OccurrenceCount]:
        return cache_occurrence(
            tag_ids,
            self.repository,
            subject_type=self.subject_type,
            scoped_occurrence=self.config.scoped_occurrence,
        )

    def calculate_weights(self, entries: Iterable[Mapping[str, object]]) -> list[dict[str, object]]:
        return calculate_weights(entries, self.config.min_size, self.config.max_size)

    def after_save(self, subject_id: TagId, data: Mapping[str, object]) -> set[TagId] | None:
        """レコード保存後に呼び出す.

        - data にタグフィールドが無ければ何もしない
        - フィールドが空でなく automatic_tagging が有効なら save_tags()
        - フィールドが空で delete_tags_on_empty_field が有効なら delete_tagged()

        Returns:
            save_tags()/delete_tagged() の戻り値（何もしなかった場合は None）
        """
        if self.config.field not in data:
            return None

        value = data[self.config.field]
        if value and self.config.automatic_tagging:
            return self.save_tags(str(value), subject_id)
        if not value and self.config.delete_tags_on_empty_field:
            return self.delete_tagged(subject_id)

        logger.debug(f"after_save: nothing to do for {self.subject_type}#{subject_id}")
        return None

    def after_find(
        self,
        rows: Iterable[Mapping[str, object]],
        tags_key: str = "tags",
    ) -> list[dict[str, object]]:
        """読み込んだレコードにタグ文字列フィールドを付与する.

        Args:
            rows: レコード（dict）の列。tags_key にタグ配列を持つ
            tags_key: タグ配列のキー

        Returns:
            field にタグ文字列を設定したレコードのコピー
        """
        results: list[dict[str, object]] = []
        for row in rows:
            out = dict(row)
            tags = out.get(tags_key)
            out[self.config.field] = self.to_string(tags) if tags else ""
            if tags and self.config.unset_in_after_find:
                del out[tags_key]
            results.append(out)
        return results
