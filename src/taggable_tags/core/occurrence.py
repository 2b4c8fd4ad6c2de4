"""タグ使用回数（occurrence）キャッシュの更新.

関連付けの変更後に、対象タグの使用回数を数え直してタグ行へ保存します。
ベストエフォートのキャッシュであり、同時書き込みとの厳密な整合は保証しません。
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from .models import OccurrenceCount, TagId
from .repository import TagRepository


def _unique_ids(tag_ids: TagId | Iterable[TagId]) -> list[TagId]:
    if isinstance(tag_ids, int | str):
        return [tag_ids]
    return list(dict.fromkeys(tag_ids))


def cache_occurrence(
    tag_ids: TagId | Iterable[TagId],
    repository: TagRepository,
    *,
    subject_type: str,
    scoped_occurrence: bool = True,
) -> list[OccurrenceCount]:
    """タグの使用回数を数え直して保存する.

    Args:
        tag_ids: 対象タグ ID（単一 ID または ID の列。重複は除去される）
        repository: 永続化層
        subject_type: scoped_count を数える対象レコードの種類
        scoped_occurrence: スキーマに subject_type 別の使用回数列があるか

    Returns:
        保存した OccurrenceCount のリスト（入力順）
    """
    results: list[OccurrenceCount] = []

    for tag_id in _unique_ids(tag_ids):
        scoped_count = None
        if scoped_occurrence:
            scoped_count = repository.count_associations(tag_id, subject_type)
        total_count = repository.count_associations(tag_id)

        repository.persist_occurrence(tag_id, scoped_count, total_count)
        results.append(OccurrenceCount(tag_id=tag_id, scoped_count=scoped_count, total_count=total_count))
        logger.debug(f"Cached occurrence: tag_id={tag_id} scoped={scoped_count} total={total_count}")

    return results
