"""タグの保存と関連付けの同期.

- パース済みタグと既存タグの差分から新規タグを作成（(key, identifier) 単位）
- 対象レコード（subject）の関連付けを入力に合わせて追加/削除
- 関連付け変更後の使用回数キャッシュ更新

REPLACE モードでも既に正しく関連付いているタグは削除→再作成しない。
関連付け行に付随する情報（times_tagged など）を保持するため。
"""

from __future__ import annotations

from loguru import logger

from .exceptions import NotFoundError, ValidationError
from .models import ReconcileMode, TagEntry, TagId
from .occurrence import cache_occurrence as _cache_occurrence
from .parser import DEFAULT_SEPARATOR, parse_tags
from .repository import TagRepository


def _find_new_tags(
    entries: list[TagEntry],
    known: dict[tuple[str, str | None], TagId],
) -> list[TagEntry]:
    """既存タグに無い (key, identifier) の組を新規タグ候補として抽出する."""
    known_identifiers: dict[str, set[str | None]] = {}
    for key, identifier in known:
        known_identifiers.setdefault(key, set()).add(identifier)

    new_tags: list[TagEntry] = []
    for entry in entries:
        identifiers = known_identifiers.get(entry.key)
        if identifiers is None:
            new_tags.append(entry)
        elif entry.identifier not in identifiers:
            # 同じキーで identifier 違いの別タグ
            new_tags.append(entry)
    return new_tags


def _resolve_tag_ids(
    entries: list[TagEntry],
    repository: TagRepository,
) -> tuple[list[TagId], list[TagId]]:
    """各タグを既存タグ ID に解決し、無ければ作成する.

    Returns:
        (入力順のタグ ID リスト, 新規作成したタグ ID リスト)

    Raises:
        NotFoundError: 作成後もタグ ID が得られない場合
    """
    existing = repository.find_tags([entry.pair for entry in entries])
    known: dict[tuple[str, str | None], TagId] = {tag.pair: tag.id for tag in existing}

    created: list[TagId] = []
    for entry in _find_new_tags(entries, known):
        tag_id = repository.create_tag(entry)
        if tag_id is None:
            raise NotFoundError(entry.key, entry.identifier)
        known[entry.pair] = tag_id
        created.append(tag_id)
        logger.debug(f"Created tag: id={tag_id} key={entry.key!r} identifier={entry.identifier!r}")

    tag_ids: list[TagId] = []
    for entry in entries:
        tag_id = known.get(entry.pair)
        if tag_id is None:
            raise NotFoundError(entry.key, entry.identifier)
        tag_ids.append(tag_id)
    return tag_ids, created


def _coerce_mode(mode: ReconcileMode | str) -> ReconcileMode:
    """文字列の mode を ReconcileMode に変換する."""
    if isinstance(mode, ReconcileMode):
        return mode
    try:
        return ReconcileMode(str(mode).lower())
    except ValueError as e:
        valid = [m.value for m in ReconcileMode]
        raise ValidationError(f"Invalid mode '{mode}'. Valid modes: {valid}") from e


def register_tags(
    string: str | None,
    repository: TagRepository,
    *,
    separator: str = DEFAULT_SEPARATOR,
) -> list[TagId]:
    """タグだけを作成する（関連付けは行わない）.

    Args:
        string: 入力タグ文字列
        repository: 永続化層
        separator: 区切り文字

    Returns:
        入力順のタグ ID リスト（既存タグも含む）
    """
    entries = parse_tags(string, separator)
    if not entries:
        return []
    tag_ids, created = _resolve_tag_ids(entries, repository)
    logger.info(f"Registered tags: {len(tag_ids)} total, {len(created)} created")
    return tag_ids


def save_tags(
    string: str | None,
    repository: TagRepository,
    *,
    subject_type: str,
    subject_id: TagId | None,
    partition: str | None = None,
    mode: ReconcileMode | str = ReconcileMode.REPLACE,
    separator: str = DEFAULT_SEPARATOR,
    cache_occurrence: bool = True,
    scoped_occurrence: bool = True,
    tagged_counter: bool = False,
) -> set[TagId]:
    """タグ文字列を保存し、対象レコードとの関連付けを同期する.

    Args:
        string: カンマ区切りなどのタグ文字列。`identifier:name` 形式で
            identifier（カテゴリ）付きのタグを指定できる（例: "foo, bar, cake:special"）
        repository: 永続化層
        subject_type: 対象レコードの種類
        subject_id: 対象レコードの ID
        partition: 関連付けの partition（言語など）
        mode: REPLACE は入力に無い関連付けを削除、APPEND は追加のみ（"replace" / "append" の文字列も可）
        separator: 区切り文字
        cache_occurrence: 関連付け変更後に使用回数キャッシュを更新するか
        scoped_occurrence: subject_type 別の使用回数も保存するか
        tagged_counter: APPEND 時、既に関連付け済みのタグの times_tagged を +1 するか

    Returns:
        同期後に対象レコードへ関連付いている tag_id の集合

    Raises:
        ValidationError: string が空、subject_id が無い、または mode が不正な場合
        NotFoundError: タグ ID を解決できなかった場合
    """
    if not isinstance(string, str) or not string:
        raise ValidationError("save_tags() requires a non-empty tag string. Use delete_tagged() to clear tags.")
    if subject_id is None or subject_id == "":
        raise ValidationError("save_tags() requires a subject_id.")
    mode = _coerce_mode(mode)

    entries = parse_tags(string, separator)
    if not entries:
        logger.warning(f"No tags parsed from input: {string!r}")
        # 関連付けは変更しないので、現在の関連付けをそのまま返す
        return {
            association.tag_id
            for association in repository.find_associations(subject_type, subject_id, partition)
        }

    desired_ids, created = _resolve_tag_ids(entries, repository)
    desired = set(desired_ids)

    already = {
        association.tag_id
        for association in repository.find_associations(subject_type, subject_id, partition)
    }
    kept = already & desired

    if mode is ReconcileMode.REPLACE:
        repository.delete_associations(subject_type, subject_id, partition, except_tag_ids=kept)
        final = set(desired)
    else:
        if tagged_counter and kept:
            repository.increment_tagged_counter(kept, subject_type, subject_id, partition)
        final = already | desired

    # 作成順を入力順に揃える
    to_link = [tag_id for tag_id in dict.fromkeys(desired_ids) if tag_id not in already]
    for tag_id in to_link:
        repository.create_association(tag_id, subject_type, subject_id, partition)

    removed = already - final
    logger.info(
        f"Saved tags for {subject_type}#{subject_id} (partition={partition!r}, mode={mode.value}): "
        f"created={len(created)} linked={len(to_link)} kept={len(kept)} unlinked={len(removed)}"
    )

    if cache_occurrence:
        recount = list(dict.fromkeys([*already, *desired_ids]))
        _cache_occurrence(
            recount,
            repository,
            subject_type=subject_type,
            scoped_occurrence=scoped_occurrence,
        )

    return final


def delete_tagged(
    repository: TagRepository,
    *,
    subject_type: str,
    subject_id: TagId,
    partition: str | None = None,
    cache_occurrence: bool = True,
    scoped_occurrence: bool = True,
) -> set[TagId]:
    """対象レコードの関連付けをすべて削除する.

    Args:
        repository: 永続化層
        subject_type: 対象レコードの種類
        subject_id: 対象レコードの ID
        partition: 削除対象の partition（None なら全 partition）
        cache_occurrence: 削除後に使用回数キャッシュを更新するか
        scoped_occurrence: subject_type 別の使用回数も保存するか

    Returns:
        関連付けを外した tag_id の集合
    """
    removed = [
        association.tag_id
        for association in repository.find_associations(subject_type, subject_id, partition)
    ]
    repository.delete_associations(subject_type, subject_id, partition)
    logger.info(f"Deleted {len(removed)} association(s) for {subject_type}#{subject_id} (partition={partition!r})")

    if cache_occurrence and removed:
        _cache_occurrence(
            removed,
            repository,
            subject_type=subject_type,
            scoped_occurrence=scoped_occurrence,
        )

    return set(removed)
