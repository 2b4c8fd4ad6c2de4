"""タグ文字列のパースと文字列化.

入力フォームなどから来る区切り文字列（例: "foo, bar, cake:special"）を TagEntry 列に分解し、
逆に TagEntry 列を入力フォーム向けの文字列へ戻します。

設計方針:
    - パースは決して例外を投げない（ユーザー入力の自由記述を失敗させない）
    - 空要素・キーが空になる要素は黙って捨てる
    - 出現順（最初に現れた順）を維持する
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from loguru import logger

from .models import ExistingTag, TagEntry
from .normalize import multibyte_key

DEFAULT_SEPARATOR = ","


def _split_identifier(piece: str) -> tuple[str | None, str]:
    """`identifier:name` を分解する（最初の `:` で分割）."""
    if ":" not in piece:
        return None, piece

    identifier, _, name = piece.partition(":")
    identifier = identifier.strip()
    # ":foo" のような空 identifier は identifier 無しとして扱う
    return (identifier or None), name


def parse_tags_grouped(
    string: str | None,
    separator: str = DEFAULT_SEPARATOR,
) -> tuple[list[TagEntry], dict[str, list[str | None]]]:
    """タグ文字列を分解し、キーごとの identifier 一覧も併せて返す.

    Args:
        string: 入力タグ文字列
        separator: 区切り文字

    Returns:
        (TagEntry のリスト, key → identifier リスト) のタプル
    """
    entries: list[TagEntry] = []
    identifiers: dict[str, list[str | None]] = {}

    if not string:
        return entries, identifiers
    if not separator:
        logger.warning("Empty separator given; no tags parsed")
        return entries, identifiers

    for piece in string.split(separator):
        identifier, name = _split_identifier(piece)
        name = name.strip()
        if not name:
            continue

        key = multibyte_key(name)
        if not key:
            logger.debug(f"Skipped tag with empty key: {name!r}")
            continue

        seen = identifiers.get(key)
        if seen is not None and (identifier is None or identifier in seen):
            continue

        entries.append(TagEntry(name=name, identifier=identifier, key=key))
        identifiers.setdefault(key, []).append(identifier)

    return entries, identifiers


def parse_tags(string: str | None, separator: str = DEFAULT_SEPARATOR) -> list[TagEntry]:
    """タグ文字列を TagEntry のリストに分解する.

    Args:
        string: 入力タグ文字列（例: "foo, bar, cake:special"）
        separator: 区切り文字（既定: ","）

    Returns:
        重複除去済みの TagEntry リスト（出現順）

    Examples:
        >>> [t.name for t in parse_tags("foo, Foo, bar")]
        ['foo', 'bar']
        >>> parse_tags("cake:special")[0].identifier
        'cake'
    """
    entries, _ = parse_tags_grouped(string, separator)
    return entries


def _name_and_identifier(tag: TagEntry | ExistingTag | Mapping[str, object]) -> tuple[str, object]:
    if isinstance(tag, Mapping):
        return str(tag.get("name") or ""), tag.get("identifier")
    return tag.name, tag.identifier


def tag_array_to_string(
    tags: Iterable[TagEntry | ExistingTag | Mapping[str, object]] | None,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """タグ列を入力フォーム用の文字列に戻す（parse_tags の逆変換）.

    identifier があれば `identifier:name`、無ければ `name`（name に ":" を含む場合は `:name`）を `separator + " "` で連結します。

    Args:
        tags: TagEntry / ExistingTag、または name（と identifier）を持つ dict の列
        separator: 区切り文字

    Returns:
        連結済み文字列（空入力なら ""）

    Examples:
        >>> tag_array_to_string([{"name": "foo"}, {"name": "special", "identifier": "cake"}])
        'foo, cake:special'
    """
    if not tags:
        return ""

    parts: list[str] = []
    for tag in tags:
        name, identifier = _name_and_identifier(tag)
        if identifier:
            parts.append(f"{identifier}:{name}")
        elif ":" in name:
            # 先頭の ":" で identifier 無しを明示する（再パース時に分割されないように）
            parts.append(f":{name}")
        else:
            parts.append(name)

    return f"{separator} ".join(parts)
