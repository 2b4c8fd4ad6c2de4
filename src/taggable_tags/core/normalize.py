"""タグ名の正規化（name → key）.

タグの表示名から、重複判定・検索に使う正規化キー（keyname）を生成します。

設計方針:
    - 大文字小文字・全角スペース・記号の揺れはキー上では同一視する
    - `_` と `-` は区切りとして扱わず、単純に削除する
    - 最終的に空白はすべて削除する（連続空白の圧縮ではない）
"""

from __future__ import annotations

import re

_IDEOGRAPHIC_SPACE = "\u3000"
_REMOVED_CHARS = str.maketrans("", "", "_-?")
_PUNCTUATION = re.compile(r"[:#*\"()~$^{}`@+=;,<>!&%.\]/'\\|\[]")
_SPACES = re.compile(r" +")


def multibyte_key(name: str | None) -> str:
    """タグ名からマルチバイト安全な正規化キーを生成する.

    Args:
        name: タグの表示名（例: "Café", "Hatsune-Miku", "foo bar"）

    Returns:
        正規化キー（例: "café", "hatsunemiku", "foobar"）

    Examples:
        >>> multibyte_key("Hatsune_Miku")
        'hatsunemiku'
        >>> multibyte_key("C++ (lang)")
        'clang'
        >>> multibyte_key("日本\u3000語")
        '日本語'
    """
    if not name:
        return ""

    s = name.lower()
    s = s.replace(_IDEOGRAPHIC_SPACE, " ")
    s = s.translate(_REMOVED_CHARS)
    s = _PUNCTUATION.sub(" ", s)
    s = s.strip()
    return _SPACES.sub("", s)
