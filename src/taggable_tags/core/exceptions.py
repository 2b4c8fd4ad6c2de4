"""Taggable exceptions.

タグ付け処理で送出するカスタム例外クラスを定義します。
リポジトリ（永続化層）由来の例外はラップせず、そのまま呼び出し側へ伝播させます。
"""

from __future__ import annotations


class TaggableError(Exception):
    """taggable_tags の例外基底クラス."""


class ValidationError(TaggableError):
    """入力が不正な場合の例外.

    save_tags() に空文字列や subject_id 無しで呼び出した場合、
    または weight のサイズ範囲が逆転している場合に送出します。
    """


class NotFoundError(TaggableError):
    """タグ ID を解決できなかった場合の例外.

    Attributes:
        key: 解決できなかったタグの正規化キー
        identifier: 解決できなかったタグの identifier（無い場合は None）
    """

    def __init__(self, key: str, identifier: str | None) -> None:
        """例外初期化.

        Args:
            key: 正規化キー
            identifier: identifier（カテゴリ）
        """
        self.key = key
        self.identifier = identifier
        message = (
            f"Tag could not be resolved: key={key!r}, identifier={identifier!r}. "
            "Repository returned no id for a tag that was expected to exist or to be created."
        )
        super().__init__(message)


class EmptyCollectionError(TaggableError):
    """空のコレクションに weight 計算を行った場合の例外."""

    def __init__(self, message: str = "Cannot calculate weights for an empty collection") -> None:
        super().__init__(message)
