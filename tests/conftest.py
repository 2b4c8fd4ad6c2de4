"""テスト共通フィクスチャ.

外部の永続化層の代わりに、sqlite3 のインメモリ DB で TagRepository を実装する。
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator, Sequence

import pytest

from taggable_tags.core.models import Association, ExistingTag, TagEntry, TagId
from taggable_tags.core.repository import TagRepository

SCHEMA_SQL = """
CREATE TABLE TAGS (
    id INTEGER NOT NULL PRIMARY KEY,
    identifier TEXT NULL,
    name TEXT NOT NULL,
    keyname TEXT NOT NULL,
    occurrence INTEGER NOT NULL DEFAULT 0,
    scoped_occurrence INTEGER NULL
);
CREATE UNIQUE INDEX idx_tags_keyname_identifier ON TAGS(keyname, COALESCE(identifier, ''));
CREATE TABLE TAGGED (
    id INTEGER NOT NULL PRIMARY KEY,
    tag_id INTEGER NOT NULL,
    model TEXT NOT NULL,
    foreign_key TEXT NOT NULL,
    language TEXT NULL,
    times_tagged INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY(tag_id) REFERENCES TAGS(id)
);
"""


def _in_clause(values: Sequence[object]) -> str:
    return ", ".join("?" for _ in values)


class SqliteTagRepository(TagRepository):
    """sqlite3 による TagRepository 実装（テスト用）."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.executescript(SCHEMA_SQL)

    def find_tags(self, pairs: Sequence[tuple[str, str | None]]) -> list[ExistingTag]:
        tags: list[ExistingTag] = []
        for key, identifier in pairs:
            row = self.conn.execute(
                "SELECT id, keyname, identifier, name FROM TAGS WHERE keyname = ? AND identifier IS ?",
                (key, identifier),
            ).fetchone()
            if row is not None:
                tags.append(ExistingTag(id=row[0], key=row[1], identifier=row[2], name=row[3]))
        return tags

    def create_tag(self, entry: TagEntry) -> TagId | None:
        cursor = self.conn.execute(
            "INSERT INTO TAGS (identifier, name, keyname) VALUES (?, ?, ?)",
            (entry.identifier, entry.name, entry.key),
        )
        self.conn.commit()
        return cursor.lastrowid

    def find_associations(
        self,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
        tag_ids: Iterable[TagId] | None = None,
    ) -> list[Association]:
        sql = "SELECT tag_id, model, foreign_key, language FROM TAGGED WHERE model = ? AND foreign_key = ?"
        params: list[object] = [subject_type, str(subject_id)]
        if partition is not None:
            sql += " AND language = ?"
            params.append(partition)
        if tag_ids is not None:
            ids = list(tag_ids)
            sql += f" AND tag_id IN ({_in_clause(ids)})"
            params.extend(ids)
        rows = self.conn.execute(sql + " ORDER BY id", params).fetchall()
        return [
            Association(tag_id=row[0], subject_type=row[1], subject_id=row[2], partition=row[3])
            for row in rows
        ]

    def create_association(
        self,
        tag_id: TagId,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
    ) -> None:
        self.conn.execute(
            "INSERT INTO TAGGED (tag_id, model, foreign_key, language) VALUES (?, ?, ?, ?)",
            (tag_id, subject_type, str(subject_id), partition),
        )
        self.conn.commit()

    def delete_associations(
        self,
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
        except_tag_ids: Iterable[TagId] | None = None,
    ) -> None:
        sql = "DELETE FROM TAGGED WHERE model = ? AND foreign_key = ?"
        params: list[object] = [subject_type, str(subject_id)]
        if partition is not None:
            sql += " AND language = ?"
            params.append(partition)
        keep = list(except_tag_ids or [])
        if keep:
            sql += f" AND tag_id NOT IN ({_in_clause(keep)})"
            params.extend(keep)
        self.conn.execute(sql, params)
        self.conn.commit()

    def count_associations(self, tag_id: TagId, subject_type: str | None = None) -> int:
        if subject_type is None:
            row = self.conn.execute("SELECT COUNT(*) FROM TAGGED WHERE tag_id = ?", (tag_id,)).fetchone()
        else:
            row = self.conn.execute(
                "SELECT COUNT(*) FROM TAGGED WHERE tag_id = ? AND model = ?",
                (tag_id, subject_type),
            ).fetchone()
        return int(row[0])

    def persist_occurrence(self, tag_id: TagId, scoped_count: int | None, total_count: int) -> None:
        if scoped_count is None:
            self.conn.execute("UPDATE TAGS SET occurrence = ? WHERE id = ?", (total_count, tag_id))
        else:
            self.conn.execute(
                "UPDATE TAGS SET occurrence = ?, scoped_occurrence = ? WHERE id = ?",
                (total_count, scoped_count, tag_id),
            )
        self.conn.commit()

    def increment_tagged_counter(
        self,
        tag_ids: Iterable[TagId],
        subject_type: str,
        subject_id: TagId,
        partition: str | None,
    ) -> None:
        ids = list(tag_ids)
        sql = (
            "UPDATE TAGGED SET times_tagged = times_tagged + 1 "
            f"WHERE model = ? AND foreign_key = ? AND tag_id IN ({_in_clause(ids)})"
        )
        params: list[object] = [subject_type, str(subject_id), *ids]
        if partition is not None:
            sql += " AND language = ?"
            params.append(partition)
        self.conn.execute(sql, params)
        self.conn.commit()

    # --- テスト用の参照ヘルパー ---

    def all_tags(self) -> list[tuple[int, str | None, str, str]]:
        return self.conn.execute("SELECT id, identifier, name, keyname FROM TAGS ORDER BY id").fetchall()

    def occurrence(self, tag_id: TagId) -> tuple[int, int | None]:
        row = self.conn.execute(
            "SELECT occurrence, scoped_occurrence FROM TAGS WHERE id = ?",
            (tag_id,),
        ).fetchone()
        return row[0], row[1]

    def tagged_rows(self, subject_id: TagId) -> list[tuple[int, int, str | None, int]]:
        return self.conn.execute(
            "SELECT id, tag_id, language, times_tagged FROM TAGGED WHERE foreign_key = ? ORDER BY id",
            (str(subject_id),),
        ).fetchall()

    def tag_id_by_key(self, key: str, identifier: str | None = None) -> int:
        row = self.conn.execute(
            "SELECT id FROM TAGS WHERE keyname = ? AND identifier IS ?",
            (key, identifier),
        ).fetchone()
        assert row is not None, f"tag not found: {key!r} {identifier!r}"
        return row[0]


@pytest.fixture
def repository() -> Iterator[SqliteTagRepository]:
    conn = sqlite3.connect(":memory:")
    try:
        yield SqliteTagRepository(conn)
    finally:
        conn.close()
