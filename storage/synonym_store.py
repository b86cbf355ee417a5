"""SQLite implementation of the synonym store."""

import sqlite3
from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
import logging

from .backend import SynonymStore
from .connection_pool import ConnectionPool
from .models import PageRequest, SynonymEntry
from search.exceptions import DuplicateSynonymError
from search.query_utils import like_pattern

logger = logging.getLogger(__name__)


class SqliteSynonymStore(SynonymStore):
    """Synonym entries in the ``synonyms`` table.

    Schema is owned by SchemaMigrator; construct the catalog store (or run
    the migrator) on the same database first.
    """

    # Whitelist of updatable fields, mapped to columns
    _UPDATABLE_FIELDS = {
        'canonical': 'canonical_term',
        'synonym': 'synonym',
        'weight': 'weight',
        'language': 'language',
        'category_hint': 'category_hint',
        'active': 'is_active',
        'source': 'source',
    }

    def __init__(self, connection_pool: ConnectionPool):
        self.connection_pool = connection_pool

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> SynonymEntry:
        def _ts(value):
            if value is None or isinstance(value, datetime):
                return value
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return None

        return SynonymEntry(
            id=row['id'],
            canonical=row['canonical_term'],
            synonym=row['synonym'],
            weight=row['weight'],
            language=row['language'],
            category_hint=row['category_hint'],
            usage_count=row['usage_count'],
            active=bool(row['is_active']),
            source=row['source'],
            created_at=_ts(row['created_at']),
            last_used_at=_ts(row['last_used_at'])
        )

    def list_active_synonyms(self, locale: str = 'en') -> List[SynonymEntry]:
        languages = ('en', 'fr') if locale == 'fr' else ('en',)
        placeholders = ','.join('?' * len(languages))
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute(f"""
                SELECT * FROM synonyms
                WHERE is_active = 1 AND language IN ({placeholders})
                ORDER BY weight DESC, id ASC
            """, languages).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def increment_usage(self, synonym: str) -> None:
        with self.connection_pool.transaction() as conn:
            conn.execute("""
                UPDATE synonyms
                SET usage_count = usage_count + 1, last_used_at = ?
                WHERE synonym = ? AND is_active = 1
            """, (datetime.now().isoformat(sep=' ', timespec='milliseconds'), synonym.strip().lower()))

    def upsert_synonym(self, entry: SynonymEntry) -> int:
        try:
            with self.connection_pool.transaction() as conn:
                conn.execute("""
                    INSERT INTO synonyms (canonical_term, synonym, weight, language,
                                          category_hint, is_active, source)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(canonical_term, synonym) DO UPDATE SET
                        weight = excluded.weight,
                        language = excluded.language,
                        category_hint = excluded.category_hint,
                        is_active = excluded.is_active,
                        source = excluded.source
                """, self._entry_params(entry))
                row = conn.execute(
                    "SELECT id FROM synonyms WHERE canonical_term = ? AND synonym = ?",
                    (entry.canonical, entry.synonym)
                ).fetchone()
                return row['id']
        except sqlite3.IntegrityError as e:
            raise DuplicateSynonymError(
                f"'{entry.synonym}' is already an active synonym of another term"
            ) from e

    def insert_if_absent(self, entry: SynonymEntry) -> Optional[int]:
        with self.connection_pool.transaction() as conn:
            cursor = conn.execute("""
                INSERT OR IGNORE INTO synonyms (canonical_term, synonym, weight, language,
                                                category_hint, is_active, source)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, self._entry_params(entry))
            return cursor.lastrowid if cursor.rowcount else None

    @staticmethod
    def _entry_params(entry: SynonymEntry) -> tuple:
        return (
            entry.canonical,
            entry.synonym,
            entry.weight,
            entry.language,
            entry.category_hint,
            1 if entry.active else 0,
            entry.source
        )

    def update_synonym(self, synonym_id: int, fields: Dict[str, Any]) -> bool:
        updates = {
            self._UPDATABLE_FIELDS[name]: (int(value) if name == 'active' else value)
            for name, value in fields.items()
            if name in self._UPDATABLE_FIELDS
        }
        if not updates:
            return self.get_synonym(synonym_id) is not None

        assignments = ', '.join(f"{column} = ?" for column in updates)
        try:
            with self.connection_pool.transaction() as conn:
                cursor = conn.execute(
                    f"UPDATE synonyms SET {assignments} WHERE id = ?",
                    list(updates.values()) + [synonym_id]
                )
                return cursor.rowcount > 0
        except sqlite3.IntegrityError as e:
            raise DuplicateSynonymError(f"Update conflicts with an existing synonym: {e}") from e

    def delete_synonym(self, synonym_id: int) -> bool:
        with self.connection_pool.transaction() as conn:
            cursor = conn.execute("DELETE FROM synonyms WHERE id = ?", (synonym_id,))
            return cursor.rowcount > 0

    def get_synonym(self, synonym_id: int) -> Optional[SynonymEntry]:
        with self.connection_pool.get_connection() as conn:
            row = conn.execute("SELECT * FROM synonyms WHERE id = ?", (synonym_id,)).fetchone()
        return self._row_to_entry(row) if row else None

    def list_synonyms(self, page: PageRequest,
                      search: Optional[str] = None) -> Tuple[List[SynonymEntry], int]:
        where = ""
        params: List[Any] = []
        if search:
            pattern = like_pattern(search.strip().lower())
            where = "WHERE canonical_term LIKE ? ESCAPE '\\' OR synonym LIKE ? ESCAPE '\\'"
            params = [pattern, pattern]

        with self.connection_pool.get_connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM synonyms {where}", params).fetchone()[0]
            rows = conn.execute(f"""
                SELECT * FROM synonyms {where}
                ORDER BY canonical_term ASC, weight DESC
                LIMIT ? OFFSET ?
            """, params + [page.per_page, page.offset]).fetchall()
        return [self._row_to_entry(row) for row in rows], total

    def vocabulary(self) -> List[str]:
        """Distinct active canonical and synonym terms."""
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute("""
                SELECT canonical_term AS term FROM synonyms WHERE is_active = 1
                UNION
                SELECT synonym FROM synonyms WHERE is_active = 1
            """).fetchall()
        return [row['term'] for row in rows]
