"""SQLite implementation of the catalog store."""

import sqlite3
from typing import List, Optional, Dict, Any, Sequence, Tuple
import logging

from .backend import CatalogStore
from .models import CatalogItem, CategoryRecord, PageRequest, TagRecord
from .connection_pool import ConnectionPool, query_deadline
from .migrations import SchemaMigrator
from search.exceptions import SearchUnavailableError, QueryTimeoutError
from search.query_builder import FTS5QueryBuilder
from search.query_utils import like_pattern

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = "f.id, f.name, f.price, f.image_url, f.created_at"

_CATEGORY_MATCH = """
    EXISTS (
        SELECT 1 FROM furniture_categories fc
        JOIN categories c ON c.id = fc.category_id
        WHERE fc.furniture_id = f.id AND c.name LIKE {p} ESCAPE '\\'
    )"""

_TAG_MATCH = """
    EXISTS (
        SELECT 1 FROM furniture_tags ft
        JOIN tags t ON t.id = ft.tag_id
        WHERE ft.furniture_id = f.id AND t.name LIKE {p} ESCAPE '\\'
    )"""


class SqliteCatalogStore(CatalogStore):
    """SQLite catalog store.

    Uses an FTS5 index over furniture names when the SQLite build provides
    one, and LIKE matching over names, category names and tag names
    otherwise.
    """

    def __init__(self, db_path: str, max_connections: int = 5,
                 connection_pool: Optional[ConnectionPool] = None,
                 query_builder: Optional[FTS5QueryBuilder] = None):
        """Initialize SQLite catalog store.

        Args:
            db_path: Path to the SQLite database file
            max_connections: Maximum number of connections in pool
            connection_pool: Share an existing pool instead of opening one
            query_builder: Optional builder for MATCH expressions
        """
        self.db_path = db_path
        self.connection_pool = connection_pool or ConnectionPool(db_path, max_connections=max_connections)
        self.query_builder = query_builder or FTS5QueryBuilder()
        self._fulltext_available: Optional[bool] = None
        self.ensure_schema()

    def ensure_schema(self) -> None:
        with self.connection_pool.get_connection() as conn:
            SchemaMigrator(conn).migrate_to_current_version()

    def has_fulltext_index(self) -> bool:
        """Probe (once) for the FTS5 table."""
        if self._fulltext_available is None:
            self._fulltext_available = self.table_exists('furniture_fts')
            logger.debug(f"Full-text index available: {self._fulltext_available}")
        return self._fulltext_available

    def table_exists(self, table: str) -> bool:
        try:
            with self.connection_pool.get_connection() as conn:
                row = conn.execute(
                    "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
                    (table,)
                ).fetchone()
                return row is not None
        except (sqlite3.Error, RuntimeError, TimeoutError) as e:
            logger.warning(f"Could not probe table {table}: {e}")
            return False

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> CatalogItem:
        return CatalogItem(
            id=row['id'],
            name=row['name'],
            price=row['price'],
            image_url=row['image_url'],
            created_at=row['created_at']
        )

    @staticmethod
    def _favorites_join(favorites_user_id: Optional[int]) -> Tuple[str, List[Any]]:
        if favorites_user_id is None:
            return "", []
        return "JOIN favorites fav ON fav.furniture_id = f.id AND fav.user_id = ?", [favorites_user_id]

    def _run_paged(self, count_sql: str, count_params: List[Any], page_sql: str,
                   page_params: List[Any], timeout_ms: Optional[int]) -> Tuple[List[CatalogItem], int]:
        try:
            with self.connection_pool.get_connection() as conn:
                with query_deadline(conn, timeout_ms):
                    total = conn.execute(count_sql, count_params).fetchone()[0]
                    rows = conn.execute(page_sql, page_params).fetchall()
        except QueryTimeoutError:
            raise
        except (sqlite3.Error, RuntimeError, TimeoutError) as e:
            logger.error(f"Catalog query failed: {e}")
            raise SearchUnavailableError(f"Catalog query failed: {e}") from e

        return [self._row_to_item(row) for row in rows], total

    def find_by_fulltext(self, terms: Sequence[str], original: str, page: PageRequest,
                         favorites_user_id: Optional[int] = None,
                         timeout_ms: Optional[int] = None) -> Tuple[List[CatalogItem], int]:
        """Relevance-ranked FTS5 retrieval.

        Rank tiers: name contains the original query, full-text hit,
        category name contains the original query, then the rest (tag-only
        hits). Within a tier, stronger bm25 first, then name.
        """
        match_query = self.query_builder.build_match_query(terms)
        if not match_query:
            return [], 0

        original_like = like_pattern(original)
        fav_join, fav_params = self._favorites_join(favorites_user_id)

        from_clause = f"""
            FROM furniture f
            LEFT JOIN (
                SELECT rowid, bm25(furniture_fts) AS bm25_score
                FROM furniture_fts WHERE furniture_fts MATCH ?
            ) fts ON fts.rowid = f.id
            {fav_join}
            WHERE fts.rowid IS NOT NULL
               OR {_CATEGORY_MATCH.format(p='?')}
               OR {_TAG_MATCH.format(p='?')}
        """
        where_params = [match_query] + fav_params + [original_like, original_like]

        page_sql = f"""
            SELECT {_ITEM_COLUMNS},
                CASE
                    WHEN f.name LIKE ? ESCAPE '\\' THEN 1
                    WHEN fts.rowid IS NOT NULL THEN 2
                    WHEN {_CATEGORY_MATCH.format(p='?')} THEN 3
                    ELSE 4
                END AS relevance,
                COALESCE(-fts.bm25_score, 0) AS ft_score
            {from_clause}
            ORDER BY relevance ASC, ft_score DESC, f.name COLLATE NOCASE ASC
            LIMIT ? OFFSET ?
        """
        page_params = [original_like, original_like] + where_params + [page.per_page, page.offset]

        logger.debug(f"Full-text search: MATCH {match_query!r}")
        return self._run_paged(f"SELECT COUNT(*) {from_clause}", where_params,
                               page_sql, page_params, timeout_ms)

    def find_by_substring(self, terms: Sequence[str], original: str, page: PageRequest,
                          favorites_user_id: Optional[int] = None,
                          timeout_ms: Optional[int] = None) -> Tuple[List[CatalogItem], int]:
        """LIKE retrieval over names, category names and tag names.

        Rank tiers: name contains the original query, name contains any
        expanded term, category name contains the original query, then the
        rest.
        """
        patterns = self.query_builder.build_like_patterns(terms)
        if not patterns:
            return [], 0

        original_like = like_pattern(original)
        fav_join, fav_params = self._favorites_join(favorites_user_id)

        term_clauses = []
        term_params: List[Any] = []
        name_clauses = []
        for pattern in patterns:
            term_clauses.append(
                f"(f.name LIKE ? ESCAPE '\\' OR {_CATEGORY_MATCH.format(p='?')} "
                f"OR {_TAG_MATCH.format(p='?')})"
            )
            term_params.extend([pattern, pattern, pattern])
            name_clauses.append("f.name LIKE ? ESCAPE '\\'")

        from_clause = f"""
            FROM furniture f
            {fav_join}
            WHERE {' OR '.join(term_clauses)}
        """
        where_params = fav_params + term_params

        page_sql = f"""
            SELECT {_ITEM_COLUMNS},
                CASE
                    WHEN f.name LIKE ? ESCAPE '\\' THEN 1
                    WHEN {' OR '.join(name_clauses)} THEN 2
                    WHEN {_CATEGORY_MATCH.format(p='?')} THEN 3
                    ELSE 4
                END AS relevance
            {from_clause}
            ORDER BY relevance ASC, f.name COLLATE NOCASE ASC
            LIMIT ? OFFSET ?
        """
        page_params = ([original_like] + list(patterns) + [original_like]
                       + where_params + [page.per_page, page.offset])

        logger.debug(f"Substring search over {len(patterns)} terms")
        return self._run_paged(f"SELECT COUNT(*) {from_clause}", where_params,
                               page_sql, page_params, timeout_ms)

    def attach_categories(self, items: List[CatalogItem]) -> None:
        if not items:
            return
        by_id = {item.id: item for item in items}
        placeholders = ','.join('?' * len(by_id))
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute(f"""
                SELECT fc.furniture_id, c.id, c.name, c.slug, c.icon, fc.is_primary
                FROM furniture_categories fc
                JOIN categories c ON c.id = fc.category_id
                WHERE fc.furniture_id IN ({placeholders})
                ORDER BY fc.is_primary DESC, c.sort_order ASC, c.name ASC
            """, list(by_id)).fetchall()

        for item in items:
            item.categories = []
        for row in rows:
            by_id[row['furniture_id']].categories.append({
                'id': row['id'],
                'name': row['name'],
                'slug': row['slug'],
                'icon': row['icon'],
                'is_primary': bool(row['is_primary'])
            })

    def attach_tags(self, items: List[CatalogItem]) -> None:
        if not items:
            return
        by_id = {item.id: item for item in items}
        placeholders = ','.join('?' * len(by_id))
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute(f"""
                SELECT ft.furniture_id, t.id, t.name, t.slug, t.color, t.group_id
                FROM furniture_tags ft
                JOIN tags t ON t.id = ft.tag_id
                WHERE ft.furniture_id IN ({placeholders})
                ORDER BY t.name ASC
            """, list(by_id)).fetchall()

        for item in items:
            item.tags = []
        for row in rows:
            by_id[row['furniture_id']].tags.append({
                'id': row['id'],
                'name': row['name'],
                'slug': row['slug'],
                'color': row['color'],
                'group_id': row['group_id']
            })

    def list_categories(self) -> List[CategoryRecord]:
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute(
                "SELECT id, name, slug, icon, sort_order FROM categories ORDER BY sort_order ASC, id ASC"
            ).fetchall()
        return [CategoryRecord(**dict(row)) for row in rows]

    def list_category_tags(self, category_id: int) -> List[TagRecord]:
        with self.connection_pool.get_connection() as conn:
            rows = conn.execute("""
                SELECT DISTINCT t.id, t.name, t.slug, t.color, t.group_id
                FROM tags t
                JOIN tag_groups tg ON t.group_id = tg.id
                JOIN category_tag_groups ctg ON tg.id = ctg.tag_group_id
                WHERE ctg.category_id = ? AND t.name IS NOT NULL
                ORDER BY t.id
            """, (category_id,)).fetchall()
        return [TagRecord(**dict(row)) for row in rows]

    # Catalog writes, used by fixtures and import tooling
    def add_category(self, name: str, slug: str, sort_order: int = 0, icon: Optional[str] = None) -> int:
        with self.connection_pool.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO categories (name, slug, icon, sort_order) VALUES (?, ?, ?, ?)",
                (name, slug, icon, sort_order)
            )
            return cursor.lastrowid

    def add_tag_group(self, name: str, slug: str, category_ids: Sequence[int] = ()) -> int:
        with self.connection_pool.transaction() as conn:
            group_id = conn.execute(
                "INSERT INTO tag_groups (name, slug) VALUES (?, ?)", (name, slug)
            ).lastrowid
            conn.executemany(
                "INSERT INTO category_tag_groups (category_id, tag_group_id) VALUES (?, ?)",
                [(cid, group_id) for cid in category_ids]
            )
            return group_id

    def add_tag(self, name: str, slug: str, group_id: Optional[int] = None,
                color: Optional[str] = None) -> int:
        with self.connection_pool.transaction() as conn:
            return conn.execute(
                "INSERT INTO tags (name, slug, color, group_id) VALUES (?, ?, ?, ?)",
                (name, slug, color, group_id)
            ).lastrowid

    def add_item(self, name: str, price: Optional[float] = None, category_ids: Sequence[int] = (),
                 tag_ids: Sequence[int] = (), image_url: Optional[str] = None) -> int:
        with self.connection_pool.transaction() as conn:
            item_id = conn.execute(
                "INSERT INTO furniture (name, price, image_url) VALUES (?, ?, ?)",
                (name, price, image_url)
            ).lastrowid
            conn.executemany(
                "INSERT INTO furniture_categories (furniture_id, category_id, is_primary) VALUES (?, ?, ?)",
                [(item_id, cid, 1 if i == 0 else 0) for i, cid in enumerate(category_ids)]
            )
            conn.executemany(
                "INSERT INTO furniture_tags (furniture_id, tag_id) VALUES (?, ?)",
                [(item_id, tid) for tid in tag_ids]
            )
            return item_id

    def add_favorite(self, user_id: int, item_id: int) -> None:
        with self.connection_pool.transaction() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO favorites (user_id, furniture_id) VALUES (?, ?)",
                (user_id, item_id)
            )

    def close(self) -> None:
        self.connection_pool.close()
