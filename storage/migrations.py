"""Database migration logic for the furniture search store."""

import logging
import sqlite3

logger = logging.getLogger(__name__)


class SchemaMigrator:
    """Handles database schema migrations."""

    def __init__(self, db_connection: sqlite3.Connection):
        self.db = db_connection

    def migrate_to_current_version(self):
        """Migrate schema to current version."""
        self.db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        if not self._has_version('1'):
            self._migrate_to_v1_catalog()

        if not self._has_version('2'):
            self._migrate_to_v2_synonyms()

        # Full-text index is optional; builds without FTS5 fall back to LIKE
        if not self._has_version('3'):
            self._migrate_to_v3_fulltext()

        self.db.commit()

    def _has_version(self, version: str) -> bool:
        cursor = self.db.execute("SELECT version FROM schema_version WHERE version = ?", (version,))
        return cursor.fetchone() is not None

    def _record_version(self, version: str):
        self.db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (version,))

    def _migrate_to_v1_catalog(self):
        """Create the catalog tables."""
        logger.info("Creating catalog schema (v1)...")
        self.db.executescript("""
            CREATE TABLE IF NOT EXISTS furniture (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                price REAL,
                image_url TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                icon TEXT,
                sort_order INTEGER DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS tag_groups (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                color TEXT,
                sort_order INTEGER DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS tags (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                color TEXT,
                group_id INTEGER REFERENCES tag_groups(id) ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS furniture_categories (
                furniture_id INTEGER NOT NULL REFERENCES furniture(id) ON DELETE CASCADE,
                category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
                is_primary INTEGER DEFAULT 0,
                PRIMARY KEY (furniture_id, category_id)
            );

            CREATE TABLE IF NOT EXISTS furniture_tags (
                furniture_id INTEGER NOT NULL REFERENCES furniture(id) ON DELETE CASCADE,
                tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                PRIMARY KEY (furniture_id, tag_id)
            );

            CREATE TABLE IF NOT EXISTS category_tag_groups (
                category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
                tag_group_id INTEGER NOT NULL REFERENCES tag_groups(id) ON DELETE CASCADE,
                PRIMARY KEY (category_id, tag_group_id)
            );

            CREATE TABLE IF NOT EXISTS favorites (
                user_id INTEGER NOT NULL,
                furniture_id INTEGER NOT NULL REFERENCES furniture(id) ON DELETE CASCADE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (user_id, furniture_id)
            );

            CREATE INDEX IF NOT EXISTS idx_furniture_name ON furniture(name);
            CREATE INDEX IF NOT EXISTS idx_categories_sort ON categories(sort_order);
            CREATE INDEX IF NOT EXISTS idx_furniture_categories_category
                ON furniture_categories(category_id);
            CREATE INDEX IF NOT EXISTS idx_furniture_tags_tag ON furniture_tags(tag_id);
        """)
        self._record_version('1')

    def _migrate_to_v2_synonyms(self):
        """Create the synonym table."""
        logger.info("Creating synonym schema (v2)...")
        self.db.executescript("""
            CREATE TABLE IF NOT EXISTS synonyms (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                canonical_term TEXT NOT NULL,
                synonym TEXT NOT NULL,
                weight REAL NOT NULL DEFAULT 1.0,
                language TEXT NOT NULL DEFAULT 'en',
                category_hint TEXT,
                usage_count INTEGER NOT NULL DEFAULT 0,
                is_active INTEGER NOT NULL DEFAULT 1,
                source TEXT NOT NULL DEFAULT 'admin',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                last_used_at TIMESTAMP,
                UNIQUE (canonical_term, synonym)
            );

            -- One canonical per active synonym
            CREATE UNIQUE INDEX IF NOT EXISTS idx_synonyms_active_synonym
                ON synonyms(synonym) WHERE is_active = 1;
            CREATE INDEX IF NOT EXISTS idx_synonyms_canonical ON synonyms(canonical_term);
        """)
        self._record_version('2')

    def _migrate_to_v3_fulltext(self):
        """Create the FTS5 index over furniture names, if the build supports it."""
        try:
            self.db.execute("""
                CREATE VIRTUAL TABLE IF NOT EXISTS furniture_fts USING fts5(
                    name,
                    content='furniture',
                    content_rowid='id',
                    tokenize='unicode61 remove_diacritics 2'
                )
            """)
        except sqlite3.OperationalError as e:
            logger.warning(f"FTS5 unavailable, substring search only: {e}")
            return

        logger.info("Creating full-text index (v3)...")
        self.db.executescript("""
            CREATE TRIGGER IF NOT EXISTS furniture_fts_ai AFTER INSERT ON furniture BEGIN
                INSERT INTO furniture_fts(rowid, name) VALUES (new.id, new.name);
            END;

            CREATE TRIGGER IF NOT EXISTS furniture_fts_ad AFTER DELETE ON furniture BEGIN
                INSERT INTO furniture_fts(furniture_fts, rowid, name)
                VALUES ('delete', old.id, old.name);
            END;

            CREATE TRIGGER IF NOT EXISTS furniture_fts_au AFTER UPDATE OF name ON furniture BEGIN
                INSERT INTO furniture_fts(furniture_fts, rowid, name)
                VALUES ('delete', old.id, old.name);
                INSERT INTO furniture_fts(rowid, name) VALUES (new.id, new.name);
            END;

            INSERT INTO furniture_fts(furniture_fts) VALUES ('rebuild');
        """)
        self._record_version('3')
