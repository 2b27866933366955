"""
SQLite database implementation.
Simple and direct - no abstraction layers.

Implements the mapping store, the override store and the token provider.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import aiosqlite
from pydantic import ValidationError

from ..errors import ConfigurationError, NotFoundError, PersistenceError
from .defaults import DEFAULT_MAPPINGS
from .models import (
    CATEGORIES, AttributeMapping, AttributeMappingCreate, BulkOverrideResult,
    BulkUpdateResult, ImportResult, MappingBulkUpdate, MappingUpdate,
    OverrideInput, ProductMappingOverride, normalize_product_id, utcnow
)

logger = logging.getLogger(__name__)

# Columns a partial update may not set to NULL
NON_NULLABLE_FIELDS = ("mapping_type", "is_enabled")


UPSERT_MAPPING_SQL = """
    INSERT INTO attribute_mappings
        (category, field_name, mapping_type, source_value, target_value,
         variation_mapping, is_enabled, display_order, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(category, field_name) DO UPDATE SET
        mapping_type = excluded.mapping_type,
        source_value = excluded.source_value,
        target_value = excluded.target_value,
        variation_mapping = excluded.variation_mapping,
        is_enabled = excluded.is_enabled,
        display_order = excluded.display_order,
        updated_at = excluded.updated_at
"""

UPSERT_OVERRIDE_SQL = """
    INSERT INTO product_mapping_overrides
        (shopify_product_id, category, field_name, value, updated_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(shopify_product_id, category, field_name) DO UPDATE SET
        value = excluded.value,
        updated_at = excluded.updated_at
"""


def _parse_datetime(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    return datetime.fromisoformat(value)


class SQLiteDatabase:
    """SQLite database for mappings, overrides and platform tokens."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Create database tables."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS attribute_mappings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category TEXT NOT NULL,
                field_name TEXT NOT NULL,
                mapping_type TEXT NOT NULL,
                source_value TEXT,
                target_value TEXT,
                variation_mapping TEXT,
                is_enabled INTEGER NOT NULL DEFAULT 1,
                display_order INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE(category, field_name)
            );

            CREATE TABLE IF NOT EXISTS product_mapping_overrides (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                shopify_product_id TEXT NOT NULL,
                category TEXT NOT NULL,
                field_name TEXT NOT NULL,
                value TEXT,
                updated_at TEXT NOT NULL,
                UNIQUE(shopify_product_id, category, field_name)
            );

            CREATE TABLE IF NOT EXISTS auth_tokens (
                platform TEXT PRIMARY KEY,
                access_token TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_attribute_mappings_category
                ON attribute_mappings(category, display_order);
            CREATE INDEX IF NOT EXISTS idx_overrides_product
                ON product_mapping_overrides(shopify_product_id);
        """)
        await conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # ===== Helper Methods =====

    def _row_to_mapping(self, row: aiosqlite.Row) -> AttributeMapping:
        """Convert a database row to an AttributeMapping model."""
        return AttributeMapping(
            id=row["id"],
            category=row["category"],
            field_name=row["field_name"],
            mapping_type=row["mapping_type"],
            source_value=row["source_value"],
            target_value=row["target_value"],
            variation_mapping=row["variation_mapping"],
            is_enabled=bool(row["is_enabled"]),
            display_order=row["display_order"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"])
        )

    def _row_to_override(self, row: aiosqlite.Row) -> ProductMappingOverride:
        """Convert a database row to a ProductMappingOverride model."""
        return ProductMappingOverride(
            id=row["id"],
            shopify_product_id=row["shopify_product_id"],
            category=row["category"],
            field_name=row["field_name"],
            value=row["value"],
            updated_at=_parse_datetime(row["updated_at"])
        )

    async def _write(self, sql: str, params: Iterable[Any]) -> aiosqlite.Cursor:
        """Execute a single write statement and commit it."""
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, tuple(params))
            await conn.commit()
            return cursor
        except aiosqlite.IntegrityError as e:
            await conn.rollback()
            raise ConfigurationError(f"Constraint violated: {e}") from e
        except aiosqlite.Error as e:
            await conn.rollback()
            raise PersistenceError(f"Database write failed: {e}") from e

    # ===== Mapping Operations =====

    async def get_mapping(self, category: str, field_name: str) -> Optional[AttributeMapping]:
        """Get the enabled mapping for a category and field, if any."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM attribute_mappings WHERE category = ? AND field_name = ? AND is_enabled = 1",
            (category, field_name)
        )
        row = await cursor.fetchone()
        return self._row_to_mapping(row) if row else None

    async def _find_mapping(self, category: str, field_name: str) -> Optional[AttributeMapping]:
        """Get a mapping regardless of whether it is enabled."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM attribute_mappings WHERE category = ? AND field_name = ?",
            (category, field_name)
        )
        row = await cursor.fetchone()
        return self._row_to_mapping(row) if row else None

    async def get_mappings_by_category(self, category: str) -> List[AttributeMapping]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM attribute_mappings WHERE category = ? ORDER BY display_order ASC",
            (category,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_mapping(row) for row in rows]

    async def export_mappings(self) -> List[AttributeMapping]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM attribute_mappings ORDER BY category, display_order ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_mapping(row) for row in rows]

    async def get_all_mappings(self) -> Dict[str, List[AttributeMapping]]:
        """Get all mappings grouped by category."""
        grouped: Dict[str, List[AttributeMapping]] = {category: [] for category in CATEGORIES}

        for mapping in await self.export_mappings():
            if mapping.category in grouped:
                grouped[mapping.category].append(mapping)

        return grouped

    async def create_mapping(self, mapping: AttributeMappingCreate) -> AttributeMapping:
        now = utcnow().isoformat()
        try:
            await self._write(
                """
                INSERT INTO attribute_mappings
                    (category, field_name, mapping_type, source_value, target_value,
                     variation_mapping, is_enabled, display_order, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._mapping_params(mapping, now)
            )
        except ConfigurationError as e:
            raise ConfigurationError(
                f"Mapping {mapping.category.value}.{mapping.field_name} already exists"
            ) from e

        return await self._find_mapping(mapping.category.value, mapping.field_name)

    def _mapping_params(self, mapping: AttributeMappingCreate, now: str) -> tuple:
        return (
            mapping.category.value,
            mapping.field_name,
            mapping.mapping_type.value,
            mapping.source_value,
            mapping.target_value,
            mapping.variation_mapping,
            int(mapping.is_enabled),
            mapping.display_order,
            now,
            now
        )

    async def update_mapping(
        self,
        category: str,
        field_name: str,
        update: MappingUpdate
    ) -> AttributeMapping:
        """
        Apply a partial update to a mapping.

        Raises:
            NotFoundError: If no mapping exists for the pair
            ConfigurationError: If the update nulls a required field
        """
        current = await self._find_mapping(category, field_name)
        if current is None:
            raise NotFoundError(f"Mapping not found: {category}.{field_name}")

        changes = update.model_dump(exclude_unset=True, mode="json")
        if not changes:
            return current

        cleared = [name for name in NON_NULLABLE_FIELDS if name in changes and changes[name] is None]
        if cleared:
            raise ConfigurationError(
                f"Mapping {category}.{field_name}: {', '.join(cleared)} cannot be null"
            )

        merged = current.model_copy(update=changes)

        await self._write(
            """
            UPDATE attribute_mappings
            SET mapping_type = ?, source_value = ?, target_value = ?,
                variation_mapping = ?, is_enabled = ?, updated_at = ?
            WHERE category = ? AND field_name = ?
            """,
            (
                merged.mapping_type,
                merged.source_value,
                merged.target_value,
                merged.variation_mapping,
                int(merged.is_enabled),
                utcnow().isoformat(),
                category,
                field_name
            )
        )

        logger.info(f"Updated mapping {category}.{field_name}: {changes}")
        return await self._find_mapping(category, field_name)

    async def update_mappings_bulk(self, updates: List[MappingBulkUpdate]) -> BulkUpdateResult:
        """Update several mappings, collecting per-row errors."""
        result = BulkUpdateResult()

        for row in updates:
            changes = MappingUpdate.model_validate(
                row.model_dump(exclude_unset=True, exclude={"category", "field_name"})
            )
            try:
                await self.update_mapping(row.category, row.field_name, changes)
                result.updated += 1
            except NotFoundError:
                result.failed += 1
                result.errors.append(f"Failed to update {row.category}.{row.field_name}")
            except (ConfigurationError, PersistenceError) as e:
                result.failed += 1
                result.errors.append(f"Error updating {row.category}.{row.field_name}: {e}")

        logger.info(f"Bulk update: {result.updated} updated, {result.failed} failed")
        return result

    async def import_mappings(
        self,
        mappings: List[Union[AttributeMappingCreate, Dict[str, Any]]]
    ) -> ImportResult:
        """
        Import mappings, inserting new pairs and updating existing ones.

        Rows that fail validation, or repeat a pair already seen in the same
        import, are reported in the error list and skipped.
        """
        result = ImportResult()
        seen = set()

        for raw in mappings:
            try:
                mapping = (
                    raw if isinstance(raw, AttributeMappingCreate)
                    else AttributeMappingCreate.model_validate(raw)
                )
            except ValidationError as e:
                label = _row_label(raw)
                result.errors.append(f"Invalid mapping {label}: {e.error_count()} validation error(s)")
                continue

            key = (mapping.category.value, mapping.field_name)
            if key in seen:
                result.errors.append(f"Duplicate mapping {key[0]}.{key[1]} in import")
                continue
            seen.add(key)

            try:
                existing = await self._find_mapping(*key)
                await self._write(UPSERT_MAPPING_SQL, self._mapping_params(mapping, utcnow().isoformat()))
            except (ConfigurationError, PersistenceError) as e:
                result.errors.append(f"Error importing {key[0]}.{key[1]}: {e}")
                continue

            if existing is None:
                result.imported += 1
            else:
                result.updated += 1

        logger.info(f"Import complete: {result.imported} imported, {result.updated} updated")
        return result

    async def seed_default_mappings(self) -> int:
        """Insert the default rule set if no mappings exist yet."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) AS count FROM attribute_mappings")
        row = await cursor.fetchone()
        if row["count"] > 0:
            return 0

        result = await self.import_mappings(list(DEFAULT_MAPPINGS))
        logger.info(f"Seeded {result.imported} default mappings")
        return result.imported

    # ===== Override Operations =====

    async def get_product_overrides(self, product_id: str) -> List[ProductMappingOverride]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM product_mapping_overrides WHERE shopify_product_id = ? ORDER BY category, field_name",
            (normalize_product_id(product_id),)
        )
        rows = await cursor.fetchall()
        return [self._row_to_override(row) for row in rows]

    async def get_product_override(
        self,
        product_id: str,
        category: str,
        field_name: str
    ) -> Optional[ProductMappingOverride]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            """
            SELECT * FROM product_mapping_overrides
            WHERE shopify_product_id = ? AND category = ? AND field_name = ?
            """,
            (normalize_product_id(product_id), category, field_name)
        )
        row = await cursor.fetchone()
        return self._row_to_override(row) if row else None

    async def save_product_override(
        self,
        product_id: str,
        category: str,
        field_name: str,
        value: Optional[str]
    ) -> None:
        product_id = normalize_product_id(product_id)
        await self._write(
            UPSERT_OVERRIDE_SQL,
            (product_id, category, field_name, value, utcnow().isoformat())
        )
        logger.info(f"Saved override {category}.{field_name} = {value!r} for product {product_id}")

    async def delete_product_override(self, product_id: str, category: str, field_name: str) -> bool:
        cursor = await self._write(
            """
            DELETE FROM product_mapping_overrides
            WHERE shopify_product_id = ? AND category = ? AND field_name = ?
            """,
            (normalize_product_id(product_id), category, field_name)
        )
        return cursor.rowcount > 0

    async def save_product_overrides_bulk(
        self,
        product_id: str,
        overrides: List[OverrideInput]
    ) -> BulkOverrideResult:
        """Save several overrides for one product, collecting per-row errors."""
        result = BulkOverrideResult()
        product_id = normalize_product_id(product_id)
        conn = await self._get_connection()
        now = utcnow().isoformat()

        for override in overrides:
            try:
                await conn.execute(
                    UPSERT_OVERRIDE_SQL,
                    (product_id, override.category.value, override.field_name, override.value, now)
                )
                result.saved += 1
            except aiosqlite.Error as e:
                result.errors.append(f"Error saving {override.category.value}.{override.field_name}: {e}")

        try:
            await conn.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Database write failed: {e}") from e

        logger.info(f"Saved {result.saved} overrides for product {product_id}")
        return result

    # ===== Token Operations =====

    async def get_valid_token(self, platform: str) -> Optional[str]:
        """Return the stored access token for a platform, if connected."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT access_token FROM auth_tokens WHERE platform = ?", (platform,)
        )
        row = await cursor.fetchone()
        return row["access_token"] if row else None

    async def save_token(self, platform: str, access_token: str) -> None:
        await self._write(
            """
            INSERT INTO auth_tokens (platform, access_token, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(platform) DO UPDATE SET
                access_token = excluded.access_token,
                updated_at = excluded.updated_at
            """,
            (platform, access_token, utcnow().isoformat())
        )


def _row_label(raw: Any) -> str:
    if isinstance(raw, dict):
        return f"{raw.get('category')}.{raw.get('field_name')}"
    return repr(raw)
