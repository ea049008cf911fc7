"""
repositories/category_repo.py
-----------------------------
PostgreSQL data access for transaction categories.
"""

from typing import Optional
from uuid import uuid4

from db.connection import transaction
from models.category import Category
from repositories.interfaces import CategoryRepository


class PostgresCategoryRepository(CategoryRepository):
    """Repository for the categories table."""

    def ensure(self, category: Category) -> Category:
        """
        Insert a category unless one with the same name exists.
        Uses ON CONFLICT so concurrent seeding cannot duplicate rows.
        """
        sql = """
            INSERT INTO categories (id, name, type, icon, color, is_active)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
            RETURNING id, name, type, icon, color, is_active;
        """
        with transaction("ensure category") as cur:
            cur.execute(sql, (
                category.id or uuid4().hex, category.name, category.type,
                category.icon, category.color, category.is_active,
            ))
            return Category(**cur.fetchone())

    def get_all(self, active_only: bool = True, category_type: Optional[str] = None) -> list[Category]:
        sql = "SELECT id, name, type, icon, color, is_active FROM categories WHERE TRUE"
        params: list = []
        if active_only:
            sql += " AND is_active = TRUE"
        if category_type:
            sql += " AND type = %s"
            params.append(category_type)
        sql += " ORDER BY type DESC, name;"
        with transaction("list categories") as cur:
            cur.execute(sql, params)
            return [Category(**r) for r in cur.fetchall()]
