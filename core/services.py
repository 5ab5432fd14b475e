"""Database access used by the Streamlit app."""
from __future__ import annotations

import logging
import sqlite3
from typing import Union

import pandas as pd
import streamlit as st

try:
    import psycopg2
    import psycopg2.extensions
except ImportError:
    psycopg2 = None

logger = logging.getLogger(__name__)

# Type alias for database connections
DBConnection = Union[sqlite3.Connection, 'psycopg2.extensions.connection']


def is_postgres(conn: DBConnection) -> bool:
    """Check if connection is PostgreSQL."""
    return psycopg2 is not None and isinstance(conn, psycopg2.extensions.connection)


def init_db(conn: DBConnection) -> None:
    """Create tables for a new database (safe to run on existing DB)."""
    is_pg = is_postgres(conn)

    id_type = "SERIAL PRIMARY KEY" if is_pg else "INTEGER PRIMARY KEY AUTOINCREMENT"

    cur = conn.cursor()
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS products (
            id {id_type},
            name TEXT UNIQUE NOT NULL,
            category TEXT,
            quantity INTEGER DEFAULT 0,
            expiration_date TEXT,
            isactive INTEGER DEFAULT 1
        )
        """
    )
    # Settings and dismissed alerts survive reloads here
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS app_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """
    )
    conn.commit()


def get_products(conn: DBConnection) -> pd.DataFrame:
    """Return active products as a pandas DataFrame.

    Cached for 30 seconds per connection; product CRUD happens in the back
    office API. A failed query is logged and yields an empty frame.
    """
    @st.cache_data(ttl=30)
    def _fetch_products(cache_key: str):
        try:
            return pd.read_sql(
                "SELECT id, name, category, quantity, expiration_date "
                "FROM products WHERE COALESCE(isactive, 1) = 1",
                conn,
            )
        except Exception as e:
            logger.error(f"Error fetching products: {e}")
            return pd.DataFrame(
                columns=["id", "name", "category", "quantity", "expiration_date"]
            )

    return _fetch_products(f"products_{id(conn)}")
