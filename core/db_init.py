"""Create and return a database connection (PostgreSQL or SQLite).
Schema creation is delegated to `services.init_db(conn)`.
"""
import logging
import os
import sqlite3

import streamlit as st

from core.constants import SQLITE_PATH_DEFAULT
from core.services import init_db as init_schema

logger = logging.getLogger(__name__)


def init_db():
    """Initialize database connection.
    Uses PostgreSQL when `[postgres]` secrets exist, SQLite otherwise.
    Connection reuse is handled by caching in app.py.
    """
    try:
        if hasattr(st, 'secrets') and 'postgres' in st.secrets:
            import psycopg2

            try:
                conn = psycopg2.connect(
                    host=st.secrets["postgres"]["host"],
                    port=int(st.secrets["postgres"]["port"]),
                    database=st.secrets["postgres"]["database"],
                    user=st.secrets["postgres"]["user"],
                    password=st.secrets["postgres"]["password"],
                    sslmode='require',
                    connect_timeout=10,
                )
                conn.autocommit = False
            except Exception as e:
                logger.exception('PostgreSQL connection failed')
                st.error(f"⚠️ PostgreSQL connection failed: {str(e)}")
                # Do not fall back to SQLite when PostgreSQL secrets are provided.
                st.stop()
        else:
            conn = _connect_sqlite()
    except Exception:
        # No secrets.toml at all: local development
        logger.info('No database secrets found, using SQLite')
        conn = _connect_sqlite()

    init_schema(conn)
    return conn


def _connect_sqlite(path: str = SQLITE_PATH_DEFAULT) -> sqlite3.Connection:
    """Create local SQLite connection (ensures data dir exists)."""
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    return sqlite3.connect(path, check_same_thread=False)
