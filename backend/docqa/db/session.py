# backend/docqa/db/session.py
from __future__ import annotations
import logging

from psycopg_pool import ConnectionPool

logger = logging.getLogger("docqa.db")


class DatabasePool:
    """psycopg3 connection pool for the Q&A repository."""

    def __init__(self, dsn: str, masked_dsn: str | None = None):
        self.dsn = dsn
        self.masked_dsn = masked_dsn or "<dsn>"
        self.pool: ConnectionPool | None = None

    def init(self) -> ConnectionPool:
        if self.pool:
            logger.info("Database pool already initialized.")
            return self.pool
        logger.info(f"Connecting to database using DSN: {self.masked_dsn}")
        self.pool = ConnectionPool(
            conninfo=self.dsn,
            min_size=1,
            max_size=10,
            num_workers=2,
            timeout=30,
            open=True,
        )
        logger.info("✅ Database connection pool initialized.")
        return self.pool

    def close(self) -> None:
        if self.pool:
            self.pool.close()
            self.pool = None
            logger.info("🧹 Database pool closed.")

    def ping(self) -> tuple[bool, str]:
        """Check DB connectivity."""
        if not self.pool:
            return False, "Pool not initialized"
        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1;")
                    cur.fetchone()
            return True, "Database connection successful"
        except Exception as e:
            return False, str(e)
