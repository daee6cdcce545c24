from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..logging_config import get_logger
from .connection import DatabaseConnection, DBConfig

logger = get_logger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[4] / "database" / "schema.sql"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
    """Apply schema.sql (idempotent: every statement is CREATE ... IF NOT EXISTS)."""
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    ensure_database_exists(conn_factory)

    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied", extra={"database": conn_factory.config.database})


def ensure_demo_owner(db_config: dict) -> int:
    """Create (or refresh) the demo owner account and a few workers. Returns the owner id."""
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE email=%s", ("demo@farm.local",))
        row = cur.fetchone()
        if row:
            owner_id = int(row["user_id"])
            cur.execute(
                "UPDATE users SET password_hash=%s, is_active=1 WHERE user_id=%s",
                (generate_password_hash("demo1234"), owner_id),
            )
        else:
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, is_active)
                VALUES(%s,%s,%s,'owner',1)
                """,
                ("Demo Grower", "demo@farm.local", generate_password_hash("demo1234")),
            )
            owner_id = int(cur.lastrowid)

        demo_workers = [
            ("Ravi", "male", "Harvesting", "skilled", "550.00"),
            ("Lakshmi", "female", "Pruning", "semi-skilled", "450.00"),
            ("Manju", "female", "Weeding", "unskilled", "400.00"),
        ]
        for name, gender, work_type, skill, rate in demo_workers:
            cur.execute("SELECT worker_id FROM workers WHERE owner_id=%s AND worker_name=%s", (owner_id, name))
            if cur.fetchone():
                continue
            cur.execute(
                """
                INSERT INTO workers(owner_id, worker_name, gender, work_type, skill_level, daily_rate, advance)
                VALUES(%s,%s,%s,%s,%s,%s,0)
                """,
                (owner_id, name, gender, work_type, skill, rate),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("demo owner ready", extra={"owner_id": owner_id})
    return owner_id


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
