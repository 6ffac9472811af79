"""Applies ``database/schema.sql`` to the configured MySQL database.

The schema file names its own database for manual use; those lines are
dropped here so the configured database name always wins.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Mapping, Union

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_DATABASE_SELECTION = re.compile(r"^(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def split_schema(sql: str) -> list[str]:
    """Statements of ``sql`` in order, minus ``--`` comment lines and database selection."""
    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))

    statements: list[str] = []
    start = 0
    quoted = False
    for pos, ch in enumerate(body):
        if ch == "'":
            quoted = not quoted
        elif ch == ";" and not quoted:
            statements.append(body[start:pos])
            start = pos + 1
    statements.append(body[start:])

    return [s.strip() for s in statements if s.strip() and not _DATABASE_SELECTION.match(s.strip())]


def _server_connection(config: DBConfig, *, database: bool = True):
    kwargs = dict(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        connection_timeout=config.connection_timeout,
    )
    if database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def apply_schema(db_config: Mapping, *, schema_path: Union[str, Path]) -> None:
    config = DBConfig.from_mapping(db_config)
    statements = split_schema(Path(schema_path).read_text(encoding="utf-8"))

    conn = _server_connection(config, database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        cur.execute(f"USE `{config.database}`")
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema_applied", extra={"database": config.database, "statements": len(statements)})


def list_tables(db_config: Mapping) -> list[str]:
    conn = _server_connection(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
