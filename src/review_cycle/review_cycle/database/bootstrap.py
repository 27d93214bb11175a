"""Schema bootstrap for development and tests against a real MySQL server."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Union

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def _without_database_statements(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    return _USE_DB.sub("", _CREATE_DB.sub("", sql))


def split_sql(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quotes. Line comments are dropped."""

    buf: List[str] = []
    quote = ""
    escaped = False

    for line in sql.splitlines(keepends=True):
        if not quote and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escaped:
                escaped = False
            elif ch == "\\" and quote:
                escaped = True
            elif quote:
                if ch == quote:
                    quote = ""
            elif ch in ("'", '"'):
                quote = ch
            elif ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def run_sql_file(db_config: dict, *, path: Union[str, Path]) -> int:
    """Execute every statement of ``path`` in one transaction; returns the statement count."""

    config = DBConfig.from_dict(db_config)
    sql = _without_database_statements(Path(path).read_text(encoding="utf-8"))

    conn = _connect(config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_sql(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    except mysql.connector.Error:
        conn.rollback()
        logger.exception("Failed applying %s", path)
        raise
    finally:
        conn.close()
    return count


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> None:
    ensure_database_exists(db_config)
    count = run_sql_file(db_config, path=schema_path)
    logger.info("Applied %s (%s statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: Union[str, Path]) -> None:
    count = run_sql_file(db_config, path=seed_path)
    logger.info("Applied %s (%s statements)", Path(seed_path).name, count)


def list_tables(db_config: dict) -> List[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
