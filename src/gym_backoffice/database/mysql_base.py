from __future__ import annotations

import re
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode, errors

from ..core.exceptions import StorageUnavailable, UniquenessViolation
from .connection import DatabaseConnection

_DUPLICATE_KEY = re.compile(r"for key '(?:[\w$]+\.)?([\w$]+)'")


def duplicate_key_name(message: str) -> Optional[str]:
    """Extract the violated index name from a MySQL duplicate-entry message.

    MySQL 8 prefixes the table ("clients.uq_clients_number"), 5.7 does not.
    """

    m = _DUPLICATE_KEY.search(message or "")
    return m.group(1) if m else None


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except (errors.InterfaceError, errors.OperationalError) as exc:
        raise StorageUnavailable(f"Database unavailable: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except errors.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise UniquenessViolation(str(exc.msg), key=duplicate_key_name(str(exc.msg))) from exc
        raise
    except (errors.InterfaceError, errors.OperationalError) as exc:
        # The connection is likely gone; a rollback would fail the same way.
        raise StorageUnavailable(f"Database error: {exc}") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours, rest = divmod(total_seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
