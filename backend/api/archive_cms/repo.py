from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine

from archive_cms.models import archive_index


# ----------------------------
# Helpers
# ----------------------------

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _fetch_by_id(conn: Connection, archive_id: int) -> Dict[str, Any] | None:
    row = conn.execute(
        select(archive_index).where(archive_index.c.id == archive_id)
    ).mappings().first()
    return dict(row) if row is not None else None


def _require_by_id(conn: Connection, archive_id: int) -> Dict[str, Any]:
    row = _fetch_by_id(conn, archive_id)
    if row is None:
        raise KeyError(f"Archive index not found: {archive_id}")
    return row


# ----------------------------
# CRUD / Queries
# ----------------------------

def list_archives(engine: Engine) -> List[Dict[str, Any]]:
    with engine.begin() as conn:
        rows = conn.execute(
            select(archive_index).order_by(archive_index.c.id.desc())
        ).mappings().all()

    return [dict(r) for r in rows]


def get_archive(engine: Engine, archive_id: int) -> Dict[str, Any]:
    """
    Raises KeyError when no row has this id.
    """
    with engine.begin() as conn:
        return _require_by_id(conn, archive_id)


def create_archive(
    engine: Engine,
    *,
    class_name: str,
    web_name: str,
    org_name: str,
    org_web_link: str,
) -> Dict[str, Any]:
    now = _utc_now()

    with engine.begin() as conn:
        result = conn.execute(
            insert(archive_index).values(
                class_name=class_name,
                web_name=web_name,
                org_name=org_name,
                org_web_link=org_web_link,
                created_at=now,
                updated_at=now,
            )
        )
        new_id = int(result.inserted_primary_key[0])
        return _require_by_id(conn, new_id)


def update_archive(
    engine: Engine,
    archive_id: int,
    *,
    class_name: str,
    web_name: str,
    org_name: str,
    org_web_link: str,
) -> Dict[str, Any]:
    """
    Overwrites the four business fields. id and created_at are left alone.
    Raises KeyError if the row does not exist before the write.
    """
    with engine.begin() as conn:
        _require_by_id(conn, archive_id)

        conn.execute(
            update(archive_index)
            .where(archive_index.c.id == archive_id)
            .values(
                class_name=class_name,
                web_name=web_name,
                org_name=org_name,
                org_web_link=org_web_link,
                updated_at=_utc_now(),
            )
        )
        return _require_by_id(conn, archive_id)


def delete_archive(engine: Engine, archive_id: int) -> None:
    with engine.begin() as conn:
        _require_by_id(conn, archive_id)
        conn.execute(delete(archive_index).where(archive_index.c.id == archive_id))
