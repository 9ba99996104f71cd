"""SQLite storage for flows."""

import logging
import sqlite3
from dataclasses import dataclass

from stateflow.utils.identifiers import utc_timestamp
from stateserver.db import Database

logger = logging.getLogger(__name__)

FLOW_COLUMNS = "id, identifier, name, description, base_url, created_at, updated_at"

# request field -> column; anything else is ignored by update_flow
UPDATABLE_COLUMNS = {
    "name": "name",
    "description": "description",
    "base_url": "base_url",
    "identifier": "identifier",
}


@dataclass
class FlowRow:
    id: int
    identifier: str
    name: str
    description: str
    base_url: str
    created_at: str
    updated_at: str


def _flow_from_row(row: sqlite3.Row) -> FlowRow:
    return FlowRow(
        id=row["id"],
        identifier=row["identifier"],
        name=row["name"],
        description=row["description"],
        base_url=row["base_url"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _select_flow(conn: sqlite3.Connection, flow_id: int) -> FlowRow | None:
    row = conn.execute(
        f"select {FLOW_COLUMNS} from flows where id = ? and deleted_at is null",
        (flow_id,),
    ).fetchone()
    if not row:
        return None
    return _flow_from_row(row)


def _keyword_filter(keyword: str | None) -> tuple[str, tuple]:
    if not keyword:
        return "where deleted_at is null", ()
    pattern = f"%{keyword}%"
    return (
        "where deleted_at is null and (name like ? or description like ?)",
        (pattern, pattern),
    )


class FlowStore:
    """Flow rows: create, read, partial update, soft delete."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create_flow(
        self,
        name: str,
        description: str = "",
        base_url: str = "",
        identifier: str = "",
    ) -> FlowRow:
        now = utc_timestamp()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                insert into flows (
                    identifier,
                    name,
                    description,
                    base_url,
                    created_at,
                    updated_at
                )
                values (?, ?, ?, ?, ?, ?)
                """,
                (identifier, name, description, base_url, now, now),
            )
            flow_id = cursor.lastrowid
        logger.info("created flow %s (%s)", flow_id, name)
        return FlowRow(
            id=flow_id,
            identifier=identifier,
            name=name,
            description=description,
            base_url=base_url,
            created_at=now,
            updated_at=now,
        )

    def get_flow(self, flow_id: int) -> FlowRow | None:
        with self._db.connection() as conn:
            return _select_flow(conn, flow_id)

    def list_flows(
        self,
        keyword: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[FlowRow], int]:
        """Return one page of live flows, newest update first, and the total count."""
        where, params = _keyword_filter(keyword)
        with self._db.connection() as conn:
            total = conn.execute(f"select count(*) from flows {where}", params).fetchone()[0]
            rows = conn.execute(
                f"""
                select {FLOW_COLUMNS}
                from flows
                {where}
                order by updated_at desc, id desc
                limit ? offset ?
                """,
                (*params, limit, offset),
            ).fetchall()
        return [_flow_from_row(row) for row in rows], total

    def update_flow(self, flow_id: int, changes: dict[str, str]) -> FlowRow | None:
        """Apply a partial update; returns None when the flow does not exist."""
        assignments = []
        params = []
        for key, value in changes.items():
            column = UPDATABLE_COLUMNS.get(key)
            if column is None or value is None:
                continue
            assignments.append(f"{column} = ?")
            params.append(value)

        with self._db.transaction() as conn:
            if _select_flow(conn, flow_id) is None:
                return None
            if assignments:
                assignments.append("updated_at = ?")
                params.append(utc_timestamp())
                conn.execute(
                    f"update flows set {', '.join(assignments)} where id = ?",
                    (*params, flow_id),
                )
            return _select_flow(conn, flow_id)

    def delete_flow(self, flow_id: int) -> bool:
        """Soft delete a flow; returns False when there was nothing to delete."""
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "update flows set deleted_at = ? where id = ? and deleted_at is null",
                (utc_timestamp(), flow_id),
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("deleted flow %s", flow_id)
        return deleted
