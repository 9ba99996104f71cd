"""SQLite storage for sessions and their per-node run history."""

import logging
import sqlite3
from dataclasses import dataclass

from stateflow.models.session import RUN_NODE_EVENT, SESSION_RUNNING
from stateflow.utils.identifiers import utc_timestamp
from stateserver.db import Database

logger = logging.getLogger(__name__)

SESSION_COLUMNS = "id, flow_id, logical_session_id, state, status, created_at, updated_at"
DETAIL_COLUMNS = (
    "id, session_id, node_id, flow_id, event, from_state, to_state, "
    "path, request_data, response_data, created_at, updated_at"
)


@dataclass
class SessionRow:
    id: int
    flow_id: int
    logical_session_id: int
    state: str
    status: str
    created_at: str
    updated_at: str


@dataclass
class SessionDetailRow:
    id: int
    session_id: int
    node_id: str
    flow_id: int
    event: str
    from_state: str
    to_state: str
    path: str
    request_data: str
    response_data: str
    created_at: str
    updated_at: str


@dataclass
class RunContext:
    """What a node run sent and received."""

    path: str
    request_data: str
    response_data: str


def _session_from_row(row: sqlite3.Row) -> SessionRow:
    return SessionRow(**{key: row[key] for key in row.keys()})


def _detail_from_row(row: sqlite3.Row) -> SessionDetailRow:
    return SessionDetailRow(**{key: row[key] for key in row.keys()})


class SessionTracker:
    """Find-or-create sessions and keep the latest run of each node per session."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def record_run(
        self,
        flow_id: int,
        logical_session_id: int,
        node_id: str,
        context: RunContext,
    ) -> tuple[SessionRow, SessionDetailRow]:
        """Record a node run in one transaction.

        The session for (flow_id, logical_session_id) is created on first use.
        The detail row for (session, node_id) is inserted on the first run and
        overwritten on later runs, so history is latest-per-node.
        """
        now = utc_timestamp()
        with self._db.transaction() as conn:
            conn.execute(
                """
                insert into sessions (
                    flow_id,
                    logical_session_id,
                    state,
                    status,
                    created_at,
                    updated_at
                )
                values (?, ?, '', ?, ?, ?)
                on conflict(flow_id, logical_session_id) do update set
                    updated_at = excluded.updated_at
                """,
                (flow_id, logical_session_id, SESSION_RUNNING, now, now),
            )
            session = _session_from_row(
                conn.execute(
                    f"""
                    select {SESSION_COLUMNS}
                    from sessions
                    where flow_id = ? and logical_session_id = ?
                    """,
                    (flow_id, logical_session_id),
                ).fetchone()
            )
            conn.execute(
                """
                insert into session_details (
                    session_id,
                    node_id,
                    flow_id,
                    event,
                    from_state,
                    to_state,
                    path,
                    request_data,
                    response_data,
                    created_at,
                    updated_at
                )
                values (?, ?, ?, ?, '', ?, ?, ?, ?, ?, ?)
                on conflict(session_id, node_id) do update set
                    path = excluded.path,
                    request_data = excluded.request_data,
                    response_data = excluded.response_data,
                    to_state = excluded.to_state,
                    updated_at = excluded.updated_at
                """,
                (
                    session.id,
                    node_id,
                    flow_id,
                    RUN_NODE_EVENT,
                    node_id,
                    context.path,
                    context.request_data,
                    context.response_data,
                    now,
                    now,
                ),
            )
            detail = _detail_from_row(
                conn.execute(
                    f"""
                    select {DETAIL_COLUMNS}
                    from session_details
                    where session_id = ? and node_id = ?
                    """,
                    (session.id, node_id),
                ).fetchone()
            )
        logger.info(
            "recorded run of node %s in flow %s session %s",
            node_id,
            flow_id,
            logical_session_id,
        )
        return session, detail

    def get_session(self, session_id: int) -> SessionRow | None:
        with self._db.connection() as conn:
            row = conn.execute(
                f"select {SESSION_COLUMNS} from sessions where id = ? and deleted_at is null",
                (session_id,),
            ).fetchone()
        if not row:
            return None
        return _session_from_row(row)

    def list_sessions(
        self,
        flow_id: int | None = None,
        status: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[SessionRow], int]:
        clauses = ["deleted_at is null"]
        params: list = []
        if flow_id is not None:
            clauses.append("flow_id = ?")
            params.append(flow_id)
        if status:
            clauses.append("status = ?")
            params.append(status)
        where = " and ".join(clauses)
        with self._db.connection() as conn:
            total = conn.execute(
                f"select count(*) from sessions where {where}", params
            ).fetchone()[0]
            rows = conn.execute(
                f"""
                select {SESSION_COLUMNS}
                from sessions
                where {where}
                order by created_at desc, id desc
                limit ? offset ?
                """,
                (*params, limit, offset),
            ).fetchall()
        return [_session_from_row(row) for row in rows], total

    def list_history(
        self,
        session_id: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[SessionDetailRow], int]:
        where = "deleted_at is null"
        params: tuple = ()
        if session_id is not None:
            where += " and session_id = ?"
            params = (session_id,)
        with self._db.connection() as conn:
            total = conn.execute(
                f"select count(*) from session_details where {where}", params
            ).fetchone()[0]
            rows = conn.execute(
                f"""
                select {DETAIL_COLUMNS}
                from session_details
                where {where}
                order by created_at desc, id desc
                limit ? offset ?
                """,
                (*params, limit, offset),
            ).fetchall()
        return [_detail_from_row(row) for row in rows], total

    def get_detail(self, session_id: int, node_id: str) -> SessionDetailRow | None:
        with self._db.connection() as conn:
            row = conn.execute(
                f"""
                select {DETAIL_COLUMNS}
                from session_details
                where session_id = ? and node_id = ? and deleted_at is null
                """,
                (session_id, node_id),
            ).fetchone()
        if not row:
            return None
        return _detail_from_row(row)
