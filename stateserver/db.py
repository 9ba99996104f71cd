"""SQLite connection handling and schema.

One Database object is created at startup and handed to every store.
Writes go through transaction(), which takes the write lock up front
(begin immediate) so concurrent request threads serialize cleanly, and
commits or rolls back as a unit.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from stateflow.errors import PersistenceError

logger = logging.getLogger(__name__)

SCHEMA = """
create table if not exists flows (
    id integer primary key autoincrement,
    identifier text not null default '',
    name text not null,
    description text not null default '',
    base_url text not null default '',
    created_at text not null,
    updated_at text not null,
    deleted_at text
);
create index if not exists idx_flows_deleted_at on flows(deleted_at);

create table if not exists flow_nodes (
    id integer primary key autoincrement,
    flow_id integer not null,
    node_id text not null,
    type text not null default 'default',
    label text not null default '',
    data text not null default '',
    request_path text not null default '',
    request_method text not null default '',
    request_data text not null default '',
    created_at text not null,
    updated_at text not null,
    deleted_at text
);
create unique index if not exists ux_flow_nodes_flow_node on flow_nodes(flow_id, node_id);
create index if not exists idx_flow_nodes_node_id on flow_nodes(node_id);

create table if not exists flow_edges (
    id integer primary key autoincrement,
    flow_id integer not null,
    edge_id text not null,
    source_node_id text not null,
    target_node_id text not null,
    created_at text not null,
    updated_at text not null,
    deleted_at text
);
create unique index if not exists ux_flow_edges_flow_edge on flow_edges(flow_id, edge_id);

create table if not exists sessions (
    id integer primary key autoincrement,
    flow_id integer not null,
    logical_session_id integer not null default 0,
    state text not null default '',
    status text not null default 'running',
    created_at text not null,
    updated_at text not null,
    deleted_at text
);
create unique index if not exists ux_sessions_flow_logical on sessions(flow_id, logical_session_id);

create table if not exists session_details (
    id integer primary key autoincrement,
    session_id integer not null,
    node_id text not null,
    flow_id integer not null,
    event text not null default '',
    from_state text not null default '',
    to_state text not null default '',
    path text not null default '',
    request_data text not null default '',
    response_data text not null default '',
    input text not null default '',
    output text not null default '',
    created_at text not null,
    updated_at text not null,
    deleted_at text
);
create unique index if not exists ux_session_details_session_node on session_details(session_id, node_id);
create index if not exists idx_session_details_created_at on session_details(created_at);
"""


class Database:
    """Handle on the SQLite file shared by all stores."""

    def __init__(self, path: Path | str, busy_timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.busy_timeout = busy_timeout

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # isolation_level=None: transactions are opened explicitly in transaction()
        conn = sqlite3.connect(
            self.path,
            timeout=self.busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("pragma synchronous = normal")
        return conn

    def init_schema(self) -> None:
        """create tables and indexes if missing."""
        with self.connection() as conn:
            conn.execute("pragma journal_mode = wal")
            conn.executescript(SCHEMA)
        logger.info("database ready at %s", self.path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Autocommit connection for reads."""
        conn = self._connect()
        try:
            yield conn
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"database error: {exc}") from exc
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """All-or-nothing write scope.

        Commits when the block exits normally, rolls back on any exception.
        sqlite3 errors and integers too large for SQLite are re-raised as
        PersistenceError; other exceptions propagate unchanged after the
        rollback.
        """
        conn = self._connect()
        try:
            conn.execute("begin immediate")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.execute("commit")
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"database error: {exc}") from exc
        finally:
            conn.close()
