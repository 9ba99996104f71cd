"""SQLite storage for flow graphs (nodes + edges).

A graph save replaces every node and edge row of the flow: old rows are
hard deleted (no soft-delete history piling up on each save) and the new
ones inserted, all in one transaction. Nodes keep the full designer blob
in ``data`` plus the request fields mirrored into their own columns so a
node run can read them without parsing the blob.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from stateflow.errors import NotFoundError
from stateflow.models.flow import FlowEdge, FlowGraph, FlowNode, NodePosition
from stateflow.utils.identifiers import utc_timestamp
from stateflow.utils.request_fields import (
    RequestFields,
    extract_label,
    extract_request_fields,
    merge_request_fields,
)
from stateserver.db import Database

logger = logging.getLogger(__name__)

DEFAULT_NODE_TYPE = "default"

NODE_COLUMNS = (
    "id, flow_id, node_id, type, label, data, request_path, request_method, request_data"
)


@dataclass
class NodeRow:
    id: int
    flow_id: int
    node_id: str
    type: str
    label: str
    data: str
    request_path: str
    request_method: str
    request_data: str

    @property
    def request_fields(self) -> RequestFields:
        return RequestFields(
            request_path=self.request_path,
            request_method=self.request_method,
            request_data=self.request_data,
        )


def _node_from_row(row: sqlite3.Row) -> NodeRow:
    return NodeRow(
        id=row["id"],
        flow_id=row["flow_id"],
        node_id=row["node_id"],
        type=row["type"],
        label=row["label"],
        data=row["data"],
        request_path=row["request_path"],
        request_method=row["request_method"],
        request_data=row["request_data"],
    )


def _node_values(node: FlowNode) -> tuple[str, str, str, str, str, str]:
    """(type, label, data_json, request_path, request_method, request_data)"""
    stored = json.dumps(
        {"position": node.position.model_dump(), "data": node.data},
        ensure_ascii=False,
    )
    fields = extract_request_fields(node.data)
    return (
        node.type or DEFAULT_NODE_TYPE,
        extract_label(node.data),
        stored,
        fields.request_path,
        fields.request_method,
        fields.request_data,
    )


def _load_blob(raw: str) -> dict:
    if not raw:
        return {}
    try:
        blob = json.loads(raw)
    except ValueError:
        return {}
    return blob if isinstance(blob, dict) else {}


def _load_position(value: Any) -> NodePosition:
    if not isinstance(value, dict):
        return NodePosition()
    try:
        return NodePosition.model_validate(value)
    except ValidationError:
        return NodePosition()


def rebuild_node(row: NodeRow) -> FlowNode:
    """Turn a stored node row back into its wire form.

    Malformed legacy data degrades to defaults instead of failing the load.
    """
    blob = _load_blob(row.data)
    data = blob.get("data")
    if not isinstance(data, dict):
        data = {"label": row.label}
    merge_request_fields(data, row.request_fields)
    return FlowNode(
        id=row.node_id,
        type=row.type,
        position=_load_position(blob.get("position")),
        data=data,
    )


class FlowGraphStore:
    """Nodes and edges of flows."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save_graph(
        self,
        flow_id: int,
        nodes: list[FlowNode],
        edges: list[FlowEdge],
    ) -> str:
        """Replace the flow's graph and stamp the flow; returns the new updated_at.

        Raises:
            NotFoundError: the flow does not exist; nothing is written.
        """
        now = utc_timestamp()
        node_rows = [
            (flow_id, node.id, *_node_values(node), now, now) for node in nodes
        ]
        edge_rows = [
            (flow_id, edge.id, edge.source, edge.target, now, now) for edge in edges
        ]
        with self._db.transaction() as conn:
            flow = conn.execute(
                "select id from flows where id = ? and deleted_at is null",
                (flow_id,),
            ).fetchone()
            if not flow:
                raise NotFoundError(f"flow not found: {flow_id}")

            conn.execute("delete from flow_nodes where flow_id = ?", (flow_id,))
            conn.execute("delete from flow_edges where flow_id = ?", (flow_id,))
            conn.executemany(
                """
                insert into flow_nodes (
                    flow_id,
                    node_id,
                    type,
                    label,
                    data,
                    request_path,
                    request_method,
                    request_data,
                    created_at,
                    updated_at
                )
                values (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                node_rows,
            )
            conn.executemany(
                """
                insert into flow_edges (
                    flow_id,
                    edge_id,
                    source_node_id,
                    target_node_id,
                    created_at,
                    updated_at
                )
                values (?, ?, ?, ?, ?, ?)
                """,
                edge_rows,
            )
            conn.execute("update flows set updated_at = ? where id = ?", (now, flow_id))
        logger.info(
            "saved graph for flow %s: %d nodes, %d edges", flow_id, len(nodes), len(edges)
        )
        return now

    def load_graph(self, flow_id: int) -> FlowGraph:
        with self._db.connection() as conn:
            node_rows = conn.execute(
                f"""
                select {NODE_COLUMNS}
                from flow_nodes
                where flow_id = ? and deleted_at is null
                order by id asc
                """,
                (flow_id,),
            ).fetchall()
            edge_rows = conn.execute(
                """
                select edge_id, source_node_id, target_node_id
                from flow_edges
                where flow_id = ? and deleted_at is null
                order by id asc
                """,
                (flow_id,),
            ).fetchall()
        return FlowGraph(
            nodes=[rebuild_node(_node_from_row(row)) for row in node_rows],
            edges=[
                FlowEdge(
                    id=row["edge_id"],
                    source=row["source_node_id"],
                    target=row["target_node_id"],
                )
                for row in edge_rows
            ],
        )

    def upsert_node(self, flow_id: int, node: FlowNode) -> None:
        """insert or replace a single node of the flow."""
        now = utc_timestamp()
        with self._db.transaction() as conn:
            conn.execute(
                """
                insert into flow_nodes (
                    flow_id,
                    node_id,
                    type,
                    label,
                    data,
                    request_path,
                    request_method,
                    request_data,
                    created_at,
                    updated_at
                )
                values (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                on conflict(flow_id, node_id) do update set
                    type = excluded.type,
                    label = excluded.label,
                    data = excluded.data,
                    request_path = excluded.request_path,
                    request_method = excluded.request_method,
                    request_data = excluded.request_data,
                    updated_at = excluded.updated_at,
                    deleted_at = null
                """,
                (flow_id, node.id, *_node_values(node), now, now),
            )

    def update_node(self, flow_id: int, node_id: str, node: FlowNode) -> bool:
        """Update an existing node; returns False when no such node exists."""
        node_type, label, data, path, method, body = _node_values(node)
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                update flow_nodes
                set type = ?,
                    label = ?,
                    data = ?,
                    request_path = ?,
                    request_method = ?,
                    request_data = ?,
                    updated_at = ?
                where flow_id = ? and node_id = ? and deleted_at is null
                """,
                (node_type, label, data, path, method, body, utc_timestamp(), flow_id, node_id),
            )
            return cursor.rowcount > 0

    def find_node(self, node_id: str, flow_id: int | None = None) -> NodeRow | None:
        """Look a node up by external id.

        External ids are only unique within a flow. With flow_id the lookup is
        scoped to that flow; without it the oldest matching row wins.
        """
        query = f"select {NODE_COLUMNS} from flow_nodes where node_id = ? and deleted_at is null"
        params: tuple = (node_id,)
        if flow_id is not None:
            query += " and flow_id = ?"
            params = (node_id, flow_id)
        with self._db.connection() as conn:
            row = conn.execute(query + " order by id asc limit 1", params).fetchone()
        if not row:
            return None
        return _node_from_row(row)
