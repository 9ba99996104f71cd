"""API routes for sessions and their run history."""

from fastapi import APIRouter, Depends, Query

from stateflow.errors import NotFoundError
from stateflow.models.session import (
    SessionHistoryItem,
    SessionHistoryPage,
    SessionInfo,
    SessionPage,
)
from stateflow.utils.identifiers import parse_int_id
from stateflow.utils.pagination import Page
from stateserver.dependencies import get_session_tracker
from stateserver.session_db import SessionDetailRow, SessionRow, SessionTracker

router = APIRouter(prefix="/sessions")

DEFAULT_SESSION_PAGE_SIZE = 10
DEFAULT_HISTORY_PAGE_SIZE = 20


def _session_info(row: SessionRow) -> SessionInfo:
    return SessionInfo(
        id=str(row.id),
        session_id=str(row.id),
        logical_session_id=row.logical_session_id,
        state_machine_id=str(row.flow_id),
        state=row.state,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _history_item(row: SessionDetailRow) -> SessionHistoryItem:
    return SessionHistoryItem(
        id=str(row.id),
        session_id=str(row.session_id),
        node_id=row.node_id,
        event=row.event,
        from_state=row.from_state,
        to_state=row.to_state,
        path=row.path,
        request_data=row.request_data,
        response_data=row.response_data,
        created_at=row.created_at,
    )


# registered before /{session_id} so "history" is never read as an id
@router.get("/history")
def list_history(
    session_id: str | None = Query(None, alias="sessionId"),
    page: int = 1,
    page_size: int = Query(DEFAULT_HISTORY_PAGE_SIZE, alias="pageSize"),
    tracker: SessionTracker = Depends(get_session_tracker),
) -> SessionHistoryPage:
    """list session history rows, newest first, optionally for one session."""
    paging = Page.clamp(page, page_size, DEFAULT_HISTORY_PAGE_SIZE)
    rows, total = tracker.list_history(
        session_id=parse_int_id(session_id, "sessionId") if session_id else None,
        limit=paging.limit,
        offset=paging.offset,
    )
    return SessionHistoryPage(items=[_history_item(row) for row in rows], total=total)


@router.get("")
def list_sessions(
    state_machine_id: str | None = Query(None, alias="stateMachineId"),
    status: str | None = None,
    page: int = 1,
    page_size: int = Query(DEFAULT_SESSION_PAGE_SIZE, alias="pageSize"),
    tracker: SessionTracker = Depends(get_session_tracker),
) -> SessionPage:
    """list sessions, optionally filtered by flow and status."""
    paging = Page.clamp(page, page_size, DEFAULT_SESSION_PAGE_SIZE)
    rows, total = tracker.list_sessions(
        flow_id=parse_int_id(state_machine_id, "stateMachineId") if state_machine_id else None,
        status=status or None,
        limit=paging.limit,
        offset=paging.offset,
    )
    return SessionPage(items=[_session_info(row) for row in rows], total=total)


@router.get("/{session_id}")
def get_session(
    session_id: str,
    tracker: SessionTracker = Depends(get_session_tracker),
) -> SessionInfo:
    row = tracker.get_session(parse_int_id(session_id))
    if row is None:
        raise NotFoundError(f"session not found: {session_id}")
    return _session_info(row)
