"""
Activity log API.

Endpoints:
- GET /logs: newest first, `limit` / `offset` / `category` query parameters
- GET /logs/export: the same entries as a CSV download
"""

import csv
import io
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from guard.api.deps import get_store
from guard.logic import list_activity_logs
from guard.schemas import ActivityLogView
from guard.store import SecurityStore

router = APIRouter(prefix="/logs", tags=["logs"])

CSV_HEADER = ["Timestamp", "Action", "Component", "Status", "Details"]


def logs_to_csv(logs: List[ActivityLogView]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADER) + "\n")
    for log in logs:
        writer.writerow([log.timestamp.isoformat(), log.action, log.component, log.status.value, log.details])
    return buffer.getvalue()


# Query values stay strings: bad numbers fall back to defaults instead of a 4xx
@router.get("", response_model=List[ActivityLogView])
def read_logs(
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    store: SecurityStore = Depends(get_store),
):
    return list_activity_logs(store, limit=limit, offset=offset, category=category)


@router.get("/export")
def export_logs(
    category: Optional[str] = Query(default=None),
    store: SecurityStore = Depends(get_store),
):
    with store.locked():
        logs = store.get_activity_logs(limit=store.count_activity_logs(category), offset=0, category=category)
    filename = f"security-logs-{date.today().isoformat()}.csv"
    return Response(
        content=logs_to_csv(logs),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
