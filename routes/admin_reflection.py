from fastapi import APIRouter, Query, HTTPException, Depends
from typing import Optional, cast

from reflection.store import ReportStore
from reflection.query import (
    get_reports,
    get_failures,
    get_execution_chain,
    summarize,
)

# Injected in main.py
store: ReportStore = cast(ReportStore, None)


def report_store() -> ReportStore:
    if store is None:
        raise HTTPException(status_code=500, detail="Report store not initialized")
    return store


router = APIRouter()


@router.get("/reports")
def query_reports(
    klass: Optional[str] = None,
    method: Optional[str] = None,
    status: Optional[str] = None,
    execution_id: Optional[int] = None,
    since: Optional[int] = None,
    until: Optional[int] = None,
    limit: int = Query(default=500, ge=1, le=5000),
    store: ReportStore = Depends(report_store),
):
    """
    Low-level reflection report query.
    """
    reports = get_reports(
        store,
        klass=klass,
        method=method,
        status=status,
        execution_id=execution_id,
        since=since,
        until=until,
        limit=limit,
    )

    return {
        "count": len(reports),
        "reports": reports,
    }


@router.get("/reports/{klass}/{method}")
def reports_for_method(
    klass: str,
    method: str,
    limit: int = Query(default=500, ge=1, le=5000),
    store: ReportStore = Depends(report_store),
):
    """
    All reports for one monitored method.
    """
    reports = get_reports(store, klass=klass, method=method, limit=limit)

    if not reports:
        raise HTTPException(status_code=404, detail="No reports found for method")

    return {
        "class": klass,
        "method": method,
        "count": len(reports),
        "reports": reports,
    }


@router.get("/failures")
def list_failures(
    klass: Optional[str] = None,
    method: Optional[str] = None,
    limit: int = Query(default=500, ge=1, le=5000),
    store: ReportStore = Depends(report_store),
):
    reports = get_failures(store, klass=klass, method=method, limit=limit)
    return {"count": len(reports), "reports": reports}


@router.get("/summary")
def summary(store: ReportStore = Depends(report_store)):
    """
    Pass/fail counts per monitored method.
    """
    return summarize(store)


@router.get("/executions/{execution_id}")
def execution_chain(execution_id: int, store: ReportStore = Depends(report_store)):
    """
    Reports of an execution and of the executions it is the base of.
    """
    reports = get_execution_chain(store, execution_id)

    if not reports:
        raise HTTPException(status_code=404, detail="Execution not found")

    return {
        "execution_id": execution_id,
        "count": len(reports),
        "reports": reports,
    }
