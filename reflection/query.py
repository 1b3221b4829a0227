# reflection/query.py

from typing import Dict, List, Optional

from reflection.store import Report, ReportStore


def _order(report: Report):
    return (report["time"], report["execution_id"], report["reflection_number"])


def get_reports(
    store: ReportStore,
    *,
    klass: Optional[str] = None,
    method: Optional[str] = None,
    status: Optional[str] = None,
    execution_id: Optional[int] = None,
    since: Optional[int] = None,
    until: Optional[int] = None,
    limit: int = 500,
) -> List[Report]:
    """
    Retrieve reflection reports with optional filters.

    Guarantees:
    - Deterministic ordering by time, execution, reflection number
    - Read-only; reports are returned as stored

    Non-Guarantees:
    - Does not compare reflections against their control
    - Does not decide whether a failure is a real defect
    """

    reports: List[Report] = []

    for r in store.all():
        if klass and r["class"] != klass:
            continue
        if method and r["method"] != method:
            continue
        if status and r["status"] != status:
            continue
        if execution_id is not None and r["execution_id"] != execution_id:
            continue
        if since is not None and r["time"] < since:
            continue
        if until is not None and r["time"] > until:
            continue

        reports.append(r)

    reports.sort(key=_order)
    return reports[:limit]


def get_failures(
    store: ReportStore,
    klass: Optional[str] = None,
    method: Optional[str] = None,
    limit: int = 500,
) -> List[Report]:
    return get_reports(store, klass=klass, method=method, status="fail", limit=limit)


def get_execution_chain(store: ReportStore, execution_id: int) -> List[Report]:
    """
    Reports of one execution plus every execution whose chain it roots.
    """
    reports = [
        r for r in store.all()
        if r["execution_id"] == execution_id or r["base_id"] == execution_id
    ]
    reports.sort(key=_order)
    return reports


def summarize(store: ReportStore) -> Dict[str, Dict[str, int]]:
    """
    Pass/fail counts per "Class.method".
    """
    summary: Dict[str, Dict[str, int]] = {}

    for r in store.all():
        key = f"{r['class']}.{r['method']}"
        counts = summary.setdefault(key, {"pass": 0, "fail": 0})
        counts[r["status"]] = counts.get(r["status"], 0) + 1

    return dict(sorted(summary.items()))
