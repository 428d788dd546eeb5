# qase_reporter/reporter.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence

from .models import NormalizedTestResult
from .qase import QaseClient

logger = logging.getLogger(__name__)


def collect_case_ids(results: Iterable[NormalizedTestResult]) -> List[int]:
    seen = set()
    out = []
    for r in results:
        if r.case_id not in seen:
            seen.add(r.case_id)
            out.append(r.case_id)
    return out


def to_qase_result(result: NormalizedTestResult) -> Dict[str, Any]:
    # Qase rejects `time` in seconds alongside time_ms, so only time_ms is sent
    row: Dict[str, Any] = {
        "case_id": result.case_id,
        "status": result.status.value,
        "time_ms": result.duration_ms,
    }
    if result.package:
        row["comment"] = f"Package: {result.package}"
    return row


def report_results(
    client: QaseClient,
    project: str,
    title: str,
    results: Sequence[NormalizedTestResult],
) -> int:
    """
    Create a run scoped to the results' cases, submit every result in one bulk
    request, then complete the run. Returns the run id.
    """
    logger.info("Creating test run")
    run_id = client.create_run(project, title, collect_case_ids(results))
    logger.info("Created test run ID: %d", run_id)

    logger.info("Creating test run results for run ID: %d", run_id)
    client.create_results_bulk(project, run_id, [to_qase_result(r) for r in results])

    logger.info("Completing test run ID: %d", run_id)
    client.complete_run(project, run_id)
    logger.info("Completed test run ID: %d", run_id)
    return run_id
