# qase_reporter/qase.py
"""Minimal Qase TestOps API v1 client: runs and bulk results."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import QaseApiError

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "https://api.qase.io/v1"
DEFAULT_TIMEOUT = 30

RETRY_STATUSES = [408, 429, 500, 502, 503, 504]


def build_session(token: str, retries: int = 3, backoff: float = 0.5) -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "Token": token,
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "qase-robotframework-reporter",
        }
    )
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff,
        status_forcelist=RETRY_STATUSES,
        # run creation is not idempotent, so POSTs are only retried on connect errors
        allowed_methods=frozenset(["GET"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


class QaseClient:
    def __init__(
        self,
        token: str,
        host: str = DEFAULT_API_HOST,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.host = host.rstrip("/")
        self.session = session if session is not None else build_session(token)
        self.timeout = timeout

    def _post(self, path: str, action: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.host}/{path}"
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise QaseApiError(f"failed to {action}: {e}") from e
        if r.status_code != 200:
            raise QaseApiError(f"failed to {action}", r.status_code, r.text)
        try:
            body = r.json()
        except ValueError:
            raise QaseApiError(f"failed to {action}, invalid JSON", r.status_code, r.text) from None
        if not body.get("status"):
            raise QaseApiError(f"failed to {action}, status false", r.status_code, r.text)
        return body

    def create_run(self, project: str, title: str, case_ids: Iterable[int]) -> int:
        body = self._post(
            f"run/{project}",
            "create test run",
            {"title": title, "cases": list(case_ids)},
        )
        try:
            return int(body["result"]["id"])
        except (KeyError, TypeError, ValueError):
            raise QaseApiError("failed to create test run, no run id in response") from None

    def create_results_bulk(self, project: str, run_id: int, results: List[Dict[str, Any]]) -> None:
        self._post(
            f"result/{project}/{run_id}/bulk",
            "create test run results",
            {"results": results},
        )

    def complete_run(self, project: str, run_id: int) -> None:
        self._post(f"run/{project}/{run_id}/complete", "complete test run")
