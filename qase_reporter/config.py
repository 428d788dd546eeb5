# qase_reporter/config.py
"""
Reporter settings. Each value comes from the command line first, then the
official Qase environment variables, then a default:

  --project    QASE_TESTOPS_PROJECT
  --api-token  QASE_TESTOPS_API_TOKEN
  --run-title  QASE_TESTOPS_RUN_TITLE   (default: "Robot Framework run <UTC time>")
  --api-host   QASE_TESTOPS_API_HOST    (default: https://api.qase.io/v1)
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

from .errors import ConfigError
from .qase import DEFAULT_API_HOST

ENV_PROJECT = "QASE_TESTOPS_PROJECT"
ENV_API_TOKEN = "QASE_TESTOPS_API_TOKEN"
ENV_RUN_TITLE = "QASE_TESTOPS_RUN_TITLE"
ENV_API_HOST = "QASE_TESTOPS_API_HOST"


@dataclass(frozen=True)
class Config:
    filename: str
    project: str
    api_token: str
    run_title: str
    api_host: str = DEFAULT_API_HOST
    dry_run: bool = False


def _pick(flag: Optional[str], environ: Mapping[str, str], name: str) -> str:
    if flag:
        return flag
    return (environ.get(name) or "").strip()


def default_run_title(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"Robot Framework run {now:%Y-%m-%d %H:%M:%S} UTC"


def load_config(args: argparse.Namespace, environ: Mapping[str, str]) -> Config:
    project = _pick(args.project, environ, ENV_PROJECT)
    api_token = _pick(args.api_token, environ, ENV_API_TOKEN)
    if not args.dry_run:
        missing = [
            label
            for label, value in (("project", project), ("api token", api_token))
            if not value
        ]
        if missing:
            raise ConfigError(
                f"missing Qase {' and '.join(missing)}: pass --project/--api-token "
                f"or set {ENV_PROJECT}/{ENV_API_TOKEN}"
            )
    return Config(
        filename=args.filename,
        project=project,
        api_token=api_token,
        run_title=_pick(args.run_title, environ, ENV_RUN_TITLE) or default_run_title(),
        api_host=_pick(args.api_host, environ, ENV_API_HOST) or DEFAULT_API_HOST,
        dry_run=args.dry_run,
    )
