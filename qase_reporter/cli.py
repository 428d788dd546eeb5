# qase_reporter/cli.py
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Mapping, Optional

from .config import Config, load_config
from .errors import ConfigError, QaseApiError, ReportError
from .parse_output import parse_output_file
from .qase import QaseClient
from .reporter import report_results

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qase-robotframework-reporter",
        description=(
            "Read a Robot Framework output.xml file and report its results to Qase "
            "as a new test run. Tests are matched to Qase cases by a 'Q-<id>' tag."
        ),
    )
    parser.add_argument("filename", help="Robot Framework output.xml")
    parser.add_argument("-p", "--project", help="Qase project code")
    parser.add_argument("-t", "--api-token", help="Qase API token")
    parser.add_argument("-r", "--run-title", help="Qase run title")
    parser.add_argument("--api-host", help="Qase API base URL")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print the parsed results as JSON instead of reporting them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def run(config: Config, client: Optional[QaseClient] = None) -> int:
    results = parse_output_file(config.filename)

    if config.dry_run:
        print(json.dumps([r.as_dict() for r in results], indent=2))
        return 0

    if not results:
        logger.warning("No test results with a Qase ID found, nothing to report")
        return 0

    client = client or QaseClient(config.api_token, config.api_host)
    run_id = report_results(client, config.project, config.run_title, results)
    print(f"[qase-robotframework-reporter] Reported {len(results)} results to run {run_id}")
    return 0


def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args, os.environ if environ is None else environ)
        return run(config)
    except (ConfigError, ReportError, QaseApiError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
