# qase_reporter/parse_output.py
"""
Read a Robot Framework output.xml and normalize its tests for Qase.

Each <test> must carry a tag like "Q-123" naming its Qase case. Two timestamp
conventions are understood, chosen per <status> element:
  * Robot Framework >= 7:  start="2024-01-01T10:00:00.123456" elapsed="1.5"
  * Robot Framework <  7:  starttime="20240101 10:00:00.123" endtime="..."

Tests that cannot be normalized are logged and skipped; only a document whose
root is not <robot> stops the parse.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .errors import (
    IdentifierNotFound,
    IdentifierOutOfRange,
    InvalidRootElement,
    MissingElapsed,
    MissingEndTime,
    MissingStartTime,
    MissingStatusAttribute,
    MissingStatusElement,
    NoTagsFound,
    ReportError,
    TimeParseError,
)
from .models import NormalizedTestResult, ResultStatus, SchemaVersion

logger = logging.getLogger(__name__)

ROOT_TAG = "robot"
SUITE_TAG = "suite"
TEST_TAG = "test"

CASE_ID_RE = re.compile(r"Q-([0-9]+)")
FRACTION_RE = re.compile(r"[0-9]{1,9}")
ELAPSED_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Qase ids and durations are int64 on the wire
MAX_INT64 = 2**63 - 1

LEGACY_TIME_FORMAT = "%Y%m%d %H:%M:%S"
LEGACY_TIME_RE = re.compile(r"[0-9]{8} [0-9]{2}:[0-9]{2}:[0-9]{2}")
CURRENT_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
CURRENT_TIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}")


# ---- loading ----------------------------------------------------------------


def load_document(path: Union[str, Path]) -> ET.ElementTree:
    path = Path(path)
    logger.info("Reading file: %s", path.resolve())
    try:
        return ET.parse(path)
    except (OSError, ET.ParseError) as e:
        raise ReportError(f"error reading XML file {path}: {e}") from e


# ---- Qase case id -----------------------------------------------------------


def resolve_case_id(test_el: ET.Element) -> int:
    """
    Return the Qase case id from the first direct <tag> child whose text
    contains "Q-<digits>". Later matching tags are ignored, even when the
    first one is out of range.
    """
    tags = test_el.findall("tag")
    if not tags:
        raise NoTagsFound()
    for tag in tags:
        m = CASE_ID_RE.search(tag.text or "")
        if m:
            case_id = int(m.group(1))
            if case_id > MAX_INT64:
                raise IdentifierOutOfRange(m.group(1))
            return case_id
    raise IdentifierNotFound(tag.text or "" for tag in tags)


# ---- status and timing ------------------------------------------------------


def decode_status(status_el: ET.Element) -> ResultStatus:
    text = status_el.get("status", "")
    if not text:
        raise MissingStatusAttribute()
    # SKIP, FAIL, NOT RUN... all count as failed in Qase
    return ResultStatus.PASSED if text == "PASS" else ResultStatus.FAILED


def parse_timestamp(text: str, fmt: str, layout: re.Pattern, attribute: str) -> datetime:
    """
    Parse ``text`` with ``fmt`` plus an optional ".fraction" of up to nine
    digits. Digits past microseconds are truncated. ``layout`` pins every
    field to its zero-padded width, which strptime alone does not.
    """
    base, sep, fraction = text.partition(".")
    if not layout.fullmatch(base):
        raise TimeParseError(attribute, text)
    if sep and not FRACTION_RE.fullmatch(fraction):
        raise TimeParseError(attribute, text)
    try:
        parsed = datetime.strptime(base, fmt)
    except ValueError:
        raise TimeParseError(attribute, text) from None
    if fraction:
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed


def decode_start_time(status_el: ET.Element) -> Tuple[datetime, SchemaVersion]:
    start = status_el.get("start", "")
    if start:
        return (
            parse_timestamp(start, CURRENT_TIME_FORMAT, CURRENT_TIME_RE, "start"),
            SchemaVersion.CURRENT,
        )

    # No `start` means Robot Framework < 7, which writes starttime/endtime
    starttime = status_el.get("starttime", "")
    if not starttime:
        raise MissingStartTime()
    return (
        parse_timestamp(starttime, LEGACY_TIME_FORMAT, LEGACY_TIME_RE, "starttime"),
        SchemaVersion.LEGACY,
    )


def milliseconds(delta: timedelta) -> int:
    # Truncates toward zero, so -1.5ms is -1
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    ms = abs(micros) // 1000
    return ms if micros >= 0 else -ms


def decode_duration(
    status_el: ET.Element, start_time: datetime, version: SchemaVersion
) -> int:
    if version is SchemaVersion.CURRENT:
        elapsed = status_el.get("elapsed", "")
        if not elapsed:
            raise MissingElapsed()
        # Plain decimal or exponent notation only; no nan/inf, "_" or spaces
        if not ELAPSED_RE.fullmatch(elapsed):
            raise TimeParseError("elapsed", elapsed)
        try:
            ms = Decimal(elapsed) * 1000
        except ArithmeticError:
            raise TimeParseError("elapsed", elapsed) from None
        if ms.copy_abs() > MAX_INT64:
            raise TimeParseError("elapsed", elapsed)
        return int(ms)

    endtime = status_el.get("endtime", "")
    if not endtime:
        raise MissingEndTime()
    end_time = parse_timestamp(endtime, LEGACY_TIME_FORMAT, LEGACY_TIME_RE, "endtime")
    return milliseconds(end_time - start_time)


def normalize_status(test_el: ET.Element) -> Tuple[ResultStatus, datetime, int]:
    # Only the test's own <status>; keyword statuses sit deeper
    status_el = test_el.find("status")
    if status_el is None:
        raise MissingStatusElement()
    status = decode_status(status_el)
    start_time, version = decode_start_time(status_el)
    duration_ms = decode_duration(status_el, start_time, version)
    return status, start_time, duration_ms


# ---- tests ------------------------------------------------------------------


def iter_tests(
    element: ET.Element, suites: Tuple[str, ...] = ()
) -> Iterator[Tuple[ET.Element, Tuple[str, ...]]]:
    """
    Yield (test element, enclosing suite names) at any depth, in document order.
    Walks with an explicit stack so deeply nested keywords cannot exhaust the
    interpreter's recursion limit.
    """
    stack = [(child, suites) for child in reversed(element)]
    while stack:
        node, path = stack.pop()
        if node.tag == TEST_TAG:
            yield node, path
        elif node.tag == SUITE_TAG:
            path = path + (node.get("name", ""),)
        stack.extend((child, path) for child in reversed(node))


def parse_test_element(test_el: ET.Element, package: str = "") -> NormalizedTestResult:
    case_id = resolve_case_id(test_el)
    status, start_time, duration_ms = normalize_status(test_el)
    if duration_ms < 0:
        logger.warning(
            "Test case ID %d ends before it starts (duration %d ms)", case_id, duration_ms
        )
    logger.debug(
        "Test case ID: %d, Status: %s, Time: %s, TimeMs: %d",
        case_id,
        status.value,
        start_time.isoformat(),
        duration_ms,
    )
    return NormalizedTestResult(
        case_id=case_id,
        status=status,
        start_time=start_time,
        duration_ms=duration_ms,
        package=package,
    )


def describe(test_el: ET.Element) -> str:
    name = test_el.get("name") or "<unnamed>"
    test_id = test_el.get("id")
    return f"{name!r} ({test_id})" if test_id else repr(name)


class ParseSession:
    """
    One pass over a loaded report. Holds the tree and the results built so far;
    ``run`` can be called again and produces the same results.
    """

    def __init__(self, root: Optional[ET.Element]):
        self.root = root
        self.results: List[NormalizedTestResult] = []
        self.skipped: List[str] = []

    def run(self) -> Tuple[NormalizedTestResult, ...]:
        if self.root is None or self.root.tag != ROOT_TAG:
            tag = None if self.root is None else self.root.tag
            raise InvalidRootElement(tag, ROOT_TAG)

        self.results = []
        self.skipped = []
        for test_el, suites in iter_tests(self.root):
            package = ".".join(name for name in suites if name)
            try:
                result = parse_test_element(test_el, package)
            except ReportError as e:
                logger.warning("Error parsing test result %s: %s", describe(test_el), e)
                self.skipped.append(describe(test_el))
                continue
            self.results.append(result)
        return tuple(self.results)


def parse_output(root: Optional[ET.Element]) -> Tuple[NormalizedTestResult, ...]:
    return ParseSession(root).run()


def parse_output_file(path: Union[str, Path]) -> Tuple[NormalizedTestResult, ...]:
    return parse_output(load_document(path).getroot())
