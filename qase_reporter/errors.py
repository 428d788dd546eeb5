# qase_reporter/errors.py
from __future__ import annotations

from typing import Optional


class ReportError(Exception):
    """Base class for everything that can go wrong reading a report."""


# ---- document structure -----------------------------------------------------


class StructuralError(ReportError):
    pass


class InvalidRootElement(StructuralError):
    def __init__(self, tag: Optional[str], expected: str):
        super().__init__(f"cannot find {expected} root node (found {tag!r})")
        self.tag = tag
        self.expected = expected


class MissingStatusElement(StructuralError):
    def __init__(self):
        super().__init__("cannot find status element")


# ---- Qase case id -------------------------------------------------------------


class IdentifierError(ReportError):
    pass


class NoTagsFound(IdentifierError):
    def __init__(self):
        super().__init__("cannot find tag element")


class IdentifierNotFound(IdentifierError):
    def __init__(self, tags):
        super().__init__(f"cannot find Qase ID in tags {list(tags)!r}")
        self.tags = list(tags)


class IdentifierOutOfRange(IdentifierError):
    def __init__(self, digits: str):
        super().__init__(f"Qase ID Q-{digits} does not fit in 64 bits")
        self.digits = digits


# ---- status attributes ------------------------------------------------------


class AttributeMissing(ReportError):
    def __init__(self, attribute: str):
        super().__init__(f"cannot find {attribute} attribute")
        self.attribute = attribute


class MissingStatusAttribute(AttributeMissing):
    def __init__(self):
        super().__init__("status")


class MissingStartTime(AttributeMissing):
    def __init__(self):
        super().__init__("starttime")


class MissingElapsed(AttributeMissing):
    def __init__(self):
        super().__init__("elapsed")


class MissingEndTime(AttributeMissing):
    def __init__(self):
        super().__init__("endtime")


class TimeParseError(ReportError):
    def __init__(self, attribute: str, text: str):
        super().__init__(f"cannot parse {attribute} value {text!r}")
        self.attribute = attribute
        self.text = text


# ---- orchestration ----------------------------------------------------------


class ConfigError(Exception):
    pass


class QaseApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        detail = message
        if status_code is not None:
            detail = f"{detail}, status code: {status_code}"
        if body:
            detail = f"{detail} {body}"
        super().__init__(detail)
        self.status_code = status_code
        self.body = body
