"""Report Robot Framework results to Qase TestOps."""

from .models import NormalizedTestResult, ResultStatus, SchemaVersion
from .parse_output import parse_output, parse_output_file

__all__ = [
    "NormalizedTestResult",
    "ResultStatus",
    "SchemaVersion",
    "parse_output",
    "parse_output_file",
]
