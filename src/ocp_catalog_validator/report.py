"""Render validation results as text or json-alpha1."""

import json
from typing import Iterable, List, Literal

from pydantic import BaseModel, Field

from ocp_catalog_validator.contracts import ManifestResult

TEXT = "text"
JSON_ALPHA1 = "json-alpha1"
OUTPUT_FORMATS = (TEXT, JSON_ALPHA1)


class ResultOutput(BaseModel):
    type: Literal["error", "warning"]
    message: str


class ValidationReport(BaseModel):
    """json-alpha1 document. Subject to change while in alpha."""
    passed: bool
    outputs: List[ResultOutput] = Field(default_factory=list)


def build_report(results: Iterable[ManifestResult]) -> ValidationReport:
    """Flatten manifest results, errors first within each result."""
    outputs: List[ResultOutput] = []
    passed = True
    for result in results:
        for issue in result.errors:
            outputs.append(ResultOutput(type="error", message=issue.message()))
        for issue in result.warnings:
            outputs.append(ResultOutput(type="warning", message=issue.message()))
        if result.has_error():
            passed = False
    return ValidationReport(passed=passed, outputs=outputs)


def render_text(report: ValidationReport) -> str:
    lines = [f"{output.type.upper()}: {output.message}" for output in report.outputs]
    if report.passed:
        lines.append("All validation tests have completed successfully")
    else:
        error_count = sum(1 for output in report.outputs if output.type == "error")
        lines.append(f"Validation failed with {error_count} error(s)")
    return "\n".join(lines)


def render(results: Iterable[ManifestResult], output_format: str = TEXT) -> str:
    """
    Render results in one of OUTPUT_FORMATS.

    Raises:
        ValueError: If output_format is not supported
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"invalid value for output flag: {output_format}. One of: [{', '.join(OUTPUT_FORMATS)}]"
        )
    report = build_report(results)
    if output_format == JSON_ALPHA1:
        return json.dumps(report.model_dump(), indent=2)
    return render_text(report)


def dump_report_file(results: Iterable[ManifestResult]) -> str:
    """
    json-alpha1 document for --output-dir.

    Keys are sorted and separators compact so two runs over the same bundle
    write byte-identical files. Output order is kept as raised.
    """
    return json.dumps(
        build_report(results).model_dump(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ) + "\n"
