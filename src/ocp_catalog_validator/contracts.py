"""Public result models for ocp_catalog_validator package."""

from typing import List

from pydantic import BaseModel, Field

from ocp_catalog_validator.codes import ErrorType, Level


class ManifestIssue(BaseModel):
    """A single finding (error or warning) about a bundle."""
    type: ErrorType
    level: Level
    field: str = ""
    bad_value: str = ""  # Bundle or CSV name for bundle-scoped findings
    detail: str

    def message(self) -> str:
        """Rendered finding without the level prefix."""
        if self.field:
            return f"Field {self.field}, Value {self.bad_value}: {self.detail}"
        return f"Value {self.bad_value}: {self.detail}"

    def __str__(self) -> str:
        return f"{self.level.value}: {self.message()}"


def invalid_bundle(detail: str, value: str = "", level: Level = Level.ERROR) -> ManifestIssue:
    return ManifestIssue(type=ErrorType.INVALID_BUNDLE, level=level, bad_value=value, detail=detail)


def invalid_csv(detail: str, csv_name: str, level: Level = Level.ERROR) -> ManifestIssue:
    """CSV-scoped finding; the CSV name prefixes the detail."""
    return ManifestIssue(type=ErrorType.INVALID_CSV, level=level, detail=f"({csv_name}) {detail}")


def failed_validation(detail: str, value: str, level: Level = Level.WARNING) -> ManifestIssue:
    return ManifestIssue(type=ErrorType.FAILED_VALIDATION, level=level, bad_value=value, detail=detail)


class ManifestResult(BaseModel):
    """Findings for one bundle. Errors block publishing, warnings don't."""
    name: str = ""
    errors: List[ManifestIssue] = Field(default_factory=list)
    warnings: List[ManifestIssue] = Field(default_factory=list)

    def add(self, *issues: ManifestIssue) -> None:
        for issue in issues:
            if issue.level == Level.ERROR:
                self.errors.append(issue)
            else:
                self.warnings.append(issue)

    def has_error(self) -> bool:
        return len(self.errors) > 0

    def has_warn(self) -> bool:
        return len(self.warnings) > 0
