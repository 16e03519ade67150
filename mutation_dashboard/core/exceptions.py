from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DashboardError(Exception):
    """Base exception for all mutation_dashboard errors"""
    pass


class ConfigError(DashboardError):
    """Invalid or inconsistent global.json"""
    pass


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


class ValidationError(DashboardError):
    """
    A single raw record failed normalization.

    Raised per record by the normalizer; batch normalization absorbs it and
    only reports counts and issues.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(f"{i.code}: {i.message}" for i in issues))


class IngestionErrorKind(str, Enum):
    NETWORK = "network"
    PARSE = "parse"
    EMPTY = "empty"


class IngestionError(DashboardError):
    """
    A whole source (API call, upload, generator request) could not produce
    a usable dataset. Recoverable: the caller keeps the previous data.
    """

    def __init__(self, kind: IngestionErrorKind, message: str):
        self.kind = IngestionErrorKind(kind)
        self.message = message
        super().__init__(f"{self.kind.value}: {message}")


class SelectionError(DashboardError, KeyError):
    """Requested record index is not present in the current dataset"""

    def __init__(self, index: object):
        self.index = index
        super().__init__(index)

    def __str__(self) -> str:
        return f"No record with index {self.index!r} in the current dataset"
