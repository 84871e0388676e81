"""
Record quality checks for raw store exports.

The normalizer silently drops records it cannot use. These checks explain
how many records are affected and why, so the export can be fixed at the
source.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

import pandas as pd

from .parsers import DateParser


@dataclass
class DataQualityIssue:
    """A single quality issue found in one column."""

    column: str
    issue_type: str  # "missing", "invalid_value", "outlier", "unparseable_date"
    severity: str  # "critical", "warning", "info"
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """Quality summary for a single export."""

    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "critical"]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "critical": len(self.critical_issues),
            "warnings": len([i for i in self.issues if i.severity == "warning"]),
            "info": len([i for i in self.issues if i.severity == "info"]),
        }


Check = Callable[[pd.DataFrame], list[DataQualityIssue]]


class DataQualityChecker:
    """
    Runs a configurable list of checks over an export.

    Usage:
        checker = DataQualityChecker("Transactions")
        checker.check_required("product_id").check_unparseable_dates("created_at")
        report = checker.run(df)
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self._checks: list[Check] = []

    def add_check(self, check_fn: Check) -> "DataQualityChecker":
        """Add a custom check function. Returns self for chaining."""
        self._checks.append(check_fn)
        return self

    def check_required(self, column: str, severity: str = "critical") -> "DataQualityChecker":
        """Flag rows where a required column is empty or absent."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                missing = len(df)
            else:
                values = df[column]
                missing = int((values.isna() | (values.astype(str).str.strip() == "")).sum())
            if missing == 0:
                return []
            pct = (missing / len(df)) * 100
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="missing",
                    severity=severity,
                    count=missing,
                    percentage=pct,
                    description=f"{missing:,} records without {column} ({pct:.1f}%)",
                )
            ]

        return self.add_check(check)

    def check_invalid_values(
        self, column: str, valid_values: set[str], severity: str = "warning"
    ) -> "DataQualityChecker":
        """Flag values outside an allowed set (case-insensitive)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []
            values = df[column].dropna()
            allowed = {str(v).strip().lower() for v in valid_values}
            invalid_mask = ~values.astype(str).str.strip().str.lower().isin(allowed)
            invalid = int(invalid_mask.sum())
            if invalid == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="invalid_value",
                    severity=severity,
                    count=invalid,
                    percentage=(invalid / len(df)) * 100,
                    sample_values=values[invalid_mask].head(5).tolist(),
                    description=f"{invalid:,} unexpected values",
                )
            ]

        return self.add_check(check)

    def check_outliers(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Flag numeric values outside [min_val, max_val]."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []
            values = pd.to_numeric(df[column], errors="coerce")
            outlier_mask = pd.Series(False, index=df.index)
            if min_val is not None:
                outlier_mask |= values < min_val
            if max_val is not None:
                outlier_mask |= values > max_val

            outliers = int(outlier_mask.sum())
            if outliers == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="outlier",
                    severity=severity,
                    count=outliers,
                    percentage=(outliers / len(df)) * 100,
                    sample_values=df.loc[outlier_mask, column].head(5).tolist(),
                    description=f"{outliers:,} values outside expected range",
                )
            ]

        return self.add_check(check)

    def check_unparseable_dates(
        self, column: str, parser: DateParser | None = None, severity: str = "warning"
    ) -> "DataQualityChecker":
        """Flag present timestamps that no parsing strategy accepts."""
        parser = parser or DateParser()

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []
            parsed = parser.parse_series(df[column])
            present = df[column].notna() & (df[column].astype(str).str.strip() != "")
            unparsed = present & parsed.isna()
            count = int(unparsed.sum())
            if count == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="unparseable_date",
                    severity=severity,
                    count=count,
                    percentage=(count / len(df)) * 100,
                    sample_values=df.loc[unparsed, column].head(5).tolist(),
                    description=f"{count:,} values couldn't be parsed",
                )
            ]

        return self.add_check(check)

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        """Run all checks and return a quality report."""
        issues = []
        if len(df) > 0:
            for check_fn in self._checks:
                issues.extend(check_fn(df))

        return DataQualityReport(source_name=self.source_name, total_rows=len(df), issues=issues)
