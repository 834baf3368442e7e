import pandas as pd
import numpy as np
from typing import Dict, List, Optional, Tuple, Any
from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """
    Result from data validation.

    Attributes:
        is_valid: Overall validation status
        quality_score: Overall quality score (0-1)
        issues: List of identified issues
        warnings: List of warnings
        statistics: Dictionary of data statistics
        missing_data: Dictionary of missing data percentages per column
    """

    is_valid: bool
    quality_score: float
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    statistics: Dict[str, Any] = field(default_factory=dict)
    missing_data: Dict[str, float] = field(default_factory=dict)

    def merge(self, other: "ValidationResult", prefix: str = "") -> "ValidationResult":
        """Combine two results, e.g. across sites."""
        label = f"{prefix}: " if prefix else ""
        missing = dict(self.missing_data)
        missing.update({f"{prefix}/{col}" if prefix else col: pct for col, pct in other.missing_data.items()})
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            quality_score=min(self.quality_score, other.quality_score),
            issues=self.issues + [label + issue for issue in other.issues],
            warnings=self.warnings + [label + warning for warning in other.warnings],
            statistics=self.statistics,
            missing_data=missing,
        )

    def print_report(self) -> None:
        """Print validation report."""
        print("=" * 70)
        print("Forcing Data Validation Report")
        print("=" * 70)
        print(f"Status: {'Valid' if self.is_valid else 'Invalid'}")
        print(f"Quality Score: {self.quality_score:.2f}")

        if self.issues:
            print(f"\nIssues ({len(self.issues)}):")
            for issue in self.issues:
                print(f"  - {issue}")

        if self.warnings:
            print(f"\nWarnings ({len(self.warnings)}):")
            for warning in self.warnings:
                print(f"  - {warning}")

        if self.missing_data:
            print("\nMissing Data:")
            for col, pct in self.missing_data.items():
                if pct > 0:
                    print(f"  {col}: {pct:.1f}%")

        print("=" * 70)


class DataValidator:
    """
    Validator for per-site forcing and observation time series.

    Checks data quality, identifies issues, and provides statistics.
    """

    # Plausible ranges of the usual FLUXNET-derived forcing variables
    DEFAULT_RANGES: Dict[str, Tuple[float, float]] = {
        "gpp": (-5.0, 50.0),
        "temp": (-60.0, 60.0),
        "vpd": (0.0, 1e4),
        "ppfd": (0.0, 1e-2),
        "fapar": (0.0, 1.0),
        "co2": (100.0, 1000.0),
    }

    @staticmethod
    def validate(
        data: pd.DataFrame,
        required_columns: Optional[List[str]] = None,
        expected_ranges: Optional[Dict[str, Tuple[float, float]]] = None,
    ) -> ValidationResult:
        """
        Validate a single site's time series.

        Args:
            data: DataFrame to validate
            required_columns: List of required column names
            expected_ranges: Dictionary mapping columns to (min, max) tuples

        Returns:
            ValidationResult object
        """
        issues = []
        warnings_list = []

        if required_columns:
            missing_cols = set(required_columns) - set(data.columns)
            if missing_cols:
                issues.append(f"Missing required columns: {sorted(missing_cols)}")

        if len(data) == 0:
            issues.append("No rows")
            return ValidationResult(is_valid=False, quality_score=0.0, issues=issues, warnings=warnings_list)

        missing_data = {}
        for col in data.columns:
            pct_missing = (data[col].isna().sum() / len(data)) * 100
            missing_data[col] = pct_missing

            if pct_missing == 100:
                issues.append(f"Column '{col}' has no data")
            elif pct_missing > 30:
                warnings_list.append(f"Column '{col}' has {pct_missing:.1f}% missing data")

        if expected_ranges:
            for col, (min_val, max_val) in expected_ranges.items():
                if col in data.columns:
                    values = data[col].dropna()
                    if len(values) > 0:
                        actual_min = values.min()
                        actual_max = values.max()

                        if actual_min < min_val or actual_max > max_val:
                            warnings_list.append(
                                f"Column '{col}' has values outside expected range "
                                f"[{min_val}, {max_val}]: actual [{actual_min:.4g}, {actual_max:.4g}]"
                            )

        if "date" in data.columns:
            duplicates = data["date"].duplicated().sum()
            if duplicates > 0:
                issues.append(f"Found {duplicates} duplicate dates")

        statistics = {
            "n_rows": len(data),
            "n_columns": len(data.columns),
            "total_missing": int(data.isna().sum().sum()),
            "pct_missing": (data.isna().sum().sum() / (len(data) * max(1, len(data.columns)))) * 100,
        }

        quality_score = DataValidator._calculate_quality_score(len(issues), len(warnings_list), statistics)

        return ValidationResult(
            is_valid=len(issues) == 0,
            quality_score=quality_score,
            issues=issues,
            warnings=warnings_list,
            statistics=statistics,
            missing_data=missing_data,
        )

    @staticmethod
    def _calculate_quality_score(n_issues: int, n_warnings: int, statistics: Dict[str, Any]) -> float:
        """Calculate overall data quality score (0-1)."""
        score = 1.0
        score -= min(0.5, n_issues * 0.1)
        score -= min(0.3, n_warnings * 0.05)
        score -= min(0.2, statistics["pct_missing"] / 100 * 0.5)
        return max(0.0, score)
