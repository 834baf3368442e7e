import pytest
import pandas as pd
import numpy as np
from pmodel_calibration.io.validation.validators import DataValidator, ValidationResult


class TestDataValidator:
    def test_validate(self):
        df = pd.DataFrame({
            "gpp": [2.0, 3.1, np.nan, 4.2],
            "date": pd.date_range("2024-01-01", periods=4, freq="D")
        })
        res = DataValidator.validate(df, required_columns=["date", "gpp"])
        assert res.is_valid
        assert res.missing_data["gpp"] == 25.0
        assert res.statistics["n_rows"] == 4

    def test_missing_required_column(self):
        df = pd.DataFrame({"date": pd.date_range("2024-01-01", periods=2, freq="D"), "temp": [1.0, 2.0]})
        res = DataValidator.validate(df, required_columns=["date", "gpp"])
        assert not res.is_valid
        assert any("gpp" in issue for issue in res.issues)

    def test_empty(self):
        res = DataValidator.validate(pd.DataFrame({"date": [], "gpp": []}))
        assert not res.is_valid
        assert res.quality_score == 0.0

    def test_all_missing_column(self):
        df = pd.DataFrame({"date": pd.date_range("2024-01-01", periods=3, freq="D"), "gpp": [np.nan] * 3})
        res = DataValidator.validate(df)
        assert not res.is_valid
        assert "Column 'gpp' has no data" in res.issues

    def test_sparse_column_warns(self):
        df = pd.DataFrame({"date": pd.date_range("2024-01-01", periods=4, freq="D"), "gpp": [1.0, np.nan, np.nan, 2.0]})
        res = DataValidator.validate(df)
        assert res.is_valid
        assert any("50.0% missing" in w for w in res.warnings)

    def test_out_of_range(self):
        df = pd.DataFrame({"date": pd.date_range("2024-01-01", periods=2, freq="D"), "fapar": [0.5, 1.7]})
        res = DataValidator.validate(df, expected_ranges=DataValidator.DEFAULT_RANGES)
        assert res.is_valid
        assert any("fapar" in w for w in res.warnings)
        assert res.quality_score < 1.0

    def test_duplicate_dates(self):
        df = pd.DataFrame({"date": ["2024-01-01", "2024-01-01"], "gpp": [1.0, 2.0]})
        res = DataValidator.validate(df)
        assert not res.is_valid
        assert "Found 1 duplicate dates" in res.issues


class TestValidationResult:
    def test_merge_prefixes_site(self):
        a = ValidationResult(is_valid=True, quality_score=1.0)
        b = ValidationResult(is_valid=False, quality_score=0.4, issues=["No rows"], missing_data={"gpp": 10.0})
        merged = a.merge(b, prefix="CH-Dav")
        assert not merged.is_valid
        assert merged.quality_score == 0.4
        assert merged.issues == ["CH-Dav: No rows"]
        assert merged.missing_data == {"CH-Dav/gpp": 10.0}

    def test_print_report(self, capsys):
        ValidationResult(is_valid=False, quality_score=0.5, issues=["No rows"]).print_report()
        out = capsys.readouterr().out
        assert "Invalid" in out
        assert "No rows" in out
