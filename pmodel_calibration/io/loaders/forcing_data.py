"""Forcing data module."""

import pandas as pd
from typing import Any, Dict, List, Optional, Sequence
from ..validation.validators import DataValidator, ValidationResult
from ...exceptions import DataValidationError


class ForcingData:
    """
    Container for P-model driver data of a set of sites.

    The driver table has one row per site with the columns 'sitename' and
    'forcing' (a DataFrame with a 'date' column, the forcing variables and
    the observed targets such as 'gpp'). Further per-site columns, e.g.
    'site_info' or 'params_siml', are carried along untouched.

    Args:
        data (pd.DataFrame): The driver table.
        metadata (Optional[Dict[str, Any]]): Optional contextual information
            (e.g. the upstream sampling stage that produced the file).

    Raises:
        DataValidationError: If 'sitename' or 'forcing' is missing.
    """

    REQUIRED_COLUMNS = ("sitename", "forcing")

    def __init__(self, data: pd.DataFrame, metadata: Optional[Dict[str, Any]] = None):
        missing = [col for col in self.REQUIRED_COLUMNS if col not in data.columns]
        if missing:
            raise DataValidationError(f"Driver table is missing columns {missing}")
        self.data = data.reset_index(drop=True)
        self.metadata = metadata or {}

    @classmethod
    def from_pickle(cls, filepath: str, **kwargs: Any) -> "ForcingData":
        """
        Load a driver table written with `pandas.to_pickle`.

        Args:
            filepath (str): Path to the pickle file.
            **kwargs (Any): Additional arguments passed to pd.read_pickle.

        Returns:
            ForcingData: A new instance with the loaded drivers.
        """
        data = pd.read_pickle(filepath, **kwargs)
        return cls(data, metadata={"source": str(filepath)})

    @property
    def sites(self) -> List[str]:
        return self.data["sitename"].tolist()

    def get_forcing(self, sitename: str) -> pd.DataFrame:
        """
        Forcing time series of one site.

        Raises:
            DataValidationError: If the site is unknown.
        """
        rows = self.data.loc[self.data["sitename"] == sitename, "forcing"]
        if rows.empty:
            raise DataValidationError(f"Site '{sitename}' not found")
        return rows.iloc[0]

    def get_site_info(self, sitename: str) -> Dict[str, Any]:
        """
        Site metadata (e.g. 'whc', 'lon', 'lat') as a dictionary.

        A one-row DataFrame is converted to a dictionary. Missing
        'site_info' yields an empty dictionary.
        """
        if "site_info" not in self.data.columns:
            return {}
        rows = self.data.loc[self.data["sitename"] == sitename, "site_info"]
        if rows.empty:
            raise DataValidationError(f"Site '{sitename}' not found")
        info = rows.iloc[0]
        if isinstance(info, pd.DataFrame):
            return info.iloc[0].to_dict() if len(info) else {}
        return dict(info)

    def validation_data(self, targets: Sequence[str] = ("gpp",)) -> pd.DataFrame:
        """
        Observations restricted to 'date' and the targets, one row per site.

        Args:
            targets (Sequence[str]): Observed variables to keep.

        Returns:
            pd.DataFrame: Columns 'sitename' and 'data'.

        Raises:
            DataValidationError: If a site lacks 'date' or a target.
        """
        columns = ["date"] + list(targets)
        rows = []
        for sitename, forcing in zip(self.data["sitename"], self.data["forcing"]):
            missing = [col for col in columns if col not in forcing.columns]
            if missing:
                raise DataValidationError(f"Forcing of site '{sitename}' is missing columns {missing}")
            rows.append({"sitename": sitename, "data": forcing[columns].copy()})
        return pd.DataFrame(rows, columns=["sitename", "data"])

    def subset(self, sites: Sequence[str]) -> "ForcingData":
        """
        Create a new ForcingData instance for a subset of sites.

        Args:
            sites (Sequence[str]): Site names to keep.

        Returns:
            ForcingData: A subset of the drivers.
        """
        unknown = set(sites) - set(self.sites)
        if unknown:
            raise DataValidationError(f"Unknown sites: {sorted(unknown)}")
        mask = self.data["sitename"].isin(list(sites))
        return ForcingData(self.data.loc[mask].copy(), metadata=self.metadata.copy())

    def validate(
        self,
        targets: Sequence[str] = ("gpp",),
        expected_ranges: Optional[Dict[str, tuple]] = None,
    ) -> ValidationResult:
        """
        Validate the forcing of all sites.

        Args:
            targets (Sequence[str]): Target columns that must be present.
            expected_ranges (Optional[Dict[str, tuple]]): Mapping of column names to
                (min, max) range tuples; defaults to DataValidator.DEFAULT_RANGES.

        Returns:
            ValidationResult: Combined result over all sites.
        """
        if expected_ranges is None:
            expected_ranges = DataValidator.DEFAULT_RANGES
        result = ValidationResult(is_valid=True, quality_score=1.0, statistics={"n_sites": len(self)})
        for sitename, forcing in zip(self.data["sitename"], self.data["forcing"]):
            site_result = DataValidator.validate(
                forcing, required_columns=["date"] + list(targets), expected_ranges=expected_ranges
            )
            result = result.merge(site_result, prefix=sitename)
        return result

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"ForcingData(n_sites={len(self.data)}, sites={self.sites[:5]}{'...' if len(self) > 5 else ''})"


def flatten_observations(obs: pd.DataFrame) -> pd.DataFrame:
    """
    Turn a nested observation table ('sitename', 'data') into long format.

    Args:
        obs (pd.DataFrame): Output of `ForcingData.validation_data`.

    Returns:
        pd.DataFrame: Columns 'sitename', 'date' and the observed targets.
    """
    frames = []
    for sitename, data in zip(obs["sitename"], obs["data"]):
        frame = data.copy()
        frame.insert(0, "sitename", sitename)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["sitename", "date"])
    flat = pd.concat(frames, ignore_index=True)
    flat["date"] = pd.to_datetime(flat["date"])
    return flat
