"""Input validation for raw marketing tables"""

import re
import pandas as pd
import numpy as np
from typing import Dict, List, Tuple

from ..exceptions import MalformedInputError
from .table import BASE_COLUMNS


class DataValidator:
    """Centralized input validation"""

    # Header spellings accepted for the base columns, compared after
    # lower-casing and removing spaces/underscores
    COLUMN_ALIASES = {
        'date': 'date',
        'day': 'date',
        'adspend': 'ad_spend',
        'spend': 'ad_spend',
        'visits': 'visits',
    }
    # Text that stands for a missing visits value
    MISSING_TOKENS = {'', 'nan', 'na', 'n/a', 'null', 'none'}
    MAX_REPORTED_ROWS = 10

    @classmethod
    def normalize_columns(cls, frame: pd.DataFrame) -> pd.DataFrame:
        """Rename recognised headers (e.g. ``AdSpend``) to canonical names"""
        rename = {}
        for col in frame.columns:
            key = re.sub(r'[\s_]+', '', str(col)).lower()
            target = cls.COLUMN_ALIASES.get(key)
            if target and target not in frame.columns and target not in rename.values():
                rename[col] = target
        return frame.rename(columns=rename)

    @classmethod
    def coerce_input(cls, frame: pd.DataFrame) -> Tuple[pd.DataFrame, List[str]]:
        """
        Coerce base columns to their semantic types

        Returns:
            (coerced frame, list of error messages)
        """
        df = cls.normalize_columns(frame.copy())
        errors = []

        missing_cols = [col for col in BASE_COLUMNS if col not in df.columns]
        if missing_cols:
            errors.append(f"Missing columns: {missing_cols}")
            return df, errors

        if len(df) == 0:
            errors.append("Input table has no rows")
            return df, errors

        # Dates
        parsed_dates = pd.to_datetime(df['date'], errors='coerce')
        bad_dates = parsed_dates.isna()
        if bad_dates.any():
            errors.append(f"Unparseable or missing dates at rows {cls._rows(bad_dates)}")
        else:
            df['date'] = parsed_dates.dt.normalize()

        # Ad spend must be present on every row
        spend = pd.to_numeric(df['ad_spend'], errors='coerce')
        bad_spend = spend.isna() | ~np.isfinite(spend.fillna(0.0).astype(float))
        if bad_spend.any():
            errors.append(f"Missing or non-numeric ad_spend at rows {cls._rows(bad_spend)}")
        df['ad_spend'] = spend.astype(float)

        # Visits may be missing but not garbage
        visits = pd.to_numeric(df['visits'], errors='coerce')
        blank = df['visits'].isna() | df['visits'].astype(str).str.strip().str.lower().isin(cls.MISSING_TOKENS)
        bad_visits = visits.isna() & ~blank
        if bad_visits.any():
            errors.append(f"Non-numeric visits at rows {cls._rows(bad_visits)}")
        df['visits'] = visits.astype(float)

        if not bad_dates.any():
            duplicated = df['date'].duplicated(keep=False)
            if duplicated.any():
                dup_dates = sorted({d.date().isoformat() for d in df.loc[duplicated, 'date']})
                errors.append(f"Duplicate dates: {dup_dates[:cls.MAX_REPORTED_ROWS]}")

        return df, errors

    @classmethod
    def validate_input(cls, frame: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Check a raw frame without raising"""
        _, errors = cls.coerce_input(frame)
        return len(errors) == 0, errors

    @classmethod
    def prepare_input(cls, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Validate, coerce and sort a raw frame

        Raises:
            MalformedInputError: describing every problem found
        """
        df, errors = cls.coerce_input(frame)
        if errors:
            raise MalformedInputError("; ".join(errors))

        return df.sort_values('date', kind='mergesort').reset_index(drop=True)

    @classmethod
    def generate_validation_report(cls, frame: pd.DataFrame) -> Dict[str, object]:
        """Summarize a raw frame before it enters the pipeline"""
        df, errors = cls.coerce_input(frame)
        report = {
            'total_rows': len(df),
            'is_valid': len(errors) == 0,
            'errors': errors,
        }
        if 'visits' in df.columns and len(df) > 0:
            report['missing_visits'] = int(df['visits'].isna().sum())
        if 'ad_spend' in df.columns and len(df) > 0:
            report['negative_ad_spend'] = int((df['ad_spend'] < 0).sum())
        if not errors:
            report['start_date'] = df['date'].min().date().isoformat()
            report['end_date'] = df['date'].max().date().isoformat()
        return report

    @classmethod
    def _rows(cls, mask: pd.Series) -> List[int]:
        return [int(i) for i in np.flatnonzero(mask.to_numpy())[:cls.MAX_REPORTED_ROWS]]
