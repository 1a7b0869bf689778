"""Data loading and saving utilities"""

import json
import logging
import math
import pandas as pd
from typing import Any, Dict, Optional, Union
from pathlib import Path

from ..exceptions import MalformedInputError
from ..models.table import TimeSeriesTable


logger = logging.getLogger(__name__)


def to_json_safe(value: Any) -> Any:
    """Replace NaN and infinite floats with None in nested dicts and lists"""
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


class DataLoader:
    """Load raw tables and save analysis outputs"""

    def __init__(self, data_dir: Union[str, Path] = '.'):
        self.data_dir = Path(data_dir)

    def load_frame(self, filename: Union[str, Path] = 'marketing_data.csv') -> pd.DataFrame:
        """Read a CSV file without validation"""
        filepath = self.data_dir / filename

        try:
            df = pd.read_csv(filepath)
        except FileNotFoundError as e:
            raise MalformedInputError(f"Input file not found: {filepath}") from e
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise MalformedInputError(f"Cannot parse {filepath}: {e}") from e

        logger.info(f"Loaded {len(df)} rows from {filepath}")
        return df

    def load_table(self, filename: Union[str, Path] = 'marketing_data.csv') -> TimeSeriesTable:
        """Read, validate and sort a raw marketing table"""
        return TimeSeriesTable.from_frame(self.load_frame(filename))

    def save_frame(self,
                   df: pd.DataFrame,
                   filename: Union[str, Path] = 'marketing_data.csv') -> Path:
        """Write a frame as CSV with ISO dates"""
        filepath = self.data_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(filepath, index=False, date_format='%Y-%m-%d')
        logger.info(f"Saved {len(df)} rows to {filepath}")
        return filepath

    def save_table(self,
                   table: TimeSeriesTable,
                   filename: Union[str, Path] = 'marketing_data_cleaned.csv') -> Path:
        """Write the enriched table"""
        return self.save_frame(table.to_frame(), filename)

    def save_summary(self,
                     summary: Dict[str, Any],
                     filename: Union[str, Path] = 'summary.json') -> Path:
        """Write a summary dict as JSON"""
        filepath = self.data_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(to_json_safe(summary), f, indent=2, default=str, allow_nan=False)
        logger.info(f"Summary saved to {filepath}")
        return filepath

    def save_results(self,
                     results: Dict[str, pd.DataFrame],
                     output_dir: Optional[Union[str, Path]] = None) -> None:
        """Save several frames as ``<name>.csv``"""
        if output_dir is None:
            output_dir = self.data_dir / 'results'
        else:
            output_dir = Path(output_dir)

        output_dir.mkdir(parents=True, exist_ok=True)

        for name, df in results.items():
            df.to_csv(output_dir / f'{name}.csv', index=False, date_format='%Y-%m-%d')
