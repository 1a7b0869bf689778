"""Unit tests for input validation"""

import pytest
import pandas as pd
import numpy as np

from marketing_analysis.exceptions import MalformedInputError
from marketing_analysis.models import DataValidator, TimeSeriesTable


class TestDataValidator:
    """Test raw input validation"""

    def test_valid_input(self, linear_frame):
        """Test that a clean frame passes"""
        is_valid, errors = DataValidator.validate_input(linear_frame)

        assert is_valid
        assert errors == []

    def test_original_headers_accepted(self):
        """Test Date/AdSpend/Visits headers are normalized"""
        df = pd.DataFrame({
            'Date': ['2024-01-02', '2024-01-01'],
            'AdSpend': [10.0, 20.0],
            'Visits': [100.0, np.nan]
        })
        prepared = DataValidator.prepare_input(df)

        assert list(prepared.columns) == ['date', 'ad_spend', 'visits']
        assert prepared['date'].iloc[0] == pd.Timestamp('2024-01-01')
        assert prepared['ad_spend'].iloc[0] == 20.0
        assert np.isnan(prepared['visits'].iloc[0])

    def test_missing_columns(self):
        """Test missing required columns"""
        df = pd.DataFrame({'date': ['2024-01-01'], 'visits': [1.0]})
        is_valid, errors = DataValidator.validate_input(df)

        assert not is_valid
        assert any('ad_spend' in e for e in errors)

        with pytest.raises(MalformedInputError, match="Missing columns"):
            TimeSeriesTable.from_frame(df)

    def test_unparseable_dates(self):
        """Test rejection of bad dates"""
        df = pd.DataFrame({
            'date': ['2024-01-01', 'not a date'],
            'ad_spend': [1.0, 2.0],
            'visits': [1.0, 2.0]
        })
        with pytest.raises(MalformedInputError, match="dates"):
            DataValidator.prepare_input(df)

    def test_missing_ad_spend(self):
        """Ad spend may not be missing"""
        df = pd.DataFrame({
            'date': ['2024-01-01', '2024-01-02'],
            'ad_spend': [1.0, None],
            'visits': [1.0, 2.0]
        })
        with pytest.raises(MalformedInputError, match="ad_spend"):
            DataValidator.prepare_input(df)

    def test_non_numeric_visits(self):
        """Missing visits are allowed, garbage is not"""
        df = pd.DataFrame({
            'date': ['2024-01-01', '2024-01-02', '2024-01-03'],
            'ad_spend': [1.0, 2.0, 3.0],
            'visits': ['10', 'abc', None]
        })
        is_valid, errors = DataValidator.validate_input(df)

        assert not is_valid
        assert errors == ["Non-numeric visits at rows [1]"]

    def test_missing_visits_as_text(self):
        """Blank and NaN text in a string column count as missing visits"""
        table = TimeSeriesTable.from_frame(pd.DataFrame({
            'Date': ['2024-01-01', '2024-01-02', '2024-01-03', '2024-01-04'],
            'AdSpend': ['-5', '10', '20', '30'],
            'Visits': ['30', '', 'NaN', ' null ']
        }))

        assert table.missing_visits_count() == 3
        assert table.visits.iloc[0] == 30.0
        assert table.ad_spend.iloc[0] == -5.0

    def test_duplicate_dates(self):
        """Test rejection of duplicated dates"""
        df = pd.DataFrame({
            'date': ['2024-01-01', '2024-01-01'],
            'ad_spend': [1.0, 2.0],
            'visits': [1.0, 2.0]
        })
        with pytest.raises(MalformedInputError, match="Duplicate dates"):
            DataValidator.prepare_input(df)

    def test_empty_input(self):
        df = pd.DataFrame({'date': [], 'ad_spend': [], 'visits': []})
        with pytest.raises(MalformedInputError, match="no rows"):
            DataValidator.prepare_input(df)

    def test_multiple_errors_reported(self):
        """All problems are listed in one message"""
        df = pd.DataFrame({
            'date': ['2024-01-01', 'bad'],
            'ad_spend': ['x', 2.0],
            'visits': [1.0, 2.0]
        })
        _, errors = DataValidator.validate_input(df)
        assert len(errors) == 2

    def test_validation_report(self, raw_marketing_frame):
        """Test validation report generation"""
        report = DataValidator.generate_validation_report(raw_marketing_frame)

        assert report['is_valid']
        assert report['total_rows'] == 91
        assert report['missing_visits'] == 8
        assert report['negative_ad_spend'] == 0
        assert report['start_date'] == '2024-01-01'
        assert report['end_date'] == '2024-03-31'
