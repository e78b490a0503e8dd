"""
Unit Tests for Liver Data Ingestion
===================================
Tests for data loading, outcome recoding, validation, and sanitization.

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from liver_analysis import data_ingestion
from liver_analysis.data_ingestion import (
    COLUMN_NAMES,
    DataUnavailableError,
    MalformedRecordError,
    get_data_summary,
    load_liver_data,
    recode_outcome,
)

from conftest import write_raw_csv


# =============================================================================
# Fixtures
# =============================================================================

class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def raw_frame_with_missing(raw_frame):
    """Raw table with missing values in three distinct rows."""
    frame = raw_frame.copy().astype(object)
    frame.iloc[0, 9] = np.nan
    frame.iloc[5, 2] = np.nan
    frame.iloc[9, 1] = np.nan
    return frame


# =============================================================================
# Test Cases: Data Loading
# =============================================================================

class TestDataLoading:
    """Tests for the load_liver_data function."""

    def test_load_valid_csv(self, raw_csv):
        """Test loading a valid headerless CSV file."""
        df = load_liver_data(raw_csv)

        assert len(df) == 300
        assert df.columns.tolist() == COLUMN_NAMES

    def test_load_nonexistent_file(self):
        """Test that a missing file is reported as unavailable data."""
        with pytest.raises(DataUnavailableError):
            load_liver_data("nonexistent_file.csv")

    def test_empty_file_is_unavailable(self, tmp_path):
        """Test that an empty file is reported as unavailable data."""
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("")

        with pytest.raises(DataUnavailableError):
            load_liver_data(csv_path)

    def test_rows_with_missing_values_dropped(self, raw_frame_with_missing, tmp_path):
        """Test that every row with a missing field is removed."""
        csv_path = write_raw_csv(raw_frame_with_missing, tmp_path / "missing.csv")

        df = load_liver_data(csv_path)

        assert len(df) == 297
        assert not df.isnull().any().any()

    def test_wrong_column_count_raises_error(self, raw_frame, tmp_path):
        """Test that a file without 11 columns is rejected."""
        csv_path = write_raw_csv(raw_frame.iloc[:, :10], tmp_path / "short.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)

    def test_ragged_row_raises_error(self, raw_csv):
        """Test that a row with an extra field is a malformed record."""
        lines = raw_csv.read_text().splitlines()
        lines[2] += ",99"
        raw_csv.write_text("\n".join(lines) + "\n")

        with pytest.raises(MalformedRecordError):
            load_liver_data(raw_csv)

    def test_invalid_encoding_raises_error(self, raw_csv):
        """Test that bytes that are not UTF-8 are a malformed record."""
        raw_csv.write_bytes(raw_csv.read_bytes() + b"\xff\xfe,\xff\n")

        with pytest.raises(MalformedRecordError):
            load_liver_data(raw_csv)

    def test_directory_is_unavailable(self, tmp_path):
        """Test that a directory path is reported as unavailable data."""
        with pytest.raises(DataUnavailableError):
            load_liver_data(tmp_path)

    def test_quiet_load_prints_nothing(self, raw_frame_with_missing, tmp_path, capsys):
        """Test that verbose=0 suppresses the dropped-rows line."""
        csv_path = write_raw_csv(raw_frame_with_missing, tmp_path / "missing.csv")

        load_liver_data(csv_path, verbose=0)

        assert capsys.readouterr().out == ""

    def test_outcome_is_two_level_categorical(self, liver_df):
        """Test that the outcome holds only Care and Control."""
        assert isinstance(liver_df["outcome"].dtype, pd.CategoricalDtype)
        assert list(liver_df["outcome"].cat.categories) == ["Care", "Control"]
        assert set(liver_df["outcome"].unique()) <= {"Care", "Control"}

    def test_outcome_recoded_from_raw_codes(self, raw_frame, liver_df):
        """Test that raw code 1 maps to Care and 2 to Control row by row."""
        expected = raw_frame[10].map({1: "Care", 2: "Control"}).tolist()
        assert liver_df["outcome"].astype(str).tolist() == expected


# =============================================================================
# Test Cases: Remote Loading
# =============================================================================

class TestRemoteLoading:
    """Tests for fetching the dataset over HTTP."""

    def test_remote_csv_is_parsed(self, raw_frame, monkeypatch):
        """Test that a fetched payload is parsed like a local file."""
        payload = raw_frame.to_csv(header=False, index=False)
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(payload)

        monkeypatch.setattr(data_ingestion.requests, "get", fake_get)

        df = load_liver_data("https://example.org/ilpd.csv")

        assert len(df) == 300
        assert calls == [("https://example.org/ilpd.csv", data_ingestion.REQUEST_TIMEOUT)]

    def test_connection_failure_is_unavailable(self, monkeypatch):
        """Test that a network failure is reported as unavailable data."""
        def fake_get(url, timeout):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(data_ingestion.requests, "get", fake_get)

        with pytest.raises(DataUnavailableError) as exc_info:
            load_liver_data("https://example.org/ilpd.csv")

        assert "connection refused" in str(exc_info.value)

    def test_http_error_is_unavailable(self, monkeypatch):
        """Test that a non-2xx response is reported as unavailable data."""
        monkeypatch.setattr(
            data_ingestion.requests, "get",
            lambda url, timeout: FakeResponse("", status_code=404)
        )

        with pytest.raises(DataUnavailableError):
            load_liver_data("https://example.org/missing.csv")


# =============================================================================
# Test Cases: Outcome Recoding
# =============================================================================

class TestOutcomeRecoding:
    """Tests for recode_outcome."""

    def test_codes_map_to_labels(self):
        """Test the 1 -> Care, 2 -> Control mapping."""
        recoded = recode_outcome(pd.Series([1, 2, 2, 1]))
        assert recoded.astype(str).tolist() == ["Care", "Control", "Control", "Care"]

    def test_float_codes_accepted(self):
        """Test that codes read as floats (1.0, 2.0) are accepted."""
        recoded = recode_outcome(pd.Series([1.0, 2.0]))
        assert recoded.astype(str).tolist() == ["Care", "Control"]

    def test_unexpected_code_raises_error(self):
        """Test that a code other than 1 or 2 is rejected."""
        with pytest.raises(MalformedRecordError) as exc_info:
            recode_outcome(pd.Series([1, 2, 3]))

        assert "3" in str(exc_info.value)

    def test_unexpected_code_in_file_raises_error(self, raw_frame, tmp_path):
        """Test that an unexpected outcome code aborts loading."""
        frame = raw_frame.copy()
        frame.iloc[4, 10] = 0
        csv_path = write_raw_csv(frame, tmp_path / "bad_outcome.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)


# =============================================================================
# Test Cases: Schema Validation
# =============================================================================

class TestSchemaValidation:
    """Tests for schema validation of loaded records."""

    def test_negative_bilirubin_raises_error(self, raw_frame, tmp_path):
        """Test that a negative clinical value is rejected."""
        frame = raw_frame.copy()
        frame.iloc[0, 2] = -1.0
        csv_path = write_raw_csv(frame, tmp_path / "negative.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)

    def test_invalid_sex_raises_error(self, raw_frame, tmp_path):
        """Test that sex outside Male/Female is rejected."""
        frame = raw_frame.copy()
        frame.iloc[3, 1] = "Unknown"
        csv_path = write_raw_csv(frame, tmp_path / "bad_sex.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)

    def test_non_numeric_value_raises_error(self, raw_frame, tmp_path):
        """Test that text in a clinical column is rejected."""
        frame = raw_frame.copy().astype(object)
        frame.iloc[7, 4] = "high"
        csv_path = write_raw_csv(frame, tmp_path / "text_value.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)

    def test_age_exactly_zero_raises_error(self, raw_frame, tmp_path):
        """Test that age = 0 raises an error (must be > 0)."""
        frame = raw_frame.copy()
        frame.iloc[0, 0] = 0
        csv_path = write_raw_csv(frame, tmp_path / "zero_age.csv")

        with pytest.raises(MalformedRecordError):
            load_liver_data(csv_path)

    def test_validation_can_be_skipped(self, raw_frame, tmp_path):
        """Test that validate=False returns records without schema checks."""
        frame = raw_frame.copy()
        frame.iloc[0, 2] = -1.0
        csv_path = write_raw_csv(frame, tmp_path / "negative.csv")

        df = load_liver_data(csv_path, validate=False)
        assert df["total_bilirubin"].iloc[0] == -1.0


# =============================================================================
# Test Cases: Data Summary
# =============================================================================

class TestDataSummary:
    """Tests for the get_data_summary function."""

    def test_summary_contains_required_keys(self, liver_df):
        """Test that summary contains all required information."""
        summary = get_data_summary(liver_df)

        required_keys = [
            "shape", "columns", "missing_values", "outcome_distribution",
            "care_rate", "sex_distribution", "age_stats", "numeric_columns"
        ]
        for key in required_keys:
            assert key in summary, f"Missing key: {key}"

    def test_summary_counts(self, raw_frame, liver_df):
        """Test that outcome counts match the raw codes."""
        summary = get_data_summary(liver_df)

        assert summary["outcome_distribution"]["Care"] == (raw_frame[10] == 1).sum()
        assert summary["outcome_distribution"]["Control"] == (raw_frame[10] == 2).sum()
        assert "sex" not in summary["numeric_columns"]


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
