"""
Liver Patient Classification - Data Ingestion Module
=====================================================
This module handles data loading, outcome recoding, schema validation, and
sanitization for the Indian Liver Patient dataset.

The raw file has 11 unnamed comma-separated columns. Rows with any missing
field are dropped and the final selector column is recoded from its raw
codes (1 = liver patient, 2 = non-patient) into a two-level outcome.

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

from io import StringIO
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
import requests
from pandera import Check, Column, DataFrameSchema
from pandera.errors import SchemaError, SchemaErrors


# =============================================================================
# Configuration
# =============================================================================

DATA_URL = (
    "https://archive.ics.uci.edu/ml/machine-learning-databases/00225/"
    "Indian%20Liver%20Patient%20Dataset%20(ILPD).csv"
)

# Seconds before a remote fetch is abandoned
REQUEST_TIMEOUT = 30

COLUMN_NAMES = [
    "age",
    "sex",
    "total_bilirubin",
    "direct_bilirubin",
    "alkaline_phosphatase",
    "alanine_aminotransferase",
    "aspartate_aminotransferase",
    "total_protein",
    "albumin",
    "albumin_globulin_ratio",
    "outcome",
]

TARGET = "outcome"
POSITIVE_CLASS = "Care"
NEGATIVE_CLASS = "Control"

# Raw selector codes -> outcome label
OUTCOME_CODES = {1: POSITIVE_CLASS, 2: NEGATIVE_CLASS}
OUTCOME_LEVELS = [POSITIVE_CLASS, NEGATIVE_CLASS]

VALID_SEX = ["Male", "Female"]


# =============================================================================
# Errors
# =============================================================================

class DataUnavailableError(OSError):
    """The dataset could not be fetched or read."""


class MalformedRecordError(ValueError):
    """A raw field holds a value outside its expected domain."""


# =============================================================================
# Schema Definition
# =============================================================================

def _clinical_column(description: str) -> Column:
    return Column(
        float,
        Check.greater_than_or_equal_to(0, error=f"{description} must be non-negative"),
        nullable=False,
        coerce=True,
        description=description,
    )


LIVER_DATA_SCHEMA = DataFrameSchema(
    columns={
        "age": Column(
            int,
            Check.greater_than(0, error="Age must be greater than 0"),
            nullable=False,
            coerce=True,
            description="Patient age in years"
        ),
        "sex": Column(
            str,
            Check.isin(VALID_SEX),
            nullable=False,
            description="Patient sex"
        ),
        "total_bilirubin": _clinical_column("Total bilirubin (mg/dL)"),
        "direct_bilirubin": _clinical_column("Direct bilirubin (mg/dL)"),
        "alkaline_phosphatase": _clinical_column("Alkaline phosphatase (IU/L)"),
        "alanine_aminotransferase": _clinical_column("Alanine aminotransferase (IU/L)"),
        "aspartate_aminotransferase": _clinical_column("Aspartate aminotransferase (IU/L)"),
        "total_protein": _clinical_column("Total protein (g/dL)"),
        "albumin": _clinical_column("Albumin (g/dL)"),
        "albumin_globulin_ratio": _clinical_column("Albumin/globulin ratio"),
        "outcome": Column(
            str,
            Check.isin(OUTCOME_LEVELS),
            nullable=False,
            description="Outcome label (Care = liver patient, Control = non-patient)"
        ),
    },
    strict=True,
    coerce=True,
)


# =============================================================================
# Data Loading Functions
# =============================================================================

def _is_remote(source: Union[str, Path]) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def _read_raw_table(source: Union[str, Path]) -> pd.DataFrame:
    """
    Read the raw headerless table from a URL or a local path.

    Raises:
        DataUnavailableError: If the resource cannot be fetched, read or is empty
        MalformedRecordError: If the content is not a parseable CSV
    """
    if _is_remote(source):
        try:
            response = requests.get(str(source), timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DataUnavailableError(
                f"Could not fetch liver data from {source}: {e}"
            ) from e
        buffer = StringIO(response.text)
    else:
        path = Path(source)
        if not path.exists():
            raise DataUnavailableError(f"Data file not found: {path}")
        buffer = path

    try:
        return pd.read_csv(
            buffer,
            header=None,
            na_values=["N/A", "NA", "?", ""],
            skipinitialspace=True
        )
    except pd.errors.EmptyDataError as e:
        raise DataUnavailableError(f"No data found at {source}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise MalformedRecordError(f"Could not parse {source}: {e}") from e
    except OSError as e:
        raise DataUnavailableError(f"Could not read {source}: {e}") from e


def recode_outcome(raw: pd.Series) -> pd.Series:
    """
    Recode raw selector codes into the two-level outcome.

    1 -> "Care", 2 -> "Control". Any other value is rejected.

    Args:
        raw: Series of raw selector codes

    Returns:
        Categorical Series with levels ["Care", "Control"]

    Raises:
        MalformedRecordError: If a value other than 1 or 2 is present
    """
    codes = pd.to_numeric(raw, errors="coerce")
    invalid_mask = ~codes.isin(list(OUTCOME_CODES))
    if invalid_mask.any():
        bad_values = raw[invalid_mask].unique().tolist()
        raise MalformedRecordError(
            f"Unexpected outcome code(s) {bad_values[:5]}: "
            f"expected one of {sorted(OUTCOME_CODES)}"
        )

    labels = codes.astype(int).map(OUTCOME_CODES)
    return pd.Series(
        pd.Categorical(labels, categories=OUTCOME_LEVELS),
        index=raw.index,
        name=raw.name
    )


def load_liver_data(
    source: Union[str, Path] = DATA_URL,
    validate: bool = True,
    verbose: int = 1
) -> pd.DataFrame:
    """
    Load, sanitize and optionally validate the liver patient dataset.

    This function performs the following operations:
    1. Fetches the headerless CSV from a URL or reads it from disk
    2. Assigns the 11 column names
    3. Drops rows with any missing field
    4. Recodes the outcome (1 -> Care, 2 -> Control)
    5. Validates data against the schema (if validate=True)

    Args:
        source: URL or path to the raw CSV (default: UCI repository)
        validate: Whether to validate against schema (default: True)
        verbose: Verbosity level (0=silent, 1=report dropped rows)

    Returns:
        pd.DataFrame: Patient records with a categorical 'outcome' column

    Raises:
        DataUnavailableError: If the resource is unreachable or empty
        MalformedRecordError: If a raw field holds an unexpected value

    Example:
        >>> df = load_liver_data()
        >>> df.shape
        (579, 11)
    """
    df = _read_raw_table(source)

    if df.shape[1] != len(COLUMN_NAMES):
        raise MalformedRecordError(
            f"Expected {len(COLUMN_NAMES)} columns, found {df.shape[1]}"
        )
    df.columns = COLUMN_NAMES

    original_rows = len(df)
    df = df.dropna(how="any").reset_index(drop=True)
    dropped_rows = original_rows - len(df)
    if dropped_rows and verbose:
        print(f"Dropped {dropped_rows} of {original_rows} rows with missing values")

    if df.empty:
        raise DataUnavailableError(f"No complete records found at {source}")

    df[TARGET] = recode_outcome(df[TARGET])

    if validate:
        df = validate_liver_data(df)

    return df


def validate_liver_data(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate liver data against the defined schema.

    The outcome is validated on its string labels and restored to a
    categorical column afterwards.

    Args:
        df: DataFrame to validate

    Returns:
        pd.DataFrame: Validated DataFrame with coerced types

    Raises:
        MalformedRecordError: If validation fails
    """
    candidate = df.copy()
    candidate[TARGET] = candidate[TARGET].astype(str)

    try:
        validated_df = LIVER_DATA_SCHEMA.validate(candidate, lazy=True)
    except (SchemaError, SchemaErrors) as e:
        raise MalformedRecordError(f"Liver data failed schema validation:\n{e}") from e

    validated_df[TARGET] = pd.Categorical(validated_df[TARGET], categories=OUTCOME_LEVELS)
    return validated_df


def get_data_summary(df: pd.DataFrame) -> dict:
    """
    Generate a summary of the loaded liver dataset.

    Args:
        df: Validated liver DataFrame

    Returns:
        dict: Summary statistics and data quality metrics
    """
    summary = {
        "shape": df.shape,
        "columns": df.columns.tolist(),
        "missing_values": df.isnull().sum().to_dict(),
        "outcome_distribution": df[TARGET].value_counts().to_dict(),
        "care_rate": float((df[TARGET] == POSITIVE_CLASS).mean()),
        "sex_distribution": df["sex"].value_counts().to_dict(),
        "age_stats": {
            "min": df["age"].min(),
            "max": df["age"].max(),
            "mean": df["age"].mean(),
            "median": df["age"].median()
        },
        "numeric_columns": df.select_dtypes(include=[np.number]).columns.tolist()
    }
    return summary


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import sys

    source = sys.argv[1] if len(sys.argv) > 1 else DATA_URL

    try:
        print(f"Loading liver data from: {source}")
        df = load_liver_data(source)
        print(f"\nData loaded successfully!")
        print(f"Shape: {df.shape}")

        summary = get_data_summary(df)
        print(f"\nData Summary:")
        print(f"  - Outcome: {summary['outcome_distribution']}")
        print(f"  - Sex: {summary['sex_distribution']}")
        print(f"  - Age range: {summary['age_stats']['min']} - {summary['age_stats']['max']}")

    except (DataUnavailableError, MalformedRecordError) as e:
        print(f"Error: {e}")
        sys.exit(1)
