"""
Liver Patient Classification - Preprocessing Pipeline Module
=============================================================
Scikit-learn preprocessing without data leakage.

This module implements:
- Train/test split with stratification for class balance
- ColumnTransformer with numerical and categorical branches
- RobustScaler (+ KNNImputer for nearest-neighbour models) for numerical features
- OneHotEncoder for the categorical sex column

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

from typing import List, Optional, Tuple

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.impute import KNNImputer
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, RobustScaler

from .data_ingestion import POSITIVE_CLASS, TARGET


# =============================================================================
# Configuration
# =============================================================================

RANDOM_SEED = 1

# Proportion of records assigned to the training set
TRAIN_PROPORTION = 0.7

CATEGORICAL_FEATURES = ['sex']

# Neighbours consulted when imputing a missing value
IMPUTER_NEIGHBOURS = 5


# =============================================================================
# Data Splitting
# =============================================================================

def split_data(
    df: pd.DataFrame,
    target: str = TARGET,
    train_size: float = TRAIN_PROPORTION,
    random_state: int = RANDOM_SEED,
    verbose: int = 1
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """
    Split data into train and test sets with stratification.

    Uses stratify=y so the Care/Control ratio in both splits matches the
    full dataset. The assignment is deterministic for a given seed, so the
    same split can be reused by every model in a report run.

    Args:
        df: Input DataFrame with features and target
        target: Name of target column (default: 'outcome')
        train_size: Proportion for training set (default: 0.7)
        random_state: Random seed for reproducibility
        verbose: Verbosity level (0=silent, 1=print split sizes)

    Returns:
        Tuple of (X_train, X_test, y_train, y_test)
    """
    if not 0 < train_size < 1:
        raise ValueError(f"train_size must be in (0, 1), got {train_size}")

    X = df.drop(columns=[target])
    y = df[target]

    X_train, X_test, y_train, y_test = train_test_split(
        X, y,
        train_size=train_size,
        random_state=random_state,
        stratify=y
    )

    if verbose:
        print(f"Data split complete:")
        print(f"  Training set: {len(X_train)} samples "
              f"({(y_train == POSITIVE_CLASS).mean()*100:.2f}% {POSITIVE_CLASS})")
        print(f"  Test set:     {len(X_test)} samples "
              f"({(y_test == POSITIVE_CLASS).mean()*100:.2f}% {POSITIVE_CLASS})")

    return X_train, X_test, y_train, y_test


def get_numerical_features(
    X: pd.DataFrame,
    categorical_features: List[str] = CATEGORICAL_FEATURES
) -> List[str]:
    """Numeric predictor columns of X, excluding the categorical ones."""
    numeric = X.select_dtypes(include='number').columns
    return [col for col in numeric if col not in categorical_features]


# =============================================================================
# Pipeline Construction
# =============================================================================

def create_numerical_pipeline(impute: bool = False) -> Pipeline:
    """
    Create the numerical feature preprocessing pipeline.

    Pipeline: RobustScaler [-> KNNImputer]

    Scaling runs first so that every feature contributes comparably to the
    distance used by the imputer. RobustScaler uses median/IQR, which keeps
    the heavily skewed enzyme and bilirubin values from dominating.

    Args:
        impute: Add a nearest-neighbour imputation step

    Returns:
        sklearn Pipeline for numerical feature preprocessing
    """
    steps = [('scaler', RobustScaler())]
    if impute:
        steps.append(('imputer', KNNImputer(
            n_neighbors=IMPUTER_NEIGHBOURS,
            weights='distance',
            metric='nan_euclidean'
        )))
    return Pipeline(steps=steps)


def create_categorical_pipeline() -> Pipeline:
    """
    Create the categorical feature preprocessing pipeline.

    Uses OneHotEncoder with:
    - handle_unknown='ignore': Safely handles unseen categories
    - drop='if_binary': A single indicator column for sex
    - sparse_output=False: Returns dense array for GaussianNB compatibility

    Returns:
        sklearn Pipeline for categorical feature preprocessing
    """
    return Pipeline(
        steps=[
            ('encoder', OneHotEncoder(
                handle_unknown='ignore',
                drop='if_binary',
                sparse_output=False
            ))
        ]
    )


def create_preprocessing_pipeline(
    numerical_features: List[str],
    categorical_features: Optional[List[str]] = None,
    impute: bool = False
) -> ColumnTransformer:
    """
    Create the complete preprocessing step with ColumnTransformer.

    Architecture:
    =============
    ┌─────────────────────────────────────────────────────────────┐
    │                    ColumnTransformer                        │
    │  ┌─────────────────────────┐  ┌─────────────────────────┐  │
    │  │   Numerical Branch      │  │   Categorical Branch    │  │
    │  │   age, bilirubin,       │  │   sex                   │  │
    │  │   enzymes, proteins     │  │         │               │  │
    │  │         │               │  │         ▼               │  │
    │  │         ▼               │  │   OneHotEncoder         │  │
    │  │   RobustScaler          │  │                         │  │
    │  │         │               │  │                         │  │
    │  │         ▼               │  │                         │  │
    │  │   KNNImputer (kNN only) │  │                         │  │
    │  └─────────────────────────┘  └─────────────────────────┘  │
    └─────────────────────────────────────────────────────────────┘

    The transformer is embedded in each model's Pipeline, so during grid
    search every fold learns its scaling and imputation from the training
    fold only.

    Args:
        numerical_features: List of numerical column names
        categorical_features: List of categorical column names
        impute: Add KNNImputer to the numerical branch

    Returns:
        ColumnTransformer with configured preprocessing pipelines
    """
    if categorical_features is None:
        categorical_features = CATEGORICAL_FEATURES

    transformers = [
        ('numerical', create_numerical_pipeline(impute=impute), numerical_features)
    ]
    if categorical_features:
        transformers.append(
            ('categorical', create_categorical_pipeline(), categorical_features)
        )

    return ColumnTransformer(
        transformers=transformers,
        remainder='drop',
        verbose_feature_names_out=True
    )
