"""
Liver Patient Classification - Model Training Module
=====================================================
Off-the-shelf classifiers tuned with the library's own grid search.

Each method is a lookup-table entry: display name, estimator factory and
hyperparameter grid. Training wraps the estimator in a full pipeline
(preprocessing + model) and tunes it with stratified K-fold grid search,
selecting by internal validation accuracy.

Methods:
- naive-bayes:          GaussianNB
- boosted-linear:       XGBoost with the linear booster (boosted GLM)
- bayesian-logistic:    L2-penalised logistic regression (Gaussian prior, MAP)
- k-nearest-neighbours: KNeighborsClassifier with KNN imputation
- random-forest:        RandomForestClassifier

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd
import xgboost as xgb
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline

from .data_ingestion import NEGATIVE_CLASS, POSITIVE_CLASS, TARGET
from .preprocessing_pipeline import (
    CATEGORICAL_FEATURES,
    RANDOM_SEED,
    create_preprocessing_pipeline,
    get_numerical_features,
)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_CV_FOLDS = 5

# Candidate neighbour counts searched for k-nearest-neighbours
KNN_CANDIDATES = [5, 7, 9]

RANDOM_FOREST_TREES = 500


# =============================================================================
# Method Lookup Table
# =============================================================================

@dataclass(frozen=True)
class ModelMethod:
    """One entry of the method lookup table."""
    name: str
    build_estimator: Callable[[int], Any]
    param_grid: Dict[str, List[Any]]
    impute: bool = False


def _naive_bayes(random_state: int) -> GaussianNB:
    return GaussianNB()


def _boosted_linear(random_state: int) -> xgb.XGBClassifier:
    return xgb.XGBClassifier(
        booster='gblinear',
        objective='binary:logistic',
        eval_metric='logloss',
        random_state=random_state,
        n_jobs=1,
        verbosity=0
    )


def _bayesian_logistic(random_state: int) -> LogisticRegression:
    # C is the variance of the Gaussian prior on the coefficients
    return LogisticRegression(max_iter=1000, random_state=random_state)


def _knn(random_state: int) -> KNeighborsClassifier:
    return KNeighborsClassifier()


def _random_forest(random_state: int) -> RandomForestClassifier:
    return RandomForestClassifier(
        n_estimators=RANDOM_FOREST_TREES,
        random_state=random_state,
        n_jobs=-1
    )


MODEL_METHODS: Dict[str, ModelMethod] = {
    'naive-bayes': ModelMethod(
        name='Naive Bayes',
        build_estimator=_naive_bayes,
        param_grid={'model__var_smoothing': [1e-9, 1e-6, 1e-3]}
    ),
    'boosted-linear': ModelMethod(
        name='Boosted Logistic Regression',
        build_estimator=_boosted_linear,
        param_grid={'model__n_estimators': [50, 100, 150]}
    ),
    'bayesian-logistic': ModelMethod(
        name='Bayesian Logistic Regression',
        build_estimator=_bayesian_logistic,
        param_grid={'model__C': [0.1, 1.0, 10.0]}
    ),
    'k-nearest-neighbours': ModelMethod(
        name='k-Nearest Neighbours',
        build_estimator=_knn,
        param_grid={'model__n_neighbors': KNN_CANDIDATES},
        impute=True
    ),
    'random-forest': ModelMethod(
        name='Random Forest',
        build_estimator=_random_forest,
        param_grid={'model__max_features': [0.25, 0.5, 1.0]}
    ),
}


def get_method(method: str) -> ModelMethod:
    """Look up a method by identifier."""
    try:
        return MODEL_METHODS[method]
    except KeyError:
        raise ValueError(
            f"Unknown model method '{method}'. "
            f"Expected one of: {', '.join(MODEL_METHODS)}"
        ) from None


# =============================================================================
# Fitted Model
# =============================================================================

@dataclass
class FittedModel:
    """A tuned pipeline bound to one method. Predicts outcome labels."""
    method: str
    name: str
    pipeline: Pipeline
    best_params: Dict[str, Any]
    cv_accuracy: float
    feature_names: List[str] = field(default_factory=list)

    def predict(self, X: pd.DataFrame) -> pd.Series:
        """Predict 'Care' / 'Control' for every row of X."""
        encoded = self.pipeline.predict(X[self.feature_names])
        return decode_labels(encoded, index=X.index)


def encode_labels(y: pd.Series) -> pd.Series:
    """Care -> 1, Control -> 0."""
    return (y == POSITIVE_CLASS).astype(int)


def decode_labels(encoded: np.ndarray, index=None) -> pd.Series:
    """1 -> Care, 0 -> Control."""
    labels = np.where(np.asarray(encoded) == 1, POSITIVE_CLASS, NEGATIVE_CLASS)
    return pd.Series(labels, index=index, name=TARGET)


# =============================================================================
# Training
# =============================================================================

def create_model_pipeline(
    method: str,
    X_train: pd.DataFrame,
    random_state: int = RANDOM_SEED
) -> Pipeline:
    """
    Create the complete pipeline: Preprocessing + classifier.

    Args:
        method: Method identifier from MODEL_METHODS
        X_train: Training predictors (used to pick numerical/categorical columns)
        random_state: Random seed

    Returns:
        Unfitted sklearn Pipeline
    """
    chosen = get_method(method)
    categorical = [col for col in CATEGORICAL_FEATURES if col in X_train.columns]
    preprocessor = create_preprocessing_pipeline(
        numerical_features=get_numerical_features(X_train),
        categorical_features=categorical,
        impute=chosen.impute
    )

    return Pipeline([
        ('preprocessor', preprocessor),
        ('model', chosen.build_estimator(random_state))
    ])


def train_model(
    method: str,
    X_train: pd.DataFrame,
    y_train: pd.Series,
    cv: int = DEFAULT_CV_FOLDS,
    random_state: int = RANDOM_SEED,
    verbose: int = 1
) -> FittedModel:
    """
    Fit one method on the training set with grid search.

    Stratified K-fold keeps the Care/Control ratio in every fold; the
    candidate with the best mean validation accuracy is refit on the full
    training set.

    Args:
        method: Method identifier from MODEL_METHODS
        X_train: Training predictors
        y_train: Training outcome labels
        cv: Number of cross-validation folds
        random_state: Random seed
        verbose: Verbosity level (0=silent, 1=summary)

    Returns:
        FittedModel

    Raises:
        ValueError: If the method is unknown
    """
    chosen = get_method(method)
    pipeline = create_model_pipeline(method, X_train, random_state)
    feature_names = X_train.columns.tolist()

    cv_strategy = StratifiedKFold(
        n_splits=cv,
        shuffle=True,
        random_state=random_state
    )

    search = GridSearchCV(
        estimator=pipeline,
        param_grid=chosen.param_grid,
        scoring='accuracy',
        cv=cv_strategy,
        n_jobs=-1,
        error_score='raise'
    )

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        search.fit(X_train[feature_names], encode_labels(y_train))

    best_params = {
        name.replace('model__', ''): value
        for name, value in search.best_params_.items()
    }

    if verbose:
        print(f"\n{chosen.name} ({method})")
        print(f"  Best CV accuracy: {search.best_score_:.4f}")
        for param, value in best_params.items():
            print(f"  {param}: {value}")

    return FittedModel(
        method=method,
        name=chosen.name,
        pipeline=search.best_estimator_,
        best_params=best_params,
        cv_accuracy=float(search.best_score_),
        feature_names=feature_names
    )
