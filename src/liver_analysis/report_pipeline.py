"""
Report Pipeline Orchestrator
============================

This module runs the liver patient classification report end to end:

1. Data Loading & Validation
2. Exploration (distributions, correlations, group comparisons)
3. Stratified Train/Test Split
4. Correlation-based Feature Reduction
5. Training and Evaluation of every model on the same split
6. Model Comparison Table

Usage:
    from liver_analysis.report_pipeline import run_report
    results = run_report()

Author: Healthcare AI Team
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .data_ingestion import DATA_URL, POSITIVE_CLASS, TARGET, load_liver_data
from .eda_report import CORRELATION_CUTOFF, run_exploration
from .feature_selection import reduce_features
from .model_evaluation import ASSUMED_PREVALENCE, ResultsTable, evaluate_model
from .model_training import DEFAULT_CV_FOLDS, MODEL_METHODS, get_method, train_model
from .preprocessing_pipeline import RANDOM_SEED, TRAIN_PROPORTION, split_data


def _step(title: str, verbose: int) -> None:
    if verbose:
        print("\n" + "─" * 70)
        print(title)
        print("─" * 70)


def run_report(
    data_source: Optional[Union[str, Path]] = None,
    prevalence: Optional[float] = ASSUMED_PREVALENCE,
    train_size: float = TRAIN_PROPORTION,
    cutoff: float = CORRELATION_CUTOFF,
    methods: Optional[Sequence[str]] = None,
    cv: int = DEFAULT_CV_FOLDS,
    random_state: int = RANDOM_SEED,
    output_dir: Optional[Union[str, Path]] = None,
    explore: bool = True,
    verbose: int = 1
) -> Dict[str, Any]:
    """
    Execute the complete classification report.

    Pipeline Architecture:
    ======================

    ┌─────────────────────────────────────────────────────────────────┐
    │                    REPORT PIPELINE                              │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌──────────────┐    ┌──────────────┐    ┌──────────────┐      │
    │  │ Data Loading │ -> │ Exploration  │ -> │ Splitting    │      │
    │  │ (Pandera)    │    │ (SciPy)      │    │ (Stratified) │      │
    │  └──────────────┘    └──────────────┘    └──────────────┘      │
    │                                               │                 │
    │                                               ▼                 │
    │  ┌──────────────┐    ┌──────────────┐    ┌──────────────┐      │
    │  │ Comparison   │ <- │ Train + Eval │ <- │ Feature      │      │
    │  │ Table        │    │ (per model)  │    │ Reduction    │      │
    │  └──────────────┘    └──────────────┘    └──────────────┘      │
    └─────────────────────────────────────────────────────────────────┘

    Args:
        data_source: URL or path of the raw CSV. If None, uses the UCI copy.
        prevalence: Assumed disease prevalence for PPV/NPV. None uses the
            test set's own Care proportion.
        train_size: Proportion of records used for training.
        cutoff: Absolute correlation above which predictors are redundant.
        methods: Method identifiers to run (default: all five).
        cv: Number of cross-validation folds for tuning.
        random_state: Random seed for the split and the models.
        output_dir: If given, comparison CSV and metadata JSON are written here.
        explore: Run the exploratory analysis step.
        verbose: Verbosity level (0=silent, 1=progress).

    Returns:
        Dict containing:
            - 'results': ResultsTable with one row per model
            - 'models': method id -> FittedModel
            - 'dropped_features': Columns removed by feature reduction
            - 'data_info': Sample counts and Care rate
            - 'exploration': Exploration results (None if skipped)

    Raises:
        DataUnavailableError: If the data cannot be fetched
        MalformedRecordError: If the data contains unexpected values
        ValueError: If a method identifier is unknown
    """
    if data_source is None:
        data_source = DATA_URL
    if methods is None:
        methods = list(MODEL_METHODS)
    for method in methods:
        get_method(method)

    start_time = datetime.now()

    if verbose:
        print("=" * 70)
        print("LIVER PATIENT CLASSIFICATION - MODEL COMPARISON REPORT")
        print("=" * 70)
        print(f"Started at: {start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"Data source: {data_source}")
        print("=" * 70)

    results: Dict[str, Any] = {
        'timestamp': start_time.isoformat(),
        'config': {
            'data_source': str(data_source),
            'prevalence': prevalence,
            'train_size': train_size,
            'cutoff': cutoff,
            'methods': list(methods),
            'cv': cv,
            'random_state': random_state
        }
    }

    # =========================================================================
    # Step 1: Load and Validate Data
    # =========================================================================
    _step("STEP 1: DATA LOADING & VALIDATION", verbose)

    df = load_liver_data(data_source, verbose=verbose)
    care_rate = float((df[TARGET] == POSITIVE_CLASS).mean())

    if verbose:
        print(f"\n✓ Loaded {len(df):,} complete records with {len(df.columns)} columns")
        print(f"✓ {POSITIVE_CLASS} rate: {care_rate:.2%}")

    results['data_info'] = {
        'n_samples': len(df),
        'n_columns': len(df.columns),
        'care_rate': care_rate
    }

    # =========================================================================
    # Step 2: Exploration
    # =========================================================================
    results['exploration'] = None
    if explore:
        _step("STEP 2: EXPLORATION", verbose)
        results['exploration'] = run_exploration(df, threshold=cutoff, verbose=verbose)

    # =========================================================================
    # Step 3: Split
    # =========================================================================
    _step("STEP 3: STRATIFIED TRAIN/TEST SPLIT", verbose)

    X_train, X_test, y_train, y_test = split_data(
        df, train_size=train_size, random_state=random_state, verbose=verbose
    )
    results['data_info']['n_train'] = len(X_train)
    results['data_info']['n_test'] = len(X_test)

    # =========================================================================
    # Step 4: Feature Reduction
    # =========================================================================
    _step("STEP 4: FEATURE REDUCTION", verbose)

    X_train, X_test, dropped = reduce_features(
        X_train, X_test, cutoff=cutoff, verbose=verbose
    )
    results['dropped_features'] = dropped
    results['features'] = X_train.columns.tolist()

    # =========================================================================
    # Step 5: Train and Evaluate
    # =========================================================================
    _step("STEP 5: MODEL TRAINING & EVALUATION", verbose)

    table = ResultsTable()
    models = {}

    for method in methods:
        fitted = train_model(
            method, X_train, y_train,
            cv=cv, random_state=random_state, verbose=verbose
        )
        table.append(evaluate_model(fitted, X_test, y_test, prevalence, verbose=verbose))
        models[method] = fitted

    results['results'] = table
    results['models'] = models

    # =========================================================================
    # Step 6: Comparison
    # =========================================================================
    end_time = datetime.now()
    results['run_time'] = (end_time - start_time).total_seconds()

    if verbose:
        print("\n" + "=" * 70)
        print("MODEL COMPARISON")
        print("=" * 70)
        prevalence_text = (
            f"{prevalence:.3f}" if prevalence is not None else "test set proportion"
        )
        print(f"PPV/NPV at assumed prevalence: {prevalence_text}\n")
        print(table.format('accuracy'))

    if output_dir is not None:
        results['output_paths'] = save_report(results, output_dir)
        if verbose:
            for path in results['output_paths']:
                print(f"✓ Saved: {path}")

    if verbose:
        print(f"\n⏱ Total run time: {results['run_time']:.1f} seconds")

    return results


def save_report(results: Dict[str, Any], output_dir: Union[str, Path]) -> List[str]:
    """
    Write the comparison table (CSV) and run metadata (JSON).

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    table_path = output_dir / "model_comparison.csv"
    results['results'].sorted_by('accuracy').to_csv(table_path, index=False)

    metadata_path = output_dir / "report_metadata.json"
    metadata = {
        'timestamp': results['timestamp'],
        'config': results['config'],
        'data_info': results['data_info'],
        'dropped_features': results['dropped_features'],
        'features': results['features'],
        'best_params': {
            method: {k: v if isinstance(v, (int, float, str)) else str(v)
                     for k, v in fitted.best_params.items()}
            for method, fitted in results['models'].items()
        },
        'cv_accuracy': {
            method: fitted.cv_accuracy for method, fitted in results['models'].items()
        }
    }

    with open(metadata_path, 'w') as f:
        json.dump(metadata, f, indent=2)

    return [str(table_path), str(metadata_path)]


if __name__ == "__main__":
    run_report()
