#!/usr/bin/env python
"""
Liver Patient Classification - Main Entry Point
================================================

Command-line interface for the liver patient model comparison report.

Usage:
    python main.py --report         # Run the full model comparison
    python main.py --explore        # Exploratory analysis only
    python main.py --info           # Show project information
    python main.py --help           # Show help

Examples:
    # Full report with the fixed settings (seed 1, 70/30 split, p = 0.06)
    python main.py --report

    # Report from a local copy, two models only
    python main.py --report --data ilpd.csv --methods naive-bayes random-forest

The seed, split proportion, correlation cutoff and assumed prevalence are
fixed constants of the analysis and are not exposed as options.

Author: Healthcare AI Team
"""

import argparse
import sys
from pathlib import Path

# Add source directory to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from liver_analysis.data_ingestion import (
    DATA_URL,
    DataUnavailableError,
    MalformedRecordError,
)
from liver_analysis.eda_report import CORRELATION_CUTOFF
from liver_analysis.model_evaluation import ASSUMED_PREVALENCE
from liver_analysis.model_training import DEFAULT_CV_FOLDS, MODEL_METHODS
from liver_analysis.preprocessing_pipeline import RANDOM_SEED, TRAIN_PROPORTION


def run_model_report(args):
    """Execute the full model comparison report."""
    from liver_analysis.report_pipeline import run_report

    print("\n" + "=" * 70)
    print("🏥 LIVER PATIENT CLASSIFICATION - REPORT MODE")
    print("=" * 70)

    run_report(
        data_source=args.data,
        methods=args.methods,
        output_dir=args.output,
        explore=not args.no_explore
    )

    print("\n✅ Report completed successfully!")

    return 0


def run_exploration_only(args):
    """Run the exploratory analysis."""
    from liver_analysis.data_ingestion import get_data_summary, load_liver_data
    from liver_analysis.eda_report import run_exploration

    print("\n" + "=" * 70)
    print("🏥 LIVER PATIENT CLASSIFICATION - EXPLORATION MODE")
    print("=" * 70)

    df = load_liver_data(args.data)
    summary = get_data_summary(df)

    print(f"\n📋 Loaded {summary['shape'][0]} records")
    print(f"   Outcome: {summary['outcome_distribution']}")
    print(f"   Sex: {summary['sex_distribution']}")

    run_exploration(df)

    print("\n✅ Exploration completed successfully!")

    return 0


def show_info(args):
    """Show project information."""
    print("\n" + "=" * 70)
    print("🏥 LIVER PATIENT CLASSIFICATION - PROJECT INFO")
    print("=" * 70)

    print(f"""
    Compares five off-the-shelf classifiers on the Indian Liver Patient
    dataset and adjusts predictive values for real-world prevalence.

    📁 Project Structure:
        src/liver_analysis/
        ├── data_ingestion.py         - Data loading, recoding and validation
        ├── eda_report.py             - Distribution and correlation analysis
        ├── statistical_analysis.py   - Care vs Control group comparisons
        ├── preprocessing_pipeline.py - Stratified split and preprocessing
        ├── feature_selection.py      - Correlated predictor removal
        ├── model_training.py         - Model lookup table and tuning
        ├── model_evaluation.py       - Metrics and results table
        └── report_pipeline.py        - Report orchestration

    📊 Models:
        {', '.join(MODEL_METHODS)}

    ⚙️  Fixed settings:
        seed={RANDOM_SEED}, train proportion={TRAIN_PROPORTION},
        correlation cutoff={CORRELATION_CUTOFF}, prevalence={ASSUMED_PREVALENCE},
        cross-validation folds={DEFAULT_CV_FOLDS}

    🌐 Data: {DATA_URL}
    """)

    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Liver Patient Classification - Command Line Interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --report                       Run the full report
  python main.py --report --data ilpd.csv       Use a local copy of the data
  python main.py --explore                      Exploratory analysis only
  python main.py --info                         Show project information
        """
    )

    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument(
        '--report',
        action='store_true',
        help='Train and compare all models'
    )
    mode_group.add_argument(
        '--explore',
        action='store_true',
        help='Run the exploratory analysis only'
    )
    mode_group.add_argument(
        '--info',
        action='store_true',
        help='Show project information'
    )

    data_group = parser.add_argument_group('Data Options')
    data_group.add_argument(
        '--data',
        type=str,
        default=DATA_URL,
        help='URL or path of the raw CSV (default: UCI repository)'
    )

    report_group = parser.add_argument_group('Report Options')
    report_group.add_argument(
        '--methods',
        nargs='+',
        choices=list(MODEL_METHODS),
        default=None,
        help='Models to run (default: all)'
    )
    report_group.add_argument(
        '--output',
        type=str,
        default=None,
        help='Directory for the comparison CSV and metadata JSON'
    )
    report_group.add_argument(
        '--no-explore',
        action='store_true',
        help='Skip the exploratory analysis step'
    )

    args = parser.parse_args()

    try:
        if args.report:
            return run_model_report(args)
        elif args.explore:
            return run_exploration_only(args)
        elif args.info:
            return show_info(args)
    except DataUnavailableError as e:
        print(f"\n❌ Data unavailable: {e}")
        print("   Check the network connection or pass a local copy with --data")
        return 1
    except MalformedRecordError as e:
        print(f"\n❌ Malformed record: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
