"""
Command-line entrypoint: one subcommand per chapter workflow.

    python -m dsci_ml classify data.csv --target Class --predictors Perimeter Concavity
    python -m dsci_ml linear-regress houses.csv --target price --predictors sqft
    python -m dsci_ml knn-regress houses.csv --target price --predictors sqft --k-max 50

Prints a short report; optional PNG plots (--plot-dir) and a versioned model
artifact (--save-model). Exit code 0 on success, 1 on bad data or options.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from dsci_ml.config import get_settings
from dsci_ml.core.exceptions import DsciError, InvalidParameterError
from dsci_ml.data import class_proportions, load_dataset
from dsci_ml.dsci_logging import bind_run, unbind_run
from dsci_ml.models import save_model
from dsci_ml.viz import plot_classes, plot_regression_fit, plot_tuning_curve
from dsci_ml.workflows import run_knn_classification, run_knn_regression, run_linear_regression


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("dataset_csv", help="Path or http(s) URL of the dataset CSV")
    parser.add_argument("--target", required=True, help="Column to predict")
    parser.add_argument(
        "--predictors",
        nargs="+",
        default=None,
        help="Predictor columns (default: every other column)",
    )
    parser.add_argument("--sep", default=",", help="CSV field separator (default: ',')")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: DSCI_RANDOM_SEED)")
    parser.add_argument(
        "--train-size",
        type=float,
        default=None,
        help="Fraction of rows used for training (default: DSCI_TRAIN_SIZE)",
    )
    parser.add_argument("--plot-dir", type=Path, default=None, help="Write PNG plots to this directory")
    parser.add_argument("--plots", action="store_true", help="Write PNG plots to DSCI_PLOTS_DIR")
    parser.add_argument(
        "--save-model",
        action="store_true",
        help="Save the fitted model to DSCI_MODELS_DIR as a versioned .joblib",
    )


def _add_tuning(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--k-min", type=int, default=1, help="Smallest k to try (default: 1)")
    parser.add_argument("--k-max", type=int, default=15, help="Largest k to try (default: 15)")
    parser.add_argument("--k-step", type=int, default=1, help="Step between k values (default: 1)")
    parser.add_argument("--folds", type=int, default=None, help="Cross-validation folds (default: DSCI_CV_FOLDS)")
    parser.add_argument(
        "--metric",
        choices=("euclidean", "manhattan"),
        default="euclidean",
        help="Distance metric (default: euclidean)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dsci_ml",
        description="Linear regression and k-nearest-neighbour models for tabular CSV data.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    classify = sub.add_parser("classify", help="k-NN classification with k tuned by cross-validation")
    _add_common(classify)
    _add_tuning(classify)

    linear = sub.add_parser("linear-regress", help="OLS linear regression, test RMSPE")
    _add_common(linear)

    knn = sub.add_parser("knn-regress", help="k-NN regression with k tuned by cross-validated RMSPE")
    _add_common(knn)
    _add_tuning(knn)
    return parser


def _k_values(args: argparse.Namespace) -> list[int]:
    if args.k_step < 1:
        raise InvalidParameterError(f"--k-step must be at least 1, got {args.k_step}")
    if args.k_min < 1 or args.k_max < args.k_min:
        raise InvalidParameterError(f"invalid k range: {args.k_min}..{args.k_max}")
    return list(range(args.k_min, args.k_max + 1, args.k_step))


def _print_section(title: str) -> None:
    print(f"\n{title}")
    print("-" * 50)


def _run_classify(args: argparse.Namespace) -> None:
    columns = None if args.predictors is None else list(args.predictors) + [args.target]
    df = load_dataset(args.dataset_csv, columns, sep=args.sep)
    result = run_knn_classification(
        df,
        args.target,
        args.predictors,
        _k_values(args),
        folds=args.folds,
        train_size=args.train_size,
        random_state=args.seed,
        metric=args.metric,
    )

    _print_section("CLASS PROPORTIONS (full dataset)")
    print(class_proportions(df[args.target]).round(2).to_string(index=False))
    _print_section(f"TUNING (cross-validation, {int(result.tuning['n_folds'].iloc[0])} folds)")
    print(result.tuning.drop(columns=["n_folds"]).round(4).to_string(index=False))
    _print_section("EVALUATION (test set)")
    print(f"best k:    {result.best_k}")
    print(f"accuracy:  {result.test_accuracy:.4f}")
    if result.precision is not None:
        print(f"precision: {result.precision:.4f}  (positive class: {result.positive_label})")
        print(f"recall:    {result.recall:.4f}")
    print("confusion matrix (rows=truth, cols=prediction):")
    print(result.confusion.to_string())
    print()

    if args.plot_dir is not None:
        plot_tuning_curve(result.tuning, args.plot_dir / "tuning_accuracy.png")
        if len(result.predictors) == 2:
            plot_classes(
                df,
                result.predictors[0],
                result.predictors[1],
                args.target,
                args.plot_dir / "classes.png",
            )
    if args.save_model:
        path, _meta, _base = save_model(
            result.model,
            "knn_classifier",
            metrics={"accuracy": result.test_accuracy, "best_k": result.best_k},
            feature_list=result.predictors,
        )
        print(f"model saved: {path}")


def _run_linear(args: argparse.Namespace) -> None:
    columns = None if args.predictors is None else list(args.predictors) + [args.target]
    df = load_dataset(args.dataset_csv, columns, sep=args.sep)
    result = run_linear_regression(
        df,
        args.target,
        args.predictors,
        train_size=args.train_size,
        random_state=args.seed,
    )

    _print_section("COEFFICIENTS")
    print(result.coefficients.round(4).to_string(index=False))
    print(result.model.equation(target=args.target))
    _print_section("EVALUATION")
    print(f"RMSE (training): {result.rmse:.4f}")
    print(f"RMSPE (test):    {result.rmspe:.4f}")
    print(f"R^2 (test):      {result.r_squared:.4f}")
    print()

    if args.plot_dir is not None and len(result.predictors) == 1:
        predictor = result.predictors[0]
        plot_regression_fit(
            df[predictor],
            df[args.target],
            result.model,
            args.plot_dir / "linear_fit.png",
            xlabel=predictor,
            ylabel=args.target,
        )
    if args.save_model:
        path, _meta, _base = save_model(
            result.model,
            "linear_regression",
            metrics={"rmse": result.rmse, "rmspe": result.rmspe},
            feature_list=result.predictors,
        )
        print(f"model saved: {path}")


def _run_knn_regress(args: argparse.Namespace) -> None:
    columns = None if args.predictors is None else list(args.predictors) + [args.target]
    df = load_dataset(args.dataset_csv, columns, sep=args.sep)
    result = run_knn_regression(
        df,
        args.target,
        args.predictors,
        _k_values(args),
        folds=args.folds,
        train_size=args.train_size,
        random_state=args.seed,
        metric=args.metric,
    )

    _print_section(f"TUNING (cross-validation, {int(result.tuning['n_folds'].iloc[0])} folds)")
    print(result.tuning.drop(columns=["n_folds"]).round(4).to_string(index=False))
    _print_section("EVALUATION")
    print(f"best k:          {result.best_k}")
    print(f"RMSE (training): {result.rmse:.4f}")
    print(f"RMSPE (test):    {result.rmspe:.4f}")
    print()

    if args.plot_dir is not None:
        plot_tuning_curve(result.tuning, args.plot_dir / "tuning_rmspe.png")
        if len(result.predictors) == 1:
            predictor = result.predictors[0]
            plot_regression_fit(
                df[predictor],
                df[args.target],
                result.model,
                args.plot_dir / "knn_fit.png",
                xlabel=predictor,
                ylabel=args.target,
            )
    if args.save_model:
        path, _meta, _base = save_model(
            result.model,
            "knn_regressor",
            metrics={"rmse": result.rmse, "rmspe": result.rmspe, "best_k": result.best_k},
            feature_list=result.predictors,
        )
        print(f"model saved: {path}")


COMMANDS = {
    "classify": _run_classify,
    "linear-regress": _run_linear,
    "knn-regress": _run_knn_regress,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.plots and args.plot_dir is None:
        args.plot_dir = settings.plots_dir
    seed = settings.random_seed if args.seed is None else args.seed
    run_logger = bind_run(args.command, seed, dataset=str(args.dataset_csv))
    run_logger.info("cli_start")
    try:
        COMMANDS[args.command](args)
    except DsciError as e:
        run_logger.error("cli_failed", error_type=type(e).__name__, error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1
    finally:
        unbind_run()
    run_logger.info("cli_done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
