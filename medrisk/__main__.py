"""
CLI entry point for medrisk.

Usage:
    python -m medrisk generate --count 1200 --seed 7 --output corpus.csv
    python -m medrisk train --trees 40 --samples 1200 --seed 7
    python -m medrisk predict --category Beta-Blocker --dosage High --age 90 --bp High
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from .assessment import assess_profile
from .config import EngineConfig
from .encoding import BiologicalSex, BPStatus, DosageLevel, DrugCategory, PatientProfile
from .errors import MedRiskError
from .evaluation import train_and_evaluate
from .synthetic import SyntheticCorpusGenerator


def _add_run_options(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON config file (EngineConfig fields)",
    )
    parser.add_argument(
        "--trees",
        type=int,
        help="Number of trees (default: 40)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        help="Synthetic corpus size (default: 1200)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for corpus and forest",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        help="Worker threads for tree building (default: 1)",
    )


def _load_config(args) -> EngineConfig:
    overrides = {
        "n_trees": args.trees,
        "n_samples": args.samples,
        "random_state": args.seed,
        "n_jobs": args.jobs,
    }
    if args.config:
        return EngineConfig.from_config_file(args.config, **overrides)
    return EngineConfig(**{k: v for k, v in overrides.items() if v is not None})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medrisk",
        description="Train and query the medication risk forest on synthetic data",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress at INFO level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    gen = commands.add_parser("generate", help="Generate a synthetic labelled corpus")
    gen.add_argument(
        "--count",
        type=int,
        default=1200,
        help="Number of examples (default: 1200)",
    )
    gen.add_argument(
        "--seed",
        type=int,
        help="Random seed",
    )
    gen.add_argument(
        "--output",
        type=Path,
        help="CSV file to write; prints label counts if omitted",
    )

    train = commands.add_parser("train", help="Train on a synthetic corpus and report holdout metrics")
    _add_run_options(train)

    predict = commands.add_parser("predict", help="Train, then assess one patient profile")
    _add_run_options(predict)
    predict.add_argument(
        "--category",
        choices=[c.value for c in DrugCategory],
        default=DrugCategory.PAINKILLER.value,
        help="Medication category (default: Painkiller)",
    )
    predict.add_argument(
        "--dosage",
        choices=[d.value for d in DosageLevel],
        default=DosageLevel.MEDIUM.value,
        help="Daily dosage level (default: Medium)",
    )
    predict.add_argument("--age", type=float, default=35, help="Age in years (default: 35)")
    predict.add_argument("--weight", type=float, default=70, help="Weight in kg (default: 70)")
    predict.add_argument(
        "--sex",
        choices=[s.value for s in BiologicalSex],
        default=BiologicalSex.MALE.value,
    )
    predict.add_argument(
        "--bp",
        choices=[b.value for b in BPStatus],
        default=BPStatus.NORMAL.value,
        help="Blood pressure status (default: Normal)",
    )
    predict.add_argument("--frequency", type=int, default=1, help="Doses per day (default: 1)")
    predict.add_argument(
        "--lifestyle",
        action="append",
        default=[],
        help="Lifestyle factor (repeatable), e.g. --lifestyle Smoking",
    )
    return parser


def _run_generate(args) -> int:
    generator = SyntheticCorpusGenerator(random_state=args.seed)
    corpus = generator.generate(args.count)
    if args.output:
        corpus.to_frame().to_csv(args.output, index=False)
        print(f"Wrote {len(corpus.labels)} examples to {args.output}")
    else:
        counts = np.bincount(corpus.labels, minlength=3)
        print(f"Generated {len(corpus.labels)} examples")
        print(f"  Low: {counts[0]}  Medium: {counts[1]}  High: {counts[2]}")
    return 0


def _run_train(args) -> int:
    config = _load_config(args)
    forest, metrics = train_and_evaluate(config, verbose=args.verbose)
    print(f"Training size: {metrics.training_size}")
    print(f"Test size: {metrics.test_size}")
    print(f"Accuracy: {metrics.accuracy:.3f}")
    print(f"Macro F1: {metrics.f1_score:.3f}")
    print()
    print(forest.summary())
    return 0


def _run_predict(args) -> int:
    config = _load_config(args)
    forest, _ = train_and_evaluate(config, verbose=args.verbose)
    profile = PatientProfile(
        drug_category=args.category,
        dosage_level=args.dosage,
        age=args.age,
        weight=args.weight,
        sex=args.sex,
        bp_status=args.bp,
        frequency_per_day=args.frequency,
        lifestyle_factors=args.lifestyle,
    )
    result = assess_profile(forest, profile)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    handlers = {
        "generate": _run_generate,
        "train": _run_train,
        "predict": _run_predict,
    }
    try:
        return handlers[args.command](args)
    except (MedRiskError, FileNotFoundError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
