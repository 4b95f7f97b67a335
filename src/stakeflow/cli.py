"""Command line entry point for the staking workbench."""

import argparse
import logging
import sys
from typing import List, Optional

from .adversarial.stress import STRESS_LIBRARY, format_stress_table, run_stress_suite
from .config.loader import list_presets, load_model, load_preset
from .reporting.export import export_csv, export_json
from .simulation.runner import compute_staking_series
from .validation.sanity_checks import validate_simulation_results


def _load(args):
    if args.model:
        return load_model(args.model)
    return load_preset(args.preset)


def _add_model_arguments(parser: argparse.ArgumentParser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--preset", help="Bundled preset name")
    source.add_argument("--model", help="Path to a model YAML file")


def cmd_presets(args) -> int:
    for name in list_presets():
        print(name)
    return 0


def cmd_run(args) -> int:
    model = _load(args)
    outputs = compute_staking_series(model)
    meta = outputs.metadata

    print(f"{model.name} ({model.archetype}, {model.horizon_steps} {model.time_step} steps)")
    print(f"  Final staking ratio: {meta.final_staking_ratio * 100:.2f}%")
    print(f"  Avg gross APR:       {meta.avg_gross_apr * 100:.2f}%")
    print(f"  Avg net APR:         {meta.avg_net_apr * 100:.2f}%")
    print(f"  Avg fee coverage:    {meta.avg_fee_coverage:.2f}%")
    print(f"  Stake value (USD):   {meta.total_stake_value_usd:,.0f}")
    print(f"  Reward runway:       {meta.reward_runway_steps} steps")
    print(f"  Float locked:        {meta.float_locked_pct * 100:.2f}%")
    for cohort in outputs.cohorts:
        print(f"  {cohort.cohort}: net APR {cohort.net_apr * 100:.2f}%, participation {cohort.participation_pct * 100:.2f}%")

    for warning in validate_simulation_results(model, outputs):
        print(f"  [{warning.severity}] {warning.message}", file=sys.stderr)

    if args.csv:
        export_csv(outputs, args.csv, model)
    if args.json:
        export_json(outputs, args.json, model)
    return 0


def cmd_stress(args) -> int:
    model = _load(args)
    shocks = [args.shock] if args.shock else None
    results = run_stress_suite(model, shocks)
    print(format_stress_table(results))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stakeflow", description="Staking dynamics workbench")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    presets = subparsers.add_parser("presets", help="List bundled presets")
    presets.set_defaults(func=cmd_presets)

    run = subparsers.add_parser("run", help="Simulate one model")
    _add_model_arguments(run)
    run.add_argument("--csv", help="Write step records to this CSV file")
    run.add_argument("--json", help="Write the full run to this JSON file")
    run.set_defaults(func=cmd_run)

    stress = subparsers.add_parser("stress", help="Run stress tests against a model")
    _add_model_arguments(stress)
    stress.add_argument("--shock", choices=sorted(STRESS_LIBRARY), help="Single shock (default: all)")
    stress.set_defaults(func=cmd_stress)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
