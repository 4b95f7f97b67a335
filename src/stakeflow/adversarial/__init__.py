"""Stress testing for staking models."""

from .stress import (
    STRESS_LIBRARY,
    StressScenario,
    StressTestResult,
    apply_shock,
    compare_outputs,
    format_stress_table,
    run_stress_suite,
    run_stress_test,
)

__all__ = [
    "STRESS_LIBRARY",
    "StressScenario",
    "StressTestResult",
    "apply_shock",
    "compare_outputs",
    "format_stress_table",
    "run_stress_suite",
    "run_stress_test",
]
