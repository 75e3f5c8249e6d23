#!/usr/bin/env python
"""
RateSens Demo Script

This script walks through the sensitivity workflow:
1. Build a zero curve and price a fixed-rate bond
2. Key-rate durations, DV01 and convexity in one AD pass
3. Cross-check against bump-and-reprice
4. Split a risky bond's rate risk into IR01 and CS01
5. Pathwise sensitivities of a Monte Carlo valuation

Usage:
    python run_demo.py [--output-dir OUTPUT_DIR] [--method METHOD] [--paths N]
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ratesens import (
    RateCurve,
    RiskSettings,
    configure_logging,
    duration,
    convexity,
)
from ratesens.pricers import (
    StandardValuation,
    TwoCurveStandardValuation,
    callable_bond_valuation,
    fixed_rate_bond_cashflows,
)
from ratesens.risk import (
    BumpEngine,
    compute_sensitivities,
    compute_two_curve_sensitivities,
)
from ratesens.simulation import (
    MonteCarloValuation,
    SimulationConfig,
    callable_bond_payoff,
)

TENORS = (0.5, 1.0, 2.0, 3.0, 5.0, 7.0, 10.0)
BASE_RATES = (0.0410, 0.0395, 0.0372, 0.0361, 0.0355, 0.0358, 0.0365)
CREDIT_SPREADS = (0.0060, 0.0065, 0.0075, 0.0085, 0.0100, 0.0110, 0.0120)


def print_header(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def build_curves(method: str):
    """Base (risk-free) curve and credit spread curve on one tenor grid."""
    print_header("Building Curves")
    base = RateCurve(BASE_RATES, TENORS, method=method)
    credit = RateCurve(CREDIT_SPREADS, TENORS, method=method)
    for t, r, s in zip(TENORS, BASE_RATES, CREDIT_SPREADS):
        print(f"  {t:>5.2f}Y  base {r*100:.3f}%  spread {s*1e4:6.1f}bp")
    print(f"\nInterpolation: {base.method}, compounding: {base.compounding.value}")
    return base, credit


def run_bond_report(curve: RateCurve) -> pd.DataFrame:
    """Single-curve key-rate report for a 7y semi-annual bond."""
    print_header("Bond Key-Rate Report (7Y 4% semi-annual)")
    bond = StandardValuation(*fixed_rate_bond_cashflows(0.04, 7.0, frequency=2))
    result = compute_sensitivities(curve, bond, second_order=True)

    print(f"  PV:               {result.value:>12.4f}")
    print(f"  Modified duration:{result.duration:>12.4f}")
    print(f"  DV01:             {result.dv01:>12.6f}")
    print(f"  Convexity:        {result.convexity:>12.4f}")
    print(f"  Macaulay:         {bond.macaulay_duration(curve.build()):>12.4f}")

    frame = result.to_frame()
    print("\n" + frame.to_string(float_format=lambda x: f"{x:.6f}"))

    # Finite-difference cross-check
    engine = BumpEngine(curve)
    fd_dv01 = engine.compute_dv01(bond, bump_size=1.0)
    print(f"\n  Bump DV01:        {fd_dv01:>12.6f}  (AD - bump: {result.dv01 - fd_dv01:.2e})")

    return frame


def run_callable_report(curve: RateCurve) -> None:
    print_header("Callable Bond (5Y 5% annual, callable at 2Y)")
    valuation = callable_bond_valuation(0.05, 5.0, call_time=2.0, call_price=100.0)
    print(f"  Modified duration: {duration('modified', curve, valuation):.4f}")
    print(f"  Convexity:         {convexity(curve, valuation):.4f}")


def run_two_curve_report(base: RateCurve, credit: RateCurve) -> pd.DataFrame:
    """IR01 / CS01 decomposition of a risky bond."""
    print_header("Two-Curve Decomposition (5Y 5% annual risky bond)")
    bond = TwoCurveStandardValuation(*fixed_rate_bond_cashflows(0.05, 5.0, frequency=1))
    result = compute_two_curve_sensitivities(base, credit, bond, second_order=True)

    print(f"  PV:   {result.value:>12.4f}")
    print(f"  IR01: {result.ir01:>12.6f}")
    print(f"  CS01: {result.cs01:>12.6f}")
    print(f"  Cross convexity: {result.cross_convexities.sum():.4f}")

    frame = result.to_frame()
    print("\n" + frame.to_string(float_format=lambda x: f"{x:.6f}"))
    return frame


def run_monte_carlo(curve: RateCurve, n_paths: int) -> None:
    """Pathwise key-rate durations under a Ho-Lee model."""
    print_header(f"Monte Carlo Callable Bond ({n_paths} paths, Ho-Lee)")
    config = SimulationConfig(
        n_scenarios=n_paths, time_step=0.25, horizon=5.0, seed=42, antithetic=True
    )
    amounts, times = fixed_rate_bond_cashflows(0.05, 5.0, frequency=1)
    mc = MonteCarloValuation(callable_bond_payoff(amounts, times, call_time=2.0), config)

    result = compute_sensitivities(curve, mc)
    print(f"  PV:             {result.value:>12.4f}  (s.e. {mc.standard_error(curve.build()):.4f})")
    print(f"  Duration:       {result.duration:>12.4f}")
    for t, krd in zip(curve.tenors, result.key_rate_durations):
        print(f"    {t:>5.2f}Y  {krd:>10.6f}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="RateSens Demo")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for CSV reports"
    )
    parser.add_argument(
        "--method",
        type=str,
        default="linear",
        help="Interpolation method for both curves"
    )
    parser.add_argument(
        "--paths",
        type=int,
        default=500,
        help="Number of Monte Carlo paths (even)"
    )
    args = parser.parse_args()

    configure_logging(RiskSettings.from_env())

    print("=" * 60)
    print("RATESENS DEMO")
    print("=" * 60)

    base, credit = build_curves(args.method)
    bond_frame = run_bond_report(base)
    run_callable_report(base)
    two_curve_frame = run_two_curve_report(base, credit)
    run_monte_carlo(base, args.paths)

    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        bond_frame.to_csv(output_dir / "bond_key_rates.csv")
        two_curve_frame.to_csv(output_dir / "two_curve_key_rates.csv")
        print(f"\nExported reports to {output_dir}")

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
