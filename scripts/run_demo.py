#!/usr/bin/env python
"""
CurveLib Demo Script

This script walks through the curve construction workflow:
1. Bootstrap a SOFR discount curve from OIS quotes
2. Bootstrap a 3M term-rate forwarding curve over it
3. Bootstrap a zero inflation curve from ZC inflation swaps
4. Fit a Nelson-Siegel curve to bond prices
5. Write node and fit reports

Usage:
    python run_demo.py [--output-dir OUTPUT_DIR] [--interpolator NAME]
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from curvelib import (
    BootstrapConfig,
    DepositRateHelper,
    Discount,
    FittedBondDiscountCurve,
    FixedRateBond,
    Frequency,
    Handle,
    IborIndex,
    NelsonSiegelFitting,
    OISRateHelper,
    OvernightIndex,
    PiecewiseYieldCurve,
    PiecewiseZeroInflationCurve,
    SwapRateHelper,
    ZeroCouponInflationSwapHelper,
    ZeroInflationIndex,
    BondHelper,
    configure_logging,
    create_interpolator,
)

OIS_QUOTES = pd.DataFrame({
    "tenor": ["1M", "3M", "6M", "1Y", "2Y", "3Y", "5Y", "7Y", "10Y"],
    "rate": [0.0531, 0.0528, 0.0519, 0.0495, 0.0452, 0.0425, 0.0401, 0.0393, 0.0389],
})

TERM_QUOTES = pd.DataFrame({
    "instrument": ["DEPOSIT", "SWAP", "SWAP", "SWAP", "SWAP", "SWAP"],
    "tenor": ["3M", "2Y", "3Y", "5Y", "7Y", "10Y"],
    "rate": [0.0556, 0.0471, 0.0444, 0.0419, 0.0410, 0.0405],
})

INFLATION_QUOTES = pd.DataFrame({
    "maturity": [date(2025, 1, 15), date(2026, 1, 15), date(2027, 1, 15),
                 date(2029, 1, 15), date(2034, 1, 15)],
    "rate": [0.0265, 0.0248, 0.0241, 0.0236, 0.0238],
})

BOND_QUOTES = pd.DataFrame({
    "maturity": [date(2026, 1, 31), date(2027, 2, 15), date(2029, 1, 31),
                 date(2031, 1, 31), date(2033, 11, 15)],
    "coupon": [0.04375, 0.04125, 0.04000, 0.04000, 0.04500],
    "price": [99.95, 99.55, 99.40, 99.05, 102.20],
})


def build_ois_curve(valuation_date: date, interpolator: str) -> PiecewiseYieldCurve:
    """Bootstrap the SOFR discount curve."""
    print("\n" + "="*60)
    print("Bootstrapping SOFR Discount Curve")
    print("="*60)

    sofr = OvernightIndex("SOFR")
    helpers = []
    for _, row in OIS_QUOTES.iterrows():
        helpers.append(OISRateHelper(row["rate"], row["tenor"], valuation_date, sofr))
        print(f"  Added: OIS {row['tenor']:>4s} @ {row['rate']*100:.3f}%")

    curve = PiecewiseYieldCurve(
        valuation_date, helpers, traits=Discount(), interpolator=create_interpolator(interpolator)
    )
    curve.calculate()
    print(f"\nBootstrap complete: {len(curve.dates)} nodes, "
          f"{curve.bootstrap.last_iterations} iteration(s)")
    return curve


def build_term_curve(
    valuation_date: date,
    discount_curve: PiecewiseYieldCurve,
    interpolator: str
) -> PiecewiseYieldCurve:
    """Bootstrap the 3M forwarding curve with exogenous SOFR discounting."""
    print("\n" + "="*60)
    print("Bootstrapping 3M Term-Rate Forwarding Curve")
    print("="*60)

    discounting = Handle(discount_curve)
    index = IborIndex("TERM3M", "3M")
    helpers = []
    for _, row in TERM_QUOTES.iterrows():
        if row["instrument"] == "DEPOSIT":
            helpers.append(DepositRateHelper(row["rate"], row["tenor"], valuation_date, index=index))
        else:
            helpers.append(
                SwapRateHelper(row["rate"], row["tenor"], valuation_date, index, discounting=discounting)
            )
        print(f"  Added: {row['instrument']:<8s} {row['tenor']:>4s} @ {row['rate']*100:.3f}%")

    curve = PiecewiseYieldCurve(
        valuation_date, helpers, interpolator=create_interpolator(interpolator),
        config=BootstrapConfig(accuracy=1e-12)
    )
    curve.calculate()
    print(f"\nBootstrap complete: {len(curve.dates)} nodes, "
          f"{curve.bootstrap.last_iterations} iteration(s)")
    return curve


def build_inflation_curve(valuation_date: date, nominal: PiecewiseYieldCurve) -> PiecewiseZeroInflationCurve:
    """Bootstrap a CPI zero inflation curve, three-month lag."""
    print("\n" + "="*60)
    print("Bootstrapping CPI Zero Inflation Curve")
    print("="*60)

    cpi = ZeroInflationIndex("CPI")
    cpi.add_fixing(date(2023, 10, 1), 307.671)
    helpers = []
    for _, row in INFLATION_QUOTES.iterrows():
        helpers.append(ZeroCouponInflationSwapHelper(row["rate"], "3M", row["maturity"], cpi))
        print(f"  Added: ZCIS {row['maturity']} @ {row['rate']*100:.3f}%")

    curve = PiecewiseZeroInflationCurve(
        valuation_date, INFLATION_QUOTES["rate"].iloc[0], "3M", helpers,
        nominal_term_structure=Handle(nominal)
    )
    curve.calculate()
    print(f"\nBase date: {curve.base_date}")
    return curve


def fit_bond_curve(valuation_date: date) -> FittedBondDiscountCurve:
    """Fit a Nelson-Siegel discount curve to bond prices."""
    print("\n" + "="*60)
    print("Fitting Treasury Curve (Nelson-Siegel)")
    print("="*60)

    helpers = []
    for _, row in BOND_QUOTES.iterrows():
        issue = date(row["maturity"].year - 10, row["maturity"].month, row["maturity"].day)
        bond = FixedRateBond(issue, row["maturity"], row["coupon"], Frequency.SEMIANNUAL)
        helpers.append(BondHelper(row["price"], bond, valuation_date))
        print(f"  Added: {row['coupon']*100:.3f}% {row['maturity']} @ {row['price']:.3f}")

    curve = FittedBondDiscountCurve(
        valuation_date, helpers, method=NelsonSiegelFitting(),
        guess=[0.04, 0.01, 0.0, 0.5], simplex_lambda=0.01
    )
    results = curve.fit_results()
    print(f"\nNelson-Siegel Parameters:")
    for name, value in zip(["beta0", "beta1", "beta2", "kappa"], results.solution):
        print(f"  {name}: {value:.6f}")
    print(f"  Cost: {results.minimum_cost_value:.3e} after {results.number_of_iterations} evaluations")
    return curve


def print_curve_summary(name: str, curve: PiecewiseYieldCurve) -> None:
    """Print zero rates and bootstrap residuals."""
    print(f"\n{name}")
    print("-"*60)
    print(f"{'Pillar':<12s} {'Zero':>10s} {'Discount':>12s} {'Residual':>12s}")
    report = curve.bootstrap_report()
    for _, row in report.iterrows():
        zero = curve.zero_rate(row["pillar"])
        print(f"{str(row['pillar']):<12s} {zero*100:>9.4f}% {curve.discount(row['pillar']):>12.8f} "
              f"{row['residual']:>12.2e}")


def write_reports(output_dir: Path, ois_curve, term_curve, inflation_curve, bond_curve) -> None:
    """Write node and fit reports as CSV."""
    output_dir.mkdir(parents=True, exist_ok=True)

    ois_curve.bootstrap_report().to_csv(output_dir / "sofr_bootstrap.csv", index=False)
    term_curve.bootstrap_report().to_csv(output_dir / "term3m_bootstrap.csv", index=False)
    pd.DataFrame({
        "date": inflation_curve.dates,
        "zero_inflation": inflation_curve.data,
    }).to_csv(output_dir / "cpi_nodes.csv", index=False)
    bond_curve.fit_report().to_csv(output_dir / "bond_fit.csv", index=False)

    print(f"\nReports written to {output_dir}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CurveLib Demo")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="./output",
        help="Output directory for reports"
    )
    parser.add_argument(
        "--interpolator",
        type=str,
        default="log_linear",
        help="Interpolation scheme of the bootstrapped yield curves"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level for the curvelib logger"
    )
    args = parser.parse_args()

    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
    configure_logging(args.log_level)
    output_dir = Path(args.output_dir)

    # Valuation date
    valuation_date = date(2024, 1, 15)

    print("="*60)
    print("CURVELIB DEMO")
    print(f"Valuation Date: {valuation_date}")
    print("="*60)

    ois_curve = build_ois_curve(valuation_date, args.interpolator)
    term_curve = build_term_curve(valuation_date, ois_curve, args.interpolator)
    inflation_curve = build_inflation_curve(valuation_date, ois_curve)
    bond_curve = fit_bond_curve(valuation_date)

    print_curve_summary("SOFR discount curve", ois_curve)
    print_curve_summary("3M forwarding curve", term_curve)

    write_reports(output_dir, ois_curve, term_curve, inflation_curve, bond_curve)

    print("\n" + "="*60)
    print("DEMO COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
