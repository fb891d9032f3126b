#!/usr/bin/env python
"""
Energy loss of 34Ar through a helium jet, a Mylar window and a butane ionization chamber.

This script demonstrates:
  • Loading stopping power tables from a directory of SRIM-style text files.
  • Computing the loss of a single projectile in a single layer.
  • Building the detector chain and printing the loss per segment.
  • Scanning jet areal density and chamber pressure.
"""

import sys
import logging

from tabulate import tabulate

from pyeloss.io.table_set import StoppingPowerTableSet
from pyeloss.physics.energy_loss import EnergyLossCalculator
from pyeloss.physics.target import Projectile, Target
from pyeloss.chamber import DetectorSetup, DetectorSetupParameters


def main(directory: str = "tables"):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    tables = StoppingPowerTableSet.from_directory(directory, source_program="srim")
    calculator = EnergyLossCalculator(tables)

    # --- Single layer ---
    gas = Target("Butane").with_pressure_temperature(15.0, 300.0).with_distance(2.0)
    result = calculator.integrate("34Ar", 55.4, gas.material, gas.thickness)
    print(f"34Ar at 55.4 MeV through {gas.thickness:.4f} mg/cm² of {gas.material}: "
          f"loss = {result.energy_loss:.4f} MeV, ranged out = {result.ranged_out}")

    # --- Full detector chain ---
    params = DetectorSetupParameters(ic_pressure=15.0, jet_areal_density=1e19)
    setup = DetectorSetup(params, Projectile("34Ar", 55.4), Projectile("34Ar", 55.4), calculator)
    setup.summary(verbose=True)
    print(tabulate(setup.calculate(), headers="keys", tablefmt="fancy_grid", showindex=False, floatfmt=".4f"))

    # --- Scan over jet areal density and chamber pressure ---
    df = setup.scan([5e18, 1e19], [14.0, 15.0, 16.0], parallel=True)
    print(tabulate(df, headers="keys", tablefmt="fancy_grid", showindex=False, floatfmt=".4f"))

    setup.plot()


if __name__ == "__main__":
    main(*sys.argv[1:2])
