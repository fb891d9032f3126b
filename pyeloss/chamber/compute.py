"""
Batch scans over detector settings.

This module adds :meth:`~pyeloss.chamber.core.DetectorSetup.scan`, which
recomputes the energy-loss chain for every combination of jet areal density
and ionization chamber pressure and collects the per-segment losses in a table.

Each setting is independent, so the scan can be spread over worker processes.
"""

import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict
from functools import partial
from itertools import product
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from pyeloss.physics.energy_loss import EnergyLossCalculator
from pyeloss.physics.target import Projectile
from pyeloss.utils.parallel import optimal_worker_count

from .core import DetectorSetup, DetectorSetupParameters


def _run_setting_task(func, args):
    """
    Internal wrapper for multiprocessing task execution.

    :param func: Callable function to execute.
    :type func: Callable
    :param args: Tuple of arguments for the function.
    :type args: tuple
    :return: Output of func(*args)
    """
    return func(*args)


def _compute_for_setting(
    params: dict,
    beam: Projectile,
    ejectile: Projectile,
    calculator: EnergyLossCalculator,
    jet_areal_density: float,
    ic_pressure: float
) -> dict:
    """
    Compute the segment losses for one (areal density, pressure) setting.

    :param params: Flattened DetectorSetupParameters dictionary.
    :type params: dict
    :param beam: Incoming projectile.
    :type beam: Projectile
    :param ejectile: Reaction product.
    :type ejectile: Projectile
    :param calculator: Energy-loss integrator.
    :type calculator: EnergyLossCalculator
    :param jet_areal_density: Jet atom areal density (atoms/cm²).
    :type jet_areal_density: float
    :param ic_pressure: Ionization chamber pressure (Torr).
    :type ic_pressure: float

    :return: Row with the setting, the loss per stage, the total loss and a range-out flag.
    :rtype: dict
    """
    config = dict(params, jet_areal_density=jet_areal_density, ic_pressure=ic_pressure)
    setup = DetectorSetup(DetectorSetupParameters.from_dict(config), beam, ejectile, calculator)
    df = setup.calculate()

    row = {"jet_areal_density": jet_areal_density, "ic_pressure": ic_pressure}
    row.update(dict(zip(df["stage"], df["energy_loss"])))
    row["total_loss"] = float(df["energy_loss"].sum())
    row["ranged_out"] = bool(df["ranged_out"].any())
    return row


def scan(
    self: DetectorSetup,
    jet_areal_densities: Sequence[float],
    ic_pressures: Sequence[float],
    parallel: bool = False,
    max_workers: Optional[int] = None
) -> pd.DataFrame:
    """
    Compute the energy-loss chain over a grid of detector settings.

    The setup itself is not modified; every setting starts from a copy of its parameters.

    :param self: DetectorSetup instance.
    :type self: DetectorSetup
    :param jet_areal_densities: Jet atom areal densities to scan (atoms/cm²).
    :type jet_areal_densities: Sequence[float]
    :param ic_pressures: Ionization chamber pressures to scan (Torr).
    :type ic_pressures: Sequence[float]
    :param parallel: Whether to enable multiprocessing.
    :type parallel: bool
    :param max_workers: Requested number of worker processes (capped at CPU-1).
    :type max_workers: int, optional

    :returns: One row per setting, ordered areal density first then pressure.
    :rtype: pandas.DataFrame

    :raises ValueError: If either grid is empty.
    """
    rhoas = np.atleast_1d(np.asarray(jet_areal_densities, dtype=float)).tolist()
    pressures = np.atleast_1d(np.asarray(ic_pressures, dtype=float)).tolist()
    if not rhoas or not pressures:
        raise ValueError("Both jet_areal_densities and ic_pressures must contain at least one value.")

    job_list = list(product(rhoas, pressures))
    params_dict = asdict(self.params)
    func = partial(_compute_for_setting, params_dict, self.beam, self.ejectile, self.calculator)

    print("\nStarting scan in {} mode ...".format("parallel" if parallel else "serial"))
    print(f"\n{len(rhoas)} areal densities x {len(pressures)} pressures = {len(job_list)} settings\n")
    start_time = time.time()

    if parallel:
        worker_count = optimal_worker_count(job_list, user_requested=max_workers)
        with ProcessPoolExecutor(max_workers=worker_count) as executor:
            results = list(tqdm(
                executor.map(partial(_run_setting_task, func), job_list),
                total=len(job_list),
                desc=f"[{worker_count} workers] {self.ejectile.nuclide}",
                unit="setting"
            ))
    else:
        results = [func(*args) for args in tqdm(job_list, desc=self.ejectile.nuclide, unit="setting")]

    elapsed = time.time() - start_time
    print(f"\n... done. Total elapsed time: {elapsed:.2f} seconds.")
    return pd.DataFrame(results)


DetectorSetup.scan = scan
