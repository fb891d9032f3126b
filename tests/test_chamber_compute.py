import numpy as np
import pandas as pd
import pytest

import pyeloss.chamber.compute as compute_module
from pyeloss.chamber import DetectorSetup, DetectorSetupParameters
from pyeloss.chamber.compute import _compute_for_setting, _run_setting_task
from pyeloss.io.stopping_power import StoppingPowerTable
from pyeloss.io.table_set import StoppingPowerTableSet
from pyeloss.physics.energy_loss import EnergyLossCalculator
from pyeloss.physics.target import Projectile


def create_setup():
    tables = StoppingPowerTableSet.from_tables(
        StoppingPowerTable("34Ar", target, np.array([1.0]), np.array([s]))
        for target, s in {"He": 1.0, "Mylar": 2.0, "Butane": 1.5}.items()
    )
    calc = EnergyLossCalculator(tables, step_fraction=1e-3)
    params = DetectorSetupParameters(ic_pressure=15.0, jet_areal_density=1e19)
    return DetectorSetup(params, Projectile("34Ar", 55.4), Projectile("34Ar", 55.4), calc)


class SerialExecutor:
    def __init__(self, max_workers=None):
        self.max_workers = max_workers

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def map(self, func, iterable):
        return map(func, iterable)


def test_run_setting_task():
    assert _run_setting_task(lambda a, b: a + b, (1, 2)) == 3


def test_compute_for_setting_row():
    setup = create_setup()
    params = {k: getattr(setup.params, k) for k in setup.params.__dataclass_fields__}
    row = _compute_for_setting(params, setup.beam, setup.ejectile, setup.calculator, 5e18, 14.0)
    assert row["jet_areal_density"] == 5e18
    assert row["ic_pressure"] == 14.0
    stages = ["jet_in", "jet_out", "window", "ic_0", "ic_1", "ic_2", "ic_3", "ic_4"]
    assert all(stage in row for stage in stages)
    assert row["total_loss"] == pytest.approx(sum(row[s] for s in stages))
    assert row["ranged_out"] is False


def test_scan_serial():
    setup = create_setup()
    df = setup.scan([5e18, 1e19], [14.0, 15.0, 16.0])
    assert isinstance(df, pd.DataFrame)
    assert len(df) == 6
    assert list(df["jet_areal_density"]) == [5e18] * 3 + [1e19] * 3
    assert list(df["ic_pressure"]) == [14.0, 15.0, 16.0] * 2
    # Higher pressure means thicker chamber gas
    first = df[df["jet_areal_density"] == 5e18]
    assert first["ic_0"].is_monotonic_increasing
    # The setup itself is untouched
    assert setup.params.ic_pressure == 15.0
    assert setup.params.jet_areal_density == 1e19


def test_scan_matches_calculate():
    setup = create_setup()
    df = setup.scan([1e19], [15.0])
    direct = setup.calculate()
    assert df.loc[0, "total_loss"] == pytest.approx(direct["energy_loss"].sum())


def test_scan_parallel(monkeypatch):
    monkeypatch.setattr(compute_module, "ProcessPoolExecutor", SerialExecutor)
    setup = create_setup()
    df_parallel = setup.scan([5e18, 1e19], [15.0], parallel=True, max_workers=1)
    df_serial = setup.scan([5e18, 1e19], [15.0])
    pd.testing.assert_frame_equal(df_parallel, df_serial)


def test_scan_scalar_inputs():
    df = create_setup().scan(1e19, 15.0)
    assert len(df) == 1


def test_scan_empty_grid_raises():
    with pytest.raises(ValueError, match="at least one value"):
        create_setup().scan([], [15.0])
