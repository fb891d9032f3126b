import logging
import math
from types import SimpleNamespace

import numpy as np
import pytest

from pyeloss.io.stopping_power import StoppingPowerTable
from pyeloss.io.table_set import StoppingPowerTableSet
from pyeloss.physics.energy_loss import STEP_FRACTION, EnergyLossCalculator, EnergyLossResult


def make_calculator(energy, stopping_power, mass=10.0, step_fraction=STEP_FRACTION):
    table = StoppingPowerTable("X", "He", np.asarray(energy, dtype=float), np.asarray(stopping_power, dtype=float))
    return EnergyLossCalculator(StoppingPowerTableSet.from_tables([table]), masses={"X": mass},
                                step_fraction=step_fraction)


@pytest.fixture
def constant_calculator():
    return make_calculator([1.0], [2.0], mass=10.0)


def test_step_fraction_constant():
    assert STEP_FRACTION == 1e-5


def test_zero_thickness_returns_zero(constant_calculator):
    result = constant_calculator.integrate("X", 100.0, "He", 0.0)
    assert result.energy_loss == 0.0
    assert result.steps == 0
    assert not result.ranged_out
    assert constant_calculator.energy_loss("X", 100.0, "He", 0.0) == 0.0


@pytest.mark.parametrize("energy", [1.1, 2.2, 4.4, 55.4])
def test_zero_thickness_is_exactly_zero_for_inexact_masses(energy):
    calc = make_calculator([1.0], [2.0], mass=33.980270093)
    result = calc.integrate("X", energy, "He", 0.0)
    assert result.energy_loss == 0.0
    assert result.residual_energy == energy


def test_thickness_below_step_resolution_terminates(constant_calculator):
    result = constant_calculator.integrate("X", 55.4, "He", 1e-320)
    assert result.energy_loss == 0.0
    assert result.steps == 0
    assert result.remaining_thickness == 0.0
    assert not result.ranged_out


def test_constant_stopping_power_closed_form(constant_calculator):
    result = constant_calculator.integrate("X", 1000.0, "He", 5.0)
    assert result.energy_loss == pytest.approx(2.0 * 5.0, rel=1e-4)
    assert result.residual_energy == pytest.approx(1000.0 - result.energy_loss)
    assert result.steps in (100000, 100001)
    assert result.remaining_thickness == pytest.approx(0.0, abs=1e-9)
    assert not result.ranged_out


def test_linear_stopping_power_matches_exponential_solution():
    # S(u) = 1 + 0.02 u  =>  u(x) = (u0 + 50) exp(-0.02 x / m) - 50
    calc = make_calculator([0.0, 100.0], [1.0, 3.0], mass=2.0)
    result = calc.integrate("X", 100.0, "He", 20.0)
    u_exit = 100.0 * math.exp(-0.02 * 20.0 / 2.0) - 50.0
    assert result.energy_loss == pytest.approx(100.0 - 2.0 * u_exit, rel=1e-4)
    assert result.extrapolated_steps == 0


def test_energy_loss_matches_integrate(constant_calculator):
    loss = constant_calculator.energy_loss("X", 50.0, "He", 1.0)
    assert loss == constant_calculator.integrate("X", 50.0, "He", 1.0).energy_loss


def test_loss_non_decreasing_in_thickness():
    calc = make_calculator([0.5, 1.0, 2.0, 4.0], [6.0, 5.0, 3.5, 2.5], mass=4.0, step_fraction=1e-3)
    thicknesses = [0.0, 0.1, 0.5, 1.0, 2.0, 4.0]
    losses = [calc.energy_loss("X", 12.0, "He", t) for t in thicknesses]
    assert all(b >= a for a, b in zip(losses, losses[1:]))


def test_range_out_reported():
    calc = make_calculator([1.0], [2.0], mass=1.0, step_fraction=1e-3)
    result = calc.integrate("X", 10.0, "He", 100.0)
    assert result.ranged_out
    assert 10.0 <= result.energy_loss <= 10.2 + 1e-9
    assert result.residual_energy <= 0.0
    assert result.remaining_thickness == pytest.approx(95.0, abs=0.11)
    assert result.steps < 100


def test_range_out_is_logged(caplog):
    calc = make_calculator([1.0], [2.0], mass=1.0, step_fraction=1e-3)
    with caplog.at_level(logging.INFO, logger="pyeloss.physics.energy_loss"):
        calc.integrate("X", 10.0, "He", 100.0)
    assert any("stopped in He" in r.getMessage() for r in caplog.records)


def test_extrapolated_steps_counted_and_warned(caplog):
    calc = make_calculator([1.0, 2.0], [1.0, 1.0], mass=1.0, step_fraction=1e-2)
    with caplog.at_level(logging.WARNING, logger="pyeloss.physics.energy_loss"):
        result = calc.integrate("X", 10.0, "He", 0.5)
    assert result.extrapolated_steps == result.steps > 0
    assert any("extrapolated" in r.getMessage() for r in caplog.records)


def test_no_warning_inside_table(caplog):
    calc = make_calculator([1.0, 20.0], [1.0, 1.0], mass=1.0, step_fraction=1e-2)
    with caplog.at_level(logging.WARNING, logger="pyeloss.physics.energy_loss"):
        result = calc.integrate("X", 10.0, "He", 0.5)
    assert result.extrapolated_steps == 0
    assert not caplog.records


def test_default_masses_from_registry():
    calc = EnergyLossCalculator(StoppingPowerTableSet())
    assert calc.mass("34Ar") == 33.980270093
    assert calc.step_fraction == STEP_FRACTION


def test_target_alias_accepted(constant_calculator):
    assert constant_calculator.energy_loss("X", 50.0, "helium", 0.0) == 0.0


def test_missing_table_raises(constant_calculator):
    with pytest.raises(KeyError, match="No stopping power table"):
        constant_calculator.energy_loss("X", 50.0, "Butane", 1.0)


def test_missing_mass_raises(constant_calculator):
    with pytest.raises(KeyError, match="No mass registered for projectile '34Ar'"):
        constant_calculator.energy_loss("34Ar", 50.0, "He", 1.0)


@pytest.mark.parametrize("energy, thickness", [
    (0.0, 1.0),
    (-5.0, 1.0),
    (float("nan"), 1.0),
    (10.0, -1.0),
    (10.0, float("inf")),
])
def test_invalid_inputs_rejected(constant_calculator, energy, thickness):
    with pytest.raises(ValueError):
        constant_calculator.energy_loss("X", energy, "He", thickness)


@pytest.mark.parametrize("step_fraction", [0.0, -1e-5, 1.5])
def test_invalid_step_fraction(step_fraction):
    with pytest.raises(ValueError, match="step_fraction"):
        EnergyLossCalculator(StoppingPowerTableSet(), masses={"X": 1.0}, step_fraction=step_fraction)


def test_invalid_mass_rejected():
    with pytest.raises(ValueError, match="finite and positive"):
        EnergyLossCalculator(StoppingPowerTableSet(), masses={"X": 0.0})


def test_absent_lookup_is_fatal():
    empty = SimpleNamespace(interpolator=SimpleNamespace(energy=[], values=[]), energy_range=(0.0, 0.0))
    calc = EnergyLossCalculator({("X", "He"): empty}, masses={"X": 1.0})
    with pytest.raises(RuntimeError, match="Empty stopping power table"):
        calc.energy_loss("X", 10.0, "He", 1.0)


def test_result_ranged_out_property():
    stopped = EnergyLossResult(total_energy=5.0, energy_loss=5.1, residual_energy=-0.1,
                               remaining_thickness=2.0, steps=10)
    passed = EnergyLossResult(total_energy=5.0, energy_loss=1.0, residual_energy=4.0,
                              remaining_thickness=0.0, steps=10)
    assert stopped.ranged_out
    assert not passed.ranged_out


def test_concurrent_calls_share_tables():
    from concurrent.futures import ThreadPoolExecutor

    calc = make_calculator([0.5, 1.0, 2.0, 4.0], [6.0, 5.0, 3.5, 2.5], mass=4.0, step_fraction=1e-3)
    expected = calc.energy_loss("X", 12.0, "He", 1.0)
    with ThreadPoolExecutor(max_workers=4) as executor:
        losses = list(executor.map(lambda _: calc.energy_loss("X", 12.0, "He", 1.0), range(8)))
    assert losses == [expected] * 8
