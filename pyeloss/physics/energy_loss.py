"""
Mean energy loss of a projectile crossing a layer of material.

This module defines the :class:`EnergyLossCalculator`, which marches the
specific energy of a projectile through a target of given areal thickness
using fixed-step forward Euler integration over a tabulated stopping power curve:

.. math::

    u_{k+1} = u_k - S(u_k) \\, \\frac{\\Delta x}{m}, \\qquad
    \\Delta x = f \\cdot t

where :math:`u` is the specific energy (MeV/u), :math:`S` the stopping power
(MeV/(mg/cm²)), :math:`m` the projectile mass (u), :math:`t` the areal
thickness (mg/cm²) and :math:`f` the step fraction. The thickness is always
split into the same number of steps, so the relative discretization error is
similar for thin and thick layers.

Integration stops when the thickness is exhausted or the projectile stops
(range-out). Range-out is not an error: :meth:`EnergyLossCalculator.energy_loss`
returns the loss alone, while :meth:`EnergyLossCalculator.integrate` also
reports whether the particle stopped inside the layer.

Examples
--------

>>> from pyeloss.io.table_set import StoppingPowerTableSet
>>> from pyeloss.physics.energy_loss import EnergyLossCalculator
>>> calc = EnergyLossCalculator(StoppingPowerTableSet.from_directory("tables/"))
>>> calc.energy_loss("34Ar", 55.4, "Butane", 1.2)
8.71...
"""

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional

from pyeloss.io.data_registry import get_nuclide_masses
from pyeloss.io.table_set import StoppingPowerTableSet
from pyeloss.utils.interpolation import QueryKind, interpolate

logger = logging.getLogger(__name__)

STEP_FRACTION = 1e-5


@dataclass(frozen=True)
class EnergyLossResult:
    """
    Outcome of one energy-loss integration.

    :ivar total_energy: Kinetic energy entering the layer (MeV).
    :ivar energy_loss: Energy lost in the layer (MeV).
    :ivar residual_energy: Kinetic energy leaving the layer (MeV); may dip slightly
        below zero after range-out.
    :ivar remaining_thickness: Thickness left untraversed when the loop ended (mg/cm²).
    :ivar steps: Number of integration steps taken.
    :ivar extrapolated_steps: Steps whose stopping power came from extrapolation.
    """

    total_energy: float
    energy_loss: float
    residual_energy: float
    remaining_thickness: float
    steps: int
    extrapolated_steps: int = 0

    @property
    def ranged_out(self) -> bool:
        """True if the projectile stopped inside the layer."""
        return self.residual_energy <= 0


class EnergyLossCalculator:
    """
    Energy-loss integrator over a set of stopping power tables.

    Tables and masses are injected and only ever read, so one calculator can
    serve any number of concurrent calls.
    """

    def __init__(self,
                 tables: StoppingPowerTableSet,
                 masses: Optional[Mapping[str, float]] = None,
                 step_fraction: float = STEP_FRACTION) -> None:
        """
        Initialize the calculator.

        :param tables: Stopping power tables keyed by ``(projectile, target)``.
        :type tables: StoppingPowerTableSet
        :param masses: Projectile masses in u. Defaults to the bundled nuclide table.
        :type masses: Mapping[str, float], optional
        :param step_fraction: Fraction of the thickness crossed per integration step.
        :type step_fraction: float

        :raises ValueError: If the step fraction is not in (0, 1] or a mass is not positive.
        """
        if not (0.0 < step_fraction <= 1.0):
            raise ValueError(f"step_fraction must be in (0, 1], got {step_fraction}.")

        self.tables = tables
        self.masses = dict(masses) if masses is not None else get_nuclide_masses()
        self.step_fraction = float(step_fraction)

        bad = {k: m for k, m in self.masses.items() if not (math.isfinite(m) and m > 0)}
        if bad:
            raise ValueError(f"Projectile masses must be finite and positive: {bad}")

    def __repr__(self):
        return (f"<EnergyLossCalculator tables={len(self.tables)}, "
                f"source={getattr(self.tables, 'source_info', None)}, step_fraction={self.step_fraction:g}>")

    def mass(self, projectile: str) -> float:
        """
        Return the mass of a projectile.

        :param projectile: Projectile nuclide label.
        :type projectile: str

        :returns: Mass in u.
        :rtype: float

        :raises KeyError: If the projectile has no registered mass.
        """
        try:
            return self.masses[projectile]
        except KeyError:
            raise KeyError(f"No mass registered for projectile '{projectile}'") from None

    def integrate(self, projectile: str, total_energy: float, target: str,
                  areal_thickness: float) -> EnergyLossResult:
        """
        Integrate the energy loss of a projectile through a target layer.

        :param projectile: Projectile nuclide label (e.g. ``"34Ar"``).
        :type projectile: str
        :param total_energy: Kinetic energy entering the layer (MeV).
        :type total_energy: float
        :param target: Target material name (e.g. ``"Butane"``).
        :type target: str
        :param areal_thickness: Layer thickness (mg/cm²).
        :type areal_thickness: float

        :returns: Loss, untraversed thickness and step bookkeeping.
        :rtype: EnergyLossResult

        :raises KeyError: If the projectile mass or the stopping power table is missing.
        :raises ValueError: If the energy is not positive, the thickness is negative,
                            or either is not finite.
        :raises RuntimeError: If the stopping power table is empty.
        """
        if not math.isfinite(total_energy) or total_energy <= 0:
            raise ValueError(f"total_energy must be finite and positive, got {total_energy}.")
        if not math.isfinite(areal_thickness) or areal_thickness < 0:
            raise ValueError(f"areal_thickness must be finite and non-negative, got {areal_thickness}.")

        mass = self.mass(projectile)
        table = self.tables[projectile, target]
        xs, ys = table.interpolator.energy, table.interpolator.values

        energy_u = total_energy / mass
        rem_thick = areal_thickness
        d_thick = rem_thick * self.step_fraction
        if d_thick <= 0.0:
            # thickness below float resolution of one step: nothing is crossed
            rem_thick = 0.0
        steps = 0
        extrapolated = 0

        while rem_thick > 0.0 and energy_u > 0.0:
            result = interpolate(energy_u, xs, ys)
            if result.kind is QueryKind.ABSENT:
                raise RuntimeError(f"Empty stopping power table for {projectile} in {target}")
            if result.kind is QueryKind.EXTRAPOLATED:
                extrapolated += 1
            energy_u -= result.value * d_thick / mass
            rem_thick -= d_thick
            steps += 1

        outcome = EnergyLossResult(
            total_energy=total_energy,
            energy_loss=total_energy - energy_u * mass if steps else 0.0,
            residual_energy=energy_u * mass if steps else total_energy,
            remaining_thickness=max(rem_thick, 0.0),
            steps=steps,
            extrapolated_steps=extrapolated,
        )

        if extrapolated:
            lo, hi = table.energy_range
            logger.warning(
                f"{projectile} in {target}: {extrapolated}/{steps} steps used stopping powers "
                f"extrapolated outside the table range [{lo:g}, {hi:g}] MeV/u."
            )
        if outcome.ranged_out:
            logger.info(
                f"{projectile} ({total_energy:g} MeV) stopped in {target} with "
                f"{outcome.remaining_thickness:.4g} mg/cm² left of {areal_thickness:.4g} mg/cm²."
            )
        return outcome

    def energy_loss(self, projectile: str, total_energy: float, target: str,
                    areal_thickness: float) -> float:
        """
        Energy lost by a projectile crossing a target layer.

        Range-out is not flagged here; use :meth:`integrate` to tell a full stop
        apart from a partial loss.

        :param projectile: Projectile nuclide label.
        :type projectile: str
        :param total_energy: Kinetic energy entering the layer (MeV).
        :type total_energy: float
        :param target: Target material name.
        :type target: str
        :param areal_thickness: Layer thickness (mg/cm²).
        :type areal_thickness: float

        :returns: Energy lost (MeV).
        :rtype: float
        """
        return self.integrate(projectile, total_energy, target, areal_thickness).energy_loss
