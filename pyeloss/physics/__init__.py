"""
Physics models and computational core for pyELoss.

Modules
-------

- :mod:`energy_loss`:
  Implements :class:`~pyeloss.physics.energy_loss.EnergyLossCalculator`, the fixed-step
  integrator of mean energy loss over tabulated stopping powers, and its
  :class:`~pyeloss.physics.energy_loss.EnergyLossResult`.

- :mod:`target`:
  Provides :class:`~pyeloss.physics.target.Projectile` and
  :class:`~pyeloss.physics.target.Target`, converting gas pressure, jet areal density
  and foil thickness into areal thickness and density.
"""

from .energy_loss import STEP_FRACTION, EnergyLossCalculator, EnergyLossResult
from .target import Projectile, Target

__all__ = ["STEP_FRACTION", "EnergyLossCalculator", "EnergyLossResult", "Projectile", "Target"]
