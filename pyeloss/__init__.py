"""
pyELoss: mean energy loss of charged particles in thin layers of matter.

pyELoss corrects measured particle energies for the material they cross along
a beamline, using tabulated stopping power curves. It supports:

- Stopping power tables per projectile/target pair, loaded from SRIM-style text output
- Linear table lookup with explicit interpolated/extrapolated classification
- Fixed-step integration of energy loss through a layer of given areal thickness
- Target geometry from gas pressure, jet areal density or foil thickness
- Energy-loss chains through a gas-jet target, entrance window and ionization chamber
- Batch scans over experimental settings

Main subpackages
----------------

- :mod:`pyeloss.io`: Loading, validation and serialization of stopping power tables.
- :mod:`pyeloss.data`: Bundled nuclide masses and material constants.
- :mod:`pyeloss.physics`: Energy-loss integrator and target geometry.
- :mod:`pyeloss.chamber`: Detector chains and setting scans.
- :mod:`pyeloss.utils`: Interpolation and parallelism helpers.
"""


from .io import StoppingPowerTable, StoppingPowerTableSet
from .physics import EnergyLossCalculator, EnergyLossResult, Projectile, Target
from .chamber import DetectorSetup, DetectorSetupParameters

__all__ = [
    "StoppingPowerTable",
    "StoppingPowerTableSet",
    "EnergyLossCalculator",
    "EnergyLossResult",
    "Projectile",
    "Target",
    "DetectorSetup",
    "DetectorSetupParameters"
    ]
