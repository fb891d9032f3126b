"""
Energy-loss chains through a gas-jet target and an ionization chamber.

This subpackage chains single-layer energy-loss calculations across the layers
of a detector setup and scans them over experimental settings.

The typical workflow includes:
- configuration of jet, window and chamber geometry
- computation of the loss in each layer, feeding exit energies forward
- scans over jet areal density and chamber pressure
- visualization of the per-layer losses

Results of :meth:`~pyeloss.chamber.core.DetectorSetup.calculate` have the structure:

.. code-block:: python

    pd.DataFrame([
        {
            "stage": "ic_0",          # jet_in, jet_out, window, ic_0 ... ic_n
            "projectile": "34Ar",
            "material": "Butane",
            "thickness": ...,         # [mg/cm²]
            "density": ...,           # [g/cm³]
            "energy_in": ...,         # [MeV]
            "energy_loss": ...,       # [MeV]
            "energy_out": ...,        # [MeV]
            "ranged_out": False
        },
        ...
    ])

Modules
-------

- :mod:`core`:
  Defines :class:`~pyeloss.chamber.core.DetectorSetupParameters` and
  :class:`~pyeloss.chamber.core.DetectorSetup`.

- :mod:`compute`:
  Implements :meth:`~pyeloss.chamber.core.DetectorSetup.scan` over areal densities and pressures.

- :mod:`plot`:
  Adds :meth:`~pyeloss.chamber.core.DetectorSetup.plot`.

Usage
-----

.. code-block:: python

    from pyeloss.chamber import DetectorSetup, DetectorSetupParameters

    params = DetectorSetupParameters(ic_pressure=15.0, jet_areal_density=1e19)
    setup = DetectorSetup(params, Projectile("34Ar", 55.4), Projectile("34Ar", 55.4), calculator)
    setup.calculate()
    setup.scan([5e18, 1e19], [14.0, 15.0, 16.0])
    setup.plot()
"""

from .core import DetectorSetup, DetectorSetupParameters
from . import compute  # noqa
from . import plot  # noqa

__all__ = ["DetectorSetup", "DetectorSetupParameters"]
