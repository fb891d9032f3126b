"""
I/O submodule for pyELoss.

This package loads, manages, and serializes the stopping power tables and
constant lookups consumed by the energy-loss integrator.

Modules
-------

- :mod:`data_registry`:
  Functions for locating bundled data and loading the nuclide mass table and
  the target material table. See :func:`~pyeloss.io.data_registry.get_nuclide_masses`
  and :func:`~pyeloss.io.data_registry.resolve_material`.

- :mod:`stopping_power`:
  Defines the :class:`~pyeloss.io.stopping_power.StoppingPowerTable` for parsing,
  validating, querying and plotting the stopping power curve of one projectile/target pair.

- :mod:`table_set`:
  Provides :class:`~pyeloss.io.table_set.StoppingPowerTableSet`, a container keyed by
  ``(projectile, target)`` with directory and JSON I/O.
"""

from .stopping_power import StoppingPowerTable
from .table_set import StoppingPowerTableSet

__all__ = ["StoppingPowerTable", "StoppingPowerTableSet"]
