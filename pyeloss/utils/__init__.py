"""
Utility submodule for pyELoss.

Modules
-------

- :mod:`interpolation`:
  Table lookup returning tagged results (:class:`~pyeloss.utils.interpolation.QueryResult`)
  and the :class:`~pyeloss.utils.interpolation.Interpolator` wrapper used for stopping power curves.

- :mod:`parallel`:
  Defines :func:`~pyeloss.utils.parallel.optimal_worker_count` for sizing process pools
  in batch scans.
"""

from .interpolation import Interpolator, QueryKind, QueryResult, interpolate

__all__ = ["Interpolator", "QueryKind", "QueryResult", "interpolate"]
