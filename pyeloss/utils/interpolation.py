"""
Table lookup with linear interpolation and edge extrapolation.

This module defines the lookup used to query stopping power curves:

- :func:`interpolate`: classifies a query against a sorted sample table and
  returns a :class:`QueryResult` tagged as interpolated, extrapolated or absent
- :class:`Interpolator`: a thin holder for one sample table offering scalar
  and vectorised queries

Queries outside the tabulated range are linearly extrapolated from the nearest
edge segment (flat for a single-point table). The routine never mutates the
table and can be shared freely between readers.

Examples
--------

>>> interpolate(150.0, [100.0, 200.0], [3.0, 4.0])
QueryResult(kind=<QueryKind.INTERPOLATED: 'interpolated'>, value=3.5)
>>> interpolate(10.0, [100.0, 200.0], [3.0, 4.0]).to_extrap()
2.1
"""

from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np


class QueryKind(Enum):
    """Classification of a table query."""

    INTERPOLATED = "interpolated"
    EXTRAPOLATED = "extrapolated"
    ABSENT = "absent"


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of a table query.

    :ivar kind: Whether the value was interpolated, extrapolated, or is absent.
    :ivar value: The looked-up value, ``None`` when absent.
    """

    kind: QueryKind
    value: Optional[float] = None

    @classmethod
    def interpolated(cls, value: float) -> "QueryResult":
        return cls(QueryKind.INTERPOLATED, float(value))

    @classmethod
    def extrapolated(cls, value: float) -> "QueryResult":
        return cls(QueryKind.EXTRAPOLATED, float(value))

    @classmethod
    def absent(cls) -> "QueryResult":
        return cls(QueryKind.ABSENT)

    @property
    def is_interp(self) -> bool:
        return self.kind is QueryKind.INTERPOLATED

    @property
    def is_extrap(self) -> bool:
        return self.kind is QueryKind.EXTRAPOLATED

    @property
    def is_value(self) -> bool:
        return self.kind is not QueryKind.ABSENT

    def to_interp(self) -> Optional[float]:
        """
        Return the value only if it was interpolated (or an exact table hit).

        :returns: Interpolated value or None.
        :rtype: float or None
        """
        return self.value if self.is_interp else None

    def to_extrap(self) -> Optional[float]:
        """
        Return the value only if it was extrapolated.

        :returns: Extrapolated value or None.
        :rtype: float or None
        """
        return self.value if self.is_extrap else None

    def to_value(self) -> Optional[float]:
        """
        Return the value regardless of how it was obtained.

        :returns: Value or None if the table was empty.
        :rtype: float or None
        """
        return self.value


def interpolate(x: float, xs: Sequence[float], ys: Sequence[float]) -> QueryResult:
    """
    Look up ``x`` in a sample table sorted by ascending ``xs``.

    An exact hit returns the tabulated value. A query between two samples is
    linearly interpolated; a query below the first or above the last sample is
    linearly extrapolated from the two nearest samples, or held flat when the
    table has a single point.

    :param x: Query coordinate.
    :type x: float
    :param xs: Sample coordinates, strictly ascending.
    :type xs: Sequence[float]
    :param ys: Sample values, same length as ``xs``.
    :type ys: Sequence[float]

    :returns: Tagged query result; ``ABSENT`` for an empty table.
    :rtype: QueryResult

    :raises ValueError: If ``xs`` and ``ys`` differ in length.
    """
    n = len(xs)
    if n != len(ys):
        raise ValueError(f"Table length mismatch: {n} coordinates, {len(ys)} values.")
    if n == 0:
        return QueryResult.absent()

    i = bisect_left(xs, x)

    if i < n and xs[i] == x:
        return QueryResult.interpolated(ys[i])

    if i == 0:
        if n == 1:
            return QueryResult.extrapolated(ys[0])
        slope = (ys[1] - ys[0]) / (xs[1] - xs[0])
        return QueryResult.extrapolated(ys[0] + slope * (x - xs[0]))

    if i == n:
        if n == 1:
            return QueryResult.extrapolated(ys[-1])
        slope = (ys[-1] - ys[-2]) / (xs[-1] - xs[-2])
        return QueryResult.extrapolated(ys[-1] + slope * (x - xs[-1]))

    x0, x1 = xs[i - 1], xs[i]
    y0, y1 = ys[i - 1], ys[i]
    return QueryResult.interpolated(y0 + (y1 - y0) / (x1 - x0) * (x - x0))


class Interpolator:
    """
    Lookup over a single stopping power curve.

    The table is copied once into plain float lists so that repeated scalar
    queries (as issued by the energy-loss integrator) avoid numpy scalar overhead.
    """

    def __init__(self, energy: Sequence[float], values: Sequence[float]):
        """
        Initialize the Interpolator.

        :param energy: Sample coordinates (x-axis), strictly ascending.
        :type energy: Sequence[float]
        :param values: Sample values (y-axis).
        :type values: Sequence[float]

        :raises ValueError: If the two sequences differ in length.
        """
        self.energy = [float(e) for e in np.asarray(energy, dtype=float).ravel()]
        self.values = [float(v) for v in np.asarray(values, dtype=float).ravel()]
        if len(self.energy) != len(self.values):
            raise ValueError(
                f"Table length mismatch: {len(self.energy)} coordinates, {len(self.values)} values."
            )

    def __len__(self):
        return len(self.energy)

    def query(self, x: float) -> QueryResult:
        """
        Classify and evaluate a single query.

        :param x: Query coordinate.
        :type x: float

        :returns: Tagged query result.
        :rtype: QueryResult
        """
        return interpolate(x, self.energy, self.values)

    def interpolate(self, *, energy) -> np.ndarray:
        """
        Evaluate the curve at one or more coordinates.

        Interpolated and extrapolated results are both returned as plain values.

        :param energy: Coordinate(s) at which to evaluate.
        :type energy: float or array-like

        :returns: Array of values, one per input coordinate.
        :rtype: np.ndarray

        :raises ValueError: If the table is empty.
        """
        if not self.energy:
            raise ValueError("Cannot interpolate on an empty table.")
        energy_input = np.atleast_1d(np.asarray(energy, dtype=float))
        return np.array([self.query(float(e)).to_value() for e in energy_input])
