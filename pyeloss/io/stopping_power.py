"""
Representation of stopping power data for one projectile/target pair.

This module defines the :class:`StoppingPowerTable`, which stores and validates
a stopping power curve (MeV/(mg/cm²)) as a function of specific energy (MeV/u)
for a given projectile in a given target material.

Main features
-------------

- Parsing from SRIM-style text output or dictionaries
- Tagged lookups (interpolated vs. extrapolated) and resampling
- Plotting

Tables are built once and then shared read-only by every energy-loss calculation.

Examples
--------

>>> from pyeloss.io.stopping_power import StoppingPowerTable
>>> spt = StoppingPowerTable.from_txt("tables/34Ar_butane.txt", "34Ar", "Butane")
>>> spt.key
('34Ar', 'Butane')
>>> spt.query(1.5).is_interp
True
"""

from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt
from typing import Dict, Optional, Tuple, Union
import warnings

from pyeloss.io.data_registry import load_nuclide_table, resolve_material
from pyeloss.utils.interpolation import Interpolator, QueryResult


class StoppingPowerTable:
    """
    Stopping power curve for a projectile in a target material.

    :attr REQUIRED_DICT_KEYS: Required dictionary keys for the serialized representation.
    :attr ENERGY_COLUMN: Index of the specific energy field in text tables.
    :attr STOPPING_POWER_COLUMN: Index of the stopping power field in text tables.
    """

    REQUIRED_DICT_KEYS = ["projectile", "target", "energy", "stopping_power"]
    ENERGY_COLUMN = 2
    STOPPING_POWER_COLUMN = 3

    def __init__(self, projectile: str, target: str, energy: np.ndarray, stopping_power: np.ndarray,
                 source_program: Optional[str] = None):
        """
        Initialize a StoppingPowerTable.

        :param projectile: Projectile nuclide label (e.g. ``"34Ar"``).
        :type projectile: str
        :param target: Target material name; known aliases are canonicalized.
        :type target: str
        :param energy: Specific energy samples in MeV/u, strictly increasing.
        :type energy: np.ndarray
        :param stopping_power: Stopping power samples in MeV/(mg/cm²).
        :type stopping_power: np.ndarray
        :param source_program: Optional name of the program that produced the data.
        :type source_program: Optional[str]

        :raises ValueError: If the arrays are inconsistent (see :meth:`_validate`).
        """
        self.projectile = str(projectile).strip()
        try:
            self.target = resolve_material(target)
        except KeyError:
            # Materials outside the registry are allowed, they only lack geometry data
            self.target = str(target).strip()
        self.energy = np.asarray(energy, dtype=float)
        self.stopping_power = np.asarray(stopping_power, dtype=float)
        self.source_program = source_program

        self._validate()
        self._interpolator = Interpolator(self.energy, self.stopping_power)

    def __repr__(self):
        return (f"<StoppingPowerTable {self.projectile} in {self.target}, "
                f"{len(self.energy)} points, {self.energy[0]:g}–{self.energy[-1]:g} MeV/u>")

    def __len__(self):
        return len(self.energy)

    @property
    def key(self) -> Tuple[str, str]:
        """
        Lookup key of this table in a :class:`~pyeloss.io.table_set.StoppingPowerTableSet`.

        :returns: ``(projectile, target)`` pair.
        :rtype: tuple[str, str]
        """
        return (self.projectile, self.target)

    @property
    def interpolator(self) -> Interpolator:
        return self._interpolator

    @property
    def energy_range(self) -> Tuple[float, float]:
        return float(self.energy[0]), float(self.energy[-1])

    @property
    def color(self) -> Optional[str]:
        entry = load_nuclide_table().get(self.projectile)
        return entry["color"] if entry else None

    def _validate(self):
        """
        Perform internal consistency checks on the input data.

        Validates that:
          - Energy and stopping power arrays are one-dimensional with identical shape.
          - The table holds at least one sample.
          - All values are finite.
          - Energy values are strictly increasing.

        Negative stopping powers are accepted but trigger a warning.

        :raises ValueError: If any of the checks above fail.
        :warns UserWarning: If negative stopping powers are present.
        """
        if self.energy.ndim != 1 or self.energy.shape != self.stopping_power.shape:
            raise ValueError(
                f"Shape mismatch: energy {self.energy.shape}, stopping power {self.stopping_power.shape}."
            )

        if self.energy.size == 0:
            raise ValueError(f"Empty stopping power table for {self.projectile} in {self.target}.")

        if not np.isfinite(self.energy).all() or not np.isfinite(self.stopping_power).all():
            raise ValueError("Energy and stopping power arrays must contain only finite values.")

        if not np.all(np.diff(self.energy) > 0):
            raise ValueError("Energy values must be strictly increasing with no duplicates.")

        if np.any(self.stopping_power < 0):
            warnings.warn(
                f"Negative stopping power values in table for {self.projectile} in {self.target}.",
                UserWarning,
                stacklevel=3
            )

    def query(self, energy: float) -> QueryResult:
        """
        Look up the stopping power at a single specific energy.

        :param energy: Specific energy in MeV/u.
        :type energy: float

        :returns: Tagged result telling whether the value was interpolated or extrapolated.
        :rtype: QueryResult
        """
        return self._interpolator.query(energy)

    def interpolate(self, *, energy) -> np.ndarray:
        """
        Evaluate the stopping power at one or more specific energies.

        :param energy: Specific energies in MeV/u.
        :type energy: float or array-like

        :returns: Stopping powers in MeV/(mg/cm²).
        :rtype: np.ndarray
        """
        return self._interpolator.interpolate(energy=energy)

    def resample(self, new_grid: np.ndarray) -> "StoppingPowerTable":
        """
        Resample the curve onto a new energy grid.

        Points outside the current range are extrapolated from the edge segments.
        The table itself is left untouched.

        :param new_grid: The target energy grid (must be strictly increasing).
        :type new_grid: np.ndarray

        :returns: A new table on ``new_grid``.
        :rtype: StoppingPowerTable

        :raises ValueError: If the new grid is not strictly increasing.
        """
        new_grid = np.atleast_1d(np.asarray(new_grid, dtype=float))
        if not np.all(np.diff(new_grid) > 0):
            raise ValueError("New energy grid must be strictly increasing.")
        return StoppingPowerTable(
            projectile=self.projectile,
            target=self.target,
            energy=new_grid,
            stopping_power=self.interpolate(energy=new_grid),
            source_program=self.source_program
        )

    def to_dict(self) -> Dict:
        """
        Serialize the object to a dictionary.

        :returns: Dictionary containing metadata and the sample table.
        :rtype: dict
        """
        return {
            "projectile": self.projectile,
            "target": self.target,
            "energy": self.energy.tolist(),
            "stopping_power": self.stopping_power.tolist(),
            "source_program": self.source_program
        }

    @staticmethod
    def from_dict(data: Dict) -> "StoppingPowerTable":
        """
        Create a :class:`StoppingPowerTable` instance from a serialized dictionary.

        **Expected dictionary format**::

            {
                "projectile": "34Ar",           # str, projectile nuclide
                "target": "Butane",             # str, target material
                "energy": [...],                # list of float, specific energy (MeV/u)
                "stopping_power": [...],        # list of float, stopping power (MeV/(mg/cm²))
                "source_program": "srim_2013"   # str, optional
            }

        :param data: Dictionary containing serialized table data.
        :type data: dict

        :returns: A new :class:`StoppingPowerTable` instance.
        :rtype: StoppingPowerTable

        :raises ValueError: If required fields are missing.
        """
        missing = [key for key in StoppingPowerTable.REQUIRED_DICT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing required field(s) in dictionary: {', '.join(missing)}")

        return StoppingPowerTable(
            projectile=data["projectile"],
            target=data["target"],
            energy=np.array(data["energy"], dtype=float),
            stopping_power=np.array(data["stopping_power"], dtype=float),
            source_program=data.get("source_program")
        )

    @staticmethod
    def from_txt(filepath: Union[str, Path], projectile: str, target: str,
                 source_program: Optional[str] = None) -> "StoppingPowerTable":
        """
        Create a :class:`StoppingPowerTable` from a whitespace-separated text table.

        The first line is a header and is skipped. Every following non-blank line
        holds whitespace-separated fields; the field at index 2 is the specific
        energy (MeV/u) and the field at index 3 the stopping power (MeV/(mg/cm²)).
        Other fields are ignored.

        *Example*::

            Ion   E[MeV]   E[MeV/u]   dE/dx[MeV/(mg/cm2)]
            34Ar  3.398    0.1000     9.812
            34Ar  6.796    0.2000     11.04

        :param filepath: Path to the input .txt file.
        :type filepath: str or Path
        :param projectile: Projectile nuclide label.
        :type projectile: str
        :param target: Target material name.
        :type target: str
        :param source_program: Optional name of the program that produced the data.
        :type source_program: Optional[str]

        :returns: :class:`StoppingPowerTable` instance parsed from file.
        :rtype: StoppingPowerTable

        :raises ValueError: If a data line has too few fields or non-numeric values.
        """
        filepath = Path(filepath)
        with open(filepath, 'r') as f:
            lines = f.readlines()

        energy = []
        stopping_power = []
        for lineno, line in enumerate(lines[1:], start=2):
            fields = line.split()
            if not fields:
                continue
            if len(fields) <= StoppingPowerTable.STOPPING_POWER_COLUMN:
                raise ValueError(
                    f"{filepath.name}:{lineno}: expected at least "
                    f"{StoppingPowerTable.STOPPING_POWER_COLUMN + 1} fields, got {len(fields)}."
                )
            try:
                energy.append(float(fields[StoppingPowerTable.ENERGY_COLUMN]))
                stopping_power.append(float(fields[StoppingPowerTable.STOPPING_POWER_COLUMN]))
            except ValueError as e:
                raise ValueError(f"{filepath.name}:{lineno}: {e}") from e

        return StoppingPowerTable(
            projectile=projectile,
            target=target,
            energy=np.array(energy),
            stopping_power=np.array(stopping_power),
            source_program=source_program
        )

    def plot(
        self,
        label: Optional[str] = None,
        show: bool = True,
        ax: Optional[plt.Axes] = None
    ):
        """
        Plot stopping power as a function of specific energy.

        :param label: Optional label for the plot legend.
        :type label: Optional[str]
        :param show: Whether to call plt.show().
        :type show: bool
        :param ax: Matplotlib Axes object to draw on. If None, a new figure is created.
        :type ax: Optional[matplotlib.axes.Axes]
        """
        created_fig = False
        if ax is None:
            _, ax = plt.subplots()
            ax.set_title(f'{self.projectile} in {self.target}: Stopping Power vs Energy')
            created_fig = True
        else:
            ax.set_title('Stopping Power vs Energy')

        ax.plot(self.energy, self.stopping_power, label=label or f"{self.projectile} in {self.target}",
                color=self.color, alpha=0.7, linewidth=3)
        ax.set_xscale('log')
        ax.set_xlabel('Energy [MeV/u]')
        ax.set_ylabel('Stopping Power [MeV/(mg/cm²)]')
        ax.grid(True)
        ax.legend()

        if show and created_fig:
            plt.tight_layout()
            plt.show()
