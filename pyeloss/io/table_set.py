"""
Management of stopping power tables for several projectile/target pairs.

This module defines the :class:`StoppingPowerTableSet`, a container mapping the
pair ``(projectile, target)`` to a
:class:`~pyeloss.io.stopping_power.StoppingPowerTable`.

Main features
-------------

- Add, remove, or retrieve tables by projectile and target (aliases accepted)
- Batch resampling, filtering, and plotting
- JSON and directory-based I/O

Table sets are the read-only data source of
:class:`~pyeloss.physics.energy_loss.EnergyLossCalculator`.

Examples
--------

>>> from pyeloss.io.table_set import StoppingPowerTableSet
>>> s = StoppingPowerTableSet.from_directory("tables/")
>>> sorted(s.get_targets())
['Butane', 'He', 'Mylar']
>>> s["34Ar", "butane"].key
('34Ar', 'Butane')
"""

import json
import os
from typing import Dict, Iterable, List, Optional, Tuple
import numpy as np
import matplotlib.pyplot as plt

from pyeloss.io.stopping_power import StoppingPowerTable
from pyeloss.io.data_registry import resolve_material

PairKey = Tuple[str, str]


class StoppingPowerTableSet:
    """
    A container for stopping power tables keyed by ``(projectile, target)``.

    Supports serialization, resampling, filtering, and plotting.
    """

    def __init__(self):
        """
        Initialize an empty StoppingPowerTableSet.
        """
        self.tables: Dict[PairKey, StoppingPowerTable] = {}
        self.source_info: Optional[str] = None  # Track origin

    def add(self, table: StoppingPowerTable):
        """
        Add a stopping power table to the set, replacing any table with the same key.

        :param table: Instance of :class:`~pyeloss.io.stopping_power.StoppingPowerTable` to add.
        :type table: pyeloss.io.stopping_power.StoppingPowerTable
        """
        self.tables[table.key] = table

    def remove(self, projectile: str, target: str):
        """
        Remove a table by projectile and target.

        :param projectile: Projectile nuclide label.
        :type projectile: str
        :param target: Target material name or alias.
        :type target: str
        """
        self.tables.pop(self._map_key(projectile, target), None)

    def get(self, projectile: str, target: str) -> Optional[StoppingPowerTable]:
        """
        Retrieve a table by projectile and target.

        :param projectile: Projectile nuclide label.
        :type projectile: str
        :param target: Target material name or alias.
        :type target: str

        :returns: Corresponding table or None.
        :rtype: pyeloss.io.stopping_power.StoppingPowerTable or None
        """
        return self.tables.get(self._map_key(projectile, target))

    def __len__(self):
        return len(self.tables)

    def __getitem__(self, key: PairKey) -> StoppingPowerTable:
        projectile, target = key
        table = self.get(projectile, target)
        if table is None:
            raise KeyError(f"No stopping power table for projectile '{projectile}' in target '{target}'")
        return table

    def __contains__(self, key: PairKey) -> bool:
        projectile, target = key
        return self.get(projectile, target) is not None

    def __iter__(self):
        return iter(self.tables.items())

    def keys(self):
        return self.tables.keys()

    def values(self):
        return self.tables.values()

    def items(self):
        return self.tables.items()

    @staticmethod
    def _map_key(projectile: str, target: str) -> PairKey:
        """
        Normalize a lookup key.

        Known target aliases are mapped to their canonical name; unknown targets
        are returned as-is (and may fail in :meth:`get`).

        :returns: ``(projectile, target)`` pair.
        :rtype: tuple[str, str]
        """
        try:
            target = resolve_material(target)
        except KeyError:
            target = str(target).strip()
        return (str(projectile).strip(), target)

    def to_dict(self) -> Dict[str, dict]:
        """
        Serialize all tables to a dictionary.

        Keys are ``"<projectile>_<target>"`` labels; the pair itself is stored
        in each serialized table.

        :returns: Dictionary of labels to serialized tables.
        :rtype: dict[str, dict]
        """
        return {f"{p}_{t}": table.to_dict() for (p, t), table in self.tables.items()}

    def to_json(self) -> str:
        """
        Serialize the set to a JSON string.

        :returns: JSON-formatted string.
        :rtype: str
        """
        return json.dumps(self.to_dict(), indent=2)

    def save(self, filepath: str):
        """
        Save the table set to a JSON file.

        :param filepath: Output file path.
        :type filepath: str
        """
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_tables(cls, tables: Iterable[StoppingPowerTable]) -> "StoppingPowerTableSet":
        """
        Create a table set from already constructed tables.

        :param tables: Tables to add.
        :type tables: Iterable[StoppingPowerTable]

        :returns: StoppingPowerTableSet instance.
        :rtype: StoppingPowerTableSet
        """
        instance = cls()
        for table in tables:
            instance.add(table)
        instance.source_info = "tables"
        return instance

    @classmethod
    def from_dict(cls, data: Dict[str, dict]) -> "StoppingPowerTableSet":
        """
        Create a table set from a dictionary.

        :param data: Dictionary mapping labels to serialized tables.
        :type data: dict[str, dict]

        :returns: StoppingPowerTableSet instance.
        :rtype: StoppingPowerTableSet

        :raises ValueError: If a serialized table is incomplete or the same pair appears twice.
        """
        instance = cls()
        for name, table_data in data.items():
            table = StoppingPowerTable.from_dict(table_data)
            if table.key in instance.tables:
                raise ValueError(f"Duplicate table for {table.key} in entry '{name}'")
            instance.add(table)
        instance.source_info = "dict"
        return instance

    @classmethod
    def from_json(cls, json_str: str) -> "StoppingPowerTableSet":
        """
        Create a table set from a JSON string.

        :param json_str: JSON-formatted table set string.
        :type json_str: str

        :returns: Deserialized StoppingPowerTableSet.
        :rtype: StoppingPowerTableSet
        """
        data = json.loads(json_str)
        instance = cls.from_dict(data)
        instance.source_info = "json"
        return instance

    @classmethod
    def load(cls, filepath: str) -> "StoppingPowerTableSet":
        """
        Load a table set from a JSON file.

        :param filepath: Path to JSON file.
        :type filepath: str

        :returns: Loaded StoppingPowerTableSet.
        :rtype: StoppingPowerTableSet
        """
        with open(filepath, 'r') as f:
            data = json.load(f)
        instance = cls.from_dict(data)
        instance.source_info = f"loaded:{filepath}"
        return instance

    @classmethod
    def from_directory(cls, directory: str, source_program: Optional[str] = None) -> "StoppingPowerTableSet":
        """
        Load all ``<projectile>_<target>.txt`` stopping power tables from a directory.

        For example ``34Ar_butane.txt`` is loaded as the table for ``("34Ar", "Butane")``.

        :param directory: Path to directory containing .txt files.
        :type directory: str
        :param source_program: Optional program name recorded on every table.
        :type source_program: Optional[str]

        :returns: StoppingPowerTableSet with all tables in the directory.
        :rtype: StoppingPowerTableSet

        :raises RuntimeError: If a file name does not follow the convention or a file cannot be parsed.
        """
        instance = cls()
        for fname in sorted(os.listdir(directory)):
            if not fname.endswith(".txt"):
                continue
            stem = fname[:-len(".txt")]
            projectile, sep, target = stem.partition("_")
            if not sep or not projectile or not target:
                raise RuntimeError(
                    f"Cannot infer projectile and target from '{fname}': expected '<projectile>_<target>.txt'"
                )
            path = os.path.join(directory, fname)
            try:
                table = StoppingPowerTable.from_txt(path, projectile, target, source_program=source_program)
            except (OSError, ValueError) as e:
                raise RuntimeError(f"Failed to load {fname} from {directory}: {e}") from e
            instance.add(table)
        instance.source_info = f"directory:{directory}"
        return instance

    def get_available_pairs(self) -> List[PairKey]:
        """
        Get the list of ``(projectile, target)`` pairs present in the set.

        :returns: List of pairs.
        :rtype: list[tuple[str, str]]
        """
        return list(self.tables.keys())

    def get_projectiles(self) -> List[str]:
        return sorted({p for p, _ in self.tables})

    def get_targets(self) -> List[str]:
        return sorted({t for _, t in self.tables})

    def filter_by_projectiles(self, projectiles: List[str]) -> "StoppingPowerTableSet":
        """
        Create a subset containing only tables for the given projectiles.

        :param projectiles: Projectile nuclide labels.
        :type projectiles: list[str]

        :returns: New StoppingPowerTableSet sharing the selected tables.
        :rtype: StoppingPowerTableSet
        """
        wanted = {str(p).strip() for p in projectiles}
        subset = StoppingPowerTableSet()
        for (p, _), table in self.tables.items():
            if p in wanted:
                subset.add(table)
        subset.source_info = self.source_info
        return subset

    def resample_all(self, new_grid: np.ndarray) -> "StoppingPowerTableSet":
        """
        Resample every table onto the same energy grid.

        :param new_grid: The target energy grid (must be strictly increasing).
        :type new_grid: np.ndarray

        :returns: A new set holding the resampled tables; this set is unchanged.
        :rtype: StoppingPowerTableSet
        """
        resampled = StoppingPowerTableSet()
        for t in self.tables.values():
            resampled.add(t.resample(new_grid))
        resampled.source_info = self.source_info
        return resampled

    def plot(self,
             pairs: Optional[List[PairKey]] = None,
             show: bool = True,
             ax: Optional[plt.Axes] = None
        ):
        """
        Plot stopping power curves for one or more pairs on a single figure.

        :param pairs: List of ``(projectile, target)`` pairs to plot. If None, all are plotted.
        :type pairs: Optional[List[tuple[str, str]]]
        :param show: Whether to call plt.show().
        :type show: bool
        :param ax: Matplotlib Axes object to draw on. If None, a new figure is created.
        :type ax: Optional[matplotlib.axes.Axes]
        """
        pairs_to_plot = pairs if pairs is not None else list(self.tables.keys())

        created_fig = False
        if ax is None:
            _, ax = plt.subplots()
            created_fig = True

        for projectile, target in pairs_to_plot:
            table = self.get(projectile, target)
            if table is not None:
                table.plot(label=f"{table.projectile} in {table.target}", show=False, ax=ax)

        ax.set_xlabel("Energy [MeV/u]")
        ax.set_ylabel("Stopping Power [MeV/(mg/cm²)]")
        ax.set_xscale("log")
        ax.legend()
        ax.grid(True)
        if show and created_fig:
            plt.show()
