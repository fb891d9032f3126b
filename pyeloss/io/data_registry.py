"""
Discovery and loading of bundled constant tables.

This module provides functions to:

- Locate data files shipped in :mod:`pyeloss.data`
- Load the nuclide table (atomic masses of projectiles)
- Load the material table (molar masses, densities and aliases of targets)
- Resolve material names and aliases to their canonical spelling

All file paths are resolved using :mod:`importlib.resources`, with a fallback
to the source tree for local development.
"""

import os
import json
from typing import Dict


def get_data_path(filename: str) -> str:
    """
    Locate a data file bundled with the package.

    Tries first to resolve the file within the installed package.
    Falls back to a local relative path (for development use) if needed.

    :param filename: Name of the file inside :mod:`pyeloss.data`.
    :type filename: str

    :returns: Absolute path to the located file.
    :rtype: str

    :raises FileNotFoundError: If the file cannot be found in either location.
    """
    try:
        from importlib.resources import files
        path = files("pyeloss.data").joinpath(filename)
        if path.is_file():
            return str(path)
    except (ImportError, ModuleNotFoundError, TypeError):
        pass

    local = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data", filename))
    if os.path.exists(local):
        return local

    raise FileNotFoundError(f"Cannot find data file '{filename}'")


def _load_json(filename: str) -> Dict[str, Dict]:
    with open(get_data_path(filename), "r") as f:
        return json.load(f)


def load_nuclide_table() -> Dict[str, Dict]:
    """
    Load the projectile nuclide table.

    Each entry maps a nuclide label (e.g. ``"34Ar"``) to its atomic mass in u,
    atomic number, mass number and display color.

    :returns: Dictionary mapping nuclide labels to their properties.
    :rtype: dict[str, dict]

    :raises FileNotFoundError: If ``nuclides.json`` cannot be found.
    :raises json.JSONDecodeError: If the file content is not valid JSON.
    """
    return _load_json("nuclides.json")


def load_material_table() -> Dict[str, Dict]:
    """
    Load the target material table.

    Each entry maps a canonical material name (e.g. ``"Butane"``) to its molar
    mass in g/mol, an optional reference density in g/cm³ and a list of aliases.

    :returns: Dictionary mapping material names to their properties.
    :rtype: dict[str, dict]
    """
    return _load_json("materials.json")


def get_nuclide_masses() -> Dict[str, float]:
    """
    Build the projectile mass lookup consumed by the energy-loss integrator.

    :returns: Mapping of nuclide label to atomic mass (u).
    :rtype: dict[str, float]
    """
    return {name: float(entry["mass"]) for name, entry in load_nuclide_table().items()}


def resolve_material(name: str) -> str:
    """
    Map a material name or alias to its canonical name.

    Matching is case-insensitive, so ``"butane"``, ``"BUTANE"`` and ``"C4H10"``
    all resolve to ``"Butane"``.

    :param name: Material name or alias.
    :type name: str

    :returns: Canonical material name.
    :rtype: str

    :raises KeyError: If the material is not in the registry.
    """
    lookup = load_material_table()
    if name in lookup:
        return name

    needle = name.strip().lower()
    for canonical, entry in lookup.items():
        if needle == canonical.lower() or needle in entry.get("aliases", []):
            return canonical

    raise KeyError(f"Unknown material: '{name}'. Available: {sorted(lookup)}")


def get_molar_mass(material: str) -> float:
    """
    Return the molar mass of a target material.

    :param material: Material name or alias.
    :type material: str

    :returns: Molar mass in g/mol.
    :rtype: float

    :raises KeyError: If the material is not in the registry.
    """
    return float(load_material_table()[resolve_material(material)]["molar_mass"])
