"""
Data resources for pyELoss.

Contents
--------

- ``nuclides.json``:
  Projectile nuclides with atomic mass (u), atomic number, mass number and a
  display color. The atomic mass converts total kinetic energy (MeV) into
  specific energy (MeV/u).

- ``materials.json``:
  Target materials with molar mass (g/mol), an optional reference density
  (g/cm³) and accepted aliases. Used by the target geometry model and to
  canonicalize target names of stopping power tables.

Both files are read through :mod:`pyeloss.io.data_registry`.
"""
