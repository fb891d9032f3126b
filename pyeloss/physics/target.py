"""
Projectiles and target layers of a beamline setup.

This module defines two small immutable value types:

- :class:`Projectile`: a nuclide label with its total kinetic energy (MeV)
- :class:`Target`: a layer of material described by its areal thickness
  (mg/cm²) and density (g/cm³)

Targets are built step by step from physical setup parameters. Each builder
returns a new instance:

- gas jets from an atom areal density and a path length
- gases from pressure and temperature (ideal gas law), then a path length
- foils from a bulk density and a physical thickness

Examples
--------

>>> from pyeloss.physics.target import Target
>>> gas = Target("Butane").with_pressure_temperature(15.0, 300.0).with_distance(2.0)
>>> round(gas.thickness, 4)
0.0932
>>> jet = Target("He").with_areal_density(1e19, 0.15)
>>> round(jet.thickness, 5)
0.06646
"""

from dataclasses import dataclass, replace

from pyeloss.io.data_registry import get_molar_mass, resolve_material

AVOGADRO_CONSTANT = 6.022140857e23  # 1/mol
GAS_CONSTANT = 8.3144598  # J/mol/K
TORR_TO_PASCAL = 133.322


@dataclass(frozen=True)
class Projectile:
    """
    A projectile nuclide and its total kinetic energy.

    :ivar nuclide: Nuclide label (e.g. ``"34Ar"``).
    :ivar energy: Total kinetic energy (MeV).
    """

    nuclide: str
    energy: float

    def with_energy(self, energy: float) -> "Projectile":
        return replace(self, energy=float(energy))


@dataclass(frozen=True)
class Target:
    """
    A layer of target material.

    :ivar material: Canonical material name.
    :ivar thickness: Areal thickness (mg/cm²).
    :ivar density: Density (g/cm³).
    """

    material: str
    thickness: float = 0.0
    density: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "material", resolve_material(self.material))
        if self.thickness < 0:
            raise ValueError(f"Target thickness must be non-negative, got {self.thickness}.")
        if self.density < 0:
            raise ValueError(f"Target density must be non-negative, got {self.density}.")

    @property
    def molar_mass(self) -> float:
        """Molar mass of the material (g/mol)."""
        return get_molar_mass(self.material)

    @property
    def distance(self) -> float:
        """
        Physical thickness of the layer (cm).

        :raises ValueError: If the density has not been set.
        """
        if self.density <= 0:
            raise ValueError(f"Density of {self.material} target is not set; cannot derive its length.")
        return self.thickness / self.density / 1000.0

    def with_density(self, density: float) -> "Target":
        """
        Set the density, keeping the areal thickness.

        :param density: Density (g/cm³).
        :type density: float
        """
        return replace(self, density=float(density))

    def with_areal_density(self, rhoa: float, distance: float) -> "Target":
        """
        Describe a gas jet by its atom areal density along a path.

        :param rhoa: Atom areal density (atoms/cm²).
        :type rhoa: float
        :param distance: Path length through the jet (cm).
        :type distance: float

        :returns: Target with thickness ``rhoa / N_A * 1000 * M`` and the matching density.
        :rtype: Target

        :raises ValueError: If ``distance`` is not positive or ``rhoa`` is negative.
        """
        if distance <= 0:
            raise ValueError(f"Jet path length must be positive, got {distance}.")
        if rhoa < 0:
            raise ValueError(f"Areal density must be non-negative, got {rhoa}.")
        thickness = rhoa / AVOGADRO_CONSTANT * (1000.0 * self.molar_mass)
        density = (thickness / 1000.0) / distance
        return replace(self, thickness=thickness, density=density)

    def with_pressure_temperature(self, pressure: float, temperature: float) -> "Target":
        """
        Set the density of a gas from the ideal gas law.

        :param pressure: Gas pressure (Torr).
        :type pressure: float
        :param temperature: Gas temperature (K).
        :type temperature: float

        :returns: Target with updated density; the areal thickness is unchanged.
        :rtype: Target

        :raises ValueError: If the temperature is not positive or the pressure is negative.
        """
        if temperature <= 0:
            raise ValueError(f"Temperature must be positive, got {temperature}.")
        if pressure < 0:
            raise ValueError(f"Pressure must be non-negative, got {pressure}.")
        density = ((pressure * TORR_TO_PASCAL) * self.molar_mass / GAS_CONSTANT / temperature) / 1e6
        return replace(self, density=density)

    def with_distance(self, distance: float) -> "Target":
        """
        Set the areal thickness from a physical length at the current density.

        :param distance: Length of material crossed (cm).
        :type distance: float

        :raises ValueError: If ``distance`` is negative.
        """
        if distance < 0:
            raise ValueError(f"Distance must be non-negative, got {distance}.")
        return replace(self, thickness=1000.0 * self.density * distance)
