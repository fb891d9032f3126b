"""
Core classes for energy-loss bookkeeping along a detector chain.

This module defines:
- :class:`DetectorSetupParameters`: configuration container for the jet target,
  entrance window and ionization chamber
- :class:`DetectorSetup`: builds the chain of target layers and feeds each
  layer's exit energy into the next one

The chain follows a reaction in a gas-jet target: the beam crosses the jet up
to the reaction point, the ejectile crosses the rest of the jet, the entrance
window, and the gas segments of the ionization chamber.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import List, Tuple
import logging
import pandas as pd
from tabulate import tabulate

from pyeloss.physics.energy_loss import EnergyLossCalculator
from pyeloss.physics.target import Projectile, Target

logger = logging.getLogger(__name__)


@dataclass
class DetectorSetupParameters:
    """
    Configuration container for the detector chain.

    :ivar ic_pressure: Ionization chamber gas pressure (Torr).
    :ivar jet_areal_density: Atom areal density of the gas jet (atoms/cm²).
    :ivar ic_temperature: Ionization chamber gas temperature (K).
    :ivar jet_distance: Path length through the whole jet (cm).
    :ivar reaction_location: Fraction of the jet crossed by the beam before the reaction.
    :ivar jet_material: Jet gas.
    :ivar window_material: Entrance window foil.
    :ivar window_density: Window density (g/cm³).
    :ivar window_distance: Window thickness (cm).
    :ivar ic_gas: Ionization chamber gas.
    :ivar ic_segment_lengths: Lengths of the ionization chamber gas segments (cm).
    """

    @classmethod
    def from_dict(cls, config: dict) -> "DetectorSetupParameters":
        """
        Create a DetectorSetupParameters instance from a dictionary.

        :param config: Dictionary of configuration fields.
        :type config: dict

        :returns: Populated DetectorSetupParameters instance.
        :rtype: DetectorSetupParameters

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        valid_keys = set(cls.__dataclass_fields__.keys())
        extra_keys = set(config.keys()) - valid_keys

        if extra_keys:
            raise ValueError(
                f"Unrecognized keys in DetectorSetupParameters config: {sorted(extra_keys)}"
            )

        config = dict(config)
        if "ic_segment_lengths" in config:
            config["ic_segment_lengths"] = tuple(config["ic_segment_lengths"])
        return cls(**config)

    ic_pressure: float
    jet_areal_density: float
    ic_temperature: float = 300.0

    # --- Gas jet ---
    jet_distance: float = 0.3
    reaction_location: float = 0.5
    jet_material: str = "He"

    # --- Entrance window ---
    window_material: str = "Mylar"
    window_density: float = 1.39
    window_distance: float = 3e-4

    # --- Ionization chamber ---
    ic_gas: str = "Butane"
    ic_segment_lengths: Tuple[float, ...] = field(default=(2.0, 3.66, 3.66, 7.32, 18.3))


class DetectorSetup:
    """
    Chain of target layers crossed by a beam and its reaction ejectile.

    Each segment is computed with the energy left after all previous segments;
    the resulting losses are collected in a DataFrame.
    """

    def __repr__(self):
        return (f"<DetectorSetup beam={self.beam.nuclide}@{self.beam.energy:g} MeV, "
                f"ejectile={self.ejectile.nuclide}@{self.ejectile.energy:g} MeV, "
                f"P_ic={self.params.ic_pressure:g} Torr, rhoa={self.params.jet_areal_density:.3g} cm⁻²>")

    def __init__(self, parameters: DetectorSetupParameters, beam: Projectile, ejectile: Projectile,
                 calculator: EnergyLossCalculator):
        """
        Initialize a DetectorSetup.

        :param parameters: Geometry and gas settings.
        :type parameters: DetectorSetupParameters
        :param beam: Incoming projectile, crossing the jet up to the reaction point.
        :type beam: Projectile
        :param ejectile: Reaction product, crossing the rest of the chain.
        :type ejectile: Projectile
        :param calculator: Energy-loss integrator with tables for every projectile/material pair used.
        :type calculator: EnergyLossCalculator

        :raises ValueError: If parameters are physically meaningless.
        """
        self.params = replace(parameters)
        self.beam = beam
        self.ejectile = ejectile
        self.calculator = calculator
        self._validate_parameters()

        self.jet_targets_in: List[Target] = []
        self.jet_targets_out: List[Target] = []
        self.window_targets: List[Target] = [
            Target(self.params.window_material)
            .with_density(self.params.window_density)
            .with_distance(self.params.window_distance)
        ]
        self.ic_targets: List[Target] = [
            Target(self.params.ic_gas)
            .with_pressure_temperature(self.params.ic_pressure, self.params.ic_temperature)
            .with_distance(length)
            for length in self.params.ic_segment_lengths
        ]
        self.set_jet_areal_density(self.params.jet_areal_density)

    def _validate_parameters(self):
        """
        Perform consistency checks on DetectorSetupParameters.

        :raises ValueError: If a length, density or temperature is not positive,
                            the reaction point lies outside the jet, or a pressure
                            or areal density is negative.
        """
        p = self.params
        if p.jet_distance <= 0:
            raise ValueError(f"jet_distance must be positive, got {p.jet_distance}.")
        if not (0.0 < p.reaction_location < 1.0):
            raise ValueError(f"reaction_location must lie strictly inside (0, 1), got {p.reaction_location}.")
        if p.ic_temperature <= 0:
            raise ValueError(f"ic_temperature must be positive, got {p.ic_temperature}.")
        if p.window_density <= 0:
            raise ValueError(f"window_density must be positive, got {p.window_density}.")
        if p.ic_pressure < 0 or p.jet_areal_density < 0:
            raise ValueError("ic_pressure and jet_areal_density must be non-negative.")
        if any(length < 0 for length in p.ic_segment_lengths):
            raise ValueError(f"ic_segment_lengths must be non-negative, got {p.ic_segment_lengths}.")

    def set_jet_areal_density(self, rhoa: float):
        """
        Rebuild the jet layers for a new atom areal density.

        :param rhoa: Atom areal density (atoms/cm²).
        :type rhoa: float
        """
        p = self.params
        jet = Target(p.jet_material)
        self.jet_targets_in = [jet.with_areal_density(rhoa, p.reaction_location * p.jet_distance)]
        self.jet_targets_out = [jet.with_areal_density(rhoa, (1.0 - p.reaction_location) * p.jet_distance)]
        p.jet_areal_density = rhoa

    def set_ic_pressure(self, ic_pressure: float):
        """
        Rebuild the ionization chamber layers for a new gas pressure.

        Segment lengths are preserved; only density and areal thickness change.

        :param ic_pressure: Gas pressure (Torr).
        :type ic_pressure: float
        """
        if ic_pressure < 0:
            raise ValueError(f"ic_pressure must be non-negative, got {ic_pressure}.")
        self.ic_targets = [
            t.with_pressure_temperature(ic_pressure, self.params.ic_temperature).with_distance(length)
            for t, length in zip(self.ic_targets, self.params.ic_segment_lengths)
        ]
        self.params.ic_pressure = ic_pressure

    def segments(self) -> List[Tuple[str, Projectile, Target]]:
        """
        List the layers of the chain in crossing order.

        :returns: ``(stage, projectile, target)`` triples.
        :rtype: list[tuple[str, Projectile, Target]]
        """
        chain = [("jet_in", self.beam, t) for t in self.jet_targets_in]
        chain += [("jet_out", self.ejectile, t) for t in self.jet_targets_out]
        chain += [("window", self.ejectile, t) for t in self.window_targets]
        chain += [(f"ic_{i}", self.ejectile, t) for i, t in enumerate(self.ic_targets)]
        return chain

    def calculate(self) -> pd.DataFrame:
        """
        Compute the energy loss in every segment of the chain.

        The energy entering a segment is the nominal energy of the particle
        crossing it minus all losses accumulated upstream. Once that energy is
        no longer positive the particle has stopped and later segments record
        no loss.

        :returns: One row per segment with columns ``stage``, ``projectile``, ``material``,
                  ``thickness``, ``density``, ``energy_in``, ``energy_loss``, ``energy_out``
                  and ``ranged_out``.
        :rtype: pandas.DataFrame
        """
        rows = []
        e_diff = 0.0
        for stage, projectile, target in self.segments():
            energy_in = projectile.energy - e_diff
            if energy_in <= 0:
                loss, energy_out, ranged_out = 0.0, energy_in, True
            else:
                result = self.calculator.integrate(projectile.nuclide, energy_in, target.material, target.thickness)
                loss, energy_out, ranged_out = result.energy_loss, result.residual_energy, result.ranged_out
                if ranged_out:
                    logger.info(f"{projectile.nuclide} stopped in segment '{stage}' ({target.material}).")
            e_diff += loss
            rows.append({
                "stage": stage,
                "projectile": projectile.nuclide,
                "material": target.material,
                "thickness": target.thickness,
                "density": target.density,
                "energy_in": energy_in,
                "energy_loss": loss,
                "energy_out": energy_out,
                "ranged_out": ranged_out,
            })
        return pd.DataFrame(rows)

    def energy_losses(self) -> List[float]:
        """
        Energy lost in each segment, in crossing order (MeV).

        :returns: List of losses.
        :rtype: list[float]
        """
        return self.calculate()["energy_loss"].tolist()

    def summary(self, verbose: bool = False):
        """
        Print a summary of the current configuration.

        :param verbose: If True, also list every target layer.
        :type verbose: bool
        """
        param_dict = asdict(self.params)
        main_parameters = [
            ("Beam", f"{self.beam.nuclide} @ {self.beam.energy:g} MeV"),
            ("Ejectile", f"{self.ejectile.nuclide} @ {self.ejectile.energy:g} MeV"),
            ("P_ic [Torr]", param_dict["ic_pressure"]),
            ("T_ic [K]", param_dict["ic_temperature"]),
            ("ρ_jet [atoms/cm²]", f"{param_dict['jet_areal_density']:.3e}"),
            ("Reaction location", param_dict["reaction_location"]),
        ]

        print("\nDetector Setup Configuration")
        print(f"\nStopping power source: {getattr(self.calculator.tables, 'source_info', None)}")
        print(tabulate(main_parameters, headers=["Parameter", "Value"], tablefmt="fancy_grid"))

        if verbose:
            layers = [
                (stage, projectile.nuclide, t.material, f"{t.thickness:.4g}", f"{t.density:.4g}")
                for stage, projectile, t in self.segments()
            ]
            print()
            print(tabulate(layers, headers=["Stage", "Projectile", "Material", "Thickness [mg/cm²]",
                                            "Density [g/cm³]"], tablefmt="fancy_grid"))
