"""
Plotting utilities for detector chains.

This module defines the `plot()` method for the DetectorSetup class: a bar
chart of the energy lost in each segment, with the energy left after each
segment drawn on a secondary axis.
"""

from typing import Optional
import matplotlib.pyplot as plt
import numpy as np

from .core import DetectorSetup


def plot(
    self: DetectorSetup,
    *,
    ax: Optional[plt.Axes] = None,
    show: Optional[bool] = True
):
    """
    Plot the energy loss per segment of the chain.

    :param ax: Matplotlib Axes object to draw on. If None, a new figure is created.
    :type ax: Optional[matplotlib.axes.Axes]
    :param show: If True, displays the plot. Set False when embedding or scripting.
    :type show: Optional[bool]

    :returns: The primary axes and the secondary (residual energy) axes.
    :rtype: tuple[matplotlib.axes.Axes, matplotlib.axes.Axes]
    """
    df = self.calculate()

    created_fig = False
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))
        created_fig = True

    x = np.arange(len(df))
    colors = ["tab:red" if stopped else "tab:blue" for stopped in df["ranged_out"]]
    ax.bar(x, df["energy_loss"], color=colors, alpha=0.6)
    ax.set_xticks(x)
    ax.set_xticklabels(df["stage"], rotation=45, ha="right")
    ax.set_xlabel("Segment")
    ax.set_ylabel("Energy loss [MeV]")
    ax.set_title(
        f"{self.beam.nuclide} → {self.ejectile.nuclide}, P_ic = {self.params.ic_pressure:g} Torr, "
        f"ρ_jet = {self.params.jet_areal_density:.2e} cm⁻²",
        wrap=True
    )
    ax.grid(True, axis="y", linestyle="--", alpha=0.3)

    ax_residual = ax.twinx()
    ax_residual.plot(x, df["energy_out"].clip(lower=0.0), color="black", marker="o", linewidth=1.5)
    ax_residual.set_ylabel("Residual energy [MeV]")
    ax_residual.set_ylim(bottom=0.0)

    if show and created_fig:
        plt.tight_layout()
        plt.show()

    return ax, ax_residual


DetectorSetup.plot = plot
