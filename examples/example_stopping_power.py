import sys
import numpy as np
import matplotlib.pyplot as plt
from pyeloss.io.table_set import StoppingPowerTableSet

# Directory of SRIM-style tables named <projectile>_<target>.txt
directory = sys.argv[1] if len(sys.argv) > 1 else "tables"
table_set = StoppingPowerTableSet.from_directory(directory, source_program="srim")
print(f"Loaded {len(table_set)} tables from {table_set.source_info}")

spt = table_set["34Ar", "Butane"]

# Query inside and beyond the tabulated range
lo, hi = spt.energy_range
energy_query = np.array([lo / 2, np.sqrt(lo * hi), hi * 2])
for e in energy_query:
    result = spt.query(e)
    tag = "interpolated" if result.is_interp else "extrapolated"
    print(f"E = {e:.4g} MeV/u -> S = {result.to_value():.4f} MeV/(mg/cm²) ({tag})")

# Plot the curve with the queried points
spt.plot(show=False)
plt.scatter(energy_query, spt.interpolate(energy=energy_query),
            facecolors='none', edgecolors='black', s=80, label="Queried points")
plt.legend()
plt.tight_layout()
plt.show()

# All curves on one figure
table_set.plot()
