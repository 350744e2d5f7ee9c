from isowave.eval.bank import (
    compare_filter_sets,
    partition_of_unity_error,
    radial_profile,
)
from isowave.eval.pyramid import (
    band_energies,
    energy_fractions,
    spectral_energy,
)

__all__ = [
    "compare_filter_sets",
    "partition_of_unity_error",
    "radial_profile",
    "band_energies",
    "energy_fractions",
    "spectral_energy",
]
