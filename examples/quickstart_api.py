#!/usr/bin/env python3
"""Quickstart example using the high-level decompose/reconstruct API.

This example demonstrates the simplest way to use the package:
- Generate a random N-dimensional image
- Decompose it into isotropic wavelet bands with decompose()
- Rebuild it with reconstruct()
- Report band sizes, energies and the reconstruction error

The high-level API hides all the ECS machinery behind two calls.
"""

from __future__ import annotations

import argparse

import numpy as np

from isowave.api import decompose, get_decomposition_info, reconstruct


def main() -> None:
    parser = argparse.ArgumentParser(description="Quickstart API example")
    parser.add_argument(
        "--shape",
        type=int,
        nargs="+",
        default=[64, 64, 64],
        help="Image shape (default: 64 64 64)",
    )
    parser.add_argument("--levels", type=int, default=2, help="Decomposition levels")
    parser.add_argument("--bands", type=int, default=4, help="High-pass sub-bands per level")
    parser.add_argument(
        "--wavelet",
        default="held",
        choices=["held", "vow", "simoncelli", "shannon"],
        help="Wavelet function (default: held)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    image = rng.random(tuple(args.shape))

    print(f"Decomposing {image.shape} with {args.wavelet}, L={args.levels}, K={args.bands}")
    info = get_decomposition_info(image.shape, args.levels, args.bands)
    bands = decompose(
        image, levels=args.levels, high_pass_sub_bands=args.bands, wavelet=args.wavelet
    )

    for entry, band in zip(info, bands):
        kind = "low-pass" if entry["low_pass"] else f"band {entry['band'] + 1}"
        print(
            f"  output {entry['index']:2d}: level {entry['level']} {kind:9s} "
            f"size={band.shape} energy={np.sum(band**2):.4g}"
        )

    recon = reconstruct(
        bands, levels=args.levels, high_pass_sub_bands=args.bands, wavelet=args.wavelet
    )
    print(f"Max reconstruction error: {np.max(np.abs(recon - image)):.3e}")


if __name__ == "__main__":
    main()
