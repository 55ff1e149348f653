#!/usr/bin/env python3
"""
Example usage of thinslice.

This script demonstrates:
1. Building a sample from selection channel configurations
2. Filling the fine histograms from toy events
3. Rebinning into the analysis binning
4. Applying and resetting a fit factor
"""

import logging

import numpy as np

import thinslice as ts
from thinslice import logging as ts_logging

log = logging.getLogger("thinslice.example")


def main():
    """Main example function demonstrating thinslice features."""
    ts_logging.setup()

    selections = [
        {
            "id": 1,
            "name": "Abs",
            "axes": [
                {
                    "fine": {"title": "Reco KE (MeV)", "nbins": 100, "min": 0.0, "max": 1000.0},
                    "coarse": {"title": "Reco KE (MeV)", "edges": [0.0, 400.0, 600.0, 800.0, 1000.0]},
                }
            ],
        },
        {
            "id": 2,
            "name": "Cex",
            "beam_energy_axes": [
                [
                    {
                        "fine": {"title": "Reco KE (MeV)", "nbins": 50, "min": 0.0, "max": 1000.0},
                        "coarse": {"title": "Reco KE (MeV)", "edges": [0.0, 500.0, 1000.0]},
                    },
                    {
                        "fine": {"title": "cos#theta", "nbins": 20, "min": -1.0, "max": 1.0},
                        "coarse": {"title": "cos#theta", "edges": [-1.0, 0.0, 1.0]},
                    },
                ]
            ],
        },
    ]
    sample = ts.ThinSliceSample(
        "PiInel",
        211,
        selections,
        incident_bins=list(np.linspace(0.0, 1000.0, 21)),
        true_incident_bins=list(np.linspace(0.0, 1000.0, 11)),
        beam_energy_bin=0,
        is_signal=True,
        signal_range=(400.0, 600.0),
    )
    log.info("Built %s", sample)

    rng = np.random.default_rng(42)
    for ke, cos in zip(rng.normal(550.0, 120.0, 5000), rng.uniform(-1.0, 1.0, 5000), strict=True):
        sample.add_flux()
        sample.fill_selection_hist(1, ke)
        sample.fill_selection_hist(2, (ke, cos))
        incident = np.arange(ke, 1000.0, 50.0)
        sample.fill_incident_hist(incident)
        sample.fill_true_incident_hist(incident)
        sample.add_incident_energies(incident)

    sample.make_rebinned_hists()
    log.info("Rebinned Abs contents: %s", sample.rebinned_selection_hist(1).values())

    sample.set_factor_and_scale(1.2)
    sample.refill_rebinned_hists()
    log.info("Factor %.2f, nominal flux %.1f", sample.factor, sample.nominal_flux)
    log.info("Rebinned Abs contents: %s", sample.rebinned_selection_hist(1).values())

    sample.reset_factor()
    sample.refill_rebinned_hists()
    log.info("Reset, nominal flux %.1f", sample.nominal_flux)


if __name__ == "__main__":
    main()
