from __future__ import annotations

import pytest

from thinslice import SelectionConfig, ThinSliceSample

INCIDENT_BINS = [0.0, 100.0, 200.0, 300.0, 400.0, 500.0]
TRUE_INCIDENT_BINS = [0.0, 250.0, 500.0]


def edges_axis(edges, coarse=None, title=""):
    axis = {"fine": {"title": title, "edges": edges}}
    if coarse is not None:
        axis["coarse"] = {"title": title, "edges": coarse}
    return axis


@pytest.fixture
def selection_configs():
    """One selection channel of each supported dimensionality."""
    return [
        SelectionConfig(
            id=1,
            name="Abs",
            axes=[edges_axis([0, 1, 2, 3, 4, 5], coarse=[0, 2, 5], title="KE")],
        ),
        SelectionConfig(
            id=2,
            name="Cex",
            axes=[
                {
                    "fine": {"title": "KE", "nbins": 10, "min": 0.0, "max": 10.0},
                    "coarse": {"title": "KE", "edges": [0.0, 5.0, 10.0]},
                },
                edges_axis([0.0, 0.5, 1.0], coarse=[0.0, 1.0], title="cos"),
            ],
        ),
        SelectionConfig(
            id=3,
            name="Other",
            axes=[
                edges_axis([0, 1, 2, 3], coarse=[0, 3]),
                edges_axis([0, 1, 2], coarse=[0, 1, 2]),
                edges_axis([0, 2, 4], coarse=[0, 4]),
            ],
        ),
    ]


@pytest.fixture
def sample(selection_configs):
    return ThinSliceSample(
        "Abs",
        2,
        selection_configs,
        INCIDENT_BINS,
        TRUE_INCIDENT_BINS,
        0,
    )


@pytest.fixture
def filled_sample(sample):
    """Sample with entries in every histogram."""
    for value in [0.5, 1.5, 1.5, 4.5, 3.2, -1.0, 7.0]:
        sample.fill_selection_hist(1, value)
    for values in [(0.5, 0.25), (5.5, 0.75), (9.9, 0.1), (2.0, 0.5)]:
        sample.fill_selection_hist(2, values)
    for values in [(0.5, 0.5, 0.5), (2.5, 1.5, 3.0), (1.0, 1.0, 2.0)]:
        sample.fill_selection_hist(3, values)
    sample.fill_incident_hist([50.0, 150.0, 150.0, 450.0, 600.0])
    sample.fill_true_incident_hist([10.0, 260.0])
    sample.add_incident_energies([50.0, 150.0, 350.0])
    sample.add_flux(3.0)
    return sample
