"""
Tests for histograms module.

Test the Dimension tag, ChannelHist fill/scale and the rebinning routines.
"""

from __future__ import annotations

import logging

import hist
import numpy as np
import pytest

from thinslice.axes import AxisBinnings
from thinslice.exceptions import InvalidDimension
from thinslice.histograms import (
    ChannelHist,
    Dimension,
    as_values,
    flow_index_map,
    make_hist,
    rebin,
    rebin_1d,
    rebin_2d,
    rebin_3d,
)


def variable(*edges):
    return hist.axis.Variable(edges)


class TestDimension:
    """Test the dimension tag."""

    @pytest.mark.parametrize("ndim", [1, 2, 3])
    def test_supported(self, ndim):
        assert Dimension.from_ndim(ndim) == ndim

    @pytest.mark.parametrize("ndim", [0, 4, -1])
    def test_unsupported(self, ndim):
        with pytest.raises(InvalidDimension, match=f"got {ndim}") as excinfo:
            Dimension.from_ndim(ndim)
        assert excinfo.value.ndim == ndim


class TestAsValues:
    """Test normalization of fill arguments."""

    def test_scalar(self):
        assert as_values(2) == (2.0,)
        assert as_values(np.float64(1.5)) == (1.5,)

    def test_zero_dimensional_array(self):
        assert as_values(np.array(0.5)) == (0.5,)

    def test_sequence(self):
        assert as_values([1, 2, 3]) == (1.0, 2.0, 3.0)
        assert as_values(np.array([0.5, 0.25])) == (0.5, 0.25)

    @pytest.mark.parametrize("values", [[], [1.0, 2.0, 3.0, 4.0]])
    def test_bad_length(self, values):
        with pytest.raises(InvalidDimension):
            as_values(values)


class TestChannelHist:
    """Test ChannelHist."""

    def test_from_axes(self):
        axes = AxisBinnings([{"edges": [0.0, 1.0, 2.0]}, {"edges": [0.0, 1.0]}])
        channel = ChannelHist.from_axes(axes, name="sample_Abs_Cex")
        assert channel.dimension == Dimension.TWO_D
        assert channel.name == "sample_Abs_Cex"
        assert channel.hist.ndim == 2

    def test_from_too_many_axes(self):
        axes = AxisBinnings([{"edges": [0.0, 1.0]}] * 4)
        with pytest.raises(InvalidDimension, match="got 4"):
            ChannelHist.from_axes(axes)

    def test_fill_wrong_number_of_values(self):
        channel = ChannelHist(make_hist([variable(0.0, 1.0, 2.0)]))
        with pytest.raises(InvalidDimension, match="has 1 axes, got 2 values"):
            channel.fill((0.5, 0.5))

    def test_fill_and_scale(self):
        channel = ChannelHist(make_hist([variable(0.0, 1.0, 2.0)]))
        channel.fill((0.5,))
        channel.fill((0.5,))
        channel.fill((1.5,))
        channel.scale(3.0)
        view = channel.hist.view()
        assert view["value"] == pytest.approx([6.0, 3.0])
        assert view["variance"] == pytest.approx([18.0, 9.0])
        assert channel.sum() == pytest.approx(9.0)

    def test_fill_many_requires_1d(self):
        channel = ChannelHist(make_hist([variable(0.0, 1.0), variable(0.0, 1.0)]))
        with pytest.raises(InvalidDimension):
            channel.fill_many([0.5, 0.5])

    def test_copy_is_independent(self):
        channel = ChannelHist(make_hist([variable(0.0, 1.0)]))
        copied = channel.copy()
        copied.fill(0.5)
        assert channel.sum() == 0.0

    def test_reset(self):
        channel = ChannelHist(make_hist([variable(0.0, 1.0)]))
        channel.fill_many([0.2, 0.4])
        channel.reset()
        assert channel.sum() == 0.0


class TestFlowIndexMap:
    """Test mapping of fine bins onto coarse bins."""

    def test_centers(self):
        fine = variable(0, 1, 2, 3, 4, 5)
        coarse = variable(0, 2, 5)
        assert list(flow_index_map(fine, coarse)) == [0, 1, 1, 2, 2, 2, 3]

    def test_center_on_coarse_boundary_goes_up(self):
        """A center exactly on a coarse edge belongs to the bin above it."""
        fine = variable(0.0, 2.0, 4.0)
        coarse = variable(0.0, 1.0, 3.0, 4.0)
        # centers 1.0 and 3.0 fall on coarse edges
        assert list(flow_index_map(fine, coarse)) == [0, 2, 3, 4]

    def test_fine_range_wider_than_coarse(self):
        fine = variable(-2, -1, 0, 1, 2, 3)
        coarse = variable(0, 2)
        assert list(flow_index_map(fine, coarse)) == [0, 0, 0, 1, 1, 2, 2]


class TestRebin:
    """Test the 1D, 2D and 3D rebinning routines."""

    def test_rebin_1d(self):
        fine = make_hist([variable(0, 1, 2, 3, 4, 5)])
        fine.fill([0.5, 1.5, 1.5, 4.5, -3.0], weight=2.0)
        coarse = make_hist([variable(0, 2, 5)])
        rebin_1d(fine, coarse)
        assert coarse.view()["value"] == pytest.approx([6.0, 2.0])
        assert coarse.view()["variance"] == pytest.approx([12.0, 4.0])
        assert coarse.view(flow=True)["value"][0] == pytest.approx(2.0)
        assert coarse.sum(flow=True).value == pytest.approx(fine.sum(flow=True).value)

    def test_rebin_2d(self):
        fine = make_hist([variable(0, 1, 2, 3, 4), variable(0, 1, 2)])
        fine.fill([0.5, 1.5, 3.5, 2.5, 5.0], [0.5, 1.5, 0.5, 1.5, 0.5])
        coarse = make_hist([variable(0, 2, 4), variable(0, 2)])
        rebin_2d(fine, coarse)
        assert coarse.view()["value"] == pytest.approx([[2.0], [2.0]])
        assert coarse.sum(flow=True).value == pytest.approx(5.0)

    def test_rebin_3d(self):
        fine = make_hist(
            [variable(0, 1, 2), variable(0, 1, 2), variable(0, 1, 2, 3)]
        )
        fine.fill([0.5, 1.5, 1.5], [0.5, 0.5, 1.5], [0.5, 2.5, 1.5])
        coarse = make_hist([variable(0, 2), variable(0, 1, 2), variable(0, 3)])
        rebin_3d(fine, coarse)
        assert coarse.view()["value"][:, :, 0] == pytest.approx([[2.0, 1.0]])
        assert coarse.sum(flow=True).value == pytest.approx(3.0)

    def test_rebin_replaces_previous_contents(self):
        fine = ChannelHist(make_hist([variable(0, 1, 2)], name="fine"))
        coarse = ChannelHist(make_hist([variable(0, 2)], name="coarse"))
        fine.fill_many([0.5, 1.5])
        rebin(fine, coarse)
        rebin(fine, coarse)
        assert coarse.sum() == pytest.approx(2.0)

    def test_rebin_dimension_mismatch(self):
        fine = ChannelHist(make_hist([variable(0, 1, 2)], name="fine"))
        coarse = ChannelHist(
            make_hist([variable(0, 2), variable(0, 2)], name="coarse")
        )
        with pytest.raises(InvalidDimension, match="Cannot rebin 1-D histogram 'fine'"):
            rebin(fine, coarse)

    def test_rebin_skips_debug_sums_when_debug_disabled(self, caplog, monkeypatch):
        caplog.set_level(logging.INFO, logger="thinslice.histograms")

        def fail(self):
            msg = "sum computed with debug logging disabled"
            raise AssertionError(msg)

        monkeypatch.setattr(ChannelHist, "sum", fail)
        fine = ChannelHist(make_hist([variable(0, 1, 2)], name="fine"))
        coarse = ChannelHist(make_hist([variable(0, 2)], name="coarse"))
        fine.fill_many([0.5, 1.5])
        rebin(fine, coarse)
        assert coarse.hist.sum().value == pytest.approx(2.0)

    def test_rebin_debug_sums(self, caplog, monkeypatch):
        caplog.set_level(logging.DEBUG, logger="thinslice.histograms")
        calls = []
        original = ChannelHist.sum

        def counting(self):
            calls.append(self.name)
            return original(self)

        monkeypatch.setattr(ChannelHist, "sum", counting)
        fine = ChannelHist(make_hist([variable(0, 1, 2)], name="fine"))
        coarse = ChannelHist(make_hist([variable(0, 2)], name="coarse"))
        rebin(fine, coarse)
        assert calls == ["fine", "coarse"]
