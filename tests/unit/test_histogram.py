"""Unit tests for the arena-backed histogram."""

import numpy as np
import pytest

from pyramid_match.domain.entities import Bin, Histogram
from pyramid_match.domain.interfaces import HistogramInterface
from pyramid_match.utils.exceptions import (
    DuplicateBinError,
    InvalidBinError,
    MissingParentBinError,
    ValidationError,
)


class TestHistogramConstruction:
    """Building histograms bin by bin."""

    def test_new_histogram_has_root(self):
        """A fresh histogram holds only its root at slot 0."""
        hist = Histogram(root_count=7, root_size=4.0)

        assert isinstance(hist, HistogramInterface)
        assert hist.num_bins == 1
        assert len(hist) == 1
        assert hist.root_slot == 0
        assert hist.root.index == ()
        assert hist.root.count == 7.0
        assert hist.root.size == 4.0
        assert hist.root.is_leaf()

    def test_add_bin_links_to_parent(self):
        """Added bins become children of their parent path."""
        hist = Histogram(root_count=3)
        child = hist.add_bin((2,), count=3, size=1.0)
        grandchild = hist.add_bin((2, 0), count=1, size=0.5)

        assert isinstance(child, Bin)
        assert child.depth == 1
        assert grandchild.depth == 2
        assert hist.child_slots(hist.root_slot) == [child.slot]
        assert hist.child_slots(child.slot) == [grandchild.slot]
        assert hist.bin_at(grandchild.slot) is grandchild
        assert hist.num_bins == 3

    def test_children_sorted_by_selector(self):
        """Children stay in ascending selector order whatever the insertion order."""
        hist = Histogram(root_count=5)
        for selector in (7, 0, 3, 9, 1):
            hist.add_bin((selector,), count=1, size=1.0)

        selectors = [hist.bin_at(slot).index[-1] for slot in hist.child_slots(hist.root_slot)]

        assert selectors == [0, 1, 3, 7, 9]

    def test_numpy_integer_selectors(self):
        """Numpy integers are accepted as selectors."""
        hist = Histogram(root_count=1)
        added = hist.add_bin(np.array([3], dtype=np.int64), count=1, size=1.0)

        assert added.index == (3,)
        assert all(type(element) is int for element in added.index)

    def test_from_bins_any_order(self):
        """from_bins inserts parents before children regardless of input order."""
        hist = Histogram.from_bins(
            [((1, 0), 2, 0.5), ((1,), 2, 1.0), ((), 5, 2.0), ((0,), 3, 1.0)]
        )

        assert hist.num_bins == 4
        assert hist.root.count == 5.0
        assert hist.root.size == 2.0
        assert hist.find((1, 0)).count == 2.0


class TestHistogramValidation:
    """Rejected inputs."""

    def test_missing_parent(self):
        """A bin cannot be added below a missing parent."""
        hist = Histogram()

        with pytest.raises(MissingParentBinError) as exc_info:
            hist.add_bin((0, 1), count=1, size=1.0)

        assert exc_info.value.context["parent_path"] == (0,)

    def test_duplicate_path(self):
        """The same path cannot be added twice."""
        hist = Histogram(root_count=3)
        hist.add_bin((0,), count=1, size=1.0)

        with pytest.raises(DuplicateBinError):
            hist.add_bin([0], count=2, size=1.0)

    def test_empty_path(self):
        """The root cannot be re-added."""
        with pytest.raises(InvalidBinError):
            Histogram().add_bin((), count=1, size=1.0)

    @pytest.mark.parametrize("count, size", [(-1, 1.0), (1, -0.5), (float("nan"), 1.0), (1, float("inf"))])
    def test_invalid_quantities(self, count, size):
        """Counts and sizes must be finite and non-negative."""
        with pytest.raises(InvalidBinError):
            Histogram().add_bin((0,), count=count, size=size)

    def test_invalid_root_quantities(self):
        """Root values are validated too."""
        with pytest.raises(InvalidBinError):
            Histogram(root_count=-3)

    def test_non_integer_selector(self):
        """Selectors must be integers."""
        with pytest.raises(InvalidBinError):
            Histogram().add_bin((0.5,), count=1, size=1.0)

    def test_validation_errors_share_base(self):
        """All histogram input errors derive from ValidationError."""
        hist = Histogram()
        with pytest.raises(ValidationError):
            hist.add_bin((4, 4), count=1, size=1.0)

    def test_child_heavier_than_parent(self):
        """A child cannot hold more points than its parent."""
        with pytest.raises(InvalidBinError) as exc_info:
            Histogram.from_bins([((0,), 10, 0.0)], root_count=1, root_size=100.0)

        assert exc_info.value.context["path"] == (0,)
        assert "parent=1.0" in exc_info.value.context["reason"]

    def test_siblings_heavier_than_parent(self):
        """Siblings together cannot outweigh their parent."""
        hist = Histogram(root_count=5, root_size=2.0)
        hist.add_bin((0,), count=3, size=1.0)
        hist.add_bin((1,), count=2, size=1.0)

        with pytest.raises(InvalidBinError):
            hist.add_bin((2,), count=1, size=1.0)

        assert hist.num_bins == 3
        assert hist.find((2,)) is None

    def test_rejected_child_leaves_totals_unchanged(self):
        """A rejected bin does not use up its parent's count."""
        hist = Histogram(root_count=4, root_size=2.0)
        hist.add_bin((0,), count=4, size=1.0)

        with pytest.raises(InvalidBinError):
            hist.add_bin((0, 0), count=5, size=0.5)
        hist.add_bin((0, 0), count=4, size=0.5)

        assert hist.find((0, 0)).count == 4.0

    def test_fractional_counts_summing_to_parent(self):
        """Float rounding in child sums does not reject a consistent tree."""
        hist = Histogram(root_count=0.3, root_size=1.0)
        hist.add_bin((0,), count=0.1, size=0.5)
        hist.add_bin((1,), count=0.2, size=0.5)

        assert hist.num_bins == 3

    def test_duplicate_root_entry(self):
        """from_bins rejects a second entry for the root."""
        with pytest.raises(DuplicateBinError) as exc_info:
            Histogram.from_bins([((), 5, 2.0), ((0,), 1, 1.0), ((), 6, 2.0)])

        assert exc_info.value.context["path"] == ()


class TestHistogramLookup:
    """Lookup and iteration."""

    @pytest.fixture
    def hist(self) -> Histogram:
        return Histogram.from_bins(
            [((0,), 3, 1.0), ((2,), 2, 1.0), ((0, 1), 2, 0.5), ((0, 0), 1, 0.5)],
            root_count=5, root_size=2.0,
        )

    def test_find(self, hist):
        """find returns bins by path and None when absent."""
        assert hist.find((0, 1)).count == 2.0
        assert hist.find((1,)) is None
        assert hist.find(()) is hist.root

    def test_contains(self, hist):
        """Membership tests accept tuples and lists of selectors."""
        assert (0, 0) in hist
        assert [2] in hist
        assert (2, 0) not in hist
        assert "0" not in hist

    def test_preorder_iteration(self, hist):
        """Iteration is pre-order with ascending selectors."""
        paths = [b.index for b in hist]

        assert paths == [(), (0,), (0, 0), (0, 1), (2,)]

    def test_repr(self, hist):
        """repr mentions the bin count."""
        assert "num_bins=5" in repr(hist)
