"""
Abstract interface for multi-resolution histograms.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from pyramid_match.domain.entities.histogram import Bin


class HistogramInterface(ABC):
    """
    Abstract base class for bin trees the pyramid matcher can compare.

    Bins are addressed by integer slots. Child slots must be returned in
    strictly ascending order of the child's last index element.
    """

    @property
    @abstractmethod
    def root_slot(self) -> int:
        """Return the slot of the root bin."""
        pass

    @property
    @abstractmethod
    def num_bins(self) -> int:
        """Return the total number of bins, root included."""
        pass

    @abstractmethod
    def bin_at(self, slot: int) -> "Bin":
        """Return the bin stored at a slot."""
        pass

    @abstractmethod
    def child_slots(self, slot: int) -> Sequence[int]:
        """Return the slots of a bin's children, ascending by selector."""
        pass
