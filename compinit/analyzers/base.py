"""Base classes for analyzer plugins."""

from abc import ABC, abstractmethod
from typing import Iterable

from ..fs import Filesystem
from ..models import Signal, SourceTree


class Analyzer(ABC):
    """Contract for analyzers that emit signals from the scanned source tree."""

    @abstractmethod
    def supports(self, tree: SourceTree) -> bool:
        """Return True when this analyzer should run for the directory."""

    @abstractmethod
    def analyze(self, tree: SourceTree, fs: Filesystem) -> Iterable[Signal]:
        """Produce structured signals used to rank candidate devfiles."""
