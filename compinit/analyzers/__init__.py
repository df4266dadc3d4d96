"""Source analyzers feeding devfile detection."""

from __future__ import annotations

from typing import Iterable, List

from .base import Analyzer
from .language import LanguageAnalyzer, ProjectNameAnalyzer
from .scanner import SourceScanner
from ..fs import Filesystem
from ..models import Signal, SourceTree


def default_analyzers() -> List[Analyzer]:
    return [LanguageAnalyzer(), ProjectNameAnalyzer()]


def collect_signals(
    fs: Filesystem,
    root: str,
    analyzers: Iterable[Analyzer] | None = None,
    scanner: SourceScanner | None = None,
) -> List[Signal]:
    """Scan ``root`` and run every supporting analyzer over it."""
    tree: SourceTree = (scanner or SourceScanner()).scan(fs, root)
    signals: List[Signal] = []
    for analyzer in analyzers if analyzers is not None else default_analyzers():
        if analyzer.supports(tree):
            signals.extend(analyzer.analyze(tree, fs))
    return signals


__all__ = [
    "Analyzer",
    "SourceScanner",
    "collect_signals",
    "default_analyzers",
]
