"""Core data models shared by the source analyzers."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class FileMeta:
    """Metadata for an individual source file."""

    path: str
    language: Optional[str]


@dataclass
class SourceTree:
    """Normalized view of the context directory for analyzers."""

    root: str
    files: List[FileMeta]


@dataclass
class Signal:
    """Structured fact emitted by analyzers for devfile detection."""

    name: str
    value: str
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)
