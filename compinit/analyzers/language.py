"""Language and framework detection."""

from __future__ import annotations

import os
from collections import Counter
from typing import Dict, Iterable, List

from .base import Analyzer
from .utils import (
    detect_java_frameworks,
    detect_node_frameworks,
    detect_python_frameworks,
    load_go_module,
    load_java_dependencies,
    load_node_dependencies,
    load_package_json,
    load_pom_artifact_id,
    load_pyproject,
    load_python_dependencies,
)
from ..fs import Filesystem
from ..models import Signal, SourceTree

_DESCRIPTOR_LANGUAGES: Dict[str, str] = {
    "package.json": "JavaScript",
    "requirements.txt": "Python",
    "pyproject.toml": "Python",
    "Pipfile": "Python",
    "pom.xml": "Java",
    "build.gradle": "Java",
    "go.mod": "Go",
}


class LanguageAnalyzer(Analyzer):
    """Detects the dominant language and the frameworks in use."""

    def supports(self, tree: SourceTree) -> bool:
        return bool(tree.files)

    def analyze(self, tree: SourceTree, fs: Filesystem) -> Iterable[Signal]:
        languages: List[str] = [
            file.language for file in tree.files if file.language is not None
        ]
        if not languages:
            # Build descriptors still identify the stack of a project without sources yet.
            languages = [
                _DESCRIPTOR_LANGUAGES[file.path]
                for file in tree.files
                if file.path in _DESCRIPTOR_LANGUAGES
            ]
        if not languages:
            return []

        counts = Counter(languages)
        # most_common keeps insertion order on ties; sort for a stable primary.
        ordered = [language for language, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]
        primary = ordered[0]

        frameworks = self._detect_frameworks(fs, tree.root)

        signals: List[Signal] = [
            Signal(
                name="language.primary",
                value=primary,
                source="language",
                metadata={"counts": dict(counts)},
            ),
            Signal(
                name="language.all",
                value=", ".join(ordered),
                source="language",
                metadata={"languages": ordered, "counts": dict(counts)},
            ),
        ]

        if frameworks:
            for language, items in frameworks.items():
                signals.append(
                    Signal(
                        name=f"language.frameworks.{language.lower().replace(' ', '_')}",
                        value=", ".join(items),
                        source="language",
                        metadata={"language": language, "frameworks": items},
                    )
                )
            signals.append(
                Signal(
                    name="language.frameworks",
                    value=", ".join(
                        f"{lang}: {', '.join(items)}" for lang, items in frameworks.items()
                    ),
                    source="language",
                    metadata={"frameworks": frameworks},
                )
            )

        return signals

    def _detect_frameworks(self, fs: Filesystem, root: str) -> Dict[str, List[str]]:
        frameworks: Dict[str, List[str]] = {}

        python_frameworks = detect_python_frameworks(load_python_dependencies(fs, root))
        if python_frameworks:
            frameworks["Python"] = python_frameworks

        if fs.exists(os.path.join(root, "package.json")):
            node_frameworks = detect_node_frameworks(load_node_dependencies(fs, root))
            frameworks["JavaScript"] = ["Node.js", *node_frameworks]

        java_frameworks = detect_java_frameworks(load_java_dependencies(fs, root))
        if java_frameworks:
            frameworks["Java"] = java_frameworks

        return frameworks


class ProjectNameAnalyzer(Analyzer):
    """Reads the project name declared in build descriptors."""

    def supports(self, tree: SourceTree) -> bool:
        return bool(tree.files)

    def analyze(self, tree: SourceTree, fs: Filesystem) -> Iterable[Signal]:
        root = tree.root
        candidates = (
            ("package.json", _package_json_name(fs, root)),
            ("pyproject.toml", _pyproject_name(fs, root)),
            ("pom.xml", load_pom_artifact_id(fs, root)),
            ("go.mod", _go_module_name(fs, root)),
        )
        for descriptor, name in candidates:
            if name:
                return [
                    Signal(
                        name="project.name",
                        value=name,
                        source="project",
                        metadata={"descriptor": descriptor},
                    )
                ]
        return []


def _package_json_name(fs: Filesystem, root: str) -> str | None:
    name = load_package_json(fs, root).get("name")
    if isinstance(name, str) and name.strip():
        # Scoped packages: "@scope/app" -> "app"
        return name.strip().rsplit("/", 1)[-1]
    return None


def _pyproject_name(fs: Filesystem, root: str) -> str | None:
    data = load_pyproject(fs, root)
    project = data.get("project")
    if isinstance(project, dict) and isinstance(project.get("name"), str):
        return project["name"]
    tool = data.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict) and isinstance(poetry.get("name"), str):
        return poetry["name"]
    return None


def _go_module_name(fs: Filesystem, root: str) -> str | None:
    module = load_go_module(fs, root)
    if not module:
        return None
    return module.rstrip("/").rsplit("/", 1)[-1]
