"""Shared helper utilities for analyzer implementations."""

from __future__ import annotations

import json
import os
import re
import tomllib
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional, Set

from ..fs import Filesystem


def _read_text(fs: Filesystem, path: str) -> Optional[str]:
    try:
        return fs.read_file(path).decode("utf-8")
    except (FileNotFoundError, IsADirectoryError, UnicodeDecodeError):
        return None


# Python dependency helpers


def load_python_dependencies(fs: Filesystem, root: str) -> List[str]:
    """Collect Python dependencies from requirements.txt and pyproject.toml."""
    deps: Set[str] = set()

    requirements = _read_text(fs, os.path.join(root, "requirements.txt"))
    if requirements is not None:
        deps.update(_parse_requirements(requirements))

    pyproject = load_pyproject(fs, root)
    if pyproject:
        deps.update(_parse_pyproject(pyproject))

    return sorted(deps)


def load_pyproject(fs: Filesystem, root: str) -> Dict[str, object]:
    text = _read_text(fs, os.path.join(root, "pyproject.toml"))
    if text is None:
        return {}
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return {}


def _parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-r")):
            continue
        name = re.split(r"[<>=!~\[;\s]", stripped, maxsplit=1)[0].strip()
        if name:
            packages.append(name)
    return packages


def _parse_pyproject(data: Dict[str, object]) -> List[str]:
    packages: Set[str] = set()

    dependencies: List[object] = []
    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        for values in optional.values():
            dependencies.extend(values or [])

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        poetry_deps = poetry.get("dependencies", {}) or {}
        dependencies.extend(poetry_deps.keys())

    for dep in dependencies:
        if isinstance(dep, str):
            name = re.split(r"[<>=!~\[;\s]", dep, maxsplit=1)[0].strip()
            if name and name.lower() != "python":
                packages.add(name)
    return sorted(packages)


# Node.js dependency helpers


def load_package_json(fs: Filesystem, root: str) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    text = _read_text(fs, os.path.join(root, "package.json"))
    if text is None:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return {}
    if isinstance(data, dict):
        return data
    return {}


def load_node_dependencies(fs: Filesystem, root: str) -> Dict[str, List[str]]:
    """Return Node.js dependencies separated into runtime/dev lists."""
    data = load_package_json(fs, root)

    def _extract(key: str) -> List[str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return sorted(deps.keys())
        return []

    return {
        "dependencies": _extract("dependencies"),
        "devDependencies": _extract("devDependencies"),
    }


# Java dependency helpers


def load_java_dependencies(fs: Filesystem, root: str) -> List[str]:
    """Collect Java dependencies from pom.xml and build.gradle files."""
    deps: Set[str] = set()
    pom = _read_text(fs, os.path.join(root, "pom.xml"))
    if pom is not None:
        deps.update(_parse_pom_dependencies(pom))

    for name in ("build.gradle", "build.gradle.kts"):
        gradle = _read_text(fs, os.path.join(root, name))
        if gradle is not None:
            deps.update(_parse_gradle_dependencies(gradle))

    return sorted(deps)


def load_pom_artifact_id(fs: Filesystem, root: str) -> Optional[str]:
    text = _read_text(fs, os.path.join(root, "pom.xml"))
    if text is None:
        return None
    try:
        element = ET.fromstring(text)
    except ET.ParseError:
        return None
    namespace = _detect_xml_namespace(element)
    tag = f"{{{namespace}}}artifactId" if namespace else "artifactId"
    artifact = element.findtext(tag)
    return artifact.strip() if artifact else None


def _parse_pom_dependencies(text: str) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return deps

    namespace = _detect_xml_namespace(root)
    prefix = f"{{{namespace}}}" if namespace else ""

    # Spring Boot projects usually declare the starter as a parent, not a dependency.
    for tag in ("dependency", "parent", "plugin"):
        for dep in root.findall(f".//{prefix}{tag}"):
            group = dep.findtext(f"{prefix}groupId", default="")
            artifact = dep.findtext(f"{prefix}artifactId", default="")
            if group and artifact:
                deps.add(f"{group}:{artifact}")
    return deps


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _parse_gradle_dependencies(content: str) -> Set[str]:
    deps: Set[str] = set()
    pattern = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::[\w\-.]+)?['\"]")
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly", "id")):
            match = pattern.search(line)
            if match:
                deps.add(match.group(1))
        if "org.springframework.boot" in line:
            deps.add("org.springframework.boot:spring-boot")
    return deps


# Go helpers


def load_go_module(fs: Filesystem, root: str) -> Optional[str]:
    """Return the module path declared in go.mod."""
    text = _read_text(fs, os.path.join(root, "go.mod"))
    if text is None:
        return None
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("module "):
            return stripped.split(None, 1)[1].strip()
    return None


# Framework heuristics


def detect_python_frameworks(dependencies: Iterable[str]) -> List[str]:
    frameworks: List[str] = []
    mapping = {
        "django": "Django",
        "fastapi": "FastAPI",
        "flask": "Flask",
    }
    lower_deps = {dep.lower() for dep in dependencies}
    for key, label in mapping.items():
        if key in lower_deps:
            frameworks.append(label)
    return frameworks


def detect_node_frameworks(node_dependencies: Dict[str, List[str]]) -> List[str]:
    frameworks: List[str] = []
    mapping = {
        "@angular/core": "Angular",
        "@nestjs/core": "Nest",
        "express": "Express",
        "next": "Next.js",
        "nuxt": "Nuxt.js",
        "react": "React",
        "svelte": "Svelte",
        "vue": "Vue",
    }
    lower = {dep.lower() for deps in node_dependencies.values() for dep in deps}
    for key, label in mapping.items():
        if key in lower:
            frameworks.append(label)
    return frameworks


def detect_java_frameworks(java_dependencies: Iterable[str]) -> List[str]:
    frameworks: List[str] = []
    lowered = [dep.lower() for dep in java_dependencies]
    if any("spring-boot" in dep or "springframework" in dep for dep in lowered):
        frameworks.append("Spring Boot")
    if any(dep.startswith("io.quarkus") for dep in lowered):
        frameworks.append("Quarkus")
    if any(dep.startswith("io.vertx") for dep in lowered):
        frameworks.append("Vert.x")
    if any(dep.startswith(("org.wildfly", "org.jboss.eap")) for dep in lowered):
        frameworks.append("WildFly")
    if any(dep.startswith("io.openliberty") for dep in lowered):
        frameworks.append("Open Liberty")
    return frameworks
