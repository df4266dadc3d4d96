"""Tests for compinit.analyzers.scanner."""

from __future__ import annotations

from compinit.analyzers.scanner import SourceScanner, detect_language
from compinit.fs import MemoryFilesystem


def test_scan_skips_vcs_and_dependency_folders() -> None:
    fs = MemoryFilesystem(
        cwd="/repo",
        files={
            "src/app.py": "print('hi')\n",
            "README.md": "# app\n",
            ".DS_Store": "",
            ".git/config": "[core]\n",
            "node_modules/left-pad/index.js": "",
            "target/classes/App.class": "",
        },
    )

    tree = SourceScanner().scan(fs, "/repo")
    paths = {file.path: file for file in tree.files}

    assert tree.root == "/repo"
    assert set(paths) == {"README.md", "src/app.py"}
    assert paths["src/app.py"].language == "Python"
    assert paths["README.md"].language is None


def test_scan_relative_root_and_limit() -> None:
    fs = MemoryFilesystem(cwd="/repo", files={"a.go": "", "b.go": "", "c.go": ""})

    tree = SourceScanner(max_files=2).scan(fs, ".")

    assert tree.root == "/repo"
    assert [file.path for file in tree.files] == ["a.go", "b.go"]


def test_detect_language_is_case_insensitive() -> None:
    assert detect_language("Main.JAVA") == "Java"
    assert detect_language("component.tsx") == "TypeScript"
    assert detect_language("Makefile") is None
