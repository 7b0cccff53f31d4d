# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0"]
# ///
"""Tests that every module carries PEP 723 inline script metadata.

Validates:
  1. Each .py file opens with a complete '# /// script' block
  2. The block declares requires-python and dependencies
  3. Modules that import pydantic declare it
  4. pyproject.toml declares the same runtime dependency
"""

import re
import sys
import tomllib
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

PEP723_OPEN = "# /// script"


def _all_py_files():
    files = []
    for f in sorted(PROJECT_ROOT.rglob("*.py")):
        rel = f.relative_to(PROJECT_ROOT)
        if any(part.startswith(".") or part == "__pycache__" or part.endswith(".egg-info")
               for part in rel.parts):
            continue
        files.append(f)
    return files


def _parse_pep723_block(text: str) -> str | None:
    m = re.search(r"^# /// script\s*\n((?:#[^\n]*\n)*?)# ///", text, re.MULTILINE)
    return m.group(1) if m else None


def _dependencies(block: str) -> list[str]:
    clean = "\n".join(re.sub(r"^#\s?", "", line) for line in block.split("\n"))
    m = re.search(r"dependencies\s*=\s*\[([^\]]*)\]", clean)
    if not m:
        return []
    return [d.strip().strip('"') for d in m.group(1).split(",") if d.strip().strip('"')]


ALL_PY_FILES = _all_py_files()
ALL_PY_FILE_IDS = [str(f.relative_to(PROJECT_ROOT)) for f in ALL_PY_FILES]


@pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
def test_block_is_first_line(py_file):
    first_line = py_file.read_text().split("\n")[0]
    assert first_line.strip() == PEP723_OPEN, (
        f"{py_file.relative_to(PROJECT_ROOT)}: metadata block must open on line 1"
    )


@pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
def test_block_declares_python_and_dependencies(py_file):
    block = _parse_pep723_block(py_file.read_text())
    assert block is not None, f"{py_file.relative_to(PROJECT_ROOT)}: incomplete metadata block"
    assert "requires-python" in block
    assert "dependencies" in block


@pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
def test_pydantic_declared_where_imported(py_file):
    text = py_file.read_text()
    if not re.search(r"^from pydantic import|^import pydantic", text, re.MULTILINE):
        return
    deps = _dependencies(_parse_pep723_block(text) or "")
    assert any(d.startswith("pydantic") for d in deps), (
        f"{py_file.relative_to(PROJECT_ROOT)} imports pydantic without declaring it"
    )


def test_pyproject_runtime_dependencies():
    with open(PROJECT_ROOT / "pyproject.toml", "rb") as f:
        project = tomllib.load(f)["project"]
    assert any(d.startswith("pydantic") for d in project["dependencies"])
    assert any(d.startswith("pytest") for d in project["optional-dependencies"]["test"])
