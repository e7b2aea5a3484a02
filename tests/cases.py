"""Reader for .tests case files shared by the data-driven test modules.

A case file holds blocks of the form:

    === case name
    input lines
    ---
    expected lines
    ---
"""

from pathlib import Path


def _take_section(lines: list[str], i: int) -> tuple[list[str], int]:
    """Collect lines up to the next '---' marker and step past it."""
    section: list[str] = []
    while i < len(lines) and not lines[i].startswith("---"):
        section.append(lines[i])
        i += 1
    if i < len(lines) and lines[i] == "---":
        i += 1
    return section, i


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    cases: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        if not lines[i].startswith("=== "):
            i += 1
            continue
        name = lines[i][4:].strip()
        source, i = _take_section(lines, i + 1)
        expected, i = _take_section(lines, i)
        cases.append((name, "\n".join(source), "\n".join(expected).strip()))
    return cases


def discover(directory: Path) -> list[tuple[str, str, str]]:
    """All cases under directory as (test_id, input, expected), sorted by file."""
    found = []
    for test_file in sorted(directory.glob("*.tests")):
        for name, source, expected in parse_test_file(test_file):
            found.append((f"{test_file.stem}/{name}", source, expected))
    return found
