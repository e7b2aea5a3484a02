"""Pytest-based evaluator tests.

Test cases live in eval/*.tests files. Expected output is the display form
of every non-unit top-level result, one per line, or
'error: <message substring>'.
"""

from pathlib import Path

import pytest

from cases import discover
from jerboa import EvalError, evaluate
from jerboa.values import UnitValue

EVAL_DIR = Path(__file__).parent / "eval"


def discover_eval_tests() -> list[tuple[str, str, str]]:
    """Find all eval tests, returns (test_id, input, expected)."""
    return discover(EVAL_DIR)


def pytest_generate_tests(metafunc):
    """Parametrize tests over eval test files."""
    if "eval_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_eval_tests()
        ]
        metafunc.parametrize("eval_input,eval_expected", params)


def test_eval(eval_input: str, eval_expected: str):
    """Verify each program evaluates to the expected values or error."""
    if eval_expected.startswith("error:"):
        expected_msg = eval_expected[6:].strip()
        with pytest.raises(EvalError) as exc_info:
            evaluate(eval_input)
        assert expected_msg in str(exc_info.value)
        return
    results = evaluate(eval_input)
    shown = [v.to_string() for v in results if not isinstance(v, UnitValue)]
    assert "\n".join(shown) == eval_expected


def test_test_files_found():
    assert len(discover_eval_tests()) > 80
