"""
flexidate Test Utilities Library

Shared helpers for the test modules and the test runner:
- colored console output used by test_runner.py
- small assertions over DateValue error lists
"""
from typing import Iterable, List, Tuple


# ============================================================================
# ANSI COLOR CODES
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    RED = '\033[0;31m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    NC = '\033[0m'  # No Color


def _emit(color: str, symbol: str, message: str) -> None:
    print(f"{color}{symbol} {message}{Colors.NC}")


# ============================================================================
# RUNNER OUTPUT
# ============================================================================

def print_header(text: str, width: int = 70):
    """Print a banner centered on a cyan rule."""
    rule = f"{Colors.CYAN}{'=' * width}{Colors.NC}"
    print(f"\n{rule}\n{Colors.CYAN}{text:^{width}}{Colors.NC}\n{rule}\n")


def print_section(title: str):
    print(f"\n--- {title} " + "-" * max(0, 56 - len(title)))


def print_success(message: str):
    _emit(Colors.GREEN, "✅", message)


def print_error(message: str):
    _emit(Colors.RED, "❌", message)


def print_warning(message: str):
    _emit(Colors.YELLOW, "⚠️ ", message)


def print_info(message: str):
    _emit(Colors.BLUE, "ℹ️ ", message)


def print_test_summary(results: List[Tuple[str, bool]], suite_name: str = "Test Suite") -> bool:
    """
    Print the outcome of each test file of a run.

    Args:
        results: (description, passed) pairs in execution order
        suite_name: Title of the run

    Returns:
        True when every entry passed
    """
    print_section(f"{suite_name} Summary")
    failed = [name for name, success in results if not success]

    for name, success in results:
        label = f"{Colors.GREEN}PASS{Colors.NC}" if success else f"{Colors.RED}FAIL{Colors.NC}"
        print(f"  [{label}] {name}")

    print(f"\n  {len(results) - len(failed)}/{len(results)} passed")
    if failed:
        print_error(f"Failing: {', '.join(failed)}")
    else:
        print_success(f"{suite_name}: all green")
    return not failed


# ============================================================================
# DATE VALUE ASSERTIONS
# ============================================================================

def error_kinds(value) -> list:
    """ErrorKind of every error recorded on a DateValue, in order."""
    return [error.kind for error in value.errors]


def assert_valid(value, rendered: str = None, fmt: str = "c"):
    """Assert a DateValue has no errors and, optionally, how it renders."""
    assert not value.has_errors(), f"unexpected errors: {value.error_messages}"
    if rendered is not None:
        assert value.format(fmt) == rendered


def assert_parts(parts: Iterable[str], expected: Iterable[str]):
    """Compare a granularity (or any part iterable) with an expected part list."""
    assert list(parts) == list(expected), f"{list(parts)} != {list(expected)}"
