import sys
import time
import traceback
from contextlib import contextmanager
from functools import wraps
from typing import List, Dict, Any, Callable, Iterator, Optional, Tuple, Type, Union

_suite_state: Dict[str, List[Dict[str, Any]]] = {
    'tests': [],
    'results': []
}

PASS_MARK = '~>'
FAIL_MARK = '<~'
SUMMARY_MARK = '~~~~~~~~'


class _c:
    """color codes for the report."""
    ok = '\033[92m'
    fail = '\033[91m'
    warn = '\033[93m'
    info = '\033[94m'
    grey = '\033[90m'
    reset = '\033[0m'


# --- custom exception for assertions ---

class TestAssertionError(AssertionError):
    """assertion failures, kept apart from errors raised by the code under test."""
    pass

# --- public api ---

def test(description: str) -> Callable:
    """decorator to register a function as a test case."""

    def decorator(func: Callable) -> Callable:
        _suite_state['tests'].append({'func': func, 'description': description})

        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        return wrapper

    return decorator


# the registrar itself is not a test when modules are collected by pytest
test.__test__ = False


def assert_that(condition: Any, message: str = "assertion failed") -> None:
    """custom assertion that raises a specific, catchable error type."""
    if not condition:
        raise TestAssertionError(message)


def assert_equal(actual: Any, expected: Any, label: str = "value") -> None:
    """equality assertion with both sides in the message."""
    if actual != expected:
        raise TestAssertionError(f"{label}: expected {expected!r}, got {actual!r}")


@contextmanager
def assert_raises(expected: Union[Type[BaseException], Tuple[Type[BaseException], ...]],
                  message: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    """
    context manager that fails unless the block raises `expected`.
    the caught exception is left in the yielded dict under 'error'.
    """
    caught: Dict[str, Any] = {'error': None}
    try:
        yield caught
    except expected as e:
        caught['error'] = e
        return
    name = expected.__name__ if isinstance(expected, type) else ' or '.join(t.__name__ for t in expected)
    raise TestAssertionError(message or f"expected {name} to be raised")


def run(title: str = "test run", only: Optional[str] = None) -> bool:
    """
    executes all registered tests and prints a report.
    `only` (or the first command line argument) filters by description substring.
    returns True when every test passed.
    """
    if only is None and len(sys.argv) > 1:
        only = sys.argv[1]

    print(f"\n{_c.info}--- starting: {title} ---{_c.reset}")
    start_time = time.perf_counter()

    _suite_state['results'] = []
    tests_to_run = [t for t in _suite_state['tests'] if not only or only in t['description']]

    for test_item in tests_to_run:
        func = test_item['func']
        description = test_item['description']

        passed = False
        error = None

        try:
            func()
            passed = True
        except TestAssertionError as e:
            error = f"assertion failed: {e}"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            error += '\n' + ''.join(traceback.format_tb(e.__traceback__)[-2:]).rstrip()

        _suite_state['results'].append({'passed': passed, 'description': description, 'error': error})

        if passed:
            print(f"  {_c.ok}pass{_c.reset}  {PASS_MARK}  {description}")
        else:
            print(f"  {_c.fail}FAIL{_c.reset}  {FAIL_MARK}  {description}")
            for line in error.splitlines():
                print(f"    {_c.grey}| {line}{_c.reset}")

    all_passed = _print_summary(start_time)

    # clear tests after run to allow for multiple, separate suite runs in a single script
    _suite_state['tests'] = []
    return all_passed


def main(title: str) -> None:
    """run the registered tests and exit non-zero on failure."""
    sys.exit(0 if run(title) else 1)


def _print_summary(start_time: float) -> bool:
    """prints the final summary of the test run."""
    duration = (time.perf_counter() - start_time) * 1000
    results = _suite_state['results']

    total = len(results)
    passed_count = sum(1 for r in results if r['passed'])
    failed_count = total - passed_count

    summary_color = _c.ok if failed_count == 0 else _c.fail

    print(f"\n{summary_color}{SUMMARY_MARK} summary {SUMMARY_MARK}{_c.reset}")
    print(f"  ran {_c.info}{total}{_c.reset} tests in {_c.warn}{duration:.2f}ms{_c.reset}")
    print(f"  {_c.ok}passed: {passed_count}{_c.reset}, {_c.fail}failed: {failed_count}{_c.reset}\n")
    return failed_count == 0
