"""Shared runner for the example modules.

Both `python -m examples.<module>` and tests/test_examples.py go through `run_examples`, so the printed output is
what the test asserts.
"""

import inspect
from collections.abc import Awaitable, Callable
from types import ModuleType

Example = Callable[[], Awaitable[None]] | Callable[[], None]


async def run_examples(mod: ModuleType) -> None:
    """Run every `example_*` function of the module in source order, printing a header before each."""
    for fn in _example_functions(mod):
        print(f"\n# running: {fn.__name__}")
        if inspect.iscoroutinefunction(fn):
            await fn()
        else:
            fn()


def _example_functions(mod: ModuleType) -> list[Example]:
    # Only functions defined in the module itself, not ones imported into it
    return sorted(
        (
            obj
            for name, obj in inspect.getmembers(mod, inspect.isfunction)
            if name.startswith("example_") and obj.__module__ == mod.__name__
        ),
        key=lambda f: f.__code__.co_firstlineno,
    )
