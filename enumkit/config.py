"""Runtime options.

Options come from the environment first and can be overridden in-process:

    ENUMKIT_BACKEND    native | python   (width primitives implementation)
    ENUMKIT_OPT_LEVEL  0..3              (JIT code generation level)
"""
from __future__ import annotations

import dataclasses
import os
import threading
from dataclasses import dataclass
from typing import Optional

BACKENDS = ("native", "python")
DEFAULT_BACKEND = "native"
DEFAULT_OPT_LEVEL = 2


@dataclass(frozen=True)
class Options:
    backend: str = DEFAULT_BACKEND
    opt_level: int = DEFAULT_OPT_LEVEL

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"unknown backend {self.backend!r} (expected one of {', '.join(BACKENDS)})")
        if not 0 <= self.opt_level <= 3:
            raise ValueError(f"opt_level must be between 0 and 3, got {self.opt_level}")

    @classmethod
    def from_env(cls, environ=None) -> "Options":
        environ = os.environ if environ is None else environ
        backend = environ.get("ENUMKIT_BACKEND", DEFAULT_BACKEND).strip().lower()
        raw_opt = environ.get("ENUMKIT_OPT_LEVEL", str(DEFAULT_OPT_LEVEL)).strip()
        try:
            opt_level = int(raw_opt)
        except ValueError:
            raise ValueError(f"ENUMKIT_OPT_LEVEL must be an integer, got {raw_opt!r}") from None
        return cls(backend=backend, opt_level=opt_level)


_lock = threading.Lock()
_options: Optional[Options] = None


def get_options() -> Options:
    global _options
    if _options is None:
        with _lock:
            if _options is None:
                _options = Options.from_env()
    return _options


def configure(**changes) -> Options:
    """Replace fields of the active options, e.g. ``configure(backend="python")``.

    Bindings already resolved by an EnumInfo keep the backend they were resolved with.
    """
    global _options
    with _lock:
        base = _options if _options is not None else Options.from_env()
        _options = dataclasses.replace(base, **changes)
        return _options


def reset() -> None:
    """Forget in-process overrides; the next read goes back to the environment."""
    global _options
    with _lock:
        _options = None
