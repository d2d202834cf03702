"""
Numeric-kind resolver: map an enumeration's underlying representation to its
row of width primitives.

Each backend owns one table with a row per IntKind. Tables are built on first
use and kept for the process lifetime; EnumInfo memoizes the row it resolved,
so a given enumeration goes through here once.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Union

from enumkit.backend.width_ops import WidthOps, PYTHON_WIDTH_OPS
from enumkit.config import BACKENDS, get_options
from enumkit.semantics.typesys import IntKind

logger = logging.getLogger(__name__)

_tables: Dict[str, Dict[IntKind, WidthOps]] = {"python": PYTHON_WIDTH_OPS}
_tables_lock = threading.Lock()


def _build_table(backend: str) -> Dict[IntKind, WidthOps]:
    if backend == "native":
        from enumkit.backend.jit import build_native_table
        return build_native_table(get_options().opt_level)
    raise ValueError(f"unknown backend {backend!r} (expected one of {', '.join(BACKENDS)})")


def get_table(backend: Optional[str] = None) -> Dict[IntKind, WidthOps]:
    """The width primitives table of `backend` (default: configured backend)."""
    backend = backend or get_options().backend
    table = _tables.get(backend)
    if table is None:
        with _tables_lock:
            table = _tables.get(backend)
            if table is None:
                table = _build_table(backend)
                _tables[backend] = table
                logger.debug("built %s width primitives table", backend)
    return table


def resolve(representation: Union[IntKind, str], backend: Optional[str] = None,
            type_name: str = "<unknown>") -> WidthOps:
    """Resolve the width primitives row for `representation`.

    Raises:
        UnsupportedRepresentationError: `representation` is not one of the eight kinds.
        ValueError: `backend` is not a known backend.
    """
    kind = IntKind.from_tag(representation, type_name)
    row = get_table(backend)[kind]
    logger.debug("resolved %s (%s) to %r", type_name, kind, row)
    return row
