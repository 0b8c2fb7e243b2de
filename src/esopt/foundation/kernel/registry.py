"""
Kernel backend registry.

Maps backend names to kernel factories so that distributions resolve their
eigen solver without hard-coding if/elif chains. The numba backend is
lazy-loaded so `import esopt` remains safe on a minimal install.
"""

from __future__ import annotations

from collections.abc import Callable
from importlib import import_module
from typing import cast

from ..exceptions import BackendNotAvailableError
from ..suggestions import format_unknown
from .backend import KernelBackend
from .numpy_backend import NumPyKernel


def _load_numba() -> KernelBackend:
    try:
        module = import_module("esopt.foundation.kernel.numba_backend")
        return cast(KernelBackend, module.NumbaKernel())
    except ImportError as exc:
        raise BackendNotAvailableError("numba") from exc


KERNELS: dict[str, Callable[[], KernelBackend]] = {
    "numpy": NumPyKernel,
    "numba": _load_numba,
}

DEFAULT_KERNEL = "numpy"


def resolve_kernel(name: str | KernelBackend = DEFAULT_KERNEL) -> KernelBackend:
    if isinstance(name, KernelBackend):
        return name
    key = name.lower()
    try:
        factory = KERNELS[key]
    except KeyError as exc:
        available = sorted(KERNELS)
        raise ValueError(format_unknown("kernel", name, available)) from exc
    return factory()


__all__ = ["KERNELS", "DEFAULT_KERNEL", "resolve_kernel"]
