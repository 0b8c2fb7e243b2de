"""
Version of esopt and of the numeric packages it runs on.
"""

from __future__ import annotations

import platform
from functools import lru_cache
from importlib import metadata as importlib_metadata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    __version__: str


def _distribution_version(name: str) -> str | None:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None


@lru_cache(maxsize=None)
def get_version() -> str:
    return _distribution_version("esopt") or "0.0.0+unknown"


def runtime_versions() -> dict[str, str | None]:
    """Versions of esopt, Python, numpy and the optional numba kernel (None when absent)."""
    return {
        "esopt": get_version(),
        "python": platform.python_version(),
        "numpy": _distribution_version("numpy"),
        "numba": _distribution_version("numba"),
    }


def describe_runtime() -> str:
    versions = runtime_versions()
    numba = versions["numba"] or "not installed"
    return f"esopt {versions['esopt']} (python {versions['python']}, numpy {versions['numpy']}, numba {numba})"


def __getattr__(name: str):
    if name == "__version__":
        return get_version()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["__version__", "get_version", "runtime_versions", "describe_runtime"]
