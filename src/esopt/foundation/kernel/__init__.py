"""
Foundation layer: backend kernels for the compute-heavy linear algebra.
"""

from __future__ import annotations

from .backend import MAX_QL_SWEEPS, KernelBackend
from .numpy_backend import NumPyKernel
from .registry import DEFAULT_KERNEL, KERNELS, resolve_kernel


__all__ = ["KernelBackend", "NumPyKernel", "KERNELS", "DEFAULT_KERNEL", "MAX_QL_SWEEPS", "resolve_kernel"]
