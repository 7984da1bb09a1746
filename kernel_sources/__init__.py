"""
Compiled per-band kernels.

Each kernel module under kernel_sources.cpu.<fractal>.<op> registers its
numba function on import; load_kernel imports it on first use.
"""
from .loader import load_kernel
from .registry import get_op_descriptor, iter_registry, list_kernels, register_kernel, register_op_descriptor

__all__ = [
    "get_op_descriptor",
    "iter_registry",
    "list_kernels",
    "load_kernel",
    "register_kernel",
    "register_op_descriptor",
]
__version__ = "0.3.0"
