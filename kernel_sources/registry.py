from __future__ import annotations
from typing import Dict, Any, List

# Nested dict: [fractal][op_name] -> meta
_REGISTRY: Dict[str, Dict[str, Dict[str, Any]]] = {}

# Static op descriptors: defaults shared by every caller of an op.
_OP_DESCRIPTORS: Dict[str, Dict[str, Dict[str, Any]]] = {}
# shape: [fractal][op_name] -> {"default_params": {...}, ...}

def register_kernel(fractal: str, op_name: str, **meta: Any) -> None:
    """
    Register kernel metadata for a given fractal and operation.
    Example:
        register_kernel("mandelbrot", "escape", func=_escape_band, arg_order=[...])
    """
    _REGISTRY.setdefault(fractal, {})[op_name] = meta

def register_op_descriptor(fractal: str, op_name: str, **descriptor: Any) -> None:
    """
    Register static operation descriptor for a given fractal and operation.
    Example:
        register_op_descriptor("mandelbrot", "escape", default_params={"bailout": 4.0})
    """
    _OP_DESCRIPTORS.setdefault(fractal, {})[op_name] = descriptor

def load_kernel(fractal: str, op_name: str) -> Dict[str, Any]:
    """
    Load kernel metadata from the registry for the given parameters.
    Raises KeyError if not found.
    """
    try:
        meta = _REGISTRY[fractal][op_name]
    except KeyError as e:
        raise KeyError(f"Kernel not found for fractal='{fractal}', op='{op_name}'") from e
    return meta

def list_kernels(fractal: str) -> List[str]:
    """
    List all registered operation names for the given fractal.
    """
    return sorted(_REGISTRY.get(fractal, {}))

def get_op_descriptor(fractal: str, op_name: str) -> Dict[str, Any]:
    """
    Get the static operation descriptor for the given fractal and operation.
    Raises KeyError if not found.
    """
    try:
        descriptor = _OP_DESCRIPTORS[fractal][op_name]
    except KeyError as e:
        raise KeyError(f"Operation descriptor not found for fractal='{fractal}', op='{op_name}'") from e
    return descriptor

def iter_registry():
    return _REGISTRY
