from __future__ import annotations
import importlib
from typing import Dict, Any

from kernel_sources.registry import load_kernel as load_registered


KERNEL_ROOT = "kernel_sources.cpu"

def _module_name(fractal: str, operation: str) -> str:
    return f"{KERNEL_ROOT}.{fractal.lower()}.{operation.lower()}"

def load_kernel(fractal: str, operation: str) -> Dict[str, Any]:
    """
    Return kernel metadata, importing kernel_sources.cpu.<fractal>.<operation>
    first if the kernel has not registered itself yet.
    """
    where = f"registry[{fractal}.{operation}]"
    try:
        meta = load_registered(fractal, operation)
    except KeyError:
        try:
            importlib.import_module(_module_name(fractal, operation))
        except ModuleNotFoundError as e:
            raise KeyError(f"{where}: no kernel module {_module_name(fractal, operation)}") from e
        meta = load_registered(fractal, operation)
    _validate_meta(meta, where)
    return meta

def _validate_meta(meta: Dict[str, Any], where: str) -> None:
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
    if "func" not in meta or not callable(meta["func"]):
        raise KeyError(f"{where} must provide a callable 'func'")

    for key in ("scalars", "produces", "consumes"):
        if key not in meta or not isinstance(meta[key], (list, tuple)):
            meta.setdefault(key, [])
