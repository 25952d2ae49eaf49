# loader.py
from __future__ import annotations

import runpy
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .matrix import Matrix
from .traits import TraitRegistry


@dataclass(frozen=True)
class MatrixFile:
    path: Path
    matrices: List[Matrix]
    registry: Optional[TraitRegistry] = None


def load_matrix(path: str | Path) -> MatrixFile:
    """
    Load a matrix definition from a python file path.

    The file must define either:
      - matrices() -> List[Matrix]
      - MATRIX = [Matrix, ...]

    It may also define:
      - REGISTRY = TraitRegistry(...)   (defaults to the built-in registry)
    """
    mx_path = Path(path).expanduser().resolve()
    if not mx_path.exists():
        raise FileNotFoundError(f"Matrix file not found: {mx_path}")
    if mx_path.suffix != ".py":
        raise ValueError(f"Matrix file must be a .py file, got: {mx_path.name}")

    module_name = f"labci_matrix_{mx_path.stem}"
    globals_dict = runpy.run_path(str(mx_path), run_name=module_name)

    matrices = None
    if "matrices" in globals_dict and callable(globals_dict["matrices"]):
        matrices = globals_dict["matrices"]()
    elif "MATRIX" in globals_dict:
        matrices = globals_dict["MATRIX"]

    if not isinstance(matrices, list) or not all(isinstance(m, Matrix) for m in matrices):
        raise TypeError(
            "Matrix file must return/define a List[Matrix]. "
            "Define matrices() -> List[Matrix] or MATRIX = [Matrix, ...]."
        )

    registry = globals_dict.get("REGISTRY")
    if registry is not None and not isinstance(registry, TraitRegistry):
        raise TypeError(f"REGISTRY must be a TraitRegistry, got {type(registry).__name__}")

    return MatrixFile(path=mx_path, matrices=matrices, registry=registry)
