# assembler.py
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .builder import KIND_ORDER, JobBuilder, JobKind, kind_of
from .dag import resolve
from .matrix import DEFAULT_MATRIX, Matrix, jobs_by_kind
from .model import Job, Pipeline
from .settings import Settings
from .traits import TraitRegistry


def assemble(per_kind: Mapping[Union[str, JobKind], Sequence[Job]]) -> Pipeline:
    """
    Concatenate per-kind job lists in KIND_ORDER and resolve the graph.

    The resulting list order is only a display convention; the CI engine
    schedules from the dependency edges.
    """
    by_kind: Dict[JobKind, List[Job]] = {}
    for kind, jobs in per_kind.items():
        by_kind.setdefault(kind_of(kind), []).extend(jobs)

    ordered = [j for kind in KIND_ORDER for j in by_kind.get(kind, [])]
    return resolve(ordered)


def generate(
    registry: Optional[TraitRegistry] = None,
    matrices: Optional[Iterable[Matrix]] = None,
    settings: Optional[Settings] = None,
) -> Pipeline:
    """Run the whole flow: compose, build, assemble, resolve."""
    builder = JobBuilder(settings, registry)
    return assemble(jobs_by_kind(DEFAULT_MATRIX if matrices is None else matrices, builder))
