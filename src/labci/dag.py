# dag.py
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Tuple

from .errors import ConfigurationError, CyclicDependency, DuplicateProducer, UnresolvedArtifact
from .model import Edge, Job, Pipeline


def resolve(jobs: Iterable[Job]) -> Pipeline:
    """
    Infer the dependency graph from artifact declarations.

    Requires:
      - job.name: str (unique)
      - every artifact name published by exactly one job
      - every required artifact published by some job

    Returns a Pipeline with jobs in their original order and one edge per
    (producer, consumer) pair.
    """
    jobs = list(jobs)
    names = [j.name for j in jobs]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ConfigurationError("duplicate job names", details={"jobs": ", ".join(dupes)})

    producers: Dict[str, str] = {}
    for job in jobs:
        for artifact in job.publish_artifacts:
            if artifact.name in producers:
                raise DuplicateProducer(
                    f"artifact {artifact.name!r} has more than one producer",
                    details={"artifact": artifact.name, "producers": f"{producers[artifact.name]}, {job.name}"},
                )
            producers[artifact.name] = job.name

    # (producer, consumer) -> artifact names; dict keeps first-seen order
    pairs: Dict[Tuple[str, str], Dict[str, None]] = {}
    for job in jobs:
        for req in job.require_artifacts:
            producer = producers.get(req.name)
            if producer is None:
                raise UnresolvedArtifact(
                    f"job {job.name!r} requires artifact {req.name!r} but no job publishes it",
                    details={"job": job.name, "artifact": req.name, "published": ", ".join(producers) or "none"},
                )
            pairs.setdefault((producer, job.name), {})[req.name] = None

    pipeline = Pipeline(
        jobs=tuple(jobs),
        edges=tuple(Edge(producer=p, consumer=c, artifacts=tuple(a)) for (p, c), a in pairs.items()),
    )
    # generation is linear and should never produce a cycle; check anyway
    topo_levels(pipeline)
    return pipeline


def topo_levels(pipeline: Pipeline) -> List[List[str]]:
    """
    Convert the graph into topological "levels" (stages).
    Each stage can run in parallel; within a stage jobs keep pipeline order.
    """
    order = {j.name: i for i, j in enumerate(pipeline.jobs)}
    adj: Dict[str, List[str]] = {name: [] for name in order}
    indeg: Dict[str, int] = {name: 0 for name in order}
    for e in pipeline.edges:
        adj[e.producer].append(e.consumer)
        indeg[e.consumer] += 1

    q = deque(n for n in order if indeg[n] == 0)
    levels: List[List[str]] = []
    processed = 0

    while q:
        level = sorted(q, key=order.__getitem__)
        q.clear()
        for node in level:
            processed += 1
            for child in adj[node]:
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)
        levels.append(level)

    if processed != len(order):
        remaining = [n for n in order if indeg[n] > 0]
        raise CyclicDependency(
            "artifact dependencies form a cycle",
            details={"stuck": ", ".join(remaining)},
        )

    return levels
