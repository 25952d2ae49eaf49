# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .platforms import (
    CopyDirFn,
    OSTag,
    PathFn,
    unix_copydir,
    unix_exe,
    unix_jdk_home,
    unix_path,
)

# A command is an argument list. An argument is either a string or a nested
# command whose output the CI engine substitutes in place.
Command = Tuple[Any, ...]


def _freeze(obj, *, mappings: Tuple[str, ...], sequences: Tuple[str, ...]) -> None:
    # frozen dataclasses: bypass __setattr__ to normalize field containers
    for name in mappings:
        object.__setattr__(obj, name, MappingProxyType(dict(getattr(obj, name))))
    for name in sequences:
        object.__setattr__(obj, name, tuple(getattr(obj, name)))


_MAPPINGS = ("environment", "downloads", "packages")
_SEQUENCES = ("capabilities", "setup", "run")


@dataclass(frozen=True)
class Download:
    """A named download the CI engine fetches and exposes via an env var."""
    name: str
    version: str
    platformspecific: bool = True


@dataclass(frozen=True)
class Docker:
    image: str
    mount_modules: bool = False


@dataclass(frozen=True)
class Trait:
    """
    An immutable configuration fragment (OS, architecture or feature).

    Traits never change after construction; composing them produces a new
    JobTemplate (see compose.py).
    """
    label: str = ""
    capabilities: Tuple[str, ...] = ()
    name: str = ""
    environment: Mapping[str, str] = field(default_factory=dict)
    downloads: Mapping[str, Download] = field(default_factory=dict)
    packages: Mapping[str, str] = field(default_factory=dict)
    setup: Tuple[Command, ...] = ()
    run: Tuple[Command, ...] = ()

    # singular: two traits may not disagree
    os: Optional[OSTag] = None
    arch: Optional[str] = None

    # plain scalars: later trait wins
    docker: Optional[Docker] = None
    python_version: Optional[str] = None

    # translators: later definition replaces, None defers
    path: Optional[PathFn] = None
    exe: Optional[PathFn] = None
    copydir: Optional[CopyDirFn] = None
    jdk_home: Optional[PathFn] = None

    def __post_init__(self) -> None:
        _freeze(self, mappings=_MAPPINGS, sequences=_SEQUENCES)


@dataclass(frozen=True)
class JobTemplate:
    """Result of composing a trait sequence. One per matrix cell."""
    traits: Tuple[str, ...] = ()
    capabilities: Tuple[str, ...] = ()
    name: str = ""
    environment: Mapping[str, str] = field(default_factory=dict)
    downloads: Mapping[str, Download] = field(default_factory=dict)
    packages: Mapping[str, str] = field(default_factory=dict)
    setup: Tuple[Command, ...] = ()
    run: Tuple[Command, ...] = ()
    os: Optional[OSTag] = None
    arch: Optional[str] = None
    docker: Optional[Docker] = None
    python_version: Optional[str] = None
    path: PathFn = unix_path
    exe: PathFn = unix_exe
    copydir: CopyDirFn = unix_copydir
    jdk_home: PathFn = unix_jdk_home

    # tracks which trait set each singular field, for error messages
    owners: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze(self, mappings=_MAPPINGS + ("owners",), sequences=_SEQUENCES + ("traits",))


@dataclass(frozen=True)
class PublishArtifact:
    name: str
    dir: str
    patterns: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", tuple(self.patterns))


@dataclass(frozen=True)
class RequireArtifact:
    name: str
    dir: str = "."
    auto_extract: Optional[bool] = None


@dataclass(frozen=True)
class Job:
    """
    A fully resolved CI job, ready to hand to the CI engine.

    Artifact declarations (publish/require) are the only source of
    inter-job dependencies; there is no explicit `needs` list.
    """
    name: str
    kind: str
    os: OSTag
    arch: str
    timelimit: str
    run: Tuple[Command, ...]
    capabilities: Tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    downloads: Mapping[str, Download] = field(default_factory=dict)
    packages: Mapping[str, str] = field(default_factory=dict)
    setup: Tuple[Command, ...] = ()
    diskspace_required: Optional[str] = None
    logs: Tuple[str, ...] = ()
    targets: Tuple[str, ...] = ()
    publish_artifacts: Tuple[PublishArtifact, ...] = ()
    require_artifacts: Tuple[RequireArtifact, ...] = ()
    docker: Optional[Docker] = None
    python_version: Optional[str] = None

    def __post_init__(self) -> None:
        _freeze(
            self,
            mappings=_MAPPINGS,
            sequences=_SEQUENCES + ("logs", "targets", "publish_artifacts", "require_artifacts"),
        )


@dataclass(frozen=True)
class Edge:
    """producer must complete (and publish) before consumer starts."""
    producer: str
    consumer: str
    artifacts: Tuple[str, ...]


@dataclass(frozen=True)
class Pipeline:
    jobs: Tuple[Job, ...]
    edges: Tuple[Edge, ...]

    def job(self, name: str) -> Job:
        for j in self.jobs:
            if j.name == name:
                return j
        raise KeyError(name)

    def dependencies_of(self, name: str) -> List[str]:
        return [e.producer for e in self.edges if e.consumer == name]

    def dependents_of(self, name: str) -> List[str]:
        return [e.consumer for e in self.edges if e.producer == name]

    def transitive_dependents(self, name: str) -> List[str]:
        """
        Jobs the CI engine marks skipped when `name` fails or times out.
        Returned in pipeline order.
        """
        self.job(name)
        seen = set()
        stack = [name]
        while stack:
            for child in self.dependents_of(stack.pop()):
                if child not in seen:
                    seen.add(child)
                    stack.append(child)
        return [j.name for j in self.jobs if j.name in seen]

    def stages(self) -> List[List[str]]:
        # Import here to avoid circular import
        from .dag import topo_levels

        return topo_levels(self)

    def artifact_producers(self) -> Dict[str, str]:
        return {a.name: j.name for j in self.jobs for a in j.publish_artifacts}
