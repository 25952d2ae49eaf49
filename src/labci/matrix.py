# matrix.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .builder import JobBuilder, JobKind, cmd, kind_of
from .compose import compose
from .errors import ConfigurationError
from .model import Job, JobTemplate
from .traits import TraitRegistry, default_registry

# Trait names composed (after the registry's base traits) for one matrix cell
Combination = Tuple[str, ...]


def _combination(value: Any) -> Combination:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigurationError(
            "a combination must be a list of trait names",
            details={"got": repr(value)},
        )
    if not all(isinstance(n, str) for n in value):
        raise ConfigurationError("trait names must be strings", details={"got": repr(value)})
    return tuple(value)


def expand(
    combinations: Iterable[Sequence[str]],
    registry: Optional[TraitRegistry] = None,
) -> List[JobTemplate]:
    """
    Compose one JobTemplate per combination, in exactly the given order.

    No cross product is taken: each combination is spelled out by the caller.
    """
    registry = registry or default_registry()
    return [compose(registry.resolve(_combination(c))) for c in combinations]


class Matrix:
    """
    The explicitly enumerated combinations one job kind runs on.

    Example:
        Matrix("build", [("linux", "amd64"), ("darwin", "amd64")]).jobs(builder)
    """

    def __init__(
        self,
        kind: Union[str, JobKind],
        combinations: Iterable[Sequence[str]],
        params: Optional[Mapping[str, Any]] = None,
    ):
        self.kind = kind_of(kind)
        self.combinations = [_combination(c) for c in combinations]
        self.params = dict(params or {})

    def templates(self, registry: Optional[TraitRegistry] = None) -> List[JobTemplate]:
        return expand(self.combinations, registry)

    def jobs(self, builder: JobBuilder) -> List[Job]:
        return [builder.build(t, self.kind, self.params) for t in self.templates(builder.registry)]

    def __repr__(self) -> str:
        return f"Matrix({self.kind.value!r}, {self.combinations!r})"


def matrix(kind: Union[str, JobKind], combinations: Iterable[Sequence[str]], **params: Any) -> Matrix:
    return Matrix(kind, combinations, params)


def jobs_by_kind(matrices: Iterable[Matrix], builder: JobBuilder) -> Dict[JobKind, List[Job]]:
    """Build every matrix; matrices of the same kind append in declaration order."""
    out: Dict[JobKind, List[Job]] = {}
    for m in matrices:
        out.setdefault(m.kind, []).extend(m.jobs(builder))
    return out


# ---------------------------------------------------------------------
# Default matrix
# ---------------------------------------------------------------------

BUILD_CONFS: List[Combination] = [
    ("linux", "amd64"),
    ("darwin", "amd64"),
    ("windows", "amd64"),
    ("linux", "aarch64"),
]

GRAAL_CONFS: List[Combination] = [
    ("linux", "amd64"),
    ("darwin", "amd64"),
    ("linux", "aarch64"),
]

MUSL_CONFS: List[Combination] = [
    ("linux-musl", "amd64-musl"),
]


def _jvmci_version(conf: JobTemplate):
    return [
        cmd(conf.exe("${JAVA_HOME}/bin/java"), "-XX:+UnlockExperimentalVMOptions", "-XX:+EnableJVMCI", "-version"),
    ]


DEFAULT_MATRIX: List[Matrix] = [
    Matrix(JobKind.BUILD, BUILD_CONFS, {"musl": False}),
    Matrix(JobKind.COMPILER_TEST, GRAAL_CONFS),
    Matrix(JobKind.JS_TEST, GRAAL_CONFS),
    Matrix(JobKind.LIBGRAAL_BUILD, GRAAL_CONFS),
    Matrix(JobKind.LIBGRAAL_TEST, GRAAL_CONFS),
    Matrix(JobKind.MUSL_BUILD, MUSL_CONFS),
    Matrix(JobKind.RUN_ONLY, [("linux", "amd64")], {"label": "jvmci-version", "commands": _jvmci_version}),
]
