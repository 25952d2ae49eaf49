from .model import Trait, JobTemplate, Job, Pipeline, PublishArtifact, RequireArtifact, Download
from .compose import compose, extend
from .builder import JobBuilder, JobKind, build_job, cmd
from .matrix import Matrix, matrix, expand, DEFAULT_MATRIX
from .dag import resolve
from .assembler import assemble, generate
from .traits import TraitRegistry, default_registry
from .errors import (
    GenerationError,
    CompositionError,
    ConfigurationError,
    UnresolvedArtifact,
    DuplicateProducer,
    CyclicDependency,
)

__all__ = [
    "Trait", "JobTemplate", "Job", "Pipeline", "PublishArtifact", "RequireArtifact", "Download",
    "compose", "extend", "JobBuilder", "JobKind", "build_job", "cmd",
    "Matrix", "matrix", "expand", "DEFAULT_MATRIX", "resolve", "assemble", "generate",
    "TraitRegistry", "default_registry",
    "GenerationError", "CompositionError", "ConfigurationError",
    "UnresolvedArtifact", "DuplicateProducer", "CyclicDependency",
]
