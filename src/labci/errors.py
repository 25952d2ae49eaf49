# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class GenerationError(Exception):
    """
    Structured generation error with enough context for:
      - clean CLI output
      - asserting on the failing trait / job / artifact in tests
    """
    message: str
    details: dict = field(default_factory=dict)

    kind: ClassVar[str] = "generation_error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class CompositionError(GenerationError):
    """Two traits set different values for a singular field (e.g. the OS tag)."""
    kind = "composition_conflict"


class ConfigurationError(GenerationError):
    """A job kind cannot derive a required field from its template."""
    kind = "configuration_error"


class UnresolvedArtifact(GenerationError):
    """A job requires an artifact that no job publishes."""
    kind = "unresolved_artifact"


class DuplicateProducer(GenerationError):
    """More than one job publishes the same artifact name."""
    kind = "duplicate_producer"


class CyclicDependency(GenerationError):
    """The artifact dependencies form a cycle."""
    kind = "cyclic_dependency"
