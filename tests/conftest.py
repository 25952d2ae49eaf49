# tests/conftest.py
import pytest

from labci.builder import JobBuilder
from labci.compose import compose
from labci.model import Job, PublishArtifact, RequireArtifact
from labci.platforms import OSTag
from labci.settings import Settings
from labci.traits import default_registry


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def builder(registry):
    return JobBuilder(Settings(), registry)


@pytest.fixture
def conf(registry):
    """conf("linux", "amd64") -> template composed over the registry base traits."""
    def _conf(*names):
        return compose(registry.resolve(names))
    return _conf


@pytest.fixture
def make_job():
    """Minimal job carrying only artifact declarations, for graph tests."""
    def _make(name, publishes=(), requires=()):
        return Job(
            name=name,
            kind="run-only",
            os=OSTag.LINUX,
            arch="amd64",
            timelimit="0:10:00",
            run=(("true",),),
            publish_artifacts=[PublishArtifact(name=n, dir=".", patterns=("*",)) for n in publishes],
            require_artifacts=[RequireArtifact(name=n) for n in requires],
        )
    return _make
