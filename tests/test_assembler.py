# tests/test_assembler.py
import pytest

from labci.assembler import assemble, generate
from labci.builder import JobKind
from labci.errors import ConfigurationError, UnresolvedArtifact
from labci.matrix import Matrix


def test_assemble_uses_fixed_kind_order(make_job):
    pipeline = assemble({
        "run-only": [make_job("run", requires=["A"])],
        JobKind.MUSL_BUILD: [make_job("musl")],
        "build": [make_job("build", publishes=["A"])],
    })
    assert [j.name for j in pipeline.jobs] == ["build", "musl", "run"]
    assert pipeline.dependencies_of("run") == ["build"]


def test_assemble_unknown_kind(make_job):
    with pytest.raises(ConfigurationError):
        assemble({"deploy": [make_job("x")]})


def test_default_pipeline_jobs():
    pipeline = generate()
    names = [j.name for j in pipeline.jobs]

    assert len(names) == 18
    assert names[:4] == [
        "build-jdk-linux-amd64",
        "build-jdk-darwin-amd64",
        "build-jdk-windows-amd64",
        "build-jdk-linux-aarch64",
    ]
    assert names[4:7] == [
        "test-compiler-linux-amd64",
        "test-compiler-darwin-amd64",
        "test-compiler-linux-aarch64",
    ]
    assert names[-2:] == ["build-jdk-linux-amd64-musl", "run-jvmci-version-linux-amd64"]
    assert len(pipeline.edges) == 16


def test_libgraal_test_waits_for_both_builds():
    pipeline = generate()
    assert pipeline.dependencies_of("test-libgraal-linux-amd64") == [
        "build-jdk-linux-amd64",
        "build-libgraal-linux-amd64",
    ]


def test_windows_build_has_no_consumers():
    pipeline = generate()
    assert pipeline.dependents_of("build-jdk-windows-amd64") == []


def test_default_pipeline_stages():
    stages = generate().stages()

    assert len(stages) == 3
    assert "build-jdk-linux-amd64-musl" in stages[0]
    assert all(n.startswith("build-jdk") for n in stages[0])
    assert all(n.startswith("test-libgraal") for n in stages[2])


def test_failed_build_skips_dependents():
    pipeline = generate()
    assert pipeline.transitive_dependents("build-jdk-linux-amd64") == [
        "test-compiler-linux-amd64",
        "test-js-linux-amd64",
        "build-libgraal-linux-amd64",
        "test-libgraal-linux-amd64",
        "run-jvmci-version-linux-amd64",
    ]


def test_generate_fails_closed_without_publisher():
    with pytest.raises(UnresolvedArtifact):
        generate(matrices=[Matrix("compiler-test", [("linux", "amd64")])])


def test_generate_with_custom_matrix():
    pipeline = generate(matrices=[
        Matrix("build", [("linux", "aarch64")]),
        Matrix("js-test", [("linux", "aarch64")]),
    ])
    assert [j.name for j in pipeline.jobs] == ["build-jdk-linux-aarch64", "test-js-linux-aarch64"]
    assert len(pipeline.edges) == 1
