# tests/test_serialize.py
import json

from labci.assembler import generate
from labci.serialize import dumps, job_to_dict
from labci.settings import Settings


def test_generation_is_byte_identical():
    first = dumps(generate())
    second = dumps(generate(settings=Settings()))
    assert first == second


def test_windows_build_record(builder, conf):
    record = job_to_dict(builder.build(conf("windows", "amd64"), "build"))

    assert record["name"] == "build-jdk-windows-amd64"
    assert record["timelimit"] == "1:50:00"
    assert record["diskspace_required"] == "10G"
    assert record["publishArtifacts"] == [
        {"name": "labsjdk-windows-amd64", "dir": ".", "patterns": ["*-java-home"]},
    ]
    assert record["requireArtifacts"] == []
    assert record["downloads"]["CYGWIN"] == {"name": "cygwin", "version": "3.0.7", "platformspecific": True}
    assert record["capabilities"] == ["windows", "amd64"]
    assert record["run"][0] == ["git", "config", "--global", "core.autocrlf", "input"]
    assert "docker" not in record


def test_require_artifacts_only_carry_auto_extract_when_set(builder, conf):
    record = job_to_dict(builder.build(conf("linux", "amd64"), "libgraal-test"))

    assert record["requireArtifacts"] == [
        {"name": "labsjdk-linux-amd64", "dir": "jdk"},
        {"name": "graal-commit-linux-amd64", "dir": ".", "autoExtract": False},
        {"name": "libgraal-linux-amd64", "dir": ".", "autoExtract": True},
    ]
    assert record["setup"] == [["set-export", "JAVA_HOME", "$LABSJDK_HOME"]]
    assert "diskspace_required" not in record


def test_nested_commands_become_lists(builder, conf):
    record = job_to_dict(builder.build(conf("linux", "amd64"), "libgraal-build"))

    [export] = [c for c in record["run"] if c[:2] == ["set-export", "LIBGRAAL_HOME"]]
    assert export[2] == ["mx", "-p", "graal/vm", "--env", "libgraal", "--quiet", "--no-warning", "graalvm-home"]
    assert record["docker"]["mount_modules"] is True


def test_pipeline_document():
    pipeline = generate()
    doc = json.loads(dumps(pipeline))

    assert [b["name"] for b in doc["builds"]] == [j.name for j in pipeline.jobs]
    assert len(doc["dependencies"]) == len(pipeline.edges)
    assert doc["dependencies"][0] == {
        "producer": "build-jdk-linux-amd64",
        "consumer": "test-compiler-linux-amd64",
        "artifacts": ["labsjdk-linux-amd64"],
    }


def test_compact_output_is_single_line():
    text = dumps(generate(), indent=None)
    assert text.count("\n") == 1
