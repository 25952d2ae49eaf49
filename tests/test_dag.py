# tests/test_dag.py
import pytest

from labci.dag import resolve, topo_levels
from labci.errors import ConfigurationError, CyclicDependency, DuplicateProducer, UnresolvedArtifact
from labci.model import Edge


def test_one_publisher_one_consumer(make_job):
    pipeline = resolve([
        make_job("producer", publishes=["A"]),
        make_job("consumer", requires=["A"]),
    ])
    assert pipeline.edges == (Edge(producer="producer", consumer="consumer", artifacts=("A",)),)


def test_missing_publisher(make_job):
    with pytest.raises(UnresolvedArtifact) as exc:
        resolve([make_job("consumer", requires=["A"])])
    assert exc.value.details["artifact"] == "A"
    assert exc.value.details["job"] == "consumer"


@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
def test_duplicate_producer(make_job, order):
    publishers = [make_job("first", publishes=["A"]), make_job("second", publishes=["A"])]
    jobs = [publishers[i] for i in order]
    with pytest.raises(DuplicateProducer) as exc:
        resolve(jobs + [make_job("consumer", requires=["A"])])
    assert exc.value.details["artifact"] == "A"


def test_duplicate_producer_without_consumers(make_job):
    with pytest.raises(DuplicateProducer):
        resolve([make_job("first", publishes=["A"]), make_job("second", publishes=["A"])])


def test_one_edge_per_producer_consumer_pair(make_job):
    pipeline = resolve([
        make_job("producer", publishes=["A", "B"]),
        make_job("consumer", requires=["A", "B", "A"]),
    ])
    assert pipeline.edges == (Edge(producer="producer", consumer="consumer", artifacts=("A", "B")),)


def test_self_requirement_is_a_cycle(make_job):
    with pytest.raises(CyclicDependency):
        resolve([make_job("loop", publishes=["A"], requires=["A"])])


def test_two_job_cycle(make_job):
    with pytest.raises(CyclicDependency) as exc:
        resolve([
            make_job("x", publishes=["A"], requires=["B"]),
            make_job("y", publishes=["B"], requires=["A"]),
            make_job("z"),
        ])
    assert exc.value.details["stuck"] == "x, y"


def test_duplicate_job_names(make_job):
    with pytest.raises(ConfigurationError):
        resolve([make_job("same"), make_job("same")])


def test_jobs_keep_original_order(make_job):
    jobs = [
        make_job("consumer", requires=["A"]),
        make_job("unrelated"),
        make_job("producer", publishes=["A"]),
    ]
    pipeline = resolve(jobs)
    assert [j.name for j in pipeline.jobs] == ["consumer", "unrelated", "producer"]


def test_stages(make_job):
    pipeline = resolve([
        make_job("c", requires=["A"]),
        make_job("b"),
        make_job("a", publishes=["A"]),
    ])
    assert topo_levels(pipeline) == [["b", "a"], ["c"]]
    assert pipeline.stages() == topo_levels(pipeline)


def test_dependency_queries(make_job):
    pipeline = resolve([
        make_job("a", publishes=["A"]),
        make_job("b", publishes=["B"], requires=["A"]),
        make_job("c", requires=["B"]),
        make_job("d", requires=["A"]),
        make_job("e"),
    ])
    assert pipeline.dependencies_of("c") == ["b"]
    assert pipeline.dependents_of("a") == ["b", "d"]
    assert pipeline.transitive_dependents("a") == ["b", "c", "d"]
    assert pipeline.transitive_dependents("e") == []
    assert pipeline.artifact_producers() == {"A": "a", "B": "b"}

    with pytest.raises(KeyError):
        pipeline.transitive_dependents("missing")
