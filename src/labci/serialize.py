# serialize.py
from __future__ import annotations

import json
from typing import Any, Dict, List

from .model import Command, Job, Pipeline


def command_to_list(command: Command) -> List[Any]:
    return [arg if isinstance(arg, str) else command_to_list(arg) for arg in command]


def job_to_dict(job: Job) -> dict:
    """
    Convert a Job to the record the CI engine consumes.

    Args:
        job: Job model instance

    Returns:
        Dictionary with job definition
    """
    publish = [
        {"name": a.name, "dir": a.dir, "patterns": list(a.patterns)}
        for a in job.publish_artifacts
    ]

    require = []
    for a in job.require_artifacts:
        artifact = {"name": a.name, "dir": a.dir}
        if a.auto_extract is not None:
            artifact["autoExtract"] = a.auto_extract
        require.append(artifact)

    # Build job dict with required fields
    job_dict = {
        "name": job.name,
        "timelimit": job.timelimit,
        "logs": list(job.logs),
        "targets": list(job.targets),
        "run": [command_to_list(c) for c in job.run],
        "publishArtifacts": publish,
        "requireArtifacts": require,
        "environment": dict(job.environment),
        "downloads": {
            var: {"name": d.name, "version": d.version, "platformspecific": d.platformspecific}
            for var, d in job.downloads.items()
        },
        "packages": dict(job.packages),
        "capabilities": list(job.capabilities),
    }

    # Add optional fields if present
    if job.diskspace_required is not None:
        job_dict["diskspace_required"] = job.diskspace_required
    if job.setup:
        job_dict["setup"] = [command_to_list(c) for c in job.setup]
    if job.docker is not None:
        job_dict["docker"] = {"image": job.docker.image, "mount_modules": job.docker.mount_modules}
    if job.python_version is not None:
        job_dict["python_version"] = job.python_version

    return job_dict


def pipeline_to_dict(pipeline: Pipeline) -> Dict[str, Any]:
    return {
        "builds": [job_to_dict(j) for j in pipeline.jobs],
        "dependencies": [
            {"producer": e.producer, "consumer": e.consumer, "artifacts": list(e.artifacts)}
            for e in pipeline.edges
        ],
    }


def dumps(pipeline: Pipeline, *, indent: int | None = 2) -> str:
    # sorted keys; lists keep generation order, so output is byte-stable
    return json.dumps(pipeline_to_dict(pipeline), sort_keys=True, indent=indent, ensure_ascii=False) + "\n"
