# builder.py
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .compose import extend
from .errors import ConfigurationError
from .model import Command, Job, JobTemplate, PublishArtifact, RequireArtifact, Trait
from .platforms import OSTag
from .settings import Settings
from .traits import TraitRegistry, default_registry


class JobKind(str, Enum):
    BUILD = "build"
    MUSL_BUILD = "musl-build"
    COMPILER_TEST = "compiler-test"
    JS_TEST = "js-test"
    LIBGRAAL_BUILD = "libgraal-build"
    LIBGRAAL_TEST = "libgraal-test"
    RUN_ONLY = "run-only"


# Declaration order of the assembled pipeline
KIND_ORDER: Tuple[JobKind, ...] = (
    JobKind.BUILD,
    JobKind.COMPILER_TEST,
    JobKind.JS_TEST,
    JobKind.LIBGRAAL_BUILD,
    JobKind.LIBGRAAL_TEST,
    JobKind.MUSL_BUILD,
    JobKind.RUN_ONLY,
)

# Parameters each kind accepts
KIND_PARAMS: Dict[JobKind, Tuple[str, ...]] = {
    JobKind.BUILD: ("musl",),
    JobKind.MUSL_BUILD: (),
    JobKind.COMPILER_TEST: (),
    JobKind.JS_TEST: (),
    JobKind.LIBGRAAL_BUILD: (),
    JobKind.LIBGRAAL_TEST: (),
    JobKind.RUN_ONLY: ("label", "commands", "timelimit"),
}

LOGS = ("*.log",)
TARGETS = ("gate",)

CommandsParam = Union[Sequence[Sequence[Any]], Callable[[JobTemplate], Sequence[Sequence[Any]]]]


def kind_of(value: Union[str, JobKind]) -> JobKind:
    try:
        return JobKind(value)
    except ValueError:
        raise ConfigurationError(
            f"unknown job kind {value!r}",
            details={"known": ", ".join(k.value for k in JobKind)},
        ) from None


# ---------------------------------------------------------------------
# Command helpers
# ---------------------------------------------------------------------

def cmd(*args: Any) -> Command:
    """Create a command. Pass another cmd(...) as an argument for substitution."""
    return tuple(args)


def as_command(value: Any, *, job: str = "") -> Command:
    """Normalize a user-supplied argument list (lists become tuples, recursively)."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ConfigurationError(
            "a command must be a list of arguments",
            details={"job": job, "got": repr(value)},
        )
    out: List[Any] = []
    for arg in value:
        if isinstance(arg, str):
            out.append(arg)
        else:
            out.append(as_command(arg, job=job))
    if not out:
        raise ConfigurationError("a command must not be empty", details={"job": job})
    return tuple(out)


# ---------------------------------------------------------------------
# Artifact names (shared between publishers and consumers)
# ---------------------------------------------------------------------

def labsjdk_artifact(conf: JobTemplate) -> str:
    return "labsjdk" + conf.name


def graal_commit_artifact(conf: JobTemplate) -> str:
    return "graal-commit" + conf.name


def libgraal_artifact(conf: JobTemplate) -> str:
    return "libgraal" + conf.name


# ---------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------

class JobBuilder:
    """
    Turns a composed JobTemplate plus a job kind into a concrete Job.

    Example:
        builder = JobBuilder(Settings.from_env())
        job = builder.build(compose(registry.resolve(["linux", "amd64"])), "build")
    """

    def __init__(self, settings: Optional[Settings] = None, registry: Optional[TraitRegistry] = None):
        self.settings = settings or Settings()
        self.registry = registry or default_registry()
        self._kinds: Dict[JobKind, Callable[[JobTemplate, Dict[str, Any]], Job]] = {
            JobKind.BUILD: lambda t, p: self._build_jdk(t, JobKind.BUILD, musl=bool(p.get("musl", False))),
            JobKind.MUSL_BUILD: lambda t, p: self._build_jdk(t, JobKind.MUSL_BUILD, musl=True),
            JobKind.COMPILER_TEST: self._compiler_test,
            JobKind.JS_TEST: self._js_test,
            JobKind.LIBGRAAL_BUILD: self._libgraal_build,
            JobKind.LIBGRAAL_TEST: self._libgraal_test,
            JobKind.RUN_ONLY: self._run_only,
        }

    def build(
        self,
        template: JobTemplate,
        kind: Union[str, JobKind],
        params: Optional[Mapping[str, Any]] = None,
    ) -> Job:
        kind = kind_of(kind)
        params = dict(params or {})

        unknown = sorted(set(params) - set(KIND_PARAMS[kind]))
        if unknown:
            raise ConfigurationError(
                f"{kind.value} does not accept parameters {unknown}",
                details={"accepted": ", ".join(KIND_PARAMS[kind]) or "none"},
            )

        for f in ("os", "arch"):
            if getattr(template, f) is None:
                raise ConfigurationError(
                    f"{kind.value} job cannot be derived: template has no {f}",
                    details={"kind": kind.value, "traits": "+".join(template.traits) or "<none>"},
                )

        return self._kinds[kind](template, params)

    # -----------------------------------------------------------------
    # Shared pieces
    # -----------------------------------------------------------------

    def _mixins(self, *names: str) -> List[Trait]:
        return self.registry.resolve(names, with_base=False)

    @staticmethod
    def _normalize_line_endings(conf: JobTemplate) -> List[Command]:
        if conf.os is OSTag.WINDOWS:
            # cygwin tools reject CRLF checkouts; must run before any clone
            return [cmd("git", "config", "--global", "core.autocrlf", "input")]
        return []

    def _clone_graal(self, conf: JobTemplate) -> Trait:
        return Trait(
            label="clone-graal",
            run=tuple(self._normalize_line_endings(conf)) + (
                cmd("git", "clone", cmd("mx", "urlrewrite", self.settings.graal_repo)),
                cmd("git", "-C", "graal", "checkout", self.settings.downstream_branch, "||", "true"),
            ),
        )

    @staticmethod
    def _require_labsjdk(conf: JobTemplate) -> Tuple[Trait, RequireArtifact]:
        trait = Trait(
            label="require-labsjdk",
            environment={"LABSJDK_HOME": conf.path("${PWD}/jdk/release-java-home")},
            setup=(cmd("set-export", "JAVA_HOME", conf.jdk_home("$LABSJDK_HOME")),),
        )
        return trait, RequireArtifact(name=labsjdk_artifact(conf), dir="jdk")

    @staticmethod
    def _job(
        conf: JobTemplate,
        kind: JobKind,
        name: str,
        run: Iterable[Command],
        *,
        timelimit: str,
        diskspace_required: Optional[str] = None,
        publish: Iterable[PublishArtifact] = (),
        require: Iterable[RequireArtifact] = (),
    ) -> Job:
        # trait-contributed commands always run before the kind's own steps
        return Job(
            name=name,
            kind=kind.value,
            os=conf.os,
            arch=conf.arch,
            timelimit=timelimit,
            run=conf.run + tuple(run),
            capabilities=conf.capabilities,
            environment=conf.environment,
            downloads=conf.downloads,
            packages=conf.packages,
            setup=conf.setup,
            diskspace_required=diskspace_required,
            logs=LOGS,
            targets=TARGETS,
            publish_artifacts=tuple(publish),
            require_artifacts=tuple(require),
            docker=conf.docker,
            python_version=conf.python_version,
        )

    # -----------------------------------------------------------------
    # build / musl-build
    # -----------------------------------------------------------------

    def _build_labsjdk(self, conf: JobTemplate, level: str, java_home_var: str, musl: bool) -> List[Command]:
        args = [
            "python3", "-u", conf.path("${LABSJDK_BUILDER_DIR}/build_labsjdk.py"),
            "--boot-jdk=${BOOT_JDK}",
            "--clean-after-build",
            "--jdk-debug-level=" + level,
            "--test=" + ("none" if musl else "run-test-tier1"),
        ]
        if not musl:
            args.append("--jtreg=${JT_HOME}")
        args += [
            "--java-home-link-target=${%s}" % java_home_var,
            conf.path("${PWD}"),
        ]
        return [
            cmd("set-export", java_home_var, conf.path("${PWD}/../%s-java-home" % level)),
            cmd(*args),
        ]

    def _build_jdk(self, template: JobTemplate, kind: JobKind, *, musl: bool) -> Job:
        mixins = ("musl-boot-jdk",) if musl else ("boot-jdk", "jtreg", "build-packages")
        conf = extend(template, self._mixins(*mixins))
        s = self.settings

        # (debug level, env var holding its java home)
        levels = [("release", "JAVA_HOME")]
        if not musl:
            levels.append(("fastdebug", "JAVA_HOME_FASTDEBUG"))

        run = self._normalize_line_endings(conf)
        run += [
            cmd("set-export", "LABSJDK_BUILDER_DIR", conf.path("${PWD}/../labsjdk-builder")),
            cmd("git", "clone", "--quiet", cmd("mx", "urlrewrite", s.labsjdk_builder_repo), "${LABSJDK_BUILDER_DIR}"),
            cmd("git", "-C", "${LABSJDK_BUILDER_DIR}", "checkout", s.labsjdk_builder_version),
        ]
        for level, var in levels:
            run += self._build_labsjdk(conf, level, var, musl)
        for _level, var in levels:
            run.append(cmd(conf.exe("${%s}/bin/java" % var), "-version"))

        publish: List[PublishArtifact] = []
        if not musl:
            for level, var in levels:
                run.append(cmd(*conf.copydir("${%s}" % var, "${PWD}/%s-java-home" % level)))
            publish.append(PublishArtifact(name=labsjdk_artifact(conf), dir=".", patterns=("*-java-home",)))

        return self._job(
            conf,
            kind,
            "build-jdk" + conf.name,
            run,
            timelimit="1:50:00",
            diskspace_required="10G",
            publish=publish,
        )

    # -----------------------------------------------------------------
    # Downstream graal jobs
    # -----------------------------------------------------------------

    def _graal_conf(self, template: JobTemplate) -> Tuple[JobTemplate, RequireArtifact]:
        require_trait, require = self._require_labsjdk(template)
        return extend(template, [require_trait, self._clone_graal(template)]), require

    def _compiler_test(self, template: JobTemplate, params: Dict[str, Any]) -> Job:
        conf, require = self._graal_conf(template)
        run = [cmd("mx", "-p", "graal/compiler", "gate", "--tags", "build,test,bootstraplite")]
        return self._job(conf, JobKind.COMPILER_TEST, "test-compiler" + conf.name, run,
                         timelimit="1:00:00", require=[require])

    def _js_test(self, template: JobTemplate, params: Dict[str, Any]) -> Job:
        conf, require = self._graal_conf(template)
        run = [
            cmd("mx", "-p", "graal/vm", "--dynamicimports", "/graal-js,/compiler",
                "gate", "--tags", "build,Test262-default"),
        ]
        return self._job(conf, JobKind.JS_TEST, "test-js" + conf.name, run,
                         timelimit="1:00:00", require=[require])

    def _libgraal_build(self, template: JobTemplate, params: Dict[str, Any]) -> Job:
        conf, require = self._graal_conf(template)
        mx_libgraal = ("mx", "-p", "graal/vm", "--env", "libgraal")
        run = [
            cmd(*mx_libgraal,
                "--extra-image-builder-argument=-J-esa",
                "--extra-image-builder-argument=-H:+ReportExceptionStackTraces",
                "build"),
            cmd("set-export", "LIBGRAAL_HOME", cmd(*mx_libgraal, "--quiet", "--no-warning", "graalvm-home")),
            cmd(*conf.copydir("${LIBGRAAL_HOME}", "${PWD}/libgraal-home")),
            cmd("git", "-C", "graal", "log", "-1", "--format=%H", "--output=" + conf.path("${PWD}/graal-commit")),
        ]
        publish = [
            PublishArtifact(name=graal_commit_artifact(conf), dir=".", patterns=("graal-commit",)),
            PublishArtifact(name=libgraal_artifact(conf), dir=".", patterns=("libgraal-home",)),
        ]
        return self._job(conf, JobKind.LIBGRAAL_BUILD, "build-libgraal" + conf.name, run,
                         timelimit="1:00:00", publish=publish, require=[require])

    def _libgraal_test(self, template: JobTemplate, params: Dict[str, Any]) -> Job:
        conf, require = self._graal_conf(template)
        run = [
            # test the exact graal revision libgraal was built from
            cmd("git", "-C", "graal", "checkout", cmd("cat", "graal-commit")),
            cmd("set-export", "LIBGRAAL_HOME", conf.path("${PWD}/libgraal-home")),
            cmd(conf.exe("${LIBGRAAL_HOME}/bin/java"),
                "-XX:+UnlockExperimentalVMOptions", "-XX:+UseJVMCICompiler", "-XX:+UseJVMCINativeLibrary",
                "-version"),
            cmd("mx", "-p", "graal/vm", "--env", "libgraal", "gate", "--task", "LibGraal Compiler"),
        ]
        requires = [
            require,
            RequireArtifact(name=graal_commit_artifact(conf), dir=".", auto_extract=False),
            RequireArtifact(name=libgraal_artifact(conf), dir=".", auto_extract=True),
        ]
        return self._job(conf, JobKind.LIBGRAAL_TEST, "test-libgraal" + conf.name, run,
                         timelimit="1:00:00", require=requires)

    # -----------------------------------------------------------------
    # run-only
    # -----------------------------------------------------------------

    def _run_only(self, template: JobTemplate, params: Dict[str, Any]) -> Job:
        label = params.get("label")
        if not label or not isinstance(label, str):
            raise ConfigurationError("run-only jobs need a 'label' parameter",
                                     details={"traits": "+".join(template.traits)})

        require_trait, require = self._require_labsjdk(template)
        conf = extend(template, [require_trait])
        name = "run-" + label + conf.name

        commands: Optional[CommandsParam] = params.get("commands")
        if callable(commands):
            commands = commands(conf)
        if not commands:
            raise ConfigurationError("run-only jobs need at least one command", details={"job": name})
        run = [as_command(c, job=name) for c in commands]

        return self._job(conf, JobKind.RUN_ONLY, name, run,
                         timelimit=params.get("timelimit", "0:30:00"), require=[require])


def build_job(
    template: JobTemplate,
    kind: Union[str, JobKind],
    params: Optional[Mapping[str, Any]] = None,
    *,
    settings: Optional[Settings] = None,
    registry: Optional[TraitRegistry] = None,
) -> Job:
    """Convenience: build_job(template, "build", {"musl": False})"""
    return JobBuilder(settings, registry).build(template, kind, params)
