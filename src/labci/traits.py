# traits.py
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence

from .errors import ConfigurationError
from .model import Docker, Download, Trait
from .platforms import (
    OSTag,
    darwin_jdk_home,
    unix_copydir,
    unix_exe,
    unix_jdk_home,
    unix_path,
    windows_copydir,
    windows_exe,
    windows_path,
)

MX_VERSION = "6.9.9"

BUILDER_IMAGE = "phx.ocir.io/oraclelabs2/c_graal/jdk-snapshot-builder:2021-11-11"
MUSL_BUILDER_IMAGE = "phx.ocir.io/oraclelabs2/c_graal/jdk-snapshot-builder:musl-2021-11-11"


class TraitRegistry:
    """
    Immutable name -> Trait table.

    `base` names the traits every matrix cell starts from (in order), before
    the traits listed in the combination itself.
    """

    def __init__(self, traits: Mapping[str, Trait], base: Sequence[str] = ()):
        self._traits = MappingProxyType(dict(traits))
        self.base = tuple(base)
        for name in self.base:
            self.get(name)

    def get(self, name: str) -> Trait:
        try:
            return self._traits[name]
        except KeyError:
            raise ConfigurationError(
                f"unknown trait {name!r}",
                details={"known": ", ".join(sorted(self._traits))},
            ) from None

    def resolve(self, names: Iterable[str], *, with_base: bool = True) -> List[Trait]:
        prefix = list(self.base) if with_base else []
        return [self.get(n) for n in prefix + list(names)]

    def names(self) -> List[str]:
        return list(self._traits)

    def __contains__(self, name: object) -> bool:
        return name in self._traits

    def __iter__(self) -> Iterator[str]:
        return iter(self._traits)

    def __len__(self) -> int:
        return len(self._traits)


# ---------------------------------------------------------------------
# Base traits
# ---------------------------------------------------------------------

MX = Trait(
    label="mx",
    python_version="3",
    packages={"mx": MX_VERSION},
)

OS_BASE = Trait(
    label="os-base",
    environment={
        "JIB_PATH": "${PATH}",
        "MAKE": "make",
        "ZLIB_BUNDLING": "system",
    },
    path=unix_path,
    exe=unix_exe,
    copydir=unix_copydir,
    jdk_home=unix_jdk_home,
)

# ---------------------------------------------------------------------
# Operating systems
# ---------------------------------------------------------------------

LINUX = Trait(
    label="linux",
    os=OSTag.LINUX,
    capabilities=("linux",),
    name="-linux",
    # devkit_platform_revisions in make/conf/jib-profiles.js
    packages={"devkit:gcc10.3.0-OL6.4+1": "==0"},
    docker=Docker(image=BUILDER_IMAGE, mount_modules=True),
)

LINUX_MUSL = Trait(
    label="linux-musl",
    os=OSTag.LINUX,
    capabilities=("linux",),
    name="-linux",
    docker=Docker(image=MUSL_BUILDER_IMAGE),
)

DARWIN = Trait(
    label="darwin",
    os=OSTag.DARWIN,
    capabilities=("darwin",),
    name="-darwin",
    packages={"devkit:Xcode12.4+1": "==0"},
    environment={"MACOSX_DEPLOYMENT_TARGET": "10.13"},
    jdk_home=darwin_jdk_home,
)

WINDOWS = Trait(
    label="windows",
    os=OSTag.WINDOWS,
    capabilities=("windows",),
    name="-windows",
    packages={"devkit:VS2019-16.9.3+1": "==0"},
    downloads={"CYGWIN": Download(name="cygwin", version="3.0.7", platformspecific=True)},
    environment={
        "JIB_PATH": "$CYGWIN\\bin;$PATH",
        "ZLIB_BUNDLING": "bundled",
    },
    path=windows_path,
    exe=windows_exe,
    copydir=windows_copydir,
)

# ---------------------------------------------------------------------
# Architectures
# ---------------------------------------------------------------------

AMD64 = Trait(label="amd64", arch="amd64", capabilities=("amd64",), name="-amd64")

AMD64_MUSL = Trait(label="amd64-musl", arch="amd64", capabilities=("amd64",), name="-amd64-musl")

AARCH64 = Trait(label="aarch64", arch="aarch64", capabilities=("aarch64",), name="-aarch64")

# ---------------------------------------------------------------------
# Features (composed by the job builder, not by the matrix)
# ---------------------------------------------------------------------

BOOT_JDK = Trait(
    label="boot-jdk",
    downloads={"BOOT_JDK": Download(name="oraclejdk", version="17.0.1+12", platformspecific=True)},
)

MUSL_BOOT_JDK = Trait(
    label="musl-boot-jdk",
    downloads={"BOOT_JDK": Download(name="labsjdk", version="ce-17.0.1+12-musl", platformspecific=True)},
)

JTREG = Trait(
    label="jtreg",
    downloads={"JT_HOME": Download(name="jtreg", version="6.1", platformspecific=False)},
)

BUILD_PACKAGES = Trait(
    label="build-packages",
    packages={
        "pip:pylint": "==2.4.4",
        "pip:ninja_syntax": "==1.7.2",
    },
)


DEFAULT_TRAITS = {
    t.label: t
    for t in (
        MX, OS_BASE,
        LINUX, LINUX_MUSL, DARWIN, WINDOWS,
        AMD64, AMD64_MUSL, AARCH64,
        BOOT_JDK, MUSL_BOOT_JDK, JTREG, BUILD_PACKAGES,
    )
}

DEFAULT_BASE = ("mx", "os-base")

_default: Optional[TraitRegistry] = None


def default_registry() -> TraitRegistry:
    """The process-wide registry, built once."""
    global _default
    if _default is None:
        _default = TraitRegistry(DEFAULT_TRAITS, base=DEFAULT_BASE)
    return _default
