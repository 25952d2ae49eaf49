# platforms.py
# Per-OS path handling. Commands are written with Unix paths; each OS trait
# carries the functions that rewrite them for its machines.
from __future__ import annotations

from enum import Enum
from typing import Callable, List


class OSTag(str, Enum):
    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"

    @property
    def is_windows(self) -> bool:
        return self is OSTag.WINDOWS


PathFn = Callable[[str], str]
CopyDirFn = Callable[[str, str], List[str]]


# ---------------------------------------------------------------------
# Unix-like (Linux and Darwin share these)
# ---------------------------------------------------------------------

def unix_path(unixpath: str) -> str:
    return unixpath


def unix_exe(unixpath: str) -> str:
    return unixpath


def unix_copydir(src: str, dst: str) -> List[str]:
    return ["cp", "-r", src, dst]


def unix_jdk_home(java_home: str) -> str:
    return java_home


# ---------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------

def windows_path(unixpath: str) -> str:
    """Windows path("a/b/c") == "a\\b\\c"."""
    return unixpath.replace("/", "\\")


def windows_exe(unixpath: str) -> str:
    return windows_path(unixpath) + ".exe"


def windows_copydir(src: str, dst: str) -> List[str]:
    # /e: include empty subdirs, /i: dst is a directory, /q: quiet
    return ["xcopy", windows_path(src), windows_path(dst), "/e", "/i", "/q"]


# ---------------------------------------------------------------------
# Darwin
# ---------------------------------------------------------------------

def darwin_jdk_home(java_home: str) -> str:
    """JDK images on macOS are bundles; the usable home sits inside."""
    return java_home + "/Contents/Home"
