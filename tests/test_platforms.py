# tests/test_platforms.py
from labci.platforms import (
    OSTag,
    darwin_jdk_home,
    unix_copydir,
    unix_path,
    windows_copydir,
    windows_exe,
    windows_path,
)


def test_windows_path():
    assert windows_path("a/b/c") == "a\\b\\c"
    assert windows_path("${PWD}/../jdk") == "${PWD}\\..\\jdk"


def test_unix_path_is_identity():
    assert unix_path("a/b/c") == "a/b/c"


def test_windows_exe_appends_suffix():
    assert windows_exe("${JAVA_HOME}/bin/java") == "${JAVA_HOME}\\bin\\java.exe"


def test_copydir():
    assert unix_copydir("a/b", "c") == ["cp", "-r", "a/b", "c"]
    assert windows_copydir("a/b", "c/d") == ["xcopy", "a\\b", "c\\d", "/e", "/i", "/q"]


def test_darwin_jdk_home():
    assert darwin_jdk_home("$LABSJDK_HOME") == "$LABSJDK_HOME/Contents/Home"


def test_os_tag():
    assert OSTag("windows").is_windows
    assert not OSTag.LINUX.is_windows
    assert OSTag.DARWIN.value == "darwin"
