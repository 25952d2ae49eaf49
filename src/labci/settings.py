# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

GRAAL_REPO = "https://github.com/graalvm/graal.git"
LABSJDK_BUILDER_REPO = "https://github.com/graalvm/labs-openjdk-builder.git"


@dataclass(frozen=True)
class Settings:
    """Versions and locations the generated commands refer to."""
    labsjdk_builder_repo: str = LABSJDK_BUILDER_REPO
    labsjdk_builder_version: str = "master"
    graal_repo: str = GRAAL_REPO
    # Downstream Graal branch to test against
    downstream_branch: str = "master"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            labsjdk_builder_repo=env.get("LABCI_BUILDER_REPO", defaults.labsjdk_builder_repo),
            labsjdk_builder_version=env.get("LABCI_BUILDER_VERSION", defaults.labsjdk_builder_version),
            graal_repo=env.get("LABCI_GRAAL_REPO", defaults.graal_repo),
            downstream_branch=env.get("LABCI_DOWNSTREAM_BRANCH", defaults.downstream_branch),
        )
