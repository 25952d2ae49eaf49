# compose.py
from __future__ import annotations

from functools import reduce
from typing import Iterable, Tuple

from .errors import CompositionError
from .model import JobTemplate, Trait

# ---------------------------------------------------------------------
# Merge rules, one per field kind
# ---------------------------------------------------------------------
#   exclusive    os                        set by at most one trait
#   singular     arch                      same value ok, different value -> error
#   scalar       docker, python_version    later wins, None defers
#   set          capabilities              union, first occurrence order
#   suffix       name                      concatenation
#   keyed        environment, downloads,   per key, later wins
#                packages
#   ordered      setup, run                concatenation
#   function     path, exe, copydir,       later replaces, None defers
#                jdk_home
# ---------------------------------------------------------------------

EXCLUSIVE_FIELDS = ("os",)
SINGULAR_FIELDS = EXCLUSIVE_FIELDS + ("arch",)
SCALAR_FIELDS = ("docker", "python_version")
KEYED_FIELDS = ("environment", "downloads", "packages")
ORDERED_FIELDS = ("setup", "run")
FUNCTION_FIELDS = ("path", "exe", "copydir", "jdk_home")


def _display(value) -> str:
    return str(getattr(value, "value", value))


def _union(first: Tuple[str, ...], second: Tuple[str, ...]) -> Tuple[str, ...]:
    # dict keeps insertion order, so this dedups without reordering
    return tuple(dict.fromkeys(first + second))


def merge(template: JobTemplate, trait: Trait) -> JobTemplate:
    """Apply one trait on top of a template. Neither input is modified."""
    label = trait.label or "<anonymous>"
    owners = dict(template.owners)
    values = {}

    for f in SINGULAR_FIELDS:
        current = getattr(template, f)
        new = getattr(trait, f)
        if new is None:
            values[f] = current
            continue
        if current is None:
            owners[f] = label
            values[f] = new
            continue
        if new == current and f not in EXCLUSIVE_FIELDS:
            values[f] = current
            continue
        # templates built directly carry no owner
        owner = owners.get(f, "<template>")
        raise CompositionError(
            f"traits {owner!r} and {label!r} both set {f}",
            details={
                "field": f,
                "first": f"{owner}={_display(current)}",
                "second": f"{label}={_display(new)}",
                "composed": "+".join(template.traits + (label,)),
            },
        )

    for f in SCALAR_FIELDS + FUNCTION_FIELDS:
        new = getattr(trait, f)
        values[f] = getattr(template, f) if new is None else new

    for f in KEYED_FIELDS:
        values[f] = {**getattr(template, f), **getattr(trait, f)}

    for f in ORDERED_FIELDS:
        values[f] = getattr(template, f) + getattr(trait, f)

    return JobTemplate(
        traits=template.traits + (label,),
        capabilities=_union(template.capabilities, trait.capabilities),
        name=template.name + trait.name,
        owners=owners,
        **values,
    )


def extend(template: JobTemplate, traits: Iterable[Trait]) -> JobTemplate:
    """Fold further traits onto an existing template, same rules as compose()."""
    return reduce(merge, traits, template)


def compose(traits: Iterable[Trait]) -> JobTemplate:
    """
    Merge an ordered sequence of traits into one JobTemplate.

    Order matters: name suffixes concatenate in order ("-linux-amd64" vs
    "-amd64-linux") and later traits override earlier ones key by key.

    Raises:
        CompositionError: two traits set an OS tag, or set different architectures.
    """
    return extend(JobTemplate(), traits)
