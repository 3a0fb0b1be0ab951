"""Equality-based label selectors evaluated by watch sources.

Supported terms, comma separated: ``key=value``, ``key==value``,
``key!=value``, ``key`` (exists), and ``!key`` (absent).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from ..errors import SelectorError

_KEY_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9_.\-/]*[A-Za-z0-9])?$")
_VALUE_RE = re.compile(r"^([A-Za-z0-9]([A-Za-z0-9_.\-]*[A-Za-z0-9])?)?$")


@dataclass(frozen=True)
class Requirement:
    key: str
    op: str
    value: str = ""

    def matches(self, labels: Mapping[str, str]) -> bool:
        if self.op == "exists":
            return self.key in labels
        if self.op == "!exists":
            return self.key not in labels
        if self.op == "=":
            return labels.get(self.key) == self.value
        return labels.get(self.key) != self.value


@dataclass(frozen=True)
class LabelSelector:
    requirements: tuple[Requirement, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Return whether every requirement holds; the empty selector matches all."""
        return all(req.matches(labels) for req in self.requirements)


def _check_key(key: str, term: str) -> str:
    if not _KEY_RE.match(key):
        raise SelectorError(f"invalid label key {key!r} in {term!r}")
    return key


def _check_value(value: str, term: str) -> str:
    if not _VALUE_RE.match(value):
        raise SelectorError(f"invalid label value {value!r} in {term!r}")
    return value


def parse_selector(text: str) -> LabelSelector:
    """Parse ``text`` into a selector; blank text selects everything."""
    requirements: list[Requirement] = []
    for raw in text.split(","):
        term = raw.strip()
        if not term:
            if text.strip():
                raise SelectorError(f"empty term in selector {text!r}")
            continue
        if "!=" in term:
            key, value = term.split("!=", 1)
            requirements.append(Requirement(_check_key(key.strip(), term), "!=", _check_value(value.strip(), term)))
        elif "==" in term:
            key, value = term.split("==", 1)
            requirements.append(Requirement(_check_key(key.strip(), term), "=", _check_value(value.strip(), term)))
        elif "=" in term:
            key, value = term.split("=", 1)
            requirements.append(Requirement(_check_key(key.strip(), term), "=", _check_value(value.strip(), term)))
        elif term.startswith("!"):
            requirements.append(Requirement(_check_key(term[1:].strip(), term), "!exists"))
        else:
            requirements.append(Requirement(_check_key(term, term), "exists"))
    return LabelSelector(tuple(requirements))
