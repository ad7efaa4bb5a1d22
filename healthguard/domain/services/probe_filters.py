"""Predicate builders for selecting probes at evaluation time."""

from __future__ import annotations

from typing import Iterable

from healthguard.domain.ports.health_check import ProbePredicate
from healthguard.domain.ports.probe import IProbe


def _tags_of(probe: IProbe) -> frozenset:
    return frozenset(getattr(probe, "tags", None) or ())


def has_any_tag(*tags: str) -> ProbePredicate:
    """Select probes carrying at least one of ``tags``."""
    wanted = frozenset(tags)
    return lambda probe: bool(_tags_of(probe) & wanted)


def has_all_tags(*tags: str) -> ProbePredicate:
    wanted = frozenset(tags)
    return lambda probe: wanted <= _tags_of(probe)


def exclude_tags(*tags: str) -> ProbePredicate:
    """Select probes carrying none of ``tags``."""
    unwanted = frozenset(tags)
    return lambda probe: not (_tags_of(probe) & unwanted)


def named(*names: str) -> ProbePredicate:
    wanted = frozenset(names)
    return lambda probe: probe.name in wanted


def all_of(predicates: Iterable[ProbePredicate]) -> ProbePredicate:
    predicates = tuple(predicates)
    return lambda probe: all(predicate(probe) for predicate in predicates)
