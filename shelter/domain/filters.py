"""
Animal / adoption-request filter compiler.

A filter request is a collection of typed filter objects, one per criterion.
`compile_filters` turns them into an AND-joined WHERE fragment plus the
positional parameters for it. Column names are fixed here; every value is
bound through a `?` placeholder.

Empty-set policy:
- Status / Sex / SpeciesAndBreeds with nothing selected -> zero matches ("1=0").
- AdmissionDate / AdoptionDate with `all_time` or an unknown token -> no predicate.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Iterable, Mapping, Optional, Union

from ..errors import InvalidInput
from .models import RequestStatus


class FilterCriteria(Enum):
    STATUS = "status"
    SEX = "sex"
    SPECIES_AND_BREEDS = "species_and_breeds"
    ADMISSION_DATE = "admission_date"
    ADOPTION_DATE = "adoption_date"


class Period(Enum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    ALL_TIME = "all_time"


NO_MATCH = "1=0"


@dataclass(frozen=True)
class StatusFilter:
    statuses: frozenset[str]
    criteria: ClassVar[FilterCriteria] = FilterCriteria.STATUS


@dataclass(frozen=True)
class SexFilter:
    sexes: frozenset[str]
    criteria: ClassVar[FilterCriteria] = FilterCriteria.SEX


@dataclass(frozen=True)
class SpeciesAndBreedsFilter:
    species: Mapping[str, frozenset[str]]
    criteria: ClassVar[FilterCriteria] = FilterCriteria.SPECIES_AND_BREEDS


@dataclass(frozen=True)
class AdmissionDateFilter:
    period: str
    criteria: ClassVar[FilterCriteria] = FilterCriteria.ADMISSION_DATE


@dataclass(frozen=True)
class AdoptionDateFilter:
    period: str
    criteria: ClassVar[FilterCriteria] = FilterCriteria.ADOPTION_DATE


AnimalFilter = Union[StatusFilter, SexFilter, SpeciesAndBreedsFilter, AdmissionDateFilter, AdoptionDateFilter]

ANIMAL_CRITERIA = frozenset(FilterCriteria)
REQUEST_CRITERIA = frozenset({FilterCriteria.STATUS})

# Correlated existence check; never a join, so animals are not duplicated.
_ADOPTED_SINCE_SQL = (
    "EXISTS (SELECT 1 FROM adoption_requests ar "
    "WHERE ar.animal_id = animals.id AND ar.status = ? AND ar.adoption_timestamp >= ?)"
)


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def period_start(token: str, now: dt.datetime | None = None) -> int | None:
    """UTC epoch seconds at which `token`'s period begins; None means unbounded."""
    try:
        period = Period(token)
    except ValueError:
        return None
    if period is Period.ALL_TIME:
        return None

    now = now or _utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    today = now.astimezone(dt.timezone.utc).date()

    if period is Period.TODAY:
        start = today
    elif period is Period.THIS_WEEK:
        start = today - dt.timedelta(days=today.weekday())  # Monday == 0
    elif period is Period.THIS_MONTH:
        start = today.replace(day=1)
    else:
        start = today.replace(month=1, day=1)
    return int(dt.datetime(start.year, start.month, start.day, tzinfo=dt.timezone.utc).timestamp())


def _in_clause(column: str, values: Iterable[str], params: list) -> str:
    values = sorted(values)
    if not values:
        return NO_MATCH
    params.extend(values)
    return f"{column} IN ({','.join(['?'] * len(values))})"


def compile_filters(
    filters: Iterable[Optional[AnimalFilter]] | None,
    now: dt.datetime | None = None,
) -> tuple[str, list[Any]]:
    """Return (predicate, params). An empty predicate means "no filtering"."""
    where: list[str] = []
    params: list[Any] = []
    for f in filters or ():
        if f is None:
            continue
        if isinstance(f, StatusFilter):
            where.append(_in_clause("status", f.statuses, params))
        elif isinstance(f, SexFilter):
            where.append(_in_clause("sex", f.sexes, params))
        elif isinstance(f, SpeciesAndBreedsFilter):
            ors = []
            for specie in sorted(f.species):
                breeds = sorted(f.species[specie])
                if not breeds:
                    continue
                ors.append(f"(specie = ? AND breed IN ({','.join(['?'] * len(breeds))}))")
                params.append(specie)
                params.extend(breeds)
            where.append("(" + " OR ".join(ors) + ")" if ors else NO_MATCH)
        elif isinstance(f, AdmissionDateFilter):
            start = period_start(f.period, now)
            if start is not None:
                where.append("admission_timestamp >= ?")
                params.append(start)
        elif isinstance(f, AdoptionDateFilter):
            start = period_start(f.period, now)
            if start is not None:
                where.append(_ADOPTED_SINCE_SQL)
                params.extend([RequestStatus.APPROVED.to_db(), start])
        else:
            raise TypeError(f"unsupported filter: {f!r}")
    return " AND ".join(where), params


# ---------------- wire format ----------------

def _as_str_set(key: str, value: Any) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset({value})
    if not isinstance(value, (list, tuple, set, frozenset)) or not all(isinstance(v, str) for v in value):
        raise InvalidInput(f"Filter '{key}' expects a list of strings")
    return frozenset(value)


def _as_token(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidInput(f"Filter '{key}' expects a single string")
    return value


def parse_filters(
    raw: Mapping[str, Any] | None,
    allowed: frozenset[FilterCriteria] = ANIMAL_CRITERIA,
) -> list[AnimalFilter]:
    """
    Convert the UI's JSON filter map into filter objects.

    Keys absent or mapped to None contribute nothing. Unknown keys and badly
    shaped values raise InvalidInput.
    """
    out: list[AnimalFilter] = []
    if not raw:
        return out
    for key, value in raw.items():
        try:
            criteria = FilterCriteria(key)
        except ValueError:
            raise InvalidInput(f"Unknown filter criteria: {key!r}") from None
        if criteria not in allowed:
            raise InvalidInput(f"Filter criteria not supported here: {key!r}")
        if value is None:
            continue

        if criteria is FilterCriteria.STATUS:
            out.append(StatusFilter(_as_str_set(key, value)))
        elif criteria is FilterCriteria.SEX:
            out.append(SexFilter(_as_str_set(key, value)))
        elif criteria is FilterCriteria.SPECIES_AND_BREEDS:
            if not isinstance(value, Mapping):
                raise InvalidInput(f"Filter '{key}' expects a mapping of species to breeds")
            out.append(SpeciesAndBreedsFilter({str(s): _as_str_set(key, b) for s, b in value.items()}))
        elif criteria is FilterCriteria.ADMISSION_DATE:
            out.append(AdmissionDateFilter(_as_token(key, value)))
        else:
            out.append(AdoptionDateFilter(_as_token(key, value)))
    return out
