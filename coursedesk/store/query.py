"""
Typed predicates for Entity Store lookups.

A predicate is a small tree of ``Eq``, ``In``, ``And`` and ``Or`` nodes over
column names. ``compile_predicate`` is the only place that turns the tree into
SQL, so services never build SQLAlchemy expressions themselves:

    where = and_(eq("course_id", course.id), in_("student_id", student_ids))
    store.find(models.Enrollment, where, order_by="-enrolled_at")
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple, Union

from sqlalchemy import and_ as sql_and, or_ as sql_or, false, true
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True)
class In:
    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class And:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Predicate", ...]


Predicate = Union[Eq, In, And, Or]


def eq(field: str, value: Any) -> Eq:
    return Eq(field, value)


def in_(field: str, values: Iterable[Any]) -> In:
    return In(field, tuple(values))


def and_(*clauses: Predicate) -> And:
    return And(tuple(clauses))


def or_(*clauses: Predicate) -> Or:
    return Or(tuple(clauses))


def _column(model, field: str):
    column = getattr(model, field, None)
    if column is None or not hasattr(column, "in_"):
        raise AttributeError(f"{model.__name__} has no column '{field}'")
    return column


def compile_predicate(model, predicate: Optional[Predicate]) -> ColumnElement:
    if predicate is None:
        return true()
    if isinstance(predicate, Eq):
        column = _column(model, predicate.field)
        if predicate.value is None:
            return column.is_(None)
        return column == predicate.value
    if isinstance(predicate, In):
        # An empty set matches nothing
        if not predicate.values:
            return false()
        return _column(model, predicate.field).in_(predicate.values)
    if isinstance(predicate, And):
        return sql_and(true(), *(compile_predicate(model, c) for c in predicate.clauses))
    if isinstance(predicate, Or):
        return sql_or(false(), *(compile_predicate(model, c) for c in predicate.clauses))
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def compile_order(model, order_by: Optional[str]):
    """``"created_at"`` sorts ascending, ``"-created_at"`` descending."""
    if not order_by:
        return None
    if order_by.startswith("-"):
        return _column(model, order_by[1:]).desc()
    return _column(model, order_by).asc()
