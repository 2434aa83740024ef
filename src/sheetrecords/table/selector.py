"""Conjunctive-normal-form row selection.

Criteria have exactly two levels: a conjunction of clauses, where each
clause is either an AND-clause (every equality must hold) or an OR-group
(at least one of its members must hold). Criteria can be built from the
node types below or written as plain data::

    {"status": "open", "owner": "ana"}           # one AND-clause
    [{"status": "open"}, [{"owner": "ana"}, {"owner": "bo"}]]
                                                  # open AND (ana OR bo)
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from ..errors import FieldNotFoundError, InvalidCriteriaError
from .compare import values_equal
from .records import RecordList

if TYPE_CHECKING:
    from .item import Item
    from .table import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Equals:
    """``field`` must equal ``value``."""

    field: str
    value: Any


@dataclass(frozen=True)
class And:
    """Every term must hold."""

    terms: tuple


@dataclass(frozen=True)
class Or:
    """At least one term must hold."""

    terms: tuple


Criteria = Union[Equals, And, Or, dict, list]


def _record_to_clause(record: dict) -> And:
    for field in record:
        if not isinstance(field, str):
            raise InvalidCriteriaError(record, "field names must be strings")
    return And(tuple(Equals(field, value) for field, value in record.items()))


def parse_criteria(criteria: Criteria) -> And:
    """Normalize criteria to ``And(clauses)``.

    Each clause is ``And(Equals, ...)`` or ``Or(And(Equals, ...), ...)``.
    """
    if isinstance(criteria, dict):
        return And((_record_to_clause(criteria),))
    if isinstance(criteria, list):
        return And(tuple(_parse_clause(clause) for clause in criteria))
    if isinstance(criteria, (Equals, And, Or)):
        return _normalize_node(criteria)
    raise InvalidCriteriaError(criteria, "expected a record, a list of clauses or a criteria node")


def _parse_clause(clause: Any) -> Union[And, Or]:
    if isinstance(clause, dict):
        return _record_to_clause(clause)
    if isinstance(clause, list):
        members = []
        for member in clause:
            if not isinstance(member, dict):
                raise InvalidCriteriaError(member, "OR-group members must be records")
            members.append(_record_to_clause(member))
        return Or(tuple(members))
    if isinstance(clause, (Equals, And, Or)):
        return _normalize_clause(clause)
    raise InvalidCriteriaError(clause, "clauses must be records or lists of records")


def _conjunction(node: Any) -> And:
    """An OR-group member or AND-clause: Equals, or And of Equals only."""
    if isinstance(node, Equals):
        return And((_check_equals(node),))
    if isinstance(node, And):
        return And(tuple(_check_equals(term) for term in node.terms))
    raise InvalidCriteriaError(node, "expected an equality or a conjunction of equalities")


def _check_equals(node: Any) -> Equals:
    if not isinstance(node, Equals):
        raise InvalidCriteriaError(node, "criteria nest at most two levels")
    if not isinstance(node.field, str):
        raise InvalidCriteriaError(node, "field names must be strings")
    return node


def _normalize_clause(node: Union[Equals, And, Or]) -> Union[And, Or]:
    if isinstance(node, Or):
        return Or(tuple(_conjunction(term) for term in node.terms))
    return _conjunction(node)


def _normalize_node(node: Union[Equals, And, Or]) -> And:
    if isinstance(node, And):
        return And(tuple(_normalize_clause(term) for term in node.terms))
    return And((_normalize_clause(node),))


class Selector:
    """Evaluates criteria against every live row of a table."""

    def __init__(self, table: "Table", criteria: Criteria):
        self.table = table
        self.criteria = parse_criteria(criteria)
        self._check_fields()

    def _check_fields(self):
        for clause in self.criteria.terms:
            conjunctions = clause.terms if isinstance(clause, Or) else (clause,)
            for conjunction in conjunctions:
                for equals in conjunction.terms:
                    if equals.field not in self.table.field_set:
                        raise FieldNotFoundError(
                            equals.field, self.table.grid_range.a1_notation
                        )

    @staticmethod
    def _all_equal(item: "Item", conjunction: And) -> bool:
        for equals in conjunction.terms:
            if not values_equal(item.get_field_value(equals.field), equals.value):
                return False
        return True

    def matches(self, item: "Item") -> bool:
        for clause in self.criteria.terms:
            if isinstance(clause, Or):
                if not any(self._all_equal(item, member) for member in clause.terms):
                    return False
            elif not self._all_equal(item, clause):
                return False
        return True

    def evaluate(self) -> RecordList["Item"]:
        """Return matching rows in table order."""
        selected = RecordList(item for item in self.table.items if self.matches(item))
        logger.debug(f"Selected {len(selected)} of {len(self.table.items)} rows")
        return selected
