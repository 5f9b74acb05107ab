"""
filerecord Associations — declarative links between record types.

An association names a target record type and two attributes: ``from_`` on
the owning record and ``to`` on the target. Resolving it is exactly

    target_store.find(FIRST | ALL, conditions={to: record[from_]})

Declared in a @record_type class body they act as read-only descriptors:

    @record_type(location=["{project_name}", "{name}", "{extension}"])
    class Doc(Record):
        project = belongs_to("Project", from_="project_name", to="name")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Union

from filerecord.engine.errors import AssociationError
from filerecord.engine.registry import SchemaRegistry, schema_registry

if TYPE_CHECKING:
    from filerecord.core.record import Record

logger = logging.getLogger("filerecord.core.associations")

ONE = "one"
MANY = "many"


@dataclass(frozen=True)
class Association:
    """To-one or to-many link resolved through a conditions find."""

    kind: str
    target: str
    from_attr: Optional[str]
    to_attr: Optional[str]
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in (ONE, MANY):
            raise AssociationError(
                f"Association kind must be '{ONE}' or '{MANY}', got {self.kind!r}",
                association=self.name,
                target=self.target,
            )
        if not self.from_attr or not self.to_attr:
            raise AssociationError(
                f"Association to {self.target} did not specify from_ or to",
                association=self.name,
                target=self.target,
            )

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            object.__setattr__(self, "name", name)

    def __get__(self, instance: Optional["Record"], owner: type) -> Any:
        if instance is None:
            return self
        return relation_resolver.resolve(instance, self)


def _build(kind: str, target: str, from_: Optional[str], to: Optional[str], name: Optional[str]) -> Association:
    return Association(kind=kind, target=target, from_attr=from_, to_attr=to, name=name)


def has_many(target: str, from_: Optional[str] = None, to: Optional[str] = None, name: Optional[str] = None) -> Association:
    """Declare a to-many association (a list of target records)."""
    return _build(MANY, target, from_, to, name)


def has_one(target: str, from_: Optional[str] = None, to: Optional[str] = None, name: Optional[str] = None) -> Association:
    """Declare a to-one association (first matching target record or None)."""
    return _build(ONE, target, from_, to, name)


belongs_to = has_one


class RelationResolver:
    """Turns an association plus an owning record into a find() call."""

    def __init__(self, registry: Optional[SchemaRegistry] = None):
        self._registry = registry

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry if self._registry is not None else schema_registry

    def resolve(self, record: "Record", association: Association) -> Union["Record", List["Record"], None]:
        from filerecord.core.store import ALL, FIRST

        store = self.registry.resolve(association.target)
        if store is None:
            raise AssociationError(
                f"Association '{association.name}' targets unknown record type {association.target}",
                association=association.name,
                target=association.target,
            )
        if association.from_attr not in record:
            raise AssociationError(
                f"{type(record).__name__} has no attribute '{association.from_attr}'",
                association=association.name,
                target=association.target,
            )

        conditions = {association.to_attr: record[association.from_attr]}
        selector = FIRST if association.kind == ONE else ALL
        logger.debug(f"Resolving {association.name}: {association.target}.find({selector.value}, {conditions})")
        return store.find(selector, conditions=conditions)


relation_resolver = RelationResolver()
