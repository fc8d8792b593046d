"""Tagged variants for nodes of a story's content tree.

A content tree is plain JSON. Each node is classified once as one of:

* ``Component`` - a mapping carrying both a ``component`` tag and a ``_uid``,
  whose fields may hold relation identifiers.
* ``Sequence`` - an ordered list of nodes.
* ``Leaf`` - anything else; never descended into.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Union


@dataclass
class Leaf:
    value: Any


@dataclass
class Sequence:
    items: List[Any]


@dataclass
class Component:
    tag: str
    uid: str
    fields: Dict[str, Any]  # The original mapping, mutated in place

    def qualified(self, field_name: str) -> str:
        """Returns the 'component.field' qualifier for one of its fields."""
        return f"{self.tag}.{field_name}"


ContentNode = Union[Leaf, Sequence, Component]


def classify(node: Any) -> ContentNode:
    """Wraps a raw JSON node in its tree variant."""
    if isinstance(node, list):
        return Sequence(items=node)
    if isinstance(node, dict) and node.get("component") and node.get("_uid"):
        return Component(tag=node["component"], uid=node["_uid"], fields=node)
    return Leaf(value=node)
