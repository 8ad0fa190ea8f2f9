from typing import List, Dict, Any, Mapping, Optional
import math
import threading
from datetime import datetime, timezone

from ..exceptions import NotFoundError, ValidationError
from ..types import (
    GraphNode,
    GraphRelationship,
    GraphSnapshot,
    NODE_SYSTEM_FIELDS,
    RELATIONSHIP_SYSTEM_FIELDS,
)
from ..utils.identifiers import IdGenerator, canonical_id


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _is_blank_label(value: Any) -> bool:
    """Labels (name, type, relationship) must be non-empty strings."""
    return not isinstance(value, str) or not value.strip()


def _has_non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, Mapping):
        return any(_has_non_finite(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(_has_non_finite(item) for item in value)
    return False


def _require_mapping(fields: Any) -> Mapping[str, Any]:
    if not isinstance(fields, Mapping):
        raise ValidationError("Request body must be a JSON object")
    # NaN and Infinity cannot be serialized back to JSON
    if _has_non_finite(fields):
        raise ValidationError("Numeric values must be finite")
    return fields


class GraphStore:
    """In-memory property graph with cascading node deletion.

    Every public method runs under a single re-entrant lock, so readers never
    observe a node removed while its relationships are still present.
    """

    def __init__(self, id_generator: Optional[IdGenerator] = None):
        self._lock = threading.RLock()
        self._ids = id_generator or IdGenerator()
        self._nodes: List[GraphNode] = []
        self._relationships: List[GraphRelationship] = []

    def list_graph(self) -> GraphSnapshot:
        """Return a copy of all nodes and relationships in creation order."""
        with self._lock:
            return GraphSnapshot(nodes=list(self._nodes), relationships=list(self._relationships))

    def create_node(self, fields: Mapping[str, Any]) -> GraphNode:
        """Create a node from caller fields; ``name`` and ``type`` are required."""
        fields = _require_mapping(fields)
        name = fields.get("name")
        node_type = fields.get("type")
        if _is_blank_label(name) or _is_blank_label(node_type):
            raise ValidationError("Name and type are required")

        attributes = {
            key: value for key, value in fields.items()
            if key not in NODE_SYSTEM_FIELDS and key not in ("name", "type")
        }

        with self._lock:
            node = GraphNode(
                id=self._ids.next_id(),
                name=name,
                type=node_type,
                created_at=_timestamp(),
                attributes=attributes,
            )
            self._nodes.append(node)
            return node

    def get_node(self, node_id: Any) -> GraphNode:
        """Get a node by id."""
        with self._lock:
            node = self._find_node(node_id)
            if node is None:
                raise NotFoundError("Node not found")
            return node

    def delete_node(self, node_id: Any) -> int:
        """Delete a node and every relationship touching it.

        Returns the number of relationships removed by the cascade.
        """
        key = canonical_id(node_id)
        with self._lock:
            node = self._find_node(node_id)
            if node is None:
                raise NotFoundError("Node not found")

            self._nodes.remove(node)
            surviving = [
                rel for rel in self._relationships
                if canonical_id(rel.source) != key and canonical_id(rel.target) != key
            ]
            removed = len(self._relationships) - len(surviving)
            self._relationships = surviving
            return removed

    def create_relationship(self, fields: Mapping[str, Any]) -> GraphRelationship:
        """Create a relationship between two existing nodes."""
        fields = _require_mapping(fields)
        source = fields.get("from")
        target = fields.get("to")
        label = fields.get("relationship")
        if _is_blank(source) or _is_blank(target) or _is_blank_label(label):
            raise ValidationError("From, to, and relationship are required")

        attributes = {
            key: value for key, value in fields.items()
            if key not in RELATIONSHIP_SYSTEM_FIELDS and key not in ("from", "to", "relationship")
        }

        with self._lock:
            from_node = self._find_node(source)
            to_node = self._find_node(target)
            if from_node is None or to_node is None:
                raise ValidationError("Invalid nodes selected")

            relationship = GraphRelationship(
                id=self._ids.next_id(),
                source=source,
                target=target,
                relationship=label,
                from_node_name=from_node.name,
                to_node_name=to_node.name,
                created_at=_timestamp(),
                attributes=attributes,
            )
            self._relationships.append(relationship)
            return relationship

    def delete_relationship(self, relationship_id: Any) -> None:
        """Delete a relationship by id."""
        key = canonical_id(relationship_id)
        with self._lock:
            for index, rel in enumerate(self._relationships):
                if canonical_id(rel.id) == key:
                    del self._relationships[index]
                    return
            raise NotFoundError("Relationship not found")

    def get_relationships_for_node(self, node_id: Any) -> List[GraphRelationship]:
        """Get relationships where the node is either endpoint.

        The node itself is not looked up; an unknown id simply matches nothing.
        """
        key = canonical_id(node_id)
        with self._lock:
            return [
                rel for rel in self._relationships
                if canonical_id(rel.source) == key or canonical_id(rel.target) == key
            ]

    def stats(self) -> Dict[str, Any]:
        """Get graph statistics."""
        with self._lock:
            node_counts: Dict[str, int] = {}
            for node in self._nodes:
                node_type = str(node.type)
                node_counts[node_type] = node_counts.get(node_type, 0) + 1

            rel_counts: Dict[str, int] = {}
            for rel in self._relationships:
                label = str(rel.relationship)
                rel_counts[label] = rel_counts.get(label, 0) + 1

            return {
                "nodes": node_counts,
                "relationships": rel_counts,
                "total_nodes": len(self._nodes),
                "total_relationships": len(self._relationships),
            }

    def clear(self) -> None:
        """Remove all nodes and relationships."""
        with self._lock:
            self._nodes = []
            self._relationships = []

    def _find_node(self, node_id: Any) -> Optional[GraphNode]:
        key = canonical_id(node_id)
        for node in self._nodes:
            if canonical_id(node.id) == key:
                return node
        return None
