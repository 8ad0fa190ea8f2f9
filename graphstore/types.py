from typing import List, Dict, Any
from dataclasses import dataclass, field


# Keys the store assigns itself; caller-supplied values for these are dropped.
NODE_SYSTEM_FIELDS = ("id", "createdAt")
RELATIONSHIP_SYSTEM_FIELDS = ("id", "createdAt", "fromNodeName", "toNodeName")


@dataclass
class GraphNode:
    """Represents a named, typed node with an open set of attributes."""
    id: int
    name: Any
    type: Any
    created_at: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "createdAt": self.created_at,
        }
        for key, value in self.attributes.items():
            data.setdefault(key, value)
        return data


@dataclass
class GraphRelationship:
    """Represents a directed, labeled relationship between two nodes."""
    id: int
    source: Any
    target: Any
    relationship: Any
    from_node_name: Any
    to_node_name: Any
    created_at: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "id": self.id,
            "from": self.source,
            "to": self.target,
            "relationship": self.relationship,
            "fromNodeName": self.from_node_name,
            "toNodeName": self.to_node_name,
            "createdAt": self.created_at,
        }
        for key, value in self.attributes.items():
            data.setdefault(key, value)
        return data


@dataclass
class GraphSnapshot:
    """Point-in-time copy of both graph collections."""
    nodes: List[GraphNode]
    relationships: List[GraphRelationship]
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "relationships": [rel.to_dict() for rel in self.relationships],
        }
