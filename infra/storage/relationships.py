import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class Relationship(BaseModel):
    """One RELS-EXT statement about the owning object."""
    namespace: str = Field(..., description="Predicate namespace URI")
    predicate: str = Field(..., description="Predicate local name")
    value: str = Field(..., description="Object of the statement")
    literal: bool = Field(False, description="True for literals, False for resource URIs")


class RelationshipStore(ABC):
    @abstractmethod
    def get(self, namespace: str, predicate: str, value: Optional[str] = None) -> List[Relationship]:
        pass

    @abstractmethod
    def add(self, namespace: str, predicate: str, value: str, literal: bool = False) -> Relationship:
        pass

    @abstractmethod
    def remove(self, namespace: str, predicate: str, value: Optional[str] = None) -> bool:
        pass

    def get_value(self, namespace: str, predicate: str) -> Optional[str]:
        """First value for the predicate, or None when absent."""
        matches = self.get(namespace, predicate)
        return matches[0].value if matches else None

    def set_value(self, namespace: str, predicate: str, value: str, literal: bool = True) -> Relationship:
        """Replace every value of the predicate with a single one."""
        self.remove(namespace, predicate)
        return self.add(namespace, predicate, value, literal=literal)


class JsonRelationshipStore(RelationshipStore):
    """RELS-EXT statements persisted as a JSON list next to the object manifest."""

    def __init__(self, rels_file: Path):
        self.rels_file = Path(rels_file)
        self._lock = threading.RLock()

    def _load_unsafe(self) -> List[Relationship]:
        if not self.rels_file.exists():
            return []

        with open(self.rels_file, 'r') as f:
            data = json.load(f)

        return [Relationship.model_validate(item) for item in data]

    def _save_unsafe(self, relationships: List[Relationship]):
        self.rels_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.rels_file.with_suffix('.json.tmp')
        with open(temp_file, 'w') as f:
            json.dump([r.model_dump() for r in relationships], f, indent=2)
        temp_file.replace(self.rels_file)

    def all(self) -> List[Relationship]:
        with self._lock:
            return self._load_unsafe()

    def get(self, namespace: str, predicate: str, value: Optional[str] = None) -> List[Relationship]:
        with self._lock:
            return [
                r for r in self._load_unsafe()
                if r.namespace == namespace
                and r.predicate == predicate
                and (value is None or r.value == value)
            ]

    def add(self, namespace: str, predicate: str, value: str, literal: bool = False) -> Relationship:
        relationship = Relationship(
            namespace=namespace,
            predicate=predicate,
            value=value,
            literal=literal,
        )
        with self._lock:
            relationships = self._load_unsafe()
            if relationship not in relationships:
                relationships.append(relationship)
                self._save_unsafe(relationships)
        return relationship

    def remove(self, namespace: str, predicate: str, value: Optional[str] = None) -> bool:
        with self._lock:
            relationships = self._load_unsafe()
            kept = [
                r for r in relationships
                if not (
                    r.namespace == namespace
                    and r.predicate == predicate
                    and (value is None or r.value == value)
                )
            ]
            if len(kept) == len(relationships):
                return False
            self._save_unsafe(kept)
            return True
