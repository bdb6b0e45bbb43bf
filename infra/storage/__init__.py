"""Storage subsystem: Repository, ObjectStorage, Datastream, RELS-EXT"""

from infra.storage.datastream import Datastream
from infra.storage.errors import DatastreamNotFoundError, ObjectNotFoundError, RepositoryError
from infra.storage.object_storage import ObjectStorage, safe_identifier
from infra.storage.relationships import JsonRelationshipStore, Relationship, RelationshipStore
from infra.storage.repository import Repository

__all__ = [
    "Repository",
    "ObjectStorage",
    "Datastream",
    "Relationship",
    "RelationshipStore",
    "JsonRelationshipStore",
    "RepositoryError",
    "ObjectNotFoundError",
    "DatastreamNotFoundError",
    "safe_identifier",
]
