"""
Persistence gateway: the storage primitives consumed by the resolvers
"""

from .base import Connect, CreateMany, EntityGateway, PersistenceGateway, RelationLink

__all__ = ["Connect", "CreateMany", "EntityGateway", "PersistenceGateway", "RelationLink"]
