"""Resolver package for the GraphQL schema.

Root query and mutation resolvers plus one resolver per relation field of each
entity type. Scalar fields are read straight off the strawberry instances.
Every resolver reaches storage through the gateway in ``info.context``.
"""

# Intentionally empty; functions are defined in sibling modules.
