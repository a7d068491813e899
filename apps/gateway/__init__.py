"""
Gateway App - Keyed collection store and blob storage

Every other app persists through this app's gateway or through the ORM inside
a gateway-executed operation. Subscribers receive the full keyed map of a
collection after each committed change.
"""
