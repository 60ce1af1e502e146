"""storage/ -- The single relational file store and its bootstrap.

Layer rule: storage/ imports core/ plus the dataclasses in auth/models.py and
catalog/models.py. It does NOT import from api/ or any service module.
"""
