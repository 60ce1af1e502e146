"""catalog/ -- Product records and the operations on them.

Layer rule: catalog/ imports core/ and storage/ only.
It does NOT import from api/ or auth/.
"""
