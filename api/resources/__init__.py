"""
Character attribute tables exposed as JSON collection resources.

Each table is described once in `descriptors.py`; the router, service,
repository, validator and codec are shared by all of them.
"""
