"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, errors, query building). Keep table-specific
definitions in the feature package (`resources/`).
"""
