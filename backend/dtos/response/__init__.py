"""
Response DTOs

Read-only DTOs for displaying data. Fields are filled from entity attributes
of the same name, from flattened relationships, or from a PerDtoConfig read mapping.
"""
