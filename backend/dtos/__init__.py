"""
Data Transfer Objects (DTOs) Layer

This package contains DTOs that decouple the pages from the database models.
Request and response DTOs link to an entity with LinkToEntity[Entity], which
lets GenericServices read them from, and apply them to, that entity.

Structure:
- request/: DTOs behind the forms (create/update)
- response/: DTOs for displaying data
- internal/: DTOs for service-to-service communication
"""
