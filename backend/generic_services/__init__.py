"""
GenericServices: generic CRUD that maps DTOs onto SQLAlchemy entities.

A DTO is a pydantic model inheriting LinkToEntity[Entity]. GenericServices
finds the entity method, constructor or factory whose parameters match the
DTO's fields, or copies fields onto the entity when it has public attributes.
"""

from .config import GenericServicesConfig, PerDtoConfig
from .decoded_dto import DecodedDto
from .decoded_entity import DecodedEntityClass, EntityStyles, decode_entity
from .link import LinkToEntity, ReadOnly
from .naming import COPY_PROPERTIES, CTOR_NAME, decode_name
from .service import GenericService
from .service_async import GenericServiceAsync
from .setup import GenericServicesRegistry, setup_generic_services, setup_single_dto_and_entities
from .status import StatusGeneric, StatusGenericWithResult, ValidationResult

__all__ = [
    "COPY_PROPERTIES",
    "CTOR_NAME",
    "DecodedDto",
    "DecodedEntityClass",
    "EntityStyles",
    "GenericService",
    "GenericServiceAsync",
    "GenericServicesConfig",
    "GenericServicesRegistry",
    "LinkToEntity",
    "PerDtoConfig",
    "ReadOnly",
    "StatusGeneric",
    "StatusGenericWithResult",
    "ValidationResult",
    "decode_entity",
    "decode_name",
    "setup_generic_services",
    "setup_single_dto_and_entities",
]
