"""
GenericServices setup.

Scans modules for DTO classes, decodes them against their entities and
returns a registry that GenericService instances share. All problems found
are reported together in one ConfigurationError.
"""

import inspect
import logging
from types import ModuleType
from typing import Dict, Iterable, Optional

from exceptions import ConfigurationError
from .config import GenericServicesConfig
from .decoded_dto import DecodedDto
from .decoded_entity import DecodedEntityClass, decode_entity
from .link import is_dto_class, linked_entity

logger = logging.getLogger(__name__)


class GenericServicesRegistry:
    """Decoded DTOs and entities, plus the global config"""

    def __init__(self, config: Optional[GenericServicesConfig] = None):
        self.config = config or GenericServicesConfig()
        self._dtos: Dict[type, DecodedDto] = {}
        self._entities: Dict[type, DecodedEntityClass] = {}

    def get_entity(self, entity_type: type) -> DecodedEntityClass:
        """Decoded entity class, decoded on first use"""
        decoded = self._entities.get(entity_type)
        if decoded is None:
            decoded = decode_entity(entity_type)
            self._entities[entity_type] = decoded
        return decoded

    def register_dto(self, dto_type: type) -> DecodedDto:
        """
        Decode and register a DTO class.

        Raises:
            ConfigurationError: If the DTO or its PerDtoConfig is invalid
        """
        if dto_type in self._dtos:
            return self._dtos[dto_type]
        entity_type = linked_entity(dto_type)
        if entity_type is None:
            raise ConfigurationError(
                f"The class {dto_type.__name__} does not inherit LinkToEntity[Entity], so it cannot be used as a DTO/VM."
            )
        if not hasattr(dto_type, 'model_fields'):
            raise ConfigurationError(f"The DTO/VM class {dto_type.__name__} must be a pydantic model.")

        decoded = DecodedDto(dto_type, self.get_entity(entity_type), self.get_entity, self.config)
        if decoded.problems:
            raise ConfigurationError(
                f"The DTO/VM class {dto_type.__name__} has configuration errors.", decoded.problems
            )
        self._dtos[dto_type] = decoded
        logger.debug(f"Registered DTO {dto_type.__name__} -> {decoded.entity_name}")
        return decoded

    def get_dto(self, dto_type: type) -> DecodedDto:
        decoded = self._dtos.get(dto_type)
        if decoded is None:
            raise ConfigurationError(
                f"The class {dto_type.__name__} is not registered as a valid GenericServices DTO/VM. "
                f"Have you left off the LinkToEntity base class, or not scanned the module it is in?"
            )
        return decoded

    def is_entity(self, candidate: type) -> bool:
        try:
            self.get_entity(candidate)
        except ConfigurationError:
            return False
        return True

    @property
    def dto_types(self) -> Iterable[type]:
        return tuple(self._dtos)


def _dto_classes_in(module: ModuleType):
    for _, value in inspect.getmembers(module, is_dto_class):
        # Only classes defined in the module, not ones it imports
        if value.__module__ == module.__name__:
            yield value


def setup_generic_services(*modules: ModuleType, config: Optional[GenericServicesConfig] = None) -> GenericServicesRegistry:
    """
    Register every DTO class defined in the given modules.

    Raises:
        ConfigurationError: Listing every invalid DTO found
    """
    registry = GenericServicesRegistry(config)
    problems = []
    for module in modules:
        for dto_type in _dto_classes_in(module):
            try:
                registry.register_dto(dto_type)
            except ConfigurationError as e:
                problems.append(e.message)
                problems.extend(e.details.get("problems", []))

    if problems:
        for problem in problems:
            logger.error(f"GenericServices setup: {problem}")
        raise ConfigurationError(f"GenericServices setup found {len(problems)} problem(s).", problems)

    logger.info(f"GenericServices set up with {len(registry.dto_types)} DTO/VM class(es)")
    return registry


def setup_single_dto_and_entities(dto_type: type, config: Optional[GenericServicesConfig] = None) -> GenericServicesRegistry:
    """Registry holding one DTO, used mainly by unit tests"""
    registry = GenericServicesRegistry(config)
    registry.register_dto(dto_type)
    return registry
