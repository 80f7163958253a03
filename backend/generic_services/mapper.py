"""
Copying values between DTOs and entities.
"""

from typing import Any, Tuple

from .decoded_dto import DecodedDto
from .decoded_entity import accepts_none


def _read_path(entity: Any, path: Tuple[str, ...]) -> Any:
    value = entity
    for name in path:
        if value is None:
            return None
        value = getattr(value, name)
    return value


def map_entity_to_dto(decoded_dto: DecodedDto, entity: Any) -> Any:
    """
    Build a DTO from an entity.

    Fields with a read mapping use it; others follow their read path.
    Fields with no way to be read keep their default, as do fields that
    cannot hold None when the entity has no value for them.
    """
    values = {}
    for name, func in decoded_dto.read_mapping.items():
        values[name] = func(entity)
    for name, path in decoded_dto.read_paths.items():
        values[name] = _read_path(entity, path)
    values = {
        name: value for name, value in values.items()
        if value is not None or accepts_none(decoded_dto.fields[name].annotation)
    }
    return decoded_dto.dto_type.model_validate(values)


def copy_dto_to_entity(decoded_dto: DecodedDto, dto: Any, entity: Any, include_keys: bool = False) -> None:
    """
    Copy the DTO's writable fields onto the entity.

    Args:
        include_keys: Also copy key fields, but only those holding a value
            (an unset 0/None key is left for the database to generate)
    """
    for name in decoded_dto.copyable_fields(include_keys):
        value = getattr(dto, name)
        if decoded_dto.fields[name].is_key and not value:
            continue
        setattr(entity, name, value)


def copy_keys_to_dto(decoded_dto: DecodedDto, entity: Any, dto: Any) -> None:
    """Copy the entity's (possibly database generated) keys back into the DTO"""
    for name in decoded_dto.key_fields:
        setattr(dto, name, getattr(entity, name))
