"""
GenericServices configuration.

GenericServicesConfig holds the global settings; PerDtoConfig subclasses
override behaviour for a single DTO:

    class RemovePromotionConfig(PerDtoConfig[RemovePromotionDto, Book]):
        update_method = "remove_promotion"
"""

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Generic, Optional, Tuple, TypeVar, get_args, get_origin

from sqlalchemy.orm import Session

from .status import StatusGeneric

TDto = TypeVar('TDto')
TEntity = TypeVar('TEntity')

SaveChangesExceptionHandler = Callable[[Exception, Session], Optional[StatusGeneric]]


@dataclass
class GenericServicesConfig:
    """
    Global GenericServices settings.

    Attributes:
        dto_access_validate_on_save: Run entity validation before saving
            changes made through a DTO
        direct_access_validate_on_save: Run entity validation before saving
            changes made directly on an entity
        save_changes_exception_handler: Called with the exception raised by
            commit; return a status with errors to report them, or None to
            let the exception propagate
    """

    dto_access_validate_on_save: bool = False
    direct_access_validate_on_save: bool = False
    save_changes_exception_handler: Optional[SaveChangesExceptionHandler] = None


class PerDtoConfig(Generic[TDto, TEntity]):
    """
    Per-DTO overrides. Subclass with the DTO and entity as type arguments.

    Attributes:
        update_method: Method name (or "CopyProperties") used by update_and_save
            when the caller does not name one
        create_method: Same for create_and_save ("Ctor", a factory name, ...)
        read_mapping: DTO field name -> callable(entity) used when reading
        read_options: Loader options applied to read queries (e.g. selectinload)
        use_save_changes_with_validation: Overrides the global validation setting
    """

    update_method: ClassVar[Optional[str]] = None
    create_method: ClassVar[Optional[str]] = None
    read_mapping: ClassVar[Dict[str, Callable[[Any], Any]]] = {}
    read_options: ClassVar[Tuple[Any, ...]] = ()
    use_save_changes_with_validation: ClassVar[Optional[bool]] = None

    _registered: ClassVar[Dict[type, type]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get('__orig_bases__', ()):
            if get_origin(base) is PerDtoConfig:
                dto_type, entity_type = get_args(base)
                cls.dto_type = dto_type
                cls.entity_type = entity_type
                PerDtoConfig._registered[dto_type] = cls

    @classmethod
    def for_dto(cls, dto_type: type) -> Optional[type]:
        """The PerDtoConfig subclass registered for a DTO, if any"""
        return cls._registered.get(dto_type)
