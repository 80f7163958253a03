"""
Marking DTOs and their read-only fields.

A DTO is a pydantic model that also inherits LinkToEntity[Entity]:

    class AuthorDto(BaseModel, LinkToEntity[Author]):
        author_id: int = 0
        name: Annotated[str, ReadOnly] = ""
        email: Optional[str] = None
"""

from typing import Any, Generic, Optional, TypeVar, get_args, get_origin

T = TypeVar('T')


class LinkToEntity(Generic[T]):
    """Mixin that links a DTO class to the entity class T it maps onto"""


class _ReadOnlyMarker:
    """Annotated metadata: read from the entity, never written back"""

    def __repr__(self) -> str:
        return "ReadOnly"


ReadOnly = _ReadOnlyMarker()


def is_read_only(metadata: list[Any]) -> bool:
    return any(isinstance(item, _ReadOnlyMarker) for item in metadata)


def linked_entity(dto_type: type) -> Optional[type]:
    """
    Find the entity class a DTO is linked to.

    Returns:
        The T of LinkToEntity[T] anywhere in the class hierarchy, or None
    """
    for klass in dto_type.__mro__:
        for base in klass.__dict__.get('__orig_bases__', ()):
            if get_origin(base) is LinkToEntity:
                args = get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
    return None


def is_dto_class(candidate: Any) -> bool:
    return (
        isinstance(candidate, type)
        and issubclass(candidate, LinkToEntity)
        and linked_entity(candidate) is not None
    )
