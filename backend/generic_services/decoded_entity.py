"""
Decoding an entity class.

Works out what GenericServices is allowed to do with a SQLAlchemy mapped
class: which attributes can be read and written, which methods can update
it, and which constructor/factories can create it.

Conventions:
- Attributes whose name starts with "_" are private and never written.
- Hybrid properties and plain properties are settable only if they have a setter.
- Public instance methods are update methods; public class/static methods
  are factories; a custom __init__ is the constructor.
- A parameter annotated with Session (or named db/session) receives the
  current database session instead of a DTO value.
"""

import inspect
import logging
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Session

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SESSION_PARAM_NAMES = ("db", "session")
# Hook called by save-time validation, never an update method
VALIDATE_METHOD_NAME = "validate"


class EntityStyles(str, Enum):
    """How an entity class can be changed"""

    NORMAL = "normal"                                # settable attributes, no methods
    HAS_SETTERS_AND_METHODS = "has_setters_and_methods"
    DDD_STYLED = "ddd_styled"                        # only methods/ctors/factories
    READ_ONLY = "read_only"                          # nothing can change it


class MethodKinds(str, Enum):
    METHOD = "method"
    CTOR = "ctor"
    FACTORY = "factory"


@dataclass(frozen=True)
class ParamInfo:
    name: str
    annotation: Any = inspect.Parameter.empty
    has_default: bool = False
    is_session: bool = False

    @property
    def is_required(self) -> bool:
        return not self.has_default and not self.is_session


@dataclass(frozen=True)
class EntityMethod:
    """A method, constructor or factory that GenericServices can call"""

    name: str
    kind: MethodKinds
    params: Tuple[ParamInfo, ...]

    @property
    def required_params(self) -> Tuple[ParamInfo, ...]:
        return tuple(p for p in self.params if p.is_required)

    @property
    def data_params(self) -> Tuple[ParamInfo, ...]:
        """Parameters that take values from a DTO"""
        return tuple(p for p in self.params if not p.is_session)

    def describe(self) -> str:
        return f"{self.name}({', '.join(p.name for p in self.data_params)})"


def _is_union(annotation: Any) -> bool:
    return typing.get_origin(annotation) in (Union, types.UnionType)


def unwrap_optional(annotation: Any) -> Any:
    """Optional[X] and X | None both unwrap to X"""
    if _is_union(annotation):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def accepts_none(annotation: Any) -> bool:
    if annotation is Any or annotation is None or annotation is type(None):
        return True
    return _is_union(annotation) and type(None) in typing.get_args(annotation)


def _is_session_param(name: str, annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    if isinstance(annotation, type) and issubclass(annotation, Session):
        return True
    if isinstance(annotation, str) and "Session" in annotation:
        return True
    return annotation is inspect.Parameter.empty and name in SESSION_PARAM_NAMES


def read_params(func: Callable, skip_first: bool) -> Tuple[ParamInfo, ...]:
    """
    Build ParamInfo for each parameter of a function.

    Args:
        func: Function to inspect
        skip_first: Drop the first parameter (self of an unbound method)
    """
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations
        hints = getattr(func, '__annotations__', {})

    params = list(inspect.signature(func).parameters.values())
    if skip_first:
        params = params[1:]

    result = []
    for param in params:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, param.annotation)
        result.append(ParamInfo(
            name=param.name,
            annotation=annotation,
            has_default=param.default is not inspect.Parameter.empty,
            is_session=_is_session_param(param.name, annotation),
        ))
    return tuple(result)


@dataclass
class DecodedEntityClass:
    """Everything GenericServices knows about one entity class"""

    entity_type: type
    primary_keys: Tuple[str, ...]
    readable: frozenset
    settable: frozenset
    single_relationships: Dict[str, type] = field(default_factory=dict)
    update_methods: List[EntityMethod] = field(default_factory=list)
    ctor: Optional[EntityMethod] = None
    factories: List[EntityMethod] = field(default_factory=list)

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @property
    def has_settable_properties(self) -> bool:
        return bool(self.settable - set(self.primary_keys))

    @property
    def entity_style(self) -> EntityStyles:
        if self.has_settable_properties:
            if self.update_methods:
                return EntityStyles.HAS_SETTERS_AND_METHODS
            return EntityStyles.NORMAL
        if self.update_methods or self.ctor or self.factories:
            return EntityStyles.DDD_STYLED
        return EntityStyles.READ_ONLY

    @property
    def can_be_created_via_copy(self) -> bool:
        """True if the entity can be built empty and then have attributes copied in"""
        return self.ctor is None or not self.ctor.required_params

    @property
    def creation_methods(self) -> List[EntityMethod]:
        return ([self.ctor] if self.ctor else []) + list(self.factories)

    def find_update_methods(self, name: str) -> List[EntityMethod]:
        return [m for m in self.update_methods if m.name == name]

    def find_factories(self, name: str) -> List[EntityMethod]:
        return [m for m in self.factories if m.name == name]

    def key_values(self, entity: Any) -> Tuple[Any, ...]:
        return tuple(getattr(entity, key) for key in self.primary_keys)


def _own_classes(entity_type: type) -> List[type]:
    """Classes in the MRO that belong to the application, base first"""
    # The declarative base carries the registry in its own namespace
    return [
        klass for klass in reversed(entity_type.__mro__)
        if klass is not object
        and not klass.__module__.startswith('sqlalchemy')
        and 'registry' not in vars(klass)
    ]


def _custom_ctor(entity_type: type) -> Optional[Callable]:
    init = entity_type.__dict__.get('__init__')
    if init is None:
        return None
    # SQLAlchemy instruments __init__; the user's function is kept on the wrapper
    original = getattr(init, '_sa_original_init', init)
    if getattr(original, '__qualname__', '') == f"{entity_type.__qualname__}.__init__":
        return original
    return None


def decode_entity(entity_type: type) -> DecodedEntityClass:
    """
    Decode a mapped entity class.

    Raises:
        ConfigurationError: If the class is not mapped by SQLAlchemy
    """
    mapper = sa_inspect(entity_type, raiseerr=False)
    if mapper is None or not hasattr(mapper, 'column_attrs'):
        raise ConfigurationError(
            f"The class {entity_type.__name__} is not a SQLAlchemy mapped entity class."
        )

    primary_keys = tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key)

    readable = set()
    settable = set()
    for attr in mapper.column_attrs:
        if not attr.key.startswith('_'):
            readable.add(attr.key)
            settable.add(attr.key)

    single_relationships = {}
    for rel in mapper.relationships:
        if rel.key.startswith('_'):
            continue
        readable.add(rel.key)
        if not rel.uselist:
            single_relationships[rel.key] = rel.mapper.class_

    update_methods: Dict[str, EntityMethod] = {}
    factories: Dict[str, EntityMethod] = {}
    for klass in _own_classes(entity_type):
        for name, value in vars(klass).items():
            if name.startswith('_') or name in mapper.attrs:
                continue
            if isinstance(value, (hybrid_property, property)):
                readable.add(name)
                if value.fset is not None:
                    settable.add(name)
            elif isinstance(value, (classmethod, staticmethod)):
                func = getattr(entity_type, name)
                factories[name] = EntityMethod(name, MethodKinds.FACTORY, read_params(func, skip_first=False))
            elif inspect.isfunction(value) and name != VALIDATE_METHOD_NAME:
                update_methods[name] = EntityMethod(name, MethodKinds.METHOD, read_params(value, skip_first=True))

    ctor = None
    ctor_func = _custom_ctor(entity_type)
    if ctor_func is not None:
        ctor = EntityMethod("Ctor", MethodKinds.CTOR, read_params(ctor_func, skip_first=True))

    decoded = DecodedEntityClass(
        entity_type=entity_type,
        primary_keys=primary_keys,
        readable=frozenset(readable),
        settable=frozenset(settable),
        single_relationships=single_relationships,
        update_methods=list(update_methods.values()),
        ctor=ctor,
        factories=list(factories.values()),
    )
    logger.debug(f"Decoded entity {decoded.entity_name} as {decoded.entity_style.value}")
    return decoded
