"""
Decoding a DTO class against the entity it links to.

The decoded form records which DTO fields hold the entity's keys, how each
field is read from the entity, and how well each entity method, constructor
and factory fits the DTO. It then answers "which method should run for this
create/update?".
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from exceptions import ConfigurationError, MethodMatchError
from .config import GenericServicesConfig, PerDtoConfig
from .decoded_entity import DecodedEntityClass, MethodKinds
from .link import is_read_only
from .matching import DtoFieldInfo, MethodMatch, match_method, normalise_name
from .naming import COPY_PROPERTIES, DecodedNameTypes, decode_name

logger = logging.getLogger(__name__)

EntityLookup = Callable[[type], DecodedEntityClass]


@dataclass(frozen=True)
class DtoField:
    name: str
    annotation: Any
    read_only: bool
    is_key: bool
    required: bool


class DecodedDto:
    """A DTO class decoded against its linked entity"""

    def __init__(
        self,
        dto_type: type,
        entity_info: DecodedEntityClass,
        entity_lookup: EntityLookup,
        config: GenericServicesConfig,
    ):
        self.dto_type = dto_type
        self.entity_info = entity_info
        self.config = config
        self.per_dto_config = PerDtoConfig.for_dto(dto_type)
        self.problems: List[str] = []

        self.fields: Dict[str, DtoField] = {}
        for name, field_info in dto_type.model_fields.items():
            self.fields[name] = DtoField(
                name=name,
                annotation=field_info.annotation,
                read_only=is_read_only(field_info.metadata),
                is_key=name in entity_info.primary_keys,
                required=field_info.is_required(),
            )

        self.read_paths: Dict[str, Tuple[str, ...]] = {}
        self.unmapped_required: List[str] = []
        for name, dto_field in self.fields.items():
            if name in self.read_mapping:
                continue
            path = _find_read_path(entity_info, name, entity_lookup)
            if path:
                self.read_paths[name] = path
            elif dto_field.required:
                self.unmapped_required.append(name)

        matchable = {
            name: DtoFieldInfo(name, f.annotation)
            for name, f in self.fields.items() if not f.read_only
        }
        self.matched_setter_methods: List[MethodMatch] = [
            match_method(method, matchable) for method in entity_info.update_methods
        ]
        self.matched_ctors_and_factories: List[MethodMatch] = [
            match_method(method, matchable) for method in entity_info.creation_methods
        ]

        self._check_per_dto_config()

    @property
    def dto_name(self) -> str:
        return self.dto_type.__name__

    @property
    def entity_name(self) -> str:
        return self.entity_info.entity_name

    @property
    def read_mapping(self) -> Dict[str, Callable[[Any], Any]]:
        return dict(self.per_dto_config.read_mapping) if self.per_dto_config else {}

    @property
    def read_options(self) -> Tuple[Any, ...]:
        return tuple(self.per_dto_config.read_options) if self.per_dto_config else ()

    @property
    def key_fields(self) -> List[str]:
        """DTO fields holding the entity's primary key, in key order"""
        return [key for key in self.entity_info.primary_keys if key in self.fields]

    @property
    def has_all_keys(self) -> bool:
        return len(self.key_fields) == len(self.entity_info.primary_keys)

    @property
    def is_readable(self) -> bool:
        return not self.unmapped_required

    @property
    def validate_on_save(self) -> bool:
        if self.per_dto_config and self.per_dto_config.use_save_changes_with_validation is not None:
            return self.per_dto_config.use_save_changes_with_validation
        return self.config.dto_access_validate_on_save

    def copyable_fields(self, include_keys: bool) -> List[str]:
        """DTO fields that copy onto a settable entity attribute"""
        return [
            name for name, f in self.fields.items()
            if not f.read_only
            and name in self.entity_info.settable
            and (include_keys or not f.is_key)
        ]

    def key_values(self, dto: Any) -> Tuple[Any, ...]:
        return tuple(getattr(dto, key) for key in self.key_fields)

    def require_keys(self) -> None:
        if not self.has_all_keys:
            missing = [k for k in self.entity_info.primary_keys if k not in self.fields]
            raise ConfigurationError(
                f"The DTO/VM class {self.dto_name} does not contain the primary key field(s) "
                f"{', '.join(missing)} of the entity class {self.entity_name}, so it cannot be used to update it."
            )

    def get_update_method(self, method_name: Optional[str] = None) -> Optional[MethodMatch]:
        """
        Work out how to update the entity from this DTO.

        Args:
            method_name: Name given by the caller, see naming.decode_name

        Returns:
            The method to call, or None to copy the DTO fields onto the entity

        Raises:
            MethodMatchError: If no method fits
        """
        if not method_name and self.per_dto_config and self.per_dto_config.update_method:
            method_name = self.per_dto_config.update_method
        decoded = decode_name(method_name)

        if decoded.name_type == DecodedNameTypes.COPY_PROPERTIES:
            if not self.entity_info.has_settable_properties:
                raise self._error(f"There was no way to update the entity class {self.entity_name} using {COPY_PROPERTIES}.")
            return None

        if decoded.name_type == DecodedNameTypes.CTOR:
            raise self._error(f"A constructor cannot be used to update the entity class {self.entity_name}.")

        if decoded.name_type == DecodedNameTypes.METHOD:
            for candidate in self.matched_setter_methods:
                if candidate.method.name == decoded.name and candidate.is_perfect \
                        and _param_count_fits(candidate, decoded.num_params):
                    return candidate
            raise self._error(
                f"Could not find a method of name {decoded}. The method that fit the properties in the DTO/VM are:\n"
                f"{_describe_fits(self.matched_setter_methods)}"
            )

        chosen = self._pick_default(self.matched_setter_methods, "update")
        if chosen is not None:
            return chosen
        if self.entity_info.has_settable_properties:
            return None
        raise self._error(
            f"Could not find a method to update the entity class {self.entity_name} with the DTO/VM {self.dto_name}. "
            f"The closest matches were:\n{_describe_closest(self.matched_setter_methods)}"
        )

    def get_create_method(self, method_name: Optional[str] = None) -> Optional[MethodMatch]:
        """
        Work out how to create the entity from this DTO.

        Returns:
            The ctor/factory to call, or None to build the entity empty and copy fields in

        Raises:
            MethodMatchError: If nothing fits
        """
        if not method_name and self.per_dto_config and self.per_dto_config.create_method:
            method_name = self.per_dto_config.create_method
        decoded = decode_name(method_name)

        if decoded.name_type == DecodedNameTypes.COPY_PROPERTIES:
            if not self.entity_info.can_be_created_via_copy:
                raise self._error(
                    f"There was no way to create the entity class {self.entity_name} using {COPY_PROPERTIES}, "
                    f"as its constructor needs parameters."
                )
            return None

        if decoded.name_type in (DecodedNameTypes.CTOR, DecodedNameTypes.METHOD):
            kind = MethodKinds.CTOR if decoded.name_type == DecodedNameTypes.CTOR else MethodKinds.FACTORY
            for candidate in self.matched_ctors_and_factories:
                if candidate.method.kind == kind and candidate.method.name == decoded.name \
                        and candidate.is_perfect and _param_count_fits(candidate, decoded.num_params):
                    return candidate
            if kind == MethodKinds.CTOR and self.entity_info.ctor is None and self.entity_info.has_settable_properties:
                return None
            raise self._error(
                f"Could not find a ctor/static method of name {decoded}. The ctors/static methods that fit "
                f"the properties in the DTO/VM are:\n{_describe_fits(self.matched_ctors_and_factories)}"
            )

        chosen = self._pick_default(self.matched_ctors_and_factories, "create")
        if chosen is not None:
            return chosen
        if self.entity_info.can_be_created_via_copy and self.entity_info.has_settable_properties:
            return None
        raise self._error(
            f"Could not find a ctor/static method to create the entity class {self.entity_name} with the DTO/VM "
            f"{self.dto_name}. The closest matches were:\n{_describe_closest(self.matched_ctors_and_factories)}"
        )

    def _pick_default(self, matches: List[MethodMatch], action: str) -> Optional[MethodMatch]:
        perfect = [m for m in matches if m.is_perfect and m.fields_used > 0]
        if not perfect:
            return None
        most_used = max(m.fields_used for m in perfect)
        perfect = [m for m in perfect if m.fields_used == most_used]
        if len(perfect) == 1:
            return perfect[0]

        dto_name = normalise_name(self.dto_name)
        named = [m for m in perfect if dto_name.startswith(normalise_name(m.method.name))]
        if len(named) == 1:
            return named[0]
        raise self._error(
            f"There are multiple methods that can {action} the entity class {self.entity_name} with the DTO/VM "
            f"{self.dto_name}: {', '.join(m.describe() for m in perfect)}. "
            f"Name the method to use, either in the call or via a PerDtoConfig."
        )

    def _check_per_dto_config(self) -> None:
        if self.per_dto_config is None:
            return
        if self.per_dto_config.entity_type is not self.entity_info.entity_type:
            self.problems.append(
                f"{self.per_dto_config.__name__} links {self.dto_name} to {self.per_dto_config.entity_type.__name__}, "
                f"but the DTO/VM is linked to {self.entity_name}."
            )
        for name in self.read_mapping:
            if name not in self.fields:
                self.problems.append(f"{self.per_dto_config.__name__}.read_mapping names {name}, which is not a field of {self.dto_name}.")
        for method_name in (self.per_dto_config.update_method, self.per_dto_config.create_method):
            try:
                decode_name(method_name)
            except ConfigurationError as e:
                self.problems.append(e.message)

    def _error(self, message: str) -> MethodMatchError:
        return MethodMatchError(message, entity_name=self.entity_name, dto_name=self.dto_name)


def _param_count_fits(match: MethodMatch, num_params: Optional[int]) -> bool:
    return num_params is None or len(match.method.data_params) == num_params


def _describe_fits(matches: List[MethodMatch]) -> str:
    fits = [m.describe() for m in matches if m.is_perfect]
    return "\n".join(fits) if fits else "<none>"


def _describe_closest(matches: List[MethodMatch]) -> str:
    ranked = sorted(matches, key=lambda m: m.score, reverse=True)[:3]
    if not ranked:
        return "<none>"
    return "\n".join(f"{m.describe()} (score {m.score:.2f})" for m in ranked)


def _find_read_path(
    entity_info: DecodedEntityClass,
    name: str,
    entity_lookup: EntityLookup,
) -> Optional[Tuple[str, ...]]:
    """
    Find how a DTO field is read from the entity.

    A direct attribute wins; otherwise the name is flattened through
    single-valued relationships, e.g. book_title -> book.title.
    """
    if name in entity_info.readable:
        return (name,)
    for rel_key, rel_type in entity_info.single_relationships.items():
        prefix = f"{rel_key}_"
        if name.startswith(prefix):
            rest = _find_read_path(entity_lookup(rel_type), name[len(prefix):], entity_lookup)
            if rest:
                return (rel_key,) + rest
    return None
