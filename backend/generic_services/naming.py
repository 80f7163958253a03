"""
Decoding the method name a caller passes to create_and_save/update_and_save.

Accepted forms:
    None or ""        let GenericServices pick the method
    "CopyProperties"  copy matching DTO fields onto the entity
    "Ctor", "Ctor(3)" use the entity's constructor
    "add_review"      call the named method/factory
    "add_review(3)"   ... that has exactly 3 parameters
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from exceptions import ConfigurationError

COPY_PROPERTIES = "CopyProperties"
CTOR_NAME = "Ctor"

_NAME_PATTERN = re.compile(r'^(?P<name>[A-Za-z_]\w*)(?:\((?P<count>\d+)\))?$')


class DecodedNameTypes(str, Enum):
    NO_NAME_GIVEN = "no_name_given"
    COPY_PROPERTIES = "copy_properties"
    CTOR = "ctor"
    METHOD = "method"


@dataclass(frozen=True)
class DecodedName:
    name_type: DecodedNameTypes
    name: Optional[str] = None
    num_params: Optional[int] = None

    def __str__(self) -> str:
        if self.name is None:
            return "<default>"
        if self.num_params is None:
            return self.name
        return f"{self.name}({self.num_params})"


def decode_name(name: Optional[str]) -> DecodedName:
    """
    Decode a method name string.

    Raises:
        ConfigurationError: If the name is not in one of the accepted forms
    """
    if not name:
        return DecodedName(DecodedNameTypes.NO_NAME_GIVEN)

    match = _NAME_PATTERN.match(name.strip())
    if not match:
        raise ConfigurationError(
            f"The method name '{name}' is not in the correct format. "
            f"Use a method name, optionally followed by the number of parameters in brackets, e.g. add_review(3)."
        )

    method_name = match.group('name')
    count = int(match.group('count')) if match.group('count') is not None else None

    if method_name == COPY_PROPERTIES:
        if count is not None:
            raise ConfigurationError(f"{COPY_PROPERTIES} does not take a parameter count.")
        return DecodedName(DecodedNameTypes.COPY_PROPERTIES, method_name)
    if method_name == CTOR_NAME:
        return DecodedName(DecodedNameTypes.CTOR, method_name, count)
    return DecodedName(DecodedNameTypes.METHOD, method_name, count)
