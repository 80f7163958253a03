"""
Matching a DTO's fields to the parameters of an entity method.

Each parameter is matched to the DTO field with the same normalised name
(case and underscores ignored, so publishedOn == published_on). A parameter
scores 1.0 when the name and the type fit, 0.5 when only the name fits and
0 when there is no field of that name. The method's score is the mean over
its required parameters; a perfect match can be called with DTO values.
"""

import decimal
import inspect
import typing
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .decoded_entity import EntityMethod, ParamInfo, unwrap_optional

PERFECT_MATCH_SCORE = 1.0
NAME_ONLY_SCORE = 0.5
NO_MATCH_SCORE = 0.0

_NUMERIC_WIDENING = {
    float: (int,),
    decimal.Decimal: (int, float),
}


def normalise_name(name: str) -> str:
    return name.replace('_', '').lower()


def _strip_annotated(annotation: Any) -> Any:
    if typing.get_origin(annotation) is typing.Annotated:
        return typing.get_args(annotation)[0]
    return annotation


def types_compatible(field_type: Any, param_type: Any) -> bool:
    """
    Check a DTO field's type can be passed to a parameter.

    Unannotated or Any on either side always fits.
    """
    if param_type is inspect.Parameter.empty or field_type is inspect.Parameter.empty:
        return True
    field_type = unwrap_optional(_strip_annotated(field_type))
    param_type = unwrap_optional(_strip_annotated(param_type))
    if field_type is Any or param_type is Any or field_type is None or param_type is None:
        return True
    if field_type == param_type:
        return True

    field_origin = typing.get_origin(field_type)
    param_origin = typing.get_origin(param_type)
    if field_origin is not None or param_origin is not None:
        return (field_origin or field_type) == (param_origin or param_type)

    if isinstance(field_type, type) and isinstance(param_type, type):
        if issubclass(field_type, param_type):
            return True
        return field_type in _NUMERIC_WIDENING.get(param_type, ())
    # String (unresolved) annotations: compare by name
    return str(field_type).split('.')[-1] == str(param_type).split('.')[-1]


@dataclass(frozen=True)
class DtoFieldInfo:
    """The part of a DTO field the matcher needs"""

    name: str
    annotation: Any


@dataclass(frozen=True)
class ParamMatch:
    param: ParamInfo
    field_name: Optional[str]
    score: float


@dataclass(frozen=True)
class MethodMatch:
    """How well one entity method fits a DTO"""

    method: EntityMethod
    param_matches: Tuple[ParamMatch, ...]
    score: float

    @property
    def is_perfect(self) -> bool:
        return self.score >= PERFECT_MATCH_SCORE

    @property
    def fields_used(self) -> int:
        """Number of DTO fields that feed a parameter"""
        return sum(1 for m in self.param_matches if m.field_name is not None and m.score >= PERFECT_MATCH_SCORE)

    def describe(self) -> str:
        return self.method.describe()

    def build_arguments(self, dto: Any, db: Any) -> Dict[str, Any]:
        """
        Collect the keyword arguments to call the method with.

        Args:
            dto: DTO instance providing the values
            db: Session passed to any session parameter
        """
        kwargs = {}
        for match in self.param_matches:
            if match.param.is_session:
                kwargs[match.param.name] = db
            elif match.field_name is not None and match.score >= PERFECT_MATCH_SCORE:
                kwargs[match.param.name] = getattr(dto, match.field_name)
        return kwargs


def match_method(method: EntityMethod, fields: Dict[str, DtoFieldInfo]) -> MethodMatch:
    """
    Score how well a method's parameters are covered by DTO fields.

    Args:
        method: Entity method, ctor or factory
        fields: DTO fields available for matching, keyed by field name
    """
    by_normalised = {normalise_name(name): info for name, info in fields.items()}

    param_matches = []
    required_scores = []
    for param in method.params:
        if param.is_session:
            param_matches.append(ParamMatch(param, None, PERFECT_MATCH_SCORE))
            continue

        info = by_normalised.get(normalise_name(param.name))
        if info is None:
            score = NO_MATCH_SCORE
        elif types_compatible(info.annotation, param.annotation):
            score = PERFECT_MATCH_SCORE
        else:
            score = NAME_ONLY_SCORE

        param_matches.append(ParamMatch(param, info.name if info else None, score))
        if param.is_required:
            required_scores.append(score)

    total = sum(required_scores) / len(required_scores) if required_scores else PERFECT_MATCH_SCORE
    return MethodMatch(method, tuple(param_matches), total)
