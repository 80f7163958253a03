"""
GenericService: create, read, update and delete through DTOs or entities.

The service is also the status of the operations run on it: after a call,
check is_valid / errors / message. Expected failures (entity not found,
errors returned by entity methods, validation, handled database errors)
become status errors. Set-up mistakes, such as a DTO no entity method
fits, raise exceptions.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from exceptions import MethodMatchError, ValidationError
from .decoded_dto import DecodedDto
from .decoded_entity import VALIDATE_METHOD_NAME, DecodedEntityClass, MethodKinds
from .link import is_dto_class
from .mapper import copy_dto_to_entity, copy_keys_to_dto, map_entity_to_dto
from .matching import MethodMatch
from .setup import GenericServicesRegistry
from .status import StatusGeneric

logger = logging.getLogger(__name__)

DeleteAction = Callable[[Session, Any], Optional[StatusGeneric]]


class GenericService(StatusGeneric):
    """
    Generic CRUD over SQLAlchemy entities and their DTOs.

    One instance serves one unit of work (typically one request).
    """

    def __init__(self, db: Session, registry: GenericServicesRegistry):
        super().__init__()
        self.db = db
        self.registry = registry

    @property
    def config(self):
        return self.registry.config

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_single(self, type_: type, *keys: Any, **filters: Any) -> Optional[Any]:
        """
        Read one entity, or one DTO built from an entity.

        Args:
            type_: Entity class or registered DTO class
            *keys: Primary key value(s), in key order
            **filters: Attribute filters used instead of keys

        Returns:
            The entity/DTO, or None (with an error added) if not found
        """
        if is_dto_class(type_):
            decoded = self.registry.get_dto(type_)
            if not decoded.is_readable:
                raise ValidationError(
                    f"The DTO/VM class {decoded.dto_name} cannot be read from {decoded.entity_name}: "
                    f"the required field(s) {', '.join(decoded.unmapped_required)} have no matching attribute.",
                    {name: "no matching attribute" for name in decoded.unmapped_required},
                )
            entity = self._find(decoded.entity_info, keys, filters, decoded.read_options)
            if entity is None:
                self._not_found(decoded.entity_name, "you were looking for")
                return None
            return map_entity_to_dto(decoded, entity)

        entity_info = self.registry.get_entity(type_)
        entity = self._find(entity_info, keys, filters)
        if entity is None:
            self._not_found(entity_info.entity_name, "you were looking for")
        return entity

    def read_many_no_tracked(self, type_: type, query: Optional[Query] = None) -> List[Any]:
        """
        Read many entities or DTOs.

        Args:
            type_: Entity class or registered DTO class
            query: Optional query over the entity (already filtered, sorted
                or paged); defaults to every row

        Returns:
            List of entities, or of DTOs built from them. The entities are
            detached from the session, so changes made to them are never saved
        """
        if is_dto_class(type_):
            decoded = self.registry.get_dto(type_)
            query = query if query is not None else self.db.query(decoded.entity_info.entity_type)
            if decoded.read_options:
                query = query.options(*decoded.read_options)
            return [map_entity_to_dto(decoded, entity) for entity in query.all()]

        query = query if query is not None else self.db.query(self.registry.get_entity(type_).entity_type)
        entities = query.all()
        for entity in entities:
            if entity in self.db:
                self.db.expunge(entity)
        return entities

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def create_and_save(self, entity_or_dto: Any, method_name: Optional[str] = None) -> Optional[Any]:
        """
        Create a new entity from an entity instance or a DTO, then commit.

        Args:
            entity_or_dto: New entity, or DTO to build one from
            method_name: Ctor/factory to use, see naming.decode_name

        Returns:
            The entity or DTO passed in (DTO keys are filled in), or None on errors
        """
        if not is_dto_class(type(entity_or_dto)):
            entity_info = self.registry.get_entity(type(entity_or_dto))
            self.db.add(entity_or_dto)
            if self._save_changes(self.config.direct_access_validate_on_save):
                self.message = f"Successfully created a {entity_info.entity_name}"
                return entity_or_dto
            return None

        decoded = self.registry.get_dto(type(entity_or_dto))
        match = decoded.get_create_method(method_name)
        if match is None:
            entity = decoded.entity_info.entity_type()
            copy_dto_to_entity(decoded, entity_or_dto, entity, include_keys=True)
        else:
            entity = self._run_creator(decoded, match, entity_or_dto)
            if entity is None:
                return None

        self.db.add(entity)
        if not self._save_changes(decoded.validate_on_save):
            return None
        copy_keys_to_dto(decoded, entity, entity_or_dto)
        self.message = f"Successfully created a {decoded.entity_name}"
        logger.info(f"Created {decoded.entity_name} {decoded.entity_info.key_values(entity)} from {decoded.dto_name}")
        return entity_or_dto

    def update_and_save(self, entity_or_dto: Any, method_name: Optional[str] = None) -> None:
        """
        Update an entity, directly or through a DTO, then commit.

        Args:
            entity_or_dto: Changed entity, or DTO holding the entity's keys and new values
            method_name: Method to run, "CopyProperties", or None to let the DTO decide
        """
        if not is_dto_class(type(entity_or_dto)):
            entity_info = self.registry.get_entity(type(entity_or_dto))
            if entity_or_dto not in self.db:
                self.db.merge(entity_or_dto)
            if self._save_changes(self.config.direct_access_validate_on_save):
                self.message = f"Successfully updated the {entity_info.entity_name}"
            return

        decoded = self.registry.get_dto(type(entity_or_dto))
        decoded.require_keys()
        match = decoded.get_update_method(method_name)

        entity = self._find(decoded.entity_info, decoded.key_values(entity_or_dto), {})
        if entity is None:
            self._not_found(decoded.entity_name, "you wanted to update")
            return

        if match is None:
            copy_dto_to_entity(decoded, entity_or_dto, entity)
        else:
            result = getattr(entity, match.method.name)(**match.build_arguments(entity_or_dto, self.db))
            if isinstance(result, StatusGeneric):
                self.combine_errors(result)

        if self.has_errors:
            self.db.rollback()
            return
        if self._save_changes(decoded.validate_on_save):
            self.message = f"Successfully updated the {decoded.entity_name}"
            logger.info(
                f"Updated {decoded.entity_name} {decoded.key_values(entity_or_dto)} via "
                f"{match.describe() if match else 'copied properties'}"
            )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_and_save(self, entity_type: type, *keys: Any) -> None:
        """Delete the entity with the given primary key, then commit"""
        self.delete_with_action_and_save(entity_type, None, *keys)

    def delete_with_action_and_save(self, entity_type: type, action: Optional[DeleteAction], *keys: Any) -> None:
        """
        Delete an entity after running an action that can veto the delete.

        Args:
            entity_type: Entity class
            action: Called as action(db, entity); errors in the status it
                returns cancel the delete
            *keys: Primary key value(s)
        """
        entity_info = self.registry.get_entity(entity_type)
        entity = self._find(entity_info, keys, {})
        if entity is None:
            self._not_found(entity_info.entity_name, "you wanted to delete")
            return

        if action is not None:
            status = action(self.db, entity)
            if isinstance(status, StatusGeneric):
                self.combine_errors(status)
            if self.has_errors:
                self.db.rollback()
                return

        self.db.delete(entity)
        if self._save_changes(False):
            self.message = f"Successfully deleted a {entity_info.entity_name}"
            logger.info(f"Deleted {entity_info.entity_name} {tuple(keys)}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(
        self,
        entity_info: DecodedEntityClass,
        keys: Tuple[Any, ...],
        filters: Dict[str, Any],
        options: Tuple[Any, ...] = (),
    ) -> Optional[Any]:
        entity_type = entity_info.entity_type
        if keys:
            if len(keys) != len(entity_info.primary_keys):
                raise ValidationError(
                    f"The entity class {entity_info.entity_name} has {len(entity_info.primary_keys)} primary key(s), "
                    f"but {len(keys)} key value(s) were given."
                )
            key = keys[0] if len(keys) == 1 else tuple(keys)
            return self.db.get(entity_type, key, options=list(options))
        if not filters:
            raise ValidationError(f"No key or filter was given to find a {entity_info.entity_name}.")
        query = self.db.query(entity_type)
        if options:
            query = query.options(*options)
        return query.filter_by(**filters).first()

    def _run_creator(self, decoded: DecodedDto, match: MethodMatch, dto: Any) -> Optional[Any]:
        entity_type = decoded.entity_info.entity_type
        kwargs = match.build_arguments(dto, self.db)
        if match.method.kind == MethodKinds.CTOR:
            return entity_type(**kwargs)

        result = getattr(entity_type, match.method.name)(**kwargs)
        if isinstance(result, StatusGeneric):
            self.combine_errors(result)
            if result.has_errors:
                return None
            result = getattr(result, 'result', None)
        if not isinstance(result, entity_type):
            raise MethodMatchError(
                f"The static method {match.describe()} did not return a {decoded.entity_name}.",
                entity_name=decoded.entity_name,
                dto_name=decoded.dto_name,
            )
        return result

    def _validate_tracked_entities(self) -> None:
        for entity in list(self.db.new) + list(self.db.dirty):
            validate = getattr(entity, VALIDATE_METHOD_NAME, None)
            if not callable(validate):
                continue
            for error in validate() or ():
                self.add_error(str(error))

    def _save_changes(self, validate: bool) -> bool:
        """
        Commit the session.

        Returns:
            True if committed; False if validation or a handled database
            error stopped the save (the errors are on this status)
        """
        if validate:
            self._validate_tracked_entities()
            if self.has_errors:
                self.db.rollback()
                return False

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            handler = self.config.save_changes_exception_handler
            status = handler(e, self.db) if handler else None
            if status is None or status.is_valid:
                raise
            logger.warning(f"Save failed and was handled: {status.get_all_errors('; ')}")
            self.combine_errors(status)
            return False
        return True

    def _not_found(self, entity_name: str, purpose: str) -> None:
        self.add_error(f"Sorry, I could not find the {entity_name} {purpose}.")
