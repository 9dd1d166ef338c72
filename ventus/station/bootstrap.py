"""Reconciles the static sensor catalog with the persisted child devices."""

from typing import Dict, List, Optional, Sequence
import logging

from ventus.shared.exceptions import DeviceDisabledError
from ventus.shared.models import ChildDevice, ConversionRule, SensorDefinition, SensorEntity
from .catalog import SENSOR_CATALOG, rule_for
from .stores.base import DeviceStore

logger = logging.getLogger(__name__)

META_SOURCE_FIELD = "sourceField"
META_RULE = "rule"
META_UNIT = "unit"


class SensorCatalogBootstrapper:
    """Makes sure exactly one child device exists per catalog entry.

    The first start creates the children in catalog order. Every later start
    rebinds the existing children through their persisted ``sourceField``
    metadata and only creates the catalog entries that have no bound child,
    so a start interrupted by a store failure is completed by the next one.
    """

    def __init__(self, store: DeviceStore, catalog: Sequence[SensorDefinition] = SENSOR_CATALOG):
        self.store = store
        self.catalog = tuple(catalog)
        self._by_field = {d.source_field: d for d in self.catalog}
        self._by_name = {d.name: d for d in self.catalog}

    def reconcile(self, parent_id: int) -> Dict[int, SensorEntity]:
        """Create or rehydrate the sensor entities of a parent.

        Args:
            parent_id: Id of the station device.

        Returns:
            Mapping of entity id to its in-memory handle.

        Raises:
            DeviceNotFoundError: If the parent does not exist.
            DeviceDisabledError: If the parent is disabled.
            StoreWriteError: If creating or binding a child fails. Whatever
                was written is picked up by the next call.
        """
        parent = self.store.get_parent(parent_id)
        if not parent.enabled:
            raise DeviceDisabledError(f"Station device {parent.name} ({parent_id}) is disabled")

        children = self.store.list_children(parent_id)
        entities = self._rehydrate(parent_id, children) if children else {}
        bound_fields = {e.source_field for e in entities.values()}

        created = 0
        for definition in self.catalog:
            if definition.source_field in bound_fields:
                continue
            child = self.store.create_child(parent_id, definition.name, definition.device_type)
            self._bind(child.id, definition)
            entities[child.id] = self._entity(child.id, parent_id, definition)
            created += 1
            logger.info(f"Child device {definition.name} created with id: {child.id}")

        if created:
            logger.info(f"Created {created} sensor devices for station {parent_id}")
        return entities

    def _bind(self, device_id: int, definition: SensorDefinition) -> None:
        """Persist what a later start needs to rebind the child."""
        self.store.set_metadata(device_id, META_SOURCE_FIELD, definition.source_field)
        self.store.set_metadata(device_id, META_RULE, definition.rule.value)
        if definition.unit is not None:
            self.store.write_attribute(device_id, "unit", definition.unit)
            self.store.set_metadata(device_id, META_UNIT, definition.unit)

    def _entity(self, device_id: int, parent_id: int, definition: SensorDefinition) -> SensorEntity:
        return SensorEntity(
            id=device_id,
            parent_id=parent_id,
            name=definition.name,
            source_field=definition.source_field,
            rule=definition.rule,
            unit=definition.unit,
        )

    def _rehydrate(self, parent_id: int, children: Sequence[ChildDevice]) -> Dict[int, SensorEntity]:
        entities = {}
        bound_fields = set()
        unbound: List[ChildDevice] = []

        for child in children:
            source_field = child.metadata.get(META_SOURCE_FIELD)
            if not source_field:
                unbound.append(child)
                continue
            if source_field in bound_fields:
                logger.warning(f"Child device {child.name} ({child.id}) duplicates {source_field}, ignoring")
                continue

            definition = self._by_field.get(source_field)
            if definition is not None and definition.unit is not None \
                    and child.metadata.get(META_UNIT) != definition.unit:
                # Binding was interrupted after sourceField was stored
                self._bind(child.id, definition)
                entities[child.id] = self._entity(child.id, parent_id, definition)
            else:
                entities[child.id] = SensorEntity(
                    id=child.id,
                    parent_id=parent_id,
                    name=child.name,
                    source_field=source_field,
                    rule=self._resolve_rule(source_field, child.metadata.get(META_RULE)),
                    unit=child.metadata.get(META_UNIT),
                )
            bound_fields.add(source_field)

        # Children created before their metadata could be written
        for child in unbound:
            definition = self._by_name.get(child.name)
            if definition is None or definition.source_field in bound_fields:
                logger.warning(f"Child device {child.name} ({child.id}) has no {META_SOURCE_FIELD}, ignoring")
                continue
            self._bind(child.id, definition)
            entities[child.id] = self._entity(child.id, parent_id, definition)
            bound_fields.add(definition.source_field)
            logger.info(f"Child device {child.name} ({child.id}) rebound to {definition.source_field}")

        logger.info(f"Loaded {len(entities)} existing sensor devices for station {parent_id}")
        return entities

    def _resolve_rule(self, source_field: str, stored_rule: Optional[str]) -> ConversionRule:
        """Pick the rule for a rehydrated child.

        The catalog wins for known fields; the stored tag only matters for
        fields that have since left the catalog.
        """
        definition = self._by_field.get(source_field)
        if definition is not None:
            return definition.rule
        try:
            return ConversionRule(stored_rule)
        except ValueError:
            return rule_for(source_field)
