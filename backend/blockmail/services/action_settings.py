"""Service interpreting action blocks: editing, validation and markup export."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from blockmail.action_validation import validate_action
from blockmail.document_models import Block
from blockmail.markup_generator import SCHEMA_CONTEXT, Markup, MissingPayloadError, generate_markup
from blockmail.schemas.actions import InvalidActionConfigError, ValidationResult

logger = logging.getLogger(__name__)

# Block kinds whose settings are one action config of an implied type.
IMPLIED_ACTION_TYPES: dict[str, str] = {
    "goto": "ViewAction",
    "confirm": "ConfirmAction",
    "rsvp": "RsvpAction",
    "track": "TrackAction",
    "update": "UpdateAction",
    "cancel": "CancelAction",
    "download": "DownloadAction",
}

# Block kinds whose settings are the structured payload itself.
PAYLOAD_BLOCKS: dict[str, tuple[str, str, str]] = {
    "flight": ("FlightReservation", "flight", "Flight"),
    "hotel": ("LodgingReservation", "lodging", "Hotel"),
    "train": ("TrainReservation", "train", "Train"),
    "bus": ("BusReservation", "bus", "Bus"),
    "rental": ("RentalCarReservation", "rentalCar", "Rental Car"),
    "restaurant": ("FoodEstablishmentReservation", "restaurant", "Restaurant"),
    "order": ("OrderAction", "order", "View Order"),
    "invoice": ("Invoice", "invoice", "Pay Invoice"),
    "promocode": ("Promotion", "promotion", "Promotion"),
}


@dataclass
class BlockExport:
    """Export outcome for one action block."""

    block_id: str
    block_type: str
    markup: list[Markup] = field(default_factory=list)
    validation: list[ValidationResult] = field(default_factory=list)
    error: str | None = None

    @property
    def valid(self) -> bool:
        return all(result.valid for result in self.validation)

    @property
    def exported(self) -> bool:
        return self.error is None and bool(self.markup)


@dataclass
class DocumentExport:
    """Markup for every action block of a document, failures isolated per block."""

    blocks: list[BlockExport] = field(default_factory=list)

    @property
    def failed_block_ids(self) -> list[str]:
        return [item.block_id for item in self.blocks if item.error is not None]

    @property
    def invalid_block_ids(self) -> list[str]:
        return [item.block_id for item in self.blocks if not item.valid]

    def markup_by_block(self) -> dict[str, list[Markup]]:
        return {item.block_id: item.markup for item in self.blocks if item.exported}


class ActionSettingsService:
    """Entry point the editor uses for blocks that carry interactive actions."""

    def __init__(self, *, context: str = SCHEMA_CONTEXT) -> None:
        self._context = context

    @property
    def context(self) -> str:
        return self._context

    # ------------------------------------------------------------------
    # Settings <-> action configs
    # ------------------------------------------------------------------
    @staticmethod
    def action_configs(block: Block) -> list[dict[str, Any]]:
        """Interpret a block's untyped settings as raw action configs."""

        settings = block.settings or {}
        if block.type == "action":
            return [dict(settings)] if settings else []
        if block.type == "gmailActions":
            actions = settings.get("actions") or []
            if not isinstance(actions, (list, tuple)):
                raise InvalidActionConfigError("gmailActions settings must hold a list of actions")
            return [dict(item) if isinstance(item, Mapping) else item for item in actions]
        if block.type in IMPLIED_ACTION_TYPES:
            return [{**settings, "type": IMPLIED_ACTION_TYPES[block.type]}]
        if block.type in PAYLOAD_BLOCKS:
            action_type, payload_key, default_name = PAYLOAD_BLOCKS[block.type]
            config: dict[str, Any] = {"type": action_type, "name": default_name}
            if settings:
                config[payload_key] = dict(settings)
            return [config]
        return []

    @staticmethod
    def merge_settings(block: Block, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Return ``block.settings`` shallow-merged with ``updates``."""

        return {**(block.settings or {}), **updates}

    @staticmethod
    def add_action(settings: Mapping[str, Any], action_type: str) -> dict[str, Any]:
        """Append an empty action of ``action_type`` to a ``gmailActions`` settings map."""

        actions = list(settings.get("actions") or [])
        actions.append({"type": action_type, "name": ""})
        return {**settings, "actions": actions}

    @staticmethod
    def update_action(settings: Mapping[str, Any], index: int, updates: Mapping[str, Any]) -> dict[str, Any]:
        actions = list(settings.get("actions") or [])
        if not 0 <= index < len(actions):
            raise IndexError(f"No action at position {index}")
        actions[index] = {**actions[index], **updates}
        return {**settings, "actions": actions}

    @staticmethod
    def remove_action(settings: Mapping[str, Any], index: int) -> dict[str, Any]:
        actions = [item for position, item in enumerate(settings.get("actions") or []) if position != index]
        return {**settings, "actions": actions}

    # ------------------------------------------------------------------
    # Validation and generation
    # ------------------------------------------------------------------
    def validate_block(self, block: Block) -> list[ValidationResult]:
        try:
            configs = self.action_configs(block)
        except InvalidActionConfigError as exc:
            return [ValidationResult.from_messages(exc.messages, [])]
        return [validate_action(config) for config in configs]

    def compile_block(self, block: Block) -> list[Markup]:
        """Generate markup for every action of ``block``; all or nothing."""

        return [generate_markup(config, context=self._context) for config in self.action_configs(block)]

    def export_block(self, block: Block, *, include_invalid: bool = True) -> BlockExport:
        result = BlockExport(block_id=block.id, block_type=block.type)
        try:
            result.validation = self.validate_block(block)
            if not include_invalid and not result.valid:
                return result
            result.markup = self.compile_block(block)
        except MissingPayloadError as exc:
            logger.warning("Block '%s' could not be exported: %s", block.id, exc)
            result.error = str(exc)
        except InvalidActionConfigError as exc:
            logger.warning("Block '%s' has malformed action settings: %s", block.id, exc)
            result.error = str(exc)
        return result

    def export_document(self, blocks: Iterable[Block], *, include_invalid: bool = True) -> DocumentExport:
        """Compile every action block; one broken block never stops the rest."""

        export = DocumentExport()
        for block in blocks:
            if not block.is_action:
                continue
            export.blocks.append(self.export_block(block, include_invalid=include_invalid))
        if export.failed_block_ids:
            logger.info("Export finished with %s failed block(s)", len(export.failed_block_ids))
        return export


__all__ = [
    "ActionSettingsService",
    "BlockExport",
    "DocumentExport",
    "IMPLIED_ACTION_TYPES",
    "PAYLOAD_BLOCKS",
]
