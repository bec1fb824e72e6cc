"""Endpoints that validate actions and generate their structured markup."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from blockmail.action_utils import action_catalog
from blockmail.action_validation import validate_action
from blockmail.api.deps import get_action_settings_service
from blockmail.markup_generator import MissingPayloadError, UnsupportedActionError, generate_markup, to_json_ld
from blockmail.schemas.actions import (
    ActionCatalogEntry,
    InvalidActionConfigError,
    MarkupResponse,
    ValidationResult,
)
from blockmail.services.action_settings import ActionSettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("/catalog", response_model=list[ActionCatalogEntry])
def list_action_types() -> list[ActionCatalogEntry]:
    return [ActionCatalogEntry(**entry) for entry in action_catalog()]


@router.post("/validate", response_model=ValidationResult)
def validate(payload: Any = Body(...)) -> ValidationResult:
    return validate_action(payload)


@router.post("/markup", response_model=MarkupResponse)
def generate(
    payload: Any = Body(...),
    service: ActionSettingsService = Depends(get_action_settings_service),
) -> MarkupResponse:
    try:
        markup = generate_markup(payload, context=service.context)
    except MissingPayloadError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (InvalidActionConfigError, UnsupportedActionError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("Generated %s markup", markup.get("@type"))
    return MarkupResponse(markup=markup, json_ld=to_json_ld(markup))
