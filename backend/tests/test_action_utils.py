"""Tests for the action catalog helpers."""

from __future__ import annotations

from blockmail.action_utils import action_catalog, action_type_description, action_type_label, required_fields
from blockmail.schemas.actions import ACTION_MODELS


def test_catalog_covers_every_action_type() -> None:
    assert [entry["type"] for entry in action_catalog()] == list(ACTION_MODELS)


def test_labels_and_descriptions() -> None:
    assert action_type_label("ViewAction") == "Go To Action"
    assert action_type_label("Unknown") == "Unknown"
    assert action_type_description("ConfirmAction").startswith("One-click button")
    assert action_type_description("Unknown") == ""


def test_required_fields_returns_a_copy() -> None:
    fields = required_fields("FlightReservation")
    fields.append("extra")

    assert "flight.reservationNumber" in required_fields("FlightReservation")
    assert "extra" not in required_fields("FlightReservation")
    assert required_fields("Unknown") == []
