"""Tests for action configuration validation."""

from __future__ import annotations

import pytest

from blockmail.action_validation import _CHECKERS, is_valid_iso_datetime, is_valid_url, validate_action
from blockmail.schemas.actions import ACTION_MODELS, ViewAction


def test_every_action_type_has_a_checker() -> None:
    assert set(_CHECKERS) == set(ACTION_MODELS)
    assert len(ACTION_MODELS) == 17


def test_valid_view_action() -> None:
    result = validate_action({"type": "ViewAction", "name": "View Order", "target": "https://example.com/o/1"})

    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_typed_input_is_accepted() -> None:
    result = validate_action(ViewAction(name="Open", target=["https://example.com", "app://open"]))

    assert result.valid


def test_missing_type_and_name() -> None:
    result = validate_action({"target": "https://example.com"})

    assert not result.valid
    assert "Action type is required" in result.errors
    assert "Action name is required" in result.errors


def test_unknown_type_is_reported() -> None:
    result = validate_action({"type": "DanceAction", "name": "Dance"})

    assert not result.valid
    assert "Unsupported action type: DanceAction" in result.errors


def test_non_object_is_reported() -> None:
    result = validate_action(["ViewAction"])

    assert result.errors == ["Action configuration must be an object"]


@pytest.mark.parametrize("action_type", [["ViewAction"], {"name": "ViewAction"}, 7])
def test_non_string_type_is_reported(action_type) -> None:
    result = validate_action({"type": action_type, "name": "Go"})

    assert not result.valid
    assert result.errors == ["Action type must be a string"]


def test_field_errors_are_reported_by_path() -> None:
    result = validate_action(
        {"type": "ConfirmAction", "name": "Approve", "handler": {"url": "https://x.com", "method": "PUT"}}
    )

    assert not result.valid
    assert any(error.startswith("handler.method: ") for error in result.errors)


def test_name_style_warnings_do_not_invalidate() -> None:
    result = validate_action({"type": "ViewAction", "name": "CLICK HERE NOW!", "target": "https://example.com"})

    assert result.valid
    assert "Action name should not include punctuation" in result.warnings
    assert "Action name should not be all caps" in result.warnings


def test_long_name_warning() -> None:
    result = validate_action({"type": "ViewAction", "name": "Open your monthly statement", "target": "https://x.com"})

    assert result.valid
    assert result.warnings == ["Action name should be under 20 characters for best display"]


def test_handler_must_use_https() -> None:
    result = validate_action({"type": "ConfirmAction", "name": "Approve", "handler": {"url": "http://x.com"}})

    assert not result.valid
    assert "ConfirmAction handler URL must use HTTPS" in result.errors


def test_handler_url_is_required() -> None:
    result = validate_action({"type": "SaveAction", "name": "Save", "handler": {}})

    assert result.errors == ["SaveAction requires a handler URL"]


def test_view_target_rules() -> None:
    empty = validate_action({"type": "ViewAction", "name": "Open", "target": []})
    missing = validate_action({"type": "ViewAction", "name": "Open"})
    relative = validate_action({"type": "ViewAction", "name": "Open", "target": "/orders/1"})

    assert empty.errors == ["ViewAction target array must contain at least one URL"]
    assert missing.errors == ["ViewAction requires a target URL"]
    assert relative.errors == ["ViewAction target must be a valid URL"]


def test_rsvp_requires_event_details() -> None:
    assert validate_action({"type": "RsvpAction", "name": "RSVP"}).errors == ["RsvpAction requires event details"]

    result = validate_action(
        {
            "type": "RsvpAction",
            "name": "Reply",
            "event": {"name": "Launch", "startDate": "2027-05-01", "location": {}},
        }
    )
    assert "Event start date must be in ISO 8601 format" in result.errors
    assert "Event location name is required" in result.errors


def test_track_needs_target_or_parcel_url() -> None:
    missing = validate_action({"type": "TrackAction", "name": "Track"})
    via_parcel = validate_action(
        {"type": "TrackAction", "name": "Track", "parcel": {"trackingUrl": "https://carrier.example.com/t/1"}}
    )

    assert missing.errors == ["TrackAction requires either a target URL or parcel trackingUrl"]
    assert via_parcel.valid


def test_missing_reservation_payload() -> None:
    result = validate_action({"type": "FlightReservation", "name": "Flight"})

    assert result.errors == ["FlightReservation requires flight details"]


def test_complete_flight_is_valid(flight_settings: dict) -> None:
    result = validate_action({"type": "FlightReservation", "name": "Flight", "flight": flight_settings})

    assert result.valid, result.errors


def test_flight_arrival_must_follow_departure(flight_settings: dict) -> None:
    flight_settings["arrivalTime"] = "2027-03-04T19:00:00-08:00"

    result = validate_action({"type": "FlightReservation", "name": "Flight", "flight": flight_settings})

    assert "Flight arrival time must be after departure time" in result.errors


def test_restaurant_party_size_must_be_positive() -> None:
    result = validate_action(
        {"type": "FoodEstablishmentReservation", "name": "Dinner", "restaurant": {"partySize": 0}}
    )

    assert "Restaurant party size must be at least 1" in result.errors


def test_complete_order_is_valid(order_settings: dict) -> None:
    result = validate_action({"type": "OrderAction", "name": "View Order", "order": order_settings})

    assert result.valid, result.errors
    assert result.warnings == []


def test_order_rules(order_settings: dict) -> None:
    order_settings.update(items=[], currency="usd", total="-1")

    result = validate_action({"type": "OrderAction", "name": "View Order", "order": order_settings})

    assert "Order must contain at least one item" in result.errors
    assert "Order currency must be a 3-letter ISO 4217 code" in result.errors
    assert "Order total must not be negative" in result.errors


def test_order_totals_mismatch_is_a_warning(order_settings: dict) -> None:
    order_settings["total"] = "40.00"

    result = validate_action({"type": "OrderAction", "name": "View Order", "order": order_settings})

    assert result.valid
    assert result.warnings == ["Order total does not equal subtotal plus tax and shipping"]


def test_availability_window() -> None:
    result = validate_action(
        {
            "type": "DownloadAction",
            "name": "Get ticket",
            "target": "https://example.com/ticket.pdf",
            "validFrom": "2027-02-01T00:00:00Z",
            "validUntil": "2027-01-01T00:00:00Z",
        }
    )

    assert result.errors == ["validUntil must be after validFrom"]


def test_validation_is_idempotent(order_settings: dict) -> None:
    config = {"type": "OrderAction", "name": "ORDER!", "order": order_settings}

    assert validate_action(config) == validate_action(config)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2027-05-01T10:00:00Z", True),
        ("2027-05-01T10:00:00+02:00", True),
        ("2027-05-01T10:00:00", False),
        ("2027-05-01T10:00:00.123Z", False),
        ("2027-05-01", False),
        (None, False),
    ],
)
def test_iso_datetime_format(value, expected: bool) -> None:
    assert is_valid_iso_datetime(value) is expected


def test_url_check() -> None:
    assert is_valid_url("https://example.com/path?q=1")
    assert is_valid_url("mailto:someone@example.com")
    assert not is_valid_url("example.com")
    assert not is_valid_url("")
