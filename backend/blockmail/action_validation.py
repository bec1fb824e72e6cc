"""Validation rules for interactive email actions.

``validate_action`` never raises for user-correctable problems: everything is
reported as error or warning strings on a :class:`ValidationResult`.
"""
from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Mapping

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .schemas.actions import (
    ActionBase,
    Address,
    BusReservation,
    CancelAction,
    ConfirmAction,
    DownloadAction,
    FlightReservation,
    FoodEstablishmentReservation,
    InvalidActionConfigError,
    Invoice,
    LodgingReservation,
    OrderAction,
    Promotion,
    RentalCarReservation,
    RsvpAction,
    SaveAction,
    TrackAction,
    TrainReservation,
    UpdateAction,
    ValidationResult,
    ViewAction,
    parse_action_config,
)

MAX_NAME_LENGTH = 20

_iso_re = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(?:[+-][0-9]{2}:[0-9]{2}|Z)")
_currency_re = re.compile(r"[A-Z]{3}")
_iata_airline_re = re.compile(r"[A-Z0-9]{2}")
_iata_airport_re = re.compile(r"[A-Z]{3}")

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)

_ADDRESS_FIELDS = (
    ("street_address", "street address"),
    ("address_locality", "city"),
    ("address_region", "region"),
    ("postal_code", "postal code"),
    ("address_country", "country"),
)


# ---------------------------------------------------------------------------
# Primitive checks
# ---------------------------------------------------------------------------
def is_valid_url(value: Any) -> bool:
    """Return ``True`` when ``value`` parses as an absolute URL."""

    if not isinstance(value, str) or not value:
        return False
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_iso_datetime(value: Any) -> bool:
    """Accept ``YYYY-MM-DDTHH:MM:SS`` followed by ``Z`` or a ``±HH:MM`` offset only."""

    return isinstance(value, str) and _iso_re.fullmatch(value) is not None


def _parse_timestamp(value: str) -> datetime | None:
    if not is_valid_iso_datetime(value):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _first_target(target: str | list[str] | None) -> str | None:
    if isinstance(target, list):
        return target[0] if target else None
    return target


def _require(errors: list[str], value: Any, message: str) -> bool:
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append(message)
        return False
    return True


def _check_timestamp(errors: list[str], value: str | None, label: str, *, required: bool = True) -> datetime | None:
    if not value:
        if required:
            errors.append(f"{label} is required")
        return None
    parsed = _parse_timestamp(value)
    if parsed is None:
        errors.append(f"{label} must be in ISO 8601 format")
    return parsed


def _check_order(errors: list[str], start: datetime | None, end: datetime | None, message: str) -> None:
    if start is not None and end is not None and end <= start:
        errors.append(message)


def _check_url(errors: list[str], value: str | None, label: str) -> None:
    if value and not is_valid_url(value):
        errors.append(f"{label} must be a valid URL")


def _check_amount(errors: list[str], value: Decimal | None, label: str, *, required: bool = True) -> None:
    if value is None:
        if required:
            errors.append(f"{label} is required")
        return
    if value < 0:
        errors.append(f"{label} must not be negative")


def _check_address(errors: list[str], address: Address | None, label: str) -> None:
    if address is None:
        errors.append(f"{label} is required")
        return
    for attr, field_label in _ADDRESS_FIELDS:
        _require(errors, getattr(address, attr), f"{label} {field_label} is required")


def _check_status(errors: list[str], value: str | None, label: str) -> None:
    _require(errors, value, f"{label} is required")


# ---------------------------------------------------------------------------
# Common fields
# ---------------------------------------------------------------------------
def _check_name(name: Any, errors: list[str], warnings: list[str]) -> None:
    if name is not None and not isinstance(name, str):
        return
    if not name or not name.strip():
        errors.append("Action name is required")
        return
    if "!" in name or "." in name:
        warnings.append("Action name should not include punctuation")
    if name == name.upper():
        warnings.append("Action name should not be all caps")
    if len(name) > MAX_NAME_LENGTH:
        warnings.append("Action name should be under 20 characters for best display")


def _check_availability(action: ActionBase, errors: list[str]) -> None:
    start = _check_timestamp(errors, action.valid_from, "validFrom", required=False)
    end = _check_timestamp(errors, action.valid_until, "validUntil", required=False)
    _check_order(errors, start, end, "validUntil must be after validFrom")


# ---------------------------------------------------------------------------
# Simple actions
# ---------------------------------------------------------------------------
def _validate_target_action(action: ViewAction | DownloadAction, errors: list[str], warnings: list[str]) -> None:
    target = action.target
    if isinstance(target, list) and not target:
        errors.append(f"{action.type} target array must contain at least one URL")
    elif not target:
        errors.append(f"{action.type} requires a target URL")
    elif not is_valid_url(_first_target(target)):
        errors.append(f"{action.type} target must be a valid URL")


def _validate_handler_action(
    action: ConfirmAction | SaveAction | UpdateAction | CancelAction,
    errors: list[str],
    warnings: list[str],
) -> None:
    url = action.handler.url if action.handler else None
    if not url:
        errors.append(f"{action.type} requires a handler URL")
        return
    if not url.startswith("https://"):
        errors.append(f"{action.type} handler URL must use HTTPS")
    if not is_valid_url(url):
        errors.append(f"{action.type} handler URL must be valid")


def _validate_rsvp(action: RsvpAction, errors: list[str], warnings: list[str]) -> None:
    event = action.event
    if event is None:
        errors.append("RsvpAction requires event details")
        return
    if not event.name:
        errors.append("Event name is required")
    if not event.start_date:
        errors.append("Event start date is required")
    elif not is_valid_iso_datetime(event.start_date):
        errors.append("Event start date must be in ISO 8601 format")
    if event.location is None or not event.location.name:
        errors.append("Event location name is required")
    if event.end_date:
        end = _parse_timestamp(event.end_date)
        if end is None:
            errors.append("Event end date must be in ISO 8601 format")
        elif event.start_date:
            _check_order(errors, _parse_timestamp(event.start_date), end, "Event end date must be after start date")
    if event.organizer is not None:
        _check_url(errors, event.organizer.url, "Event organizer URL")


def _validate_track(action: TrackAction, errors: list[str], warnings: list[str]) -> None:
    parcel = action.parcel
    if not action.target and not (parcel and parcel.tracking_url):
        errors.append("TrackAction requires either a target URL or parcel trackingUrl")
    if parcel is not None:
        if parcel.tracking_url and not is_valid_url(parcel.tracking_url):
            errors.append("Parcel tracking URL must be valid")
        _check_timestamp(errors, parcel.expected_arrival_until, "Parcel expected arrival", required=False)


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------
def _validate_flight(action: FlightReservation, errors: list[str], warnings: list[str]) -> None:
    flight = action.flight
    if flight is None:
        errors.append("FlightReservation requires flight details")
        return
    _require(errors, flight.reservation_number, "Flight reservation number is required")
    _check_status(errors, flight.reservation_status, "Flight reservation status")
    _require(errors, flight.passenger_name, "Flight passenger name is required")
    _require(errors, flight.flight_number, "Flight number is required")
    _require(errors, flight.airline, "Flight airline name is required")
    if _require(errors, flight.airline_code, "Flight airline code is required"):
        if not _iata_airline_re.fullmatch(flight.airline_code or ""):
            warnings.append("Airline code should be a 2-character IATA code")
    _require(errors, flight.departure_airport, "Flight departure airport is required")
    _require(errors, flight.arrival_airport, "Flight arrival airport is required")
    for code, label in (
        (flight.departure_airport_code, "departure"),
        (flight.arrival_airport_code, "arrival"),
    ):
        if _require(errors, code, f"Flight {label} airport code is required"):
            if not _iata_airport_re.fullmatch(code or ""):
                warnings.append(f"Flight {label} airport code should be a 3-letter IATA code")
    departure = _check_timestamp(errors, flight.departure_time, "Flight departure time")
    arrival = _check_timestamp(errors, flight.arrival_time, "Flight arrival time")
    _check_order(errors, departure, arrival, "Flight arrival time must be after departure time")
    boarding = _check_timestamp(errors, flight.boarding_time, "Flight boarding time", required=False)
    if boarding is not None and departure is not None and boarding > departure:
        errors.append("Flight boarding time must not be after departure time")
    if flight.frequent_flyer_number and not flight.frequent_flyer_program:
        warnings.append("Frequent flyer number is ignored without a program name")


def _validate_lodging(action: LodgingReservation, errors: list[str], warnings: list[str]) -> None:
    lodging = action.lodging
    if lodging is None:
        errors.append("LodgingReservation requires lodging details")
        return
    _require(errors, lodging.reservation_number, "Hotel reservation number is required")
    _check_status(errors, lodging.reservation_status, "Hotel reservation status")
    _require(errors, lodging.guest_name, "Hotel guest name is required")
    _require(errors, lodging.hotel_name, "Hotel name is required")
    _check_address(errors, lodging.hotel_address, "Hotel address")
    checkin = _check_timestamp(errors, lodging.checkin_date, "Hotel check-in date")
    checkout = _check_timestamp(errors, lodging.checkout_date, "Hotel check-out date")
    _check_order(errors, checkin, checkout, "Hotel check-out date must be after check-in date")
    if lodging.num_guests is not None and lodging.num_guests < 1:
        errors.append("Hotel number of guests must be at least 1")


def _validate_train(action: TrainReservation, errors: list[str], warnings: list[str]) -> None:
    train = action.train
    if train is None:
        errors.append("TrainReservation requires train details")
        return
    _require(errors, train.reservation_number, "Train reservation number is required")
    _check_status(errors, train.reservation_status, "Train reservation status")
    _require(errors, train.passenger_name, "Train passenger name is required")
    _require(errors, train.departure_station, "Train departure station is required")
    _require(errors, train.arrival_station, "Train arrival station is required")
    departure = _check_timestamp(errors, train.departure_time, "Train departure time")
    arrival = _check_timestamp(errors, train.arrival_time, "Train arrival time")
    _check_order(errors, departure, arrival, "Train arrival time must be after departure time")


def _validate_bus(action: BusReservation, errors: list[str], warnings: list[str]) -> None:
    bus = action.bus
    if bus is None:
        errors.append("BusReservation requires bus details")
        return
    _require(errors, bus.reservation_number, "Bus reservation number is required")
    _check_status(errors, bus.reservation_status, "Bus reservation status")
    _require(errors, bus.passenger_name, "Bus passenger name is required")
    _require(errors, bus.bus_company, "Bus company is required")
    _require(errors, bus.departure_stop, "Bus departure stop is required")
    _require(errors, bus.arrival_stop, "Bus arrival stop is required")
    departure = _check_timestamp(errors, bus.departure_time, "Bus departure time")
    arrival = _check_timestamp(errors, bus.arrival_time, "Bus arrival time")
    _check_order(errors, departure, arrival, "Bus arrival time must be after departure time")


def _validate_rental_car(action: RentalCarReservation, errors: list[str], warnings: list[str]) -> None:
    rental = action.rental_car
    if rental is None:
        errors.append("RentalCarReservation requires rentalCar details")
        return
    _require(errors, rental.reservation_number, "Rental car reservation number is required")
    _check_status(errors, rental.reservation_status, "Rental car reservation status")
    _require(errors, rental.renter_name, "Rental car renter name is required")
    _require(errors, rental.car_brand, "Rental car brand is required")
    _require(errors, rental.car_model, "Rental car model is required")
    _check_address(errors, rental.pickup_location, "Rental car pickup location")
    _check_address(errors, rental.dropoff_location, "Rental car dropoff location")
    pickup = _check_timestamp(errors, rental.pickup_time, "Rental car pickup time")
    dropoff = _check_timestamp(errors, rental.dropoff_time, "Rental car dropoff time")
    _check_order(errors, pickup, dropoff, "Rental car dropoff time must be after pickup time")


def _validate_restaurant(action: FoodEstablishmentReservation, errors: list[str], warnings: list[str]) -> None:
    restaurant = action.restaurant
    if restaurant is None:
        errors.append("FoodEstablishmentReservation requires restaurant details")
        return
    _require(errors, restaurant.reservation_number, "Restaurant reservation number is required")
    _check_status(errors, restaurant.reservation_status, "Restaurant reservation status")
    _require(errors, restaurant.guest_name, "Restaurant guest name is required")
    _require(errors, restaurant.restaurant_name, "Restaurant name is required")
    _check_address(errors, restaurant.restaurant_address, "Restaurant address")
    _check_timestamp(errors, restaurant.reservation_time, "Restaurant reservation time")
    if restaurant.party_size is None:
        errors.append("Restaurant party size is required")
    elif restaurant.party_size < 1:
        errors.append("Restaurant party size must be at least 1")


# ---------------------------------------------------------------------------
# Commerce
# ---------------------------------------------------------------------------
def _check_currency(errors: list[str], currency: str | None, label: str) -> None:
    if _require(errors, currency, f"{label} currency is required"):
        if not _currency_re.fullmatch(currency or ""):
            errors.append(f"{label} currency must be a 3-letter ISO 4217 code")


def _validate_order(action: OrderAction, errors: list[str], warnings: list[str]) -> None:
    order = action.order
    if order is None:
        errors.append("OrderAction requires order details")
        return
    _require(errors, order.order_number, "Order number is required")
    _check_timestamp(errors, order.order_date, "Order date")
    _check_status(errors, order.order_status, "Order status")
    _require(errors, order.merchant_name, "Order merchant name is required")
    _require(errors, order.customer_name, "Order customer name is required")
    _check_currency(errors, order.currency, "Order")
    _check_url(errors, order.view_order_url, "Order view URL")
    _check_url(errors, order.merchant_logo, "Order merchant logo")

    if not order.items:
        errors.append("Order must contain at least one item")
    for position, item in enumerate(order.items, start=1):
        _require(errors, item.name, f"Order item {position} name is required")
        _check_amount(errors, item.price, f"Order item {position} price")
        if item.quantity is None or item.quantity < 1:
            errors.append(f"Order item {position} quantity must be at least 1")
        _check_url(errors, item.image, f"Order item {position} image")

    _check_amount(errors, order.subtotal, "Order subtotal")
    _check_amount(errors, order.tax, "Order tax", required=False)
    _check_amount(errors, order.shipping, "Order shipping", required=False)
    _check_amount(errors, order.total, "Order total")

    if order.items and order.subtotal is not None and all(
        item.price is not None and item.quantity is not None for item in order.items
    ):
        items_sum = sum((item.price * item.quantity for item in order.items), Decimal(0))
        if items_sum != order.subtotal:
            warnings.append("Order subtotal does not match the sum of its items")
    if order.subtotal is not None and order.total is not None:
        expected = order.subtotal + (order.tax or 0) + (order.shipping or 0)
        if expected != order.total:
            warnings.append("Order total does not equal subtotal plus tax and shipping")


def _validate_invoice(action: Invoice, errors: list[str], warnings: list[str]) -> None:
    invoice = action.invoice
    if invoice is None:
        errors.append("Invoice requires invoice details")
        return
    _require(errors, invoice.invoice_number, "Invoice number is required")
    issued = _check_timestamp(errors, invoice.invoice_date, "Invoice date")
    due = _check_timestamp(errors, invoice.due_date, "Invoice due date")
    if issued is not None and due is not None and due < issued:
        errors.append("Invoice due date must not be before the invoice date")
    _check_status(errors, invoice.payment_status, "Invoice payment status")
    _require(errors, invoice.provider_name, "Invoice provider name is required")
    _require(errors, invoice.customer_name, "Invoice customer name is required")
    _require(errors, invoice.account_id, "Invoice account ID is required")
    _check_currency(errors, invoice.currency, "Invoice")
    _check_url(errors, invoice.payment_url, "Invoice payment URL")
    _check_url(errors, invoice.provider_logo, "Invoice provider logo")

    if not invoice.items:
        errors.append("Invoice must contain at least one item")
    for position, item in enumerate(invoice.items, start=1):
        _require(errors, item.description, f"Invoice item {position} description is required")
        if item.quantity is None or item.quantity < 1:
            errors.append(f"Invoice item {position} quantity must be at least 1")
        _check_amount(errors, item.unit_price, f"Invoice item {position} unit price")
        _check_amount(errors, item.total, f"Invoice item {position} total")
        if None not in (item.quantity, item.unit_price, item.total):
            if item.quantity * item.unit_price != item.total:
                warnings.append(f"Invoice item {position} total does not equal quantity times unit price")

    _check_amount(errors, invoice.subtotal, "Invoice subtotal")
    _check_amount(errors, invoice.tax, "Invoice tax", required=False)
    _check_amount(errors, invoice.total, "Invoice total")
    _check_amount(errors, invoice.minimum_payment_due, "Invoice minimum payment due", required=False)
    if invoice.subtotal is not None and invoice.total is not None:
        if invoice.subtotal + (invoice.tax or 0) != invoice.total:
            warnings.append("Invoice total does not equal subtotal plus tax")
    if invoice.minimum_payment_due is not None and invoice.total is not None:
        if invoice.minimum_payment_due > invoice.total:
            errors.append("Invoice minimum payment due must not exceed the total")


def _validate_promotion(action: Promotion, errors: list[str], warnings: list[str]) -> None:
    promotion = action.promotion
    if promotion is None:
        errors.append("Promotion requires promotion details")
        return
    _require(errors, promotion.description, "Promotion description is required")
    _check_url(errors, promotion.promotion_url, "Promotion URL")
    _check_url(errors, promotion.promotion_image, "Promotion image")
    starts = _check_timestamp(errors, promotion.availability_starts, "Promotion start", required=False)
    ends = _check_timestamp(errors, promotion.availability_ends, "Promotion end", required=False)
    _check_order(errors, starts, ends, "Promotion end must be after its start")
    if promotion.discount_percent is not None and not 0 < promotion.discount_percent <= 100:
        errors.append("Promotion discount percent must be between 0 and 100")
    _check_amount(errors, promotion.price, "Promotion price", required=False)
    if promotion.price is not None:
        _check_currency(errors, promotion.currency, "Promotion")


Checker = Callable[[Any, list[str], list[str]], None]

_CHECKERS: dict[str, Checker] = {
    "ViewAction": _validate_target_action,
    "ConfirmAction": _validate_handler_action,
    "SaveAction": _validate_handler_action,
    "RsvpAction": _validate_rsvp,
    "TrackAction": _validate_track,
    "UpdateAction": _validate_handler_action,
    "CancelAction": _validate_handler_action,
    "DownloadAction": _validate_target_action,
    "FlightReservation": _validate_flight,
    "LodgingReservation": _validate_lodging,
    "TrainReservation": _validate_train,
    "BusReservation": _validate_bus,
    "RentalCarReservation": _validate_rental_car,
    "FoodEstablishmentReservation": _validate_restaurant,
    "OrderAction": _validate_order,
    "Invoice": _validate_invoice,
    "Promotion": _validate_promotion,
}


def validate_action(action: ActionBase | Mapping[str, Any]) -> ValidationResult:
    """Validate one action configuration, typed or raw."""

    errors: list[str] = []
    warnings: list[str] = []

    if isinstance(action, ActionBase):
        _check_name(action.name, errors, warnings)
        typed: ActionBase | None = action
    elif isinstance(action, Mapping):
        action_type = action.get("type")
        if not action_type:
            errors.append("Action type is required")
        _check_name(action.get("name"), errors, warnings)
        typed = None
        if action_type:
            try:
                typed = parse_action_config(action)
            except InvalidActionConfigError as exc:
                errors.extend(exc.messages)
    else:
        return ValidationResult.from_messages(["Action configuration must be an object"], [])

    if typed is not None:
        _CHECKERS[typed.type](typed, errors, warnings)
        _check_availability(typed, errors)

    return ValidationResult.from_messages(errors, warnings)


__all__ = [
    "MAX_NAME_LENGTH",
    "is_valid_iso_datetime",
    "is_valid_url",
    "validate_action",
]
