"""Schemas for interactive email actions and their structured payloads."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

ReservationStatus = Literal["Confirmed", "Pending", "Cancelled", "CheckedIn"]
OrderStatus = Literal[
    "OrderProcessing",
    "OrderShipped",
    "OrderDelivered",
    "OrderCancelled",
    "OrderReturned",
]
PaymentStatus = Literal["Paid", "Unpaid", "PartiallyPaid", "Overdue"]
HttpMethod = Literal["GET", "POST"]

ActionType = Literal[
    "ViewAction",
    "ConfirmAction",
    "SaveAction",
    "RsvpAction",
    "TrackAction",
    "UpdateAction",
    "CancelAction",
    "DownloadAction",
    "FlightReservation",
    "LodgingReservation",
    "TrainReservation",
    "BusReservation",
    "RentalCarReservation",
    "FoodEstablishmentReservation",
    "OrderAction",
    "Invoice",
    "Promotion",
]


class InvalidActionConfigError(ValueError):
    """Raised when a raw mapping cannot be interpreted as an action configuration."""

    def __init__(self, message: str, messages: list[str] | None = None) -> None:
        super().__init__(message)
        self.messages = messages or [message]


class ActionModel(BaseModel):
    """Base for every action schema: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Shared entities
# ---------------------------------------------------------------------------
class Address(ActionModel):
    name: str | None = Field(default=None, description="Optional addressee or place name")
    street_address: str | None = None
    address_locality: str | None = None
    address_region: str | None = None
    postal_code: str | None = None
    address_country: str | None = None


class Handler(ActionModel):
    url: str | None = Field(default=None, description="Endpoint called when the action is clicked")
    method: HttpMethod | None = Field(default=None, description="HTTP method, POST when omitted")


class EventLocation(ActionModel):
    name: str | None = None
    street_address: str | None = None
    address_locality: str | None = None
    address_region: str | None = None
    postal_code: str | None = None
    address_country: str | None = None


class EventOrganizer(ActionModel):
    name: str | None = None
    url: str | None = None


class Event(ActionModel):
    name: str | None = None
    start_date: str | None = Field(default=None, description="ISO 8601 start timestamp")
    end_date: str | None = Field(default=None, description="ISO 8601 end timestamp")
    location: EventLocation | None = None
    organizer: EventOrganizer | None = None


class Parcel(ActionModel):
    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    item_shipped: str | None = None
    delivery_address: Address | None = None
    expected_arrival_until: str | None = None
    order_number: str | None = None
    merchant: str | None = None


# ---------------------------------------------------------------------------
# Reservation payloads
# ---------------------------------------------------------------------------
class ReservationPayload(ActionModel):
    reservation_number: str | None = None
    reservation_status: ReservationStatus | None = None


class FlightReservationSettings(ReservationPayload):
    passenger_name: str | None = None
    flight_number: str | None = None
    airline: str | None = None
    airline_code: str | None = None
    departure_airport: str | None = None
    departure_airport_code: str | None = None
    departure_time: str | None = None
    arrival_airport: str | None = None
    arrival_airport_code: str | None = None
    arrival_time: str | None = None
    departure_gate: str | None = None
    boarding_time: str | None = None
    seat_number: str | None = None
    ticket_token: str | None = None
    frequent_flyer_number: str | None = None
    frequent_flyer_program: str | None = None


class LodgingReservationSettings(ReservationPayload):
    guest_name: str | None = None
    hotel_name: str | None = None
    hotel_address: Address | None = None
    hotel_phone: str | None = None
    checkin_date: str | None = None
    checkout_date: str | None = None
    num_guests: int | None = None
    room_type: str | None = None


class TrainReservationSettings(ReservationPayload):
    passenger_name: str | None = None
    train_number: str | None = None
    departure_station: str | None = None
    departure_time: str | None = None
    arrival_station: str | None = None
    arrival_time: str | None = None
    seat_number: str | None = None
    coach: str | None = None


class BusReservationSettings(ReservationPayload):
    passenger_name: str | None = None
    bus_company: str | None = None
    departure_stop: str | None = None
    departure_time: str | None = None
    arrival_stop: str | None = None
    arrival_time: str | None = None
    seat_number: str | None = None


class RentalCarReservationSettings(ReservationPayload):
    renter_name: str | None = None
    pickup_location: Address | None = None
    pickup_time: str | None = None
    dropoff_location: Address | None = None
    dropoff_time: str | None = None
    car_model: str | None = None
    car_brand: str | None = None


class FoodEstablishmentReservationSettings(ReservationPayload):
    guest_name: str | None = None
    restaurant_name: str | None = None
    restaurant_address: Address | None = None
    reservation_time: str | None = None
    party_size: int | None = None


# ---------------------------------------------------------------------------
# Commerce payloads
# ---------------------------------------------------------------------------
class OrderItem(ActionModel):
    name: str | None = None
    price: Decimal | None = None
    quantity: int | None = None
    sku: str | None = None
    image: str | None = None
    description: str | None = None


class OrderSettings(ActionModel):
    order_number: str | None = None
    order_date: str | None = None
    order_status: OrderStatus | None = None
    merchant_name: str | None = None
    merchant_logo: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    items: list[OrderItem] = Field(default_factory=list)
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    shipping: Decimal | None = None
    total: Decimal | None = None
    currency: str | None = None
    shipping_address: Address | None = None
    view_order_url: str | None = None


class InvoiceItem(ActionModel):
    description: str | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    total: Decimal | None = None


class InvoiceSettings(ActionModel):
    invoice_number: str | None = None
    invoice_date: str | None = None
    due_date: str | None = None
    payment_status: PaymentStatus | None = None
    provider_name: str | None = None
    provider_logo: str | None = None
    customer_name: str | None = None
    account_id: str | None = None
    items: list[InvoiceItem] = Field(default_factory=list)
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    total: Decimal | None = None
    minimum_payment_due: Decimal | None = None
    currency: str | None = None
    payment_url: str | None = None


class PromotionSettings(ActionModel):
    description: str | None = None
    discount_code: str | None = None
    availability_starts: str | None = None
    availability_ends: str | None = None
    discount_percent: Decimal | None = None
    promotion_image: str | None = None
    promotion_url: str | None = None
    headline: str | None = None
    price: Decimal | None = None
    currency: str | None = None


# ---------------------------------------------------------------------------
# Action variants
# ---------------------------------------------------------------------------
class ActionBase(ActionModel):
    name: str | None = Field(default=None, description="Button label shown by the mail client")
    description: str | None = None
    valid_from: str | None = Field(default=None, description="ISO 8601 start of availability")
    valid_until: str | None = Field(default=None, description="ISO 8601 end of availability")


class ViewAction(ActionBase):
    type: Literal["ViewAction"] = "ViewAction"
    target: str | list[str] | None = None


class ConfirmAction(ActionBase):
    type: Literal["ConfirmAction"] = "ConfirmAction"
    handler: Handler | None = None


class SaveAction(ActionBase):
    type: Literal["SaveAction"] = "SaveAction"
    handler: Handler | None = None


class RsvpAction(ActionBase):
    type: Literal["RsvpAction"] = "RsvpAction"
    event: Event | None = None


class TrackAction(ActionBase):
    type: Literal["TrackAction"] = "TrackAction"
    target: str | list[str] | None = None
    parcel: Parcel | None = None


class UpdateAction(ActionBase):
    type: Literal["UpdateAction"] = "UpdateAction"
    handler: Handler | None = None


class CancelAction(ActionBase):
    type: Literal["CancelAction"] = "CancelAction"
    handler: Handler | None = None


class DownloadAction(ActionBase):
    type: Literal["DownloadAction"] = "DownloadAction"
    target: str | list[str] | None = None


class FlightReservation(ActionBase):
    type: Literal["FlightReservation"] = "FlightReservation"
    flight: FlightReservationSettings | None = None


class LodgingReservation(ActionBase):
    type: Literal["LodgingReservation"] = "LodgingReservation"
    lodging: LodgingReservationSettings | None = None


class TrainReservation(ActionBase):
    type: Literal["TrainReservation"] = "TrainReservation"
    train: TrainReservationSettings | None = None


class BusReservation(ActionBase):
    type: Literal["BusReservation"] = "BusReservation"
    bus: BusReservationSettings | None = None


class RentalCarReservation(ActionBase):
    type: Literal["RentalCarReservation"] = "RentalCarReservation"
    rental_car: RentalCarReservationSettings | None = None


class FoodEstablishmentReservation(ActionBase):
    type: Literal["FoodEstablishmentReservation"] = "FoodEstablishmentReservation"
    restaurant: FoodEstablishmentReservationSettings | None = None


class OrderAction(ActionBase):
    type: Literal["OrderAction"] = "OrderAction"
    order: OrderSettings | None = None


class Invoice(ActionBase):
    type: Literal["Invoice"] = "Invoice"
    invoice: InvoiceSettings | None = None


class Promotion(ActionBase):
    type: Literal["Promotion"] = "Promotion"
    promotion: PromotionSettings | None = None


ActionConfig = Annotated[
    Union[
        ViewAction,
        ConfirmAction,
        SaveAction,
        RsvpAction,
        TrackAction,
        UpdateAction,
        CancelAction,
        DownloadAction,
        FlightReservation,
        LodgingReservation,
        TrainReservation,
        BusReservation,
        RentalCarReservation,
        FoodEstablishmentReservation,
        OrderAction,
        Invoice,
        Promotion,
    ],
    Field(discriminator="type"),
]

ACTION_MODELS: dict[str, type[ActionBase]] = {
    model.model_fields["type"].default: model
    for model in (
        ViewAction,
        ConfirmAction,
        SaveAction,
        RsvpAction,
        TrackAction,
        UpdateAction,
        CancelAction,
        DownloadAction,
        FlightReservation,
        LodgingReservation,
        TrainReservation,
        BusReservation,
        RentalCarReservation,
        FoodEstablishmentReservation,
        OrderAction,
        Invoice,
        Promotion,
    )
}

_action_adapter: TypeAdapter[ActionBase] = TypeAdapter(ActionConfig)


def format_validation_error(exc: ValidationError, *, tag: str | None = None) -> list[str]:
    """Flatten a pydantic error into ``"path: message"`` strings."""

    messages: list[str] = []
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        # union errors are prefixed with the matched tag
        if tag is not None and loc[:1] == (tag,):
            loc = loc[1:]
        path = ".".join(str(part) for part in loc)
        message = error.get("msg", "invalid value")
        messages.append(f"{path}: {message}" if path else message)
    return messages


def parse_action_config(data: Mapping[str, Any] | ActionBase) -> ActionBase:
    """Coerce a raw mapping into its typed action variant."""

    if isinstance(data, ActionBase):
        return data
    if not isinstance(data, Mapping):
        raise InvalidActionConfigError("Action configuration must be an object")
    action_type = data.get("type")
    if not action_type:
        raise InvalidActionConfigError("Action type is required")
    if not isinstance(action_type, str):
        raise InvalidActionConfigError("Action type must be a string")
    if action_type not in ACTION_MODELS:
        raise InvalidActionConfigError(f"Unsupported action type: {action_type}")
    try:
        return _action_adapter.validate_python(dict(data))
    except ValidationError as exc:
        messages = format_validation_error(exc, tag=action_type)
        raise InvalidActionConfigError("; ".join(messages), messages) from exc


class ValidationResult(BaseModel):
    """Verdict for one action configuration; warnings never affect validity."""

    valid: bool = Field(..., description="True when there are no errors")
    errors: list[str] = Field(default_factory=list, description="Blocking, user-correctable problems")
    warnings: list[str] = Field(default_factory=list, description="Advisory style guidance")

    @classmethod
    def from_messages(cls, errors: list[str], warnings: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors), warnings=list(warnings))


class MarkupResponse(BaseModel):
    markup: dict[str, Any] = Field(..., description="Structured markup object")
    json_ld: str = Field(..., description="Compact serialization for a JSON-LD script tag")


class ActionCatalogEntry(BaseModel):
    type: str
    label: str
    description: str = ""
    required_fields: list[str] = Field(default_factory=list)


__all__ = [
    "ACTION_MODELS",
    "ActionCatalogEntry",
    "ActionBase",
    "ActionConfig",
    "ActionType",
    "Address",
    "BusReservation",
    "BusReservationSettings",
    "CancelAction",
    "ConfirmAction",
    "DownloadAction",
    "Event",
    "EventLocation",
    "EventOrganizer",
    "FlightReservation",
    "FlightReservationSettings",
    "FoodEstablishmentReservation",
    "FoodEstablishmentReservationSettings",
    "Handler",
    "InvalidActionConfigError",
    "Invoice",
    "InvoiceItem",
    "InvoiceSettings",
    "LodgingReservation",
    "LodgingReservationSettings",
    "MarkupResponse",
    "OrderAction",
    "OrderItem",
    "OrderSettings",
    "OrderStatus",
    "Parcel",
    "PaymentStatus",
    "Promotion",
    "PromotionSettings",
    "RentalCarReservation",
    "RentalCarReservationSettings",
    "ReservationStatus",
    "RsvpAction",
    "SaveAction",
    "TrackAction",
    "TrainReservation",
    "TrainReservationSettings",
    "UpdateAction",
    "ValidationResult",
    "ViewAction",
    "format_validation_error",
    "parse_action_config",
]
