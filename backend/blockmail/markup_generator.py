"""Structured markup (schema.org JSON-LD) for interactive email actions.

Each routine maps one typed action to the object a mail client reads. Optional
inputs that are absent (missing or ``None``) never appear as keys in the
output; they are not emitted as ``null``.
"""
from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from .schemas.actions import (
    ActionBase,
    Address,
    BusReservation,
    CancelAction,
    ConfirmAction,
    DownloadAction,
    FlightReservation,
    FoodEstablishmentReservation,
    Invoice,
    InvoiceItem,
    LodgingReservation,
    OrderAction,
    OrderItem,
    Promotion,
    RentalCarReservation,
    RsvpAction,
    SaveAction,
    TrackAction,
    TrainReservation,
    UpdateAction,
    ViewAction,
    parse_action_config,
)

SCHEMA_CONTEXT = "http://schema.org"
RESERVATION_STATUS_PREFIX = "http://schema.org/Reservation"
ORDER_STATUS_PREFIX = "http://schema.org/"
PAYMENT_STATUS_PREFIX = "http://schema.org/Payment"
HTTP_METHOD_PREFIX = "http://schema.org/HttpRequestMethod/"

Markup = dict[str, Any]


class MissingPayloadError(RuntimeError):
    """Raised when an action lacks the structured payload its markup is built from."""

    def __init__(self, action_type: str, payload: str) -> None:
        super().__init__(f"{action_type} requires '{payload}' settings to generate markup")
        self.action_type = action_type
        self.payload = payload


class UnsupportedActionError(ValueError):
    """Raised for an action type without a markup routine."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _present(fields: Mapping[str, Any]) -> Markup:
    return {key: value for key, value in fields.items() if value is not None}


def _entity(type_name: str, **fields: Any) -> Markup:
    return {"@type": type_name, **_present(fields)}


def _reference(type_name: str, **fields: Any) -> Markup | None:
    present = _present(fields)
    return {"@type": type_name, **present} if present else None


def _status(prefix: str, value: str | None) -> str | None:
    return prefix + value if value is not None else None


def decimal_string(value: Decimal | int | float | None) -> str | None:
    """Render a monetary amount as its shortest plain decimal string."""

    if value is None:
        return None
    amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if amount == amount.to_integral_value():
        return format(amount.to_integral_value(), "f")
    return format(amount.normalize(), "f")


def _postal_address(address: Address | None, *, with_name: bool = True) -> Markup | None:
    if address is None:
        return None
    return _entity(
        "PostalAddress",
        name=address.name if with_name else None,
        streetAddress=address.street_address,
        addressLocality=address.address_locality,
        addressRegion=address.address_region,
        postalCode=address.postal_code,
        addressCountry=address.address_country,
    )


def _place(address: Address | None) -> Markup | None:
    if address is None:
        return None
    return _entity("Place", name=address.name, address=_postal_address(address, with_name=False))


def _person(name: str | None, **fields: Any) -> Markup | None:
    return _reference("Person", name=name, **fields)


def _organization(name: str | None, **fields: Any) -> Markup | None:
    return _reference("Organization", name=name, **fields)


def _price(amount: Decimal | None, currency: str | None, **fields: Any) -> Markup | None:
    if amount is None:
        return None
    return _entity("PriceSpecification", **fields, price=decimal_string(amount), priceCurrency=currency)


def _seat_ticket(seat_number: str | None, section: str | None = None) -> Markup | None:
    if not seat_number and not section:
        return None
    return _entity("Ticket", ticketedSeat=_entity("Seat", seatNumber=seat_number, seatSection=section))


def _require_payload(action: ActionBase, attr: str, payload: str) -> Any:
    value = getattr(action, attr)
    if value is None:
        raise MissingPayloadError(action.type, payload)
    return value


def _envelope(context: str, type_name: str) -> Markup:
    return {"@context": context, "@type": type_name}


def _reservation(context: str, type_name: str, number: str | None, status: str | None, guest: str | None) -> Markup:
    markup = _envelope(context, type_name)
    markup.update(
        _present(
            {
                "reservationNumber": number,
                "reservationStatus": _status(RESERVATION_STATUS_PREFIX, status),
            }
        )
    )
    markup.update(_present({"underName": _person(guest)}))
    return markup


# ---------------------------------------------------------------------------
# Simple actions
# ---------------------------------------------------------------------------
def _email_message(action: ActionBase, potential_action: Markup, context: str) -> Markup:
    markup = _envelope(context, "EmailMessage")
    markup["potentialAction"] = potential_action
    markup["description"] = action.description or ""
    return markup


def _http_handler(action: ConfirmAction | SaveAction | UpdateAction | CancelAction) -> Markup:
    handler = action.handler
    method = "GET" if handler is not None and handler.method == "GET" else "POST"
    return _entity(
        "HttpActionHandler",
        url=handler.url if handler is not None else None,
        method=HTTP_METHOD_PREFIX + method,
    )


def _generate_view(action: ViewAction, context: str) -> Markup:
    return _email_message(action, _entity("ViewAction", target=action.target, name=action.name), context)


def _generate_one_click(action: ConfirmAction | SaveAction, context: str) -> Markup:
    potential = _entity(action.type, name=action.name, handler=_http_handler(action))
    return _email_message(action, potential, context)


def _generate_update_or_cancel(action: UpdateAction | CancelAction, context: str) -> Markup:
    potential = _entity(
        action.type,
        name=action.name,
        handler=_http_handler(action),
        startTime=action.valid_from,
        endTime=action.valid_until,
    )
    return _email_message(action, potential, context)


def _generate_download(action: DownloadAction, context: str) -> Markup:
    potential = _entity(
        "DownloadAction",
        name=action.name,
        target=action.target,
        startTime=action.valid_from,
        endTime=action.valid_until,
    )
    return _email_message(action, potential, context)


def _event_reservation_number(action: RsvpAction) -> str:
    event = action.event.model_dump(mode="json", by_alias=True, exclude_none=True) if action.event else {}
    digest = hashlib.sha1(json.dumps(event, sort_keys=True).encode("utf-8")).hexdigest()
    return f"EVT-{digest[:12]}"


def _generate_rsvp(action: RsvpAction, context: str) -> Markup:
    event = action.event
    location = event.location if event is not None else None
    place = None
    if location is not None:
        address = _entity(
            "PostalAddress",
            streetAddress=location.street_address,
            addressLocality=location.address_locality,
            addressRegion=location.address_region,
            postalCode=location.postal_code,
            addressCountry=location.address_country,
        )
        place = _entity("Place", name=location.name, address=address if len(address) > 1 else None)

    organizer = None
    if event is not None and event.organizer:
        organizer = _organization(event.organizer.name, url=event.organizer.url)

    markup = _envelope(context, "EventReservation")
    markup["reservationNumber"] = _event_reservation_number(action)
    markup["reservationStatus"] = RESERVATION_STATUS_PREFIX + "Confirmed"
    markup["underName"] = _person("Recipient")
    markup["reservationFor"] = _entity(
        "Event",
        name=event.name if event is not None else None,
        startDate=event.start_date if event is not None else None,
        endDate=event.end_date if event is not None else None,
        location=place,
        organizer=organizer,
    )
    return markup


def _generate_track(action: TrackAction, context: str) -> Markup:
    parcel = action.parcel
    if parcel is None:
        return _email_message(action, _entity("TrackAction", target=action.target, name=action.name), context)

    markup = _envelope(context, "ParcelDelivery")
    markup.update(
        _present(
            {
                "deliveryAddress": _postal_address(parcel.delivery_address) if parcel.delivery_address else None,
                "expectedArrivalUntil": parcel.expected_arrival_until,
                "carrier": _organization(parcel.carrier) if parcel.carrier else None,
                "itemShipped": _entity("Product", name=parcel.item_shipped) if parcel.item_shipped else None,
                "partOfOrder": (
                    _entity(
                        "Order",
                        orderNumber=parcel.order_number,
                        merchant=_organization(parcel.merchant) if parcel.merchant else None,
                    )
                    if parcel.order_number
                    else None
                ),
                "trackingUrl": parcel.tracking_url,
                "trackingNumber": parcel.tracking_number,
            }
        )
    )
    return markup


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------
def _generate_flight(action: FlightReservation, context: str) -> Markup:
    flight = _require_payload(action, "flight", "flight")
    markup = _reservation(
        context, "FlightReservation", flight.reservation_number, flight.reservation_status, flight.passenger_name
    )
    markup["reservationFor"] = _entity(
        "Flight",
        flightNumber=flight.flight_number,
        airline=_reference("Airline", name=flight.airline, iataCode=flight.airline_code),
        departureAirport=_reference("Airport", name=flight.departure_airport, iataCode=flight.departure_airport_code),
        departureTime=flight.departure_time,
        departureGate=flight.departure_gate,
        arrivalAirport=_reference("Airport", name=flight.arrival_airport, iataCode=flight.arrival_airport_code),
        arrivalTime=flight.arrival_time,
    )
    markup.update(
        _present(
            {
                "airplaneSeat": flight.seat_number,
                "boardingTime": flight.boarding_time,
                "ticketToken": flight.ticket_token,
                "programMembership": (
                    _entity(
                        "ProgramMembership",
                        memberNumber=flight.frequent_flyer_number,
                        programName=flight.frequent_flyer_program,
                    )
                    if flight.frequent_flyer_number
                    else None
                ),
            }
        )
    )
    return markup


def _generate_lodging(action: LodgingReservation, context: str) -> Markup:
    lodging = _require_payload(action, "lodging", "lodging")
    markup = _reservation(
        context, "LodgingReservation", lodging.reservation_number, lodging.reservation_status, lodging.guest_name
    )
    markup["reservationFor"] = _entity(
        "LodgingBusiness",
        name=lodging.hotel_name,
        address=_postal_address(lodging.hotel_address, with_name=False),
        telephone=lodging.hotel_phone,
    )
    markup.update(
        _present(
            {
                "checkinDate": lodging.checkin_date,
                "checkoutDate": lodging.checkout_date,
                "numGuests": lodging.num_guests,
                "lodgingUnitDescription": lodging.room_type,
            }
        )
    )
    return markup


def _generate_train(action: TrainReservation, context: str) -> Markup:
    train = _require_payload(action, "train", "train")
    markup = _reservation(
        context, "TrainReservation", train.reservation_number, train.reservation_status, train.passenger_name
    )
    markup["reservationFor"] = _entity(
        "TrainTrip",
        trainNumber=train.train_number,
        departureStation=_reference("TrainStation", name=train.departure_station),
        departureTime=train.departure_time,
        arrivalStation=_reference("TrainStation", name=train.arrival_station),
        arrivalTime=train.arrival_time,
    )
    markup.update(_present({"reservedTicket": _seat_ticket(train.seat_number, train.coach)}))
    return markup


def _generate_bus(action: BusReservation, context: str) -> Markup:
    bus = _require_payload(action, "bus", "bus")
    markup = _reservation(context, "BusReservation", bus.reservation_number, bus.reservation_status, bus.passenger_name)
    markup["reservationFor"] = _entity(
        "BusTrip",
        busCompany=_organization(bus.bus_company),
        departureBusStop=_reference("BusStop", name=bus.departure_stop),
        departureTime=bus.departure_time,
        arrivalBusStop=_reference("BusStop", name=bus.arrival_stop),
        arrivalTime=bus.arrival_time,
    )
    markup.update(_present({"reservedTicket": _seat_ticket(bus.seat_number)}))
    return markup


def _generate_rental_car(action: RentalCarReservation, context: str) -> Markup:
    rental = _require_payload(action, "rental_car", "rentalCar")
    markup = _reservation(
        context, "RentalCarReservation", rental.reservation_number, rental.reservation_status, rental.renter_name
    )
    markup["reservationFor"] = _entity(
        "RentalCar",
        model=rental.car_model,
        brand=_entity("Brand", name=rental.car_brand) if rental.car_brand else None,
    )
    markup.update(
        _present(
            {
                "pickupLocation": _place(rental.pickup_location),
                "pickupTime": rental.pickup_time,
                "dropoffLocation": _place(rental.dropoff_location),
                "dropoffTime": rental.dropoff_time,
            }
        )
    )
    return markup


def _generate_restaurant(action: FoodEstablishmentReservation, context: str) -> Markup:
    restaurant = _require_payload(action, "restaurant", "restaurant")
    markup = _reservation(
        context,
        "FoodEstablishmentReservation",
        restaurant.reservation_number,
        restaurant.reservation_status,
        restaurant.guest_name,
    )
    markup["reservationFor"] = _entity(
        "FoodEstablishment",
        name=restaurant.restaurant_name,
        address=_postal_address(restaurant.restaurant_address, with_name=False),
    )
    markup.update(_present({"startTime": restaurant.reservation_time, "partySize": restaurant.party_size}))
    return markup


# ---------------------------------------------------------------------------
# Commerce
# ---------------------------------------------------------------------------
def _order_offer(item: OrderItem, currency: str | None) -> Markup:
    return _entity(
        "Offer",
        itemOffered=_entity("Product", name=item.name, sku=item.sku, image=item.image, description=item.description),
        price=decimal_string(item.price),
        priceCurrency=currency,
        eligibleQuantity=_entity("QuantitativeValue", value=item.quantity),
    )


def _invoice_offer(item: InvoiceItem, currency: str | None) -> Markup:
    return _entity(
        "Offer",
        itemOffered=_entity("Service", name=item.description),
        price=decimal_string(item.unit_price),
        priceCurrency=currency,
        eligibleQuantity=_entity("QuantitativeValue", value=item.quantity),
        priceSpecification=_price(item.total, currency),
    )


def _price_breakdown(currency: str | None, **amounts: Decimal | None) -> list[Markup]:
    return [
        spec
        for label, amount in amounts.items()
        if (spec := _price(amount, currency, name=label.capitalize())) is not None
    ]


def _generate_order(action: OrderAction, context: str) -> Markup:
    order = _require_payload(action, "order", "order")
    markup = _envelope(context, "Order")
    markup.update(
        _present(
            {
                "merchant": _organization(order.merchant_name, logo=order.merchant_logo),
                "orderNumber": order.order_number,
                "orderDate": order.order_date,
                "orderStatus": _status(ORDER_STATUS_PREFIX, order.order_status),
                "priceCurrency": order.currency,
                "price": decimal_string(order.total),
            }
        )
    )
    markup["priceSpecification"] = _price_breakdown(
        order.currency, subtotal=order.subtotal, tax=order.tax, shipping=order.shipping
    )
    markup["acceptedOffer"] = [_order_offer(item, order.currency) for item in order.items]
    markup.update(_present({"customer": _person(order.customer_name, email=order.customer_email)}))
    if order.shipping_address is not None:
        markup["orderDelivery"] = _entity("ParcelDelivery", deliveryAddress=_postal_address(order.shipping_address))
    if order.view_order_url:
        markup["url"] = order.view_order_url
        markup["potentialAction"] = _entity("ViewAction", name=action.name or "View Order", target=order.view_order_url)
    return markup


def _generate_invoice(action: Invoice, context: str) -> Markup:
    invoice = _require_payload(action, "invoice", "invoice")
    markup = _envelope(context, "Invoice")
    markup.update(_present({"confirmationNumber": invoice.invoice_number, "accountId": invoice.account_id}))
    markup.update(
        _present(
            {
                "provider": _organization(invoice.provider_name, logo=invoice.provider_logo),
                "customer": _person(invoice.customer_name),
                "paymentDueDate": invoice.due_date,
                "paymentStatus": _status(PAYMENT_STATUS_PREFIX, invoice.payment_status),
                "totalPaymentDue": _price(invoice.total, invoice.currency),
                "minimumPaymentDue": _price(invoice.minimum_payment_due, invoice.currency),
            }
        )
    )
    markup["referencesOrder"] = _entity(
        "Order",
        orderDate=invoice.invoice_date,
        acceptedOffer=[_invoice_offer(item, invoice.currency) for item in invoice.items],
        priceSpecification=_price_breakdown(invoice.currency, subtotal=invoice.subtotal, tax=invoice.tax),
    )
    if invoice.payment_url:
        markup["url"] = invoice.payment_url
        markup["potentialAction"] = _entity("PayAction", name=action.name or "Pay Now", target=invoice.payment_url)
    return markup


def _generate_promotion(action: Promotion, context: str) -> Markup:
    promotion = _require_payload(action, "promotion", "promotion")
    markup = _envelope(context, "DiscountOffer")
    markup.update(
        _present(
            {
                "name": promotion.headline,
                "description": promotion.description,
                "discountCode": promotion.discount_code,
                "availabilityStarts": promotion.availability_starts,
                "availabilityEnds": promotion.availability_ends,
                "discountPercent": decimal_string(promotion.discount_percent),
                "price": decimal_string(promotion.price),
                "priceCurrency": promotion.currency if promotion.price is not None else None,
                "image": promotion.promotion_image,
                "url": promotion.promotion_url,
            }
        )
    )
    return markup


Generator = Callable[[Any, str], Markup]

_GENERATORS: dict[str, Generator] = {
    "ViewAction": _generate_view,
    "ConfirmAction": _generate_one_click,
    "SaveAction": _generate_one_click,
    "RsvpAction": _generate_rsvp,
    "TrackAction": _generate_track,
    "UpdateAction": _generate_update_or_cancel,
    "CancelAction": _generate_update_or_cancel,
    "DownloadAction": _generate_download,
    "FlightReservation": _generate_flight,
    "LodgingReservation": _generate_lodging,
    "TrainReservation": _generate_train,
    "BusReservation": _generate_bus,
    "RentalCarReservation": _generate_rental_car,
    "FoodEstablishmentReservation": _generate_restaurant,
    "OrderAction": _generate_order,
    "Invoice": _generate_invoice,
    "Promotion": _generate_promotion,
}


def generate_markup(action: ActionBase | Mapping[str, Any], *, context: str = SCHEMA_CONTEXT) -> Markup:
    """Build the structured markup object for one action.

    Raises :class:`MissingPayloadError` when a reservation, commerce or
    promotion action has no payload; nothing partial is returned.
    """

    typed = parse_action_config(action)
    generator = _GENERATORS.get(typed.type)
    if generator is None:
        raise UnsupportedActionError(f"No markup routine for action type {typed.type}")
    return generator(typed, context)


def to_json_ld(markup: Markup) -> str:
    """Serialize markup compactly, as embedded in a JSON-LD script tag."""

    return json.dumps(markup, ensure_ascii=False, separators=(",", ":"))


def generate_json_ld(action: ActionBase | Mapping[str, Any], *, context: str = SCHEMA_CONTEXT) -> str:
    return to_json_ld(generate_markup(action, context=context))


def generate_many(actions: Iterable[ActionBase | Mapping[str, Any]], *, context: str = SCHEMA_CONTEXT) -> list[Markup]:
    return [generate_markup(action, context=context) for action in actions]


__all__ = [
    "HTTP_METHOD_PREFIX",
    "Markup",
    "MissingPayloadError",
    "ORDER_STATUS_PREFIX",
    "PAYMENT_STATUS_PREFIX",
    "RESERVATION_STATUS_PREFIX",
    "SCHEMA_CONTEXT",
    "UnsupportedActionError",
    "decimal_string",
    "generate_json_ld",
    "generate_many",
    "generate_markup",
    "to_json_ld",
]
