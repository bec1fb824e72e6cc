"""Display helpers describing each interactive action type."""
from __future__ import annotations

_LABELS: dict[str, str] = {
    "ViewAction": "Go To Action",
    "ConfirmAction": "Confirm Action",
    "SaveAction": "Save Action",
    "RsvpAction": "RSVP Action",
    "TrackAction": "Track Action",
    "UpdateAction": "Update Action",
    "CancelAction": "Cancel Action",
    "DownloadAction": "Download Action",
    "FlightReservation": "Flight Reservation",
    "LodgingReservation": "Hotel Reservation",
    "TrainReservation": "Train Reservation",
    "BusReservation": "Bus Reservation",
    "RentalCarReservation": "Rental Car Reservation",
    "FoodEstablishmentReservation": "Restaurant Reservation",
    "OrderAction": "Order Details",
    "Invoice": "Invoice",
    "Promotion": "Promotion",
}

_DESCRIPTIONS: dict[str, str] = {
    "ViewAction": "Opens a web page or deep links to an app. Can be clicked multiple times.",
    "ConfirmAction": "One-click button for approvals or confirmations. Can only be clicked once.",
    "SaveAction": "Save items like coupons or offers to user's account. Can only be clicked once.",
    "RsvpAction": "Allow users to RSVP to events with Yes/No/Maybe responses.",
    "TrackAction": "Provide package tracking functionality with delivery information.",
    "UpdateAction": "One-click button that updates an existing booking or subscription.",
    "CancelAction": "One-click button that cancels an existing booking or subscription.",
    "DownloadAction": "Links to a downloadable file such as a ticket or a receipt.",
    "FlightReservation": "Flight itinerary with check-in and boarding pass details.",
    "LodgingReservation": "Hotel stay with check-in and check-out dates.",
    "TrainReservation": "Train trip with stations, times and seat.",
    "BusReservation": "Bus trip with stops, times and seat.",
    "RentalCarReservation": "Car rental with pickup and dropoff details.",
    "FoodEstablishmentReservation": "Restaurant table booking.",
    "OrderAction": "Order summary with items, totals and order status.",
    "Invoice": "Bill with amount due, due date and payment status.",
    "Promotion": "Promotional offer with discount code and availability window.",
}

_REQUIRED_FIELDS: dict[str, list[str]] = {
    "ViewAction": ["name", "target"],
    "ConfirmAction": ["name", "handler.url"],
    "SaveAction": ["name", "handler.url"],
    "RsvpAction": ["name", "event.name", "event.startDate", "event.location"],
    "TrackAction": ["name", "target or parcel"],
    "UpdateAction": ["name", "handler.url"],
    "CancelAction": ["name", "handler.url"],
    "DownloadAction": ["name", "target"],
    "FlightReservation": [
        "name",
        "flight.reservationNumber",
        "flight.reservationStatus",
        "flight.passengerName",
        "flight.flightNumber",
        "flight.airline",
        "flight.airlineCode",
        "flight.departureAirport",
        "flight.departureAirportCode",
        "flight.departureTime",
        "flight.arrivalAirport",
        "flight.arrivalAirportCode",
        "flight.arrivalTime",
    ],
    "LodgingReservation": [
        "name",
        "lodging.reservationNumber",
        "lodging.reservationStatus",
        "lodging.guestName",
        "lodging.hotelName",
        "lodging.hotelAddress",
        "lodging.checkinDate",
        "lodging.checkoutDate",
    ],
    "TrainReservation": [
        "name",
        "train.reservationNumber",
        "train.reservationStatus",
        "train.passengerName",
        "train.departureStation",
        "train.departureTime",
        "train.arrivalStation",
        "train.arrivalTime",
    ],
    "BusReservation": [
        "name",
        "bus.reservationNumber",
        "bus.reservationStatus",
        "bus.passengerName",
        "bus.busCompany",
        "bus.departureStop",
        "bus.departureTime",
        "bus.arrivalStop",
        "bus.arrivalTime",
    ],
    "RentalCarReservation": [
        "name",
        "rentalCar.reservationNumber",
        "rentalCar.reservationStatus",
        "rentalCar.renterName",
        "rentalCar.pickupLocation",
        "rentalCar.pickupTime",
        "rentalCar.dropoffLocation",
        "rentalCar.dropoffTime",
        "rentalCar.carModel",
        "rentalCar.carBrand",
    ],
    "FoodEstablishmentReservation": [
        "name",
        "restaurant.reservationNumber",
        "restaurant.reservationStatus",
        "restaurant.guestName",
        "restaurant.restaurantName",
        "restaurant.restaurantAddress",
        "restaurant.reservationTime",
        "restaurant.partySize",
    ],
    "OrderAction": [
        "name",
        "order.orderNumber",
        "order.orderDate",
        "order.orderStatus",
        "order.merchantName",
        "order.customerName",
        "order.items",
        "order.subtotal",
        "order.total",
        "order.currency",
    ],
    "Invoice": [
        "name",
        "invoice.invoiceNumber",
        "invoice.invoiceDate",
        "invoice.dueDate",
        "invoice.paymentStatus",
        "invoice.providerName",
        "invoice.customerName",
        "invoice.accountId",
        "invoice.items",
        "invoice.subtotal",
        "invoice.total",
        "invoice.currency",
    ],
    "Promotion": ["name", "promotion.description"],
}


def action_type_label(action_type: str) -> str:
    return _LABELS.get(action_type, action_type)


def action_type_description(action_type: str) -> str:
    return _DESCRIPTIONS.get(action_type, "")


def required_fields(action_type: str) -> list[str]:
    """Return the dotted camelCase paths an action of ``action_type`` must fill in."""

    return list(_REQUIRED_FIELDS.get(action_type, []))


def action_catalog() -> list[dict[str, object]]:
    return [
        {
            "type": action_type,
            "label": label,
            "description": action_type_description(action_type),
            "required_fields": required_fields(action_type),
        }
        for action_type, label in _LABELS.items()
    ]


__all__ = ["action_catalog", "action_type_description", "action_type_label", "required_fields"]
