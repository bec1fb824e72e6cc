"""Shared action payloads for the test-suite."""

from __future__ import annotations

import pytest


@pytest.fixture
def flight_settings() -> dict:
    return {
        "reservationNumber": "RXJ34P",
        "reservationStatus": "Confirmed",
        "passengerName": "Eva Green",
        "flightNumber": "110",
        "airline": "United",
        "airlineCode": "UA",
        "departureAirport": "San Francisco Airport",
        "departureAirportCode": "SFO",
        "departureTime": "2027-03-04T20:15:00-08:00",
        "arrivalAirport": "John F. Kennedy International Airport",
        "arrivalAirportCode": "JFK",
        "arrivalTime": "2027-03-05T06:30:00-05:00",
    }


@pytest.fixture
def order_settings() -> dict:
    return {
        "orderNumber": "123-4567",
        "orderDate": "2027-01-10T09:00:00Z",
        "orderStatus": "OrderShipped",
        "merchantName": "Widget Shop",
        "customerName": "Jane Doe",
        "items": [
            {"name": "Widget", "price": "12.50", "quantity": 2},
            {"name": "Cable", "price": "5", "quantity": 1},
        ],
        "subtotal": "30.00",
        "tax": "2.40",
        "shipping": "0",
        "total": "32.40",
        "currency": "USD",
        "viewOrderUrl": "https://shop.example.com/orders/123-4567",
    }
