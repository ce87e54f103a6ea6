"""
Request bodies accepted by the JSON API.

Every field is optional at this layer: the services decide what is missing
so callers get the same ``{"error", "code"}`` rejection as the HTML forms
instead of a bare 422; values of the wrong JSON type are mapped to
``invalid_field`` by the app.  Field aliases keep the camelCase names clients send.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from homeservice.services.booking_service import BookingCommand


class BookingPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service: Optional[str] = Field(default=None, description="Service identifier")
    customer_name: Optional[str] = Field(default=None, alias="customerName")
    date: Optional[str] = Field(default=None, description="YYYY-MM-DD or ISO 8601 date-time")
    contact_method: Optional[str] = Field(default=None, alias="contactMethod", description="email or phone")
    email: Optional[str] = None
    phone: Optional[str] = None
    time_slot: Optional[str] = Field(default=None, alias="timeSlot", description="morning, afternoon or evening")

    def to_command(self) -> BookingCommand:
        return BookingCommand(
            service_id=self.service,
            customer_name=self.customer_name,
            date=self.date,
            contact_method=self.contact_method,
            email=self.email,
            phone=self.phone,
            time_slot=self.time_slot,
        )


class ServicePayload(BaseModel):
    name: Optional[str] = None
    price: Optional[Union[float, str]] = None
    description: Optional[str] = None
