"""vCard / iCalendar attachments and contact links for operator e-mails."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from airport_taxi.domain.entities import Order
from airport_taxi.domain.reminders import pickup_instant

RIDE_DURATION = timedelta(minutes=60)
HOME_COUNTRY_CODE = "48"


def whatsapp_link(phone: str) -> Optional[str]:
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return None
    if digits.startswith(HOME_COUNTRY_CODE):
        return f"https://wa.me/{digits}"
    if len(digits) == 9:
        return f"https://wa.me/{HOME_COUNTRY_CODE}{digits}"
    if len(digits) == 10 and digits.startswith("0"):
        return f"https://wa.me/{HOME_COUNTRY_CODE}{digits[1:]}"
    return f"https://wa.me/{digits}"


def normalize_phone_e164(phone: str) -> Optional[str]:
    trimmed = (phone or "").strip()
    if not trimmed:
        return None
    if trimmed.startswith("+"):
        return trimmed
    digits = re.sub(r"\D", "", trimmed)
    if not digits:
        return None
    if digits.startswith("00"):
        return "+" + digits[2:]
    return "+" + digits


def build_vcard(order: Order) -> Optional[str]:
    phone = normalize_phone_e164(order.content.phone_number)
    if phone is None:
        return None

    full_name = order.content.full_name.strip()
    parts = full_name.split()
    last_name = parts.pop() if parts else ""
    first_name = " ".join(parts) if parts else full_name

    return "\n".join(
        [
            "BEGIN:VCARD",
            "VERSION:3.0",
            f"N:{last_name};{first_name};;;",
            f"FN:{full_name}",
            f"TEL;TYPE=CELL:{phone}",
            "END:VCARD",
        ]
    )


def build_calendar_invite(
    order: Order,
    tz: ZoneInfo,
    business_name: str,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """One-hour VEVENT at pickup time with alarms one day and two hours before."""
    start = pickup_instant(order, tz)
    if start is None:
        return None
    end = start + RIDE_DURATION
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    description = "\\n".join(
        [
            f"Klient: {order.content.full_name}",
            f"Telefon: {order.content.phone_number}",
            f"Adres odbioru: {order.content.pickup_address}",
        ]
    )
    alarm = [
        "ACTION:DISPLAY",
        "DESCRIPTION:Przypomnienie o zleceniu",
        "END:VALARM",
    ]
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{business_name}//PL",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{order.id}@airport-taxi",
        f"DTSTAMP:{stamp:%Y%m%dT%H%M%SZ}",
        f"DTSTART;TZID={tz.key}:{start:%Y%m%dT%H%M%S}",
        f"DTEND;TZID={tz.key}:{end:%Y%m%dT%H%M%S}",
        f"SUMMARY:{business_name} - Odbiór #{order.generated_id}",
        f"DESCRIPTION:{description}",
        f"LOCATION:{order.content.pickup_address}",
        "BEGIN:VALARM",
        "TRIGGER:-P1D",
        *alarm,
        "BEGIN:VALARM",
        "TRIGGER:-PT2H",
        *alarm,
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
    return "\r\n".join(lines)
