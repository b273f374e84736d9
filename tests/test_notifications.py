"""Tests for e-mail rendering, links, attachments and translations."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone
from email.message import EmailMessage
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest

from airport_taxi.config import Settings
from airport_taxi.domain.ports import NotificationEvent
from airport_taxi.notifications.attachments import (
    build_calendar_invite,
    build_vcard,
    normalize_phone_e164,
    whatsapp_link,
)
from airport_taxi.notifications.details import BookingNotes, order_details_lines
from airport_taxi.notifications.email import EmailNotifier, LoggingNotifier, build_notifier
from airport_taxi.notifications.links import LinkBuilder
from airport_taxi.notifications.translations import TRANSLATIONS, translate


@pytest.fixture
def config() -> Settings:
    return Settings(
        mail_enabled=True,
        admin_panel_token="",
        frontend_base_url="https://taxi.example/",
        backend_base_url="https://taxi.example/api",
        order_email_from="booking@taxi.example",
        order_admin_email="dispatch@taxi.example",
        operator_locale="pl",
        business_name="Taxi Airport",
    )


@pytest.fixture
def outbox():
    return []


@pytest.fixture
def email_notifier(config, outbox) -> EmailNotifier:
    async def capture(message: EmailMessage) -> None:
        outbox.append(message)

    return EmailNotifier(config, transport=capture)


def body_of(message: EmailMessage) -> str:
    return message.get_body(preferencelist=("plain",)).get_content()


def attachment_names(message: EmailMessage) -> list[str]:
    return [part.get_filename() for part in message.iter_attachments()]


# ── Translations ──────────────────────────────────────────────────────


class TestTranslations:
    def test_exact_locale(self):
        assert translate("pl", "subject_order_received") == "Zamówienie przyjęte"

    def test_falls_back_to_english(self):
        assert "admin_subject_new_order" not in TRANSLATIONS["de"]
        assert translate("de", "admin_subject_new_order") == TRANSLATIONS["en"]["admin_subject_new_order"]

    def test_unknown_locale_and_key(self):
        assert translate("xx", "subject_reminder") == "24h reminder"
        assert translate("en", "no_such_key") == "no_such_key"

    def test_every_locale_has_customer_subjects(self):
        for locale, table in TRANSLATIONS.items():
            assert "subject_order_received" in table, locale


# ── Links ─────────────────────────────────────────────────────────────


class TestLinks:
    @pytest.mark.asyncio
    async def test_customer_link_carries_access_token(self, config, pending_order):
        url = LinkBuilder(config).customer_manage(pending_order)
        assert url.startswith("https://taxi.example/pl/?orderId=")
        assert f"token={pending_order.customer_access_token}" in url

    @pytest.mark.asyncio
    async def test_price_links_point_at_backend(self, config, pending_order):
        order = replace(pending_order, price_proposal_token="abc")
        url = LinkBuilder(config).price_accept(order)
        assert url == f"https://taxi.example/api/v1/orders/{order.id}/price/accept?token=abc"

    @pytest.mark.asyncio
    async def test_admin_link_prefers_master_token(self, config, pending_order):
        links = LinkBuilder(config.model_copy(update={"admin_panel_token": "master"}))
        assert "token=master" in links.admin_manage(pending_order)
        assert links.admin_list() == "https://taxi.example/pl/admin?token=master"

    @pytest.mark.asyncio
    async def test_admin_link_falls_back_to_confirmation_token(self, config, pending_order):
        links = LinkBuilder(config)
        assert f"token={pending_order.confirmation_token}" in links.admin_manage(pending_order)
        assert links.admin_list() is None


# ── Attachments ───────────────────────────────────────────────────────


class TestAttachments:
    @pytest.mark.parametrize(
        "phone,expected",
        [
            ("+48 600 100 200", "https://wa.me/48600100200"),
            ("600100200", "https://wa.me/48600100200"),
            ("0600100200", "https://wa.me/48600100200"),
            ("+44 7700 900123", "https://wa.me/447700900123"),
            ("", None),
        ],
    )
    def test_whatsapp_link(self, phone, expected):
        assert whatsapp_link(phone) == expected

    def test_e164(self):
        assert normalize_phone_e164("0049 151 234") == "+49151234"
        assert normalize_phone_e164("  ") is None

    @pytest.mark.asyncio
    async def test_vcard(self, pending_order):
        card = build_vcard(pending_order)
        assert "FN:Anna Kowalska" in card
        assert "N:Kowalska;Anna;;;" in card
        assert "TEL;TYPE=CELL:+48600100200" in card

    @pytest.mark.asyncio
    async def test_calendar_invite(self, pending_order):
        invite = build_calendar_invite(
            pending_order,
            ZoneInfo("Europe/Warsaw"),
            "Taxi Airport",
            now=datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc),
        )
        assert "DTSTART;TZID=Europe/Warsaw:20260301T140000" in invite
        assert "DTEND;TZID=Europe/Warsaw:20260301T150000" in invite
        assert "DTSTAMP:20260201T090000Z" in invite
        assert "TRIGGER:-P1D" in invite and "TRIGGER:-PT2H" in invite
        assert invite.count("BEGIN:VALARM") == 2


# ── Booking notes ─────────────────────────────────────────────────────


class TestBookingNotes:
    def test_invalid_json_is_empty(self):
        assert BookingNotes.parse("just a note") == BookingNotes()

    def test_one_bad_key_keeps_the_others(self):
        notes = BookingNotes.parse(json.dumps({"notes": 5, "passengers": 3, "signText": "KOWALSKA"}))
        assert notes.notes is None
        assert notes.passengers == 3
        assert notes.signText == "KOWALSKA"

    def test_json_that_is_not_an_object_is_empty(self):
        assert BookingNotes.parse("[1, 2]") == BookingNotes()

    def test_route_alias(self):
        notes = BookingNotes.parse(json.dumps({"route": {"from": "Airport", "to": "Sopot"}}))
        assert notes.route.from_ == "Airport"

    @pytest.mark.asyncio
    async def test_airport_details_include_flight_and_sign(self, pending_order):
        notes = {
            "passengers": 3,
            "pickupType": "airport",
            "signService": "sign",
            "signFee": "20",
            "signText": "KOWALSKA",
            "notes": "Two suitcases",
        }
        order = replace(
            pending_order,
            content=replace(pending_order.content, additional_notes=json.dumps(notes)),
        )
        text = "\n".join(order_details_lines(order, "en"))
        assert "LO3821" in text
        assert "KOWALSKA" in text
        assert "20 PLN" in text
        assert "Two suitcases" in text

    @pytest.mark.asyncio
    async def test_flight_hidden_for_address_pickup(self, pending_order):
        text = "\n".join(order_details_lines(pending_order, "en"))
        assert "LO3821" not in text


# ── EmailNotifier ─────────────────────────────────────────────────────


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_every_event_renders(self, email_notifier, outbox, pending_order):
        order = replace(pending_order, price_proposal_token="tok", pending_price="180")
        for event in NotificationEvent:
            await email_notifier.notify(event, order, {"fields": ["phone"]})
        assert len(outbox) == len(NotificationEvent)

    @pytest.mark.asyncio
    async def test_customer_mail_uses_order_locale(self, email_notifier, outbox, pending_order):
        await email_notifier.notify(NotificationEvent.ORDER_CREATED_CUSTOMER, pending_order)

        message = outbox[0]
        assert message["To"] == "anna@example.com"
        assert message["From"] == "booking@taxi.example"
        assert message["Subject"] == f"Taxi Airport - Zamówienie przyjęte #{pending_order.generated_id}"
        assert pending_order.customer_access_token in body_of(message)

    @pytest.mark.asyncio
    async def test_operator_mail_has_attachments(self, email_notifier, outbox, pending_order):
        await email_notifier.notify(NotificationEvent.ORDER_CREATED_OPERATOR, pending_order)

        message = outbox[0]
        assert message["To"] == "dispatch@taxi.example"
        assert attachment_names(message) == [
            f"kontakt-{pending_order.generated_id}.vcf",
            f"zlecenie-{pending_order.generated_id}.ics",
        ]
        body = body_of(message)
        assert "https://wa.me/48600100200" in body
        assert pending_order.confirmation_token in body

    @pytest.mark.asyncio
    async def test_price_mail_has_one_shot_links(self, email_notifier, outbox, pending_order):
        order = replace(pending_order, price_proposal_token="price-tok", pending_price="180")
        await email_notifier.notify(NotificationEvent.PRICE_PROPOSED_CUSTOMER, order, {"price": "180"})

        body = body_of(outbox[0])
        assert "180" in body
        assert f"/orders/{order.id}/price/accept?token=price-tok" in body
        assert f"/orders/{order.id}/price/reject?token=price-tok" in body

    @pytest.mark.asyncio
    async def test_rejection_without_reason_uses_localized_default(self, email_notifier, outbox, pending_order):
        await email_notifier.notify(NotificationEvent.ORDER_REJECTED_CUSTOMER, pending_order, {"reason": None})
        assert translate("pl", "default_rejection_reason") in body_of(outbox[0])

    @pytest.mark.asyncio
    async def test_transport_failure_is_swallowed(self, config, pending_order):
        transport = AsyncMock(side_effect=OSError("connection refused"))
        notifier = EmailNotifier(config, transport=transport)

        await notifier.notify(NotificationEvent.ORDER_CREATED_CUSTOMER, pending_order)
        transport.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_smtp_transport_uses_settings(self, config, pending_order):
        notifier = EmailNotifier(config)
        with patch("airport_taxi.notifications.email.aiosmtplib.send", new_callable=AsyncMock) as send:
            await notifier.notify(NotificationEvent.CUSTOMER_REMINDER, pending_order)

        send.assert_awaited_once()
        assert send.await_args.kwargs["hostname"] == config.smtp_host
        assert send.await_args.kwargs["port"] == config.smtp_port


class TestBuildNotifier:
    def test_disabled_mail_logs_only(self, config):
        assert isinstance(build_notifier(config.model_copy(update={"mail_enabled": False})), LoggingNotifier)

    def test_enabled_mail(self, config):
        assert isinstance(build_notifier(config), EmailNotifier)
