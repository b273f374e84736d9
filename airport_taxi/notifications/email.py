"""
E-mail notifier
===============

Implements the ``Notifier`` port.  Each ``NotificationEvent`` maps to one
renderer that returns an ``EmailMessage``; customer mails use the order's
locale, operator mails use ``settings.operator_locale`` and carry a vCard
and a calendar invite for the pickup.

Delivery runs over SMTP with ``aiosmtplib`` so it never blocks the event
loop.  Any failure, in rendering or in transport, is logged and swallowed:
the order has already been committed and must stay booked even when the
mail server is down.
"""

from __future__ import annotations

import logging
from email.message import EmailMessage
from typing import Any, Awaitable, Callable, Mapping, Optional
from zoneinfo import ZoneInfo

import aiosmtplib

from airport_taxi.config import Settings, settings as default_settings
from airport_taxi.domain.entities import Order
from airport_taxi.domain.ports import NotificationEvent
from airport_taxi.notifications.attachments import build_calendar_invite, build_vcard, whatsapp_link
from airport_taxi.notifications.details import order_details_lines
from airport_taxi.notifications.links import LinkBuilder
from airport_taxi.notifications.translations import translate

logger = logging.getLogger(__name__)

Transport = Callable[[EmailMessage], Awaitable[Any]]


class EmailNotifier:
    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[Transport] = None,
    ):
        self.config = config or default_settings
        self.links = LinkBuilder(self.config)
        self.tz = ZoneInfo(self.config.timezone)
        self.transport = transport or self._smtp_send
        self._renderers: dict[NotificationEvent, Callable[..., EmailMessage]] = {
            NotificationEvent.ORDER_CREATED_CUSTOMER: self._order_created_customer,
            NotificationEvent.ORDER_CREATED_OPERATOR: self._order_created_operator,
            NotificationEvent.ORDER_UPDATED_OPERATOR: self._order_updated_operator,
            NotificationEvent.ORDER_CONFIRMED_CUSTOMER: self._order_confirmed_customer,
            NotificationEvent.ORDER_REJECTED_CUSTOMER: self._order_rejected_customer,
            NotificationEvent.ORDER_CANCELLED_CUSTOMER: self._order_cancelled_customer,
            NotificationEvent.ORDER_CANCELLED_OPERATOR: self._order_cancelled_operator,
            NotificationEvent.PRICE_PROPOSED_CUSTOMER: self._price_proposed_customer,
            NotificationEvent.COMPLETION_REMINDER_OPERATOR: self._completion_reminder_operator,
            NotificationEvent.CUSTOMER_REMINDER: self._customer_reminder,
            NotificationEvent.UPDATE_REQUESTED_CUSTOMER: self._update_requested_customer,
            NotificationEvent.CUSTOMER_UPDATED_REQUEST_OPERATOR: self._customer_updated_request_operator,
        }

    # ── Port ──────────────────────────────────────────────────────

    async def notify(
        self,
        event: NotificationEvent,
        order: Order,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        try:
            message = self.render(event, order, extra or {})
            await self.transport(message)
        except Exception:
            logger.exception(
                "Failed to send %s email for order %s", event.value, order.id
            )
            return
        logger.info("Sent %s email for order %s", event.value, order.id)

    def render(
        self, event: NotificationEvent, order: Order, extra: Mapping[str, Any]
    ) -> EmailMessage:
        return self._renderers[event](order, extra)

    async def _smtp_send(self, message: EmailMessage) -> None:
        await aiosmtplib.send(
            message,
            hostname=self.config.smtp_host,
            port=self.config.smtp_port,
            username=self.config.smtp_username or None,
            password=self.config.smtp_password or None,
            start_tls=self.config.smtp_starttls,
        )

    # ── Building blocks ───────────────────────────────────────────

    def _subject(self, label: str, order: Order) -> str:
        return f"{self.config.business_name} - {label} #{order.generated_id}"

    def _message(self, to: str, subject: str, lines: list[str]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.order_email_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content("\n".join(lines))
        return message

    def _customer(self, order: Order, subject_key: str, lines: list[str]) -> EmailMessage:
        locale = order.locale
        return self._message(
            order.content.email_address,
            self._subject(translate(locale, subject_key), order),
            [*lines, "", *order_details_lines(order, locale)],
        )

    def _operator(self, order: Order, subject_key: str, lines: list[str]) -> EmailMessage:
        locale = self.config.operator_locale
        contact = [translate(locale, "admin_line_contact")]
        whatsapp = whatsapp_link(order.content.phone_number)
        if whatsapp:
            contact.append(f"WhatsApp: {whatsapp}")
        contact.append(translate(locale, "admin_line_attachments"))

        message = self._message(
            self.config.order_admin_email,
            self._subject(translate(locale, subject_key), order),
            [*lines, "", *contact, "", *order_details_lines(order, locale)],
        )
        vcard = build_vcard(order)
        if vcard is not None:
            message.add_attachment(
                vcard.encode("utf-8"),
                maintype="text",
                subtype="vcard",
                filename=f"kontakt-{order.generated_id}.vcf",
            )
        invite = build_calendar_invite(order, self.tz, self.config.business_name)
        if invite is not None:
            message.add_attachment(
                invite.encode("utf-8"),
                maintype="text",
                subtype="calendar",
                filename=f"zlecenie-{order.generated_id}.ics",
            )
        return message

    @staticmethod
    def _t(order: Order, key: str) -> str:
        return translate(order.locale, key)

    def _field_list(self, fields: list[str], locale: str) -> str:
        return "\n".join(f"- {translate(locale, f'field_{name}')}" for name in fields)

    # ── Customer renderers ────────────────────────────────────────

    def _order_created_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._customer(
            order,
            "subject_order_received",
            [
                self._t(order, "line_thank_you"),
                "",
                self._t(order, "line_edit_cancel"),
                self.links.customer_manage(order),
            ],
        )

    def _order_confirmed_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._customer(
            order,
            "subject_order_confirmed",
            [
                self._t(order, "line_booking_confirmed"),
                "",
                self._t(order, "line_edit_cancel"),
                self.links.customer_manage(order),
            ],
        )

    def _order_rejected_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        reason = (
            extra.get("reason")
            or order.rejection_reason
            or self._t(order, "default_rejection_reason")
        )
        return self._customer(
            order,
            "subject_order_rejected",
            [self._t(order, "line_rejected_intro"), "", self._t(order, "line_reason"), reason],
        )

    def _order_cancelled_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._customer(
            order,
            "subject_order_cancelled",
            [
                self._t(order, "line_cancelled"),
                "",
                self._t(order, "line_view_cancel"),
                self.links.customer_manage(order, cancelled=1),
            ],
        )

    def _price_proposed_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        price = extra.get("price") or order.pending_price or ""
        return self._customer(
            order,
            "subject_price_proposed",
            [
                self._t(order, "line_price_proposed"),
                "",
                f"{self._t(order, 'line_proposed_price')} {price}",
                "",
                self._t(order, "line_accept_price"),
                self.links.price_accept(order),
                "",
                self._t(order, "line_reject_price"),
                self.links.price_reject(order),
            ],
        )

    def _customer_reminder(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._customer(
            order,
            "subject_reminder",
            [
                self._t(order, "line_reminder"),
                "",
                self._t(order, "line_edit_cancel"),
                self.links.customer_manage(order),
            ],
        )

    def _update_requested_customer(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        fields = list(extra.get("fields") or [])
        return self._customer(
            order,
            "subject_update_request",
            [
                self._t(order, "line_update_prompt"),
                "",
                self._t(order, "line_update_fields"),
                self._field_list(fields, order.locale),
                "",
                self._t(order, "line_open_booking"),
                self.links.customer_manage(order, update=",".join(fields)),
            ],
        )

    # ── Operator renderers ────────────────────────────────────────

    def _admin(self, key: str) -> str:
        return translate(self.config.operator_locale, key)

    def _order_created_operator(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        lines = [
            self._admin("admin_line_new_order"),
            "",
            self._admin("admin_line_manage"),
            self.links.admin_manage(order),
        ]
        list_url = self.links.admin_list()
        if list_url:
            lines += ["", self._admin("admin_line_all_orders"), list_url]
        return self._operator(order, "admin_subject_new_order", lines)

    def _order_updated_operator(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._operator(
            order,
            "admin_subject_order_updated",
            [
                self._admin("admin_line_order_updated"),
                "",
                self._admin("admin_line_reconfirm"),
                self.links.admin_manage(order),
            ],
        )

    def _completion_reminder_operator(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._operator(
            order,
            "admin_subject_completion_reminder",
            [
                self._admin("admin_line_pickup_passed"),
                self._admin("admin_line_mark_fulfilment"),
                "",
                self._admin("admin_line_open_order"),
                self.links.admin_manage(order),
            ],
        )

    def _customer_updated_request_operator(
        self, order: Order, extra: Mapping[str, Any]
    ) -> EmailMessage:
        fields = list(extra.get("fields") or [])
        if fields:
            field_lines = [
                self._admin("admin_line_updated_fields"),
                self._field_list(fields, self.config.operator_locale),
            ]
        else:
            field_lines = [self._admin("admin_line_updated_fields_none")]
        return self._operator(
            order,
            "admin_subject_customer_updated",
            [
                self._admin("admin_line_customer_updated"),
                "",
                *field_lines,
                "",
                self._admin("admin_line_review_booking"),
                self.links.admin_manage(order),
            ],
        )

    def _order_cancelled_operator(self, order: Order, extra: Mapping[str, Any]) -> EmailMessage:
        return self._operator(
            order, "admin_subject_order_cancelled", [self._admin("admin_line_order_cancelled")]
        )


class LoggingNotifier:
    """Used when mail is disabled: records what would have been sent."""

    async def notify(
        self,
        event: NotificationEvent,
        order: Order,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        logger.info(
            "Notification %s for order %s (#%s) not sent: mail disabled",
            event.value, order.id, order.generated_id,
        )


def build_notifier(config: Optional[Settings] = None):
    config = config or default_settings
    if config.mail_enabled:
        return EmailNotifier(config)
    return LoggingNotifier()
