"""Frontend / backend URLs embedded in e-mails and API redirects."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlencode

from airport_taxi.config import Settings, settings as default_settings
from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import DEFAULT_LOCALE, SUPPORTED_LOCALES

ADMIN_LOCALE = "pl"  # the operator frontend is only served in Polish


class LinkBuilder:
    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    @property
    def frontend(self) -> str:
        return self.config.frontend_base_url.rstrip("/")

    @property
    def backend(self) -> str:
        base = self.config.backend_base_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return base

    @property
    def master_token(self) -> str:
        return self.config.admin_panel_token.strip()

    # ── Customer ──────────────────────────────────────────────────

    def customer_base(self, order: Order) -> str:
        locale = order.locale if order.locale in SUPPORTED_LOCALES else DEFAULT_LOCALE
        return f"{self.frontend}/{locale}"

    def customer_manage(self, order: Order, **params: Any) -> str:
        query: dict[str, Any] = {"orderId": order.id, **params}
        if order.customer_access_token:
            query["token"] = order.customer_access_token
        return f"{self.customer_base(order)}/?{urlencode(query)}"

    def price_accept(self, order: Order) -> str:
        return self._price_link(order, "accept")

    def price_reject(self, order: Order) -> str:
        return self._price_link(order, "reject")

    def _price_link(self, order: Order, answer: str) -> str:
        query = urlencode({"token": order.price_proposal_token or ""})
        return f"{self.backend}/api/v1/orders/{order.id}/price/{answer}?{query}"

    # ── Operator ──────────────────────────────────────────────────

    @property
    def admin_base(self) -> str:
        return f"{self.frontend}/{ADMIN_LOCALE}"

    def admin_manage(self, order: Order, token: Optional[str] = None, **params: Any) -> str:
        """Operator page for one order; prefers the master token when set."""
        token = token or self.master_token or order.confirmation_token
        query: dict[str, Any] = {"token": token, **params} if token else dict(params)
        url = f"{self.admin_base}/admin/orders/{order.id}"
        return f"{url}?{urlencode(query)}" if query else url

    def admin_list(self) -> Optional[str]:
        if not self.master_token:
            return None
        return f"{self.admin_base}/admin?{urlencode({'token': self.master_token})}"
