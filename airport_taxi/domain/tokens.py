"""
Capability tokens
=================

There are no user accounts.  Access to a booking after creation is granted
by presenting an unguessable token bound to one scope:

* **confirmation**   -- per order, operator confirm / reject / price / fulfil
* **customer access** -- per order, customer view / edit / cancel
* **price proposal** -- per order, one-shot accept / reject of a counter-offer;
  rotated on every new proposal
* **master**         -- configured out-of-band, operator access to every order

Scopes are never cross-checked: a customer token does not open operator
actions and vice versa.  All comparisons are constant-time.
"""

from __future__ import annotations

import enum
import hmac
import secrets
from typing import Optional

from airport_taxi.domain.entities import Order

TOKEN_BYTES = 16  # 128 bits -> 32 hex characters


class TokenScope(str, enum.Enum):
    CONFIRMATION = "confirmation"
    CUSTOMER_ACCESS = "customer_access"
    PRICE_PROPOSAL = "price_proposal"
    MASTER = "master"


class TokenAuthority:
    def __init__(self, master_token: Optional[str] = None):
        self.master_token = (master_token or "").strip()

    @staticmethod
    def issue() -> str:
        return secrets.token_hex(TOKEN_BYTES)

    @staticmethod
    def verify(presented: Optional[str], expected: Optional[str]) -> bool:
        """Constant-time comparison; missing values never verify."""
        if not presented or not expected:
            return False
        return hmac.compare_digest(
            presented.encode("utf-8"), expected.encode("utf-8")
        )

    def is_master(self, presented: Optional[str]) -> bool:
        return self.verify(presented, self.master_token)

    def scope_for(self, order: Order, presented: Optional[str]) -> Optional[TokenScope]:
        """Return the operator scope *presented* grants on *order*, if any.

        The master token is tried first so that it wins when an operator
        holds both.
        """
        if self.is_master(presented):
            return TokenScope.MASTER
        if self.verify(presented, order.confirmation_token):
            return TokenScope.CONFIRMATION
        return None

    def authorize_operator(self, order: Order, presented: Optional[str]) -> bool:
        return self.scope_for(order, presented) is not None

    def authorize_customer(self, order: Order, presented: Optional[str]) -> bool:
        return self.verify(presented, order.customer_access_token)

    def authorize_price_proposal(self, order: Order, presented: Optional[str]) -> bool:
        return self.verify(presented, order.price_proposal_token)
