"""
Notification texts keyed by ``(locale, key)``.

Lookup falls back from the exact locale to English, per key, so a locale
only needs to list the strings it actually translates.
"""

from __future__ import annotations

FALLBACK_LOCALE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        # customer subjects
        "subject_order_received": "Order received",
        "subject_order_confirmed": "Order confirmed",
        "subject_update_request": "Please update your booking details",
        "subject_reminder": "24h reminder",
        "subject_price_proposed": "New price proposed",
        "subject_order_rejected": "Order rejected",
        "subject_order_cancelled": "Order cancelled",
        # customer body lines
        "line_thank_you": "Thank you for your booking.",
        "line_edit_cancel": "You can edit or cancel your order using the link below:",
        "line_booking_confirmed": "Your booking has been confirmed.",
        "line_update_prompt": "We need a quick update to your booking details.",
        "line_update_fields": "Please update the highlighted fields:",
        "line_open_booking": "Open your booking here:",
        "line_reminder": "This is a friendly reminder that your booking is scheduled within 24 hours.",
        "line_price_proposed": "We have proposed a new price for your booking.",
        "line_proposed_price": "Proposed price:",
        "line_accept_price": "Accept the new price:",
        "line_reject_price": "Reject and cancel the order:",
        "line_rejected_intro": "We are sorry, but your booking has been rejected.",
        "line_reason": "Reason:",
        "line_cancelled": "Your booking has been cancelled as requested.",
        "line_view_cancel": "View the cancellation summary:",
        "default_rejection_reason": "The order was rejected because we cannot fulfill it at the requested time.",
        # operator subjects and lines
        "admin_subject_new_order": "New order awaiting confirmation",
        "admin_subject_order_updated": "Order updated, needs reconfirmation",
        "admin_subject_completion_reminder": "Order to mark as completed",
        "admin_subject_customer_updated": "Customer updated the requested details",
        "admin_subject_order_cancelled": "Order cancelled by the customer",
        "admin_line_new_order": "A new order has been placed.",
        "admin_line_manage": "Manage (confirm/reject) here:",
        "admin_line_all_orders": "All orders panel:",
        "admin_line_order_updated": "The customer updated a previously confirmed order.",
        "admin_line_reconfirm": "Review and confirm again:",
        "admin_line_pickup_passed": "The pickup time of a confirmed order has passed.",
        "admin_line_mark_fulfilment": "Mark it as completed or failed.",
        "admin_line_open_order": "Open the order:",
        "admin_line_customer_updated": "The customer updated the requested booking details.",
        "admin_line_updated_fields": "Updated fields:",
        "admin_line_updated_fields_none": "Updated fields: (not given)",
        "admin_line_review_booking": "Review the booking here:",
        "admin_line_order_cancelled": "The customer cancelled the order.",
        "admin_line_contact": "Customer contact:",
        "admin_line_attachments": "vCard and calendar: attached",
        # update request field labels
        "field_phone": "Phone number",
        "field_email": "Email address",
        "field_flight": "Flight number",
        # order details
        "detail_order_number": "Order number",
        "detail_order_id": "Order ID",
        "detail_customer": "Customer",
        "detail_customer_email": "Customer email",
        "detail_phone": "Phone",
        "detail_pickup_address": "Pickup address",
        "detail_date": "Date",
        "detail_pickup_time": "Pickup time",
        "detail_flight_number": "Flight number",
        "detail_price": "Price",
        "detail_passengers": "Passengers",
        "detail_pending_price": "Pending price proposal",
        "detail_customer_message": "Customer message",
        "detail_route": "Route",
        "detail_sign_service": "Pickup service",
        "detail_sign_service_sign": "Meet with a name sign",
        "detail_sign_service_self": "Find the driver myself",
        "detail_sign_fee": "Sign fee",
        "detail_sign_text": "Sign text",
    },
    "pl": {
        "subject_order_received": "Zamówienie przyjęte",
        "subject_order_confirmed": "Zamówienie potwierdzone",
        "subject_update_request": "Prośba o aktualizację rezerwacji",
        "subject_reminder": "Przypomnienie 24h",
        "subject_price_proposed": "Nowa propozycja ceny",
        "subject_order_rejected": "Zamówienie odrzucone",
        "subject_order_cancelled": "Zamówienie anulowane",
        "line_thank_you": "Dziękujemy za rezerwację.",
        "line_edit_cancel": "Możesz edytować lub anulować zamówienie, korzystając z poniższego linku:",
        "line_booking_confirmed": "Twoja rezerwacja została potwierdzona.",
        "line_update_prompt": "Potrzebujemy krótkiej aktualizacji Twoich danych rezerwacji.",
        "line_update_fields": "Zaktualizuj podświetlone pola:",
        "line_open_booking": "Otwórz rezerwację tutaj:",
        "line_reminder": "To przypomnienie, że Twoja rezerwacja jest zaplanowana w ciągu 24 godzin.",
        "line_price_proposed": "Zaproponowaliśmy nową cenę za Twoją rezerwację.",
        "line_proposed_price": "Proponowana cena:",
        "line_accept_price": "Zaakceptuj nową cenę:",
        "line_reject_price": "Odrzuć i anuluj zamówienie:",
        "line_rejected_intro": "Przykro nam, ale Twoja rezerwacja została odrzucona.",
        "line_reason": "Powód:",
        "line_cancelled": "Twoja rezerwacja została anulowana zgodnie z prośbą.",
        "line_view_cancel": "Zobacz podsumowanie anulowania:",
        "default_rejection_reason": "Zamówienie zostało odrzucone, ponieważ nie możemy zrealizować go w wybranym terminie.",
        "admin_subject_new_order": "Nowe zamówienie do potwierdzenia",
        "admin_subject_order_updated": "Zamówienie zaktualizowane, wymaga ponownego potwierdzenia",
        "admin_subject_completion_reminder": "Zamówienie do oznaczenia jako zrealizowane",
        "admin_subject_customer_updated": "Klient zaktualizował wymagane dane",
        "admin_subject_order_cancelled": "Zamówienie anulowane przez klienta",
        "admin_line_new_order": "Dodano nowe zamówienie.",
        "admin_line_manage": "Zarządzaj (potwierdź/odrzuć) tutaj:",
        "admin_line_all_orders": "Panel wszystkich zamówień:",
        "admin_line_order_updated": "Klient zaktualizował wcześniej potwierdzone zamówienie.",
        "admin_line_reconfirm": "Sprawdź i potwierdź ponownie:",
        "admin_line_pickup_passed": "Minął czas odbioru dla potwierdzonego zamówienia.",
        "admin_line_mark_fulfilment": "Oznacz je jako zrealizowane lub niezrealizowane.",
        "admin_line_open_order": "Otwórz zamówienie:",
        "admin_line_customer_updated": "Klient zaktualizował wymagane dane rezerwacji.",
        "admin_line_updated_fields": "Zaktualizowane pola:",
        "admin_line_updated_fields_none": "Zaktualizowane pola: (nie podano)",
        "admin_line_review_booking": "Sprawdź rezerwację tutaj:",
        "admin_line_order_cancelled": "Klient anulował zamówienie.",
        "admin_line_contact": "Kontakt klienta:",
        "admin_line_attachments": "vCard i kalendarz: załącznik",
        "field_phone": "Numer telefonu",
        "field_email": "Adres e-mail",
        "field_flight": "Numer lotu",
        "detail_order_number": "Nr zamówienia",
        "detail_order_id": "ID zamówienia",
        "detail_customer": "Klient",
        "detail_customer_email": "E-mail klienta",
        "detail_phone": "Telefon",
        "detail_pickup_address": "Adres odbioru",
        "detail_date": "Data",
        "detail_pickup_time": "Godzina odbioru",
        "detail_flight_number": "Numer lotu",
        "detail_price": "Cena",
        "detail_passengers": "Pasażerowie",
        "detail_pending_price": "Oczekująca propozycja ceny",
        "detail_customer_message": "Wiadomość klienta",
        "detail_route": "Trasa",
        "detail_sign_service": "Opcja odbioru",
        "detail_sign_service_sign": "Odbiór z kartką",
        "detail_sign_service_self": "Samodzielne znalezienie kierowcy",
        "detail_sign_fee": "Dopłata za kartkę",
        "detail_sign_text": "Tekst na tabliczce",
    },
    "de": {
        "subject_order_received": "Bestellung erhalten",
        "subject_order_confirmed": "Bestellung bestätigt",
        "subject_update_request": "Bitte aktualisieren Sie Ihre Buchungsdaten",
        "subject_reminder": "24h Erinnerung",
        "subject_price_proposed": "Neuer Preis vorgeschlagen",
        "subject_order_rejected": "Bestellung abgelehnt",
        "subject_order_cancelled": "Bestellung storniert",
        "line_thank_you": "Vielen Dank für Ihre Buchung.",
        "line_edit_cancel": "Sie können Ihre Bestellung über den folgenden Link bearbeiten oder stornieren:",
        "line_booking_confirmed": "Ihre Buchung wurde bestätigt.",
        "line_update_prompt": "Wir benötigen eine kurze Aktualisierung Ihrer Buchungsdaten.",
        "line_update_fields": "Bitte aktualisieren Sie die markierten Felder:",
        "line_open_booking": "Öffnen Sie Ihre Buchung hier:",
        "line_reminder": "Dies ist eine freundliche Erinnerung, dass Ihre Buchung innerhalb von 24 Stunden stattfindet.",
        "line_price_proposed": "Wir haben einen neuen Preis für Ihre Buchung vorgeschlagen.",
        "line_proposed_price": "Vorgeschlagener Preis:",
        "line_accept_price": "Neuen Preis akzeptieren:",
        "line_reject_price": "Ablehnen und Bestellung stornieren:",
        "line_rejected_intro": "Es tut uns leid, aber Ihre Buchung wurde abgelehnt.",
        "line_reason": "Grund:",
        "line_cancelled": "Ihre Buchung wurde wie gewünscht storniert.",
        "line_view_cancel": "Stornierungsübersicht anzeigen:",
        "field_phone": "Telefonnummer",
        "field_email": "E-Mail-Adresse",
        "field_flight": "Flugnummer",
        "detail_order_number": "Bestellnummer",
        "detail_customer": "Kunde",
        "detail_pickup_address": "Abholadresse",
        "detail_date": "Datum",
        "detail_pickup_time": "Abholzeit",
        "detail_flight_number": "Flugnummer",
        "detail_price": "Preis",
        "detail_passengers": "Passagiere",
    },
    "fi": {
        "subject_order_received": "Tilaus vastaanotettu",
        "subject_order_confirmed": "Tilaus vahvistettu",
        "subject_update_request": "Päivitä varauksen tiedot",
        "subject_reminder": "24 h muistutus",
        "subject_price_proposed": "Uusi hintaehdotus",
        "subject_order_rejected": "Tilaus hylätty",
        "subject_order_cancelled": "Tilaus peruttu",
        "line_thank_you": "Kiitos varauksestasi.",
        "line_edit_cancel": "Voit muokata tai peruuttaa tilauksen alla olevasta linkistä:",
        "line_booking_confirmed": "Varauksesi on vahvistettu.",
        "line_update_prompt": "Tarvitsemme lyhyen päivityksen varauksesi tietoihin.",
        "line_update_fields": "Päivitä korostetut kentät:",
        "line_open_booking": "Avaa varauksesi tästä:",
        "line_reminder": "Tämä on muistutus siitä, että varauksesi on 24 tunnin sisällä.",
        "line_price_proposed": "Olemme ehdottaneet uutta hintaa varauksellesi.",
        "line_proposed_price": "Ehdotettu hinta:",
        "line_accept_price": "Hyväksy uusi hinta:",
        "line_reject_price": "Hylkää ja peruuta tilaus:",
        "line_rejected_intro": "Valitettavasti varauksesi on hylätty.",
        "line_reason": "Syy:",
        "line_cancelled": "Varauksesi on peruttu pyynnöstäsi.",
        "line_view_cancel": "Näytä peruutuksen yhteenveto:",
        "field_phone": "Puhelinnumero",
        "field_email": "Sähköpostiosoite",
        "field_flight": "Lennon numero",
    },
    "no": {
        "subject_order_received": "Bestilling mottatt",
        "subject_order_confirmed": "Bestilling bekreftet",
        "subject_update_request": "Vennligst oppdater bestillingsdetaljer",
        "subject_reminder": "24 t påminnelse",
        "subject_price_proposed": "Ny pris foreslått",
        "subject_order_rejected": "Bestilling avvist",
        "subject_order_cancelled": "Bestilling avbestilt",
        "line_thank_you": "Takk for bestillingen.",
        "line_edit_cancel": "Du kan redigere eller avbestille bestillingen via lenken under:",
        "line_booking_confirmed": "Bestillingen din er bekreftet.",
        "line_update_prompt": "Vi trenger en kort oppdatering av bestillingsdetaljene.",
        "line_update_fields": "Vennligst oppdater de markerte feltene:",
        "line_open_booking": "Åpne bestillingen her:",
        "line_reminder": "Dette er en vennlig påminnelse om at bestillingen din er innen 24 timer.",
        "line_price_proposed": "Vi har foreslått en ny pris for bestillingen din.",
        "line_proposed_price": "Foreslått pris:",
        "line_accept_price": "Godta den nye prisen:",
        "line_reject_price": "Avslå og avbestill bestillingen:",
        "line_rejected_intro": "Beklager, bestillingen din er avvist.",
        "line_reason": "Årsak:",
        "line_cancelled": "Bestillingen din er avbestilt som forespurt.",
        "line_view_cancel": "Se avbestillingsoversikten:",
        "field_phone": "Telefonnummer",
        "field_email": "E-postadresse",
        "field_flight": "Flynummer",
    },
    "sv": {
        "subject_order_received": "Beställning mottagen",
        "subject_order_confirmed": "Beställning bekräftad",
        "subject_update_request": "Vänligen uppdatera dina bokningsuppgifter",
        "subject_reminder": "24 h påminnelse",
        "subject_price_proposed": "Nytt pris föreslaget",
        "subject_order_rejected": "Beställning avvisad",
        "subject_order_cancelled": "Beställning avbokad",
        "line_thank_you": "Tack för din bokning.",
        "line_edit_cancel": "Du kan redigera eller avboka beställningen via länken nedan:",
        "line_booking_confirmed": "Din bokning har bekräftats.",
        "line_update_prompt": "Vi behöver en snabb uppdatering av dina bokningsuppgifter.",
        "line_update_fields": "Vänligen uppdatera de markerade fälten:",
        "line_open_booking": "Öppna din bokning här:",
        "line_reminder": "Detta är en vänlig påminnelse om att din bokning är inom 24 timmar.",
        "line_price_proposed": "Vi har föreslagit ett nytt pris för din bokning.",
        "line_proposed_price": "Föreslaget pris:",
        "line_accept_price": "Acceptera det nya priset:",
        "line_reject_price": "Avvisa och avboka beställningen:",
        "line_rejected_intro": "Tyvärr har din bokning avvisats.",
        "line_reason": "Orsak:",
        "line_cancelled": "Din bokning har avbokats enligt din begäran.",
        "line_view_cancel": "Visa avbokningssammanfattning:",
        "field_phone": "Telefonnummer",
        "field_email": "E-postadress",
        "field_flight": "Flygnummer",
    },
    "da": {
        "subject_order_received": "Bestilling modtaget",
        "subject_order_confirmed": "Bestilling bekræftet",
        "subject_update_request": "Opdater venligst dine bookingoplysninger",
        "subject_reminder": "24 t påmindelse",
        "subject_price_proposed": "Ny pris foreslået",
        "subject_order_rejected": "Bestilling afvist",
        "subject_order_cancelled": "Bestilling annulleret",
        "line_thank_you": "Tak for din booking.",
        "line_edit_cancel": "Du kan redigere eller annullere bestillingen via linket nedenfor:",
        "line_booking_confirmed": "Din booking er bekræftet.",
        "line_update_prompt": "Vi har brug for en kort opdatering af dine bookingoplysninger.",
        "line_update_fields": "Opdater venligst de markerede felter:",
        "line_open_booking": "Åbn din booking her:",
        "line_reminder": "Dette er en venlig påmindelse om, at din booking er inden for 24 timer.",
        "line_price_proposed": "Vi har foreslået en ny pris for din booking.",
        "line_proposed_price": "Foreslået pris:",
        "line_accept_price": "Accepter den nye pris:",
        "line_reject_price": "Afvis og annuller bestillingen:",
        "line_rejected_intro": "Beklager, din booking blev afvist.",
        "line_reason": "Årsag:",
        "line_cancelled": "Din booking er annulleret efter ønske.",
        "line_view_cancel": "Se annulleringsoversigten:",
        "field_phone": "Telefonnummer",
        "field_email": "E-mailadresse",
        "field_flight": "Flynummer",
    },
}


def translate(locale: str, key: str) -> str:
    """Exact locale, then English, then the key itself."""
    table = TRANSLATIONS.get((locale or "").lower(), {})
    if key in table:
        return table[key]
    return TRANSLATIONS[FALLBACK_LOCALE].get(key, key)


def default_rejection_reason(locale: str) -> str:
    return translate(locale, "default_rejection_reason")
