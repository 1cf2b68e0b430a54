"""
concierge/prompts.py

Dialogue templates and helpers.

- TEMPLATES: response text per language (en, es, hi); any missing key falls back to English
- FIELD_LABELS: how slot names are spoken back to the guest
- render / render_issue / describe_slots: fill a template for the session's language
- CLASSIFIER_PROMPT: system prompt for the optional remote-LLM fallback classifier
"""

from __future__ import annotations

from datetime import date

from concierge.dates import format_date
from concierge.extract import PAYMENT_METHODS, ROOM_TYPES
from concierge.validate import ISSUE_MESSAGES, ValidationIssue


TEMPLATES: dict[str, dict[str, str]] = {
    "en": {
        "language_prompt": "Welcome to Lagunacreek! Which language would you like to use? English, Español or हिंदी?",
        "welcome": "Great, we'll continue in English. How can I help you today? You can make a reservation, "
                   "check availability, check in or check out.",
        "service_prompt": "How can I help you today? You can make a reservation, check availability, check in or check out.",
        "help": "I can book a room for you step by step: dates, guests, room, your details and payment. "
                "Say 'what's missing' at any time to see where we are, or 'start over' to begin again.",
        "service_request": "I'll pass your {service} request to the front desk. Anything else I can help with?",
        "dates_prompt": "When would you like to stay? Please tell me your check-in and check-out dates.",
        "guests_prompt": "How many adults and children will be staying?",
        "room_prompt": "Which room would you like? We have: {rooms}.",
        "guest_info_prompt": "Please tell me your full name, phone number and email address.",
        "payment_prompt": "How would you like to pay? Options: {methods}.",
        "confirmation_prompt": "Here is your booking: {summary}. Shall I confirm it?",
        "confirmed": "Your booking is confirmed! Confirmation number: {number}. Total: ${total} for {nights} night(s).",
        "complete": "Your booking {number} is complete. Say 'start over' to make another reservation.",
        "reset": "No problem, let's start over. Which language would you like to use?",
        "no_match": "Sorry, I didn't catch that.",
        "still_need": "I still need: {missing}.",
        "missing_report": "I have captured: {captured}. I still need: {missing}.",
        "nothing_captured": "I don't have any details yet. I still need: {missing}.",
        "nothing_missing": "I have captured: {captured}. Nothing else is needed for this step.",
        "noted": "Got it: {captured}.",
        "none": "nothing yet",
    },
    "es": {
        "language_prompt": "¡Bienvenido a Lagunacreek! ¿Qué idioma prefiere? English, Español o हिंदी?",
        "welcome": "Perfecto, continuamos en español. ¿En qué puedo ayudarle? Puede hacer una reserva, "
                   "consultar disponibilidad, hacer check-in o check-out.",
        "service_prompt": "¿En qué puedo ayudarle? Puede hacer una reserva, consultar disponibilidad, hacer check-in o check-out.",
        "help": "Puedo reservar una habitación paso a paso: fechas, huéspedes, habitación, sus datos y el pago. "
                "Diga 'qué falta' en cualquier momento o 'empezar de nuevo' para reiniciar.",
        "service_request": "Pasaré su solicitud de {service} a recepción. ¿Algo más?",
        "dates_prompt": "¿Cuándo desea hospedarse? Indique sus fechas de llegada y salida.",
        "guests_prompt": "¿Cuántos adultos y niños se hospedarán?",
        "room_prompt": "¿Qué habitación desea? Tenemos: {rooms}.",
        "guest_info_prompt": "Por favor, dígame su nombre completo, teléfono y correo electrónico.",
        "payment_prompt": "¿Cómo desea pagar? Opciones: {methods}.",
        "confirmation_prompt": "Esta es su reserva: {summary}. ¿La confirmo?",
        "confirmed": "¡Su reserva está confirmada! Número de confirmación: {number}. Total: ${total} por {nights} noche(s).",
        "complete": "Su reserva {number} está completa. Diga 'empezar de nuevo' para hacer otra.",
        "reset": "De acuerdo, empecemos de nuevo. ¿Qué idioma prefiere?",
        "no_match": "Lo siento, no le entendí.",
        "still_need": "Todavía necesito: {missing}.",
        "missing_report": "Tengo: {captured}. Todavía necesito: {missing}.",
        "nothing_captured": "Aún no tengo datos. Necesito: {missing}.",
        "nothing_missing": "Tengo: {captured}. No falta nada para este paso.",
        "noted": "Anotado: {captured}.",
        "none": "nada todavía",
    },
    "hi": {
        "language_prompt": "Lagunacreek में आपका स्वागत है! आप कौन सी भाषा चाहेंगे? English, Español या हिंदी?",
        "welcome": "बढ़िया, हम हिंदी में बात करेंगे। मैं आपकी क्या मदद कर सकता हूँ? आप बुकिंग, उपलब्धता, चेक-इन या चेक-आउट कर सकते हैं।",
        "service_prompt": "मैं आपकी क्या मदद कर सकता हूँ? आप बुकिंग, उपलब्धता, चेक-इन या चेक-आउट कर सकते हैं।",
        "help": "मैं कदम दर कदम कमरा बुक कर सकता हूँ: तारीखें, मेहमान, कमरा, आपकी जानकारी और भुगतान। "
                "कभी भी 'क्या बाकी है' कहें, या 'फिर से शुरू' कहें।",
        "service_request": "मैं आपका {service} अनुरोध रिसेप्शन को भेज दूँगा। और कुछ?",
        "dates_prompt": "आप कब ठहरना चाहेंगे? कृपया चेक-इन और चेक-आउट की तारीखें बताइए।",
        "guests_prompt": "कितने वयस्क और बच्चे ठहरेंगे?",
        "room_prompt": "आप कौन सा कमरा चाहेंगे? उपलब्ध: {rooms}।",
        "guest_info_prompt": "कृपया अपना पूरा नाम, फ़ोन नंबर और ईमेल बताइए।",
        "payment_prompt": "आप कैसे भुगतान करना चाहेंगे? विकल्प: {methods}।",
        "confirmation_prompt": "आपकी बुकिंग: {summary}। क्या मैं इसे कन्फर्म करूँ?",
        "confirmed": "आपकी बुकिंग कन्फर्म हो गई! कन्फर्मेशन नंबर: {number}। कुल: ${total}, {nights} रात।",
        "complete": "आपकी बुकिंग {number} पूरी हो गई है। नई बुकिंग के लिए 'फिर से शुरू' कहें।",
        "reset": "ठीक है, फिर से शुरू करते हैं। आप कौन सी भाषा चाहेंगे?",
        "no_match": "माफ़ कीजिए, मैं समझ नहीं पाया।",
        "still_need": "मुझे अभी भी चाहिए: {missing}।",
        "missing_report": "मेरे पास है: {captured}। अभी भी चाहिए: {missing}।",
        "nothing_captured": "अभी कोई जानकारी नहीं है। चाहिए: {missing}।",
        "nothing_missing": "मेरे पास है: {captured}। इस कदम के लिए और कुछ नहीं चाहिए।",
        "noted": "नोट कर लिया: {captured}।",
        "none": "अभी कुछ नहीं",
    },
}

FIELD_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "check_in": "check-in date", "check_out": "check-out date", "adults": "adults",
        "children": "children", "room_type": "room type", "room_price": "nightly rate",
        "guest_name": "name", "phone": "phone number", "email": "email",
        "payment_method": "payment method",
    },
    "es": {
        "check_in": "fecha de llegada", "check_out": "fecha de salida", "adults": "adultos",
        "children": "niños", "room_type": "tipo de habitación", "room_price": "tarifa por noche",
        "guest_name": "nombre", "phone": "teléfono", "email": "correo electrónico",
        "payment_method": "método de pago",
    },
    "hi": {
        "check_in": "चेक-इन तारीख", "check_out": "चेक-आउट तारीख", "adults": "वयस्क",
        "children": "बच्चे", "room_type": "कमरे का प्रकार", "room_price": "प्रति रात किराया",
        "guest_name": "नाम", "phone": "फ़ोन नंबर", "email": "ईमेल",
        "payment_method": "भुगतान का तरीका",
    },
}

ISSUE_TEMPLATES: dict[str, dict[str, str]] = {
    "es": {
        "invalid_date": "Esa fecha no parece correcta: '{value}'. Pruebe algo como '15 de julio'.",
        "past_date": "{value} ya pasó. Indique una fecha futura.",
        "checkout_not_after_checkin": "La salida ({value}) debe ser posterior a la llegada.",
        "checkin_not_before_checkout": "La llegada ({value}) debe ser anterior a la salida.",
        "adults_range": "El número de adultos debe estar entre {low} y {high} (recibí {value}).",
        "children_range": "El número de niños debe estar entre 0 y {high} (recibí {value}).",
        "invalid_name": "No pude usar '{value}' como nombre. Dígame su nombre completo.",
        "invalid_phone": "Ese teléfono no parece correcto: '{value}'. Necesito al menos 10 dígitos.",
        "invalid_email": "Ese correo no parece correcto: '{value}'. Debe ser como nombre@ejemplo.com.",
        "unknown_room": "'{value}' no es una de nuestras habitaciones.",
        "unknown_payment": "'{value}' no es un método de pago aceptado.",
    },
    "hi": {
        "invalid_date": "यह तारीख सही नहीं लगती: '{value}'। जैसे 'July 15' बताइए।",
        "past_date": "{value} बीत चुकी है। कृपया आगे की तारीख बताइए।",
        "checkout_not_after_checkin": "चेक-आउट ({value}) चेक-इन के बाद होना चाहिए।",
        "checkin_not_before_checkout": "चेक-इन ({value}) चेक-आउट से पहले होना चाहिए।",
        "adults_range": "वयस्कों की संख्या {low} से {high} के बीच होनी चाहिए ({value} मिली)।",
        "children_range": "बच्चों की संख्या 0 से {high} के बीच होनी चाहिए ({value} मिली)।",
        "invalid_name": "'{value}' को नाम के रूप में नहीं ले सका। कृपया पूरा नाम बताइए।",
        "invalid_phone": "यह फ़ोन नंबर सही नहीं लगता: '{value}'। कम से कम 10 अंक चाहिए।",
        "invalid_email": "यह ईमेल सही नहीं लगता: '{value}'। जैसे name@example.com।",
        "unknown_room": "'{value}' हमारे कमरों में से नहीं है।",
        "unknown_payment": "'{value}' भुगतान का स्वीकृत तरीका नहीं है।",
    },
}


def render(key: str, language: str, **kwargs) -> str:
    """Fill template `key` for `language`, falling back to English."""
    template = TEMPLATES.get(language, {}).get(key) or TEMPLATES["en"][key]
    return template.format(**kwargs)


def render_issue(issue: ValidationIssue, language: str) -> str:
    template = ISSUE_TEMPLATES.get(language, {}).get(issue.code) or ISSUE_MESSAGES[issue.code]
    return template.format(**issue.format_args())


def field_label(name: str, language: str) -> str:
    return FIELD_LABELS.get(language, {}).get(name) or FIELD_LABELS["en"].get(name, name)


def _spoken(value) -> str:
    if isinstance(value, date):
        return format_date(value)
    return str(value)


def describe_slots(values: dict, language: str) -> str:
    """'check-in date: July 15, 2027, adults: 2' style listing; room_price is shown with the room."""
    parts = []
    for name, value in values.items():
        if name == "room_price":
            continue
        if name == "room_type" and values.get("room_price"):
            parts.append(f"{field_label(name, language)}: {value} (${values['room_price']})")
            continue
        parts.append(f"{field_label(name, language)}: {_spoken(value)}")
    return ", ".join(parts) or render("none", language)


def describe_missing(names, language: str) -> str:
    return ", ".join(field_label(n, language) for n in names)


def room_list() -> str:
    return ", ".join(f"{r.name} (${r.price}/night, up to {r.max_occupancy} guests)" for r in ROOM_TYPES)


def payment_list() -> str:
    return ", ".join(PAYMENT_METHODS)


CLASSIFIER_PROMPT = (
    "You classify one message from a hotel guest talking to a reservation assistant. "
    "Answer with a single JSON object and nothing else: "
    '{"intent": <label>, "entities": {...}}. '
    "Labels: reservation, availability, checkin, checkout, search_reservation, reservation_list, inquiry, help, "
    "check_in_date, check_out_date, guest_count, room_selection, guest_info, payment_method, select_language, "
    "missing_info, confirmation, next_step, reset, unknown. "
    "Entity keys you may use: check_in, check_out, adults, children, room_type, name, phone, email, "
    "payment_method, language. Copy values from the message; never invent them. "
    "Rooms: " + ", ".join(r.name for r in ROOM_TYPES) + ". "
    "Payment methods: " + ", ".join(PAYMENT_METHODS) + ". "
    "The assistant is currently at step '{step}'."
)
