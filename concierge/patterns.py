"""
concierge/patterns.py

Multilingual keyword and phrase tables used by the rule-based matcher.
- SERVICE_PATTERNS: what the guest wants the front desk to do (book, check in, ...)
- CONTROL_PATTERNS: dialogue control phrases valid at any step (missing info, next, confirm, reset)
- LANGUAGE_NAMES: how a guest names a language when picking one
- LANGUAGE_KEYWORDS: cheap word-level hints for language detection

Dict order is precedence order inside each table.
"""

from __future__ import annotations

SUPPORTED_LANGUAGES = ("en", "es", "fr", "de", "it", "pt", "hi", "ja", "ko", "zh")

SERVICE_PATTERNS: dict[str, dict[str, list[str]]] = {
    "reservation": {
        "en": ["book", "make reservation", "make a reservation", "reserve", "need a room", "want a room",
               "new booking"],
        "es": ["reservar", "hacer una reserva", "quiero una habitación", "necesito una habitación"],
        "fr": ["réserver", "faire une réservation"],
        "de": ["buchen", "reservieren"],
        "it": ["prenotare", "fare una prenotazione"],
        "pt": ["reservar", "fazer uma reserva"],
        "hi": ["बुक करना", "आरक्षण करना", "बुकिंग", "कमरा चाहिए"],
        "ja": ["予約する", "予約したい"],
        "ko": ["예약하다", "예약하고 싶어요"],
        "zh": ["预订", "想预订"],
    },
    "checkin": {
        "en": ["check in", "i am checking in", "check into hotel", "checkin"],
        "es": ["registrar entrada", "hacer check-in", "llegada"],
        "fr": ["faire le check-in", "m'enregistrer"],
        "de": ["einchecken", "check-in machen"],
        "it": ["fare il check-in", "registrare l'ingresso"],
        "pt": ["fazer check-in", "entrar no hotel"],
        "hi": ["चेक-इन करना", "चेक इन"],
        "ja": ["チェックインする"],
        "ko": ["체크인하다"],
        "zh": ["办理入住"],
    },
    "checkout": {
        "en": ["check out", "i am checking out", "check out from hotel", "checkout"],
        "es": ["registrar salida", "hacer check-out"],
        "fr": ["faire le check-out", "quitter l'hôtel"],
        "de": ["auschecken", "check-out machen"],
        "it": ["fare il check-out", "registrare l'uscita"],
        "pt": ["fazer check-out", "sair do hotel"],
        "hi": ["चेक-आउट करना", "चेक आउट"],
        "ja": ["チェックアウトする"],
        "ko": ["체크아웃하다"],
        "zh": ["办理退房"],
    },
    "availability": {
        "en": ["check availability", "show availability", "available rooms", "availability", "vacancy"],
        "es": ["ver disponibilidad", "habitaciones disponibles", "disponibilidad"],
        "fr": ["vérifier la disponibilité", "chambres disponibles"],
        "de": ["verfügbarkeit prüfen", "verfügbare zimmer"],
        "it": ["verificare disponibilità", "camere disponibili"],
        "pt": ["verificar disponibilidade", "quartos disponíveis"],
        "hi": ["उपलब्धता जांचें", "खाली कमरे", "उपलब्ध"],
        "ja": ["空き状況を確認する", "利用可能な部屋"],
        "ko": ["가능 여부 확인", "빈 방"],
        "zh": ["查询空房", "可用房间"],
    },
    "search_reservation": {
        "en": ["find my reservation", "what is my booking", "check my booking"],
        "es": ["encontrar mi reserva", "cuál es mi reserva"],
        "fr": ["trouver ma réservation", "quelle est ma réservation"],
        "de": ["meine reservierung finden", "was ist meine buchung"],
        "it": ["trova la mia prenotazione", "qual è la mia prenotazione"],
        "pt": ["encontrar minha reserva", "qual é a minha reserva"],
        "hi": ["मेरी बुकिंग ढूंढें", "मेरा आरक्षण क्या है"],
        "ja": ["予約を見つける", "私の予約は何ですか"],
        "ko": ["예약 찾기", "내 예약이 뭐죠"],
        "zh": ["查找我的预订", "我的预订是什么"],
    },
    "reservation_list": {
        "en": ["show reservation list", "my reservations list", "all my bookings"],
        "es": ["mostrar lista de reservas", "mis reservas"],
        "fr": ["afficher la liste des réservations", "mes réservations"],
        "de": ["reservierungsliste anzeigen", "meine reservierungen"],
        "it": ["mostra elenco prenotazioni", "le mie prenotazioni"],
        "pt": ["mostrar lista de reservas", "minhas reservas"],
        "hi": ["आरक्षण सूची दिखाएँ", "मेरी सभी बुकिंग्स"],
        "ja": ["予約リストを表示", "私の予約一覧"],
        "ko": ["예약 목록 보기", "내 예약 내역"],
        "zh": ["显示预订列表", "我的所有预订"],
    },
    "inquiry": {
        "en": ["tell me about", "information about"],
        "es": ["dime sobre", "información sobre"],
        "fr": ["parle-moi de", "informations sur"],
        "de": ["erzähl mir von", "informationen über"],
        "it": ["dimmi di", "informazioni su"],
        "pt": ["me diga sobre", "informações sobre"],
        "hi": ["बताओ", "के बारे में जानकारी"],
        "ja": ["教えて", "に関する情報"],
        "ko": ["알려줘", "에 대한 정보"],
        "zh": ["告诉我关于"],
    },
    "help": {
        "en": ["help", "assist me", "can you help"],
        "es": ["ayuda", "asístame", "puedes ayudarme"],
        "fr": ["aide", "aidez-moi", "pouvez-vous m'aider"],
        "de": ["hilfe", "helfen sie mir", "können sie helfen"],
        "it": ["aiuto", "aiutami", "puoi aiutarmi"],
        "pt": ["ajuda", "ajude-me", "pode ajudar"],
        "hi": ["मदद", "मेरी मदद करें"],
        "ja": ["ヘルプ", "助けてください"],
        "ko": ["도움", "도와주세요"],
        "zh": ["帮助", "请帮助我"],
    },
}

CONTROL_PATTERNS: dict[str, dict[str, list[str]]] = {
    "reset": {
        "en": ["start over", "restart", "reset", "start again", "begin again"],
        "es": ["empezar de nuevo", "reiniciar", "comenzar de nuevo"],
        "fr": ["recommencer", "réinitialiser"],
        "de": ["von vorne", "neu starten"],
        "hi": ["फिर से शुरू", "दोबारा शुरू"],
    },
    "missing_info": {
        "en": ["missing", "what else", "what do you need", "what's left", "what is left",
               "remaining", "status", "progress", "incomplete"],
        "es": ["qué falta", "que falta", "qué más necesitas", "falta"],
        "fr": ["qu'est-ce qui manque", "que manque-t-il", "manque"],
        "de": ["was fehlt", "fehlt noch"],
        "hi": ["क्या बाकी है", "क्या चाहिए", "बाकी"],
    },
    "confirmation": {
        "en": ["yes", "confirm", "book it", "looks good", "that's right", "correct", "proceed", "sure"],
        "es": ["sí", "confirmar", "confirmo", "correcto"],
        "fr": ["oui", "confirmer", "c'est correct"],
        "de": ["ja", "bestätigen", "richtig"],
        "hi": ["हाँ", "हां", "कन्फर्म", "पुष्टि"],
    },
    "next_step": {
        "en": ["next", "continue", "move on", "go ahead"],
        "es": ["siguiente", "continuar"],
        "fr": ["suivant", "continuer"],
        "de": ["weiter", "nächste"],
        "hi": ["आगे", "अगला"],
    },
}

LANGUAGE_NAMES: dict[str, list[str]] = {
    "en": ["english", "inglés", "ingles"],
    "es": ["spanish", "español", "espanol", "castellano"],
    "fr": ["french", "français", "francais"],
    "de": ["german", "deutsch", "alemán"],
    "it": ["italian", "italiano"],
    "pt": ["portuguese", "português", "portugues"],
    "hi": ["hindi", "हिंदी", "हिन्दी"],
    "ja": ["japanese", "日本語"],
    "ko": ["korean", "한국어"],
    "zh": ["chinese", "mandarin", "中文", "汉语"],
}

# Word-level hints; script ranges are checked first in router.detect_language.
LANGUAGE_KEYWORDS: dict[str, list[str]] = {
    "es": ["hola", "gracias", "por favor", "habitación", "habitacion", "reserva", "reservar",
           "español", "quiero", "necesito", "cuarto", "huésped", "llegada", "salida"],
    "fr": ["bonjour", "merci", "chambre", "réservation", "français", "voudrais", "besoin", "réserver"],
    "de": ["hallo", "danke", "zimmer", "reservierung", "deutsch", "möchte", "brauche", "buchen"],
    "it": ["ciao", "grazie", "camera", "prenotazione", "italiano", "vorrei", "bisogno", "albergo"],
    "pt": ["olá", "obrigado", "obrigada", "quarto", "português", "quero reservar", "preciso"],
}
