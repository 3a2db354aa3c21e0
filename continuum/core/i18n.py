"""Locale configuration for path-prefixed routing."""

LOCALES: tuple[str, ...] = ("en", "es", "fr", "zh", "ru", "ar")
DEFAULT_LOCALE = "en"
RTL_LOCALES = frozenset({"ar"})

# Labels rendered by the page layer; missing keys fall back to English.
MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "nav_home": "Home",
        "nav_blog": "Blog",
        "nav_contact": "Contact",
        "nav_portal": "Client Portal",
        "home_title": "Veterinary longevity medicine",
        "home_lead": "AI-guided assessments, personalised protocols and advanced therapeutics for companion animals.",
        "blog_title": "Journal",
        "blog_empty": "No articles yet.",
        "contact_title": "Contact us",
        "portal_title": "Client portal",
        "consent_title": "Consent documents",
        "consent_pending": "Awaiting your acceptance",
        "consent_done": "All required documents accepted",
        "admin_title": "Administration",
        "analytics_title": "Analytics",
        "not_found": "Page not found",
        "verify_ok": "Your email address is verified. You can now log in.",
        "verify_failed": "This verification link is invalid or has expired.",
    },
    "es": {
        "nav_home": "Inicio",
        "nav_blog": "Blog",
        "nav_contact": "Contacto",
        "nav_portal": "Portal de clientes",
        "home_title": "Medicina veterinaria de longevidad",
        "contact_title": "Contáctenos",
    },
    "fr": {
        "nav_home": "Accueil",
        "nav_blog": "Blog",
        "nav_contact": "Contact",
        "nav_portal": "Espace client",
        "home_title": "Médecine vétérinaire de la longévité",
        "contact_title": "Nous contacter",
    },
    "zh": {
        "nav_home": "首页",
        "nav_blog": "博客",
        "nav_contact": "联系我们",
        "nav_portal": "客户门户",
        "home_title": "兽医长寿医学",
    },
    "ru": {
        "nav_home": "Главная",
        "nav_blog": "Блог",
        "nav_contact": "Контакты",
        "nav_portal": "Личный кабинет",
        "home_title": "Ветеринарная медицина долголетия",
    },
    "ar": {
        "nav_home": "الرئيسية",
        "nav_blog": "المدونة",
        "nav_contact": "اتصل بنا",
        "nav_portal": "بوابة العملاء",
        "home_title": "طب طول العمر البيطري",
    },
}


def is_supported(locale: str) -> bool:
    """Whether ``locale`` is one of the routed locales."""
    return locale in LOCALES


def text_direction(locale: str) -> str:
    """``rtl`` for right-to-left locales, ``ltr`` otherwise."""
    return "rtl" if locale in RTL_LOCALES else "ltr"


def translate(locale: str, key: str) -> str:
    """Look up a label, falling back to English and then to the key."""
    return MESSAGES.get(locale, {}).get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)


def negotiate_locale(accept_language: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Pick the best supported locale from an ``Accept-Language`` header."""
    if not accept_language:
        return default

    candidates: list[tuple[float, int, str]] = []
    for position, part in enumerate(accept_language.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        quality = 1.0
        if params.strip().startswith("q="):
            try:
                quality = float(params.strip()[2:])
            except ValueError:
                quality = 0.0
        primary = tag.strip().lower().split("-")[0]
        if primary in LOCALES and quality > 0:
            candidates.append((-quality, position, primary))

    if not candidates:
        return default
    return min(candidates)[2]


def split_locale(path: str) -> tuple[str | None, str]:
    """Split ``/{locale}/rest`` into ``(locale, /rest)``.

    Returns ``(None, path)`` when the first segment is not a locale.
    """
    segments = path.lstrip("/").split("/", 1)
    if segments and segments[0] in LOCALES:
        rest = "/" + segments[1] if len(segments) > 1 else "/"
        return segments[0], rest
    return None, path
