"""
Languages offered by the RoadGuard language switcher.

English is the identity language: UI source strings are written in it,
so its text is never looked up, translated or cached.
"""

from enum import Enum


class Language(str, Enum):
    """Language codes the UI can switch to."""

    # === Identity language ===
    EN = "en"      # English (source text)

    # === Primary target ===
    HI = "hi"      # Hindi

    # === Other Indian languages ===
    BN = "bn"      # Bengali
    TA = "ta"      # Tamil
    TE = "te"      # Telugu
    MR = "mr"      # Marathi
    GU = "gu"      # Gujarati
    KN = "kn"      # Kannada
    ML = "ml"      # Malayalam
    PA = "pa"      # Punjabi
    UR = "ur"      # Urdu - RTL


IDENTITY_LANGUAGE = Language.EN


# English names, used in logs and LLM prompts
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "bn": "Bengali",
    "ta": "Tamil",
    "te": "Telugu",
    "mr": "Marathi",
    "gu": "Gujarati",
    "kn": "Kannada",
    "ml": "Malayalam",
    "pa": "Punjabi",
    "ur": "Urdu",
}

# Names shown in the language switcher, in the language itself
NATIVE_NAMES: dict[str, str] = {
    "en": "English",
    "hi": "हिंदी",
    "bn": "বাংলা",
    "ta": "தமிழ்",
    "te": "తెలుగు",
    "mr": "मराठी",
    "gu": "ગુજરાતી",
    "kn": "ಕನ್ನಡ",
    "ml": "മലയാളം",
    "pa": "ਪੰਜਾਬੀ",
    "ur": "اردو",
}


# Languages to pre-warm the cache for
WARM_UP_LANGUAGES: list[Language] = [
    Language.HI,
]

RTL_LANGUAGES: list[Language] = [
    Language.UR,
]

SUPPORTED_LANGUAGES = list(Language)


# =============================================================================
# Utilities
# =============================================================================


def get_language_name(code: str) -> str:
    """English name for a code, or the code itself if unknown."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def normalize_language_code(code: str) -> str:
    """Lower-case code from a code, region tag (``hi-IN``) or English name."""
    code = code.lower().strip().replace("_", "-")

    variants = {
        "english": "en",
        "hindi": "hi",
        "bengali": "bn",
        "bangla": "bn",
        "tamil": "ta",
        "telugu": "te",
        "marathi": "mr",
        "gujarati": "gu",
        "kannada": "kn",
        "malayalam": "ml",
        "punjabi": "pa",
        "urdu": "ur",
    }

    if code in variants:
        return variants[code]

    # Region tags: "hi-IN" -> "hi"
    return code.split("-")[0]


def get_language_by_code(code: str) -> Language | None:
    """Supported Language for a code, or None."""
    try:
        return Language(normalize_language_code(code))
    except ValueError:
        return None


def coerce_language(value: str | Language) -> Language:
    """
    Resolve a code or enum member to a supported Language.

    Raises:
        ValueError: if the language is not supported
    """
    if isinstance(value, Language):
        return value
    language = get_language_by_code(value)
    if language is None:
        raise ValueError(f"Unsupported language: {value!r}")
    return language


def is_identity(language: str | Language) -> bool:
    """True for the language whose text is the source text itself."""
    code = language.value if isinstance(language, Language) else str(language)
    return normalize_language_code(code) == IDENTITY_LANGUAGE.value


def is_rtl(code: str) -> bool:
    """True for scripts written right to left (Urdu)."""
    return normalize_language_code(code) in [lang.value for lang in RTL_LANGUAGES]
