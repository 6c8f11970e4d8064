"""
Translation and localization utilities for month, weekday and am/pm names.

Provides the name lists used by the calendar helpers and the fixed-pattern
formatter, localized through Babel with automatic fallback to English.
"""
from typing import Callable, Dict, List, Optional

import structlog
from babel import Locale

logger = structlog.get_logger(__name__)

# Translation hook: (text, context) -> translated text
Translator = Callable[[str, str], str]

# Contexts passed to the translation hook for each kind of name
CONTEXT_MONTH_NAME = "month_name"
CONTEXT_MONTH_ABBR = "month_abbr"
CONTEXT_DAY_NAME = "day_name"
CONTEXT_DAY_ABBR = "day_abbr"
CONTEXT_AMPM = "ampm"

MONTH_NAMES_EN = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
    )
WEEKDAY_NAMES_EN = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def get_babel_locale(language: Optional[str]) -> Locale:
    """
    Get Babel Locale object for given language code.
    Falls back to English if language not supported.

    Args:
        language: language or locale code (e.g., 'en', 'it', 'fr_CA', 'de-AT')

    Returns:
        Babel Locale object

    Examples:
        >>> locale = get_babel_locale('it')
        >>> locale.language
        'it'
        >>> locale = get_babel_locale('invalid_lang')  # Falls back to 'en'
        >>> locale.language
        'en'
    """
    try:
        return Locale.parse((language or "en").replace("-", "_"))
    except Exception as e:
        logger.warning(
            "Language not supported, falling back to English",
            language=language,
            error=str(e)
            )
        return Locale.parse('en')


# ============================================================================
# LOCALIZED NAME LISTS
# ============================================================================

def month_names(language: str = "en", abbr: bool = False) -> List[str]:
    """
    Month names for a language, January first.

    Examples:
        >>> month_names('it')[0]
        'gennaio'
        >>> month_names('en', abbr=True)[11]
        'Dec'
    """
    width = "abbreviated" if abbr else "wide"
    names = get_babel_locale(language).months["format"][width]
    return [names[month] for month in range(1, 13)]


def weekday_names(language: str = "en", abbr: bool = False) -> List[str]:
    """
    Weekday names for a language, Sunday first.

    Babel indexes weekdays Monday=0; the list is rotated so that index 0 is
    Sunday, matching the ``w`` pattern token.
    """
    width = "abbreviated" if abbr else "wide"
    names = get_babel_locale(language).days["format"][width]
    return [names[6]] + [names[day] for day in range(6)]


def ampm_names(language: str = "en") -> List[str]:
    """Localized am/pm markers, in that order."""
    periods = get_babel_locale(language).day_periods["format"]["abbreviated"]
    return [periods.get("am", "AM"), periods.get("pm", "PM")]


def _english_lookup(language: str) -> Dict[str, Dict[str, str]]:
    """English name -> localized name, per translation context."""
    return {
        CONTEXT_MONTH_NAME: dict(zip(MONTH_NAMES_EN, month_names(language))),
        CONTEXT_MONTH_ABBR: dict(zip((m[:3] for m in MONTH_NAMES_EN), month_names(language, abbr=True))),
        CONTEXT_DAY_NAME: dict(zip(WEEKDAY_NAMES_EN, weekday_names(language))),
        CONTEXT_DAY_ABBR: dict(zip((d[:3] for d in WEEKDAY_NAMES_EN), weekday_names(language, abbr=True))),
        CONTEXT_AMPM: {
            "am": ampm_names(language)[0].lower(),
            "pm": ampm_names(language)[1].lower(),
            "AM": ampm_names(language)[0],
            "PM": ampm_names(language)[1],
            },
        }


def identity_translator(text: str, context: str = "") -> str:
    return text


def make_translator(language: Optional[str]) -> Translator:
    """
    Build a translation hook for month/day/am-pm names.

    English (or empty) language codes get the identity hook. Other
    languages translate the English names produced by the fixed-pattern
    formatter using Babel's locale data; text without a known translation
    is returned unchanged.

    Examples:
        >>> translate = make_translator('it')
        >>> translate('March', CONTEXT_MONTH_NAME)
        'marzo'
        >>> translate('Tuesday', CONTEXT_DAY_NAME)
        'martedì'
    """
    if not language or get_babel_locale(language).language == "en":
        return identity_translator

    lookup = _english_lookup(language)

    def translate(text: str, context: str = "") -> str:
        return lookup.get(context, {}).get(text, text)

    return translate
