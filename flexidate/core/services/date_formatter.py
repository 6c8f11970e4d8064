"""
Locale-aware date formatter.

Formats a date with a PHP date()-style pattern, either through Babel's CLDR
formatter (ICU patterns) or through the fixed-pattern engine with month,
weekday and am/pm names passed through a translation hook.

Babel is used only when all of these hold:
- Babel has locale data for the configured locale
- a calendar is configured ("gregorian" is the only one supported)
- a locale is configured
- the caller opted in for the call (use_locale=True)

Otherwise, or when Babel fails, the fixed-pattern engine is used. Failures
are recorded on the DateValue being formatted as FORMATTER_ERROR.
"""
from datetime import datetime
from typing import Any, Optional

import structlog
from babel import localedata
from babel.dates import format_datetime

from flexidate.core.config import get_settings
from flexidate.core.schemas.common import ErrorKind
from flexidate.core.utils import translation_utils
from flexidate.core.utils.date_patterns import render_token, tokenize
from flexidate.core.utils.translation_utils import Translator

logger = structlog.get_logger(__name__)

SUPPORTED_CALENDARS = frozenset({"gregorian"})

# PHP token -> ICU pattern. Tokens missing here have no ICU equivalent and are
# rendered by the fixed engine, then quoted as literal text.
PHP_TO_ICU = {
    "Y": "yyyy",
    "y": "yy",
    "F": "MMMM",
    "m": "MM",
    "M": "MMM",
    "n": "M",
    "d": "dd",
    "D": "EEE",
    "j": "d",
    "l": "EEEE",
    "a": "a",
    "A": "a",
    "g": "h",
    "G": "H",
    "h": "hh",
    "H": "HH",
    "i": "mm",
    "s": "ss",
    "u": "SSSSSS",
    "v": "SSS",
    "O": "xx",
    "P": "xxx",
    "c": "yyyy-MM-dd'T'HH:mm:ssxxx",
    "r": "EEE, dd MMM yyyy HH:mm:ss xx",
    }

# Tokens whose output is a name, with the context passed to the translation hook
TRANSLATABLE_TOKENS = {
    "F": translation_utils.CONTEXT_MONTH_NAME,
    "M": translation_utils.CONTEXT_MONTH_ABBR,
    "l": translation_utils.CONTEXT_DAY_NAME,
    "D": translation_utils.CONTEXT_DAY_ABBR,
    "a": translation_utils.CONTEXT_AMPM,
    "A": translation_utils.CONTEXT_AMPM,
    }


def _quote_icu(text: str) -> str:
    """Quote literal text for an ICU pattern ('' is a literal quote)."""
    if not text:
        return ""
    if any(char.isalpha() or char == "'" for char in text):
        return "'" + text.replace("'", "''") + "'"
    return text


def php_to_icu(fmt: str, dt: datetime) -> str:
    """
    Convert a PHP date()-style pattern to an ICU pattern for ``dt``.

    Escaped characters and tokens without ICU equivalent become quoted
    literals, so the result only holds tokens ICU understands.

    Examples:
        >>> php_to_icu("D, d M Y", datetime(2009, 3, 7))
        'EEE, dd MMM yyyy'
        >>> php_to_icu(r"jS \\o\\f F", datetime(2009, 3, 7))
        "d'th of 'MMMM"
    """
    pattern = []
    literal = []
    for segment in tokenize(fmt):
        if not segment.is_token:
            literal.append(segment.text)
        elif segment.text in PHP_TO_ICU:
            pattern.append(_quote_icu("".join(literal)))
            literal = []
            pattern.append(PHP_TO_ICU[segment.text])
        else:
            literal.append(render_token(dt, segment.text))
    pattern.append(_quote_icu("".join(literal)))
    return "".join(pattern)


def locale_available(locale: Optional[str]) -> bool:
    """True if Babel ships locale data for ``locale`` ("it_IT", "it-IT" or "it")."""
    if not locale:
        return False
    return localedata.exists(locale.replace("-", "_"))


class DateFormatter:
    """
    Formats dates with Babel when possible, with the fixed-pattern engine otherwise.

    Args:
        locale: Locale for Babel formatting (default: settings LOCALE)
        calendar: Calendar for Babel formatting (default: settings CALENDAR)
        langcode: Language for translated names in the fixed engine (default: settings LANGCODE)
        translate: Translation hook (text, context) -> text; default built from ``langcode``
    """

    def __init__(self, locale: Optional[str] = None, calendar: Optional[str] = None,
                 langcode: Optional[str] = None, translate: Optional[Translator] = None):
        settings = get_settings()
        self.locale = (locale if locale is not None else settings.LOCALE).replace("-", "_")
        self.calendar = calendar if calendar is not None else settings.CALENDAR
        self.langcode = langcode if langcode is not None else settings.LANGCODE
        self.translate = translate or translation_utils.make_translator(self.langcode)

    def can_use_locale(self, use_locale: bool = True) -> bool:
        return bool(
            use_locale
            and self.locale
            and self.calendar
            and self.calendar.lower() in SUPPORTED_CALENDARS
            and locale_available(self.locale)
            )

    def format(self, value: Any, fmt: str, use_locale: bool = True) -> str:
        """
        Format a DateValue (or aware datetime).

        Args:
            value: DateValue or datetime
            fmt: PHP date()-style pattern
            use_locale: Whether Babel may be used for this call

        Returns:
            The formatted string
        """
        dt = value.datetime if hasattr(value, "record_error") else value

        if self.can_use_locale(use_locale):
            try:
                return format_datetime(dt, php_to_icu(fmt, dt), tzinfo=dt.tzinfo, locale=self.locale)
            except Exception as e:
                logger.warning(
                    "Locale-aware formatting failed, falling back to fixed pattern",
                    locale=self.locale,
                    format=fmt,
                    error=str(e)
                    )
                if hasattr(value, "record_error"):
                    value.record_error(ErrorKind.FORMATTER_ERROR, f"Locale-aware formatting failed: {e}")

        return self.format_fixed(dt, fmt)

    def format_fixed(self, dt: datetime, fmt: str) -> str:
        """Fixed-pattern formatting with names passed through the translation hook."""
        output = []
        for segment in tokenize(fmt):
            if not segment.is_token:
                output.append(segment.text)
                continue
            text = render_token(dt, segment.text)
            context = TRANSLATABLE_TOKENS.get(segment.text)
            output.append(self.translate(text, context) if context else text)
        return "".join(output)
