"""
concierge/dates.py

Date helpers for free-text stay requests.
- find_dates: locate "<Month> <Day>", "<Day> <Month>" and "MM/DD[/YYYY]" phrases and decide which
  one is the check-in and which the check-out from the words around them
- parse_stay_date: turn a phrase into a date, rolling year-less dates forward when they fall behind
  `today` (or behind the check-in for a check-out)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from dateutil import parser

MONTHS_EN = {
    "jan": "January", "feb": "February", "mar": "March", "apr": "April", "may": "May", "jun": "June",
    "jul": "July", "aug": "August", "sep": "September", "oct": "October", "nov": "November", "dec": "December",
}
MONTHS_ES = {
    "enero": "January", "febrero": "February", "marzo": "March", "abril": "April", "mayo": "May",
    "junio": "June", "julio": "July", "agosto": "August", "septiembre": "September",
    "setiembre": "September", "octubre": "October", "noviembre": "November", "diciembre": "December",
}

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
    r"|enero|febrero|marzo|abril|mayo|junio|julio|agosto|septiembre|setiembre|octubre|noviembre|diciembre)"
)
_DAY = r"(?:3[01]|[12]\d|0?[1-9])(?:st|nd|rd|th)?"
_YEAR = r"(?:19|20)\d{2}"

DATE_RX = re.compile(
    rf"\b(?P<m1>{_MONTH})\.?\s+(?P<d1>{_DAY})\b(?:,?\s*(?P<y1>{_YEAR})\b)?"
    rf"|\b(?P<d2>{_DAY})\s+(?:of\s+|de\s+)?(?P<m2>{_MONTH})\b(?:,?\s*(?:de\s+)?(?P<y2>{_YEAR})\b)?"
    rf"|(?<![\d/])(?P<num>\d{{1,2}}/\d{{1,2}}(?:/(?:\d{{4}}|\d{{2}}))?)(?![\d/])",
    re.IGNORECASE,
)

CHECK_IN_WORDS = re.compile(
    r"\b(?:check(?:ing)?[\s-]?in|arriv(?:e|ing|al)|from|start(?:ing)?|coming)\b", re.IGNORECASE
)
CHECK_OUT_WORDS = re.compile(
    r"\b(?:check(?:ing)?[\s-]?out|depart(?:ing|ure)?|leav(?:e|ing)|until|till|end(?:ing)?)\b", re.IGNORECASE
)
RANGE_WORDS = re.compile(r"^\W*(?:to|through|thru|till|until|and|al|hasta|y|-|–)\W*$", re.IGNORECASE)
YEAR_RX = re.compile(rf"\b{_YEAR}\b")


@dataclass(frozen=True)
class DateMentions:
    check_in: str | None = None
    check_out: str | None = None
    undated: str | None = None  # found, but nothing says which end of the stay it is


def _month_name(raw: str) -> str:
    low = raw.lower().rstrip(".")
    if low in MONTHS_ES:
        return MONTHS_ES[low]
    return MONTHS_EN[low[:3]]


def _day_number(raw: str) -> int:
    return int(re.sub(r"(?:st|nd|rd|th)$", "", raw, flags=re.IGNORECASE))


def _canonical(match: re.Match) -> tuple[str, str | None]:
    """Phrase in 'July 15[, 2027]' form plus the explicit year, if any."""
    if match.group("num"):
        return match.group("num"), None
    if match.group("m1"):
        month, day, year = match.group("m1"), match.group("d1"), match.group("y1")
    else:
        month, day, year = match.group("m2"), match.group("d2"), match.group("y2")
    phrase = f"{_month_name(month)} {_day_number(day)}"
    if year:
        phrase += f", {year}"
    return phrase, year


def _role(context: str, after_previous: bool) -> str | None:
    if CHECK_OUT_WORDS.search(context):
        return "out"
    if CHECK_IN_WORDS.search(context):
        return "in"
    if after_previous and RANGE_WORDS.match(context):
        return "out"
    return None


def find_dates(text: str) -> DateMentions:
    """Find up to two date phrases and assign them to check-in / check-out.

    "from X to Y", "X through Y" and "check in X ... check out Y" give both ends. A lone phrase is
    assigned from its context words (check-in/arriving/from/start vs check-out/departing/until/end)
    and otherwise left `undated` for the caller to place in the first empty slot.
    """
    if not text:
        return DateMentions()
    found = list(DATE_RX.finditer(text))[:2]
    if not found:
        return DateMentions()

    phrases: list[str] = []
    years: list[str | None] = []
    roles: list[str | None] = []
    cursor = 0
    for i, match in enumerate(found):
        phrase, year = _canonical(match)
        phrases.append(phrase)
        years.append(year)
        roles.append(_role(text[cursor:match.start()], after_previous=i > 0))
        cursor = match.end()

    if len(found) == 2:
        # "July 15 to July 18, 2027": the trailing year covers both ends
        if years[1] and not years[0] and not found[0].group("num"):
            phrases[0] = f"{phrases[0]}, {years[1]}"
        if roles[0] is None and roles[1] is None:
            roles = ["in", "out"]
        elif roles[0] is None:
            roles[0] = "in" if roles[1] == "out" else "out"
        elif roles[1] is None or roles[1] == roles[0]:
            roles[1] = "out" if roles[0] == "in" else "in"
        if roles[0] == "out" and roles[1] == "in":
            # "check out on the 18th, check in July 15": keep the roles, not the order
            return DateMentions(check_in=phrases[1], check_out=phrases[0])
        return DateMentions(check_in=phrases[0], check_out=phrases[1])

    if roles[0] == "in":
        return DateMentions(check_in=phrases[0])
    if roles[0] == "out":
        return DateMentions(check_out=phrases[0])
    return DateMentions(undated=phrases[0])


def has_explicit_year(phrase: str) -> bool:
    if YEAR_RX.search(phrase):
        return True
    return phrase.count("/") == 2


def _translate_months(phrase: str) -> str:
    def repl(m: re.Match) -> str:
        return MONTHS_ES[m.group(0).lower()]
    return re.sub("|".join(MONTHS_ES), repl, phrase, flags=re.IGNORECASE)


def parse_stay_date(phrase: str, today: date, after: date | None = None) -> date:
    """Parse a date phrase relative to `today`.

    Without an explicit year the current year is assumed and the date moves one year ahead when
    it would fall before `today`. For a check-out (`after` is the check-in) it also moves ahead
    when it lands in an earlier month than the check-in ("Dec 30 ... Jan 2"); a same-month
    reversal is left alone so the caller can reject it.
    Raises ValueError when the phrase is not a real date.
    """
    text = _translate_months(phrase.strip())
    default = datetime(today.year, today.month, today.day)
    parsed = parser.parse(text, default=default, dayfirst=False).date()
    if has_explicit_year(phrase):
        return parsed
    if parsed < today:
        parsed = _add_year(parsed)
    if after is not None and (parsed.year, parsed.month) < (after.year, after.month):
        parsed = _add_year(parsed)
    return parsed


def _add_year(d: date) -> date:
    try:
        return d.replace(year=d.year + 1)
    except ValueError:
        # Feb 29 -> Feb 28 of a non-leap year
        return d.replace(year=d.year + 1, day=28)


def format_date(d: date) -> str:
    return f"{d:%B} {d.day}, {d.year}"


def nights_between(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days
