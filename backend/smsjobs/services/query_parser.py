"""
SMS Query Parser - Free-form Text to Search Intent

Turns an inbound contractor text into a ParsedQuery. Parsing is pure and
total: a message that carries no recognisable signal still produces a
search intent with no filters.

Precedence:
    1. Terminal commands on the first token (stop, help, digest, prefs)
    2. Claim reply ("3" or "claim 3", one digit only)
    3. Search with additive filter extraction:
       zip, price bounds, urgency, trade, city, then "anything" negation

Examples:
    >>> parse("fence 77002")
    ParsedQuery(command=<Command.SEARCH: 'search'>, trade='fencing', zip_code='77002', ...)
    >>> parse("claim 3").job_number
    3
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Command(str, Enum):
    SEARCH = "search"
    CLAIM = "claim"
    DIGEST = "digest"
    PREFS = "prefs"
    STOP = "stop"
    HELP = "help"


class QueryUrgency(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    ANYTIME = "anytime"


@dataclass
class ParsedQuery:
    """
    Structured interpretation of one inbound message.

    Only `command` is always set. For every command other than SEARCH the
    filter fields stay None; `job_number` is only set for CLAIM.
    """
    command: Command = Command.SEARCH
    trade: Optional[str] = None
    zip_code: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    city: Optional[str] = None
    urgency: Optional[QueryUrgency] = None
    job_number: Optional[int] = None


# Declaration order is the tie-break: "general" stays last so its loose
# aliases ("repair", "fix") never shadow a specific trade.
TRADE_ALIASES: dict[str, list[str]] = {
    "plumbing": ["plumber", "plumb", "pipe", "drain", "toilet", "faucet", "leak", "water heater"],
    "electrical": ["electrician", "electric", "outlet", "wire", "wiring", "breaker", "light", "panel"],
    "hvac": ["ac", "air conditioning", "heating", "furnace", "duct", "heat pump", "thermostat"],
    "roofing": ["roof", "roofer", "shingle", "gutter", "leak"],
    "fencing": ["fence", "fencer", "gate", "post"],
    "painting": ["paint", "painter", "interior", "exterior"],
    "carpentry": ["carpenter", "wood", "deck", "door", "trim", "cabinet"],
    "flooring": ["floor", "tile", "hardwood", "laminate", "carpet"],
    "landscaping": ["landscape", "lawn", "yard", "tree", "sprinkler", "irrigation"],
    "general": ["handyman", "general", "repair", "fix", "maintenance"],
}

KNOWN_CITIES = [
    "houston", "dallas", "austin", "san antonio", "fort worth", "el paso",
    "arlington", "plano", "irving", "lubbock", "laredo", "garland", "frisco",
    "mckinney", "brownsville", "killeen", "pasadena", "mesquite", "mcallen",
    "denton",
]

FIRST_TOKEN_COMMANDS: list[tuple[Command, set[str]]] = [
    (Command.STOP, {"stop", "unsubscribe"}),
    (Command.HELP, {"help", "?"}),
    (Command.DIGEST, {"digest", "morning"}),
    (Command.PREFS, {"prefs", "preferences", "settings"}),
]

URGENCY_TIERS: list[tuple[QueryUrgency, list[str]]] = [
    (QueryUrgency.TODAY, ["today", "asap", "emergency", "urgent"]),
    (QueryUrgency.TOMORROW, ["tomorrow", "morning"]),
    (QueryUrgency.THIS_WEEK, ["this week", "week"]),
]

NEGATION_PHRASES = ["anything", "any job", "all jobs"]

CLAIM_PATTERN = re.compile(r"(?:claim\s+)?([0-9])")
ZIP_PATTERN = re.compile(r"\b([0-9]{5})\b")

# Applied in order; a later pattern overwrites an earlier one for the same bound
MAX_PRICE_PATTERNS = [re.compile(r"under\s*\$?([0-9]+)"), re.compile(r"max\s*\$?([0-9]+)")]
MIN_PRICE_PATTERNS = [re.compile(r"over\s*\$?([0-9]+)"), re.compile(r"min\s*\$?([0-9]+)")]


def parse(text: str) -> ParsedQuery:
    """Interpret a raw SMS body. Never raises."""
    normalized = (text or "").lower().strip()
    words = normalized.split()
    first = words[0] if words else ""

    for command, keywords in FIRST_TOKEN_COMMANDS:
        if first in keywords:
            return ParsedQuery(command=command)

    claim = CLAIM_PATTERN.fullmatch(normalized)
    if claim:
        return ParsedQuery(command=Command.CLAIM, job_number=int(claim.group(1)))

    result = ParsedQuery(command=Command.SEARCH)

    zip_match = ZIP_PATTERN.search(normalized)
    if zip_match:
        result.zip_code = zip_match.group(1)

    result.max_price = _last_price(normalized, MAX_PRICE_PATTERNS)
    result.min_price = _last_price(normalized, MIN_PRICE_PATTERNS)
    result.urgency = extract_urgency(normalized)
    result.trade = extract_trade(normalized)
    result.city = next((city for city in KNOWN_CITIES if city in normalized), None)

    if any(phrase in normalized for phrase in NEGATION_PHRASES):
        result.trade = None

    return result


def extract_urgency(normalized: str) -> Optional[QueryUrgency]:
    for urgency, keywords in URGENCY_TIERS:
        if any(keyword in normalized for keyword in keywords):
            return urgency
    return None


def extract_trade(normalized: str) -> Optional[str]:
    for trade, aliases in TRADE_ALIASES.items():
        if trade in normalized or any(alias in normalized for alias in aliases):
            return trade
    return None


def _last_price(normalized: str, patterns: list[re.Pattern]) -> Optional[int]:
    price = None
    for pattern in patterns:
        match = pattern.search(normalized)
        if match:
            price = int(match.group(1))
    return price
