"""
Toast messages: fun one-liners, country entries and ETA milestones.

`MessageFeed` turns a stream of (position, ETA, now) updates into the
messages the UI should pop, each event at most once per journey.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from tracker.engine.types import ETAResult, Position

ETA_THRESHOLDS = (60, 15, 5, 1)


@dataclass(frozen=True)
class Message:
    id: str
    kind: str  # info | fun | warning | arrival
    text: str
    glyph: str
    traveler: Optional[str] = None


def _fun(traveler: str, lines: list[tuple[str, str]]) -> list[Message]:
    return [
        Message(f"{traveler}-{i}", "fun", text, glyph, traveler)
        for i, (text, glyph) in enumerate(lines, start=1)
    ]


FUN_MESSAGES: dict[str, list[Message]] = {
    "santa": _fun("santa", [
        ("The reindeer are asking for hot chocolate!", "🦌"),
        ("A little turbulence over the Atlantic...", "🌊"),
        ("Santa just ate some delicious cookies", "🍪"),
        ("Rudolph's nose is brighter than ever", "🔴"),
        ("The elves are cheering from the North Pole", "🧝"),
        ("Flying through clouds of magic snow", "❄️"),
        ("Practising the chimney drop", "🏠"),
        ("Checking the gift list... all verified!", "📋"),
        ("The stars light up the way", "⭐"),
        ("The sleigh reaches supersonic speed!", "🚀"),
        ("Northern lights ahead", "🌌"),
        ("The reindeer are singing carols", "🎵"),
        ("Jingle jingle! The sleigh bells ring", "🔔"),
        ("Sprinkling magic Christmas dust", "✨"),
    ]),
    "melchor": _fun("melchor", [
        ("Melchor checks his gift list for the third time", "📋"),
        ("Melchor has sorted the gifts by colour", "🎁"),
        ("Melchor reminds everyone: don't forget the shoes!", "👟"),
        ("Melchor double-checks the GPS coordinates of every house", "🗺️"),
        ("Melchor makes sure his camel has enough water", "🐪"),
    ]),
    "gaspar": _fun("gaspar", [
        ("Gaspar is clowning around with the camels", "🤪"),
        ("Did Gaspar just steal a sweet? How naughty!", "🍬"),
        ("Gaspar wonders whether there will be nougat", "🍫"),
        ("Gaspar just told Baltasar a joke", "😂"),
        ("Gaspar whistles a tune while flying", "🎵"),
    ]),
    "baltasar": _fun("baltasar", [
        ("Baltasar follows the star with an epic gaze", "⭐"),
        ("Baltasar's cape waves majestically", "🌟"),
        ("Baltasar gazes at the night sky", "🌌"),
        ("Baltasar's magic lights up the path", "💫"),
        ("Baltasar carries the most precious incense", "🔮"),
    ]),
}

COUNTRY_FLAGS = {
    "Finland": "🇫🇮", "Sweden": "🇸🇪", "Denmark": "🇩🇰", "Germany": "🇩🇪",
    "Netherlands": "🇳🇱", "Belgium": "🇧🇪", "France": "🇫🇷", "Spain": "🇪🇸",
    "Portugal": "🇵🇹", "Morocco": "🇲🇦", "Canary Islands": "🇮🇨", "USA": "🇺🇸",
    "Mexico": "🇲🇽", "Brazil": "🇧🇷", "Argentina": "🇦🇷", "Japan": "🇯🇵",
    "China": "🇨🇳", "India": "🇮🇳", "UAE": "🇦🇪", "Turkey": "🇹🇷",
    "Greece": "🇬🇷", "Italy": "🇮🇹", "Switzerland": "🇨🇭", "Russia": "🇷🇺",
    "Ethiopia": "🇪🇹", "Saudi Arabia": "🇸🇦", "Egypt": "🇪🇬", "Kenya": "🇰🇪",
    "South Korea": "🇰🇷", "Hong Kong": "🇭🇰", "Australia": "🇦🇺",
    "New Zealand": "🇳🇿", "Canada": "🇨🇦", "Peru": "🇵🇪",
    "United Kingdom": "🇬🇧",
}

# labels that do not follow "City, Country"
_SPECIAL_COUNTRIES = {
    "Santa Claus Village": "Finland",
    "Santiago de Compostela": "Spain",
    "Gran Canaria": "Canary Islands",
    "Mexico City": "Mexico",
    "Hong Kong": "Hong Kong",
}

_SUBJECT = {
    "santa": ("Santa", "is", "has"),
    "reyes": ("The Three Kings", "are", "have"),
}


def _subject(family: str) -> tuple[str, str, str]:
    return _SUBJECT.get(family, _SUBJECT["santa"])


def event_message(event: str, family: str = "santa") -> Message:
    """
    Build one of the fixed milestone messages for a traveler family.
    """
    who, is_, has = _subject(family)
    leftover = "cookies" if family == "santa" else "shoes"
    table = {
        "departure": ("info", f"{who} {has} set off! The journey begins", "🎅" if family == "santa" else "🐪"),
        "spain":     ("info", f"{who} {has} reached Spain!", "🇪🇸"),
        "eta-60":    ("warning", "About one hour until arrival at your home!", "⏰"),
        "eta-15":    ("warning", "Only 15 minutes to go!", "🎄"),
        "eta-5":     ("warning", f"5 minutes! Get the {leftover} ready!", "🍪" if family == "santa" else "👟"),
        "eta-1":     ("warning", "1 minute! Off to bed!", "🛏️"),
        "arriving":  ("arrival", f"{who} {is_} arriving at your home!", "🎁"),
        "passed":    ("arrival", f"{who} {has} been to your home! Gifts in the morning!", "🎁"),
        "returned":  ("info", f"{who} {has} returned home. Merry Christmas!", "🏠"),
    }
    kind, text, glyph = table[event]
    return Message(event, kind, text, glyph)


def extract_country(label: str) -> Optional[str]:
    """
    Country part of a waypoint label.

    Returns None for labels without a recognizable country.
    """
    if label in _SPECIAL_COUNTRIES:
        return _SPECIAL_COUNTRIES[label]
    if "Canary" in label or "Tenerife" in label:
        return "Canary Islands"
    parts = label.split(", ")
    if len(parts) >= 2:
        return parts[-1]
    return None


def country_message(country: str, family: str = "santa") -> Message:
    who, is_, _ = _subject(family)
    return Message(
        id=f"country-{country}",
        kind="info",
        text=f"{who} {is_} now in {country}!",
        glyph=COUNTRY_FLAGS.get(country, "🌍"),
    )


def random_message(traveler: Optional[str] = None, rng: random.Random | None = None) -> Message:
    """
    Pick a fun message, from one traveler's pool or from all of them.

    Raises
    ------
    KeyError
        If `traveler` has no message pool.
    """
    rng = rng or random.Random()
    if traveler is None:
        pool = [m for msgs in FUN_MESSAGES.values() for m in msgs]
    else:
        pool = FUN_MESSAGES[traveler]
    return rng.choice(pool)


def eta_threshold(eta_minutes: float) -> Optional[int]:
    """Tightest milestone (in minutes) the ETA is within, if any."""
    for threshold in sorted(ETA_THRESHOLDS):
        if eta_minutes <= threshold:
            return threshold
    return None


class MessageFeed:
    """
    Stateful announcer; every milestone fires once per journey.
    """

    def __init__(self, family: str = "santa") -> None:
        self.family = family
        self.triggered: set[str] = set()
        self.last_country: Optional[str] = None

    def reset(self) -> None:
        self.triggered.clear()
        self.last_country = None

    def _once(self, key: str, message: Message, out: list[Message]) -> None:
        if key not in self.triggered:
            self.triggered.add(key)
            out.append(message)

    def update(self, pos: Position, eta: Optional[ETAResult], now: datetime) -> list[Message]:
        """
        Feed one engine update; returns the messages to show, oldest first.
        """
        out: list[Message] = []

        if pos.progress > 0:
            self._once("departure", event_message("departure", self.family), out)

        country = extract_country(pos.segment_label)
        if pos.segment_index is not None and country and country != self.last_country:
            self.last_country = country
            if country == "Spain":
                self._once("spain", event_message("spain", self.family), out)
            else:
                self._once(f"country-{country}", country_message(country, self.family), out)

        if eta is not None:
            if eta.eta is not None:
                tightest = eta_threshold((eta.eta - now).total_seconds() // 60)
                pending = [] if tightest is None else [
                    t for t in ETA_THRESHOLDS
                    if t >= tightest and f"eta-{t}" not in self.triggered
                ]
                # one milestone per update, largest pending first
                if pending:
                    key = f"eta-{pending[0]}"
                    self._once(key, event_message(key, self.family), out)
            if eta.is_near:
                self._once("arriving", event_message("arriving", self.family), out)
            if eta.is_passed:
                self._once("passed", event_message("passed", self.family), out)

        if pos.progress >= 100 and self.family == "santa":
            self._once("returned", event_message("returned", self.family), out)

        return out
