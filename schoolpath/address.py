"""Street address helpers and the address table."""

import re
import unicodedata
from typing import Optional

from .geo import expand_coords
from .logger import Logger
from .models import Coord

STREET_SUFFIXES = {
    "AVE": "AVENUE",
    "BLVD": "BOULEVARD",
    "CIR": "CIRCLE",
    "DR": "DRIVE",
    "RD": "ROAD",
    "ST": "STREET",
}

SMALL_WORDS = {"a", "an", "and", "as", "at", "but", "by", "for", "in", "nor",
               "of", "on", "or", "the", "to", "with"}

_NUMBERED_STREET = re.compile(r"^(\d+) (\d)(ST|ND|RD|TH)\b")
_ORDINAL = re.compile(r"^0*(\d+)(ST|ND|RD|TH)$", re.IGNORECASE)


def normalize_address(address: str) -> str:
    """Normalize a street address for lookups, e.g. " 151  3rd street" -> "151 03RD ST" """
    address = unicodedata.normalize("NFD", address)
    address = "".join(c for c in address if not unicodedata.combining(c))
    address = re.sub(r"[^A-Za-z0-9\s]", "", address)
    address = re.sub(r"\s+", " ", address.strip()).upper()
    for abbr, suffix in STREET_SUFFIXES.items():
        # Only the trailing word: "1220 AVENUE M" is a street name, not a suffix
        address = re.sub(rf"\b{suffix}$", abbr, address)
    # The address table zero-pads single-digit numbered streets
    return _NUMBERED_STREET.sub(r"\1 0\2\3", address)


def split_street_address(address: str) -> tuple[str, str]:
    """Split "423 BURROWS ST" into ("423", "BURROWS ST")"""
    parts = address.strip().split(" ", 1)
    if len(parts) < 2:
        return ("", parts[0])
    return (parts[0], parts[1])


def _capitalize(word: str) -> str:
    ordinal = _ORDINAL.match(word)
    if ordinal:
        return f"{int(ordinal.group(1))}{ordinal.group(2).lower()}"
    return word[:1].upper() + word[1:].lower()


def prettify_address(address: str) -> str:
    """Make a normalized address presentable: "BURROWS ST" -> "Burrows St" """
    words = address.split(" ")
    pretty = []
    for i, word in enumerate(words):
        if 0 < i < len(words) - 1 and word.lower() in SMALL_WORDS:
            pretty.append(word.lower())
        else:
            pretty.append(_capitalize(word))
    return " ".join(pretty)


def format_street(street: str) -> str:
    """Format a normalized street name for directions"""
    name = prettify_address(street)
    if street.endswith(" RAMP"):
        name = name.replace(" Off ", " off ").replace(" Ramp", " ramp")
        name = "the " + name
    return name.replace(" Ti St", " St Treasure Island")


class AddressBook:
    """All street addresses: street name -> street number -> coordinates"""

    def __init__(self, logger: Optional[Logger] = None):
        self.streets: dict[str, dict[str, Coord]] = {}
        self.logger = logger

    @classmethod
    def from_dict(cls, raw: dict, logger: Optional[Logger] = None) -> "AddressBook":
        """Build from the packed dataset form {street: {number: [lat, lon]}}"""
        book = cls(logger=logger)
        skipped = 0
        for street, numbers in raw.items():
            expanded = {}
            for num, packed in numbers.items():
                coords = expand_coords(packed)
                if coords is None:
                    skipped += 1
                    continue
                expanded[str(num)] = coords
            book.streets[street] = expanded
        if skipped and logger:
            logger.warn("Skipped addresses with invalid coordinates", {"count": skipped})
        return book

    def __len__(self) -> int:
        return sum(len(numbers) for numbers in self.streets.values())

    def coords(self, address: Optional[str]) -> Optional[Coord]:
        """Get (lat, lon) of a street address, or None if it is not in the table"""
        if not isinstance(address, str):
            return None
        num, street = split_street_address(normalize_address(address))
        if street not in self.streets:
            if self.logger:
                self.logger.log("Cannot find street", {"street": street})
            return None
        if num not in self.streets[street]:
            if self.logger:
                self.logger.log("Cannot find number", {"number": num, "street": street})
            return None
        return self.streets[street][num]
