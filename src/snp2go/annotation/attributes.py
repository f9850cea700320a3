"""Decode GFF3-style attribute strings into structured mappings."""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote

# Keys consumed downstream; everything else passes through untouched
RECOGNIZED_KEYS = ("ID", "locus_tag", "Ortholog", "Description", "GO", "GO_names")

# Bytes unquote() could not decode, as surrogateescape leaves them
_UNDECODED_BYTE = re.compile("[\udc80-\udcff]")


def percent_decode(text: str) -> str:
    """Replace every %XX escape with the character it encodes.

    Single pass only: "%2520" becomes "%20", never " ". Malformed escapes
    such as "%ZZ" are left as they are, and so are escapes whose bytes
    are not valid UTF-8 ("caf%E9" stays "caf%E9").
    """
    if "%" not in text:
        return text
    decoded = unquote(text, errors="surrogateescape")
    return _UNDECODED_BYTE.sub(lambda m: f"%{ord(m.group()) - 0xDC00:02X}", decoded)


@dataclass
class DecodedAttributes:
    """Result of decoding one attribute column.

    Attributes:
        values: Key -> percent-decoded value, in column order
        raw: Key -> value exactly as written (still encoded)
        rejected_tokens: Tokens that could not yield a key (e.g. "=value")
    """
    values: dict[str, str] = field(default_factory=dict)
    raw: dict[str, str] = field(default_factory=dict)
    rejected_tokens: list[str] = field(default_factory=list)

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.values.get(key, default)

    def get_multi(self, key: str, delimiter: str) -> frozenset[str]:
        """Split a multi-valued attribute, then decode each item.

        Splitting happens on the encoded text so an escaped delimiter
        (e.g. %2C inside a GO name) stays part of its item.
        """
        return split_multi_value(self.raw.get(key), delimiter)

    def unrecognized(self) -> dict[str, str]:
        """Attributes outside RECOGNIZED_KEYS."""
        return {k: v for k, v in self.values.items() if k not in RECOGNIZED_KEYS}


def decode_attributes(column: str) -> DecodedAttributes:
    """Decode a ';'-separated key=value attribute column.

    Args:
        column: Raw 9th column of an annotation line

    Returns:
        DecodedAttributes with decoded values and any rejected tokens

    Notes:
        - Empty tokens (";;" or a trailing ";") are ignored
        - A token without "=" yields its key with an empty value
        - Only values are percent-decoded; keys are kept verbatim
        - A repeated key keeps its last value
    """
    decoded = DecodedAttributes()

    for token in column.strip().split(";"):
        token = token.strip()
        if not token:
            continue

        if "=" in token:
            key, value = token.split("=", 1)
        else:
            key, value = token, ""

        key = key.strip()
        if not key:
            decoded.rejected_tokens.append(token)
            continue

        value = value.strip()
        decoded.raw[key] = value
        decoded.values[key] = percent_decode(value)

    return decoded


def split_multi_value(value: str | None, delimiter: str) -> frozenset[str]:
    """Split an encoded multi-valued attribute into a set of decoded items."""
    if not value:
        return frozenset()
    return frozenset(
        percent_decode(part.strip()) for part in value.split(delimiter) if part.strip()
    )
