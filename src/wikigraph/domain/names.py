"""Name codec between display names and the store's on-disk encoding.

The dump stores entity names in a URL-like form: spaces become ``_`` and
non-Latin-1 characters are written as ``%XX%YY`` UTF-8 byte escapes.
``normalize`` turns a stored name into display form, ``denormalize`` turns
user input into something that can be matched against the store.

INVARIANT: both functions are total. Malformed escapes in ``normalize``
fall back to the original string instead of raising.
"""

from __future__ import annotations

from enum import Enum, auto
from string import hexdigits


class _State(Enum):
    NORMAL = auto()
    FIRST_ESCAPE = auto()
    SECOND_PERCENT = auto()
    SECOND_ESCAPE = auto()


def normalize(stored: str) -> str:
    """Convert a store-native name to display form.

    An escape is two ``%``-prefixed hex pairs decoding to one two-byte
    UTF-8 character (``%C3%A9`` -> ``é``). A lone pair is accepted only
    when it encodes an ASCII byte (``%20`` -> space), also when a two-pair
    escape follows it directly (``%28%C3%A9`` -> ``(é``). Any other broken
    escape, or bytes that are not valid hex/UTF-8, returns the input
    unmodified.
    """
    chars: list[str] = []
    escape: list[str] = []
    state = _State.NORMAL

    for ch in stored:
        if state is _State.NORMAL:
            if ch == "%":
                state = _State.FIRST_ESCAPE
            else:
                chars.append(ch)
        elif state is _State.FIRST_ESCAPE:
            escape.append(ch)
            if len(escape) == 2:
                state = _State.SECOND_PERCENT
        elif state is _State.SECOND_PERCENT:
            if ch == "%":
                state = _State.SECOND_ESCAPE
                continue
            single = _decode_ascii("".join(escape))
            if single is None:
                return stored
            chars.append(single)
            chars.append(ch)
            escape.clear()
            state = _State.NORMAL
        else:
            escape.append(ch)
            if len(escape) == 4:
                decoded = _decode("".join(escape))
                if decoded is not None:
                    chars.append(decoded)
                    escape.clear()
                    state = _State.NORMAL
                    continue
                # The pairs do not form one character; the first may stand alone.
                single = _decode_ascii("".join(escape[:2]))
                if single is None:
                    return stored
                chars.append(single)
                del escape[:2]
                state = _State.SECOND_PERCENT

    if state is _State.SECOND_PERCENT:
        single = _decode_ascii("".join(escape))
        if single is None:
            return stored
        chars.append(single)
    elif state is not _State.NORMAL:
        # Input ended in the middle of an escape.
        return stored

    return "".join(chars).replace("_", " ")


def _decode(hex_digits: str) -> str | None:
    if not all(c in hexdigits for c in hex_digits):
        return None
    try:
        return bytes.fromhex(hex_digits).decode("utf-8")
    except ValueError:
        return None


def _decode_ascii(hex_digits: str) -> str | None:
    decoded = _decode(hex_digits)
    if decoded is None or not decoded.isascii():
        return None
    return decoded


def denormalize(display: str) -> str:
    """Convert display text to the store-native encoding.

    Characters below U+0100 pass through untouched (including ``%``);
    everything else is escaped byte by byte as ``%XX``. Spaces become ``_``.
    """
    parts: list[str] = []
    for ch in display:
        if ord(ch) < 256:
            parts.append(ch)
        else:
            parts.append("".join(f"%{byte:02X}" for byte in ch.encode("utf-8")))
    return "".join(parts).replace(" ", "_")
