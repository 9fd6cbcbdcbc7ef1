"""Auto-generated interpretation text and the rule deciding when it may replace
what the clinician has typed.

The rule is a length/prefix heuristic, not a merge: a genuine edit shorter
than ``short_text_chars`` is still overwritten on the next reading change.
"""

from __future__ import annotations

from audiometry.analysis import Derivation, EAR_SHORT, NO_DATA, asymmetry_note

PREAMBLE = "Automatic summary (editable):"
INTERPRETATION_HEADING = "Clinical interpretation:"
SHORT_TEXT_CHARS = 30
LONG_TEXT_CHARS = 90


def _ear_line(derivation: Derivation, ear: str) -> str:
    pta = derivation.pta(ear)
    value = NO_DATA if pta is None else str(pta)
    return f"{EAR_SHORT[ear]}: PTA {value} dB — {derivation.classification(ear)}."


def build_template(derivation: Derivation, note: str | None = None) -> str:
    """Return the generated block, always ending with a single newline."""
    if derivation.asymmetry:
        asy_line = f"Note: {note or asymmetry_note()}"
    else:
        asy_line = ""
    text = "\n".join([
        PREAMBLE,
        _ear_line(derivation, "right"),
        _ear_line(derivation, "left"),
        asy_line,
        "",
        INTERPRETATION_HEADING,
    ])
    return text.strip() + "\n"


def is_user_authored(existing: str, long_text_chars: int = LONG_TEXT_CHARS) -> bool:
    current = (existing or "").strip()
    return len(current) > long_text_chars and not current.startswith(PREAMBLE)


def merge_interpretation(
    existing: str,
    generated: str,
    short_text_chars: int = SHORT_TEXT_CHARS,
    long_text_chars: int = LONG_TEXT_CHARS,
) -> str:
    current = (existing or "").strip()
    if is_user_authored(existing, long_text_chars):
        return existing
    if not current or len(current) < short_text_chars or current.startswith(PREAMBLE):
        return generated
    return existing
