"""Weak-signal candidates derived from the transcript without a model call.

Both extractors are deterministic regex passes.  Their output is a hint for
the report (visit reason, patient name) when model extraction leaves the
field empty; they never override an extracted value.
"""

from __future__ import annotations

import re

# (label, pattern) pairs. First matching sentence wins; the label list is the fallback.
REASON_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (label, re.compile(pattern, re.IGNORECASE))
    for label, pattern in (
        ("krwiomocz", r"\bkrwiomocz\w*|\bkrew w moczu\b|\bhematuri\w*"),
        ("wymioty", r"\bwymiot\w*|\bwymiotuj\w*|\bvomit\w*"),
        ("brak apetytu", r"\bbrak\w* apetytu\b|\bnie chce jeść\b|\bnie je\b|\banoreksj\w*|\banorexi\w*"),
        ("biegunka", r"\bbiegunk\w*|\bdiarr?h\w*"),
        ("ból brzucha", r"\bbó?l\w* brzucha\b|\bbolesn\w* brzuch\w*|\babdominal pain\b"),
        ("apatia", r"\bapati\w*|\bosowiał\w*|\bletarg\w*|\bletharg\w*"),
        ("spadek masy ciała", r"\bchudnie\b|\bschudł\w*|\bspad\w* masy\b|\butrat\w* masy\b|\bweight loss\b"),
        ("wielomocz", r"\bwielomocz\w*|\bwielopragnieni\w*|\bpoliuri\w*|\bpolidyps\w*|\bdużo pije\b"),
        ("problemy z oddawaniem moczu", r"\bparci\w* na mocz\b|\bzatrzymani\w* moczu\b|\bdysuri\w*"),
        ("powiększenie obrysu brzucha", r"\bpowiększon\w* brzuch\w*|\bwodobrzusz\w*|\bascites\b"),
        ("badanie kontrolne", r"\bbadani\w* kontroln\w*|\bna kontrol\w*|\bcheck-?up\b"),
    )
)

_SENTENCE_RE = re.compile(r"[^.!?\n]+[.!?]?")
MAX_SENTENCE_CHARS = 200

_UPPER = "A-ZĄĆĘŁŃÓŚŹŻ"
_LOWER = "a-ząćęłńóśźż"
_NAME_RE = re.compile(
    rf"\b(?P<honorific>Pan(?:a|u|i|ią|em)?|Mrs?|Ms)\.?\s+"
    rf"(?P<name>[{_UPPER}][{_LOWER}]+(?:-[{_UPPER}][{_LOWER}]+)?)"
)
_POLITE_RE = re.compile(r"\b(proszę|prosze|please)\b", re.IGNORECASE)
POLITE_WINDOW_CHARS = 20

# Inflected honorifics whose following name is usually in genitive/dative form.
_INFLECTED_HONORIFICS = frozenset({"Pana", "Panu"})
_TRIMMABLE_SUFFIXES = ("a", "u")
_MIN_STEM = 4


def find_reason_candidate(text: str) -> str | None:
    """Return the first sentence mentioning a known presenting symptom.

    When the hit sits inside an unbroken run of text too long to be a
    sentence, the matched symptom labels are joined instead.
    """
    if not text:
        return None

    labels = [label for label, pattern in REASON_PATTERNS if pattern.search(text)]
    if not labels:
        return None

    for sentence in _SENTENCE_RE.findall(text):
        if any(pattern.search(sentence) for _, pattern in REASON_PATTERNS):
            sentence = sentence.strip()
            if len(sentence) <= MAX_SENTENCE_CHARS:
                return sentence
            break
    return ", ".join(labels)


def _trim_inflection(name: str, honorific: str) -> str:
    if honorific not in _INFLECTED_HONORIFICS or "-" in name:
        return name
    if name.endswith(_TRIMMABLE_SUFFIXES) and len(name) - 1 >= _MIN_STEM:
        stem = name[:-1]
        if stem[-1].lower() not in "aeiouyąęó":
            return stem
    return name


def find_patient_name(text: str) -> str | None:
    """Name following an honorific ("Pan Kowalski", "Ms. Smith").

    A match immediately followed by "proszę"/"please" is a polite request,
    not a name, and is skipped.
    """
    if not text:
        return None
    for match in _NAME_RE.finditer(text):
        window = text[match.end() : match.end() + POLITE_WINDOW_CHARS]
        if _POLITE_RE.search(window) or _POLITE_RE.fullmatch(match.group("name")):
            continue
        return _trim_inflection(match.group("name"), match.group("honorific"))
    return None
