"""Facts extraction prompt templates (objective exam data, Polish transcripts).

Prompts are stored in ``_PROMPT_DATA`` and resolved through
:func:`vetscribe.prompts.get_prompt`.
"""

from __future__ import annotations

# ── Raw prompt data (read by the prompt registry) ───────────────────

_PROMPT_DATA: dict[str, str] = {
    "VERSION": "facts-v14-schema-retry-repair",
    "FACTS_SYSTEM_PROMPT": """Jesteś asystentem lekarza weterynarii opisującego badanie USG. \
Wyciągasz WYŁĄCZNIE to, co zostało dosłownie powiedziane w transkrypcji. \
Nigdy nie wnioskuj, nie uzupełniaj i nie interpretuj. \
Zwracasz TYLKO poprawny JSON, bez markdown i bez komentarzy.""",
    "FACTS_PROMPT": """Zwróć WYŁĄCZNIE poprawny JSON (bez komentarzy, bez markdown).

Struktura:
{{
  "exam": {{ "bodyRegion": string | null, "reason": string | null, "patientName": string | null }},
  "conditions": string[],
  "findings": string[],
  "measurements": {{ "structure": string, "value": number[], "unit": string | null, "location": string | null }}[]
}}

Zasady:
- Nie wymyślaj. Tylko to, co padło w transkrypcji.
- Jeśli brak -> null lub [].
- findings: każdy element w formacie "Narząd: opis" (np. "Wątroba: jednorodna, echogeniczność prawidłowa").
- conditions: warunki badania (sedacja, pozycja, współpraca pacjenta, widoczność).
- measurements: value zawsze tablica liczb (np. [8, 2]). NIE wpisuj pomiarów, jeśli w transkrypcji nie ma liczb.

TRANSKRYPCJA:
\"\"\"{transcript}\"\"\"""",
    "FACTS_RETRY_PREFIX": """BŁĄD: poprzednia odpowiedź była ucięta albo nie była poprawnym JSON.
Zwróć KOMPLETNY obiekt JSON, nie ucinaj go. Skróć opisy, jeśli to konieczne.

""",
}
