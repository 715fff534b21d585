"""Impression extraction prompt templates (clinician's spoken assessment)."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "VERSION": "impression-v9-json-tags-stop-retry-pl",
    "IMPRESSION_SYSTEM_PROMPT": """Jesteś asystentem lekarza weterynarii. \
Odpowiadaj WYŁĄCZNIE po polsku. \
Wyciągasz tylko to, co lekarz dosłownie powiedział, nigdy nie wnioskujesz. \
Masz zwrócić TYLKO poprawny JSON w tagach <json>...</json>, bez markdown, bez komentarzy, bez dopisków.""",
    "IMPRESSION_PROMPT": """Wyciągnij WYŁĄCZNIE informacje, które padły w transkrypcji. Nie wymyślaj.
Braki -> null lub [].
Maksymalnie {max_quotes} krótkie cytaty w "quotes".

Struktura JSON:
{{
  "doctorOverall": string | null,
  "doctorKeyConcerns": string[],
  "doctorPlan": string[],
  "doctorRedFlags": string[],
  "quotes": string[],
  "consentRecording": "yes" | "no" | null
}}

Zwróć w tagach:
<json>{{...}}</json>

TRANSKRYPCJA (końcówka):
\"\"\"{transcript}\"\"\"""",
    "IMPRESSION_RETRY_PROMPT": """BŁĄD: poprzednia odpowiedź była niepoprawna (ucięty/nie-JSON albo zły język).
Zwróć ponownie KOMPLETNY, poprawny JSON w tagach <json>...</json>. Nie ucinaj.
Tylko po polsku. Bez żadnych dopisków.
Jeśli nie ma danych -> null lub [].

Struktura JSON:
{{
  "doctorOverall": string | null,
  "doctorKeyConcerns": string[],
  "doctorPlan": string[],
  "doctorRedFlags": string[],
  "quotes": string[],
  "consentRecording": "yes" | "no" | null
}}

TRANSKRYPCJA (końcówka):
\"\"\"{transcript}\"\"\"""",
}
