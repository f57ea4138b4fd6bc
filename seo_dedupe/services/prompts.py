from __future__ import annotations

from collections.abc import Callable
from enum import Enum

"""Prompt templates for rewriting duplicated catalog text (Dutch storefront).

Each template is a pure function (original_text, handle) -> prompt.
"""

__all__ = [
    "FieldCategory",
    "title_prompt",
    "description_prompt",
    "html_prompt",
    "general_prompt",
    "build_prompt",
]


class FieldCategory(Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    HTML = "html"
    GENERAL = "general"


COLOR_KEYWORDS = (
    "zwart", "wit", "rood", "blauw", "groen", "geel", "grijs", "bruin", "oranje",
    "paars", "roze", "beige", "silver", "gold", "mat", "glanzend", "metallic",
)


def _color_hint(handle: str) -> str:
    lowered = handle.lower()
    for color in COLOR_KEYWORDS:
        if color in lowered:
            return f'\nKleur informatie uit handle: "{color}"'
    return ""


def title_prompt(text: str, handle: str) -> str:
    return f"""Genereer een unieke variatie van deze producttitel in het Nederlands, met behoud van de betekenis en structuur:

    Titel: "{text}"
    Handle: "{handle}"{_color_hint(handle)}

    Vereisten:
        - Behoud de belangrijkste zoekwoorden en productinformatie
        - Zorg dat eventuele kleur- of stijlinformatie uit de handle behouden blijft
        - Gebruik synoniemen of herschik de volgorde subtiel
        - Houd de lengte en het format vergelijkbaar (kort, scanbaar, geen overbodige woorden)
        - Gebruik geen extra marketingtaal of creatieve toevoegingen
        - Behoud consistentie in stijl (zoals gebruik van "|" of koppeltekens)
        - Geef alleen de nieuwe titel terug, geen uitleg en geen extra tekst
        - De output moet volledig in het Nederlands zijn"""


def description_prompt(text: str, handle: str) -> str:
    return f"""Genereer een unieke variatie van deze korte productomschrijving (meta description) in het Nederlands:

    Omschrijving: "{text}"
    Handle: "{handle}"

    Vereisten:
        - Behoud alle feitelijke productinformatie en zoekwoorden
        - Gebruik andere zinsstructuren en synoniemen
        - Houd de lengte vergelijkbaar (maximaal ongeveer 160 tekens)
        - Geen nieuwe claims, prijzen of acties toevoegen
        - Geef alleen de nieuwe omschrijving terug, geen uitleg en geen aanhalingstekens
        - De output moet volledig in het Nederlands zijn"""


def html_prompt(html: str, handle: str) -> str:
    return f'''Genereer een unieke variatie van deze productbeschrijving in HTML, met behoud van de betekenis:

Beschrijving (HTML): """{html}"""
Handle: "{handle}"

Vereisten:
    - Behoud alle belangrijke informatie en verkooppunten
    - Gebruik andere zinsstructuren en synoniemen waar mogelijk
    - Houd de HTML-structuur functioneel gelijk (zoals <ul>, <p>, <strong>, enz.)
    - Geen toevoegingen of creatieve uitbreidingen
    - Houd de lengte vergelijkbaar
    - Behoud dezelfde toon en stijl
    - Geef alleen de nieuwe HTML-beschrijving terug, geen uitleg en geen extra tekst
    - De output moet volledig in het Nederlands zijn
    - Geef alleen de herschreven HTML terug, zonder aanhalingstekens of andere tekens eromheen
    - BELANGRIJK: Begin je antwoord NOOIT met drie aanhalingstekens (""") of andere markeringen
    - Begin je antwoord direct met de HTML-tag (bijvoorbeeld <p> of <div>)
    '''


def general_prompt(text: str, handle: str) -> str:
    return f"""Herschrijf de volgende tekst tot een unieke variatie in het Nederlands, met exact dezelfde betekenis:

    Tekst: "{text}"
    Handle: "{handle}"

    Vereisten:
        - Behoud alle informatie, getallen en eenheden
        - Houd de lengte en het format vergelijkbaar
        - Geen toevoegingen of weglatingen
        - Geef alleen de herschreven tekst terug, geen uitleg en geen extra tekst"""


PROMPT_BUILDERS: dict[FieldCategory, Callable[[str, str], str]] = {
    FieldCategory.TITLE: title_prompt,
    FieldCategory.DESCRIPTION: description_prompt,
    FieldCategory.HTML: html_prompt,
    FieldCategory.GENERAL: general_prompt,
}


def build_prompt(category: FieldCategory, text: str, handle: str) -> str:
    return PROMPT_BUILDERS[category](text, handle)
