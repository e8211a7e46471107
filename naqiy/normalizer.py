"""
Ingredient Text Normalizer

Cleans real-world ingredient text (crowdsourced labels, OCR scans)
before it reaches the ruling resolver.

Pipeline order matters:
  1. Typographic apostrophes → ASCII
  2. OCR artifact repair       gé1atine → gélatine, a1cool → alcool
  3. E-code normalization      E.471 / E 471 / E-471 → e471
  4. Abbreviation expansion    veg. → vegetable
  5. Synonym injection         canonical forms appended after " | "

Injected synonyms never replace the original words. They are appended
so rules written against the canonical FR/EN names still fire on
DE/ES/IT/NL labels.
"""

from __future__ import annotations

import re
import unicodedata

# Replacement regex accepts "e471"; detection requires a separator so
# already-clean text is not flagged.
E_CODE_REPLACE_RE = re.compile(r"\bE[\s.\-]?(\d{3,4}[a-z]?)\b", re.IGNORECASE)
E_CODE_DETECT_RE = re.compile(r"\bE[\s.\-](\d{3,4}[a-z]?)\b", re.IGNORECASE)

OCR_FIXES = [
    (re.compile(r"gé1at", re.IGNORECASE), "gélat"),
    (re.compile(r"a1coo", re.IGNORECASE), "alcoo"),
    (re.compile(r"\bge1at", re.IGNORECASE), "gelat"),
    (re.compile(r"\b1ard\b", re.IGNORECASE), "lard"),
    (re.compile(r"\bsa1nd", re.IGNORECASE), "saind"),
    (re.compile(r"\bpo[r1]c\b", re.IGNORECASE), "porc"),
    (re.compile(r"\bw1ne\b", re.IGNORECASE), "wine"),
    (re.compile(r"\ba1coho", re.IGNORECASE), "alcoho"),
    (re.compile(r"\brenne[t7]\b", re.IGNORECASE), "rennet"),
    (re.compile(r"\bgelatlne\b", re.IGNORECASE), "gelatine"),
    (re.compile(r"\bgeiatine\b", re.IGNORECASE), "gélatine"),
    (re.compile(r"\balcohoi\b", re.IGNORECASE), "alcohol"),
]

ABBREVIATIONS = [
    (re.compile(r"\bveg\.\s*", re.IGNORECASE), "vegetable "),
    (re.compile(r"\bingr\.\s*", re.IGNORECASE), "ingrédients "),
    (re.compile(r"\borig\.\s*", re.IGNORECASE), "origine "),
    (re.compile(r"\bconc\.\s*", re.IGNORECASE), "concentré "),
    (re.compile(r"\bpast\.\s*", re.IGNORECASE), "pasteurisé "),
]

_MONO_ET_RE = re.compile(r"\bmono\s*-\s*et\b", re.IGNORECASE)
_APOSTROPHES_RE = re.compile("[‘’ʼ]")

# Multilingual name → canonical pattern known to the rule set
SYNONYMS: dict[str, str] = {
    # Gelatin
    "gelatina": "gélatine",
    "gelatine": "gélatine",
    "gelantine": "gélatine",
    "food gelatin": "gelatin",
    "bovine gelatin": "gélatine bovine halal",
    "porcine gelatin": "gélatine porcine",
    "pork gelatin": "gélatine porcine",
    "pig gelatin": "gélatine porcine",
    "schweine gelatine": "gélatine porcine",
    "varkengelatine": "gélatine porcine",
    "gelatina de cerdo": "gélatine porcine",
    "fish gelatin": "gélatine de poisson",
    "gelatina di pesce": "gélatine de poisson",
    # Fats
    "animal fat": "graisse animale",
    "grasa animal": "graisse animale",
    "tierisches fett": "graisse animale",
    "dierlijk vet": "graisse animale",
    "pork fat": "graisse de porc",
    "pig fat": "graisse de porc",
    "schweinefett": "graisse de porc",
    "grasa de cerdo": "graisse de porc",
    "manteca de cerdo": "saindoux",
    "strutto": "saindoux",
    "reuzel": "saindoux",
    "schweineschmalz": "saindoux",
    "schmaltz": "saindoux",
    "tallow": "suif",
    "beef tallow": "suif",
    "shortening": "graisse végétale ou animale",
    "duck fat": "graisse de canard",
    "goose fat": "graisse d'oie",
    # Pork
    "cerdo": "porc",
    "maiale": "porc",
    "schwein": "porc",
    "varken": "porc",
    "suino": "porc",
    # Alcohol
    "alkohol": "alcool",
    "etanolo": "éthanol",
    "etanol": "éthanol",
    "spirits": "alcool",
    "liqueur": "alcool",
    "liquor": "alcool",
    "cognac": "brandy",
    "armagnac": "brandy",
    "grappa": "brandy",
    "marc": "brandy",
    "kirsch": "alcool",
    "calvados": "alcool",
    "amaretto": "alcool",
    "kahlua": "alcool",
    "marsala": "alcool",
    "sherry": "alcool",
    "porto": "alcool",
    "port wine": "alcool",
    "cooking wine": "alcool",
    "vin de cuisine": "alcool",
    # Rennet
    "lab": "présure",
    "stremsel": "présure",
    "cuajo": "présure",
    "caglio": "présure",
    "animal rennet": "présure animale",
    "vegetable rennet": "présure microbienne",
    "microbial rennet": "présure microbienne",
    # Whey
    "molke": "lactosérum",
    "wei": "lactosérum",
    "suero de leche": "lactosérum",
    "siero di latte": "lactosérum",
    "whey powder": "whey",
    "whey protein": "whey",
    "whey permeate": "whey",
    "sweet whey": "whey",
    # Carmine / E120
    "karmin": "carmine",
    "karmijn": "carmine",
    "carmín": "carmine",
    "cochiniglia": "cochineal",
    "carmines": "carmine",
    "carminic acid": "carmine",
    "acide carminique": "carmine",
    "cochenille": "cochineal",
    "natural red 4": "carmine",
    "c.i. 75470": "carmine",
    # E471 / mono- and diglycerides
    "mono- and diglycerides": "mono-",
    "mono and diglycerides": "mono-",
    "mono- et diglycérides": "mono-",
    "mono et diglycerides": "mono-",
    "mono-und diglyceride": "mono-",
    "mono en diglyceriden": "mono-",
    "emulsifier e471": "e471",
    "emulsifiant e471": "e471",
    "émulsifiant e471": "e471",
    "emulgator e471": "e471",
    # L-cysteine / E920
    "l-cystein": "l-cystéine",
    "l-cisteina": "l-cystéine",
    "cysteine": "l-cystéine",
}

# Synonyms this short only count as standalone tokens ("lab" ≠ "lab-fermented")
_SHORT_SYNONYM_LEN = 3
_SHORT_SYNONYM_RES = {
    syn: re.compile(rf"(?<![a-zA-ZÀ-ɏ\d\-]){re.escape(syn)}(?![a-zA-ZÀ-ɏ\d\-])")
    for syn in SYNONYMS
    if len(syn) <= _SHORT_SYNONYM_LEN
}


def normalize_e_codes(text: str) -> str:
    return E_CODE_REPLACE_RE.sub(lambda m: f"e{m.group(1).lower()}", text)


def fix_ocr_artifacts(text: str) -> str:
    for pattern, replacement in OCR_FIXES:
        text = pattern.sub(replacement, text)
    return text


def expand_abbreviations(text: str) -> str:
    for pattern, replacement in ABBREVIATIONS:
        text = pattern.sub(replacement, text)
    return text


def strip_diacritics(text: str) -> str:
    """gélatine → gelatine, présure → presure."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def find_synonyms(text: str) -> list[str]:
    """Canonical forms for every known synonym in the text, first-seen order."""
    lower = text.lower()
    stripped = strip_diacritics(lower)
    injected: list[str] = []

    for synonym, canonical in SYNONYMS.items():
        short_re = _SHORT_SYNONYM_RES.get(synonym)
        if short_re is not None:
            found = short_re.search(lower) or short_re.search(stripped)
        else:
            found = synonym in lower or synonym in stripped
        if found and canonical not in injected:
            injected.append(canonical)
    return injected


def normalize_ingredient_text(raw: str) -> str:
    """
    Run the full cleaning pipeline over one ingredient text.

    Returns the cleaned text, with canonical synonyms appended after
    " | " when any were found.
    """
    text = _APOSTROPHES_RE.sub("'", raw or "")
    text = fix_ocr_artifacts(text)
    text = normalize_e_codes(text)
    text = _MONO_ET_RE.sub("mono- et", text)
    text = expand_abbreviations(text)

    injected = find_synonyms(text)
    if injected:
        text = f"{text} | {', '.join(injected)}"
    return text


def needs_normalization(text: str) -> bool:
    """Cheap pre-check so clean texts can skip the pipeline."""
    if E_CODE_DETECT_RE.search(text):
        return True
    if re.search(r"[a-z]\d[a-z]", text, re.IGNORECASE):
        return True
    if re.search(r"\b(?:veg|ingr|orig|conc|past)\.\s", text, re.IGNORECASE):
        return True
    if re.search(r"[äöüß]|ñ|[àòùèìíóú]", text, re.IGNORECASE):
        return True
    return False


def split_ingredients(text: str) -> list[str]:
    """
    Split an ingredient list on top-level commas and semicolons.

    Separators inside (), [] or {} stay put, so
    "chocolat (sucre, cacao), sel" gives ["chocolat (sucre, cacao)", "sel"].
    """
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text or "":
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        if ch in ",;" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    # Labels usually close with a full stop
    parts.append("".join(current).rstrip().rstrip("."))

    return [p.strip() for p in parts if p.strip()]
