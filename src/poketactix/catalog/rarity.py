"""Legendary and mythical species names."""

from __future__ import annotations

LEGENDARY_NAMES: frozenset[str] = frozenset({
    "articuno", "zapdos", "moltres", "mewtwo", "raikou", "entei", "suicune", "lugia", "ho-oh",
    "regirock", "regice", "registeel", "latias", "latios", "kyogre", "groudon", "rayquaza",
    "uxie", "mesprit", "azelf", "dialga", "palkia", "heatran", "regigigas", "giratina", "cresselia",
    "cobalion", "terrakion", "virizion", "tornadus", "thundurus", "reshiram", "zekrom", "landorus", "kyurem",
    "xerneas", "yveltal", "zygarde", "tapu-koko", "tapu-lele", "tapu-bulu", "tapu-fini",
    "cosmog", "cosmoem", "solgaleo", "lunala", "necrozma", "zamazenta", "zacian", "eternatus",
    "kubfu", "urshifu", "regieleki", "regidrago", "glastrier", "spectrier", "calyrex", "enamorus",
    "ting-lu", "chien-pao", "wo-chien", "chi-yu", "koraidon", "miraidon", "ogerpon",
})

MYTHICAL_NAMES: frozenset[str] = frozenset({
    "mew", "celebi", "jirachi", "deoxys", "phione", "manaphy", "darkrai", "shaymin", "arceus",
    "victini", "keldeo", "meloetta", "genesect", "diancie", "hoopa", "volcanion",
    "magearna", "marshadow", "zeraora", "meltan", "melmetal", "zarude",
})


def classify(name: str) -> tuple[bool, bool]:
    """Return ``(is_legendary, is_mythical)`` for a species name.

    Matching is case-insensitive; a mythical match wins over legendary.
    """
    key = name.lower()
    if key in MYTHICAL_NAMES:
        return False, True
    if key in LEGENDARY_NAMES:
        return True, False
    return False, False
