"""Close-match suggestions for unknown registry names."""

from __future__ import annotations

from collections.abc import Sequence
from difflib import get_close_matches


def suggest_names(name: str, options: Sequence[str]) -> list[str]:
    if not name or not options:
        return []
    lookup = {option.lower(): option for option in options}
    matches = get_close_matches(name.lower(), lookup.keys(), n=3, cutoff=0.6)
    return [lookup[match] for match in matches]


def format_unknown(kind: str, name: str, options: Sequence[str]) -> str:
    parts = [f"Unknown {kind} '{name}'.", f"Available: {', '.join(options)}."]
    suggestions = suggest_names(name, options)
    if suggestions:
        if len(suggestions) == 1:
            parts.append(f"Did you mean '{suggestions[0]}'?")
        else:
            parts.append("Did you mean one of: " + ", ".join(f"'{item}'" for item in suggestions) + "?")
    return " ".join(parts)


__all__ = ["suggest_names", "format_unknown"]
