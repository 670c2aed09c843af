"""SKOS concepts of a controlled vocabulary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Optional

from .identity import EntityIdentity


class MatchStrategy(IntFlag):
    """Ways a text value may match a vocabulary concept; combine with `|`."""

    ID = 1
    NOTATION = 2
    PREF_LABEL = 4
    ALT_LABEL = 8
    ALL = 255


def value_in_lang(values: dict[str, str], lang: str, fallback_lang: Optional[str] = "en") -> str:
    """Pick a language-keyed value: `lang`, then `fallback_lang`, then any, then ""."""
    if lang in values:
        return values[lang]
    if fallback_lang is not None and fallback_lang in values:
        return values[fallback_lang]
    for value in values.values():
        return value
    return ""


@dataclass
class VocabConcept:
    """A concept of one resolved vocabulary snapshot.

    `broader` and `narrower` reference other concepts of the same snapshot and
    may form cycles, so they are left out of equality and repr.
    """

    identity: EntityIdentity
    uri: str
    notation: list[str] = field(default_factory=list)
    pref_label: dict[str, str] = field(default_factory=dict)
    alt_label: dict[str, str] = field(default_factory=dict)
    broader: list["VocabConcept"] = field(default_factory=list, compare=False, repr=False)
    narrower: list["VocabConcept"] = field(default_factory=list, compare=False, repr=False)

    @property
    def ids(self) -> tuple[str, ...]:
        return self.identity.uris

    @property
    def broader_uris(self) -> list[str]:
        return [c.uri for c in self.broader]

    @property
    def narrower_uris(self) -> list[str]:
        return [c.uri for c in self.narrower]

    def get_label(self, lang: str, fallback_lang: str = "en") -> str:
        """Preferred label in `lang`, falling back through alternate labels.

        Order: prefLabel[lang], altLabel[lang], prefLabel[fallback],
        altLabel[fallback], any prefLabel, any altLabel.
        """
        for code in (lang, fallback_lang):
            if code in self.pref_label:
                return self.pref_label[code]
            if code in self.alt_label:
                return self.alt_label[code]
        return value_in_lang(self.pref_label, lang, None) or value_in_lang(self.alt_label, lang, None)

    def matches(self, text: str, strategy: MatchStrategy) -> bool:
        """Whether `text` equals a notation or label selected by `strategy`."""
        if strategy & MatchStrategy.NOTATION and text in self.notation:
            return True
        if strategy & MatchStrategy.PREF_LABEL and text in self.pref_label.values():
            return True
        if strategy & MatchStrategy.ALT_LABEL and text in self.alt_label.values():
            return True
        return False
