"""Core-trait tagging of journal entries.

Every entry is tagged with the one :class:`CoreTrait` its text speaks to
most directly.  The text is the entry's notes, emotion detail, market
conditions, followed rules and mistakes.  Checks run in order and the
first hit wins:

1. trait keyword tables, in trait order;
2. emotion words mapped to a trait;
3. the emotion detail on its own, through a looser stem table.

An entry matching nothing is :attr:`CoreTrait.UNKNOWN`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from trading_psychology.core.enums import CoreTrait

from .patterns import find_terms
from .record import JournalEntry

logger = logging.getLogger(__name__)

TRAIT_KEYWORDS: tuple[tuple[CoreTrait, tuple[str, ...]], ...] = (
    (CoreTrait.CONTROL, (
        "control", "manage", "discipline", "plan", "strategy", "stick to", "follow",
        "consistent", "organized", "system", "rule", "impulsive", "urge",
        "couldn't resist", "temptation", "patience", "rushed", "hasty", "deliberate",
        "structure", "procedure", "process",
    )),
    (CoreTrait.VALIDATION, (
        "validation", "acknowledge", "recognition", "proud", "prove", "respect",
        "achievement", "worth", "capable", "competent", "stupid", "dumb",
        "vindicated", "justified", "approval", "reputation",
    )),
    (CoreTrait.SAFETY, (
        "safe", "security", "protect", "risk", "danger", "threat", "preserve",
        "cautious", "careful", "prudent", "conservative", "stop loss", "hedge",
        "exposed", "vulnerable", "scared", "afraid", "fear", "worry", "anxious",
    )),
    (CoreTrait.CONNECTION, (
        "connect", "belong", "relationship", "community", "group", "team",
        "together", "consensus", "isolation", "alone", "supported", "abandoned",
        "follow others", "crowd", "herd", "majority",
    )),
    (CoreTrait.GROWTH, (
        "grow", "improve", "learn", "develop", "progress", "evolve", "knowledge",
        "skill", "challenge", "experiment", "explore", "discover", "master",
        "beginner",
    )),
    (CoreTrait.CONVICTION, (
        "knew this would work", "high probability", "everything lined up",
        "held despite", "didn't flinch", "went full size", "sized up",
        "pull the trigger", "conviction", "committed", "resolved", "determined",
        "decisive", "unwavering",
    )),
    (CoreTrait.FOCUS, (
        "fully present", "in the zone", "everything slowed down", "got distracted",
        "zoned out", "wasn't paying attention", "focus", "concentrated",
        "attentive", "mindful", "alert", "flow state",
    )),
    (CoreTrait.CONFIDENCE, (
        "i was ready", "felt sharp", "i can do this", "i've seen this before",
        "my process is working", "wasn't sure", "afraid to lose",
        "didn't believe", "felt off today", "confidence", "self-assured",
        "belief", "doubtful", "insecure",
    )),
)

EMOTION_TRAITS: tuple[tuple[str, CoreTrait], ...] = (
    ("frustrated", CoreTrait.CONTROL),
    ("overwhelmed", CoreTrait.CONTROL),
    ("powerless", CoreTrait.CONTROL),
    ("empowered", CoreTrait.CONTROL),
    ("chaotic", CoreTrait.CONTROL),
    ("accomplished", CoreTrait.VALIDATION),
    ("confident", CoreTrait.VALIDATION),
    ("disappointed", CoreTrait.VALIDATION),
    ("embarrassed", CoreTrait.VALIDATION),
    ("ashamed", CoreTrait.VALIDATION),
    ("worried", CoreTrait.SAFETY),
    ("fearful", CoreTrait.SAFETY),
    ("secure", CoreTrait.SAFETY),
    ("comfortable", CoreTrait.SAFETY),
    ("uncertain", CoreTrait.SAFETY),
    ("calm", CoreTrait.SAFETY),
    ("isolated", CoreTrait.CONNECTION),
    ("rejected", CoreTrait.CONNECTION),
    ("accepted", CoreTrait.CONNECTION),
    ("curious", CoreTrait.GROWTH),
    ("inspired", CoreTrait.GROWTH),
    ("bored", CoreTrait.GROWTH),
    ("stagnant", CoreTrait.GROWTH),
    ("certain", CoreTrait.CONVICTION),
    ("hesitant", CoreTrait.CONVICTION),
    ("engaged", CoreTrait.FOCUS),
    ("present", CoreTrait.FOCUS),
    ("distracted", CoreTrait.FOCUS),
)

# Stems looked for inside the emotion detail alone
_DETAIL_STEMS: tuple[tuple[CoreTrait, tuple[str, ...]], ...] = (
    (CoreTrait.CONTROL, ("control", "discipline")),
    (CoreTrait.VALIDATION, ("confidence", "proud")),
    (CoreTrait.SAFETY, ("safe", "secure", "anxious")),
    (CoreTrait.CONNECTION, ("connect", "support")),
    (CoreTrait.GROWTH, ("grow", "learn", "improve")),
    (CoreTrait.CONVICTION, ("certain", "decisive", "conviction")),
    (CoreTrait.FOCUS, ("focus", "present", "distract")),
    (CoreTrait.CONFIDENCE, ("confident", "believe", "self-doubt")),
)


def _entry_text(entry: JournalEntry) -> str:
    return " ".join(
        (
            entry.notes,
            entry.emotion_detail,
            entry.market_conditions,
            " ".join(entry.followed_rules),
            " ".join(entry.mistakes),
        )
    )


def entry_core_trait(entry: JournalEntry) -> CoreTrait:
    """Core trait of one journal entry."""
    text = _entry_text(entry)
    for trait, keywords in TRAIT_KEYWORDS:
        if find_terms(text, keywords):
            return trait
    for word, trait in EMOTION_TRAITS:
        if find_terms(text, (word,)):
            return trait
    detail = entry.emotion_detail.lower()
    if detail:
        for trait, stems in _DETAIL_STEMS:
            if any(s in detail for s in stems):
                return trait
    return CoreTrait.UNKNOWN


def core_trait_counts(entries: Iterable[JournalEntry]) -> dict[CoreTrait, int]:
    """Entries per core trait, most frequent first; absent traits omitted."""
    counts: dict[CoreTrait, int] = {}
    for entry in entries:
        trait = entry_core_trait(entry)
        counts[trait] = counts.get(trait, 0) + 1
    order = list(CoreTrait)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], order.index(kv[0])))
    return dict(ranked)


def entries_by_core_trait(
    entries: Sequence[JournalEntry],
) -> dict[CoreTrait, list[JournalEntry]]:
    """Entries grouped by core trait, in first-seen order."""
    groups: dict[CoreTrait, list[JournalEntry]] = {}
    for entry in entries:
        groups.setdefault(entry_core_trait(entry), []).append(entry)
    return groups
