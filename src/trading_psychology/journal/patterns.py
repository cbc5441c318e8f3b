"""Rule-based behavioural pattern detection over reflection text.

Each bias category is described by one :class:`PatternRule` row in
:data:`PATTERN_RULES`: broad keywords, higher-signal phrases, optional
"smoking gun" keywords, and the keyword thresholds for each confidence
tier.  :func:`classify_category` applies any rule; there is no
per-category code.

Confidence tiers:

    High     >= 2 phrase hits, or >= 1 phrase hit and >= high_keyword_hits
             keyword hits, or any smoking-gun keyword
    Medium   exactly 1 phrase hit, or >= medium_keyword_hits keyword hits
    Low      anything else; reported as not detected

Terms match case-insensitively at the start of a word, so the stem
``frustrat`` matches "frustrated" but ``rush`` does not match "brush".

Usage::

    matches = classify_reflection("I got greedy and wanted more out of that trade")
    greed = matches[PatternCategory.GREED]
    print(greed.detected, greed.confidence)   # True Confidence.HIGH
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from trading_psychology.core.config import ClassifierConfig
from trading_psychology.core.enums import Confidence, PatternCategory

from .dedup import TradeSet
from .record import JournalEntry

logger = logging.getLogger(__name__)

INSUFFICIENT_TEXT = "Insufficient text to analyze"

_SENTENCE_SPLIT = re.compile(r"[.!?\n]+")


@dataclass(frozen=True)
class PatternRule:
    """Lexicons, thresholds and templates for one bias category.

    ``summaries`` holds three templates: explicit (a phrase matched),
    generic (keywords only), and not detected.
    """

    category: PatternCategory
    display_name: str
    keywords: tuple[str, ...]
    phrases: tuple[str, ...]
    summaries: tuple[str, str, str]
    tip: str
    smoking_guns: tuple[str, ...] = ()
    high_keyword_hits: int = 2
    medium_keyword_hits: int = 2

    @property
    def terms(self) -> tuple[str, ...]:
        return self.keywords + self.phrases + self.smoking_guns


PATTERN_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        category=PatternCategory.RUSHING_TO_FINISH,
        display_name="Rushed to Finish",
        keywords=(
            "rush", "hurry", "quick", "fast", "speed", "urgent", "impatient",
            "done with", "be done", "over with", "finish", "end session",
            "end the day", "get out", "leave",
        ),
        phrases=(
            "wanted to be done", "trying to finish", "needed it over",
            "forced a trade", "hurried through", "didn't take time",
            "too quickly", "tunnel vision", "rushing", "get it over with",
        ),
        summaries=(
            "Trader explicitly expressed rushing to finish the session",
            "Language indicates impatience and desire to end trading quickly",
            "No clear indicators of rushing to finish were detected",
        ),
        tip="Set a fixed session end and stop when your plan is complete "
            "rather than forcing one last trade",
        high_keyword_hits=3,
    ),
    PatternRule(
        category=PatternCategory.GIVING_BACK_PROFITS,
        display_name="Giving Back Profits",
        keywords=(
            "gave back", "giving back", "give back", "lost profit", "slippage",
            "profit gone", "erased gains", "reversed",
        ),
        phrases=(
            "gave it all back", "gave back my profits", "gave back all",
            "erased my gains", "turned a winner into a loser",
            "let a winner turn", "should have taken profit",
            "didn't take profit", "held too long", "watched my profit",
        ),
        summaries=(
            "Trader described giving back profits that were already earned",
            "Language suggests open profits slipped away before the exit",
            "No clear indicators of giving back profits were detected",
        ),
        tip="Consider implementing trailing stops or taking partial profits "
            "to protect gains",
        smoking_guns=("round tripped", "round-tripped"),
        medium_keyword_hits=1,
    ),
    PatternRule(
        category=PatternCategory.GREED,
        display_name="Greed",
        keywords=(
            "greed", "more profit", "bigger win", "too much", "excessive",
            "fomo", "fear of missing",
        ),
        phrases=(
            "got greedy", "wanted more", "held for more", "moved my target",
            "moved my take profit", "doubled down", "increased my size",
            "bigger position", "squeeze more", "didn't want to miss",
        ),
        summaries=(
            "Trader explicitly acknowledged greed in their decision making",
            "Language suggests a desire for outsized gains over the plan",
            "No clear indicators of greed were detected",
        ),
        tip="Greed often leads to poor risk management. Stick to your "
            "original plan and position sizing",
        smoking_guns=("greedy",),
        medium_keyword_hits=1,
    ),
    PatternRule(
        category=PatternCategory.FRUSTRATION_REGRET,
        display_name="Frustration & Regret",
        keywords=(
            "frustrat", "regret", "disappoint", "angry", "upset", "tilt",
            "annoyed", "furious",
        ),
        phrases=(
            "so frustrated", "kicking myself", "mad at myself",
            "angry at myself", "lost my temper", "can't believe i",
            "should have", "shouldn't have", "hate myself",
        ),
        summaries=(
            "Trader expressed frustration or regret about their trading",
            "Language reflects negative emotions that can lead to revenge trading",
            "No clear indicators of frustration or regret were detected",
        ),
        tip="These emotions often lead to revenge trading. Take a break when "
            "you notice these feelings",
        smoking_guns=("on tilt",),
        medium_keyword_hits=1,
    ),
    PatternRule(
        category=PatternCategory.RECENCY_BIAS,
        display_name="Recency Bias",
        keywords=(
            "last trade", "previous trade", "last time", "yesterday",
            "recent loss", "previous loss", "earlier loss", "revenge",
            "get back",
        ),
        phrases=(
            "make it back", "after that loss", "after my last loss",
            "still thinking about", "couldn't stop thinking about",
            "because of the last", "happen again", "same as last time",
            "recover my loss", "after yesterday",
        ),
        summaries=(
            "Trader's decisions were explicitly shaped by recent outcomes",
            "Language suggests recent trades are weighing on current decisions",
            "No clear indicators of recency bias were detected",
        ),
        tip="Judge each setup on its own merits and review your rules before "
            "entering after a notable win or loss",
        smoking_guns=("revenge trade", "revenge trading"),
        medium_keyword_hits=1,
    ),
    PatternRule(
        category=PatternCategory.POSITIVE_MINDSET,
        display_name="Positive Mindset",
        keywords=(
            "discipline", "patient", "patience", "calm", "focused", "clarity",
            "confident", "clear mind", "in sync", "in the zone", "grateful",
        ),
        phrases=(
            "followed my plan", "followed the plan", "stuck to my rules",
            "stuck to the plan", "waited for my setup", "waited for confirmation",
            "trusted my process", "stayed calm", "stayed patient", "took my time",
        ),
        summaries=(
            "Trader explicitly described disciplined, process-driven trading",
            "Language reflects a calm and focused trading mindset",
            "No clear indicators of a positive mindset were detected",
        ),
        tip="Keep doing what works and note the routine that put you in this "
            "state so you can repeat it",
    ),
)

RULES_BY_CATEGORY: dict[PatternCategory, PatternRule] = {r.category: r for r in PATTERN_RULES}


@functools.lru_cache(maxsize=None)
def _term_regex(term: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(term.lower()))


def _prepare(text: str) -> str:
    return text.lower().replace("’", "'")


def find_terms(text: str, terms: Iterable[str]) -> tuple[str, ...]:
    """Terms found in *text*, matched case-insensitively at a word start."""
    prepared = _prepare(text)
    return tuple(t for t in terms if _term_regex(t).search(prepared))


def _truncate(sentence: str, max_chars: int) -> str:
    if len(sentence) <= max_chars:
        return sentence
    return sentence[: max_chars - 3] + "..."


def extract_evidence(
    text: str, terms: Sequence[str], *, max_items: int = 3, max_chars: int = 60
) -> tuple[str, ...]:
    """Up to *max_items* sentences of *text* containing any of *terms*."""
    evidence: list[str] = []
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence = sentence.strip()
        if not sentence or not find_terms(sentence, terms):
            continue
        evidence.append(_truncate(sentence, max_chars))
        if len(evidence) >= max_items:
            break
    return tuple(evidence)


@dataclass(frozen=True)
class PatternMatch:
    """Classification of one text for one category."""

    category: PatternCategory
    detected: bool
    confidence: Confidence
    summary: str
    evidence: tuple[str, ...] = ()
    keyword_hits: tuple[str, ...] = ()
    phrase_hits: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        rule = RULES_BY_CATEGORY.get(self.category)
        return {
            "category": self.category.value,
            "name": rule.display_name if rule else self.category.value,
            "detected": self.detected,
            "confidence": self.confidence.value,
            "summary": self.summary,
            "evidence": list(self.evidence),
            "keywordHits": list(self.keyword_hits),
            "phraseHits": list(self.phrase_hits),
        }


def _confidence(rule: PatternRule, keywords: int, phrases: int, guns: int) -> Confidence:
    if guns or phrases >= 2 or (phrases >= 1 and keywords >= rule.high_keyword_hits):
        return Confidence.HIGH
    if phrases == 1 or keywords >= rule.medium_keyword_hits:
        return Confidence.MEDIUM
    return Confidence.LOW


def classify_category(
    text: str | None,
    rule: PatternRule,
    config: ClassifierConfig | None = None,
) -> PatternMatch:
    """Apply one rule to *text*.  Never raises."""
    config = config or ClassifierConfig()
    text = "" if text is None else str(text)
    if len(text.strip()) < config.min_text_length:
        return PatternMatch(
            category=rule.category,
            detected=False,
            confidence=Confidence.LOW,
            summary=INSUFFICIENT_TEXT,
        )

    keyword_hits = find_terms(text, rule.keywords)
    phrase_hits = find_terms(text, rule.phrases)
    gun_hits = find_terms(text, rule.smoking_guns)
    confidence = _confidence(rule, len(keyword_hits), len(phrase_hits), len(gun_hits))
    detected = confidence != Confidence.LOW

    explicit, generic, absent = rule.summaries
    if not detected:
        summary = absent
    elif phrase_hits or gun_hits:
        summary = explicit
    else:
        summary = generic

    evidence: tuple[str, ...] = ()
    if detected:
        evidence = extract_evidence(
            text,
            keyword_hits + phrase_hits + gun_hits,
            max_items=config.max_evidence,
            max_chars=config.evidence_max_chars,
        )

    return PatternMatch(
        category=rule.category,
        detected=detected,
        confidence=confidence,
        summary=summary,
        evidence=evidence,
        keyword_hits=keyword_hits + gun_hits,
        phrase_hits=phrase_hits,
    )


def classify_reflection(
    text: str | None,
    rules: Sequence[PatternRule] = PATTERN_RULES,
    config: ClassifierConfig | None = None,
) -> dict[PatternCategory, PatternMatch]:
    """Evaluate every rule independently against *text*."""
    return {rule.category: classify_category(text, rule, config) for rule in rules}


def detected_matches(matches: Mapping[PatternCategory, PatternMatch]) -> list[PatternMatch]:
    return [m for m in matches.values() if m.detected]


# ---------------------------------------------------------------------- #
# Profile across the journal                                               #
# ---------------------------------------------------------------------- #


@dataclass
class BehavioralPattern:
    """One category aggregated over all journal entries."""

    category: PatternCategory
    display_name: str
    tip: str
    entry_count: int = 0
    average_pnl: float = 0.0
    evidence: list[str] = field(default_factory=list)

    @property
    def detected(self) -> bool:
        return self.entry_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "name": self.display_name,
            "count": self.entry_count,
            "avgPnl": round(self.average_pnl, 2),
            "typicalPhrases": list(self.evidence),
            "tip": self.tip,
        }


def behavioral_profile(
    entries: Sequence[JournalEntry],
    trade_set: TradeSet,
    rules: Sequence[PatternRule] = PATTERN_RULES,
    config: ClassifierConfig | None = None,
) -> list[BehavioralPattern]:
    """Per-category entry counts, P&L of owned trades, and typical phrases.

    *trade_set* must come from deduplicating the same *entries* sequence.
    Only detected categories are returned, most frequent first.
    """
    config = config or ClassifierConfig()
    profile: list[BehavioralPattern] = []
    for rule in rules:
        pattern = BehavioralPattern(
            category=rule.category, display_name=rule.display_name, tip=rule.tip
        )
        pnls: list[float] = []
        for index, entry in enumerate(entries):
            match = classify_category(entry.notes, rule, config)
            if not match.detected:
                continue
            pattern.entry_count += 1
            pnls.extend(o.trade.net_pnl for o in trade_set.owned_by(index))
            for phrase in match.evidence:
                if phrase not in pattern.evidence and len(pattern.evidence) < config.max_evidence:
                    pattern.evidence.append(phrase)
        if pattern.detected:
            pattern.average_pnl = sum(pnls) / len(pnls) if pnls else 0.0
            profile.append(pattern)
    profile.sort(key=lambda p: p.entry_count, reverse=True)
    return profile
