"""
Intent Classification
Matches an utterance against an ordered rule set and extracts entities
for the winning rule.
"""

from __future__ import annotations

from typing import Sequence

from .schemas import Entity, IntentReading, IntentRule


ENTITY_CONFIDENCE = 0.8


def _pattern_matches(text: str, patterns: Sequence[str]) -> list[str]:
    return [p for p in patterns if p.lower() in text]


def extract_entities(text: str, rule: IntentRule) -> list[Entity]:
    """
    One entity per extractor pattern found in text.
    The value is the pattern itself, not the span of the utterance it matched.
    """
    entities: list[Entity] = []
    for extractor in rule.entities:
        for pattern in _pattern_matches(text, extractor.patterns):
            entities.append(Entity(type=extractor.type, value=pattern, confidence=ENTITY_CONFIDENCE))
    return entities


def rule_confidence(text: str, rule: IntentRule) -> float:
    """Share of the rule's patterns present in text (already lower-cased)."""
    if not rule.patterns:
        return 0.0
    return len(_pattern_matches(text, rule.patterns)) / len(rule.patterns)


def classify_intent(text: str, rules: Sequence[IntentRule]) -> IntentReading:
    """
    Pick the rule with the highest pattern coverage that clears its own threshold.
    Returns: IntentReading, category "unknown" when no rule qualifies.

    Replacement needs a strictly higher confidence, so on a tie the rule
    earlier in `rules` keeps the win.
    """
    text = (text or "").lower()
    best = IntentReading(category="unknown", confidence=0.0, entities=[])

    for rule in rules:
        confidence = rule_confidence(text, rule)
        if confidence == 0.0:
            continue
        if confidence >= rule.required_confidence and confidence > best.confidence:
            best = IntentReading(
                category=rule.category,
                confidence=confidence,
                entities=extract_entities(text, rule),
            )

    return best
