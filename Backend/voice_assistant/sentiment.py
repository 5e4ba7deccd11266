"""
Keyword-based sentiment scorer.

Keywords and intensity modifiers are matched as plain substrings of the
lower-cased text, so "sad" also fires inside longer words. That
over-inclusiveness is a known limitation of the keyword tables.
"""
from __future__ import annotations

from .schemas import EMOTIONS, EmotionModel, SentimentReading


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def intensity_multiplier(text: str, model: EmotionModel) -> float:
    """Largest multiplier among modifier words present in text, 1.0 if none. Multipliers never stack."""
    multiplier = 1.0
    for modifier in model.intensity_modifiers:
        if modifier.word.lower() in text:
            multiplier = max(multiplier, modifier.multiplier)
    return multiplier


def score_sentiment(text: str, model: EmotionModel) -> SentimentReading:
    text = (text or "").lower()
    multiplier = intensity_multiplier(text, model)

    scores = {emotion: 0.0 for emotion in EMOTIONS}
    total_matches = 0
    for emotion in EMOTIONS:
        for keyword in getattr(model.emotion_keywords, emotion):
            if keyword.lower() in text:
                scores[emotion] += multiplier
                total_matches += 1

    if total_matches == 0:
        return SentimentReading(emotion="neutral", confidence=1.0, valence=0.0, arousal=0.0)

    for emotion in scores:
        scores[emotion] /= total_matches

    dominant = EMOTIONS[0]
    for emotion in EMOTIONS[1:]:
        if scores[emotion] > scores[dominant]:
            dominant = emotion

    valence = (scores["happy"] + scores["surprise"]) - (scores["sad"] + scores["angry"] + scores["fear"])
    arousal = scores["angry"] + scores["fear"] + scores["surprise"] + scores["happy"] * 0.5

    return SentimentReading(
        emotion=dominant,
        confidence=_clamp(scores[dominant], 0.0, 1.0),
        valence=_clamp(valence, -1.0, 1.0),
        arousal=_clamp(arousal, 0.0, 1.0),
    )
