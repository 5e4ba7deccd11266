"""
Default rule tables - the seeded intent set and the "default" emotion model.
Seeded once by initialize_defaults; the classifier and scorer receive them
as plain arguments afterwards.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .schemas import EmotionKeywords, EmotionModel, EntityExtractor, IntensityModifier, IntentRule

if TYPE_CHECKING:
    from .store import MongoStore


logger = logging.getLogger(__name__)


DEFAULT_MODEL_NAME = "default"


DEFAULT_INTENTS: list[IntentRule] = [
    IntentRule(
        category="greeting",
        patterns=["hello", "hi", "hey", "good morning", "good afternoon", "good evening"],
        responses=[
            "Hello! How can I help you today?",
            "Hi there! What can I do for you?",
            "Hey! I'm here to assist you.",
        ],
        entities=[],
        required_confidence=0.7,
    ),
    IntentRule(
        category="weather",
        patterns=["weather", "temperature", "forecast", "rain", "sunny", "cloudy"],
        responses=[
            "I'd be happy to help with weather information. What location are you interested in?",
            "Let me check the weather for you. Which city?",
        ],
        entities=[
            EntityExtractor(type="location", patterns=["in", "at", "for", "city", "town"]),
        ],
        required_confidence=0.8,
    ),
    IntentRule(
        category="music",
        patterns=["play music", "song", "artist", "album", "playlist", "tune"],
        responses=[
            "I'd love to help with music! What would you like to listen to?",
            "Great choice! What genre or artist are you in the mood for?",
        ],
        entities=[
            EntityExtractor(type="genre", patterns=["rock", "pop", "jazz", "classical", "hip hop", "electronic"]),
            EntityExtractor(type="artist", patterns=["by", "from", "artist"]),
        ],
        required_confidence=0.75,
    ),
    IntentRule(
        category="reminder",
        patterns=["remind me", "reminder", "don't forget", "schedule", "appointment"],
        responses=[
            "I'll help you set a reminder. What should I remind you about?",
            "Sure! When would you like to be reminded?",
        ],
        entities=[
            EntityExtractor(type="time", patterns=["at", "in", "tomorrow", "today", "next week", "minutes", "hours"]),
        ],
        required_confidence=0.8,
    ),
    IntentRule(
        category="emotion_support",
        patterns=["sad", "depressed", "anxious", "worried", "stressed", "upset"],
        responses=[
            "I'm sorry you're feeling this way. Would you like to talk about it?",
            "I understand this might be difficult. I'm here to listen.",
            "It's okay to feel this way sometimes. How can I support you?",
        ],
        entities=[],
        required_confidence=0.6,
    ),
    IntentRule(
        category="question",
        patterns=["what", "how", "when", "where", "why", "who", "tell me", "explain", "define"],
        responses=[
            "Let me find that information for you.",
            "I'll look that up right away.",
        ],
        entities=[],
        required_confidence=0.5,
    ),
]


DEFAULT_EMOTION_MODEL = EmotionModel(
    name=DEFAULT_MODEL_NAME,
    emotion_keywords=EmotionKeywords(
        happy=["happy", "joy", "excited", "great", "awesome", "wonderful", "fantastic", "amazing", "love", "perfect"],
        sad=["sad", "depressed", "down", "unhappy", "miserable", "terrible", "awful", "disappointed", "hurt", "cry"],
        angry=["angry", "mad", "furious", "annoyed", "irritated", "frustrated", "hate", "disgusted", "outraged"],
        fear=["scared", "afraid", "terrified", "worried", "anxious", "nervous", "panic", "frightened"],
        surprise=["surprised", "shocked", "amazed", "astonished", "wow", "incredible", "unbelievable"],
        neutral=["okay", "fine", "normal", "regular", "standard", "typical", "usual"],
    ),
    intensity_modifiers=[
        IntensityModifier(word="very", multiplier=1.5),
        IntensityModifier(word="extremely", multiplier=2.0),
        IntensityModifier(word="really", multiplier=1.3),
        IntensityModifier(word="quite", multiplier=1.2),
        IntensityModifier(word="somewhat", multiplier=0.8),
        IntensityModifier(word="slightly", multiplier=0.6),
    ],
)


async def initialize_defaults(store: MongoStore) -> bool:
    """
    Seed default intents and the default emotion model.
    No-op when any intent already exists. Returns True when seeding happened.
    """
    if await store.has_intents():
        logger.debug("[Defaults] Intents already present, skipping seed")
        return False

    await store.insert_intents(DEFAULT_INTENTS)
    await store.insert_emotion_model(DEFAULT_EMOTION_MODEL)
    logger.info("[Defaults] Seeded %d intents and emotion model '%s'", len(DEFAULT_INTENTS), DEFAULT_MODEL_NAME)
    return True
