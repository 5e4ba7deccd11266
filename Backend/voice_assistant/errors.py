"""
Error taxonomy for the voice pipeline.

Unauthenticated and ConfigurationMissing abort a request.
RemoteServiceUnavailable and NoProviderConfigured are absorbed by the
response fallback ladder and never reach the caller of process_voice_input.
"""
from __future__ import annotations


class VoiceAssistantError(Exception):
    """Base class for every error raised by the pipeline."""


class Unauthenticated(VoiceAssistantError):
    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class ConfigurationMissing(VoiceAssistantError):
    pass


class RemoteServiceUnavailable(VoiceAssistantError):
    pass


class NoProviderConfigured(VoiceAssistantError):
    pass
