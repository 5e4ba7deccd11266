"""Voice assistant backend: sentiment, intent, and reply pipeline."""
