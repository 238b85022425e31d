"""
Enrichment services for message classification.
"""

from .gemini_classifier import GeminiClassifier, MessageClassification

__all__ = ["GeminiClassifier", "MessageClassification"]
