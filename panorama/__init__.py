"""Support Panorama: Slack support messages classified by an LLM."""

__version__ = "0.1.0"
