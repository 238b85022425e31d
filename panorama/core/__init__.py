"""Core retrieval pipeline: configuration, message models and the Slack client."""
