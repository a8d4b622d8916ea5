"""VisiAI scan pipeline: orchestration, aggregation and report models."""
