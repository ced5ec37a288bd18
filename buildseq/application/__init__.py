"""Application services orchestrating the scheduling engine."""
