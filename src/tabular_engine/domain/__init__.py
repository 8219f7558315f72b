"""Domain layer: records, selections, comparison and the operator algorithms."""
