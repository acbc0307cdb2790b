"""Domain layer: entities, paging envelopes, value objects and exceptions."""
