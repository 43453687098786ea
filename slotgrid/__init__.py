"""Group scheduling service: slot-index model, availability aggregation and HTTP API."""
