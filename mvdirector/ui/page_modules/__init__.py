"""One page module per workflow step."""
