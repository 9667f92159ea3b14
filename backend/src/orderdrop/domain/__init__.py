"""Domain layer: request lifecycle, ports, and upload rules."""
