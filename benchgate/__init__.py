"""Rule-based validation of game performance telemetry sessions."""
