"""
Battery telemetry daemon package.

Samples the machine battery through UPower, normalizes the human-oriented
text dump into an immutable BatterySnapshot, and publishes it for display
consumers (listeners, a JSON state file, and an optional read-only HTTP API).

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""
