"""
Telemetry - budget snapshots of completed contract calls.
"""
