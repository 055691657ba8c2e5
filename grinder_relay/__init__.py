"""
Grinder Telemetry Relay

Central service between the grinder gateway and dashboard users:
- Device State Cache - latest snapshot with read-time liveness
- Reset Coordinator - single-slot reset handshake
- Fault Log - fault event ingestion and acknowledgment
"""

__version__ = "1.0.0"
