"""
Relay Services

- device_state.py - Device State Cache (latest snapshot, liveness)
- reset_coordinator.py - Reset Coordinator (single-slot reset handshake)
- fault_log.py - Fault ingestion and acknowledgment
- event_store.py - Durable fault event store backends
- tokens.py - User bearer tokens
- gateway_client.py - Optional reset wake-up push to the gateway
"""
