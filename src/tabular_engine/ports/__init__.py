"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: the error contract offered to callers of the engine
- Outbound ports: record sources and sinks, offset stores

Adapters implement these ports with concrete functionality.
"""
