"""Schema-driven configuration console for an IoT device."""

__version__ = "1.0.0"
