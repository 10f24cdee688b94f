"""
Schema registry - the process-wide catalog of message types.

The catalog is checked once when the registry is built. A malformed schema
(duplicate ids or field names, missing options, a default the field kind cannot
hold) raises SchemaIntegrityError and the registry is never served.
"""

import math
from typing import Dict, Iterable, List, Optional

from util.logging import logger
from .errors import SchemaIntegrityError
from .schema import FieldKind, FieldSpec, MessageSchema


MESSAGE_TYPES: List[MessageSchema] = [
    MessageSchema(
        id="sensor-config",
        name="Sensor Configuration",
        description="Configure sensor parameters, sampling rates and thresholds",
        fields=(
            FieldSpec("sensorId", "Sensor ID", FieldKind.TEXT, required=True),
            FieldSpec("sensorType", "Sensor Type", FieldKind.DROPDOWN,
                      options=("Temperature", "Humidity", "Pressure", "Light"), default_value="Temperature"),
            FieldSpec("sampleRate", "Sample Rate (Hz)", FieldKind.NUMBER, default_value=1),
            FieldSpec("threshold", "Threshold", FieldKind.NUMBER, default_value=25),
            FieldSpec("unit", "Unit", FieldKind.DROPDOWN, options=("Celsius", "Fahrenheit"), default_value="Celsius"),
            FieldSpec("enabled", "Sensor Enabled", FieldKind.BOOLEAN, default_value=True),
            FieldSpec("calibrationMode", "Calibration Mode", FieldKind.RADIO,
                      options=("Auto", "Manual", "Factory"), default_value="Auto"),
            FieldSpec("alertLevel", "Alert Level", FieldKind.RADIO,
                      options=("Low", "Medium", "High"), default_value="Medium"),
        ),
    ),
    MessageSchema(
        id="communication",
        name="Communication Settings",
        description="Configure network and communication parameters",
        fields=(
            FieldSpec("protocol", "Protocol", FieldKind.DROPDOWN,
                      options=("WiFi", "Bluetooth", "LoRa", "Ethernet", "MQTT"), required=True),
            FieldSpec("networkName", "Network Name", FieldKind.TEXT, required=True),
            FieldSpec("networkPassword", "Network Password", FieldKind.TEXT),
            FieldSpec("endpoint", "Endpoint", FieldKind.TEXT, default_value="broker.example.com"),
            FieldSpec("port", "Port", FieldKind.NUMBER, default_value=1883),
            FieldSpec("encryption", "Encryption Enabled", FieldKind.BOOLEAN, default_value=True),
            FieldSpec("encryptionType", "Encryption Type", FieldKind.DROPDOWN,
                      options=("WPA2", "WPA3", "WEP", "Open"), default_value="WPA2"),
            FieldSpec("retryAttempts", "Retry Attempts", FieldKind.NUMBER, default_value=3),
            FieldSpec("timeoutDuration", "Timeout Duration (seconds)", FieldKind.NUMBER, default_value=30),
            FieldSpec("keepAliveInterval", "Keep Alive Interval (seconds)", FieldKind.NUMBER, default_value=60),
            FieldSpec("autoReconnect", "Auto Reconnect", FieldKind.BOOLEAN, default_value=True),
            FieldSpec("connectionPriority", "Connection Priority", FieldKind.RADIO,
                      options=("High", "Medium", "Low"), default_value="Medium"),
            FieldSpec("dataCompression", "Data Compression", FieldKind.BOOLEAN, default_value=False),
            FieldSpec("compressionLevel", "Compression Level", FieldKind.DROPDOWN,
                      options=("None", "Low", "Medium", "High"), default_value="None"),
            FieldSpec("bufferSize", "Buffer Size (KB)", FieldKind.NUMBER, default_value=1024),
            FieldSpec("maxPacketSize", "Max Packet Size (bytes)", FieldKind.NUMBER, default_value=1500),
            FieldSpec("qualityOfService", "Quality of Service", FieldKind.DROPDOWN,
                      options=("Best Effort", "Assured Forwarding", "Expedited Forwarding"),
                      default_value="Best Effort"),
            FieldSpec("backupProtocol", "Backup Protocol", FieldKind.DROPDOWN,
                      options=("None", "Cellular", "Satellite", "LoRa"), default_value="None"),
            FieldSpec("firewallEnabled", "Firewall Enabled", FieldKind.BOOLEAN, default_value=True),
            FieldSpec("securityLevel", "Security Level", FieldKind.RADIO,
                      options=("Basic", "Enhanced", "Maximum"), default_value="Enhanced"),
        ),
    ),
    MessageSchema(
        id="power",
        name="Power Management",
        description="Configure power saving and battery settings",
        fields=(
            FieldSpec("mode", "Power Mode", FieldKind.RADIO,
                      options=("Performance", "Balanced", "Power Saver"), default_value="Balanced"),
            FieldSpec("sleepInterval", "Sleep Interval (minutes)", FieldKind.NUMBER, default_value=5),
            FieldSpec("wakeOnMotion", "Wake on Motion", FieldKind.BOOLEAN, default_value=False),
            FieldSpec("batteryThreshold", "Low Battery Threshold (%)", FieldKind.NUMBER, default_value=20),
        ),
    ),
]


def _default_is_legal(spec: FieldSpec) -> bool:
    value = spec.default_value
    if spec.kind == FieldKind.TEXT:
        return isinstance(value, str)
    if spec.kind == FieldKind.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
    if spec.kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    return value in spec.options


def check_schema(schema: MessageSchema) -> None:
    """Raise SchemaIntegrityError if the schema breaks a load-time invariant."""
    seen = set()
    for spec in schema.fields:
        where = f"{schema.id}.{spec.name}"
        if spec.name in seen:
            raise SchemaIntegrityError(f"Duplicate field name '{spec.name}' in schema '{schema.id}'")
        seen.add(spec.name)

        if not isinstance(spec.kind, FieldKind):
            raise SchemaIntegrityError(f"{where}: unknown field kind {spec.kind!r}")

        if spec.kind.is_enumerated and not spec.options:
            raise SchemaIntegrityError(f"{where}: {spec.kind.value} field requires options")
        if not spec.kind.is_enumerated and spec.options:
            raise SchemaIntegrityError(f"{where}: {spec.kind.value} field cannot declare options")

        if spec.has_default and not _default_is_legal(spec):
            raise SchemaIntegrityError(
                f"{where}: default {spec.default_value!r} is not a legal {spec.kind.value} value"
            )


class SchemaRegistry:
    """Read-only catalog of message schemas."""

    def __init__(self, schemas: Iterable[MessageSchema]):
        self._schemas: List[MessageSchema] = list(schemas)
        self._by_id: Dict[str, MessageSchema] = {}

        for schema in self._schemas:
            if schema.id in self._by_id:
                raise SchemaIntegrityError(f"Duplicate schema id '{schema.id}'")
            check_schema(schema)
            self._by_id[schema.id] = schema

        logger.log_registry_load([s.id for s in self._schemas])

    def get_all(self) -> List[MessageSchema]:
        return list(self._schemas)

    def get_by_id(self, schema_id: str) -> Optional[MessageSchema]:
        return self._by_id.get(schema_id)

    def __len__(self) -> int:
        return len(self._schemas)

    def __contains__(self, schema_id: str) -> bool:
        return schema_id in self._by_id


_registry: Optional[SchemaRegistry] = None


def get_registry() -> SchemaRegistry:
    """Get the process-wide registry, building it on first use."""
    global _registry
    if _registry is None:
        _registry = SchemaRegistry(MESSAGE_TYPES)
    return _registry
