"""Field resolution against session records.

The telemetry API has gone through several schema shapes (nested
``app.name`` vs flat ``appName``, raw percentile fields vs aggregated
stat fields). Rules are written against stable dotted names; the alias
table maps those onto whatever the session actually carries, and generic
path traversal keeps every other field reachable.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from benchgate.core.coercion import as_number
from benchgate.models.sessions import Session
from benchgate.models.values import MISSING, ValueKind

Derivation = Callable[["FieldResolver", Session], object]


@dataclass(frozen=True, slots=True)
class FieldAlias:
    """A curated field path.

    Direct aliases try ``targets`` in order and then the literal path.
    Derived aliases compute their value from other fields instead.
    """

    path: str
    kind: ValueKind
    targets: tuple[str, ...] = ()
    derive: Derivation | None = None

    @property
    def is_derived(self) -> bool:
        return self.derive is not None


def _battery_drain(resolver: FieldResolver, session: Session) -> object:
    first = as_number(resolver.resolve(session, "battery.first"))
    last = as_number(resolver.resolve(session, "battery.last"))
    if first is None or last is None:
        return MISSING
    return first - last


def _direct(path: str, *targets: str, kind: ValueKind = ValueKind.number) -> FieldAlias:
    return FieldAlias(path=path, kind=kind, targets=targets)


_STRING = ValueKind.string
_BOOLEAN = ValueKind.boolean
_DATE = ValueKind.date

_ALIASES: tuple[FieldAlias, ...] = (
    # Frame rate
    _direct("fps.min", "fpsMin"),
    _direct("fps.max", "fpsMax"),
    _direct("fps.median", "fpsMedian"),
    _direct("fps.stability", "fpsStability"),
    _direct("fps.onePercentLow", "fpsOnePercentLow"),
    _direct("fps.stabilityIndex", "stabIndex"),
    # CPU / GPU
    _direct("cpu.min", "cpuUsageMin"),
    _direct("cpu.max", "cpuUsageMax"),
    _direct("cpu.median", "cpuUsageMedian"),
    _direct("cpu.avg", "cpuUsageAvg"),
    _direct("cpu.total", "totalCpuUsageAvg"),
    _direct("gpu.min", "gpuUsageMin"),
    _direct("gpu.max", "gpuUsageMax"),
    _direct("gpu.median", "gpuUsageMedian"),
    _direct("gpu.avg", "gpuUsageAvg"),
    # Memory
    _direct("memory.min", "memUsageMin"),
    _direct("memory.max", "memUsageMax"),
    _direct("memory.median", "memUsageMedian"),
    _direct("memory.avg", "memUsageAvg"),
    _direct("androidMemory.min", "androidMemUsageMin"),
    _direct("androidMemory.max", "androidMemUsageMax"),
    _direct("androidMemory.median", "androidMemUsageMedian"),
    _direct("androidMemory.avg", "androidMemUsageAvg"),
    # Battery and power
    _direct("battery.first", "firstBat"),
    _direct("battery.last", "lastBat"),
    FieldAlias(path="battery.drain", kind=ValueKind.number, derive=_battery_drain),
    _direct("power.usage", "powerUsage"),
    _direct("power.mWAvg", "mWAvg"),
    _direct("power.mAh", "mAh"),
    _direct("power.mAAvg", "mAAvg"),
    # Janks
    _direct("janks.big.count", "bigJanksCount"),
    _direct("janks.big.per10min", "bigJanks10Mins"),
    _direct("janks.small.count", "smallJanksCount"),
    _direct("janks.small.per10min", "smallJanks10Mins"),
    _direct("janks.total.count", "janksCount"),
    _direct("janks.total.per10min", "janks10Mins"),
    # App
    _direct("app.size", "appSize"),
    _direct("app.cache", "appCache"),
    _direct("app.data", "appData"),
    _direct("app.launchTime", "appLaunchTimeMs"),
    _direct("app.name", "appName", kind=_STRING),
    _direct("app.version", "appVersion", kind=_STRING),
    _direct("app.package", "app.packageName", "packageName", kind=_STRING),
    # Device
    _direct("device.model", "deviceModel", kind=_STRING),
    _direct("device.manufacturer", "manufacturer", kind=_STRING),
    _direct("device.memory.total", "totalDeviceMemory"),
    _direct("device.battery.capacity", "device.batteryCapacity"),
    _direct("device.battery.voltage", "device.batteryVoltage"),
    _direct("device.screen.width", "device.screenWidth"),
    _direct("device.screen.height", "device.screenHeight"),
    _direct("device.screen.refreshRate", "device.refreshRate"),
    _direct("device.cpu.cores", "device.cpu.numCores"),
    _direct("device.androidSdk", "device.androidSdkInt"),
    # Network
    _direct("network.received", "networkAppUsage.appTotalDataReceived"),
    _direct("network.sent", "networkAppUsage.appTotalDataSent"),
    # Session metadata
    _direct("session.id", "id", "uuid", kind=_STRING),
    _direct("session.duration", "timePlayed", "duration"),
    _direct("session.timestamp", "sessionDate", "startTime", kind=_DATE),
    _direct("session.date", "sessionDate", "startTime", kind=_DATE),
    _direct("session.timePushed", "timePushed", kind=_DATE),
    _direct("session.isActive", "isActive", kind=_BOOLEAN),
    _direct("session.isCharging", "isCharging", kind=_BOOLEAN),
    _direct("session.recordedBy", "recordedBy", "user.userPlayAccount", "userEmail", kind=_STRING),
)

ALIASES: Mapping[str, FieldAlias] = {alias.path: alias for alias in _ALIASES}


def traverse(session: object, field_path: str) -> object:
    """Walk *field_path* through nested mappings, sequences and attributes."""
    current: object = session
    for part in field_path.split("."):
        if current is None or current is MISSING:
            return MISSING
        current = _step(current, part)
    if current is None:
        return MISSING
    return current


def _step(container: object, key: str) -> object:
    if isinstance(container, Mapping):
        return container.get(key, MISSING)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if not (key.isascii() and key.isdigit()):
            return MISSING
        index = int(key)
        return container[index] if index < len(container) else MISSING
    if key.startswith("_"):
        return MISSING
    return getattr(container, key, MISSING)


class FieldResolver:
    """Resolve dotted field paths, consulting curated aliases first."""

    def __init__(self, aliases: Mapping[str, FieldAlias] | None = None) -> None:
        self._aliases: dict[str, FieldAlias] = dict(ALIASES if aliases is None else aliases)

    @property
    def aliases(self) -> Mapping[str, FieldAlias]:
        return self._aliases

    def alias_for(self, field_path: str) -> FieldAlias | None:
        return self._aliases.get(field_path)

    def alias_pairs(self) -> list[tuple[str, str]]:
        """Return ``(alias, primary target)`` pairs for every direct alias."""
        return [
            (alias.path, alias.targets[0])
            for alias in self._aliases.values()
            if not alias.is_derived and alias.targets
        ]

    def resolve(self, session: Session, field_path: str) -> object:
        alias = self._aliases.get(field_path)
        if alias is None:
            return traverse(session, field_path)
        if alias.derive is not None:
            return alias.derive(self, session)
        for target in alias.targets:
            value = traverse(session, target)
            if value is not MISSING:
                return value
        return traverse(session, field_path)


_DEFAULT_RESOLVER = FieldResolver()


def resolve(session: Session, field_path: str) -> object:
    return _DEFAULT_RESOLVER.resolve(session, field_path)


__all__ = ["ALIASES", "FieldAlias", "FieldResolver", "resolve", "traverse"]
