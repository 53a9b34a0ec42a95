"""Server statistics for ``GET /api/sysinfo/cpu``.

Field names follow the shape the terminal renders: cpu, load, memory,
uptime, temperature. Anything the platform cannot report is omitted.
"""

from __future__ import annotations

import logging
import os
import platform
import time
from typing import Any

import psutil

logger = logging.getLogger(__name__)


def collect_server_stats() -> dict[str, Any]:
    """Snapshot CPU, load, memory, uptime and temperature."""
    stats: dict[str, Any] = {
        "success": True,
        "timestamp": int(time.time() * 1000),
        "cpu": _cpu_info(),
        "load": _load_info(),
        "memory": _memory_info(),
        "uptime": int(time.time() - psutil.boot_time()),
    }
    temperature = _temperature()
    if temperature is not None:
        stats["temperature"] = {"main": temperature}
    return stats


def _cpu_info() -> dict[str, Any]:
    brand = platform.processor() or platform.machine()
    return {
        "manufacturer": "",
        "brand": brand,
        "cores": psutil.cpu_count(logical=True),
        "physicalCores": psutil.cpu_count(logical=False),
    }


def _load_info() -> dict[str, Any]:
    # interval=None compares against the previous call, never blocks
    per_cpu = psutil.cpu_percent(interval=None, percpu=True)
    load: dict[str, Any] = {
        "currentLoad": sum(per_cpu) / len(per_cpu) if per_cpu else None,
        "cpus": [{"load": value} for value in per_cpu],
    }
    if hasattr(os, "getloadavg"):
        load["avgLoad"] = round(os.getloadavg()[0], 2)
    return load


def _memory_info() -> dict[str, Any]:
    mem = psutil.virtual_memory()
    return {"total": mem.total, "used": mem.total - mem.available}


def _temperature() -> float | None:
    sensors = getattr(psutil, "sensors_temperatures", None)
    if sensors is None:
        return None
    try:
        readings = sensors()
    except (OSError, RuntimeError) as e:
        logger.debug("Temperature sensors unavailable: %s", e)
        return None
    for entries in readings.values():
        for entry in entries:
            if entry.current:
                return round(entry.current, 1)
    return None
