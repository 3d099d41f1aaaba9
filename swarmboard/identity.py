"""Who am I? Snapshot of the container/host serving the current request."""

import os
import platform
import socket
import time
from datetime import datetime, timezone

UNKNOWN = "unknown"

_STARTED = time.time()


def _env(*names):
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return UNKNOWN


def get_hostname():
    try:
        return socket.gethostname() or UNKNOWN
    except OSError:
        return UNKNOWN


def get_container_id():
    # Docker sets HOSTNAME to the short container id
    value = _env("CONTAINER_ID", "HOSTNAME")
    return value if value == UNKNOWN else value[:12]


def container_identity():
    return get_hostname(), get_container_id()


def _load_average():
    try:
        return [round(x, 2) for x in os.getloadavg()]
    except (AttributeError, OSError):
        return [0, 0, 0]


def _memory_mb():
    """(total, free) in MB from /proc/meminfo, zeros where unavailable."""
    try:
        with open("/proc/meminfo") as f:
            meminfo = {}
            for line in f:
                parts = line.split()
                if len(parts) >= 2:
                    meminfo[parts[0].rstrip(":")] = int(parts[1])
    except (OSError, ValueError):
        return 0, 0
    total = meminfo.get("MemTotal", 0) // 1024
    free = meminfo.get("MemAvailable", meminfo.get("MemFree", 0)) // 1024
    return total, free


def utcnow_iso():
    return datetime.now(timezone.utc).isoformat()


def get_snapshot():
    total_memory, free_memory = _memory_mb()
    return {
        "hostname": get_hostname(),
        "containerId": get_container_id(),
        "containerName": _env("CONTAINER_NAME"),
        "nodeName": _env("NODE_NAME"),
        "nodeId": _env("NODE_ID"),
        "serviceName": _env("SERVICE_NAME"),
        "taskSlot": _env("TASK_SLOT"),
        "platform": platform.system().lower() or UNKNOWN,
        "arch": platform.machine() or UNKNOWN,
        "pythonVersion": platform.python_version(),
        "environment": os.environ.get("NODE_ENV") or os.environ.get("FLASK_ENV") or "development",
        "loadBalanced": os.environ.get("LOAD_BALANCED") == "true",
        "uptimeSeconds": int(time.time() - _STARTED),
        "loadAverage": _load_average(),
        "totalMemory": total_memory,
        "freeMemory": free_memory,
        "timestamp": utcnow_iso(),
    }
