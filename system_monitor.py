"""
System Monitor
Host metrics for the admin page: CPU, memory, disks, Docker containers, OS
"""

import json
import logging
import platform
import socket
import subprocess
import time
from typing import Any, Dict, List, Optional

import psutil

logger = logging.getLogger(__name__)

DEFAULT_MIN_DISK_BYTES = 2_000_000_000

# Pseudo and image-backed filesystems the dashboard hides
_IGNORED_FS_MARKERS = ("loop", "tmpfs", "overlay")


def get_cpu_stats() -> Dict[str, Any]:
    return {
        "load": psutil.cpu_percent(interval=0.1) or 0,
        "cores": psutil.cpu_count() or 0,
    }


def get_memory_stats() -> Dict[str, Any]:
    memory = psutil.virtual_memory()
    # `active` only exists on Linux/BSD/macOS
    active = getattr(memory, "active", memory.used)
    return {
        "total": memory.total,
        "active": active,
        "usedPercent": (active / memory.total) * 100 if memory.total else 0,
    }


def _is_ignored_partition(partition) -> bool:
    if partition.mountpoint.startswith("/snap"):
        return True
    return any(
        marker in partition.device or marker in partition.fstype
        for marker in _IGNORED_FS_MARKERS
    )


def get_disk_stats(min_size_bytes: int = DEFAULT_MIN_DISK_BYTES) -> List[Dict[str, Any]]:
    """Real partitions larger than min_size_bytes"""
    disks = []
    for partition in psutil.disk_partitions(all=False):
        if _is_ignored_partition(partition):
            continue
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except (PermissionError, OSError) as e:
            logger.debug(f"Skipping {partition.mountpoint}: {e}")
            continue

        if usage.total <= min_size_bytes:
            continue

        disks.append(
            {
                "fs": partition.device,
                "type": partition.fstype,
                "mount": partition.mountpoint,
                "size": usage.total,
                "used": usage.used,
                "available": usage.free,
                "use": usage.percent,
            }
        )
    return disks


def _docker_json_lines(args: List[str], timeout: float) -> List[Dict[str, Any]]:
    result = subprocess.run(
        ["docker", *args, "--format", "{{json .}}"],
        capture_output=True,
        text=True,
        timeout=timeout,
        check=True,
    )
    return [json.loads(line) for line in result.stdout.splitlines() if line.strip()]


def _percent(value: Optional[str]) -> float:
    """'12.5%' -> 12.5"""
    try:
        return float(str(value).strip().rstrip("%"))
    except (TypeError, ValueError):
        return 0.0


def get_docker_containers(timeout: float = 10.0) -> List[Dict[str, Any]]:
    """
    Containers known to the local Docker daemon, with live CPU/memory usage.

    Docker is optional on the host: any failure is logged and yields [].
    """
    try:
        containers = _docker_json_lines(["ps", "-a", "--no-trunc"], timeout)
        stats = {
            row.get("ID", "")[:12]: row
            for row in _docker_json_lines(["stats", "--no-stream"], timeout)
        }
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        logger.error(f"Docker error: {e}")
        return []

    result = []
    for container in containers:
        container_id = container.get("ID", "")
        usage = stats.get(container_id[:12], {})
        result.append(
            {
                "id": container_id,
                "name": container.get("Names", ""),
                "image": container.get("Image", ""),
                "state": container.get("State", ""),
                "status": container.get("Status", ""),
                "mem_percent": _percent(usage.get("MemPerc")),
                "cpu_percent": _percent(usage.get("CPUPerc")),
            }
        )
    return result


def _distro_name() -> str:
    try:
        release = platform.freedesktop_os_release()
        return release.get("PRETTY_NAME") or release.get("NAME", "")
    except (OSError, AttributeError):
        return f"{platform.system()} {platform.release()}".strip()


def get_os_info() -> Dict[str, Any]:
    return {
        "platform": platform.system().lower(),
        "distro": _distro_name(),
        "hostname": socket.gethostname(),
        "uptime": int(time.time() - psutil.boot_time()),
    }


def collect_stats(
    min_disk_bytes: int = DEFAULT_MIN_DISK_BYTES,
    include_docker: bool = True,
    docker_timeout: float = 10.0,
) -> Dict[str, Any]:
    """
    Full host snapshot.

    Returns:
        {
            "cpu": {"load": 12.3, "cores": 8},
            "mem": {"total": ..., "active": ..., "usedPercent": 41.2},
            "disk": [...],
            "docker": [...],
            "os": {"platform": "linux", "distro": "...", "hostname": "...", "uptime": 3600}
        }
    """
    return {
        "cpu": get_cpu_stats(),
        "mem": get_memory_stats(),
        "disk": get_disk_stats(min_disk_bytes),
        "docker": get_docker_containers(docker_timeout) if include_docker else [],
        "os": get_os_info(),
    }
