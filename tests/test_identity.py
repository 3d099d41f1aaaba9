from __future__ import annotations

from swarmboard import identity

SNAPSHOT_KEYS = {
    "hostname", "containerId", "platform", "arch", "uptimeSeconds",
    "loadAverage", "totalMemory", "freeMemory", "timestamp",
}


def test_snapshot_has_core_fields() -> None:
    snap = identity.get_snapshot()

    assert SNAPSHOT_KEYS <= set(snap)
    assert len(snap["loadAverage"]) == 3
    assert snap["uptimeSeconds"] >= 0


def test_container_id_prefers_container_id_env(monkeypatch) -> None:
    monkeypatch.setenv("CONTAINER_ID", "abcdef0123456789")
    monkeypatch.setenv("HOSTNAME", "ignored")

    assert identity.get_container_id() == "abcdef012345"


def test_container_id_falls_back_to_hostname_env(monkeypatch) -> None:
    monkeypatch.delenv("CONTAINER_ID", raising=False)
    monkeypatch.setenv("HOSTNAME", "3f2a1b")

    assert identity.get_container_id() == "3f2a1b"


def test_missing_env_values_are_unknown(monkeypatch) -> None:
    for name in ("CONTAINER_ID", "HOSTNAME", "CONTAINER_NAME", "NODE_NAME", "NODE_ID", "SERVICE_NAME", "TASK_SLOT"):
        monkeypatch.delenv(name, raising=False)

    snap = identity.get_snapshot()

    assert snap["containerId"] == "unknown"
    assert snap["containerName"] == "unknown"
    assert snap["nodeName"] == "unknown"
    assert snap["taskSlot"] == "unknown"


def test_swarm_fields_come_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SERVICE_NAME", "web")
    monkeypatch.setenv("TASK_SLOT", "3")
    monkeypatch.setenv("LOAD_BALANCED", "true")

    snap = identity.get_snapshot()

    assert snap["serviceName"] == "web"
    assert snap["taskSlot"] == "3"
    assert snap["loadBalanced"] is True


def test_snapshot_survives_missing_os_data(monkeypatch) -> None:
    def no_loadavg():
        raise OSError("unsupported")

    def no_file(*args, **kwargs):
        raise OSError("no /proc")

    monkeypatch.setattr(identity.os, "getloadavg", no_loadavg)
    monkeypatch.setattr(identity, "open", no_file, raising=False)

    snap = identity.get_snapshot()

    assert snap["loadAverage"] == [0, 0, 0]
    assert snap["totalMemory"] == 0
    assert snap["freeMemory"] == 0


def test_hostname_unknown_when_lookup_fails(monkeypatch) -> None:
    def boom():
        raise OSError("no hostname")

    monkeypatch.setattr(identity.socket, "gethostname", boom)

    assert identity.get_hostname() == "unknown"
