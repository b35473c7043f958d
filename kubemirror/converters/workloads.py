"""Converters for workload kinds (core/v1 Pod, apps/v1, batch/v1, policy/v1)."""

from __future__ import annotations

from typing import Any

from kubemirror.converters.common import (
    created_at,
    int_or_string,
    metadata,
    name_of,
    namespace_of,
    section,
)
from kubemirror.models.entries import (
    ContainerStatus,
    CronJobEntry,
    DaemonSetEntry,
    DeploymentEntry,
    JobEntry,
    PodDisruptionBudgetEntry,
    PodEntry,
    ReplicaSetEntry,
    StatefulSetEntry,
)


def _container_state(state: dict[str, Any]) -> str | None:
    if state.get("running") is not None:
        return "Running"
    if state.get("waiting") is not None:
        return "Waiting"
    if state.get("terminated") is not None:
        return "Terminated"
    return None


def _container_message(state: dict[str, Any]) -> str | None:
    for key in ("waiting", "terminated"):
        detail = state.get(key)
        if isinstance(detail, dict):
            return detail.get("message")
    return None


def convert_pod(raw: dict[str, Any]) -> PodEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    meta = metadata(raw)
    spec = section(raw, "spec") or {}
    status = section(raw, "status") or {}

    containers: list[ContainerStatus] = []
    ready = 0
    restarts = 0
    crash_loop = False
    for cs in status.get("containerStatuses") or []:
        state = cs.get("state") or {}
        waiting = state.get("waiting") or {}
        if waiting.get("reason") == "CrashLoopBackOff":
            crash_loop = True
        restarts += int(cs.get("restartCount") or 0)
        if cs.get("ready"):
            ready += 1
        containers.append(
            ContainerStatus(
                name=str(cs.get("name", "")),
                state=_container_state(state),
                message=_container_message(state),
            )
        )

    controller = next(
        (str(o.get("kind")) for o in meta.get("ownerReferences") or [] if o.get("controller")),
        None,
    )

    return PodEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        phase=status.get("phase"),
        ready_containers=ready,
        total_containers=len(containers),
        containers=tuple(containers),
        restart_count=restarts,
        node_name=spec.get("nodeName"),
        crash_loop=crash_loop,
        terminating=meta.get("deletionTimestamp") is not None,
        controller=controller,
        qos_class=status.get("qosClass"),
    )


def convert_deployment(raw: dict[str, Any]) -> DeploymentEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    status = section(raw, "status") or {}
    return DeploymentEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        replicas=int(status.get("replicas") or 0),
        ready_replicas=int(status.get("readyReplicas") or 0),
        available_replicas=int(status.get("availableReplicas") or 0),
        unavailable_replicas=int(status.get("unavailableReplicas") or 0),
        updated_replicas=int(status.get("updatedReplicas") or 0),
    )


def convert_statefulset(raw: dict[str, Any]) -> StatefulSetEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    status = section(raw, "status")
    if name is None or spec is None or status is None:
        return None
    return StatefulSetEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        replicas=int(spec.get("replicas") or 0),
        ready_replicas=int(status.get("readyReplicas") or 0),
        service_name=spec.get("serviceName") or "-",
    )


def convert_daemonset(raw: dict[str, Any]) -> DaemonSetEntry | None:
    name = name_of(raw)
    status = section(raw, "status")
    if name is None or status is None:
        return None
    return DaemonSetEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        desired=int(status.get("desiredNumberScheduled") or 0),
        current=int(status.get("currentNumberScheduled") or 0),
        ready=int(status.get("numberReady") or 0),
    )


def convert_replicaset(raw: dict[str, Any]) -> ReplicaSetEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    status = section(raw, "status")
    if name is None or spec is None or status is None:
        return None
    return ReplicaSetEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        desired=int(spec.get("replicas") or 0),
        current=int(status.get("replicas") or 0),
        ready=int(status.get("readyReplicas") or 0),
    )


def _job_condition(status: dict[str, Any] | None) -> str:
    conditions = (status or {}).get("conditions")
    if conditions is None:
        return "Unknown"
    if any(c.get("type") == "Complete" and c.get("status") == "True" for c in conditions):
        return "Complete"
    if any(c.get("type") == "Failed" and c.get("status") == "True" for c in conditions):
        return "Failed"
    return "Running"


def convert_job(raw: dict[str, Any]) -> JobEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    status = section(raw, "status")
    return JobEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        completions=int((status or {}).get("succeeded") or 0),
        condition=_job_condition(status),
    )


def convert_cronjob(raw: dict[str, Any]) -> CronJobEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    if name is None or spec is None:
        return None
    status = section(raw, "status") or {}
    return CronJobEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        schedule=str(spec.get("schedule", "")),
        suspend=bool(spec.get("suspend", False)),
        active=len(status.get("active") or []),
        last_schedule=status.get("lastScheduleTime") or "-",
    )


def convert_pdb(raw: dict[str, Any]) -> PodDisruptionBudgetEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    status = section(raw, "status")
    if name is None or spec is None or status is None:
        return None
    return PodDisruptionBudgetEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        min_available=int_or_string(spec.get("minAvailable")),
        max_unavailable=int_or_string(spec.get("maxUnavailable")),
        allowed_disruptions=int(status.get("disruptionsAllowed") or 0),
        current_healthy=int(status.get("currentHealthy") or 0),
        desired_healthy=int(status.get("desiredHealthy") or 0),
    )
