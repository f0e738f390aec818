from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from google.api_core import exceptions
from google.cloud import compute_v1

from .clients import (
    get_disks_client,
    get_images_client,
    get_instances_client,
    get_machine_types_client,
    get_networks_client,
    get_projects_client,
    get_regions_client,
    get_zone_operations_client,
    get_zones_client,
)
from .logger import logger
from .schemas.operations import OperationErrorDetail, OperationSnapshot

T = TypeVar("T")


class ProbeStatus(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


@dataclass(frozen=True)
class ProbeResult(Generic[T]):
    status: ProbeStatus
    value: T | None = None
    error: Exception | None = None

    @property
    def exists(self) -> bool:
        return self.status is ProbeStatus.FOUND


def probe(call: Callable[[], T], what: str) -> ProbeResult[T]:
    """
    Runs a lookup and classifies the outcome instead of raising.
    NotFound is an answer; any other API error is kept as a transport error.
    """
    try:
        value = call()
    except exceptions.NotFound:
        logger.debug(f"Probe for {what}: not found")
        return ProbeResult(ProbeStatus.NOT_FOUND)
    except exceptions.GoogleAPIError as e:
        logger.warning(f"Probe for {what} failed: {e}")
        return ProbeResult(ProbeStatus.TRANSPORT_ERROR, error=e)

    logger.debug(f"Probe for {what}: found")
    return ProbeResult(ProbeStatus.FOUND, value=value)


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    next_page_token: str | None = None


def _first_page(pager: Any) -> Page[Any]:
    # The pager would transparently follow tokens; only the first response is used
    response = next(iter(pager.pages))
    return Page(
        items=list(response.items or []),
        next_page_token=response.next_page_token or None,
    )


def operation_snapshot(operation: Any) -> OperationSnapshot:
    """Normalises an SDK Operation (or ExtendedOperation) into a snapshot."""
    status = getattr(operation.status, "name", operation.status)
    errors = []
    if operation.error:
        errors = [
            OperationErrorDetail(code=str(e.code), message=str(e.message))
            for e in operation.error.errors
        ]
    return OperationSnapshot(name=operation.name, status=str(status), errors=errors)


class ComputeGateway:
    """
    Narrow synchronous facade over the Compute Engine v1 clients.
    Lookups raise google.api_core exceptions; wrap them with probe() to classify.
    """

    # Instances

    def insert_instance(
        self, project: str, zone: str, spec: compute_v1.Instance
    ) -> OperationSnapshot:
        op = get_instances_client().insert(
            project=project, zone=zone, instance_resource=spec
        )
        return operation_snapshot(op)

    def get_instance(self, project: str, zone: str, name: str) -> Any:
        return get_instances_client().get(project=project, zone=zone, instance=name)

    def delete_instance(self, project: str, zone: str, name: str) -> OperationSnapshot:
        op = get_instances_client().delete(project=project, zone=zone, instance=name)
        return operation_snapshot(op)

    def list_instances(
        self, project: str, zone: str, page_token: str | None, page_size: int
    ) -> Page[Any]:
        request = compute_v1.ListInstancesRequest(
            project=project, zone=zone, max_results=page_size
        )
        if page_token:
            request.page_token = page_token
        return _first_page(get_instances_client().list(request=request))

    # Disks

    def insert_disk(
        self,
        project: str,
        zone: str,
        spec: compute_v1.Disk,
        source_image: str | None = None,
    ) -> OperationSnapshot:
        request = compute_v1.InsertDiskRequest(
            project=project, zone=zone, disk_resource=spec
        )
        if source_image:
            request.source_image = source_image
        return operation_snapshot(get_disks_client().insert(request=request))

    def get_disk(self, project: str, zone: str, name: str) -> Any:
        return get_disks_client().get(project=project, zone=zone, disk=name)

    def delete_disk(self, project: str, zone: str, name: str) -> OperationSnapshot:
        op = get_disks_client().delete(project=project, zone=zone, disk=name)
        return operation_snapshot(op)

    def list_disks(
        self, project: str, zone: str, page_token: str | None, page_size: int
    ) -> Page[Any]:
        request = compute_v1.ListDisksRequest(
            project=project, zone=zone, max_results=page_size
        )
        if page_token:
            request.page_token = page_token
        return _first_page(get_disks_client().list(request=request))

    # Lookups used by validation

    def get_machine_type(self, project: str, zone: str, name: str) -> Any:
        return get_machine_types_client().get(
            project=project, zone=zone, machine_type=name
        )

    def get_network(self, project: str, name: str) -> Any:
        return get_networks_client().get(project=project, network=name)

    def get_image(self, project: str, name: str) -> Any:
        return get_images_client().get(project=project, image=name)

    # Zones, regions, operations, project

    def list_zones(
        self, project: str, page_token: str | None, page_size: int
    ) -> Page[Any]:
        request = compute_v1.ListZonesRequest(project=project, max_results=page_size)
        if page_token:
            request.page_token = page_token
        return _first_page(get_zones_client().list(request=request))

    def list_regions(
        self, project: str, page_token: str | None, page_size: int
    ) -> Page[Any]:
        request = compute_v1.ListRegionsRequest(project=project, max_results=page_size)
        if page_token:
            request.page_token = page_token
        return _first_page(get_regions_client().list(request=request))

    def get_zone_operation(
        self, project: str, zone: str, operation: str
    ) -> OperationSnapshot:
        op = get_zone_operations_client().get(
            project=project, zone=zone, operation=operation
        )
        return operation_snapshot(op)

    def get_project(self, project: str) -> Any:
        return get_projects_client().get(project=project)
