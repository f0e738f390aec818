from __future__ import annotations

from typing import Any

from google.api_core import exceptions
from google.cloud import compute_v1

from .core import Settings
from .exceptions import ResourceLookupError
from .gateway import ComputeGateway, probe
from .logger import logger
from .pagination import list_all
from .poller import OperationPoller
from .reporter import Reporter, ReportLevel
from .schemas.compute import (
    UNKNOWN,
    CreateDiskRequest,
    CreateInstanceRequest,
    InstanceDescriptor,
    QuotaDescriptor,
)
from .schemas.operations import OperationSnapshot, StatusSnapshot
from .validation import ValidationPipeline, is_ip_address


def _last_segment(url: str | None) -> str:
    return url.split("/")[-1] if url else UNKNOWN


def describe_instance(instance: Any) -> InstanceDescriptor:
    """Projects a raw Compute Engine instance into an InstanceDescriptor."""
    network = UNKNOWN
    private_ip = None
    public_ip = UNKNOWN
    if instance.network_interfaces:
        nic = instance.network_interfaces[0]
        network = _last_segment(nic.network)
        private_ip = nic.network_i_p or None
        if nic.access_configs and nic.access_configs[0].nat_i_p:
            public_ip = nic.access_configs[0].nat_i_p

    return InstanceDescriptor(
        name=instance.name,
        status=str(instance.status),
        machine_type=_last_segment(instance.machine_type),
        network=network,
        private_ip=private_ip,
        public_ip=public_ip,
    )


class ResourceLifecycleManager:
    """Create, delete and list workflows for instances and disks in one zone."""

    def __init__(
        self,
        gateway: ComputeGateway,
        settings: Settings,
        reporter: Reporter,
        poller: OperationPoller | None = None,
        pipeline: ValidationPipeline | None = None,
    ):
        settings.require("project")
        self.gateway = gateway
        self.settings = settings
        self.reporter = reporter
        self.project: str = settings.project  # type: ignore[assignment]
        self.poller = poller or OperationPoller(
            reporter,
            timeout=settings.wait_timeout,
            poll_interval=settings.poll_interval,
        )
        self._pipeline = pipeline

    @property
    def zone(self) -> str:
        # Only zone-scoped workflows need it; zones, regions and quotas do not
        self.settings.require("zone")
        return self.settings.zone  # type: ignore[return-value]

    @property
    def pipeline(self) -> ValidationPipeline:
        if self._pipeline is None:
            self._pipeline = ValidationPipeline(self.gateway, self.project, self.zone)
        return self._pipeline

    # URL helpers

    def machine_type_url(self, machine_type: str) -> str:
        return f"zones/{self.zone}/machineTypes/{machine_type}"

    def disk_type_url(self, disk_type: str) -> str:
        return f"zones/{self.zone}/diskTypes/{disk_type}"

    def network_url(self, network: str) -> str:
        return f"projects/{self.project}/global/networks/{network}"

    # Polling helpers

    def _wait_for_operation(
        self, operation: OperationSnapshot, description: str
    ) -> OperationSnapshot:
        return self.poller.await_operation(
            lambda: self.gateway.get_zone_operation(
                self.project, self.zone, operation.name
            ),
            description,
        )

    def _wait_for_status(
        self, fetch: Any, desired_status: str, description: str
    ) -> None:
        self.poller.await_completion(
            lambda: StatusSnapshot(status=str(fetch().status)),
            desired_status,
            description=description,
        )

    # Instance body

    def boot_disk_for(
        self, request: CreateInstanceRequest, source_image: str
    ) -> compute_v1.AttachedDisk:
        params = compute_v1.AttachedDiskInitializeParams(
            disk_name=request.boot_disk_name or request.name,
            disk_size_gb=request.boot_disk_size_gb,
            disk_type=self.disk_type_url("pd-ssd" if request.boot_disk_ssd else "pd-standard"),
            source_image=source_image,
        )
        return compute_v1.AttachedDisk(
            boot=True, auto_delete=True, initialize_params=params
        )

    def disks_for(
        self, request: CreateInstanceRequest, source_image: str
    ) -> list[compute_v1.AttachedDisk]:
        disks = [self.boot_disk_for(request, source_image)]
        for disk_name in request.additional_disks:
            try:
                disk = self.gateway.get_disk(self.project, self.zone, disk_name)
            except exceptions.GoogleAPIError as e:
                self.reporter.report(
                    ReportLevel.ERROR,
                    f"Unable to attach disk {disk_name} to the instance: {e}",
                )
                raise
            disks.append(compute_v1.AttachedDisk(source=disk.self_link, boot=False))
        return disks

    def access_configs_for(self, public_ip: str | None) -> list[compute_v1.AccessConfig]:
        if public_ip is None or public_ip.lower() == "none":
            return []

        access_config = compute_v1.AccessConfig(
            name="External NAT", type_="ONE_TO_ONE_NAT"
        )
        if is_ip_address(public_ip):
            access_config.nat_i_p = public_ip
        return [access_config]

    def instance_spec_for(
        self, request: CreateInstanceRequest, source_image: str
    ) -> compute_v1.Instance:
        interface = compute_v1.NetworkInterface(
            network=self.network_url(request.network or "default"),
            access_configs=self.access_configs_for(request.public_ip),
        )
        scheduling = compute_v1.Scheduling(
            automatic_restart=request.auto_restart,
            on_host_maintenance="MIGRATE" if request.auto_migrate else "TERMINATE",
        )

        instance = compute_v1.Instance(
            name=request.name,
            can_ip_forward=request.can_ip_forward,
            machine_type=self.machine_type_url(request.machine_type or ""),
            disks=self.disks_for(request, source_image),
            network_interfaces=[interface],
            scheduling=scheduling,
        )
        if request.metadata:
            instance.metadata = compute_v1.Metadata(
                items=[
                    compute_v1.Items(key=k, value=v) for k, v in request.metadata.items()
                ]
            )
        if request.tags:
            instance.tags = compute_v1.Tags(items=list(request.tags))
        return instance

    # Workflows

    def create_instance(self, request: CreateInstanceRequest) -> Any:
        """
        Validates, creates and waits for an instance to reach RUNNING.
        Returns the final instance as reported by the API.
        """
        report = self.pipeline.validate(request)
        if not report.passed:
            logger.info(f"Rejected create request for {request.name}: {report.rejection}")
        report.raise_for_failure()

        spec = self.instance_spec_for(request, report.source_image or "")

        self.reporter.report(ReportLevel.INFO, "Creating instance...")
        operation = self.gateway.insert_instance(self.project, self.zone, spec)
        self._wait_for_operation(operation, f"instance {request.name}")
        self._wait_for_status(
            lambda: self.gateway.get_instance(self.project, self.zone, request.name),
            "RUNNING",
            f"instance {request.name}",
        )
        self.reporter.report(ReportLevel.INFO, "Instance created!")

        return self.gateway.get_instance(self.project, self.zone, request.name)

    def create_disk(self, request: CreateDiskRequest) -> Any:
        spec = compute_v1.Disk(
            name=request.name,
            size_gb=request.size_gb,
            type_=self.disk_type_url(request.disk_type),
        )

        self.reporter.report(
            ReportLevel.INFO,
            f"Creating a {request.size_gb} GB disk named {request.name}...",
        )
        operation = self.gateway.insert_disk(
            self.project, self.zone, spec, request.source_image
        )
        self._wait_for_operation(operation, f"disk {request.name}")

        self.reporter.report(ReportLevel.INFO, "Waiting for disk to be ready...")
        self._wait_for_status(
            lambda: self.gateway.get_disk(self.project, self.zone, request.name),
            "READY",
            f"disk {request.name}",
        )
        self.reporter.report(ReportLevel.INFO, "Disk created successfully.")

        return self.gateway.get_disk(self.project, self.zone, request.name)

    def _delete(self, kind: str, name: str, get: Any, delete: Any) -> bool:
        result = probe(lambda: get(self.project, self.zone, name), f"{kind} {name}")
        if result.error is not None:
            raise ResourceLookupError(kind, name, result.error) from result.error
        if not result.exists:
            self.reporter.report(
                ReportLevel.WARNING,
                f"{kind.capitalize()} '{self.zone}:{name}' not found, nothing to delete",
            )
            return False

        if not self.reporter.confirm(f"Delete the {kind} '{self.zone}:{name}'?"):
            self.reporter.report(ReportLevel.INFO, "Aborted.")
            return False

        operation = delete(self.project, self.zone, name)
        self._wait_for_operation(operation, f"delete {kind} {name}")
        self.reporter.report(
            ReportLevel.INFO, f"{kind.capitalize()} '{self.zone}:{name}' deleted"
        )
        return True

    def delete_instance(self, name: str) -> bool:
        """Returns True if the instance was deleted, False if missing or declined."""
        return self._delete(
            "instance", name, self.gateway.get_instance, self.gateway.delete_instance
        )

    def delete_disk(self, name: str) -> bool:
        """Returns True if the disk was deleted, False if missing or declined."""
        return self._delete(
            "disk", name, self.gateway.get_disk, self.gateway.delete_disk
        )

    # Listings

    def _list(self, fetch_page: Any) -> list[Any]:
        return list_all(
            fetch_page,
            self.reporter,
            max_pages=self.settings.max_pages,
            page_size=self.settings.page_size,
        )

    def list_instances(self) -> list[InstanceDescriptor]:
        instances = self._list(
            lambda token, size: self.gateway.list_instances(
                self.project, self.zone, token, size
            )
        )
        return [describe_instance(i) for i in instances]

    def list_disks(self) -> list[Any]:
        return self._list(
            lambda token, size: self.gateway.list_disks(
                self.project, self.zone, token, size
            )
        )

    def list_zones(self) -> list[Any]:
        return self._list(
            lambda token, size: self.gateway.list_zones(self.project, token, size)
        )

    def list_regions(self) -> list[Any]:
        return self._list(
            lambda token, size: self.gateway.list_regions(self.project, token, size)
        )

    def list_project_quotas(self) -> list[QuotaDescriptor]:
        project = self.gateway.get_project(self.project)
        quotas = getattr(project, "quotas", None) or []
        logger.debug(f"Project {self.project} reports {len(quotas)} quotas")
        return [
            QuotaDescriptor(metric=str(q.metric), limit=q.limit, usage=q.usage)
            for q in quotas
        ]
