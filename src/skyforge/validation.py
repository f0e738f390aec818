from __future__ import annotations

import ipaddress

from .gateway import ComputeGateway, probe
from .images import resolve_image
from .logger import logger
from .schemas.compute import CreateInstanceRequest
from .schemas.operations import ValidationOutcome, ValidationReport

PUBLIC_IP_KEYWORDS = {"ephemeral", "none"}


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def valid_public_ip_setting(public_ip: str | None) -> bool:
    if public_ip is None:
        return True
    return public_ip.lower() in PUBLIC_IP_KEYWORDS or is_ip_address(public_ip)


class ValidationPipeline:
    """
    Pre-flight checks for instance creation, run in a fixed order and
    stopping at the first failure.
    """

    def __init__(self, gateway: ComputeGateway, project: str, zone: str):
        self.gateway = gateway
        self.project = project
        self.zone = zone

    def valid_machine_type(self, machine_type: str | None) -> bool:
        if not machine_type:
            return False
        return probe(
            lambda: self.gateway.get_machine_type(self.project, self.zone, machine_type),
            f"machine type {machine_type}",
        ).exists

    def valid_network(self, network: str | None) -> bool:
        if not network:
            return False
        return probe(
            lambda: self.gateway.get_network(self.project, network),
            f"network {network}",
        ).exists

    def validate(self, request: CreateInstanceRequest) -> ValidationReport:
        report = ValidationReport()

        checks = (
            ("machine_type", request.machine_type, self.valid_machine_type),
            ("network", request.network, self.valid_network),
            ("public_ip", request.public_ip, valid_public_ip_setting),
        )
        for field, value, check in checks:
            passed = check(value)
            report.outcomes.append(
                ValidationOutcome(field=field, value=value, passed=passed)
            )
            if not passed:
                logger.debug(f"Validation failed on {field}={value!r}")
                return report

        source_image = resolve_image(
            self.gateway, request.image, self.project, request.image_project
        )
        report.outcomes.append(
            ValidationOutcome(
                field="image", value=request.image, passed=source_image is not None
            )
        )
        report.source_image = source_image
        return report
