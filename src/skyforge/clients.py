from __future__ import annotations

from functools import lru_cache
from typing import Any

from google.cloud import compute_v1

# Shared Client Registry (Lazy-loaded and cached)
# One client per endpoint for the whole process; authentication is resolved
# by google-auth application default credentials on first use.


@lru_cache(maxsize=1)
def get_instances_client() -> Any:
    return compute_v1.InstancesClient()


@lru_cache(maxsize=1)
def get_disks_client() -> Any:
    return compute_v1.DisksClient()


@lru_cache(maxsize=1)
def get_machine_types_client() -> Any:
    return compute_v1.MachineTypesClient()


@lru_cache(maxsize=1)
def get_networks_client() -> Any:
    return compute_v1.NetworksClient()


@lru_cache(maxsize=1)
def get_images_client() -> Any:
    return compute_v1.ImagesClient()


@lru_cache(maxsize=1)
def get_zones_client() -> Any:
    return compute_v1.ZonesClient()


@lru_cache(maxsize=1)
def get_regions_client() -> Any:
    return compute_v1.RegionsClient()


@lru_cache(maxsize=1)
def get_zone_operations_client() -> Any:
    return compute_v1.ZoneOperationsClient()


@lru_cache(maxsize=1)
def get_projects_client() -> Any:
    return compute_v1.ProjectsClient()
