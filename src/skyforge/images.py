from __future__ import annotations

from .gateway import ComputeGateway, probe
from .logger import logger

# Public image projects, matched by substring of the image name.
# Order matters: the first matching entry wins.
PUBLIC_IMAGE_PROJECTS: tuple[tuple[str, str], ...] = (
    ("centos", "centos-cloud"),
    ("container-vm", "google-containers"),
    ("coreos", "coreos-cloud"),
    ("debian", "debian-cloud"),
    ("opensuse-cloud", "opensuse-cloud"),
    ("rhel", "rhel-cloud"),
    ("sles", "suse-cloud"),
    ("ubuntu", "ubuntu-os-cloud"),
)


def image_url(project: str, image: str) -> str:
    return f"projects/{project}/global/images/{image}"


def public_project_for_image(image: str) -> str | None:
    """Returns the public vendor project for an image name, or None if no entry matches."""
    for needle, project in PUBLIC_IMAGE_PROJECTS:
        if needle in image:
            return project
    return None


def candidate_projects(
    image: str, project: str, image_project: str | None = None
) -> list[str]:
    """
    Projects searched for an image, in precedence order.
    An explicit image project is the only candidate.
    """
    if image_project:
        return [image_project]

    candidates = [project]
    public = public_project_for_image(image)
    if public and public != project:
        candidates.append(public)
    return candidates


def resolve_image(
    gateway: ComputeGateway,
    image: str | None,
    project: str,
    image_project: str | None = None,
) -> str | None:
    """
    Resolves an image name to its fully-qualified URL.
    Returns None when the image is not found in any candidate project.
    """
    if not image:
        return None

    for candidate in candidate_projects(image, project, image_project):
        result = probe(
            lambda: gateway.get_image(candidate, image),
            f"image {candidate}/{image}",
        )
        if result.exists:
            return image_url(candidate, image)

    logger.debug(f"Image {image} not found in any candidate project")
    return None
