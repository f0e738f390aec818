import argparse
import logging
import sys
from importlib.metadata import version
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import Settings
from .exceptions import SkyforgeError
from .gateway import ComputeGateway
from .lifecycle import ResourceLifecycleManager
from .logger import logger, setup_logger
from .reporter import ConsoleReporter
from .schemas.compute import CreateDiskRequest, CreateInstanceRequest

# Resources whose commands act on a single zone
ZONE_SCOPED = {"instance", "disk"}


def format_name(name: str) -> str:
    """CPUS_ALL_REGIONS -> Cpus All Regions"""
    return " ".join(part.capitalize() for part in name.split("_"))


def format_number(number: float) -> str:
    return str(int(number)) if number % 1 == 0 else str(number)


def parse_metadata(pairs: list[str]) -> dict[str, str]:
    metadata = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Metadata must be KEY=VALUE, got {pair}")
        metadata[key] = value
    return metadata


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Skyforge: Compute Engine provisioning tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create an Ubuntu instance with an ephemeral public IP
  skyforge --project my-project --zone us-west1-b instance create web-1 \\
      --machine-type n1-standard-1 --image ubuntu-1804

  # Delete a disk without prompting
  skyforge --project my-project --zone us-west1-b --yes disk delete scratch-1

  # Show project quotas
  skyforge --project my-project project quotas
""",
    )
    try:
        ver = version("skyforge")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"Skyforge v{ver}")

    parser.add_argument("--project", help="GCP Project ID (env: GCE_PROJECT)")
    parser.add_argument("--zone", help="Compute Engine zone (env: GCE_ZONE)")
    parser.add_argument("--wait-timeout", type=float, help="Seconds to wait per request")
    parser.add_argument("--poll-interval", type=float, help="Seconds between polls")
    parser.add_argument("--max-pages", type=int, help="Max pages to traverse")
    parser.add_argument("--page-size", type=int, help="Max items per page")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmations")

    resources = parser.add_subparsers(dest="resource", required=True)

    instance = resources.add_parser("instance", help="Manage instances")
    instance_cmds = instance.add_subparsers(dest="command", required=True)
    create = instance_cmds.add_parser("create", help="Create an instance")
    create.add_argument("name")
    create.add_argument("--machine-type", required=True)
    create.add_argument("--image", required=True)
    create.add_argument("--image-project")
    create.add_argument("--network", default="default")
    create.add_argument(
        "--public-ip", default="ephemeral", help="ephemeral, none, or an IP address"
    )
    create.add_argument("--boot-disk-name")
    create.add_argument("--boot-disk-size", type=int, default=10)
    create.add_argument("--boot-disk-ssd", action="store_true")
    create.add_argument("--additional-disks", nargs="+", default=[])
    create.add_argument("--auto-migrate", action="store_true")
    create.add_argument(
        "--no-auto-restart", dest="auto_restart", action="store_false"
    )
    create.add_argument("--can-ip-forward", action="store_true")
    create.add_argument("--metadata", nargs="+", default=[], metavar="KEY=VALUE")
    create.add_argument("--tags", nargs="+", default=[])
    delete = instance_cmds.add_parser("delete", help="Delete an instance")
    delete.add_argument("name")
    instance_cmds.add_parser("list", help="List instances in the zone")

    disk = resources.add_parser("disk", help="Manage disks")
    disk_cmds = disk.add_subparsers(dest="command", required=True)
    disk_create = disk_cmds.add_parser("create", help="Create a disk")
    disk_create.add_argument("name")
    disk_create.add_argument("--size", type=int, required=True, help="Size in GB")
    disk_create.add_argument("--disk-type", default="pd-standard")
    disk_create.add_argument("--source-image", help="Full image URL")
    disk_delete = disk_cmds.add_parser("delete", help="Delete a disk")
    disk_delete.add_argument("name")
    disk_cmds.add_parser("list", help="List disks in the zone")

    zone = resources.add_parser("zone", help="Zones")
    zone.add_subparsers(dest="command", required=True).add_parser("list")
    region = resources.add_parser("region", help="Regions")
    region.add_subparsers(dest="command", required=True).add_parser("list")
    project = resources.add_parser("project", help="Project information")
    project.add_subparsers(dest="command", required=True).add_parser("quotas")

    return parser


def _print_table(console: Console, title: str, columns: list[str], rows: list[list[Any]]) -> None:
    table = Table(title=title)
    for i, column in enumerate(columns):
        table.add_column(column, style="cyan" if i == 0 else None)
    for row in rows:
        table.add_row(*[str(v) for v in row])
    console.print(table)


def run(args: argparse.Namespace, manager: ResourceLifecycleManager, console: Console) -> None:
    """Dispatches a parsed command to the lifecycle manager."""
    key = (args.resource, args.command)

    if key == ("instance", "create"):
        instance = manager.create_instance(
            CreateInstanceRequest(
                name=args.name,
                machine_type=args.machine_type,
                network=args.network,
                image=args.image,
                image_project=args.image_project,
                public_ip=args.public_ip,
                boot_disk_name=args.boot_disk_name,
                boot_disk_size_gb=args.boot_disk_size,
                boot_disk_ssd=args.boot_disk_ssd,
                additional_disks=args.additional_disks,
                auto_migrate=args.auto_migrate,
                auto_restart=args.auto_restart,
                can_ip_forward=args.can_ip_forward,
                metadata=parse_metadata(args.metadata),
                tags=args.tags,
            )
        )
        console.print(f"[green]{instance.name}[/green] is {instance.status}")
    elif key == ("instance", "delete"):
        manager.delete_instance(args.name)
    elif key == ("instance", "list"):
        _print_table(
            console,
            "Instances",
            ["Name", "Status", "Machine Type", "Network", "Private IP", "Public IP"],
            [
                [i.name, i.status, i.machine_type, i.network, i.private_ip or "", i.public_ip]
                for i in manager.list_instances()
            ],
        )
    elif key == ("disk", "create"):
        disk = manager.create_disk(
            CreateDiskRequest(
                name=args.name,
                size_gb=args.size,
                disk_type=args.disk_type,
                source_image=args.source_image,
            )
        )
        console.print(f"[green]{disk.name}[/green] is {disk.status}")
    elif key == ("disk", "delete"):
        manager.delete_disk(args.name)
    elif key == ("disk", "list"):
        _print_table(
            console,
            "Disks",
            ["Name", "Size (GB)", "Type", "Status"],
            [
                [d.name, d.size_gb, d.type_.split("/")[-1], d.status]
                for d in manager.list_disks()
            ],
        )
    elif key == ("zone", "list"):
        _print_table(
            console,
            "Zones",
            ["Name", "Status", "Region"],
            [[z.name, z.status, z.region.split("/")[-1]] for z in manager.list_zones()],
        )
    elif key == ("region", "list"):
        _print_table(
            console,
            "Regions",
            ["Name", "Status", "Zones"],
            [[r.name, r.status, len(r.zones)] for r in manager.list_regions()],
        )
    elif key == ("project", "quotas"):
        quotas = sorted(manager.list_project_quotas(), key=lambda q: q.metric)
        _print_table(
            console,
            "Project Quotas",
            ["Quota", "Limit", "Usage"],
            [
                [format_name(q.metric), format_number(q.limit), format_number(q.usage)]
                for q in quotas
            ],
        )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_console = Console(stderr=True)
    out_console = Console()

    setup_logger(
        level=logging.DEBUG if args.verbose else logging.ERROR, console=log_console
    )

    try:
        settings = Settings.from_env(
            project=args.project,
            zone=args.zone,
            wait_timeout=args.wait_timeout,
            poll_interval=args.poll_interval,
            max_pages=args.max_pages,
            page_size=args.page_size,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.resource in ZONE_SCOPED:
            settings.require("project", "zone")
        reporter = ConsoleReporter(log_console, assume_yes=args.yes)
        manager = ResourceLifecycleManager(ComputeGateway(), settings, reporter)
        run(args, manager, out_console)
    except SkyforgeError as e:
        log_console.print(f"[bold red]{escape(str(e))}[/bold red]")
        logger.debug("Command failed", exc_info=True)
        sys.exit(1)
    except ValueError as e:
        parser.error(str(e))
    except KeyboardInterrupt:
        log_console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(130)


if __name__ == "__main__":
    main()
