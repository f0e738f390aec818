from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "unknown"


class InstanceDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    status: str
    machine_type: str = Field(description="Cleaned machine type (e.g., n1-standard-1)")
    network: str = Field(default=UNKNOWN, description="Cleaned network name")
    private_ip: str | None = None
    public_ip: str = UNKNOWN


class QuotaDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    limit: float
    usage: float


class CreateInstanceRequest(BaseModel):
    name: str
    machine_type: str | None = None
    network: str | None = "default"
    image: str | None = None
    image_project: str | None = Field(
        default=None, description="Only this project is searched for the image"
    )
    public_ip: str | None = Field(
        default="ephemeral", description="ephemeral, none, or an IP literal"
    )
    boot_disk_name: str | None = Field(
        default=None, description="Defaults to the instance name"
    )
    boot_disk_size_gb: int = Field(default=10, gt=0)
    boot_disk_ssd: bool = False
    additional_disks: list[str] = Field(default_factory=list)
    auto_migrate: bool = False
    auto_restart: bool = True
    can_ip_forward: bool = False
    metadata: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


class CreateDiskRequest(BaseModel):
    name: str
    size_gb: int = Field(gt=0)
    disk_type: str = "pd-standard"
    source_image: str | None = Field(
        default=None, description="Full image URL to initialise the disk from"
    )
