from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

# ----------------------------
# Fixed constants
# ----------------------------

DEFAULT_BUILD_ID = "linuxkitOVF"


@dataclass(frozen=True)
class OVFNamespaces:
    """
    XML namespace URIs declared on the Envelope root.
    One immutable value is shared by every document; nothing mutates it.
    """
    xmlns: str = "http://schemas.dmtf.org/ovf/envelope/1"
    cim: str = "http://schemas.dmtf.org/wbem/wscim/1/common"
    ovf: str = "http://schemas.dmtf.org/ovf/envelope/1"
    rasd: str = "http://schemas.dmtf.org/wbem/wscim/1/cim-schema/2/CIM_ResourceAllocationSettingData"
    vmw: str = "http://www.vmware.com/schema/ovf"
    vssd: str = "http://schemas.dmtf.org/wbem/wscim/1/cim-schema/2/CIM_VirtualSystemSettingData"
    xsi: str = "http://www.w3.org/2001/XMLSchema-instance"


DEFAULT_NAMESPACES = OVFNamespaces()


class ResourceType(str, Enum):
    """CIM_ResourceAllocationSettingData ResourceType codes."""
    CPU = "3"
    MEM = "4"
    IDE = "5"
    SCSI = "6"
    NET = "10"
    FLOPPY = "14"
    CDROM = "15"  # 16 (DVD drive) is accepted by some importers too
    DISK = "17"
    USB = "23"


# ----------------------------
# Document tree
# ----------------------------

@dataclass
class FileReference:
    href: str
    ref_id: str
    size: str

    @property
    def host_resource(self) -> str:
        return f"ovf:/file/{self.ref_id}"


@dataclass
class DiskDetails:
    capacity: str
    capacity_units: str
    disk_id: str
    file_ref: str
    format: str
    populated_size: str


@dataclass
class DiskSection:
    info: str = "Virtual disk information"
    disks: List[DiskDetails] = field(default_factory=list)


@dataclass
class NetworkSection:
    name: str = ""
    description: str = "Default Network"
    info: str = "List of Networks"


@dataclass
class OperatingSystemSection:
    os_id: str = "1"
    os_type: str = "*other3xLinux64Guest"
    info: str = "The kind of installed guest operating system"
    description: Optional[str] = None


@dataclass
class SystemDescriptor:
    system_id: str = ""
    element_name: str = "Virtual Hardware Family"
    instance_id: str = "0"
    system_type: str = "vmx-11"


@dataclass
class HardwareItem:
    """
    One rasd Item. A single shape for every device kind; fields a device
    does not use stay None and are not rendered.
    """
    resource_type: ResourceType
    instance_id: str
    required: Optional[str] = None
    address: Optional[str] = None
    address_on_parent: Optional[str] = None
    allocation_units: Optional[str] = None
    automatic_allocation: Optional[str] = None
    connection: Optional[str] = None
    description: Optional[str] = None
    element_name: Optional[str] = None
    host_resource: Optional[str] = None
    parent: Optional[str] = None
    resource_sub_type: Optional[str] = None
    virtual_quantity: Optional[str] = None


@dataclass(frozen=True)
class ControllerHandle:
    """Proof that a controller item was appended to a hardware block."""
    instance_id: str
    resource_type: ResourceType


@dataclass
class VirtualHardware:
    info: str = "Virtual hardware requirements"
    system: SystemDescriptor = field(default_factory=SystemDescriptor)
    items: List[HardwareItem] = field(default_factory=list)

    def next_instance_id(self) -> str:
        # 0 is the System descriptor
        return str(len(self.items) + 1)


@dataclass
class VirtualSystem:
    name: str = ""
    vs_id: str = "vm"
    info: str = "A Virtual Machine"
    os: OperatingSystemSection = field(default_factory=OperatingSystemSection)
    hardware: VirtualHardware = field(default_factory=VirtualHardware)


@dataclass
class Envelope:
    build_id: str = DEFAULT_BUILD_ID
    namespaces: OVFNamespaces = DEFAULT_NAMESPACES
    files: List[FileReference] = field(default_factory=list)
    disk_sections: List[DiskSection] = field(default_factory=list)
    network: Optional[NetworkSection] = None
    virtual_system: VirtualSystem = field(default_factory=VirtualSystem)

    def file_reference(self, ref_id: str) -> Optional[FileReference]:
        for f in self.files:
            if f.ref_id == ref_id:
                return f
        return None
