from __future__ import annotations

from .model import ControllerHandle, FileReference, HardwareItem, ResourceType, VirtualHardware


class Hardware:
    """
    Appends rasd Items to a VirtualHardware block.

    Instance ids follow append order starting at 1. Devices that hang off a
    controller or a bundled file take the handle returned when that
    controller or file was registered, so a dangling Parent/HostResource
    cannot be built through this API.
    """

    @staticmethod
    def _append(hw: VirtualHardware, resource_type: ResourceType, **fields: str) -> HardwareItem:
        # empty optional fields stay unset so they are left out of the document
        set_fields = {k: v for k, v in fields.items() if v}
        item = HardwareItem(resource_type=resource_type, instance_id=hw.next_instance_id(), **set_fields)
        hw.items.append(item)
        return item

    @staticmethod
    def add_memory(hw: VirtualHardware, size_mb: str) -> None:
        Hardware._append(
            hw,
            ResourceType.MEM,
            allocation_units="byte * 2^20",
            description="Memory Size",
            element_name=f"{size_mb}MB of memory",
            virtual_quantity=size_mb,
        )

    @staticmethod
    def add_cpu(hw: VirtualHardware, count: str) -> None:
        Hardware._append(
            hw,
            ResourceType.CPU,
            allocation_units="hertz * 10^6",
            description="Number of Virtual CPUs",
            element_name=f"{count} virtual CPU(s)",
            virtual_quantity=count,
        )

    @staticmethod
    def add_ide_controller(hw: VirtualHardware) -> ControllerHandle:
        item = Hardware._append(
            hw,
            ResourceType.IDE,
            address="1",
            description="IDE Controller",
            element_name="ideController1",
        )
        return ControllerHandle(instance_id=item.instance_id, resource_type=item.resource_type)

    @staticmethod
    def add_scsi_controller(hw: VirtualHardware) -> ControllerHandle:
        # lsilogic is the only sub-type offered for now
        item = Hardware._append(
            hw,
            ResourceType.SCSI,
            resource_sub_type="lsilogic",
            address="0",
            description="SCSI Controller",
            element_name="scsiController0",
        )
        return ControllerHandle(instance_id=item.instance_id, resource_type=item.resource_type)

    @staticmethod
    def add_nic(hw: VirtualHardware, network: str) -> None:
        Hardware._append(
            hw,
            ResourceType.NET,
            resource_sub_type="E1000",
            address_on_parent="2",
            automatic_allocation="true",
            connection=network,
            description=f"E1000 ethernet adapter on {network}",
            element_name="ethernet0",
        )

    @staticmethod
    def add_cdrom(hw: VirtualHardware, controller: ControllerHandle, file_ref: FileReference) -> None:
        Hardware._append(
            hw,
            ResourceType.CDROM,
            address_on_parent="0",
            automatic_allocation="true",
            element_name="cdrom0",
            parent=controller.instance_id,
            host_resource=file_ref.host_resource,
        )
