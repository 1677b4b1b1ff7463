from __future__ import annotations

import os
from typing import Optional

from ..core.exceptions import DuplicateReferenceError
from .hardware import Hardware
from .model import (
    DEFAULT_BUILD_ID,
    DEFAULT_NAMESPACES,
    DiskDetails,
    DiskSection,
    Envelope,
    FileReference,
    NetworkSection,
    OVFNamespaces,
    SystemDescriptor,
    VirtualHardware,
    VirtualSystem,
)


class EnvelopeAssembler:
    """
    Builds the complete Envelope for a single-VM, ISO-booted appliance.

    The order of the hardware calls in assemble() is what keeps every
    cross-reference consistent; callers only supply the VM parameters.
    """

    @staticmethod
    def new_envelope(
        vm_name: str,
        namespaces: OVFNamespaces = DEFAULT_NAMESPACES,
        build_id: str = DEFAULT_BUILD_ID,
    ) -> Envelope:
        env = Envelope(build_id=build_id, namespaces=namespaces)
        env.virtual_system = VirtualSystem(
            name=vm_name,
            hardware=VirtualHardware(system=SystemDescriptor(system_id=vm_name)),
        )
        return env

    @staticmethod
    def add_file_reference(env: Envelope, href: str, ref_id: str, size: str) -> FileReference:
        if env.file_reference(ref_id) is not None:
            raise DuplicateReferenceError(msg=f"File reference id already in use: {ref_id}", context={"href": href})
        ref = FileReference(href=href, ref_id=ref_id, size=size)
        env.files.append(ref)
        return ref

    @staticmethod
    def append_disk(
        section: DiskSection,
        capacity: str,
        capacity_units: str,
        disk_id: str,
        file_ref: str,
        fmt: str,
        populated_size: str,
    ) -> DiskDetails:
        # Optical media never go here; only real virtual disks do.
        disk = DiskDetails(
            capacity=capacity,
            capacity_units=capacity_units,
            disk_id=disk_id,
            file_ref=file_ref,
            format=fmt,
            populated_size=populated_size,
        )
        section.disks.append(disk)
        return disk

    @staticmethod
    def assemble(
        vm_name: str,
        network: Optional[str],
        cpus: str,
        memory_mb: str,
        image_name: str,
        image_size: int,
        *,
        namespaces: OVFNamespaces = DEFAULT_NAMESPACES,
        build_id: str = DEFAULT_BUILD_ID,
        file_id: str = "file1",
    ) -> Envelope:
        env = EnvelopeAssembler.new_envelope(vm_name, namespaces=namespaces, build_id=build_id)
        env.network = NetworkSection(name=network or "")

        hw = env.virtual_system.hardware
        Hardware.add_memory(hw, memory_mb)
        Hardware.add_cpu(hw, cpus)
        Hardware.add_nic(hw, env.network.name)
        ide = Hardware.add_ide_controller(hw)

        iso_ref = EnvelopeAssembler.add_file_reference(
            env, os.path.basename(image_name), file_id, str(image_size)
        )
        Hardware.add_cdrom(hw, ide, iso_ref)

        # The schema wants a DiskSection even when only optical media exist.
        env.disk_sections.append(DiskSection())
        return env
