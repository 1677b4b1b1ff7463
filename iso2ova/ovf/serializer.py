from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from dataclasses import fields
from typing import Dict, Optional, Sequence, Tuple

from ..core.exceptions import OVFParseError, SerializationError
from .model import (
    DEFAULT_NAMESPACES,
    DiskDetails,
    DiskSection,
    Envelope,
    FileReference,
    HardwareItem,
    NetworkSection,
    OperatingSystemSection,
    OVFNamespaces,
    ResourceType,
    SystemDescriptor,
    VirtualHardware,
    VirtualSystem,
)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Characters XML 1.0 cannot carry even when escaped.
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

# rasd element order inside an Item
_ITEM_FIELDS: Sequence[Tuple[str, str]] = (
    ("address", "Address"),
    ("address_on_parent", "AddressOnParent"),
    ("allocation_units", "AllocationUnits"),
    ("automatic_allocation", "AutomaticAllocation"),
    ("connection", "Connection"),
    ("description", "Description"),
    ("element_name", "ElementName"),
    ("host_resource", "HostResource"),
    ("instance_id", "InstanceID"),
    ("parent", "Parent"),
    ("resource_sub_type", "ResourceSubType"),
    ("resource_type", "ResourceType"),
    ("virtual_quantity", "VirtualQuantity"),
)

_SYSTEM_FIELDS: Sequence[Tuple[str, str]] = (
    ("element_name", "ElementName"),
    ("instance_id", "InstanceID"),
    ("system_id", "VirtualSystemIdentifier"),
    ("system_type", "VirtualSystemType"),
)

_DISK_ATTRS: Sequence[Tuple[str, str]] = (
    ("capacity", "capacity"),
    ("capacity_units", "capacityAllocationUnits"),
    ("disk_id", "diskId"),
    ("file_ref", "fileRef"),
    ("format", "format"),
    ("populated_size", "populatedSize"),
)


def _text(parent: ET.Element, tag: str, text: Optional[str]) -> Optional[ET.Element]:
    """SubElement with text content; None and empty values are left out."""
    if not text:
        return None
    elem = ET.SubElement(parent, tag)
    elem.text = text
    return elem


def _always(parent: ET.Element, tag: str, text: str) -> ET.Element:
    elem = ET.SubElement(parent, tag)
    elem.text = text
    return elem


class OVFSerializer:
    """
    Renders an Envelope as an OVF descriptor and reads one back.

    The writer emits literal prefixed names (ovf:, rasd:, vssd:) plus the
    matching xmlns declarations on the root, so the text looks the way
    hypervisor importers expect. The reader is namespace-aware and does not
    depend on the prefixes chosen by whoever wrote the file.
    """

    # ----------------------------
    # Writing
    # ----------------------------

    @staticmethod
    def to_element(env: Envelope) -> ET.Element:
        ns = env.namespaces
        root = ET.Element(
            "Envelope",
            attrib={
                "vmw:buildId": env.build_id,
                "xmlns": ns.xmlns,
                "xmlns:cim": ns.cim,
                "xmlns:ovf": ns.ovf,
                "xmlns:rasd": ns.rasd,
                "xmlns:vmw": ns.vmw,
                "xmlns:vssd": ns.vssd,
                "xmlns:xsi": ns.xsi,
            },
        )

        if env.files:
            refs = ET.SubElement(root, "References")
            for f in env.files:
                ET.SubElement(refs, "File", attrib={"ovf:href": f.href, "ovf:id": f.ref_id, "ovf:size": f.size})

        for ds in env.disk_sections:
            ds_el = ET.SubElement(root, "DiskSection")
            _always(ds_el, "Info", ds.info)
            for d in ds.disks:
                ET.SubElement(ds_el, "Disk", attrib={f"ovf:{a}": getattr(d, k) for k, a in _DISK_ATTRS})

        if env.network is not None:
            net_el = ET.SubElement(root, "NetworkSection")
            _always(net_el, "Info", env.network.info)
            n = ET.SubElement(net_el, "Network", attrib={"ovf:name": env.network.name})
            _always(n, "Description", env.network.description)

        vs = env.virtual_system
        vs_el = ET.SubElement(root, "VirtualSystem", attrib={"ovf:id": vs.vs_id})
        _always(vs_el, "Info", vs.info)
        _always(vs_el, "Name", vs.name)

        os_el = ET.SubElement(
            vs_el, "OperatingSystemSection", attrib={"ovf:id": vs.os.os_id, "ovf:osType": vs.os.os_type}
        )
        _always(os_el, "Info", vs.os.info)
        _text(os_el, "Description", vs.os.description)

        hw = vs.hardware
        hw_el = ET.SubElement(vs_el, "VirtualHardwareSection")
        _always(hw_el, "Info", hw.info)
        sys_el = ET.SubElement(hw_el, "System")
        for attr, tag in _SYSTEM_FIELDS:
            _always(sys_el, f"vssd:{tag}", getattr(hw.system, attr))

        for item in hw.items:
            item_el = ET.SubElement(hw_el, "Item")
            if item.required:
                item_el.set("ovf:required", item.required)
            for attr, tag in _ITEM_FIELDS:
                value = getattr(item, attr)
                if isinstance(value, ResourceType):
                    value = value.value
                _text(item_el, f"rasd:{tag}", value)
        return root

    @staticmethod
    def to_xml(env: Envelope) -> str:
        try:
            root = OVFSerializer.to_element(env)
            ET.indent(root, space="  ")
            body = ET.tostring(root, encoding="unicode")
        except (TypeError, ValueError) as e:
            raise SerializationError(code=3, msg=f"Failed to render OVF descriptor: {e}", cause=e)
        bad = _INVALID_XML_CHARS.search(body)
        if bad:
            raise SerializationError(
                code=3,
                msg=f"OVF descriptor would contain {bad.group()!r}, which XML 1.0 cannot represent",
                context={"offset": bad.start()},
            )
        # ElementTree escapes CR only inside attributes; parsers fold a raw
        # CR in text into LF, so text needs the character reference too.
        body = body.replace("\r", "&#13;")
        return XML_HEADER + body + "\n"

    # ----------------------------
    # Reading
    # ----------------------------

    @staticmethod
    def from_xml(text: str) -> Envelope:
        declared: Dict[str, str] = {}
        root: Optional[ET.Element] = None
        try:
            for event, obj in ET.iterparse(io.BytesIO(text.encode("utf-8")), events=("start", "start-ns")):
                if event == "start-ns":
                    prefix, uri = obj
                    declared.setdefault(prefix or "xmlns", uri)
                elif root is None:
                    root = obj
        except ET.ParseError as e:
            raise OVFParseError(msg=f"Malformed OVF descriptor: {e}", cause=e)
        if root is None:
            raise OVFParseError(msg="Empty OVF descriptor")

        ns = OVFNamespaces(
            **{f.name: declared.get(f.name, getattr(DEFAULT_NAMESPACES, f.name)) for f in fields(OVFNamespaces)}
        )
        return _Reader(ns).envelope(root)


class _Reader:
    def __init__(self, ns: OVFNamespaces):
        self.ns = ns

    def e(self, local: str) -> str:
        return f"{{{self.ns.xmlns}}}{local}"

    def a(self, local: str) -> str:
        return f"{{{self.ns.ovf}}}{local}"

    def child_text(self, el: ET.Element, tag: str) -> Optional[str]:
        child = el.find(tag)
        if child is None:
            return None
        return child.text or ""

    def require(self, el: ET.Element, tag: str) -> ET.Element:
        child = el.find(tag)
        if child is None:
            raise OVFParseError(msg=f"OVF descriptor is missing <{tag.split('}')[-1]}>", context={"parent": el.tag})
        return child

    def envelope(self, root: ET.Element) -> Envelope:
        if root.tag != self.e("Envelope"):
            raise OVFParseError(msg=f"Not an OVF envelope: root element is {root.tag}")
        env = Envelope(
            build_id=root.get(f"{{{self.ns.vmw}}}buildId", ""),
            namespaces=self.ns,
        )

        refs = root.find(self.e("References"))
        if refs is not None:
            for f in refs.findall(self.e("File")):
                env.files.append(
                    FileReference(
                        href=f.get(self.a("href"), ""),
                        ref_id=f.get(self.a("id"), ""),
                        size=f.get(self.a("size"), ""),
                    )
                )

        for ds_el in root.findall(self.e("DiskSection")):
            ds = DiskSection(info=self.child_text(ds_el, self.e("Info")) or "")
            for d in ds_el.findall(self.e("Disk")):
                ds.disks.append(DiskDetails(**{k: d.get(self.a(a), "") for k, a in _DISK_ATTRS}))
            env.disk_sections.append(ds)

        net_el = root.find(self.e("NetworkSection"))
        if net_el is not None:
            n = self.require(net_el, self.e("Network"))
            env.network = NetworkSection(
                name=n.get(self.a("name"), ""),
                description=self.child_text(n, self.e("Description")) or "",
                info=self.child_text(net_el, self.e("Info")) or "",
            )

        env.virtual_system = self.virtual_system(self.require(root, self.e("VirtualSystem")))
        return env

    def virtual_system(self, vs_el: ET.Element) -> VirtualSystem:
        os_el = self.require(vs_el, self.e("OperatingSystemSection"))
        os_section = OperatingSystemSection(
            os_id=os_el.get(self.a("id"), ""),
            os_type=os_el.get(self.a("osType"), ""),
            info=self.child_text(os_el, self.e("Info")) or "",
            description=self.child_text(os_el, self.e("Description")),
        )
        return VirtualSystem(
            name=self.child_text(vs_el, self.e("Name")) or "",
            vs_id=vs_el.get(self.a("id"), ""),
            info=self.child_text(vs_el, self.e("Info")) or "",
            os=os_section,
            hardware=self.hardware(self.require(vs_el, self.e("VirtualHardwareSection"))),
        )

    def hardware(self, hw_el: ET.Element) -> VirtualHardware:
        vssd = self.ns.vssd
        sys_el = self.require(hw_el, self.e("System"))
        system = SystemDescriptor(
            **{attr: self.child_text(sys_el, f"{{{vssd}}}{tag}") or "" for attr, tag in _SYSTEM_FIELDS}
        )
        hw = VirtualHardware(info=self.child_text(hw_el, self.e("Info")) or "", system=system)
        for item_el in hw_el.findall(self.e("Item")):
            hw.items.append(self.item(item_el))
        return hw

    def item(self, item_el: ET.Element) -> HardwareItem:
        rasd = self.ns.rasd
        values = {attr: self.child_text(item_el, f"{{{rasd}}}{tag}") for attr, tag in _ITEM_FIELDS}
        code = values.pop("resource_type")
        instance_id = values.pop("instance_id")
        if not instance_id:
            raise OVFParseError(msg="Hardware item without rasd:InstanceID")
        try:
            resource_type = ResourceType(code)
        except ValueError as e:
            raise OVFParseError(
                msg=f"Unsupported rasd:ResourceType {code!r}", cause=e, context={"instance_id": instance_id}
            )
        return HardwareItem(
            resource_type=resource_type,
            instance_id=instance_id,
            required=item_el.get(self.a("required")),
            **values,
        )
