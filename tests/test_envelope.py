import unittest

from iso2ova.core.exceptions import DuplicateReferenceError
from iso2ova.ovf.envelope import EnvelopeAssembler
from iso2ova.ovf.model import DEFAULT_NAMESPACES, DiskSection, ResourceType


class TestEnvelopeAssembler(unittest.TestCase):
    def setUp(self):
        self.env = EnvelopeAssembler.assemble("vm", "corp", "2", "4096", "path/to/vm.iso", 1234)
        self.items = self.env.virtual_system.hardware.items

    def test_default_flow_item_order(self):
        self.assertEqual(
            [i.resource_type for i in self.items],
            [ResourceType.MEM, ResourceType.CPU, ResourceType.NET, ResourceType.IDE, ResourceType.CDROM],
        )
        self.assertEqual([i.instance_id for i in self.items], ["1", "2", "3", "4", "5"])

    def test_cdrom_attached_to_preceding_ide_controller(self):
        kinds = [i.resource_type for i in self.items]
        ide_pos = kinds.index(ResourceType.IDE)
        cd_pos = kinds.index(ResourceType.CDROM)
        self.assertLess(ide_pos, cd_pos)
        self.assertEqual(self.items[cd_pos].parent, self.items[ide_pos].instance_id)

    def test_cdrom_host_resource_matches_single_file_reference(self):
        cd = self.items[-1]
        matches = [f for f in self.env.files if cd.host_resource == f"ovf:/file/{f.ref_id}"]
        self.assertEqual(len(matches), 1)
        self.assertEqual(matches[0].href, "vm.iso")
        self.assertEqual(matches[0].size, "1234")

    def test_identity_and_system(self):
        vs = self.env.virtual_system
        self.assertEqual(vs.vs_id, "vm")
        self.assertEqual(vs.name, "vm")
        self.assertEqual(vs.os.os_type, "*other3xLinux64Guest")
        self.assertEqual(vs.hardware.system.instance_id, "0")
        self.assertEqual(vs.hardware.system.system_type, "vmx-11")
        self.assertEqual(vs.hardware.system.system_id, "vm")
        self.assertEqual(self.env.network.name, "corp")
        self.assertEqual(self.env.network.description, "Default Network")

    def test_placeholder_disk_section(self):
        self.assertEqual(len(self.env.disk_sections), 1)
        self.assertEqual(self.env.disk_sections[0].disks, [])

    def test_missing_network_defaults_to_empty_label(self):
        env = EnvelopeAssembler.assemble("vm", None, "1", "1024", "vm.iso", 1)
        self.assertEqual(env.network.name, "")

    def test_namespaces_are_the_fixed_set(self):
        self.assertIs(self.env.namespaces, DEFAULT_NAMESPACES)
        self.assertEqual(self.env.namespaces.ovf, "http://schemas.dmtf.org/ovf/envelope/1")
        self.assertEqual(self.env.build_id, "linuxkitOVF")

    def test_duplicate_file_reference_rejected(self):
        with self.assertRaises(DuplicateReferenceError):
            EnvelopeAssembler.add_file_reference(self.env, "other.iso", "file1", "10")
        self.assertEqual(len(self.env.files), 1)

    def test_append_disk(self):
        section = DiskSection()
        disk = EnvelopeAssembler.append_disk(section, "8", "byte * 2^30", "vmdisk1", "file2", "http://format", "0")
        self.assertEqual(section.disks, [disk])
        self.assertEqual(disk.file_ref, "file2")


if __name__ == "__main__":
    unittest.main()
