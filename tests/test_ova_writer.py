import logging
import os
import tarfile
import tempfile
import unittest
from pathlib import Path

from iso2ova.converters.ova_writer import OVA
from iso2ova.core.exceptions import Fatal
from iso2ova.core.utils import U


class TestOVAWriter(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("iso2ova.test")
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)

    def tearDown(self):
        self._td.cleanup()

    def test_write_ovf(self):
        p = OVA.write_ovf(self.logger, self.td / "out" / "vm.ovf", "<Envelope/>\n")
        self.assertEqual(p.read_text(encoding="utf-8"), "<Envelope/>\n")

    def test_create_ova_entries_in_order(self):
        ovf = self.td / "vm.ovf"
        ovf.write_text("<Envelope/>\n", encoding="utf-8")
        iso = self.td / "vm.iso"
        iso.write_bytes(os.urandom(3 * 1024 * 1024 + 17))
        os.chmod(iso, 0o640)

        ova = OVA.create_ova(self.logger, [(ovf, "vm.ovf"), (iso, "images/vm.iso")], self.td / "vm.ova")

        self.assertEqual(
            OVA.list_ova(ova),
            [("vm.ovf", ovf.stat().st_size), ("images/vm.iso", iso.stat().st_size)],
        )
        with tarfile.open(ova) as tar:
            member = tar.getmember("images/vm.iso")
            self.assertEqual(member.mode & 0o777, 0o640)
            self.assertEqual(int(member.mtime), int(iso.stat().st_mtime))
            self.assertEqual(tar.extractfile(member).read(), iso.read_bytes())

    def test_headers_are_plain_ustar(self):
        ovf = self.td / "vm.ovf"
        ovf.write_text("<Envelope/>\n", encoding="utf-8")
        iso = self.td / "vm.iso"
        iso.write_bytes(b"\x00" * 1000 + b"CD001")
        os.utime(iso, (1700000000.25, 1700000000.75))

        ova = OVA.create_ova(self.logger, [(ovf, "vm.ovf"), (iso, "vm.iso")], self.td / "vm.ova")

        data = ova.read_bytes()
        names = []
        offset = 0
        while offset + 512 <= len(data):
            block = data[offset:offset + 512]
            if block == b"\0" * 512:
                break
            names.append(block[:100].rstrip(b"\0").decode("ascii"))
            self.assertEqual(block[257:263], b"ustar\x00")
            size = int(block[124:136].rstrip(b"\0 ") or b"0", 8)
            offset += 512 + (size + 511) // 512 * 512
        self.assertEqual(names, ["vm.ovf", "vm.iso"])

    def test_output_dir_under_regular_file_is_fatal(self):
        blocker = self.td / "out"
        blocker.write_text("x", encoding="utf-8")
        with self.assertRaises(Fatal):
            OVA.write_ovf(self.logger, blocker / "vm.ovf", "<Envelope/>\n")
        src = self.td / "vm.ovf"
        src.write_text("<Envelope/>\n", encoding="utf-8")
        with self.assertRaises(Fatal):
            OVA.create_ova(self.logger, [(src, "vm.ovf")], blocker / "vm.ova")

    def test_missing_member_is_fatal(self):
        with self.assertRaises(Fatal):
            OVA.create_ova(self.logger, [(self.td / "nope.iso", "nope.iso")], self.td / "x.ova")

    def test_archive_name(self):
        self.assertEqual(U.archive_name(Path("path/to/vm.iso")), "path/to/vm.iso")
        self.assertEqual(U.archive_name(Path("./vm.iso")), "vm.iso")
        self.assertEqual(U.archive_name(Path("/srv/images/vm.iso")), "vm.iso")
        self.assertEqual(U.archive_name(Path("../vm.iso")), "vm.iso")


if __name__ == "__main__":
    unittest.main()
