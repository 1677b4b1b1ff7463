from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Tuple

from ..converters.ova_writer import OVA
from ..core.exceptions import SerializationError
from ..core.utils import U
from ..ovf.envelope import EnvelopeAssembler
from ..ovf.model import DEFAULT_NAMESPACES
from ..ovf.serializer import OVFSerializer

ISO_SUFFIX = ".iso"


class Orchestrator:
    """
    Top-level pipeline runner.
    Responsibilities:
    - Derive the VM name from the ISO path and stat the ISO
    - Assemble and serialize the OVF envelope (abort on serialization errors)
    - Write <name>.ovf, then bundle it with the ISO into <name>.ova
    Nothing is written unless every earlier step succeeded.
    """

    def __init__(self, logger: logging.Logger, args: argparse.Namespace):
        self.logger = logger
        self.args = args

    @staticmethod
    def vm_name_for(iso: Path) -> str:
        name = os.path.basename(str(iso))
        if name.endswith(ISO_SUFFIX):
            name = name[: -len(ISO_SUFFIX)]
        return name

    def build_descriptor(self, iso: Path, vm_name: str) -> str:
        st = U.stat_file(self.logger, iso)
        self.logger.info(f"Input ISO: {iso} ({U.human_bytes(st.st_size)})")

        envelope = EnvelopeAssembler.assemble(
            vm_name,
            self.args.network,
            self.args.cpus,
            self.args.mem,
            str(iso),
            st.st_size,
            namespaces=DEFAULT_NAMESPACES,
            build_id=self.args.build_id,
        )
        hw = envelope.virtual_system.hardware
        self.logger.debug(f"Assembled {len(hw.items)} hardware items for {vm_name!r}")
        try:
            return OVFSerializer.to_xml(envelope)
        except SerializationError as e:
            self.logger.error(str(e))
            raise

    def run(self) -> int:
        iso = Path(self.args.path)
        vm_name = self.vm_name_for(iso)
        U.banner(self.logger, f"Build appliance {vm_name}")
        self.logger.info(f"CPUs: {self.args.cpus}  Memory: {self.args.mem} MB  Network: {self.args.network!r}")
        content = self.build_descriptor(iso, vm_name)

        if self.args.dry_run:
            self.logger.info("DRY-RUN: not writing OVF/OVA")
            print(content, end="")
            return 0

        out_dir = Path(self.args.output_dir).expanduser()
        ovf_path = OVA.write_ovf(self.logger, out_dir / f"{vm_name}.ovf", content)
        members: List[Tuple[Path, str]] = [
            (ovf_path, ovf_path.name),
            (iso, U.archive_name(iso)),
        ]
        ova_path = OVA.create_ova(self.logger, members, out_dir / f"{vm_name}.ova")

        for name, size in OVA.list_ova(ova_path):
            self.logger.info(f" - {name} ({U.human_bytes(size)})")
        self.logger.info(f"Appliance ready: {ova_path}")
        return 0
