#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from iso2ova.__main__ import run


if __name__ == "__main__":
    run()
