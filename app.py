#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Application entrypoint for joman.

This file is intentionally minimal. It only hands off to the CLI.
"""
from __future__ import annotations

import sys

from joman.cli import main


if __name__ == "__main__":
    sys.exit(main())
