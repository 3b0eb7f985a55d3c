# src/rootshare/web_ui/__init__.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

STATIC_DIR = Path(__file__).resolve().parent / "static"


def mount_web_ui(app: FastAPI, prefix: str):
    """Serves the single-page file manager UI under ``prefix``."""
    if not (STATIC_DIR / "index.html").is_file():
        raise FileNotFoundError(f"Web UI assets missing from {STATIC_DIR}")
    app.mount(prefix, StaticFiles(directory=STATIC_DIR, html=True), name="web_ui")
