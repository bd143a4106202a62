# tests/conftest.py

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the project root to sys.path so `import eml_viewer` works
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Settings are read at import time; keep tests off the file sink.
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("API_TOKEN", "test-token")

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES
