"""Only the lifecycle manager may write order status or payment flags."""
from __future__ import annotations

import re
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "resto"
LIFECYCLE_MODULE = PACKAGE_ROOT / "services" / "order_service.py"

STORE_WRITE = re.compile(r"\b_?store\.(update|insert)\(")
FIELD_WRITE = re.compile(r"""["'](status|payment_confirmed)["']\s*:""")


def _sources() -> list[Path]:
    return sorted(path for path in PACKAGE_ROOT.rglob("*.py") if path.is_file())


def test_only_lifecycle_manager_writes_to_store() -> None:
    writers = [path for path in _sources() if STORE_WRITE.search(path.read_text(encoding="utf-8"))]

    assert writers == [LIFECYCLE_MODULE]


def test_status_fields_are_only_set_by_lifecycle_manager() -> None:
    offenders = []
    for path in _sources():
        if path == LIFECYCLE_MODULE:
            continue
        text = path.read_text(encoding="utf-8")
        for line in text.splitlines():
            if FIELD_WRITE.search(line) and "update(" in line:
                offenders.append(f"{path.name}: {line.strip()}")

    assert offenders == []
    assert FIELD_WRITE.search(LIFECYCLE_MODULE.read_text(encoding="utf-8"))
