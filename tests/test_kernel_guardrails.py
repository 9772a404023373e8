"""Guardrails to keep the kernel free of CLI and manifest-loading concerns."""

import re
from pathlib import Path


FORBIDDEN_PATTERNS = {
    "argparse": re.compile(r"\bargparse\b"),
    "yaml": re.compile(r"\bimport yaml\b"),
    "open(": re.compile(r"(?<![A-Za-z0-9_])open\s*\("),
    "print(": re.compile(r"(?<![A-Za-z0-9_])print\s*\("),
    "sys.exit": re.compile(r"\bsys\.exit\b"),
    "os.path": re.compile(r"\bos\.path\b"),
    "_internal": re.compile(r"\bocp_catalog_validator\._internal\b"),
}


def test_kernel_has_no_forbidden_tokens():
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "ocp_catalog_validator" / "kernel"
    offenders = []

    for path in kernel_dir.glob("*.py"):
        contents = path.read_text(encoding="utf-8")
        for token, pattern in FORBIDDEN_PATTERNS.items():
            if pattern.search(contents):
                offenders.append(f"{path.name}: {token}")

    assert not offenders, "Forbidden kernel tokens found: " + ", ".join(offenders)
