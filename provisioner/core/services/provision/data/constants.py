"""
L0 Data — Package names and tool roles.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# Role of each probed tool.  Keys are the binaries on PATH.
TOOL_ROLES: dict[str, str] = {
    "python3.12": "interpreter",
    "python3": "interpreter",
    "uv": "dependency-manager",
    "node": "chart-runtime",
    "pandoc": "document-converter",
    "pdflatex": "typesetting-engine",
}

# Human labels for status tables.
TOOL_LABELS: dict[str, str] = {
    "python3.12": "Python",
    "python3": "Python",
    "uv": "uv",
    "node": "Node.js",
    "pandoc": "Pandoc",
    "pdflatex": "LaTeX",
}

# Suffixes appended to the interpreter package (python3.12 → python3.12-venv).
PYTHON_PACKAGE_SUFFIXES: tuple[str, ...] = ("", "-venv", "-dev")

# TeX Live package sets.  "full" ≈ 1 GB, "minimal" ≈ 300 MB.
LATEX_PROFILES: dict[str, list[str]] = {
    "full": ["texlive-full"],
    "minimal": [
        "texlive-latex-base",
        "texlive-latex-extra",
        "texlive-fonts-recommended",
        "texlive-fonts-extra",
    ],
}

LATEX_PROFILE_LABELS: dict[str, str] = {
    "full": "Full TeX Live (≈1 GB, feature-complete) - recommended",
    "minimal": "Minimal TeX Live (≈300 MB, lightweight)",
}

# Container markers.
CONTAINER_MARKER_FILES: tuple[str, ...] = ("/.dockerenv", "/run/.containerenv")
CGROUP_PATH = "/proc/1/cgroup"
CGROUP_KEYWORDS: tuple[str, ...] = ("docker", "containerd", "kubepods", "podman", "lxc")

# Timeouts (seconds).
PROBE_TIMEOUT = 10
INSTALL_TIMEOUT = 1800
SYNC_TIMEOUT = 1800
