"""
Upload policy tables.

Static, read-only data shared by every evaluation. Bump POLICY_VERSION
whenever one of the tables changes so responses and logs can be traced back
to the rules that produced them.
"""

import re
from types import MappingProxyType
from typing import FrozenSet, Mapping, Pattern, Tuple

POLICY_VERSION = "1"

# Declared extension -> detected content types accepted for it
EXTENSION_TYPES: Mapping[str, FrozenSet[str]] = MappingProxyType({
    # Images
    "png": frozenset({"png"}),
    "jpg": frozenset({"jpg"}),
    "jpeg": frozenset({"jpg"}),
    "gif": frozenset({"gif"}),

    # Documents
    "pdf": frozenset({"pdf"}),
    "txt": frozenset({"txt"}),
    "md": frozenset({"txt", "md"}),
    "html": frozenset({"html", "txt"}),
    "htm": frozenset({"html", "txt"}),
    "csv": frozenset({"txt", "csv"}),

    # Office Open XML (zip containers)
    "docx": frozenset({"zip", "docx"}),
    "dotx": frozenset({"zip", "docx", "dotx"}),
    "xlsx": frozenset({"zip", "xlsx"}),
    "pptx": frozenset({"zip", "pptx"}),

    # Archives
    "zip": frozenset({"zip"}),

    # Videos
    "mp4": frozenset({"mp4"}),
    "webm": frozenset({"webm"}),
})

TEXT_EXTENSIONS: FrozenSet[str] = frozenset({"txt", "md", "html", "htm", "csv"})

ARCHIVE_EXTENSIONS: FrozenSet[str] = frozenset({"zip", "docx", "dotx", "xlsx", "pptx"})

MACRO_CAPABLE_EXTENSIONS: FrozenSet[str] = frozenset({"docx", "dotx", "xlsx", "pptx"})

# Storage part holding the VBA project inside an OOXML package
MACRO_PROJECT_ENTRY = "vbaproject.bin"

BLOCKED_ARCHIVE_EXTENSIONS: FrozenSet[str] = frozenset({
    # Executables and installers
    "exe", "com", "scr", "msi",
    # Shell, batch and script-engine files
    "bat", "cmd", "sh", "ps1", "vbs", "js", "jse", "wsf", "php", "jar",
    # Dynamic libraries
    "dll", "so", "dylib",
})

# (label, pattern) pairs, checked in order
SUSPICIOUS_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("<script", re.compile(r"<script\b", re.IGNORECASE)),
    ("eval(", re.compile(r"\beval\s*\(", re.IGNORECASE)),
    ("base64_decode(", re.compile(r"base64_decode\s*\(", re.IGNORECASE)),
    ("<?php", re.compile(r"<\?php", re.IGNORECASE)),
    ("event handler attribute", re.compile(r"\bon(?:error|load|click|mouseover|focus)\s*=", re.IGNORECASE)),
    ("<iframe", re.compile(r"<iframe\b", re.IGNORECASE)),
    ("system(", re.compile(r"\bsystem\s*\(", re.IGNORECASE)),
    ("shell exec", re.compile(r"\b(?:shell_)?exec\s*\(", re.IGNORECASE)),
    ("shebang", re.compile(r"^#!", re.MULTILINE)),
)
