"""
Minimal editor for kernel ``.config`` files.

Only two kinds of line carry a symbol: an active assignment
(``CONFIG_FOO=y``) and a disabled marker (``# CONFIG_FOO is not set``).
Everything else is kept verbatim so an edited file differs from the
original only on the lines that were changed.

Lines are split on ``\\n`` alone, so a ``\\r`` or any other control
character stays part of its line. The file is decoded with
``surrogateescape`` so bytes that are not UTF-8 survive a load/save
cycle unchanged.
"""
import re
from pathlib import Path
from typing import Optional

ASSIGN_RE = re.compile(r"^(CONFIG_[A-Za-z0-9_]+)=(.*?)\r?$")
UNSET_RE = re.compile(r"^# (CONFIG_[A-Za-z0-9_]+) is not set\r?$")

ENCODING = "utf-8"
ERRORS = "surrogateescape"


class KernelConfig:
    def __init__(self, lines: list[str]) -> None:
        self.lines = lines

    @classmethod
    def load(cls, path: Path) -> "KernelConfig":
        with open(path, "r", encoding=ENCODING, errors=ERRORS, newline="") as f:
            text = f.read()
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return cls(lines)

    def save(self, path: Path) -> None:
        with open(path, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
            f.write("".join(line + "\n" for line in self.lines))

    def _find(self, symbol: str) -> tuple[Optional[re.Match], Optional[int], Optional[int]]:
        match = assigned = unset = None
        for i, line in enumerate(self.lines):
            m = ASSIGN_RE.match(line)
            if m and m.group(1) == symbol and assigned is None:
                match, assigned = m, i
            m = UNSET_RE.match(line)
            if m and m.group(1) == symbol and unset is None:
                unset = i
        return match, assigned, unset

    def get(self, symbol: str) -> Optional[str]:
        """Value of an active assignment, or None when unset or absent."""
        match, _, _ = self._find(symbol)
        return match.group(2) if match else None

    def ensure(self, symbol: str, value: str) -> bool:
        """
        Make sure ``symbol`` is assigned. An existing assignment is left
        alone, a disabled marker is rewritten in place, otherwise the
        assignment is appended. Returns True when the config changed.
        """
        _, assigned, unset = self._find(symbol)
        if assigned is not None:
            return False
        # keep the file's line ending
        ending = "\r" if any(existing.endswith("\r") for existing in self.lines) else ""
        line = f"{symbol}={value}{ending}"
        if unset is not None:
            self.lines[unset] = line
        else:
            self.lines.append(line)
        return True
