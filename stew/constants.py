"""Shared constants: terminal colours, asset-matching patterns and project identity."""

from __future__ import annotations

from typing import Any

_RESET = "\x1b[0m"
_FG_RED = "31"
_FG_GREEN = "32"
_FG_YELLOW = "33"
_OP_BOLD = "1"

_color_enabled = True

REGEX_DARWIN = r"(?i)(darwin|mac(os)?|apple|osx)"
REGEX_WINDOWS = r"(?i)(windows|win|.msi|.exe)"
REGEX_ARM64 = r"(?i)(arm64|aarch64|arm64e)"
REGEX_AMD64 = r"(?i)(x86_64|amd64|x64|amd64e)"
REGEX_386 = r"(?i)(i?386|x86_32|amd32|x32)"
REGEX_GITHUB = r"(?i)^[A-Za-z0-9\-]+\/[A-Za-z0-9\_\.\-]+(@.+)?$"
REGEX_GITHUB_SEARCH = r"(?i)^[A-Za-z0-9\_\.\-\/\:]+$"
REGEX_URL = (
    r"^(http|ftp|https):\/\/([\w_-]+(?:(?:\.[\w_-]+)+))"
    r"([\w.,@?^=%&:\/~+#-]*[\w@?^=%&\/~+#-])"
)
REGEX_CHECKSUM = r"\.(sha(256|512)(sum)?)$"

STEW_OWNER = "marwanhawari"
STEW_REPO = "stew"


def set_color_enabled(enabled: bool) -> None:
    """Turn ANSI colouring of rendered text on or off."""
    global _color_enabled
    _color_enabled = bool(enabled)


def _render(codes: tuple[str, ...], value: Any) -> str:
    text = str(value)
    if not text or not _color_enabled:
        return text
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def red_color(text: Any) -> str:
    """Render text in bold red."""
    return _render((_FG_RED, _OP_BOLD), text)


def green_color(text: Any) -> str:
    """Render text in bold green."""
    return _render((_FG_GREEN, _OP_BOLD), text)


def yellow_color(text: Any) -> str:
    """Render text in bold yellow."""
    return _render((_FG_YELLOW, _OP_BOLD), text)


def bold_color(text: Any) -> str:
    """Render text in bold."""
    return _render((_OP_BOLD,), text)