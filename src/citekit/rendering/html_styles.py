"""CSS for the HTML target: a ``<style>`` block or per-element inline styles."""

from dataclasses import dataclass
from typing import Literal

from citekit.status import StatusKind

HtmlTheme = Literal["light", "dark", "auto"]


@dataclass(frozen=True)
class StatusColors:
    text: str
    bg: str
    border: str


STATUS_COLORS: dict[str, dict[StatusKind, StatusColors]] = {
    "light": {
        StatusKind.VERIFIED: StatusColors("#16a34a", "#f0fdf4", "#bbf7d0"),
        StatusKind.PARTIAL: StatusColors("#d97706", "#fffbeb", "#fde68a"),
        StatusKind.MISS: StatusColors("#dc2626", "#fef2f2", "#fecaca"),
        StatusKind.PENDING: StatusColors("#6b7280", "#f9fafb", "#e5e7eb"),
    },
    "dark": {
        StatusKind.VERIFIED: StatusColors("#4ade80", "#052e16", "#166534"),
        StatusKind.PARTIAL: StatusColors("#fbbf24", "#451a03", "#92400e"),
        StatusKind.MISS: StatusColors("#f87171", "#450a0a", "#991b1b"),
        StatusKind.PENDING: StatusColors("#9ca3af", "#1f2937", "#374151"),
    },
}

# Underline decoration per status for the underline (linter) variant
UNDERLINE_STYLES: dict[StatusKind, str] = {
    StatusKind.VERIFIED: "solid",
    StatusKind.PARTIAL: "dashed",
    StatusKind.MISS: "wavy",
    StatusKind.PENDING: "dotted",
}

STATUS_CLASS_SUFFIXES: dict[StatusKind, str] = {
    StatusKind.VERIFIED: "verified",
    StatusKind.PARTIAL: "partial",
    StatusKind.MISS: "not-found",
    StatusKind.PENDING: "pending",
}

CHIP_LAYOUT = "display: inline-flex; align-items: center; gap: 2px; padding: 1px 6px; border-radius: 9999px; font-size: 0.85em;"

BASE_RULES = """\
.{p}citation {{
  position: relative;
  cursor: pointer;
  text-decoration: none;
}}

.{p}citation-link {{
  text-decoration: none;
  color: inherit;
}}

.{p}citation-link:hover {{
  opacity: 0.8;
}}

/* Tooltip */
.{p}tooltip {{
  display: none;
  position: absolute;
  bottom: 100%;
  left: 50%;
  transform: translateX(-50%);
  padding: 8px 12px;
  border-radius: 6px;
  font-size: 0.85em;
  line-height: 1.4;
  white-space: nowrap;
  z-index: 1000;
  pointer-events: none;
  max-width: 320px;
}}

.{p}citation:hover .{p}tooltip {{
  display: flex;
  flex-direction: column;
  gap: 2px;
}}

.{p}tooltip-status {{
  font-weight: 600;
}}

.{p}tooltip-source {{
  font-size: 0.9em;
  opacity: 0.85;
}}

.{p}tooltip-quote {{
  font-style: italic;
  font-size: 0.9em;
  opacity: 0.75;
  white-space: normal;
  max-width: 280px;
  overflow: hidden;
  text-overflow: ellipsis;
}}

.{p}tooltip-image {{
  max-width: 280px;
  border-radius: 4px;
  margin-top: 4px;
}}

/* Chip */
.{p}chip {{
  display: inline-flex;
  align-items: center;
  gap: 2px;
  padding: 1px 6px;
  border-radius: 9999px;
  font-size: 0.85em;
}}"""


def _palette(theme: HtmlTheme) -> dict[StatusKind, StatusColors]:
    return STATUS_COLORS["dark" if theme == "dark" else "light"]


def _status_rules(prefix: str, colors: dict[StatusKind, StatusColors]) -> str:
    rules = []
    for kind, color in colors.items():
        status = f".{prefix}{STATUS_CLASS_SUFFIXES[kind]}"
        rules.append(
            f"{status} .{prefix}indicator {{\n  color: {color.text};\n}}\n\n"
            f"{status} .{prefix}tooltip {{\n  background: {color.bg};\n"
            f"  border: 1px solid {color.border};\n  color: {color.text};\n}}\n\n"
            f".{prefix}linter{status} {{\n"
            f"  text-decoration: underline {UNDERLINE_STYLES[kind]} {color.text};\n"
            f"  text-underline-offset: 2px;\n}}\n\n"
            f".{prefix}chip{status} {{\n  background: {color.bg};\n"
            f"  border: 1px solid {color.border};\n}}"
        )
    return "\n\n".join(rules)


def generate_style_block(prefix: str = "dc-", theme: HtmlTheme = "light") -> str:
    """Full ``<style>`` element for the given class prefix and theme.

    The ``auto`` theme emits light colors plus a
    ``prefers-color-scheme: dark`` media query with the dark palette.
    """
    base = BASE_RULES.format(p=prefix)
    if theme == "auto":
        dark = _status_rules(prefix, STATUS_COLORS["dark"])
        body = (
            f"{base}\n\n{_status_rules(prefix, STATUS_COLORS['light'])}\n\n"
            f"@media (prefers-color-scheme: dark) {{\n{dark}\n}}"
        )
    else:
        body = f"{base}\n\n{_status_rules(prefix, _palette(theme))}"
    return f"<style>\n{body}\n</style>"


def inline_style(kind: StatusKind, variant: str, theme: HtmlTheme = "light") -> str:
    """``style=""`` value for a citation span, for contexts without CSS (email)."""
    color = _palette(theme)[kind]
    base = "cursor: pointer; text-decoration: none;"
    if variant in ("underline", "linter"):
        return (
            f"{base} text-decoration: underline {UNDERLINE_STYLES[kind]} {color.text}; "
            "text-underline-offset: 2px;"
        )
    if variant == "chip":
        return f"{base} {CHIP_LAYOUT} background: {color.bg}; border: 1px solid {color.border};"
    return base


def indicator_inline_style(kind: StatusKind, theme: HtmlTheme = "light") -> str:
    return f"color: {_palette(theme)[kind].text};"
