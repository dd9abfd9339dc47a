"""Prompt loader — hot-reload prompt templates from prompts/ directory.

A prompt file is markdown split into `## <Section>` blocks. Sections may
contain $placeholders, filled by render(). Edit prompt files directly;
changes take effect on the next call.
"""

import logging
import re
from pathlib import Path
from string import Template

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_cache: dict[str, str] = {}


def _extract_section(text: str, heading: str) -> str:
    """Extract content under a specific ## heading from markdown.

    Returns everything between '## <heading>' and the next '## ' or EOF.
    """
    pattern = rf"^## {re.escape(heading)}\s*\n(.*?)(?=^## |\Z)"
    match = re.search(pattern, text, re.MULTILINE | re.DOTALL)
    return match.group(1).strip() if match else ""


def get_prompt(name: str) -> str:
    """Load a prompt file by name (without .md extension).

    Always reads from disk (hot-reload). Falls back to cache if file missing.
    """
    path = _PROMPTS_DIR / f"{name}.md"
    if path.exists():
        content = path.read_text(encoding="utf-8").strip()
        _cache[name] = content
        return content

    if name in _cache:
        log.warning("Prompt file missing, using cache: %s", name)
        return _cache[name]

    log.error("Prompt not found: %s", name)
    return ""


def get_section(name: str, heading: str) -> str:
    return _extract_section(get_prompt(name), heading)


def render(name: str, heading: str, /, **values: object) -> str:
    """Section text with $placeholders substituted.

    Unknown placeholders are left untouched rather than raising.
    """
    return Template(get_section(name, heading)).safe_substitute(
        {k: str(v) for k, v in values.items()}
    )


def list_prompts() -> list[str]:
    """List available prompt template names."""
    if not _PROMPTS_DIR.exists():
        return []
    return sorted(f.stem for f in _PROMPTS_DIR.glob("*.md"))
