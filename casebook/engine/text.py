"""
Narrative text processing: citation stripping, placeholder substitution
and paragraph wrapping.
"""

import html
import re
from typing import Dict, List, Mapping, Optional

CITATION_PATTERN = re.compile(r"\[cite: \d+\]")
PARAGRAPH_PATTERN = re.compile(r"<p>(.*?)</p>", re.DOTALL)
AFFORDANCE_PREFIX = '<p class="affordance">'


def strip_citations(text: Optional[str]) -> str:
    if not text:
        return ""
    return CITATION_PATTERN.sub("", text)


class TextProcessor:
    """Turns authored text into HTML fragments"""

    def __init__(self, placeholders: Optional[Mapping[str, Mapping[str, str]]] = None):
        # Placeholder token -> rendered affordance
        self.replacements: Dict[str, str] = {
            token: self._affordance_html(spec)
            for token, spec in (placeholders or {}).items()
        }

    @staticmethod
    def _affordance_html(spec: Mapping[str, str]) -> str:
        label = html.escape(spec.get("label", "Open"))
        target = html.escape(spec.get("target", ""), quote=True)
        return f'{AFFORDANCE_PREFIX}<button data-open="{target}">{label}</button></p>'

    def process(self, raw_text: Optional[str]) -> str:
        """Strip citations, substitute placeholders and wrap lines in paragraphs"""
        text = strip_citations(raw_text)
        if not text:
            return ""

        for token, replacement in self.replacements.items():
            text = text.replace(token, replacement)

        paragraphs: List[str] = []
        for line in text.split("\n"):
            line = line.strip()
            if not line:
                continue
            if line.startswith(AFFORDANCE_PREFIX) and line.endswith("</button></p>"):
                paragraphs.append(line)
                continue
            line = re.sub(r"<br>\s*<br>", "</p><p>", line)
            paragraphs.append(f"<p>{line}</p>")
        return "".join(paragraphs)

    def process_prompt(self, raw_text: Optional[str]) -> str:
        """Process text and emphasize every paragraph, as prompts are shown"""
        processed = self.process(raw_text)
        if not processed:
            return ""
        emphasized = PARAGRAPH_PATTERN.sub(
            lambda match: f"<p><em>{match.group(1)}</em></p>" if match.group(1) else "",
            processed,
        )
        if "<p>" not in emphasized:
            emphasized = f"<p><em>{emphasized}</em></p>"
        return emphasized

    @staticmethod
    def inline(raw_text: Optional[str]) -> str:
        """Single-fragment formatting used for intro and outro passages"""
        return strip_citations(raw_text).replace("\n", "<br>")

    @staticmethod
    def label(raw_text: Optional[str]) -> str:
        return strip_citations(raw_text).strip()
