"""
Prompt loader utility for managing LLM prompts from JSON files.
Prompts are stored as line lists so multi-line persona text stays diffable.
"""
import json
import re
from pathlib import Path
from typing import Dict, Any, List, Mapping, Optional
import logging
from langchain_core.prompts import PromptTemplate

from cookingpro.core.exceptions import PromptRenderError

logger = logging.getLogger(__name__)

PROMPTS_FILE = "llm_prompts"

# {{NAME}} tokens; single braces are left alone so JSON examples survive
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Z][A-Z0-9_]*)\s*\}\}")


class PromptLoader:
    """Loads and manages prompts from JSON files."""

    def __init__(self, prompts_dir: Optional[Path] = None):
        """
        Args:
            prompts_dir: Directory holding the prompt JSON files
                (defaults to the packaged prompts directory)
        """
        self.prompts_dir = prompts_dir or Path(__file__).parent.parent / "prompts"
        self._prompts: Optional[Dict[str, Dict[str, Any]]] = None

    def _load(self) -> Dict[str, Dict[str, Any]]:
        """
        Read and memoize the prompt file.

        Raises:
            PromptRenderError: If the file is missing or is not valid JSON
        """
        if self._prompts is not None:
            return self._prompts

        path = self.prompts_dir / f"{PROMPTS_FILE}.json"
        try:
            with open(path, encoding="utf-8") as f:
                self._prompts = json.load(f)
        except FileNotFoundError as e:
            raise PromptRenderError(f"Prompt file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise PromptRenderError(f"Prompt file {path} is not valid JSON: {e}") from e

        logger.debug(f"Loaded {len(self._prompts)} prompts from {path}")
        return self._prompts

    def get_text(self, prompt_key: str, field: str = "template") -> str:
        """
        Get one field of a prompt, joining line lists with newlines.

        Raises:
            PromptRenderError: If the prompt or the field does not exist
        """
        value = self._load().get(prompt_key, {}).get(field)
        if value is None:
            raise PromptRenderError(f"Prompt '{prompt_key}' has no '{field}' field")
        if isinstance(value, list):
            return "\n".join(value)
        return value

    def get_prompt_template(self, prompt_key: str) -> PromptTemplate:
        """LangChain PromptTemplate over the prompt's "template" field."""
        return PromptTemplate.from_template(self.get_text(prompt_key))

    @staticmethod
    def render_placeholders(template: str, values: Mapping[str, str]) -> str:
        """
        Substitute {{NAME}} placeholders.

        Tokens with no entry in values are left in place; callers check
        the result with find_unresolved().
        """
        def _replace(match: re.Match) -> str:
            name = match.group(1)
            if name in values:
                return str(values[name])
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(_replace, template)

    @staticmethod
    def find_unresolved(text: str) -> List[str]:
        """Names of {{NAME}} placeholders still present in text."""
        return PLACEHOLDER_PATTERN.findall(text)


# Global instance
_prompt_loader: Optional[PromptLoader] = None


def get_prompt_loader() -> PromptLoader:
    """Get or create global PromptLoader instance."""
    global _prompt_loader
    if _prompt_loader is None:
        _prompt_loader = PromptLoader()
    return _prompt_loader
