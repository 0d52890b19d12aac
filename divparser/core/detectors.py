"""
Extraction template loading and label phrase detection.
"""
import yaml
from pathlib import Path
from typing import Collection, Dict, List, Optional, Tuple
import logging

from pydantic import ValidationError

from ..models.schema import Statement, StatementTemplate, OTHER_FIELD

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "dividend_statement"


class TemplateLoader:
    """Loads extraction templates from YAML files."""

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = templates_dir or Path(__file__).parent.parent / "templates"
        self.templates: Dict[str, StatementTemplate] = {}
        self._load_templates()

    def _load_templates(self):
        """Load all available templates."""
        if not self.templates_dir.exists():
            logger.warning(f"Templates directory not found: {self.templates_dir}")
            return

        for yaml_file in sorted(self.templates_dir.glob("*.yaml")):
            try:
                with open(yaml_file, 'r', encoding='utf-8') as f:
                    template = StatementTemplate.model_validate(yaml.safe_load(f))
                self.templates[template.template_id] = template
                logger.debug(f"Loaded template: {template.template_id}")
            except (OSError, yaml.YAMLError, ValidationError) as e:
                logger.error(f"Error loading template {yaml_file}: {e}")

    def get_template(self, template_id: str) -> Optional[StatementTemplate]:
        """Get template configuration by ID."""
        return self.templates.get(template_id)

    def list_templates(self) -> List[str]:
        """List all available template IDs."""
        return list(self.templates.keys())


class LabelDetector:
    """
    Recognises label phrases at the start of a sentence.

    Phrases are compared lowercased, longest first, so that a specific phrase
    ("total amount available for reinvestment") wins over a shorter one that
    prefixes it ("total amount").
    """

    def __init__(self, labels: Dict[str, List[str]]):
        entries = [
            (phrase.lower(), field)
            for field, phrases in labels.items()
            for phrase in phrases
        ]
        self.entries: List[Tuple[str, str]] = sorted(entries, key=lambda e: len(e[0]), reverse=True)

    def match(self, text: str, statement: Statement,
              pending: Collection[str] = ()) -> Optional[Tuple[str, str]]:
        """
        Find the label a piece of text starts with.

        Fields already bound or already awaiting a numeral are skipped, so a
        field is matched at most once per document. The other sink may recur.

        Args:
            text: Sentence text
            statement: Statement built so far
            pending: Fields queued for a numeral

        Returns:
            (field, phrase) tuple, or None if no label applies
        """
        lowered = text.lower()
        for phrase, field in self.entries:
            if not lowered.startswith(phrase):
                continue
            if field != OTHER_FIELD and (statement.has_value(field) or field in pending):
                continue
            return field, phrase
        return None


def load_template(template_id: str = DEFAULT_TEMPLATE,
                  templates_dir: Optional[Path] = None) -> StatementTemplate:
    """
    Convenience function to load a single template.

    Args:
        template_id: Template ID to load
        templates_dir: Directory to search, defaults to the packaged templates

    Returns:
        StatementTemplate

    Raises:
        ValueError: If no template has that ID
    """
    loader = TemplateLoader(templates_dir)
    template = loader.get_template(template_id)
    if not template:
        available = ', '.join(loader.list_templates()) or "none"
        raise ValueError(f"Template not found: {template_id} (available: {available})")
    return template
