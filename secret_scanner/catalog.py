import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import yaml

from .config import settings

# Set up a logger for this module
logger = logging.getLogger(__name__)

CATEGORIES = ("api_keys", "passwords", "private_keys")

@dataclass(frozen=True)
class PatternCatalog:
    """
    Provider patterns and their descriptions, as plain data.

    Attributes:
        patterns (Dict[str, Dict[str, str]]): Category -> (name -> regex source).
        descriptions (Dict[str, str]): Name -> human-readable description.
        entropy_thresholds (Dict[str, float]): Minimum entropy per secret class
                                               (e.g. 'api_key': 4.5).
    """
    patterns: Dict[str, Dict[str, str]] = field(default_factory=dict)
    descriptions: Dict[str, str] = field(default_factory=dict)
    entropy_thresholds: Dict[str, float] = field(default_factory=dict)

    def all_patterns(self) -> Dict[str, str]:
        """Every pattern across all categories, merged into one mapping."""
        merged: Dict[str, str] = {}
        for category in self.patterns.values():
            merged.update(category)
        return merged

    def category(self, name: str) -> Dict[str, str]:
        return dict(self.patterns.get(name, {}))

def load_catalog(patterns_file: Optional[str] = None) -> PatternCatalog:
    """
    Loads the pattern catalog from a YAML file.

    Regexes are not compiled here; the scanner's registry owns compilation
    and rejects invalid entries when they are registered.

    Args:
        patterns_file: Path to the catalog. Defaults to `settings.PATTERNS_FILE`.

    Returns:
        A PatternCatalog. Empty if the file has no 'patterns' key.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file cannot be parsed.
    """
    patterns_file = patterns_file or settings.PATTERNS_FILE
    logger.info(f"Loading pattern catalog from {patterns_file}")

    try:
        with open(patterns_file, 'r', encoding='utf-8') as f:
            # Use safe_load to prevent arbitrary code execution from YAML
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.critical(f"FATAL: Pattern file not found at '{patterns_file}'. Cannot proceed.")
        raise
    except yaml.YAMLError as e:
        logger.critical(f"FATAL: Error parsing YAML file '{patterns_file}'. {e}")
        raise

    if not data or 'patterns' not in data:
        logger.error("Pattern file is empty or missing 'patterns' top-level key.")
        return PatternCatalog()

    patterns: Dict[str, Dict[str, str]] = {}
    for category, entries in (data.get('patterns') or {}).items():
        if category not in CATEGORIES:
            logger.warning(f"Unknown pattern category '{category}' in {patterns_file}")
        if not isinstance(entries, dict):
            logger.warning(f"Skipping category '{category}': expected a name -> regex mapping")
            continue
        patterns[category] = {str(name): str(regex) for name, regex in entries.items()}

    descriptions = {str(k): str(v) for k, v in (data.get('descriptions') or {}).items()}
    thresholds = {str(k): float(v) for k, v in (data.get('entropy_thresholds') or {}).items()}

    catalog = PatternCatalog(patterns=patterns, descriptions=descriptions, entropy_thresholds=thresholds)
    logger.info(f"Loaded {len(catalog.all_patterns())} patterns in {len(patterns)} categories.")
    return catalog
