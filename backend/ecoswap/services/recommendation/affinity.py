"""
Semantic affinity table for the similarity search.

Maps a base word found in the query product's name to words that mark a
related product type (tomato -> sauce, ketchup, ...). The table is plain
configuration: the built-in default can be replaced by a JSON object file
named in ECOSWAP_AFFINITY_GROUPS_PATH, e.g.

    {"tomato": ["paste", "sauce"], "coffee": ["espresso", "beans"]}

Entry order matters: the first matching base word wins.
"""
import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ecoswap.core.logging import get_logger

logger = get_logger(__name__)

AffinityGroups = Mapping[str, Sequence[str]]

DEFAULT_AFFINITY_GROUPS: Dict[str, List[str]] = {
    "tomato": ["paste", "sauce", "juice", "ketchup"],
    "milk": ["dairy", "almond", "oat", "soy"],
    "bread": ["grain", "wheat", "flour"],
    "apple": ["fruit", "juice", "cider"],
    "chicken": ["poultry", "meat", "protein"],
    "rice": ["grain", "quinoa", "barley"],
}


def load_affinity_groups(path: Path) -> Dict[str, List[str]]:
    """
    Load an affinity table from a JSON file.

    Keys and related words are lower-cased. Falls back to the default table
    (with a warning) when the file is missing or malformed.
    """
    if not path.exists():
        logger.warning(
            "affinity_groups_file_not_found",
            path=str(path),
            message="Using built-in affinity groups",
        )
        return dict(DEFAULT_AFFINITY_GROUPS)

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(
            "affinity_groups_read_error",
            path=str(path),
            error=str(e),
            message="Using built-in affinity groups",
        )
        return dict(DEFAULT_AFFINITY_GROUPS)

    if not isinstance(raw, dict) or not all(
        isinstance(words, list) and all(isinstance(w, str) for w in words)
        for words in raw.values()
    ):
        logger.error(
            "affinity_groups_invalid",
            path=str(path),
            message="Affinity file must map words to lists of words; using built-in groups",
        )
        return dict(DEFAULT_AFFINITY_GROUPS)

    groups = {base.lower(): [w.lower() for w in words] for base, words in raw.items()}
    logger.info("affinity_groups_loaded", path=str(path), group_count=len(groups))
    return groups


_affinity_groups: Optional[Dict[str, List[str]]] = None


def get_affinity_groups() -> Dict[str, List[str]]:
    """Process-wide affinity table, loaded once."""
    global _affinity_groups
    if _affinity_groups is None:
        configured_path = os.getenv("ECOSWAP_AFFINITY_GROUPS_PATH")
        if configured_path:
            _affinity_groups = load_affinity_groups(Path(configured_path))
        else:
            _affinity_groups = dict(DEFAULT_AFFINITY_GROUPS)
    return _affinity_groups
