"""
Command Line Help Text

Fills the fixed help template with (optionally translated) strings.
Translations are passed in explicitly; nothing here reads locale state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)


HELP_TEMPLATE = (
    "{0}: clementine [{1}] [{2}]\n"
    "\n"
    "{3}:\n"
    "  -p, --play                {4}\n"
    "  -t, --play-pause          {5}\n"
    "  -u, --pause               {6}\n"
    "  -s, --stop                {7}\n"
    "  -r, --previous            {8}\n"
    "  -f, --next                {9}\n"
    "  -v, --volume <value>      {10}\n"
    "  --volume-up               {11}\n"
    "  --volume-down             {12}\n"
    "  --seek-to <seconds>       {13}\n"
    "\n"
    "{14}:\n"
    "  -a, --append              {15}\n"
    "  -l, --load                {16}\n"
    "  -k, --play-track <n>      {17}\n"
    "\n"
    "{18}:\n"
    "  -o, --show-osd            {19}\n"
)

# Source strings, in template slot order
HELP_STRINGS = (
    "Usage",
    "options",
    "URL(s)",
    "Player options",
    "Start the playlist currently playing",
    "Play if stopped, pause if playing",
    "Pause playback",
    "Stop playback",
    "Skip backwards in playlist",
    "Skip forwards in playlist",
    "Set the volume to <value> percent",
    "Increase the volume by 4%",
    "Decrease the volume by 4%",
    "Seek the currently playing track",
    "Playlist options",
    "Append files/URLs to the playlist",
    "Loads files/URLs, replacing current playlist",
    "Play the <n>th track in the playlist",
    "Other options",
    "Display the on-screen-display",
)


def format_help_text(translations: Optional[Mapping[str, str]] = None) -> str:
    """
    Build the help text.

    Args:
        translations: Mapping from source string to localized string.
            Strings without an entry are used as-is.

    Returns:
        The complete help text, ending with a newline.
    """
    translations = translations or {}
    return HELP_TEMPLATE.format(
        *(translations.get(text) or text for text in HELP_STRINGS)
    )


def load_translations(path: Union[str, Path, None]) -> Dict[str, str]:
    """
    Load a YAML translation catalog (source string -> localized string).

    Returns an empty mapping if the path is empty, missing or unreadable.
    """
    if not path:
        return {}

    catalog_path = Path(path)
    if not catalog_path.exists():
        logger.warning("Translation catalog not found: %s", catalog_path)
        return {}

    try:
        with open(catalog_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load translation catalog %s: %s", catalog_path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Translation catalog %s is not a mapping", catalog_path)
        return {}

    return {str(k): str(v) for k, v in data.items() if v is not None}
