"""Project configuration for Sigil.

Configuration is read from `sigil.yaml` in the project root and merged over
DEFAULT_CONFIG. It decides where user shortcode templates live and supplies
the ambient `site` value every shortcode template receives.

Example `sigil.yaml`:

    shortcodes_dir: templates/shortcodes
    site:
      title: My Site
      base_url: https://example.com
      language: en
    contact:
      provider: formspree
      endpoint: xpznqkdl

Key functions:
- load_config: Load and merge the configuration file.
- site_context: Build the ambient `site` value for templates.
- load_registry: Build the shortcode registry for a project.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from .registry import ShortcodeRegistry

CONFIG_FILENAME = "sigil.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "shortcodes_dir": "templates/shortcodes",
    "content_dir": "content",
    "site": {
        "title": "",
        "base_url": "",
        "language": "en",
    },
    "contact": None,
}

CONTACT_PROVIDERS = ("formspree", "web3forms", "netlify", "hubspot", "typeform")


class ConfigError(Exception):
    """Invalid project configuration.

    Attributes:
        source_path: Path to the configuration file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


def load_config(project_root: Path) -> dict[str, Any]:
    """Load project configuration from sigil.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
        Nested `site` values are merged key by key.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILENAME
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not config_path.exists():
        return config
    with open(config_path, encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(config_path, f"invalid YAML: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(config_path, "top level must be a mapping")

    site = loaded.pop("site", None) or {}
    if not isinstance(site, dict):
        raise ConfigError(config_path, "`site` must be a mapping")
    config.update(loaded)
    config["site"].update(site)

    contact = config.get("contact")
    if contact is not None:
        _validate_contact(config_path, contact)
    return config


def _validate_contact(config_path: Path, contact: Any) -> None:
    if not isinstance(contact, dict):
        raise ConfigError(config_path, "`contact` must be a mapping")
    provider = str(contact.get("provider", "")).lower()
    if provider not in CONTACT_PROVIDERS:
        raise ConfigError(
            config_path,
            f"unknown contact provider `{contact.get('provider')}`. "
            f"Expected one of: {', '.join(CONTACT_PROVIDERS)}",
        )
    if not contact.get("endpoint"):
        raise ConfigError(config_path, "`contact.endpoint` is required")


def shortcodes_path(project_root: Path, config: dict[str, Any]) -> Path | None:
    """Return the directory holding the project's shortcode templates.

    Returns None when `shortcodes_dir` is set to an empty value, which
    disables user overrides.
    """
    directory = config.get("shortcodes_dir")
    if not directory:
        return None
    return project_root / str(directory)


def site_context(config: dict[str, Any]) -> dict[str, Any]:
    """Build the ambient `site` value exposed to every shortcode template.

    Args:
        config: Loaded configuration.

    Returns:
        Dictionary with title, base_url, language, and contact (or None).
    """
    site = config.get("site") or {}
    contact = config.get("contact")
    if contact:
        contact = {
            "provider": str(contact.get("provider", "")).lower(),
            "endpoint": contact.get("endpoint"),
            "region": contact.get("region"),
            "redirect": contact.get("redirect"),
            "subject": contact.get("subject"),
        }
    return {
        "title": site.get("title", ""),
        "base_url": site.get("base_url", ""),
        "language": site.get("language", "en"),
        "contact": contact or None,
    }


def load_registry(
    project_root: Path, config: dict[str, Any] | None = None
) -> ShortcodeRegistry:
    """Build the shortcode registry for a project.

    Args:
        project_root: Root directory of the project.
        config: Loaded configuration; read from disk when omitted.

    Returns:
        Registry with built-ins and the project's overrides.
    """
    if config is None:
        config = load_config(project_root)
    return ShortcodeRegistry(shortcodes_path(project_root, config))
