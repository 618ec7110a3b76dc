"""Load and validate the composer's layout and content-type registry.

This subpackage parses a ``composer.yaml`` file, merges it over the built-in
layout codes, element types and node defaults, and produces the
:class:`ComposerConfig` consumed by :class:`page_composer.engine.CompositionEngine`.
:meth:`ComposerConfig.default` returns the built-in registry without reading
any file.

Examples
--------
>>> from page_composer.config import ComposerConfig
>>> config = ComposerConfig.default()
>>> config.layouts["1-1"]
(6, 6)
>>> config.get_element_type("paragraph").label
'Paragraph'
"""

from .loader import load_composer_config
from .models import (
    ComposerConfig,
    ComposerConfigError,
    ElementTypeConfig,
    NodeDefaults,
)

__all__ = [
    "ComposerConfig",
    "ComposerConfigError",
    "ElementTypeConfig",
    "NodeDefaults",
    "load_composer_config",
]
