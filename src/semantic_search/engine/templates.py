"""
Index Template Registry

Collects rewrite rules for the index settings and mapping documents and
applies them when the template is materialized. Rules run in registration
order, once per materialization.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

logger = logging.getLogger("semantic.template")

RewriteRule = Callable[[str], str]


class IndexTemplate:
    """
    Rewrite-rule registry for index settings and mapping JSON.
    """

    def __init__(self) -> None:
        self._setting_rules: List[RewriteRule] = []
        self._mapping_rules: List[RewriteRule] = []

    def add_setting_rewrite_rule(self, rule: RewriteRule) -> None:
        self._setting_rules.append(rule)

    def add_mapping_rewrite_rule(self, rule: RewriteRule) -> None:
        self._mapping_rules.append(rule)

    def rewrite_settings(self, source: str) -> str:
        for rule in self._setting_rules:
            source = rule(source)
        return source

    def rewrite_mapping(self, source: str) -> str:
        for rule in self._mapping_rules:
            source = rule(source)
        return source

    def materialize(self, settings_json: str, mapping_json: str) -> Tuple[str, str]:
        """
        Apply all registered rules.

        Returns
        -------
        Tuple[str, str]
            Rewritten (settings, mapping) JSON strings.
        """
        logger.debug(
            "Materializing template with %d setting rule(s), %d mapping rule(s)",
            len(self._setting_rules),
            len(self._mapping_rules),
        )
        return self.rewrite_settings(settings_json), self.rewrite_mapping(mapping_json)
