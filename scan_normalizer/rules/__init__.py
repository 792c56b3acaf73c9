"""scan_normalizer.rules

Rule tables mapping recommendation groups to finding templates.
"""

from __future__ import annotations

from .table import (
    SSH_AUDIT_RULES,
    RuleTable,
    RuleTemplate,
    dump_rule_table,
    load_rule_table,
    rule_table_from_dict,
)

__all__ = [
    "SSH_AUDIT_RULES",
    "RuleTable",
    "RuleTemplate",
    "dump_rule_table",
    "load_rule_table",
    "rule_table_from_dict",
]
