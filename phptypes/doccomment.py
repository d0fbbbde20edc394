"""
phptypes/doccomment.py
══════════════════════

Pulls ``@var`` / ``@return`` / ``@param`` annotations out of PHP
doc-comments and parses them with :func:`~phptypes.declparser.from_decl`.
A missing or malformed annotation yields ``mixed``.
"""

from __future__ import annotations

import re
from typing import Optional

from phptypes.declparser import from_decl
from phptypes.types import Type

_VAR_TAG = re.compile(r"@var\s+(\S+)")
_RETURN_TAG = re.compile(r"@return\s+(\S+)")

DOC_KINDS = ("var", "return", "param")


def _param_tag(name: str) -> "re.Pattern[str]":
    return re.compile(r"@param\s+(\S+)\s+\$" + re.escape(name) + r"\b", re.IGNORECASE)


def extract_type_from_comment(kind: str, comment: Optional[str], name: str = "") -> Type:
    """Return the type annotated in *comment* for *kind*, else ``mixed``.

    ``name`` selects the parameter for ``kind == "param"``.
    """
    if kind not in DOC_KINDS:
        raise ValueError(f"Unknown doc-comment kind {kind!r}")
    if not comment:
        return Type.mixed()
    if kind == "var":
        match = _VAR_TAG.search(comment)
    elif kind == "return":
        match = _RETURN_TAG.search(comment)
    else:
        match = _param_tag(name).search(comment)
    if match is None:
        return Type.mixed()
    return from_decl(match.group(1))
