"""
phptypes/config.py
══════════════════

Tunables for one reconstruction run.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


@dataclass
class ReconstructorConfig:
    """Configuration for :class:`~phptypes.reconstructor.TypeReconstructor`."""

    # Fixed-point loop
    max_rounds: int = 10_000                # hard bound; hitting it logs a warning

    # Signature base
    builtins_path: Optional[Path] = None    # JSON merged over the packaged base

    # Member lookup
    resolve_trait_members: bool = True      # consult used traits before extends
    property_doc_types: bool = True         # run the @var property pass

    def __post_init__(self) -> None:
        if self.max_rounds < 1:
            raise ValueError(f"max_rounds must be positive, got {self.max_rounds}")
        if self.builtins_path is not None and not isinstance(self.builtins_path, Path):
            self.builtins_path = Path(self.builtins_path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReconstructorConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        if self.builtins_path is not None:
            result["builtins_path"] = str(self.builtins_path)
        return result
