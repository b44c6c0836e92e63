from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .registry import EdgeType
from .validator import ConnectionPolicy


class EditorSettings(BaseModel):
    """Knobs for an edit session. Loaded from a YAML file such as::

        connection:
          allow_self_loops: false
          allow_parallel_edges: true
        default_edge_type: animatedGradient
    """
    connection: ConnectionPolicy = Field(default_factory=ConnectionPolicy)
    default_edge_type: EdgeType = EdgeType.BEZIER
    default_edge_animated: bool = False
    edge_id_prefix: str = "e"


def load_settings(path: Optional[Path] = None) -> EditorSettings:
    if path is None:
        return EditorSettings()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping.")
    try:
        return EditorSettings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings in {path}: {e}") from e
