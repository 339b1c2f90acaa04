from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PRESET_DIR = Path(__file__).resolve().parent / "presets"


@dataclass
class NegotiationDefaults:
    preset_dir: Path = PRESET_DIR
    preset: str = "default"
    out_dir: Path = Path("runs/negotiation")
    overrides: List[str] = field(default_factory=list)
    verbose: bool = False
