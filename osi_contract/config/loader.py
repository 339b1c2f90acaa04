from __future__ import annotations

import json
import warnings
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from osi_contract.codec import from_dict, to_dict
from osi_contract.config.defaults import PRESET_DIR
from osi_contract.negotiation.capability import SimulatorCapability
from osi_contract.negotiation.resolver import NegotiationResult
from osi_contract.schemas.sensor_view_configuration import SensorViewConfiguration


def load_document(path: Path) -> Dict:
    text = path.read_text()
    if path.suffix.lower() in [".yaml", ".yml"]:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _parse_scalar(val: str):
    if val.lower() in ["true", "false"]:
        return val.lower() == "true"
    try:
        if "." in val or "e" in val.lower():
            return float(val)
        return int(val)
    except ValueError:
        return val


def apply_overrides(doc: Dict, overrides: List[str]) -> Dict:
    """Apply dotted ``key.sub=value`` overrides to a copy of ``doc``."""
    out = deepcopy(doc)
    for ov in overrides or []:
        if "=" not in ov:
            warnings.warn(f"[config] Ignoring override without '=': {ov}")
            continue
        path, raw = ov.split("=", 1)
        val = _parse_scalar(raw.strip())
        keys = path.strip().split(".")
        cur = out
        for k in keys[:-1]:
            if k not in cur or not isinstance(cur[k], dict):
                cur[k] = {}
            cur = cur[k]
        cur[keys[-1]] = val
    return out


def load_capability_preset(name: str, preset_dir: Path, overrides: Optional[List[str]] = None) -> SimulatorCapability:
    path = Path(preset_dir) / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"preset {name} not found at {path}")
    return SimulatorCapability.from_dict(apply_overrides(load_document(path), overrides or []))


def load_capability_file(path: str, overrides: Optional[List[str]] = None) -> SimulatorCapability:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"capability file not found: {path}")
    return SimulatorCapability.from_dict(apply_overrides(load_document(p), overrides or []))


def load_capability(
    path: Optional[str] = None,
    preset: str = "default",
    preset_dir: Optional[Path] = None,
    overrides: Optional[List[str]] = None,
) -> SimulatorCapability:
    if path:
        return load_capability_file(path, overrides)
    return load_capability_preset(preset, preset_dir or PRESET_DIR, overrides)


def load_request_file(path: str) -> SensorViewConfiguration:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"request file not found: {path}")
    return from_dict(SensorViewConfiguration, load_document(p))


def dump_negotiation(run_dir: Path, request: SensorViewConfiguration, result: NegotiationResult) -> Dict[str, Path]:
    """Write request, grant and resolver notes next to each other for inspection."""
    run_dir = Path(run_dir)
    run_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "request": run_dir / "request.yaml",
        "granted": run_dir / "granted.yaml",
        "notes": run_dir / "notes.json",
    }
    paths["request"].write_text(yaml.safe_dump(to_dict(request), sort_keys=False))
    paths["granted"].write_text(yaml.safe_dump(to_dict(result.granted), sort_keys=False))
    first = result.first_update
    summary = {
        "notes": result.notes,
        "first_update_s": first.to_seconds() if first is not None else None,
    }
    paths["notes"].write_text(json.dumps(summary, indent=2))
    return paths
