from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from osi_contract.codec import from_dict, to_dict
from osi_contract.config.defaults import NegotiationDefaults
from osi_contract.config.loader import dump_negotiation, load_capability, load_document, load_request_file
from osi_contract.negotiation.resolver import NegotiationResolver
from osi_contract.negotiation.timing import update_instants
from osi_contract.schemas.common import Timestamp
from osi_contract.schemas.logical_detection import LogicalDetectionData
from osi_contract.schemas.sensor_view_configuration import SensorViewConfiguration
from osi_contract.validation import (
    LogicalDetectionValidator,
    SensorViewConfigurationValidator,
    has_errors,
)


def cmd_negotiate(args) -> int:
    request = load_request_file(args.request)
    capability = load_capability(
        args.capability, preset=args.preset, preset_dir=args.preset_dir, overrides=args.override
    )
    result = NegotiationResolver(capability, verbose=args.verbose).resolve(request)
    paths = dump_negotiation(args.out, request, result)
    first = result.first_update
    print(
        f"[negotiate] sensor={request.sensor_id.value if request.sensor_id else None} "
        f"notes={len(result.notes)} first_update={first.to_seconds() if first else None} -> {paths['granted']}"
    )
    if args.print_granted:
        print(paths["granted"].read_text())
    return 0


def cmd_phase(args) -> int:
    if args.count < 1:
        print("[phase] count must be at least 1", file=sys.stderr)
        return 1
    cycle = Timestamp.from_seconds(args.cycle_time)
    offset = Timestamp.from_seconds(args.offset)
    start = Timestamp.from_seconds(args.start)
    instants = [t.to_seconds() for t in update_instants(cycle, offset, start, count=args.count)]
    if not instants:
        print("[phase] cycle time must be positive", file=sys.stderr)
        return 1
    print(json.dumps({"first_update": instants[0], "instants": instants}))
    return 0


def cmd_validate(args) -> int:
    doc = load_document(Path(args.file))
    if args.kind == "detections":
        issues = LogicalDetectionValidator().validate(from_dict(LogicalDetectionData, doc))
    else:
        config = from_dict(SensorViewConfiguration, doc)
        issues = SensorViewConfigurationValidator(granted=args.kind == "granted").validate(config)
    for issue in issues:
        print(f"[validate] {issue.severity}: {issue.issue_type} {issue.path} {issue.message}")
    print(f"[validate] {len(issues)} issue(s)")
    return 1 if has_errors(issues) else 0


def cmd_show(args) -> int:
    request = load_request_file(args.file)
    print(yaml.safe_dump(to_dict(request, by_tag=args.by_tag), sort_keys=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    defaults = NegotiationDefaults()
    ap = argparse.ArgumentParser(prog="osi-contract", description="Sensor view configuration negotiation tools")
    sub = ap.add_subparsers(dest="command", required=True)

    neg = sub.add_parser("negotiate", help="resolve a requested configuration against a simulator capability")
    neg.add_argument("--request", required=True)
    neg.add_argument("--capability", default=None, help="capability yaml/json (default: preset)")
    neg.add_argument("--preset", default=defaults.preset)
    neg.add_argument("--preset-dir", type=Path, default=defaults.preset_dir)
    neg.add_argument(
        "--override", action="append", default=list(defaults.overrides), help="key=value capability overrides"
    )
    neg.add_argument("--out", type=Path, default=defaults.out_dir)
    neg.add_argument("--print-granted", action="store_true")
    neg.add_argument("--verbose", action="store_true", default=defaults.verbose)
    neg.set_defaults(func=cmd_negotiate)

    ph = sub.add_parser("phase", help="compute sensor update instants")
    ph.add_argument("--cycle-time", type=float, required=True)
    ph.add_argument("--offset", type=float, default=0.0)
    ph.add_argument("--start", type=float, default=0.0)
    ph.add_argument("--count", type=int, default=1)
    ph.set_defaults(func=cmd_phase)

    val = sub.add_parser("validate", help="check a configuration or detection file")
    val.add_argument("file")
    val.add_argument("--kind", choices=["config", "granted", "detections"], default="config")
    val.set_defaults(func=cmd_validate)

    show = sub.add_parser("show", help="print a configuration file in normalized form")
    show.add_argument("file")
    show.add_argument("--by-tag", action="store_true")
    show.set_defaults(func=cmd_show)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
