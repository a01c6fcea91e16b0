from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from eadkit.core.description import build_record, census, read_finding_aid, record_to_json
from eadkit.core.errors import EADKitError
from eadkit.core.markup import LineBreakMode, transcode
from eadkit.core.settings import ProcessingConfig, configure_logging
from eadkit.core.storage import fabify_ead
from eadkit.core.validation import load_validation_profile, validate_ead

log = logging.getLogger("eadkit.cli")


def _read_input(path: str) -> Tuple[Optional[bytes], int]:
    """Read an input file; returns (data, 0) or (None, exit_code)."""

    p = os.path.abspath(path)
    if not os.path.exists(p):
        print(f"error: file not found: {p}", file=sys.stderr)
        return None, 2
    if not os.path.isfile(p):
        print(f"error: not a regular file: {p}", file=sys.stderr)
        return None, 2
    return Path(p).read_bytes(), 0


def _write_output(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def cmd_transcode(args: argparse.Namespace) -> int:
    """Transcode one rich-text fragment (from --text or a file)."""

    if args.text is not None:
        fragment = args.text
    elif args.path:
        data, rc = _read_input(args.path)
        if data is None:
            return rc
        try:
            fragment = data.decode("utf-8")
        except UnicodeDecodeError as e:
            print(f"error: input is not valid UTF-8: {e}", file=sys.stderr)
            return 2
    else:
        print("error: provide a file path or --text", file=sys.stderr)
        return 2

    mode = LineBreakMode.LITERAL if args.literal else LineBreakMode.PROSE
    try:
        print(transcode(fragment, mode))
    except EADKitError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Run the business rules over an EAD file.

    Exit code 1 when any diagnostic is reported.
    """

    data, rc = _read_input(args.path)
    if data is None:
        return rc

    profile = None
    if args.profile:
        try:
            profile = load_validation_profile(args.profile)
        except EADKitError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2

    diagnostics = validate_ead(data, profile=profile, source_file=os.path.basename(args.path))
    if args.json:
        print(json.dumps({"ok": not diagnostics, "diagnostics": diagnostics}, indent=2))
    else:
        for d in diagnostics:
            print(d)
        if not diagnostics:
            print("ok")
    return 1 if diagnostics else 0


def cmd_fabify(args: argparse.Namespace) -> int:
    """Normalize an EAD for the discovery system and write it out."""

    data, rc = _read_input(args.path)
    if data is None:
        return rc

    xml_text, diagnostics = fabify_ead(data, ProcessingConfig.from_env())
    if diagnostics:
        for d in diagnostics:
            print(d, file=sys.stderr)
        return 1

    _write_output(xml_text, args.output)
    return 0


def cmd_census(args: argparse.Namespace) -> int:
    """Print digital-object counts per category."""

    data, rc = _read_input(args.path)
    if data is None:
        return rc

    try:
        aid = read_finding_aid(data, source_file=os.path.basename(args.path), config=ProcessingConfig.from_env())
    except EADKitError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    counts = census(aid.archdesc).to_dict()
    if args.json:
        print(json.dumps(counts, indent=2))
    else:
        for k, v in counts.items():
            print(f"{k:<32} {v}")
    return 0


def _read_dao_info(path: str) -> Dict[str, Tuple[str, int]]:
    """Load {href: {"type": ..., "count": ...}} from a JSON file."""

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("dao info JSON must be an object keyed by href")
    out: Dict[str, Tuple[str, int]] = {}
    for href, v in raw.items():
        if not isinstance(v, dict):
            raise ValueError(f"dao info for {href} must be an object")
        out[str(href)] = (str(v.get("type", "")), int(v.get("count", 0)))
    return out


def cmd_to_json(args: argparse.Namespace) -> int:
    """Build the output record for an EAD file and print it as JSON."""

    data, rc = _read_input(args.path)
    if data is None:
        return rc

    dao_info = None
    if args.dao_info:
        try:
            dao_info = _read_dao_info(args.dao_info)
        except (OSError, TypeError, ValueError) as e:
            print(f"error: invalid --dao-info: {e}", file=sys.stderr)
            return 2

    config = ProcessingConfig.from_env()
    try:
        aid = read_finding_aid(data, source_file=os.path.basename(args.path), config=config)
        record = build_record(
            aid,
            config=config,
            group_children=not args.no_group,
            themeid=args.themeid or "",
            donors=args.donor or [],
            dao_info=dao_info,
        )
    except EADKitError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _write_output(record_to_json(record), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="eadkit", description="EAD finding-aid toolkit")
    p.add_argument("--log-level", default=None, help="Logging level (default: EADKIT_LOG_LEVEL or WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    tc = sub.add_parser("transcode", help="Flatten a rich-text fragment into annotated text")
    tc.add_argument("path", nargs="?", default=None, help="File holding the fragment")
    tc.add_argument("--text", default=None, help="Fragment given inline")
    tc.add_argument("--literal", action="store_true", help="Keep <lb/> as paired annotations")
    tc.set_defaults(func=cmd_transcode)

    vp = sub.add_parser("validate", help="Check an EAD file against the business rules")
    vp.add_argument("path", help="Path to EAD XML")
    vp.add_argument("--profile", default=None, help="Validation profile JSON")
    vp.add_argument("--json", action="store_true", help="Print JSON")
    vp.set_defaults(func=cmd_validate)

    fp = sub.add_parser("fabify", help="Normalize an EAD for export to the discovery system")
    fp.add_argument("path", help="Path to EAD XML")
    fp.add_argument("-o", "--output", default=None, help="Write XML here instead of stdout")
    fp.set_defaults(func=cmd_fabify)

    cp = sub.add_parser("census", help="Count digital objects by category")
    cp.add_argument("path", help="Path to EAD XML")
    cp.add_argument("--json", action="store_true", help="Print JSON")
    cp.set_defaults(func=cmd_census)

    jp = sub.add_parser("to-json", help="Build the JSON output record for an EAD")
    jp.add_argument("path", help="Path to EAD XML")
    jp.add_argument("--themeid", default=None, help="Publication theme id")
    jp.add_argument("--donor", action="append", default=None, help="Donor name (repeatable)")
    jp.add_argument("--dao-info", default=None, help="JSON file of per-href digital object type/count")
    jp.add_argument("--no-group", action="store_true", help="Do not group sibling components")
    jp.add_argument("-o", "--output", default=None, help="Write JSON here instead of stdout")
    jp.set_defaults(func=cmd_to_json)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    log.debug("command", extra={"cmd": args.cmd})
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
