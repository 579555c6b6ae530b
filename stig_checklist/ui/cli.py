"""Command-line interface and main entry point."""

from __future__ import annotations
from typing import Dict, List, Optional
from pathlib import Path
import argparse
import sys
import logging
import json

from stig_checklist.core.config import Cfg
from stig_checklist.core.constants import APP_NAME, STIG_VIEWER_VERSION, VERSION
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import InternalInconsistency, STIGError
from stig_checklist.io.file_ops import FO
from stig_checklist.model.annotations import AnnotationStore
from stig_checklist.processor import Normalizer, Projector, Stats
from stig_checklist.xml.sanitizer import San


def asset_overrides(args: argparse.Namespace) -> Dict[str, str]:
    """ASSET values given on the command line, validated."""
    overrides = {
        "HOST_NAME": San.host(args.host_name) if args.host_name else None,
        "HOST_IP": San.ip(args.ip) if args.ip else None,
        "HOST_MAC": San.mac(args.mac) if args.mac else None,
        "HOST_FQDN": San.host(args.fqdn) if args.fqdn else None,
        "ROLE": args.role,
        "MARKING": args.marking,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def convert(args: argparse.Namespace) -> Dict[str, object]:
    source = San.path(args.convert, exist=True, file=True)
    assessment = Normalizer().load(source)
    annotations = AnnotationStore.load(args.annotations) if args.annotations else None

    projector = Projector(asset_overrides(args))
    out = Path(args.out) if args.out else Path.cwd() / Projector.suggest_filename(assessment)
    result: Dict[str, object] = {
        "input": str(source),
        "format": assessment.source_format,
        "title": assessment.title,
        "findings": len(assessment.findings),
        "annotations": len(annotations) if annotations is not None else 0,
        "output": str(out),
        "dry_run": bool(args.dry_run),
    }
    if args.dry_run:
        projector.project(assessment, annotations)
    else:
        projector.write(assessment, San.path(out, mkpar=True), annotations)
        LOG.i(f"Wrote {out}")
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (None = sys.argv)

    Returns:
        Exit code (0 = success, 1 = error, 2 = internal inconsistency)
    """
    ok, err_list = Cfg.check()
    if not ok:
        for err in err_list:
            print(f"ERROR: {err}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(
        prog="stig-checklist",
        description=f"{APP_NAME} v{VERSION}",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version",
                        version=f"{VERSION} (STIG Viewer {STIG_VIEWER_VERSION} format)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    convert_group = parser.add_argument_group("Convert XCCDF/CKL to CKL")
    convert_group.add_argument("--convert", metavar="INPUT", help="XCCDF benchmark or CKL checklist")
    convert_group.add_argument("--out", help="Output CKL path (default: derived from the title)")
    convert_group.add_argument("--annotations", metavar="JSON", help="Reviewer annotations to apply")
    convert_group.add_argument("--host-name", help="Asset host name")
    convert_group.add_argument("--ip", help="Asset IP")
    convert_group.add_argument("--mac", help="Asset MAC")
    convert_group.add_argument("--fqdn", help="Asset FQDN")
    convert_group.add_argument("--role", help="Asset role")
    convert_group.add_argument("--marking", help="Asset marking")
    convert_group.add_argument("--dry-run", action="store_true", help="Dry run (no output written)")

    stats_group = parser.add_argument_group("Compliance Statistics")
    stats_group.add_argument("--stats", metavar="INPUT", help="Generate compliance statistics")
    stats_group.add_argument("--stats-format", choices=list(Stats.FORMATS), default="text",
                             help="Statistics output format (default: text)")
    stats_group.add_argument("--stats-out", help="Output file for statistics (default: stdout)")

    args = parser.parse_args(argv)

    if args.verbose:
        LOG.console_level(logging.DEBUG)

    try:
        if args.convert:
            result = convert(args)
            print(json.dumps(result, indent=2, ensure_ascii=False))
            return 0

        if args.stats:
            assessment = Normalizer().load(San.path(args.stats, exist=True, file=True))
            annotations = AnnotationStore.load(args.annotations) if args.annotations else None
            result = Stats.generate(assessment, annotations, output_format=args.stats_format)
            if args.stats_format == "json":
                rendered = json.dumps(result, indent=2, ensure_ascii=False)
            else:
                rendered = result
            if args.stats_out:
                output_path = FO.write_text(San.path(args.stats_out, mkpar=True), rendered + "\n")
                print(f"Statistics written to {output_path}")
            else:
                print(rendered)
            return 0

        parser.print_help()
        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except InternalInconsistency as exc:
        LOG.c(f"Internal inconsistency: {exc}", exc=True)
        print(f"ERROR: internal inconsistency: {exc}", file=sys.stderr)
        return 2
    except STIGError as exc:
        LOG.e(f"Fatal error: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
