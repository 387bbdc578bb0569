#!/usr/bin/env python3
"""
CLI entrypoint for the Bridge CLI integration.

Reads inputs (GitHub ``INPUT_*`` variables, plain environment variables, an
optional YAML inputs file, ``.env``), downloads the Bridge CLI when needed,
runs one product stage and reports the outcome to the CI host.

Usage:
  python bridge_cli.py
  python bridge_cli.py --inputs-file bridge-inputs.yml
  python bridge_cli.py --scan-type polaris --host console --dry-run
  BLACKDUCKSCA_URL=... BLACKDUCKSCA_TOKEN=... python bridge_cli.py --verbose

Exit status is 0 unless the outcome is treated as a failure (or the inputs
are invalid). The Bridge CLI's own exit code is always surfaced through the
``exit_code`` output.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bridge.errors import BridgeError, WorkflowFailed
from pipeline.host import HOSTS, build_host
from pipeline.inputs import InputSource, load_inputs
from pipeline.wiring import build_pipeline, load_env


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download and run the Bridge CLI for one product stage.")

    parser.add_argument("--inputs-file", help="YAML file mapping input names to values (env vars win)")
    parser.add_argument(
        "--scan-type",
        help="Product to run (blackducksca, polaris, coverity, srm). Overrides the scan_type input.",
    )
    parser.add_argument("--workdir", default=".", help="Directory the Bridge CLI runs in (default: cwd)")
    parser.add_argument("--output-dir", help="Where the Bridge input file and run metadata are written")
    parser.add_argument(
        "--host",
        choices=["auto", *sorted(HOSTS)],
        default="auto",
        help="CI host protocol for messages and outputs (default: auto-detect)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Resolve and print the command, do not execute")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Always load .env so terminal runs behave like CI runs
    load_env()
    host = build_host(args.host)

    try:
        source = InputSource.from_yaml(args.inputs_file) if args.inputs_file else InputSource()
        inputs = load_inputs(source)
        overrides = {}
        if args.scan_type:
            overrides["scan_type"] = args.scan_type.lower()
        if args.output_dir:
            overrides["output_directory"] = args.output_dir
        if overrides:
            inputs = dataclasses.replace(inputs, **overrides)

        workdir = Path(args.workdir).resolve()
        pipeline = build_pipeline(inputs, workdir=workdir)
        pipeline.run(inputs, host, workdir=workdir, dry_run=args.dry_run)
    except WorkflowFailed as e:
        # Outcome has already been reported through the host.
        logging.getLogger(__name__).debug("Workflow failed with exit code %s", e.exit_code)
        return 1
    except BridgeError as e:
        host.set_failed(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
