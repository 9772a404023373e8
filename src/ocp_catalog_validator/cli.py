"""OCP catalog validator CLI: check a bundle directory before publishing."""

import argparse
import csv
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Dict


def _parse_key_values(text: str) -> Dict[str, str]:
    """Parse "k1=v1,k2=v2" into a dict.

    Items are read as one CSV record, so a quoted item keeps its commas:
    '"range=v4.5,v4.6"' yields {"range": "v4.5,v4.6"}.
    """
    try:
        items = next(csv.reader([text]), [])
    except csv.Error as e:
        raise argparse.ArgumentTypeError(f"{text} is not a valid key=value list: {e}")

    pairs: Dict[str, str] = {}
    for item in items:
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"{item} must be formatted as key=value")
        pairs[key.strip()] = value.strip()
    return pairs


def main():
    """Main CLI entry point."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        validator_version = get_version("ocp-catalog-validator")
    except PackageNotFoundError:
        validator_version = "dev"

    from .report import OUTPUT_FORMATS, TEXT

    parser = argparse.ArgumentParser(
        prog="ocp-catalog-validator",
        description="Check that an Operator bundle declares OpenShift versions consistent with the APIs it uses"
    )
    parser.add_argument("--version", action="version", version=f"ocp-catalog-validator {validator_version}")
    parser.add_argument(
        "bundle_dir",
        type=Path,
        help="Path to the bundle directory"
    )
    parser.add_argument(
        "--optional-values",
        dest="optional_values",
        type=_parse_key_values,
        action="append",
        default=[],
        help=(
            "key=value pairs used by the validator: file=<bundle.Dockerfile or annotations.yaml>, "
            "range=<label range, e.g. v4.6-v4.8>, ocp-version=<first unsupported OCP version, default 4.9>"
        )
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default=TEXT,
        help="Result format. Formats containing \"alphaX\" are subject to change"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Also write validation_result.json to this directory"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log each check as it runs."
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    optional_values: Dict[str, str] = {}
    for pairs in args.optional_values:
        optional_values.update(pairs)

    try:
        from .api import validate_bundle_dir
        from .report import dump_report_file, render

        result = validate_bundle_dir(args.bundle_dir.resolve(), optional_values)

        if args.output_dir:
            output_dir = Path(args.output_dir).resolve()
            output_dir.mkdir(parents=True, exist_ok=True)
            report_out = output_dir / "validation_result.json"
            report_out.write_text(dump_report_file([result]), encoding="utf-8")

        if not args.quiet:
            print(render([result], args.output))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)

    if result.has_error():
        sys.exit(1)


if __name__ == "__main__":
    main()
