"""Command line interface for rendering Matter AI deployment files.

Usage:
    matterdeploy validate deployment.yaml [--target helm]
    matterdeploy render deployment.yaml --target compose [-o docker-compose.yml]
    matterdeploy bundle deployment.yaml [-o generated_configs/matterai]
"""

import argparse
import os
import sys
from pathlib import Path

from .configuration import ConfigurationService
from .deployment import DescriptorLoadError, DescriptorValidationFailed, load_descriptor
from .logging_config import get_logger, setup_logging
from .shared.schemas import RenderTarget, ValidationError

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_LOAD_ERROR = 2


def _print_errors(errors: list[ValidationError]):
    print(f"Descriptor has {len(errors)} problem(s):", file=sys.stderr)
    for error in errors:
        print(f"  - {error.field_path} [{error.kind.value}] {error.message}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matterdeploy",
        description="Validate a deployment descriptor and render Docker Compose or Helm values files.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=os.getenv("MATTERDEPLOY_DEBUG", "false").lower() == "true",
        help="Enable DEBUG level logging (default: $MATTERDEPLOY_DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Check a descriptor and list every problem")
    validate_parser.add_argument("descriptor", type=Path, help="Descriptor file (.yaml, .yml or .json)")
    validate_parser.add_argument(
        "--target",
        choices=[t.value for t in RenderTarget],
        default=None,
        help="Only apply this target's rules (default: all targets)",
    )

    render_parser = subparsers.add_parser("render", help="Render one document")
    render_parser.add_argument("descriptor", type=Path, help="Descriptor file (.yaml, .yml or .json)")
    render_parser.add_argument(
        "--target",
        choices=[t.value for t in RenderTarget],
        required=True,
        help="Output format",
    )
    render_parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write the document to this file (default: stdout)",
    )

    bundle_parser = subparsers.add_parser("bundle", help="Render docker-compose.yml and values.yaml")
    bundle_parser.add_argument("descriptor", type=Path, help="Descriptor file (.yaml, .yml or .json)")
    bundle_parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory for the rendered files (default: $MATTERDEPLOY_OUTPUT_DIR/<namespace>)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(log_file=args.log_file, debug=args.debug)

    service = ConfigurationService()

    try:
        descriptor = load_descriptor(args.descriptor)

        if args.command == "validate":
            target = RenderTarget(args.target) if args.target else None
            result = service.validate(descriptor, target)
            if not result.is_valid:
                _print_errors(result.errors)
                return EXIT_INVALID
            print(f"{args.descriptor}: valid")
            return EXIT_OK

        if args.command == "render":
            content = service.render(descriptor, RenderTarget(args.target))
            if args.output:
                args.output.parent.mkdir(parents=True, exist_ok=True)
                args.output.write_text(content)
                logger.info(f"Wrote {args.target} document to {args.output}")
            else:
                sys.stdout.write(content)
            return EXIT_OK

        result = service.write_bundle(descriptor, output_dir=args.output_dir)
        for target, path in result["files"].items():
            print(f"{target}: {path}")
        return EXIT_OK

    except DescriptorValidationFailed as e:
        _print_errors(e.errors)
        return EXIT_INVALID
    except DescriptorLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR


if __name__ == "__main__":
    sys.exit(main())
