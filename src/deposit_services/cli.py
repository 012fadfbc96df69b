"""Command-line interface for deposit-services."""

import argparse
import json
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

from deposit_services.assemblers import Assembler, AssemblerOptions
from deposit_services.clients import LocalDocumentFetcher, StatusDocumentClient
from deposit_services.config import load_repositories
from deposit_services.specifications import SPECIFICATIONS, specification_for
from deposit_services.status import processor_for
from schemas.package import ArchiveFormat, Compression
from schemas.submission import SubmissionManifest

DEFAULT_OUTPUT_DIR = Path("./workspace/packages")
DEFAULT_SPECIFICATION = "http://purl.org/net/sword/package/SimpleZip"
USER_AGENT = "deposit-services/1.0"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def assemble_package(args: argparse.Namespace) -> int:
    """Execute the assemble command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    submission_dir = args.submission.resolve()
    manifest_path = submission_dir / "submission.json"
    if not manifest_path.exists():
        logger.error(f"Submission manifest not found: {manifest_path}")
        return 1

    output_dir = args.output
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        manifest = SubmissionManifest.model_validate_json(manifest_path.read_text())
        submission = manifest.to_submission(submission_dir)

        options = AssemblerOptions(
            archive=ArchiveFormat(args.archive) if args.archive else None,
            compression=Compression(args.compression) if args.compression else None,
        )
        assembler = Assembler(specification_for(args.specification), options)

        with assembler.assemble(submission) as package:
            package_path = package.write_to(output_dir / package.metadata.name)
            sidecar_path = output_dir / f"{package.metadata.name}.metadata.json"
            sidecar_path.write_text(
                json.dumps(
                    {
                        "submission": submission.id,
                        "metadata": package.metadata.model_dump(mode="json"),
                        "resources": [
                            r.model_dump(mode="json") for r in package.resources
                        ],
                    },
                    indent=2,
                )
            )

            logger.info(f"Created package: {package.metadata.name}")
            logger.info(f"  Files: {len(package.resources)}")
            logger.info(f"  Size: {package.metadata.size_bytes} bytes")
            for algorithm, digest in package.metadata.checksums.items():
                logger.info(f"  {algorithm}: {digest}")
            logger.info(f"  Output: {package_path}")

            remediated = [r for r in package.resources if r.role and r.remediated]
            for resource in remediated:
                logger.warning(
                    f"  Renamed: {resource.original_name} -> {resource.package_path}"
                )

        return 0

    except Exception as e:
        logger.error(f"Failed to assemble package: {e}")
        return 1


def check_status(args: argparse.Namespace) -> int:
    """Execute the check-status command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        repositories = load_repositories(args.config)
        location = args.document
        parsed = urlparse(location)

        if parsed.scheme in ("http", "https"):
            origin = f"{parsed.scheme}://{parsed.netloc}"
            repository = repositories.get(args.repository)
            binding = None
            if repository is not None and repository.transport_config is not None:
                binding = repository.transport_config.protocol_binding

            if binding is not None and binding.server_fqdn:
                # Statements may live on another host than the binding's server
                client = StatusDocumentClient.from_protocol_binding(
                    binding, base_url=origin
                )
            else:
                client = StatusDocumentClient(
                    {"base_url": origin, "headers": {"User-Agent": USER_AGENT}}
                )
            with client:
                processor = processor_for(args.repository, repositories, client)
                status = processor.process(location, args.repository)
        else:
            processor = processor_for(
                args.repository, repositories, LocalDocumentFetcher()
            )
            status = processor.process(location, args.repository)

        logger.info(f"Deposit status for {location}: {status.value}")
        print(status.value)
        return 0

    except Exception as e:
        logger.error(f"Failed to check deposit status: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="deposit-services",
        description="Package submissions for deposit and check deposit status",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    assemble_parser = subparsers.add_parser(
        "assemble",
        help="Assemble a submission into a deposit package",
        description="Package the files of a submission directory (described by its submission.json) according to a packaging specification.",
    )
    assemble_parser.add_argument(
        "--submission",
        type=Path,
        required=True,
        help="Path to the submission directory containing submission.json",
    )
    assemble_parser.add_argument(
        "--specification",
        choices=sorted(SPECIFICATIONS),
        default=DEFAULT_SPECIFICATION,
        help=f"Packaging specification (default: {DEFAULT_SPECIFICATION})",
    )
    assemble_parser.add_argument(
        "--archive",
        choices=[a.value for a in ArchiveFormat],
        default=None,
        help="Archive format (default: the specification's)",
    )
    assemble_parser.add_argument(
        "--compression",
        choices=[c.value for c in Compression],
        default=None,
        help="Compression (default: the specification's)",
    )
    assemble_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for packages (default: {DEFAULT_OUTPUT_DIR})",
    )
    assemble_parser.set_defaults(func=assemble_package)

    status_parser = subparsers.add_parser(
        "check-status",
        help="Resolve the status of a deposit from its status document",
        description="Parse a SWORD v2 Atom statement and map its deposit state using the repository's configured mapping.",
    )
    status_parser.add_argument(
        "--document",
        required=True,
        help="URL or path of the status document",
    )
    status_parser.add_argument(
        "--repository",
        required=True,
        help="Name of the repository in the configuration",
    )
    status_parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the repository configuration JSON",
    )
    status_parser.set_defaults(func=check_status)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
