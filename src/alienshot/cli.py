"""
Command line interface for alienshot.

Runs the filter looks on captures, the base enhancement pass on a single
image, or watches a capture folder.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import PipelineConfig
from .enhancement import process as enhance
from .io_utils import ImageCodec
from .pipeline import PhotoPipeline
from .recipes import list_recipes
from .watcher import FolderWatcher, JobQueue

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alienshot",
        description="alienshot - stylized derivatives for new captures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Apply Ollie, Eiffel and Reel to one capture
  alienshot process DSC0001.JPG --edited-dir edited --archive-dir raw

  # Base clean-up pass only
  alienshot enhance DSC0001.JPG -o DSC0001_clean.JPG

  # Watch a folder and process every new capture
  alienshot watch --watch-dir "DCIM/Imaging Edge Mobile"

  # List the filter looks
  alienshot --list-filters
        """,
    )

    parser.add_argument(
        "--list-filters",
        action="store_true",
        help="List the filter looks and exit",
    )
    parser.add_argument(
        "--version", action="version", version=f"alienshot {__version__}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--env-file", help="Load configuration from this .env file")

    common = argparse.ArgumentParser(add_help=False)
    dirs_group = common.add_argument_group("Directories (override configuration)")
    dirs_group.add_argument("--watch-dir", help="Folder receiving new captures")
    dirs_group.add_argument("--edited-dir", help="Folder for filtered images")
    dirs_group.add_argument("--archive-dir", help="Folder receiving processed originals")
    dirs_group.add_argument(
        "--min-size",
        type=int,
        help="Minimum capture size in bytes (default: 1024)",
    )
    dirs_group.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Run the three filter looks in parallel",
    )

    subparsers = parser.add_subparsers(dest="command")

    process_parser = subparsers.add_parser(
        "process", help="Apply every filter look", parents=[common]
    )
    process_parser.add_argument("inputs", nargs="+", help="Capture files")

    enhance_parser = subparsers.add_parser(
        "enhance", help="Run the base clean-up pass", parents=[common]
    )
    enhance_parser.add_argument("input", help="Input image file")
    enhance_parser.add_argument(
        "-o", "--output", help="Output file path (default: <stem>_enhanced<ext>)"
    )

    watch_parser = subparsers.add_parser(
        "watch", help="Watch a folder for captures", parents=[common]
    )
    watch_parser.add_argument(
        "--workers", type=int, help="Concurrent jobs (default: 1)"
    )

    return parser


def load_config(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig.from_env(
        env_file=args.env_file,
        watch_dir=args.watch_dir,
        edited_dir=args.edited_dir,
        archive_dir=args.archive_dir,
        min_file_size=args.min_size,
        parallel_filters=args.parallel,
        max_workers=getattr(args, "workers", None),
    )


def default_enhanced_path(input_path: Path) -> Path:
    suffix = input_path.suffix if input_path.suffix else ".jpg"
    return input_path.with_name(f"{input_path.stem}_enhanced{suffix}")


def run_process(config: PipelineConfig, inputs: list[str]) -> int:
    pipeline = PhotoPipeline(config)
    exit_code = 0
    for path in inputs:
        report = pipeline.process(path)
        if report.success:
            print(f"{path}: {report.succeeded}/{report.attempted} filters applied")
            for output in report.output_paths:
                print(f"  -> {output}")
            if report.relocation_error is not None:
                print(f"  warning: {report.relocation_error}", file=sys.stderr)
        else:
            reason = report.error or "no filter could be applied"
            print(f"{path}: failed ({reason})", file=sys.stderr)
            exit_code = 1
    return exit_code


def run_enhance(input_file: str, output_file: str | None) -> int:
    input_path = Path(input_file)
    if not input_path.exists():
        print(f"Error: Input file '{input_path}' not found", file=sys.stderr)
        return 1

    codec = ImageCodec()
    image = codec.decode(input_path)
    if image is None:
        print(f"Error: Could not load image from {input_path}", file=sys.stderr)
        return 1

    output_path = Path(output_file) if output_file else default_enhanced_path(input_path)
    if not codec.encode(enhance(image), output_path):
        print(f"Error: Could not write {output_path}", file=sys.stderr)
        return 1

    print(f"Successfully processed '{input_path}' -> '{output_path}'")
    return 0


def run_watch(config: PipelineConfig) -> int:
    queue = JobQueue(PhotoPipeline(config), max_workers=config.max_workers)
    watcher = FolderWatcher(config, queue.submit)
    try:
        watcher.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, waiting for running jobs")
        watcher.stop()
    finally:
        queue.shutdown(wait=True)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_filters:
        print("Available filters:")
        for recipe in list_recipes():
            print(f"  {recipe.name:<8} - {recipe.description}")
        return 0

    if args.command is None:
        parser.error("a command is required (process, enhance or watch)")

    try:
        config = load_config(args)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 2

    if args.command == "process":
        return run_process(config, args.inputs)
    if args.command == "enhance":
        return run_enhance(args.input, args.output)
    return run_watch(config)


if __name__ == "__main__":
    sys.exit(main())
