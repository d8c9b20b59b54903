"""CLI entrypoints for funcdocs commands."""

from __future__ import annotations

import argparse
from pathlib import Path

from .assembly.references import BrokenReferenceError
from .builder import BuildError, SiteBuilder
from .config import CONFIG_FILENAME, ConfigError, load_config
from .generator import DocsGenerator
from .logging import configure_logging, get_logger
from .sources.docblocks import DocblockExtractor
from .validators.markdown import format_issues


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="funcdocs",
        description="Generate MkDocs sources from functional documentation in code and markdown.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Extract functional documentation and write the MkDocs sources.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--output",
        help="Docs base directory that receives mkdocs.yml and the generated pages.",
    )
    generate_parser.add_argument(
        "--config",
        help=f"Configuration file (defaults to <path>/{CONFIG_FILENAME}).",
    )
    generate_parser.add_argument(
        "--build",
        action="store_true",
        help="Run the configured site build command after generating.",
    )
    generate_parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip markdown validation of documentation bodies.",
    )
    generate_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors to the console.",
    )
    generate_parser.add_argument(
        "--log-file",
        help="Also write debug logs to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for funcdocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if getattr(args, "log_file", None) else None
    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=log_file)
    logger = get_logger("cli")

    if args.command != "generate":  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    root = Path(args.path).resolve()
    config_path = Path(args.config) if args.config else root / CONFIG_FILENAME
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    if args.output:
        config.output = Path(args.output).resolve()

    fragments = DocblockExtractor().extract(config.paths or [root])
    generator = DocsGenerator(config, validate=not args.no_validate)
    collected = generator.collect(fragments)
    if not collected:
        logger.warning("No documentation fragments found. Skipping generation.")
        return

    try:
        plan = generator.plan(collected)
    except BrokenReferenceError as exc:
        parser.exit(1, f"{exc}\n")
    result = generator.write(plan, config.output_dir)
    print(f"Documentation generated in {_relativize(result.docs_dir)} ({len(result.pages)} pages)")
    if result.issues:
        print(format_issues(result.issues), end="")

    if args.build:
        try:
            SiteBuilder(config.build_command).build(config.output_dir)
        except BuildError as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"Site build could not start: {exc}\n")
        print("Site built successfully.")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":  # pragma: no cover
    main()
