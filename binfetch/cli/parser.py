"""
binfetch CLI argument parser.

This module implements the command-line interface for binfetch using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from binfetch import __version__

logger = logging.getLogger(__name__)


class CLI:
    """binfetch command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="binfetch",
            description="binfetch - install a prebuilt CLI binary from GitHub releases",
            epilog='Use "binfetch COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"binfetch {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./binfetch.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_target_command(subparsers)
        self._add_path_command(subparsers)
        self._add_clean_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download and install the binary",
            description="Download the release asset for this platform and install it",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Ignore cached downloads",
        )
        parser.add_argument(
            "--release",
            metavar="TAG",
            help="Release tag to install (default: from config)",
        )
        parser.add_argument(
            "--target",
            metavar="TARGET",
            help="Release target (default: detected from this host)",
        )
        parser.add_argument(
            "--arch",
            metavar="ARCH",
            help="Architecture to resolve the target for (e.g. x64, arm64)",
        )
        parser.add_argument(
            "--bin-dir",
            type=Path,
            metavar="PATH",
            help="Directory to install the binary into (default: from config)",
        )

    def _add_target_command(self, subparsers):
        """Add 'target' subcommand."""
        parser = subparsers.add_parser(
            "target",
            help="Print the release target for this host",
            description="Print the release target resolved for this host",
        )
        parser.add_argument(
            "--arch",
            metavar="ARCH",
            help="Architecture to resolve the target for (e.g. x64, arm64)",
        )
        parser.add_argument(
            "--list",
            action="store_true",
            help="List every supported target instead",
        )

    def _add_path_command(self, subparsers):
        """Add 'path' subcommand."""
        subparsers.add_parser(
            "path",
            help="Print the installed binary path",
            description="Print the path of the installed binary; fails if missing",
        )

    def _add_clean_command(self, subparsers):
        """Add 'clean' subcommand."""
        subparsers.add_parser(
            "clean",
            help="Delete cached downloads",
            description="Delete the download cache directory",
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (default: sys.argv[1:])

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "binfetch.cli.commands.install",
            "target": "binfetch.cli.commands.target",
            "path": "binfetch.cli.commands.path",
            "clean": "binfetch.cli.commands.clean",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
