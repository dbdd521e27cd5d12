"""CLI entry point for lsexport."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd
from loguru import logger

from lsexport.client import LabelStudioClient
from lsexport.config import POSITIONAL_FIELDS, LabelStudioConfig
from lsexport.exceptions import LsExportError
from lsexport.export_table import export_to_dataframe
from lsexport.models import ExportResult

_POSITIONAL_HELP = (
    "Positional settings, read from the end: [TOKEN [HOST [PROJECTS]]]. "
    "PROJECTS is a comma separated list of project titles. Environment "
    "variables LABEL_STUDIO_TOKEN, LABEL_STUDIO_HOST and LABEL_STUDIO_PROJECTS "
    "take precedence."
)
_CONNECTION_HELP = (
    "Positional settings, read from the end: [TOKEN [HOST]]. Environment "
    "variables LABEL_STUDIO_TOKEN and LABEL_STUDIO_HOST take precedence."
)


class CliApp:
    """Command-line interface for lsexport."""

    def __init__(self) -> None:
        """Initialize parser and command definitions."""
        self._parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Export Label Studio tasks with annotations and predictions.",
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        self._add_fetch_parser(subparsers)
        self._add_projects_parser(subparsers)

        return parser

    @staticmethod
    def _add_common_arguments(parser: argparse.ArgumentParser, values_help: str) -> None:
        parser.add_argument("values", nargs="*", help=values_help)
        parser.add_argument(
            "--config",
            default=None,
            help=(
                "Path to YAML config (default: ~/.config/lsexport/config.yaml "
                "or LSEXPORT_CONFIG)."
            ),
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=None,
            help="Per-request timeout in seconds (default: 30).",
        )

    def _add_fetch_parser(
        self,
        subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ) -> None:
        """Add the ``fetch`` command parser."""
        parser = subparsers.add_parser(
            "fetch",
            help="Export tasks, manual annotations and predictions of projects.",
        )
        self._add_common_arguments(parser, _POSITIONAL_HELP)
        parser.add_argument(
            "--output-dir",
            "-o",
            default=None,
            help="Directory to save export.json and results.csv.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Abort on the first failing project instead of skipping it.",
        )
        parser.add_argument(
            "--workers",
            type=int,
            default=None,
            help="Parallel prediction requests per project (default: 1).",
        )

    def _add_projects_parser(
        self,
        subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ) -> None:
        """Add the ``projects`` command parser."""
        parser = subparsers.add_parser(
            "projects",
            help="List project titles and IDs from the Label Studio catalog.",
        )
        self._add_common_arguments(parser, _CONNECTION_HELP)

    @staticmethod
    def _load_config(
        args: argparse.Namespace,
        positional_fields: tuple[str, ...] = POSITIONAL_FIELDS,
    ) -> LabelStudioConfig:
        """Load layered config and apply command-line flags on top."""
        config_path = Path(args.config) if args.config else None
        cfg = LabelStudioConfig.load(
            config_path=config_path,
            args=args.values,
            positional_fields=positional_fields,
        )
        update: dict[str, object] = {}
        if args.timeout is not None:
            update["timeout"] = args.timeout
        if getattr(args, "strict", False):
            update["strict"] = True
        if getattr(args, "workers", None) is not None:
            update["max_workers"] = args.workers
        if update:
            cfg = LabelStudioConfig._build(  # noqa: SLF001
                {**cfg.model_dump(), **update}, "command line"
            )
        return cfg

    @staticmethod
    def _write_df_csv(df: pd.DataFrame, path: Path, label: str) -> None:
        """Write a DataFrame to CSV and log the result."""
        df.to_csv(path, index=False, encoding="utf-8")
        logger.info(f"{label} saved to {path} ({len(df)} rows)")

    def _write_export(self, result: ExportResult, output_dir: Path) -> None:
        """Write the JSON tree and the flattened CSV into *output_dir*."""
        output_dir.mkdir(parents=True, exist_ok=True)
        json_path = output_dir / "export.json"
        json_path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Export tree saved to {json_path}")
        self._write_df_csv(
            export_to_dataframe(result), output_dir / "results.csv", "Results CSV"
        )

    @staticmethod
    def _log_summary(result: ExportResult) -> None:
        for name in sorted(result.projects):
            project = result.projects[name]
            annotations, predictions = project.result_counts
            logger.info(
                f"{name!r} (id={project.id}): {len(project.tasks)} task(s), "
                f"{annotations} manual annotation(s), {predictions} prediction(s)"
            )
        for failure in result.failures:
            logger.error(
                f"{failure.project_name!r} (id={failure.project_id}) failed: "
                f"{failure.error_type}: {failure.message}"
            )

    def _run_fetch(self, args: argparse.Namespace) -> None:
        """Run the ``fetch`` command."""
        cfg = self._load_config(args).require_complete()
        with LabelStudioClient(cfg) as client:
            project_map = client.resolve_projects()
            if not project_map:
                logger.warning(
                    "None of the configured projects exist in Label Studio; "
                    "the export is empty."
                )
            result = client.fetch_all(project_map)

        self._log_summary(result)
        if args.output_dir:
            self._write_export(result, Path(args.output_dir))
        if not result.ok:
            sys.exit(f"{len(result.failures)} project(s) failed to export.")

    def _run_projects(self, args: argparse.Namespace) -> None:
        """Run the ``projects`` command."""
        cfg = self._load_config(args, ("host", "token")).require_connection()
        with LabelStudioClient(cfg) as client:
            projects = client.list_projects()
        for project in projects:
            print(f"{project.id}\t{project.title}")  # noqa: T201

    def _run_command(self, args: argparse.Namespace) -> None:
        """Dispatch parsed args to the target command implementation."""
        if args.command == "fetch":
            self._run_fetch(args)
            return
        if args.command == "projects":
            self._run_projects(args)
            return
        sys.exit(f"Unknown command: {args.command}")

    def run(self, argv: list[str] | None = None) -> None:
        """Run the CLI with the given arguments."""
        args = self._parser.parse_args(argv)
        try:
            self._run_command(args)
        except LsExportError as e:
            sys.exit(str(e))


def main(argv: list[str] | None = None) -> None:
    """Compatibility entry point for setuptools/CLI wrappers."""
    CliApp().run(argv)


if __name__ == "__main__":
    main()
