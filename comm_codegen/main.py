"""
Comm Code Generator - Generates TypeScript, Rust and Python bindings from
OpenRPC comm contracts.

Each comm is described by up to two documents in the comms directory:

    <name>-frontend-openrpc.json   events the kernel sends to the frontend
    <name>-backend-openrpc.json    requests the frontend sends to the kernel

For every comm this writes ``positron<Name>Comm.ts``, ``<name>_comm.rs`` and
``<name>_comm.py``. The Python file is formatted with black before it is
written, and a comm's files are only written once all three rendered cleanly.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Sequence

from .emitters import EMITTERS, GeneratorContext, PythonEmitter, RustEmitter, TypescriptEmitter
from .model import Comm, Direction, parse_contract, validate_comm
from .shared import (
    CommDocuments,
    FormatterError,
    PreconditionError,
    SchemaError,
    collect_comm_documents,
    load_contract_document,
)

ROOT: Final[Path] = Path(__file__).resolve().parents[1]
COMMS_DIR: Final[Path] = ROOT / "comms"
TYPESCRIPT_OUTPUT_DIR: Final[Path] = (
    ROOT / "src" / "vs" / "workbench" / "services" / "languageRuntime" / "common"
)
# Lives in a sibling checkout; it is never created here
RUST_OUTPUT_DIR: Final[Path] = ROOT.parent / "amalthea" / "crates" / "amalthea" / "src" / "comm"
PYTHON_OUTPUT_DIR: Final[Path] = ROOT / "python_files" / "positron_ipykernel"

FORMATTER_COMMAND: Final[tuple[str, ...]] = (sys.executable, "-m", "black")


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Input and output locations plus run options."""

    comms_dir: Path = COMMS_DIR
    typescript_dir: Path = TYPESCRIPT_OUTPUT_DIR
    rust_dir: Path = RUST_OUTPUT_DIR
    python_dir: Path = PYTHON_OUTPUT_DIR
    comms: tuple[str, ...] = ()
    check: bool = False
    parallel: bool = True
    max_workers: int | None = None

    def output_dir(self, target: str) -> Path:
        return {
            TypescriptEmitter.target: self.typescript_dir,
            RustEmitter.target: self.rust_dir,
            PythonEmitter.target: self.python_dir,
        }[target]


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """One rendered (and, for Python, formatted) output file."""

    comm: str
    target: str
    path: Path
    content: str

    def is_current(self) -> bool:
        """Whether the file on disk already has exactly this content."""
        try:
            return self.path.read_text(encoding="utf-8") == self.content
        except OSError:
            return False


@dataclass(slots=True)
class GenerationReport:
    """Outcome of a generation run."""

    processed: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    files: list[GeneratedFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stale: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.stale


def check_prerequisites(config: GeneratorConfig) -> None:
    """Verify the environment before any comm is processed.

    Raises:
        PreconditionError: If the Rust output directory is missing or the
            formatter cannot be run.
    """
    if not config.rust_dir.is_dir():
        raise PreconditionError(
            f"Rust output directory '{config.rust_dir}' does not exist; "
            "is the amalthea project checked out next to this one?"
        )

    try:
        subprocess.run(
            [*FORMATTER_COMMAND, "--version"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise PreconditionError(
            f"Formatter '{' '.join(FORMATTER_COMMAND[1:])}' is not available: {e}"
        ) from e


def load_comm(documents: CommDocuments) -> Comm:
    """Load and parse the contracts of one comm."""
    contracts = {}
    for direction, path in (
        (Direction.FRONTEND, documents.frontend),
        (Direction.BACKEND, documents.backend),
    ):
        if path is not None:
            contracts[direction.value] = parse_contract(
                load_contract_document(path), direction, path.name
            )
    return Comm(name=documents.name, **contracts)


def format_python(source: str, path: Path) -> str:
    """Run black over generated Python source and return the result.

    The source goes through stdin, so nothing is written if black fails.

    Raises:
        FormatterError: If black cannot be started or rejects the source.
    """
    try:
        result = subprocess.run(
            [*FORMATTER_COMMAND, "--quiet", "-"],
            input=source,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise FormatterError(str(path), -1, str(e)) from e

    if result.returncode != 0:
        raise FormatterError(str(path), result.returncode, result.stderr)
    return result.stdout


def render_comm(
    comm: Comm,
    config: GeneratorConfig,
    ctx: GeneratorContext,
) -> list[GeneratedFile]:
    """Render every target for a comm without touching the filesystem."""
    files = []
    for emitter_cls in EMITTERS:
        emitter = emitter_cls(ctx, comm)
        path = config.output_dir(emitter.target) / emitter.output_name()
        content = emitter.render()
        if emitter.target == PythonEmitter.target:
            content = format_python(content, path)
        files.append(GeneratedFile(comm.name, emitter.target, path, content))
    return files


def write_outputs(files: Sequence[GeneratedFile]) -> None:
    """Write a comm's rendered files together, creating output directories as needed.

    Every file is first staged next to its target. Targets are only replaced
    once all stages succeeded, and a failed replace restores the targets
    already replaced, so either every file is written or none is.

    Raises:
        OSError: If a file cannot be staged or moved into place.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for generated in files:
            generated.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = generated.path.with_name(generated.path.name + ".tmp")
            staged.append((tmp_path, generated.path))
            tmp_path.write_text(generated.content, encoding="utf-8")

        replaced: list[tuple[Path, bytes | None]] = []
        try:
            for tmp_path, path in staged:
                previous = path.read_bytes() if path.is_file() else None
                os.replace(tmp_path, path)
                replaced.append((path, previous))
        except OSError:
            for path, previous in reversed(replaced):
                if previous is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_bytes(previous)
            raise
    finally:
        for tmp_path, _ in staged:
            tmp_path.unlink(missing_ok=True)


def _process_comm(
    documents: CommDocuments,
    config: GeneratorConfig,
    ctx: GeneratorContext,
) -> tuple[list[GeneratedFile], list[str]]:
    comm = load_comm(documents)
    warnings = [f"{comm.name}: {warning}" for warning in validate_comm(comm)]
    files = render_comm(comm, config, ctx)
    if not config.check:
        write_outputs(files)
    return files, warnings


def generate(config: GeneratorConfig) -> GenerationReport:
    """Generate bindings for every comm in the comms directory.

    Args:
        config: Locations and run options.

    Returns:
        The report of processed comms, failures and generated files. A failed
        comm never stops the others, and files already written for other
        comms are kept.

    Raises:
        FileNotFoundError: If the comms directory doesn't exist.
        SchemaError: If the comms directory holds conflicting documents or a
            requested comm has no documents.
    """
    ctx = GeneratorContext()
    all_documents = collect_comm_documents(config.comms_dir)

    if config.comms:
        known = {documents.name for documents in all_documents}
        missing = sorted(set(config.comms) - known)
        if missing:
            raise SchemaError(
                f"No contract documents found for comm(s): {', '.join(missing)}",
                str(config.comms_dir),
            )
        all_documents = [d for d in all_documents if d.name in config.comms]

    outcomes: dict[str, tuple[list[GeneratedFile], list[str]] | str] = {}

    def run(documents: CommDocuments) -> None:
        try:
            outcomes[documents.name] = _process_comm(documents, config, ctx)
        except (SchemaError, FormatterError, OSError) as e:
            outcomes[documents.name] = str(e)

    if config.parallel and len(all_documents) > 1:
        # Comms are independent; the formatter subprocess dominates the runtime
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            futures = [executor.submit(run, documents) for documents in all_documents]
            for future in as_completed(futures):
                future.result()
    else:
        for documents in all_documents:
            run(documents)

    report = GenerationReport()
    for documents in all_documents:
        outcome = outcomes[documents.name]
        if isinstance(outcome, str):
            report.failures[documents.name] = outcome
            continue
        files, warnings = outcome
        report.processed.append(documents.name)
        report.files.extend(files)
        report.warnings.extend(warnings)
        if config.check:
            report.stale.extend(f.path for f in files if not f.is_current())

    return report


def _print_files(files: Sequence[GeneratedFile]) -> None:
    for generated in files:
        print("\n" + "=" * 40)
        print(generated.path)
        print("=" * 40)
        print(generated.content)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate TypeScript, Rust and Python comm bindings from OpenRPC contracts",
    )
    parser.add_argument(
        "--comms-dir",
        type=Path,
        default=COMMS_DIR,
        help="Directory holding the <name>-{frontend,backend}-openrpc.json documents",
    )
    parser.add_argument(
        "--typescript-dir",
        type=Path,
        default=TYPESCRIPT_OUTPUT_DIR,
        help="Output directory for the TypeScript bindings",
    )
    parser.add_argument(
        "--rust-dir",
        type=Path,
        default=RUST_OUTPUT_DIR,
        help="Output directory for the Rust bindings (must already exist)",
    )
    parser.add_argument(
        "--python-dir",
        type=Path,
        default=PYTHON_OUTPUT_DIR,
        help="Output directory for the Python bindings",
    )
    parser.add_argument(
        "--comm",
        action="append",
        default=[],
        metavar="NAME",
        help="Only generate this comm (can be repeated)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check that generated files are up to date without writing them",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Don't print the contents of generated files",
    )
    parser.add_argument(
        "--no-parallel",
        action="store_true",
        help="Disable parallel processing",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of parallel workers",
    )

    args = parser.parse_args(argv)

    config = GeneratorConfig(
        comms_dir=args.comms_dir.resolve(),
        typescript_dir=args.typescript_dir.resolve(),
        rust_dir=args.rust_dir.resolve(),
        python_dir=args.python_dir.resolve(),
        comms=tuple(args.comm),
        check=args.check,
        parallel=not args.no_parallel,
        max_workers=args.workers,
    )

    try:
        check_prerequisites(config)
        report = generate(config)
    except (PreconditionError, SchemaError, FileNotFoundError) as e:
        raise SystemExit(f"Error: {e}") from e

    if not report.processed and not report.failures:
        raise SystemExit(f"No contract documents found in {config.comms_dir}")

    for warning in report.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if not args.quiet and not config.check:
        _print_files(report.files)

    if report.processed:
        print("\nProcessed comms:")
        for name in report.processed:
            print(f"  - {name}")

    if report.failures:
        details = "\n".join(f"  {name}: {message}" for name, message in report.failures.items())
        raise SystemExit(f"Error: {len(report.failures)} comm(s) failed:\n{details}")

    if report.stale:
        print("\nOut-of-date files:", file=sys.stderr)
        for path in report.stale:
            print(f"  {path}", file=sys.stderr)
        raise SystemExit(1)

    if config.check:
        print(f"\nAll {len(report.files)} generated file(s) are up to date")


if __name__ == "__main__":
    main()
