"""Compiler invocation: build specs, argument lists and the process runner."""

import fnmatch
import hashlib
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, TypeAlias, TypeVar

from fxbuild.console import error, info


DEFAULT_COMPILER = "fsharpc"
DEFAULT_EXECUTABLE_SUFFIX = ".exe"
MISSING_PROGRAM_EXIT_CODE = 127

T = TypeVar("T")
PathLike: TypeAlias = Path | str
ValidationResult: TypeAlias = tuple[int, Optional[T]]


class OutputKind(Enum):
    LIBRARY = "library"
    CONSOLE_EXECUTABLE = "exe"
    WINDOWED_EXECUTABLE = "winexe"


class Resource(NamedTuple):
    source: str
    name: str

    def __str__(self) -> str:
        return f"{self.source},{self.name}"


@dataclass(frozen=True)
class BuildSpec:
    sources: tuple[str, ...]
    output_kind: OutputKind
    output_path: Optional[str] = None
    dependencies: tuple[str, ...] = ()
    doc_path: Optional[str] = None
    static_links: Optional[tuple[str, ...]] = None
    resources: Optional[tuple[Resource, ...]] = None
    extra_flags: Optional[tuple[str, ...]] = None
    debug_symbols: bool = True


# Path helpers.
def join_path(directory: PathLike, name: PathLike) -> str:
    return os.path.join(str(directory), str(name))


def base_name(path: PathLike) -> str:
    return os.path.basename(str(path))


def replace_ext(path: PathLike, ext: str) -> str:
    """Swap the extension of ``path``; ``ext`` may be given with or without the dot."""
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    root, _ = os.path.splitext(str(path))
    return f"{root}{ext}"


def directory_exists(path: PathLike) -> bool:
    return os.path.isdir(str(path))


def mkdir(path: PathLike) -> int:
    if directory_exists(path):
        return 0
    try:
        os.makedirs(str(path), exist_ok=True)
    except OSError as exc:
        error(f"failed to create {path}: {exc}")
        return 1
    return 0


def list_files(directory: PathLike, pattern: str) -> list[str]:
    """Return paths in ``directory`` matching ``pattern``, or [] if it is missing."""
    if not directory_exists(directory):
        return []
    with os.scandir(str(directory)) as entries:
        matches = [
            entry.path
            for entry in entries
            if entry.is_file() and fnmatch.fnmatch(entry.name, pattern)
        ]
    return sorted(matches)


def file_md5(path: PathLike) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


# Process runner.
def run_cmd(program: str, args: Sequence[str]) -> int:
    """Run ``program`` with the space-joined ``args`` and return the exit code.

    Tokens split on whitespace only; quote characters in paths pass through.
    """
    arg_string = " ".join(args)
    print("+", program, arg_string)
    command = [program, *arg_string.split()]
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError as exc:
        error(f"command failed with exit code {exc.returncode}")
        return exc.returncode
    except OSError as exc:
        error(f"failed to run {program}: {exc}")
        return MISSING_PROGRAM_EXIT_CODE
    return 0


# Argument builder.
def validate_build_spec(spec: BuildSpec) -> tuple[int, Optional[str]]:
    """Check the field combinations a compiler invocation depends on.

    Returns (0, None) for a usable spec, otherwise (1, reason).
    """
    if not spec.sources or not all(source for source in spec.sources):
        return (1, "build needs at least one non-empty source file")
    kind = spec.output_kind
    if kind is OutputKind.LIBRARY:
        if not spec.doc_path:
            return (1, "library builds need a documentation output path")
    elif spec.doc_path:
        return (1, "documentation output is only produced for libraries")
    if kind is OutputKind.CONSOLE_EXECUTABLE:
        if len(spec.sources) != 1:
            return (1, "console executables are built from a single source file")
        if spec.dependencies:
            return (1, "console executables do not take references")
    elif not spec.output_path:
        return (1, f"{kind.value} builds need an output path")
    return (0, None)


def resolve_output_path(spec: BuildSpec) -> str:
    if spec.output_path:
        return spec.output_path
    if spec.output_kind is OutputKind.CONSOLE_EXECUTABLE:
        return replace_ext(spec.sources[0], DEFAULT_EXECUTABLE_SUFFIX)
    raise ValueError(f"{spec.output_kind.value} build has no output path")


def _debug_flag(spec: BuildSpec) -> str:
    return "--debug+" if spec.debug_symbols else "--debug-"


def _joined_flags(prefix: str, values: Optional[Sequence[object]]) -> str:
    if not values:
        return ""
    return " ".join(f"{prefix}{value}" for value in values)


def _library_arguments(spec: BuildSpec, output: str) -> list[str]:
    return [
        " ".join(spec.sources),
        f"--target:{OutputKind.LIBRARY.value}",
        f"--out:{output}",
        f"--doc:{spec.doc_path}",
        _debug_flag(spec),
        "--nologo",
        _joined_flags("-r:", spec.dependencies),
    ]


def _console_arguments(spec: BuildSpec, output: str) -> list[str]:
    return [
        spec.sources[0],
        f"--target:{OutputKind.CONSOLE_EXECUTABLE.value}",
        f"--out:{output}",
        _debug_flag(spec),
        "--nologo",
    ]


def _windowed_arguments(spec: BuildSpec, output: str) -> list[str]:
    extra = " ".join(spec.extra_flags) if spec.extra_flags else ""
    return [
        " ".join(spec.sources),
        f"--target:{OutputKind.WINDOWED_EXECUTABLE.value}",
        f"--out:{output}",
        _debug_flag(spec),
        "--nologo",
        _joined_flags("-r:", spec.dependencies),
        _joined_flags("--staticlink:", spec.static_links),
        _joined_flags("--linkresource:", spec.resources),
        extra,
    ]


_ARGUMENT_BUILDERS = {
    OutputKind.LIBRARY: _library_arguments,
    OutputKind.CONSOLE_EXECUTABLE: _console_arguments,
    OutputKind.WINDOWED_EXECUTABLE: _windowed_arguments,
}


def build_arguments(spec: BuildSpec) -> ValidationResult[list[str]]:
    """Produce the ordered compiler tokens for ``spec``.

    Category order is target, output, doc/debug, no-logo, references,
    static links, resources, extras. Absent optional categories of a
    windowed executable still occupy their slot as an empty token.
    """
    result, reason = validate_build_spec(spec)
    if result:
        error(f"invalid build: {reason}")
        return (1, None)
    output = resolve_output_path(spec)
    return (0, _ARGUMENT_BUILDERS[spec.output_kind](spec, output))


def compile_spec(compiler: str, spec: BuildSpec) -> int:
    """Validate ``spec``, run the compiler on it and return its exit status."""
    result, args = build_arguments(spec)
    if result or args is None:
        return 1
    if spec.output_kind is OutputKind.LIBRARY:
        print(f"Sources = {' '.join(spec.sources)}")
    status = run_cmd(compiler, args)
    if status == 0:
        output = resolve_output_path(spec)
        if os.path.isfile(output):
            info(f"{output} md5 {file_md5(output)}")
    return status
