#!/usr/bin/env python3
"""Build orchestration for the fxgtk binding library and its examples."""

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    Callable,
    NamedTuple,
    Optional,
    Sequence,
    TypeAlias,
    TypedDict,
)

from fxbuild.compiler import (
    DEFAULT_COMPILER,
    DEFAULT_EXECUTABLE_SUFFIX,
    BuildSpec,
    OutputKind,
    Resource,
    base_name,
    compile_spec,
    join_path,
    list_files,
    mkdir,
    replace_ext,
    resolve_output_path,
)
from fxbuild.console import (
    error,
    info,
    report_failure,
    report_invalid,
    report_separator,
    report_start,
    report_success,
    set_color_enabled,
)


DEFAULT_CONFIG_FILE_NAME = "fxbuild.json"
DEFAULT_LIB_SOURCES = ["src/fxgtk.fsx", "src/wforms.fsx"]
DEFAULT_LIB_OUTPUT = Path("bin/fxgtk.dll")
DEFAULT_LIB_DOC = Path("bin/fxgtk.xml")
DEFAULT_REFERENCE_DIR = Path("/usr/lib/mono/gtk-sharp-3.0/")
DEFAULT_REFERENCES = [
    "atk-sharp.dll",
    "gio-sharp.dll",
    "glib-sharp.dll",
    "gtk-sharp.dll",
    "gdk-sharp.dll",
    "cairo-sharp.dll",
    "pango-sharp.dll",
]
DEFAULT_EXAMPLES_DIR = Path("examples")
DEFAULT_EXAMPLE_PATTERN = "*.fsx"
DEFAULT_BIN_DIR = Path("bin")
DEFAULT_STATIC_LINKS = ["fxgtk"]
DEFAULT_DEMO_SOURCE = "example1-image-viewer.fsx"
DEFAULT_DEMO_OUTPUT = Path("bin/demo1.exe")
DEFAULT_DEMO_RESOURCES = [Resource("icontest.ico", "Main.icon.ico")]
COMMAND_SEPARATOR = "--"
TRUE_VALUES = {"1", "true", "yes", "on"}


class DemoConfig(TypedDict):
    source: str
    output: Path
    resources: list[Resource]


class BuildConfig(TypedDict):
    compiler: str
    lib_sources: list[str]
    lib_output: Path
    lib_doc: Path
    reference_dir: Path
    references: list[str]
    examples_dir: Path
    example_pattern: str
    bin_dir: Path
    static_links: list[str]
    demo: DemoConfig
    color: bool
    strict_exit: bool
    project_root: Optional[Path]
    config_path: Optional[Path]


class ResolvedBuildConfig(TypedDict):
    compiler: str
    lib_sources: list[str]
    lib_output: str
    lib_doc: str
    references: list[str]
    examples_dir: str
    example_pattern: str
    bin_dir: str
    static_links: list[str]
    demo_source: str
    demo_output: str
    demo_resources: list[Resource]


StringValidationResult: TypeAlias = tuple[int, Optional[str]]
ListValidationResult: TypeAlias = tuple[int, Optional[list[str]]]
BoolValidationResult: TypeAlias = tuple[int, Optional[bool]]
ResourceValidationResult: TypeAlias = tuple[int, Optional[list[Resource]]]
PathLike: TypeAlias = Path | str


def _default_demo_config() -> DemoConfig:
    return {
        "source": DEFAULT_DEMO_SOURCE,
        "output": DEFAULT_DEMO_OUTPUT,
        "resources": list(DEFAULT_DEMO_RESOURCES),
    }


class BuildConfigManager:
    def __init__(
        self,
        compiler: str = DEFAULT_COMPILER,
        lib_sources: Optional[list[str]] = None,
        lib_output: Path = DEFAULT_LIB_OUTPUT,
        lib_doc: Path = DEFAULT_LIB_DOC,
        reference_dir: Path = DEFAULT_REFERENCE_DIR,
        references: Optional[list[str]] = None,
        examples_dir: Path = DEFAULT_EXAMPLES_DIR,
        example_pattern: str = DEFAULT_EXAMPLE_PATTERN,
        bin_dir: Path = DEFAULT_BIN_DIR,
        static_links: Optional[list[str]] = None,
        demo: Optional[DemoConfig] = None,
        color: bool = True,
        strict_exit: bool = False,
        project_root: Optional[Path] = None,
        config_path: Optional[Path] = None,
    ):
        self._compiler = compiler
        self._lib_sources = (
            lib_sources if lib_sources is not None else list(DEFAULT_LIB_SOURCES)
        )
        self._lib_output = lib_output
        self._lib_doc = lib_doc
        self._reference_dir = reference_dir
        self._references = (
            references if references is not None else list(DEFAULT_REFERENCES)
        )
        self._examples_dir = examples_dir
        self._example_pattern = example_pattern
        self._bin_dir = bin_dir
        self._static_links = (
            static_links if static_links is not None else list(DEFAULT_STATIC_LINKS)
        )
        self._demo: DemoConfig = demo if demo is not None else _default_demo_config()
        self._color = color
        self._strict_exit = strict_exit
        self._project_root = project_root
        self._config_path = config_path

    @property
    def compiler(self) -> str:
        return self._compiler

    @property
    def lib_sources(self) -> list[str]:
        return self._lib_sources

    @property
    def lib_output(self) -> Path:
        return self._lib_output

    @property
    def lib_doc(self) -> Path:
        return self._lib_doc

    @property
    def reference_dir(self) -> Path:
        return self._reference_dir

    @property
    def references(self) -> list[str]:
        return self._references

    @property
    def examples_dir(self) -> Path:
        return self._examples_dir

    @property
    def example_pattern(self) -> str:
        return self._example_pattern

    @property
    def bin_dir(self) -> Path:
        return self._bin_dir

    @property
    def static_links(self) -> list[str]:
        return self._static_links

    @property
    def demo(self) -> DemoConfig:
        return self._demo

    @property
    def color(self) -> bool:
        return self._color

    @property
    def strict_exit(self) -> bool:
        return self._strict_exit

    @property
    def project_root(self) -> Optional[Path]:
        return self._project_root

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def set_compiler(self, value: str) -> None:
        self._compiler = value

    def set_lib_sources(self, value: list[str]) -> None:
        self._lib_sources = value

    def set_lib_output(self, value: Path) -> None:
        self._lib_output = value

    def set_lib_doc(self, value: Path) -> None:
        self._lib_doc = value

    def set_reference_dir(self, value: Path) -> None:
        self._reference_dir = value

    def set_references(self, value: list[str]) -> None:
        self._references = value

    def set_examples_dir(self, value: Path) -> None:
        self._examples_dir = value

    def set_example_pattern(self, value: str) -> None:
        self._example_pattern = value

    def set_bin_dir(self, value: Path) -> None:
        self._bin_dir = value

    def set_static_links(self, value: list[str]) -> None:
        self._static_links = value

    def set_demo(self, value: DemoConfig) -> None:
        self._demo = value

    def set_color(self, value: bool) -> None:
        self._color = value

    def set_strict_exit(self, value: bool) -> None:
        self._strict_exit = value

    def set_project_root(self, value: Optional[Path]) -> None:
        self._project_root = value

    def set_config_path(self, value: Optional[Path]) -> None:
        self._config_path = value

    def to_dict(self) -> BuildConfig:
        data: BuildConfig = {
            "compiler": self._compiler,
            "lib_sources": self._lib_sources,
            "lib_output": self._lib_output,
            "lib_doc": self._lib_doc,
            "reference_dir": self._reference_dir,
            "references": self._references,
            "examples_dir": self._examples_dir,
            "example_pattern": self._example_pattern,
            "bin_dir": self._bin_dir,
            "static_links": self._static_links,
            "demo": self._demo,
            "color": self._color,
            "strict_exit": self._strict_exit,
            "project_root": self._project_root,
            "config_path": self._config_path,
        }
        return data

    @classmethod
    def from_dict(cls, config: BuildConfig) -> "BuildConfigManager":
        return cls(
            compiler=config["compiler"],
            lib_sources=config["lib_sources"],
            lib_output=config["lib_output"],
            lib_doc=config["lib_doc"],
            reference_dir=config["reference_dir"],
            references=config["references"],
            examples_dir=config["examples_dir"],
            example_pattern=config["example_pattern"],
            bin_dir=config["bin_dir"],
            static_links=config["static_links"],
            demo=config["demo"],
            color=config["color"],
            strict_exit=config["strict_exit"],
            project_root=config["project_root"],
            config_path=config["config_path"],
        )


# Build configuration manager
config_manager = BuildConfigManager()


def _manager(config_manager: Optional[BuildConfigManager] = None) -> BuildConfigManager:
    return config_manager if config_manager is not None else globals()["config_manager"]


def _project_path(path: PathLike, project_root: Optional[Path]) -> str:
    """Express a configured path relative to the current directory when possible."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    if project_root is None:
        return str(candidate)
    try:
        return os.path.relpath(project_root / candidate)
    except ValueError:
        return str(project_root / candidate)


def _resolve_config(
    config_manager: Optional[BuildConfigManager] = None,
) -> ResolvedBuildConfig:
    manager = _manager(config_manager)
    root = manager.project_root
    reference_dir = _project_path(manager.reference_dir, root)
    return {
        "compiler": manager.compiler,
        "lib_sources": [_project_path(source, root) for source in manager.lib_sources],
        "lib_output": _project_path(manager.lib_output, root),
        "lib_doc": _project_path(manager.lib_doc, root),
        "references": [join_path(reference_dir, name) for name in manager.references],
        "examples_dir": _project_path(manager.examples_dir, root),
        "example_pattern": manager.example_pattern,
        "bin_dir": _project_path(manager.bin_dir, root),
        "static_links": list(manager.static_links),
        "demo_source": manager.demo["source"],
        "demo_output": _project_path(manager.demo["output"], root),
        "demo_resources": list(manager.demo["resources"]),
    }


def _validate_non_empty_string(value: Any, field_name: str) -> StringValidationResult:
    """Validate value is a non-empty string.

    Returns (0, stripped_string) if valid, (0, None) if value is None,
    or (1, None) if invalid with error message printed.
    """
    if value is None:
        return (0, None)
    if isinstance(value, str) and value.strip():
        return (0, value.strip())
    error(f"config {field_name} must be a non-empty string")
    return (1, None)


def _validate_string_list(
    value: Any, field_name: str, allow_empty: bool = True
) -> ListValidationResult:
    """Validate value is a list of non-empty strings.

    Returns (0, list) if valid, (0, None) if value is None,
    or (1, None) if invalid. Entries are kept as written.
    """
    if value is None:
        return (0, None)
    if not isinstance(value, list):
        error(f"config {field_name} must be a list of strings")
        return (1, None)
    normalized = []
    for entry in value:
        if not isinstance(entry, str) or not entry.strip():
            error(f"config {field_name} must be a list of non-empty strings")
            return (1, None)
        normalized.append(entry)
    if not normalized and not allow_empty:
        error(f"config {field_name} must not be empty")
        return (1, None)
    return (0, normalized)


def _validate_bool(value: Any, field_name: str) -> BoolValidationResult:
    if value is None:
        return (0, None)
    if isinstance(value, bool):
        return (0, value)
    error(f"config {field_name} must be true or false")
    return (1, None)


def _parse_resource(entry: Any, field_name: str) -> Optional[Resource]:
    """Accept "source,name" strings or {"source": ..., "name": ...} objects."""
    if isinstance(entry, str):
        source, sep, name = entry.partition(",")
        if sep and source.strip() and name.strip():
            return Resource(source.strip(), name.strip())
    elif isinstance(entry, dict):
        source = entry.get("source")
        name = entry.get("name")
        if isinstance(source, str) and source and isinstance(name, str) and name:
            return Resource(source, name)
    error(f'config {field_name} entries must look like "source,name"')
    return None


def _validate_resources(value: Any, field_name: str) -> ResourceValidationResult:
    if value is None:
        return (0, None)
    if not isinstance(value, list):
        error(f"config {field_name} must be a list")
        return (1, None)
    resources = []
    for entry in value:
        resource = _parse_resource(entry, field_name)
        if resource is None:
            return (1, None)
        resources.append(resource)
    return (0, resources)


def _apply_demo_config(demo: Any, manager: BuildConfigManager) -> int:
    if not isinstance(demo, dict):
        error("config demo must be an object")
        return 1
    current: DemoConfig = {
        "source": manager.demo["source"],
        "output": manager.demo["output"],
        "resources": list(manager.demo["resources"]),
    }

    result, validated = _validate_non_empty_string(demo.get("source"), "demo.source")
    if result:
        return 1
    if validated is not None:
        current["source"] = validated

    result, validated = _validate_non_empty_string(demo.get("output"), "demo.output")
    if result:
        return 1
    if validated is not None:
        current["output"] = Path(validated)

    result, resources = _validate_resources(demo.get("resources"), "demo.resources")
    if result:
        return 1
    if resources is not None:
        current["resources"] = resources

    manager.set_demo(current)
    return 0


_STRING_FIELDS: list[tuple[str, Callable[[BuildConfigManager, str], None]]] = [
    ("compiler", BuildConfigManager.set_compiler),
    ("example_pattern", BuildConfigManager.set_example_pattern),
]

_PATH_FIELDS: list[tuple[str, Callable[[BuildConfigManager, Path], None]]] = [
    ("lib_output", BuildConfigManager.set_lib_output),
    ("lib_doc", BuildConfigManager.set_lib_doc),
    ("reference_dir", BuildConfigManager.set_reference_dir),
    ("examples_dir", BuildConfigManager.set_examples_dir),
    ("bin_dir", BuildConfigManager.set_bin_dir),
]


def _apply_build_config(data: dict, manager: BuildConfigManager) -> int:
    """Validate and apply every recognized key of a config object.

    Returns 0 on success, 1 on validation error.
    """
    for key, setter in _STRING_FIELDS:
        result, validated = _validate_non_empty_string(data.get(key), key)
        if result:
            return 1
        if validated is not None:
            setter(manager, validated)

    for key, path_setter in _PATH_FIELDS:
        result, validated = _validate_non_empty_string(data.get(key), key)
        if result:
            return 1
        if validated is not None:
            path_setter(manager, Path(validated))

    result, sources = _validate_string_list(
        data.get("lib_sources"), "lib_sources", allow_empty=False
    )
    if result:
        return 1
    if sources is not None:
        manager.set_lib_sources(sources)

    result, references = _validate_string_list(data.get("references"), "references")
    if result:
        return 1
    if references is not None:
        manager.set_references(references)

    result, links = _validate_string_list(data.get("static_links"), "static_links")
    if result:
        return 1
    if links is not None:
        manager.set_static_links(links)

    result, flag = _validate_bool(data.get("color"), "color")
    if result:
        return 1
    if flag is not None:
        manager.set_color(flag)

    result, flag = _validate_bool(data.get("strict_exit"), "strict_exit")
    if result:
        return 1
    if flag is not None:
        manager.set_strict_exit(flag)

    if "demo" in data:
        return _apply_demo_config(data["demo"], manager)
    return 0


def _apply_config_file(path: Path) -> int:
    """Load and validate a JSON config file into config_manager."""
    manager = globals()["config_manager"]
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        error(f"failed to read config file {path}: {exc}")
        return 1
    try:
        data = json.loads(contents)
    except json.JSONDecodeError as exc:
        error(f"invalid JSON in {path}: {exc}")
        return 1
    if not isinstance(data, dict):
        error(f"config file {path} must contain a JSON object")
        return 1
    return _apply_build_config(data, manager)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in TRUE_VALUES


def _apply_env_overrides() -> None:
    manager = globals()["config_manager"]
    compiler_override = os.environ.get("FXBUILD_COMPILER")
    if compiler_override:
        manager.set_compiler(compiler_override)
    reference_dir_override = os.environ.get("FXBUILD_REFERENCE_DIR")
    if reference_dir_override:
        manager.set_reference_dir(Path(reference_dir_override))
    bin_dir_override = os.environ.get("FXBUILD_BIN_DIR")
    if bin_dir_override:
        manager.set_bin_dir(Path(bin_dir_override))
    if _env_flag("FXBUILD_STRICT_EXIT"):
        manager.set_strict_exit(True)
    if "NO_COLOR" in os.environ:
        manager.set_color(False)


def _discover_config_path(start_dir: Path, names: Sequence[str]) -> Optional[Path]:
    current = Path(start_dir).absolute()
    while True:
        for name in names:
            candidate = current / name
            if candidate.exists():
                return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def _load_config(config_path: Optional[str]) -> int:
    """Locate, read and apply configuration; env overrides always apply last."""
    manager = globals()["config_manager"]
    config_env = os.environ.get("FXBUILD_CONFIG_FILE")
    explicit = config_path or config_env
    if explicit:
        candidate = Path(explicit).expanduser()
        if not candidate.is_absolute():
            candidate = Path.cwd() / candidate
        if not candidate.exists():
            error(f"config file {candidate} not found")
            return 2
    else:
        candidate = _discover_config_path(Path.cwd(), [DEFAULT_CONFIG_FILE_NAME])

    if candidate is not None:
        manager.set_config_path(candidate)
        manager.set_project_root(candidate.parent)
        result = _apply_config_file(candidate)
        if result != 0:
            return 2
    else:
        manager.set_project_root(Path.cwd())

    _apply_env_overrides()
    return 0


# Target discovery.
def get_examples(config: ResolvedBuildConfig) -> list[str]:
    """Return the base names of the example sources, e.g. ``demo.fsx``."""
    paths = list_files(config["examples_dir"], config["example_pattern"])
    return [base_name(path) for path in paths]


def example_output_path(config: ResolvedBuildConfig, example: str) -> str:
    return replace_ext(join_path(config["bin_dir"], example), DEFAULT_EXECUTABLE_SUFFIX)


def _example_references(config: ResolvedBuildConfig) -> tuple[str, ...]:
    return (config["lib_output"], *config["references"])


def _report_outcome(status: int, output: str) -> int:
    if status == 0:
        report_success(output)
        return 0
    report_failure(output)
    return 1


# Build actions.
def build_library(config: ResolvedBuildConfig) -> int:
    """Build the binding library with its documentation file."""
    spec = BuildSpec(
        sources=tuple(config["lib_sources"]),
        output_kind=OutputKind.LIBRARY,
        output_path=config["lib_output"],
        dependencies=tuple(config["references"]),
        doc_path=config["lib_doc"],
    )
    report_start(f"library: {spec.output_path}")
    status = mkdir(os.path.dirname(config["lib_output"]) or ".")
    if status == 0:
        status = compile_spec(config["compiler"], spec)
    return _report_outcome(status, config["lib_output"])


def build_example(config: ResolvedBuildConfig, example: str) -> int:
    output = example_output_path(config, example)
    spec = BuildSpec(
        sources=(join_path(config["examples_dir"], example),),
        output_kind=OutputKind.WINDOWED_EXECUTABLE,
        output_path=output,
        dependencies=_example_references(config),
        static_links=tuple(config["static_links"]),
    )
    report_start(f"example: {example}")
    status = mkdir(config["bin_dir"])
    if status == 0:
        status = compile_spec(config["compiler"], spec)
    result = _report_outcome(status, output)
    report_separator()
    return result


def build_examples(config: ResolvedBuildConfig) -> int:
    """Build every discovered example; a failure does not stop the batch."""
    examples = get_examples(config)
    if not examples:
        info(f"no examples matching {config['example_pattern']} in {config['examples_dir']}")
        return 0
    failures = [example for example in examples if build_example(config, example) != 0]
    if failures:
        error(f"{len(failures)} of {len(examples)} examples failed: {', '.join(failures)}")
        return 1
    return 0


def build_all(config: ResolvedBuildConfig) -> int:
    library_status = build_library(config)
    examples_status = build_examples(config)
    return 1 if library_status or examples_status else 0


def list_examples(config: ResolvedBuildConfig) -> int:
    for example in get_examples(config):
        print(example)
    return 0


def build_standalone(config: ResolvedBuildConfig, source: str) -> int:
    """Build one source file as a console executable next to the source."""
    spec = BuildSpec(sources=(source,), output_kind=OutputKind.CONSOLE_EXECUTABLE)
    output = resolve_output_path(spec)
    report_start(f"executable: {source}")
    status = compile_spec(config["compiler"], spec)
    return _report_outcome(status, output)


def build_demo(config: ResolvedBuildConfig) -> int:
    output = config["demo_output"]
    spec = BuildSpec(
        sources=(join_path(config["examples_dir"], config["demo_source"]),),
        output_kind=OutputKind.WINDOWED_EXECUTABLE,
        output_path=output,
        dependencies=_example_references(config),
        static_links=tuple(config["static_links"]),
        resources=tuple(config["demo_resources"]),
    )
    report_start(f"demo: {config['demo_source']}")
    status = mkdir(os.path.dirname(output) or ".")
    if status == 0:
        status = compile_spec(config["compiler"], spec)
    result = _report_outcome(status, output)
    report_separator()
    return result


# Command parsing and dispatch.
class Action(Enum):
    LIBRARY = "lib"
    LIST_EXAMPLES = "list-examples"
    BUILD_EXAMPLES = "build-examples"
    BUILD_ALL = "all"
    BUILD_EXAMPLE = "example"
    BUILD_FILE = "build"
    DEMO = "demo1"
    INVALID = "invalid"


class Command(NamedTuple):
    action: Action
    argument: Optional[str] = None
    tokens: tuple[str, ...] = ()


COMMAND_PATTERNS: list[tuple[Action, Callable[[Sequence[str]], bool]]] = [
    (Action.LIBRARY, lambda tokens: list(tokens) == ["--lib"]),
    (Action.LIST_EXAMPLES, lambda tokens: list(tokens) == ["--example"]),
    (Action.BUILD_EXAMPLES, lambda tokens: list(tokens) == ["--example", "--all"]),
    (Action.BUILD_ALL, lambda tokens: list(tokens) == ["--all"]),
    (
        Action.BUILD_EXAMPLE,
        lambda tokens: len(tokens) == 2
        and tokens[0] == "--example"
        and tokens[1] != "--all"
        and bool(tokens[1]),
    ),
    (
        Action.BUILD_FILE,
        lambda tokens: len(tokens) == 2 and tokens[0] == "--build" and bool(tokens[1]),
    ),
    (Action.DEMO, lambda tokens: list(tokens) == ["--demo1"]),
]

_ACTIONS_WITH_ARGUMENT = {Action.BUILD_EXAMPLE, Action.BUILD_FILE}


def command_args(argv: Sequence[str]) -> list[str]:
    """Return the tokens after the first ``--``, or every token when absent."""
    args = list(argv)
    if COMMAND_SEPARATOR in args:
        return args[args.index(COMMAND_SEPARATOR) + 1 :]
    return args


def parse_command(tokens: Sequence[str]) -> Command:
    tokens = tuple(tokens)
    for action, matches in COMMAND_PATTERNS:
        if matches(tokens):
            argument = tokens[1] if action in _ACTIONS_WITH_ARGUMENT else None
            return Command(action, argument, tokens)
    return Command(Action.INVALID, None, tokens)


def usage() -> None:
    print("usage: fxbuild [--config <path>] <command>")
    print("")
    print("commands:")
    print("  --lib               build the fxgtk library")
    print("  --example           list the example programs")
    print("  --example --all     build every example program")
    print("  --example <name>    build one example program")
    print("  --all               build the library and every example")
    print("  --build <file>      build a single source file as a console program")
    print("  --demo1             build the image viewer demo with its icon")
    print("")
    print("options:")
    print("  --config <path>     load build settings from a JSON file")
    print("")
    print("examples:")
    print("  fxbuild --lib")
    print("  fxbuild --example example1-image-viewer.fsx")
    print(f"  fxbuild --config {DEFAULT_CONFIG_FILE_NAME} --all")


def dispatch(command: Command, config: ResolvedBuildConfig) -> int:
    """Run the action selected by ``command`` and return its status."""
    action = command.action
    if action is Action.LIBRARY:
        return build_library(config)
    if action is Action.LIST_EXAMPLES:
        return list_examples(config)
    if action is Action.BUILD_EXAMPLES:
        return build_examples(config)
    if action is Action.BUILD_ALL:
        return build_all(config)
    if action is Action.BUILD_EXAMPLE and command.argument:
        return build_example(config, command.argument)
    if action is Action.BUILD_FILE and command.argument:
        return build_standalone(config, command.argument)
    if action is Action.DEMO:
        return build_demo(config)
    report_invalid(command.tokens)
    usage()
    return 2


def _extract_config_option(
    tokens: Sequence[str],
) -> tuple[int, list[str], Optional[str]]:
    config_path = None
    remaining = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == "--config":
            if index + 1 >= len(tokens):
                error("usage: --config <path>")
                return (2, [], None)
            config_path = tokens[index + 1]
            index += 2
            continue
        if token.startswith("--config="):
            config_path = token.split("=", 1)[1]
            if not config_path:
                error("usage: --config <path>")
                return (2, [], None)
            index += 1
            continue
        remaining.append(token)
        index += 1
    return (0, remaining, config_path)


def _exit_status(status: int) -> int:
    """Build outcomes only reach the exit code when strict exit is enabled."""
    manager = globals()["config_manager"]
    if manager.strict_exit or _env_flag("FXBUILD_STRICT_EXIT"):
        return status
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    globals()["config_manager"] = BuildConfigManager()
    tokens = command_args(sys.argv[1:] if argv is None else argv)
    result, tokens, config_path = _extract_config_option(tokens)
    if result != 0:
        return _exit_status(result)
    result = _load_config(config_path)
    if result != 0:
        return _exit_status(result)
    set_color_enabled(globals()["config_manager"].color)
    resolved_config = _resolve_config()
    return _exit_status(dispatch(parse_command(tokens), resolved_config))


if __name__ == "__main__":
    raise SystemExit(main())
