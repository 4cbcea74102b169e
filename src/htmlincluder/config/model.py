# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : model.py
#   file_relpath : src/htmlincluder/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Configuration model and merge policy.

This module defines:
    - `Config`: an immutable, runtime snapshot used by the build layer.
    - `MutableConfig`: a mutable builder used during discovery/merge; it
      can be frozen into `Config` and thawed back for edits.

Merge order (lowest to highest precedence), see `MutableConfig.load_merged`:
    1) Built-in defaults
    2) Project config in the working directory (``pyproject.toml`` with
       ``[tool.htmlincluder]``, then ``htmlincluder.toml``)
    3) Extra config files passed explicitly via ``--config``
    4) CLI overrides (`MutableConfig.apply_cli_args`)

Path semantics:
    - Paths declared in a config file are resolved against that file's directory.
    - CLI paths and defaults are relative to the invocation CWD.

Validation:
    Problems found while loading (wrong types, unreadable files) and while
    freezing (missing ``src_dir``, non-positive ``limit_iterations``) are
    collected in ``diagnostics``; callers check `Config.has_errors`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from htmlincluder.config.io import (
    get_bool_value_or_none_checked,
    get_int_value_or_none_checked,
    get_string_list_value_checked,
    get_string_value_or_none,
    get_table_value,
    load_defaults_dict,
    load_toml_dict,
)
from htmlincluder.config.keys import Toml
from htmlincluder.config.logging import get_logger
from htmlincluder.constants import PROJECT_CONFIG_NAME, PYPROJECT_TOML_NAME
from htmlincluder.diagnostic.model import Diagnostic, DiagnosticLevel, DiagnosticLog

if TYPE_CHECKING:
    from htmlincluder.config.io import TomlTable
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.core.engine import ResolverSettings
    from htmlincluder.core.registry import FragmentNaming

# ArgsLike: generic mapping accepted by config loaders (works for CLI namespaces and API dicts).
ArgsLike = Mapping[str, Any]

logger: IncluderLogger = get_logger(__name__)

CLI_OVERRIDE_STR: str = "<CLI overrides>"


# ------------------ Immutable runtime config ------------------


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable runtime configuration for HTMLIncluder.

    Attributes:
        config_files (tuple[Path | str, ...]): Config sources that were merged.
        src_dir (Path): Directory holding the HTML sources.
        dest_dir (Path | None): Output directory (None = do not write).
        files (tuple[Path, ...]): Pages to resolve (empty = every page).
        include_patterns (tuple[str, ...]): Wildmatch patterns selecting files.
        exclude_patterns (tuple[str, ...]): Wildmatch patterns rejecting files.
        watch (bool): Rebuild on changes.
        tag_keyword (str | None): Insert keyword (``"include virtual"`` style allowed).
        file_path_attribute (str): Attribute naming fragment paths.
        json_path_attribute (str): Attribute naming data paths.
        expression_attribute (str): Attribute holding inline expressions.
        capability_name (str): Name of the capability table inside expressions.
        insert_prefix (str): File-name prefix of insert fragments.
        wrap_prefix (str): File-name prefix of wrap layouts.
        json_input (Mapping[str, Any]): Inline data tree.
        json_files (tuple[Path, ...]): JSON files merged over ``json_input``.
        plugins (tuple[str, ...]): Capability specs (``module`` or ``module:attr``).
        limit_iterations (int | None): Pass limit per page (None = unbounded).
        strict_cycles (bool): Fail a page on a cyclic include.
        print_iterations (bool): Log resolution passes at INFO.
        print_result (bool): Echo each resolved page.
        print_paths (bool): Log fragment paths at INFO.
        diagnostics (tuple[Diagnostic, ...]): Problems found while loading and validating.
    """

    config_files: tuple[Path | str, ...]
    src_dir: Path
    dest_dir: Path | None
    files: tuple[Path, ...]
    include_patterns: tuple[str, ...]
    exclude_patterns: tuple[str, ...]
    watch: bool
    tag_keyword: str | None
    file_path_attribute: str
    json_path_attribute: str
    expression_attribute: str
    capability_name: str
    insert_prefix: str
    wrap_prefix: str
    json_input: Mapping[str, Any]
    json_files: tuple[Path, ...]
    plugins: tuple[str, ...]
    limit_iterations: int | None
    strict_cycles: bool
    print_iterations: bool
    print_result: bool
    print_paths: bool
    diagnostics: tuple[Diagnostic, ...] = ()

    def has_errors(self) -> bool:
        """Return True if loading or validation recorded an error."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    def error_messages(self) -> list[str]:
        """Return the messages of all error diagnostics."""
        return [d.message for d in self.diagnostics if d.level == DiagnosticLevel.ERROR]

    def naming(self) -> FragmentNaming:
        """Return the fragment naming convention."""
        from htmlincluder.core.registry import FragmentNaming

        return FragmentNaming(insert_prefix=self.insert_prefix, wrap_prefix=self.wrap_prefix)

    def resolver_settings(self) -> ResolverSettings:
        """Return the engine settings described by this config."""
        from htmlincluder.core.engine import ResolverSettings

        return ResolverSettings(
            tag_keyword=self.tag_keyword,
            file_path_attribute=self.file_path_attribute,
            json_path_attribute=self.json_path_attribute,
            expression_attribute=self.expression_attribute,
            capability_name=self.capability_name,
            iteration_limit=self.limit_iterations,
            strict_cycles=self.strict_cycles,
            naming=self.naming(),
            root_dir=str(self.src_dir),
            log_passes=self.print_iterations,
            log_paths=self.print_paths,
        )

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this frozen config.

        Mirrors `MutableConfig.freeze`. Prefer thaw -> edit -> freeze rather
        than mutating a runtime `Config`.
        """
        return MutableConfig(
            config_files=list(self.config_files),
            src_dir=self.src_dir,
            dest_dir=self.dest_dir,
            files=list(self.files),
            include_patterns=list(self.include_patterns),
            exclude_patterns=list(self.exclude_patterns),
            watch=self.watch,
            tag_keyword=self.tag_keyword,
            file_path_attribute=self.file_path_attribute,
            json_path_attribute=self.json_path_attribute,
            expression_attribute=self.expression_attribute,
            capability_name=self.capability_name,
            insert_prefix=self.insert_prefix,
            wrap_prefix=self.wrap_prefix,
            json_input=dict(self.json_input),
            json_files=list(self.json_files),
            plugins=list(self.plugins),
            limit_iterations=self.limit_iterations,
            strict_cycles=self.strict_cycles,
            print_iterations=self.print_iterations,
            print_result=self.print_result,
            print_paths=self.print_paths,
            diagnostics=DiagnosticLog(items=list(self.diagnostics)),
        )


# -------------------------- Mutable builder --------------------------
@dataclass
class MutableConfig:
    """Mutable configuration used during discovery and merging.

    Scalar fields are tri-state (``None`` = not set by this layer) so that
    `merge_with` can tell an explicit value from an inherited one.
    """

    config_files: list[Path | str] = field(default_factory=lambda: [])

    # [build]
    src_dir: Path | None = None
    dest_dir: Path | None = None
    files: list[Path] = field(default_factory=lambda: [])
    include_patterns: list[str] = field(default_factory=lambda: [])
    exclude_patterns: list[str] = field(default_factory=lambda: [])
    watch: bool | None = None

    # [directives]
    tag_keyword: str | None = None
    file_path_attribute: str | None = None
    json_path_attribute: str | None = None
    expression_attribute: str | None = None
    capability_name: str | None = None

    # [fragments]
    insert_prefix: str | None = None
    wrap_prefix: str | None = None

    # [data]
    json_input: dict[str, Any] = field(default_factory=lambda: {})
    json_files: list[Path] = field(default_factory=lambda: [])
    plugins: list[str] = field(default_factory=lambda: [])

    # [dev]
    limit_iterations: int | None = None
    strict_cycles: bool | None = None
    print_iterations: bool | None = None
    print_result: bool | None = None
    print_paths: bool | None = None

    # Collected diagnostics while loading / merging / validating config.
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    # ---------------------------- Build/freeze ----------------------------
    def validate(self) -> None:
        """Record errors for values the build cannot run with."""
        if self.src_dir is None or not str(self.src_dir).strip():
            logger.error("Configuration error: src_dir is required")
            self.diagnostics.add_error("src_dir is required")
        if self.limit_iterations is not None and self.limit_iterations < 1:
            logger.error("Configuration error: limit_iterations=%r", self.limit_iterations)
            self.diagnostics.add_error(
                f"limit_iterations must be a positive integer, got {self.limit_iterations}"
            )

    def freeze(self) -> Config:
        """Validate this builder and freeze it into an immutable Config."""
        self.validate()
        return Config(
            config_files=tuple(self.config_files),
            src_dir=self.src_dir if self.src_dir is not None else Path("."),
            dest_dir=self.dest_dir,
            files=tuple(self.files),
            include_patterns=tuple(self.include_patterns),
            exclude_patterns=tuple(self.exclude_patterns),
            watch=bool(self.watch),
            tag_keyword=self.tag_keyword or None,
            file_path_attribute=self.file_path_attribute or "path",
            json_path_attribute=self.json_path_attribute or "jsonPath",
            expression_attribute=self.expression_attribute or "rawJson",
            capability_name=self.capability_name or "plugins",
            insert_prefix=self.insert_prefix if self.insert_prefix is not None else "-",
            wrap_prefix=self.wrap_prefix if self.wrap_prefix is not None else "_",
            json_input=dict(self.json_input),
            json_files=tuple(self.json_files),
            plugins=tuple(self.plugins),
            limit_iterations=self.limit_iterations,
            strict_cycles=bool(self.strict_cycles),
            print_iterations=bool(self.print_iterations),
            print_result=bool(self.print_result),
            print_paths=bool(self.print_paths),
            diagnostics=tuple(self.diagnostics),
        )

    # --------------------------- Loaders/parsers --------------------------
    @classmethod
    def from_defaults(cls) -> MutableConfig:
        """Return a builder populated with the runtime defaults."""
        return cls.from_toml_dict(load_defaults_dict(), config_file=None)

    @classmethod
    def from_toml_file(cls, path: Path, *, required: bool = False) -> MutableConfig | None:
        """Load configuration from a single TOML file.

        Supports both ``htmlincluder.toml`` and ``pyproject.toml`` files,
        extracting the ``[tool.htmlincluder]`` section from the latter.

        Args:
            path (Path): Path to the TOML file.
            required (bool): When True (explicit ``--config``), a missing file or
                section is recorded as an error instead of being skipped.

        Returns:
            MutableConfig | None: The builder, or None if the file holds no
                HTMLIncluder configuration and is not required.
        """
        logger.debug("Creating MutableConfig from TOML config: %s", path)
        diagnostics = DiagnosticLog()

        if not path.is_file():
            if not required:
                return None
            logger.error("Config file not found: %s", path)
            diagnostics.add_error(f"Config file not found: {path}")
            return cls(config_files=[path], diagnostics=diagnostics)

        toml_data: TomlTable = load_toml_dict(path, diagnostics)

        if path.name == PYPROJECT_TOML_NAME:
            tool_section: TomlTable = get_table_value(
                get_table_value(toml_data, Toml.SECTION_TOOL), Toml.SECTION_TOOL_NAME
            )
            if not tool_section:
                if required:
                    diagnostics.add_error(f"[tool.htmlincluder] section missing in {path}")
                    return cls(config_files=[path], diagnostics=diagnostics)
                logger.debug("[tool.htmlincluder] section missing in %s", path)
                return None
            toml_data = tool_section

        draft: MutableConfig = cls.from_toml_dict(toml_data, config_file=path)
        draft.diagnostics.extend(diagnostics)
        logger.debug("Generated MutableConfig: %s", draft)
        return draft

    @classmethod
    def discover_local_config_files(cls, start: Path) -> list[Path]:
        """Return project config files found in ``start``.

        ``pyproject.toml`` comes first and ``htmlincluder.toml`` second, so
        that a later merge gives precedence to the dedicated file.
        """
        found: list[Path] = []
        for name in (PYPROJECT_TOML_NAME, PROJECT_CONFIG_NAME):
            candidate: Path = start / name
            if candidate.is_file():
                found.append(candidate)
        logger.debug("Discovered config files in %s: %s", start, found)
        return found

    @classmethod
    def from_toml_dict(cls, data: TomlTable, config_file: Path | None = None) -> MutableConfig:
        """Create a draft config from a parsed TOML dict.

        Args:
            data (TomlTable): The parsed TOML data as a dictionary.
            config_file (Path | None): Source TOML file; relative paths in
                the data are resolved against its directory.

        Returns:
            MutableConfig: The resulting MutableConfig instance.
        """
        build_tbl: TomlTable = get_table_value(data, Toml.SECTION_BUILD)
        logger.trace("TOML [build]: %s", build_tbl)
        directives_tbl: TomlTable = get_table_value(data, Toml.SECTION_DIRECTIVES)
        logger.trace("TOML [directives]: %s", directives_tbl)
        fragments_tbl: TomlTable = get_table_value(data, Toml.SECTION_FRAGMENTS)
        logger.trace("TOML [fragments]: %s", fragments_tbl)
        data_tbl: TomlTable = get_table_value(data, Toml.SECTION_DATA)
        logger.trace("TOML [data]: %s", data_tbl)
        dev_tbl: TomlTable = get_table_value(data, Toml.SECTION_DEV)
        logger.trace("TOML [dev]: %s", dev_tbl)

        draft: MutableConfig = cls()
        diag: DiagnosticLog = draft.diagnostics
        cfg_dir: Path | None = config_file.parent.resolve() if config_file else None
        if config_file is not None:
            draft.config_files = [config_file]

        def _path(raw: str | None) -> Path | None:
            if raw is None:
                return None
            p = Path(raw)
            if cfg_dir is not None and not p.is_absolute():
                return cfg_dir / p
            return p

        # ----- [build] -----
        draft.src_dir = _path(get_string_value_or_none(build_tbl, Toml.KEY_SRC_DIR))
        draft.dest_dir = _path(get_string_value_or_none(build_tbl, Toml.KEY_DEST_DIR))
        files: list[str] | None = get_string_list_value_checked(
            build_tbl, Toml.KEY_FILES, where="[build]", diagnostics=diag
        )
        draft.files = [p for p in (_path(f) for f in files or []) if p is not None]
        draft.include_patterns = (
            get_string_list_value_checked(
                build_tbl, Toml.KEY_INCLUDE, where="[build]", diagnostics=diag
            )
            or []
        )
        draft.exclude_patterns = (
            get_string_list_value_checked(
                build_tbl, Toml.KEY_EXCLUDE, where="[build]", diagnostics=diag
            )
            or []
        )
        draft.watch = get_bool_value_or_none_checked(
            build_tbl, Toml.KEY_WATCH, where="[build]", diagnostics=diag
        )

        # ----- [directives] -----
        draft.tag_keyword = get_string_value_or_none(directives_tbl, Toml.KEY_TAG_KEYWORD)
        draft.file_path_attribute = get_string_value_or_none(
            directives_tbl, Toml.KEY_FILE_PATH_ATTRIBUTE
        )
        draft.json_path_attribute = get_string_value_or_none(
            directives_tbl, Toml.KEY_JSON_PATH_ATTRIBUTE
        )
        draft.expression_attribute = get_string_value_or_none(
            directives_tbl, Toml.KEY_EXPRESSION_ATTRIBUTE
        )
        draft.capability_name = get_string_value_or_none(
            directives_tbl, Toml.KEY_CAPABILITY_NAME
        )
        if draft.capability_name is not None and not draft.capability_name.isidentifier():
            diag.add_error(
                f"[directives].{Toml.KEY_CAPABILITY_NAME} must be an identifier, "
                f"got {draft.capability_name!r}"
            )

        # ----- [fragments] -----
        draft.insert_prefix = get_string_value_or_none(fragments_tbl, Toml.KEY_INSERT_PREFIX)
        draft.wrap_prefix = get_string_value_or_none(fragments_tbl, Toml.KEY_WRAP_PREFIX)

        # ----- [data] -----
        json_input: Any = data_tbl.get(Toml.KEY_JSON_INPUT)
        if isinstance(json_input, dict):
            draft.json_input = dict(json_input)
        elif json_input is not None:
            diag.add_error(
                f"Expected table in [data].{Toml.KEY_JSON_INPUT}, "
                f"got {type(json_input).__name__}"
            )
        json_files: list[str] | None = get_string_list_value_checked(
            data_tbl, Toml.KEY_JSON_FILES, where="[data]", diagnostics=diag
        )
        draft.json_files = [p for p in (_path(f) for f in json_files or []) if p is not None]
        draft.plugins = (
            get_string_list_value_checked(
                data_tbl, Toml.KEY_PLUGINS, where="[data]", diagnostics=diag
            )
            or []
        )

        # ----- [dev] -----
        draft.limit_iterations = get_int_value_or_none_checked(
            dev_tbl, Toml.KEY_LIMIT_ITERATIONS, where="[dev]", diagnostics=diag
        )
        draft.strict_cycles = get_bool_value_or_none_checked(
            dev_tbl, Toml.KEY_STRICT_CYCLES, where="[dev]", diagnostics=diag
        )
        draft.print_iterations = get_bool_value_or_none_checked(
            dev_tbl, Toml.KEY_PRINT_ITERATIONS, where="[dev]", diagnostics=diag
        )
        draft.print_result = get_bool_value_or_none_checked(
            dev_tbl, Toml.KEY_PRINT_RESULT, where="[dev]", diagnostics=diag
        )
        draft.print_paths = get_bool_value_or_none_checked(
            dev_tbl, Toml.KEY_PRINT_PATHS, where="[dev]", diagnostics=diag
        )

        return draft

    @classmethod
    def load_merged(
        cls,
        *,
        start: Path | None = None,
        extra_config_files: Iterable[Path] | None = None,
        no_config: bool = False,
    ) -> MutableConfig:
        """Discover and merge configuration layers into a draft `MutableConfig`.

        Args:
            start (Path | None): Directory searched for project config (CWD if None).
            extra_config_files (Iterable[Path] | None): Explicit config files merged
                **after** discovery, in the given order.
            no_config (bool): If True, skip project discovery.

        Returns:
            MutableConfig: A mutable configuration draft ready to be frozen or further edited.
        """
        draft: MutableConfig = cls.from_defaults()

        if not no_config:
            for cfg_path in cls.discover_local_config_files(start or Path.cwd()):
                mc: MutableConfig | None = cls.from_toml_file(cfg_path)
                if mc is not None:
                    draft = draft.merge_with(mc)

        for extra in extra_config_files or ():
            mc = cls.from_toml_file(Path(extra), required=True)
            if mc is not None:
                draft = draft.merge_with(mc)

        return draft

    # ------------------------------- Merging -------------------------------
    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new draft where values set in ``other`` override this draft.

        Scalars: last set value wins. Lists: a non-empty list in ``other``
        replaces this draft's list. ``json_input``: shallow merge per top-level key.
        """

        def pick(mine: Any, theirs: Any) -> Any:
            return theirs if theirs is not None else mine

        return MutableConfig(
            config_files=self.config_files + other.config_files,
            src_dir=pick(self.src_dir, other.src_dir),
            dest_dir=pick(self.dest_dir, other.dest_dir),
            files=other.files or self.files,
            include_patterns=other.include_patterns or self.include_patterns,
            exclude_patterns=other.exclude_patterns or self.exclude_patterns,
            watch=pick(self.watch, other.watch),
            tag_keyword=pick(self.tag_keyword, other.tag_keyword),
            file_path_attribute=pick(self.file_path_attribute, other.file_path_attribute),
            json_path_attribute=pick(self.json_path_attribute, other.json_path_attribute),
            expression_attribute=pick(self.expression_attribute, other.expression_attribute),
            capability_name=pick(self.capability_name, other.capability_name),
            insert_prefix=pick(self.insert_prefix, other.insert_prefix),
            wrap_prefix=pick(self.wrap_prefix, other.wrap_prefix),
            json_input={**self.json_input, **other.json_input},
            json_files=other.json_files or self.json_files,
            plugins=other.plugins or self.plugins,
            limit_iterations=pick(self.limit_iterations, other.limit_iterations),
            strict_cycles=pick(self.strict_cycles, other.strict_cycles),
            print_iterations=pick(self.print_iterations, other.print_iterations),
            print_result=pick(self.print_result, other.print_result),
            print_paths=pick(self.print_paths, other.print_paths),
            diagnostics=DiagnosticLog.from_iterable([*self.diagnostics, *other.diagnostics]),
        )

    def apply_cli_args(self, args: ArgsLike) -> MutableConfig:
        """Update fields from an arguments mapping (CLI or API).

        Only keys that are present and not None override the draft. Path
        values are taken relative to the invocation CWD.

        Args:
            args (ArgsLike): Parsed arguments mapping.

        Returns:
            MutableConfig: This builder, updated in place.
        """
        logger.debug("Applying CLI arguments to MutableConfig: %s", args)
        self.config_files.append(CLI_OVERRIDE_STR)

        def given(key: str) -> bool:
            return args.get(key) is not None

        if given("src_dir"):
            self.src_dir = Path(args["src_dir"])
        if given("dest_dir"):
            self.dest_dir = Path(args["dest_dir"])
        if given("files") and args["files"]:
            self.files = [Path(f) for f in args["files"]]
        if given("limit_iterations"):
            self.limit_iterations = int(args["limit_iterations"])
        for flag in ("watch", "strict_cycles", "print_iterations", "print_result", "print_paths"):
            # flags only ever switch features on
            if args.get(flag):
                setattr(self, flag, True)
        return self
