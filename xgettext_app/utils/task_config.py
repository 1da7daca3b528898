"""Task configuration: option defaults, JSON config file loading and validation.

Config file layout (``xgettext.json``)::

    {
      "log_level": "INFO",
      "tasks": {
        "xgettext": {
          "options": {"function_name": "tr", "namespace_separator": "::", "pot_path": "translations"},
          "po_path": "translations",
          "languages": ["en", "fr"],
          "files": {"handlebars": ["assets/*.handlebars"], "javascript": ["assets/*.js"]},
          "ignore": ["**/vendor/**"]
        }
      }
    }

Relative paths are resolved against the directory holding the config file.
"""
from __future__ import annotations

import dataclasses
import json
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from xgettext_app import hooks
from xgettext_app.errors import XgettextConfigError
from xgettext_app.utils.logging import xgettext_logger as LOG

MessageNormalizer = Callable[[str], str]


def _identity(text: str) -> str:
    return text


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


MESSAGE_NORMALIZERS: Dict[str, MessageNormalizer] = {
    "identity": _identity,
    "strip": str.strip,
    "collapse_whitespace": _collapse_whitespace,
}


def normalize_function_names(value: Union[str, List[str], None]) -> List[str]:
    """Accept one trigger name or a (possibly nested) list of them; always return a list."""
    if value is None:
        return [hooks.default_task_options["function_name"]]
    if isinstance(value, str):
        return [value]
    names: List[str] = []
    for item in value:
        names.extend(normalize_function_names(item))
    return names


def resolve_normalizer(value: Union[str, MessageNormalizer, None]) -> MessageNormalizer:
    if value is None:
        return _identity
    if callable(value):
        return value
    try:
        return MESSAGE_NORMALIZERS[value]
    except KeyError:
        raise XgettextConfigError(
            f"Unknown process_message {value!r}; expected one of {sorted(MESSAGE_NORMALIZERS)}"
        ) from None


@dataclasses.dataclass
class TaskOptions:
    function_name: List[str] = dataclasses.field(
        default_factory=lambda: [hooks.default_task_options["function_name"]]
    )
    process_message: MessageNormalizer = _identity
    namespace_separator: str = hooks.default_task_options["namespace_separator"]
    pot_path: str = hooks.default_task_options["pot_path"]

    def __post_init__(self) -> None:
        self.function_name = normalize_function_names(self.function_name)
        self.process_message = resolve_normalizer(self.process_message)
        if not self.function_name or not all(self.function_name):
            raise XgettextConfigError("function_name must name at least one trigger")
        if not self.namespace_separator:
            raise XgettextConfigError("namespace_separator must not be empty")

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], base_dir: Optional[Path] = None) -> "TaskOptions":
        merged = dict(hooks.default_task_options)
        merged.update({k: v for k, v in (raw or {}).items() if v is not None})
        unknown = set(merged) - {f.name for f in dataclasses.fields(cls)}
        if unknown:
            raise XgettextConfigError(f"Unknown task options: {', '.join(sorted(unknown))}")
        merged["pot_path"] = str(_resolve(merged["pot_path"], base_dir))
        return cls(**merged)


@dataclasses.dataclass
class FileGroup:
    format: str
    patterns: List[str]


@dataclasses.dataclass
class TaskConfig:
    name: str
    options: TaskOptions
    files: List[FileGroup] = dataclasses.field(default_factory=list)
    po_path: Optional[str] = None
    languages: List[str] = dataclasses.field(default_factory=lambda: list(hooks.default_languages))
    ignore: List[str] = dataclasses.field(default_factory=lambda: list(hooks.default_ignore_globs))
    base_dir: str = "."

    def __post_init__(self) -> None:
        if isinstance(self.languages, str):
            self.languages = [self.languages]

    @property
    def po_dir(self) -> str:
        """Folder of the PO files; follows ``pot_path`` unless ``po_path`` was given."""
        return self.po_path or self.options.pot_path

    def pot_file(self, namespace: str) -> Path:
        return Path(self.options.pot_path) / f"{namespace}.pot"

    def po_file(self, namespace: str, language: str) -> Path:
        return Path(self.po_dir) / f"{namespace}-{language}.po"


@dataclasses.dataclass
class AppConfig:
    tasks: Dict[str, TaskConfig]
    log_level: Optional[str] = None
    log_file: Optional[str] = None

    def task(self, name: Optional[str] = None) -> TaskConfig:
        if name is None:
            if len(self.tasks) != 1:
                raise XgettextConfigError(
                    f"Config defines several tasks, pick one with --task: {', '.join(sorted(self.tasks))}"
                )
            return next(iter(self.tasks.values()))
        try:
            return self.tasks[name]
        except KeyError:
            raise XgettextConfigError(f"No task named {name!r} in config") from None


def _resolve(path: Union[str, Path], base_dir: Optional[Path]) -> Path:
    p = Path(path)
    if base_dir is not None and not p.is_absolute():
        p = base_dir / p
    return p


def _parse_files(raw: Any) -> List[FileGroup]:
    # {"javascript": ["a/*.js"]} or [{"format": "javascript", "src": ["a/*.js"]}]
    groups: List[FileGroup] = []
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        try:
            items = [(g["format"], g["src"]) for g in raw]
        except (KeyError, TypeError):
            raise XgettextConfigError("Each files entry needs 'format' and 'src'") from None
    elif raw is None:
        items = []
    else:
        raise XgettextConfigError("'files' must be an object or a list")
    for fmt, patterns in items:
        if isinstance(patterns, str):
            patterns = [patterns]
        groups.append(FileGroup(format=str(fmt), patterns=list(patterns)))
    return groups


def build_task_config(name: str, raw: Dict[str, Any], base_dir: Optional[Path] = None) -> TaskConfig:
    if not isinstance(raw, dict):
        raise XgettextConfigError(f"Task {name!r} must be an object")
    base = base_dir or Path.cwd()
    options = TaskOptions.from_dict(raw.get("options") or {}, base)
    po_path = raw.get("po_path")
    ignore = list(hooks.default_ignore_globs) + list(raw.get("ignore") or [])
    return TaskConfig(
        name=name,
        options=options,
        files=_parse_files(raw.get("files")),
        po_path=str(_resolve(po_path, base)) if po_path else None,
        languages=raw.get("languages") or list(hooks.default_languages),
        ignore=ignore,
        base_dir=str(base),
    )


def load_config(path: Union[str, Path]) -> AppConfig:
    """Read and validate a JSON config file."""
    cfg_path = Path(path)
    try:
        raw = cfg_path.read_text(encoding="utf-8")
        data = json.loads(raw or "{}")
    except FileNotFoundError:
        raise XgettextConfigError(f"Config file not found: {cfg_path}") from None
    except (OSError, ValueError) as e:
        raise XgettextConfigError(f"Failed to read/parse {cfg_path}: {e}") from None

    if not isinstance(data, dict):
        raise XgettextConfigError(f"{cfg_path} must hold a JSON object")

    base_dir = cfg_path.resolve().parent
    raw_tasks = data.get("tasks")
    if not isinstance(raw_tasks, dict) or not raw_tasks:
        raise XgettextConfigError(f"{cfg_path} defines no tasks")

    tasks = {name: build_task_config(name, body, base_dir) for name, body in raw_tasks.items()}
    LOG.debug("Loaded %d task(s) from %s", len(tasks), cfg_path)

    log_file = data.get("log_file")
    return AppConfig(
        tasks=tasks,
        log_level=data.get("log_level"),
        log_file=str(_resolve(log_file, base_dir)) if log_file else None,
    )
