"""Discovery and loading of model files.

A model file is a Python module whose name ends with the configured suffix
(``_model.py`` by default) and which exposes ``define() -> ModelSource``.
"""

import hashlib
import importlib.util
from pathlib import Path
from types import ModuleType

import structlog

from fieldkit.errors import InvalidArgumentError, ModelSourceError
from fieldkit.models.definition import ModelSource


class ModelFileFinder:
    """Finds model files below a directory.

    Files are matched by suffix and filtered with glob-style exclude patterns
    relative to the root. Results are sorted so that load order is stable.
    """

    def __init__(
        self,
        suffix: str = "_model.py",
        exclude_patterns: list[str] | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if not suffix.endswith(".py"):
            raise InvalidArgumentError(f"suffix must end with '.py', got '{suffix}'")
        self._suffix = suffix
        self._exclude_patterns = exclude_patterns or []
        self._logger = logger or structlog.get_logger(__name__)

    def find(self, directory: Path) -> list[Path]:
        """Return the model files below ``directory``.

        Raises:
            FileNotFoundError: If directory does not exist.
            NotADirectoryError: If path is not a directory.
        """
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {directory}")

        files = sorted(
            file_path
            for file_path in directory.rglob(f"*{self._suffix}")
            if file_path.is_file() and not self._is_excluded(file_path, directory)
        )
        self._logger.info(
            "model_files_discovered",
            directory=str(directory),
            suffix=self._suffix,
            file_count=len(files),
        )
        return files

    def _is_excluded(self, file_path: Path, root: Path) -> bool:
        if not self._exclude_patterns:
            return False

        relative_path = file_path.relative_to(root)
        return any(relative_path.match(pattern) for pattern in self._exclude_patterns)


def load_model_file(file_path: Path) -> ModelSource:
    """Import ``file_path`` and return the ModelSource its ``define()`` builds."""
    module = _import_file(file_path)
    define = getattr(module, "define", None)
    if not callable(define):
        raise ModelSourceError(f"{file_path} does not define a 'define()' function")
    try:
        source = define()
    except Exception as err:
        raise ModelSourceError(f"define() in {file_path} failed: {err}") from err
    if not isinstance(source, ModelSource):
        raise ModelSourceError(f"define() in {file_path} returned {type(source).__name__}, expected ModelSource")
    return source


def load_model_sources(
    directory: Path,
    suffix: str = "_model.py",
    logger: structlog.stdlib.BoundLogger | None = None,
) -> list[ModelSource]:
    finder = ModelFileFinder(suffix=suffix, logger=logger)
    return [load_model_file(file_path) for file_path in finder.find(directory)]


def _import_file(file_path: Path) -> ModuleType:
    resolved = file_path.resolve()
    digest = hashlib.sha1(str(resolved).encode()).hexdigest()[:12]
    module_name = f"fieldkit_models_{resolved.stem}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, resolved)
    if spec is None or spec.loader is None:
        raise ModelSourceError(f"cannot load model file {file_path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as err:
        raise ModelSourceError(f"failed to import model file {file_path}: {err}") from err
    return module
