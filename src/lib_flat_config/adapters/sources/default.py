"""Resource-or-file source adapter.

Purpose
-------
Implement the :class:`lib_flat_config.application.ports.SourceReader` protocol:
look a name up as a package resource first and fall back to the filesystem.

Contents
--------
* :class:`DefaultSourceReader` – reader with a configurable list of packages
  searched via :mod:`importlib.resources`.
* :func:`_find_resource` – resource lookup for a single package.

System Role
-----------
Lets applications ship default ``.properties`` files inside their package and
still override them with a path on disk, without the composition root knowing
about either.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Iterable

from ...domain.errors import NotFound
from ...observability import log_debug, make_event

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable


class DefaultSourceReader:
    """Read a named configuration source from package resources or the filesystem.

    Why
    ----
    Configuration often ships as package data, yet operators need to point at
    a file on disk. Searching resources before files keeps both working with
    one name.
    """

    def __init__(self, *, packages: Iterable[str] = (), encoding: str = "utf-8") -> None:
        """Initialise the reader.

        Parameters
        ----------
        packages:
            Import names of packages whose resources are searched, in order,
            before *name* is treated as a filesystem path.
        encoding:
            Text encoding used for both resources and files.
        """

        self._packages = tuple(packages)
        self._encoding = encoding
        self.last_loaded_path: str | None = None

    def read(self, name: str) -> str:
        """Return the text behind *name*.

        Side Effects
        ------------
        Sets :attr:`last_loaded_path` and emits structured logging events.

        Raises
        ------
        NotFound
            Neither a resource nor a file called *name* exists.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> path = Path(tmp.name) / 'app.properties'
        >>> _ = path.write_text('mykey=value-01', encoding='utf-8')
        >>> reader = DefaultSourceReader()
        >>> reader.read(str(path))
        'mykey=value-01'
        >>> reader.last_loaded_path == str(path)
        True
        >>> tmp.cleanup()
        """

        self.last_loaded_path = None
        for package in self._packages:
            resource = _find_resource(package, name)
            if resource is not None:
                text = resource.read_text(encoding=self._encoding)
                self.last_loaded_path = str(resource)
                log_debug("source_resolved", **make_event("resource", self.last_loaded_path, {"package": package}))
                return text

        path = Path(name)
        if path.is_file():
            text = path.read_text(encoding=self._encoding)
            self.last_loaded_path = str(path)
            log_debug("source_resolved", **make_event("file", self.last_loaded_path))
            return text

        log_debug("source_missing", **make_event("file", name, {"packages": list(self._packages)}))
        raise NotFound(f"The file or resource '{name}' does not exist")


def _find_resource(package: str, name: str) -> Traversable | None:
    """Return the resource *name* inside *package* when it exists.

    A leading ``/`` is ignored, so ``/defaults.properties`` and
    ``defaults.properties`` address the same resource. A package that cannot
    be imported holds no resources and is skipped.
    """

    parts = PurePosixPath(name.lstrip("/")).parts
    if not parts:
        return None
    try:
        candidate = resources.files(package)
    except ModuleNotFoundError:
        log_debug("package_missing", **make_event("resource", name, {"package": package}))
        return None
    for part in parts:
        candidate = candidate / part
    return candidate if candidate.is_file() else None
