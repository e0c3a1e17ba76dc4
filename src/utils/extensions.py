import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Iterator, NoReturn

from src import cmds


def unqualify(name: str) -> str:
    """Return an unqualified name given a qualified module/package `name`."""
    return name.rsplit(".", maxsplit=1)[-1]


def walk_extensions(package: ModuleType = cmds) -> Iterator[str]:
    """Yield the names of the cog extensions found under `package`."""

    def on_error(name: str) -> NoReturn:
        raise ImportError(name=name)

    for module in pkgutil.walk_packages(package.__path__, f"{package.__name__}.", onerror=on_error):
        if unqualify(module.name).startswith("_"):
            # Ignore module/package names starting with an underscore.
            continue

        if module.ispkg:
            # Packages group extensions, only their modules are loaded.
            continue

        imported = importlib.import_module(module.name)
        if not inspect.isfunction(getattr(imported, "setup", None)):
            # If it lacks a setup function, it's not an extension.
            continue

        yield module.name
