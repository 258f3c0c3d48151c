"""Dynamic discovery and registry of writer modules.

Searches the writers/ subpackage for modules, imports them, and validates
they have the required write() function.
"""

import importlib
import pathlib
import sys
from types import ModuleType


def writer_name_from_filename(filename: str) -> str | None:
    """Writer name for a module file, or None for non-writer files."""
    if not filename.endswith('.py') or filename.startswith('_'):
        return None
    return filename[:-3]


def is_valid_writer(module: ModuleType) -> bool:
    """Validate module has callable write function."""
    return hasattr(module, 'write') and callable(module.write)


def discover_writers() -> dict[str, ModuleType]:
    """
    Dynamically discover all writer modules.

    Imports every public module in the writers/ subpackage and keeps those
    that provide a write(calculation) -> str function.

    Returns:
        Dictionary mapping writer names (e.g., 'infix', 'postfix') to
        modules, sorted by name.

    Raises:
        RuntimeError: If no valid writers are found
    """
    writers: dict[str, ModuleType] = {}
    writers_dir = pathlib.Path(__file__).parent.resolve() / 'writers'

    for file_path in writers_dir.glob('*.py'):
        name = writer_name_from_filename(file_path.name)
        if name is None:
            continue

        try:
            module = importlib.import_module(f'{__package__}.writers.{name}')
        except ImportError as e:
            print(f"Warning: Failed to import writer {name}: {e} - skipping", file=sys.stderr)
            continue
        if is_valid_writer(module):
            writers[name] = module

    if not writers:
        raise RuntimeError("No valid writers found")

    return dict(sorted(writers.items()))


_WRITER_REGISTRY = discover_writers()


def get_available_writers() -> list[str]:
    """Return sorted list of available writer names."""
    return list(_WRITER_REGISTRY.keys())


def get_writer(name: str) -> ModuleType:
    """
    Get the writer module for a given name.

    Args:
        name: Writer name (e.g., 'infix', 'postfix')

    Returns:
        The writer module

    Raises:
        ValueError: If name is not found
    """
    if name in _WRITER_REGISTRY:
        return _WRITER_REGISTRY[name]
    available = ', '.join(get_available_writers())
    raise ValueError(f"Unknown writer: {name}. Available: {available}")
