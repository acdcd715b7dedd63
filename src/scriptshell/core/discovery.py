import importlib
import logging
import pkgutil
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)


def discover_handlers(package_name: str) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, str]]:
    """
    Scans a handler package, imports its *_handler modules, and returns three dictionaries:
    1. A map of command names to their handler function.
    2. A map of command names to their hierarchy definition.
    3. A map of command names to their help text string.
    """
    discovered_handlers: Dict[str, Any] = {}
    discovered_hierarchies: Dict[str, Any] = {}
    discovered_help_texts: Dict[str, str] = {}

    try:
        package = importlib.import_module(package_name)
    except ImportError as e:
        logger.error("Handler package '%s' could not be imported: %s", package_name, e, exc_info=True)
        return discovered_handlers, discovered_hierarchies, discovered_help_texts

    logger.debug("Scanning for handlers in: '%s'", package_name)

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if not module_info.name.endswith("_handler"):
            continue

        module_name = f"{package_name}.{module_info.name}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.error("Failed to load handler module %s: %s", module_name, e, exc_info=True)
            continue

        hierarchy = getattr(module, "COMMAND_HIERARCHY", None)

        for attr_name in dir(module):
            if attr_name.startswith("handle_"):
                handler_func = getattr(module, attr_name)
                if callable(handler_func):
                    command_name = attr_name.replace("handle_", "", 1)
                    discovered_handlers[command_name] = handler_func
                    if hierarchy is not None:
                        discovered_hierarchies[command_name] = hierarchy
                    logger.debug("Discovered command '%s'", command_name)

            elif attr_name.endswith("_help_text"):
                help_text_var = getattr(module, attr_name)
                if isinstance(help_text_var, str):
                    command_name = attr_name.replace("_help_text", "")
                    discovered_help_texts[command_name] = help_text_var
                    logger.debug("Discovered help '%s'", command_name)

    return discovered_handlers, discovered_hierarchies, discovered_help_texts
