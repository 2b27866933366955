"""
Loading of the platform sync-step functions.

The functions that actually talk to Shopify and eBay live outside this
package. They are found through a module exposing sync_orders, sync_prices,
sync_inventory and sync_fulfillments, each an async callable taking
(ebay_token, shopify_token, options) and returning SyncStepResult counts.
"""

import importlib
import logging
from typing import List, Optional

from ..errors import ConfigurationError
from .orchestrator import SyncStep, build_sync_steps

logger = logging.getLogger(__name__)


STEP_FUNCTION_NAMES = ("sync_orders", "sync_prices", "sync_inventory", "sync_fulfillments")


def load_sync_steps(module_path: Optional[str]) -> List[SyncStep]:
    """
    Import the step module and build the ordered step list.

    Raises:
        ConfigurationError: If no module is configured, it cannot be
            imported, or a step function is missing
    """
    if not module_path:
        raise ConfigurationError("No sync steps module configured (SYNC_STEPS_MODULE)")

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import sync steps module '{module_path}': {e}") from e

    functions = []
    for name in STEP_FUNCTION_NAMES:
        func = getattr(module, name, None)
        if not callable(func):
            raise ConfigurationError(f"Sync steps module '{module_path}' has no function '{name}'")
        functions.append(func)

    logger.debug(f"Loaded sync steps from {module_path}")
    return build_sync_steps(*functions)
