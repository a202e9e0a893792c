from typing import Callable, Dict, Optional

import pyvisa
from loguru import logger


def list_visa_devices(
    filter_string: Optional[str] = None,
    model_filter: Optional[str] = None,
    resource_manager: Optional[pyvisa.ResourceManager] = None,
    progress_callback: Optional[Callable] = None,
) -> Dict[str, str]:
    """List available VISA devices and query their identity.

    Both SCPI (`*IDN?`) and HP 71450 style (`ID?;`) identity queries are tried, so
    the spectrum analyzer shows up next to the current source.

    Args:
        filter_string: Optional string to filter resources (e.g., "USB" or "GPIB")
        model_filter: Optional string to filter devices by identity
        resource_manager: Optional ResourceManager to use. If None, creates one
        progress_callback: Optional callback function(current, total, message)

    Returns:
        Dictionary mapping VISA addresses to identity strings
    """
    owns_rm = False
    if resource_manager is None:
        resource_manager = pyvisa.ResourceManager()
        owns_rm = True

    try:
        devices = {}
        resources = resource_manager.list_resources()
        total_resources = len(resources)

        for idx, resource in enumerate(resources):
            if progress_callback:
                progress_callback(idx, total_resources, f"Scanning {resource}")

            if filter_string and filter_string not in resource:
                continue

            inst = None
            try:
                inst = resource_manager.open_resource(resource)
                inst.timeout = 2000  # 2 second timeout
                inst.read_termination = "\n"
                inst.write_termination = "\n"

                idn = ""
                for query in ("*IDN?", "ID?;"):
                    try:
                        idn = inst.query(query).strip()
                        break
                    except pyvisa.errors.VisaIOError:
                        logger.debug(f"No response to {query} from {resource}")
                if not idn:
                    idn = "unknown device"

                if model_filter and model_filter not in idn:
                    continue
                devices[resource] = idn
            except pyvisa.errors.VisaIOError as e:
                logger.error(f"Error querying {resource}: {e}")
            finally:
                if inst is not None:
                    inst.close()

        return devices
    finally:
        if owns_rm:
            resource_manager.close()
