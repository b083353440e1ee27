"""Zero values for declared return types of abstract, unmarked methods."""

from typing import Any, Dict

_DEFAULTS: Dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
}


def default_value(return_type: Any) -> Any:
    """Return the zero value for a numeric or boolean type, None for anything else."""
    if isinstance(return_type, type):
        return _DEFAULTS.get(return_type)
    return None
