# src/constraint_validations/core/logging/
# ├─ __init__.py            # public API: setup_logging, write target helpers
# ├─ builder.py             # make_dict_config(settings) + setup_logging(settings)
# ├─ formatters.py          # JsonFormatter, ColorFormatter
# ├─ filters.py             # WriteTargetFilter, RedactFilter (+ contextvar helpers)
# └─ handlers.py            # handler config factories (console/file)


from .builder import setup_logging, make_dict_config
from .filters import set_write_target, reset_write_target, get_write_target, WriteTargetFilter

__all__ = [
    "setup_logging",
    "make_dict_config",
    "set_write_target",
    "reset_write_target",
    "get_write_target",
    "WriteTargetFilter",
]
