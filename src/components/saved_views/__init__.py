"""
Saved views component - named filter configurations per resource.
"""

from ._impl import (
    SavedViewConfig,
    SavedViewService,
    is_view_modified,
    load_filter_state,
    parse_filter_config,
    saved_signature,
    validate_resource_key,
    validate_view_name,
)
from .component import (
    run,
    run_check_modified,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from .models import (
    CheckModifiedInput,
    CreateViewInput,
    DeleteViewInput,
    FilterConfig,
    GetViewInput,
    ListViewsInput,
    ModifiedOutput,
    SavedView,
    SavedViewValidationError,
    UpdateViewInput,
    ViewListOutput,
    ViewOutput,
)
from .ports import ResourceCatalogPort, SavedViewRepoPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_check_modified",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_update",
    # Input models
    "CheckModifiedInput",
    "CreateViewInput",
    "DeleteViewInput",
    "GetViewInput",
    "ListViewsInput",
    "UpdateViewInput",
    # Output models
    "FilterConfig",
    "ModifiedOutput",
    "SavedView",
    "SavedViewValidationError",
    "ViewListOutput",
    "ViewOutput",
    # Ports
    "ResourceCatalogPort",
    "SavedViewRepoPort",
    "TimePort",
    # _impl re-exports
    "SavedViewConfig",
    "SavedViewService",
    "is_view_modified",
    "load_filter_state",
    "parse_filter_config",
    "saved_signature",
    "validate_resource_key",
    "validate_view_name",
]
