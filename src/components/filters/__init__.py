"""
Filters component - nested AND/OR/NOT filter trees.
"""

from ._codec import (
    FilterTreeError,
    dumps,
    filter_from_dict,
    filter_to_dict,
    filters_from_list,
    group_from_dict,
    group_to_dict,
    loads,
    node_to_dict,
    validate_filter_tree,
)
from ._evaluate import (
    apply_filter_tree,
    apply_filters,
    default_value_getter,
    evaluate_node,
    matches_filter,
    to_date,
    to_number,
)
from ._impl import (
    add_filter_to_group,
    add_group_to_group,
    count_filter_leaves,
    create_empty_group,
    create_root_group,
    create_search_group,
    find_node,
    flatten_filter_group,
    get_filter_group_signature,
    is_advanced_filter_group,
    is_filter_group,
    merge_filter_groups,
    new_node_id,
    remove_filter_from_group,
    remove_group_from_group,
    tree_depth,
    update_filter_in_group,
    update_group_in_group,
)
from .component import (
    describe_tree,
    run,
    run_add_filter,
    run_add_group,
    run_remove_filter,
    run_remove_group,
    run_update_filter,
    run_update_group,
)
from .models import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_OPERATORS,
    FILTER_OPERATORS,
    GROUP_OPERATORS,
    VALUE_TYPES,
    AddFilterInput,
    AddGroupInput,
    Filter,
    FilterGroup,
    FilterNode,
    FilterOperator,
    FilterTreeOutput,
    FilterValidationError,
    GroupOperator,
    RemoveFilterInput,
    RemoveGroupInput,
    UpdateFilterInput,
    UpdateGroupInput,
    ValueType,
)

__all__ = [
    # Entry points
    "run",
    "run_add_filter",
    "run_add_group",
    "run_remove_filter",
    "run_remove_group",
    "run_update_filter",
    "run_update_group",
    "describe_tree",
    # Input models
    "AddFilterInput",
    "AddGroupInput",
    "RemoveFilterInput",
    "RemoveGroupInput",
    "UpdateFilterInput",
    "UpdateGroupInput",
    # Nodes and output models
    "Filter",
    "FilterGroup",
    "FilterNode",
    "FilterOperator",
    "FilterTreeOutput",
    "FilterValidationError",
    "GroupOperator",
    "ValueType",
    # Constants
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_OPERATORS",
    "FILTER_OPERATORS",
    "GROUP_OPERATORS",
    "VALUE_TYPES",
    # Tree engine
    "add_filter_to_group",
    "add_group_to_group",
    "count_filter_leaves",
    "create_empty_group",
    "create_root_group",
    "create_search_group",
    "find_node",
    "flatten_filter_group",
    "get_filter_group_signature",
    "is_advanced_filter_group",
    "is_filter_group",
    "merge_filter_groups",
    "new_node_id",
    "remove_filter_from_group",
    "remove_group_from_group",
    "tree_depth",
    "update_filter_in_group",
    "update_group_in_group",
    # Evaluation
    "apply_filter_tree",
    "apply_filters",
    "default_value_getter",
    "evaluate_node",
    "matches_filter",
    "to_date",
    "to_number",
    # Codec
    "FilterTreeError",
    "dumps",
    "filter_from_dict",
    "filter_to_dict",
    "filters_from_list",
    "group_from_dict",
    "group_to_dict",
    "loads",
    "node_to_dict",
    "validate_filter_tree",
]
