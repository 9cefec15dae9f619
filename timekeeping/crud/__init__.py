from .operator import (
    get_operator,
    get_operator_by_registration,
    create_operator,
    authenticate_operator,
    update_operator_pin,
    set_operator_active,
)

from .process import (
    create_process,
    get_process,
    get_process_by_name,
    list_active_processes,
)

from .work_order import (
    create_work_order,
    get_work_order,
    list_work_orders,
    count_work_orders_by_status,
    update_work_order,
    has_activities,
    delete_work_order,
)

from .machine import (
    create_machine,
    get_machine,
    list_machines,
    get_heads,
    update_head,
)

from .activity import (
    get_activity,
    get_open_activity,
    get_activity_holding_session,
    list_unclosed_activities,
    list_recent_activities,
    list_closed_activities_for_work_order,
    add_activity,
    get_piece,
    list_pieces,
    count_pieces,
    add_piece,
    increment_pieces_done,
    list_pieces_for_process,
    list_open_activities,
    count_activities,
    count_operators_with_activity,
    closed_elapsed_by_process,
    count_closed_activities_by_operator,
)

__all__ = [
    # Operator functions
    "get_operator",
    "get_operator_by_registration",
    "create_operator",
    "authenticate_operator",
    "update_operator_pin",
    "set_operator_active",

    # Process functions
    "create_process",
    "get_process",
    "get_process_by_name",
    "list_active_processes",

    # Work order functions
    "create_work_order",
    "get_work_order",
    "list_work_orders",
    "count_work_orders_by_status",
    "update_work_order",
    "has_activities",
    "delete_work_order",

    # Machine functions
    "create_machine",
    "get_machine",
    "list_machines",
    "get_heads",
    "update_head",

    # Activity functions
    "get_activity",
    "get_open_activity",
    "get_activity_holding_session",
    "list_unclosed_activities",
    "list_recent_activities",
    "list_closed_activities_for_work_order",
    "add_activity",
    "get_piece",
    "list_pieces",
    "count_pieces",
    "add_piece",
    "increment_pieces_done",
    "list_pieces_for_process",
    "list_open_activities",
    "count_activities",
    "count_operators_with_activity",
    "closed_elapsed_by_process",
    "count_closed_activities_by_operator",
]
