from pest_crm.models import OrderStatus

# Поля, которые имеют смысл только в своём статусе.
# Переходы между статусами не ограничены: из любого в любой.
STATUS_FIELDS: dict[OrderStatus, tuple[str, ...]] = {
    OrderStatus.IN_PROGRESS: (),
    OrderStatus.COMPLETED: (
        "final_amount",
        "master_percent",
        "master_income",
        "cash_desk",
        "master_name",
        "master_contact",
        "completion_comment",
        "contract_photo",
        "repeat_date",
        "repeat_time",
    ),
    OrderStatus.CANCELLED: ("cancel_reason",),
}


def stale_fields(new: OrderStatus) -> list[str]:
    """Поля других статусов, которые очищаются при переходе в new."""
    return [f for status, fields in STATUS_FIELDS.items() if status != new for f in fields]


def owns_field(status: OrderStatus, field: str) -> bool:
    return field in STATUS_FIELDS.get(status, ())
