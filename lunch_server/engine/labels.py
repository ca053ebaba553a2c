"""
周期展示文案
"""

from datetime import date, datetime

from ..models.order import GroupLabel, ReconciledGroup


def short_date(day: date) -> str:
    return f"{day.month}/{day.day}"


def readable_date(day: date) -> str:
    return f"{day:%a} {short_date(day)}"


def cutoff_label(cutoff_at: datetime) -> str:
    return f"orders close {readable_date(cutoff_at.date())} {cutoff_at:%H:%M}"


def describe_group(item: ReconciledGroup) -> GroupLabel:
    """单日周期显示为 Mon 10/5，多日周期显示为 10/5 to 10/9"""
    group = item.group
    if len(group.dates) == 1:
        date_label = readable_date(group.first_date)
    else:
        date_label = f"{short_date(group.first_date)} to {short_date(group.last_date)}"
    return GroupLabel(
        ordinal=group.ordinal,
        date_label=date_label,
        cutoff_label=cutoff_label(item.cutoff_at),
    )
