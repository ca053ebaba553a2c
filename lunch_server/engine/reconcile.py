"""
订单对账
把订单快照匹配到订餐周期，标记已下单周期并为未下单周期分配可用序号

每次快照或当前时间变化时都从头重新计算，结果是不可变序列，不做增量更新。

可用序号规则：
- 已下单周期不分配序号（None）
- 未下单且已过截止的周期为 -1，表示已经来不及下单
- 未下单且仍可下单的周期按顺序依次为 0, 1, 2 ...

已下单周期能否修改不看序号，看 editable（是否仍在截止之前）。
"""

import logging
from datetime import date, datetime
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.exceptions import MalformedConfigError
from ..models.order import OrderRecord, ReconciledGroup, ScheduleGroup
from ..models.schedule import LunchScheduleConfig, OrderScheduleConfig, OrderScheduleType
from .cutoff import cutoff_boundary_date, group_cutoff, is_before_cutoff, localize

logger = logging.getLogger(__name__)

EXPIRED_INDEX = -1


def _group_for_record(
    record: OrderRecord,
    schedule_type: OrderScheduleType,
    by_date: Dict[date, ScheduleGroup],
    boundary: date
) -> Optional[ScheduleGroup]:
    if schedule_type is OrderScheduleType.DAILY:
        # DAILY 下订单与当天的单日周期一一对应
        return by_date.get(record.first_date)
    if schedule_type is OrderScheduleType.CUSTOM:
        for day in record.dates:
            if day >= boundary and day in by_date:
                return by_date[day]
        return None
    raise MalformedConfigError(f"未知的排期类型: {schedule_type}")


def assign_records(
    records: Iterable[OrderRecord],
    groups: Sequence[ScheduleGroup],
    schedule_type: OrderScheduleType,
    boundary: date
) -> Dict[Tuple[int, date], Tuple[str, ...]]:
    """
    把仍有效的订单分配到周期
    
    每个订单最多属于一个周期；匹配不到任何周期的订单视为孤立数据，忽略。
    
    Returns:
        dict: (ordinal, first_date) -> 订单ID元组
    """
    by_date = {day: group for group in groups for day in group.dates}
    assigned: Dict[Tuple[int, date], List[str]] = {}
    
    for record in records:
        if record.last_date < boundary:
            continue
        group = _group_for_record(record, schedule_type, by_date, boundary)
        if group is None:
            logger.debug("订单 %s 没有匹配的订餐周期，已忽略", record.order_id)
            continue
        assigned.setdefault((group.ordinal, group.first_date), []).append(record.order_id)
    
    return {key: tuple(ids) for key, ids in assigned.items()}


def reconcile(
    snapshot: Iterable[OrderRecord],
    all_groups: Sequence[ScheduleGroup],
    config: OrderScheduleConfig,
    lunch_config: Optional[LunchScheduleConfig],
    now: datetime
) -> Tuple[ReconciledGroup, ...]:
    """
    订单快照与订餐周期对账
    
    Args:
        snapshot: 外部持久层提供的订单快照
        all_groups: 按顺序排列的订餐周期
        config: 订餐排期配置
        lunch_config: 已按用户解析的午餐排期配置
        now: 调用方注入的当前时间
        
    Returns:
        tuple: 与 all_groups 顺序一致的对账结果
    """
    now = localize(now, config)
    boundary = cutoff_boundary_date(config, now)
    assigned = assign_records(snapshot, all_groups, config.schedule_type, boundary)
    
    def step(state, group):
        results, next_index = state
        cutoff_at = group_cutoff(group, config, lunch_config)
        editable = is_before_cutoff(group, config, lunch_config, now)
        order_ids = assigned.get((group.ordinal, group.first_date), ())
        
        if order_ids:
            index = None
        elif not editable:
            index = EXPIRED_INDEX
        else:
            index, next_index = next_index, next_index + 1
        
        item = ReconciledGroup(
            group=group,
            order_ids=order_ids,
            availability_index=index,
            editable=editable,
            cutoff_at=cutoff_at,
        )
        return results + (item,), next_index
    
    results, _ = reduce(step, all_groups, ((), 0))
    return results


def orderable_groups(reconciled: Iterable[ReconciledGroup]) -> Tuple[ReconciledGroup, ...]:
    """可以新建订单的周期：未下单且未截止"""
    return tuple(item for item in reconciled if not item.claimed and item.editable)
