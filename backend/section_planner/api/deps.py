from fastapi import Depends

from section_planner.core.config import Settings, get_settings
from section_planner.services.catalog import SchedulingPolicy


def get_scheduling_policy(settings: Settings = Depends(get_settings)) -> SchedulingPolicy:
    return SchedulingPolicy.from_settings(settings)
