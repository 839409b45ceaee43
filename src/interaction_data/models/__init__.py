from interaction_data.models.kpi import KPIRecord, SessionContextInfo, ScreenSize

__all__ = ["KPIRecord", "SessionContextInfo", "ScreenSize"]
