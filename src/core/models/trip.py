from datetime import date

from pydantic import BaseModel, Field


class Alert(BaseModel):
    alert_id: str
    user_id: str
    target_price: float = Field(..., gt=0)
    token: str | None = None
    notified: bool = False


class Trip(BaseModel):
    trip_id: str
    origin_code: str = Field(..., min_length=2, max_length=10)
    origin_name: str
    destination_code: str = Field(..., min_length=2, max_length=10)
    destination_name: str
    travel_date: date
    alerts: list[Alert] = []

    def pending_alerts(self) -> list[Alert]:
        return [alert for alert in self.alerts if not alert.notified]
