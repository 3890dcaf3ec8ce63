"""
Pydantic schemas for single-record prediction input and output
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from fare_prediction.data.schema import TravelRecord


class TravelRequest(BaseModel):
    """
    Request schema for a fare prediction.
    Same descriptive fields as a CSV row, without the fare.
    """

    travel_date: str = Field(..., description="Travel date, dd/MM/yyyy", examples=["18/12/2019"])
    departure_airport: str = Field(..., min_length=1, description="Departure airport code")
    departure_time: str = Field("", description="Departure time, h:mm AM/PM")
    arrival_airport: str = Field(..., min_length=1, description="Arrival airport code")
    arrival_time: str = Field("", description="Arrival time, h:mm AM/PM")
    duration: str = Field("", description="Elapsed time, e.g. '7h 50m'")
    direct: str = Field("", description="Stop indicator, e.g. '(1 stop)'")
    transit: str = Field("", description="Layover description")
    baggage: str = Field("", description="Baggage allowance")
    airline: str = Field(..., min_length=1, description="Carrier name")

    def to_record(self, fare: float = 0.0) -> TravelRecord:
        return TravelRecord(**self.model_dump(), fare=fare)

    model_config = {
        "json_schema_extra": {
            "example": {
                "travel_date": "18/12/2019",
                "departure_airport": "ZQN",
                "departure_time": "10:20 AM",
                "arrival_airport": "WLG",
                "arrival_time": "6:10 PM",
                "duration": "7h 50m",
                "direct": "(1 stop)",
                "transit": "4h 50m in AKL",
                "baggage": "",
                "airline": "Air New Zealand"
            }
        }
    }


class PredictionResponse(BaseModel):
    """
    Response schema for a fare prediction
    """

    predicted_fare: float = Field(
        ...,
        ge=0,
        description="Predicted fare"
    )

    actual_fare: Optional[float] = Field(
        None,
        description="Known fare of the record, when available"
    )

    model_version: str = Field(
        ...,
        description="Model version used for prediction"
    )

    prediction_timestamp: datetime = Field(
        ...,
        description="When the prediction was made"
    )

    input_features: Dict[str, float] = Field(
        ...,
        description="Active (non-zero) encoded features, for debugging"
    )
