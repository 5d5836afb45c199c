from pydantic import BaseModel, Field
from typing import List, Optional

from shipcalc.core.enums import TollRegion


class TollSegment(BaseModel):
    location: str
    cost: float
    details: Optional[str] = None


class TollEstimate(BaseModel):
    total: float = 0.0
    segments: List[TollSegment] = Field(default_factory=list)
    regions: List[TollRegion] = Field(default_factory=list)


class TollEstimateRequest(BaseModel):
    distance_miles: float = Field(gt=0)
    route_states: Optional[List[str]] = None
    route_text: Optional[str] = None
