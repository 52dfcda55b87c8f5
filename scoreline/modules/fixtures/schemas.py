from pydantic import BaseModel, Field


class FixtureResultUpdate(BaseModel):
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
