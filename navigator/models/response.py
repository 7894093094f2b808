"""Models for directions provider responses and derived route candidates."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TextValue(BaseModel):
    """A provider quantity: display text plus numeric value."""
    text: str = ""
    value: float = Field(default=0, ge=0)


class Step(BaseModel):
    """One maneuver within a leg."""

    instructions: str | None = Field(
        default=None,
        validation_alias=AliasChoices("instructions", "html_instructions"),
        description="Rich-text (HTML) maneuver instructions"
    )
    distance: TextValue = Field(default_factory=TextValue)
    duration: TextValue = Field(default_factory=TextValue)


class Leg(BaseModel):
    """Portion of a route between two waypoints."""

    distance: TextValue = Field(default_factory=TextValue)
    duration: TextValue = Field(default_factory=TextValue)
    start_address: str = ""
    end_address: str = ""
    steps: list[Step] = Field(..., min_length=1)


class RawRoute(BaseModel):
    """One route as returned by the directions provider."""

    summary: str = ""
    legs: list[Leg] = Field(..., min_length=1)
    warnings: list[str] = Field(default_factory=list)
    copyrights: str = ""

    @property
    def first_leg(self) -> Leg:
        return self.legs[0]


class DirectionsResult(BaseModel):
    """A settled directions call: status plus zero or more routes."""

    status: str
    routes: list[RawRoute] = Field(default_factory=list)
    error_message: str | None = None


class RouteCandidate(BaseModel):
    """A provider route annotated with display-oriented attributes."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "index": 0,
                "summary": "I-95 N",
                "distance_text": "215 mi",
                "duration_text": "3 hours 40 mins",
                "duration_seconds": 13200,
                "start_address": "New York, NY, USA",
                "end_address": "Boston, MA, USA",
                "major_roads": ["I-95 N", "Merritt Pkwy"],
                "via_points": ["I-95 N"],
                "warnings": [],
                "has_tolls": True,
                "has_highway": True,
                "step_count": 24,
            }
        },
    )

    index: int = Field(..., ge=0)
    summary: str
    distance_text: str
    duration_text: str
    duration_seconds: float = Field(..., ge=0)
    start_address: str
    end_address: str
    major_roads: tuple[str, ...] = Field(default=(), max_length=3)
    via_points: tuple[str, ...] = Field(default=(), max_length=2)
    warnings: tuple[str, ...] = ()
    has_tolls: bool = False
    has_highway: bool = False
    step_count: int = Field(..., ge=1)
    source_route: RawRoute = Field(..., repr=False)
