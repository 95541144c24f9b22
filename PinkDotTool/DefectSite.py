from pydantic import BaseModel, ConfigDict


class DefectSite(BaseModel):
    """
    One pixel coordinate known to need correction.

    Coordinates refer to the uncropped sensor grid: ``x`` is the column,
    ``y`` the row.  Instances are immutable and hashable.
    """
    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    @classmethod
    def from_pair(cls, pair) -> "DefectSite":
        x, y = pair
        return cls(x=int(x), y=int(y))
