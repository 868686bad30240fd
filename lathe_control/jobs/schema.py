"""Job file schema and loading.

A job file is YAML describing one piece: the digitized outline, the cutter,
optional feed overrides and an ordered list of operations.  Everything is
validated here, before any geometry is built, so a bad file fails with the
offending key and range.

Units:
    - Lengths: inches
    - Angles: degrees
    - Feeds: inches/minute and rotations/minute

Usage:
    from lathe_control.jobs import schema

    job = schema.load_job("vase.yaml")
    outline = job.outline.build(defaults)
    cutter = job.cutter.build()
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lathe_control.configs.loader import OutlineDefaults
from lathe_control.curves.curve import FitStyle
from lathe_control.cutters.cutter import Cutter
from lathe_control.cutters.location import Frame, Location
from lathe_control.cutters.profiles import CustomStyle, get_profile
from lathe_control.strategies.common import CoarseFine, Rotation, Strategy
from lathe_control.strategies.contour import ContourCut, Direction
from lathe_control.strategies.patterns import CustomPattern, Pattern, Rosette
from lathe_control.strategies.rosette import Motion, RosetteCut
from lathe_control.strategies.thread import ThreadCut
from lathe_control.toolpath.outline import MIN_RESOLUTION, Outline
from lathe_control.utils import fs

JOB_SCHEMA = "job.v1"


# ============================================================================
# OUTLINE AND CUTTER
# ============================================================================

class OutlineSpec(BaseModel):
    """Digitized surface and the retract path (inches)."""
    points: List[Tuple[float, float]] = Field(..., description="Surface dots (x, z)")
    style: FitStyle = Field(FitStyle.BEZIER, description="Curve fit style")
    location: Location = Field(Location.FRONT_INSIDE, description="Surface the dots are on")
    thickness: Optional[float] = Field(None, ge=0.0, le=10.0, description="Wall thickness")
    resolution: Optional[float] = Field(
        None, ge=MIN_RESOLUTION, le=1.0, description="Sample spacing",
    )
    safe_points: List[Tuple[float, float]] = Field(
        default_factory=list, description="Retract path (x, z)",
    )

    def build(self, defaults: OutlineDefaults) -> Outline:
        """Outline using *defaults* for unset thickness and resolution."""
        return Outline(
            points=self.points,
            style=self.style,
            location=self.location,
            thickness=defaults.thickness if self.thickness is None else self.thickness,
            resolution=defaults.resolution if self.resolution is None else self.resolution,
            safe_points=self.safe_points,
        )


class CutterSpec(BaseModel):
    """Cutter in its frame."""
    name: str = Field("NEW", description="Label (upper-case alphanumerics)")
    frame: Frame = Field(Frame.HCF, description="Cutting frame")
    location: Location = Field(Location.FRONT_INSIDE, description="Where it cuts")
    radius: float = Field(0.5, gt=0.0, le=10.0, description="Disc radius (inches)")
    tip_width: float = Field(0.1875, gt=0.0, le=10.0, description="Rod diameter (inches)")
    ucf_angle: float = Field(0.0, ge=-90.0, le=90.0, description="UCF tilt (degrees)")
    ucf_rotate: float = Field(0.0, ge=-90.0, le=90.0, description="UCF rotation (degrees)")
    profile: str = Field("ideal", description="Tip profile: ideal, point160 or round")

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, v: str) -> str:
        get_profile(v)
        return v

    def build(self) -> Cutter:
        return Cutter(
            name=self.name,
            frame=self.frame,
            location=self.location,
            radius=self.radius,
            tip_width=self.tip_width,
            ucf_angle=self.ucf_angle,
            ucf_rotate=self.ucf_rotate,
            profile=get_profile(self.profile),
        )


class FeedOverrides(BaseModel):
    """Cruise feeds for this job; clamped to the machine limits."""
    velocity: Optional[float] = Field(None, gt=0.0, description="Inches/minute")
    rpm: Optional[float] = Field(None, gt=0.0, description="Rotations/minute")


class CoarseFineSpec(BaseModel):
    """Pass schedule for rosette cuts."""
    pass_depth: float = Field(0.02, ge=0.0, le=0.1)
    pass_step: int = Field(5, ge=1, le=100)
    last_depth: float = Field(0.005, ge=0.0, le=0.1)
    last_step: int = Field(1, ge=1, le=100)
    rotation: Rotation = Rotation.PLUS_ALWAYS

    def build(self) -> CoarseFine:
        return CoarseFine(
            pass_depth=self.pass_depth,
            pass_step=self.pass_step,
            last_depth=self.last_depth,
            last_step=self.last_step,
            rotation=self.rotation,
        )


# ============================================================================
# OPERATIONS
# ============================================================================

class CustomPatternSpec(BaseModel):
    """Drawn pattern: x is the fraction of one repeat, y the deflection (0 to 1)."""
    name: str = "custom"
    style: CustomStyle = CustomStyle.STRAIGHT
    points: List[Tuple[float, float]] = Field(..., min_length=2)

    def build(self) -> CustomPattern:
        return CustomPattern(self.name, self.style, self.points)


class RosetteSpec(BaseModel):
    pattern: Pattern = Pattern.NONE
    custom: Optional[CustomPatternSpec] = None
    repeat: int = Field(1, ge=1, le=100)
    p_to_p: float = Field(0.0, ge=0.0, le=1.0, description="Peak-to-peak (inches)")
    phase: float = Field(0.0, ge=-360.0, le=360.0, description="Degrees of one repeat")
    invert: bool = False

    @model_validator(mode="after")
    def validate_one_pattern(self) -> "RosetteSpec":
        if self.custom is not None and self.pattern is not Pattern.NONE:
            raise ValueError("set either pattern or custom, not both")
        return self

    def build(self) -> Rosette:
        return Rosette(
            pattern=self.custom.build() if self.custom is not None else self.pattern,
            repeat=self.repeat,
            p_to_p=self.p_to_p,
            phase=self.phase,
            invert=self.invert,
        )


class RosetteOp(BaseModel):
    """Rosette cut at one point of the cutter path."""
    type: Literal["rosette"] = "rosette"
    x: float
    z: float
    cut_depth: float = Field(..., ge=0.0, le=1.0)
    rosette: RosetteSpec = Field(default_factory=RosetteSpec)
    motion: Motion = Motion.PERP
    rosette2: Optional[RosetteSpec] = None
    snap: bool = True

    @model_validator(mode="after")
    def validate_second_rosette(self) -> "RosetteOp":
        if self.motion is Motion.BOTH and self.rosette2 is None:
            raise ValueError("motion 'both' needs rosette2")
        return self

    def to_strategy(self) -> Strategy:
        return RosetteCut(
            x=self.x,
            z=self.z,
            cut_depth=self.cut_depth,
            rosette=self.rosette.build(),
            motion=self.motion,
            rosette2=self.rosette2.build() if self.rosette2 is not None else None,
            snap=self.snap,
        )


class ContourOp(BaseModel):
    """Spiral cut along the whole outline."""
    type: Literal["contour"] = "contour"
    step: float = Field(0.05, ge=0.001, le=0.1, description="Advance per revolution")
    backoff: float = Field(0.0, ge=0.0, le=1.0)
    direction: Direction = Direction.LAST_TO_FIRST
    count1: int = Field(1, ge=0, le=10)
    depth1: float = Field(0.02, ge=0.0, le=0.1)
    count2: int = Field(1, ge=0, le=10)
    depth2: float = Field(0.005, ge=0.0, le=0.1)

    def to_strategy(self) -> Strategy:
        return ContourCut(
            step=self.step,
            backoff=self.backoff,
            direction=self.direction,
            count1=self.count1,
            depth1=self.depth1,
            count2=self.count2,
            depth2=self.depth2,
        )


class ThreadOp(BaseModel):
    """Helical thread along a vertical two-point outline."""
    type: Literal["thread"] = "thread"
    tpi: int = Field(20, ge=1, le=200, description="Threads per inch")
    starts: int = Field(1, ge=1, le=12)
    percent: int = Field(60, ge=0, le=100, description="Thread engagement")

    def to_strategy(self) -> Strategy:
        return ThreadCut(tpi=self.tpi, starts=self.starts, percent=self.percent)


Operation = Annotated[
    Union[RosetteOp, ContourOp, ThreadOp], Field(discriminator="type")
]


# ============================================================================
# JOB SCHEMA V1
# ============================================================================

class JobV1(BaseModel):
    """Complete job (job.v1 schema)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(JOB_SCHEMA, alias="schema", description="Schema version")
    name: str = Field("job", min_length=1, description="Job name, used for logs and output")
    outline: OutlineSpec
    cutter: CutterSpec = Field(default_factory=CutterSpec)
    feed: FeedOverrides = Field(default_factory=FeedOverrides)
    coarse_fine: CoarseFineSpec = Field(default_factory=CoarseFineSpec)
    operations: List[Operation] = Field(..., min_length=1)
    output: Optional[str] = Field(None, description="Program path; defaults to <name>.ngc")

    @field_validator("schema_version")
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != JOB_SCHEMA:
            raise ValueError(f"Expected schema '{JOB_SCHEMA}', got '{v}'")
        return v


def load_job(path: Union[str, Path]) -> JobV1:
    """Load and validate a job file.

    Parameters
    ----------
    path : Union[str, Path]
        Path to a job.v1 YAML file.

    Returns
    -------
    JobV1
        Validated job.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (message names the file)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Job file not found: {path}")

    data = fs.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"Job file {path} must contain a mapping")
    try:
        return JobV1(**data)
    except Exception as e:
        raise ValueError(f"Job validation failed at {path}: {e}") from e
