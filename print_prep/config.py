"""
Shared configuration and constants.
"""

import dataclasses

# local repo modules
import print_prep as pp
import print_prep.errors


DEFAULT_DPI = 300.0
DEFAULT_QUALITY = 95
DEFAULT_FILTER = "cubic"
DEFAULT_MODE = "keep"
DEFAULT_BACKGROUND = "white"
DEFAULT_BORDER_COLOR = "black"
DEFAULT_COLOR = "black"
DEFAULT_EXIF_SIZE = "3mm"

METERS_PER_INCH = 0.0254
POINTS_PER_INCH = 72.0
UNIT_METERS = {
	"mm": 0.001,
	"cm": 0.01,
	"in": METERS_PER_INCH,
}
AUTO_TOKEN = "."

# minimum visible length of a cut mark beyond its offset
CUT_MARK_MIN_LENGTH = "3mm"

# incremental scaling halves while the remaining ratio is above this
INCREMENTAL_RATIO = 2.0

# nominal centimeter formats and the inch formats photo paper is cut to
PRINT_FORMATS = {
	(9.0, 13.0): (3.5, 5.0),
	(10.0, 15.0): (4.0, 6.0),
	(13.0, 18.0): (5.0, 7.0),
	(15.0, 21.0): (6.0, 8.5),
	(18.0, 24.0): (7.0, 9.5),
	(20.0, 25.0): (8.0, 10.0),
	(20.0, 30.0): (8.0, 12.0),
	(30.0, 45.0): (12.0, 18.0),
}
FORMAT_SNAP_TOLERANCE = 0.02

SCALE_MODES = ("keep", "stretch", "crop", "fill")
FILTER_NAMES = ("nearest", "linear", "cubic", "gauss", "lanczos")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".webp")

PROGRESS_BAR_WIDTH = 20


#============================================
@dataclasses.dataclass(frozen=True)
class Sides:
	top: int
	right: int
	bottom: int
	left: int

	@property
	def horizontal(self) -> int:
		return self.left + self.right

	@property
	def vertical(self) -> int:
		return self.top + self.bottom


NO_SIDES = Sides(0, 0, 0, 0)


#============================================
@dataclasses.dataclass(frozen=True)
class Box:
	x: int
	y: int
	width: int
	height: int

	@property
	def right(self) -> int:
		return self.x + self.width

	@property
	def bottom(self) -> int:
		return self.y + self.height

	def inset(self, sides: Sides) -> "Box":
		"""
		Shrink the box by four independent insets.

		Args:
			sides: Inset per side in pixels.

		Returns:
			Inner Box, possibly with non-positive extent.
		"""
		return Box(
			self.x + sides.left,
			self.y + sides.top,
			self.width - sides.horizontal,
			self.height - sides.vertical,
		)

	def outset(self, sides: Sides) -> "Box":
		return Box(
			self.x - sides.left,
			self.y - sides.top,
			self.width + sides.horizontal,
			self.height + sides.vertical,
		)

	def contains(self, other: "Box") -> bool:
		return (
			self.x <= other.x
			and self.y <= other.y
			and other.right <= self.right
			and other.bottom <= self.bottom
		)


#============================================
@dataclasses.dataclass(frozen=True)
class CutMarks:
	width: int
	offset: int
	min_length: int


#============================================
@dataclasses.dataclass(frozen=True)
class CutFrame:
	width: int
	extension: int


#============================================
@dataclasses.dataclass(frozen=True)
class TestPattern:
	size_x: int
	gap_x: int
	size_y: int
	gap_y: int


#============================================
@dataclasses.dataclass(frozen=True)
class ColorTable:
	background: tuple[int, int, int, int]
	border: tuple[int, int, int, int]
	color: tuple[int, int, int, int]


#============================================
@dataclasses.dataclass(frozen=True)
class PrepConfig:
	dpi: float
	format: "Size"
	framed_size: "Size | None"
	image_size: "Size | None"
	border: Sides
	padding: Sides
	margins: Sides
	cut: CutMarks | CutFrame | None
	test_pattern: TestPattern | None
	exif_template: str | None
	exif_size: int
	mode: str
	filter_name: str
	colors: ColorTable
	allow_rotation: bool
	incremental: bool


#============================================
@dataclasses.dataclass(frozen=True)
class ScaleConfig:
	dpi: float
	size: "Size | None"
	scale: tuple[float, float] | None
	mode: str
	filter_name: str
	background: tuple[int, int, int, int]
	incremental: bool

	def __post_init__(self) -> None:
		if (self.size is None) == (self.scale is None):
			raise pp.errors.ConflictingSpec("Exactly one of `--size` and `--scale` must be given")


#============================================
@dataclasses.dataclass(frozen=True)
class Geometry:
	format_box: Box
	margins_box: Box
	cut_region_box: Box
	framed_box: Box
	image_area_box: Box
	target_width: int
	target_height: int
	rotate: bool


#============================================
@dataclasses.dataclass
class BatchResult:
	total: int
	succeeded: int
	failed: int
	failures: list[str]
