"""
Length units, size tokens and their conversion to pixels.
"""

# Standard Library
import dataclasses
import math
import re

# PIP3 modules
import PIL.ImageColor

# local repo modules
import print_prep as pp
import print_prep.config
import print_prep.errors


Sides = pp.config.Sides
CutMarks = pp.config.CutMarks
CutFrame = pp.config.CutFrame
InvalidLength = pp.errors.InvalidLength
UnresolvedLength = pp.errors.UnresolvedLength

UNIT_METERS = pp.config.UNIT_METERS
METERS_PER_INCH = pp.config.METERS_PER_INCH
AUTO_TOKEN = pp.config.AUTO_TOKEN
PRINT_FORMATS = pp.config.PRINT_FORMATS
FORMAT_SNAP_TOLERANCE = pp.config.FORMAT_SNAP_TOLERANCE
CUT_MARK_MIN_LENGTH = pp.config.CUT_MARK_MIN_LENGTH

LENGTH_PATTERN = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)(mm|cm|in|px)?$")


#============================================
def round_half_up(value: float) -> int:
	"""
	Round to the nearest integer, halves away from zero.

	Args:
		value: Non-negative value.

	Returns:
		Rounded integer.
	"""
	return int(math.floor(value + 0.5))


#============================================
def unit_meters(unit: str, dpi: float) -> float:
	"""
	Size of one unit in meters.

	Args:
		unit: One of mm, cm, in, px.
		dpi: Resolution used for px.

	Returns:
		Meters per unit.
	"""
	if unit == "px":
		if dpi <= 0.0:
			raise InvalidLength(f"Resolution must be positive, got {dpi:g} dpi")
		return METERS_PER_INCH / dpi
	return UNIT_METERS[unit]


#============================================
@dataclasses.dataclass(frozen=True)
class Length:
	value: float
	unit: str
	# written without a decimal point, eligible for print format snapping
	nominal: bool = False

	def needs_dpi(self) -> bool:
		return self.unit != "px"

	def to(self, unit: str, dpi: float) -> "Length":
		"""
		Convert this length to another unit.

		Args:
			unit: Target unit.
			dpi: Resolution for conversions involving px.

		Returns:
			Converted Length. Pixel results are rounded.
		"""
		if unit == self.unit:
			return self
		value = self.value * unit_meters(self.unit, dpi) / unit_meters(unit, dpi)
		if unit == "px":
			value = float(round_half_up(value))
		return Length(value, unit)

	def to_px(self, dpi: float) -> int:
		return int(self.to("px", dpi).value)

	def __str__(self) -> str:
		return f"{self.value:g}{self.unit}"


#============================================
def parse_length(token: str) -> Length:
	"""
	Parse a `<number><unit>` token. A bare number is pixels.

	Args:
		token: Token such as `5mm`, `2.5cm`, `4in`, `300px` or `300`.

	Returns:
		Length.
	"""
	text = token.strip()
	match = LENGTH_PATTERN.match(text)
	if match is None:
		raise InvalidLength(f"`{token}` is not a valid length, expects `<number>(mm|cm|in|px)`")
	number, unit = match.group(1), match.group(2) or "px"
	value = float(number)
	if unit == "px":
		value = float(round_half_up(value))
	return Length(value, unit, nominal="." not in number)


#============================================
def parse_optional_length(token: str) -> Length | None:
	if token.strip() == AUTO_TOKEN:
		return None
	return parse_length(token)


#============================================
def resolve(token: str, dpi: float, reference: int | None = None) -> int:
	"""
	Resolve a single length token to pixels.

	Args:
		token: Length token or the auto placeholder.
		dpi: Resolution in dots per inch.
		reference: Pixel length to use when the token is auto.

	Returns:
		Pixel count.
	"""
	length = parse_optional_length(token)
	if length is None:
		if reference is None:
			raise UnresolvedLength(f"Nothing to derive `{token}` from")
		return reference
	return length.to_px(dpi)


#============================================
@dataclasses.dataclass(frozen=True)
class Size:
	width: Length | None
	height: Length | None

	def rotate_90(self) -> "Size":
		return Size(self.height, self.width)

	def needs_dpi(self) -> bool:
		return any(side is not None and side.needs_dpi() for side in (self.width, self.height))

	def to(self, unit: str, dpi: float) -> "Size":
		width = self.width.to(unit, dpi) if self.width is not None else None
		height = self.height.to(unit, dpi) if self.height is not None else None
		return Size(width, height)

	def __str__(self) -> str:
		width = str(self.width) if self.width is not None else AUTO_TOKEN
		height = str(self.height) if self.height is not None else AUTO_TOKEN
		return f"{width}/{height}"


#============================================
def parse_size(token: str) -> Size:
	"""
	Parse a `width/height` token where either side may be `.`.

	Args:
		token: Token such as `15cm/10cm`, `10in/.` or `./512px`.

	Returns:
		Size with at least one side set.
	"""
	parts = token.split("/")
	if len(parts) != 2:
		raise InvalidLength(f"Unexpected size format in `{token}`, expects `width/height`")
	width = parse_optional_length(parts[0])
	height = parse_optional_length(parts[1])
	if width is None and height is None:
		raise InvalidLength(f"Unable to parse size from `{token}`, at least one of width or height must be given")
	return Size(width, height)


#============================================
def resolve_size(size: Size, dpi: float, aspect: float | None = None) -> tuple[int, int]:
	"""
	Resolve a size to pixels, deriving an auto side from an aspect ratio.

	Args:
		size: Size to resolve.
		dpi: Resolution in dots per inch.
		aspect: Width divided by height of whatever the size constrains.

	Returns:
		Tuple of (width, height) in pixels.
	"""
	width = size.width.to_px(dpi) if size.width is not None else None
	height = size.height.to_px(dpi) if size.height is not None else None
	if width is not None and height is not None:
		return (width, height)
	if aspect is None or aspect <= 0.0:
		raise UnresolvedLength(f"Size `{size}` has an auto side and no aspect ratio to derive it from")
	if width is None:
		width = round_half_up(height * aspect)
	else:
		height = round_half_up(width / aspect)
	return (width, height)


#============================================
def snap_print_format(
	size: Size,
	formats: dict[tuple[float, float], tuple[float, float]] | None = None,
	tolerance: float = FORMAT_SNAP_TOLERANCE,
) -> Size:
	"""
	Replace a nominal centimeter print format by the inch format paper is cut to.

	Args:
		size: Print format. Both sides are required.
		formats: Map of nominal (short, long) cm sides to (short, long) inch sides.
		tolerance: Relative deviation allowed per side.

	Returns:
		The exact format, or the size unchanged when nothing matches.
	"""
	if size.width is None or size.height is None:
		raise UnresolvedLength(f"Unable to determine print size, missing dimension in `{size}`")
	if formats is None:
		formats = PRINT_FORMATS
	width, height = size.width, size.height
	if width.unit != "cm" or height.unit != "cm":
		return size
	if not (width.nominal and height.nominal):
		return size

	def close(value: float, nominal: float) -> bool:
		return abs(value - nominal) <= tolerance * nominal

	for (short_cm, long_cm), (short_in, long_in) in formats.items():
		if close(width.value, short_cm) and close(height.value, long_cm):
			return Size(Length(short_in, "in"), Length(long_in, "in"))
		if close(width.value, long_cm) and close(height.value, short_cm):
			return Size(Length(long_in, "in"), Length(short_in, "in"))
	return size


#============================================
def parse_sides(token: str | None, dpi: float) -> Sides:
	"""
	Parse a four-sided spec into pixels.

	Accepts `<all>`, `<top-bottom>/<right-left>` or `<top>/<right>/<bottom>/<left>`.

	Args:
		token: Sides token, or None for no insets.
		dpi: Resolution in dots per inch.

	Returns:
		Sides in pixels.
	"""
	if token is None:
		return pp.config.NO_SIDES
	parts = [parse_length(part).to_px(dpi) for part in token.split("/")]
	if len(parts) == 1:
		return Sides(parts[0], parts[0], parts[0], parts[0])
	if len(parts) == 2:
		return Sides(parts[0], parts[1], parts[0], parts[1])
	if len(parts) == 4:
		return Sides(parts[0], parts[1], parts[2], parts[3])
	raise InvalidLength(
		f"Unexpected format in `{token}`, expects `<all>`, `<top-bottom>/<right-left>` "
		"or `<top>/<right>/<bottom>/<left>`"
	)


#============================================
def parse_scale_factor(token: str) -> tuple[float, float]:
	"""
	Parse a relative scale such as `0.5`, `50%`, `20%/10%` or `./20%`.

	Args:
		token: Scale token.

	Returns:
		Tuple of (x, y) factors. A missing axis copies the other.
	"""
	parts = token.split("/")
	if len(parts) not in (1, 2):
		raise InvalidLength(f"Unexpected scale format in `{token}`, expects `width/height` or `scale`")
	factors: list[float | None] = []
	for part in parts:
		part = part.strip()
		if part == AUTO_TOKEN:
			factors.append(None)
			continue
		try:
			if part.endswith("%"):
				factor = float(part[:-1]) * 0.01
			else:
				factor = float(part)
		except ValueError:
			raise InvalidLength(f"`{part}` is not a valid scale factor") from None
		if factor <= 0.0:
			raise InvalidLength(f"Scale factor `{part}` must be positive")
		factors.append(factor)
	if len(factors) == 1:
		factors.append(factors[0])
	fx, fy = factors
	if fx is None and fy is None:
		raise InvalidLength(f"Unable to parse scale from `{token}`, at least one of width or height must be given")
	if fx is None:
		fx = fy
	if fy is None:
		fy = fx
	return (fx, fy)


#============================================
def split_pair(token: str, names: str) -> tuple[str, str]:
	parts = token.split("/")
	if len(parts) != 2:
		raise InvalidLength(f"Unexpected format in `{token}`, expects `{names}`")
	return (parts[0], parts[1])


#============================================
def parse_cut_marks(token: str, dpi: float) -> CutMarks:
	"""
	Parse cut marks given as `width/offset`.

	Args:
		token: Cut marks token.
		dpi: Resolution in dots per inch.

	Returns:
		CutMarks in pixels.
	"""
	width, offset = split_pair(token, "width/offset")
	min_length = parse_length(CUT_MARK_MIN_LENGTH).to_px(dpi)
	return CutMarks(
		width=max(1, parse_length(width).to_px(dpi)),
		offset=parse_length(offset).to_px(dpi),
		min_length=max(1, min_length),
	)


#============================================
def parse_cut_frame(token: str, dpi: float) -> CutFrame:
	"""
	Parse a cut frame given as `width/extension`.

	Args:
		token: Cut frame token.
		dpi: Resolution in dots per inch.

	Returns:
		CutFrame in pixels.
	"""
	width, extension = split_pair(token, "width/extension")
	return CutFrame(
		width=max(1, parse_length(width).to_px(dpi)),
		extension=parse_length(extension).to_px(dpi),
	)


#============================================
def parse_test_pattern(token: str, dpi: float) -> pp.config.TestPattern:
	"""
	Parse a test pattern given as `size/gap` or `sx/gx/sy/gy`.

	Args:
		token: Test pattern token.
		dpi: Resolution in dots per inch.

	Returns:
		TestPattern in pixels.
	"""
	parts = [parse_length(part).to_px(dpi) for part in token.split("/")]
	if len(parts) == 2:
		parts = parts * 2
	if len(parts) != 4:
		raise InvalidLength(f"Unexpected test pattern format in `{token}`, expects `size/gap` or `sx/gx/sy/gy`")
	if parts[0] <= 0 or parts[2] <= 0:
		raise InvalidLength(f"Test pattern squares in `{token}` must not be empty")
	return pp.config.TestPattern(size_x=parts[0], gap_x=parts[1], size_y=parts[2], gap_y=parts[3])


#============================================
def parse_color(token: str) -> tuple[int, int, int, int]:
	"""
	Parse a color name, grey value, `r/g/b`, `r/g/b/a` or hex string.

	Args:
		token: Color token.

	Returns:
		RGBA tuple.
	"""
	text = token.strip()
	parts = text.split("/")
	if all(part.strip().isdigit() for part in parts):
		values = [int(part) for part in parts]
		if any(value > 255 for value in values):
			raise pp.errors.InvalidColor(f"Color channels in `{token}` must be in range 0-255")
		if len(values) == 1:
			return (values[0], values[0], values[0], 255)
		if len(values) == 3:
			return (values[0], values[1], values[2], 255)
		if len(values) == 4:
			return (values[0], values[1], values[2], values[3])
		raise pp.errors.InvalidColor(f"Can't parse color from `{token}`, requires 1, 3 or 4 elements")
	try:
		rgb = PIL.ImageColor.getrgb(text.replace("_", ""))
	except ValueError:
		raise pp.errors.InvalidColor(f"`{token}` is not a known color") from None
	if len(rgb) == 3:
		return (rgb[0], rgb[1], rgb[2], 255)
	return tuple(rgb)
