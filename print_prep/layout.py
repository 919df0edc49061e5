"""
Nested box model for print layouts.

Boxes from outside to inside:

	format_box      the whole output canvas
	margins_box     format minus margins, cut indicators stay inside it
	cut_region_box  the trim rectangle
	framed_box      cut region minus padding, the outer edge of the border
	image_area_box  framed box minus border
"""

# local repo modules
import print_prep as pp
import print_prep.config
import print_prep.errors
import print_prep.scaling
import print_prep.units


Box = pp.config.Box
Sides = pp.config.Sides
Geometry = pp.config.Geometry
PrepConfig = pp.config.PrepConfig
InvalidGeometry = pp.errors.InvalidGeometry
Size = pp.units.Size


#============================================
def is_portrait(width: int, height: int) -> bool:
	return height > width


#============================================
def should_rotate(source_size: tuple[int, int], format_size: tuple[int, int], allow_rotation: bool) -> bool:
	"""
	Decide whether the format is turned to match the source orientation.

	Square sources and square formats never rotate.

	Args:
		source_size: Source (width, height).
		format_size: Format (width, height) in pixels.
		allow_rotation: False disables rotation.

	Returns:
		True when width and height of the format are swapped.
	"""
	if not allow_rotation:
		return False
	if source_size[0] == source_size[1] or format_size[0] == format_size[1]:
		return False
	return is_portrait(*source_size) != is_portrait(*format_size)


#============================================
def cut_footprint(cut: pp.config.CutMarks | pp.config.CutFrame | None) -> int:
	"""
	Space the cut indicator needs between the margins box and the cut region.

	Args:
		cut: Cut marks, cut frame or None.

	Returns:
		Pixels per side.
	"""
	if isinstance(cut, pp.config.CutMarks):
		return cut.offset + cut.min_length
	if isinstance(cut, pp.config.CutFrame):
		return cut.extension + cut.width
	return 0


#============================================
def checked_inset(parent: Box, sides: Sides, name: str) -> Box:
	inner = parent.inset(sides)
	if inner.width <= 0 or inner.height <= 0:
		raise InvalidGeometry(
			f"{name} of {sides.top}/{sides.right}/{sides.bottom}/{sides.left}px "
			f"leave no space in a {parent.width}x{parent.height}px area"
		)
	return inner


#============================================
def resolve_target(
	max_image: Box,
	source_size: tuple[int, int],
	image_size: Size | None,
	framed_size: Size | None,
	border: Sides,
	dpi: float,
) -> tuple[int, int]:
	"""
	Resolve the rectangle the image is scaled into.

	Per axis, an explicit image size wins over an explicit framed size,
	which wins over the space left by the format. If only one axis is
	explicit, the other follows the source aspect ratio, capped by the
	space available.

	Args:
		max_image: Largest image area the format allows.
		source_size: Source (width, height).
		image_size: Optional image size, excluding border.
		framed_size: Optional framed size, including border.
		border: Border insets in pixels.
		dpi: Resolution in dots per inch.

	Returns:
		Tuple of (width, height) in pixels.
	"""
	width = None
	height = None
	for size, extra_width, extra_height in (
		(image_size, 0, 0),
		(framed_size, border.horizontal, border.vertical),
	):
		if size is None:
			continue
		if width is None and size.width is not None:
			width = size.width.to_px(dpi) - extra_width
		if height is None and size.height is not None:
			height = size.height.to_px(dpi) - extra_height

	if width is not None and width > max_image.width:
		raise InvalidGeometry(f"Image width of {width}px exceeds the {max_image.width}px available")
	if height is not None and height > max_image.height:
		raise InvalidGeometry(f"Image height of {height}px exceeds the {max_image.height}px available")

	aspect = source_size[0] / source_size[1]
	if width is None and height is None:
		width, height = max_image.width, max_image.height
	elif width is None:
		width = min(max_image.width, pp.units.round_half_up(height * aspect))
	elif height is None:
		height = min(max_image.height, pp.units.round_half_up(width / aspect))

	if width <= 0 or height <= 0:
		raise InvalidGeometry(f"Image area of {width}x{height}px is empty")
	return (width, height)


#============================================
def solve(
	format_size: Size,
	source_size: tuple[int, int],
	dpi: float,
	border: Sides = pp.config.NO_SIDES,
	padding: Sides = pp.config.NO_SIDES,
	margins: Sides = pp.config.NO_SIDES,
	cut: pp.config.CutMarks | pp.config.CutFrame | None = None,
	framed_size: Size | None = None,
	image_size: Size | None = None,
	mode: str = pp.config.DEFAULT_MODE,
	allow_rotation: bool = True,
) -> Geometry:
	"""
	Derive every rectangle of a print layout.

	The largest possible stack is derived from the format inwards. The image
	is then fitted into the resolved target, border and padding are added back
	outwards, and the result is centered in that largest stack. Surplus space
	ends up between the margins box and the cut region.

	Args:
		format_size: Print format, both sides required.
		source_size: Source image (width, height).
		dpi: Resolution in dots per inch.
		border: Border per side in pixels.
		padding: Padding per side in pixels.
		margins: Margins per side in pixels.
		cut: Cut marks, cut frame or None.
		framed_size: Optional maximum of border plus image.
		image_size: Optional maximum of the image alone.
		mode: Scaling mode.
		allow_rotation: False keeps the format orientation.

	Returns:
		Geometry.
	"""
	if source_size[0] <= 0 or source_size[1] <= 0:
		raise InvalidGeometry(f"Source image of {source_size[0]}x{source_size[1]}px is empty")
	exact_format = pp.units.snap_print_format(format_size)
	format_width, format_height = pp.units.resolve_size(exact_format, dpi)
	if format_width <= 0 or format_height <= 0:
		raise InvalidGeometry(f"Format {format_size} resolves to an empty canvas")

	rotate = should_rotate(source_size, (format_width, format_height), allow_rotation)
	if rotate:
		format_width, format_height = format_height, format_width

	format_box = Box(0, 0, format_width, format_height)
	margins_box = checked_inset(format_box, margins, "Margins")
	footprint = cut_footprint(cut)
	max_cut = checked_inset(margins_box, Sides(footprint, footprint, footprint, footprint), "Cut indicators")
	max_framed = checked_inset(max_cut, padding, "Padding")
	max_image = checked_inset(max_framed, border, "Border")

	target_width, target_height = resolve_target(
		max_image, source_size, image_size, framed_size, border, dpi,
	)
	if mode == "keep":
		image_width, image_height = pp.scaling.fit_size(source_size, (target_width, target_height))
	else:
		image_width, image_height = target_width, target_height

	cut_width = image_width + border.horizontal + padding.horizontal
	cut_height = image_height + border.vertical + padding.vertical
	cut_region_box = Box(
		max_cut.x + (max_cut.width - cut_width) // 2,
		max_cut.y + (max_cut.height - cut_height) // 2,
		cut_width,
		cut_height,
	)
	framed_box = cut_region_box.inset(padding)
	image_area_box = framed_box.inset(border)

	return Geometry(
		format_box=format_box,
		margins_box=margins_box,
		cut_region_box=cut_region_box,
		framed_box=framed_box,
		image_area_box=image_area_box,
		target_width=target_width,
		target_height=target_height,
		rotate=rotate,
	)


#============================================
def solve_layout(config: PrepConfig, source_size: tuple[int, int]) -> Geometry:
	"""
	Solve the layout for one source image under a prep configuration.

	Args:
		config: Prep configuration.
		source_size: Source image (width, height).

	Returns:
		Geometry.
	"""
	return solve(
		config.format,
		source_size,
		config.dpi,
		border=config.border,
		padding=config.padding,
		margins=config.margins,
		cut=config.cut,
		framed_size=config.framed_size,
		image_size=config.image_size,
		mode=config.mode,
		allow_rotation=config.allow_rotation,
	)
