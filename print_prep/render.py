"""
Compositing of prepared prints and PDF output.
"""

# Standard Library
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import print_prep as pp
import print_prep.config
import print_prep.exif_text
import print_prep.layout
import print_prep.scaling


Box = pp.config.Box
Sides = pp.config.Sides
Geometry = pp.config.Geometry
PrepConfig = pp.config.PrepConfig
CutMarks = pp.config.CutMarks
CutFrame = pp.config.CutFrame

POINTS_PER_INCH = pp.config.POINTS_PER_INCH


#============================================
def compute_align_offset(available: int, used: int, align: str) -> int:
	"""
	Compute an alignment offset.

	Args:
		available: Available extent.
		used: Extent of the aligned item.
		align: Alignment string.

	Returns:
		Offset in pixels.
	"""
	normalized = align.strip().upper()
	if normalized in ("LEFT", "TOP"):
		return 0
	if normalized in ("RIGHT", "BOTTOM"):
		return max(0, available - used)
	return max(0, (available - used) // 2)


#============================================
def ink(color: tuple[int, int, int, int], mode: str) -> tuple[int, ...]:
	if mode == "RGBA":
		return color
	return color[:3]


#============================================
def fill_rect(
	draw: PIL.ImageDraw.ImageDraw,
	x: int,
	y: int,
	width: int,
	height: int,
	fill: tuple[int, ...],
) -> None:
	"""
	Fill a rectangle given by origin and extent. Empty rectangles are skipped.

	Args:
		draw: Canvas drawing context.
		x: Left edge.
		y: Top edge.
		width: Width in pixels.
		height: Height in pixels.
		fill: Fill color.
	"""
	if width <= 0 or height <= 0:
		return
	draw.rectangle((x, y, x + width - 1, y + height - 1), fill=fill)


#============================================
def draw_border(draw: PIL.ImageDraw.ImageDraw, geometry: Geometry, fill: tuple[int, ...]) -> None:
	"""
	Fill the four border sides between the framed box and the image area.

	Args:
		draw: Canvas drawing context.
		geometry: Solved layout.
		fill: Border color.
	"""
	outer = geometry.framed_box
	inner = geometry.image_area_box
	fill_rect(draw, outer.x, outer.y, outer.width, inner.y - outer.y, fill)
	fill_rect(draw, outer.x, inner.bottom, outer.width, outer.bottom - inner.bottom, fill)
	fill_rect(draw, outer.x, inner.y, inner.x - outer.x, inner.height, fill)
	fill_rect(draw, inner.right, inner.y, outer.right - inner.right, inner.height, fill)


#============================================
def draw_cut_marks(
	draw: PIL.ImageDraw.ImageDraw,
	geometry: Geometry,
	marks: CutMarks,
	fill: tuple[int, ...],
) -> None:
	"""
	Draw two bars per corner along the trim lines.

	Each bar starts `offset` beyond the trim corner and runs outwards to
	the margins box.

	Args:
		draw: Canvas drawing context.
		geometry: Solved layout.
		marks: Cut marks in pixels.
		fill: Mark color.
	"""
	cut = geometry.cut_region_box
	outer = geometry.margins_box
	half = marks.width // 2
	for line_y in (cut.y, cut.bottom):
		left_end = cut.x - marks.offset
		right_start = cut.right + marks.offset
		fill_rect(draw, outer.x, line_y - half, left_end - outer.x, marks.width, fill)
		fill_rect(draw, right_start, line_y - half, outer.right - right_start, marks.width, fill)
	for line_x in (cut.x, cut.right):
		top_end = cut.y - marks.offset
		bottom_start = cut.bottom + marks.offset
		fill_rect(draw, line_x - half, outer.y, marks.width, top_end - outer.y, fill)
		fill_rect(draw, line_x - half, bottom_start, marks.width, outer.bottom - bottom_start, fill)


#============================================
def cut_frame_box(geometry: Geometry, frame: CutFrame) -> Box:
	reach = frame.extension + frame.width
	return geometry.cut_region_box.outset(Sides(reach, reach, reach, reach))


#============================================
def draw_cut_frame(
	draw: PIL.ImageDraw.ImageDraw,
	geometry: Geometry,
	frame: CutFrame,
	fill: tuple[int, ...],
) -> None:
	"""
	Draw a continuous outline `extension` outside the cut region.

	Args:
		draw: Canvas drawing context.
		geometry: Solved layout.
		frame: Cut frame in pixels.
		fill: Frame color.
	"""
	box = cut_frame_box(geometry, frame)
	draw.rectangle(
		(box.x, box.y, box.right - 1, box.bottom - 1),
		outline=fill,
		width=frame.width,
	)


#============================================
def pattern_area(
	geometry: Geometry,
	pattern: pp.config.TestPattern,
	cut: CutMarks | CutFrame | None,
) -> Box:
	"""
	Area below the cut region that is free for the test pattern.

	Args:
		geometry: Solved layout.
		pattern: Test pattern in pixels.
		cut: Cut indicator, kept clear of.

	Returns:
		Box, possibly empty.
	"""
	cut_box = geometry.cut_region_box
	clear_x = pattern.gap_x
	clear_y = pattern.gap_y
	if isinstance(cut, CutMarks):
		clear_x += cut.width
	elif isinstance(cut, CutFrame):
		clear_y += cut.extension + cut.width
	top = cut_box.bottom + clear_y
	bottom = geometry.format_box.bottom - pattern.gap_y
	return Box(cut_box.x + clear_x, top, cut_box.width - 2 * clear_x, bottom - top)


#============================================
def draw_test_pattern(
	draw: PIL.ImageDraw.ImageDraw,
	geometry: Geometry,
	pattern: pp.config.TestPattern,
	cut: CutMarks | CutFrame | None,
	fill: tuple[int, ...],
) -> int:
	"""
	Draw a checker grid of squares below the cut region.

	Args:
		draw: Canvas drawing context.
		geometry: Solved layout.
		pattern: Test pattern in pixels.
		cut: Cut indicator, kept clear of.
		fill: Square color.

	Returns:
		Number of squares drawn, 0 when the area is too small.
	"""
	area = pattern_area(geometry, pattern, cut)
	step_x = pattern.size_x + pattern.gap_x
	step_y = pattern.size_y + pattern.gap_y
	columns = (area.width + pattern.gap_x) // step_x if area.width > 0 else 0
	rows = (area.height + pattern.gap_y) // step_y if area.height > 0 else 0
	if columns <= 0 or rows <= 0:
		return 0
	grid_width = columns * step_x - pattern.gap_x
	start_x = area.x + compute_align_offset(area.width, grid_width, "CENTER")
	count = 0
	for row in range(rows):
		for col in range(columns):
			if (row + col) % 2 != 0:
				continue
			x = start_x + col * step_x
			y = area.y + row * step_y
			fill_rect(draw, x, y, pattern.size_x, pattern.size_y, fill)
			count += 1
	return count


#============================================
def draw_caption(
	draw: PIL.ImageDraw.ImageDraw,
	geometry: Geometry,
	text: str,
	font_size: int,
	fill: tuple[int, ...],
) -> None:
	"""
	Draw a text line in the padding below the framed image.

	Nothing is drawn when the padding band is shorter than the text.

	Args:
		draw: Canvas drawing context.
		geometry: Solved layout.
		text: Caption text.
		font_size: Font size in pixels.
		fill: Text color.
	"""
	if not text or font_size <= 0:
		return
	font = PIL.ImageFont.load_default(size=font_size)
	left, upper, right, lower = draw.textbbox((0, 0), text, font=font)
	band_top = geometry.framed_box.bottom
	band_height = geometry.cut_region_box.bottom - band_top
	if band_height < lower - upper:
		# the text would spill past the trim
		return
	text_y = band_top + compute_align_offset(band_height, lower - upper, "CENTER") - upper
	text_x = geometry.framed_box.x - left
	draw.text((text_x, text_y), text, font=font, fill=fill)


#============================================
def render(
	geometry: Geometry,
	resized: PIL.Image.Image,
	config: PrepConfig,
	tag_map: dict[str, str] | None = None,
) -> PIL.Image.Image:
	"""
	Composite a scaled image and its framing onto a new canvas.

	Args:
		geometry: Solved layout.
		resized: Image already scaled to the image area.
		config: Prep configuration.
		tag_map: EXIF tags for the caption.

	Returns:
		Canvas of the format size.
	"""
	mode = "RGBA" if resized.mode == "RGBA" else "RGB"
	colors = config.colors
	canvas = PIL.Image.new(
		mode,
		(geometry.format_box.width, geometry.format_box.height),
		ink(colors.background, mode),
	)
	image_box = geometry.image_area_box
	canvas.paste(resized.convert(mode), (image_box.x, image_box.y))

	draw = PIL.ImageDraw.Draw(canvas)
	draw_border(draw, geometry, ink(colors.border, mode))
	if isinstance(config.cut, CutMarks):
		draw_cut_marks(draw, geometry, config.cut, ink(colors.color, mode))
	elif isinstance(config.cut, CutFrame):
		draw_cut_frame(draw, geometry, config.cut, ink(colors.color, mode))
	if config.test_pattern is not None:
		draw_test_pattern(draw, geometry, config.test_pattern, config.cut, ink(colors.color, mode))
	if config.exif_template:
		text = pp.exif_text.expand(config.exif_template, tag_map or {})
		draw_caption(draw, geometry, text, config.exif_size, ink(colors.color, mode))
	return canvas


#============================================
def prepare_image(
	image: PIL.Image.Image,
	config: PrepConfig,
	tag_map: dict[str, str] | None = None,
) -> PIL.Image.Image:
	"""
	Run the full layout, scaling and compositing pipeline on one image.

	Args:
		image: Decoded source image.
		config: Prep configuration.
		tag_map: EXIF tags for the caption.

	Returns:
		Print-ready canvas.
	"""
	geometry = pp.layout.solve_layout(config, image.size)
	resized = pp.scaling.scale(
		image,
		(geometry.target_width, geometry.target_height),
		mode=config.mode,
		filter_name=config.filter_name,
		background=config.colors.background,
		incremental=config.incremental,
	)
	return render(geometry, resized, config, tag_map)


#============================================
def write_pdf(image: PIL.Image.Image, output_path: pathlib.Path, dpi: float) -> None:
	"""
	Write an image to a single PDF page of its physical size.

	Args:
		image: Canvas to write.
		output_path: PDF path.
		dpi: Resolution that maps pixels to page size.
	"""
	page_width = image.width / dpi * POINTS_PER_INCH
	page_height = image.height / dpi * POINTS_PER_INCH
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=(page_width, page_height))
	pdf.drawImage(
		reportlab.lib.utils.ImageReader(image.convert("RGB")),
		0,
		0,
		width=page_width,
		height=page_height,
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)
	pdf.showPage()
	pdf.save()
