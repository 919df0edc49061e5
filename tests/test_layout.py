import pytest

import print_prep.config
import print_prep.errors
import print_prep.layout
import print_prep.units


DPI = 90.0
PORTRAIT_SOURCE = (1000, 1500)


#============================================
def sides(value: int) -> print_prep.config.Sides:
	return print_prep.config.Sides(value, value, value, value)


#============================================
def solve_default(**overrides) -> print_prep.config.Geometry:
	"""
	Solve a 10cm/15cm layout with cut marks at 90 dpi.
	"""
	options = {
		"format_size": print_prep.units.parse_size("10cm/15cm"),
		"source_size": PORTRAIT_SOURCE,
		"dpi": DPI,
		"padding": sides(18),
		"margins": sides(18),
		"cut": print_prep.units.parse_cut_marks("2px/4px", DPI),
	}
	options.update(overrides)
	return print_prep.layout.solve(**options)


#============================================
def assert_nested(geometry: print_prep.config.Geometry) -> None:
	assert geometry.format_box.contains(geometry.margins_box)
	assert geometry.margins_box.contains(geometry.cut_region_box)
	assert geometry.cut_region_box.contains(geometry.framed_box)
	assert geometry.framed_box.contains(geometry.image_area_box)


#============================================
def test_solve_reference_layout() -> None:
	"""
	A snapped 4x6 inch print with cut marks and padding.
	"""
	geometry = solve_default()
	assert not geometry.rotate
	assert geometry.format_box == print_prep.config.Box(0, 0, 360, 540)
	assert geometry.margins_box == print_prep.config.Box(18, 18, 324, 504)
	assert geometry.cut_region_box == print_prep.config.Box(33, 58, 294, 423)
	assert geometry.framed_box == print_prep.config.Box(51, 76, 258, 387)
	assert geometry.image_area_box == print_prep.config.Box(51, 76, 258, 387)
	assert (geometry.target_width, geometry.target_height) == (258, 438)
	assert_nested(geometry)


#============================================
def test_solve_with_border() -> None:
	"""
	Border and padding add up around the image area.
	"""
	border = sides(3)
	geometry = solve_default(border=border)
	image = geometry.image_area_box
	cut = geometry.cut_region_box
	assert image == print_prep.config.Box(54, 81, 252, 378)
	assert cut.width == image.width + border.horizontal + 36
	assert cut.height == image.height + border.vertical + 36
	assert geometry.framed_box == cut.inset(sides(18))
	assert_nested(geometry)


#============================================
def test_solve_centers_surplus_in_cut_band() -> None:
	"""
	Keep mode leaves the surplus between the margins and the cut region.
	"""
	geometry = solve_default()
	margins = geometry.margins_box
	cut = geometry.cut_region_box
	top_space = cut.y - margins.y
	bottom_space = margins.bottom - cut.bottom
	assert abs(top_space - bottom_space) <= 1
	assert cut.x - margins.x == margins.right - cut.right


#============================================
def test_solve_rotates_format_to_source() -> None:
	"""
	A landscape source turns a portrait format.
	"""
	geometry = solve_default(source_size=(1500, 1000))
	assert geometry.rotate
	assert geometry.format_box == print_prep.config.Box(0, 0, 540, 360)
	assert_nested(geometry)

	geometry = solve_default(source_size=(1500, 1000), allow_rotation=False)
	assert not geometry.rotate
	assert geometry.format_box == print_prep.config.Box(0, 0, 360, 540)


#============================================
def test_solve_square_never_rotates() -> None:
	"""
	Square sources and square formats keep their orientation.
	"""
	assert not solve_default(source_size=(500, 500)).rotate
	geometry = solve_default(
		format_size=print_prep.units.parse_size("400px/400px"),
		source_size=(1500, 1000),
	)
	assert not geometry.rotate


#============================================
def test_image_size_wins_over_framed_size() -> None:
	"""
	Per axis, image size beats framed size which beats the free space.
	"""
	geometry = print_prep.layout.solve(
		print_prep.units.parse_size("360px/540px"),
		PORTRAIT_SOURCE,
		DPI,
		border=sides(5),
		framed_size=print_prep.units.parse_size("200px/300px"),
		image_size=print_prep.units.parse_size("100px/."),
		mode="stretch",
	)
	assert (geometry.target_width, geometry.target_height) == (100, 290)
	assert geometry.image_area_box.width == 100
	assert geometry.image_area_box.height == 290
	assert_nested(geometry)


#============================================
def test_auto_axis_follows_source_aspect() -> None:
	"""
	An auto side of the image size follows the source aspect ratio.
	"""
	geometry = print_prep.layout.solve(
		print_prep.units.parse_size("360px/540px"),
		(1000, 500),
		DPI,
		image_size=print_prep.units.parse_size("100px/."),
	)
	assert (geometry.target_width, geometry.target_height) == (100, 50)


#============================================
def test_solve_rejects_oversized_insets() -> None:
	"""
	Insets larger than their parent raise InvalidGeometry.
	"""
	with pytest.raises(print_prep.errors.InvalidGeometry):
		solve_default(margins=sides(200))
	with pytest.raises(print_prep.errors.InvalidGeometry):
		solve_default(padding=sides(150))


#============================================
def test_solve_rejects_oversized_image() -> None:
	"""
	An explicit image size larger than the space raises InvalidGeometry.
	"""
	with pytest.raises(print_prep.errors.InvalidGeometry):
		solve_default(image_size=print_prep.units.parse_size("1000px/."))


#============================================
def test_cut_footprint() -> None:
	"""
	Cut marks reserve offset plus minimum length, frames extension plus width.
	"""
	marks = print_prep.config.CutMarks(width=2, offset=4, min_length=11)
	frame = print_prep.config.CutFrame(width=2, extension=3)
	assert print_prep.layout.cut_footprint(marks) == 15
	assert print_prep.layout.cut_footprint(frame) == 5
	assert print_prep.layout.cut_footprint(None) == 0


#============================================
def test_layout_nests_for_many_sources() -> None:
	"""
	Boxes nest for a range of source shapes and modes.
	"""
	for source_size in ((1000, 1500), (1500, 1000), (640, 480), (100, 900), (777, 777)):
		for mode in print_prep.config.SCALE_MODES:
			geometry = solve_default(source_size=source_size, border=sides(4), mode=mode)
			assert_nested(geometry)
			assert geometry.image_area_box.width > 0
			assert geometry.image_area_box.height > 0
