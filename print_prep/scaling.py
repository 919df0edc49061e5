"""
Image scaling with keep/stretch/crop/fill modes and incremental downscaling.
"""

# PIP3 modules
import PIL.Image
import PIL.ImageFilter
import PIL.ImageOps

# local repo modules
import print_prep as pp
import print_prep.config
import print_prep.errors
import print_prep.units


INCREMENTAL_RATIO = pp.config.INCREMENTAL_RATIO
SCALE_MODES = pp.config.SCALE_MODES

RESAMPLE_FILTERS = {
	"nearest": PIL.Image.Resampling.NEAREST,
	"linear": PIL.Image.Resampling.BILINEAR,
	"cubic": PIL.Image.Resampling.BICUBIC,
	"gauss": PIL.Image.Resampling.BILINEAR,
	"lanczos": PIL.Image.Resampling.LANCZOS,
}


#============================================
def fit_size(source_size: tuple[int, int], target_size: tuple[int, int]) -> tuple[int, int]:
	"""
	Largest size with the source aspect ratio that fits into the target.

	Args:
		source_size: Source (width, height).
		target_size: Target (width, height).

	Returns:
		Tuple of (width, height). At least one side equals the target.
	"""
	source_width, source_height = source_size
	target_width, target_height = target_size
	if source_width * target_height > source_height * target_width:
		height = pp.units.round_half_up(source_height * target_width / source_width)
		return (target_width, max(1, height))
	width = pp.units.round_half_up(source_width * target_height / source_height)
	return (max(1, width), target_height)


#============================================
def normalize_mode(image: PIL.Image.Image) -> PIL.Image.Image:
	if image.mode in ("RGB", "RGBA"):
		return image
	if image.mode in ("LA", "PA") or "transparency" in image.info:
		return image.convert("RGBA")
	return image.convert("RGB")


#============================================
def scale_to_half(image: PIL.Image.Image) -> PIL.Image.Image:
	"""
	Halve an image by averaging 2x2 pixel blocks.

	An odd last row or column is dropped.

	Args:
		image: Source image.

	Returns:
		Image of half the size, rounded down.
	"""
	width = image.width - image.width % 2
	height = image.height - image.height % 2
	return image.reduce(2, box=(0, 0, width, height))


#============================================
def reduce_incrementally(image: PIL.Image.Image, final_size: tuple[int, int]) -> PIL.Image.Image:
	"""
	Halve an image repeatedly until the ratio to the final size is at most 2.

	Halving stops early rather than undershoot the final size on any axis,
	so upscaling never halves.

	Args:
		image: Source image.
		final_size: Size the image is resampled to afterwards.

	Returns:
		Pre-reduced image.
	"""
	final_width, final_height = final_size
	while (
		image.width > INCREMENTAL_RATIO * final_width
		or image.height > INCREMENTAL_RATIO * final_height
	):
		if image.width // 2 < final_width or image.height // 2 < final_height:
			break
		image = scale_to_half(image)
	return image


#============================================
def check_filter(filter_name: str) -> None:
	if filter_name not in RESAMPLE_FILTERS:
		raise ValueError(f"`{filter_name}` is not a valid filter, must be one of {', '.join(RESAMPLE_FILTERS)}")


#============================================
def gauss_prefilter(image: PIL.Image.Image, ratio: float, filter_name: str) -> PIL.Image.Image:
	"""
	Blur before a gauss downscale, radius half the downscale ratio.

	Args:
		image: Source image.
		ratio: Source pixels per output pixel.
		filter_name: Resampling filter name.

	Returns:
		Blurred image, or the image itself for other filters and upscales.
	"""
	if filter_name != "gauss" or ratio <= 1.0:
		return image
	return image.filter(PIL.ImageFilter.GaussianBlur(radius=ratio / 2.0))


#============================================
def resample(image: PIL.Image.Image, size: tuple[int, int], filter_name: str) -> PIL.Image.Image:
	"""
	Resize with a named filter.

	Args:
		image: Source image.
		size: Output (width, height).
		filter_name: One of nearest, linear, cubic, gauss, lanczos.

	Returns:
		Resized image.
	"""
	check_filter(filter_name)
	if image.size == size:
		return image.copy()
	ratio = max(image.width / size[0], image.height / size[1])
	image = gauss_prefilter(image, ratio, filter_name)
	return image.resize(size, RESAMPLE_FILTERS[filter_name])


#============================================
def scale(
	image: PIL.Image.Image,
	target_size: tuple[int, int],
	mode: str = pp.config.DEFAULT_MODE,
	filter_name: str = pp.config.DEFAULT_FILTER,
	background: tuple[int, int, int, int] = (255, 255, 255, 255),
	incremental: bool = False,
) -> PIL.Image.Image:
	"""
	Scale an image into a target rectangle.

	Args:
		image: Source image.
		target_size: Target (width, height).
		mode: keep, stretch, crop or fill.
		filter_name: Resampling filter name.
		background: Color of uncovered area in fill mode.
		incremental: Pre-reduce large downscales by repeated halving.

	Returns:
		Scaled image. Only keep mode may be smaller than the target.
	"""
	target_width, target_height = target_size
	if target_width <= 0 or target_height <= 0:
		raise pp.errors.DegenerateTarget(f"Scale target of {target_width}x{target_height}px has no area")
	if mode not in SCALE_MODES:
		raise ValueError(f"`{mode}` is not a valid scale mode, must be one of {', '.join(SCALE_MODES)}")
	check_filter(filter_name)
	image = normalize_mode(image)

	# crop keeps at least the target on both axes, the others stop at the fitted size
	if mode in ("keep", "fill"):
		final_size = fit_size(image.size, target_size)
	else:
		final_size = (target_width, target_height)
	if incremental:
		image = reduce_incrementally(image, final_size)

	if mode in ("keep", "stretch"):
		return resample(image, final_size, filter_name)

	method = RESAMPLE_FILTERS[filter_name]
	if mode == "crop":
		ratio = min(image.width / target_width, image.height / target_height)
		image = gauss_prefilter(image, ratio, filter_name)
		return PIL.ImageOps.fit(image, target_size, method=method, centering=(0.5, 0.5))

	ratio = max(image.width / target_width, image.height / target_height)
	image = gauss_prefilter(image, ratio, filter_name)
	fill_color = background if image.mode == "RGBA" else background[:3]
	return PIL.ImageOps.pad(image, target_size, method=method, color=fill_color, centering=(0.5, 0.5))


#============================================
def scale_size(
	source_size: tuple[int, int],
	size: pp.units.Size | None,
	factors: tuple[float, float] | None,
	dpi: float,
) -> tuple[tuple[int, int], bool]:
	"""
	Resolve the target of the scale operation.

	Args:
		source_size: Source (width, height).
		size: Absolute size, either side may be auto.
		factors: Relative (x, y) scale factors.
		dpi: Resolution for physical units.

	Returns:
		Tuple of ((width, height), derived). `derived` is True when a side
		followed the source aspect ratio, which forces keep mode.
	"""
	if (size is None) == (factors is None):
		raise pp.errors.ConflictingSpec("Exactly one of `--size` and `--scale` must be given")
	source_width, source_height = source_size
	if factors is not None:
		width = pp.units.round_half_up(source_width * factors[0])
		height = pp.units.round_half_up(source_height * factors[1])
		return ((width, height), False)
	derived = size.width is None or size.height is None
	target = pp.units.resolve_size(size, dpi, aspect=source_width / source_height)
	return (target, derived)


#============================================
def scale_image(image: PIL.Image.Image, config: pp.config.ScaleConfig) -> PIL.Image.Image:
	"""
	Run the scale operation on one image.

	Args:
		image: Source image.
		config: Scale configuration.

	Returns:
		Scaled image.
	"""
	target, derived = scale_size(image.size, config.size, config.scale, config.dpi)
	mode = "keep" if derived else config.mode
	return scale(
		image,
		target,
		mode=mode,
		filter_name=config.filter_name,
		background=config.background,
		incremental=config.incremental,
	)
