"""
CLI entry points for print preparation and bulk scaling.
"""

# Standard Library
import argparse
import functools
import math
import pathlib
import sys
import time

# local repo modules
import print_prep as pp
import print_prep.batch
import print_prep.config
import print_prep.errors
import print_prep.render
import print_prep.scaling
import print_prep.units


PrepConfig = pp.config.PrepConfig
ScaleConfig = pp.config.ScaleConfig
ColorTable = pp.config.ColorTable

DEFAULT_DPI = pp.config.DEFAULT_DPI
DEFAULT_QUALITY = pp.config.DEFAULT_QUALITY
DEFAULT_FILTER = pp.config.DEFAULT_FILTER
DEFAULT_MODE = pp.config.DEFAULT_MODE
DEFAULT_BACKGROUND = pp.config.DEFAULT_BACKGROUND
DEFAULT_BORDER_COLOR = pp.config.DEFAULT_BORDER_COLOR
DEFAULT_COLOR = pp.config.DEFAULT_COLOR
DEFAULT_EXIF_SIZE = pp.config.DEFAULT_EXIF_SIZE


#============================================
def build_prep_config(args: argparse.Namespace) -> PrepConfig:
	"""
	Build prep config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		PrepConfig.
	"""
	if args.cut_marks is not None and args.cut_frame is not None:
		raise pp.errors.ConflictingSpec("Use either `--cut-marks` or `--cut-frame`, not both")
	dpi = args.dpi
	format_size = pp.units.parse_size(args.format)
	if format_size.width is None or format_size.height is None:
		raise pp.errors.UnresolvedLength(f"Missing dimension in print format `{args.format}`")

	cut = None
	if args.cut_marks is not None:
		cut = pp.units.parse_cut_marks(args.cut_marks, dpi)
	elif args.cut_frame is not None:
		cut = pp.units.parse_cut_frame(args.cut_frame, dpi)

	test_pattern = None
	if args.test_pattern is not None:
		test_pattern = pp.units.parse_test_pattern(args.test_pattern, dpi)

	framed_size = pp.units.parse_size(args.framed_size) if args.framed_size else None
	image_size = pp.units.parse_size(args.image_size) if args.image_size else None

	return PrepConfig(
		dpi=dpi,
		format=format_size,
		framed_size=framed_size,
		image_size=image_size,
		border=pp.units.parse_sides(args.border, dpi),
		padding=pp.units.parse_sides(args.padding, dpi),
		margins=pp.units.parse_sides(args.margins, dpi),
		cut=cut,
		test_pattern=test_pattern,
		exif_template=args.exif,
		exif_size=pp.units.parse_length(args.exif_size).to_px(dpi),
		mode=args.mode,
		filter_name=args.filter_name,
		colors=ColorTable(
			background=pp.units.parse_color(args.bg),
			border=pp.units.parse_color(args.border_color),
			color=pp.units.parse_color(args.color),
		),
		allow_rotation=not args.no_rotation,
		incremental=args.incremental,
	)


#============================================
def build_scale_config(args: argparse.Namespace) -> ScaleConfig:
	"""
	Build scale config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ScaleConfig.
	"""
	size = pp.units.parse_size(args.size) if args.size else None
	scale = pp.units.parse_scale_factor(args.scale) if args.scale else None
	return ScaleConfig(
		dpi=args.dpi,
		size=size,
		scale=scale,
		mode=args.mode,
		filter_name=args.filter_name,
		background=pp.units.parse_color(args.bg),
		incremental=args.incremental,
	)


#============================================
def positive_float(text: str) -> float:
	try:
		value = float(text)
	except ValueError:
		raise argparse.ArgumentTypeError(f"Expects a number, got `{text}`")
	if not math.isfinite(value) or value <= 0.0:
		raise argparse.ArgumentTypeError(f"Expects a positive number, got `{text}`")
	return value


#============================================
def add_output_options(parser: argparse.ArgumentParser) -> None:
	output_group = parser.add_argument_group("Output")
	output_group.add_argument(
		"-o", "--output", dest="output", required=True,
		help="Output path, `*` is replaced by the input base name. The extension selects the format.",
	)
	output_group.add_argument(
		"-q", "--quality", dest="quality", type=int, default=DEFAULT_QUALITY,
		help="JPEG quality in percent.",
	)
	output_group.add_argument(
		"--dpi", dest="dpi", type=positive_float, default=DEFAULT_DPI,
		help="Image resolution for lengths not in px.",
	)


#============================================
def add_scaling_options(parser: argparse.ArgumentParser) -> None:
	scaling_group = parser.add_argument_group("Scaling")
	scaling_group.add_argument(
		"-m", "--mode", dest="mode", choices=pp.config.SCALE_MODES, default=DEFAULT_MODE,
		help="Scaling mode.",
	)
	scaling_group.add_argument(
		"-f", "--filter", dest="filter_name", choices=pp.config.FILTER_NAMES, default=DEFAULT_FILTER,
		help="Filter type for image scaling.",
	)
	scaling_group.add_argument(
		"--incremental", dest="incremental", action="store_true",
		help="Scale down in steps of 50%%, averaging 2x2 pixels.",
	)
	scaling_group.add_argument("--bg", dest="bg", default=DEFAULT_BACKGROUND, help="Background color.")


#============================================
def build_parser() -> argparse.ArgumentParser:
	"""
	Build the command line parser.

	Returns:
		ArgumentParser.
	"""
	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("inputs", nargs="+", help="Input files, directories or glob patterns.")
	common.add_argument("-t", "--threads", dest="threads", type=int, default=None, help="Number of worker threads.")
	common.add_argument("-d", "--debug", dest="debug", action="store_true", help="Print parsed options.")

	parser = argparse.ArgumentParser(description="Prepare photos for printing and other bulk image operations.")
	subparsers = parser.add_subparsers(dest="operation", required=True)

	prep_parser = subparsers.add_parser("prep", parents=[common], help="Prepare images for printing.")
	add_output_options(prep_parser)
	add_scaling_options(prep_parser)
	layout_group = prep_parser.add_argument_group("Layout")
	layout_group.add_argument("--format", dest="format", required=True, help="Print format `width/height`, e.g. `15cm/10cm`.")
	layout_group.add_argument("--framed-size", dest="framed_size", default=None, help="Maximum image size including border.")
	layout_group.add_argument("--image-size", dest="image_size", default=None, help="Maximum image size excluding border.")
	layout_group.add_argument("--border", dest="border", default=None, help="Border width, `all`, `tb/rl` or `t/r/b/l`.")
	layout_group.add_argument("--padding", dest="padding", default=None, help="Padding between border and cut region.")
	layout_group.add_argument("--margins", dest="margins", default=None, help="Minimum margins to the format edge.")
	layout_group.add_argument("--no-rotation", dest="no_rotation", action="store_true", help="Never turn the format to match the image.")
	marks_group = prep_parser.add_argument_group("Marks")
	marks_group.add_argument("--cut-marks", dest="cut_marks", default=None, help="Cut marks `width/offset`.")
	marks_group.add_argument("--cut-frame", dest="cut_frame", default=None, help="Cut frame `width/extension`.")
	marks_group.add_argument("--test-pattern", dest="test_pattern", default=None, help="Test pattern `size/gap` or `sx/gx/sy/gy`.")
	marks_group.add_argument("--exif", dest="exif", default=None, help="EXIF caption template, e.g. `{F}, {Exp}s, ISO {ISO}`.")
	marks_group.add_argument("--exif-size", dest="exif_size", default=DEFAULT_EXIF_SIZE, help="EXIF caption font size.")
	marks_group.add_argument("--border-color", dest="border_color", default=DEFAULT_BORDER_COLOR, help="Border color.")
	marks_group.add_argument("--color", dest="color", default=DEFAULT_COLOR, help="Color of marks, test pattern and text.")

	scale_parser = subparsers.add_parser("scale", parents=[common], help="Scale images.")
	add_output_options(scale_parser)
	add_scaling_options(scale_parser)
	size_group = scale_parser.add_argument_group("Size")
	size_group.add_argument("--size", dest="size", default=None, help="Output size, e.g. `100px/.` or `8in/6in`.")
	size_group.add_argument("--scale", dest="scale", default=None, help="Output scale, e.g. `0.5`, `50%%` or `20%%/10%%`.")

	list_parser = subparsers.add_parser("list", parents=[common], help="List files found by the input patterns.")
	list_parser.add_argument("-p", "--path", dest="path", action="store_true", help="Print the full path.")
	list_parser.add_argument("-a", "--absolute", dest="absolute", action="store_true", help="Print the absolute path.")
	return parser


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Arguments, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = build_parser()
	args = parser.parse_args(argv)
	return args


#============================================
def prep_process(image, tag_map: dict[str, str], config: PrepConfig):
	return pp.render.prepare_image(image, config, tag_map)


#============================================
def scale_process(image, tag_map: dict[str, str], config: ScaleConfig):
	return pp.scaling.scale_image(image, config)


#============================================
def list_files(args: argparse.Namespace, paths: list[pathlib.Path]) -> None:
	for path in paths:
		if args.absolute:
			print(path.resolve())
		elif args.path:
			print(path)
		else:
			print(path.name)


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Run one operation over all input files.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit code.
	"""
	if args.debug:
		print(args)

	if args.operation == "prep":
		config = build_prep_config(args)
		process = functools.partial(prep_process, config=config)
	elif args.operation == "scale":
		config = build_scale_config(args)
		process = functools.partial(scale_process, config=config)
	else:
		process = None

	paths = pp.batch.gather_image_paths(args.inputs)
	if process is None:
		list_files(args, paths)
		return 0

	print(f"Operation: {args.operation}")
	print(f"Output: {args.output}")
	print(f"DPI: {args.dpi:g}")
	print(f"Files found: {len(paths)}")

	start_time = time.perf_counter()
	result = pp.batch.run_batch(
		paths,
		process,
		args.output,
		quality=args.quality,
		dpi=args.dpi,
		workers=args.threads,
	)
	total_time = time.perf_counter() - start_time
	for message in result.failures:
		print(f"ERROR: {message}")
	print(f"Files processed: {result.succeeded}/{result.total}")
	if result.failed:
		print(f"Files failed: {result.failed}")
	print(f"Timing: total={total_time:.2f}s")
	return 1 if result.failed else 0


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	try:
		code = run_pipeline(args)
	except pp.errors.PrintPrepError as error:
		print("Terminated with ERROR:", file=sys.stderr)
		print(error, file=sys.stderr)
		code = 1
	sys.exit(code)
