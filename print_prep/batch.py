"""
Input gathering, image file I/O and parallel processing of many files.
"""

# Standard Library
import concurrent.futures
import glob
import os
import pathlib
import typing

# PIP3 modules
import PIL.Image
import PIL.ImageOps

# local repo modules
import print_prep as pp
import print_prep.config
import print_prep.errors
import print_prep.exif_text
import print_prep.render


BatchResult = pp.config.BatchResult
ImageFormatError = pp.errors.ImageFormatError

IMAGE_EXTENSIONS = pp.config.IMAGE_EXTENSIONS
PROGRESS_BAR_WIDTH = pp.config.PROGRESS_BAR_WIDTH
PLACEHOLDER = "*"

ProcessFunc = typing.Callable[[PIL.Image.Image, dict[str, str]], PIL.Image.Image]


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def gather_image_paths(inputs: list[str]) -> list[pathlib.Path]:
	"""
	Collect image files from paths, directories or glob patterns.

	Args:
		inputs: Input paths or patterns.

	Returns:
		Sorted list of unique image paths.
	"""
	paths: set[pathlib.Path] = set()
	for entry in inputs:
		path = pathlib.Path(entry)
		if path.is_dir():
			for child in path.iterdir():
				if child.is_file() and child.suffix.lower() in IMAGE_EXTENSIONS:
					paths.add(child)
			continue
		if path.is_file():
			paths.add(path)
			continue
		for match in glob.glob(entry):
			match_path = pathlib.Path(match)
			if match_path.is_file():
				paths.add(match_path)
	return sorted(paths)


#============================================
def build_output_path(template: str, input_path: pathlib.Path) -> pathlib.Path:
	"""
	Build an output path, replacing `*` by the input base name.

	Args:
		template: Output template such as `out/*-print.jpg`.
		input_path: Input image path.

	Returns:
		Output path.
	"""
	output_path = pathlib.Path(template.replace(PLACEHOLDER, input_path.stem))
	if not output_path.suffix:
		raise ImageFormatError(
			f"Expects an extension for output file `{template}` to determine image format"
		)
	return output_path


#============================================
def load_image(path: pathlib.Path) -> tuple[PIL.Image.Image, dict[str, str]]:
	"""
	Decode an image, upright according to its orientation tag.

	Args:
		path: Image path.

	Returns:
		Tuple of (image, tag map).
	"""
	try:
		with PIL.Image.open(path) as handle:
			tag_map = pp.exif_text.extract_tag_map(handle)
			image = PIL.ImageOps.exif_transpose(handle)
			image.load()
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		raise ImageFormatError(f"Unable to read image {path}: {error}") from error
	return (image, tag_map)


#============================================
def save_image(image: PIL.Image.Image, output_path: pathlib.Path, quality: int, dpi: float) -> None:
	"""
	Encode an image by the output file extension.

	Args:
		image: Image to save.
		output_path: Output path, parent directories are created.
		quality: JPEG quality in percent.
		dpi: Resolution stored in the file.
	"""
	output_path.parent.mkdir(parents=True, exist_ok=True)
	extension = output_path.suffix.lower()
	if extension == ".pdf":
		pp.render.write_pdf(image, output_path, dpi)
		return
	if extension in (".jpg", ".jpeg"):
		if image.mode != "RGB":
			image = image.convert("RGB")
		image.save(output_path, quality=quality, dpi=(dpi, dpi))
		return
	try:
		image.save(output_path, dpi=(dpi, dpi))
	except (KeyError, ValueError) as error:
		raise ImageFormatError(f"Unsupported output format `{extension}`: {error}") from error


#============================================
def process_file(
	path: pathlib.Path,
	process: ProcessFunc,
	output_template: str,
	quality: int,
	dpi: float,
) -> pathlib.Path:
	"""
	Decode, process and encode one file.

	Args:
		path: Input image path.
		process: Function from (image, tag map) to output image.
		output_template: Output path template.
		quality: JPEG quality in percent.
		dpi: Resolution stored in the file.

	Returns:
		Written output path.
	"""
	output_path = build_output_path(output_template, path)
	image, tag_map = load_image(path)
	try:
		result = process(image, tag_map)
	except (pp.errors.PrintPrepError, ValueError) as error:
		raise ImageFormatError(f"Unable to process image {path}: {error}") from error
	try:
		save_image(result, output_path, quality, dpi)
	except OSError as error:
		raise ImageFormatError(f"Unable to save image to {output_path}: {error}") from error
	return output_path


#============================================
def run_batch(
	paths: list[pathlib.Path],
	process: ProcessFunc,
	output_template: str,
	quality: int = pp.config.DEFAULT_QUALITY,
	dpi: float = pp.config.DEFAULT_DPI,
	workers: int | None = None,
	verbose: bool = True,
) -> BatchResult:
	"""
	Process files on a fixed-size worker pool.

	A failing file is recorded and the remaining files continue.

	Args:
		paths: Input image paths.
		process: Function from (image, tag map) to output image.
		output_template: Output path template.
		quality: JPEG quality in percent.
		dpi: Resolution stored in the files.
		workers: Pool size, defaults to the processor count.
		verbose: Print a progress bar.

	Returns:
		BatchResult.
	"""
	if workers is None:
		workers = os.cpu_count() or 1
	failures: list[str] = []
	succeeded = 0
	done = 0
	with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
		futures = {
			executor.submit(process_file, path, process, output_template, quality, dpi): path
			for path in paths
		}
		for future in concurrent.futures.as_completed(futures):
			done += 1
			try:
				future.result()
				succeeded += 1
			except pp.errors.PrintPrepError as error:
				failures.append(str(error))
			except Exception as error:
				# a failing worker only fails its own file
				failures.append(f"Unexpected error for {futures[future]}: {type(error).__name__}: {error}")
			if verbose:
				print_progress("Processing", done, len(paths))
	if verbose and paths:
		print()
	return BatchResult(
		total=len(paths),
		succeeded=succeeded,
		failed=len(failures),
		failures=failures,
	)
