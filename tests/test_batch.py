import pathlib

import PIL.Image
import pypdf
import pytest

import print_prep.batch
import print_prep.errors


#============================================
def write_image(path: pathlib.Path, size: tuple[int, int] = (40, 30)) -> pathlib.Path:
	PIL.Image.new("RGB", size, (0, 128, 255)).save(path)
	return path


#============================================
def test_gather_image_paths(tmp_path) -> None:
	"""
	Collect images from directories, files and glob patterns.
	"""
	first = write_image(tmp_path / "a.jpg")
	second = write_image(tmp_path / "b.png")
	notes = tmp_path / "notes.txt"
	notes.write_text("not an image")

	assert print_prep.batch.gather_image_paths([str(tmp_path)]) == [first, second]
	assert print_prep.batch.gather_image_paths([str(tmp_path / "*.png")]) == [second]
	assert print_prep.batch.gather_image_paths([str(notes)]) == [notes]
	found = print_prep.batch.gather_image_paths([str(first), str(tmp_path / "*.jpg")])
	assert found == [first]
	assert print_prep.batch.gather_image_paths([str(tmp_path / "missing*.tif")]) == []


#============================================
def test_build_output_path() -> None:
	"""
	The base name replaces every `*` in the template.
	"""
	path = print_prep.batch.build_output_path("out/*-print.jpg", pathlib.Path("in/photo.png"))
	assert path == pathlib.Path("out/photo-print.jpg")
	path = print_prep.batch.build_output_path("out/*/*.pdf", pathlib.Path("photo.tif"))
	assert path == pathlib.Path("out/photo/photo.pdf")
	with pytest.raises(print_prep.errors.ImageFormatError):
		print_prep.batch.build_output_path("out/*", pathlib.Path("photo.png"))


#============================================
def test_load_image(tmp_path) -> None:
	image, tag_map = print_prep.batch.load_image(write_image(tmp_path / "plain.png"))
	assert image.size == (40, 30)
	assert tag_map == {}


#============================================
def test_save_image_formats(tmp_path) -> None:
	"""
	The output extension selects the encoder.
	"""
	image = PIL.Image.new("RGBA", (90, 60), (10, 20, 30, 255))

	jpeg_path = tmp_path / "nested" / "out.jpg"
	print_prep.batch.save_image(image, jpeg_path, 90, 300.0)
	with PIL.Image.open(jpeg_path) as handle:
		assert handle.format == "JPEG"
		assert handle.size == (90, 60)
		assert handle.info["dpi"] == pytest.approx((300, 300))

	png_path = tmp_path / "out.png"
	print_prep.batch.save_image(image, png_path, 90, 300.0)
	with PIL.Image.open(png_path) as handle:
		assert handle.mode == "RGBA"

	pdf_path = tmp_path / "out.pdf"
	print_prep.batch.save_image(image, pdf_path, 90, 30.0)
	reader = pypdf.PdfReader(str(pdf_path))
	assert len(reader.pages) == 1
	assert float(reader.pages[0].mediabox.width) == pytest.approx(216.0)

	with pytest.raises(print_prep.errors.ImageFormatError):
		print_prep.batch.save_image(image, tmp_path / "out.unknownext", 90, 300.0)


#============================================
def test_run_batch_continues_after_failure(tmp_path) -> None:
	"""
	A broken file is reported and the others are written.
	"""
	inputs = tmp_path / "in"
	inputs.mkdir()
	good_a = write_image(inputs / "a.png")
	good_b = write_image(inputs / "b.png")
	broken = inputs / "broken.jpg"
	broken.write_bytes(b"definitely not a jpeg")

	def flip(image, tag_map):
		return image.transpose(PIL.Image.Transpose.ROTATE_90)

	template = str(tmp_path / "out" / "*.png")
	result = print_prep.batch.run_batch(
		[good_a, good_b, broken], flip, template, workers=2, verbose=False,
	)
	assert result.total == 3
	assert result.succeeded == 2
	assert result.failed == 1
	assert "broken.jpg" in result.failures[0]
	with PIL.Image.open(tmp_path / "out" / "a.png") as handle:
		assert handle.size == (30, 40)
	assert (tmp_path / "out" / "b.png").exists()
	assert not (tmp_path / "out" / "broken.png").exists()


#============================================
def test_run_batch_reports_processing_errors(tmp_path) -> None:
	path = write_image(tmp_path / "a.png")

	def fail(image, tag_map):
		raise print_prep.errors.InvalidGeometry("no room")

	result = print_prep.batch.run_batch([path], fail, str(tmp_path / "*-out.png"), verbose=False)
	assert result.failed == 1
	assert "no room" in result.failures[0]


#============================================
def test_run_batch_isolates_oversized_and_unexpected_errors(tmp_path, monkeypatch) -> None:
	"""
	An oversized image or a stray exception only fails its own file.
	"""
	small = write_image(tmp_path / "a.png")
	large = write_image(tmp_path / "b.png", size=(400, 400))
	monkeypatch.setattr(PIL.Image, "MAX_IMAGE_PIXELS", 50000)

	def keep(image, tag_map):
		return image

	template = str(tmp_path / "out" / "*.png")
	result = print_prep.batch.run_batch([small, large], keep, template, workers=1, verbose=False)
	assert result.succeeded == 1
	assert result.failed == 1
	assert "b.png" in result.failures[0]
	assert (tmp_path / "out" / "a.png").exists()

	with pytest.raises(print_prep.errors.ImageFormatError):
		print_prep.batch.load_image(large)

	def explode(image, tag_map):
		raise RuntimeError("worker crashed")

	result = print_prep.batch.run_batch([small], explode, template, workers=1, verbose=False)
	assert result.failed == 1
	assert "RuntimeError" in result.failures[0]
	assert "a.png" in result.failures[0]


#============================================
def test_print_progress(capsys) -> None:
	print_prep.batch.print_progress("Processing", 1, 2)
	captured = capsys.readouterr()
	assert "1/2 (50%)" in captured.out
	print_prep.batch.print_progress("Processing", 0, 0)
	assert capsys.readouterr().out == ""
