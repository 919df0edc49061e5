import fractions

import PIL.Image

import print_prep.exif_text


#============================================
def test_expand_examples() -> None:
	"""
	Placeholders with and without divisors.
	"""
	assert print_prep.exif_text.expand("{ISO}/{F/2}", {"ISO": "400", "F": "4"}) == "400/2"
	assert print_prep.exif_text.expand("{Missing}", {}) == ""
	assert print_prep.exif_text.expand("no placeholders", {}) == "no placeholders"


#============================================
def test_expand_abbreviations() -> None:
	"""
	Short names look up the full EXIF tag names.
	"""
	tag_map = {
		"FNumber": "5.6",
		"ExposureTime": "1/250",
		"PhotographicSensitivity": "800",
		"FocalLength": "35",
		"Model": "X100",
	}
	text = print_prep.exif_text.expand("{Mod}: {FL}mm {F/2}, {Exp}s, ISO {ISO}", tag_map)
	assert text == "X100: 35mm 2.8, 1/250s, ISO 800"


#============================================
def test_expand_edge_cases() -> None:
	"""
	Non-numeric and non-finite values ignore divisors and open braces stay literal.
	"""
	tag_map = {"Model": "X100", "FNumber": "4"}
	assert print_prep.exif_text.expand("{Mod/2}", tag_map) == "X100"
	assert print_prep.exif_text.expand("{F/0}", tag_map) == "4"
	assert print_prep.exif_text.expand("{F/3}", tag_map) == "1.33"
	assert print_prep.exif_text.expand("a {b", tag_map) == "a {b"
	assert print_prep.exif_text.expand("{Unknown} {F}", tag_map) == " 4"
	tag_map = {"X": "nan", "Y": "inf", "Z": "1e308"}
	assert print_prep.exif_text.expand("{X/2}", tag_map) == "nan"
	assert print_prep.exif_text.expand("{Y/2}", tag_map) == "inf"
	assert print_prep.exif_text.expand("{Z/0.5}", tag_map) == "1e308"
	assert print_prep.exif_text.expand("{F/inf}", {"FNumber": "4"}) == "4"


#============================================
def test_format_number() -> None:
	assert print_prep.exif_text.format_number(2.0) == "2"
	assert print_prep.exif_text.format_number(2.8) == "2.8"
	assert print_prep.exif_text.format_number(1.0 / 3.0) == "0.33"
	assert print_prep.exif_text.format_number(float("inf")) == "inf"


#============================================
def test_format_tag_value() -> None:
	"""
	Raw EXIF values become caption text.
	"""
	assert print_prep.exif_text.format_tag_value("Model", b"Canon\x00") == "Canon"
	assert print_prep.exif_text.format_tag_value("Model", " X100 \x00") == "X100"
	assert print_prep.exif_text.format_tag_value("ExposureTime", fractions.Fraction(1, 250)) == "1/250"
	assert print_prep.exif_text.format_tag_value("ExposureTime", fractions.Fraction(2, 1)) == "2"
	assert print_prep.exif_text.format_tag_value("FNumber", fractions.Fraction(28, 10)) == "2.8"
	assert print_prep.exif_text.format_tag_value("ISOSpeedRatings", 400) == "400"
	assert print_prep.exif_text.format_tag_value("BitsPerSample", (8, 8, 8)) == "8 8 8"


#============================================
def test_extract_tag_map(tmp_path) -> None:
	"""
	Read tag names and values back from a saved file.
	"""
	image = PIL.Image.new("RGB", (16, 16), (0, 0, 0))
	exif = image.getexif()
	# 0x0110 is Model
	exif[0x0110] = "TestCam"
	path = tmp_path / "tagged.jpg"
	image.save(path, exif=exif)
	with PIL.Image.open(path) as handle:
		tag_map = print_prep.exif_text.extract_tag_map(handle)
	assert tag_map["Model"] == "TestCam"

	plain = PIL.Image.new("RGB", (16, 16))
	assert print_prep.exif_text.extract_tag_map(plain) == {}
