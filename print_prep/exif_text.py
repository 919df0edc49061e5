"""
EXIF tag maps and the text template used for metadata captions.
"""

# Standard Library
import fractions
import math

# PIP3 modules
import PIL.ExifTags
import PIL.Image


# short placeholder names and the EXIF tags they stand for
ABBREVIATIONS = {
	"Mod": ("Model",),
	"SW": ("Software",),
	"A": ("Artist",),
	"F": ("FNumber",),
	"FL": ("FocalLength",),
	"Exp": ("ExposureTime",),
	"Prog": ("ExposureProgram",),
	"ISO": ("ISOSpeedRatings", "PhotographicSensitivity"),
	"Date": ("DateTimeOriginal", "DateTime"),
	"Bias": ("ExposureBiasValue",),
	"MM": ("MeteringMode",),
	"EM": ("ExposureMode",),
	"LS": ("LightSource",),
	"CS": ("ColorSpace",),
	"SM": ("SensingMethod",),
	"WB": ("WhiteBalance",),
}


#============================================
def format_number(value: float) -> str:
	"""
	Format a number without trailing zeros.

	Args:
		value: Number.

	Returns:
		Text such as `2`, `2.8` or `0.33`.
	"""
	if not math.isfinite(value):
		return str(value)
	if value == int(value):
		return str(int(value))
	return f"{value:.2f}".rstrip("0").rstrip(".")


#============================================
def lookup_tag(name: str, tag_map: dict[str, str]) -> str | None:
	if name in tag_map:
		return tag_map[name]
	for field in ABBREVIATIONS.get(name, ()):
		if field in tag_map:
			return tag_map[field]
	return None


#============================================
def expand_placeholder(placeholder: str, tag_map: dict[str, str]) -> str:
	"""
	Expand one placeholder body such as `ISO` or `F/2`.

	Args:
		placeholder: Text between the braces.
		tag_map: Tag name to formatted value.

	Returns:
		Expanded text, empty for unknown tags.
	"""
	name, _, divisor_text = placeholder.partition("/")
	name = name.strip()
	value = lookup_tag(name, tag_map)
	if value is None:
		# a whole placeholder may itself be a tag name containing a slash
		value = lookup_tag(placeholder.strip(), tag_map)
		if value is None:
			return ""
		return str(value)
	value = str(value)
	if not divisor_text:
		return value
	try:
		number = float(value)
		divisor = float(divisor_text)
	except ValueError:
		return value
	if divisor == 0.0 or not (math.isfinite(number) and math.isfinite(divisor)):
		return value
	quotient = number / divisor
	if not math.isfinite(quotient):
		return value
	return format_number(quotient)


#============================================
def expand(template: str, tag_map: dict[str, str]) -> str:
	"""
	Expand `{tag}` and `{tag/divisor}` placeholders.

	Unknown tags expand to an empty string. Non-numeric and non-finite values ignore
	the divisor. An unmatched `{` is copied as is.

	Args:
		template: Template such as `{F/2}, {Exp}s, ISO {ISO}`.
		tag_map: Tag name to formatted value.

	Returns:
		Expanded text.
	"""
	parts: list[str] = []
	position = 0
	while position < len(template):
		start = template.find("{", position)
		if start < 0:
			parts.append(template[position:])
			break
		end = template.find("}", start + 1)
		if end < 0:
			parts.append(template[position:])
			break
		parts.append(template[position:start])
		parts.append(expand_placeholder(template[start + 1:end], tag_map))
		position = end + 1
	return "".join(parts)


#============================================
def format_tag_value(name: str, value) -> str:
	"""
	Format a raw Pillow EXIF value as text.

	Args:
		name: EXIF tag name.
		value: Raw value, often an IFDRational.

	Returns:
		Text value.
	"""
	if isinstance(value, bytes):
		return value.decode("utf-8", errors="replace").strip("\x00").strip()
	if isinstance(value, tuple):
		return " ".join(format_tag_value(name, item) for item in value)
	if isinstance(value, str):
		return value.strip("\x00").strip()
	if hasattr(value, "numerator") and hasattr(value, "denominator"):
		if value.denominator == 0:
			return ""
		number = float(value)
		if name == "ExposureTime" and 0.0 < number < 1.0:
			fraction = fractions.Fraction(number).limit_denominator(100000)
			return f"1/{round(fraction.denominator / fraction.numerator)}"
		return format_number(round(number, 2))
	return str(value)


#============================================
def extract_tag_map(image: PIL.Image.Image) -> dict[str, str]:
	"""
	Collect the EXIF tags of an image into a name to text map.

	Reads the base IFD and the Exif sub-IFD.

	Args:
		image: Opened Pillow image.

	Returns:
		Dictionary of tag name to formatted value.
	"""
	exif = image.getexif()
	if not exif:
		return {}
	entries = dict(exif.items())
	entries.update(exif.get_ifd(PIL.ExifTags.IFD.Exif))
	tag_map: dict[str, str] = {}
	for tag_id, value in entries.items():
		name = PIL.ExifTags.TAGS.get(tag_id)
		if name is None:
			continue
		text = format_tag_value(name, value)
		if text:
			tag_map[name] = text
	return tag_map
