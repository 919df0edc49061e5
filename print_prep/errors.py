"""
Exception types raised by the print preparation engine.
"""


class PrintPrepError(Exception):
	"""Base error."""
	pass


class InvalidLength(PrintPrepError):
	"""Malformed length, size or related token."""
	pass


class UnresolvedLength(PrintPrepError):
	"""An auto placeholder with nothing to derive it from."""
	pass


class InvalidColor(PrintPrepError):
	"""Color token that is neither a name nor channel values."""
	pass


class InvalidGeometry(PrintPrepError):
	"""Insets or targets exceed the space of their parent rectangle."""
	pass


class DegenerateTarget(PrintPrepError):
	"""A scale target with zero area."""
	pass


class ConflictingSpec(PrintPrepError):
	"""Mutually exclusive options supplied together."""
	pass


class ImageFormatError(PrintPrepError):
	"""Reading, processing or writing one image file failed."""
	pass
