"""Error taxonomy for the brand kit overlay engine.

Only TargetDecodeError is fatal, and only for the one image it concerns.
Everything else degrades: skipped element, dropped record, kept config.
"""


class BrandKitError(Exception):
    """Base class for all brand kit engine errors"""


class ImageLoadError(BrandKitError):
    """An image source could not be fetched or decoded"""

    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not load image {describe_source(source)}: {reason}")


class ElementDecodeError(BrandKitError):
    """One overlay's source failed to decode; the element is skipped"""

    def __init__(self, element_id, reason):
        self.element_id = element_id
        self.reason = reason
        super().__init__(f"Skipped element {element_id}: {reason}")


class TargetDecodeError(BrandKitError):
    """The target image failed to decode; compositing that image is aborted"""

    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        super().__init__(f"Target image {describe_source(source)} failed to decode: {reason}")


class PersistenceError(BrandKitError):
    """Repository load/save failed; the in-memory config stays usable"""


class InvalidConfigError(BrandKitError):
    """A persisted brand element record is malformed and was dropped"""

    def __init__(self, record_index, reason):
        self.record_index = record_index
        self.reason = reason
        super().__init__(f"Invalid brand element record #{record_index}: {reason}")


class CompositeCancelled(BrandKitError):
    """Compositing stopped because the editor session was closed"""


def describe_source(source):
    """Short printable description of an image source for messages"""
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    text = str(source)
    if text.startswith('data:'):
        return text[:30] + '...'
    if len(text) > 120:
        return text[:117] + '...'
    return text
