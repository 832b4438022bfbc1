class NcmError(Exception):
    """Base class for every failure raised while converting a container."""


class ContainerIOError(NcmError, OSError):
    """Stream read, write or seek failure."""


class FormatError(NcmError, ValueError):
    """Bad magic or a structurally impossible header field."""


class DecryptError(NcmError, ValueError):
    """Cipher or padding failure while unwrapping the key or metadata blob."""


class MetadataError(NcmError, ValueError):
    """Malformed metadata record or text encoding failure."""


class TaggingError(NcmError):
    """The decrypted file could not be re-opened or rewritten as a tagged container."""
