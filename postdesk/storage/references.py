"""
Bidirectional mapping between asset identifiers and public references.

An identifier is "{namespace}/{name}" where name is a hex token without dots
or slashes. A reference is "{base_url}/{namespace}/{name}{extension}".

parse_identifier takes the last path segment of a reference, strips its
extension and re-qualifies it with the namespace, which is exactly the
inverse of make_reference. References that do not live under the managed
base URL and namespace parse to None and are never touched.
"""

import mimetypes
import uuid

# Preferred extensions; mimetypes.guess_extension returns ".jpe" on some platforms
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def extension_for(content_type: str | None) -> str:
    """Map a MIME type to a file extension ("" when unknown)."""
    if not content_type:
        return ""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(media_type) or mimetypes.guess_extension(media_type) or ""


class AssetReferenceCodec:
    """Encodes identifiers into references and decodes them back."""

    def __init__(self, base_url: str, namespace: str):
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace.strip("/")
        self._prefix = f"{self.base_url}/{self.namespace}/"

    def new_identifier(self) -> str:
        """Allocate a fresh identifier inside the namespace."""
        return f"{self.namespace}/{uuid.uuid4().hex}"

    def make_reference(self, identifier: str, extension: str = "") -> str:
        """Build the public reference for an identifier."""
        name = self._name_of(identifier)
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        return f"{self._prefix}{name}{extension}"

    def parse_identifier(self, reference: str | None) -> str | None:
        """Recover the identifier from a reference, or None if it is not ours."""
        if not reference or not reference.startswith(self._prefix):
            return None

        path = reference[len(self._prefix):].split("?", 1)[0].split("#", 1)[0]
        if not path or "/" in path:
            return None

        name = path.split(".", 1)[0]
        if not name:
            return None
        return f"{self.namespace}/{name}"

    def _name_of(self, identifier: str) -> str:
        namespace, sep, name = identifier.rpartition("/")
        if not sep or namespace != self.namespace:
            raise ValueError(f"Identifier {identifier!r} is outside namespace {self.namespace!r}")
        if not name or "." in name:
            raise ValueError(f"Invalid asset name in identifier {identifier!r}")
        return name
