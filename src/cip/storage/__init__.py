"""Media storage."""

from cip.storage.media import MediaKind, MediaStore, StoredMedia

__all__ = ["MediaKind", "MediaStore", "StoredMedia"]
