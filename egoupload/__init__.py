"""ego-upload - Upload GNOME extensions to extensions.gnome.org."""

__version__ = "1.2.1"
