"""Services package for nanobanana."""
