# ABOUTME: epubloader package root.
# ABOUTME: Builds Calibre-compatible catalogs from EPUB metadata.
