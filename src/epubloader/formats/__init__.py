# ABOUTME: Book format readers for epubloader.
