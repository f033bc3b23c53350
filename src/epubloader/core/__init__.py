# ABOUTME: Core orchestration for epubloader.
