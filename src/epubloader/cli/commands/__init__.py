# ABOUTME: Subcommands for the epubloader CLI.
