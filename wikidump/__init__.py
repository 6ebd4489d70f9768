"""wikidump — zero-copy page extraction, indexing and tracing for wiki XML dumps."""
