"""Core building blocks: API transport, checksums and the upload pipeline."""
